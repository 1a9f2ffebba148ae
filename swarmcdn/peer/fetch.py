"""Download chunks from peers or the tracker and reassemble files."""

from __future__ import annotations

import hashlib
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import requests

from ..config import DEFAULT_SERVER_URL
from ..models import Manifest
from .layout import ClientLayout
from .peers import load_peer_list

log = logging.getLogger(__name__)

MAX_RETRIES = 5
MAX_CONCURRENT_DOWNLOADS = 5


class DownloadError(Exception):
    """Raised when chunks cannot be obtained or a file cannot be reassembled."""

    def __init__(self, message: str, errors: Iterable[Exception] = ()) -> None:
        super().__init__(message)
        self.errors = list(errors)


def _digest(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


@dataclass
class ChunkFetcher:
    """Fetches verified chunks, trying known peers first and the tracker last."""

    layout: ClientLayout = field(default_factory=ClientLayout)
    server_url: str = DEFAULT_SERVER_URL
    peer_url: str = ""
    max_retries: int = MAX_RETRIES
    max_concurrent: int = MAX_CONCURRENT_DOWNLOADS
    timeout: float | None = None

    def _sources(self) -> list[str]:
        sources = [p for p in load_peer_list(self.layout.peers_file) if p != self.peer_url]
        sources.append(self.server_url)
        return sources

    def _download(self, source: str, hash: str) -> bytes | None:
        url = f"{source}/chunks/{hash}"
        log.info("Trying %s", url)
        try:
            with requests.get(url, timeout=self.timeout) as response:
                if response.status_code != 200:
                    log.warning(
                        "Failed from %s: %s\n%s", source, response.status_code, response.text
                    )
                    return None
                return response.content
        except requests.RequestException as exc:
            log.warning("Error contacting %s: %s", source, exc)
            return None

    def fetch_chunk(self, hash: str) -> Path:
        """Ensure a valid copy of the chunk is stored locally; return its path."""
        path = self.layout.chunk_path(hash)
        try:
            existing = path.read_bytes()
        except OSError:
            existing = None
        if existing is not None:
            if _digest(existing) == hash:
                log.info("Chunk already exists and is valid: %s", path)
                return path
            log.warning("Corrupt chunk detected (%s), deleting and redownloading.", hash)
            path.unlink(missing_ok=True)

        sources = self._sources()
        for attempt in range(1, self.max_retries + 1):
            log.info("Attempt %d to download chunk %s...", attempt, hash)
            for source in sources:
                data = self._download(source, hash)
                if data is None:
                    continue
                if _digest(data) != hash:
                    log.warning("Hash mismatch from %s. Retrying...", source)
                    continue
                try:
                    path.parent.mkdir(parents=True, exist_ok=True)
                    path.write_bytes(data)
                except OSError as exc:
                    raise DownloadError(f"failed to write chunk {hash}: {exc}") from exc
                log.info("Chunk %s downloaded and verified from %s", hash, source)
                return path

        raise DownloadError(
            f"failed to download valid chunk {hash} after {self.max_retries} attempts"
        )

    def download_all(self, hashes: Iterable[str]) -> None:
        """Fetch all chunks concurrently; raise DownloadError listing any failures."""
        hashes = list(hashes)
        if not hashes:
            return
        errors: list[DownloadError] = []
        with ThreadPoolExecutor(max_workers=max(1, self.max_concurrent)) as pool:
            futures = [(pool.submit(self.fetch_chunk, h), h) for h in hashes]
            lookup = {future: h for future, h in futures}
            for future in as_completed(lookup):
                try:
                    future.result()
                except DownloadError as exc:
                    errors.append(DownloadError(f"chunk {lookup[future]}: {exc}"))

        if errors:
            for error in errors:
                log.error("Error during chunk download: %s", error)
            raise DownloadError("some chunks failed to download", errors)


def reconstruct_file(
    manifest: Manifest, layout: ClientLayout, output_dir: str | Path
) -> Path:
    """Concatenate a manifest's chunks into output_dir; return the written file."""
    name = Path(manifest.filename).name
    if not name:
        raise ValueError("manifest has no filename")
    output_path = Path(output_dir) / name

    with open(output_path, "wb") as output:
        for hash in manifest.chunks:
            try:
                data = layout.chunk_path(hash).read_bytes()
            except OSError as exc:
                raise DownloadError(f"failed to read chunk {hash}: {exc}") from exc
            try:
                output.write(data)
            except OSError as exc:
                raise DownloadError(f"failed to write chunk {hash} to output: {exc}") from exc

    log.info("File reconstructed successfully at %s", output_path)
    return output_path