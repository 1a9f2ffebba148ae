"""Interactive peer: fetches files from the swarm, uploads files, shares its chunks."""

from __future__ import annotations

import argparse
import logging
import sys
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO

import requests

from ..config import DEFAULT_SERVER_URL
from ..models import Manifest
from .chunk_server import serve_chunks
from .fetch import ChunkFetcher, DownloadError, reconstruct_file
from .layout import ClientLayout, choose_port, local_ip
from .peers import PeerError, register_peer

log = logging.getLogger(__name__)

PRIMARY_PORT = "9000"
FALLBACK_PORT = "9001"
STARTUP_DELAY = 0.25

_MENU = "\nChoose an action:\n1. Fetch Manifest\n2. Upload File\n3. Exit\n"
_PROMPT = "Enter choice [1-3]: "


@dataclass
class PeerClient:
    """A peer talking to the tracker at server_url and storing data under layout."""

    layout: ClientLayout = field(default_factory=ClientLayout)
    server_url: str = DEFAULT_SERVER_URL
    peer_url: str = ""
    advertise_host: str | None = None
    timeout: float | None = None

    def _fetcher(self) -> ChunkFetcher:
        return ChunkFetcher(
            layout=self.layout,
            server_url=self.server_url,
            peer_url=self.peer_url,
            timeout=self.timeout,
        )

    def fetch_manifest(self, file_id: str) -> Path:
        """Fetch a file's latest manifest, download its chunks and rebuild the file.

        Returns the path of the reconstructed file.
        """
        file_id = file_id.strip()
        url = f"{self.server_url}/manifest/{file_id}"
        try:
            with requests.get(url, timeout=self.timeout) as response:
                if response.status_code != 200:
                    log.warning("Failed to fetch manifest. Status: %s", response.status_code)
                    raise DownloadError(
                        f"failed to fetch manifest: {response.status_code}\n{response.text}"
                    )
                manifest_data = response.content
        except requests.RequestException as exc:
            raise DownloadError(f"error sending request: {exc}") from exc

        self.layout.manifests_dir.mkdir(parents=True, exist_ok=True)
        manifest_path = self.layout.manifest_path(file_id)
        manifest_path.write_bytes(manifest_data)
        log.info("Manifest saved to %s", manifest_path)

        manifest = Manifest.from_dict(_decode_object(manifest_data))

        try:
            self._fetcher().download_all(manifest.chunks)
        except DownloadError as exc:
            log.error("One or more chunks failed to download.")
            raise DownloadError(f"could not download all chunks: {exc}", exc.errors) from exc
        log.info("All chunks downloaded successfully.")

        self.layout.downloads_dir.mkdir(parents=True, exist_ok=True)
        return reconstruct_file(manifest, self.layout, self.layout.downloads_dir)

    def upload_file(self, path: str | Path) -> dict[str, Any]:
        """Upload a file to the tracker; return the tracker's JSON reply."""
        source = Path(str(path).strip())
        with open(source, "rb") as handle:
            try:
                response = requests.post(
                    f"{self.server_url}/upload",
                    files={"file": (source.name, handle)},
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                raise PeerError(f"unable to post the file to the server: {exc}") from exc

        with response:
            if response.status_code != 200:
                log.warning("Failed to upload file. Status: %s", response.status_code)
                raise PeerError(f"upload failed: {response.status_code}\n{response.text}")
            try:
                reply = response.json()
            except ValueError:
                return {}
        return reply if isinstance(reply, dict) else {}

    def start_background(self) -> str:
        """Register with the tracker and start sharing chunks; return this peer's URL."""
        host = self.advertise_host or local_ip()
        port = choose_port(PRIMARY_PORT, FALLBACK_PORT)
        url = f"http://{host}:{port}"
        register_peer(self.server_url, url, self.layout.peers_file)
        self.peer_url = url
        print("Client registered with peer URL:", url)

        threading.Thread(
            target=serve_chunks,
            args=(port, self.layout.chunks_dir),
            name="chunk-server",
            daemon=True,
        ).start()
        print("Chunk server running in the background")
        time.sleep(STARTUP_DELAY)
        return url


def _decode_object(data: bytes) -> dict[str, Any]:
    import json

    decoded = json.loads(data)
    if not isinstance(decoded, dict):
        raise ValueError("manifest must be a JSON object")
    return decoded


def _read_line(stdin: TextIO) -> str | None:
    line = stdin.readline()
    if not line:
        return None
    return line.strip()


def run_menu(client: PeerClient, stdin: TextIO, stdout: TextIO) -> None:
    """Offer the fetch/upload/exit menu until the user exits or input ends."""
    failures = (DownloadError, PeerError, OSError, ValueError)
    while True:
        stdout.write(_MENU)
        stdout.write(_PROMPT)
        stdout.flush()

        choice = _read_line(stdin)
        if choice is None:
            return

        if choice == "1":
            stdout.write("Enter File ID:\n")
            stdout.flush()
            file_id = _read_line(stdin)
            if file_id is None:
                return
            try:
                client.fetch_manifest(file_id)
            except failures as exc:
                log.error("Manifest fetching failed: %s", exc)
                stdout.write(f"Manifest fetching failed: {exc}\n")
        elif choice == "2":
            stdout.write("Enter file path to upload: ")
            stdout.flush()
            path = _read_line(stdin)
            if path is None:
                return
            try:
                client.upload_file(path)
            except failures as exc:
                log.error("File upload failed: %s", exc)
                stdout.write(f"File upload failed: {exc}\n")
            else:
                stdout.write("File uploaded successfully\n")
        elif choice == "3":
            stdout.write("Exiting.\n")
            stdout.flush()
            return
        else:
            stdout.write("Invalid choice. Please enter 1, 2, or 3.\n")


def main(argv: list[str] | None = None) -> int:
    """Start a peer: register, share chunks and run the interactive menu."""
    parser = argparse.ArgumentParser(
        prog="swarmcdn-peer", description="Run an interactive swarm peer."
    )
    parser.add_argument("--server", default=DEFAULT_SERVER_URL, help="tracker URL")
    parser.add_argument("--base", default="peer/client", help="local data directory")
    parser.add_argument("--host", default=None, help="address advertised to other peers")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    client = PeerClient(
        layout=ClientLayout(Path(args.base)),
        server_url=args.server,
        advertise_host=args.host,
    )
    try:
        client.layout.init_directories()
    except OSError as exc:
        log.error("Failed to create directories: %s", exc)
        return 1

    try:
        client.start_background()
    except (PeerError, OSError) as exc:
        log.error("Failed to register peer: %s", exc)
        return 1

    run_menu(client, sys.stdin, sys.stdout)
    return 0