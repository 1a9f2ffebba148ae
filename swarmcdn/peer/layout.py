"""Local directory layout of a peer and helpers for finding its own address."""

from __future__ import annotations

import socket
from dataclasses import dataclass
from pathlib import Path

_PROBE_ADDRESS = ("8.8.8.8", 80)


@dataclass(frozen=True)
class ClientLayout:
    """Locations of a peer's chunks, manifests, downloads and peer list."""

    base: Path = Path("peer/client")

    def __post_init__(self) -> None:
        object.__setattr__(self, "base", Path(self.base))

    @property
    def chunks_dir(self) -> Path:
        return self.base / "chunks"

    @property
    def manifests_dir(self) -> Path:
        return self.base / "manifests"

    @property
    def downloads_dir(self) -> Path:
        return self.base / "downloads"

    @property
    def peers_file(self) -> Path:
        return self.base / "peers.json"

    def chunk_path(self, hash: str) -> Path:
        """Path of the blob holding the chunk with the given SHA-256 hex digest."""
        return self.chunks_dir / f"{hash}.blob"

    def manifest_path(self, file_id: str) -> Path:
        """Path where the manifest of a file is kept."""
        return self.manifests_dir / f"{file_id}.json"

    def download_path(self, filename: str) -> Path:
        """Path of a reconstructed download."""
        return self.downloads_dir / filename

    def init_directories(self) -> None:
        """Create the chunk, manifest and download directories."""
        for directory in (self.chunks_dir, self.manifests_dir, self.downloads_dir):
            directory.mkdir(parents=True, exist_ok=True)


def choose_port(primary: str, fallback: str) -> str:
    """Return primary if a TCP listener can bind to it, otherwise fallback."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind(("", int(primary)))
            sock.listen(1)
    except OSError:
        return fallback
    return primary


def local_ip() -> str:
    """Return the address of the interface used for outbound traffic."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.connect(_PROBE_ADDRESS)
        return sock.getsockname()[0]