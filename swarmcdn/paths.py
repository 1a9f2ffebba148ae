"""On-disk layout of the central server's storage directory."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class StorageLayout:
    """Locations of originals, chunks, manifests, the index and the peer list."""

    root: Path = Path("storage")

    def __post_init__(self) -> None:
        object.__setattr__(self, "root", Path(self.root))

    @property
    def original_dir(self) -> Path:
        return self.root / "original"

    @property
    def chunks_dir(self) -> Path:
        return self.root / "chunks"

    @property
    def manifests_dir(self) -> Path:
        return self.root / "manifests"

    def manifest_path(self, file_id: str, version: int) -> Path:
        """Path of the manifest for one version of a file."""
        return self.manifests_dir / file_id / f"v{version}.json"

    def chunk_path(self, hash: str) -> Path:
        """Path of the blob holding the chunk with the given SHA-256 hex digest."""
        return self.chunks_dir / f"{hash}.blob"

    def original_path(self, filename: str) -> Path:
        """Path where an uploaded file is kept while it is chunked."""
        return self.original_dir / filename

    def index_path(self) -> Path:
        return self.root / "index.json"

    def peers_path(self) -> Path:
        return self.root / "peers.json"