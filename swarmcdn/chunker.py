"""Split files into content-addressed chunks."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path

from .config import DEFAULT_CHUNK_SIZE
from .models import ChunkMeta

log = logging.getLogger(__name__)


@dataclass
class Chunker:
    """Splits files into fixed-size chunks stored as '<sha256>.blob'."""

    chunk_size: int = DEFAULT_CHUNK_SIZE

    def chunk_file(self, input_path: str | Path, output_dir: str | Path) -> list[ChunkMeta]:
        """Split a file, writing each new chunk to output_dir; return chunks in order."""
        if self.chunk_size < 0:
            raise ValueError(f"chunk size must not be negative: {self.chunk_size}")
        out = Path(output_dir)
        out.mkdir(parents=True, exist_ok=True)

        chunks: list[ChunkMeta] = []
        with open(input_path, "rb") as source:
            index = 0
            while data := source.read(self.chunk_size):
                digest = hashlib.sha256(data).hexdigest()
                name = f"{digest}.blob"
                log.info("Chunk %d: size=%d, hash=%s", index, len(data), digest)
                target = out / name
                if not target.exists():
                    target.write_bytes(data)
                chunks.append(ChunkMeta(filename=name, sha256_hash=digest, index=index))
                index += 1
        return chunks