"""Chunk, manifest and index records and their JSON persistence."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)
_TIMESTAMP = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?"
    r"(?P<tz>Z|z|[+-]\d{2}:\d{2})?$"
)


def format_timestamp(value: datetime) -> str:
    """Render a datetime as RFC 3339, using 'Z' for UTC."""
    text = value.isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def parse_timestamp(text: str) -> datetime:
    """Parse an RFC 3339 timestamp, accepting 'Z' and up to nanosecond precision."""
    match = _TIMESTAMP.match(text)
    if match is None:
        raise ValueError(f"invalid timestamp: {text!r}")
    normalized = match["base"]
    if match["frac"]:
        normalized += "." + match["frac"][:6].ljust(6, "0")
    tz = match["tz"]
    if tz in ("Z", "z"):
        normalized += "+00:00"
    elif tz:
        normalized += tz
    return datetime.fromisoformat(normalized)


@dataclass(frozen=True)
class ChunkMeta:
    """One chunk produced by splitting a file."""

    filename: str
    sha256_hash: str
    index: int

    def to_dict(self) -> dict[str, Any]:
        return {"file_name": self.filename, "sha256_hash": self.sha256_hash, "index": self.index}


@dataclass
class Manifest:
    """Describes one version of an uploaded file as an ordered list of chunk hashes."""

    file_id: str
    filename: str
    version: int
    chunks: list[str] = field(default_factory=list)
    uploaded_at: datetime = _ZERO_TIME

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_id": self.file_id,
            "filename": self.filename,
            "version": self.version,
            "chunks": list(self.chunks),
            "uploaded_at": format_timestamp(self.uploaded_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Manifest:
        uploaded = data.get("uploaded_at")
        return cls(
            file_id=data.get("file_id", ""),
            filename=data.get("filename", ""),
            version=int(data.get("version", 0)),
            chunks=list(data.get("chunks") or []),
            uploaded_at=parse_timestamp(uploaded) if uploaded else _ZERO_TIME,
        )


@dataclass
class FileIndex:
    """Index entry tracking the versions known for one file."""

    file_id: str
    filename: str
    latest_version: int
    all_versions: list[int] = field(default_factory=list)
    uploaded_at: datetime = _ZERO_TIME
    tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_id": self.file_id,
            "filename": self.filename,
            "latest_ver": self.latest_version,
            "all_versions": list(self.all_versions),
            "uploaded_at": format_timestamp(self.uploaded_at),
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileIndex:
        uploaded = data.get("uploaded_at")
        return cls(
            file_id=data.get("file_id", ""),
            filename=data.get("filename", ""),
            latest_version=int(data.get("latest_ver", 0)),
            all_versions=[int(v) for v in data.get("all_versions") or []],
            uploaded_at=parse_timestamp(uploaded) if uploaded else _ZERO_TIME,
            tags=list(data.get("tags") or []),
        )


def save_manifest(manifest: Manifest, path: str | Path) -> None:
    """Write a manifest as indented JSON."""
    Path(path).write_text(json.dumps(manifest.to_dict(), indent=1), encoding="utf-8")


def load_manifest(path: str | Path) -> Manifest:
    """Read a manifest; raises OSError or ValueError on failure."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("manifest must be a JSON object")
    return Manifest.from_dict(data)


def save_index(path: str | Path, index: list[FileIndex]) -> None:
    """Write the file index as indented JSON."""
    payload = [entry.to_dict() for entry in index]
    Path(path).write_text(json.dumps(payload, indent=1), encoding="utf-8")


def load_index(path: str | Path) -> list[FileIndex]:
    """Read the file index; a missing file is an empty index."""
    try:
        content = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    data = json.loads(content)
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError("index must be a JSON array")
    return [FileIndex.from_dict(item) for item in data]


def update_index_entry(index: list[FileIndex], manifest: Manifest) -> list[FileIndex]:
    """Record a manifest's version in the index, adding an entry for a new file."""
    for entry in index:
        if entry.file_id == manifest.file_id:
            entry.latest_version = manifest.version
            if manifest.version not in entry.all_versions:
                entry.all_versions.append(manifest.version)
            entry.uploaded_at = manifest.uploaded_at
            return index

    index.append(
        FileIndex(
            file_id=manifest.file_id,
            filename=manifest.filename,
            latest_version=manifest.version,
            all_versions=[manifest.version],
            uploaded_at=manifest.uploaded_at,
        )
    )
    return index