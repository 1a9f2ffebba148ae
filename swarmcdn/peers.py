"""Persistent list of known peer URLs."""

from __future__ import annotations

import json
import logging
from pathlib import Path

log = logging.getLogger(__name__)


def normalize_peer(url: str) -> str:
    """Drop trailing slashes, then surrounding whitespace."""
    return url.rstrip("/").strip()


def load_peer_list(path: str | Path) -> list[str]:
    """Read peers, normalised, without blanks or duplicates, in file order."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        log.warning("Could not read peers file: %s", exc)
        raise
    except ValueError as exc:
        log.warning("Invalid peers file format: %s", exc)
        raise
    if data is None:
        return []
    if not isinstance(data, list) or not all(isinstance(p, str) for p in data):
        raise ValueError("peers file must hold a JSON array of strings")

    unique: list[str] = []
    seen: set[str] = set()
    for peer in map(normalize_peer, data):
        if peer and peer not in seen:
            seen.add(peer)
            unique.append(peer)
    return unique


def save_peers(path: str | Path, peers: list[str]) -> None:
    """Write the peer list as indented JSON."""
    Path(path).write_text(json.dumps(list(peers), indent=2), encoding="utf-8")


def delete_peer(path: str | Path, peer_url: str) -> None:
    """Remove a peer from the stored list."""
    target = normalize_peer(peer_url)
    remaining = [peer for peer in load_peer_list(path) if peer != target]
    save_peers(path, remaining)
    log.info("Successfully deleted peer: %s", target)