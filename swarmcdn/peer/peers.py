"""A peer's local copy of the tracker's peer list, and registration with the tracker."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import requests

log = logging.getLogger(__name__)


class PeerError(Exception):
    """Raised when talking to the tracker about peers fails."""


def load_peer_list(path: str | Path) -> list[str]:
    """Read peers, normalised and deduplicated; an unreadable file gives no peers."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        log.warning("Could not read peers file: %s", exc)
        return []
    except ValueError as exc:
        log.warning("Invalid peers file format: %s", exc)
        return []
    if data is None:
        return []
    if not isinstance(data, list) or not all(isinstance(p, str) for p in data):
        log.warning("Invalid peers file format: expected an array of strings")
        return []

    unique: list[str] = []
    seen: set[str] = set()
    for raw in data:
        peer = raw.strip().rstrip("/")
        if peer and peer not in seen:
            seen.add(peer)
            unique.append(peer)
    return unique


def update_peer_list(server_url: str, path: str | Path) -> None:
    """Replace the local peer list with the tracker's."""
    try:
        response = requests.get(f"{server_url}/peers")
    except requests.RequestException as exc:
        raise PeerError(f"failed to fetch peers: {exc}") from exc

    with response:
        if response.status_code != 200:
            raise PeerError(
                f"server error fetching peers: {response.status_code} - {response.text}"
            )
        content = response.content

    try:
        Path(path).write_bytes(content)
    except OSError as exc:
        raise PeerError(f"failed to update peers file: {exc}") from exc


def register_peer(server_url: str, my_peer_url: str, path: str | Path) -> None:
    """Announce this peer to the tracker, then refresh the local peer list."""
    try:
        response = requests.post(f"{server_url}/peers/register", json={"url": my_peer_url})
    except requests.RequestException as exc:
        raise PeerError(f"failed to send POST request: {exc}") from exc

    with response:
        body = response.text
        if response.status_code != 200:
            raise PeerError(f"server returned error: {response.status_code} - {body}")

    log.info("Successfully registered peer: %s", body)
    try:
        update_peer_list(server_url, path)
    except PeerError as exc:
        raise PeerError(f"Peer registered but failed to update peer list: {exc}") from exc