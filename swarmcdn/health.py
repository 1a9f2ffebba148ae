"""Periodic liveness checks of registered peers."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import requests

from .peers import delete_peer, load_peer_list

log = logging.getLogger(__name__)

HEALTH_PATH = "/health"
CHECK_INTERVAL = 100.0
TIMEOUT_INTERVAL = 3.0

_delete_lock = threading.Lock()


def _drop_peer(peers_file: str | Path, base_url: str) -> None:
    with _delete_lock:
        try:
            delete_peer(peers_file, base_url)
        except (OSError, ValueError) as exc:
            log.warning("Unable to remove peer %s: %s", base_url, exc)


def check_health(
    base_url: str, peers_file: str | Path, timeout: float = TIMEOUT_INTERVAL
) -> bool:
    """Probe a peer's health endpoint; an unreachable or failing peer is removed.

    Returns True when the peer answered 200.
    """
    url = base_url + HEALTH_PATH
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as exc:
        log.warning("Error checking health for %s: %s", base_url, exc)
        _drop_peer(peers_file, base_url)
        return False

    with response:
        if response.status_code != 200:
            log.warning(
                "Health check failed for %s: status=%s, body=%s",
                base_url,
                response.status_code,
                response.text,
            )
            _drop_peer(peers_file, base_url)
            return False

    log.info("Health check performed successfully for %s", base_url)
    return True


def check_all(peers_file: str | Path, timeout: float = TIMEOUT_INTERVAL) -> dict[str, bool]:
    """Check every known peer concurrently; return each peer's result."""
    try:
        peers = load_peer_list(peers_file)
    except (OSError, ValueError) as exc:
        log.warning("Error loading peers: %s", exc)
        return {}
    if not peers:
        return {}

    with ThreadPoolExecutor(max_workers=len(peers)) as pool:
        results = pool.map(lambda peer: check_health(peer, peers_file, timeout), peers)
        return dict(zip(peers, results))


def run_periodic(
    peers_file: str | Path,
    interval: float = CHECK_INTERVAL,
    stop_event: threading.Event | None = None,
) -> None:
    """Check all peers every interval seconds until stop_event is set."""
    stop = stop_event if stop_event is not None else threading.Event()
    while not stop.wait(interval):
        check_all(peers_file)