"""Runtime configuration for the central server."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_CHUNK_SIZE = 512 * 1024
DEFAULT_SERVER_URL = "http://localhost:8080"


@dataclass
class Config:
    """Settings shared by the server components."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    server_url: str = DEFAULT_SERVER_URL


def default_config() -> Config:
    """Return the configuration the server runs with: 512 KB chunks on localhost:8080."""
    return Config()