"""Small web server through which a peer shares its chunks."""

from __future__ import annotations

from pathlib import Path

from flask import Flask, jsonify, send_file

CHUNKS_DIR = Path("client/chunks")


def create_chunk_app(chunks_dir: str | Path = CHUNKS_DIR) -> Flask:
    """Build an app serving '<hash>.blob' files from chunks_dir and a health probe."""
    directory = Path(chunks_dir)
    app = Flask(__name__)

    @app.get("/chunks/<hash>")
    def get_chunk(hash: str):
        path = directory / f"{hash}.blob"
        if not path.exists():
            return jsonify({"error": "Chunk not found"}), 404
        return send_file(path.resolve())

    @app.get("/health")
    def health():
        return jsonify({"status": "alive"})

    return app


def serve_chunks(port: str | int, chunks_dir: str | Path = CHUNKS_DIR) -> None:
    """Serve chunks on all interfaces at the given port until the process ends."""
    create_chunk_app(chunks_dir).run(host="0.0.0.0", port=int(port))