"""Central tracker: accepts uploads, serves chunks, manifests and the peer list."""

from __future__ import annotations

import argparse
import json
import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from flask import Flask, jsonify, request, send_file

from .chunker import Chunker
from .config import Config, default_config
from .health import run_periodic
from .models import Manifest, load_index, save_index, save_manifest, update_index_entry
from .paths import StorageLayout
from .peers import save_peers

log = logging.getLogger(__name__)


@dataclass
class Services:
    """The configuration, storage layout and chunker the server works with."""

    config: Config
    layout: StorageLayout
    chunker: Chunker

    @classmethod
    def from_config(
        cls, config: Config | None = None, layout: StorageLayout | None = None
    ) -> Services:
        config = config if config is not None else default_config()
        return cls(
            config=config,
            layout=layout if layout is not None else StorageLayout(),
            chunker=Chunker(chunk_size=config.chunk_size),
        )


def _error(status: int, message: str):
    return jsonify({"error": message}), status


def _serve(path: Path):
    return send_file(Path(path).resolve())


def _store_upload(services: Services, temp_path: Path, filename: str):
    layout = services.layout
    try:
        chunks = services.chunker.chunk_file(temp_path, layout.chunks_dir)
    except (OSError, ValueError) as exc:
        log.error("Failed to chunk file: %s", exc)
        return _error(500, "Chunking failed")

    chunk_hashes = list(dict.fromkeys(chunk.sha256_hash for chunk in chunks))

    file_id = str(uuid.uuid4())
    version = 1
    manifest = Manifest(
        file_id=file_id,
        filename=filename,
        version=version,
        chunks=chunk_hashes,
        uploaded_at=datetime.now().astimezone(),
    )

    manifest_path = layout.manifest_path(file_id, version)
    try:
        manifest_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        log.error("Failed to create manifest directory: %s", exc)
        return _error(500, "Failed to prepare manifest directory")

    try:
        save_manifest(manifest, manifest_path)
    except OSError as exc:
        log.error("Failed to save manifest: %s", exc)
        return _error(500, "Failed to write manifest")

    index_path = layout.index_path()
    try:
        index = load_index(index_path)
    except (OSError, ValueError, TypeError) as exc:
        log.error("Failed to load index: %s", exc)
        return _error(500, "Failed to read index")

    index = update_index_entry(index, manifest)
    try:
        save_index(index_path, index)
    except OSError as exc:
        log.error("Failed to write index: %s", exc)
        return _error(500, "Failed to update index")

    return jsonify(
        {
            "message": f"'{filename}' uploaded and chunked!",
            "chunks": len(chunk_hashes),
            "fileID": file_id,
            "version": version,
            "manifestPath": str(manifest_path),
            "indexPath": str(index_path),
        }
    )


def create_app(services: Services | None = None) -> Flask:
    """Build the tracker's web application."""
    services = services if services is not None else Services.from_config()
    layout = services.layout
    app = Flask(__name__)

    @app.post("/upload")
    def upload():
        upload_file = request.files.get("file")
        filename = Path(upload_file.filename or "").name if upload_file else ""
        if not filename:
            log.warning("Failed to get form file")
            return _error(400, "No file is received or file is invalid")

        temp_path = layout.original_path(filename)
        try:
            temp_path.parent.mkdir(parents=True, exist_ok=True)
            upload_file.save(temp_path)
        except OSError as exc:
            log.error("Failed to save file: %s", exc)
            return _error(500, "Failed to save the file")

        try:
            return _store_upload(services, temp_path, filename)
        finally:
            temp_path.unlink(missing_ok=True)

    @app.get("/chunks/<hash>")
    def get_chunk(hash: str):
        path = layout.chunk_path(hash)
        if not path.exists():
            return _error(404, "Chunk not found")
        return _serve(path)

    @app.get("/manifest/<file_id>")
    def get_latest_manifest(file_id: str):
        try:
            index = load_index(layout.index_path())
        except (OSError, ValueError, TypeError):
            return _error(500, "Failed to read index")

        entry = next((item for item in index if item.file_id == file_id), None)
        if entry is None:
            return _error(404, "File ID not found in index")

        manifest_path = layout.manifest_path(file_id, entry.latest_version)
        if not manifest_path.exists():
            return _error(404, "Manifest file not found")
        return _serve(manifest_path)

    @app.get("/peers")
    def get_known_peers():
        path = layout.peers_path()
        if not path.exists():
            return _error(404, "Peers file not found")
        return _serve(path)

    @app.post("/peers/register")
    def add_known_peer():
        payload = request.get_json(force=True, silent=True)
        if not isinstance(payload, dict) or not isinstance(payload.get("url", ""), str):
            return _error(400, "Invalid JSON")
        url = payload.get("url", "")

        path = layout.peers_path()
        if not path.exists():
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(json.dumps([]), encoding="utf-8")
            except OSError:
                return _error(500, "Failed to create peer file")

        try:
            content = path.read_text(encoding="utf-8")
        except OSError:
            return _error(500, "Failed to read peer file")

        try:
            peers = json.loads(content)
        except ValueError:
            peers = ...
        if peers is None:
            peers = []
        if not isinstance(peers, list) or not all(isinstance(p, str) for p in peers):
            return _error(500, "Failed unmarshalling peers file")

        if url in peers:
            return jsonify({"message": "Peer already registered"})

        try:
            save_peers(path, [*peers, url])
        except OSError:
            return _error(500, "Failed to update peer file")
        return jsonify({"message": "Peer registered successfully"})

    return app


def main(argv: list[str] | None = None) -> int:
    """Run the central tracker with background peer health checks."""
    parser = argparse.ArgumentParser(
        prog="swarmcdn-server", description="Run the central chunk tracker."
    )
    parser.add_argument("--host", default="0.0.0.0", help="address to listen on")
    parser.add_argument("--port", type=int, default=8080, help="port to listen on")
    parser.add_argument("--storage", default="storage", help="storage directory")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    services = Services.from_config(default_config(), StorageLayout(Path(args.storage)))
    app = create_app(services)

    threading.Thread(
        target=run_periodic,
        args=(services.layout.peers_path(),),
        name="peer-health",
        daemon=True,
    ).start()

    try:
        app.run(host=args.host, port=args.port)
    except OSError as exc:
        log.error("Failed to run server: %s", exc)
        return 1
    return 0