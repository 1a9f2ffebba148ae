import io
import json
from pathlib import Path

import pytest

from swarmcdn.config import Config
from swarmcdn.models import load_index, load_manifest
from swarmcdn.paths import StorageLayout
from swarmcdn.server import Services, create_app, main


@pytest.fixture
def layout(tmp_path):
    return StorageLayout(tmp_path / "storage")


@pytest.fixture
def client(layout):
    services = Services.from_config(Config(chunk_size=4), layout)
    return create_app(services).test_client()


def _upload(client, data, name="hello.txt"):
    return client.post(
        "/upload",
        data={"file": (io.BytesIO(data), name)},
        content_type="multipart/form-data",
    )


def test_from_config_uses_chunk_size(layout):
    services = Services.from_config(Config(chunk_size=1234), layout)
    assert services.chunker.chunk_size == 1234
    assert services.layout == layout


def test_from_config_defaults():
    services = Services.from_config()
    assert services.chunker.chunk_size == 512 * 1024
    assert services.layout == StorageLayout()


def test_upload_without_file_is_rejected(client):
    response = client.post("/upload", data={}, content_type="multipart/form-data")
    assert response.status_code == 400
    assert response.get_json() == {"error": "No file is received or file is invalid"}


def test_upload_chunks_and_indexes(client, layout):
    response = _upload(client, b"abcdefghij")
    assert response.status_code == 200
    body = response.get_json()
    assert body["message"] == "'hello.txt' uploaded and chunked!"
    assert body["chunks"] == 3
    assert body["version"] == 1

    manifest = load_manifest(body["manifestPath"])
    assert manifest.file_id == body["fileID"]
    assert manifest.filename == "hello.txt"
    assert len(manifest.chunks) == 3

    index = load_index(body["indexPath"])
    assert [entry.file_id for entry in index] == [body["fileID"]]
    assert index[0].all_versions == [1]

    assert not layout.original_path("hello.txt").exists()


def test_upload_deduplicates_chunks(client):
    body = _upload(client, b"abcdabcdxy").get_json()
    assert body["chunks"] == 2
    manifest = load_manifest(body["manifestPath"])
    assert len(set(manifest.chunks)) == len(manifest.chunks)


def test_chunks_round_trip(client):
    data = b"the quick brown fox"
    file_id = _upload(client, data).get_json()["fileID"]
    manifest = client.get(f"/manifest/{file_id}").get_json()
    rebuilt = b"".join(client.get(f"/chunks/{h}").data for h in manifest["chunks"])
    assert rebuilt == data


def test_two_uploads_get_separate_index_entries(client, layout):
    first = _upload(client, b"one").get_json()["fileID"]
    second = _upload(client, b"two").get_json()["fileID"]
    ids = [entry.file_id for entry in load_index(layout.index_path())]
    assert ids == [first, second]


def test_missing_chunk(client):
    response = client.get("/chunks/" + "0" * 64)
    assert response.status_code == 404
    assert response.get_json() == {"error": "Chunk not found"}


def test_unknown_file_id(client):
    response = client.get("/manifest/nope")
    assert response.status_code == 404
    assert response.get_json() == {"error": "File ID not found in index"}


def test_manifest_file_missing(client, layout):
    body = _upload(client, b"data").get_json()
    Path(body["manifestPath"]).unlink()
    response = client.get(f"/manifest/{body['fileID']}")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Manifest file not found"}


def test_corrupt_index(client, layout):
    layout.root.mkdir(parents=True)
    layout.index_path().write_text("{broken", encoding="utf-8")
    response = client.get("/manifest/anything")
    assert response.status_code == 500
    assert response.get_json() == {"error": "Failed to read index"}


def test_peers_missing(client):
    response = client.get("/peers")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Peers file not found"}


def test_register_and_list_peers(client):
    url = "http://peer.example.com:9000"
    first = client.post("/peers/register", json={"url": url})
    assert first.status_code == 200
    assert first.get_json() == {"message": "Peer registered successfully"}

    again = client.post("/peers/register", json={"url": url})
    assert again.status_code == 200
    assert again.get_json() == {"message": "Peer already registered"}

    listed = client.get("/peers")
    assert listed.status_code == 200
    assert json.loads(listed.data) == [url]


def test_register_invalid_json(client):
    response = client.post(
        "/peers/register", data="not json", content_type="application/json"
    )
    assert response.status_code == 400
    assert response.get_json() == {"error": "Invalid JSON"}


def test_register_with_corrupt_peers_file(client, layout):
    layout.root.mkdir(parents=True)
    layout.peers_path().write_text("{oops", encoding="utf-8")
    response = client.post("/peers/register", json={"url": "http://a.example.com"})
    assert response.status_code == 500


def test_main_help_exits_cleanly():
    with pytest.raises(SystemExit) as excinfo:
        main(["--help"])
    assert excinfo.value.code == 0