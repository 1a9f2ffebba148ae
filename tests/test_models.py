import json
from datetime import datetime, timezone

import pytest

from swarmcdn.models import (
    ChunkMeta,
    FileIndex,
    Manifest,
    load_index,
    load_manifest,
    save_index,
    save_manifest,
    update_index_entry,
)

WHEN = datetime(2024, 5, 1, 12, 30, 45, tzinfo=timezone.utc)


def make_manifest(file_id="file-1", version=1, filename="a.txt"):
    return Manifest(file_id=file_id, filename=filename, version=version, chunks=["h1", "h2"], uploaded_at=WHEN)


def test_manifest_json_keys():
    data = make_manifest().to_dict()
    assert set(data) == {"file_id", "filename", "version", "chunks", "uploaded_at"}
    assert data["uploaded_at"].endswith("Z")


def test_manifest_round_trip_through_file(tmp_path):
    path = tmp_path / "v1.json"
    manifest = make_manifest()
    save_manifest(manifest, path)
    assert load_manifest(path) == manifest


def test_manifest_file_is_indented_with_one_space(tmp_path):
    path = tmp_path / "m.json"
    save_manifest(make_manifest(), path)
    assert path.read_text().startswith('{\n "file_id"')


def test_manifest_parses_nanosecond_utc_timestamp():
    manifest = Manifest.from_dict(
        {"file_id": "x", "filename": "f", "version": 3, "chunks": None,
         "uploaded_at": "2024-05-01T12:30:45.123456789Z"}
    )
    assert manifest.uploaded_at == WHEN.replace(microsecond=123456)
    assert manifest.chunks == []


def test_load_manifest_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_manifest(tmp_path / "nope.json")


def test_load_manifest_invalid_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json")
    with pytest.raises(ValueError):
        load_manifest(path)


def test_chunk_meta_json_keys():
    meta = ChunkMeta(filename="ab.blob", sha256_hash="ab", index=0)
    assert meta.to_dict() == {"file_name": "ab.blob", "sha256_hash": "ab", "index": 0}


def test_file_index_uses_latest_ver_key():
    entry = FileIndex(file_id="f", filename="n", latest_version=2, all_versions=[1, 2], uploaded_at=WHEN)
    data = entry.to_dict()
    assert data["latest_ver"] == 2
    assert FileIndex.from_dict(data) == entry


def test_load_index_missing_file_is_empty(tmp_path):
    assert load_index(tmp_path / "index.json") == []


def test_load_index_null_is_empty(tmp_path):
    path = tmp_path / "index.json"
    path.write_text("null")
    assert load_index(path) == []


def test_load_index_invalid_json_raises(tmp_path):
    path = tmp_path / "index.json"
    path.write_text("[oops")
    with pytest.raises(json.JSONDecodeError):
        load_index(path)


def test_index_round_trip(tmp_path):
    path = tmp_path / "index.json"
    index = update_index_entry([], make_manifest("one"))
    index = update_index_entry(index, make_manifest("two"))
    save_index(path, index)
    assert load_index(path) == index


def test_update_index_adds_new_entry():
    index = update_index_entry([], make_manifest(version=1))
    assert len(index) == 1
    assert index[0].latest_version == 1
    assert index[0].all_versions == [1]
    assert index[0].filename == "a.txt"


def test_update_index_existing_entry_bumps_version_without_duplicates():
    index = update_index_entry([], make_manifest(version=1))
    later = datetime(2025, 1, 1, tzinfo=timezone.utc)
    newer = Manifest(file_id="file-1", filename="renamed.txt", version=2, uploaded_at=later)
    index = update_index_entry(index, newer)
    index = update_index_entry(index, newer)
    assert len(index) == 1
    assert index[0].latest_version == 2
    assert index[0].all_versions == [1, 2]
    assert index[0].uploaded_at == later
    assert index[0].filename == "a.txt"