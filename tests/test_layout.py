import socket
from pathlib import Path
from unittest import mock

from swarmcdn.peer.layout import ClientLayout, choose_port, local_ip


def test_paths_are_built_from_base(tmp_path):
    layout = ClientLayout(tmp_path)
    assert layout.chunk_path("abc") == tmp_path / "chunks" / "abc.blob"
    assert layout.manifest_path("file-1") == tmp_path / "manifests" / "file-1.json"
    assert layout.download_path("movie.mp4") == tmp_path / "downloads" / "movie.mp4"
    assert layout.peers_file == tmp_path / "peers.json"


def test_default_base_matches_client_directory():
    layout = ClientLayout()
    assert layout.chunk_path("h") == Path("peer/client/chunks/h.blob")
    assert layout.download_path("f") == Path("peer/client/downloads/f")


def test_string_base_is_coerced(tmp_path):
    layout = ClientLayout(str(tmp_path))
    assert layout.chunks_dir == tmp_path / "chunks"


def test_init_directories_creates_all(tmp_path):
    layout = ClientLayout(tmp_path / "peer")
    layout.init_directories()
    layout.init_directories()
    assert layout.chunks_dir.is_dir()
    assert layout.manifests_dir.is_dir()
    assert layout.downloads_dir.is_dir()


def test_choose_port_returns_primary_when_free():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        probe.bind(("", 0))
        free_port = str(probe.getsockname()[1])
    assert choose_port(free_port, "fallback") == free_port


def test_choose_port_returns_fallback_when_taken():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as occupier:
        occupier.bind(("", 0))
        occupier.listen(1)
        taken = str(occupier.getsockname()[1])
        assert choose_port(taken, "fallback") == "fallback"


def test_local_ip_reports_outbound_interface():
    with mock.patch("swarmcdn.peer.layout.socket") as fake_socket:
        sock = fake_socket.socket.return_value.__enter__.return_value
        sock.getsockname.return_value = ("192.0.2.10", 5555)
        assert local_ip() == "192.0.2.10"
        sock.connect.assert_called_once_with(("8.8.8.8", 80))