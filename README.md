# swarmcdn

A small file distribution network. A central tracker takes uploaded files and
splits them into fixed-size chunks named by their SHA-256 hash. It writes a
manifest for each file, keeps an index of uploaded files and holds a list of
known peers. Peers fetch manifests and download chunks in parallel from other
peers, or from the tracker as a last resort. They check every chunk against its
hash and rebuild the original file. Each peer also serves its chunks to the rest
of the swarm.

## Installation

```
pip install .
```

To install the test tools as well:

```
pip install ".[test]"
```

## Central tracker

```
swarmcdn-server [--host 0.0.0.0] [--port 8080] [--storage storage]
```

The tracker listens on port 8080 by default. It keeps its data under the
storage directory, which is `storage/` by default:

| Path                                    | Contents                        |
|-----------------------------------------|---------------------------------|
| `storage/original/<name>`               | an upload while it is chunked   |
| `storage/chunks/<sha256>.blob`          | chunk data                      |
| `storage/manifests/<file_id>/v<N>.json` | manifest for one file version   |
| `storage/index.json`                    | index of every uploaded file    |
| `storage/peers.json`                    | registered peer URLs            |

Endpoints:

- `POST /upload`: multipart form with a `file` field. The file is cut into
  512 KiB chunks. Each chunk is stored once. The reply is JSON with `message`,
  `chunks` (the number of distinct chunks), `fileID`, `version`,
  `manifestPath` and `indexPath`.
- `GET /chunks/<hash>`: the raw chunk data, or 404.
- `GET /manifest/<fileID>`: the manifest of the file's latest version in the
  index, or 404.
- `GET /peers`: the stored peer list, or 404 if no peer has registered.
- `POST /peers/register`: JSON body `{"url": "http://host:port"}`. A URL that is
  already listed is not added again.

A background thread checks the peers every 100 seconds. It requests `/health`
from each registered peer and allows 3 seconds for the answer. A peer that
cannot be reached, or that answers with any status other than 200, is removed
from the list.

## Peer

```
swarmcdn-peer [--server http://localhost:8080] [--base peer/client] [--host ADDRESS]
```

At start the peer creates `chunks/`, `manifests/` and `downloads/` under its
base directory. It then registers with the tracker and saves the tracker's peer
list to `peers.json`. The URL it registers uses the address given by `--host`.
Without `--host` it uses the address of the interface for outbound traffic.
Next the peer starts its own chunk server, which serves `/chunks/<hash>` and
`/health`. This server uses port 9000, or port 9001 if 9000 is taken. The peer
then shows a menu:

1. **Fetch Manifest**: enter a file ID. The peer saves the manifest and fetches
   every chunk it lacks, five downloads at a time. For each chunk it makes up to
   five rounds over the known peers and then the tracker. It rebuilds the file in
   `downloads/`.
2. **Upload File**: enter a local path and the file is sent to the tracker.
3. **Exit**

## Use as a library

```python
from swarmcdn.config import default_config
from swarmcdn.paths import StorageLayout
from swarmcdn.server import Services, create_app

services = Services.from_config(default_config(), StorageLayout())
app = create_app(services)
```

Other parts can also be used on their own:

- `swarmcdn.chunker.Chunker`: `chunk_file(input_path, output_dir)` returns a
  list of `ChunkMeta`.
- `swarmcdn.models`: `Manifest`, `FileIndex`, `save_manifest`/`load_manifest`,
  `save_index`/`load_index` and `update_index_entry`.
- `swarmcdn.peers`: `load_peer_list`, `save_peers` and `delete_peer` for the
  tracker's peer file.
- `swarmcdn.health`: `check_health`, `check_all` and `run_periodic`.
- `swarmcdn.peer.fetch`: `ChunkFetcher` (`fetch_chunk`, `download_all`) and
  `reconstruct_file`. Failures raise `DownloadError`.
- `swarmcdn.peer.peers`: `load_peer_list`, `update_peer_list` and
  `register_peer`. Failures raise `PeerError`.
- `swarmcdn.peer.chunk_server`: `create_chunk_app` and `serve_chunks`.
- `swarmcdn.peer.client`: `PeerClient` (`fetch_manifest`, `upload_file`,
  `start_background`) and `run_menu`.

## What it does not do

- Every upload becomes a new file with its own ID at version 1. No upload adds
  a new version to an existing file.
- Peers do not push chunks to one another or to the tracker. A peer only holds
  the chunks it has downloaded.
- There is no authentication. Any client can upload files or register peer URLs.