"""Peer side: tracker registration, chunk downloading, file reconstruction, chunk serving and the interactive client."""