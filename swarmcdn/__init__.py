"""Content-addressed file distribution with a central tracker and chunk-serving peers."""

__version__ = "0.1.0"