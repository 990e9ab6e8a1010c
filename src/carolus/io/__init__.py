"""I/O layer for carolus - bounded local streams and remote range readers."""

# Re-export these for import convenience
from .base import ChunkStream, AsyncChunkStream, RangeReader, AsyncRangeReader, RangeNotSupportedError
from .local import PartialFile, BoundedReader, AsyncBoundedReader, open_partial_file
from .http_sync import open_http_reader
from .http_async import open_http_reader_async

__all__ = [
    "ChunkStream", "AsyncChunkStream", "RangeReader", "AsyncRangeReader", "RangeNotSupportedError",
    "PartialFile", "BoundedReader", "AsyncBoundedReader", "open_partial_file",
    "open_http_reader", "open_http_reader_async",
]
