"""Base protocols and shared types for I/O layer."""

from typing import AsyncIterator, Iterator, Optional, Protocol, runtime_checkable

from ..core.range_spec import parse_content_range


class RangeNotSupportedError(RuntimeError):
    """Raised when a server does not advertise or honour byte ranges."""


DEFAULT_CHUNK_SIZE = 64 * 1024  # 64 KB


def check_content_range(value: Optional[str], start: int, end: int) -> Optional[int]:
    """Validate a 206 Content-Range against the requested span, return the total length."""
    if not value:
        raise IOError("Partial response without Content-Range")
    try:
        got_start, got_end, total = parse_content_range(value)
    except ValueError as e:
        raise IOError(str(e))
    if got_start != start or got_end is None or got_end > end:
        raise IOError(f"Server sent {value!r} for requested bytes {start}-{end}")
    return total


@runtime_checkable
class ChunkStream(Protocol):
    """Protocol for synchronous bounded byte streams."""

    remaining: int   # bytes still to deliver

    def __iter__(self) -> Iterator[bytes]:
        ...


@runtime_checkable
class AsyncChunkStream(Protocol):
    """Protocol for asynchronous bounded byte streams."""

    remaining: int

    def __aiter__(self) -> AsyncIterator[bytes]:
        ...


@runtime_checkable
class RangeReader(Protocol):
    """Protocol for synchronous remote range readers."""

    bytes_fetched: int  # running total

    def fetch(self, start: int, length: int) -> bytes:
        """Return exactly `length` bytes starting at absolute offset `start`.
        If not enough data can be fetched → raise IOError.
        """
        ...


@runtime_checkable
class AsyncRangeReader(Protocol):
    """Protocol for asynchronous remote range readers."""

    bytes_fetched: int

    async def fetch(self, start: int, length: int) -> bytes:
        """Return exactly `length` bytes starting at absolute offset `start`.
        If not enough data can be fetched → raise IOError.
        """
        ...
