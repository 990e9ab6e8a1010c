"""Local file access: an owned file handle and bounded chunk readers over it."""

import asyncio
import logging
import os
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Union

from .base import DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)


class PartialFile:
    """An open video file owned by a single request."""

    def __init__(self, path: Union[Path, str], file: BinaryIO):
        self.path = Path(path)
        self._file = file
        self._length: Optional[int] = None
        self._length_known = False

    @classmethod
    def open(cls, path: Union[Path, str]) -> "PartialFile":
        """Open `path` for reading. OSError (missing, unreadable) propagates."""
        return cls(path, open(path, 'rb'))

    @property
    def length(self) -> Optional[int]:
        """Size in bytes, or None when the file metadata cannot be read."""
        if not self._length_known:
            try:
                self._length = os.fstat(self._file.fileno()).st_size
            except (OSError, ValueError) as e:
                logger.warning("Cannot stat '%s': %s", self.path, e)
                self._length = None
            self._length_known = True
        return self._length

    @property
    def closed(self) -> bool:
        return self._file.closed

    def reader(self, start: int, length: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> "BoundedReader":
        return BoundedReader(self._file, start, length, chunk_size=chunk_size)

    def close(self):
        """Close the handle. Safe to call more than once."""
        if not self._file.closed:
            self._file.close()
            logger.debug("Closed '%s'", self.path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class BoundedReader:
    """Forward-only iterator over exactly `length` bytes starting at `start`.

    The handle is positioned with a single seek before the first read. A failed
    seek or read, or hitting EOF early, raises IOError; the stream is not
    retried.
    """

    def __init__(self, file: BinaryIO, start: int, length: int, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if start < 0:
            raise ValueError("Start offset cannot be negative")
        if length < 0:
            raise ValueError("Length cannot be negative")
        if chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        self.start = start
        self.length = length
        self.chunk_size = chunk_size
        self.remaining = length
        self.bytes_read = 0
        self._file = file
        self._seeked = False

    def read_chunk(self) -> bytes:
        """Return the next chunk, or b'' once `length` bytes have been delivered."""
        if self.remaining <= 0:
            return b''
        if not self._seeked:
            self._file.seek(self.start)
            self._seeked = True

        chunk = self._file.read(min(self.chunk_size, self.remaining))
        if not chunk:
            raise IOError(f"Not enough data: {self.remaining} of {self.length} bytes "
                          f"missing at offset {self.start + self.bytes_read}")
        self.remaining -= len(chunk)
        self.bytes_read += len(chunk)
        return chunk

    def __iter__(self):
        return self

    def __next__(self) -> bytes:
        chunk = self.read_chunk()
        if not chunk:
            raise StopIteration
        return chunk


class AsyncBoundedReader:
    """Asynchronous bounded reader - thin wrapper around sync reader.

    `on_close` runs once iteration ends for any reason: drained, failed, or
    cancelled because the peer went away.
    """

    def __init__(self, reader: BoundedReader, on_close: Optional[Callable[[], None]] = None):
        self._sync_reader = reader
        self._on_close = on_close

    @property
    def remaining(self) -> int:
        return self._sync_reader.remaining

    @property
    def bytes_read(self) -> int:
        return self._sync_reader.bytes_read

    async def __aiter__(self):
        cancelled = False
        try:
            while True:
                chunk = await asyncio.to_thread(self._sync_reader.read_chunk)
                if not chunk:
                    break
                yield chunk
        except asyncio.CancelledError:
            logger.debug("Stream abandoned after %d bytes, %d remaining",
                         self.bytes_read, self.remaining)
            cancelled = True
            raise
        except (IOError, OSError) as e:
            logger.error("Stream failed after %d bytes: %s", self.bytes_read, e)
            raise
        finally:
            # never awaited: a cancelled scope would cancel the close too
            if self._on_close is not None:
                if cancelled:
                    # a worker may still be inside read(), and closing a buffered
                    # file waits for it; run the close on the executor instead
                    asyncio.get_running_loop().run_in_executor(None, self._on_close)
                else:
                    self._on_close()


def open_partial_file(path: Union[Path, str]) -> PartialFile:
    """Open a file for byte serving."""
    return PartialFile.open(path)
