"""Asynchronous HTTP range reader using httpx."""

import logging
from typing import Optional

import httpx

from ..core.model import RangeNotSatisfiableError
from ..core.range_spec import parse_content_range
from .base import RangeNotSupportedError, check_content_range

logger = logging.getLogger(__name__)


class HTTPAsyncVideoReader:
    """Asynchronous HTTP reader fetching exact byte windows with Range requests."""

    def __init__(self, url: str, client: Optional[httpx.AsyncClient] = None):
        self.url = url
        self.bytes_fetched = 0
        self.requests_made = 0
        self.content_length: Optional[int] = None
        self._accept_ranges = False
        self._initialized = False
        # A reader only closes the client it created itself
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=60.0)

    async def _ensure_initialized(self):
        """Perform HEAD request to check capabilities if not already done."""
        if self._initialized:
            return

        try:
            response = await self._client.head(self.url)
            self.requests_made += 1
            if response.status_code >= 400:
                raise IOError(f"HEAD request failed with status {response.status_code}")

            content_length_header = response.headers.get('content-length')
            if content_length_header:
                self.content_length = int(content_length_header)

            accept_ranges = response.headers.get('accept-ranges', '').lower()
            self._accept_ranges = accept_ranges == 'bytes'

            self._initialized = True

        except httpx.RequestError as e:
            raise IOError(f"HEAD request failed: {e}")

    async def _get(self, range_value: str, retry_count: int = 0) -> httpx.Response:
        try:
            response = await self._client.get(self.url, headers={'Range': range_value})
            self.requests_made += 1
            return response
        except httpx.RequestError as e:
            if retry_count == 0:
                # One automatic retry
                logger.warning("Range request %s for %s failed, retrying: %s", range_value, self.url, e)
                return await self._get(range_value, retry_count + 1)
            raise IOError(f"Range request failed: {e}")

    def _check_status(self, response: httpx.Response):
        if response.status_code == 416:
            try:
                _, _, total = parse_content_range(response.headers.get('content-range', ''))
            except ValueError:
                total = None
            raise RangeNotSatisfiableError(f"Range not satisfiable for {self.url}", total)
        if response.status_code == 200:
            raise RangeNotSupportedError("Server ignored the Range header")
        if response.status_code != 206:
            raise IOError(f"Range request failed with status {response.status_code}")

    async def _fetch_range(self, start: int, length: int, retry_count: int = 0) -> bytes:
        """Fetch a specific byte range."""
        end = start + length - 1
        response = await self._get(f'bytes={start}-{end}')
        self._check_status(response)
        total = check_content_range(response.headers.get('content-range'), start, end)
        if total is not None:
            self.content_length = total

        data = response.content
        self.bytes_fetched += len(data)

        # Server might return less than requested - handle this
        if len(data) < length:
            if retry_count > 0 or (total is not None and start + len(data) >= total):
                raise IOError(f"Not enough data: requested {length} bytes at offset {start}, "
                              f"got {len(data)}")
            data += await self._fetch_range(start + len(data), length - len(data), retry_count + 1)
        return data

    async def fetch(self, start: int, length: int) -> bytes:
        """Return exactly `length` bytes starting at absolute offset `start`."""
        await self._ensure_initialized()

        if start < 0:
            raise IOError("Start offset cannot be negative")

        if length <= 0:
            raise IOError("Length must be positive")

        if not self._accept_ranges:
            raise RangeNotSupportedError("Server doesn't advertise byte ranges")

        return await self._fetch_range(start, length)

    async def fetch_tail(self, length: int) -> bytes:
        """Return the last `length` bytes (the whole file if it is shorter)."""
        await self._ensure_initialized()

        if length <= 0:
            raise IOError("Length must be positive")

        if not self._accept_ranges:
            raise RangeNotSupportedError("Server doesn't advertise byte ranges")

        response = await self._get(f'bytes=-{length}')
        self._check_status(response)
        try:
            _, _, total = parse_content_range(response.headers.get('content-range', ''))
        except ValueError as e:
            raise IOError(str(e))
        if total is not None:
            self.content_length = total
        data = response.content
        self.bytes_fetched += len(data)
        return data

    async def aclose(self):
        """Close the underlying client if this reader created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        await self._ensure_initialized()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


async def open_http_reader_async(url: str, client: Optional[httpx.AsyncClient] = None) -> HTTPAsyncVideoReader:
    """Create an asynchronous HTTP range reader."""
    reader = HTTPAsyncVideoReader(url, client=client)
    try:
        await reader._ensure_initialized()
    except BaseException:
        await reader.aclose()
        raise
    return reader

