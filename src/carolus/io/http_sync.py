"""Synchronous HTTP range reader using requests."""

import logging
from typing import Optional

import requests

from ..core.model import RangeNotSatisfiableError
from ..core.range_spec import parse_content_range
from .base import RangeNotSupportedError, check_content_range

logger = logging.getLogger(__name__)

# Module-level session for connection pooling
_session = None


def _get_session():
    """Get or create the global requests session."""
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


class HTTPVideoReader:
    """Synchronous HTTP reader fetching exact byte windows with Range requests."""

    def __init__(self, url: str, session: Optional[requests.Session] = None):
        self.url = url
        self.bytes_fetched = 0
        self.requests_made = 0
        self.content_length: Optional[int] = None
        self._accept_ranges = False
        self._session = session or _get_session()

        # Perform HEAD request immediately
        self._perform_head()

    def _perform_head(self):
        """Perform HEAD request to check capabilities."""
        try:
            response = self._session.head(self.url, timeout=30)
            self.requests_made += 1
            if response.status_code >= 400:
                raise IOError(f"HEAD request failed with status {response.status_code}")

            content_length_header = response.headers.get('content-length')
            if content_length_header:
                self.content_length = int(content_length_header)

            accept_ranges = response.headers.get('accept-ranges', '').lower()
            self._accept_ranges = accept_ranges == 'bytes'

        except requests.RequestException as e:
            raise IOError(f"HEAD request failed: {e}")

    def _get(self, range_value: str, retry_count: int = 0) -> requests.Response:
        try:
            response = self._session.get(self.url, headers={'Range': range_value}, timeout=30)
            self.requests_made += 1
            return response
        except requests.RequestException as e:
            if retry_count == 0:
                # One automatic retry
                logger.warning("Range request %s for %s failed, retrying: %s", range_value, self.url, e)
                return self._get(range_value, retry_count + 1)
            raise IOError(f"Range request failed: {e}")

    def _check_status(self, response: requests.Response):
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

    def _fetch_range(self, start: int, length: int, retry_count: int = 0) -> bytes:
        """Fetch a specific byte range."""
        end = start + length - 1
        response = self._get(f'bytes={start}-{end}')
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
            data += self._fetch_range(start + len(data), length - len(data), retry_count + 1)
        return data

    def fetch(self, start: int, length: int) -> bytes:
        """Return exactly `length` bytes starting at absolute offset `start`."""
        if start < 0:
            raise IOError("Start offset cannot be negative")

        if length <= 0:
            raise IOError("Length must be positive")

        if not self._accept_ranges:
            raise RangeNotSupportedError("Server doesn't advertise byte ranges")

        return self._fetch_range(start, length)

    def fetch_tail(self, length: int) -> bytes:
        """Return the last `length` bytes (the whole file if it is shorter)."""
        if length <= 0:
            raise IOError("Length must be positive")

        if not self._accept_ranges:
            raise RangeNotSupportedError("Server doesn't advertise byte ranges")

        response = self._get(f'bytes=-{length}')
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

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Session is shared, don't close it here
        pass


def open_http_reader(url: str) -> HTTPVideoReader:
    """Create a synchronous HTTP range reader."""
    return HTTPVideoReader(url)
