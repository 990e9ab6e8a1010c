"""Turn a file and an optional Range header into a byte-serving response."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path

from starlette.background import BackgroundTask
from starlette.responses import Response, StreamingResponse

from ..core.model import Full, Partial, Unsatisfiable
from ..core.range_spec import parse_range_header
from ..core.resolver import decide_outcome
from ..core.util import outcome_headers
from ..io.base import DEFAULT_CHUNK_SIZE
from ..io.local import AsyncBoundedReader, PartialFile

logger = logging.getLogger(__name__)


def guess_media_type(path: str | Path) -> str:
    media_type, _ = mimetypes.guess_type(str(path))
    return media_type or "application/octet-stream"


def serve_partial(
    path: str | Path,
    range_header: str | None,
    *,
    method: str = "GET",
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Response:
    """Build a 200 / 206 / 416 response for `path`.

    Opening the file is the caller's concern: OSError from the open propagates
    so it can be reported as a 404 before any range handling happens.
    """
    parsed = parse_range_header(range_header)
    partial_file = PartialFile.open(path)
    outcome = decide_outcome(parsed, partial_file.length)
    headers = outcome_headers(outcome)
    media_type = guess_media_type(path)

    if isinstance(outcome, Unsatisfiable):
        logger.info("416 for '%s': Range %r, length %s", path, range_header, outcome.file_length)
        partial_file.close()
        return Response(status_code=outcome.status_code, headers=headers)

    if method == "HEAD":
        partial_file.close()
        return Response(status_code=outcome.status_code, headers=headers, media_type=media_type)

    if isinstance(outcome, Partial):
        start, length = outcome.window.start, outcome.window.length
        logger.debug("206 for '%s': %s", path, headers["Content-Range"])
    elif isinstance(outcome, Full):
        start, length = 0, outcome.length
    else:
        raise TypeError(f"Not a response outcome: {outcome!r}")

    body = AsyncBoundedReader(partial_file.reader(start, length, chunk_size=chunk_size),
                              on_close=partial_file.close)
    return StreamingResponse(
        body,
        status_code=outcome.status_code,
        headers=headers,
        media_type=media_type,
        background=BackgroundTask(partial_file.close),
    )
