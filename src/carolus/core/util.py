from __future__ import annotations
from typing import TYPE_CHECKING, Any, Dict

from .model import Full, Partial, ResponseOutcome, Unsatisfiable

if TYPE_CHECKING:
    from ..data.movies import Movie


def content_range(start: int, end: int, file_length: int) -> str:
    return f"bytes {start}-{end}/{file_length}"


def unsatisfied_content_range(file_length: int) -> str:
    return f"bytes */{file_length}"


def outcome_headers(outcome: ResponseOutcome) -> Dict[str, str]:
    """Return the range-related response headers for an outcome."""
    headers = {"Accept-Ranges": "bytes"}
    if isinstance(outcome, Full):
        headers["Content-Length"] = str(outcome.length)
    elif isinstance(outcome, Partial):
        window = outcome.window
        headers["Content-Range"] = content_range(window.start, window.end, outcome.file_length)
        headers["Content-Length"] = str(window.length)
    elif isinstance(outcome, Unsatisfiable):
        if outcome.file_length is not None:
            headers["Content-Range"] = unsatisfied_content_range(outcome.file_length)
    else:
        raise TypeError(f"Not a response outcome: {outcome!r}")
    return headers


def movie_asdict(movie: Movie) -> Dict[str, Any]:
    """Return a JSON-serialisable dict for a Movie (the file path stays private)."""
    return {
        "id": movie.id,
        "title": movie.title,
        "created_date": movie.created_date.isoformat(),
    }
