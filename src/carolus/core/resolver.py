from __future__ import annotations

from .model import (
    Explicit, Full, NoRange, ParsedRange, Partial, RangeRequest, ResolvedWindow,
    ResponseOutcome, Suffix, SuffixLength, Unparseable, Unsatisfiable,
)


def resolve_window(request: RangeRequest, file_length: int) -> ResolvedWindow | None:
    """Clamp a range request against the real file length.

    Returns None when the request cannot be satisfied. A suffix longer than the
    file selects the whole file instead of failing.
    """
    if file_length <= 0:
        return None
    last = file_length - 1

    if isinstance(request, Explicit):
        if request.start <= request.end and request.start < file_length:
            return ResolvedWindow(request.start, min(request.end, last))
        return None

    if isinstance(request, Suffix):
        if request.start < file_length:
            return ResolvedWindow(request.start, last)
        return None

    if isinstance(request, SuffixLength):
        if request.length == 0:
            return None
        if request.length < file_length:
            return ResolvedWindow(file_length - request.length, last)
        return ResolvedWindow(0, last)

    raise TypeError(f"Not a range request: {request!r}")


def decide_outcome(parsed: ParsedRange, file_length: int | None) -> ResponseOutcome:
    """Pick the response shape for one request."""
    if file_length is None:
        return Unsatisfiable(None)
    if isinstance(parsed, NoRange):
        return Full(file_length)
    if isinstance(parsed, Unparseable):
        return Unsatisfiable(file_length)

    window = resolve_window(parsed, file_length)
    if window is None:
        return Unsatisfiable(file_length)
    return Partial(window, file_length)
