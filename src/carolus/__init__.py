"""carolus - serve a video library over HTTP with byte-range support."""

from .core.model import (                                             # re-export
    Explicit, Suffix, SuffixLength, NoRange, Unparseable,
    ResolvedWindow, Full, Partial, Unsatisfiable,
    MovieNotFoundError, RangeNotSatisfiableError,
)
from .core.range_spec import parse_range_header, parse_content_range
from .core.resolver import resolve_window, decide_outcome
from .io import open_partial_file, open_http_reader, open_http_reader_async

__version__ = "0.1.0"

__all__ = [
    "Explicit", "Suffix", "SuffixLength", "NoRange", "Unparseable",
    "ResolvedWindow", "Full", "Partial", "Unsatisfiable",
    "MovieNotFoundError", "RangeNotSatisfiableError",
    "parse_range_header", "parse_content_range",
    "resolve_window", "decide_outcome",
    "open_partial_file", "open_http_reader", "open_http_reader_async",
]
