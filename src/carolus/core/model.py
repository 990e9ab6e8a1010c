from __future__ import annotations
from dataclasses import dataclass
from typing import Union


# --- parsed Range header ---------------------------------------------------- #
@dataclass(frozen=True, slots=True)
class Explicit:
    """`bytes=N-M`: both bounds given, inclusive."""
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class Suffix:
    """`bytes=N-`: from `start` to the end of the file."""
    start: int


@dataclass(frozen=True, slots=True)
class SuffixLength:
    """`bytes=-N`: the last `length` bytes of the file."""
    length: int


RangeRequest = Union[Explicit, Suffix, SuffixLength]


@dataclass(frozen=True, slots=True)
class NoRange:
    """No Range header was sent."""


@dataclass(frozen=True, slots=True)
class Unparseable:
    """A Range header was sent but could not be understood."""
    raw: str
    reason: str


ParsedRange = Union[RangeRequest, NoRange, Unparseable]


# --- resolution ------------------------------------------------------------- #
@dataclass(frozen=True, slots=True)
class ResolvedWindow:
    start: int
    end: int        # inclusive

    @property
    def length(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True, slots=True)
class Full:
    length: int

    status_code = 200


@dataclass(frozen=True, slots=True)
class Partial:
    window: ResolvedWindow
    file_length: int

    status_code = 206


@dataclass(frozen=True, slots=True)
class Unsatisfiable:
    file_length: int | None     # None when the file metadata was unreadable

    status_code = 416


ResponseOutcome = Union[Full, Partial, Unsatisfiable]


# --- errors ----------------------------------------------------------------- #
class MovieNotFoundError(LookupError):
    """Raised when no movie is registered under a given id."""
    pass


class RangeNotSatisfiableError(IOError):
    """Raised by client readers when the server answers 416."""

    def __init__(self, message: str, file_length: int | None = None):
        super().__init__(message)
        self.file_length = file_length
