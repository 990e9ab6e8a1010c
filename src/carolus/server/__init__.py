"""HTTP serving: the byte-range response assembler and the FastAPI app."""

from .responses import serve_partial
from .app import create_app

__all__ = ["serve_partial", "create_app"]
