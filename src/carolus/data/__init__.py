"""Movie catalogue and media directory indexing."""

from .movies import Movie, MovieStore
from .index import VIDEO_EXTENSIONS, scan_directory, index_directory

__all__ = ["Movie", "MovieStore", "VIDEO_EXTENSIONS", "scan_directory", "index_directory"]
