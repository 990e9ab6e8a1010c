"""Walk a media directory and register the video files it contains."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Tuple

from .movies import Movie, MovieStore

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = frozenset({"mp4", "m4v", "mkv", "webm", "mov", "avi", "ogv"})


def scan_directory(directory: str | Path) -> List[Tuple[str, str]]:
    """Return sorted ``(title, absolute_path)`` pairs for every video below `directory`."""
    root = Path(directory)
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory!s}")

    found = []
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        if path.suffix.lower().lstrip(".") not in VIDEO_EXTENSIONS:
            continue
        found.append((path.stem, str(path.resolve())))
    return found


def index_directory(store: MovieStore, directory: str | Path) -> List[Movie]:
    """Register every video below `directory` in `store`."""
    entries = scan_directory(directory)
    logger.info("Indexing %d video files from '%s'", len(entries), directory)
    return [store.create_movie(title, path) for title, path in entries]
