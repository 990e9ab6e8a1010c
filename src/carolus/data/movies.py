"""SQLite-backed movie catalogue."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import closing, contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List

from ..core.model import MovieNotFoundError

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS movies (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    file_path TEXT NOT NULL UNIQUE,
    created_date TEXT NOT NULL
)
"""
_COLUMNS = "id, title, file_path, created_date"


@dataclass(slots=True)
class Movie:
    id: int
    title: str
    file_path: str
    created_date: datetime      # UTC

    @classmethod
    def from_row(cls, row) -> Movie:
        return cls(row[0], row[1], row[2], datetime.fromisoformat(row[3]))


class MovieStore:
    """Create / read / paginate movies.

    A connection is opened per operation so the store can be shared between
    request threads.
    """

    def __init__(self, database: str | Path):
        self.database = str(database)
        with self._connect() as conn:
            conn.execute(_SCHEMA)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        with closing(sqlite3.connect(self.database)) as conn:
            with conn:      # commit / rollback
                yield conn

    def create_movie(self, title: str, file_path: str) -> Movie:
        """Register a file; an already registered path returns the existing movie."""
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM movies WHERE file_path = ?", (file_path,)
            ).fetchone()
            if row is not None:
                return Movie.from_row(row)

            created = datetime.now(timezone.utc)
            cursor = conn.execute(
                "INSERT INTO movies (title, file_path, created_date) VALUES (?, ?, ?)",
                (title, file_path, created.isoformat()),
            )
            logger.info("Registered movie %d: %s", cursor.lastrowid, file_path)
            return Movie(cursor.lastrowid, title, file_path, created)

    def get_movie(self, movie_id: int) -> Movie:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM movies WHERE id = ?", (movie_id,)
            ).fetchone()
        if row is None:
            raise MovieNotFoundError(f"No movie with id {movie_id}")
        return Movie.from_row(row)

    def page_movies(self, page: int, count: int) -> List[Movie]:
        """Return page `page` (zero-based) of `count` movies, ordered by id."""
        if page < 0 or count < 0:
            raise ValueError("page and count must be non-negative")
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM movies ORDER BY id LIMIT ? OFFSET ?",
                (count, page * count),
            ).fetchall()
        return [Movie.from_row(row) for row in rows]
