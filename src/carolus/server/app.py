"""FastAPI application exposing the movie catalogue and its video files."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request, status
from starlette.responses import Response

from ..config import Settings
from ..core.model import MovieNotFoundError
from ..core.util import movie_asdict
from ..data.movies import Movie, MovieStore
from .responses import serve_partial

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, store: Optional[MovieStore] = None) -> FastAPI:
    settings = settings or Settings()
    store = store or MovieStore(settings.database)
    app = FastAPI(title="carolus")

    def _lookup(movie_id: int) -> Movie:
        try:
            return store.get_movie(movie_id)
        except MovieNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    @app.get("/api/movies")
    def list_movies(
        page: int = Query(0, ge=0),
        count: Optional[int] = Query(None, ge=1, le=1000),
    ):
        movies = store.page_movies(page, count or settings.page_size)
        return [movie_asdict(m) for m in movies]

    @app.get("/api/movies/{movie_id}")
    def get_movie(movie_id: int):
        return movie_asdict(_lookup(movie_id))

    @app.api_route("/api/movies/{movie_id}/video", methods=["GET", "HEAD"])
    def get_video(movie_id: int, request: Request) -> Response:
        movie = _lookup(movie_id)
        try:
            return serve_partial(
                movie.file_path,
                request.headers.get("range"),
                method=request.method,
                chunk_size=settings.chunk_size,
            )
        except OSError as e:
            logger.warning("Cannot open video for movie %d: %s", movie_id, e)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                                detail=f"Video file for movie {movie_id} is unavailable")

    return app
