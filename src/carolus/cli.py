
"""CLI implementation for carolus."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from .config import ENV_PREFIX, Settings
from .core.util import movie_asdict
from .data.index import index_directory
from .data.movies import MovieStore
from .io.http_sync import open_http_reader

app = typer.Typer(add_completion=False, help="Serve a video library with HTTP byte ranges.")

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


@app.command()
def serve(
    database: Path = typer.Option(Settings.database, "--database", envvar=f"{ENV_PREFIX}DATABASE",
                                  help="SQLite catalogue file"),
    media_dir: Optional[Path] = typer.Option(None, "--media-dir", envvar=f"{ENV_PREFIX}MEDIA_DIR",
                                             help="Index this directory before serving"),
    host: str = typer.Option(Settings.host, "--host", envvar=f"{ENV_PREFIX}HOST", help="Address to bind"),
    port: int = typer.Option(Settings.port, "-p", "--port", envvar=f"{ENV_PREFIX}PORT", help="Port to listen on"),
    log_level: str = typer.Option(Settings.log_level, "--log-level", envvar=f"{ENV_PREFIX}LOG_LEVEL"),
):
    """Index the media directory (if given) and serve /api/movies."""
    import uvicorn

    from .server.app import create_app

    configure_logging(log_level)
    settings = Settings(database=database, media_dir=media_dir, host=host, port=port, log_level=log_level)
    store = MovieStore(settings.database)
    if settings.media_dir is not None:
        try:
            index_directory(store, settings.media_dir)
        except NotADirectoryError as e:
            typer.echo(str(e), err=True)
            raise typer.Exit(code=1)

    logger.info("Serving movies from '%s' at http://%s:%d/api/movies", settings.database, host, port)
    uvicorn.run(create_app(settings, store), host=host, port=port, log_level=log_level.lower())


@app.command()
def index(
    directory: Path = typer.Argument(..., help="Directory to scan for video files"),
    database: Path = typer.Option(Settings.database, "--database", envvar=f"{ENV_PREFIX}DATABASE",
                                  help="SQLite catalogue file"),
    log_level: str = typer.Option("WARNING", "--log-level", envvar=f"{ENV_PREFIX}LOG_LEVEL"),
):
    """Register every video below DIRECTORY and print one JSON line per movie."""
    configure_logging(log_level)
    store = MovieStore(database)
    try:
        movies = index_directory(store, directory)
    except NotADirectoryError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    for movie in movies:
        typer.echo(json.dumps(movie_asdict(movie)))


@app.command()
def fetch(
    url: str = typer.Argument(..., help="Video URL served with byte ranges"),
    start: int = typer.Option(0, "--start", min=0, help="First byte offset"),
    length: int = typer.Option(..., "--length", min=1, help="Number of bytes to fetch"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
):
    """Fetch LENGTH bytes at START from a range-capable server."""
    try:
        with open_http_reader(url) as reader:
            data = reader.fetch(start, length)
    except (IOError, RuntimeError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if output:
        output.write_bytes(data)
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.flush()


if __name__ == "__main__":
    app()
