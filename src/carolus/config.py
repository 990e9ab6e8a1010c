from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

from .io.base import DEFAULT_CHUNK_SIZE

ENV_PREFIX = "CAROLUS_"


@dataclass
class Settings:
    database: Path = Path("carolus.db")
    media_dir: Path | None = None
    host: str = "127.0.0.1"
    port: int = 8000
    chunk_size: int = DEFAULT_CHUNK_SIZE
    page_size: int = 20
    log_level: str = "INFO"
