from __future__ import annotations

from pathlib import Path

from hirescout.config import get_settings
from hirescout.db.base import Base
from hirescout.db.session import engine
from hirescout.db import models  # noqa: F401


def ensure_data_directories() -> None:
    settings = get_settings()
    paths: list[Path] = [
        settings.data_dir,
        settings.jobs_file.parent,
        settings.candidates_file.parent,
    ]
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


def init_database() -> dict[str, list[str]]:
    ensure_data_directories()
    Base.metadata.create_all(bind=engine)
    return {"tables": sorted(Base.metadata.tables)}
