"""Configuration du logging (console + fichier tournant)."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from backoffice.app.core.config import Settings, get_settings


def setup_logging(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    logs_dir = Path(settings.log_dir).expanduser()
    logs_dir.mkdir(parents=True, exist_ok=True)

    level = getattr(logging, settings.log_level, logging.INFO)

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_h = RotatingFileHandler(
        logs_dir / "backoffice.log",
        maxBytes=2_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    file_h.setFormatter(fmt)
    file_h.setLevel(level)

    console_h = logging.StreamHandler()
    console_h.setFormatter(fmt)
    console_h.setLevel(level)

    logging.basicConfig(level=level, handlers=[file_h, console_h], force=True)

    # SQL verbeux uniquement en DEBUG
    if level > logging.DEBUG:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
