"""Logging configuration for the page analyzer web app."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

DEFAULT_LOG_DIR = Path(os.getenv("APP_LOG_DIR", "logs"))
DEFAULT_LOG_FILE = os.getenv("APP_LOG_FILENAME", "latest-run.log")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


def resolve_level(level: Optional[str | int]) -> int:
    """Turn ``LOG_LEVEL`` style input ("debug", "10", 20) into a level number."""

    if isinstance(level, int):
        return level
    if isinstance(level, str):
        value = level.strip().upper()
        if value.isdigit():
            return int(value)
        resolved = logging.getLevelName(value)
        if isinstance(resolved, int):
            return resolved
    return logging.INFO


def configure_logging(level: Optional[str | int] = None, log_dir: Path | None = None) -> Path:
    """Send root logging to the console and to a log file truncated per run.

    Returns the log file path.
    """

    log_dir = log_dir or DEFAULT_LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / DEFAULT_LOG_FILE

    logging.basicConfig(
        level=resolve_level(level),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_path, mode="w", encoding="utf-8"),
        ],
        force=True,
    )
    # urllib3 logs every connection at DEBUG.
    logging.getLogger("urllib3").setLevel(max(resolve_level(level), logging.WARNING))
    logging.getLogger(__name__).info("Logging to %s", log_path)
    return log_path
