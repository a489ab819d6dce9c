from __future__ import annotations

import logging
from pathlib import Path

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"


def setup_logging(log_dir: Path, *, level: str = "INFO") -> logging.Logger:
    """
    Configure the shared ``notifyhub`` logger: a console handler, the main
    log file and an error-only log. Safe to call multiple times; handlers
    are added once.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    logger = logging.getLogger("notifyhub")
    if not logger.handlers:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)

        main_file = logging.FileHandler(log_dir / "notifyhub.log", encoding="utf-8")
        main_file.setFormatter(formatter)
        logger.addHandler(main_file)

        error_file = logging.FileHandler(log_dir / "errors.log", encoding="utf-8")
        error_file.setFormatter(formatter)
        error_file.setLevel(logging.ERROR)
        logger.addHandler(error_file)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False
    return logger
