"""
Logging configuration

Every migration run appends to a single log file (LOG_PATH) in addition to
stdout, so a run can be audited after the console is gone.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

from moneyfex_migrator.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
ROOT_LOGGER = "moneyfex_migrator"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the migration namespace"""
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def configure_run_logging(log_path: Optional[str] = None, debug: Optional[bool] = None) -> logging.Logger:
    """
    Attach the console handler and the append-only run log handler to the
    package root logger. Safe to call more than once; handlers are not duplicated.
    """
    settings = get_settings()
    log_path = log_path or settings.LOG_PATH
    debug = settings.DEBUG if debug is None else debug

    logger = logging.getLogger(ROOT_LOGGER)
    formatter = logging.Formatter(LOG_FORMAT)

    if not any(getattr(h, "_migration_console", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        handler._migration_console = True
        logger.addHandler(handler)

    resolved = str(Path(log_path).resolve())
    if not any(getattr(h, "baseFilename", None) == resolved for h in logger.handlers):
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    return logger
