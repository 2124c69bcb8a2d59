"""Process-wide logging setup.

The root logger gets a stdout handler and, when ``LOG_FILE`` is set, a
rotating file handler. Setup happens lazily on the first ``get_logger`` call
and only once, even when worker threads race for their first logger.
"""
import logging
import os
import sys
import threading
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from .config import (
    BACKUP_COUNT,
    DATE_FORMAT,
    LOG_FILE,
    LOG_FORMAT,
    LOG_LEVEL,
    MAX_LOG_SIZE,
    QUIET_LOGGERS,
    SEPARATOR,
)

_setup_lock = threading.Lock()
_configured = False


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.upper())
    # getLevelName returns "Level X" for names it does not know
    return resolved if isinstance(resolved, int) else logging.INFO


def _build_handlers() -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if LOG_FILE:
        try:
            log_dir = os.path.dirname(LOG_FILE)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            handlers.append(
                RotatingFileHandler(
                    LOG_FILE,
                    maxBytes=MAX_LOG_SIZE,
                    backupCount=BACKUP_COUNT,
                    encoding="utf-8",
                )
            )
        except OSError as e:
            sys.stderr.write(f"Warning: Could not create log file '{LOG_FILE}': {e}\n")

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(level: Optional[str] = None) -> None:
    """Install the project handlers on the root logger if not done yet."""
    global _configured

    with _setup_lock:
        if _configured:
            return

        root = logging.getLogger()
        root.handlers.clear()
        for handler in _build_handlers():
            root.addHandler(handler)
        root.setLevel(_resolve_level(level or LOG_LEVEL))

        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        _configured = True


def set_level(level: str) -> None:
    """Override the root level at runtime (e.g. from a CLI flag)."""
    configure_logging()
    logging.getLogger().setLevel(_resolve_level(level))


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)


def separation(logger_name: Optional[str] = None):
    """Logs a separation line."""
    get_logger(logger_name or "").info(SEPARATOR)
