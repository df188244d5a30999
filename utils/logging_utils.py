"""
Audit log of booking operations
One line per event: AREA | Operator | Action | Detail
"""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from config import LOG_FILE, LOG_LEVEL

_LOGGER_NAME = "resort_bookings"


def _build_handler(path: Path) -> logging.Handler:
    try:
        return RotatingFileHandler(path, maxBytes=2_000_000, backupCount=5, encoding="utf-8")
    except OSError:
        # Read-only filesystem: log to stderr instead
        return logging.StreamHandler()


def _configure_logger() -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    logger.propagate = False

    handler = _build_handler(Path(LOG_FILE))
    handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
    logger.addHandler(handler)
    return logger


_logger = _configure_logger()


def log_event(area: str, operator: str, action: str, detail: str = "", level: int = logging.INFO) -> None:
    message = f"{area.upper()} | Operator: {operator} | Action: {action}"
    if detail:
        message += f" | Detail: {detail}"
    _logger.log(level, message)


def log_error(area: str, operator: str, action: str, detail: str = "") -> None:
    log_event(area, operator, action, detail, level=logging.ERROR)
