"""Logging setup for bidbot.

Every module logs below the ``bidbot`` logger. Entry points call
``setup_logging`` once at startup; library code and tests never do, so
records simply propagate to whatever the host configured.
"""

import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional

ROOT_LOGGER_NAME = "bidbot"
DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Client libraries that log every request or statement at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine")


def resolve_level(level: str) -> int:
    """Map a level name to its number, INFO for unknown names."""
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> logging.Logger:
    """Attach console (and optional file) output to the bidbot logger.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Level name for bidbot loggers
        log_file: Optional file that receives the same records
        format_string: Record format, DEFAULT_FORMAT when omitted
        quiet_loggers: Third-party loggers held at WARNING or above

    Returns:
        The ``bidbot`` logger
    """
    numeric_level = resolve_level(level)
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt=DATE_FORMAT)

    app_logger = logging.getLogger(ROOT_LOGGER_NAME)
    app_logger.setLevel(numeric_level)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        app_logger.addHandler(handler)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(max(logging.WARNING, numeric_level))

    app_logger.debug(
        "Logging configured: level=%s, file=%s", logging.getLevelName(numeric_level), log_file
    )
    return app_logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a component, e.g. ``get_logger("monitor.service")``."""
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
