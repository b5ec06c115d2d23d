import logging
import sys
import os
from datetime import datetime
from typing import Optional, Union

from dashboard.core.config import ENABLE_FILE_LOGGING, LOG_DIR, LOG_LEVEL

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers that must reach the root handlers at the configured level.
PROPAGATED_LOGGERS = ("dashboard", "main", "uvicorn", "uvicorn.error")


class ColoredFormatter(logging.Formatter):
    """Level-colored console output; plain text when the stream is not a terminal."""

    COLORS = {
        logging.DEBUG: "\x1b[36m",
        logging.INFO: "\x1b[32m",
        logging.WARNING: "\x1b[33m",
        logging.ERROR: "\x1b[31m",
        logging.CRITICAL: "\x1b[31;1m",
    }
    RESET = "\x1b[0m"

    def __init__(self, use_color: bool = True):
        super().__init__(LOG_FORMAT, datefmt=DATE_FORMAT)
        self.use_color = use_color

    def format(self, record):
        text = super().format(record)
        color = self.COLORS.get(record.levelno) if self.use_color else None
        return f"{color}{text}{self.RESET}" if color else text


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level '{level}'")
    return resolved


def setup_logging(
    level: Union[int, str] = LOG_LEVEL,
    log_dir: str = LOG_DIR,
    file_logging: bool = ENABLE_FILE_LOGGING,
) -> Optional[str]:
    """
    Install the console handler and, if enabled, a dated file handler.

    Safe to call more than once: previously installed root handlers are
    closed and replaced. Returns the log file path, or None without one.
    """
    level = _resolve_level(level)
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(level)

    # stderr, so uvicorn's own output and ours interleave in one stream
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ColoredFormatter(use_color=sys.stderr.isatty()))
    root_logger.addHandler(console_handler)

    log_path = None
    if file_logging:
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, f"dashboard_{datetime.now().strftime('%Y%m%d')}.log")
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    for logger_name in PROPAGATED_LOGGERS:
        named = logging.getLogger(logger_name)
        named.setLevel(level)
        named.propagate = True

    # Requests are already logged by the app middleware.
    logging.getLogger("uvicorn.access").setLevel(max(level, logging.WARNING))

    root_logger.info(
        "Logging initialized at %s (console%s)",
        logging.getLevelName(level), f" + {log_path}" if log_path else "",
    )
    return log_path
