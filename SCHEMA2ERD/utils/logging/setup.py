"""Logging setup for SCHEMA2ERD."""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from SCHEMA2ERD.config.loader import get_config

FORMATS = {
    "detailed": "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
    "simple": "%(levelname)s | %(name)s | %(message)s",
}
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_FILE = "logs/schema2erd.log"

# Loggers that are noisy at INFO when the root is verbose
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def logging_settings() -> Dict[str, Any]:
    """The `logging` section of config.yaml, or {} when there is no file."""
    try:
        return dict(get_config("logging"))
    except FileNotFoundError:
        return {}


def setup_logging(
    level: Optional[str] = None,
    format_type: Optional[str] = None,
    log_to_file: Optional[bool] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the root logger.

    Arguments left as None come from the `logging` section of config.yaml,
    then from built-in defaults (INFO, detailed, console only).

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: "simple" or "detailed"
        log_to_file: Also write to `log_file`
        log_file: Log file path; relative paths are taken from the working directory

    Returns:
        The configured root logger
    """
    configured = logging_settings()
    level = level or configured.get("level", "INFO")
    format_type = format_type or configured.get("format_type", "detailed")
    if log_to_file is None:
        log_to_file = bool(configured.get("log_to_file", False))
    log_file = log_file or configured.get("log_file") or DEFAULT_LOG_FILE

    log_level = logging.getLevelName(str(level).upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO
    formatter = logging.Formatter(FORMATS.get(format_type, FORMATS["detailed"]), datefmt=DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_to_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
    return root


def get_logger(name: str) -> logging.Logger:
    """Logger for a module (pass `__name__`)."""
    return logging.getLogger(name)
