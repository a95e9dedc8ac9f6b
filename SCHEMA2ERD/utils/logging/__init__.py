"""Logging utilities for SCHEMA2ERD."""

from .setup import setup_logging, get_logger, logging_settings

__all__ = ["setup_logging", "get_logger", "logging_settings"]
