"""Standardized error handling utilities.

Provides consistent error handling patterns across the codebase.
"""

from .handlers import (
    handle_error,
    ERDError,
    ErrorContext,
    ErrorKind,
    log_error_with_context,
    create_error_response,
)

__all__ = [
    "handle_error",
    "ERDError",
    "ErrorContext",
    "ErrorKind",
    "log_error_with_context",
    "create_error_response",
]
