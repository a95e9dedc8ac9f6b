"""Standardized error handling for SCHEMA2ERD boundaries.

Every failure the core knows about is caught where it happens (parser,
parse client, share decoder, render session) and turned into one of the
error kinds below. Nothing here is allowed to escape into the rendering
pipeline.
"""

from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime
import traceback

from SCHEMA2ERD.utils.logging import get_logger

logger = get_logger(__name__)


class ErrorKind:
    """Error taxonomy shared by the core and the backend."""
    PARSE_ERROR = "parse_error"
    NETWORK_ERROR = "network_error"
    DECODE_ERROR = "decode_error"
    STALE_RESPONSE = "stale_response"


@dataclass
class ErrorContext:
    """Context information for error handling."""
    stage: str
    operation: str
    table_name: Optional[str] = None
    line_number: Optional[int] = None
    additional_context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ERDError(Exception):
    """Standardized error raised inside a boundary before it is converted."""
    message: str
    context: ErrorContext
    kind: str = ErrorKind.PARSE_ERROR
    original_exception: Optional[Exception] = None

    def __str__(self) -> str:
        return f"[{self.context.stage}:{self.context.operation}] {self.message}"


def log_error_with_context(
    error: Exception,
    context: ErrorContext,
    level: str = "error"
) -> None:
    """
    Log error with full context information.

    Args:
        error: The exception that occurred
        context: Error context information
        level: Log level ("error", "warning", "info", "debug")
    """
    log_msg_parts = [f"Error in {context.stage}.{context.operation}"]

    if context.table_name:
        log_msg_parts.append(f"Table: {context.table_name}")
    if context.line_number is not None:
        log_msg_parts.append(f"Line: {context.line_number}")

    log_msg = " | ".join(log_msg_parts)

    if level == "warning":
        logger.warning(f"{log_msg}: {error}")
    elif level == "info":
        logger.info(f"{log_msg}: {error}")
    elif level == "debug":
        logger.debug(f"{log_msg}: {error}")
    else:
        logger.error(f"{log_msg}: {error}", exc_info=True)

    if context.additional_context:
        logger.debug(f"Additional context: {context.additional_context}")


def create_error_response(
    error: Exception,
    context: ErrorContext,
    kind: str = ErrorKind.PARSE_ERROR,
    include_traceback: bool = False,
) -> Dict[str, Any]:
    """
    Create the structured `{error, message}` object used at API boundaries.

    Args:
        error: The exception that occurred
        context: Error context information
        kind: One of the ErrorKind values
        include_traceback: Attach a truncated traceback (development only)

    Returns:
        Dictionary with error kind, message and diagnostic fields
    """
    error_response: Dict[str, Any] = {
        "error": kind,
        "message": str(error) or type(error).__name__,
        "stage": context.stage,
        "timestamp": datetime.now().isoformat(),
    }

    if include_traceback and error.__traceback__ is not None:
        tb_str = "".join(traceback.format_tb(error.__traceback__))
        # Keep only the tail; the top frames are framework noise
        error_response["traceback"] = tb_str[-500:]

    return error_response


def handle_error(
    error: Exception,
    context: ErrorContext,
    kind: str = ErrorKind.PARSE_ERROR,
    log_level: str = "error",
    reraise: bool = False,
    include_traceback: bool = False,
) -> Dict[str, Any]:
    """
    Log an error and build its structured response.

    Raises:
        ERDError: If reraise=True, wraps original error in ERDError
    """
    log_error_with_context(error, context, level=log_level)
    error_response = create_error_response(error, context, kind=kind, include_traceback=include_traceback)

    if reraise:
        raise ERDError(
            message=str(error),
            context=context,
            kind=kind,
            original_exception=error,
        ) from error

    return error_response
