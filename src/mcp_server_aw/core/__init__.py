"""
Core infrastructure modules for the ActivityWatch MCP Server.

This package contains:
- client: aw-server REST client built on httpx
- errors: Structured error handling
- formatters: Response formatting utilities
- models: Bucket/Event records and base input models
- observability: structlog configuration and tool logging
"""

from .errors import (
    ActivityWatchError,
    AWError,
    BackendError,
    BackendUnavailableError,
    ErrorCategory,
    InvalidParamsError,
    NotFoundError,
    ParseError,
    format_error_response,
    handle_aw_error,
)
from .formatters import (
    CHARACTER_LIMIT,
    Formatter,
    JSONFormatter,
    MarkdownFormatter,
    ResponseFormat,
    truncate_response,
)
from .models import (
    BaseToolInput,
    Bucket,
    BucketInput,
    Event,
    FormattedToolInput,
    TimeRangeInput,
)
from .client import ActivityWatchClient, get_client, reset_client
from .observability import configure_logging, get_logger, observe_tool

__all__ = [
    # Errors
    "ErrorCategory",
    "ActivityWatchError",
    "InvalidParamsError",
    "NotFoundError",
    "BackendUnavailableError",
    "BackendError",
    "ParseError",
    "AWError",
    "handle_aw_error",
    "format_error_response",
    # Formatters
    "CHARACTER_LIMIT",
    "ResponseFormat",
    "Formatter",
    "MarkdownFormatter",
    "JSONFormatter",
    "truncate_response",
    # Models
    "Bucket",
    "Event",
    "BaseToolInput",
    "FormattedToolInput",
    "BucketInput",
    "TimeRangeInput",
    # Client
    "ActivityWatchClient",
    "get_client",
    "reset_client",
    # Observability
    "configure_logging",
    "get_logger",
    "observe_tool",
]
