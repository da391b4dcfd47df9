"""
ActivityWatch bucket and event tools.

Provides read-only access to buckets and their events: listing buckets,
bucket details, event retrieval and event counting.
"""
from __future__ import annotations

from .formatters import BucketFormatter, render
from .models import (
    DEFAULT_EVENTS_LIMIT,
    GetBucketInput,
    GetEventCountInput,
    GetEventsInput,
    ListBucketsInput,
    ResponseFormat,
    ResultKind,
    ToolOutput,
)
from .tools import (
    TOOLS,
    ArgumentValidationMiddleware,
    ToolCallError,
    ToolSpec,
    call_tool,
    check_arguments,
    register_bucket_tools,
)

__all__ = [
    # Registration and dispatch
    "register_bucket_tools",
    "call_tool",
    "check_arguments",
    "ArgumentValidationMiddleware",
    "TOOLS",
    "ToolSpec",
    "ToolCallError",

    # Input models
    "ListBucketsInput",
    "GetBucketInput",
    "GetEventsInput",
    "GetEventCountInput",
    "DEFAULT_EVENTS_LIMIT",

    # Enums
    "ResponseFormat",
    "ResultKind",

    # Output
    "ToolOutput",

    # Formatter
    "BucketFormatter",
    "render",
]
