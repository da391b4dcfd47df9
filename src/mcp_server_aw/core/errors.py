"""
Error handling for ActivityWatch MCP operations.

Backend and validation failures are raised as ``ActivityWatchError`` subclasses
and converted to structured ``AWError`` values with actionable suggestions
before they reach the caller.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error kinds reported to MCP clients."""
    INVALID_PARAMS = "invalid_params"
    NOT_FOUND = "not_found"
    BACKEND_UNAVAILABLE = "backend_unavailable"
    BACKEND_ERROR = "backend_error"
    PARSE_ERROR = "parse_error"


class ActivityWatchError(Exception):
    """Base class for every failure surfaced by a tool call."""

    category: ErrorCategory = ErrorCategory.BACKEND_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidParamsError(ActivityWatchError):
    """Malformed or missing tool arguments. Raised before any network call."""
    category = ErrorCategory.INVALID_PARAMS


class NotFoundError(ActivityWatchError):
    """The backend reports that the requested bucket does not exist."""
    category = ErrorCategory.NOT_FOUND


class BackendUnavailableError(ActivityWatchError):
    """Connection failure or timeout talking to aw-server."""
    category = ErrorCategory.BACKEND_UNAVAILABLE


class BackendError(ActivityWatchError):
    """Non-success HTTP status other than 404."""
    category = ErrorCategory.BACKEND_ERROR


class ParseError(ActivityWatchError):
    """Response body is not JSON or does not have the expected shape."""
    category = ErrorCategory.PARSE_ERROR


@dataclass
class AWError:
    """Structured ActivityWatch error with actionable suggestions."""

    category: ErrorCategory
    message: str
    suggestion: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_string(self) -> str:
        """Format error as user-friendly string."""
        return f"Error ({self.category.value}): {self.message}\n\nSuggestion: {self.suggestion}"

    def to_dict(self) -> dict[str, Any]:
        """Format error as structured dictionary."""
        return {
            "success": False,
            "error": self.message,
            "category": self.category.value,
            "suggestion": self.suggestion,
            "details": self.details
        }

    def to_json(self) -> str:
        """Format error as JSON string."""
        return json.dumps(self.to_dict(), indent=2, default=str)

    def to_markdown(self) -> str:
        """Format error as markdown."""
        md = "## Error\n\n"
        md += f"**Category:** {self.category.value}\n"
        md += f"**Message:** {self.message}\n\n"
        md += f"**Suggestion:** {self.suggestion}\n"

        if self.details:
            md += "\n### Details\n"
            for key, value in self.details.items():
                md += f"- **{key}:** {value}\n"

        return md


# category -> suggestion
SUGGESTIONS: dict[ErrorCategory, str] = {
    ErrorCategory.INVALID_PARAMS: (
        "Check the tool arguments. Timestamps use ISO 8601 "
        "(e.g. '2024-01-01T00:00:00Z') and limit must be a non-negative integer."
    ),
    ErrorCategory.NOT_FOUND: (
        "Verify the bucket ID. Use aw_list_buckets to see the available buckets."
    ),
    ErrorCategory.BACKEND_UNAVAILABLE: (
        "Make sure aw-server is running and ACTIVITYWATCH_URL points at it."
    ),
    ErrorCategory.BACKEND_ERROR: (
        "ActivityWatch rejected the request. Check the aw-server logs and retry."
    ),
    ErrorCategory.PARSE_ERROR: (
        "The server at ACTIVITYWATCH_URL did not answer like aw-server. "
        "Check that the URL includes the API prefix (/api/0)."
    ),
}


def handle_aw_error(e: ActivityWatchError, context: str | None = None) -> AWError:
    """
    Convert an ActivityWatch exception to a structured error.

    Args:
        e: The exception to handle
        context: Optional context about the operation being performed

    Returns:
        AWError with category, message, and suggestion
    """
    message = e.message
    if context:
        message = f"{message} (while {context})"

    return AWError(
        category=e.category,
        message=message,
        suggestion=SUGGESTIONS[e.category],
        details=dict(e.details),
    )


def format_error_response(error: AWError, response_format: str = "markdown") -> str:
    """
    Format error for tool response based on requested format.

    Args:
        error: The AWError to format
        response_format: Output format - "markdown" or "json"

    Returns:
        Formatted error string
    """
    if response_format.lower() == "json":
        return error.to_json()
    return error.to_markdown()
