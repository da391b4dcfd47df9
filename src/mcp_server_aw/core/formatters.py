"""
Response formatting utilities for consistent output.

Supports both markdown (human-readable) and JSON (machine-readable) formats.
"""
from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic_core import to_jsonable_python

# Markdown responses longer than this are cut off
CHARACTER_LIMIT = 25_000


class ResponseFormat(str, Enum):
    """Output format options for tool responses."""
    MARKDOWN = "markdown"
    JSON = "json"


class Formatter:
    """Base formatter with common utilities."""

    @staticmethod
    def format_datetime(dt: datetime | str | None, human_readable: bool = True) -> str:
        """Format datetime for display."""
        if dt is None:
            return "—"
        if isinstance(dt, str):
            try:
                dt = datetime.fromisoformat(dt.replace('Z', '+00:00'))
            except ValueError:
                return dt

        if human_readable:
            return dt.strftime("%Y-%m-%d %H:%M:%S")
        return dt.isoformat()

    @staticmethod
    def format_duration(seconds: float) -> str:
        """Format duration in human-readable form."""
        if seconds < 60:
            return f"{seconds:.1f}s"
        elif seconds < 3600:
            mins = seconds / 60
            return f"{mins:.1f}m"
        elif seconds < 86400:
            hours = seconds / 3600
            return f"{hours:.1f}h"
        else:
            days = seconds / 86400
            return f"{days:.1f}d"

    @staticmethod
    def truncate(text: str, max_length: int) -> str:
        """Shorten text to max_length characters, marking the cut with '...'."""
        if len(text) <= max_length:
            return text
        return text[:max(max_length - 3, 0)] + "..."


class MarkdownFormatter(Formatter):
    """Markdown-specific formatting utilities."""

    @staticmethod
    def header(text: str, level: int = 1) -> str:
        """Create markdown header."""
        return f"{'#' * level} {text}\n\n"

    @staticmethod
    def code(text: str) -> str:
        """Format text as inline code."""
        return f"`{text}`"

    @staticmethod
    def escape_cell(value: Any) -> str:
        """Make a value safe to place inside a table cell."""
        if value is None:
            return ""
        text = str(value).replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
        return text.replace("|", "\\|")

    @staticmethod
    def table(headers: list[str], rows: list[list[Any]]) -> str:
        """Generate markdown table."""
        if not headers or not rows:
            return ""

        lines = []
        lines.append("| " + " | ".join(str(h) for h in headers) + " |")
        lines.append("| " + " | ".join(["---"] * len(headers)) + " |")
        for row in rows:
            cells = [MarkdownFormatter.escape_cell(cell) for cell in row]
            lines.append("| " + " | ".join(cells) + " |")

        return "\n".join(lines) + "\n"

    @staticmethod
    def bullet_list(items: list[str], indent: int = 0) -> str:
        """Create bullet point list."""
        prefix = "  " * indent
        return "\n".join(f"{prefix}- {item}" for item in items) + "\n"

    @staticmethod
    def key_value(key: str, value: Any) -> str:
        """Format key-value pair as a list item."""
        return f"- **{key}:** {value}"


class JSONFormatter(Formatter):
    """JSON-specific formatting utilities."""

    @staticmethod
    def format(data: Any, indent: int = 2) -> str:
        """Format data as JSON string.

        Pydantic models are dumped by alias with ``None`` fields left out,
        datetimes become ISO-8601 strings.
        """
        jsonable = to_jsonable_python(data, by_alias=True, exclude_none=True)
        return json.dumps(jsonable, indent=indent, ensure_ascii=False)


def truncate_response(response: str, limit: int = CHARACTER_LIMIT) -> str:
    """Truncate a markdown response that exceeds the character limit."""
    if len(response) <= limit:
        return response
    return (
        f"{response[:limit]}\n\n"
        f"_Response truncated at {limit} characters. "
        f"Use more specific filters to reduce results._"
    )
