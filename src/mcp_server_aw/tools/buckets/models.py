"""
Pydantic models for the ActivityWatch bucket and event tools.

All models use Pydantic v2 with ConfigDict for validation.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import Field, field_validator

from mcp_server_aw.core.formatters import ResponseFormat
from mcp_server_aw.core.models import (
    BaseToolInput,
    BucketInput,
    FormattedToolInput,
    TimeRangeInput,
)

# Applied by aw_get_events when the caller gives no limit
DEFAULT_EVENTS_LIMIT = 100


class ResultKind(str, Enum):
    """Shape of a tool result; selects the markdown renderer."""
    BUCKET_LIST = "bucket_list"
    BUCKET = "bucket"
    EVENTS = "events"
    EVENT_COUNT = "event_count"


# =============================================================================
# Input Models
# =============================================================================

class ListBucketsInput(FormattedToolInput):
    """Input for listing all buckets."""


class GetBucketInput(BucketInput, FormattedToolInput):
    """Input for getting a single bucket."""


class GetEventsInput(BucketInput, TimeRangeInput, FormattedToolInput):
    """Input for getting events from a bucket."""

    limit: int = Field(
        default=DEFAULT_EVENTS_LIMIT,
        description=f"Maximum number of events to return (default: {DEFAULT_EVENTS_LIMIT})",
        ge=0
    )

    @field_validator('limit', mode='before')
    @classmethod
    def default_when_null(cls, v: Any) -> Any:
        if v is None:
            return DEFAULT_EVENTS_LIMIT
        # bool is an int subclass; true must not become 1
        if isinstance(v, bool):
            raise ValueError("limit must be a non-negative integer, not a boolean")
        return v


class GetEventCountInput(BucketInput, TimeRangeInput):
    """Input for counting the events of a bucket."""


# =============================================================================
# Output Models
# =============================================================================

@dataclass(frozen=True)
class ToolOutput:
    """Render-agnostic tool result.

    ``value`` is the typed result (bucket mapping, bucket, event list or
    count); ``context`` holds the query parameters summaries refer to.
    """
    kind: ResultKind
    value: Any
    context: dict[str, Any] = field(default_factory=dict)


__all__ = [
    "DEFAULT_EVENTS_LIMIT",
    "ResponseFormat",
    "ResultKind",
    "BaseToolInput",
    "ListBucketsInput",
    "GetBucketInput",
    "GetEventsInput",
    "GetEventCountInput",
    "ToolOutput",
]
