"""
Pydantic models for ActivityWatch records and shared tool input bases.

Records mirror the aw-server REST API payloads. Inputs reject unknown fields
so typos in tool arguments surface as invalid parameters.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .formatters import ResponseFormat

__all__ = [
    "ResponseFormat",
    # Records
    "Bucket",
    "Event",
    # Base Input Models
    "BaseToolInput",
    "FormattedToolInput",
    "BucketInput",
    "TimeRangeInput",
    "parse_timestamp",
]


# =============================================================================
# Records
# =============================================================================

class Bucket(BaseModel):
    """ActivityWatch bucket: a container of events from one watcher on one host."""
    model_config = ConfigDict(
        populate_by_name=True,
        extra='ignore'
    )

    id: str = Field(description="Unique bucket identifier")
    bucket_type: str = Field(
        alias="type",
        description="Type of events stored (e.g. 'currentwindow', 'afkstatus')"
    )
    client: str = Field(description="Watcher that created the bucket")
    hostname: str = Field(description="Host where the bucket was created")
    created: datetime = Field(description="When the bucket was created")
    last_updated: datetime | None = Field(
        default=None,
        description="When the bucket last received an event"
    )
    data: dict[str, Any] | None = Field(
        default=None,
        description="Free-form bucket metadata"
    )


class Event(BaseModel):
    """ActivityWatch event: a timestamped observation with a duration."""
    model_config = ConfigDict(extra='ignore')

    id: int | None = Field(default=None, description="Event ID assigned by the server")
    timestamp: datetime = Field(description="Event start time")
    duration: float = Field(description="Duration in seconds")
    data: dict[str, Any] = Field(
        default_factory=dict,
        description="Event-specific data (e.g. app name, window title)"
    )


# =============================================================================
# Input Models
# =============================================================================

def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing 'Z' for UTC."""
    return datetime.fromisoformat(value.replace('Z', '+00:00'))


class BaseToolInput(BaseModel):
    """Base model for all tool inputs."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        extra='forbid'
    )


class FormattedToolInput(BaseToolInput):
    """Tool input that lets the caller choose the output format."""

    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format: 'markdown' for human-readable, 'json' for machine-readable"
    )


class BucketInput(BaseToolInput):
    """Tool input addressing a single bucket."""

    bucket_id: str = Field(
        ...,
        description="Bucket ID (e.g. 'aw-watcher-window_myhostname')"
    )

    @field_validator('bucket_id')
    @classmethod
    def validate_bucket_id(cls, v: str) -> str:
        if not v:
            raise ValueError("Bucket ID cannot be empty")
        return v


class TimeRangeInput(BaseToolInput):
    """Optional start/end timestamps in ISO-8601 format."""

    start: str | None = Field(
        default=None,
        description="Start time in ISO 8601 format (e.g. '2024-01-01T00:00:00Z')"
    )
    end: str | None = Field(
        default=None,
        description="End time in ISO 8601 format (e.g. '2024-01-01T23:59:59Z')"
    )

    @field_validator('start', 'end')
    @classmethod
    def validate_timestamp(cls, v: str | None) -> str | None:
        if v is None:
            return v
        try:
            parse_timestamp(v)
        except ValueError as e:
            msg = f"Invalid timestamp: {v!r}. Use ISO format: YYYY-MM-DDTHH:MM:SSZ"
            raise ValueError(msg) from e
        return v
