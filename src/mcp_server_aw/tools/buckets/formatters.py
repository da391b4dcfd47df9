"""
Bucket and event formatters.

Provides both markdown (human-readable) and JSON (machine-readable) outputs.
``render`` is a pure function of the tool output and the requested format.
"""
from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from mcp_server_aw.core.formatters import (
    JSONFormatter,
    MarkdownFormatter,
    ResponseFormat,
    truncate_response,
)
from mcp_server_aw.core.models import Bucket, Event

from .models import ResultKind, ToolOutput

# Width of the data summary column in event tables
DATA_SUMMARY_LENGTH = 80


class BucketFormatter:
    """Markdown renderers for bucket and event results."""

    @staticmethod
    def buckets_markdown(output: ToolOutput) -> str:
        """Format the bucket mapping as a table."""
        buckets: dict[str, Bucket] = output.value

        md = MarkdownFormatter.header("ActivityWatch Buckets", 1)
        if not buckets:
            return md + "No buckets found. Is a watcher running?\n"

        md += f"Found {len(buckets)} bucket{'s' if len(buckets) != 1 else ''}:\n\n"
        rows = [
            [bucket_id, b.bucket_type, b.client, b.hostname]
            for bucket_id, b in buckets.items()
        ]
        md += MarkdownFormatter.table(["ID", "Type", "Client", "Hostname"], rows)
        return md

    @staticmethod
    def bucket_detail_markdown(output: ToolOutput) -> str:
        """Format a single bucket as a key-value list."""
        bucket: Bucket = output.value

        md = MarkdownFormatter.header(f"Bucket: {bucket.id}", 1)
        items = [
            MarkdownFormatter.key_value("ID", MarkdownFormatter.code(bucket.id)),
            MarkdownFormatter.key_value("Type", bucket.bucket_type),
            MarkdownFormatter.key_value("Client", bucket.client),
            MarkdownFormatter.key_value("Hostname", bucket.hostname),
            MarkdownFormatter.key_value("Created", MarkdownFormatter.format_datetime(bucket.created)),
        ]
        if bucket.last_updated is not None:
            items.append(MarkdownFormatter.key_value(
                "Last Updated", MarkdownFormatter.format_datetime(bucket.last_updated)
            ))
        return md + "\n".join(items) + "\n"

    @staticmethod
    def events_markdown(output: ToolOutput) -> str:
        """Format events as a table, one row per event."""
        events: list[Event] = output.value
        bucket_id = output.context.get("bucket_id", "")
        limit = output.context.get("limit")

        md = MarkdownFormatter.header(f"Events from {bucket_id}", 1)
        if not events:
            return md + "No events found for the given range.\n"

        md += f"Showing {len(events)} event{'s' if len(events) != 1 else ''}:\n\n"
        rows = [
            [
                MarkdownFormatter.format_datetime(event.timestamp),
                MarkdownFormatter.format_duration(event.duration),
                summarize_data(event.data),
            ]
            for event in events
        ]
        md += MarkdownFormatter.table(["Timestamp", "Duration", "Data"], rows)

        if limit is not None and len(events) >= limit:
            md += (
                f"\n_Limit of {limit} reached. Narrow the time range or raise "
                f"`limit` to see more._\n"
            )
        return md

    @staticmethod
    def event_count_markdown(output: ToolOutput) -> str:
        """Format the event count as a single sentence."""
        count: int = output.value
        bucket_id = output.context.get("bucket_id", "")
        start = output.context.get("start")
        end = output.context.get("end")

        noun = "event" if count == 1 else "events"
        sentence = f"Bucket `{bucket_id}` contains {count} {noun}"
        if start and end:
            sentence += f" between {start} and {end}"
        elif start:
            sentence += f" since {start}"
        elif end:
            sentence += f" up to {end}"
        return sentence + ".\n"


MARKDOWN_RENDERERS: dict[ResultKind, Callable[[ToolOutput], str]] = {
    ResultKind.BUCKET_LIST: BucketFormatter.buckets_markdown,
    ResultKind.BUCKET: BucketFormatter.bucket_detail_markdown,
    ResultKind.EVENTS: BucketFormatter.events_markdown,
    ResultKind.EVENT_COUNT: BucketFormatter.event_count_markdown,
}


def render(output: ToolOutput, response_format: ResponseFormat) -> str:
    """Render a tool output in the requested format."""
    if response_format == ResponseFormat.JSON:
        return JSONFormatter.format(output.value)
    return truncate_response(MARKDOWN_RENDERERS[output.kind](output))


def summarize_data(data: dict[str, Any], max_length: int = DATA_SUMMARY_LENGTH) -> str:
    """One-line 'key: value' summary of event data."""
    parts = []
    for key, value in data.items():
        if not isinstance(value, str):
            value = json.dumps(value, ensure_ascii=False, default=str)
        parts.append(f"{key}: {value}")
    return MarkdownFormatter.truncate(", ".join(parts), max_length)
