"""
Structured logging for the ActivityWatch MCP server.

All output goes to stderr: with the stdio transport, stdout carries the
JSON-RPC stream and must not be written to.
"""
from __future__ import annotations

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any

import structlog


def configure_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output JSON; otherwise console format
    """
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # httpx logs every request at INFO through the stdlib
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str = "aw-mcp") -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


@dataclass
class ToolExecutionContext:
    """Timing and logging for a single tool call."""

    tool_name: str
    params: dict[str, Any] = field(default_factory=dict)
    start_time: float = field(default_factory=perf_counter)
    result_summary: dict[str, Any] | None = None
    logger: Any = None

    def __post_init__(self):
        if self.logger is None:
            self.logger = get_logger("aw-mcp.tools")

    @property
    def duration_ms(self) -> float:
        """Get elapsed time in milliseconds."""
        return (perf_counter() - self.start_time) * 1000

    def log_start(self) -> None:
        self.logger.info(
            f"Starting {self.tool_name}",
            tool=self.tool_name,
            params=_sanitize_params(self.params)
        )

    def log_success(self, result_summary: dict | None = None) -> None:
        self.logger.info(
            f"Completed {self.tool_name}",
            tool=self.tool_name,
            duration_ms=round(self.duration_ms, 2),
            **(result_summary or {})
        )

    def log_error(self, error: Exception) -> None:
        self.logger.error(
            f"Failed {self.tool_name}",
            tool=self.tool_name,
            duration_ms=round(self.duration_ms, 2),
            error_type=type(error).__name__,
            error_category=getattr(getattr(error, "category", None), "value", None),
            error_message=str(error)
        )


@asynccontextmanager
async def observe_tool(
    tool_name: str,
    params: dict[str, Any] | None = None
) -> AsyncGenerator[ToolExecutionContext, None]:
    """Log start, success and failure of a tool call.

    Errors are logged and re-raised. Whatever the block stores in
    ``ctx.result_summary`` is attached to the success line.

    Example:
        async with observe_tool("aw_get_events", params) as ctx:
            events = await client.get_events(bucket_id)
            ctx.result_summary = {"events": len(events)}
    """
    ctx = ToolExecutionContext(tool_name=tool_name, params=params or {})
    ctx.log_start()

    try:
        yield ctx
    except Exception as e:
        ctx.log_error(e)
        raise

    ctx.log_success(ctx.result_summary)


def _sanitize_params(params: dict[str, Any]) -> dict[str, Any]:
    """Truncate long parameter values for logging."""
    sanitized = {}
    for key, value in params.items():
        if isinstance(value, str) and len(value) > 100:
            sanitized[key] = f"{value[:100]}..."
        else:
            sanitized[key] = value
    return sanitized
