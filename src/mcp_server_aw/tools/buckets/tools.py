"""
ActivityWatch bucket and event tool implementations.

Each tool is a ``ToolSpec``: a pydantic input model plus an async handler
that returns a render-agnostic ``ToolOutput``. ``call_tool`` is the single
path every invocation takes: validate, fetch, render, or report a
structured error.
"""
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Annotated, Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.server.middleware import Middleware, MiddlewareContext
from pydantic import BaseModel, Field, ValidationError

from mcp_server_aw.core.client import ActivityWatchClient, get_client
from mcp_server_aw.core.errors import (
    ActivityWatchError,
    AWError,
    InvalidParamsError,
    format_error_response,
    handle_aw_error,
)
from mcp_server_aw.core.formatters import ResponseFormat
from mcp_server_aw.core.observability import get_logger, observe_tool

from .formatters import render
from .models import (
    DEFAULT_EVENTS_LIMIT,
    GetBucketInput,
    GetEventCountInput,
    GetEventsInput,
    ListBucketsInput,
    ResultKind,
    ToolOutput,
)

Handler = Callable[[ActivityWatchClient, Any], Awaitable[ToolOutput]]

READ_ONLY_ANNOTATIONS = {
    "readOnlyHint": True,
    "destructiveHint": False,
    "idempotentHint": True,
    "openWorldHint": True,
}


class ToolCallError(Exception):
    """A tool call failed; ``text`` is the error rendered for the caller."""

    def __init__(self, error: AWError, text: str):
        super().__init__(error.message)
        self.error = error
        self.text = text

    @property
    def category(self):
        return self.error.category


@dataclass(frozen=True)
class ToolSpec:
    """Registry entry for one tool."""
    name: str
    title: str
    description: str
    input_model: type[BaseModel]
    handler: Handler
    activity: str


# =============================================================================
# Handlers
# =============================================================================

async def list_buckets(client: ActivityWatchClient, params: ListBucketsInput) -> ToolOutput:
    buckets = await client.list_buckets()
    return ToolOutput(kind=ResultKind.BUCKET_LIST, value=buckets)


async def get_bucket(client: ActivityWatchClient, params: GetBucketInput) -> ToolOutput:
    bucket = await client.get_bucket(params.bucket_id)
    return ToolOutput(
        kind=ResultKind.BUCKET,
        value=bucket,
        context={"bucket_id": params.bucket_id}
    )


async def get_events(client: ActivityWatchClient, params: GetEventsInput) -> ToolOutput:
    events = await client.get_events(
        params.bucket_id,
        start=params.start,
        end=params.end,
        limit=params.limit
    )
    return ToolOutput(
        kind=ResultKind.EVENTS,
        # never more than limit events
        value=events[:params.limit],
        context={
            "bucket_id": params.bucket_id,
            "start": params.start,
            "end": params.end,
            "limit": params.limit,
        }
    )


async def get_event_count(client: ActivityWatchClient, params: GetEventCountInput) -> ToolOutput:
    count = await client.get_event_count(params.bucket_id, start=params.start, end=params.end)
    return ToolOutput(
        kind=ResultKind.EVENT_COUNT,
        value=count,
        context={
            "bucket_id": params.bucket_id,
            "start": params.start,
            "end": params.end,
        }
    )


# =============================================================================
# Registry
# =============================================================================

TOOLS: dict[str, ToolSpec] = {
    spec.name: spec
    for spec in (
        ToolSpec(
            name="aw_list_buckets",
            title="List ActivityWatch Buckets",
            description=(
                "List all ActivityWatch buckets. Buckets are containers that group "
                "events by watcher type and hostname (e.g. aw-watcher-window_hostname "
                "for window tracking events)."
            ),
            input_model=ListBucketsInput,
            handler=list_buckets,
            activity="listing buckets",
        ),
        ToolSpec(
            name="aw_get_bucket",
            title="Get ActivityWatch Bucket",
            description=(
                "Get detailed information about a specific ActivityWatch bucket by its "
                "ID. Returns bucket metadata including type, hostname, and creation time."
            ),
            input_model=GetBucketInput,
            handler=get_bucket,
            activity="getting bucket",
        ),
        ToolSpec(
            name="aw_get_events",
            title="Get ActivityWatch Events",
            description=(
                "Get events from an ActivityWatch bucket. Events contain timestamped "
                "activity data such as window titles, app names, or AFK status.\n\n"
                "## Parameters\n"
                "- `bucket_id`: The bucket ID (e.g. \"aw-watcher-window_hostname\")\n"
                f"- `limit`: Maximum events to return (default: {DEFAULT_EVENTS_LIMIT})\n"
                "- `start`: Start time in ISO 8601 format (e.g. \"2024-01-01T00:00:00Z\")\n"
                "- `end`: End time in ISO 8601 format (e.g. \"2024-01-01T23:59:59Z\")\n\n"
                "## Example\n"
                "Get the last 10 window events:\n"
                "```json\n"
                "{\"bucket_id\": \"aw-watcher-window_myhostname\", \"limit\": 10}\n"
                "```"
            ),
            input_model=GetEventsInput,
            handler=get_events,
            activity="getting events",
        ),
        ToolSpec(
            name="aw_get_event_count",
            title="Count ActivityWatch Events",
            description=(
                "Get the total count of events in an ActivityWatch bucket. Useful for "
                "understanding data volume before fetching events. Optionally filter "
                "by time range."
            ),
            input_model=GetEventCountInput,
            handler=get_event_count,
            activity="counting events",
        ),
    )
}


# =============================================================================
# Dispatch
# =============================================================================

def validate_arguments(spec: ToolSpec, arguments: dict[str, Any] | None) -> BaseModel:
    """Validate raw tool arguments against the tool's input model."""
    try:
        return spec.input_model.model_validate(arguments or {})
    except ValidationError as e:
        problems = [
            f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
            for err in e.errors()
        ]
        raise InvalidParamsError(
            f"Invalid arguments for {spec.name}: " + "; ".join(problems),
            details={"errors": problems}
        ) from e


async def call_tool(
    name: str,
    arguments: dict[str, Any] | None = None,
    client: ActivityWatchClient | None = None
) -> str:
    """Run one tool call end to end and return the rendered result.

    Args:
        name: Tool name, e.g. "aw_get_events"
        arguments: Raw tool arguments
        client: Backend client (defaults to the configured global client)

    Returns:
        Markdown or JSON text, per the call's response_format

    Raises:
        ToolCallError: on invalid arguments or any backend failure
    """
    spec = _lookup(name, arguments)

    try:
        async with observe_tool(name, arguments) as ctx:
            params = validate_arguments(spec, arguments)
            output = await spec.handler(client or get_client(), params)
            ctx.result_summary = _result_summary(output)
    except ActivityWatchError as e:
        raise _tool_call_error(e, spec, arguments) from e

    return render(output, getattr(params, "response_format", ResponseFormat.MARKDOWN))


def check_arguments(name: str, arguments: dict[str, Any] | None) -> BaseModel:
    """Validate a tool call's arguments without running it.

    Raises:
        ToolCallError: unknown tool or invalid arguments
    """
    spec = _lookup(name, arguments)
    try:
        return validate_arguments(spec, arguments)
    except InvalidParamsError as e:
        raise _tool_call_error(e, spec, arguments) from e


def _lookup(name: str, arguments: dict[str, Any] | None) -> ToolSpec:
    spec = TOOLS.get(name)
    if spec is None:
        error = handle_aw_error(InvalidParamsError(
            f"Unknown tool: {name}",
            details={"available_tools": sorted(TOOLS)}
        ))
        raise ToolCallError(
            error,
            format_error_response(error, _requested_format(arguments).value)
        )
    return spec


def _tool_call_error(
    e: ActivityWatchError,
    spec: ToolSpec,
    arguments: dict[str, Any] | None
) -> ToolCallError:
    error = handle_aw_error(e, spec.activity)
    return ToolCallError(error, format_error_response(error, _requested_format(arguments).value))


def _requested_format(arguments: dict[str, Any] | None) -> ResponseFormat:
    """Best-effort read of response_format, usable before validation."""
    try:
        return ResponseFormat((arguments or {}).get("response_format", ResponseFormat.MARKDOWN))
    except (ValueError, TypeError):
        return ResponseFormat.MARKDOWN


def _result_summary(output: ToolOutput) -> dict[str, Any]:
    if output.kind == ResultKind.BUCKET_LIST:
        return {"buckets": len(output.value)}
    if output.kind == ResultKind.EVENTS:
        return {"events": len(output.value)}
    if output.kind == ResultKind.EVENT_COUNT:
        return {"count": output.value}
    return {"bucket_id": output.context.get("bucket_id")}


# =============================================================================
# FastMCP registration
# =============================================================================

BucketIdArg = Annotated[str, Field(description="The bucket ID (e.g. 'aw-watcher-window_myhostname')")]
LimitArg = Annotated[
    int | None,
    Field(description=f"Maximum number of events to return (default: {DEFAULT_EVENTS_LIMIT})")
]
StartArg = Annotated[
    str | None,
    Field(description="Start time in ISO 8601 format (e.g. '2024-01-01T00:00:00Z')")
]
EndArg = Annotated[
    str | None,
    Field(description="End time in ISO 8601 format (e.g. '2024-01-01T23:59:59Z')")
]
FormatArg = Annotated[
    ResponseFormat,
    Field(description="Output format: 'markdown' (default) or 'json'")
]


async def _dispatch(name: str, arguments: dict[str, Any]) -> str:
    try:
        return await call_tool(name, arguments)
    except ToolCallError as e:
        raise ToolError(e.text) from e


class ArgumentValidationMiddleware(Middleware):
    """Validate ActivityWatch tool arguments before FastMCP binds them.

    FastMCP checks arguments against the registered function signature and
    reports failures as raw pydantic text. Running the input models first
    turns every bad argument into an ``invalid_params`` error.
    """

    def __init__(self):
        self._logger = get_logger("aw-mcp.tools")

    async def on_call_tool(self, context: MiddlewareContext, call_next):
        name = context.message.name
        if name in TOOLS:
            try:
                check_arguments(name, context.message.arguments)
            except ToolCallError as e:
                self._logger.warning(
                    f"Rejected arguments for {name}",
                    tool=name,
                    error_category=e.category.value,
                    error_message=e.error.message
                )
                raise ToolError(e.text) from e
        return await call_next(context)


def register_bucket_tools(mcp: FastMCP) -> None:
    """Register the four ActivityWatch tools with the MCP server."""
    mcp.add_middleware(ArgumentValidationMiddleware())

    def _register(name: str):
        spec = TOOLS[name]
        return mcp.tool(
            name=spec.name,
            description=spec.description,
            annotations={"title": spec.title, **READ_ONLY_ANNOTATIONS},
        )

    @_register("aw_list_buckets")
    async def aw_list_buckets(response_format: FormatArg = ResponseFormat.MARKDOWN) -> str:
        return await _dispatch("aw_list_buckets", {"response_format": response_format})

    @_register("aw_get_bucket")
    async def aw_get_bucket(
        bucket_id: BucketIdArg,
        response_format: FormatArg = ResponseFormat.MARKDOWN
    ) -> str:
        return await _dispatch(
            "aw_get_bucket",
            {"bucket_id": bucket_id, "response_format": response_format}
        )

    @_register("aw_get_events")
    async def aw_get_events(
        bucket_id: BucketIdArg,
        limit: LimitArg = None,
        start: StartArg = None,
        end: EndArg = None,
        response_format: FormatArg = ResponseFormat.MARKDOWN
    ) -> str:
        return await _dispatch(
            "aw_get_events",
            {
                "bucket_id": bucket_id,
                "limit": limit,
                "start": start,
                "end": end,
                "response_format": response_format,
            }
        )

    @_register("aw_get_event_count")
    async def aw_get_event_count(
        bucket_id: BucketIdArg,
        start: StartArg = None,
        end: EndArg = None
    ) -> str:
        return await _dispatch(
            "aw_get_event_count",
            {"bucket_id": bucket_id, "start": start, "end": end}
        )
