"""
ActivityWatch MCP Server - Main Entry Point

FastMCP server exposing four read-only ActivityWatch tools:
- aw_list_buckets
- aw_get_bucket
- aw_get_events
- aw_get_event_count

Environment Variables:
- ACTIVITYWATCH_URL: aw-server API base URL (default: http://localhost:5600/api/0)
- ACTIVITYWATCH_TIMEOUT: Per-request timeout in seconds
- AW_MCP_NAME: Server name (default: activitywatch-mcp)
- AW_MCP_TRANSPORT: Transport mode (stdio, streamable_http)
- AW_MCP_PORT: HTTP port if using streamable_http
- AW_MCP_LOG_LEVEL: Logging level
- AW_MCP_LOG_JSON: Emit JSON log lines if 'true'
"""
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from mcp_server_aw.config import TransportType, get_config
from mcp_server_aw.core import configure_logging, get_client, get_logger
from mcp_server_aw.tools.buckets import register_bucket_tools

config = get_config()
logger = get_logger("aw-mcp.server")


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncGenerator[None, None]:
    """Build the global ActivityWatch client on startup and log shutdown.

    Tools reach the client through ``get_client()``.
    """
    client = get_client()
    logger.info(
        "Starting ActivityWatch MCP Server",
        version=config.server.version,
        activitywatch_url=client.base_url,
        timeout=client.timeout
    )

    yield

    logger.info("Shutting down ActivityWatch MCP Server")


mcp = FastMCP(
    name=config.server.name,
    instructions="""ActivityWatch MCP Server - query your ActivityWatch time tracking data.

Use `aw_list_buckets` to see available data sources, then `aw_get_events` to
retrieve activity logs. Use `aw_get_event_count` to check data volume first.
""",
    lifespan=app_lifespan,
)

register_bucket_tools(mcp)


# =============================================================================
# Main Entrypoint
# =============================================================================

def main() -> None:
    """Entry point supporting multiple transports."""
    configure_logging(level=config.server.log_level, json_format=config.server.json_logs)

    if config.server.transport == TransportType.STREAMABLE_HTTP:
        logger.info(f"Starting HTTP server on port {config.server.port}")
        mcp.run(transport="streamable-http", port=config.server.port)
    else:
        logger.info("Starting stdio server")
        mcp.run()


if __name__ == "__main__":
    main()
