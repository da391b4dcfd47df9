"""ActivityWatch MCP Server: read-only ActivityWatch queries as MCP tools."""

__version__ = "0.1.0"
