"""Tool domains exposed by the ActivityWatch MCP server."""
