"""
ActivityWatch MCP Server - Module Entry Point

Allows running the server as a Python module:
    python -m mcp_server_aw
"""
from mcp_server_aw.server import main

if __name__ == "__main__":
    main()
