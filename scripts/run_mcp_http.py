"""Run the Kaiten MCP server in streamable-http mode."""

import os

from kaiten_cli import config
from kaiten_cli.mcp_server import mcp

if __name__ == "__main__":
    config.RUNTIME_QUIET = True
    mcp.settings.host = os.environ.get("KAITEN_MCP_HTTP_HOST", "127.0.0.1")
    mcp.settings.port = int(os.environ.get("KAITEN_MCP_HTTP_PORT", "8808"))
    mcp.run(transport="streamable-http")
