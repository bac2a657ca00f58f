"""
A minimal tool server for the daemon.

Serves MCP over SSE on http://localhost:8000/sse with two tools:
- getDaemonServerInfo: describes the tools this server offers to a daemon
- hello: an ondemand tool the model can call to greet someone

Run with:
  python examples/hello_server.py
"""

import json
import os

from mcp.server.fastmcp import FastMCP

PORT = int(os.environ.get("HELLO_SERVER_PORT", "8000"))
SERVER_URL = f"http://localhost:{PORT}"

mcp = FastMCP("hello", port=PORT)


@mcp.tool(name="getDaemonServerInfo")
def get_daemon_server_info() -> str:
  return json.dumps(
    [
      {
        "serverUrl": SERVER_URL,
        "toolName": "hello",
        "description": "Say hello to someone by name",
        "type": "ondemand",
        "parameters": [{"name": "name", "type": "string", "description": "Who to greet"}],
      }
    ]
  )


@mcp.tool()
def hello(name: str) -> str:
  return f"Hello {name}"


if __name__ == "__main__":
  mcp.run(transport="sse")
