"""
Sessions with remote tool servers.

A session is opened per call: connect, call one tool by name with an
argument map, disconnect. The transport is MCP over server-sent events. Any
async context manager factory with the same shape can stand in for it, which
is how tests run without a server.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncContextManager, AsyncIterator, Callable, Dict, Optional, Protocol

from mcp import ClientSession
from mcp.client.sse import sse_client

SESSION_PATH_SUFFIX = "/sse"


class ToolSession(Protocol):
  async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Any: ...


SessionFactory = Callable[[str], AsyncContextManager[ToolSession]]


def session_url(server_url: str) -> str:
  """Normalise a tool server's base URL to its session endpoint."""
  if server_url.endswith(SESSION_PATH_SUFFIX):
    return server_url
  return f"{server_url}{SESSION_PATH_SUFFIX}"


@asynccontextmanager
async def open_sse_session(url: str) -> AsyncIterator[ToolSession]:
  async with sse_client(url) as (read_stream, write_stream):
    async with ClientSession(read_stream, write_stream) as session:
      await session.initialize()
      yield session
