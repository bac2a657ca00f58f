import json
import time
from typing import Any, Dict, List, Optional

from cattrs.errors import BaseValidationError

from ..errors import DiscoveryError
from ..logs import InfoContext, get_logger
from .protocol import ToolProvider, first_text
from .session import SessionFactory, open_sse_session, session_url
from .validation import validate_arguments

DISCOVERY_TOOL_NAME = "getDaemonServerInfo"


class RemoteToolClient(InfoContext):
  """
  Calls tools on remote tool servers.

  Every call opens a fresh session on the server's session endpoint, calls
  exactly one tool and closes the session again, whether the call succeeded
  or not.
  """

  def __init__(self, session_factory: SessionFactory = open_sse_session):
    self.logger = get_logger("tool")
    self.session_factory = session_factory

  async def invoke(self, tool: ToolProvider, args: Dict[str, Any]) -> Any:
    """
    Validate args against the tool's declared parameters, then call it.

    :raises ValidationError: before any connection is made, when an argument
      is missing or has the wrong type
    """
    validate_arguments(tool.parameters, args)
    return await self.call(tool.server_url, tool.tool_name, args)

  async def call(self, server_url: str, tool_name: str, args: Optional[Dict[str, Any]] = None) -> Any:
    url = session_url(server_url)
    self.logger.debug(f"[TOOL→CALL] url={url}, name={tool_name}")
    if self.logger.isEnabledFor(10):  # DEBUG level
      self.logger.debug(f"[TOOL→CALL] Arguments: {args}")

    start_time = time.time()
    async with self.session_factory(url) as session:
      result = await session.call_tool(tool_name, args or {})
    elapsed_time = time.time() - start_time

    self.logger.debug(f"[TOOL←RESULT] url={url}, name={tool_name}, elapsed={elapsed_time:.3f}s")
    return result

  async def discover(self, server_url: str) -> List[ToolProvider]:
    """
    Ask a tool server which tools it offers.

    :raises DiscoveryError: when the server answers with an error, or with
      something that is not a list of tool descriptors
    """
    from ..converter import CONVERTER

    with self.info(f"Discovering tools on '{server_url}'", f"Discovered tools on '{server_url}'"):
      result = await self.call(server_url, DISCOVERY_TOOL_NAME, {})
      text = first_text(result)
      if text is None:
        raise DiscoveryError(
          f"Tool server '{server_url}' returned no server info", server_url=server_url, response=str(result)
        )
      if "Error" in text:
        raise DiscoveryError(text, server_url=server_url, response=text)

      try:
        tools = CONVERTER.tool_providers_from_json(text)
      except (json.JSONDecodeError, BaseValidationError, KeyError, TypeError, ValueError) as e:
        raise DiscoveryError(
          f"Tool server '{server_url}' returned invalid server info: {e}", server_url=server_url, response=text
        ) from e

      self.logger.debug(f"Server '{server_url}' offers: {[t.tool_name for t in tools]}")
      return tools
