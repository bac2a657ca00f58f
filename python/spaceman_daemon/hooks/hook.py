import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..logs import get_logger
from ..tools.protocol import text_blocks

logger = get_logger("hook")


@dataclass(frozen=True)
class HookTool:
  hook_server_url: str
  tool_name: str
  tool_args: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Hook:
  """
  A request from a tool server for the daemon to run one of its internal
  capabilities (daemon_tool, with daemon_args) and deliver the output to
  hook_tool on that server.
  """

  daemon_tool: str
  hook_tool: HookTool
  daemon_args: Dict[str, Any] = field(default_factory=dict)
  hook_output: Optional[Any] = None


def hooks_from_result(result: Any) -> List[Hook]:
  """
  Collect the hooks an action tool attached to its result.

  A text block whose content is a JSON object with a "hooks" array carries
  hooks; every other block is ordinary output and is ignored here.
  """
  from ..converter import CONVERTER

  hooks = []
  for text in text_blocks(result):
    try:
      payload = json.loads(text)
    except json.JSONDecodeError:
      continue
    if not isinstance(payload, dict) or not isinstance(payload.get("hooks"), list):
      continue
    for entry in payload["hooks"]:
      hooks.append(CONVERTER.hook_from_dict(entry))
  if hooks:
    logger.debug(f"Found {len(hooks)} hook(s) in action result")
  return hooks
