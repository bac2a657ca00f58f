from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Protocol


class ToolRole(Enum):
  """
  When the daemon calls a tool.

  - CONTEXT: before generation, to gather context for the prompt
  - ACTION: after generation, to act on the output
  - POST_PROCESS: last, after actions and hooks
  - ONDEMAND: exposed to the model, which decides when to call it
  """

  CONTEXT = "context"
  ACTION = "action"
  POST_PROCESS = "postProcess"
  ONDEMAND = "ondemand"


class ParameterType(Enum):
  STRING = "string"
  NUMBER = "number"
  BOOLEAN = "boolean"
  ARRAY = "array"
  OBJECT = "object"


@dataclass(frozen=True)
class ToolParameter:
  name: str
  type: ParameterType
  description: str = ""


@dataclass(frozen=True)
class ToolProvider:
  server_url: str
  tool_name: str
  role: ToolRole
  description: str = ""
  parameters: List[ToolParameter] = field(default_factory=list)

  @property
  def key(self) -> str:
    """The key under which callers pass per-tool arguments to a message call."""
    return f"{self.server_url}-{self.tool_name}"

  def describe(self) -> str:
    return f"{self.tool_name}: {self.description}" if self.description else self.tool_name


class InvokableTool(Protocol):
  async def spec(self) -> dict: ...

  async def invoke(self, json_argument: Optional[str]) -> str: ...


def text_blocks(result: Any) -> List[str]:
  """
  Return the text of every text content block in a tool result.

  Accepts MCP result objects as well as their dict form.
  """
  content = result.get("content") if isinstance(result, dict) else getattr(result, "content", None)
  if not isinstance(content, list):
    return []

  texts = []
  for block in content:
    text = block.get("text") if isinstance(block, dict) else getattr(block, "text", None)
    if isinstance(text, str):
      texts.append(text)
  return texts


def first_text(result: Any) -> Optional[str]:
  """The text of the first content block, or None when it carries no text."""
  content = result.get("content") if isinstance(result, dict) else getattr(result, "content", None)
  if not isinstance(content, list) or len(content) == 0:
    return None
  block = content[0]
  text = block.get("text") if isinstance(block, dict) else getattr(block, "text", None)
  return text if isinstance(text, str) else None


def result_text(result: Any) -> str:
  """Render a tool result as prompt text."""
  if isinstance(result, str):
    return result
  texts = text_blocks(result)
  if texts:
    return "\n".join(texts)
  return "" if result is None else str(result)
