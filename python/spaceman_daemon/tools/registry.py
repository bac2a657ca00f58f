from typing import Iterator, List

from .protocol import ToolProvider, ToolRole


class ToolRegistry:
  """Registered tools, in registration order. Duplicates are kept."""

  def __init__(self):
    self._tools: List[ToolProvider] = []

  def add(self, tool: ToolProvider):
    self._tools.append(tool)

  def by_role(self, role: ToolRole) -> List[ToolProvider]:
    return [tool for tool in self._tools if tool.role == role]

  def __iter__(self) -> Iterator[ToolProvider]:
    return iter(self._tools)

  def __len__(self) -> int:
    return len(self._tools)
