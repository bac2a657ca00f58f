import json
from typing import Optional

from ..errors import UnexpectedFormatError, ValidationError
from .client import RemoteToolClient
from .protocol import InvokableTool, ParameterType, ToolProvider, first_text


def _json_schema(parameter_type: ParameterType) -> dict:
  match parameter_type:
    case ParameterType.ARRAY:
      return {"type": "array", "items": {}}
    case _:
      return {"type": parameter_type.value}


class OndemandTool(InvokableTool):
  """A registered ondemand tool, exposed to the model as a callable function."""

  def __init__(self, provider: ToolProvider, client: RemoteToolClient):
    self.provider = provider
    self.client = client
    self.name = provider.tool_name

  async def spec(self) -> dict:
    properties = {}
    for parameter in self.provider.parameters:
      schema = _json_schema(parameter.type)
      if parameter.description:
        schema["description"] = parameter.description
      properties[parameter.name] = schema

    return {
      "type": "function",
      "function": {
        "name": self.name,
        "description": self.provider.description,
        "parameters": {
          "type": "object",
          "properties": properties,
          "required": [parameter.name for parameter in self.provider.parameters],
        },
        "strict": False,
      },
    }

  async def invoke(self, json_argument: Optional[str]) -> str:
    if json_argument:
      try:
        args = json.loads(json_argument)
      except json.JSONDecodeError as e:
        raise ValidationError("arguments", "object", f"Tool arguments for '{self.name}' are not valid JSON: {e}")
    else:
      args = {}

    result = await self.client.invoke(self.provider, args)
    text = first_text(result)
    if text is None:
      raise UnexpectedFormatError(f"Tool '{self.name}' returned no text content", result=result)
    return text
