from .protocol import (
  InvokableTool,
  ParameterType,
  ToolParameter,
  ToolProvider,
  ToolRole,
  first_text,
  result_text,
  text_blocks,
)
from .validation import validate_arguments
from .session import SessionFactory, ToolSession, open_sse_session, session_url
from .client import RemoteToolClient
from .registry import ToolRegistry
from .ondemand import OndemandTool

__all__ = [
  "InvokableTool",
  "ParameterType",
  "ToolParameter",
  "ToolProvider",
  "ToolRole",
  "first_text",
  "result_text",
  "text_blocks",
  "validate_arguments",
  "SessionFactory",
  "ToolSession",
  "open_sse_session",
  "session_url",
  "RemoteToolClient",
  "ToolRegistry",
  "OndemandTool",
]
