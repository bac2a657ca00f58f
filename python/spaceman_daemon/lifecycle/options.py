from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .container import LifecycleContainer


@dataclass
class Stages:
  context: bool = True
  actions: bool = True
  post_process: bool = True


@dataclass
class LLMOptions:
  """Per-call model selection. Unset fields fall back to the registered providers."""

  provider: Optional[str] = None
  model: Optional[str] = None
  endpoint: Optional[str] = None
  api_key: Optional[str] = None
  system_prompt: Optional[str] = None


@dataclass
class MessageOptions:
  """
  Options for Daemon.message() and Daemon.message_with_tools().

  tool_args maps "<serverUrl>-<toolName>" to the args passed to that tool
  alongside the lifecycle. Pass a lifecycle container to observe the call
  from its very first publish.
  """

  channel_id: Optional[str] = None
  stages: Stages = field(default_factory=Stages)
  tool_args: Dict[str, Any] = field(default_factory=dict)
  llm: Optional[LLMOptions] = None
  lifecycle: Optional[LifecycleContainer] = None
