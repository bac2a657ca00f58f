from dataclasses import dataclass
from typing import Any, List, Optional

from ..hooks.hook import Hook


@dataclass(frozen=True)
class MessageLifecycle:
  """
  The record of one message's trip through the pipeline.

  Every field is optional because the record is built up stage by stage.
  Stages never mutate a lifecycle; they publish a replacement made with
  dataclasses.replace(), keeping every field that was already set.
  """

  # identity
  daemon_pubkey: Optional[str] = None
  daemon_name: Optional[str] = None
  message_id: Optional[str] = None
  created_at: Optional[str] = None
  approval: Optional[str] = None

  # input
  message: Optional[str] = None
  channel_id: Optional[str] = None

  # pipeline
  identity_prompt: Optional[str] = None
  context: Optional[List[Any]] = None
  tools: Optional[List[str]] = None
  generated_prompt: Optional[str] = None
  output: Optional[str] = None

  # audit
  hooks: Optional[List[Hook]] = None
  hooks_log: Optional[List[Any]] = None
  actions_log: Optional[List[Any]] = None
  post_process_log: Optional[List[Any]] = None

  def to_dict(self) -> dict:
    """The JSON-safe, camelCase form handed to remote tools."""
    from ..converter import CONVERTER

    return CONVERTER.lifecycle_to_dict(self)
