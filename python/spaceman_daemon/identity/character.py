from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Character:
  name: str
  pubkey: str = ""
  identity_prompt: Optional[str] = None
  extensions: Dict[str, Any] = field(default_factory=dict)


def default_identity_prompt(name: str) -> str:
  return f"You are {name}. Keep your responses concise and to the point."
