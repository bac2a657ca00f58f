from .character import Character, default_identity_prompt
from .keypair import Keypair, verify
from .signing import sign, generate_approval, approval_payload

__all__ = [
  "Character",
  "default_identity_prompt",
  "Keypair",
  "verify",
  "sign",
  "generate_approval",
  "approval_payload",
]
