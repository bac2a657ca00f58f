import base64
import binascii
import json
import re
from typing import Optional

from ..errors import KeyMissingError, ValidationError
from .keypair import Keypair

# Any surrogate left in a str is unpaired and cannot be encoded as UTF-8.
LONE_SURROGATE = re.compile("[\ud800-\udfff]")


def sign(keypair: Optional[Keypair], payload: str) -> str:
  """
  Produce a detached signature over a base64 payload.

  :param keypair: The signing identity
  :param payload: Base64 encoded bytes to sign
  :return: Base64 encoded signature
  """
  if keypair is None:
    raise KeyMissingError()

  if not isinstance(payload, str):
    raise ValidationError("payload", "string")

  try:
    message = base64.b64decode(payload, validate=True)
  except binascii.Error as e:
    raise ValidationError("payload", "string", f"payload is not valid base64: {e}")

  return base64.b64encode(keypair.sign(message)).decode("ascii")


def approval_payload(message: str, created_at: str, message_id: str, channel_id: Optional[str] = None) -> str:
  envelope = {
    "message": message,
    "createdAt": created_at,
    "messageId": message_id,
    "channelId": channel_id or "",
  }
  canonical = json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)
  canonical = LONE_SURROGATE.sub(lambda m: f"\\u{ord(m.group()):04x}", canonical)
  return base64.b64encode(canonical.encode("utf-8")).decode("ascii")


def generate_approval(
  keypair: Optional[Keypair],
  message: str,
  created_at: str,
  message_id: str,
  channel_id: Optional[str] = None,
) -> str:
  """
  Sign the canonical envelope of a message, proving that the keypair's
  owner processed exactly this message at exactly this time.
  """
  if keypair is None:
    raise KeyMissingError()
  return sign(keypair, approval_payload(message, created_at, message_id, channel_id))
