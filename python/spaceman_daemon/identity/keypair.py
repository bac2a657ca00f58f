import base64

import base58
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey

SEED_LENGTH = 32
SECRET_KEY_LENGTH = 64


class Keypair:
  """
  An Ed25519 signing identity.

  The private key never leaves this object; only signatures and the public
  key are exposed.
  """

  def __init__(self, private_key: Ed25519PrivateKey):
    self._private_key = private_key
    self._public_bytes = private_key.public_key().public_bytes(
      encoding=serialization.Encoding.Raw,
      format=serialization.PublicFormat.Raw,
    )

  @staticmethod
  def generate() -> "Keypair":
    return Keypair(Ed25519PrivateKey.generate())

  @staticmethod
  def from_secret_key(secret_key: bytes) -> "Keypair":
    """
    Load a keypair from a 32 byte seed or from a 64 byte secret key laid out
    as seed followed by public key.
    """
    if len(secret_key) == SECRET_KEY_LENGTH:
      seed = secret_key[:SEED_LENGTH]
    elif len(secret_key) == SEED_LENGTH:
      seed = secret_key
    else:
      raise ValueError(f"Secret key must be {SEED_LENGTH} or {SECRET_KEY_LENGTH} bytes, got {len(secret_key)}")

    keypair = Keypair(Ed25519PrivateKey.from_private_bytes(bytes(seed)))
    if len(secret_key) == SECRET_KEY_LENGTH and secret_key[SEED_LENGTH:] != keypair.public_key_bytes:
      raise ValueError("Secret key does not match its embedded public key")
    return keypair

  @property
  def public_key_bytes(self) -> bytes:
    return self._public_bytes

  @property
  def public_key(self) -> str:
    """The raw public key in base58, the form Solana wallets and tool servers use."""
    return base58.b58encode(self._public_bytes).decode("ascii")

  def sign(self, data: bytes) -> bytes:
    return self._private_key.sign(data)

  def __repr__(self) -> str:
    return f"Keypair(public_key={self.public_key!r})"


def verify(public_key: str, payload: str, signature: str) -> bool:
  """
  Check a base64 signature over a base64 payload against a base58 public key.
  """
  key = Ed25519PublicKey.from_public_bytes(base58.b58decode(public_key))
  try:
    key.verify(base64.b64decode(signature), base64.b64decode(payload))
  except InvalidSignature:
    return False
  return True
