"""
Exception classes raised by the daemon.

Every error derives from DaemonError. Errors are raised where they are
detected; the message pipeline wraps whatever escapes a stage into a single
PipelineError so that callers of Daemon.message() see one failure type.
"""

import asyncio
from typing import Any, Optional


class DaemonError(Exception):
  """Base class for all daemon errors."""


class ConfigurationError(DaemonError):
  """
  Raised when the model provider, model, API key or endpoint cannot be
  resolved, or when an environment setting holds an invalid value.

  Attributes:
    field: The configuration field that is missing or invalid, if known.
  """

  def __init__(self, message: str, field: Optional[str] = None):
    self.field = field
    super().__init__(message)


class ValidationError(DaemonError):
  """
  Raised when a tool argument does not match its declared parameter type.

  Attributes:
    parameter: Name of the offending parameter.
    expected: Declared type of the parameter.
  """

  def __init__(self, parameter: str, expected: str, message: Optional[str] = None):
    self.parameter = parameter
    self.expected = expected
    super().__init__(message or f"{parameter} must be {_article(expected)} {expected}")


class DiscoveryError(DaemonError):
  """
  Raised when a tool server's discovery response is flagged as an error or
  cannot be parsed into tool descriptors.

  Attributes:
    server_url: The server that was queried.
    response: The raw response text, verbatim.
  """

  def __init__(self, message: str, server_url: Optional[str] = None, response: Optional[str] = None):
    self.server_url = server_url
    self.response = response
    super().__init__(message)


class UnsupportedProviderError(DaemonError):
  """Raised when a model provider name has no adapter."""

  def __init__(self, provider: str):
    self.provider = provider
    super().__init__(f"Unsupported provider: {provider}")


class UnexpectedFormatError(DaemonError):
  """Raised when a tool or model result does not have the expected shape."""

  def __init__(self, message: str = "Unexpected result format", result: Any = None):
    self.result = result
    super().__init__(message)


class KeyMissingError(DaemonError):
  """Raised when signing is requested and no keypair is bound to the daemon."""

  def __init__(self, message: str = "Keypair not found"):
    super().__init__(message)


class PipelineError(DaemonError):
  """
  Raised by Daemon.message() and Daemon.message_with_tools() when any stage
  fails.

  The state published before the failure stays available through the
  lifecycle attribute.

  Example:
    try:
      lifecycle = await daemon.message("hello")
    except PipelineError as e:
      print(f"Pipeline failed: {e.cause}")
      print(f"Last published state: {e.lifecycle.value}")

  Attributes:
    cause: The original exception.
    lifecycle: The LifecycleContainer of the failed call, if one was created.
  """

  def __init__(self, cause: BaseException, lifecycle=None):
    self.cause = cause
    self.lifecycle = lifecycle
    super().__init__(f"Failed at step: {cause}")


class GenerationTimeoutError(DaemonError, asyncio.TimeoutError):
  """
  Tool-augmented generation did not finish within the allotted time.

  Used internally: the orchestrator logs it as a warning and returns the
  lifecycle in whatever state it reached.

  Attributes:
    timeout: The timeout value in seconds.
    message_id: The message whose generation timed out.
  """

  def __init__(self, timeout: float, message_id: Optional[str] = None):
    self.timeout = timeout
    self.message_id = message_id
    message = f"Generation timeout reached after {timeout:g} seconds"
    if message_id:
      message += f" (message: {message_id})"
    super().__init__(message)


def _article(word: str) -> str:
  return "an" if word[:1].lower() in "aeiou" else "a"
