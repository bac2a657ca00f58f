"""
Environment configuration for the daemon.

Environment Variables:
- DAEMON_GENERATION_TIMEOUT: Seconds tool-augmented generation may run before
  the lifecycle is returned as-is (default: 30)
- DAEMON_MAX_TOOL_STEPS: Model rounds allowed to call ondemand tools (default: 10)
- DAEMON_REQUEST_TIMEOUT: Read timeout for model HTTP requests (default: 120)
- DAEMON_LLM_PROVIDER: Provider name of the default model provider (default: openai)
- DAEMON_LLM_MODELS: Comma separated model identifiers (default: gpt-4o-mini)
- DAEMON_LLM_ENDPOINT: OpenAI-compatible base URL (default: https://api.openai.com/v1)
- DAEMON_LLM_API_KEY: API key (direct value, highest priority)
- DAEMON_LLM_API_KEY_FILE: Path to a file holding the API key
- OPENAI_API_KEY: Used when neither of the above is set

Logging is configured separately, see spaceman_daemon.logs.
"""

import os
from typing import Optional

from .errors import ConfigurationError
from .logs import get_logger
from .models.provider import ModelProvider

logger = get_logger("daemon")

DEFAULT_GENERATION_TIMEOUT = 30.0
DEFAULT_MAX_TOOL_STEPS = 10
DEFAULT_REQUEST_TIMEOUT = 120.0
DEFAULT_CONNECT_TIMEOUT = 10.0

DEFAULT_LLM_PROVIDER = "openai"
DEFAULT_LLM_MODELS = "gpt-4o-mini"
DEFAULT_LLM_ENDPOINT = "https://api.openai.com/v1"


def _positive_float(name: str, default: float) -> float:
  raw = os.environ.get(name)
  if raw is None or raw.strip() == "":
    return default
  try:
    value = float(raw)
  except ValueError:
    raise ConfigurationError(f"{name} must be a number, got {raw!r}", field=name)
  if value <= 0:
    raise ConfigurationError(f"{name} must be positive, got {raw!r}", field=name)
  return value


def get_generation_timeout() -> float:
  return _positive_float("DAEMON_GENERATION_TIMEOUT", DEFAULT_GENERATION_TIMEOUT)


def get_request_timeout() -> float:
  return _positive_float("DAEMON_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)


def get_max_tool_steps() -> int:
  raw = os.environ.get("DAEMON_MAX_TOOL_STEPS")
  if raw is None or raw.strip() == "":
    return DEFAULT_MAX_TOOL_STEPS
  try:
    value = int(raw)
  except ValueError:
    raise ConfigurationError(f"DAEMON_MAX_TOOL_STEPS must be an integer, got {raw!r}", field="DAEMON_MAX_TOOL_STEPS")
  if value < 1:
    raise ConfigurationError(f"DAEMON_MAX_TOOL_STEPS must be at least 1, got {raw!r}", field="DAEMON_MAX_TOOL_STEPS")
  return value


def get_llm_api_key() -> Optional[str]:
  """
  Resolve the model API key.

  Resolution order:
  1. DAEMON_LLM_API_KEY
  2. DAEMON_LLM_API_KEY_FILE (file contents, stripped)
  3. OPENAI_API_KEY
  """
  if api_key := os.environ.get("DAEMON_LLM_API_KEY"):
    return api_key

  if key_file := os.environ.get("DAEMON_LLM_API_KEY_FILE"):
    try:
      with open(key_file) as f:
        api_key = f.read().strip()
    except OSError as e:
      raise ConfigurationError(f"Cannot read DAEMON_LLM_API_KEY_FILE {key_file!r}: {e}", field="apiKey")
    if api_key:
      return api_key
    logger.warning(f"API key file {key_file} is empty")

  return os.environ.get("OPENAI_API_KEY") or None


def get_model_provider_from_env() -> Optional[ModelProvider]:
  """
  Build the default model provider from the environment, or None when no
  API key is configured.
  """
  api_key = get_llm_api_key()
  if not api_key:
    return None

  models = [m.strip() for m in os.environ.get("DAEMON_LLM_MODELS", DEFAULT_LLM_MODELS).split(",") if m.strip()]
  return ModelProvider(
    provider=os.environ.get("DAEMON_LLM_PROVIDER", DEFAULT_LLM_PROVIDER),
    models=models,
    api_key=api_key,
    endpoint=os.environ.get("DAEMON_LLM_ENDPOINT", DEFAULT_LLM_ENDPOINT),
  )
