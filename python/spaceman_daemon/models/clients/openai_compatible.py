from typing import List, Optional

import httpx
from openai import AsyncOpenAI

from ...config import DEFAULT_CONNECT_TIMEOUT, get_request_timeout
from ...errors import UnsupportedProviderError
from ...logs import get_logger
from ..provider import ResolvedModel

SUPPORTED_PROVIDERS = ("openai", "openrouter")

DEFAULT_WRITE_TIMEOUT = 30.0
DEFAULT_POOL_TIMEOUT = 10.0


def _create_timeout(read_timeout: float) -> httpx.Timeout:
  return httpx.Timeout(
    connect=DEFAULT_CONNECT_TIMEOUT,
    read=read_timeout,
    write=DEFAULT_WRITE_TIMEOUT,
    pool=DEFAULT_POOL_TIMEOUT,
  )


class OpenAICompatibleClient:
  """
  Chat completions against any OpenAI-compatible endpoint.

  Both openai and openrouter speak the same wire protocol, so one client
  serves both; only the base URL and API key differ.
  """

  def __init__(
    self,
    provider: str,
    model: str,
    endpoint: str,
    api_key: str,
    request_timeout: Optional[float] = None,
  ):
    self.provider = provider
    self.name = model
    self.logger = get_logger("model")
    self._client = AsyncOpenAI(
      api_key=api_key,
      base_url=endpoint,
      timeout=_create_timeout(request_timeout if request_timeout is not None else get_request_timeout()),
    )

  def complete_chat(self, messages: List[dict], stream: bool = False, **kwargs):
    """
    Send a chat completion request.

    :param messages: Messages to send
    :param stream: Whether to stream the response
    :param kwargs: Additional parameters, passed through to the SDK
    :return: Response (async generator for streaming, awaitable for non-streaming)
    """
    self.logger.info(f"Processing {len(messages)} messages with model '{self.name}' ({self.provider})")
    self.logger.debug(f"Sending messages: {messages} (stream={stream})")

    if "tools" in kwargs and not kwargs["tools"]:
      del kwargs["tools"]

    if stream:
      return self._complete_chat_stream(messages, **kwargs)
    else:
      return self._client.chat.completions.create(model=self.name, messages=messages, **kwargs)

  async def _complete_chat_stream(self, messages: List[dict], **kwargs):
    stream = await self._client.chat.completions.create(
      model=self.name,
      messages=messages,
      stream=True,
      **kwargs,
    )
    async for chunk in stream:
      yield chunk


def pick_client(resolved: ResolvedModel) -> OpenAICompatibleClient:
  """
  Build the client for a resolved model selection.

  :raises UnsupportedProviderError: when the provider is not openai or openrouter
  """
  match resolved.provider:
    case "openai" | "openrouter":
      return OpenAICompatibleClient(
        provider=resolved.provider,
        model=resolved.model,
        endpoint=resolved.endpoint,
        api_key=resolved.api_key,
      )
    case _:
      raise UnsupportedProviderError(resolved.provider)
