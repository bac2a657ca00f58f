from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from ..errors import ConfigurationError


@dataclass(frozen=True)
class ModelProvider:
  provider: str
  models: List[str] = field(default_factory=list)
  api_key: str = ""
  endpoint: str = ""
  extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolvedModel:
  provider: str
  model: str
  api_key: str
  endpoint: str
  system_prompt: str = ""


class ModelRegistry:
  """
  Registered model providers, in registration order, keyed by provider name.

  Adding a provider whose name is already registered replaces that entry in
  place.
  """

  def __init__(self):
    self._providers: List[ModelProvider] = []

  def add(self, provider: ModelProvider):
    for i, existing in enumerate(self._providers):
      if existing.provider == provider.provider:
        self._providers[i] = provider
        return
    self._providers.append(provider)

  def get(self, name: str) -> Optional[ModelProvider]:
    return next((p for p in self._providers if p.provider == name), None)

  def first(self) -> Optional[ModelProvider]:
    return self._providers[0] if self._providers else None

  def __len__(self) -> int:
    return len(self._providers)

  def __iter__(self) -> Iterator[ModelProvider]:
    return iter(self._providers)

  def __getitem__(self, index: int) -> ModelProvider:
    return self._providers[index]

  def resolve(self, llm=None) -> ResolvedModel:
    """
    Pick the provider, model, API key and endpoint for one call.

    Values given in llm (an LLMOptions) win; anything left unset comes from
    the named provider, or from the first registered provider.

    :raises ConfigurationError: naming the first missing value, checked in
      the order provider, model, API key, endpoint
    """
    if len(self._providers) == 0 and llm is None:
      raise ConfigurationError("No model provider added")

    provider_name = (llm.provider if llm else None) or (self.first().provider if self.first() else None)
    if not provider_name:
      raise ConfigurationError("No LLM provider chosen", field="provider")

    registered = self.get(provider_name)

    model = (llm.model if llm else None) or (registered.models[0] if registered and registered.models else "")
    if not model:
      raise ConfigurationError("No LLM model chosen", field="model")

    api_key = (llm.api_key if llm else None) or (registered.api_key if registered else "")
    if not api_key:
      raise ConfigurationError("No LLM API key chosen", field="apiKey")

    endpoint = (llm.endpoint if llm else None) or (registered.endpoint if registered else "")
    if not endpoint:
      raise ConfigurationError("No LLM endpoint chosen", field="endpoint")

    return ResolvedModel(
      provider=provider_name,
      model=model,
      api_key=api_key,
      endpoint=endpoint,
      system_prompt=(llm.system_prompt if llm else None) or "",
    )
