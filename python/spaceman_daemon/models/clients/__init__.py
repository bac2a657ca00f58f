from .openai_compatible import OpenAICompatibleClient, SUPPORTED_PROVIDERS, pick_client

__all__ = ["OpenAICompatibleClient", "SUPPORTED_PROVIDERS", "pick_client"]
