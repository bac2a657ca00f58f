from .provider import ModelProvider, ModelRegistry, ResolvedModel
from .prompt import SYSTEM_PROMPT, create_prompt
from .generation import generate_text, generate_text_with_tools

__all__ = [
  "ModelProvider",
  "ModelRegistry",
  "ResolvedModel",
  "SYSTEM_PROMPT",
  "create_prompt",
  "generate_text",
  "generate_text_with_tools",
]
