from .lifecycle import MessageLifecycle
from .container import LifecycleContainer
from .options import MessageOptions, LLMOptions, Stages

__all__ = ["MessageLifecycle", "LifecycleContainer", "MessageOptions", "LLMOptions", "Stages"]
