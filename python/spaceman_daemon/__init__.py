from .daemon import Daemon
from .errors import (
  DaemonError,
  ConfigurationError,
  ValidationError,
  DiscoveryError,
  UnsupportedProviderError,
  UnexpectedFormatError,
  KeyMissingError,
  PipelineError,
  GenerationTimeoutError,
)
from .logs import (
  info,
  warning,
  error,
  debug,
  set_log_level,
  set_log_levels,
  get_logger,
  InfoContext,
  DebugContext,
)
from .identity import Character, Keypair, verify
from .lifecycle import MessageLifecycle, LifecycleContainer, MessageOptions, LLMOptions, Stages
from .models import ModelProvider, SYSTEM_PROMPT
from .tools import ToolProvider, ToolParameter, ToolRole, ParameterType, RemoteToolClient, first_text, result_text
from .hooks import Hook, HookTool
from .config import get_model_provider_from_env
from .gather import gather
