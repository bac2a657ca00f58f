from .logs import (
  info,
  debug,
  error,
  warning,
  set_log_level,
  set_log_levels,
  get_log_levels,
  get_logger,
  InfoContext,
  DebugContext,
)
from .formatter import Formatter
from logging import Logger

__all__ = [
  "Formatter",
  "Logger",
  "info",
  "debug",
  "warning",
  "error",
  "get_logger",
  "set_log_level",
  "set_log_levels",
  "get_log_levels",
  "InfoContext",
  "DebugContext",
]
