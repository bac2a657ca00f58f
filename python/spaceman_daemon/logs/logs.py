from contextlib import contextmanager

import os
import logging.config
from typing import Optional, Protocol

DEFAULT_LOG_FORMAT = os.getenv(
  "DEFAULT_LOG_FORMAT", "%(asctime)s %(log_color)s%(levelname)5s%(reset)s %(name)-14s %(message)s"
)
FORMAT = DEFAULT_LOG_FORMAT + (" [%(pathname)s:%(lineno)d]" if os.getenv("DAEMON_LOG_SHOW_SOURCE", False) else "")

# Loggers owned by this package. Each one falls back to the "default" level.
DAEMON_LOGGERS = ["daemon", "lifecycle", "tool", "model", "hook"]

# Chatty third-party loggers that stay at WARNING unless asked otherwise.
QUIET_LOGGERS = ["asyncio", "httpx", "httpcore", "openai", "mcp", "mcp.client.sse"]

LOG_LEVELS: dict[str, str] = {}


def get_logging_config() -> dict[str, int | bool | dict | str | None]:
  if os.environ.get("DAEMON_LOGGING", "1") == "0":
    return {"version": 1, "disable_existing_loggers": False}

  if not LOG_LEVELS:
    set_log_levels(os.environ.get("DAEMON_LOG_LEVELS"))
  return create_logging_config(LOG_LEVELS, FORMAT)


def set_log_level(module_name: str, level: str):
  """
  Set the log level for a specific logger, e.g. set_log_level("tool", "debug").
  """
  global LOG_LEVELS
  if not LOG_LEVELS:
    LOG_LEVELS = create_log_levels(os.environ.get("DAEMON_LOG_LEVELS"))
  LOG_LEVELS[module_name] = level.upper()
  logging.config.dictConfig(create_logging_config(LOG_LEVELS, FORMAT))


def set_log_levels(log_levels: Optional[str]):
  global LOG_LEVELS
  LOG_LEVELS = create_log_levels(log_levels)


def get_log_levels() -> dict[str, str]:
  return dict(LOG_LEVELS)


def create_logging_config(levels: dict, log_format: str) -> dict[str, int | bool | dict | str | None]:
  loggers = {}
  for name in QUIET_LOGGERS:
    loggers[name] = {
      "handlers": ["default"],
      "level": levels.get(name, "WARNING"),
      "propagate": False,
    }
  for name in DAEMON_LOGGERS:
    loggers[name] = {
      "handlers": ["default"],
      "level": levels.get(name) or levels.get("default"),
      "propagate": False,
    }

  return {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
      "default": {
        "()": "spaceman_daemon.logs.formatter.Formatter",
        "format": log_format,
        "log_colors": {
          "DEBUG": "blue",
          "INFO": "green",
          "WARNING": "yellow",
          "ERROR": "red",
          "CRITICAL": "bold_red",
        },
      },
    },
    "handlers": {
      "default": {
        "level": levels.get("default"),
        "formatter": "default",
        "class": "logging.StreamHandler",
      },
    },
    "loggers": loggers,
    "root": {"level": levels.get("default"), "handlers": ["default"]},
  }


def create_log_levels(log_levels: Optional[str]) -> dict[str, str]:
  """
  Parse a level specification such as "debug" or "info,tool=debug,httpx=info".

  A bare level sets the default; "name=level" pairs set a single logger.
  """
  result = {"default": "INFO"}
  if log_levels is None:
    return result

  for level in log_levels.split(","):
    level = level.strip()
    if not level:
      continue
    key_value = level.split("=")
    if len(key_value) == 1:
      result["default"] = level.upper()
    else:
      result[key_value[0].strip()] = key_value[1].strip().upper()
  return result


_configured = False


def get_logger(logger_name) -> logging.Logger:
  global _configured
  if not _configured:
    logging.config.dictConfig(get_logging_config())
    _configured = True
  return logging.getLogger(logger_name)


def info(msg, *args, **kwargs):
  logging.getLogger("daemon").info(msg, *args, stacklevel=2, **kwargs)


def warning(msg, *args, **kwargs):
  logging.getLogger("daemon").warning(msg, *args, stacklevel=2, **kwargs)


def debug(msg, *args, **kwargs):
  logging.getLogger("daemon").debug(msg, *args, stacklevel=2, **kwargs)


def error(msg, *args, **kwargs):
  logging.getLogger("daemon").error(msg, *args, stacklevel=2, **kwargs)


class LoggerAware(Protocol):
  logger: logging.Logger


class InfoContext(LoggerAware):
  @contextmanager
  def info(self, before_msg, after_msg):
    self.logger.info(before_msg)
    try:
      yield
    except Exception as e:
      self.logger.info(f"{before_msg} failed: {e}")
      raise
    self.logger.info(after_msg)


class DebugContext(LoggerAware):
  @contextmanager
  def debug(self, before_msg, after_msg):
    self.logger.debug(before_msg)
    try:
      yield
    except Exception as e:
      self.logger.debug(f"{before_msg} failed: {e}")
      raise
    self.logger.debug(after_msg)
