import copy
import os
from datetime import datetime, UTC

from colorlog import ColoredFormatter

GREY = "\033[38;5;245m"
YELLOW = "\033[33m"
RESET = "\033[0m"

# Keyed by the root logger name.
LOGGER_COLORS = {
  "daemon": "\033[38;5;75m",
  "lifecycle": "\033[36m",
  "tool": "\033[35m",
  "model": "\033[38;5;179m",
  "hook": "\033[38;5;114m",
}


class Formatter(ColoredFormatter):
  """
  UTC timestamps, "::" separated logger names and a coloured name per daemon
  logger. Colours are dropped when NO_COLOR is set.
  """

  def __init__(self, *args, **kwargs):
    kwargs.setdefault("datefmt", "%Y-%m-%dT%H:%M:%S.%fZ")
    kwargs.setdefault("no_color", bool(os.environ.get("NO_COLOR")))
    super().__init__(*args, **kwargs)
    self.plain = kwargs["no_color"]

  def _paint(self, color: str, text: str) -> str:
    return text if self.plain else f"{color}{text}{RESET}"

  def format(self, record):
    # Other handlers may format the same record, so decorate a copy
    record = copy.copy(record)
    if record.levelname == "WARNING":
      record.levelname = self._paint(YELLOW, " WARN")
    root = record.name.split(".", 1)[0]
    record.name = self._paint(LOGGER_COLORS.get(root, GREY), record.name.replace(".", "::"))
    return super().format(record)

  def formatTime(self, record, datefmt=None) -> str:
    try:
      timestamp = datetime.fromtimestamp(record.created, UTC).strftime(datefmt or self.default_time_format)
    except (OverflowError, OSError, ValueError):
      return f"{record.created}"
    return self._paint(GREY, timestamp)
