from typing import Any, Callable, Dict, Iterator, Optional

from ..errors import ValidationError
from ..logs import get_logger

logger = get_logger("hook")

Capability = Callable[[Dict[str, Any]], Any]


class DaemonCapabilities:
  """
  Internal capabilities a tool server may ask the daemon to run through a hook.

  Capabilities are looked up by name. Running an unknown capability produces
  no output and is not an error.
  """

  def __init__(self):
    self._capabilities: Dict[str, Capability] = {}

  @staticmethod
  def for_daemon(daemon) -> "DaemonCapabilities":
    capabilities = DaemonCapabilities()
    capabilities.register("sign", lambda args: daemon.sign(_payload(args)))
    return capabilities

  def register(self, name: str, capability: Capability):
    self._capabilities[name] = capability

  def __contains__(self, name: str) -> bool:
    return name in self._capabilities

  def __iter__(self) -> Iterator[str]:
    return iter(self._capabilities)

  def run(self, name: str, args: Optional[Dict[str, Any]]) -> Optional[Any]:
    capability = self._capabilities.get(name)
    if capability is None:
      logger.warning(f"Hook requested unknown daemon tool '{name}', no output produced")
      return None
    return capability(args or {})


def _payload(args: Dict[str, Any]) -> str:
  payload = args.get("payload")
  if not isinstance(payload, str):
    raise ValidationError("payload", "string")
  return payload
