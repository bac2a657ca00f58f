import asyncio
from dataclasses import replace
from typing import AsyncIterator, Callable, List, Optional

from ..logs import get_logger
from .lifecycle import MessageLifecycle

logger = get_logger("lifecycle")

Observer = Callable[[MessageLifecycle], None]


class LifecycleContainer:
  """
  Holds the latest MessageLifecycle of one message and multicasts every
  published value.

  Observers registered with subscribe() are called synchronously on every
  publish and, on subscription, with the current value, so a late subscriber
  never misses the latest state. An observer that raises is logged and does
  not affect the publisher or the other observers. Async consumers iterate updates(), which
  coalesces to the newest value when the consumer falls behind.

  The container is never closed: whoever holds it may keep publishing.
  """

  def __init__(self, value: Optional[MessageLifecycle] = None):
    self._value = value if value is not None else MessageLifecycle()
    self._observers: List[Observer] = []
    self._queues: List[asyncio.Queue] = []
    self.publish_count = 0

  @property
  def value(self) -> MessageLifecycle:
    return self._value

  def get_value(self) -> MessageLifecycle:
    return self._value

  def publish(self, value: MessageLifecycle):
    self._value = value
    self.publish_count += 1
    for observer in list(self._observers):
      self._deliver(observer, value)
    for queue in self._queues:
      if queue.full():
        queue.get_nowait()
      queue.put_nowait(value)

  def _deliver(self, observer: Observer, value: MessageLifecycle):
    # A failing observer is reported and skipped; the publisher and the other observers carry on.
    try:
      observer(value)
    except Exception:
      logger.exception(f"[LIFECYCLE] observer {observer!r} failed on message={value.message_id}")

  def update(self, **changes) -> MessageLifecycle:
    """Publish a copy of the current value with the given fields replaced."""
    value = replace(self._value, **changes)
    logger.debug(f"[LIFECYCLE] message={value.message_id} updated: {', '.join(changes)}")
    self.publish(value)
    return value

  def subscribe(self, observer: Observer) -> Callable[[], None]:
    """
    Register an observer and immediately deliver the current value to it.

    :return: A function that removes the observer
    """
    self._observers.append(observer)
    self._deliver(observer, self._value)

    def unsubscribe():
      if observer in self._observers:
        self._observers.remove(observer)

    return unsubscribe

  async def updates(self) -> AsyncIterator[MessageLifecycle]:
    """
    Iterate over published values, starting with the current one.

    The iterator never ends on its own; stop consuming it to unsubscribe.
    """
    queue: asyncio.Queue = asyncio.Queue(maxsize=1)
    queue.put_nowait(self._value)
    self._queues.append(queue)
    try:
      while True:
        yield await queue.get()
    finally:
      self._queues.remove(queue)
