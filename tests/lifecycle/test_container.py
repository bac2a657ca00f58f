import asyncio
from unittest.mock import patch

import pytest

from spaceman_daemon import LifecycleContainer, MessageLifecycle


class TestLifecycleContainer:
  def test_starts_empty(self):
    container = LifecycleContainer()

    assert container.value == MessageLifecycle()
    assert container.publish_count == 0

  def test_update_replaces_fields_and_keeps_the_rest(self):
    container = LifecycleContainer()
    container.publish(MessageLifecycle(message="hi", daemon_name="Spaceman"))

    before = container.value
    after = container.update(output="hello")

    assert after.message == "hi"
    assert after.daemon_name == "Spaceman"
    assert after.output == "hello"
    assert before.output is None
    assert container.get_value() is after

  def test_late_subscriber_gets_the_current_value(self):
    container = LifecycleContainer()
    container.publish(MessageLifecycle(message="hi"))
    container.update(output="final")

    seen = []
    container.subscribe(seen.append)

    assert [v.output for v in seen] == ["final"]

  def test_subscribers_see_every_publish(self):
    container = LifecycleContainer()
    seen = []
    unsubscribe = container.subscribe(lambda value: seen.append(value.output))

    container.update(output="a")
    container.update(output="ab")
    unsubscribe()
    container.update(output="abc")

    assert seen == [None, "a", "ab"]

  def test_multiple_subscribers(self):
    container = LifecycleContainer()
    first, second = [], []
    container.subscribe(first.append)
    container.subscribe(second.append)

    container.update(message="hi")

    assert len(first) == len(second) == 2

  def test_failing_subscriber_does_not_stop_delivery(self):
    container = LifecycleContainer()
    seen = []

    def broken(value):
      raise RuntimeError("subscriber bug")

    container.subscribe(broken)
    container.subscribe(lambda value: seen.append(value.output))

    with patch("spaceman_daemon.lifecycle.container.logger") as logger:
      container.update(output="a")
      container.update(output="ab")

    assert seen == [None, "a", "ab"]
    assert container.value.output == "ab"
    assert container.publish_count == 2
    assert logger.exception.call_count == 2

  @pytest.mark.asyncio
  async def test_updates_coalesce_to_the_latest_value(self):
    container = LifecycleContainer()
    container.publish(MessageLifecycle(output=""))
    updates = container.updates()

    first = await anext(updates)
    container.update(output="a")
    container.update(output="ab")
    second = await anext(updates)

    assert first.output == ""
    assert second.output == "ab"
    await updates.aclose()

  @pytest.mark.asyncio
  async def test_updates_follow_a_producer(self):
    container = LifecycleContainer()
    received = []

    async def consume():
      async for value in container.updates():
        received.append(value.output)
        if value.output == "done":
          return

    consumer = asyncio.create_task(consume())
    await asyncio.sleep(0)
    for output in ["a", "b", "done"]:
      container.update(output=output)
      await asyncio.sleep(0)
    await asyncio.wait_for(consumer, timeout=1)

    assert received[-1] == "done"

  def test_to_dict_omits_unset_fields_and_uses_camel_case(self):
    lifecycle = MessageLifecycle(daemon_name="Spaceman", message_id="abc", generated_prompt="p", context=[])

    assert lifecycle.to_dict() == {"daemonName": "Spaceman", "messageId": "abc", "context": [], "generatedPrompt": "p"}
