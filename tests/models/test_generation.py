import json

import pytest

from spaceman_daemon import SYSTEM_PROMPT, ToolRole, UnsupportedProviderError
from spaceman_daemon.models import ResolvedModel, create_prompt, generate_text, generate_text_with_tools
from spaceman_daemon.models.clients import OpenAICompatibleClient, pick_client
from spaceman_daemon.tools import OndemandTool, ParameterType, RemoteToolClient, ToolParameter, ToolProvider
from mock_utils import FakeSessionFactory, MockModelClient

SERVER = "http://tools.local"


def hello_tool(factory: FakeSessionFactory) -> OndemandTool:
  factory.add_tool(SERVER, "hello", lambda args: f"Hello {args['name']}")
  provider = ToolProvider(
    server_url=SERVER,
    tool_name="hello",
    role=ToolRole.ONDEMAND,
    description="Say hello",
    parameters=[ToolParameter(name="name", type=ParameterType.STRING)],
  )
  return OndemandTool(provider, RemoteToolClient(session_factory=factory))


async def collect(stream):
  return [output async for output in stream]


class TestPrompt:
  def test_prompt_sections(self):
    prompt = create_prompt("Spaceman", "You are Spaceman.", "hi", ["fact one", "fact two"], ["hello: Say hello"])

    assert "# Name\nSpaceman\n" in prompt
    assert "# Identity Prompt\nYou are Spaceman.\n" in prompt
    assert "# User Message\nhi\n" in prompt
    assert "# Context\nfact one\nfact two\n" in prompt
    assert "# Tools\nhello: Say hello\n" in prompt

  def test_prompt_is_deterministic(self):
    assert create_prompt("a", "b", "c", [], []) == create_prompt("a", "b", "c", [], [])


class TestGenerateText:
  @pytest.mark.asyncio
  async def test_returns_the_first_choice(self):
    client = MockModelClient([{"content": "Hi there"}])

    assert await generate_text(client, "Be brief", "prompt") == "Hi there"

    request = client.requests[0]
    assert request["messages"] == [
      {"role": "system", "content": "Be brief"},
      {"role": "user", "content": "prompt"},
    ]
    assert request["temperature"] == 0.2
    assert request["max_completion_tokens"] == 1000
    assert request["stream"] is False

  @pytest.mark.asyncio
  async def test_empty_system_prompt_uses_the_default(self):
    client = MockModelClient([{"content": "ok"}])

    await generate_text(client, "", "prompt")

    assert client.requests[0]["messages"][0]["content"] == SYSTEM_PROMPT

  @pytest.mark.asyncio
  async def test_empty_response_is_empty_text(self):
    client = MockModelClient([{"content": None}])
    assert await generate_text(client, None, "prompt") == ""


class TestGenerateTextWithTools:
  @pytest.mark.asyncio
  async def test_yields_cumulative_output(self):
    client = MockModelClient([{"content": "Hey"}])

    outputs = await collect(generate_text_with_tools(client, None, "prompt", []))

    assert outputs == ["H", "He", "Hey"]
    assert "tools" not in client.requests[0] or client.requests[0]["tools"] == []

  @pytest.mark.asyncio
  async def test_model_calls_a_tool_then_answers(self):
    factory = FakeSessionFactory()
    client = MockModelClient(
      [
        {"tool_calls": [{"name": "hello", "arguments": '{"name": "World"}'}]},
        {"content": "Done"},
      ]
    )

    outputs = await collect(generate_text_with_tools(client, None, "prompt", [hello_tool(factory)]))

    assert outputs[-1] == "Done"
    assert factory.calls == [(f"{SERVER}/sse", "hello", {"name": "World"})]

    tool_spec = client.requests[0]["tools"][0]
    assert tool_spec["function"]["name"] == "hello"

    second_messages = client.requests[1]["messages"]
    assistant, tool_message = second_messages[-2], second_messages[-1]
    assert assistant["role"] == "assistant"
    assert assistant["tool_calls"][0]["function"] == {"name": "hello", "arguments": '{"name": "World"}'}
    assert tool_message == {"role": "tool", "tool_call_id": "tool_call_0", "name": "hello", "content": "Hello World"}

  @pytest.mark.asyncio
  async def test_output_accumulates_across_steps(self):
    factory = FakeSessionFactory()
    client = MockModelClient(
      [
        {"content": "Let me check. ", "tool_calls": [{"name": "hello", "arguments": json.dumps({"name": "A"})}]},
        {"content": "Done"},
      ]
    )

    outputs = await collect(generate_text_with_tools(client, None, "prompt", [hello_tool(factory)]))

    assert outputs[-1] == "Let me check. Done"

  @pytest.mark.asyncio
  async def test_unknown_tool_is_reported_to_the_model(self):
    client = MockModelClient([{"tool_calls": [{"name": "missing", "arguments": "{}"}]}, {"content": "Sorry"}])

    outputs = await collect(generate_text_with_tools(client, None, "prompt", []))

    assert outputs[-1] == "Sorry"
    assert client.requests[1]["messages"][-1]["content"] == "Tool 'missing' not found"

  @pytest.mark.asyncio
  async def test_steps_are_bounded(self):
    factory = FakeSessionFactory()
    looping = [{"tool_calls": [{"name": "hello", "arguments": '{"name": "again"}'}]} for _ in range(5)]
    client = MockModelClient(looping)

    await collect(generate_text_with_tools(client, None, "prompt", [hello_tool(factory)], max_steps=3))

    assert client.call_count == 3
    assert len(factory.calls_to("hello")) == 3


class TestPickClient:
  @pytest.mark.parametrize("provider", ["openai", "openrouter"])
  def test_supported_providers(self, provider):
    client = pick_client(ResolvedModel(provider=provider, model="m", api_key="k", endpoint="https://example.com/v1"))

    assert isinstance(client, OpenAICompatibleClient)
    assert client.provider == provider
    assert client.name == "m"

  def test_unsupported_provider(self):
    with pytest.raises(UnsupportedProviderError, match="Unsupported provider: anthropic"):
      pick_client(ResolvedModel(provider="anthropic", model="m", api_key="k", endpoint="e"))
