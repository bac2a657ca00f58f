import json

import pytest
from mcp.types import CallToolResult, ImageContent

from spaceman_daemon import DiscoveryError, ToolRole, ValidationError, first_text
from spaceman_daemon.tools import ParameterType, RemoteToolClient, ToolParameter, ToolProvider, session_url
from mock_utils import FakeSessionFactory, add_hello_server, create_daemon, text_result

SERVER = "http://tools.local"


def add_numbers_tool() -> ToolProvider:
  return ToolProvider(
    server_url=SERVER,
    tool_name="add",
    role=ToolRole.ONDEMAND,
    parameters=[
      ToolParameter(name="a", type=ParameterType.NUMBER),
      ToolParameter(name="b", type=ParameterType.NUMBER),
    ],
  )


class TestSessionUrl:
  def test_suffix_is_appended(self):
    assert session_url("http://tools.local") == "http://tools.local/sse"

  def test_suffix_is_not_doubled(self):
    assert session_url("http://tools.local/sse") == "http://tools.local/sse"


class TestInvoke:
  @pytest.mark.asyncio
  async def test_invoke_calls_the_tool_and_closes_the_session(self):
    factory = FakeSessionFactory()
    factory.add_tool(SERVER, "add", lambda args: str(args["a"] + args["b"]))
    client = RemoteToolClient(session_factory=factory)

    result = await client.invoke(add_numbers_tool(), {"a": 2, "b": 3})

    assert first_text(result) == "5"
    assert factory.calls == [(f"{SERVER}/sse", "add", {"a": 2, "b": 3})]
    assert factory.opened == [f"{SERVER}/sse"]
    assert factory.closed == [f"{SERVER}/sse"]

  @pytest.mark.asyncio
  async def test_invalid_arguments_make_no_remote_call(self):
    factory = FakeSessionFactory()
    factory.add_tool(SERVER, "add", lambda args: "unreachable")
    client = RemoteToolClient(session_factory=factory)

    with pytest.raises(ValidationError, match="a must be a number"):
      await client.invoke(add_numbers_tool(), {"a": "2", "b": 3})

    assert factory.call_count == 0
    assert factory.opened == []

  @pytest.mark.asyncio
  async def test_each_call_opens_a_fresh_session(self):
    factory = FakeSessionFactory()
    factory.add_tool(SERVER, "add", lambda args: "ok")
    client = RemoteToolClient(session_factory=factory)

    await client.invoke(add_numbers_tool(), {"a": 1, "b": 1})
    await client.invoke(add_numbers_tool(), {"a": 1, "b": 1})

    assert len(factory.opened) == 2
    assert len(factory.closed) == 2

  @pytest.mark.asyncio
  async def test_session_is_closed_when_the_tool_fails(self):
    def broken(args):
      raise RuntimeError("tool crashed")

    factory = FakeSessionFactory()
    factory.add_tool(SERVER, "add", broken)
    client = RemoteToolClient(session_factory=factory)

    with pytest.raises(RuntimeError, match="tool crashed"):
      await client.invoke(add_numbers_tool(), {"a": 1, "b": 1})

    assert factory.closed == [f"{SERVER}/sse"]

  @pytest.mark.asyncio
  async def test_daemon_call_tool_validates_first(self):
    factory = FakeSessionFactory()
    daemon = create_daemon(factory)

    with pytest.raises(ValidationError):
      await daemon.call_tool(add_numbers_tool(), {"a": 1, "b": True})

    assert factory.call_count == 0


class TestDiscovery:
  @pytest.mark.asyncio
  async def test_discovered_hello_tool_is_registered_and_callable(self):
    factory = FakeSessionFactory()
    add_hello_server(factory, SERVER)
    daemon = create_daemon(factory)

    await daemon.add_all_tools_by_provider(SERVER)

    tools = list(daemon.tools)
    assert len(tools) == 1
    hello = tools[0]
    assert hello.tool_name == "hello"
    assert hello.server_url == SERVER
    assert hello.role == ToolRole.ONDEMAND
    assert hello.parameters == [ToolParameter(name="name", type=ParameterType.STRING, description="Who to greet")]

    result = await daemon.call_tool(hello, {"name": "World"})
    assert result.content[0].text == "Hello World"

  @pytest.mark.asyncio
  async def test_discovery_calls_the_server_info_tool_without_arguments(self):
    factory = FakeSessionFactory()
    add_hello_server(factory, SERVER)
    client = RemoteToolClient(session_factory=factory)

    await client.discover(SERVER)

    assert factory.calls == [(f"{SERVER}/sse", "getDaemonServerInfo", {})]

  @pytest.mark.asyncio
  async def test_error_text_fails_discovery_verbatim(self):
    factory = FakeSessionFactory()
    factory.add_tool(SERVER, "getDaemonServerInfo", lambda args: "Error: server is misconfigured")
    client = RemoteToolClient(session_factory=factory)

    with pytest.raises(DiscoveryError) as exc_info:
      await client.discover(SERVER)

    assert str(exc_info.value) == "Error: server is misconfigured"
    assert exc_info.value.response == "Error: server is misconfigured"
    assert exc_info.value.server_url == SERVER

  @pytest.mark.asyncio
  async def test_malformed_json_fails_discovery(self):
    factory = FakeSessionFactory()
    factory.add_tool(SERVER, "getDaemonServerInfo", lambda args: "[{not json")
    client = RemoteToolClient(session_factory=factory)

    with pytest.raises(DiscoveryError, match="invalid server info"):
      await client.discover(SERVER)

  @pytest.mark.asyncio
  async def test_malformed_descriptor_fails_discovery(self):
    factory = FakeSessionFactory()
    factory.add_tool(SERVER, "getDaemonServerInfo", lambda args: json.dumps([{"toolName": "x", "type": "sideways"}]))
    client = RemoteToolClient(session_factory=factory)

    with pytest.raises(DiscoveryError):
      await client.discover(SERVER)

  @pytest.mark.asyncio
  async def test_result_without_text_fails_discovery(self):
    factory = FakeSessionFactory()
    factory.add_tool(
      SERVER,
      "getDaemonServerInfo",
      lambda args: CallToolResult(content=[ImageContent(type="image", data="AAAA", mimeType="image/png")]),
    )
    client = RemoteToolClient(session_factory=factory)

    with pytest.raises(DiscoveryError, match="no server info"):
      await client.discover(SERVER)

  @pytest.mark.asyncio
  async def test_discovery_of_several_roles(self):
    descriptors = [
      {"serverUrl": SERVER, "toolName": "memories", "type": "context", "parameters": []},
      {"serverUrl": SERVER, "toolName": "post", "type": "action", "description": "Post it", "parameters": []},
      {"serverUrl": SERVER, "toolName": "store", "type": "postProcess", "parameters": []},
    ]
    factory = FakeSessionFactory()
    factory.add_server_info(SERVER, descriptors)
    client = RemoteToolClient(session_factory=factory)

    tools = await client.discover(SERVER)

    assert [t.role for t in tools] == [ToolRole.CONTEXT, ToolRole.ACTION, ToolRole.POST_PROCESS]
    assert tools[1].description == "Post it"


class TestResultText:
  def test_first_text_of_dict_results(self):
    assert first_text({"content": [{"type": "text", "text": "hi"}]}) == "hi"
    assert first_text({"content": []}) is None

  def test_first_text_of_mcp_results(self):
    assert first_text(text_result("one", "two")) == "one"
