import asyncio
import secrets
from contextlib import aclosing
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .config import get_generation_timeout, get_max_tool_steps
from .errors import GenerationTimeoutError, PipelineError
from .gather import gather
from .hooks import DaemonCapabilities, Hook, hooks_from_result
from .identity import Character, Keypair, default_identity_prompt
from .identity import signing
from .lifecycle import LifecycleContainer, MessageLifecycle, MessageOptions
from .logs import InfoContext, get_logger
from .models import ModelProvider, ModelRegistry, ResolvedModel, create_prompt, generate_text, generate_text_with_tools
from .models.clients import pick_client
from .tools import OndemandTool, RemoteToolClient, ToolProvider, ToolRegistry, ToolRole, result_text


def _now() -> str:
  return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _message_id() -> str:
  return secrets.token_urlsafe(16)


class Daemon(InfoContext):
  """
  An agent with an identity, a signing key, model providers and remote tools.

  Each call to message() or message_with_tools() runs one message through the
  pipeline:

    base → context → prompt → generation → actions → hooks → post-process

  and returns the LifecycleContainer that was published to along the way.
  Context, action (together with hooks) and post-process stages can be turned
  off per call through MessageOptions.stages.
  """

  def __init__(
    self,
    character: Character,
    keypair: Optional[Keypair] = None,
    tool_client: Optional[RemoteToolClient] = None,
    client_factory: Callable[[ResolvedModel], Any] = pick_client,
    generation_timeout: Optional[float] = None,
    max_tool_steps: Optional[int] = None,
  ):
    self.logger = get_logger("daemon")
    self.character = character
    self.keypair = keypair
    self.models = ModelRegistry()
    self.tools = ToolRegistry()
    self.tool_client = tool_client if tool_client is not None else RemoteToolClient()
    self.client_factory = client_factory
    self.generation_timeout = generation_timeout if generation_timeout is not None else get_generation_timeout()
    self.max_tool_steps = max_tool_steps if max_tool_steps is not None else get_max_tool_steps()
    self.capabilities = DaemonCapabilities.for_daemon(self)

  @property
  def pubkey(self) -> str:
    return self.keypair.public_key if self.keypair is not None else self.character.pubkey

  # === Registration ===

  def add_model_provider(self, provider: ModelProvider):
    self.models.add(provider)
    self.logger.debug(f"Registered model provider '{provider.provider}' with models {provider.models}")

  def add_tool(self, tool: ToolProvider):
    self.tools.add(tool)
    self.logger.debug(f"Registered {tool.role.value} tool '{tool.tool_name}' from '{tool.server_url}'")

  async def add_all_tools_by_provider(self, server_url: str) -> List[ToolProvider]:
    tools = await self.tool_client.discover(server_url)
    for tool in tools:
      self.add_tool(tool)
    return tools

  async def call_tool(self, tool: ToolProvider, args: Dict[str, Any]) -> Any:
    return await self.tool_client.invoke(tool, args)

  # === Signing ===

  def sign(self, payload: str) -> str:
    return signing.sign(self.keypair, payload)

  def generate_approval(
    self, message: str, created_at: str, message_id: str, channel_id: Optional[str] = None
  ) -> str:
    return signing.generate_approval(self.keypair, message, created_at, message_id, channel_id)

  # === Hooks ===

  async def hook(self, hook: Hook) -> Any:
    """
    Run the daemon capability a hook asks for and deliver its output to the
    hook's callback tool.

    :return: The callback tool's result
    """
    hook_output = self.capabilities.run(hook.daemon_tool, hook.daemon_args)
    args = {**hook.hook_tool.tool_args, "daemonOutput": hook_output}
    self.logger.debug(
      f"[HOOK] daemon_tool={hook.daemon_tool}, callback={hook.hook_tool.hook_server_url}/{hook.hook_tool.tool_name}"
    )
    return await self.tool_client.call(hook.hook_tool.hook_server_url, hook.hook_tool.tool_name, args)

  # === Messages ===

  async def message(self, message: str, options: Optional[MessageOptions] = None) -> LifecycleContainer:
    """
    Process a message with a single blocking completion.

    :raises PipelineError: when any stage fails; the container with the state
      published so far is available as the error's lifecycle attribute
    """
    options = options or MessageOptions()
    container = options.lifecycle if options.lifecycle is not None else LifecycleContainer()

    try:
      resolved = self.models.resolve(options.llm)
      self._publish_base(container, message, options)
      await self._context_stage(container, options)
      self._publish_prompt(container)

      client = self.client_factory(resolved)
      with self.info(f"Generating text with '{resolved.model}'", f"Generated text with '{resolved.model}'"):
        output = await generate_text(client, resolved.system_prompt, container.value.generated_prompt)
      container.update(output=output)

      await self._finish(container, options)
    except Exception as e:
      raise self._pipeline_error(e, container) from e

    return container

  async def message_with_tools(self, message: str, options: Optional[MessageOptions] = None) -> LifecycleContainer:
    """
    Process a message with a streaming completion that may call ondemand
    tools.

    Streaming, actions, hooks and post-processing together are bounded by
    the generation timeout. When it expires the in-flight work is cancelled
    and the container is returned in whatever state it reached; stages that
    had not completed stay unset.

    :raises PipelineError: when any stage fails before the timeout
    """
    options = options or MessageOptions()
    container = options.lifecycle if options.lifecycle is not None else LifecycleContainer()

    try:
      resolved = self.models.resolve(options.llm)
      ondemand = self.tools.by_role(ToolRole.ONDEMAND)
      self._publish_base(container, message, options, tools=[tool.describe() for tool in ondemand])
      await self._context_stage(container, options)
      self._publish_prompt(container)

      client = self.client_factory(resolved)
      stream = generate_text_with_tools(
        client,
        resolved.system_prompt,
        container.value.generated_prompt,
        [OndemandTool(tool, self.tool_client) for tool in ondemand],
        max_steps=self.max_tool_steps,
      )

      try:
        async with asyncio.timeout(self.generation_timeout) as deadline:
          async with aclosing(stream):
            async for output in stream:
              container.update(output=output)
          await self._finish(container, options)
      except TimeoutError:
        if not deadline.expired():
          raise
        self.logger.warning(f"{GenerationTimeoutError(self.generation_timeout, container.value.message_id)}")
        self.logger.info("Returning lifecycle anyway due to timeout")
    except Exception as e:
      raise self._pipeline_error(e, container) from e

    return container

  # === Stages ===

  def _publish_base(self, container: LifecycleContainer, message: str, options: MessageOptions, tools=None):
    message_id = _message_id()
    created_at = _now()
    container.publish(
      MessageLifecycle(
        daemon_pubkey=self.pubkey,
        daemon_name=self.character.name,
        message_id=message_id,
        created_at=created_at,
        approval=self.generate_approval(message, created_at, message_id, options.channel_id),
        message=message,
        channel_id=options.channel_id,
        identity_prompt=self.character.identity_prompt or default_identity_prompt(self.character.name),
        context=[],
        tools=tools or [],
        generated_prompt="",
        output="",
        hooks=[],
      )
    )
    self.logger.info(f"Processing message {message_id} for '{self.character.name}'")

  def _publish_prompt(self, container: LifecycleContainer):
    value = container.value
    container.update(
      generated_prompt=create_prompt(
        value.daemon_name or "",
        value.identity_prompt or "",
        value.message or "",
        [result_text(entry) for entry in value.context or []],
        value.tools or [],
      )
    )

  async def _context_stage(self, container: LifecycleContainer, options: MessageOptions):
    if options.stages.context:
      container.update(context=await self._run_role_stage(ToolRole.CONTEXT, container, options))

  async def _finish(self, container: LifecycleContainer, options: MessageOptions):
    if options.stages.actions:
      results = await self._run_role_stage(ToolRole.ACTION, container, options)
      hooks = [hook for result in results for hook in hooks_from_result(result)]
      if hooks:
        container.update(actions_log=results, hooks=[*(container.value.hooks or []), *hooks])
      else:
        container.update(actions_log=results)

      hooks_log = await gather(*[self.hook(hook) for hook in container.value.hooks or []])
      container.update(hooks_log=hooks_log)

    if options.stages.post_process:
      container.update(post_process_log=await self._run_role_stage(ToolRole.POST_PROCESS, container, options))

  async def _run_role_stage(self, role: ToolRole, container: LifecycleContainer, options: MessageOptions) -> List[Any]:
    match role:
      case ToolRole.CONTEXT | ToolRole.ACTION | ToolRole.POST_PROCESS:
        tools = self.tools.by_role(role)
      case ToolRole.ONDEMAND:
        raise ValueError("Ondemand tools are called by the model, not by a pipeline stage")

    if not tools:
      return []

    lifecycle = container.value.to_dict()
    with self.info(f"Calling {len(tools)} {role.value} tool(s)", f"Called {len(tools)} {role.value} tool(s)"):
      return await gather(
        *[
          self.call_tool(tool, {"lifecycle": lifecycle, "args": options.tool_args.get(tool.key, {})})
          for tool in tools
        ]
      )

  def _pipeline_error(self, e: Exception, container: LifecycleContainer) -> PipelineError:
    self.logger.error(f"Message pipeline failed: {e}")
    return PipelineError(e, container)
