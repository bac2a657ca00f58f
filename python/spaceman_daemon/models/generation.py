"""
Text generation from a generated prompt.

Two strategies: generate_text makes a single blocking completion, and
generate_text_with_tools streams a completion while letting the model call
ondemand tools, yielding the text produced so far after every delta.
"""

import time
from contextlib import aclosing
from typing import AsyncIterator, Dict, List, Optional, Sequence

from ..gather import gather
from ..logs import get_logger
from ..tools.protocol import InvokableTool
from .prompt import system_prompt_or_default

logger = get_logger("model")

TEMPERATURE = 0.2
MAX_COMPLETION_TOKENS = 1000
DEFAULT_MAX_STEPS = 10


def _messages(system_prompt: Optional[str], prompt: str) -> List[dict]:
  return [
    {"role": "system", "content": system_prompt_or_default(system_prompt)},
    {"role": "user", "content": prompt},
  ]


async def generate_text(client, system_prompt: Optional[str], prompt: str) -> str:
  response = await client.complete_chat(
    _messages(system_prompt, prompt),
    stream=False,
    temperature=TEMPERATURE,
    max_completion_tokens=MAX_COMPLETION_TOKENS,
  )
  if not response.choices:
    return ""
  return response.choices[0].message.content or ""


def _accumulate_tool_calls(accumulated_tool_calls: List[Optional[dict]], delta_tool_calls) -> None:
  for tc in delta_tool_calls:
    tc_index = tc.index if getattr(tc, "index", None) is not None else 0
    while len(accumulated_tool_calls) <= tc_index:
      accumulated_tool_calls.append(None)

    function = getattr(tc, "function", None)
    name = getattr(function, "name", None) if function else None
    arguments = getattr(function, "arguments", None) if function else None

    if accumulated_tool_calls[tc_index] is None:
      accumulated_tool_calls[tc_index] = {
        "id": tc.id if getattr(tc, "id", None) else f"call_{tc_index}",
        "type": "function",
        "function": {"name": name or "unknown", "arguments": arguments or ""},
      }
    else:
      # Name may arrive in a later chunk than the first fragment
      if name and accumulated_tool_calls[tc_index]["function"]["name"] == "unknown":
        accumulated_tool_calls[tc_index]["function"]["name"] = name
      if arguments:
        accumulated_tool_calls[tc_index]["function"]["arguments"] += arguments


async def _call_tool(tool_call: dict, tools: Dict[str, InvokableTool]) -> dict:
  tool_name = tool_call["function"]["name"]
  tool_args = tool_call["function"]["arguments"]

  logger.debug(f"[TOOL→CALL] id={tool_call['id']}, name={tool_name}")
  tool = tools.get(tool_name)
  if tool is None:
    content = f"Tool '{tool_name}' not found"
    logger.error(f"[TOOL←ERROR] {content}, id={tool_call['id']}")
    logger.debug(f"[TOOL←ERROR] Available tools: {list(tools.keys())}")
  else:
    start_time = time.time()
    content = await tool.invoke(tool_args)
    logger.debug(
      f"[TOOL←RESULT] id={tool_call['id']}, name={tool_name}, elapsed={time.time() - start_time:.3f}s, "
      f"result_length={len(content)}"
    )

  return {"role": "tool", "tool_call_id": tool_call["id"], "name": tool_name, "content": content}


async def generate_text_with_tools(
  client,
  system_prompt: Optional[str],
  prompt: str,
  tools: Sequence,
  max_steps: int = DEFAULT_MAX_STEPS,
) -> AsyncIterator[str]:
  """
  Stream a completion in which the model may call the given tools.

  Each step streams one completion. When the model asks for tools, they run
  concurrently and their results are sent back for the next step; a step
  without tool calls ends generation, as does reaching max_steps.

  :param tools: InvokableTool instances, each with a name attribute
  :yields: The cumulative text generated so far, across all steps
  """
  by_name = {tool.name: tool for tool in tools}
  specs = [await tool.spec() for tool in tools]
  messages = _messages(system_prompt, prompt)
  output = ""

  for step in range(max_steps):
    accumulated_tool_calls: List[Optional[dict]] = []
    step_content = ""

    stream = client.complete_chat(
      messages,
      stream=True,
      tools=specs,
      temperature=TEMPERATURE,
      max_completion_tokens=MAX_COMPLETION_TOKENS,
    )
    async with aclosing(stream):
      async for chunk in stream:
        if not chunk.choices:
          continue
        delta = chunk.choices[0].delta
        if getattr(delta, "content", None):
          step_content += delta.content
          output += delta.content
          yield output
        if getattr(delta, "tool_calls", None):
          _accumulate_tool_calls(accumulated_tool_calls, delta.tool_calls)

    tool_calls = [tc for tc in accumulated_tool_calls if tc is not None]
    if not tool_calls:
      return

    logger.debug(f"Step {step + 1}: model requested {len(tool_calls)} tool call(s)")
    messages.append({"role": "assistant", "content": step_content or None, "tool_calls": tool_calls})
    messages.extend(await gather(*[_call_tool(tc, by_name) for tc in tool_calls]))

  logger.warning(f"Stopped generation after reaching the limit of {max_steps} steps")
