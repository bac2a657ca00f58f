"""
Send one message through a daemon that uses the hello tool server.

Start examples/hello_server.py first, set OPENAI_API_KEY (or the DAEMON_LLM_*
variables), then run:
  python examples/chat.py "Please greet the world"
"""

import asyncio
import sys

from spaceman_daemon import Character, Daemon, Keypair, PipelineError, get_logger, get_model_provider_from_env

logger = get_logger("daemon")

TOOL_SERVER = "http://localhost:8000"


async def main(text: str):
  provider = get_model_provider_from_env()
  if provider is None:
    sys.exit("Set OPENAI_API_KEY or DAEMON_LLM_API_KEY to talk to a model")

  daemon = Daemon(Character(name="Spaceman"), keypair=Keypair.generate())
  daemon.add_model_provider(provider)
  await daemon.add_all_tools_by_provider(TOOL_SERVER)

  try:
    lifecycle = await daemon.message_with_tools(text)
  except PipelineError as e:
    logger.error(f"{e}")
    sys.exit(1)

  value = lifecycle.value
  logger.info(f"Message {value.message_id} approved with {value.approval}")
  print(value.output)


if __name__ == "__main__":
  asyncio.run(main(" ".join(sys.argv[1:]) or "Say hello to the world"))
