"""
CallAgent - Interactive Entry Point
===================================

A minimal chat loop for trying the agent against a real backend with the
demo service registered.

Run with:
    python -m callagent.main

Or after installing:
    callagent

Type "exit" or "quit" (or press Ctrl+D) to leave.
"""

import asyncio
import sys

from callagent.agent import Agent
from callagent.services.demo import DEMO_COMMANDS, create_demo_services
from callagent.utils.config import get_config
from callagent.utils.logger import Logger

main_logger = Logger("Main")

EXIT_WORDS = {"exit", "quit"}


def _print_fragment(fragment: str) -> None:
    print(fragment, end="", flush=True)


async def chat(agent: Agent, input_func=input) -> None:
    """
    Read user messages and print the streamed replies until the user quits.

    Args:
        agent: The agent to talk to
        input_func: Line reader, replaceable for tests
    """
    while True:
        try:
            line = await asyncio.to_thread(input_func, "> ")
        except EOFError:
            break

        message = line.strip()
        if not message:
            continue
        if message.lower() in EXIT_WORDS:
            break

        reply = await agent.submit(message, on_response=_print_fragment)
        if reply.startswith("error: "):
            print(reply)
        else:
            print()


async def main():
    main_logger.info("Starting CallAgent...")

    try:
        config = get_config()
        agent = Agent(
            config=config,
            services=create_demo_services(),
            commands=DEMO_COMMANDS,
        )
    except ValueError as e:
        main_logger.error("Failed to start agent", e)
        sys.exit(1)

    main_logger.info("Agent is ready. Type 'exit' to quit.")
    await chat(agent)
    main_logger.info("Goodbye")


def run():
    """Synchronous entry point for the `callagent` command."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
