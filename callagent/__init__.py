"""
CallAgent - Streaming Function-Calling Agent
============================================

A small orchestration layer over an OpenAI-compatible chat completion API:

- Streams the model's text to the caller as it is generated
- Runs the function calls the model requests against local services
- Feeds the results back until the model answers in plain text

Usage:
    from callagent import Agent
    from callagent.services.demo import DEMO_COMMANDS, create_demo_services

    agent = Agent(services=create_demo_services(), commands=DEMO_COMMANDS)
    reply = await agent.submit("What time is it?")
"""

from callagent.agent import Agent
from callagent.services import CommandDescriptor, CommandRegistry, CommandResult

__version__ = "1.0.0"

__all__ = ["Agent", "CommandDescriptor", "CommandRegistry", "CommandResult", "__version__"]
