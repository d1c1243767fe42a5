"""
Command Registry
================

Commands are the functions the model may ask the agent to call. Each one is
described to the backend by a CommandDescriptor:

- name: "<serviceName>-<functionName>", e.g. "test-echotest"
- description: What the function does (shown to the model)
- parameters: JSON Schema of the single argument object

The schema is only forwarded to the backend; arguments are never validated
against it locally. The implementation behind a name lives in the services
mapping handed to the agent (see callagent.agent.dispatch).

This module provides:
- CommandDescriptor for describing a command
- CommandResult, the outcome of a dispatched call
- CommandRegistry, the ordered list of descriptors sent with every request
"""

import json
from dataclasses import dataclass, field
from typing import Any, Iterable

from callagent.utils.logger import Logger

logger = Logger("Commands")

COMMAND_SEPARATOR = "-"


@dataclass
class CommandDescriptor:
    """
    Static description of a command.

    Example:
        CommandDescriptor(
            name="test-echotest",
            description="Echo a message back.",
            parameters={
                "type": "object",
                "properties": {
                    "echomessage": {"type": "string", "description": "Message to echo"}
                },
                "required": ["echomessage"]
            }
        )
    """
    name: str
    description: str
    parameters: dict = field(default_factory=dict)

    @property
    def service_name(self) -> str:
        return self.name.split(COMMAND_SEPARATOR, 1)[0]

    @property
    def function_name(self) -> str:
        return self.name.split(COMMAND_SEPARATOR, 1)[-1]

    def to_openai_function(self) -> dict:
        """Render as an entry of the chat completion `functions` list."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }


@dataclass
class CommandResult:
    """
    Outcome of executing a command.

    Attributes:
        command: The full command name
        success: Whether the function returned normally
        data: The function's return value
        error: Failure description if success is False
    """
    command: str
    success: bool
    data: Any = None
    error: str | None = None

    def to_message(self) -> str:
        """Content of the function-role message sent back to the model."""
        if not self.success:
            return f"Function {self.command} failed. Error: {self.error}"
        if self.data is None:
            return ""
        if isinstance(self.data, str):
            return self.data
        try:
            return json.dumps(self.data, default=str)
        except (TypeError, ValueError):
            return str(self.data)


class CommandRegistry:
    """
    Ordered collection of command descriptors.

    Example:
        registry = CommandRegistry(DEMO_COMMANDS)
        registry.register(CommandDescriptor("weather-current", "Current weather"))

        functions = registry.get_openai_functions()
    """

    def __init__(self, descriptors: Iterable[CommandDescriptor] = ()):
        self._commands: dict[str, CommandDescriptor] = {}
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: CommandDescriptor) -> None:
        """
        Register a command descriptor.

        Raises:
            ValueError: If the name is malformed or already registered
        """
        service, sep, function = descriptor.name.partition(COMMAND_SEPARATOR)
        if not (service and sep and function):
            raise ValueError(
                f"Command name '{descriptor.name}' must look like <service>-<function>"
            )
        if descriptor.name in self._commands:
            raise ValueError(f"Command '{descriptor.name}' is already registered")

        self._commands[descriptor.name] = descriptor
        logger.debug(f"Registered command: {descriptor.name}")

    def get(self, name: str) -> CommandDescriptor | None:
        return self._commands.get(name)

    def get_all(self) -> list[CommandDescriptor]:
        return list(self._commands.values())

    def list_names(self) -> list[str]:
        return list(self._commands.keys())

    def get_openai_functions(self) -> list[dict]:
        return [descriptor.to_openai_function() for descriptor in self._commands.values()]

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._commands


__all__ = [
    "COMMAND_SEPARATOR",
    "CommandDescriptor",
    "CommandResult",
    "CommandRegistry",
]
