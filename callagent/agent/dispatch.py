"""
Service Dispatch
================

Executes the function calls requested by the model.

A command name has the form "<serviceName>-<functionName>". The dispatcher
splits it on the first "-", looks the service up in the mapping supplied by
the embedding application and then the function on that service:

    services = {"test": DemoService()}
    "test-echotest"  ->  services["test"].echotest(arguments)

Services may be plain objects (functions found by attribute) or mappings
(functions found by key). Functions receive one dict with the parsed
arguments and may be sync or async.

execute() never raises for a command failure. Malformed names, unknown
commands, bad arguments and exceptions raised by the function all come back
as a failed CommandResult, so the agent can hand the failure to the model
as the function's result. Each call is made at most once, with no retries
and no timeout.
"""

import inspect
import json
from typing import Any, Callable, Mapping

from callagent.exceptions import (
    CommandError,
    MalformedArgumentsError,
    MalformedCommandError,
    ServiceExecutionError,
    UnresolvableCommandError,
)
from callagent.services import COMMAND_SEPARATOR, CommandResult
from callagent.utils.logger import Logger

logger = Logger("Dispatch")


def parse_command_name(command: str) -> tuple[str, str]:
    """
    Split a command name into (service_name, function_name).

    Raises:
        MalformedCommandError: If either part is missing
    """
    service_name, sep, function_name = (command or "").partition(COMMAND_SEPARATOR)
    if not (service_name and sep and function_name):
        raise MalformedCommandError(command)
    return service_name, function_name


def parse_arguments(command: str, payload: str | None) -> dict[str, Any]:
    """
    Decode the serialized arguments of a function call.

    An empty payload means "no arguments".

    Raises:
        MalformedArgumentsError: If the payload is not a JSON object
    """
    if payload is None or not payload.strip():
        return {}
    try:
        arguments = json.loads(payload)
    except json.JSONDecodeError as e:
        raise MalformedArgumentsError(
            command, f"Arguments for '{command}' are not valid JSON: {e}"
        ) from e
    if not isinstance(arguments, dict):
        raise MalformedArgumentsError(
            command,
            f"Arguments for '{command}' must be a JSON object, got {type(arguments).__name__}",
        )
    return arguments


class ServiceDispatch:
    """
    Resolves command names to service functions and runs them.

    Example:
        dispatch = ServiceDispatch({"test": DemoService()})

        result = await dispatch.execute("test-echotest", '{"echomessage": "hi"}')
        result.success       # True
        result.to_message()  # "hi"
    """

    def __init__(self, services: Mapping[str, Any] | None = None, log: Logger | None = None):
        self.services: Mapping[str, Any] = services or {}
        self._log = log or logger

    def resolve(self, command: str) -> Callable[..., Any]:
        """
        Find the function behind a command name.

        Raises:
            MalformedCommandError: If the name has no service/function parts
            UnresolvableCommandError: If the service or function is unknown
        """
        service_name, function_name = parse_command_name(command)

        service = self.services.get(service_name)
        if service is None:
            raise UnresolvableCommandError(command, f"Unknown service '{service_name}'")

        # Private attributes are never exposed to the model
        if function_name.startswith("_"):
            function = None
        elif isinstance(service, Mapping):
            function = service.get(function_name)
        else:
            function = getattr(service, function_name, None)

        if function is None or not callable(function):
            raise UnresolvableCommandError(
                command, f"Service '{service_name}' has no function '{function_name}'"
            )
        return function

    async def execute(self, command: str, arguments: str | dict | None) -> CommandResult:
        """
        Execute one command.

        Args:
            command: Full command name, "<service>-<function>"
            arguments: Serialized JSON object or an already parsed dict

        Returns:
            CommandResult; success is False for every kind of failure
        """
        try:
            function = self.resolve(command)
            if not isinstance(arguments, dict):
                arguments = parse_arguments(command, arguments)

            self._log.info(f"Executing command: {command}")
            self._log.debug("Command arguments", {"command": command, "arguments": arguments})

            data = await self._invoke(command, function, arguments)

        except CommandError as e:
            self._log.warning(f"Command {command} failed: {e}")
            return CommandResult(command=command, success=False, error=str(e))

        self._log.debug(f"Command {command} succeeded")
        return CommandResult(command=command, success=True, data=data)

    async def _invoke(self, command: str, function: Callable[..., Any], arguments: dict) -> Any:
        try:
            result = function(arguments)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as e:
            self._log.error(f"Service function {command} raised", e)
            raise ServiceExecutionError(command, e) from e

    def has_command(self, command: str) -> bool:
        """Check whether a command name resolves to a function."""
        try:
            self.resolve(command)
        except CommandError:
            return False
        return True

    def list_services(self) -> list[str]:
        return list(self.services.keys())
