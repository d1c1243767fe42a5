"""
Exceptions
==========

Failures raised inside the agent loop and the service dispatch.

Fatal failures end a resolution chain and reach the caller as an
"error: ..." string. Command failures are caught at the dispatch boundary
and fed back to the model as function results.

    AgentError
    ├── AgentBusyError          a chain is already in flight
    ├── RecursionLimitError     too many chained function calls
    ├── BackendError            transport, HTTP status or stream failure
    └── CommandError            dispatch failures
        ├── MalformedCommandError
        ├── UnresolvableCommandError
        ├── MalformedArgumentsError
        └── ServiceExecutionError
"""


class AgentError(Exception):
    """Base class for every failure raised by callagent."""


class AgentBusyError(AgentError):
    """A message was submitted while another one is being resolved."""

    def __init__(self):
        super().__init__("agent is busy with another request, try again later")


class RecursionLimitError(AgentError):
    """The chain of function calls exceeded the configured depth."""

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(f"Recursion limit of {max_depth} exceeded. Aborting.")


class BackendError(AgentError):
    """The completion backend could not be reached or returned a failure."""


class CommandError(AgentError):
    """
    A function call could not be executed.

    Attributes:
        command: The full command name as sent by the model
    """

    def __init__(self, command: str, message: str):
        self.command = command
        super().__init__(message)


class MalformedCommandError(CommandError):
    """The command name is not of the form <service>-<function>."""

    def __init__(self, command: str):
        super().__init__(
            command,
            f"Malformed command name '{command}', expected <service>-<function>",
        )


class UnresolvableCommandError(CommandError):
    """No registered service or function matches the command name."""


class MalformedArgumentsError(CommandError):
    """The arguments payload is not a serialized JSON object."""


class ServiceExecutionError(CommandError):
    """The service function itself raised."""

    def __init__(self, command: str, cause: BaseException):
        self.cause = cause
        super().__init__(command, str(cause) or type(cause).__name__)
