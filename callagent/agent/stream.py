"""
Stream Accumulation
===================

Folds the chunks of a streamed chat completion into a response.

Every chunk carries a delta for choice 0, which is one of:

- a text fragment (delta.content), forwarded to the caller as it arrives
- the function-call name (delta.function_call.name), sent once
- an arguments fragment (delta.function_call.arguments); the fragments
  form one JSON string when joined in arrival order

Example:
    accumulator = StreamAccumulator()
    async for chunk in stream:
        fragment = accumulator.feed(chunk)
        if fragment:
            print(fragment, end="")

    if accumulator.function_call:
        ...
"""

from dataclasses import dataclass, field
from typing import Any, AsyncGenerator

from callagent.utils.logger import Logger

logger = Logger("Stream")


@dataclass
class FunctionCallRequest:
    """
    A function call assembled from stream fragments.

    Attributes:
        name: The command name, "<service>-<function>"
        argument_fragments: Arguments chunks in arrival order
    """
    name: str
    argument_fragments: list[str] = field(default_factory=list)

    @property
    def arguments(self) -> str:
        """The serialized arguments (all fragments joined)."""
        return "".join(self.argument_fragments)


class StreamAccumulator:
    """Collects the text and function call of one streamed response."""

    def __init__(self, log: Logger | None = None):
        self._log = log or logger
        self._fragments: list[str] = []
        self._pending_arguments: list[str] = []
        self.function_call: FunctionCallRequest | None = None
        self.finish_reason: str | None = None
        self.chunk_count = 0

    @property
    def text(self) -> str:
        return "".join(self._fragments)

    @property
    def fragments(self) -> list[str]:
        return list(self._fragments)

    def feed(self, chunk: Any) -> str | None:
        """
        Consume one chunk.

        Returns:
            The text fragment carried by the chunk, or None
        """
        self.chunk_count += 1
        choices = getattr(chunk, "choices", None)
        if not choices:
            return None

        choice = choices[0]
        if getattr(choice, "finish_reason", None):
            self.finish_reason = choice.finish_reason

        delta = getattr(choice, "delta", None)
        if delta is None:
            return None

        function_call = getattr(delta, "function_call", None)
        if function_call is not None:
            self._feed_function_call(function_call)

        content = getattr(delta, "content", None)
        if content:
            self._fragments.append(content)
            return content
        return None

    def _feed_function_call(self, function_call: Any) -> None:
        name = getattr(function_call, "name", None)
        if name:
            if self.function_call is None:
                self._log.debug(f"Function call detected: {name}")
                self.function_call = FunctionCallRequest(
                    name=name, argument_fragments=self._pending_arguments
                )
            elif name != self.function_call.name:
                self._log.warning(
                    f"Ignoring second function call '{name}', "
                    f"already handling '{self.function_call.name}'"
                )

        arguments = getattr(function_call, "arguments", None)
        if arguments:
            self._log.debug(f"Function call arguments fragment: {arguments}")
            # Fragments seen before the name are kept and joined in order
            self._pending_arguments.append(arguments)


class ResponseStream:
    """
    The text fragments of one submitted message.

    Fragments can only be read inside `async with`. Leaving the block, by
    reaching the end, by `break` or by an exception, closes the chain, so
    the agent is available again right after it.

    Example:
        async with agent.stream("What time is it?") as fragments:
            async for fragment in fragments:
                print(fragment, end="")
    """

    def __init__(self, fragments: AsyncGenerator[str, None]):
        self._fragments = fragments
        self._entered = False

    async def __aenter__(self) -> AsyncGenerator[str, None]:
        if self._entered:
            raise RuntimeError("A response stream can only be consumed once")
        self._entered = True
        return self._fragments

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self._fragments.aclose()

    def __aiter__(self):
        raise TypeError(
            "Read the fragments inside 'async with agent.stream(...) as fragments'"
        )
