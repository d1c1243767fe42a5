"""
Agent Core
==========

The agent drives one conversation with a streaming chat completion backend
and runs the function calls the model asks for.

Agent Loop:
    User Message
         │
         ▼
    Append to Context
         │
         ▼
    Streaming Request (messages + functions)  ◄──────┐
         │                                           │
         ▼                                           │
    Forward text fragments to the caller             │
         │                                           │
         ▼                                           │
    ┌─── Function call requested? ───┐               │
    │                                │               │
    Yes                              No              │
    │                                │               │
    ▼                                ▼               │
    Execute via ServiceDispatch   Return text        │
    │                                                │
    ▼                                                │
    Append function result ──────────────────────────┘

The loop issues at most `max_recursions` requests per user message. A
failing function does not end the loop: its failure is sent to the model
as the function result so the model can react to it. Transport errors,
undecodable arguments and the depth limit do end it.

Errors never escape submit() or stream(); they come back as text starting
with "error: ", so a chat front end can show them like any other reply.

One message at a time: while a message is being resolved the agent is busy
and further submissions are rejected with an error string. busy and depth
are restored on every exit path.
"""

import inspect
from contextlib import aclosing
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, Iterable, Mapping

import httpx
from openai import APIError, AsyncOpenAI

from callagent.agent.context import ConversationContext
from callagent.agent.dispatch import ServiceDispatch, parse_arguments
from callagent.agent.stream import ResponseStream, StreamAccumulator
from callagent.exceptions import AgentBusyError, BackendError, RecursionLimitError
from callagent.services import CommandDescriptor, CommandRegistry, CommandResult
from callagent.utils.config import AgentConfig, get_config
from callagent.utils.logger import Logger, LogLevel, parse_log_level

ResponseCallback = Callable[[str], Awaitable[None] | None]

ERROR_PREFIX = "error: "


@dataclass
class Resolution:
    """
    Bookkeeping for one submitted message.

    Attributes:
        text: Text of the final response (the one without a function call)
        requests: Number of backend requests issued
        command_results: Results of the function calls, in execution order
        error: Failure description if the chain failed
    """
    text: str = ""
    requests: int = 0
    command_results: list[CommandResult] = field(default_factory=list)
    error: str | None = None


class Agent:
    """
    Conversational agent with function calling over a streaming backend.

    Example:
        agent = Agent(
            services=create_demo_services(),
            commands=DEMO_COMMANDS,
            on_response=lambda fragment: print(fragment, end="", flush=True),
        )

        if agent.is_available():
            reply = await agent.submit("What time is it?")

        # Or read the fragments directly
        async with agent.stream("Echo 'hello'") as fragments:
            async for fragment in fragments:
                print(fragment, end="")
    """

    def __init__(
        self,
        config: AgentConfig | None = None,
        services: Mapping[str, Any] | ServiceDispatch | None = None,
        commands: CommandRegistry | Iterable[CommandDescriptor] | None = None,
        client: AsyncOpenAI | None = None,
        on_response: ResponseCallback | None = None,
    ):
        """
        Initialize the agent.

        Args:
            config: Agent configuration; loaded from the environment if omitted
            services: Service name -> object exposing the command functions
            commands: Descriptors of the commands offered to the model
            client: OpenAI-compatible async client; built from config if omitted
            on_response: Called with every text fragment, in stream order
        """
        self.config = config or get_config()

        if self.config.debug_enabled:
            level = LogLevel.DEBUG
        else:
            level = parse_log_level(self.config.log_level)
        self.logger = Logger("Agent", level=level)

        self.max_depth = self.config.max_recursions
        self.model = self.config.openai.model
        self.temperature = self.config.openai.temperature
        self.max_tokens = self.config.openai.max_tokens

        if isinstance(services, ServiceDispatch):
            self.dispatch = services
        else:
            self.dispatch = ServiceDispatch(services, log=self.logger.child("Dispatch"))

        if isinstance(commands, CommandRegistry):
            self.commands = commands
        else:
            self.commands = CommandRegistry(commands or ())

        # Retries are left to the caller
        self.openai = client or AsyncOpenAI(
            api_key=self.config.openai.api_key,
            base_url=self.config.openai.base_url,
            max_retries=0,
        )
        self.on_response = on_response

        self._context = ConversationContext(self.config.system_message)
        self._busy = False
        self._depth = 0
        self.last_resolution: Resolution | None = None

        self.logger.info(
            f"Agent initialized with model: {self.model} "
            f"({len(self.commands)} commands, max depth {self.max_depth})"
        )

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def context(self) -> ConversationContext:
        return self._context

    def is_available(self) -> bool:
        """True when no message is being resolved."""
        return not self._busy

    agent_available = is_available

    async def submit(self, user_text: str, on_response: ResponseCallback | None = None) -> str:
        """
        Process a user message and return the agent's reply.

        Text fragments are passed to the callback (on_response here, or the
        one given at construction) as they arrive. The return value is the
        text of the final response of the chain.

        Args:
            user_text: The user's message
            on_response: Per-call override of the fragment callback

        Returns:
            The reply, or "error: <description>" if processing failed
        """
        callback = on_response or self.on_response
        resolution = Resolution()
        self.logger.info(f"Processing message: {user_text[:50]}...")

        try:
            async with aclosing(self._run(user_text, resolution)) as fragments:
                async for fragment in fragments:
                    if callback is not None:
                        await _emit(callback, fragment)

        except Exception as e:
            resolution.error = str(e)
            self.logger.error("Error processing message", e)
            return f"{ERROR_PREFIX}{e}"

        self.logger.info(f"Generated response ({len(resolution.text)} chars)")
        return resolution.text

    process_message = submit

    def stream(self, user_text: str) -> ResponseStream:
        """
        Process a user message, reading the text fragments as they arrive.

        Nothing is sent until the returned stream is entered with
        `async with`; leaving the block ends the chain and frees the agent,
        also after `break`. The fragments are finite and cannot be restarted.
        On failure the last fragment is "error: <description>".

            async with agent.stream("Echo 'hello'") as fragments:
                async for fragment in fragments:
                    print(fragment, end="")
        """
        return ResponseStream(self._stream(user_text))

    async def _stream(self, user_text: str) -> AsyncIterator[str]:
        resolution = Resolution()
        self.logger.info(f"Processing message (streaming): {user_text[:50]}...")

        try:
            async with aclosing(self._run(user_text, resolution)) as fragments:
                async for fragment in fragments:
                    yield fragment

        except Exception as e:
            resolution.error = str(e)
            self.logger.error("Error in streaming response", e)
            yield f"{ERROR_PREFIX}{e}"

    def reset(self) -> None:
        """
        Start a new conversation, keeping the system message.

        Raises:
            AgentBusyError: If a message is being resolved
        """
        if self._busy:
            raise AgentBusyError()
        self._context.reset()
        self.logger.info("Conversation cleared")

    # ------------------------------------------------------------------
    # Resolution loop
    # ------------------------------------------------------------------

    async def _run(self, user_text: str, resolution: Resolution) -> AsyncIterator[str]:
        # No await between the check and the assignment, so on one event
        # loop two submissions can never both pass it.
        if self._busy:
            raise AgentBusyError()
        self._busy = True
        self.last_resolution = resolution

        try:
            self._context.add_user(user_text)
            self.logger.debug("Context", {"messages": self._context.to_openai_messages()})

            async with aclosing(self._resolve(resolution)) as fragments:
                async for fragment in fragments:
                    yield fragment
        finally:
            self._busy = False

    async def _resolve(self, resolution: Resolution) -> AsyncIterator[str]:
        """
        Request completions until one arrives without a function call.

        Raises:
            RecursionLimitError: If max_depth requests did not settle the chain
            MalformedArgumentsError: If the function arguments are not a JSON object
            BackendError: If the backend request or stream fails
        """
        start_depth = self._depth

        try:
            while True:
                if self._depth >= self.max_depth:
                    raise RecursionLimitError(self.max_depth)
                self._depth += 1
                resolution.requests += 1
                self.logger.debug(f"Request {resolution.requests} (depth {self._depth})")

                accumulator = StreamAccumulator(self.logger.child("Stream"))
                async with aclosing(self._request(accumulator)) as fragments:
                    async for fragment in fragments:
                        yield fragment

                call = accumulator.function_call
                if call is None:
                    resolution.text = accumulator.text
                    self._context.add_assistant(accumulator.text)
                    return

                self.logger.debug(
                    "Function call",
                    {"name": call.name, "arguments": call.arguments},
                )
                arguments = parse_arguments(call.name, call.arguments)
                self._context.add_function_call(
                    call.name, call.arguments, content=accumulator.text or None
                )

                result = await self.dispatch.execute(call.name, arguments)
                resolution.command_results.append(result)
                self._context.add_function_result(call.name, result.to_message())
        finally:
            self._depth = start_depth

    async def _request(self, accumulator: StreamAccumulator) -> AsyncIterator[str]:
        """Issue one streaming request and yield its text fragments."""
        request: dict[str, Any] = {
            "model": self.model,
            "messages": self._context.to_openai_messages(),
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "stream": True,
        }
        functions = self.commands.get_openai_functions()
        if functions:
            request["functions"] = functions

        try:
            stream = await self.openai.chat.completions.create(**request)
            async with stream:
                async for chunk in stream:
                    fragment = accumulator.feed(chunk)
                    if fragment:
                        yield fragment

        # ValueError covers undecodable event records
        except (APIError, httpx.HTTPError, ValueError) as e:
            raise BackendError(f"Completion request failed: {e}") from e

        self.logger.debug(
            f"Stream finished after {accumulator.chunk_count} chunks "
            f"(finish_reason={accumulator.finish_reason})"
        )


async def _emit(callback: ResponseCallback, fragment: str) -> None:
    result = callback(fragment)
    if inspect.isawaitable(result):
        await result
