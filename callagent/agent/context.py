"""
Conversation Context
====================

The ordered message history the agent sends with every request.

The context is append-only: messages are never reordered, edited or
dropped while a conversation is running. It always opens with exactly one
system message. Each Agent owns one context and shares it with no one.

Message shapes (OpenAI chat format):

    {"role": "system",    "content": "You are ..."}
    {"role": "user",      "content": "What time is it?"}
    {"role": "assistant", "content": None,
     "function_call": {"name": "test-getdatetime", "arguments": "{}"}}
    {"role": "function",  "name": "test-getdatetime", "content": "2024-..."}
    {"role": "assistant", "content": "It is ..."}
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterator

from callagent.utils.config import DEFAULT_SYSTEM_MESSAGE


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    FUNCTION = "function"


@dataclass(frozen=True)
class FunctionCall:
    """A function call made by the assistant, as stored in the history."""
    name: str
    arguments: str = ""


@dataclass(frozen=True)
class Message:
    """
    A single message in the conversation.

    Attributes:
        role: Who produced the message
        content: The text; None for a function-invoking assistant turn
        name: Function name, set on function-role messages
        function_call: The call requested by an assistant turn
        timestamp: When the message was created
    """
    role: Role
    content: str | None = None
    name: str | None = None
    function_call: FunctionCall | None = None
    timestamp: datetime = field(default_factory=datetime.now, compare=False)

    def __post_init__(self):
        if self.role == Role.FUNCTION and not self.name:
            raise ValueError("Function messages require the function name")

    def to_openai_message(self) -> dict:
        """Convert to the dict format of the chat completions API."""
        message: dict = {"role": self.role.value, "content": self.content}
        if self.name is not None:
            message["name"] = self.name
        if self.function_call is not None:
            message["function_call"] = {
                "name": self.function_call.name,
                "arguments": self.function_call.arguments,
            }
        return message


class ConversationContext:
    """
    Append-only conversation history.

    Example:
        context = ConversationContext("You are a helpful agent.")
        context.add_user("Echo 'hi'")
        context.add_function_call("test-echotest", '{"echomessage": "hi"}')
        context.add_function_result("test-echotest", "hi")

        messages = context.to_openai_messages()
    """

    def __init__(self, system_message: str | None = None):
        self._messages: list[Message] = [
            Message(role=Role.SYSTEM, content=system_message or DEFAULT_SYSTEM_MESSAGE)
        ]

    @property
    def system_message(self) -> str:
        return self._messages[0].content or ""

    def append(self, message: Message) -> Message:
        self._messages.append(message)
        return message

    def add_user(self, content: str) -> Message:
        return self.append(Message(role=Role.USER, content=content))

    def add_assistant(self, content: str) -> Message:
        return self.append(Message(role=Role.ASSISTANT, content=content))

    def add_function_call(self, name: str, arguments: str, content: str | None = None) -> Message:
        """
        Record the assistant turn that asked for a function call.

        content holds any text the model streamed before the call.
        """
        return self.append(Message(
            role=Role.ASSISTANT,
            content=content,
            function_call=FunctionCall(name=name, arguments=arguments),
        ))

    def add_function_result(self, name: str, content: str) -> Message:
        return self.append(Message(role=Role.FUNCTION, name=name, content=content))

    def to_openai_messages(self) -> list[dict]:
        return [message.to_openai_message() for message in self._messages]

    def reset(self) -> None:
        """Drop everything but the system message, starting a new conversation."""
        del self._messages[1:]

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __len__(self) -> int:
        return len(self._messages)

    def __getitem__(self, index: int) -> Message:
        return self._messages[index]
