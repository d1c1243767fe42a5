"""Tests for the conversation context."""

import dataclasses

import pytest

from callagent.agent.context import ConversationContext, Message, Role
from callagent.utils.config import DEFAULT_SYSTEM_MESSAGE


def test_context_opens_with_system_message():
    context = ConversationContext("Be brief.")

    assert len(context) == 1
    assert context[0].role == Role.SYSTEM
    assert context.system_message == "Be brief."


def test_default_system_message():
    assert ConversationContext().system_message == DEFAULT_SYSTEM_MESSAGE


def test_messages_render_in_order():
    context = ConversationContext("sys")
    context.add_user("What time is it?")
    context.add_function_call("test-getdatetime", "{}")
    context.add_function_result("test-getdatetime", "2024-01-01T00:00:00")
    context.add_assistant("Midnight.")

    assert context.to_openai_messages() == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "What time is it?"},
        {
            "role": "assistant",
            "content": None,
            "function_call": {"name": "test-getdatetime", "arguments": "{}"},
        },
        {"role": "function", "name": "test-getdatetime", "content": "2024-01-01T00:00:00"},
        {"role": "assistant", "content": "Midnight."},
    ]


def test_messages_are_immutable():
    message = Message(role=Role.USER, content="hi")
    with pytest.raises(dataclasses.FrozenInstanceError):
        message.content = "changed"


def test_function_message_requires_name():
    with pytest.raises(ValueError):
        Message(role=Role.FUNCTION, content="result")


def test_iteration_is_a_snapshot():
    context = ConversationContext()
    context.add_user("one")

    for _ in context:
        context.add_user("two")

    # One append per message present when iteration started
    assert [m.content for m in context][1:] == ["one", "two", "two"]


def test_reset_keeps_only_system_message():
    context = ConversationContext("sys")
    context.add_user("hello")
    context.add_assistant("hi")

    context.reset()

    assert context.to_openai_messages() == [{"role": "system", "content": "sys"}]
