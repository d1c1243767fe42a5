"""Tests for the interactive entry point."""

import pytest

from callagent.main import chat
from tests.conftest import FakeBackend, error_response, text_response


def scripted_input(lines):
    remaining = list(lines)

    def _input(prompt):
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    return _input


@pytest.mark.asyncio
async def test_chat_prints_streamed_reply_until_exit(make_agent, capsys):
    backend = FakeBackend([text_response("Hello", " there")])
    agent = make_agent(backend)

    await chat(agent, input_func=scripted_input(["hi", "", "exit", "never sent"]))

    assert "Hello there" in capsys.readouterr().out
    assert len(backend.requests) == 1


@pytest.mark.asyncio
async def test_chat_prints_errors_and_stops_at_eof(make_agent, capsys):
    backend = FakeBackend([error_response(500)])
    agent = make_agent(backend)

    await chat(agent, input_func=scripted_input(["hi"]))

    assert "error: Completion request failed" in capsys.readouterr().out
