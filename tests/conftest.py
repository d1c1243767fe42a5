"""
Shared fixtures for the callagent test suite.

The backend is faked at the HTTP layer: a real AsyncOpenAI client talks to
an httpx.MockTransport that answers with canned server-sent event bodies,
so the tests exercise the same stream parsing as production.
"""

import json

import httpx
import pytest
from openai import AsyncOpenAI

from callagent.agent import Agent
from callagent.utils.config import AgentConfig, OpenAIConfig

BASE_URL = "http://backend.test/v1"


def _chunk(delta: dict, finish_reason: str | None = None) -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion.chunk",
        "created": 0,
        "model": "gpt-3.5-turbo",
        "choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}],
    }


def sse_body(chunks: list[dict]) -> bytes:
    events = "".join(f"data: {json.dumps(chunk)}\n\n" for chunk in chunks)
    return (events + "data: [DONE]\n\n").encode("utf-8")


def text_response(*fragments: str) -> bytes:
    """A streamed reply made of the given text fragments."""
    chunks = [_chunk({"role": "assistant", "content": ""})]
    chunks += [_chunk({"content": fragment}) for fragment in fragments]
    chunks.append(_chunk({}, finish_reason="stop"))
    return sse_body(chunks)


def function_call_response(name: str, *argument_fragments: str, text: str = "") -> bytes:
    """A streamed reply that asks for a function call, optionally after some text."""
    chunks = [_chunk({"role": "assistant", "content": text or None})]
    chunks.append(_chunk({"function_call": {"name": name, "arguments": ""}}))
    chunks += [_chunk({"function_call": {"arguments": fragment}}) for fragment in argument_fragments]
    chunks.append(_chunk({}, finish_reason="function_call"))
    return sse_body(chunks)


def error_response(status: int = 500, message: str = "upstream down") -> httpx.Response:
    return httpx.Response(status, json={"error": {"message": message, "type": "server_error"}})


class FakeBackend:
    """
    Serves queued responses to chat completion requests.

    Attributes:
        responses: SSE bodies or httpx.Response objects, served in order
        default: Served once the queue is empty (HTTP 500 if None)
        requests: Decoded JSON bodies of every request received
    """

    def __init__(self, responses=(), default=None):
        self.responses = list(responses)
        self.default = default
        self.requests: list[dict] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))

        if self.responses:
            response = self.responses.pop(0)
        elif self.default is not None:
            response = self.default
        else:
            response = error_response(message="no response queued")

        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(
            200,
            headers={"content-type": "text/event-stream"},
            content=response,
        )

    def client(self) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key="sk-test",
            base_url=BASE_URL,
            max_retries=0,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(self.handler)),
        )


@pytest.fixture
def agent_config():
    return AgentConfig(
        openai=OpenAIConfig(api_key="sk-test", base_url=BASE_URL),
        system_message="You are a test agent.",
    )


@pytest.fixture
def make_agent(agent_config):
    """Build an Agent wired to a FakeBackend."""

    def _make(backend: FakeBackend, config: AgentConfig | None = None, **kwargs) -> Agent:
        return Agent(config=config or agent_config, client=backend.client(), **kwargs)

    return _make
