"""
Agent System
============

The agent turns a user message into a reply by streaming completions from
the backend and running the function calls the model requests.

This module provides:
- Agent: Conversation owner and resolution loop
- ConversationContext / Message: The append-only message history
- ServiceDispatch: Command name -> service function execution
- StreamAccumulator: Folds streamed chunks into text and a function call
"""

from callagent.agent.core import Agent, Resolution
from callagent.agent.context import ConversationContext, FunctionCall, Message, Role
from callagent.agent.dispatch import ServiceDispatch, parse_arguments, parse_command_name
from callagent.agent.stream import FunctionCallRequest, ResponseStream, StreamAccumulator

__all__ = [
    "Agent",
    "Resolution",
    "ConversationContext",
    "FunctionCall",
    "Message",
    "Role",
    "ServiceDispatch",
    "parse_arguments",
    "parse_command_name",
    "FunctionCallRequest",
    "ResponseStream",
    "StreamAccumulator",
]
