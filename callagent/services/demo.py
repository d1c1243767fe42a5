"""
Demo Service
============

A tiny service for trying out function calling end to end.

Commands:
- test-echotest: returns the message it was given
- test-getdatetime: returns the current date and time
"""

from datetime import datetime, timezone

from callagent.services import CommandDescriptor
from callagent.utils.logger import Logger

logger = Logger("DemoService")


DEMO_COMMANDS = [
    CommandDescriptor(
        name="test-echotest",
        description="Test the function calling functionality with an echo message.",
        parameters={
            "type": "object",
            "properties": {
                "echomessage": {
                    "type": "string",
                    "description": "This is the message to be echoed."
                }
            },
            "required": ["echomessage"]
        }
    ),
    CommandDescriptor(
        name="test-getdatetime",
        description="This function will return the current date and time.",
        parameters={"type": "object", "properties": {}}
    ),
]


class DemoService:
    """Functions registered under the "test" service name."""

    async def echotest(self, params: dict) -> str:
        message = params.get("echomessage", "")
        logger.debug(f"echotest called with message: {message}")
        return message

    async def getdatetime(self, params: dict) -> str:
        logger.debug("getdatetime called")
        return datetime.now(timezone.utc).isoformat()


def create_demo_services() -> dict[str, DemoService]:
    """Services mapping to pass to Agent together with DEMO_COMMANDS."""
    return {"test": DemoService()}
