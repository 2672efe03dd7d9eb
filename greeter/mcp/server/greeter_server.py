import logging
from typing import Annotated, List

from mcp.server.fastmcp.prompts.base import Message, UserMessage
from pydantic import Field

from greeter.mcp.server.base_server import BaseMCPServer, ServerConfig
from greeter.registry import EMBEDDED_SCHEME

logger = logging.getLogger(__name__)

INFO_RESOURCE_URI = f"{EMBEDDED_SCHEME}:info"


def say_hi(name: Annotated[str, Field(description="the name to say hi to")]) -> str:
    return "Hi " + name


def greet_prompt(name: Annotated[str, Field(description="the name to say hi to")]) -> List[Message]:
    return [UserMessage("Say hi to " + name)]


class GreeterMCPServer(BaseMCPServer):
    """The hello example server: one tool, one prompt and one resource."""

    def __init__(self, config: ServerConfig | None = None, **kwargs):
        super().__init__(config or ServerConfig(name="greeter"), **kwargs)

    def setup(self) -> None:
        self.logger.info("Setting up greeter tools, prompts and resources...")

        self.add_tool(say_hi, name="greet", description="say hi")

        self.add_prompt(
            greet_prompt,
            name="greet",
            description="Ask the assistant to say hi to someone",
        )

        self.add_resource(
            INFO_RESOURCE_URI,
            name="info",
            mime_type="text/plain",
            description="About this server",
        )
