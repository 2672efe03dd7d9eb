"""Tests for GreeterMCPServer capabilities, directly and over an MCP session."""

import pytest
from mcp.shared.exceptions import McpError
from mcp.shared.memory import create_connected_server_and_client_session
from pydantic import AnyUrl

from greeter.mcp.server import GreeterMCPServer
from greeter.mcp.server.greeter_server import greet_prompt, say_hi
from greeter.typing import CapabilityKind, ResolvedResource


class TestGreeterCapabilities:
    def test_handlers(self):
        assert say_hi("Ada") == "Hi Ada"

        messages = greet_prompt("Ada")
        assert len(messages) == 1
        assert messages[0].role == "user"
        assert messages[0].content.text == "Say hi to Ada"

    def test_build_registers_and_seals(self, greeter_server: GreeterMCPServer):
        greeter_server.build()
        registry = greeter_server.registry

        assert registry.sealed
        assert len(registry) == 3
        assert registry.invoke(CapabilityKind.TOOL, "greet", {"name": "Ada"}) == "Hi Ada"

        messages = registry.invoke(CapabilityKind.PROMPT, "greet", {"name": "Ada"})
        assert [(m.role, m.content.text) for m in messages] == [("user", "Say hi to Ada")]

        resolved = registry.invoke(CapabilityKind.RESOURCE, "info")
        assert resolved.text == "This is the hello example server."
        assert resolved.mime_type == "text/plain"

    def test_build_is_idempotent(self, greeter_server: GreeterMCPServer):
        first = greeter_server.build()
        second = greeter_server.build()

        assert first is second
        assert len(greeter_server.registry) == 3

    def test_greet_input_schema(self, greeter_server: GreeterMCPServer):
        greeter_server.build()
        tool = greeter_server.registry.get(CapabilityKind.TOOL, "greet")

        assert tool.description == "say hi"
        assert tool.input_schema["required"] == ["name"]
        assert tool.input_schema["properties"]["name"]["description"] == "the name to say hi to"


class TestGreeterProtocol:
    @pytest.fixture
    def lowlevel_server(self, greeter_server: GreeterMCPServer):
        return greeter_server.build()._mcp_server

    async def test_list_tools(self, lowlevel_server):
        async with create_connected_server_and_client_session(lowlevel_server) as client:
            result = await client.list_tools()

        tools = {tool.name: tool for tool in result.tools}
        assert list(tools) == ["greet"]
        assert tools["greet"].description == "say hi"
        assert tools["greet"].inputSchema["required"] == ["name"]

    async def test_call_greet(self, lowlevel_server):
        async with create_connected_server_and_client_session(lowlevel_server) as client:
            result = await client.call_tool("greet", {"name": "Ada"})

        assert not result.isError
        assert result.content[0].type == "text"
        assert result.content[0].text == "Hi Ada"

    async def test_get_greet_prompt(self, lowlevel_server):
        async with create_connected_server_and_client_session(lowlevel_server) as client:
            listed = await client.list_prompts()
            result = await client.get_prompt("greet", {"name": "Ada"})

        assert [prompt.name for prompt in listed.prompts] == ["greet"]
        assert [arg.name for arg in listed.prompts[0].arguments] == ["name"]
        assert len(result.messages) == 1
        assert result.messages[0].role == "user"
        assert result.messages[0].content.text == "Say hi to Ada"

    async def test_list_resources(self, lowlevel_server):
        async with create_connected_server_and_client_session(lowlevel_server) as client:
            result = await client.list_resources()

        assert len(result.resources) == 1
        resource = result.resources[0]
        assert str(resource.uri) == "embedded:info"
        assert resource.name == "info"
        assert resource.mimeType == "text/plain"

    async def test_read_info_resource(self, lowlevel_server):
        async with create_connected_server_and_client_session(lowlevel_server) as client:
            result = await client.read_resource(AnyUrl("embedded:info"))

        assert len(result.contents) == 1
        assert result.contents[0].text == "This is the hello example server."
        assert result.contents[0].mimeType == "text/plain"

    @pytest.mark.parametrize(
        "uri, message",
        [
            ("embedded:missing", "No embedded resource named 'missing'"),
            ("bogus:info", "Unsupported resource scheme: 'bogus'"),
        ],
    )
    async def test_read_errors_are_protocol_errors(self, lowlevel_server, uri, message):
        async with create_connected_server_and_client_session(lowlevel_server) as client:
            with pytest.raises(McpError) as exc_info:
                await client.read_resource(AnyUrl(uri))

            # The session stays usable after a request-level error.
            result = await client.call_tool("greet", {"name": "Bob"})

        assert exc_info.value.error.code == -32002
        assert message in exc_info.value.error.message
        assert result.content[0].text == "Hi Bob"


class CustomResourceServer(GreeterMCPServer):
    def setup(self) -> None:
        super().setup()
        self.add_resource("embedded:other", fn=lambda: "custom", name="other")
        self.add_resource(
            "notes:today",
            fn=lambda: ResolvedResource(uri="notes:today", text="# Today", mime_type="text/markdown"),
            name="today",
        )


class TestRegisteredResourceReads:
    @pytest.fixture
    def lowlevel_server(self, server_config):
        return CustomResourceServer(server_config).build()._mcp_server

    async def test_registered_handler_serves_read(self, lowlevel_server):
        async with create_connected_server_and_client_session(lowlevel_server) as client:
            listed = await client.list_resources()
            result = await client.read_resource(AnyUrl("embedded:other"))

        assert "embedded:other" in [str(resource.uri) for resource in listed.resources]
        assert result.contents[0].text == "custom"
        assert result.contents[0].mimeType == "text/plain"

    async def test_resolved_resource_keeps_its_mime_type(self, lowlevel_server):
        async with create_connected_server_and_client_session(lowlevel_server) as client:
            result = await client.read_resource(AnyUrl("notes:today"))

        assert result.contents[0].text == "# Today"
        assert result.contents[0].mimeType == "text/markdown"

    async def test_unregistered_uri_falls_back_to_resolver(self, lowlevel_server):
        async with create_connected_server_and_client_session(lowlevel_server) as client:
            info = await client.read_resource(AnyUrl("embedded:info"))
            with pytest.raises(McpError, match="No embedded resource named 'nothing'"):
                await client.read_resource(AnyUrl("embedded:nothing"))

        assert info.contents[0].text == "This is the hello example server."
