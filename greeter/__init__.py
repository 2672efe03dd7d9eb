"""greeter - a minimal MCP server with a tool, a prompt and a resource."""

__version__ = "0.1.0"
