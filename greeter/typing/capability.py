"""Pydantic models for the capabilities a greeter server offers."""

from enum import Enum
from typing import Any, Callable, Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class CapabilityKind(str, Enum):
    """Kind of capability; names are unique within a kind."""

    TOOL = "tool"
    PROMPT = "prompt"
    RESOURCE = "resource"


def argument_schema(fn: Callable[..., Any]) -> Dict[str, Any]:
    """JSON schema of the keyword arguments ``fn`` accepts."""
    return TypeAdapter(fn).json_schema()


class Capability(BaseModel):
    """A named unit of functionality backed by a handler function."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: CapabilityKind
    name: str = Field(..., min_length=1, description="Unique name within kind")
    description: Optional[str] = None
    handler: Callable[..., Any] = Field(..., exclude=True)

    @property
    def key(self) -> Tuple[CapabilityKind, str]:
        return (self.kind, self.name)


class ToolCapability(Capability):
    kind: Literal[CapabilityKind.TOOL] = CapabilityKind.TOOL

    @property
    def input_schema(self) -> Dict[str, Any]:
        return argument_schema(self.handler)


class PromptCapability(Capability):
    """Prompt template; the handler returns a list of prompt messages."""

    kind: Literal[CapabilityKind.PROMPT] = CapabilityKind.PROMPT

    @property
    def arguments_schema(self) -> Dict[str, Any]:
        return argument_schema(self.handler)


class ResourceCapability(Capability):
    """Static resource; the handler takes no arguments."""

    kind: Literal[CapabilityKind.RESOURCE] = CapabilityKind.RESOURCE
    uri: str = Field(..., min_length=1, description="Resource URI (scheme:key)")
    mime_type: str = Field(default="text/plain", description="MIME type")
