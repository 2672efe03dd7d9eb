"""Pydantic models for resolved resource content."""

from pydantic import BaseModel, ConfigDict, Field


class StoredResource(BaseModel):
    """Literal content held by a backing store."""

    model_config = ConfigDict(frozen=True)

    text: str
    mime_type: str = Field(default="text/plain")


class ResolvedResource(BaseModel):
    """Result of resolving a resource URI.

    ``uri`` is the string the caller asked for, not a normalized form.
    """

    model_config = ConfigDict(frozen=True)

    uri: str
    text: str
    mime_type: str
