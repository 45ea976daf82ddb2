"""Shared API model configuration."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Envelope(CamelModel):
    """Uniform response envelope."""

    message: Optional[str] = Field(None, description="Human-readable outcome")
    success: bool = Field(True, description="Whether the operation succeeded")
