"""Request models for API endpoints."""

from pydantic import BaseModel, Field
from typing import Dict, Any, Optional


class ParseRequest(BaseModel):
    """Request to parse schema.rb text."""
    schema_text: str = Field("", alias="schema", description="Raw schema.rb text")

    model_config = {"populate_by_name": True}


class ShortenRequest(BaseModel):
    """Request to store an encoded snapshot under a short key."""
    payload: str = Field(..., min_length=1, description="base64url(raw deflate(JSON snapshot))")


class DiagramRequest(BaseModel):
    """Request to render or export a diagram.

    Either `graph` (wire format, positions optional) or `schema` must be given;
    `graph` wins when both are present.
    """
    schema_text: Optional[str] = Field(None, alias="schema")
    graph: Optional[Dict[str, Any]] = None
    compact: bool = False

    model_config = {"populate_by_name": True}
