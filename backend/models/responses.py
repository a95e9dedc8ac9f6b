"""Response models for API endpoints."""

from pydantic import BaseModel
from typing import Optional, Dict, Any


class ErrorResponse(BaseModel):
    """Structured error body."""
    error: str
    message: Optional[str] = None


class ShortenResponse(BaseModel):
    """Response when a share link is created."""
    key: str
    url: str


class SharedLinkResponse(BaseModel):
    """Stored payload for a short key, with the decoded graph when it decodes."""
    key: str
    payload: str
    graph: Optional[Dict[str, Any]] = None
