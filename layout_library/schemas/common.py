"""Shared response schemas."""

from typing import Any

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class ErrorResponse(BaseModel):
    """Error body for every non-2xx response; ``error`` carries detail only where allowed."""

    message: str = Field(..., description="Human-readable error")
    error: Any | None = Field(default=None, description="Validation errors or debug detail")
