"""
Helium — Response Schemas
===========================

What:  Pydantic models for the non-document bodies the API returns.
Why:   Documents are returned as stored; status and error bodies have a fixed
       shape that clients parse, and that FastAPI publishes in the OpenAPI doc.

Error body shape:
    {"message": "..." | ["...", "..."], "status": 404, "request_id": "a1b2c3d4"}
"""

from typing import List, Optional, Union

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Small status body returned by /healthz."""

    message: str = Field(description="Human-readable status")
    status: int = Field(description="HTTP status code, repeated in the body")


class ErrorResponse(BaseModel):
    """
    Standardized error body.

    `message` is a list for validation failures (one entry per failed field
    constraint) and a string otherwise.
    """

    message: Union[str, List[str]] = Field(description="Error description(s)")
    status: int = Field(description="HTTP status code")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


# Shared `responses=` entries for route decorators
ERROR_RESPONSES = {
    400: {"description": "Invalid payload", "model": ErrorResponse},
    404: {"description": "Document not found", "model": ErrorResponse},
    500: {"description": "Document store error", "model": ErrorResponse},
}
