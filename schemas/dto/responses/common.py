"""
Common response DTOs shared across multiple endpoints.

MessageResponse  — the uniform {success, message} shape
ErrorResponse    — error shape from AppError.to_dict()
HealthResponse   — GET /health
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class MessageResponse(BaseModel):
    """Uniform success/message response returned by every auth endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str


class ErrorResponse(BaseModel):
    """Error JSON body produced by the AppError exception handler."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = False
    message: str
    code: str
    field: Optional[str] = None
    details: Optional[Any] = None


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    model_config = ConfigDict(populate_by_name=True)

    status: str
    checks: dict[str, str]
