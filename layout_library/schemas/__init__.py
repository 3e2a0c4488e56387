"""Pydantic request/response schemas."""

from layout_library.schemas.auth import (
    CurrentUser,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RoleUpdateRequest,
    UserSummary,
    UserUpdateRequest,
)
from layout_library.schemas.common import ErrorResponse, MessageResponse
from layout_library.schemas.health import HealthResponse

__all__ = [
    "CurrentUser",
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "RegisterRequest",
    "RoleUpdateRequest",
    "UserSummary",
    "UserUpdateRequest",
]
