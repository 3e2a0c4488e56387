"""Request/response schemas for auth and account administration endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from layout_library.core.security import Role


class CamelModel(BaseModel):
    """Base for response bodies: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class LoginRequest(BaseModel):
    """Credentials for login. Presence is checked by the endpoint so it can answer 400."""

    email: str | None = Field(default=None, description="Account email")
    password: str | None = Field(default=None, description="Password")


class RegisterRequest(BaseModel):
    """New account details (admin only)."""

    username: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    password: str | None = Field(default=None, description="At least 6 characters")
    role: str | None = Field(default=None, description="'admin' or 'user'; defaults to 'user'")


class UserUpdateRequest(BaseModel):
    """Partial account update; only non-empty fields are applied."""

    username: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    password: str | None = None
    role: str | None = None


class RoleUpdateRequest(BaseModel):
    """Body for PATCH /users/{user_id}/role."""

    role: str | None = None


class UserSummary(CamelModel):
    """Compact account view returned by register and login."""

    id: int
    username: str
    email: str
    role: Role


class CurrentUser(CamelModel):
    """Authenticated account (password excluded) for dependency injection and profile."""

    id: int
    username: str
    email: str
    role: Role
    is_active: bool
    last_login: datetime | None = None
    created_at: datetime | None = None


class LoginResponse(BaseModel):
    """JWT access token returned after successful login."""

    message: str = "Login successful"
    token: str = Field(..., description="JWT access token")
    user: UserSummary


class RegisterResponse(BaseModel):
    """Response for POST /register."""

    message: str = "User created successfully"
    user: UserSummary


class ProfileResponse(BaseModel):
    """Response for GET /profile."""

    user: CurrentUser


class UserResponse(BaseModel):
    """Message plus the account after an admin update."""

    message: str
    user: CurrentUser
