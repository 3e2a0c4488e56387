"""JWT login, account administration and auth dependencies (get_current_user, require_admin)."""

import logging
from datetime import UTC, datetime
from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from layout_library.core.database import get_db
from layout_library.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    create_access_token,
    decode_access_token,
    is_admin_or_owner,
    is_valid_role,
)
from layout_library.models import User
from layout_library.schemas.auth import (
    CurrentUser,
    LoginRequest,
    LoginResponse,
    ProfileResponse,
    RegisterRequest,
    RegisterResponse,
    RoleUpdateRequest,
    UserResponse,
    UserSummary,
    UserUpdateRequest,
)
from layout_library.schemas.common import MessageResponse
from layout_library.services.accounts import create_user, find_conflicting_user

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)

INVALID_CREDENTIALS = "Invalid credentials"
DUPLICATE_USER = "User with this email or username already exists"


def _validate_password(password: str) -> None:
    if len(password) < PASSWORD_MIN_LEN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {PASSWORD_MIN_LEN} characters",
        )
    if len(password) > PASSWORD_MAX_LEN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at most {PASSWORD_MAX_LEN} characters",
        )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """
    Dependency: require a valid Bearer JWT for an active account.

    401 when no token is sent or the account is missing/inactive; 403 when a
    token is sent but fails verification.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = decode_access_token(credentials.credentials)
        user_id = int(payload["sub"])
    except (jwt.PyJWTError, KeyError, TypeError, ValueError):
        logger.info("Rejected bearer token")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token",
        )
    user = db.query(User).filter(User.id == user_id).first()
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token or user not active",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return CurrentUser.model_validate(user)


def require_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: require authenticated user with role 'admin'. Raises 403 for non-admin."""
    if current_user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


def require_admin_or_owner(
    user_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: admin, or the account named by the user_id path parameter."""
    if not is_admin_or_owner(current_user.id, current_user.role, user_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )
    return current_user


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def _commit_user(db: Session, user: User) -> None:
    """Commit account changes; a unique-constraint clash becomes 400."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_USER)
    db.refresh(user)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> RegisterResponse:
    """Create an account (admin only). Role defaults to 'user'."""
    if not body.username or not body.email or not body.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username, email, and password are required",
        )
    _validate_password(body.password)
    role = body.role or "user"
    if not is_valid_role(role):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role")
    if find_conflicting_user(db, body.username, body.email) is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_USER)

    try:
        user = create_user(db, body.username, body.email, body.password, role)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_USER)
    logger.info("Account %s created by admin %s", user.username, _admin.username)
    return RegisterResponse(user=UserSummary.model_validate(user))


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> LoginResponse:
    """
    Authenticate with email and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <token>
    """
    if not body.email or not body.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required",
        )
    user = db.query(User).filter(User.email == body.email).first()
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)
    if not user.check_password(body.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    user.last_login = datetime.now(UTC)
    db.commit()
    db.refresh(user)
    token = create_access_token(sub=user.id)
    return LoginResponse(token=token, user=UserSummary.model_validate(user))


@router.get("/profile", response_model=ProfileResponse)
def profile(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ProfileResponse:
    """Return the caller's own account."""
    return ProfileResponse(user=current_user)


@router.get("/users", response_model=list[CurrentUser])
def list_users(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> list[CurrentUser]:
    """List all accounts, newest first (admin only)."""
    users = db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()
    return [CurrentUser.model_validate(u) for u in users]


@router.get("/users/{user_id}", response_model=CurrentUser)
def get_user(
    user_id: int,
    _caller: Annotated[CurrentUser, Depends(require_admin_or_owner)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Return one account (admin, or the account itself)."""
    return CurrentUser.model_validate(_get_user_or_404(db, user_id))


@router.patch("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    body: UserUpdateRequest,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """
    Partial account update (admin only).

    Only non-empty fields are applied; an unrecognised role is ignored.
    """
    user = _get_user_or_404(db, user_id)
    if (body.username or body.email) and find_conflicting_user(
        db, body.username or user.username, body.email or user.email, exclude_id=user.id
    ) is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_USER)
    if body.username:
        user.username = body.username
    if body.email:
        user.email = body.email
    if body.password:
        _validate_password(body.password)
        user.password = body.password
    if body.role and is_valid_role(body.role):
        user.role = body.role
    _commit_user(db, user)
    return UserResponse(message="User updated successfully", user=CurrentUser.model_validate(user))


@router.patch("/users/{user_id}/role", response_model=UserResponse)
def update_role(
    user_id: int,
    body: RoleUpdateRequest,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Change an account's role (admin only). Role must be 'admin' or 'user'."""
    if not is_valid_role(body.role):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role")
    user = _get_user_or_404(db, user_id)
    user.role = body.role
    _commit_user(db, user)
    return UserResponse(
        message="User role updated successfully", user=CurrentUser.model_validate(user)
    )


def _set_active(db: Session, user_id: int, active: bool) -> User:
    user = _get_user_or_404(db, user_id)
    user.is_active = active
    _commit_user(db, user)
    return user


@router.patch("/users/{user_id}/deactivate", response_model=UserResponse)
def deactivate_user(
    user_id: int,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Deactivate an account (admin only); its tokens stop working immediately."""
    user = _set_active(db, user_id, False)
    return UserResponse(
        message="User deactivated successfully", user=CurrentUser.model_validate(user)
    )


@router.patch("/users/{user_id}/activate", response_model=UserResponse)
def activate_user(
    user_id: int,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Re-activate an account (admin only)."""
    user = _set_active(db, user_id, True)
    return UserResponse(
        message="User activated successfully", user=CurrentUser.model_validate(user)
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
) -> MessageResponse:
    """Acknowledge logout. Tokens are stateless; the client discards its copy."""
    return MessageResponse(message="Logout successful")
