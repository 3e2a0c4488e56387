"""Password hashing, JWT creation/verification and role checks for authentication."""

from datetime import UTC, datetime, timedelta
from typing import Any, Literal

import bcrypt
import jwt

from layout_library.core.config import settings

Role = Literal["admin", "user"]

ROLE_VALUES: frozenset[str] = frozenset({"admin", "user"})

# Registration and password-change limits.
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128


def is_valid_role(role: object) -> bool:
    """True if role is one of the two recognised account roles."""
    return isinstance(role, str) and role in ROLE_VALUES


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(sub: str | int, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token with sub (account id), iat and exp."""
    now = datetime.now(UTC)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(sub),
        "exp": now + expires_delta,
        "iat": now,
    }
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.encode(
        payload,
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate JWT; return payload (sub, exp, iat).
    Raises jwt.PyJWTError on invalid or expired token.
    """
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.decode(
        token,
        secret,
        algorithms=[settings.JWT_ALGORITHM],
    )


def is_admin_or_owner(subject_id: int, subject_role: str, owner_id: int | str | None) -> bool:
    """True if the subject is an admin or is the owner of the target resource."""
    if subject_role == "admin":
        return True
    if owner_id is None:
        return False
    return str(subject_id) == str(owner_id)
