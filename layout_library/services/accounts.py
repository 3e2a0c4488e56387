"""Account creation helpers shared by the register endpoint, startup bootstrap and CLI."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy import or_
from sqlalchemy.orm import Session

from layout_library.models import User

if TYPE_CHECKING:
    from layout_library.core.config import Settings

logger = logging.getLogger(__name__)


def find_conflicting_user(
    db: Session,
    username: str,
    email: str,
    exclude_id: int | None = None,
) -> User | None:
    """Return an account that already uses this username or email, if any."""
    query = db.query(User).filter(or_(User.username == username, User.email == email))
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first()


def create_user(db: Session, username: str, email: str, password: str, role: str = "user") -> User:
    """Persist a new account; the password is hashed on assignment."""
    user = User(username=username, email=email, role=role, is_active=True)
    user.password = password
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def ensure_default_admin(db: Session, settings: "Settings") -> User | None:
    """
    Create the configured default admin when no admin account exists.

    Returns the new account, or None if an admin was already present.
    """
    if db.query(User).filter(User.role == "admin").first() is not None:
        return None
    user = create_user(
        db,
        username=settings.DEFAULT_ADMIN_USERNAME,
        email=settings.DEFAULT_ADMIN_EMAIL,
        password=settings.DEFAULT_ADMIN_PASSWORD.get_secret_value(),
        role="admin",
    )
    logger.warning(
        "Default admin created: %s (change its password)", settings.DEFAULT_ADMIN_EMAIL
    )
    return user
