"""Shared helpers for API tests: fresh schema, accounts, tokens and layout rows."""

from datetime import UTC, datetime, timedelta
from pathlib import Path

from layout_library.core.config import get_settings
from layout_library.core.database import SessionLocal, engine
from layout_library.core.security import create_access_token
from layout_library.models import Base, Layout, User
from layout_library.services.accounts import create_user

DEFAULT_PASSWORD = "secret123"


def reset_database() -> None:
    """Drop and recreate all tables in the in-memory database."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def upload_dir() -> Path:
    path = Path(get_settings().UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def clear_upload_dir() -> None:
    for entry in upload_dir().iterdir():
        if entry.is_file():
            entry.unlink()


def make_user(
    username: str,
    role: str = "user",
    password: str = DEFAULT_PASSWORD,
    active: bool = True,
) -> int:
    """Create an account and return its id."""
    db = SessionLocal()
    try:
        user = create_user(db, username, f"{username}@example.com", password, role)
        if not active:
            user.is_active = False
            db.commit()
        return user.id
    finally:
        db.close()


def get_user(user_id: int) -> User | None:
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.id == user_id).first()
        if user is not None:
            db.expunge(user)
        return user
    finally:
        db.close()


def auth_headers(user_id: int) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(sub=user_id)}"}


def make_layout(
    owner_id: int,
    title: str = "Layout",
    type: str = "Web",
    archived: bool = False,
    thumbnail: str = "1700000000000-thumb.png",
    files: list[str] | None = None,
    age_minutes: int = 0,
) -> int:
    """Insert a layout row directly; older rows get a larger age_minutes."""
    db = SessionLocal()
    try:
        layout = Layout(
            title=title,
            type=type,
            archived=archived,
            thumbnail=thumbnail,
            file=files if files is not None else ["1700000000000-file.zip"],
            tech_stack=[],
            created_by_id=owner_id,
            created_at=datetime.now(UTC) - timedelta(minutes=age_minutes),
        )
        db.add(layout)
        db.commit()
        return layout.id
    finally:
        db.close()


def get_layout_row(layout_id: int) -> Layout | None:
    db = SessionLocal()
    try:
        layout = db.query(Layout).filter(Layout.id == layout_id).first()
        if layout is not None:
            db.expunge(layout)
        return layout
    finally:
        db.close()
