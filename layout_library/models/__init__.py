"""SQLAlchemy ORM models."""

from layout_library.models.base import Base
from layout_library.models.layout import Layout
from layout_library.models.user import User

__all__ = ["Base", "Layout", "User"]
