"""Core app configuration, database and security."""

from layout_library.core.config import get_settings, settings
from layout_library.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
