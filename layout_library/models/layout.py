"""ORM model for uploaded layouts (thumbnail, attachments and metadata)."""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from layout_library.models.base import Base, utcnow

# Width of the short text columns (title, type, category); handlers reject longer values.
FIELD_MAX_LEN = 255


class Layout(Base):
    """
    A library entry: one thumbnail plus one or more attached files.

    ``thumbnail`` and ``file`` hold stored file names inside the upload
    directory. ``archived`` is a soft delete; only permanent delete removes
    the row (and its files).
    """

    __tablename__ = "layouts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(FIELD_MAX_LEN), nullable=False)
    type = Column(String(FIELD_MAX_LEN), nullable=False, index=True)
    thumbnail = Column(String(1024), nullable=False)
    file = Column(JSON, nullable=False, default=list)
    tech_stack = Column(JSON, nullable=False, default=list)
    category = Column(String(FIELD_MAX_LEN), nullable=False, default="General")
    archived = Column(Boolean, nullable=False, default=False, index=True)
    description = Column(Text, nullable=True)
    created_by_id = Column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )

    creator = relationship("User", back_populates="layouts")

    @property
    def stored_files(self) -> list[str]:
        """Every stored file name this layout references (thumbnail first)."""
        names = [self.thumbnail] if self.thumbnail else []
        names.extend(self.file or [])
        return names
