"""Layout queries and lifecycle operations shared by the layout endpoints."""

import logging
from pathlib import Path

from sqlalchemy.orm import Session, joinedload

from layout_library.models import Layout
from layout_library.schemas.layout import FILTER_ALL, FILTER_ARCHIVE
from layout_library.services.storage import delete_stored_files

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "General"


def normalize_tech_stack(value: str | list[str] | None) -> list[str]:
    """Tech stack may arrive as one form value or several; always return a list."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    return [v for v in value if v]


def list_layouts(db: Session, type_filter: str | None = None) -> list[Layout]:
    """
    Layouts newest first, creator loaded.

    No filter or "All": every non-archived layout. "Archive": archived layouts
    only. Anything else: non-archived layouts of that type.
    """
    query = db.query(Layout).options(joinedload(Layout.creator))
    if type_filter and type_filter not in (FILTER_ALL, FILTER_ARCHIVE):
        query = query.filter(Layout.type == type_filter, Layout.archived.is_(False))
    elif type_filter == FILTER_ARCHIVE:
        query = query.filter(Layout.archived.is_(True))
    else:
        query = query.filter(Layout.archived.is_(False))
    return query.order_by(Layout.created_at.desc(), Layout.id.desc()).all()


def get_layout(db: Session, layout_id: int) -> Layout | None:
    """Layout by id regardless of archived state, creator loaded."""
    return (
        db.query(Layout)
        .options(joinedload(Layout.creator))
        .filter(Layout.id == layout_id)
        .first()
    )


def set_archived(db: Session, layout_id: int, archived: bool) -> Layout | None:
    """Flip the archived flag; None if the layout does not exist."""
    layout = db.query(Layout).filter(Layout.id == layout_id).first()
    if layout is None:
        return None
    layout.archived = archived
    db.commit()
    db.refresh(layout)
    return layout


def delete_layout_permanently(db: Session, layout: Layout, upload_dir: str | Path) -> int:
    """
    Remove the layout's thumbnail and attachments from disk, then the row.

    File deletion is best-effort per file; failures are logged and the row is
    deleted regardless. Returns the number of files removed.
    """
    removed = delete_stored_files(layout.stored_files, upload_dir)
    if removed < len(layout.stored_files):
        logger.warning(
            "Layout %s: removed %s of %s stored files",
            layout.id,
            removed,
            len(layout.stored_files),
        )
    db.delete(layout)
    db.commit()
    return removed
