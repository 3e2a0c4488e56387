"""Layout endpoints: multipart upload, listing, update, archive/restore and permanent delete."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from layout_library.api.auth import get_current_user, require_admin
from layout_library.core.config import get_settings
from layout_library.core.database import get_db
from layout_library.models import Layout
from layout_library.models.layout import FIELD_MAX_LEN
from layout_library.schemas.auth import CurrentUser
from layout_library.schemas.common import MessageResponse
from layout_library.schemas.layout import FILTER_ARCHIVE, LayoutEnvelope, LayoutResponse
from layout_library.services.layouts import (
    DEFAULT_CATEGORY,
    delete_layout_permanently,
    get_layout,
    list_layouts,
    normalize_tech_stack,
    set_archived,
)
from layout_library.services.storage import (
    TooManyFilesError,
    UploadTooLargeError,
    delete_stored_files,
    save_uploads,
)

logger = logging.getLogger(__name__)
router = APIRouter()

NOT_FOUND = "Item not found"


def _check_lengths(**fields: str | None) -> None:
    """400 for a text field longer than its column (PostgreSQL would reject it)."""
    for name, value in fields.items():
        if value is not None and len(value) > FIELD_MAX_LEN:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{name.capitalize()} must be at most {FIELD_MAX_LEN} characters",
            )


def _non_empty(uploads: list[UploadFile] | None) -> list[UploadFile]:
    """Drop empty parts (browsers send a nameless part for an untouched file input)."""
    return [u for u in uploads or [] if u.filename]


def _check_part_counts(thumbnails: list[UploadFile], files: list[UploadFile]) -> None:
    settings = get_settings()
    if len(thumbnails) > 1:
        raise TooManyFilesError("Only one thumbnail may be uploaded")
    if len(files) > settings.MAX_ATTACHMENTS:
        raise TooManyFilesError(f"At most {settings.MAX_ATTACHMENTS} files may be uploaded")


async def _store_parts(
    thumbnails: list[UploadFile],
    files: list[UploadFile],
) -> tuple[str | None, list[str]]:
    """
    Write the thumbnail and attachments to the upload directory.

    Returns (thumbnail name or None, attachment names). Nothing from this
    request remains on disk if any part fails.
    """
    settings = get_settings()
    try:
        _check_part_counts(thumbnails, files)
        stored_thumbs = await save_uploads(
            thumbnails, settings.UPLOAD_DIR, settings.max_upload_file_bytes
        )
        try:
            stored_files = await save_uploads(
                files, settings.UPLOAD_DIR, settings.max_upload_file_bytes
            )
        except BaseException:
            delete_stored_files(stored_thumbs, settings.UPLOAD_DIR)
            raise
    except TooManyFilesError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    except UploadTooLargeError as e:
        logger.warning("Rejected upload: %s", e.message)
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="File too large",
        ) from e
    return (stored_thumbs[0] if stored_thumbs else None), stored_files


@router.post("/upload", response_model=LayoutEnvelope, status_code=status.HTTP_201_CREATED)
async def upload_layout(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    title: Annotated[str | None, Form()] = None,
    type: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    tech_stack: Annotated[list[str] | None, Form(alias="techStack")] = None,
    thumbnail: Annotated[list[UploadFile] | None, File()] = None,
    file: Annotated[list[UploadFile] | None, File()] = None,
) -> LayoutEnvelope:
    """
    Upload a layout: multipart form with `title`, `type`, `description`,
    `techStack` (repeatable), one `thumbnail` and up to ten `file` parts.

    The caller becomes the owner. Returns 201 with the created layout.
    """
    thumbnails = _non_empty(thumbnail)
    files = _non_empty(file)
    if not thumbnails or not files:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Thumbnail and File are required",
        )
    if not title or not type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Title and type are required",
        )

    _check_lengths(title=title, type=type)
    stored_thumb, stored_files = await _store_parts(thumbnails, files)
    layout = Layout(
        title=title,
        type=type,
        description=description,
        tech_stack=normalize_tech_stack(tech_stack),
        thumbnail=stored_thumb,
        file=stored_files,
        archived=False,
        created_by_id=current_user.id,
    )
    db.add(layout)
    db.commit()
    db.refresh(layout)
    logger.info(
        "Layout %s uploaded by %s (%s files)", layout.id, current_user.username, len(stored_files)
    )
    return LayoutEnvelope(
        message="Upload successful",
        data=LayoutResponse.from_layout(layout, expand_creator=False),
    )


@router.get("/layouts", response_model=list[LayoutResponse])
def get_layouts(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    type: Annotated[str | None, Query(description="Layout type, 'All' or 'Archive'")] = None,
) -> list[LayoutResponse]:
    """List layouts newest first, optionally filtered by type (or 'Archive')."""
    return [LayoutResponse.from_layout(layout) for layout in list_layouts(db, type)]


@router.get("/layouts/{layout_id}", response_model=LayoutResponse)
def get_layout_by_id(
    layout_id: int,
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> LayoutResponse:
    """Return one layout, archived or not."""
    layout = get_layout(db, layout_id)
    if layout is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return LayoutResponse.from_layout(layout)


@router.get("/archived", response_model=list[LayoutResponse])
def get_archived(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[LayoutResponse]:
    """List archived layouts only, newest first."""
    return [LayoutResponse.from_layout(layout) for layout in list_layouts(db, FILTER_ARCHIVE)]


@router.patch("/layouts/{layout_id}", response_model=LayoutEnvelope)
async def update_layout(
    layout_id: int,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    title: Annotated[str | None, Form()] = None,
    type: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    category: Annotated[str | None, Form()] = None,
    tech_stack: Annotated[list[str] | None, Form(alias="techStack")] = None,
    thumbnail: Annotated[list[UploadFile] | None, File()] = None,
    file: Annotated[list[UploadFile] | None, File()] = None,
) -> LayoutEnvelope:
    """
    Replace a layout's metadata (admin only).

    Description, category (default 'General') and techStack are always
    overwritten; title and type are overwritten whenever the field is sent.
    Thumbnail and files are replaced only when new ones are uploaded.
    """
    layout = get_layout(db, layout_id)
    if layout is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Layout not found")

    _check_lengths(title=title, type=type, category=category)
    stored_thumb, stored_files = await _store_parts(_non_empty(thumbnail), _non_empty(file))

    if title is not None:
        layout.title = title
    if type is not None:
        layout.type = type
    layout.description = description
    layout.category = category or DEFAULT_CATEGORY
    layout.tech_stack = normalize_tech_stack(tech_stack)
    if stored_thumb is not None:
        layout.thumbnail = stored_thumb
    if stored_files:
        layout.file = stored_files
    db.commit()
    db.refresh(layout)
    return LayoutEnvelope(
        message="Layout updated successfully",
        data=LayoutResponse.from_layout(layout),
    )


@router.patch("/layouts/{layout_id}/archive", response_model=LayoutEnvelope)
def archive_layout(
    layout_id: int,
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> LayoutEnvelope:
    """Soft-delete: hide the layout from default and type listings."""
    layout = set_archived(db, layout_id, True)
    if layout is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return LayoutEnvelope(
        message="Item archived",
        data=LayoutResponse.from_layout(layout, expand_creator=False),
    )


@router.patch("/layouts/{layout_id}/restore", response_model=LayoutEnvelope)
def restore_layout(
    layout_id: int,
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> LayoutEnvelope:
    """Undo archive."""
    layout = set_archived(db, layout_id, False)
    if layout is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return LayoutEnvelope(
        message="Item restored",
        data=LayoutResponse.from_layout(layout, expand_creator=False),
    )


@router.delete("/layouts/{layout_id}/permanent", response_model=MessageResponse)
def delete_layout(
    layout_id: int,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Delete the layout row and its stored files (admin only)."""
    layout = get_layout(db, layout_id)
    if layout is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    delete_layout_permanently(db, layout, get_settings().UPLOAD_DIR)
    logger.info("Layout %s permanently deleted by %s", layout_id, _admin.username)
    return MessageResponse(message="Item permanently deleted")
