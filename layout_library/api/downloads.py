"""Forced-download endpoint for stored thumbnails and attachments."""

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse

from layout_library.core.config import get_settings
from layout_library.services.storage import original_name, resolve_stored_path

router = APIRouter()


@router.get("/{filename}", response_class=FileResponse)
def download_file(filename: str) -> FileResponse:
    """
    Send a stored file as an attachment named after the original upload
    (the stored name without its timestamp prefix). Unauthenticated, like
    the static uploads mount.
    """
    try:
        path = resolve_stored_path(get_settings().UPLOAD_DIR, filename)
    except ValueError:
        path = None
    if path is None or not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return FileResponse(
        path,
        media_type="application/octet-stream",
        filename=original_name(filename),
    )
