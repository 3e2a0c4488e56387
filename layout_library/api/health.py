"""Readiness endpoint: can we reach the database and write uploads?"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from layout_library.core.config import get_settings
from layout_library.core.database import check_db_connected, get_db
from layout_library.schemas.health import HealthResponse
from layout_library.services.storage import upload_dir_status

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(db: Annotated[Session, Depends(get_db)]) -> HealthResponse:
    """Report database connectivity and upload directory state; unauthenticated."""
    settings = get_settings()
    database = "connected" if check_db_connected(db) else "disconnected"
    uploads = upload_dir_status(settings.UPLOAD_DIR)
    healthy = database == "connected" and uploads == "writable"
    return HealthResponse(
        status="ok" if healthy else "degraded",
        environment=settings.APP_ENV,
        database=database,
        uploads=uploads,
    )
