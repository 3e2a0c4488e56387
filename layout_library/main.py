"""FastAPI application entrypoint. No business logic; only wiring, middleware and error rendering."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from layout_library.api import router as api_router
from layout_library.core.config import settings
from layout_library.core.database import SessionLocal
from layout_library.schemas.common import ErrorResponse
from layout_library.services.accounts import ensure_default_admin
from layout_library.services.storage import ensure_upload_dir

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def bootstrap_default_admin() -> None:
    """Create the default admin if none exists. Failures are logged, not fatal."""
    db = SessionLocal()
    try:
        ensure_default_admin(db, settings)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Error creating default admin: %s", e)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    upload_dir = ensure_upload_dir(settings.UPLOAD_DIR)
    logger.info("Serving uploads from %s", upload_dir.resolve())
    if settings.BOOTSTRAP_ADMIN:
        bootstrap_default_admin()
    yield


app = FastAPI(
    title="Layout Library API",
    version="0.1.0",
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=f"{settings.API_PREFIX}/redoc",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as {"message": ...}; unmatched routes get "Route not found"."""
    message = str(exc.detail)
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = "Route not found"
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=message).model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed input is a 400 with the field errors attached."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(message="Invalid request", error=errors).model_dump(),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: generic 500, exception text only in dev."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    body = ErrorResponse(
        message="Something went wrong!",
        error=str(exc) if settings.APP_ENV == "dev" else None,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(exclude_none=True),
    )


@app.get(settings.API_PREFIX or "/", response_class=PlainTextResponse)
def root() -> str:
    """Liveness string."""
    return "Server is running"


app.include_router(api_router, prefix=f"{settings.API_PREFIX}/api")
app.mount(
    f"{settings.API_PREFIX}/uploads",
    StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
    name="uploads",
)
