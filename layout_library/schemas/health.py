"""Health check response: database reachability and upload storage state."""

from typing import Literal

from pydantic import BaseModel, Field

UploadDirStatus = Literal["writable", "read-only", "missing"]


class HealthResponse(BaseModel):
    """Body of GET /api/health. ``status`` is 'degraded' when either dependency is unusable."""

    status: Literal["ok", "degraded"] = "ok"
    environment: str = Field(description="APP_ENV (dev or prod)")
    database: Literal["connected", "disconnected"]
    uploads: UploadDirStatus = Field(description="State of UPLOAD_DIR")
