"""Health check endpoint."""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

router = APIRouter()

HEALTH_VERSION = "1.0.0"
SERVICE_STARTED_AT = datetime.now(timezone.utc)


def _iso_utc(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _uptime_seconds(now: datetime) -> int:
    return max(0, int((now - SERVICE_STARTED_AT).total_seconds()))


class HealthResponse(BaseModel):
    """GET /api/health response."""

    model_config = ConfigDict(extra="forbid")
    status: Annotated[str, Field(description="Always 'ok'")]
    version: Annotated[str, Field(description="Semver MAJOR.MINOR.PATCH")]
    timestamp: Annotated[str, Field(description="ISO8601 UTC")]
    uptime_seconds: Annotated[int, Field(description="Seconds service has been up")]


@router.get("/health", response_model=HealthResponse)
async def health():
    """Return API health status."""
    now = datetime.now(timezone.utc)
    return HealthResponse(
        status="ok",
        version=HEALTH_VERSION,
        timestamp=_iso_utc(now),
        uptime_seconds=_uptime_seconds(now),
    )
