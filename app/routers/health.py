# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# /health        process is up; lists the buckets this service manages
# /health/ready  profile table answers and every managed bucket exists
# /health/live   process is alive, for restart decisions
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from app.dependencies import SupabaseDep
from core.models.schemas import PROFILE

SERVICE_NAME = "portfolio-api"
SERVICE_VERSION = "1.0.0"

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Service identity plus the buckets it keeps in step with records."""
    status: str
    service: str
    version: str
    environment: str
    buckets: list[str]
    max_upload_mb: int
    timestamp: str


class ChecksResponse(BaseModel):
    database: str
    storage: str


class ReadinessResponse(BaseModel):
    status: str
    checks: ChecksResponse
    timestamp: str


class LivenessResponse(BaseModel):
    status: str
    service: str
    timestamp: str


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Static health: no store is contacted."""
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        environment=settings.ENVIRONMENT,
        buckets=settings.managed_buckets,
        max_upload_mb=settings.MAX_UPLOAD_SIZE_MB,
        timestamp=_now(),
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(supabase: SupabaseDep):
    """
    Readiness check endpoint.

    Ready when the profile table answers and every managed bucket exists.
    Uploads and cleanup fail against a missing bucket, so a missing one
    reports "degraded" and names it.
    """
    checks = ChecksResponse(database="unknown", storage="unknown")

    try:
        client = supabase.get_client()
        client.table(PROFILE.table).select("id").limit(1).execute()
        checks.database = "healthy"
    except Exception as e:
        checks.database = f"unhealthy: {str(e)[:50]}"

    try:
        client = supabase.get_client()
        existing = {getattr(b, "name", None) or getattr(b, "id", None) for b in client.storage.list_buckets()}
        missing = sorted(set(settings.managed_buckets) - existing)
        checks.storage = "healthy" if not missing else f"missing buckets: {', '.join(missing)}"
    except Exception as e:
        checks.storage = f"unhealthy: {str(e)[:50]}"

    all_healthy = checks.database == "healthy" and checks.storage == "healthy"

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        checks=checks,
        timestamp=_now(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    return LivenessResponse(status="alive", service=SERVICE_NAME, timestamp=_now())
