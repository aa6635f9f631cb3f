"""
Health check and monitoring endpoints for production.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from meeting_router import __version__
from meeting_router.config import config
from meeting_router.dependencies import get_identity_correlator
from meeting_router.logging_config import logger

router = APIRouter(tags=["Health & Monitoring"])


# GET /health
# Gets: nothing
# Returns: {status, service, version}
# Example:
#   curl http://localhost:8000/health
@router.get("/health")
async def health_check():
    """
    Basic health check - returns 200 if service is running.
    Use this for basic liveness probes.
    """
    return {
        "status": "healthy",
        "service": "meeting-router",
        "version": __version__,
    }


# GET /health/ready
# Gets: nothing
# Returns: configuration readiness checks; 503 when the agents directory is not configured
# Example:
#   curl http://localhost:8000/health/ready
@router.get("/health/ready")
async def readiness_check():
    """
    Readiness check - verifies required upstream configuration.
    Use this for Kubernetes readiness probes.

    Checks:
    - Airtable agents table (required)
    - Cal.com key and team (optional: without it no agent is bookable)
    - Identity cache warm (informational)
    """
    checks = {
        "directory": config.has_directory_config(),
        "calcom": config.has_calcom_config() or "not_configured",
        "identity_cache_warm": get_identity_correlator().cache.has_value,
        "ready": False,
    }

    if not config.has_calcom_config():
        logger.warning("readiness_check_calcom", status="not_configured")

    checks["ready"] = bool(checks["directory"])

    status_code = 200 if checks["ready"] else 503
    return JSONResponse(content=checks, status_code=status_code)


# GET /health/info
# Gets: nothing
# Returns: service configuration summary
# Example:
#   curl http://localhost:8000/health/info
@router.get("/health/info")
async def system_info():
    """
    System information and configuration status.
    """
    return {
        "service": "meeting-router",
        "version": __version__,
        "configuration": {
            "directory_configured": config.has_directory_config(),
            "specializations_configured": config.has_specializations_config(),
            "calcom_configured": config.has_calcom_config(),
            "operating_timezone": config.OPERATING_TIMEZONE,
            "identity_cache_ttl_seconds": config.IDENTITY_CACHE_TTL_SECONDS,
            "fairness_gap": config.FAIRNESS_GAP,
            "debug_mode": config.DEBUG,
        },
        "features": {
            "quota_routing": config.has_calcom_key(),
            "even_distribution": config.has_calcom_key(),
            "specializations": config.has_specializations_config(),
        },
    }


# GET /metrics
# Gets: nothing
# Returns: Prometheus text exposition
# Example:
#   curl http://localhost:8000/metrics
@router.get("/metrics")
async def metrics():
    """Prometheus scrape endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
