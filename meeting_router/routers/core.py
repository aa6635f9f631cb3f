from fastapi import APIRouter

from meeting_router import __version__

router = APIRouter(tags=["Core"])


# GET /
# Gets: nothing
# Returns: basic API metadata and a map of key endpoints
# Example:
#   curl http://localhost:8000/
@router.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Meeting Router API - agent assignment for the meeting booking form",
        "version": __version__,
        "description": "Chooses which agents a new meeting can be booked with, honouring routing flags, monthly quotas and even distribution",
        "endpoints": {
            "agents": "/agents",
            "specializations": "/specializations",
            "booked_hosts": "/bookings/hosts",
            "health": "/health",
            "metrics": "/metrics",
        },
        "features": [
            "Airtable directory with Hebrew routing flags",
            "Cal.com identity correlation",
            "Monthly quota with fallback",
            "Even distribution",
            "Manual dispatcher mode",
        ],
    }
