from fastapi import APIRouter, Depends, HTTPException

from meeting_router.dependencies import get_specializations_cache
from meeting_router.errors import ConfigurationError, DirectoryFetchError
from meeting_router.identity_cache import TimedCache
from meeting_router.language.collation import sort_by_name
from meeting_router.logging_config import get_logger
from meeting_router.models import SpecializationsResponse

logger = get_logger(__name__)

router = APIRouter(tags=["Catalog"])


# GET /specializations
# Gets: nothing
# Returns: SpecializationsResponse {specializations: [{id, name}]} sorted alef to tav
# Example:
#   curl http://localhost:8000/specializations
@router.get("/specializations", response_model=SpecializationsResponse)
async def list_specializations(cache: TimedCache = Depends(get_specializations_cache)):
    """Lead categories the booking form can filter agents by."""

    try:
        specializations = await cache.get()
    except ConfigurationError as e:
        logger.error("specializations_configuration_missing", error=str(e))
        raise HTTPException(status_code=500, detail="Missing Airtable configuration")
    except DirectoryFetchError as e:
        logger.error("specializations_fetch_failed", error=str(e), status_code=e.status_code)
        raise HTTPException(status_code=500, detail="Failed to fetch specializations")

    return SpecializationsResponse(specializations=sort_by_name(specializations, lambda s: s.name))
