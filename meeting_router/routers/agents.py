import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from meeting_router.config import config
from meeting_router.dependencies import get_resolver
from meeting_router.errors import ConfigurationError, DirectoryFetchError
from meeting_router.logging_config import get_logger
from meeting_router.models import AgentOut, AgentsResponse, AssignmentMode, RoutingContext
from meeting_router.resolver import AssignmentResolver

logger = get_logger(__name__)

router = APIRouter(tags=["Agents"])


# GET /agents
# Gets: query params categoryFilter?, interestFilter?, evenDistribution (bool), manualMode (bool)
# Returns: AgentsResponse {agents: [{id, name, email?, accountId?, dailyLimit?, monthlyLimit?, weight?, phone?}]}
# Example:
#   curl 'http://localhost:8000/agents?categoryFilter=Mortgage&evenDistribution=true'
@router.get("/agents", response_model=AgentsResponse, response_model_exclude_none=True)
async def list_agents(
    category_filter: Optional[str] = Query(None, alias="categoryFilter"),
    interest_filter: Optional[str] = Query(None, alias="interestFilter"),
    even_distribution: bool = Query(False, alias="evenDistribution"),
    manual_mode: bool = Query(False, alias="manualMode"),
    resolver: AssignmentResolver = Depends(get_resolver),
):
    """Agents a meeting can be routed to, sorted by name."""

    context = RoutingContext(
        mode=AssignmentMode.MANUAL if manual_mode else AssignmentMode.AUTOMATIC,
        category_filter=(category_filter or "").strip() or None,
        interest_filter=(interest_filter or "").strip() or None,
        even_distribution=even_distribution,
    )

    try:
        candidates = await asyncio.wait_for(
            resolver.resolve(context),
            timeout=config.RESOLVE_TIMEOUT_SECONDS,
        )
    except ConfigurationError as e:
        logger.error("agents_configuration_missing", error=str(e))
        raise HTTPException(status_code=500, detail="Missing Airtable configuration")
    except DirectoryFetchError as e:
        logger.error("agents_directory_fetch_failed", error=str(e), status_code=e.status_code)
        raise HTTPException(status_code=500, detail="Failed to fetch agents")
    except asyncio.TimeoutError:
        logger.error("agents_resolve_timeout", timeout_seconds=config.RESOLVE_TIMEOUT_SECONDS)
        raise HTTPException(status_code=504, detail="Upstream timeout")

    return AgentsResponse(agents=[AgentOut.from_candidate(c) for c in candidates])
