"""Main FastAPI application."""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from meeting_router import __version__
from meeting_router.config import config
from meeting_router.health import router as health_router
from meeting_router.logging_config import bind_request_context, logger
from meeting_router.metrics import api_request_duration, api_requests_total
from meeting_router.routers.agents import router as agents_router
from meeting_router.routers.bookings import router as bookings_router
from meeting_router.routers.catalog import router as catalog_router
from meeting_router.routers.core import router as core_router

# Metrics label for requests that match no route
UNMATCHED_ENDPOINT = "unmatched"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logger.info("application_starting", version=__version__)
    logger.info("directory_configured", configured=config.has_directory_config())
    logger.info("calcom_configured", configured=config.has_calcom_config())
    logger.info("operating_timezone", timezone=config.OPERATING_TIMEZONE)

    yield

    logger.info("application_shutting_down")


app = FastAPI(
    title="Meeting Router API",
    description="Agent assignment for the meeting booking form",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def record_request_metrics(request: Request, call_next):
    bind_request_context(method=request.method, path=request.url.path)
    started = time.perf_counter()
    response = await call_next(request)
    api_request_duration.observe(time.perf_counter() - started)
    # Route template, not the raw path, to keep label cardinality bounded
    route = request.scope.get("route")
    endpoint = getattr(route, "path", UNMATCHED_ENDPOINT)
    api_requests_total.labels(
        method=request.method,
        endpoint=endpoint,
        status=str(response.status_code),
    ).inc()
    return response


app.include_router(health_router)
app.include_router(core_router)
app.include_router(agents_router)
app.include_router(catalog_router)
app.include_router(bookings_router)
