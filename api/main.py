"""
ClaimCadence API

HTTP triggers for the claim automation engine. An external scheduler
calls the /automation and /follow-ups routes on a fixed cadence with the
shared x-cron-secret header.

Endpoints:
    POST /automation/run       - Autonomous tick
    POST /follow-ups/run       - General follow-up track
    POST /follow-ups/rd/run    - Recoverable depreciation follow-up track
    POST /deadlines/calculate  - Carrier deadline calculation
    GET  /deadlines/profiles   - Configured deadline-type profiles
    GET  /health               - Liveness check
    GET  /api                  - Service info
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from api import dependencies
from api.routes import automation, deadlines, follow_ups
from api.schemas.responses import HealthResponse
from claimcadence import __version__
from claimcadence.config import Settings
from claimcadence.engine import DeadlineCalculator
from claimcadence.exceptions import ClaimCadenceError
from claimcadence.logging_config import configure_logging
from claimcadence.service import build_services

logger = logging.getLogger("claimcadence.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wire the engine from the environment on startup."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    logger.info("ClaimCadence API v%s starting", __version__)

    if not settings.cron_secret:
        logger.warning("CLAIMCADENCE_CRON_SECRET is not set; every trigger will be rejected")

    try:
        services = build_services(settings)
    except ClaimCadenceError as e:
        logger.error("Engine not configured: %s", e)
        dependencies.set_services(None, settings.cron_secret)
    else:
        dependencies.set_services(services, settings.cron_secret)
        deadlines.set_calculator(DeadlineCalculator(profiles=services.rules.deadline_profiles))
        logger.info(
            "Engine ready (follow-ups %s, classifier %s)",
            "enabled" if services.text_generator else "disabled",
            "enabled" if services.classifier else "disabled",
        )

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title="ClaimCadence API",
    description="""
**Claim automation and escalation engine.**

Scheduled batch routines that complete superseded follow-up tasks, send
AI-drafted replies behind a keyword guardrail, log escalations for stalled
claims and approaching carrier deadlines, and run capped follow-up
cadences.

Trigger routes require the `x-cron-secret` header.
    """,
    version=__version__,
    lifespan=lifespan,
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID to all requests."""
    request_id = str(uuid.uuid4())[:8]
    request.state.request_id = request_id
    started = time.time()

    response = await call_next(request)

    response.headers["X-Request-ID"] = request_id
    logger.info(
        "%s %s -> %d",
        request.method,
        request.url.path,
        response.status_code,
        extra={"request_id": request_id, "duration_ms": round((time.time() - started) * 1000)},
    )
    return response


app.include_router(automation.router)
app.include_router(follow_ups.router)
app.include_router(deadlines.router)


@app.get("/api", tags=["Health"])
async def api_info():
    """API info endpoint - JSON health check and info."""
    return {
        "service": "ClaimCadence API",
        "version": __version__,
        "status": "running",
        "engine_configured": dependencies.services is not None,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health():
    """Health check endpoint."""
    services = dependencies.services
    return HealthResponse(
        healthy=True,
        engine_configured=services is not None,
        follow_ups_available=services is not None and services.text_generator is not None,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
