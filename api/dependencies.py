"""Shared engine wiring and the cron-secret check for trigger routes."""

from typing import Optional

from fastapi import Header, HTTPException

from claimcadence.engine import authorize_trigger
from claimcadence.exceptions import UnauthorizedTriggerError
from claimcadence.service import EngineServices


# Set once at startup by api.main (or directly by tests)
services: Optional[EngineServices] = None
cron_secret: Optional[str] = None


def set_services(s: Optional[EngineServices], secret: Optional[str]):
    global services, cron_secret
    services = s
    cron_secret = secret


def require_cron_secret(x_cron_secret: Optional[str] = Header(default=None)) -> None:
    """Reject the request unless x-cron-secret matches the configured secret."""
    try:
        authorize_trigger(x_cron_secret, cron_secret)
    except UnauthorizedTriggerError:
        raise HTTPException(status_code=401, detail="unauthorized") from None


def get_services() -> EngineServices:
    if services is None:
        raise HTTPException(status_code=503, detail="Engine not configured")
    return services
