"""Follow-up track triggers."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_services, require_cron_secret
from api.schemas.responses import FollowUpRunResponse
from claimcadence.exceptions import ClaimCadenceError
from claimcadence.models import FollowUpTrackKind
from claimcadence.service import EngineServices

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/follow-ups",
    tags=["Follow-ups"],
    dependencies=[Depends(require_cron_secret)],
)


def _run(services: EngineServices, kind: FollowUpTrackKind) -> dict:
    try:
        summary = services.follow_up_scheduler().run(kind)
    except ClaimCadenceError as e:
        logger.error("%s follow-up run failed: %s", kind.value, e)
        raise HTTPException(status_code=500, detail=e.to_dict()) from e
    return {"success": True, **summary.to_dict()}


@router.post("/run", response_model=FollowUpRunResponse)
def run_general_follow_ups(services: EngineServices = Depends(get_services)):
    """Send due general follow-ups."""
    return _run(services, FollowUpTrackKind.GENERAL)


@router.post("/rd/run", response_model=FollowUpRunResponse)
def run_rd_follow_ups(services: EngineServices = Depends(get_services)):
    """Send due recoverable depreciation follow-ups."""
    return _run(services, FollowUpTrackKind.RECOVERABLE_DEPRECIATION)
