"""Autonomous tick trigger."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_services, require_cron_secret
from api.schemas.responses import AutomationRunResponse
from claimcadence.exceptions import ClaimCadenceError
from claimcadence.service import EngineServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/automation", tags=["Automation"])


@router.post(
    "/run",
    response_model=AutomationRunResponse,
    dependencies=[Depends(require_cron_secret)],
)
def run_automation(services: EngineServices = Depends(get_services)):
    """
    Run one autonomous tick.

    Completes superseded follow-up tasks, sends clean AI drafts and logs
    escalations for every autonomous claim under its daily quota. Runs
    synchronously and returns the tick summary.
    """
    try:
        summary = services.automation_runner().run()
    except ClaimCadenceError as e:
        logger.error("Autonomous tick failed: %s", e)
        raise HTTPException(status_code=500, detail=e.to_dict()) from e
    return {"success": True, "results": summary.to_dict()}
