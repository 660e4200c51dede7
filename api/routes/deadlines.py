"""Carrier deadline calculation endpoint."""

from datetime import date

from fastapi import APIRouter, HTTPException

from api.schemas.requests import DeadlineRequest
from api.schemas.responses import DeadlineResponse
from claimcadence.engine import DeadlineCalculator
from claimcadence.exceptions import DeadlineCalculationError, UnknownDeadlineTypeError
from claimcadence.models import CarrierDeadline, DeadlineStatus

router = APIRouter(prefix="/deadlines", tags=["Deadlines"])

# Replaced at startup when an engine config overrides the profiles
calculator: DeadlineCalculator = DeadlineCalculator()


def set_calculator(c: DeadlineCalculator):
    global calculator
    calculator = c


@router.get("/profiles")
async def list_profiles():
    """Configured deadline-type profiles."""
    return [
        {
            "deadline_type": p.deadline_type,
            "label": p.label,
            "offset_days": p.offset_days,
            "is_business_days": p.is_business_days,
            "rule": p.display_days,
        }
        for p in calculator.profiles.values()
    ]


@router.post("/calculate", response_model=DeadlineResponse)
async def calculate(request: DeadlineRequest):
    """
    Compute a deadline date and its overdue / bad-faith status.

    Pure calculation: nothing is read from or written to the store.
    """
    label = None
    try:
        if request.deadline_type is not None:
            profile = calculator.profile(request.deadline_type)
            label = profile.label
            is_business_days = profile.is_business_days
            due = calculator.deadline_for_type(request.deadline_type, request.trigger_date)
        else:
            is_business_days = request.is_business_days
            due = calculator.deadline_date(
                request.trigger_date, request.offset_days, is_business_days
            )
    except UnknownDeadlineTypeError as e:
        raise HTTPException(status_code=404, detail=e.to_dict()) from e
    except DeadlineCalculationError as e:
        raise HTTPException(status_code=422, detail=e.to_dict()) from e

    deadline = CarrierDeadline(
        id="adhoc",
        claim_id="adhoc",
        deadline_type=request.deadline_type or "custom",
        trigger_date=request.trigger_date,
        deadline_date=due,
        is_business_days=is_business_days,
        status=DeadlineStatus(request.status),
    )
    assessment = calculator.assess(deadline, today=request.today or date.today())

    return DeadlineResponse(
        deadline_type=request.deadline_type,
        label=label,
        trigger_date=request.trigger_date.isoformat(),
        deadline_date=due.isoformat(),
        is_business_days=is_business_days,
        status=request.status,
        days_overdue=assessment.days_overdue,
        days_remaining=assessment.days_remaining,
        bad_faith_potential=assessment.bad_faith_potential,
    )
