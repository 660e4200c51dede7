"""
ClaimCadence Carrier Deadline Models

Statutory carrier deadlines tracked per claim.

Key components:
- DeadlineProfile: Offset rule for a deadline type
- CarrierDeadline: A stored deadline for a specific claim
- DeadlineAssessment: Read-time overdue / bad-faith evaluation

Deadlines can be counted in calendar days or business days (Mon-Fri).
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .enums import DeadlineStatus


# =============================================================================
# Deadline Profile
# =============================================================================

@dataclass(frozen=True)
class DeadlineProfile:
    """
    How a deadline type is counted from its trigger date.

    Attributes:
        deadline_type: Machine name, e.g. "acknowledgment"
        label: Display label
        offset_days: Days after the trigger date
        is_business_days: True = Mon-Fri days, False = calendar days
    """
    deadline_type: str
    offset_days: int
    is_business_days: bool = False
    label: str = ""

    @property
    def display_days(self) -> str:
        day_type = "business" if self.is_business_days else "calendar"
        return f"{self.offset_days} {day_type} days"


DEFAULT_DEADLINE_PROFILES: dict[str, DeadlineProfile] = {
    p.deadline_type: p
    for p in (
        DeadlineProfile("acknowledgment", 10, True, "Claim Acknowledgment"),
        DeadlineProfile("investigation", 30, False, "Investigation Complete"),
        DeadlineProfile("decision", 15, True, "Claim Decision"),
        DeadlineProfile("payment", 30, False, "Payment Due"),
        DeadlineProfile("pol_response", 30, False, "POL Response"),
    )
}


# =============================================================================
# Carrier Deadline
# =============================================================================

@dataclass
class CarrierDeadline:
    """
    A statutory carrier deadline for one claim.

    Created by staff; the engine reads it. `deadline_date` is derived
    from the trigger date and profile when the row is created.
    """
    id: str
    claim_id: str
    deadline_type: str
    trigger_date: date
    deadline_date: date
    is_business_days: bool = False
    status: DeadlineStatus = DeadlineStatus.PENDING
    carrier_response_date: Optional[date] = None


@dataclass(frozen=True)
class DeadlineAssessment:
    """Read-time evaluation of a deadline against a reference date."""
    deadline_date: date
    days_overdue: int
    bad_faith_potential: bool
    days_remaining: int
