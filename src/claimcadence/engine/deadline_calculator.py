"""
ClaimCadence Deadline Calculator

Calculates carrier deadline dates and their overdue / bad-faith status.

Key features:
- Calendar day or business day (Mon-Fri) offsets
- Named deadline-type profiles
- Read-time days overdue and bad-faith potential

Pure and deterministic: no I/O, and the reference date is always passed
in or fixed on the calculator.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Mapping, Optional

from ..calendars import BusinessCalendar, WeekdayCalendar
from ..exceptions import DeadlineCalculationError, UnknownDeadlineTypeError
from ..models import (
    DEFAULT_DEADLINE_PROFILES,
    CarrierDeadline,
    DeadlineAssessment,
    DeadlineProfile,
    DeadlineStatus,
)


@dataclass
class DeadlineCalculator:
    """
    Calculates carrier deadlines from trigger dates and profiles.

    Usage:
        calculator = DeadlineCalculator()

        due = calculator.deadline_date(date(2024, 6, 3), offset_days=10,
                                       is_business_days=True)

        assessment = calculator.assess(deadline, today=date.today())
        if assessment.bad_faith_potential:
            ...
    """

    calendar: BusinessCalendar = field(default_factory=WeekdayCalendar)
    profiles: Mapping[str, DeadlineProfile] = field(
        default_factory=lambda: dict(DEFAULT_DEADLINE_PROFILES)
    )

    def deadline_date(
        self,
        trigger_date: date,
        offset_days: int,
        is_business_days: bool = False,
    ) -> date:
        """
        Compute the due date for an offset from a trigger date.

        Args:
            trigger_date: Date the carrier's clock started
            offset_days: Days allowed
            is_business_days: Count Mon-Fri days instead of calendar days

        Returns:
            The deadline date. A business-day deadline always falls on a
            business day, so a zero offset from a weekend or holiday rolls
            forward.
        """
        if offset_days < 0:
            raise DeadlineCalculationError(
                message=f"Deadline offset must be non-negative, got {offset_days}",
                details={"offset_days": offset_days},
            )

        if is_business_days:
            due = self.calendar.add_business_days(trigger_date, offset_days)
            while not self.calendar.is_business_day(due):
                due += timedelta(days=1)
            return due
        return trigger_date + timedelta(days=offset_days)

    def profile(self, deadline_type: str) -> DeadlineProfile:
        """Look up the profile for a deadline type."""
        try:
            return self.profiles[deadline_type]
        except KeyError:
            raise UnknownDeadlineTypeError(
                message=f"No deadline profile for type '{deadline_type}'",
                details={"available": sorted(self.profiles)},
            ) from None

    def deadline_for_type(self, deadline_type: str, trigger_date: date) -> date:
        """Compute the due date for a named deadline type."""
        p = self.profile(deadline_type)
        return self.deadline_date(trigger_date, p.offset_days, p.is_business_days)

    def days_overdue(
        self,
        deadline_date: date,
        status: DeadlineStatus,
        today: date,
    ) -> int:
        """
        Whole days past the deadline.

        Only a pending deadline can be overdue; met or missed deadlines
        always report 0.
        """
        if status != DeadlineStatus.PENDING:
            return 0
        return max(0, (today - deadline_date).days)

    def assess(
        self,
        deadline: CarrierDeadline,
        today: Optional[date] = None,
    ) -> DeadlineAssessment:
        """
        Evaluate a stored deadline against a reference date.

        Args:
            deadline: The carrier deadline
            today: Reference date (defaults to date.today())

        Returns:
            DeadlineAssessment with days overdue and bad-faith flag
        """
        ref = today or date.today()
        overdue = self.days_overdue(deadline.deadline_date, deadline.status, ref)
        return DeadlineAssessment(
            deadline_date=deadline.deadline_date,
            days_overdue=overdue,
            bad_faith_potential=overdue > 0,
            days_remaining=(deadline.deadline_date - ref).days,
        )

    def build_deadline(
        self,
        *,
        id: str,
        claim_id: str,
        deadline_type: str,
        trigger_date: date,
    ) -> CarrierDeadline:
        """Create a pending CarrierDeadline with its derived date filled in."""
        p = self.profile(deadline_type)
        return CarrierDeadline(
            id=id,
            claim_id=claim_id,
            deadline_type=deadline_type,
            trigger_date=trigger_date,
            deadline_date=self.deadline_date(trigger_date, p.offset_days, p.is_business_days),
            is_business_days=p.is_business_days,
            status=DeadlineStatus.PENDING,
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def calculate_deadline(
    trigger_date: date,
    offset_days: int,
    is_business_days: bool = False,
) -> date:
    """
    Compute a deadline date with the default weekday calendar.

    Convenience function that creates a temporary calculator.
    """
    return DeadlineCalculator().deadline_date(trigger_date, offset_days, is_business_days)


def add_business_days(start_date: date, days: int) -> date:
    """Add Mon-Fri business days to a date."""
    return WeekdayCalendar().add_business_days(start_date, days)
