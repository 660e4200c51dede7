"""
ClaimCadence Calendars

Business day calendars for carrier deadline calculations.

Usage:
    from claimcadence.calendars import WEEKDAY_CALENDAR

    deadline = WEEKDAY_CALENDAR.add_business_days(trigger_date, 10)
"""
from __future__ import annotations

from .base import (
    BaseCalendar,
    BusinessCalendar,
    FixedHolidayCalendar,
    WeekdayCalendar,
)

WEEKDAY_CALENDAR = WeekdayCalendar()

__all__ = [
    "BusinessCalendar",
    "BaseCalendar",
    "WeekdayCalendar",
    "FixedHolidayCalendar",
    "WEEKDAY_CALENDAR",
]
