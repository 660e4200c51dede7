"""
ClaimCadence Business Day Calendars

Provides the protocol and base implementation for the calendars used in
carrier deadline calculations.

Carrier deadlines count Monday through Friday with no holiday calendar.
The protocol stays pluggable so a jurisdiction calendar can be supplied
without touching the deadline calculator.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Protocol, runtime_checkable


@runtime_checkable
class BusinessCalendar(Protocol):
    """
    Protocol for business day calendars.

    Implementations must be able to say whether a date is a business day
    and step across business days.
    """

    def is_business_day(self, d: date) -> bool:
        """
        Check if a date is a business day.

        Args:
            d: Date to check

        Returns:
            True if the date is a business day, False otherwise
        """
        ...

    def add_business_days(self, start: date, days: int) -> date:
        """
        Add business days to a date.

        Args:
            start: Starting date
            days: Number of business days to add (can be negative)

        Returns:
            The resulting date
        """
        ...


@dataclass
class BaseCalendar(ABC):
    """
    Abstract base class for business day calendars.

    Subclasses must implement `is_holiday()`.
    """

    # Weekend days (0=Monday, 6=Sunday)
    weekend_days: frozenset[int] = field(default_factory=lambda: frozenset({5, 6}))

    @abstractmethod
    def is_holiday(self, d: date) -> bool:
        """Check if a date is a holiday."""
        ...

    def is_weekend(self, d: date) -> bool:
        """Check if a date is a weekend day."""
        return d.weekday() in self.weekend_days

    def is_business_day(self, d: date) -> bool:
        """A business day is a weekday that is not a holiday."""
        if self.is_weekend(d):
            return False
        return not self.is_holiday(d)

    def add_business_days(self, start: date, days: int) -> date:
        """
        Add business days to a date.

        The start date itself is never counted; a Friday plus one business
        day is the following Monday.
        """
        if days == 0:
            return start

        direction = 1 if days > 0 else -1
        remaining = abs(days)
        current = start

        while remaining > 0:
            current += timedelta(days=direction)
            if self.is_business_day(current):
                remaining -= 1

        return current


@dataclass
class WeekdayCalendar(BaseCalendar):
    """
    Monday to Friday, no holidays.

    The calendar carrier deadlines are counted on.
    """

    def is_holiday(self, d: date) -> bool:
        return False


@dataclass
class FixedHolidayCalendar(BaseCalendar):
    """
    A calendar with a fixed set of holiday dates.

    Useful when a carrier agreement lists its own closure days.
    """

    holidays: frozenset[date] = field(default_factory=frozenset)

    def is_holiday(self, d: date) -> bool:
        """Check if date is in the fixed holiday set."""
        return d in self.holidays

    @classmethod
    def from_dates(cls, *dates: date) -> FixedHolidayCalendar:
        """Create a calendar from a list of holiday dates."""
        return cls(holidays=frozenset(dates))
