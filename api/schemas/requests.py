"""Request schemas for the API."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class DeadlineRequest(BaseModel):
    """Calculate a carrier deadline, by named type or by explicit offset."""
    trigger_date: date = Field(..., description="Date the carrier's clock started (YYYY-MM-DD)")
    deadline_type: Optional[str] = Field(default=None, description="Named profile, e.g. 'acknowledgment'")
    offset_days: Optional[int] = Field(default=None, ge=0, description="Explicit offset in days")
    is_business_days: bool = Field(default=False, description="Count Mon-Fri days (explicit offset only)")
    status: str = Field(default="pending", description="pending|met|missed")
    today: Optional[date] = Field(default=None, description="Reference date (default: today)")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"trigger_date": "2024-06-03", "deadline_type": "acknowledgment"},
                {"trigger_date": "2024-06-03", "offset_days": 15, "is_business_days": True},
            ]
        }
    }

    @model_validator(mode="after")
    def check_type_or_offset(self) -> "DeadlineRequest":
        if (self.deadline_type is None) == (self.offset_days is None):
            raise ValueError("Provide exactly one of deadline_type or offset_days")
        if self.status not in ("pending", "met", "missed"):
            raise ValueError("status must be one of pending, met, missed")
        return self
