"""Response schemas for the API."""

from typing import Optional

from pydantic import BaseModel


class TickResults(BaseModel):
    """Counts from one autonomous tick."""
    processed: int
    tasks_completed: int
    emails_sent: int
    escalations: int
    documents_processed: int
    errors: list[str]


class AutomationRunResponse(BaseModel):
    success: bool
    results: TickResults


class SentFollowUpItem(BaseModel):
    claim_id: str
    claim_number: Optional[str] = None
    follow_up_number: int
    recipient: str
    type: str  # follow_up|rd_follow_up


class FollowUpRunResponse(BaseModel):
    """Outcome of one follow-up track run."""
    success: bool
    track: str
    due: int
    processed: list[SentFollowUpItem]
    stopped: list[dict[str, str]]
    skipped: list[dict[str, str]]
    errors: list[str]


class DeadlineResponse(BaseModel):
    """Computed deadline and its read-time assessment."""
    deadline_type: Optional[str] = None
    label: Optional[str] = None
    trigger_date: str
    deadline_date: str
    is_business_days: bool
    status: str
    days_overdue: int
    days_remaining: int
    bad_faith_potential: bool


class HealthResponse(BaseModel):
    healthy: bool
    engine_configured: bool
    follow_ups_available: bool
