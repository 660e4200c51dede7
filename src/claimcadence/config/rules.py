"""
ClaimCadence Engine Rules

The rule set every engine component reads: guardrail keywords, follow-up
task patterns, escalation windows, recoverable depreciation statuses,
deadline profiles and the document batch size.

EngineRules() gives the built-in defaults; an engine config file can
override any of them (see loader.py).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..models import DEFAULT_DEADLINE_PROFILES, DeadlineProfile


DEFAULT_BLOCKED_KEYWORDS: tuple[str, ...] = (
    "lawsuit",
    "attorney",
    "lawyer",
    "legal action",
    "litigation",
    "bad faith",
    "sue",
    "court",
    "complaint",
    "demand letter",
)

DEFAULT_FOLLOW_UP_TASK_PATTERNS: tuple[str, ...] = (
    "follow up",
    "follow-up",
    "reminder",
)

# Claim statuses meaning the carrier has been asked to release RD
RD_REQUEST_STATUSES: tuple[str, ...] = (
    "Recoverable Depreciation Requested",
    "RD Requested",
    "Awaiting RD Release",
    "RD Pending",
)

# Claim statuses meaning RD was released and a check is on the way
RD_RELEASED_STATUSES: tuple[str, ...] = (
    "Waiting on Recoverable Depreciation",
    "Waiting on RD Check",
    "RD Check Pending",
    "Awaiting RD Check",
)

STALLED_AFTER_DAYS = 7
DEADLINE_HORIZON_DAYS = 3
DOCUMENT_BATCH_SIZE = 10


def status_matches(status: Optional[str], candidates: tuple[str, ...]) -> bool:
    """
    Fuzzy claim-status match.

    Case-insensitive substring in either direction. An empty status never
    matches (it would otherwise be a substring of every candidate).
    """
    s = (status or "").strip().lower()
    if not s:
        return False
    return any(s in c.lower() or c.lower() in s for c in candidates)


@dataclass(frozen=True)
class EngineRules:
    """Resolved rule set for one engine instance."""
    blocked_keywords: tuple[str, ...] = DEFAULT_BLOCKED_KEYWORDS
    follow_up_task_patterns: tuple[str, ...] = DEFAULT_FOLLOW_UP_TASK_PATTERNS
    stalled_after_days: int = STALLED_AFTER_DAYS
    deadline_horizon_days: int = DEADLINE_HORIZON_DAYS
    rd_request_statuses: tuple[str, ...] = RD_REQUEST_STATUSES
    rd_released_statuses: tuple[str, ...] = RD_RELEASED_STATUSES
    deadline_profiles: dict[str, DeadlineProfile] = field(
        default_factory=lambda: dict(DEFAULT_DEADLINE_PROFILES)
    )
    document_batch_size: int = DOCUMENT_BATCH_SIZE

    def is_follow_up_task(self, title: str) -> bool:
        lowered = title.lower()
        return any(p in lowered for p in self.follow_up_task_patterns)

    def is_rd_request_status(self, status: Optional[str]) -> bool:
        return status_matches(status, self.rd_request_statuses)

    def is_rd_released_status(self, status: Optional[str]) -> bool:
        return status_matches(status, self.rd_released_statuses)
