"""
ClaimCadence Action Log Models

The action log is the append-only audit of every attempted action,
executed or blocked. It is also the source of truth for the daily quota
and the idempotency ledger for escalations.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from .enums import ActionType, TriggerSource


@dataclass(frozen=True)
class ActionLogEntry:
    """
    One immutable action log row.

    Attributes:
        claim_id: Owning claim
        action_type: task_completed | email_sent | escalation
        details: Structured payload; holds the natural key fields
            (task_id, pending_action_id, reason, deadline_id)
        was_auto_executed: True when the engine acted without a human.
            Only these entries count toward the daily quota.
        result: Human-readable outcome
        executed_at: When the action happened
        trigger_source: Component that wrote the entry
        natural_key: Idempotency key, unique per (claim_id, action_type)
        id: Store-assigned identifier
    """
    claim_id: str
    action_type: ActionType
    details: dict[str, Any]
    was_auto_executed: bool
    result: str
    executed_at: datetime
    natural_key: str
    trigger_source: TriggerSource = TriggerSource.AUTONOMOUS_AGENT
    id: Optional[str] = None

    @property
    def dedupe_key(self) -> tuple[str, str, str]:
        return (self.claim_id, self.action_type.value, self.natural_key)

    def matches(self, **criteria: Any) -> bool:
        """True if every criterion equals the same key in details."""
        return all(self.details.get(k) == v for k, v in criteria.items())


@dataclass
class DailyQuota:
    """
    Remaining auto-executed actions for one claim for the current day.

    Shared across all action types. Components consume one unit per
    auto-executed action and must stop once the quota is exhausted.
    """
    limit: int
    used: int = 0

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.used)

    @property
    def exhausted(self) -> bool:
        return self.used >= self.limit

    def consume(self) -> None:
        self.used += 1

