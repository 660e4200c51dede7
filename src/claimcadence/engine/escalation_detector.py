"""
ClaimCadence Escalation Detector

Surfaces claims that need human attention. Escalations are advisory: they
only write action log entries and never change claim status or send mail.

Two checks:
- stalled claim: no activity record within the stall window
- approaching deadline: a pending carrier deadline due within the horizon

Both are idempotent. The stalled check looks for an existing escalation
inside the same window before logging; every entry also carries a natural
key the store keeps unique.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from ..config import EngineRules
from ..models import ActionType, CarrierDeadline, DailyQuota, EscalationReason
from ..store import ClaimStore
from .action_ledger import ActionLedger

logger = logging.getLogger(__name__)


def _utc_date(now: datetime):
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.date()


@dataclass
class EscalationDetector:
    store: ClaimStore
    ledger: ActionLedger
    rules: EngineRules = field(default_factory=EngineRules)

    def run(self, claim_id: str, quota: DailyQuota, now: datetime) -> int:
        """Run both checks; returns the number of escalations logged."""
        raised = 0
        if quota.exhausted:
            return raised
        if self.check_stalled(claim_id, quota, now):
            raised += 1
        raised += self.check_deadlines(claim_id, quota, now)
        return raised

    def check_stalled(self, claim_id: str, quota: DailyQuota, now: datetime) -> bool:
        window_days = self.rules.stalled_after_days
        window_start = now - timedelta(days=window_days)

        if self.store.has_activity_since(claim_id, window_start):
            return False
        reason = EscalationReason.STALLED_CLAIM.value
        if self.ledger.exists(claim_id, ActionType.ESCALATION, since=window_start, reason=reason):
            return False

        entry = self.ledger.record(
            claim_id,
            ActionType.ESCALATION,
            natural_key=f"stalled:{_utc_date(now).isoformat()}",
            details={"reason": reason, "days_inactive": window_days},
            result=f"Claim has had no activity for {window_days} days - needs attention",
            now=now,
            quota=quota,
        )
        if entry is not None:
            logger.warning("Claim %s stalled for %d days", claim_id, window_days)
        return entry is not None

    def check_deadlines(self, claim_id: str, quota: DailyQuota, now: datetime) -> int:
        today = _utc_date(now)
        horizon = today + timedelta(days=self.rules.deadline_horizon_days)
        raised = 0
        for deadline in self.store.list_pending_deadlines(claim_id, today, horizon):
            if quota.exhausted:
                logger.info("Daily quota reached for claim %s, deferring deadline checks", claim_id)
                break
            if self.ledger.exists(claim_id, ActionType.ESCALATION, deadline_id=deadline.id):
                continue
            if self._log_deadline(deadline, quota, now):
                raised += 1
        return raised

    def _log_deadline(self, deadline: CarrierDeadline, quota: DailyQuota, now: datetime) -> bool:
        due = deadline.deadline_date.isoformat()
        entry = self.ledger.record(
            deadline.claim_id,
            ActionType.ESCALATION,
            natural_key=f"deadline:{deadline.id}",
            details={
                "reason": EscalationReason.APPROACHING_DEADLINE.value,
                "deadline_id": deadline.id,
                "deadline_type": deadline.deadline_type,
                "deadline_date": due,
            },
            result=f"Deadline approaching: {deadline.deadline_type} due {due}",
            now=now,
            quota=quota,
        )
        if entry is not None:
            logger.warning(
                "Deadline %s (%s) on claim %s due %s",
                deadline.id, deadline.deadline_type, deadline.claim_id, due,
            )
        return entry is not None
