"""
ClaimCadence Action Ledger

Thin layer over the store's action log that every engine component writes
through. It owns two rules:

- the daily quota is the count of today's auto-executed entries, where
  "today" starts at 00:00 UTC
- a write only consumes quota when it was auto-executed and actually
  stored (a duplicate natural key is a no-op)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time, timezone
from typing import Any, Optional

from ..models import (
    ActionLogEntry,
    ActionType,
    ClaimAutomationPolicy,
    DailyQuota,
    TriggerSource,
)
from ..store import ClaimStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def start_of_day(now: datetime) -> datetime:
    """Midnight UTC of the day containing `now`."""
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)


@dataclass
class ActionLedger:
    """
    Records engine actions and answers quota questions.

    Usage:
        ledger = ActionLedger(store)
        quota = ledger.quota_for(policy, now)
        if not quota.exhausted:
            ledger.record(claim_id, ActionType.TASK_COMPLETED, ..., quota=quota)
    """
    store: ClaimStore
    trigger_source: TriggerSource = TriggerSource.AUTONOMOUS_AGENT

    def today_count(self, claim_id: str, now: datetime) -> int:
        return self.store.count_auto_executed_since(claim_id, start_of_day(now))

    def quota_for(self, policy: ClaimAutomationPolicy, now: datetime) -> DailyQuota:
        return DailyQuota(
            limit=policy.daily_action_limit,
            used=self.today_count(policy.claim_id, now),
        )

    def exists(
        self,
        claim_id: str,
        action_type: ActionType,
        since: Optional[datetime] = None,
        **details: Any,
    ) -> bool:
        return bool(self.store.find_action_log(claim_id, action_type, since, **details))

    def record(
        self,
        claim_id: str,
        action_type: ActionType,
        natural_key: str,
        details: dict[str, Any],
        result: str,
        now: datetime,
        was_auto_executed: bool = True,
        quota: Optional[DailyQuota] = None,
    ) -> Optional[ActionLogEntry]:
        """
        Append one entry.

        Returns the stored entry, or None if an entry with the same
        natural key already exists. The quota is consumed only for a
        stored, auto-executed entry.
        """
        entry = ActionLogEntry(
            claim_id=claim_id,
            action_type=action_type,
            details=details,
            was_auto_executed=was_auto_executed,
            result=result,
            executed_at=now,
            natural_key=natural_key,
            trigger_source=self.trigger_source,
        )
        stored = self.store.append_action_log(entry)
        if stored is None:
            logger.info(
                "Skipped duplicate %s for claim %s (%s)",
                action_type.value, claim_id, natural_key,
            )
            return None
        if was_auto_executed and quota is not None:
            quota.consume()
        return stored
