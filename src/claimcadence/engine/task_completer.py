"""
ClaimCadence Task Auto-Completer

Closes open follow-up tasks that inbound correspondence has superseded.
A task qualifies when its title matches a follow-up pattern and at least
one inbound email arrived at or after the task was created.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from ..config import EngineRules
from ..models import ActionType, DailyQuota
from ..store import ClaimStore
from .action_ledger import ActionLedger

logger = logging.getLogger(__name__)


@dataclass
class TaskAutoCompleter:
    store: ClaimStore
    ledger: ActionLedger
    rules: EngineRules = field(default_factory=EngineRules)

    def run(self, claim_id: str, quota: DailyQuota, now: datetime) -> int:
        """Complete superseded follow-up tasks; returns the number completed."""
        completed = 0
        tasks = [
            t for t in self.store.list_open_tasks(claim_id)
            if self.rules.is_follow_up_task(t.title)
        ]
        for task in tasks:
            if quota.exhausted:
                logger.info("Daily quota reached for claim %s, stopping task completion", claim_id)
                break
            if not self.store.has_inbound_email_since(claim_id, task.created_at):
                continue

            self.store.complete_task(task.id, now)
            entry = self.ledger.record(
                claim_id,
                ActionType.TASK_COMPLETED,
                natural_key=f"task:{task.id}",
                details={
                    "task_id": task.id,
                    "task_title": task.title,
                    "reason": "response_received",
                },
                result=f"Auto-completed task \"{task.title}\" - response received",
                now=now,
                quota=quota,
            )
            if entry is not None:
                completed += 1
                logger.info("Auto-completed task %s on claim %s", task.id, claim_id)
        return completed
