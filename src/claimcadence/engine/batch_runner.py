"""
ClaimCadence Batch Runner

Entry point for one autonomous tick. Invoked on an external schedule,
holds no state between invocations.

Per tick:
1. Sweep a bounded batch of unclassified documents for the active claims
2. For each autonomous claim, read today's quota; skip the claim if it is
   already used up
3. Otherwise run, per enabled toggle and in this order: task
   auto-completion, autonomous dispatch, escalation detection
4. Return a TickSummary

Claims are processed sequentially. A failure inside one claim is caught,
logged and recorded in the summary; the remaining claims still run. When
the tick deadline passes, the claims not yet reached are deferred to the
next tick and reported as errors.
"""
from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from ..collaborators import DocumentClassifier, MailSender
from ..config import EngineRules
from ..models import ClaimAutomationPolicy
from ..store import ClaimStore
from .action_ledger import ActionLedger, utc_now
from .dispatcher import AutonomousDispatcher
from .document_sweeper import DocumentSweeper
from .escalation_detector import EscalationDetector
from .task_completer import TaskAutoCompleter

logger = logging.getLogger(__name__)


@dataclass
class TickSummary:
    """Aggregate result of one autonomous tick."""
    processed: int = 0
    tasks_completed: int = 0
    emails_sent: int = 0
    escalations: int = 0
    documents_processed: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class AutomationRunner:
    """
    Runs the autonomous tick over every eligible claim.

    Usage:
        runner = AutomationRunner(store, mail, classifier=classifier)
        summary = runner.run()
    """

    def __init__(
        self,
        store: ClaimStore,
        mail: MailSender,
        classifier: Optional[DocumentClassifier] = None,
        rules: Optional[EngineRules] = None,
        tick_deadline_seconds: Optional[float] = None,
        clock: Callable[[], datetime] = utc_now,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.rules = rules or EngineRules()
        self.tick_deadline_seconds = tick_deadline_seconds
        self.clock = clock
        self.timer = timer

        self.ledger = ActionLedger(store)
        self.task_completer = TaskAutoCompleter(store, self.ledger, self.rules)
        self.dispatcher = AutonomousDispatcher(store, self.ledger, mail, self.rules)
        self.escalation_detector = EscalationDetector(store, self.ledger, self.rules)
        self.document_sweeper = DocumentSweeper(store, classifier, self.rules)

    def run(self) -> TickSummary:
        """
        Run one tick.

        Failures fetching the policy list propagate; everything after
        that is isolated per claim.
        """
        started = self.timer()
        summary = TickSummary()

        logger.info("Autonomous agent starting")
        policies = self.store.list_autonomous_policies()
        logger.info("Found %d claims with autonomy enabled", len(policies))

        claim_ids = [p.claim_id for p in policies]
        try:
            summary.documents_processed = self.document_sweeper.run(claim_ids, self.clock())
        except Exception as e:
            logger.exception("Document sweep failed")
            summary.errors.append(f"Error processing documents: {e}")

        for index, policy in enumerate(policies):
            if self._past_deadline(started):
                deferred = len(policies) - index
                logger.warning("Tick deadline reached, deferring %d claims", deferred)
                summary.errors.append(
                    f"Tick deadline reached; {deferred} claims deferred to next run"
                )
                break
            self._run_claim(policy, summary)

        logger.info("Autonomous agent completed: %s", summary.to_dict())
        return summary

    def _past_deadline(self, started: float) -> bool:
        if self.tick_deadline_seconds is None:
            return False
        return self.timer() - started >= self.tick_deadline_seconds

    def _run_claim(self, policy: ClaimAutomationPolicy, summary: TickSummary) -> None:
        label = policy.claim_id
        try:
            claim = self.store.get_claim(policy.claim_id)
            label = claim.display_number
            now = self.clock()

            quota = self.ledger.quota_for(policy, now)
            if quota.exhausted:
                logger.info("Claim %s hit daily action limit (%d)", label, quota.limit)
                return

            logger.info("Processing claim %s", label)
            if policy.auto_complete_tasks:
                summary.tasks_completed += self.task_completer.run(policy.claim_id, quota, now)
            if policy.auto_respond_without_approval:
                result = self.dispatcher.run(policy, quota, now)
                summary.emails_sent += result.sent
                summary.escalations += result.escalated
            if policy.auto_escalate_urgency:
                summary.escalations += self.escalation_detector.run(policy.claim_id, quota, now)

            summary.processed += 1
        except Exception as e:
            logger.exception("Error processing claim %s", label)
            summary.errors.append(f"Error processing claim {label}: {e}")
