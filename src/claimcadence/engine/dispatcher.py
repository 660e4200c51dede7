"""
ClaimCadence Autonomous Dispatcher

Drains a claim's queue of AI-drafted email replies.

Each pending draft is scanned for blocked keywords (a plain substring
scan over the lower-cased subject and body). A match is never sent: it is
logged as an unexecuted escalation and left pending for a human. Clean
drafts go out through the mail collaborator; a delivery failure leaves
the draft pending so the next tick retries it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from ..collaborators import MailMessage, MailSender, Recipient
from ..config import EngineRules
from ..exceptions import MailDeliveryError
from ..models import (
    ActionType,
    ClaimAutomationPolicy,
    DailyQuota,
    EscalationReason,
    PendingAction,
    PendingActionType,
)
from ..store import ClaimStore
from .action_ledger import ActionLedger

logger = logging.getLogger(__name__)


def find_blocked_keyword(text: str, keywords: Sequence[str]) -> Optional[str]:
    """First keyword contained in text (case-insensitive), or None."""
    lowered = text.lower()
    for keyword in keywords:
        if keyword and keyword.lower() in lowered:
            return keyword
    return None


@dataclass
class DispatchResult:
    sent: int = 0
    escalated: int = 0
    failed: int = 0


@dataclass
class AutonomousDispatcher:
    store: ClaimStore
    ledger: ActionLedger
    mail: MailSender
    rules: EngineRules = field(default_factory=EngineRules)

    def keywords_for(self, policy: ClaimAutomationPolicy) -> tuple[str, ...]:
        """Claim-specific blockers, or the engine defaults when none are set."""
        if policy.keyword_blockers:
            return tuple(sorted(policy.keyword_blockers))
        return self.rules.blocked_keywords

    def run(
        self, policy: ClaimAutomationPolicy, quota: DailyQuota, now: datetime
    ) -> DispatchResult:
        result = DispatchResult()
        keywords = self.keywords_for(policy)
        actions = self.store.list_pending_actions(
            policy.claim_id, PendingActionType.EMAIL_RESPONSE
        )
        for action in actions:
            blocked = find_blocked_keyword(action.draft_content.scan_text, keywords)
            if blocked:
                if self._escalate_blocked(action, blocked, now):
                    result.escalated += 1
                continue

            if quota.exhausted:
                logger.info("Daily quota reached for claim %s, stopping dispatch", policy.claim_id)
                break

            if self._send(action, quota, now):
                result.sent += 1
            else:
                result.failed += 1
        return result

    def _escalate_blocked(self, action: PendingAction, keyword: str, now: datetime) -> bool:
        logger.warning(
            "Draft %s on claim %s blocked by keyword %r",
            action.id, action.claim_id, keyword,
        )
        entry = self.ledger.record(
            action.claim_id,
            ActionType.ESCALATION,
            natural_key=f"blocked:{action.id}:{keyword}",
            details={
                "reason": EscalationReason.BLOCKED_KEYWORD.value,
                "pending_action_id": action.id,
                "blocked_keyword": keyword,
                "draft_subject": action.draft_content.subject,
            },
            result=f"Email blocked due to keyword \"{keyword}\" - requires human review",
            now=now,
            was_auto_executed=False,
        )
        return entry is not None

    def _send(self, action: PendingAction, quota: DailyQuota, now: datetime) -> bool:
        draft = action.draft_content
        message = MailMessage(
            claim_id=action.claim_id,
            subject=draft.subject,
            body=draft.body,
            recipients=[Recipient(email=draft.to_email, name=draft.to_name)],
        )
        try:
            self.mail.send(message)
        except MailDeliveryError as e:
            logger.warning(
                "Send failed for draft %s on claim %s, leaving pending: %s",
                action.id, action.claim_id, e.message,
            )
            return False

        self.store.mark_pending_action_sent(action.id, now)
        self.ledger.record(
            action.claim_id,
            ActionType.EMAIL_SENT,
            natural_key=f"email:{action.id}",
            details={
                "pending_action_id": action.id,
                "to": draft.to_email,
                "subject": draft.subject,
            },
            result=f"Auto-sent email to {draft.to_email}: {draft.subject}",
            now=now,
            quota=quota,
        )
        logger.info("Auto-sent draft %s on claim %s", action.id, action.claim_id)
        return True
