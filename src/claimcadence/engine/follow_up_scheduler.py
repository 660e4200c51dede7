"""
ClaimCadence Follow-Up Scheduler

Runs one follow-up track (general or recoverable depreciation) over every
claim whose track is due.

Per due track:
1. RD only: a claim whose status says RD was released stops the track
   (rd_released); a claim not in an RD request status is left alone
2. A track at max_count is stopped (max_count_reached); nothing is sent
3. Pick the recipient, generate the body with the AI collaborator and
   send it CC'ing the claim's inbound alias
4. On success advance the track through a versioned policy write and
   note the follow-up on the claim. RD follow-ups also write a claim note
   and create or refresh the tracking task

AI or mail failures leave the track untouched, so the next daily run
retries. Follow-ups are not counted against the daily action quota.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Optional

from ..collaborators import MailMessage, MailSender, Recipient, TextGenerator
from ..config import EngineRules
from ..exceptions import MailDeliveryError, TextGenerationError
from ..models import (
    ClaimAutomationPolicy,
    ClaimSnapshot,
    ClaimTask,
    FollowUpTrack,
    FollowUpTrackKind,
    NewTask,
    StopReason,
    TaskPriority,
)
from ..store import ClaimStore
from .action_ledger import utc_now
from .prompts import general_follow_up_prompts, rd_follow_up_prompts

logger = logging.getLogger(__name__)


RD_TASK_STATUS = "pending"


@dataclass
class SentFollowUp:
    claim_id: str
    claim_number: Optional[str]
    follow_up_number: int
    recipient: str
    type: str


@dataclass
class FollowUpRunSummary:
    """Outcome of one follow-up run."""
    track: str
    due: int = 0
    processed: list[SentFollowUp] = field(default_factory=list)
    stopped: list[dict[str, str]] = field(default_factory=list)
    skipped: list[dict[str, str]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class _Recipient:
    email: str
    name: str


class FollowUpScheduler:
    """
    Sends scheduled follow-ups for one track kind.

    Usage:
        scheduler = FollowUpScheduler(store, mail, text_generator)
        summary = scheduler.run(FollowUpTrackKind.GENERAL)
    """

    def __init__(
        self,
        store: ClaimStore,
        mail: MailSender,
        text_generator: TextGenerator,
        rules: Optional[EngineRules] = None,
        inbound_email_domain: str = "claims.example.com",
        sender_signature: str = "Claims Team",
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.mail = mail
        self.text_generator = text_generator
        self.rules = rules or EngineRules()
        self.inbound_email_domain = inbound_email_domain
        self.sender_signature = sender_signature
        self.clock = clock

    def run(self, kind: FollowUpTrackKind) -> FollowUpRunSummary:
        now = self.clock()
        summary = FollowUpRunSummary(track=kind.value)

        logger.info("Processing %s follow-ups", kind.value)
        policies = self.store.list_due_follow_ups(kind, now)
        summary.due = len(policies)
        logger.info("Found %d %s follow-ups due", len(policies), kind.value)

        for policy in policies:
            label = policy.claim_id
            try:
                claim = self.store.get_claim(policy.claim_id)
                label = claim.display_number
                self._process(kind, policy, claim, now, summary)
            except Exception as e:
                logger.exception("Error processing %s follow-up for claim %s", kind.value, label)
                summary.errors.append(f"Error processing claim {label}: {e}")

        logger.info("Processed %d %s follow-ups successfully", len(summary.processed), kind.value)
        return summary

    # =========================================================================
    # Per-claim processing
    # =========================================================================

    def _process(
        self,
        kind: FollowUpTrackKind,
        policy: ClaimAutomationPolicy,
        claim: ClaimSnapshot,
        now: datetime,
        summary: FollowUpRunSummary,
    ) -> None:
        track = policy.track(kind)
        is_rd = kind is FollowUpTrackKind.RECOVERABLE_DEPRECIATION

        if is_rd:
            if self.rules.is_rd_released_status(claim.status):
                self._stop(policy, kind, StopReason.RD_RELEASED, claim, now, summary)
                self.store.add_claim_update(
                    claim.id,
                    f'RD request follow-ups stopped - status changed to "{claim.status}".',
                    "automation_status",
                    now,
                )
                return
            if not self.rules.is_rd_request_status(claim.status):
                logger.debug("Claim %s not in an RD request status, skipping", claim.display_number)
                return

        if track.is_exhausted:
            logger.info("Claim %s: max follow-ups reached, stopping", claim.display_number)
            self._stop(policy, kind, StopReason.MAX_COUNT_REACHED, claim, now, summary)
            return

        recipient = self._recipient(kind, claim)
        if recipient is None:
            logger.info("Claim %s: no recipient email found, skipping", claim.display_number)
            summary.skipped.append({"claim_id": claim.id, "reason": "no_recipient"})
            return

        sequence = track.current_count + 1
        subject = self._subject(kind, claim)
        try:
            body = self._generate_body(kind, claim, track, sequence)
        except TextGenerationError as e:
            logger.warning("Claim %s: follow-up text generation failed: %s", claim.display_number, e.message)
            summary.skipped.append({"claim_id": claim.id, "reason": "text_generation_failed"})
            return

        message = MailMessage(
            claim_id=claim.id,
            subject=subject,
            body=body,
            recipients=[
                Recipient(
                    email=recipient.email,
                    name=recipient.name,
                    type="rd_follow_up" if is_rd else "follow_up",
                )
            ],
            claim_email_cc=claim.inbound_address(self.inbound_email_domain),
        )
        try:
            self.mail.send(message)
        except MailDeliveryError as e:
            logger.warning("Failed to send follow-up for claim %s: %s", claim.display_number, e.message)
            summary.skipped.append({"claim_id": claim.id, "reason": "send_failed"})
            return

        logger.info(
            "%s follow-up #%d sent for claim %s to %s",
            kind.value, sequence, claim.display_number, recipient.email,
        )
        advanced = track.advanced(now)
        self.store.save_track(policy, kind, advanced)

        if is_rd:
            self._record_rd_follow_up(claim, recipient, subject, advanced, sequence, now)
        else:
            self.store.add_claim_update(
                claim.id,
                f"Automated follow-up #{sequence} sent to {recipient.name} ({recipient.email})",
                "follow_up",
                now,
            )

        summary.processed.append(
            SentFollowUp(
                claim_id=claim.id,
                claim_number=claim.claim_number,
                follow_up_number=sequence,
                recipient=recipient.email,
                type="rd_follow_up" if is_rd else "follow_up",
            )
        )

    def _stop(
        self,
        policy: ClaimAutomationPolicy,
        kind: FollowUpTrackKind,
        reason: StopReason,
        claim: ClaimSnapshot,
        now: datetime,
        summary: FollowUpRunSummary,
    ) -> None:
        stopped = policy.track(kind).stopped(now, reason)
        self.store.save_track(policy, kind, stopped)
        summary.stopped.append({"claim_id": claim.id, "reason": reason.value})

    # =========================================================================
    # Message building
    # =========================================================================

    def _recipient(self, kind: FollowUpTrackKind, claim: ClaimSnapshot) -> Optional[_Recipient]:
        if kind is FollowUpTrackKind.RECOVERABLE_DEPRECIATION:
            if not claim.adjuster_email:
                return None
            return _Recipient(claim.adjuster_email, claim.adjuster_name or "Claims Department")

        email = claim.adjuster_email or claim.policyholder_email
        if not email:
            return None
        name = claim.adjuster_name or claim.policyholder_name or "there"
        return _Recipient(email, name)

    def _subject(self, kind: FollowUpTrackKind, claim: ClaimSnapshot) -> str:
        if kind is FollowUpTrackKind.RECOVERABLE_DEPRECIATION:
            return f"Recoverable Depreciation Status - Claim {claim.display_number}"
        return claim.display_number

    def _generate_body(
        self,
        kind: FollowUpTrackKind,
        claim: ClaimSnapshot,
        track: FollowUpTrack,
        sequence: int,
    ) -> str:
        if kind is FollowUpTrackKind.RECOVERABLE_DEPRECIATION:
            system, user = rd_follow_up_prompts(claim, sequence, self.sender_signature)
        else:
            last = self.store.last_outbound_email(claim.id)
            system, user = general_follow_up_prompts(
                claim,
                sequence,
                track.max_count,
                self.sender_signature,
                last_subject=last.subject if last else None,
            )
        return self.text_generator.generate(system, user)

    # =========================================================================
    # RD bookkeeping
    # =========================================================================

    def _record_rd_follow_up(
        self,
        claim: ClaimSnapshot,
        recipient: _Recipient,
        subject: str,
        track: FollowUpTrack,
        sequence: int,
        now: datetime,
    ) -> None:
        carrier = claim.insurance_company or "carrier"
        self.store.add_claim_update(
            claim.id,
            (
                f"RD follow-up #{sequence} sent to {recipient.name} ({recipient.email})\n"
                f"Subject: {subject}\n"
                "Purpose: requesting confirmation of invoice receipt and RD release status\n"
                f"Next follow-up scheduled in {track.interval_days} days if no response."
            ),
            "rd_follow_up",
            now,
        )
        self.store.add_claim_note(
            claim.id,
            (
                f"[Auto] RD follow-up #{sequence} sent to {recipient.name} at {carrier}. "
                "Awaiting response on invoice receipt and RD release timeline."
            ),
            now,
        )

        due = track.next_run_at.date()
        description = (
            f"RD follow-up #{sequence} sent to {recipient.name}. Check for carrier "
            "response and update claim status when RD is released."
        )
        existing = self._open_rd_task(claim.id)
        if existing is not None:
            self.store.update_task(replace(existing, description=description, due_date=due))
            return
        self.store.create_task(
            NewTask(
                claim_id=claim.id,
                title=f"Check for RD response from {carrier}",
                description=description,
                due_date=due,
                priority=TaskPriority.HIGH,
            ),
            now,
        )

    def _open_rd_task(self, claim_id: str) -> Optional[ClaimTask]:
        for task in self.store.list_open_tasks(claim_id):
            title = task.title.lower()
            if "rd" in title and "response" in title and task.status == RD_TASK_STATUS:
                return task
        return None
