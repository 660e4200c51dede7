"""
ClaimCadence In-Memory Store

A process-local ClaimStore for the test suite and for running the engine
without a hosted database.

Enforces the same guarantees as the hosted store: a unique natural key
on the action log and versioned follow-up track writes that touch only
the engine-owned fields of one track. A single lock serialises
every call so overlapping ticks in one process cannot interleave a
read-then-write.
"""
from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..exceptions import ConcurrentModificationError, RecordNotFoundError
from ..models import (
    ActionLogEntry,
    ActionType,
    CarrierDeadline,
    ClaimAutomationPolicy,
    ClaimFile,
    ClaimSnapshot,
    ClaimTask,
    ClaimUpdate,
    DeadlineStatus,
    EmailDirection,
    EmailRecord,
    FollowUpTrack,
    FollowUpTrackKind,
    NewTask,
    PendingAction,
    PendingActionStatus,
    PendingActionType,
)


def _new_id() -> str:
    return str(uuid.uuid4())


class InMemoryClaimStore:
    """Dictionary-backed ClaimStore."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.policies: dict[str, ClaimAutomationPolicy] = {}
        self.claims: dict[str, ClaimSnapshot] = {}
        self.tasks: dict[str, ClaimTask] = {}
        self.emails: list[EmailRecord] = []
        self.updates: list[ClaimUpdate] = []
        self.notes: list[ClaimUpdate] = []
        self.pending_actions: dict[str, PendingAction] = {}
        self.deadlines: dict[str, CarrierDeadline] = {}
        self.files: dict[str, ClaimFile] = {}
        self.action_log: list[ActionLogEntry] = []
        self._log_keys: set[tuple[str, str, str]] = set()

    # =========================================================================
    # Seeding
    # =========================================================================

    def add_claim(self, claim: ClaimSnapshot) -> ClaimSnapshot:
        with self._lock:
            self.claims[claim.id] = claim
            return claim

    def add_policy(self, policy: ClaimAutomationPolicy) -> ClaimAutomationPolicy:
        with self._lock:
            self.policies[policy.id] = policy
            return policy

    def add_task(self, task: ClaimTask) -> ClaimTask:
        with self._lock:
            self.tasks[task.id] = task
            return task

    def add_email(self, email: EmailRecord) -> EmailRecord:
        with self._lock:
            self.emails.append(email)
            return email

    def add_activity(self, update: ClaimUpdate) -> ClaimUpdate:
        with self._lock:
            self.updates.append(update)
            return update

    def add_pending_action(self, action: PendingAction) -> PendingAction:
        with self._lock:
            self.pending_actions[action.id] = action
            return action

    def add_deadline(self, deadline: CarrierDeadline) -> CarrierDeadline:
        with self._lock:
            self.deadlines[deadline.id] = deadline
            return deadline

    def add_file(self, file: ClaimFile) -> ClaimFile:
        with self._lock:
            self.files[file.id] = file
            return file

    # =========================================================================
    # Automation Policies
    # =========================================================================

    def list_autonomous_policies(self) -> list[ClaimAutomationPolicy]:
        with self._lock:
            return [p for p in self.policies.values() if p.is_autonomous]

    def list_due_follow_ups(
        self, kind: FollowUpTrackKind, now: datetime
    ) -> list[ClaimAutomationPolicy]:
        with self._lock:
            return [
                p for p in self.policies.values()
                if p.is_enabled and p.track(kind).is_due(now)
            ]

    def get_policy(self, policy_id: str) -> ClaimAutomationPolicy:
        with self._lock:
            try:
                return self.policies[policy_id]
            except KeyError:
                raise RecordNotFoundError(
                    message=f"Automation policy {policy_id} not found"
                ) from None

    def save_track(
        self,
        policy: ClaimAutomationPolicy,
        kind: FollowUpTrackKind,
        track: FollowUpTrack,
    ) -> ClaimAutomationPolicy:
        with self._lock:
            current = self.get_policy(policy.id)
            if current.version != policy.version:
                raise ConcurrentModificationError(
                    message=f"Automation policy {policy.id} was modified concurrently",
                    details={"expected": policy.version, "found": current.version},
                    claim_id=policy.claim_id,
                )
            merged = current.track(kind).with_progress_of(track)
            stored = replace(current.with_track(kind, merged), version=current.version + 1)
            self.policies[policy.id] = stored
            return stored

    # =========================================================================
    # Claims
    # =========================================================================

    def get_claim(self, claim_id: str) -> ClaimSnapshot:
        with self._lock:
            try:
                return self.claims[claim_id]
            except KeyError:
                raise RecordNotFoundError(
                    message=f"Claim {claim_id} not found", claim_id=claim_id
                ) from None

    def has_activity_since(self, claim_id: str, since: datetime) -> bool:
        with self._lock:
            return any(
                u.claim_id == claim_id and u.created_at >= since for u in self.updates
            )

    def add_claim_update(
        self, claim_id: str, content: str, update_type: str, now: datetime
    ) -> ClaimUpdate:
        return self.add_activity(
            ClaimUpdate(
                id=_new_id(),
                claim_id=claim_id,
                content=content,
                update_type=update_type,
                created_at=now,
            )
        )

    def add_claim_note(self, claim_id: str, content: str, now: datetime) -> None:
        with self._lock:
            self.notes.append(
                ClaimUpdate(
                    id=_new_id(),
                    claim_id=claim_id,
                    content=content,
                    update_type="note",
                    created_at=now,
                )
            )

    # =========================================================================
    # Action Log
    # =========================================================================

    def count_auto_executed_since(self, claim_id: str, since: datetime) -> int:
        with self._lock:
            return sum(
                1 for e in self.action_log
                if e.claim_id == claim_id
                and e.was_auto_executed
                and e.executed_at >= since
            )

    def find_action_log(
        self,
        claim_id: str,
        action_type: ActionType,
        since: Optional[datetime] = None,
        **details: Any,
    ) -> list[ActionLogEntry]:
        with self._lock:
            return [
                e for e in self.action_log
                if e.claim_id == claim_id
                and e.action_type == action_type
                and (since is None or e.executed_at >= since)
                and e.matches(**details)
            ]

    def append_action_log(self, entry: ActionLogEntry) -> Optional[ActionLogEntry]:
        with self._lock:
            if entry.dedupe_key in self._log_keys:
                return None
            stored = replace(entry, id=entry.id or _new_id())
            self._log_keys.add(stored.dedupe_key)
            self.action_log.append(stored)
            return stored

    # =========================================================================
    # Tasks & Correspondence
    # =========================================================================

    def list_open_tasks(self, claim_id: str) -> list[ClaimTask]:
        with self._lock:
            return [
                t for t in self.tasks.values()
                if t.claim_id == claim_id and not t.is_completed
            ]

    def complete_task(self, task_id: str, completed_at: datetime) -> None:
        with self._lock:
            task = self.tasks.get(task_id)
            if task is None:
                raise RecordNotFoundError(message=f"Task {task_id} not found")
            self.tasks[task_id] = replace(
                task,
                is_completed=True,
                completed_at=completed_at,
                completed_by=None,
                status="completed",
            )

    def create_task(self, task: NewTask, now: datetime) -> ClaimTask:
        return self.add_task(
            ClaimTask(
                id=_new_id(),
                claim_id=task.claim_id,
                title=task.title,
                description=task.description,
                created_at=now,
                due_date=task.due_date,
                priority=task.priority,
            )
        )

    def update_task(self, task: ClaimTask) -> None:
        with self._lock:
            if task.id not in self.tasks:
                raise RecordNotFoundError(message=f"Task {task.id} not found")
            self.tasks[task.id] = task

    def has_inbound_email_since(self, claim_id: str, since: datetime) -> bool:
        with self._lock:
            return any(
                e.claim_id == claim_id
                and e.direction == EmailDirection.INBOUND
                and e.sent_at >= since
                for e in self.emails
            )

    def last_outbound_email(self, claim_id: str) -> Optional[EmailRecord]:
        with self._lock:
            outbound = [
                e for e in self.emails
                if e.claim_id == claim_id and e.direction != EmailDirection.INBOUND
            ]
            if not outbound:
                return None
            return max(outbound, key=lambda e: e.sent_at)

    # =========================================================================
    # Pending Actions
    # =========================================================================

    def list_pending_actions(
        self, claim_id: str, action_type: PendingActionType
    ) -> list[PendingAction]:
        with self._lock:
            return [
                a for a in self.pending_actions.values()
                if a.claim_id == claim_id
                and a.action_type == action_type
                and a.status == PendingActionStatus.PENDING
            ]

    def mark_pending_action_sent(self, action_id: str, at: datetime) -> None:
        with self._lock:
            action = self.pending_actions.get(action_id)
            if action is None:
                raise RecordNotFoundError(message=f"Pending action {action_id} not found")
            self.pending_actions[action_id] = replace(
                action,
                status=PendingActionStatus.SENT,
                auto_executed=True,
                auto_executed_at=at,
            )

    # =========================================================================
    # Deadlines
    # =========================================================================

    def list_pending_deadlines(
        self, claim_id: str, start: date, end: date
    ) -> list[CarrierDeadline]:
        with self._lock:
            return sorted(
                (
                    d for d in self.deadlines.values()
                    if d.claim_id == claim_id
                    and d.status == DeadlineStatus.PENDING
                    and start <= d.deadline_date <= end
                ),
                key=lambda d: d.deadline_date,
            )

    # =========================================================================
    # Files
    # =========================================================================

    def list_unclassified_files(
        self, claim_ids: Sequence[str], limit: int, images_only: bool = False
    ) -> list[ClaimFile]:
        wanted = set(claim_ids)
        with self._lock:
            pending = [
                f for f in self.files.values()
                if f.claim_id in wanted and f.classification is None and not f.processed
                and (f.is_image or not images_only)
            ]
            return pending[:limit]

    def record_classification(
        self,
        file_id: str,
        classification: str,
        confidence: float,
        metadata: dict[str, Any],
        at: datetime,
    ) -> None:
        with self._lock:
            file = self.files.get(file_id)
            if file is None:
                raise RecordNotFoundError(message=f"File {file_id} not found")
            self.files[file_id] = replace(
                file,
                classification=classification,
                classification_confidence=confidence,
                classification_metadata=dict(metadata),
                processed=True,
                processed_at=at,
            )
