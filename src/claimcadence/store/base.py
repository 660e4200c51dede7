"""
ClaimCadence Store Protocol

The relational store collaborator as seen by the engine. All reads are
simple equality/range filters on one table, plus following a policy's
foreign key to its claim.

Two write guarantees every implementation must provide:
- append_action_log is insert-ignore on (claim_id, action_type,
  natural_key) and returns None for a duplicate
- save_track only succeeds if the stored version equals policy.version,
  otherwise it raises ConcurrentModificationError; it writes the
  engine-owned fields of one track and leaves the staff toggles alone
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from ..models import (
    ActionLogEntry,
    ActionType,
    CarrierDeadline,
    ClaimAutomationPolicy,
    ClaimFile,
    ClaimSnapshot,
    ClaimTask,
    ClaimUpdate,
    EmailRecord,
    FollowUpTrack,
    FollowUpTrackKind,
    NewTask,
    PendingAction,
    PendingActionType,
)


@runtime_checkable
class ClaimStore(Protocol):
    """Read/write access to the entities the engine touches."""

    # -- automation policies -------------------------------------------------

    def list_autonomous_policies(self) -> list[ClaimAutomationPolicy]:
        """Enabled policies at semi- or fully-autonomous level."""
        ...

    def list_due_follow_ups(
        self, kind: FollowUpTrackKind, now: datetime
    ) -> list[ClaimAutomationPolicy]:
        """Enabled policies whose track is enabled, not stopped and due."""
        ...

    def save_track(
        self,
        policy: ClaimAutomationPolicy,
        kind: FollowUpTrackKind,
        track: FollowUpTrack,
    ) -> ClaimAutomationPolicy:
        """
        Versioned write of one track's progress.

        Only current_count, next_run_at, last_sent_at, stopped_at and
        stop_reason are written. Returns the stored policy with its new
        version.
        """
        ...

    # -- claims --------------------------------------------------------------

    def get_claim(self, claim_id: str) -> ClaimSnapshot:
        ...

    def has_activity_since(self, claim_id: str, since: datetime) -> bool:
        ...

    def add_claim_update(
        self, claim_id: str, content: str, update_type: str, now: datetime
    ) -> ClaimUpdate:
        ...

    def add_claim_note(self, claim_id: str, content: str, now: datetime) -> None:
        ...

    # -- action log ----------------------------------------------------------

    def count_auto_executed_since(self, claim_id: str, since: datetime) -> int:
        ...

    def find_action_log(
        self,
        claim_id: str,
        action_type: ActionType,
        since: Optional[datetime] = None,
        **details: Any,
    ) -> list[ActionLogEntry]:
        """Entries whose details contain every given key/value."""
        ...

    def append_action_log(self, entry: ActionLogEntry) -> Optional[ActionLogEntry]:
        ...

    # -- tasks & correspondence ----------------------------------------------

    def list_open_tasks(self, claim_id: str) -> list[ClaimTask]:
        ...

    def complete_task(self, task_id: str, completed_at: datetime) -> None:
        ...

    def create_task(self, task: NewTask, now: datetime) -> ClaimTask:
        ...

    def update_task(self, task: ClaimTask) -> None:
        ...

    def has_inbound_email_since(self, claim_id: str, since: datetime) -> bool:
        ...

    def last_outbound_email(self, claim_id: str) -> Optional[EmailRecord]:
        ...

    # -- pending actions -----------------------------------------------------

    def list_pending_actions(
        self, claim_id: str, action_type: PendingActionType
    ) -> list[PendingAction]:
        ...

    def mark_pending_action_sent(self, action_id: str, at: datetime) -> None:
        ...

    # -- deadlines -----------------------------------------------------------

    def list_pending_deadlines(
        self, claim_id: str, start: date, end: date
    ) -> list[CarrierDeadline]:
        """Pending deadlines with start <= deadline_date <= end."""
        ...

    # -- files ---------------------------------------------------------------

    def list_unclassified_files(
        self, claim_ids: Sequence[str], limit: int, images_only: bool = False
    ) -> list[ClaimFile]:
        """Files with no classification that the engine has not processed."""
        ...

    def record_classification(
        self,
        file_id: str,
        classification: str,
        confidence: float,
        metadata: dict[str, Any],
        at: datetime,
    ) -> None:
        ...
