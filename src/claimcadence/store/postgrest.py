"""
ClaimCadence PostgREST Store

ClaimStore over a hosted Postgres exposed through PostgREST (the REST
layer of Supabase-style backends). Uses httpx with an explicit timeout
on every request.

The two write guarantees map onto PostgREST features:
- action log insert-ignore: POST with on_conflict on the unique index
  (claim_id, action_type, natural_key) and resolution=ignore-duplicates
- versioned track writes: PATCH of one track's progress columns filtered
  on id AND version; an empty representation means another writer got
  there first
"""
from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from typing import Any, Optional, Sequence

import httpx

from ..exceptions import ConcurrentModificationError, RecordNotFoundError, StoreError
from ..models import (
    DEFAULT_DAILY_ACTION_LIMIT,
    DEFAULT_FOLLOW_UP_INTERVAL_DAYS,
    DEFAULT_FOLLOW_UP_MAX_COUNT,
    ActionLogEntry,
    ActionType,
    AutonomyLevel,
    CarrierDeadline,
    ClaimAutomationPolicy,
    ClaimFile,
    ClaimSnapshot,
    ClaimTask,
    ClaimUpdate,
    DeadlineStatus,
    DraftContent,
    EmailDirection,
    EmailRecord,
    FollowUpTrack,
    FollowUpTrackKind,
    NewTask,
    PendingAction,
    PendingActionStatus,
    PendingActionType,
    TaskPriority,
    TriggerSource,
)
from ..models.claim import IMAGE_EXTENSIONS

logger = logging.getLogger(__name__)

# Column prefix of each follow-up track on the claim_automations row
TRACK_PREFIX = {
    FollowUpTrackKind.GENERAL: "follow_up_",
    FollowUpTrackKind.RECOVERABLE_DEPRECIATION: "rd_follow_up_",
}

CLAIM_COLUMNS = (
    "id,claim_number,policy_number,policyholder_name,policyholder_email,"
    "adjuster_name,adjuster_email,status,loss_type,insurance_company"
)


# =============================================================================
# Row Conversion
# =============================================================================

def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    return date.fromisoformat(value[:10])


def _int_or(value: Optional[int], default: int) -> int:
    # 0 is a real setting for limits and counts; only a missing column defaults
    return default if value is None else value


def _track_from_row(row: dict[str, Any], prefix: str) -> FollowUpTrack:
    return FollowUpTrack(
        enabled=bool(row.get(f"{prefix}enabled")),
        interval_days=_int_or(row.get(f"{prefix}interval_days"), DEFAULT_FOLLOW_UP_INTERVAL_DAYS),
        max_count=_int_or(row.get(f"{prefix}max_count"), DEFAULT_FOLLOW_UP_MAX_COUNT),
        current_count=row.get(f"{prefix}current_count") or 0,
        next_run_at=_parse_dt(row.get(f"{prefix}next_at")),
        last_sent_at=_parse_dt(row.get(f"{prefix}last_sent_at")),
        stopped_at=_parse_dt(row.get(f"{prefix}stopped_at")),
        stop_reason=row.get(f"{prefix}stop_reason"),
    )


def track_progress_to_row(track: FollowUpTrack, prefix: str) -> dict[str, Any]:
    """The engine-owned columns of one track. Staff own the rest of the row."""
    return {
        f"{prefix}current_count": track.current_count,
        f"{prefix}next_at": _iso(track.next_run_at),
        f"{prefix}last_sent_at": _iso(track.last_sent_at),
        f"{prefix}stopped_at": _iso(track.stopped_at),
        f"{prefix}stop_reason": track.stop_reason,
    }


def policy_from_row(row: dict[str, Any]) -> ClaimAutomationPolicy:
    return ClaimAutomationPolicy(
        id=row["id"],
        claim_id=row["claim_id"],
        autonomy_level=AutonomyLevel(row.get("autonomy_level") or "manual"),
        is_enabled=bool(row.get("is_enabled")),
        daily_action_limit=_int_or(row.get("daily_action_limit"), DEFAULT_DAILY_ACTION_LIMIT),
        auto_complete_tasks=bool(row.get("auto_complete_tasks")),
        auto_respond_without_approval=bool(row.get("auto_respond_without_approval")),
        auto_escalate_urgency=bool(row.get("auto_escalate_urgency")),
        keyword_blockers=frozenset(row.get("keyword_blockers") or ()),
        general=_track_from_row(row, TRACK_PREFIX[FollowUpTrackKind.GENERAL]),
        recoverable_depreciation=_track_from_row(
            row, TRACK_PREFIX[FollowUpTrackKind.RECOVERABLE_DEPRECIATION]
        ),
        version=row.get("version") or 1,
    )


def entry_from_row(row: dict[str, Any]) -> ActionLogEntry:
    return ActionLogEntry(
        id=row.get("id"),
        claim_id=row["claim_id"],
        action_type=ActionType(row["action_type"]),
        details=row.get("action_details") or {},
        was_auto_executed=bool(row.get("was_auto_executed")),
        result=row.get("result") or "",
        executed_at=_parse_dt(row.get("executed_at")),
        natural_key=row.get("natural_key") or "",
        trigger_source=TriggerSource(row.get("trigger_source") or "autonomous_agent"),
    )


def entry_to_row(entry: ActionLogEntry) -> dict[str, Any]:
    return {
        "claim_id": entry.claim_id,
        "action_type": entry.action_type.value,
        "action_details": entry.details,
        "was_auto_executed": entry.was_auto_executed,
        "result": entry.result,
        "executed_at": _iso(entry.executed_at),
        "natural_key": entry.natural_key,
        "trigger_source": entry.trigger_source.value,
    }


def task_from_row(row: dict[str, Any]) -> ClaimTask:
    return ClaimTask(
        id=row["id"],
        claim_id=row["claim_id"],
        title=row.get("title") or "",
        description=row.get("description") or "",
        created_at=_parse_dt(row.get("created_at")),
        is_completed=bool(row.get("is_completed")),
        completed_at=_parse_dt(row.get("completed_at")),
        completed_by=row.get("completed_by"),
        due_date=_parse_date(row.get("due_date")),
        priority=TaskPriority(row.get("priority") or "medium"),
        status=row.get("status") or "pending",
    )


def email_from_row(row: dict[str, Any]) -> EmailRecord:
    direction = (
        EmailDirection.INBOUND
        if row.get("recipient_type") == "inbound"
        else EmailDirection.OUTBOUND
    )
    return EmailRecord(
        id=row["id"],
        claim_id=row["claim_id"],
        direction=direction,
        subject=row.get("subject") or "",
        sent_at=_parse_dt(row.get("sent_at")),
    )


def pending_action_from_row(row: dict[str, Any]) -> PendingAction:
    draft = row.get("draft_content") or {}
    return PendingAction(
        id=row["id"],
        claim_id=row["claim_id"],
        action_type=PendingActionType(row.get("action_type") or "email_response"),
        status=PendingActionStatus(row.get("status") or "pending"),
        auto_executed=bool(row.get("auto_executed")),
        auto_executed_at=_parse_dt(row.get("auto_executed_at")),
        draft_content=DraftContent(
            to_email=draft.get("to_email") or draft.get("to") or "",
            to_name=draft.get("to_name"),
            subject=draft.get("subject") or "",
            body=draft.get("body") or "",
        ),
    )


def deadline_from_row(row: dict[str, Any]) -> CarrierDeadline:
    return CarrierDeadline(
        id=row["id"],
        claim_id=row["claim_id"],
        deadline_type=row.get("deadline_type") or "",
        trigger_date=_parse_date(row.get("trigger_date")),
        deadline_date=_parse_date(row.get("deadline_date")),
        is_business_days=bool(row.get("is_business_days")),
        status=DeadlineStatus(row.get("status") or "pending"),
        carrier_response_date=_parse_date(row.get("carrier_response_date")),
    )


def file_from_row(row: dict[str, Any]) -> ClaimFile:
    return ClaimFile(
        id=row["id"],
        claim_id=row["claim_id"],
        file_name=row.get("file_name") or "",
        file_type=row.get("file_type"),
        classification=row.get("document_classification"),
    )


# =============================================================================
# Store
# =============================================================================

class PostgrestClaimStore:
    """
    ClaimStore backed by a PostgREST endpoint.

    Usage:
        store = PostgrestClaimStore(base_url="https://x.supabase.co", api_key=key)
        policies = store.list_autonomous_policies()
    """

    POLICIES = "claim_automations"
    CLAIMS = "claims"
    ACTION_LOG = "claim_action_log"
    TASKS = "tasks"
    EMAILS = "emails"
    UPDATES = "claim_updates"
    NOTES = "claim_notes"
    PENDING_ACTIONS = "claim_ai_pending_actions"
    DEADLINES = "claim_carrier_deadlines"
    FILES = "claim_files"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 20.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._client = client or httpx.Client(
            base_url=base_url.rstrip("/") + "/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
        )

    def close(self) -> None:
        self._client.close()

    # -- transport -----------------------------------------------------------

    def _request(
        self,
        method: str,
        table: str,
        params: Any = None,
        json_body: Any = None,
        prefer: Optional[str] = None,
    ) -> httpx.Response:
        headers = {"Prefer": prefer} if prefer else None
        try:
            response = self._client.request(
                method, f"/{table}", params=params, json=json_body, headers=headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StoreError(
                message=f"{method} {table} failed with HTTP {e.response.status_code}",
                details={"table": table, "body": e.response.text[:500]},
            ) from e
        except httpx.RequestError as e:
            raise StoreError(
                message=f"{method} {table} failed: {e}",
                details={"table": table},
            ) from e
        return response

    def _select(self, table: str, params: Any) -> list[dict[str, Any]]:
        return self._request("GET", table, params=params).json()

    # -- automation policies -------------------------------------------------

    def list_autonomous_policies(self) -> list[ClaimAutomationPolicy]:
        rows = self._select(self.POLICIES, {
            "select": "*",
            "is_enabled": "eq.true",
            "autonomy_level": "in.(semi_autonomous,fully_autonomous)",
        })
        return [policy_from_row(r) for r in rows]

    def list_due_follow_ups(
        self, kind: FollowUpTrackKind, now: datetime
    ) -> list[ClaimAutomationPolicy]:
        p = TRACK_PREFIX[kind]
        rows = self._select(self.POLICIES, {
            "select": "*",
            "is_enabled": "eq.true",
            f"{p}enabled": "eq.true",
            f"{p}stopped_at": "is.null",
            f"{p}next_at": f"lte.{now.isoformat()}",
        })
        return [policy_from_row(r) for r in rows]

    def save_track(
        self,
        policy: ClaimAutomationPolicy,
        kind: FollowUpTrackKind,
        track: FollowUpTrack,
    ) -> ClaimAutomationPolicy:
        body = track_progress_to_row(track, TRACK_PREFIX[kind])
        body["version"] = policy.version + 1
        rows = self._request(
            "PATCH",
            self.POLICIES,
            params={"id": f"eq.{policy.id}", "version": f"eq.{policy.version}"},
            json_body=body,
            prefer="return=representation",
        ).json()
        if not rows:
            raise ConcurrentModificationError(
                message=f"Automation policy {policy.id} was modified concurrently",
                details={"expected": policy.version},
                claim_id=policy.claim_id,
            )
        return policy_from_row(rows[0])

    # -- claims --------------------------------------------------------------

    def get_claim(self, claim_id: str) -> ClaimSnapshot:
        rows = self._select(self.CLAIMS, {"select": CLAIM_COLUMNS, "id": f"eq.{claim_id}"})
        if not rows:
            raise RecordNotFoundError(message=f"Claim {claim_id} not found", claim_id=claim_id)
        row = rows[0]
        return ClaimSnapshot(**{k: row.get(k) for k in CLAIM_COLUMNS.split(",")})

    def has_activity_since(self, claim_id: str, since: datetime) -> bool:
        rows = self._select(self.UPDATES, {
            "select": "id",
            "claim_id": f"eq.{claim_id}",
            "created_at": f"gte.{since.isoformat()}",
            "limit": 1,
        })
        return bool(rows)

    def add_claim_update(
        self, claim_id: str, content: str, update_type: str, now: datetime
    ) -> ClaimUpdate:
        rows = self._request(
            "POST",
            self.UPDATES,
            json_body={
                "claim_id": claim_id,
                "content": content,
                "update_type": update_type,
                "created_at": now.isoformat(),
            },
            prefer="return=representation",
        ).json()
        row = rows[0] if rows else {}
        return ClaimUpdate(
            id=row.get("id"),
            claim_id=claim_id,
            content=content,
            update_type=update_type,
            created_at=now,
        )

    def add_claim_note(self, claim_id: str, content: str, now: datetime) -> None:
        self._request(
            "POST",
            self.NOTES,
            json_body={"claim_id": claim_id, "content": content, "created_at": now.isoformat()},
            prefer="return=minimal",
        )

    # -- action log ----------------------------------------------------------

    def count_auto_executed_since(self, claim_id: str, since: datetime) -> int:
        response = self._request(
            "HEAD",
            self.ACTION_LOG,
            params={
                "select": "id",
                "claim_id": f"eq.{claim_id}",
                "was_auto_executed": "is.true",
                "executed_at": f"gte.{since.isoformat()}",
            },
            prefer="count=exact",
        )
        content_range = response.headers.get("content-range", "*/0")
        total = content_range.rsplit("/", 1)[-1]
        return int(total) if total.isdigit() else 0

    def find_action_log(
        self,
        claim_id: str,
        action_type: ActionType,
        since: Optional[datetime] = None,
        **details: Any,
    ) -> list[ActionLogEntry]:
        params: dict[str, Any] = {
            "select": "*",
            "claim_id": f"eq.{claim_id}",
            "action_type": f"eq.{action_type.value}",
        }
        if details:
            params["action_details"] = "cs." + json.dumps(details, sort_keys=True)
        if since is not None:
            params["executed_at"] = f"gte.{since.isoformat()}"
        return [entry_from_row(r) for r in self._select(self.ACTION_LOG, params)]

    def append_action_log(self, entry: ActionLogEntry) -> Optional[ActionLogEntry]:
        rows = self._request(
            "POST",
            self.ACTION_LOG,
            params={"on_conflict": "claim_id,action_type,natural_key"},
            json_body=entry_to_row(entry),
            prefer="resolution=ignore-duplicates,return=representation",
        ).json()
        if not rows:
            logger.debug("Duplicate action log entry ignored: %s", entry.dedupe_key)
            return None
        return entry_from_row(rows[0])

    # -- tasks & correspondence ----------------------------------------------

    def list_open_tasks(self, claim_id: str) -> list[ClaimTask]:
        rows = self._select(self.TASKS, {
            "select": "*",
            "claim_id": f"eq.{claim_id}",
            "is_completed": "eq.false",
        })
        return [task_from_row(r) for r in rows]

    def complete_task(self, task_id: str, completed_at: datetime) -> None:
        self._request(
            "PATCH",
            self.TASKS,
            params={"id": f"eq.{task_id}"},
            json_body={
                "is_completed": True,
                "completed_at": completed_at.isoformat(),
                "completed_by": None,
                "status": "completed",
            },
            prefer="return=minimal",
        )

    def create_task(self, task: NewTask, now: datetime) -> ClaimTask:
        rows = self._request(
            "POST",
            self.TASKS,
            json_body={
                "claim_id": task.claim_id,
                "title": task.title,
                "description": task.description,
                "due_date": task.due_date.isoformat(),
                "priority": task.priority.value,
                "status": "pending",
                "created_at": now.isoformat(),
            },
            prefer="return=representation",
        ).json()
        return task_from_row(rows[0])

    def update_task(self, task: ClaimTask) -> None:
        self._request(
            "PATCH",
            self.TASKS,
            params={"id": f"eq.{task.id}"},
            json_body={
                "description": task.description,
                "due_date": task.due_date.isoformat() if task.due_date else None,
            },
            prefer="return=minimal",
        )

    def has_inbound_email_since(self, claim_id: str, since: datetime) -> bool:
        rows = self._select(self.EMAILS, {
            "select": "id",
            "claim_id": f"eq.{claim_id}",
            "recipient_type": "eq.inbound",
            "sent_at": f"gte.{since.isoformat()}",
            "limit": 1,
        })
        return bool(rows)

    def last_outbound_email(self, claim_id: str) -> Optional[EmailRecord]:
        rows = self._select(self.EMAILS, {
            "select": "id,claim_id,recipient_type,subject,sent_at",
            "claim_id": f"eq.{claim_id}",
            "recipient_type": "neq.inbound",
            "order": "sent_at.desc",
            "limit": 1,
        })
        return email_from_row(rows[0]) if rows else None

    # -- pending actions -----------------------------------------------------

    def list_pending_actions(
        self, claim_id: str, action_type: PendingActionType
    ) -> list[PendingAction]:
        rows = self._select(self.PENDING_ACTIONS, {
            "select": "*",
            "claim_id": f"eq.{claim_id}",
            "status": "eq.pending",
            "action_type": f"eq.{action_type.value}",
        })
        return [pending_action_from_row(r) for r in rows]

    def mark_pending_action_sent(self, action_id: str, at: datetime) -> None:
        self._request(
            "PATCH",
            self.PENDING_ACTIONS,
            params={"id": f"eq.{action_id}"},
            json_body={
                "status": PendingActionStatus.SENT.value,
                "auto_executed": True,
                "auto_executed_at": at.isoformat(),
            },
            prefer="return=minimal",
        )

    # -- deadlines -----------------------------------------------------------

    def list_pending_deadlines(
        self, claim_id: str, start: date, end: date
    ) -> list[CarrierDeadline]:
        rows = self._select(self.DEADLINES, [
            ("select", "*"),
            ("claim_id", f"eq.{claim_id}"),
            ("status", "eq.pending"),
            ("deadline_date", f"gte.{start.isoformat()}"),
            ("deadline_date", f"lte.{end.isoformat()}"),
            ("order", "deadline_date.asc"),
        ])
        return [deadline_from_row(r) for r in rows]

    # -- files ---------------------------------------------------------------

    def list_unclassified_files(
        self, claim_ids: Sequence[str], limit: int, images_only: bool = False
    ) -> list[ClaimFile]:
        if not claim_ids:
            return []
        unprocessed = "or(processed_by_engine.is.null,processed_by_engine.eq.false)"
        if images_only:
            image_match = ",".join(
                ["file_type.ilike.*image*"]
                + [f"file_name.ilike.*{ext}" for ext in IMAGE_EXTENSIONS]
            )
            condition = f"({unprocessed},or({image_match}))"
        else:
            condition = f"({unprocessed})"
        rows = self._select(self.FILES, {
            "select": "id,claim_id,file_name,file_type,document_classification",
            "claim_id": f"in.({','.join(claim_ids)})",
            "document_classification": "is.null",
            "and": condition,
            "limit": limit,
        })
        return [file_from_row(r) for r in rows]

    def record_classification(
        self,
        file_id: str,
        classification: str,
        confidence: float,
        metadata: dict[str, Any],
        at: datetime,
    ) -> None:
        self._request(
            "PATCH",
            self.FILES,
            params={"id": f"eq.{file_id}"},
            json_body={
                "document_classification": classification,
                "classification_confidence": confidence,
                "classification_metadata": metadata,
                "processed_by_engine": True,
                "processed_at": at.isoformat(),
            },
            prefer="return=minimal",
        )
