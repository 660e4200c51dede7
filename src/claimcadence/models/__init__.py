"""
ClaimCadence Models

Domain models for the claim automation engine.

Modules:
- enums: Enumeration types
- automation: ClaimAutomationPolicy and FollowUpTrack
- action_log: ActionLogEntry and DailyQuota
- claim: Claim snapshot, tasks, correspondence, files, pending actions
- deadline: Carrier deadlines and their profiles
"""
from __future__ import annotations

from .enums import (
    ActionType,
    AutonomyLevel,
    DeadlineStatus,
    EmailDirection,
    EscalationReason,
    FollowUpTrackKind,
    PendingActionStatus,
    PendingActionType,
    StopReason,
    TaskPriority,
    TriggerSource,
)
from .automation import (
    DEFAULT_DAILY_ACTION_LIMIT,
    DEFAULT_FOLLOW_UP_INTERVAL_DAYS,
    DEFAULT_FOLLOW_UP_MAX_COUNT,
    ClaimAutomationPolicy,
    FollowUpTrack,
)
from .action_log import ActionLogEntry, DailyQuota
from .claim import (
    ClaimFile,
    ClaimSnapshot,
    ClaimTask,
    ClaimUpdate,
    DraftContent,
    EmailRecord,
    NewTask,
    PendingAction,
)
from .deadline import (
    DEFAULT_DEADLINE_PROFILES,
    CarrierDeadline,
    DeadlineAssessment,
    DeadlineProfile,
)

__all__ = [
    # Enums
    "ActionType",
    "AutonomyLevel",
    "DeadlineStatus",
    "EmailDirection",
    "EscalationReason",
    "FollowUpTrackKind",
    "PendingActionStatus",
    "PendingActionType",
    "StopReason",
    "TaskPriority",
    "TriggerSource",
    # Automation policy
    "DEFAULT_DAILY_ACTION_LIMIT",
    "DEFAULT_FOLLOW_UP_INTERVAL_DAYS",
    "DEFAULT_FOLLOW_UP_MAX_COUNT",
    "ClaimAutomationPolicy",
    "FollowUpTrack",
    # Action log
    "ActionLogEntry",
    "DailyQuota",
    # Claim
    "ClaimFile",
    "ClaimSnapshot",
    "ClaimTask",
    "ClaimUpdate",
    "DraftContent",
    "EmailRecord",
    "NewTask",
    "PendingAction",
    # Deadlines
    "DEFAULT_DEADLINE_PROFILES",
    "CarrierDeadline",
    "DeadlineAssessment",
    "DeadlineProfile",
]
