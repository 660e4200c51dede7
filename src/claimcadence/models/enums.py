"""
ClaimCadence Enumerations

All enumeration types used by the automation engine.

All enums inherit from (str, Enum) for JSON serialization compatibility.
"""
from __future__ import annotations

from enum import Enum


# =============================================================================
# Automation Policy
# =============================================================================

class AutonomyLevel(str, Enum):
    """How much a claim's automation may act without human approval."""
    MANUAL = "manual"
    SEMI_AUTONOMOUS = "semi_autonomous"
    FULLY_AUTONOMOUS = "fully_autonomous"

    @property
    def is_automated(self) -> bool:
        return self is not AutonomyLevel.MANUAL


class FollowUpTrackKind(str, Enum):
    """The two independently scheduled follow-up cadences."""
    GENERAL = "general"
    RECOVERABLE_DEPRECIATION = "recoverable_depreciation"


class StopReason(str, Enum):
    """Why a follow-up track was stopped."""
    MAX_COUNT_REACHED = "max_count_reached"
    RD_RELEASED = "rd_released"


# =============================================================================
# Action Log
# =============================================================================

class ActionType(str, Enum):
    """Kinds of entries in the action log."""
    TASK_COMPLETED = "task_completed"
    EMAIL_SENT = "email_sent"
    ESCALATION = "escalation"


class EscalationReason(str, Enum):
    """Natural-key reason stored inside escalation details."""
    STALLED_CLAIM = "stalled_claim"
    APPROACHING_DEADLINE = "approaching_deadline"
    BLOCKED_KEYWORD = "blocked_keyword"


class TriggerSource(str, Enum):
    """Component that wrote an action log entry."""
    AUTONOMOUS_AGENT = "autonomous_agent"
    FOLLOW_UP_SCHEDULER = "follow_up_scheduler"


# =============================================================================
# Pending Actions
# =============================================================================

class PendingActionType(str, Enum):
    """AI-drafted action types."""
    EMAIL_RESPONSE = "email_response"
    SMS = "sms"
    NOTE = "note"


class PendingActionStatus(str, Enum):
    """Dispatch state of an AI-drafted action."""
    PENDING = "pending"
    SENT = "sent"
    BLOCKED = "blocked"


# =============================================================================
# Carrier Deadlines
# =============================================================================

class DeadlineStatus(str, Enum):
    """Staff-maintained status of a carrier deadline."""
    PENDING = "pending"
    MET = "met"
    MISSED = "missed"


# =============================================================================
# Correspondence
# =============================================================================

class EmailDirection(str, Enum):
    """Direction of a claim email record."""
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
