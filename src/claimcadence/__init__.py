"""
ClaimCadence - Claim Automation & Escalation Engine

Periodically triggered batch routines for an insurance-claims CRM. They
decide when and whether to act on a claim without a human, and write
down everything they did or declined to do.

Key Features:
- Per-claim automation policy with a shared daily action quota
- Auto-completion of follow-up tasks superseded by inbound mail
- Auto-sending of AI-drafted replies behind a keyword guardrail
- Idempotent escalations for stalled claims and approaching deadlines
- Two capped follow-up cadences (general, recoverable depreciation)
- Carrier deadline calculation with bad-faith flags

Quick Start:
    from claimcadence.config import Settings
    from claimcadence.service import build_services

    services = build_services(Settings.from_env())
    summary = services.automation_runner().run()
    print(summary.to_dict())

Version: 0.1.0
"""
from __future__ import annotations

__version__ = "0.1.0"

from .exceptions import (
    ClaimCadenceError,
    ClassificationError,
    CollaboratorError,
    ConcurrentModificationError,
    ConfigValidationError,
    ConfigurationError,
    DeadlineCalculationError,
    MailDeliveryError,
    RecordNotFoundError,
    StoreError,
    TextGenerationError,
    UnauthorizedTriggerError,
    UnknownDeadlineTypeError,
)
from .models import (
    ActionLogEntry,
    ActionType,
    AutonomyLevel,
    CarrierDeadline,
    ClaimAutomationPolicy,
    DailyQuota,
    FollowUpTrack,
    FollowUpTrackKind,
    PendingAction,
)

__all__ = [
    "__version__",
    # Exceptions
    "ClaimCadenceError",
    "ConfigurationError",
    "ConfigValidationError",
    "UnauthorizedTriggerError",
    "StoreError",
    "RecordNotFoundError",
    "ConcurrentModificationError",
    "CollaboratorError",
    "MailDeliveryError",
    "TextGenerationError",
    "ClassificationError",
    "DeadlineCalculationError",
    "UnknownDeadlineTypeError",
    # Models
    "ActionLogEntry",
    "ActionType",
    "AutonomyLevel",
    "CarrierDeadline",
    "ClaimAutomationPolicy",
    "DailyQuota",
    "FollowUpTrack",
    "FollowUpTrackKind",
    "PendingAction",
]
