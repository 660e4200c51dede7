"""
ClaimCadence Engine

Batch routines of the claim automation and escalation engine.

Services:
- DeadlineCalculator: Carrier deadline dates and bad-faith flags
- ActionLedger: Action log writes and the daily quota
- TaskAutoCompleter: Close follow-up tasks superseded by inbound mail
- AutonomousDispatcher: Send AI-drafted replies behind the keyword guardrail
- EscalationDetector: Stalled claims and approaching deadlines
- DocumentSweeper: Bounded per-tick document classification
- AutomationRunner: The autonomous tick
- FollowUpScheduler: General and recoverable depreciation follow-ups

Usage:
    from claimcadence.engine import AutomationRunner, FollowUpScheduler

    summary = AutomationRunner(store, mail).run()
"""
from __future__ import annotations

from .action_ledger import ActionLedger, start_of_day, utc_now
from .batch_runner import AutomationRunner, TickSummary
from .deadline_calculator import (
    DeadlineCalculator,
    add_business_days,
    calculate_deadline,
)
from .dispatcher import AutonomousDispatcher, DispatchResult, find_blocked_keyword
from .document_sweeper import PHOTO_LABEL, DocumentSweeper
from .escalation_detector import EscalationDetector
from .follow_up_scheduler import FollowUpRunSummary, FollowUpScheduler, SentFollowUp
from .prompts import general_follow_up_prompts, rd_follow_up_prompts
from .task_completer import TaskAutoCompleter
from .trigger import authorize_trigger

__all__ = [
    # Deadlines
    "DeadlineCalculator",
    "calculate_deadline",
    "add_business_days",
    # Action log
    "ActionLedger",
    "start_of_day",
    "utc_now",
    # Components
    "TaskAutoCompleter",
    "AutonomousDispatcher",
    "DispatchResult",
    "find_blocked_keyword",
    "EscalationDetector",
    "DocumentSweeper",
    "PHOTO_LABEL",
    # Batch entry points
    "AutomationRunner",
    "TickSummary",
    "FollowUpScheduler",
    "FollowUpRunSummary",
    "SentFollowUp",
    "authorize_trigger",
    # Prompts
    "general_follow_up_prompts",
    "rd_follow_up_prompts",
]
