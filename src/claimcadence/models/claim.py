"""
ClaimCadence Claim Read Models

Snapshots of the rows the engine reads from the relational store:
claim display fields, tasks, correspondence, activity, files, and
AI-drafted pending actions. These are owned by other parts of the CRM;
the engine only reads them and writes the few fields noted per class.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from .enums import (
    EmailDirection,
    PendingActionStatus,
    PendingActionType,
    TaskPriority,
)


_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


# =============================================================================
# Claim Snapshot
# =============================================================================

@dataclass
class ClaimSnapshot:
    """
    Display fields of the parent claim, fetched through the policy's
    foreign key.
    """
    id: str
    claim_number: Optional[str] = None
    policy_number: Optional[str] = None
    policyholder_name: Optional[str] = None
    policyholder_email: Optional[str] = None
    adjuster_name: Optional[str] = None
    adjuster_email: Optional[str] = None
    status: Optional[str] = None
    loss_type: Optional[str] = None
    insurance_company: Optional[str] = None

    @property
    def display_number(self) -> str:
        """Claim number, or the first 8 characters of the id."""
        return self.claim_number or self.id[:8]

    @property
    def inbound_alias(self) -> str:
        """
        Local part of the claim's inbound email address.

        Derived from the policy number stripped to alphanumerics and
        lower-cased, falling back to the claim id prefix.
        """
        if self.policy_number:
            sanitized = _NON_ALNUM.sub("", self.policy_number).lower()
            if sanitized:
                return f"claim-{sanitized}"
        return f"claim-{self.id[:8]}"

    def inbound_address(self, domain: str) -> str:
        return f"{self.inbound_alias}@{domain}"


# =============================================================================
# Tasks
# =============================================================================

@dataclass
class ClaimTask:
    """
    A claim task. The engine completes follow-up tasks and creates the
    recoverable-depreciation tracking task.
    """
    id: str
    claim_id: str
    title: str
    created_at: datetime
    description: str = ""
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None
    due_date: Optional[date] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: str = "pending"


@dataclass
class NewTask:
    """Values for a task the engine creates."""
    claim_id: str
    title: str
    description: str
    due_date: date
    priority: TaskPriority = TaskPriority.HIGH


# =============================================================================
# Correspondence & Activity
# =============================================================================

@dataclass
class EmailRecord:
    """A claim email, inbound or outbound."""
    id: str
    claim_id: str
    direction: EmailDirection
    subject: str
    sent_at: datetime


@dataclass
class ClaimUpdate:
    """A claim activity record (the timeline staff read)."""
    claim_id: str
    content: str
    update_type: str
    created_at: datetime
    id: Optional[str] = None


# =============================================================================
# Files
# =============================================================================

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".heic")


@dataclass
class ClaimFile:
    """An uploaded claim document awaiting classification."""
    id: str
    claim_id: str
    file_name: str
    file_type: Optional[str] = None
    classification: Optional[str] = None
    classification_confidence: Optional[float] = None
    classification_metadata: dict[str, Any] = field(default_factory=dict)
    processed: bool = False
    processed_at: Optional[datetime] = None

    @property
    def is_image(self) -> bool:
        if self.file_type and "image" in self.file_type.lower():
            return True
        return self.file_name.lower().endswith(IMAGE_EXTENSIONS)


# =============================================================================
# Pending Actions
# =============================================================================

@dataclass
class DraftContent:
    """An AI-drafted email."""
    to_email: str
    subject: str = ""
    body: str = ""
    to_name: Optional[str] = None

    @property
    def scan_text(self) -> str:
        """Lower-cased subject and body, the text the keyword guardrail reads."""
        return f"{self.subject} {self.body}".lower()


@dataclass
class PendingAction:
    """An AI-drafted action awaiting dispatch or human review."""
    id: str
    claim_id: str
    draft_content: DraftContent
    action_type: PendingActionType = PendingActionType.EMAIL_RESPONSE
    status: PendingActionStatus = PendingActionStatus.PENDING
    auto_executed: bool = False
    auto_executed_at: Optional[datetime] = None
