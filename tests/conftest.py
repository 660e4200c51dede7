"""
Pytest configuration and fixtures for ClaimCadence tests.

Provides model factories, fake collaborators and a seeded in-memory
store. All times are fixed so tests never depend on the wall clock.
"""
import pytest
from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

from claimcadence.collaborators import Classification, MailMessage
from claimcadence.exceptions import ClassificationError, MailDeliveryError, TextGenerationError
from claimcadence.models import (
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
    PendingAction,
)
from claimcadence.store import InMemoryClaimStore


# Wednesday, 14:00 UTC
NOW = datetime(2024, 6, 12, 14, 0, tzinfo=timezone.utc)


# =============================================================================
# Factory Helpers
# =============================================================================

def make_claim(
    id: str = "claim-0001-aaaa",
    claim_number: str = "CLM-1001",
    policy_number: str = "HO-123/45",
    status: str = "Open",
    adjuster_email: str = "adjuster@carrier.example",
    adjuster_name: str = "Alex Adjuster",
    policyholder_email: str = "holder@example.com",
    policyholder_name: str = "Pat Holder",
    insurance_company: str = "Acme Mutual",
    loss_type: str = "Wind",
) -> ClaimSnapshot:
    """Create a ClaimSnapshot with sensible display fields."""
    return ClaimSnapshot(
        id=id,
        claim_number=claim_number,
        policy_number=policy_number,
        policyholder_name=policyholder_name,
        policyholder_email=policyholder_email,
        adjuster_name=adjuster_name,
        adjuster_email=adjuster_email,
        status=status,
        loss_type=loss_type,
        insurance_company=insurance_company,
    )


def make_policy(
    claim_id: str = "claim-0001-aaaa",
    autonomy_level: AutonomyLevel = AutonomyLevel.FULLY_AUTONOMOUS,
    daily_action_limit: int = 10,
    auto_complete_tasks: bool = True,
    auto_respond_without_approval: bool = True,
    auto_escalate_urgency: bool = True,
    keyword_blockers=(),
    general: FollowUpTrack = None,
    recoverable_depreciation: FollowUpTrack = None,
    id: str = None,
) -> ClaimAutomationPolicy:
    """Create a ClaimAutomationPolicy with every toggle on by default."""
    return ClaimAutomationPolicy(
        id=id or f"auto-{claim_id}",
        claim_id=claim_id,
        autonomy_level=autonomy_level,
        daily_action_limit=daily_action_limit,
        auto_complete_tasks=auto_complete_tasks,
        auto_respond_without_approval=auto_respond_without_approval,
        auto_escalate_urgency=auto_escalate_urgency,
        keyword_blockers=frozenset(keyword_blockers),
        general=general or FollowUpTrack(),
        recoverable_depreciation=recoverable_depreciation or FollowUpTrack(),
    )


def make_track(
    current_count: int = 0,
    max_count: int = 3,
    interval_days: int = 3,
    next_run_at: datetime = NOW - timedelta(hours=1),
    enabled: bool = True,
) -> FollowUpTrack:
    """Create an enabled FollowUpTrack that is due at NOW."""
    return FollowUpTrack(
        enabled=enabled,
        interval_days=interval_days,
        max_count=max_count,
        current_count=current_count,
        next_run_at=next_run_at,
    )


def make_task(
    title: str = "Follow up with adjuster",
    claim_id: str = "claim-0001-aaaa",
    created_at: datetime = NOW - timedelta(days=2),
    id: str = None,
) -> ClaimTask:
    return ClaimTask(
        id=id or str(uuid4()),
        claim_id=claim_id,
        title=title,
        created_at=created_at,
    )


def make_email(
    sent_at: datetime,
    direction: EmailDirection = EmailDirection.INBOUND,
    claim_id: str = "claim-0001-aaaa",
    subject: str = "Re: CLM-1001",
) -> EmailRecord:
    return EmailRecord(
        id=str(uuid4()),
        claim_id=claim_id,
        direction=direction,
        subject=subject,
        sent_at=sent_at,
    )


def make_draft(
    body: str = "Thanks for the update, we will send the estimate shortly.",
    subject: str = "Estimate for CLM-1001",
    claim_id: str = "claim-0001-aaaa",
    to_email: str = "adjuster@carrier.example",
    id: str = None,
) -> PendingAction:
    """Create a pending email_response draft."""
    return PendingAction(
        id=id or str(uuid4()),
        claim_id=claim_id,
        draft_content=DraftContent(
            to_email=to_email,
            to_name="Alex Adjuster",
            subject=subject,
            body=body,
        ),
    )


def make_deadline(
    deadline_date: date,
    deadline_type: str = "acknowledgment",
    claim_id: str = "claim-0001-aaaa",
    status: DeadlineStatus = DeadlineStatus.PENDING,
    id: str = None,
) -> CarrierDeadline:
    return CarrierDeadline(
        id=id or str(uuid4()),
        claim_id=claim_id,
        deadline_type=deadline_type,
        trigger_date=deadline_date - timedelta(days=14),
        deadline_date=deadline_date,
        status=status,
    )


def make_activity(created_at: datetime, claim_id: str = "claim-0001-aaaa") -> ClaimUpdate:
    return ClaimUpdate(
        id=str(uuid4()),
        claim_id=claim_id,
        content="Called adjuster",
        update_type="note",
        created_at=created_at,
    )


def make_file(
    file_name: str = "estimate.pdf",
    file_type: str = "application/pdf",
    claim_id: str = "claim-0001-aaaa",
    id: str = None,
) -> ClaimFile:
    return ClaimFile(
        id=id or str(uuid4()),
        claim_id=claim_id,
        file_name=file_name,
        file_type=file_type,
    )


# =============================================================================
# Fake Collaborators
# =============================================================================

class FakeMailSender:
    """Records messages; raises MailDeliveryError when `fail` is set."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[MailMessage] = []

    def send(self, message: MailMessage) -> None:
        if self.fail:
            raise MailDeliveryError(message="mail down", claim_id=message.claim_id)
        self.sent.append(message)


class FakeTextGenerator:
    """Returns canned text and records the prompts it was given."""

    def __init__(self, text: str = "Just checking in on this claim.", fail: bool = False):
        self.text = text
        self.fail = fail
        self.calls: list[tuple[str, str]] = []

    def generate(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        if self.fail:
            raise TextGenerationError(message="AI down")
        return self.text


class FakeClassifier:
    """Labels every file 'estimate'; fails for ids in `fail_ids`."""

    def __init__(self, fail_ids=()):
        self.fail_ids = set(fail_ids)
        self.calls: list[str] = []

    def classify(self, file_id: str) -> Classification:
        self.calls.append(file_id)
        if file_id in self.fail_ids:
            raise ClassificationError(message=f"cannot read {file_id}")
        return Classification(label="estimate", confidence=0.92, metadata={"pages": 3})


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def store():
    return InMemoryClaimStore()


@pytest.fixture
def claim(store):
    return store.add_claim(make_claim())


@pytest.fixture
def mail():
    return FakeMailSender()


@pytest.fixture
def text_generator():
    return FakeTextGenerator()


@pytest.fixture
def classifier():
    return FakeClassifier()
