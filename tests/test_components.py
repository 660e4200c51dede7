"""
Tests for the per-claim engine components.

Tests cover:
- Action ledger and the daily quota
- Task auto-completion
- Autonomous dispatch and the keyword guardrail
- Escalation detection and its idempotence
- Document sweeping
"""
from datetime import datetime, timedelta, timezone

import pytest

from claimcadence.config import EngineRules
from claimcadence.engine import (
    ActionLedger,
    AutonomousDispatcher,
    DocumentSweeper,
    EscalationDetector,
    TaskAutoCompleter,
    authorize_trigger,
    find_blocked_keyword,
    start_of_day,
)
from claimcadence.exceptions import UnauthorizedTriggerError
from claimcadence.models import (
    ActionType,
    DailyQuota,
    DeadlineStatus,
    EmailDirection,
    PendingActionStatus,
)

from tests.conftest import (
    NOW,
    FakeClassifier,
    FakeMailSender,
    make_activity,
    make_deadline,
    make_draft,
    make_email,
    make_file,
    make_policy,
    make_task,
)


CLAIM_ID = "claim-0001-aaaa"


@pytest.fixture
def ledger(store):
    return ActionLedger(store)


def entries(store, action_type):
    return [e for e in store.action_log if e.action_type == action_type]


# =============================================================================
# Action Ledger
# =============================================================================

class TestActionLedger:
    """Tests for quota accounting and natural-key dedupe."""

    def test_start_of_day_is_utc_midnight(self):
        local = datetime(2024, 6, 12, 1, 30, tzinfo=timezone(timedelta(hours=5)))
        assert start_of_day(local) == datetime(2024, 6, 11, tzinfo=timezone.utc)

    def test_quota_counts_only_todays_auto_executed(self, store, ledger):
        """Yesterday's and non-auto entries do not count."""
        ledger.record(CLAIM_ID, ActionType.TASK_COMPLETED, "task:1", {}, "ok", NOW)
        ledger.record(CLAIM_ID, ActionType.TASK_COMPLETED, "task:2", {}, "ok", NOW - timedelta(days=1))
        ledger.record(
            CLAIM_ID, ActionType.ESCALATION, "blocked:1:sue", {}, "blocked", NOW,
            was_auto_executed=False,
        )
        quota = ledger.quota_for(make_policy(daily_action_limit=3), NOW)
        assert quota.used == 1
        assert quota.remaining == 2

    def test_duplicate_natural_key_is_ignored(self, store, ledger):
        """A second write with the same key stores nothing and consumes nothing."""
        quota = DailyQuota(limit=5)
        first = ledger.record(CLAIM_ID, ActionType.EMAIL_SENT, "email:1", {}, "ok", NOW, quota=quota)
        second = ledger.record(CLAIM_ID, ActionType.EMAIL_SENT, "email:1", {}, "ok", NOW, quota=quota)
        assert first is not None
        assert second is None
        assert quota.used == 1
        assert len(store.action_log) == 1

    def test_same_key_different_type_is_distinct(self, store, ledger):
        ledger.record(CLAIM_ID, ActionType.EMAIL_SENT, "k", {}, "ok", NOW)
        ledger.record(CLAIM_ID, ActionType.ESCALATION, "k", {}, "ok", NOW)
        assert len(store.action_log) == 2


# =============================================================================
# Task Auto-Completer
# =============================================================================

class TestTaskAutoCompleter:
    """Tests for closing follow-up tasks after inbound mail."""

    def test_round_trip(self, store, ledger):
        """A follow-up task completes once; a second run logs nothing new."""
        created = NOW - timedelta(days=2)
        task = store.add_task(make_task("Follow up with adjuster", created_at=created))
        store.add_email(make_email(sent_at=created + timedelta(days=1)))
        completer = TaskAutoCompleter(store, ledger)

        assert completer.run(CLAIM_ID, DailyQuota(limit=10), NOW) == 1
        assert completer.run(CLAIM_ID, DailyQuota(limit=10), NOW) == 0

        stored = store.tasks[task.id]
        assert stored.is_completed
        assert stored.completed_by is None
        log = entries(store, ActionType.TASK_COMPLETED)
        assert len(log) == 1
        assert log[0].details["task_id"] == task.id
        assert log[0].was_auto_executed

    def test_email_before_task_does_not_complete(self, store, ledger):
        store.add_task(make_task(created_at=NOW - timedelta(days=1)))
        store.add_email(make_email(sent_at=NOW - timedelta(days=3)))
        assert TaskAutoCompleter(store, ledger).run(CLAIM_ID, DailyQuota(limit=10), NOW) == 0

    def test_outbound_email_does_not_complete(self, store, ledger):
        store.add_task(make_task(created_at=NOW - timedelta(days=2)))
        store.add_email(make_email(sent_at=NOW, direction=EmailDirection.OUTBOUND))
        assert TaskAutoCompleter(store, ledger).run(CLAIM_ID, DailyQuota(limit=10), NOW) == 0

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Follow-up on estimate", 1),
            ("REMINDER: call carrier", 1),
            ("Order roof inspection", 0),
        ],
    )
    def test_title_patterns(self, store, ledger, title, expected):
        store.add_task(make_task(title, created_at=NOW - timedelta(days=2)))
        store.add_email(make_email(sent_at=NOW - timedelta(days=1)))
        assert TaskAutoCompleter(store, ledger).run(CLAIM_ID, DailyQuota(limit=10), NOW) == expected

    def test_stops_at_quota(self, store, ledger):
        """Only as many tasks as the quota allows are completed."""
        for i in range(3):
            store.add_task(make_task(f"Reminder {i}", created_at=NOW - timedelta(days=2)))
        store.add_email(make_email(sent_at=NOW - timedelta(days=1)))
        quota = DailyQuota(limit=2)
        assert TaskAutoCompleter(store, ledger).run(CLAIM_ID, quota, NOW) == 2
        assert quota.exhausted


# =============================================================================
# Autonomous Dispatcher
# =============================================================================

class TestAutonomousDispatcher:
    """Tests for guarded auto-send of AI drafts."""

    def test_blocked_keyword(self):
        assert find_blocked_keyword("Our ATTORNEY will call", ("lawsuit", "attorney")) == "attorney"
        assert find_blocked_keyword("All good", ("lawsuit",)) is None

    def test_attorney_draft_is_escalated_not_sent(self, store, ledger, mail):
        """A draft mentioning an attorney is held with exactly one escalation."""
        draft = store.add_pending_action(
            make_draft(body="Please direct questions to our attorney.")
        )
        dispatcher = AutonomousDispatcher(store, ledger, mail)

        result = dispatcher.run(make_policy(), DailyQuota(limit=10), NOW)
        dispatcher.run(make_policy(), DailyQuota(limit=10), NOW)

        assert result.sent == 0
        assert result.escalated == 1
        assert mail.sent == []
        assert store.pending_actions[draft.id].status == PendingActionStatus.PENDING
        log = entries(store, ActionType.ESCALATION)
        assert len(log) == 1
        assert log[0].details["blocked_keyword"] == "attorney"
        assert log[0].details["pending_action_id"] == draft.id
        assert log[0].was_auto_executed is False

    def test_clean_draft_is_sent(self, store, ledger, mail):
        """A clean draft is sent, marked and logged against the quota."""
        draft = store.add_pending_action(make_draft())
        quota = DailyQuota(limit=10)

        result = AutonomousDispatcher(store, ledger, mail).run(make_policy(), quota, NOW)

        assert result.sent == 1
        assert quota.used == 1
        assert mail.sent[0].recipients[0].email == "adjuster@carrier.example"
        assert mail.sent[0].claim_id == CLAIM_ID
        stored = store.pending_actions[draft.id]
        assert stored.status == PendingActionStatus.SENT
        assert stored.auto_executed
        assert stored.auto_executed_at == NOW
        assert len(entries(store, ActionType.EMAIL_SENT)) == 1

    def test_send_failure_leaves_pending(self, store, ledger):
        """A transport failure leaves the draft for the next tick."""
        draft = store.add_pending_action(make_draft())
        result = AutonomousDispatcher(store, ledger, FakeMailSender(fail=True)).run(
            make_policy(), DailyQuota(limit=10), NOW
        )
        assert result.sent == 0
        assert result.failed == 1
        assert store.pending_actions[draft.id].status == PendingActionStatus.PENDING
        assert store.action_log == []

    def test_claim_blockers_replace_defaults(self, store, ledger, mail):
        """Claim-specific blockers are used instead of the defaults."""
        store.add_pending_action(make_draft(body="Our attorney agrees with the estimate."))
        held = store.add_pending_action(make_draft(body="We request an appraisal."))
        policy = make_policy(keyword_blockers=["Appraisal"])

        result = AutonomousDispatcher(store, ledger, mail).run(policy, DailyQuota(limit=10), NOW)

        assert result.sent == 1
        assert result.escalated == 1
        assert store.pending_actions[held.id].status == PendingActionStatus.PENDING

    def test_engine_rules_keywords(self, store, ledger, mail):
        """Configured default keywords apply when the claim has none."""
        store.add_pending_action(make_draft(body="Forwarding to the ombudsman."))
        rules = EngineRules(blocked_keywords=("ombudsman",))
        result = AutonomousDispatcher(store, ledger, mail, rules).run(
            make_policy(), DailyQuota(limit=10), NOW
        )
        assert result.escalated == 1
        assert mail.sent == []

    def test_stops_at_quota(self, store, ledger, mail):
        store.add_pending_action(make_draft())
        store.add_pending_action(make_draft())
        quota = DailyQuota(limit=1)
        result = AutonomousDispatcher(store, ledger, mail).run(make_policy(), quota, NOW)
        assert result.sent == 1
        assert len(mail.sent) == 1


# =============================================================================
# Escalation Detector
# =============================================================================

class TestEscalationDetector:
    """Tests for stalled-claim and deadline escalations."""

    def test_stalled_claim_logged_once(self, store, ledger):
        """Running twice in succession produces a single stalled_claim entry."""
        store.add_activity(make_activity(NOW - timedelta(days=10)))
        detector = EscalationDetector(store, ledger)

        assert detector.run(CLAIM_ID, DailyQuota(limit=10), NOW) == 1
        assert detector.run(CLAIM_ID, DailyQuota(limit=10), NOW + timedelta(minutes=5)) == 0

        log = entries(store, ActionType.ESCALATION)
        assert len(log) == 1
        assert log[0].details["reason"] == "stalled_claim"
        assert log[0].was_auto_executed

    def test_stalled_suppressed_within_window(self, store, ledger):
        """An escalation from earlier in the window suppresses a new one."""
        detector = EscalationDetector(store, ledger)
        detector.run(CLAIM_ID, DailyQuota(limit=10), NOW - timedelta(days=3))
        assert detector.run(CLAIM_ID, DailyQuota(limit=10), NOW) == 0

    def test_stalled_again_after_window(self, store, ledger):
        detector = EscalationDetector(store, ledger)
        detector.run(CLAIM_ID, DailyQuota(limit=10), NOW - timedelta(days=8))
        assert detector.run(CLAIM_ID, DailyQuota(limit=10), NOW) == 1

    def test_recent_activity_not_stalled(self, store, ledger):
        store.add_activity(make_activity(NOW - timedelta(days=2)))
        assert EscalationDetector(store, ledger).run(CLAIM_ID, DailyQuota(limit=10), NOW) == 0

    def test_approaching_deadline(self, store, ledger):
        """Pending deadlines inside the horizon are escalated once each."""
        store.add_activity(make_activity(NOW - timedelta(days=1)))
        soon = store.add_deadline(make_deadline(NOW.date() + timedelta(days=2)))
        store.add_deadline(make_deadline(NOW.date() + timedelta(days=5)))
        store.add_deadline(make_deadline(NOW.date() + timedelta(days=1), status=DeadlineStatus.MET))
        store.add_deadline(make_deadline(NOW.date() - timedelta(days=1)))
        detector = EscalationDetector(store, ledger)

        assert detector.run(CLAIM_ID, DailyQuota(limit=10), NOW) == 1
        assert detector.run(CLAIM_ID, DailyQuota(limit=10), NOW) == 0

        log = entries(store, ActionType.ESCALATION)
        assert len(log) == 1
        assert log[0].details["reason"] == "approaching_deadline"
        assert log[0].details["deadline_id"] == soon.id
        assert log[0].details["deadline_date"] == soon.deadline_date.isoformat()

    def test_deadline_due_today_included(self, store, ledger):
        store.add_activity(make_activity(NOW - timedelta(days=1)))
        store.add_deadline(make_deadline(NOW.date()))
        assert EscalationDetector(store, ledger).run(CLAIM_ID, DailyQuota(limit=10), NOW) == 1

    def test_custom_windows(self, store, ledger):
        """Stall window and horizon come from the engine rules."""
        store.add_activity(make_activity(NOW - timedelta(days=4)))
        store.add_deadline(make_deadline(NOW.date() + timedelta(days=5)))
        rules = EngineRules(stalled_after_days=3, deadline_horizon_days=7)
        assert EscalationDetector(store, ledger, rules).run(CLAIM_ID, DailyQuota(limit=10), NOW) == 2

    def test_exhausted_quota_raises_nothing(self, store, ledger):
        store.add_deadline(make_deadline(NOW.date() + timedelta(days=1)))
        quota = DailyQuota(limit=1, used=1)
        assert EscalationDetector(store, ledger).run(CLAIM_ID, quota, NOW) == 0
        assert store.action_log == []


# =============================================================================
# Document Sweeper
# =============================================================================

class TestDocumentSweeper:
    """Tests for bounded document classification."""

    def test_images_classified_locally(self, store, classifier):
        photo = store.add_file(make_file("roof.jpg", "image/jpeg"))
        assert DocumentSweeper(store, classifier).run([CLAIM_ID], NOW) == 1
        stored = store.files[photo.id]
        assert stored.classification == "photo"
        assert stored.classification_confidence == 1.0
        assert stored.processed
        assert classifier.calls == []

    def test_documents_sent_to_classifier(self, store, classifier):
        doc = store.add_file(make_file("estimate.pdf"))
        assert DocumentSweeper(store, classifier).run([CLAIM_ID], NOW) == 1
        assert store.files[doc.id].classification == "estimate"
        assert classifier.calls == [doc.id]

    def test_failure_leaves_file_unclassified(self, store):
        doc = store.add_file(make_file("blurry.pdf"))
        sweeper = DocumentSweeper(store, FakeClassifier(fail_ids=[doc.id]))
        assert sweeper.run([CLAIM_ID], NOW) == 0
        assert store.files[doc.id].classification is None

    def test_batch_size_bounds_work(self, store, classifier):
        for i in range(5):
            store.add_file(make_file(f"doc{i}.pdf"))
        sweeper = DocumentSweeper(store, classifier, EngineRules(document_batch_size=2))
        assert sweeper.run([CLAIM_ID], NOW) == 2

    def test_images_reached_without_classifier(self, store):
        """Documents no one can classify do not crowd images out of the batch."""
        for i in range(3):
            store.add_file(make_file(f"doc{i}.pdf"))
        photo = store.add_file(make_file("roof.jpg", "image/jpeg"))
        sweeper = DocumentSweeper(store, None, EngineRules(document_batch_size=2))

        assert sweeper.run([CLAIM_ID], NOW) == 1
        assert store.files[photo.id].classification == "photo"
        assert sum(1 for f in store.files.values() if f.classification is None) == 3

    def test_other_claims_ignored(self, store, classifier):
        store.add_file(make_file(claim_id="someone-else"))
        assert DocumentSweeper(store, classifier).run([CLAIM_ID], NOW) == 0


# =============================================================================
# Trigger Authorization
# =============================================================================

class TestAuthorizeTrigger:
    """Tests for the shared-secret trigger check."""

    def test_matching_secret(self):
        authorize_trigger("s3cret", "s3cret")

    @pytest.mark.parametrize(
        "provided,expected",
        [(None, "s3cret"), ("", "s3cret"), ("guess", "s3cret"), ("s3cret", None), ("", "")],
    )
    def test_rejected(self, provided, expected):
        with pytest.raises(UnauthorizedTriggerError):
            authorize_trigger(provided, expected)
