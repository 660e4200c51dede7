"""
API tests using FastAPI's TestClient.

The lifespan is not entered (no `with` block), so each test wires the
engine directly through api.dependencies.
"""
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from api import dependencies
from api.main import app
from claimcadence.config import Settings
from claimcadence.service import EngineServices
from claimcadence.store import InMemoryClaimStore

from tests.conftest import (
    FakeMailSender,
    FakeTextGenerator,
    make_claim,
    make_draft,
    make_policy,
    make_track,
)


SECRET = "cron-s3cret"
AUTH = {"x-cron-secret": SECRET}
LONG_AGO = datetime(2020, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return InMemoryClaimStore()


@pytest.fixture
def mail():
    return FakeMailSender()


@pytest.fixture
def client(store, mail):
    services = EngineServices(
        settings=Settings(cron_secret=SECRET),
        store=store,
        mail=mail,
        text_generator=FakeTextGenerator(),
    )
    dependencies.set_services(services, SECRET)
    yield TestClient(app)
    dependencies.set_services(None, None)


# =============================================================================
# Trigger Authorization
# =============================================================================

class TestTriggerAuth:
    """The shared secret gates every trigger route."""

    @pytest.mark.parametrize("path", ["/automation/run", "/follow-ups/run", "/follow-ups/rd/run"])
    def test_missing_secret(self, client, path):
        response = client.post(path)
        assert response.status_code == 401
        assert response.json()["detail"] == "unauthorized"

    def test_wrong_secret(self, client, mail):
        response = client.post("/automation/run", headers={"x-cron-secret": "guess"})
        assert response.status_code == 401
        assert mail.sent == []

    def test_unconfigured_secret_rejects_everything(self):
        """With no secret configured the trigger is closed."""
        dependencies.set_services(None, None)
        response = TestClient(app).post("/automation/run", headers={"x-cron-secret": ""})
        assert response.status_code == 401

    def test_unconfigured_engine(self):
        dependencies.set_services(None, SECRET)
        try:
            response = TestClient(app).post("/automation/run", headers=AUTH)
        finally:
            dependencies.set_services(None, None)
        assert response.status_code == 503


# =============================================================================
# Automation
# =============================================================================

class TestAutomationRun:
    """Tests for POST /automation/run."""

    def test_tick_summary(self, client, store, mail):
        store.add_claim(make_claim())
        store.add_policy(make_policy())
        store.add_pending_action(make_draft())

        response = client.post("/automation/run", headers=AUTH)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["results"]["processed"] == 1
        assert data["results"]["emails_sent"] == 1
        assert data["results"]["errors"] == []
        assert len(mail.sent) == 1

    def test_empty_tick(self, client):
        response = client.post("/automation/run", headers=AUTH)
        assert response.json()["results"]["processed"] == 0

    def test_request_id_header(self, client):
        response = client.post("/automation/run", headers=AUTH)
        assert len(response.headers["X-Request-ID"]) == 8


# =============================================================================
# Follow-ups
# =============================================================================

class TestFollowUpRuns:
    """Tests for the follow-up trigger routes."""

    def test_general_run(self, client, store, mail):
        store.add_claim(make_claim())
        store.add_policy(make_policy(general=make_track(next_run_at=LONG_AGO)))

        response = client.post("/follow-ups/run", headers=AUTH)

        assert response.status_code == 200
        data = response.json()
        assert data["track"] == "general"
        assert data["due"] == 1
        assert data["processed"][0]["follow_up_number"] == 1
        assert data["processed"][0]["type"] == "follow_up"
        assert mail.sent[0].subject == "CLM-1001"

    def test_rd_run_stops_released(self, client, store, mail):
        store.add_claim(make_claim(status="Waiting on RD Check"))
        store.add_policy(make_policy(recoverable_depreciation=make_track(next_run_at=LONG_AGO)))

        data = client.post("/follow-ups/rd/run", headers=AUTH).json()

        assert data["track"] == "recoverable_depreciation"
        assert data["stopped"] == [{"claim_id": "claim-0001-aaaa", "reason": "rd_released"}]
        assert mail.sent == []

    def test_without_text_generator(self, store, mail):
        """Follow-ups report a configuration error when no AI is wired."""
        dependencies.set_services(
            EngineServices(settings=Settings(cron_secret=SECRET), store=store, mail=mail),
            SECRET,
        )
        try:
            response = TestClient(app).post("/follow-ups/run", headers=AUTH)
        finally:
            dependencies.set_services(None, None)
        assert response.status_code == 500
        assert response.json()["detail"]["code"] == "CC_CONFIG_ERROR"


# =============================================================================
# Deadlines & Health
# =============================================================================

class TestDeadlines:
    """Tests for the deadline calculator endpoints."""

    def test_named_type(self, client):
        response = client.post(
            "/deadlines/calculate",
            json={"trigger_date": "2024-06-03", "deadline_type": "acknowledgment", "today": "2024-06-20"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["deadline_date"] == "2024-06-17"
        assert data["label"] == "Claim Acknowledgment"
        assert data["days_overdue"] == 3
        assert data["bad_faith_potential"] is True

    def test_explicit_offset(self, client):
        response = client.post(
            "/deadlines/calculate",
            json={
                "trigger_date": "2024-06-03",
                "offset_days": 10,
                "is_business_days": True,
                "today": "2024-06-05",
            },
        )
        data = response.json()
        assert data["deadline_date"] == "2024-06-17"
        assert data["days_remaining"] == 12
        assert data["deadline_type"] is None

    def test_zero_business_offset_from_saturday(self, client):
        response = client.post(
            "/deadlines/calculate",
            json={
                "trigger_date": "2024-06-08",
                "offset_days": 0,
                "is_business_days": True,
                "today": "2024-06-05",
            },
        )
        data = response.json()
        assert data["deadline_date"] == "2024-06-10"
        assert data["days_remaining"] == 5

    def test_unknown_type(self, client):
        response = client.post(
            "/deadlines/calculate",
            json={"trigger_date": "2024-06-03", "deadline_type": "appraisal"},
        )
        assert response.status_code == 404

    def test_type_and_offset_rejected(self, client):
        response = client.post(
            "/deadlines/calculate",
            json={"trigger_date": "2024-06-03", "deadline_type": "payment", "offset_days": 3},
        )
        assert response.status_code == 422

    def test_profiles(self, client):
        profiles = {p["deadline_type"]: p for p in client.get("/deadlines/profiles").json()}
        assert profiles["decision"]["rule"] == "15 business days"
        assert profiles["payment"]["is_business_days"] is False


class TestHealth:
    def test_health(self, client):
        data = client.get("/health").json()
        assert data == {"healthy": True, "engine_configured": True, "follow_ups_available": True}

    def test_api_info(self, client):
        data = client.get("/api").json()
        assert data["service"] == "ClaimCadence API"
        assert data["engine_configured"] is True
