"""
Tests for the command line entry point.
"""
import json

import pytest

from claimcadence import cli


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)
    for name in ("STORE_URL", "STORE_KEY", "MAIL_URL", "ENGINE_CONFIG"):
        monkeypatch.delenv(f"CLAIMCADENCE_{name}", raising=False)


def run(capsys, *argv):
    code = cli.main(list(argv))
    return code, json.loads(capsys.readouterr().out)


class TestDeadlineCommand:
    """Tests for `deadline`."""

    def test_overdue_acknowledgment(self, capsys):
        code, out = run(capsys, "deadline", "acknowledgment", "2024-06-03", "--today", "2024-06-20")

        assert code == 0
        assert out["deadline_date"] == "2024-06-17"
        assert out["rule"] == "10 business days"
        assert out["days_overdue"] == 3
        assert out["bad_faith_potential"] is True

    def test_met_deadline(self, capsys):
        code, out = run(
            capsys, "deadline", "payment", "2024-06-03", "--status", "met", "--today", "2024-08-01"
        )
        assert code == 0
        assert out["days_overdue"] == 0
        assert out["bad_faith_potential"] is False

    def test_unknown_type(self, capsys):
        code, out = run(capsys, "deadline", "appraisal", "2024-06-03")
        assert code == 1
        assert out["success"] is False
        assert out["error"]["code"] == "CC_UNKNOWN_DEADLINE_TYPE"

    def test_bad_date(self, capsys):
        with pytest.raises(SystemExit):
            cli.main(["deadline", "payment", "June 3rd"])


class TestBatchCommands:
    """Batch commands fail cleanly without store settings."""

    def test_agent_without_settings(self, capsys):
        code, out = run(capsys, "agent")
        assert code == 1
        assert out["error"]["code"] == "CC_CONFIG_ERROR"

    def test_follow_ups_track_choices(self):
        with pytest.raises(SystemExit):
            cli.main(["follow-ups", "--track", "weekly"])

    def test_no_command(self, capsys):
        assert cli.main([]) == 1
