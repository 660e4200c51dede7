#!/usr/bin/env python3
"""
ClaimCadence CLI

Runs the engine's batch routines once from a shell or a system scheduler,
and exposes the deadline calculator.

Usage:
    python -m claimcadence.cli agent
    python -m claimcadence.cli follow-ups --track rd
    python -m claimcadence.cli deadline acknowledgment 2024-06-03 --today 2024-06-20

Settings come from CLAIMCADENCE_* environment variables. Each command
prints a JSON summary; the exit code is 1 when the run could not start.
"""
from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from typing import Optional, Sequence

from .config import Settings
from .engine import DeadlineCalculator
from .exceptions import ClaimCadenceError
from .logging_config import configure_logging
from .models import DeadlineStatus, FollowUpTrackKind
from .service import build_services, load_engine_rules


TRACKS = {
    "general": FollowUpTrackKind.GENERAL,
    "rd": FollowUpTrackKind.RECOVERABLE_DEPRECIATION,
}


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, default=str))


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO date: {value!r}") from None


def cmd_agent(args: argparse.Namespace, settings: Settings) -> int:
    """Run one autonomous tick."""
    services = build_services(settings)
    summary = services.automation_runner().run()
    _print_json({"success": True, "results": summary.to_dict()})
    return 0


def cmd_follow_ups(args: argparse.Namespace, settings: Settings) -> int:
    """Run one follow-up track."""
    services = build_services(settings)
    summary = services.follow_up_scheduler().run(TRACKS[args.track])
    _print_json({"success": True, **summary.to_dict()})
    return 0


def cmd_deadline(args: argparse.Namespace, settings: Settings) -> int:
    """Calculate a deadline for a named type."""
    rules = load_engine_rules(settings)
    calculator = DeadlineCalculator(profiles=rules.deadline_profiles)
    deadline = calculator.build_deadline(
        id="cli",
        claim_id="cli",
        deadline_type=args.deadline_type,
        trigger_date=args.trigger_date,
    )
    deadline.status = DeadlineStatus(args.status)
    assessment = calculator.assess(deadline, today=args.today or date.today())
    profile = calculator.profile(args.deadline_type)

    _print_json({
        "deadline_type": deadline.deadline_type,
        "label": profile.label,
        "rule": profile.display_days,
        "trigger_date": deadline.trigger_date.isoformat(),
        "deadline_date": assessment.deadline_date.isoformat(),
        "status": deadline.status.value,
        "days_overdue": assessment.days_overdue,
        "days_remaining": assessment.days_remaining,
        "bad_faith_potential": assessment.bad_faith_potential,
    })
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ClaimCadence claim automation engine",
        prog="python -m claimcadence.cli",
    )
    parser.add_argument(
        "--log-format",
        choices=("json", "text"),
        default="json",
        help="Log line format on stderr",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    agent_parser = subparsers.add_parser("agent", help="Run one autonomous tick")
    agent_parser.set_defaults(func=cmd_agent)

    follow_parser = subparsers.add_parser("follow-ups", help="Run a follow-up track")
    follow_parser.add_argument(
        "--track",
        choices=sorted(TRACKS),
        default="general",
        help="Which follow-up track to run",
    )
    follow_parser.set_defaults(func=cmd_follow_ups)

    deadline_parser = subparsers.add_parser("deadline", help="Calculate a carrier deadline")
    deadline_parser.add_argument("deadline_type", help="Deadline type, e.g. acknowledgment")
    deadline_parser.add_argument("trigger_date", type=_parse_date, help="Trigger date (YYYY-MM-DD)")
    deadline_parser.add_argument(
        "--status",
        choices=[s.value for s in DeadlineStatus],
        default=DeadlineStatus.PENDING.value,
        help="Deadline status",
    )
    deadline_parser.add_argument(
        "--today",
        type=_parse_date,
        default=None,
        help="Reference date for overdue calculation (default: today)",
    )
    deadline_parser.set_defaults(func=cmd_deadline)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        settings = Settings.from_env()
        configure_logging(settings.log_level, json_format=args.log_format == "json")
        return args.func(args, settings)
    except ClaimCadenceError as e:
        _print_json({"success": False, "error": e.to_dict()})
        return 1


if __name__ == "__main__":
    sys.exit(main())
