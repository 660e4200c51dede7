"""
ClaimCadence Automation Policy Models

One ClaimAutomationPolicy per claim holds the autonomy level, the toggles
read by every engine component, and the two follow-up tracks.

Key invariants:
- current_count never exceeds max_count on either track
- once stopped_at is set a track is terminal; only staff clear it
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Optional

from .enums import AutonomyLevel, FollowUpTrackKind, StopReason


DEFAULT_DAILY_ACTION_LIMIT = 10
DEFAULT_FOLLOW_UP_INTERVAL_DAYS = 3
DEFAULT_FOLLOW_UP_MAX_COUNT = 3


# =============================================================================
# Follow-Up Track
# =============================================================================

@dataclass
class FollowUpTrack:
    """
    A capped, independently scheduled sequence of outbound nudges.

    Attributes:
        enabled: Staff toggle for this track
        interval_days: Days between sends
        max_count: Maximum sends before the track stops itself
        current_count: Sends so far
        next_run_at: Earliest time the next send may happen
        last_sent_at: Time of the most recent send
        stopped_at: Terminal marker set by the engine
        stop_reason: Why the track stopped
    """
    enabled: bool = False
    interval_days: int = DEFAULT_FOLLOW_UP_INTERVAL_DAYS
    max_count: int = DEFAULT_FOLLOW_UP_MAX_COUNT
    current_count: int = 0
    next_run_at: Optional[datetime] = None
    last_sent_at: Optional[datetime] = None
    stopped_at: Optional[datetime] = None
    stop_reason: Optional[str] = None

    @property
    def is_stopped(self) -> bool:
        return self.stopped_at is not None

    @property
    def is_exhausted(self) -> bool:
        return self.current_count >= self.max_count

    def is_due(self, now: datetime) -> bool:
        """Enabled, not stopped, and scheduled at or before now."""
        if not self.enabled or self.is_stopped:
            return False
        if self.next_run_at is None:
            return False
        return self.next_run_at <= now

    def stopped(self, now: datetime, reason: StopReason) -> FollowUpTrack:
        """Return a copy of the track in its terminal state."""
        return replace(self, stopped_at=now, stop_reason=reason.value)

    def advanced(self, now: datetime) -> FollowUpTrack:
        """Return a copy of the track after a successful send."""
        if self.is_exhausted:
            raise ValueError(
                f"follow-up track already at max_count={self.max_count}"
            )
        return replace(
            self,
            current_count=self.current_count + 1,
            last_sent_at=now,
            next_run_at=now + timedelta(days=self.interval_days),
        )

    def with_progress_of(self, other: FollowUpTrack) -> FollowUpTrack:
        """Copy the engine-owned fields of `other` onto this track."""
        return replace(
            self,
            current_count=other.current_count,
            next_run_at=other.next_run_at,
            last_sent_at=other.last_sent_at,
            stopped_at=other.stopped_at,
            stop_reason=other.stop_reason,
        )


# =============================================================================
# Claim Automation Policy
# =============================================================================

@dataclass
class ClaimAutomationPolicy:
    """
    Per-claim automation policy.

    Mutated only by the configuration UI (toggles) and by the engine
    (follow-up counters and stop flags). `version` is the optimistic
    concurrency token checked on every engine write.
    """
    id: str
    claim_id: str
    autonomy_level: AutonomyLevel = AutonomyLevel.MANUAL
    is_enabled: bool = True
    daily_action_limit: int = DEFAULT_DAILY_ACTION_LIMIT

    # Toggles
    auto_complete_tasks: bool = False
    auto_respond_without_approval: bool = False
    auto_escalate_urgency: bool = False

    # Lower-cased phrases that force human review; empty = engine defaults
    keyword_blockers: frozenset[str] = field(default_factory=frozenset)

    general: FollowUpTrack = field(default_factory=FollowUpTrack)
    recoverable_depreciation: FollowUpTrack = field(default_factory=FollowUpTrack)

    version: int = 1

    def __post_init__(self) -> None:
        self.keyword_blockers = frozenset(
            kw.strip().lower() for kw in self.keyword_blockers if kw and kw.strip()
        )

    @property
    def is_autonomous(self) -> bool:
        return self.is_enabled and self.autonomy_level.is_automated

    def track(self, kind: FollowUpTrackKind) -> FollowUpTrack:
        if kind is FollowUpTrackKind.GENERAL:
            return self.general
        return self.recoverable_depreciation

    def with_track(self, kind: FollowUpTrackKind, track: FollowUpTrack) -> ClaimAutomationPolicy:
        """Return a copy of the policy with one track replaced."""
        if kind is FollowUpTrackKind.GENERAL:
            return replace(self, general=track)
        return replace(self, recoverable_depreciation=track)
