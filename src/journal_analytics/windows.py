"""Recent/baseline window selection over a session history."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from journal_analytics.records import SessionRecord, to_naive_utc, utc_now

logger = logging.getLogger("journal-analytics")

# Fewer sessions than this and no baseline is attempted
MIN_SESSIONS_FOR_COMPARISON = 4
# At or above this, calendar-based windows are tried first
MIN_SESSIONS_FOR_STANDARD = 10
# Minimum sessions per calendar window before falling back to a split
MIN_SESSIONS_PER_WINDOW = 3

DAYS_BACK_CHOICES = (7, 14, 28)


class WindowMode(str, Enum):
    INSUFFICIENT_DATA = "insufficient-data"
    DYNAMIC_SPLIT = "dynamic-split"
    STANDARD = "standard"


@dataclass
class TimeWindow:
    """A contiguous set of sessions used as one unit of aggregation."""

    start_date: datetime
    end_date: datetime
    label: str
    sessions: list[SessionRecord] = field(default_factory=list)

    @property
    def session_count(self) -> int:
        return len(self.sessions)

    def to_dict(self) -> dict:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "label": self.label,
            "session_count": self.session_count,
        }


@dataclass
class WindowPair:
    """The recent window, its baseline (if any), and the strategy used."""

    recent: TimeWindow
    baseline: TimeWindow | None
    mode: WindowMode


def format_date_range(start: datetime, end: datetime) -> str:
    """Format a date range as "Feb 1-14" or "Jan 25 - Feb 7"."""
    if (start.year, start.month) == (end.year, end.month):
        return f"{start:%b} {start.day}-{end.day}"
    return f"{start:%b} {start.day} - {end:%b} {end.day}"


def sort_newest_first(sessions: Iterable[SessionRecord]) -> list[SessionRecord]:
    """Return a new list of sessions sorted by played_at, most recent first.

    Raises:
        TypeError: If sessions is None or not iterable
    """
    if sessions is None:
        raise TypeError("sessions must be a collection of SessionRecord, got None")
    return sorted(sessions, key=lambda s: s.played_at, reverse=True)


def _window_from_members(sessions: list[SessionRecord], label: str, now: datetime) -> TimeWindow:
    """Build a window whose bounds come from its oldest and newest members."""
    if not sessions:
        return TimeWindow(start_date=now, end_date=now, label=label, sessions=[])
    return TimeWindow(
        start_date=sessions[-1].played_at,
        end_date=sessions[0].played_at,
        label=label,
        sessions=sessions,
    )


def _split_windows(sorted_sessions: list[SessionRecord], now: datetime) -> WindowPair:
    """Split newest-first sessions at the midpoint into recent and baseline."""
    split_index = len(sorted_sessions) // 2
    return WindowPair(
        recent=_window_from_members(sorted_sessions[:split_index], "Recent sessions", now),
        baseline=_window_from_members(sorted_sessions[split_index:], "Previous sessions", now),
        mode=WindowMode.DYNAMIC_SPLIT,
    )


def select_windows(
    sessions: Iterable[SessionRecord],
    days_back: int = 14,
    now: datetime | None = None,
) -> WindowPair:
    """Choose a recent window and a baseline window to compare against.

    The strategy depends on how much history exists:
    - fewer than 4 sessions: everything is "recent" and there is no baseline
    - 4 to 9 sessions: the newest half is compared with the older half
    - 10 or more: the last ``days_back`` days are compared with the
      ``days_back`` days before that, unless either side would hold fewer
      than 3 sessions, in which case the whole history is split at its
      midpoint instead

    Args:
        sessions: Full session history, in any order (not modified)
        days_back: Length of each calendar window in days (usually 7, 14 or 28)
        now: Reference time for calendar windows (default: current UTC time).
            Aware values are converted to naive UTC to match played_at

    Returns:
        WindowPair with member sessions ordered newest first

    Raises:
        TypeError: If sessions is None or days_back is not an integer
    """
    if isinstance(days_back, bool) or not isinstance(days_back, int):
        raise TypeError(f"days_back must be an int, got {type(days_back).__name__}")
    if now is None:
        now = utc_now()
    now = to_naive_utc(now)

    sorted_sessions = sort_newest_first(sessions)
    total = len(sorted_sessions)

    if total < MIN_SESSIONS_FOR_COMPARISON:
        logger.debug(f"Only {total} sessions, no baseline window")
        return WindowPair(
            recent=_window_from_members(sorted_sessions, "Recent", now),
            baseline=None,
            mode=WindowMode.INSUFFICIENT_DATA,
        )

    if total < MIN_SESSIONS_FOR_STANDARD:
        return _split_windows(sorted_sessions, now)

    recent_start = now - timedelta(days=days_back)
    baseline_start = recent_start - timedelta(days=days_back)

    recent_sessions = [s for s in sorted_sessions if recent_start <= s.played_at <= now]
    baseline_sessions = [
        s for s in sorted_sessions if baseline_start <= s.played_at < recent_start
    ]

    if (
        len(recent_sessions) < MIN_SESSIONS_PER_WINDOW
        or len(baseline_sessions) < MIN_SESSIONS_PER_WINDOW
    ):
        logger.debug(
            f"Calendar windows too sparse ({len(recent_sessions)} recent, "
            f"{len(baseline_sessions)} baseline), splitting {total} sessions instead"
        )
        return _split_windows(sorted_sessions, now)

    return WindowPair(
        recent=TimeWindow(
            start_date=recent_start,
            end_date=now,
            label=format_date_range(recent_start, now),
            sessions=recent_sessions,
        ),
        baseline=TimeWindow(
            start_date=baseline_start,
            end_date=recent_start,
            label=format_date_range(baseline_start, recent_start),
            sessions=baseline_sessions,
        ),
        mode=WindowMode.STANDARD,
    )
