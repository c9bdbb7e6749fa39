"""Dashboard briefing: what has meaningfully changed recently?

Ties the window selector, window statistics, comparison and shift detection
into the single result structure handed to presentation code.
"""

import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta

from journal_analytics.comparison import WindowComparison, compare_windows
from journal_analytics.metrics import WindowMetrics, compute_window_metrics, finite_mean
from journal_analytics.records import (
    ENERGY_MOOD_SCALE,
    SORENESS_AREAS,
    SORENESS_SCALE,
    SessionRecord,
    in_scale,
    to_naive_utc,
    utc_now,
)
from journal_analytics.shifts import (
    DEFAULT_THRESHOLDS,
    NotableShift,
    ShiftThresholds,
    detect_notable_shifts,
)
from journal_analytics.windows import (
    MIN_SESSIONS_PER_WINDOW,
    TimeWindow,
    WindowMode,
    select_windows,
    sort_newest_first,
)

logger = logging.getLogger("journal-analytics")

LATEST_SESSIONS = 3
SUMMARY_WEEK_DAYS = 7


@dataclass
class WindowConfig:
    recent: TimeWindow
    baseline: TimeWindow | None
    days_back: int
    mode: WindowMode


@dataclass
class SampleSizeWarnings:
    """Flags for statistics resting on fewer than 3 sessions."""

    recent_too_small: bool
    baseline_too_small: bool
    category_comparisons_unsupported: bool


@dataclass
class SummaryStrip:
    """Headline numbers over the whole history."""

    total_sessions: int
    avg_energy_after: float | None
    sessions_delta: int  # last 7 days minus the 7 days before
    energy_after_delta: float  # same weeks; 0 unless both have sessions
    recovery_score: int | None  # 100 means no soreness reported


@dataclass
class DashboardData:
    window_config: WindowConfig
    recent_metrics: WindowMetrics
    baseline_metrics: WindowMetrics | None
    comparison: WindowComparison | None
    notable_shifts: list[NotableShift]
    sample_size_warnings: SampleSizeWarnings
    latest_sessions: list[SessionRecord] = field(default_factory=list)
    summary: SummaryStrip | None = None

    def to_dict(self) -> dict:
        """Return the dashboard as a JSON-ready dict."""
        config = self.window_config
        return {
            "window_config": {
                "recent": config.recent.to_dict(),
                "baseline": config.baseline.to_dict() if config.baseline else None,
                "days_back": config.days_back,
                "mode": config.mode.value,
            },
            "recent_metrics": self.recent_metrics.to_dict(),
            "baseline_metrics": self.baseline_metrics.to_dict()
            if self.baseline_metrics
            else None,
            "comparison": self.comparison.to_dict() if self.comparison else None,
            "notable_shifts": [s.to_dict() for s in self.notable_shifts],
            "sample_size_warnings": asdict(self.sample_size_warnings),
            "latest_sessions": [s.to_dict() for s in self.latest_sessions],
            "summary": asdict(self.summary) if self.summary else None,
        }


def compute_summary(sorted_sessions: list[SessionRecord], now: datetime) -> SummaryStrip:
    """Compute the headline strip: totals, week-over-week change, recovery."""
    now = to_naive_utc(now)
    week_start = now - timedelta(days=SUMMARY_WEEK_DAYS)
    previous_start = week_start - timedelta(days=SUMMARY_WEEK_DAYS)

    last_week = [s for s in sorted_sessions if s.played_at >= week_start]
    previous_week = [s for s in sorted_sessions if previous_start <= s.played_at < week_start]

    def energy_after(sessions):
        return [s.energy_after for s in sessions if in_scale(s.energy_after, ENERGY_MOOD_SCALE)]

    energy_delta = 0.0
    if last_week and previous_week:
        energy_delta = finite_mean(energy_after(last_week)) - finite_mean(
            energy_after(previous_week)
        )

    all_energy = energy_after(sorted_sessions)

    per_session_soreness = []
    for s in sorted_sessions:
        levels = [
            s.soreness(area)
            for area in SORENESS_AREAS
            if in_scale(s.soreness(area), SORENESS_SCALE)
        ]
        if levels:
            per_session_soreness.append(sum(levels) / len(levels))

    recovery_score = None
    if per_session_soreness:
        max_level = SORENESS_SCALE[1]
        recovery_score = round((1 - finite_mean(per_session_soreness) / max_level) * 100)

    return SummaryStrip(
        total_sessions=len(sorted_sessions),
        avg_energy_after=round(finite_mean(all_energy), 2) if all_energy else None,
        sessions_delta=len(last_week) - len(previous_week),
        energy_after_delta=round(energy_delta, 2),
        recovery_score=recovery_score,
    )


def get_dashboard_data(
    sessions: Iterable[SessionRecord],
    days_back: int = 14,
    thresholds: ShiftThresholds | None = None,
    now: datetime | None = None,
) -> DashboardData:
    """Compute the full dashboard briefing for a session history.

    Never raises for lack of data: thin histories come back with
    ``baseline=None``, absent category breakdowns, an empty shift list and
    the matching sample-size warnings set.

    Args:
        sessions: Full session history, any order (not modified)
        days_back: Calendar window length in days (usually 7, 14 or 28)
        thresholds: Shift thresholds (default: DEFAULT_THRESHOLDS)
        now: Reference time, naive UTC or aware (default: current UTC time)

    Returns:
        DashboardData

    Raises:
        TypeError: If sessions is None or days_back is not an integer
    """
    if thresholds is None:
        thresholds = DEFAULT_THRESHOLDS
    if now is None:
        now = utc_now()
    now = to_naive_utc(now)

    sorted_sessions = sort_newest_first(sessions)
    windows = select_windows(sorted_sessions, days_back=days_back, now=now)
    recent, baseline = windows.recent, windows.baseline

    recent_metrics = compute_window_metrics(recent.sessions)
    baseline_metrics = compute_window_metrics(baseline.sessions) if baseline else None

    comparison = None
    notable_shifts: list[NotableShift] = []
    if baseline_metrics is not None:
        comparison = compare_windows(recent_metrics, baseline_metrics)
        notable_shifts = detect_notable_shifts(comparison, thresholds)

    by_format = recent_metrics.by_format
    warnings = SampleSizeWarnings(
        recent_too_small=recent.session_count < MIN_SESSIONS_PER_WINDOW,
        baseline_too_small=baseline is None or baseline.session_count < MIN_SESSIONS_PER_WINDOW,
        category_comparisons_unsupported=any(v is None for v in by_format.values()),
    )

    logger.debug(
        f"Dashboard: mode={windows.mode.value}, recent={recent.session_count}, "
        f"baseline={baseline.session_count if baseline else None}, "
        f"shifts={len(notable_shifts)}"
    )

    return DashboardData(
        window_config=WindowConfig(
            recent=recent,
            baseline=baseline,
            days_back=days_back,
            mode=windows.mode,
        ),
        recent_metrics=recent_metrics,
        baseline_metrics=baseline_metrics,
        comparison=comparison,
        notable_shifts=notable_shifts,
        sample_size_warnings=warnings,
        latest_sessions=sorted_sessions[:LATEST_SESSIONS],
        summary=compute_summary(sorted_sessions, now),
    )
