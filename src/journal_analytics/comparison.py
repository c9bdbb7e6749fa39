"""Pairwise comparison of a recent window against its baseline."""

from dataclasses import asdict, dataclass

from journal_analytics.metrics import WindowMetrics
from journal_analytics.records import SORENESS_AREAS, Intensity, SessionFormat


@dataclass
class MetricComparison:
    """One scalar metric in both windows, rounded to 2 decimals."""

    recent: float
    baseline: float
    delta: float
    percent_change: float


@dataclass
class WindowComparison:
    """Every scalar metric of two WindowMetrics paired up.

    Groups map a metric name to its MetricComparison:
    - energy, mood: before, after, delta (native 1-5 scale)
    - soreness_frequency: hands, knees, shoulder, back (fractions)
    - intensity_shift, format_shift: per-value share of the window
    """

    energy: dict[str, MetricComparison]
    mood: dict[str, MetricComparison]
    soreness_frequency: dict[str, MetricComparison]
    intensity_shift: dict[str, MetricComparison]
    format_shift: dict[str, MetricComparison]

    def to_dict(self) -> dict:
        return asdict(self)


def _round2(value: float) -> float:
    # round() is sign-symmetric, so swapping windows only flips the sign
    return round(value, 2)


def compare_metric(recent: float, baseline: float) -> MetricComparison:
    """Compare two averages: delta on the native scale, change relative to |baseline|."""
    delta = recent - baseline
    percent_change = delta / abs(baseline) * 100 if baseline != 0 else 0.0
    return MetricComparison(
        recent=_round2(recent),
        baseline=_round2(baseline),
        delta=_round2(delta),
        percent_change=_round2(percent_change),
    )


def compare_distribution(
    recent_count: int,
    recent_total: int,
    baseline_count: int,
    baseline_total: int,
) -> MetricComparison:
    """Compare two counts as shares of their own window.

    The delta is a percentage-point difference between proportions, so a
    window that simply holds more sessions does not read as a shift.
    """
    recent_share = recent_count / recent_total if recent_total > 0 else 0.0
    baseline_share = baseline_count / baseline_total if baseline_total > 0 else 0.0
    delta = recent_share - baseline_share
    percent_change = delta / baseline_share * 100 if baseline_share != 0 else 0.0
    return MetricComparison(
        recent=_round2(recent_share),
        baseline=_round2(baseline_share),
        delta=_round2(delta),
        percent_change=_round2(percent_change),
    )


def compare_windows(recent: WindowMetrics, baseline: WindowMetrics) -> WindowComparison:
    """Pair every scalar metric of the recent window with the baseline's."""
    return WindowComparison(
        energy={
            "before": compare_metric(recent.avg_energy_before, baseline.avg_energy_before),
            "after": compare_metric(recent.avg_energy_after, baseline.avg_energy_after),
            "delta": compare_metric(recent.avg_energy_delta, baseline.avg_energy_delta),
        },
        mood={
            "before": compare_metric(recent.avg_mood_before, baseline.avg_mood_before),
            "after": compare_metric(recent.avg_mood_after, baseline.avg_mood_after),
            "delta": compare_metric(recent.avg_mood_delta, baseline.avg_mood_delta),
        },
        soreness_frequency={
            area: compare_metric(
                recent.soreness_frequency[area], baseline.soreness_frequency[area]
            )
            for area in SORENESS_AREAS
        },
        intensity_shift={
            level.value: compare_distribution(
                recent.intensity_distribution[level.value],
                recent.session_count,
                baseline.intensity_distribution[level.value],
                baseline.session_count,
            )
            for level in Intensity
        },
        format_shift={
            fmt.value: compare_distribution(
                recent.format_distribution[fmt.value],
                recent.session_count,
                baseline.format_distribution[fmt.value],
                baseline.session_count,
            )
            for fmt in SessionFormat
        },
    )
