"""Descriptive statistics over one window of sessions."""

import logging
import math
from collections import Counter
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field, fields

from journal_analytics.records import (
    ENERGY_MOOD_SCALE,
    SORENESS_AREAS,
    SORENESS_SCALE,
    Environment,
    Intensity,
    SessionFormat,
    SessionRecord,
    SorenessLevel,
    in_scale,
)

logger = logging.getLogger("journal-analytics")

# Category breakdowns need at least this many sessions to be reported
MIN_CATEGORY_SESSIONS = 3
TOP_MENTAL_TAGS = 3


@dataclass
class CategoryMetrics:
    """Aggregate for the sessions sharing one format or intensity value."""

    count: int
    avg_energy_delta: float
    avg_soreness_freq: float  # fraction of sessions with soreness in any area


@dataclass
class WindowMetrics:
    """Fixed-shape aggregate of one window's sessions."""

    session_count: int = 0
    sessions: list[SessionRecord] = field(default_factory=list)

    avg_energy_before: float = 0.0
    avg_energy_after: float = 0.0
    avg_energy_delta: float = 0.0
    avg_mood_before: float = 0.0
    avg_mood_after: float = 0.0
    avg_mood_delta: float = 0.0

    # Fraction of sessions with any soreness, per body area
    soreness_frequency: dict[str, float] = field(
        default_factory=lambda: {area: 0.0 for area in SORENESS_AREAS}
    )
    avg_duration: float = 0.0

    # Raw counts, not shares
    intensity_distribution: dict[str, int] = field(
        default_factory=lambda: {level.value: 0 for level in Intensity}
    )
    format_distribution: dict[str, int] = field(
        default_factory=lambda: {fmt.value: 0 for fmt in SessionFormat}
    )
    top_mental_tags: list[dict] = field(default_factory=list)

    # None marks a category with too few sessions to compare
    by_format: dict[str, CategoryMetrics | None] = field(
        default_factory=lambda: {fmt.value: None for fmt in SessionFormat}
    )
    by_intensity: dict[str, CategoryMetrics | None] = field(
        default_factory=lambda: {level.value: None for level in Intensity}
    )

    environment_distribution: dict[str, int] = field(
        default_factory=lambda: {env.value: 0 for env in Environment}
    )
    soreness_distribution: dict[str, dict[str, int]] = field(
        default_factory=lambda: {
            area: {level.name.lower(): 0 for level in SorenessLevel} for area in SORENESS_AREAS
        }
    )
    energy_delta_range: tuple[float, float] = (0.0, 0.0)
    mood_delta_range: tuple[float, float] = (0.0, 0.0)

    def to_dict(self) -> dict:
        """Return the aggregate as a JSON-ready dict, without member sessions."""
        result = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "sessions"}
        result["by_format"] = {k: asdict(v) if v else None for k, v in self.by_format.items()}
        result["by_intensity"] = {
            k: asdict(v) if v else None for k, v in self.by_intensity.items()
        }
        result["energy_delta_range"] = list(self.energy_delta_range)
        result["mood_delta_range"] = list(self.mood_delta_range)
        return result


def finite_mean(values: Iterable[float]) -> float:
    """Arithmetic mean of the finite values, 0 if there are none."""
    valid = [v for v in values if v is not None and math.isfinite(v)]
    if not valid:
        return 0.0
    return sum(valid) / len(valid)


def _scale_values(sessions: list[SessionRecord], attr: str) -> list[float]:
    """Values of one 1-5 field, skipping out-of-scale or non-finite entries."""
    values = []
    for s in sessions:
        value = getattr(s, attr)
        if in_scale(value, ENERGY_MOOD_SCALE):
            values.append(value)
    return values


def _deltas(sessions: list[SessionRecord], before: str, after: str) -> list[float]:
    """Per-session after-minus-before deltas where both ends are valid."""
    deltas = []
    for s in sessions:
        start, end = getattr(s, before), getattr(s, after)
        if in_scale(start, ENERGY_MOOD_SCALE) and in_scale(end, ENERGY_MOOD_SCALE):
            deltas.append(end - start)
    return deltas


def _is_sore(level) -> bool:
    return in_scale(level, SORENESS_SCALE) and level > 0


def _has_any_soreness(session: SessionRecord) -> bool:
    return any(_is_sore(session.soreness(area)) for area in SORENESS_AREAS)


def compute_category_metrics(sessions: list[SessionRecord]) -> CategoryMetrics:
    """Aggregate energy response and combined soreness incidence for a category."""
    sore_count = sum(1 for s in sessions if _has_any_soreness(s))
    return CategoryMetrics(
        count=len(sessions),
        avg_energy_delta=finite_mean(_deltas(sessions, "energy_before", "energy_after")),
        avg_soreness_freq=sore_count / len(sessions) if sessions else 0.0,
    )


def _category_breakdown(
    sessions: list[SessionRecord], attr: str, values: Iterable[str]
) -> dict[str, CategoryMetrics | None]:
    breakdown = {}
    for value in values:
        members = [s for s in sessions if getattr(s, attr) == value]
        if len(members) >= MIN_CATEGORY_SESSIONS:
            breakdown[value] = compute_category_metrics(members)
        else:
            breakdown[value] = None
    return breakdown


def _top_mental_tags(sessions: list[SessionRecord], limit: int = TOP_MENTAL_TAGS) -> list[dict]:
    """Most common tags by number of sessions carrying them.

    Ties keep the order in which tags were first encountered.
    """
    counts: Counter = Counter()
    for s in sessions:
        # A tag repeated within one session counts once
        for tag in dict.fromkeys(s.mental_tags):
            counts[tag] += 1
    return [{"tag": tag, "count": count} for tag, count in counts.most_common(limit)]


def _value_range(values: list[float]) -> tuple[float, float]:
    if not values:
        return (0.0, 0.0)
    return (min(values), max(values))


def compute_window_metrics(sessions: Iterable[SessionRecord]) -> WindowMetrics:
    """Reduce one window's sessions to a WindowMetrics aggregate.

    Defined for every input: an empty window yields a zero-valued structure
    with all keys present. Non-finite or out-of-scale values are excluded
    from the averages they would feed instead of raising.

    Raises:
        TypeError: If sessions is None
    """
    if sessions is None:
        raise TypeError("sessions must be a collection of SessionRecord, got None")
    sessions = list(sessions)
    count = len(sessions)

    if count == 0:
        return WindowMetrics()

    energy_deltas = _deltas(sessions, "energy_before", "energy_after")
    mood_deltas = _deltas(sessions, "mood_before", "mood_after")

    soreness_frequency = {
        area: sum(1 for s in sessions if _is_sore(s.soreness(area))) / count
        for area in SORENESS_AREAS
    }

    soreness_distribution = {}
    for area in SORENESS_AREAS:
        histogram = {level.name.lower(): 0 for level in SorenessLevel}
        for s in sessions:
            level = s.soreness(area)
            if in_scale(level, SORENESS_SCALE) and level == int(level):
                histogram[SorenessLevel(int(level)).name.lower()] += 1
        soreness_distribution[area] = histogram

    durations = [
        s.duration_minutes
        for s in sessions
        if in_scale(s.duration_minutes, (0, math.inf)) and s.duration_minutes > 0
    ]

    intensity_values = [level.value for level in Intensity]
    format_values = [fmt.value for fmt in SessionFormat]
    environment_values = [env.value for env in Environment]

    return WindowMetrics(
        session_count=count,
        sessions=sessions,
        avg_energy_before=finite_mean(_scale_values(sessions, "energy_before")),
        avg_energy_after=finite_mean(_scale_values(sessions, "energy_after")),
        avg_energy_delta=finite_mean(energy_deltas),
        avg_mood_before=finite_mean(_scale_values(sessions, "mood_before")),
        avg_mood_after=finite_mean(_scale_values(sessions, "mood_after")),
        avg_mood_delta=finite_mean(mood_deltas),
        soreness_frequency=soreness_frequency,
        avg_duration=finite_mean(durations),
        intensity_distribution={
            v: sum(1 for s in sessions if s.intensity == v) for v in intensity_values
        },
        format_distribution={v: sum(1 for s in sessions if s.format == v) for v in format_values},
        top_mental_tags=_top_mental_tags(sessions),
        by_format=_category_breakdown(sessions, "format", format_values),
        by_intensity=_category_breakdown(sessions, "intensity", intensity_values),
        environment_distribution={
            v: sum(1 for s in sessions if s.environment == v) for v in environment_values
        },
        soreness_distribution=soreness_distribution,
        energy_delta_range=_value_range(energy_deltas),
        mood_delta_range=_value_range(mood_deltas),
    )
