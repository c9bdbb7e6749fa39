"""Notable-shift detection and ranking."""

import logging
from dataclasses import asdict, dataclass, fields

from journal_analytics.comparison import MetricComparison, WindowComparison

logger = logging.getLogger("journal-analytics")

MAX_SHIFTS = 4


@dataclass(frozen=True)
class ShiftThresholds:
    """Minimum absolute delta for each category of change to be notable."""

    energy_mood_after: float = 0.4  # scale units, post-session average
    energy_mood_delta: float = 0.3  # scale units, before-to-after response
    soreness_frequency: float = 0.15  # 15 percentage points
    distribution_shift: float = 0.20  # 20 percentage points of intensity/format share

    def __post_init__(self):
        """Thresholds must be strictly positive so a zero delta never qualifies."""
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Threshold '{f.name}' must be a number, got {value!r}")
            if not value > 0:
                raise ValueError(f"Threshold '{f.name}' must be positive, got {value}")

    @classmethod
    def from_dict(cls, overrides: dict) -> "ShiftThresholds":
        """Build thresholds from a partial mapping of overrides.

        Raises:
            ValueError: On unknown keys or non-positive values
        """
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(
                f"Unknown threshold(s): {', '.join(sorted(unknown))}. "
                f"Valid: {', '.join(sorted(known))}"
            )
        return cls(**overrides)

    def to_dict(self) -> dict:
        return asdict(self)


DEFAULT_THRESHOLDS = ShiftThresholds()


@dataclass
class NotableShift:
    """A metric change large enough to surface to the user."""

    id: str
    category: str  # energy, mood, soreness, intensity, format
    metric: str
    direction: str  # increased, decreased
    magnitude: str  # "+0.5" or "+20%"
    magnitude_value: float  # unsigned, for ranking only

    def to_dict(self) -> dict:
        return asdict(self)


def format_delta(delta: float, kind: str) -> str:
    """Format a signed delta as a decimal ("+0.5") or percentage points ("+20%")."""
    if kind == "percentage":
        return f"{round(delta * 100):+d}%"
    return f"{round(delta, 2):+g}"


# (id, category, label, comparison group, key, threshold field, magnitude format)
_CHECKS = (
    ("energy-after", "energy", "Post-session energy", "energy", "after",
     "energy_mood_after", "decimal"),
    ("energy-delta", "energy", "Energy response", "energy", "delta",
     "energy_mood_delta", "decimal"),
    ("mood-after", "mood", "Post-session mood", "mood", "after",
     "energy_mood_after", "decimal"),
    ("mood-delta", "mood", "Mood response", "mood", "delta",
     "energy_mood_delta", "decimal"),
    ("soreness-hands", "soreness", "Hands soreness frequency", "soreness_frequency", "hands",
     "soreness_frequency", "percentage"),
    ("soreness-knees", "soreness", "Knees soreness frequency", "soreness_frequency", "knees",
     "soreness_frequency", "percentage"),
    ("soreness-shoulder", "soreness", "Shoulder soreness frequency", "soreness_frequency",
     "shoulder", "soreness_frequency", "percentage"),
    ("soreness-back", "soreness", "Back soreness frequency", "soreness_frequency", "back",
     "soreness_frequency", "percentage"),
    ("intensity-casual", "intensity", "Casual sessions", "intensity_shift", "casual",
     "distribution_shift", "percentage"),
    ("intensity-moderate", "intensity", "Moderate sessions", "intensity_shift", "moderate",
     "distribution_shift", "percentage"),
    ("intensity-competitive", "intensity", "Competitive sessions", "intensity_shift",
     "competitive", "distribution_shift", "percentage"),
    ("format-singles", "format", "Singles sessions", "format_shift", "singles",
     "distribution_shift", "percentage"),
    ("format-doubles", "format", "Doubles sessions", "format_shift", "doubles",
     "distribution_shift", "percentage"),
)  # fmt: skip


def rank_shifts(shifts: list[NotableShift], limit: int = MAX_SHIFTS) -> list[NotableShift]:
    """Sort shifts by magnitude, largest first, and keep the top ``limit``.

    When the shift just past the cut ties exactly with the last one kept,
    it is kept too rather than dropping one of two equal changes arbitrarily.
    """
    if limit <= 0:
        return []
    ranked = sorted(shifts, key=lambda s: s.magnitude_value, reverse=True)
    if len(ranked) > limit and ranked[limit - 1].magnitude_value == ranked[limit].magnitude_value:
        return ranked[: limit + 1]
    return ranked[:limit]


def detect_notable_shifts(
    comparison: WindowComparison,
    thresholds: ShiftThresholds = DEFAULT_THRESHOLDS,
    limit: int = MAX_SHIFTS,
) -> list[NotableShift]:
    """Scan a window comparison for changes that meet their category threshold.

    Args:
        comparison: Recent-vs-baseline comparison
        thresholds: Per-category minimum absolute deltas (inclusive)
        limit: Maximum shifts to return, barring a tie at the cut

    Returns:
        Qualifying shifts ranked by unsigned magnitude
    """
    shifts = []
    for shift_id, category, label, group, key, threshold_name, kind in _CHECKS:
        metric: MetricComparison = getattr(comparison, group)[key]
        delta = metric.delta
        if abs(delta) >= getattr(thresholds, threshold_name):
            shifts.append(
                NotableShift(
                    id=shift_id,
                    category=category,
                    metric=label,
                    direction="increased" if delta > 0 else "decreased",
                    magnitude=format_delta(delta, kind),
                    magnitude_value=abs(delta),
                )
            )

    ranked = rank_shifts(shifts, limit)
    logger.debug(f"{len(shifts)} shifts met thresholds, returning {len(ranked)}")
    return ranked
