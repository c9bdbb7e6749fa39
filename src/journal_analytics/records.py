"""Session records and the fixed scales they are measured on."""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

logger = logging.getLogger("journal-analytics")

# Inclusive (low, high) bounds of each numeric scale
ENERGY_MOOD_SCALE = (1, 5)
SORENESS_SCALE = (0, 3)


class Intensity(str, Enum):
    CASUAL = "casual"
    MODERATE = "moderate"
    COMPETITIVE = "competitive"


class SessionFormat(str, Enum):
    SINGLES = "singles"
    DOUBLES = "doubles"


class Environment(str, Enum):
    INDOOR = "indoor"
    OUTDOOR = "outdoor"


class SorenessLevel(int, Enum):
    NONE = 0
    LOW = 1
    MODERATE = 2
    HIGH = 3


MENTAL_TAGS = (
    "focused",
    "distracted",
    "confident",
    "anxious",
    "frustrated",
    "flow-state",
    "fatigued",
)

SORENESS_AREAS = ("hands", "knees", "shoulder", "back")


def in_scale(value, scale: tuple[int, int]) -> bool:
    """Return True if value is a finite number within the inclusive scale."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if not math.isfinite(value):
        return False
    low, high = scale
    return low <= value <= high


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are taken as UTC already."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def utc_now() -> datetime:
    """Current time as naive UTC, the reference frame of every played_at."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value) -> datetime:
    """Parse an ISO-8601 timestamp into a naive UTC datetime.

    Raises:
        ValueError: If the value is missing or not a valid timestamp
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise ValueError(f"Invalid playedAt timestamp: {value!r}") from e
    else:
        raise ValueError(f"Missing or invalid playedAt: {value!r}")

    return to_naive_utc(parsed)


# (dataclass field, camelCase key) pairs for from_dict/to_dict
_FIELD_KEYS = (
    ("id", "id"),
    ("played_at", "playedAt"),
    ("energy_before", "energyBefore"),
    ("energy_after", "energyAfter"),
    ("mood_before", "moodBefore"),
    ("mood_after", "moodAfter"),
    ("soreness_hands", "sorenessHands"),
    ("soreness_knees", "sorenessKnees"),
    ("soreness_shoulder", "sorenessShoulder"),
    ("soreness_back", "sorenessBack"),
    ("intensity", "intensity"),
    ("format", "format"),
    ("environment", "environment"),
    ("duration_minutes", "durationMinutes"),
    ("mental_tags", "mentalTags"),
    ("free_text_reflection", "freeTextReflection"),
)


@dataclass(frozen=True)
class SessionRecord:
    """One logged session, consumed read-only by the analytics engine.

    Numeric fields are stored as given. Values outside their declared scale
    are kept on the record and skipped at aggregation time.
    """

    played_at: datetime
    energy_before: float = math.nan
    energy_after: float = math.nan
    mood_before: float = math.nan
    mood_after: float = math.nan
    soreness_hands: int = 0
    soreness_knees: int = 0
    soreness_shoulder: int = 0
    soreness_back: int = 0
    intensity: str | None = None  # one of Intensity
    format: str | None = None  # one of SessionFormat
    duration_minutes: float | None = None
    mental_tags: tuple[str, ...] = field(default_factory=tuple)

    id: str | None = None
    environment: str | None = None  # one of Environment
    free_text_reflection: str | None = None  # display only, never aggregated

    def __post_init__(self):
        if isinstance(self.played_at, datetime) and self.played_at.tzinfo is not None:
            object.__setattr__(self, "played_at", to_naive_utc(self.played_at))

    def soreness(self, area: str):
        """Return the soreness level recorded for a body area."""
        return getattr(self, f"soreness_{area}")

    @classmethod
    def from_dict(cls, raw: dict) -> "SessionRecord":
        """Build a record from a storage-layer dict.

        Accepts camelCase keys (``playedAt``) and snake_case keys
        (``played_at``). Unknown keys are ignored.

        Raises:
            ValueError: If playedAt is missing or unparseable
        """
        values = {}
        for name, camel in _FIELD_KEYS:
            if camel in raw:
                values[name] = raw[camel]
            elif name in raw:
                values[name] = raw[name]

        values["played_at"] = parse_timestamp(values.get("played_at"))

        tags = values.get("mental_tags")
        if tags is None:
            values["mental_tags"] = ()
        elif isinstance(tags, str):
            values["mental_tags"] = (tags,)
        else:
            values["mental_tags"] = tuple(tags)

        for key in ("intensity", "format", "environment"):
            if isinstance(values.get(key), Enum):
                values[key] = values[key].value

        # Absent or null soreness means none was reported
        for area in SORENESS_AREAS:
            if values.get(f"soreness_{area}") is None:
                values[f"soreness_{area}"] = 0

        for key in ("energy_before", "energy_after", "mood_before", "mood_after"):
            if values.get(key) is None:
                values[key] = math.nan

        return cls(**values)

    def to_dict(self) -> dict:
        """Return a JSON-ready dict using the storage layer's camelCase keys."""
        result = {}
        for name, camel in _FIELD_KEYS:
            value = getattr(self, name)
            if name == "played_at":
                value = value.isoformat()
            elif name == "mental_tags":
                value = list(value)
            elif isinstance(value, float) and not math.isfinite(value):
                value = None
            result[camel] = value
        return result
