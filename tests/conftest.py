"""Pytest configuration and shared fixtures."""

import json
from datetime import datetime, timedelta

import pytest

from journal_analytics.records import SessionRecord

# Fixed reference time so calendar windows are deterministic
NOW = datetime(2025, 3, 1, 12, 0, 0)


def build_session(days_ago: float = 0.0, **overrides) -> SessionRecord:
    """Build a neutral session played ``days_ago`` days before NOW.

    Defaults: energy and mood 3 -> 3, no soreness, moderate doubles.
    """
    values = {
        "played_at": NOW - timedelta(days=days_ago),
        "energy_before": 3,
        "energy_after": 3,
        "mood_before": 3,
        "mood_after": 3,
        "intensity": "moderate",
        "format": "doubles",
    }
    values.update(overrides)
    return SessionRecord(**values)


@pytest.fixture
def now():
    """The fixed reference time used by build_session."""
    return NOW


@pytest.fixture
def make_session():
    """Factory fixture for SessionRecords relative to NOW."""
    return build_session


@pytest.fixture
def history():
    """Twenty sessions over 60 days with at least 3 in each 14-day window.

    Contains:
    - 5 sessions in the last 14 days (energy after 4, shoulder sore in 3)
    - 4 sessions 14-28 days ago (energy after 3)
    - 11 older sessions
    """
    recent = [
        build_session(0.5, energy_after=4, soreness_shoulder=2, mental_tags=("focused",)),
        build_session(3, energy_after=4, soreness_shoulder=1, mental_tags=("focused",)),
        build_session(6, energy_after=4, soreness_shoulder=1),
        build_session(9, energy_after=4),
        build_session(12.5, energy_after=4),
    ]
    baseline = [build_session(days, energy_after=3) for days in (15, 18, 21, 25)]
    older = [build_session(30 + 3 * i) for i in range(11)]
    return recent + baseline + older


@pytest.fixture
def sessions_file(tmp_path, history):
    """The history fixture written as a JSONL export."""
    path = tmp_path / "sessions.jsonl"
    path.write_text("\n".join(json.dumps(s.to_dict()) for s in history) + "\n")
    return path
