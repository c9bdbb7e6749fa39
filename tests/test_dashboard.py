"""Tests for the dashboard entry point."""

import json
from datetime import timedelta, timezone

import pytest

import journal_analytics
from journal_analytics.dashboard import compute_summary, get_dashboard_data
from journal_analytics.records import SessionRecord, utc_now
from journal_analytics.shifts import ShiftThresholds
from journal_analytics.windows import WindowMode, sort_newest_first


class TestInsufficientHistory:
    """Tests for histories too short to compare."""

    def test_two_sessions(self, make_session, now):
        """Test that 2 sessions give no baseline, comparison or shifts."""
        result = get_dashboard_data([make_session(1), make_session(3)], days_back=14, now=now)

        assert result.window_config.mode == WindowMode.INSUFFICIENT_DATA
        assert result.window_config.baseline is None
        assert result.baseline_metrics is None
        assert result.comparison is None
        assert result.notable_shifts == []
        assert result.recent_metrics.session_count == 2

    def test_all_warnings_set(self, make_session, now):
        """Test that every sample-size warning is raised."""
        result = get_dashboard_data([make_session(1)], now=now)
        warnings = result.sample_size_warnings

        assert warnings.recent_too_small
        assert warnings.baseline_too_small
        assert warnings.category_comparisons_unsupported

    def test_empty_history(self, now):
        """Test that no sessions is a normal, renderable state."""
        result = get_dashboard_data([], now=now)

        assert result.recent_metrics.session_count == 0
        assert result.latest_sessions == []
        assert result.summary.total_sessions == 0
        assert result.summary.recovery_score is None
        assert result.summary.avg_energy_after is None

    def test_none_sessions(self, now):
        """Test that None is a caller error, not an empty history."""
        with pytest.raises(TypeError):
            get_dashboard_data(None, now=now)


class TestDynamicSplitDashboard:
    """Tests for the 4-9 session case."""

    def test_six_sessions(self, make_session, now):
        """Test recent = 3 newest, baseline = 3 oldest."""
        sessions = [make_session(d) for d in range(1, 7)]
        result = get_dashboard_data(sessions, now=now)

        assert result.window_config.mode == WindowMode.DYNAMIC_SPLIT
        assert result.window_config.recent.session_count == 3
        assert result.window_config.baseline.session_count == 3
        assert result.comparison is not None

    def test_energy_shift_end_to_end(self, make_session, now):
        """Test post-session energy 4.0 vs 3.5 surfaces a +0.5 increase."""
        recent = [make_session(d, energy_after=4) for d in (1, 2, 3, 4)]
        baseline = [make_session(d, energy_after=a) for d, a in zip((5, 6, 7, 8), (3, 4, 3, 4))]
        result = get_dashboard_data(recent + baseline, now=now)

        shifts = {s.id: s for s in result.notable_shifts}
        assert shifts["energy-after"].category == "energy"
        assert shifts["energy-after"].direction == "increased"
        assert shifts["energy-after"].magnitude == "+0.5"


class TestStandardDashboard:
    """Tests for calendar windows."""

    def test_history_fixture(self, history, now):
        """Test 20 sessions over 60 days in standard mode."""
        result = get_dashboard_data(history, days_back=14, now=now)

        assert result.window_config.mode == WindowMode.STANDARD
        assert result.window_config.days_back == 14
        assert result.recent_metrics.session_count == 5
        assert result.baseline_metrics.session_count == 4
        assert result.comparison.energy["after"].delta == 1.0

        ids = [s.id for s in result.notable_shifts]
        assert ids[0] == "energy-after"
        assert "soreness-shoulder" in ids

    def test_shoulder_soreness_shift(self, make_session, now):
        """Test shoulder soreness 3 of 6 recent vs 3 of 10 baseline."""
        recent = [make_session(d, soreness_shoulder=1 if d < 4 else 0) for d in range(1, 7)]
        baseline = [
            make_session(d, soreness_shoulder=2 if d < 18 else 0) for d in range(15, 25)
        ]
        result = get_dashboard_data(recent + baseline, days_back=14, now=now)

        assert result.window_config.mode == WindowMode.STANDARD
        assert result.comparison.soreness_frequency["shoulder"].recent == 0.5
        assert result.comparison.soreness_frequency["shoulder"].baseline == 0.3
        assert [(s.id, s.magnitude) for s in result.notable_shifts] == [
            ("soreness-shoulder", "+20%")
        ]

    def test_custom_thresholds(self, history, now):
        """Test that threshold overrides are applied."""
        strict = ShiftThresholds(energy_mood_after=5, energy_mood_delta=5, soreness_frequency=1)
        result = get_dashboard_data(history, days_back=14, thresholds=strict, now=now)

        assert result.notable_shifts == []


class TestSampleSizeWarnings:
    """Tests for sample-size warnings."""

    def test_small_format_category(self, make_session, now):
        """Test 2 singles in the recent window flags category comparisons."""
        recent = [make_session(d, format="singles") for d in (1, 2)]
        recent += [make_session(d, format="doubles") for d in (3, 4, 5, 6)]
        baseline = [make_session(d) for d in range(15, 21)]
        result = get_dashboard_data(recent + baseline, days_back=14, now=now)

        assert result.recent_metrics.by_format["singles"] is None
        assert result.recent_metrics.by_format["doubles"] is not None
        assert result.sample_size_warnings.category_comparisons_unsupported
        assert not result.sample_size_warnings.recent_too_small
        assert not result.sample_size_warnings.baseline_too_small

    def test_small_split_window(self, make_session, now):
        """Test that a 2-session recent half is flagged."""
        sessions = [make_session(d) for d in range(1, 6)]
        result = get_dashboard_data(sessions, now=now)

        assert result.sample_size_warnings.recent_too_small
        assert not result.sample_size_warnings.baseline_too_small


class TestLatestSessions:
    """Tests for the verbatim latest-sessions list."""

    def test_three_most_recent(self, make_session, now):
        """Test that the newest three are returned newest first."""
        sessions = [make_session(d, id=f"s{d}") for d in (5, 1, 4, 2, 3)]
        result = get_dashboard_data(sessions, now=now)

        assert [s.id for s in result.latest_sessions] == ["s1", "s2", "s3"]

    def test_input_not_modified(self, make_session, now):
        """Test that the caller's collection keeps its order."""
        sessions = [make_session(d) for d in (5, 1, 4, 2, 3)]
        original = list(sessions)
        get_dashboard_data(sessions, now=now)

        assert sessions == original


class TestSummary:
    """Tests for the headline summary strip."""

    def test_week_over_week(self, make_session, now):
        """Test session and energy change between the last two weeks."""
        sessions = [
            make_session(1, energy_after=5),
            make_session(2, energy_after=4),
            make_session(9, energy_after=3),
            make_session(30, energy_after=3),
        ]
        summary = compute_summary(sort_newest_first(sessions), now)

        assert summary.total_sessions == 4
        assert summary.sessions_delta == 1
        assert summary.energy_after_delta == 1.5
        assert summary.avg_energy_after == 3.75

    def test_no_previous_week(self, make_session, now):
        """Test that energy change is 0 when one week is empty."""
        summary = compute_summary([make_session(1, energy_after=5)], now)

        assert summary.energy_after_delta == 0.0
        assert summary.sessions_delta == 1

    def test_recovery_score(self, make_session, now):
        """Test recovery from average soreness across the four areas."""
        no_soreness = compute_summary([make_session(1)], now)
        shoulder_only = compute_summary([make_session(1, soreness_shoulder=3)], now)

        assert no_soreness.recovery_score == 100
        assert shoulder_only.recovery_score == 75


class TestSerialization:
    """Tests for the JSON-ready dict form."""

    def test_to_dict_is_json(self, history, now):
        """Test that the whole dashboard serializes to JSON."""
        data = get_dashboard_data(history, days_back=14, now=now).to_dict()
        encoded = json.loads(json.dumps(data))

        assert encoded["window_config"]["mode"] == "standard"
        assert encoded["window_config"]["recent"]["session_count"] == 5
        assert "sessions" not in encoded["recent_metrics"]
        assert len(encoded["latest_sessions"]) == 3
        assert encoded["latest_sessions"][0]["playedAt"] == "2025-03-01T00:00:00"

    def test_insufficient_to_dict(self, make_session, now):
        """Test that absent structures serialize as null."""
        data = get_dashboard_data([make_session(1)], now=now).to_dict()

        assert data["window_config"]["baseline"] is None
        assert data["baseline_metrics"] is None
        assert data["comparison"] is None
        assert data["notable_shifts"] == []

    def test_deterministic(self, history, now):
        """Test that repeated calls give identical output."""
        first = get_dashboard_data(history, days_back=14, now=now).to_dict()
        second = get_dashboard_data(list(reversed(history)), days_back=14, now=now).to_dict()

        assert first == second


class TestTimeReference:
    """Tests for aware and default reference times."""

    def test_aware_now_matches_naive(self, history, now):
        """Test that an aware UTC now gives the same dashboard as naive UTC."""
        naive = get_dashboard_data(history, days_back=14, now=now).to_dict()
        aware = get_dashboard_data(
            history, days_back=14, now=now.replace(tzinfo=timezone.utc)
        ).to_dict()

        assert aware == naive

    def test_aware_summary_now(self, make_session, now):
        """Test the summary strip with an aware reference time."""
        sessions = [make_session(1), make_session(2), make_session(9)]
        summary = compute_summary(sessions, now.replace(tzinfo=timezone.utc))

        assert summary.sessions_delta == 1

    def test_default_now_counts_latest_session(self):
        """Test that a session from minutes ago lands in the current week."""
        played = utc_now() - timedelta(minutes=15)
        sessions = [SessionRecord(played_at=played - timedelta(days=d)) for d in (0, 1, 2, 8)]
        result = get_dashboard_data(sessions)

        assert result.summary.sessions_delta == 2
        assert result.latest_sessions[0].played_at == played


class TestPublicApi:
    """Tests for the package-level exports."""

    @pytest.mark.parametrize("name", ["WindowConfig", "SummaryStrip", "load_sessions"])
    def test_exported(self, name):
        assert name in journal_analytics.__all__
        assert hasattr(journal_analytics, name)
