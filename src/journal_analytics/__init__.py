"""Journal Analytics - deterministic briefing over logged activity sessions."""

from importlib.metadata import version

try:
    __version__ = version("journal-analytics")
except Exception:
    __version__ = "0.1.0"  # Fallback for development

# Re-export public API
from journal_analytics.comparison import MetricComparison, WindowComparison, compare_windows
from journal_analytics.dashboard import (
    DashboardData,
    SampleSizeWarnings,
    SummaryStrip,
    WindowConfig,
    get_dashboard_data,
)
from journal_analytics.loader import load_sessions
from journal_analytics.metrics import CategoryMetrics, WindowMetrics, compute_window_metrics
from journal_analytics.records import SessionRecord
from journal_analytics.shifts import (
    DEFAULT_THRESHOLDS,
    NotableShift,
    ShiftThresholds,
    detect_notable_shifts,
)
from journal_analytics.windows import TimeWindow, WindowMode, WindowPair, select_windows

__all__ = [
    # Version
    "__version__",
    # Records
    "SessionRecord",
    "load_sessions",
    # Windows
    "select_windows",
    "TimeWindow",
    "WindowPair",
    "WindowMode",
    # Metrics
    "compute_window_metrics",
    "WindowMetrics",
    "CategoryMetrics",
    # Comparison
    "compare_windows",
    "WindowComparison",
    "MetricComparison",
    # Shifts
    "detect_notable_shifts",
    "NotableShift",
    "ShiftThresholds",
    "DEFAULT_THRESHOLDS",
    # Dashboard
    "get_dashboard_data",
    "DashboardData",
    "SampleSizeWarnings",
    "SummaryStrip",
    "WindowConfig",
]
