"""MCP Journal Analytics Server.

Provides tools for briefing on logged activity sessions:
- get_status: Sessions file location and date span
- get_dashboard: Window metrics, comparison, notable shifts and warnings
- get_notable_shifts: Ranked notable shifts only
"""

import logging
import os
from dataclasses import asdict
from pathlib import Path

from fastmcp import FastMCP

from journal_analytics import __version__
from journal_analytics.dashboard import get_dashboard_data
from journal_analytics.loader import get_file_stats, load_sessions
from journal_analytics.records import parse_timestamp
from journal_analytics.shifts import ShiftThresholds

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("journal-analytics")
if os.environ.get("DEV_MODE"):
    logger.setLevel(logging.DEBUG)

# Initialize MCP server
mcp = FastMCP("journal-analytics")


@mcp.resource("journal-analytics://guide", description="Usage guide and metric definitions")
def usage_guide() -> str:
    """Return the journal analytics usage guide from external markdown file."""
    guide_path = Path(__file__).parent / "guide.md"
    try:
        return guide_path.read_text()
    except FileNotFoundError:
        return "# Journal Analytics Usage Guide\n\nGuide file not found."


def _dashboard(days: int, file: str | None, thresholds: dict | None, as_of: str | None):
    sessions = load_sessions(file)
    return get_dashboard_data(
        sessions,
        days_back=days,
        thresholds=ShiftThresholds.from_dict(thresholds) if thresholds else None,
        now=parse_timestamp(as_of) if as_of else None,
    )


@mcp.tool()
def get_status(file: str | None = None) -> dict:
    """Get the sessions file location, session count and date span.

    Args:
        file: Sessions file (default: JOURNAL_SESSIONS_PATH or ~/.journal/sessions.jsonl)

    Returns:
        Status info including session count and earliest/latest session
    """
    return {"status": "ok", "version": __version__, **get_file_stats(file)}


@mcp.tool()
def get_dashboard(
    days: int = 14,
    file: str | None = None,
    thresholds: dict | None = None,
    as_of: str | None = None,
) -> dict:
    """Compare recent sessions with a baseline and surface notable shifts.

    Args:
        days: Calendar window length in days, usually 7, 14 or 28 (default: 14)
        file: Sessions file (default: JOURNAL_SESSIONS_PATH or ~/.journal/sessions.jsonl)
        thresholds: Optional overrides, e.g. {"soreness_frequency": 0.1}
        as_of: Reference time as ISO-8601 (default: now)

    Returns:
        Window config, per-window metrics, comparison, notable shifts,
        sample-size warnings, latest sessions and summary strip
    """
    return _dashboard(days, file, thresholds, as_of).to_dict()


@mcp.tool()
def get_notable_shifts(
    days: int = 14,
    file: str | None = None,
    thresholds: dict | None = None,
    as_of: str | None = None,
) -> dict:
    """Get only the ranked notable shifts between the recent and baseline windows.

    Args:
        days: Calendar window length in days (default: 14)
        file: Sessions file (default: JOURNAL_SESSIONS_PATH or ~/.journal/sessions.jsonl)
        thresholds: Optional threshold overrides
        as_of: Reference time as ISO-8601 (default: now)

    Returns:
        Window mode and up to 4 shifts (5 on a tie at the cut)
    """
    dashboard = _dashboard(days, file, thresholds, as_of)
    return {
        "days_back": days,
        "mode": dashboard.window_config.mode.value,
        "shifts": [s.to_dict() for s in dashboard.notable_shifts],
        "sample_size_warnings": asdict(dashboard.sample_size_warnings),
    }


def create_app():
    """Create the ASGI app for uvicorn."""
    # stateless_http=True allows resilience to server restarts
    return mcp.http_app(stateless_http=True)


def main():
    """Run the MCP server."""
    import uvicorn

    port = int(os.environ.get("PORT", 8082))
    host = os.environ.get("HOST", "127.0.0.1")

    print(f"Starting Journal Analytics on {host}:{port}")
    print(f"MCP endpoint: http://{host}:{port}/mcp")

    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    main()
