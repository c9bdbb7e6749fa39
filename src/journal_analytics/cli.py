"""Command-line interface for journal analytics."""

import argparse
import json
from datetime import datetime

from journal_analytics.dashboard import get_dashboard_data
from journal_analytics.loader import get_file_stats, load_sessions
from journal_analytics.records import parse_timestamp
from journal_analytics.shifts import ShiftThresholds
from journal_analytics.windows import DAYS_BACK_CHOICES, select_windows

# Formatter registry: list of (predicate, formatter) tuples
# Each predicate checks if this formatter can handle the data
# Order matters - first match wins
_FORMATTERS: list[tuple[callable, callable]] = []

_ARROWS = {"increased": "↑", "decreased": "↓"}


def _register_formatter(predicate: callable):
    """Decorator to register a formatter with its predicate."""

    def decorator(formatter: callable):
        _FORMATTERS.append((predicate, formatter))
        return formatter

    return decorator


def _format_window_line(name: str, window: dict | None) -> str:
    if window is None:
        return f"  {name}: none"
    return f"  {name}: {window['label']} ({window['session_count']} sessions)"


def _format_shift_lines(shifts: list[dict]) -> list[str]:
    if not shifts:
        return ["  (none)"]
    return [f"  {_ARROWS[s['direction']]} {s['metric']}: {s['magnitude']}" for s in shifts]


@_register_formatter(lambda d: "window_config" in d and "notable_shifts" in d)
def _format_dashboard(data: dict) -> list[str]:
    config = data["window_config"]
    recent = data["recent_metrics"]
    lines = [
        f"Dashboard (last {config['days_back']} days, mode: {config['mode']})",
        _format_window_line("Recent", config["recent"]),
        _format_window_line("Baseline", config["baseline"]),
        "",
    ]

    summary = data.get("summary")
    if summary:
        avg_energy = summary["avg_energy_after"]
        recovery = summary["recovery_score"]
        lines.extend(
            [
                "Summary:",
                f"  Sessions: {summary['total_sessions']} "
                f"({summary['sessions_delta']:+d} vs previous week)",
                f"  Avg energy after: {avg_energy if avg_energy is not None else '-'}",
                f"  Recovery: {f'{recovery}%' if recovery is not None else '-'}",
                "",
            ]
        )

    lines.extend(
        [
            "Recent window:",
            f"  Energy: {recent['avg_energy_before']:.1f} → {recent['avg_energy_after']:.1f} "
            f"(avg delta {recent['avg_energy_delta']:+.1f})",
            f"  Mood: {recent['avg_mood_before']:.1f} → {recent['avg_mood_after']:.1f} "
            f"(avg delta {recent['avg_mood_delta']:+.1f})",
        ]
    )
    if recent["top_mental_tags"]:
        tags = ", ".join(f"{t['tag']} ({t['count']})" for t in recent["top_mental_tags"])
        lines.append(f"  Top mental tags: {tags}")
    lines.append("")

    lines.append("Notable shifts:")
    lines.extend(_format_shift_lines(data["notable_shifts"]))

    warnings = data["sample_size_warnings"]
    messages = {
        "recent_too_small": "Recent window has fewer than 3 sessions",
        "baseline_too_small": "Baseline window missing or has fewer than 3 sessions",
        "category_comparisons_unsupported": "Too few sessions to compare singles and doubles",
    }
    active = [messages[key] for key, flag in warnings.items() if flag]
    if active:
        lines.append("")
        lines.append("Warnings:")
        lines.extend(f"  - {m}" for m in active)

    return lines


@_register_formatter(lambda d: "mode" in d and "recent" in d and "baseline" in d)
def _format_windows(data: dict) -> list[str]:
    return [
        f"Window mode: {data['mode']} (days back: {data['days_back']})",
        _format_window_line("Recent", data["recent"]),
        _format_window_line("Baseline", data["baseline"]),
    ]


@_register_formatter(lambda d: "shifts" in d)
def _format_shifts(data: dict) -> list[str]:
    lines = [f"Notable shifts (last {data['days_back']} days, mode: {data['mode']}):"]
    lines.extend(_format_shift_lines(data["shifts"]))
    return lines


@_register_formatter(lambda d: "sessions_file" in d)
def _format_status(data: dict) -> list[str]:
    return [
        f"Sessions file: {data['sessions_file']}",
        f"Exists: {'yes' if data['exists'] else 'no'}",
        f"Sessions: {data['session_count']}",
        f"Earliest: {data['earliest_session'] or '-'}",
        f"Latest: {data['latest_session'] or '-'}",
    ]


def format_output(data: dict, json_output: bool = False) -> str:
    """Format output as JSON or human-readable."""
    if json_output:
        return json.dumps(data, indent=2, default=str)

    # Find matching formatter from registry
    for predicate, formatter in _FORMATTERS:
        if predicate(data):
            return "\n".join(formatter(data))

    # Fallback to JSON if no formatter matches
    return json.dumps(data, indent=2, default=str)


def _parse_thresholds(value: str) -> ShiftThresholds:
    """argparse type for --thresholds: a JSON object of threshold overrides."""
    try:
        overrides = json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"thresholds must be a JSON object: {e}") from e
    if not isinstance(overrides, dict):
        raise argparse.ArgumentTypeError("thresholds must be a JSON object")
    try:
        return ShiftThresholds.from_dict(overrides)
    except (ValueError, TypeError) as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _parse_as_of(value: str) -> datetime:
    """argparse type for --as-of: an ISO-8601 timestamp."""
    try:
        return parse_timestamp(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def cmd_status(args):
    """Show sessions file status."""
    print(format_output(get_file_stats(args.file), args.json))


def cmd_dashboard(args):
    """Show the full dashboard briefing."""
    sessions = load_sessions(args.file)
    result = get_dashboard_data(
        sessions,
        days_back=args.days,
        thresholds=args.thresholds,
        now=args.as_of,
    )
    print(format_output(result.to_dict(), args.json))


def cmd_windows(args):
    """Show which recent/baseline windows would be compared."""
    sessions = load_sessions(args.file)
    windows = select_windows(sessions, days_back=args.days, now=args.as_of)
    result = {
        "days_back": args.days,
        "mode": windows.mode.value,
        "recent": windows.recent.to_dict(),
        "baseline": windows.baseline.to_dict() if windows.baseline else None,
    }
    print(format_output(result, args.json))


def cmd_shifts(args):
    """Show ranked notable shifts only."""
    sessions = load_sessions(args.file)
    dashboard = get_dashboard_data(
        sessions,
        days_back=args.days,
        thresholds=args.thresholds,
        now=args.as_of,
    )
    result = {
        "days_back": args.days,
        "mode": dashboard.window_config.mode.value,
        "shifts": [s.to_dict() for s in dashboard.notable_shifts],
    }
    print(format_output(result, args.json))


def _add_window_args(sub):
    sub.add_argument(
        "--days",
        type=int,
        choices=DAYS_BACK_CHOICES,
        default=14,
        help="Window length in days (default: 14)",
    )
    sub.add_argument(
        "--as-of", type=_parse_as_of, help="Reference time, ISO-8601 (default: now)"
    )


def main():
    """CLI entry point."""
    epilog = """
Examples:
  journal-analytics-cli status              # Sessions file info
  journal-analytics-cli dashboard --days 7  # Last 7 days vs the 7 before
  journal-analytics-cli shifts --thresholds '{"soreness_frequency": 0.1}'

All commands support --json for machine-readable output.
Data location: $JOURNAL_SESSIONS_PATH or ~/.journal/sessions.jsonl
"""
    parser = argparse.ArgumentParser(
        description="Journal Analytics CLI - Spot what changed in your recent sessions",
        prog="journal-analytics-cli",
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument("--file", help="Sessions file (.jsonl or .json)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # status
    sub = subparsers.add_parser("status", help="Show sessions file status")
    sub.set_defaults(func=cmd_status)

    # dashboard
    sub = subparsers.add_parser("dashboard", help="Show the full dashboard briefing")
    _add_window_args(sub)
    sub.add_argument(
        "--thresholds", type=_parse_thresholds, help="JSON object of shift threshold overrides"
    )
    sub.set_defaults(func=cmd_dashboard)

    # windows
    sub = subparsers.add_parser("windows", help="Show window selection")
    _add_window_args(sub)
    sub.set_defaults(func=cmd_windows)

    # shifts
    sub = subparsers.add_parser("shifts", help="Show notable shifts")
    _add_window_args(sub)
    sub.add_argument(
        "--thresholds", type=_parse_thresholds, help="JSON object of shift threshold overrides"
    )
    sub.set_defaults(func=cmd_shifts)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
