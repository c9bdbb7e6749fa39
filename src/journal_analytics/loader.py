"""Read session records exported by the journaling app."""

import json
import logging
import os
from pathlib import Path

from journal_analytics.records import SessionRecord

logger = logging.getLogger("journal-analytics")

# Default export location, overridable with JOURNAL_SESSIONS_PATH
DEFAULT_SESSIONS_PATH = Path.home() / ".journal" / "sessions.jsonl"


def default_sessions_path() -> Path:
    """Return the sessions file from JOURNAL_SESSIONS_PATH or the default."""
    env_path = os.environ.get("JOURNAL_SESSIONS_PATH")
    return Path(env_path).expanduser() if env_path else DEFAULT_SESSIONS_PATH


def parse_records(raw_records: list, source: str = "<memory>") -> list[SessionRecord]:
    """Convert raw dicts into SessionRecords, skipping any that fail to parse.

    Args:
        raw_records: Parsed JSON objects
        source: Name used in log messages

    Returns:
        Successfully parsed records, in input order
    """
    records = []
    for index, raw in enumerate(raw_records):
        if not isinstance(raw, dict):
            logger.warning(f"Skipping non-object record {source}[{index}]")
            continue
        try:
            records.append(SessionRecord.from_dict(raw))
        except (ValueError, TypeError) as e:
            logger.warning(f"Skipping invalid record {source}[{index}]: {e}")
    return records


def _load_jsonl(path: Path) -> list[SessionRecord]:
    records = []
    with open(path, encoding="utf-8") as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                raw = json.loads(line)
            except json.JSONDecodeError as e:
                logger.debug(f"JSON parse error in {path}:{line_num}: {e}")
                continue
            records.extend(parse_records([raw], source=f"{path}:{line_num}"))
    return records


def _load_json(path: Path) -> list[SessionRecord]:
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning(f"Could not parse {path}: {e}")
            return []

    if isinstance(data, dict):
        data = data.get("sessions", [])
    if not isinstance(data, list):
        logger.warning(f"Expected a list of sessions in {path}, got {type(data).__name__}")
        return []
    return parse_records(data, source=str(path))


def load_sessions(path: Path | str | None = None) -> list[SessionRecord]:
    """Load session records from a JSONL file or a JSON array file.

    Files ending in ``.jsonl`` hold one session object per line. Any other
    file holds either a JSON array of sessions or an object with a
    ``"sessions"`` array. Malformed lines and records are logged and skipped.

    Args:
        path: Sessions file (default: JOURNAL_SESSIONS_PATH or ~/.journal/sessions.jsonl)

    Returns:
        Parsed records in file order; empty if the file does not exist
    """
    path = Path(path) if path is not None else default_sessions_path()
    if not path.exists():
        logger.warning(f"Sessions file does not exist: {path}")
        return []

    if path.suffix == ".jsonl":
        records = _load_jsonl(path)
    else:
        records = _load_json(path)

    logger.debug(f"Loaded {len(records)} sessions from {path}")
    return records


def get_file_stats(path: Path | str | None = None) -> dict:
    """Describe a sessions file: location, session count and date span."""
    path = Path(path) if path is not None else default_sessions_path()
    sessions = load_sessions(path)
    played = sorted(s.played_at for s in sessions)
    return {
        "sessions_file": str(path),
        "exists": path.exists(),
        "session_count": len(sessions),
        "earliest_session": played[0].isoformat() if played else None,
        "latest_session": played[-1].isoformat() if played else None,
    }
