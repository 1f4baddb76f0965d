"""Web vitals telemetry stored as one JSON array file per day."""

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from backend.app.models.vitals import VITAL_BUDGETS, VITAL_NAMES, MetricsSummary, WebVital
from backend.app.pdf.cache import atomic_write
from backend.app.utils.metrics import web_vitals_total

logger = logging.getLogger(__name__)

FILE_PREFIX = "metrics-"


def metrics_file(metrics_dir: Path, day: date) -> Path:
    return metrics_dir / f"{FILE_PREFIX}{day.isoformat()}.json"


def _read_entries(path: Path) -> list[dict[str, Any]]:
    """Entries in a daily file; unreadable or corrupt files count as empty."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return []
    except (OSError, ValueError) as e:
        logger.error(f"Error parsing metrics file {path.name}: {e}")
        return []
    return data if isinstance(data, list) else []


def record_web_vital(vital: WebVital, metrics_dir: Path, now: datetime | None = None) -> Path:
    """Append a metric to today's file, stamping it if it has no timestamp.

    Args:
        vital: Reported metric (must have a name)
        metrics_dir: Directory holding the daily files
        now: Current time (for testing)

    Returns:
        Path of the file written
    """
    now = now or datetime.now(timezone.utc)
    entry = vital.model_dump(by_alias=True, exclude_none=True)
    entry.setdefault("timestamp", now.isoformat().replace("+00:00", "Z"))

    metrics_dir.mkdir(parents=True, exist_ok=True)
    path = metrics_file(metrics_dir, now.date())
    entries = _read_entries(path)
    entries.append(entry)
    atomic_write(path, json.dumps(entries, indent=2).encode("utf-8"))

    web_vitals_total.labels(name=vital.name or "unknown").inc()
    return path


def _file_date(path: Path) -> date | None:
    try:
        return date.fromisoformat(path.stem.removeprefix(FILE_PREFIX))
    except ValueError:
        return None


def _sort_key(entry: dict[str, Any]) -> str:
    timestamp = entry.get("timestamp")
    return timestamp if isinstance(timestamp, str) else ""


def summarize_metrics(
    metrics_dir: Path,
    start: date | None = None,
    end: date | None = None,
    limit: int = 100,
) -> MetricsSummary:
    """Summarize recorded metrics for a date range.

    Args:
        metrics_dir: Directory holding the daily files
        start: First day to include (default: all history)
        end: Last day to include (default: today)
        limit: Maximum number of entries returned and summarized

    Returns:
        Newest-first entries with per-vital averages (2 dp) and budget pass
        rates (whole percent)
    """
    end = end or datetime.now(timezone.utc).date()
    entries: list[dict[str, Any]] = []
    if metrics_dir.is_dir():
        for path in sorted(metrics_dir.glob(f"{FILE_PREFIX}*.json")):
            day = _file_date(path)
            if day is None or day > end or (start is not None and day < start):
                continue
            entries.extend(_read_entries(path))

    # ISO-8601 UTC timestamps sort lexically
    entries.sort(key=_sort_key, reverse=True)
    entries = entries[: max(limit, 0)]

    averages: dict[str, float] = {}
    pass_rates: dict[str, float] = {}
    for name in VITAL_NAMES:
        values = [
            float(entry["value"])
            for entry in entries
            if entry.get("name") == name and isinstance(entry.get("value"), (int, float))
        ]
        if not values:
            continue
        averages[name] = round(sum(values) / len(values), 2)
        passing = sum(1 for value in values if value <= VITAL_BUDGETS[name])
        pass_rates[name] = round(passing / len(values) * 100)

    return MetricsSummary(
        total=len(entries),
        averages=averages,
        pass_rates=pass_rates,
        budgets=dict(VITAL_BUDGETS),
        metrics=entries,
    )
