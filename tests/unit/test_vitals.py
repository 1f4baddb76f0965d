"""Tests for web vitals storage and summaries."""

import json
from datetime import date, datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from backend.app.models.vitals import WebVital
from backend.app.services.vitals import metrics_file, record_web_vital, summarize_metrics

NOON = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def write_day(metrics_dir: Path, day: date, entries: list[dict]) -> None:
    metrics_dir.mkdir(parents=True, exist_ok=True)
    metrics_file(metrics_dir, day).write_text(json.dumps(entries), encoding="utf-8")


class TestRecordWebVital:
    """Test appending metrics to daily files."""

    def test_appends_to_daily_file(self, tmp_path: Path) -> None:
        """Test file naming, aliases and the default timestamp."""
        vital = WebVital(name="LCP", value=1800.5, rating="good", navigation_type="navigate")

        path = record_web_vital(vital, tmp_path, now=NOON)
        record_web_vital(WebVital(name="CLS", value=0.02), tmp_path, now=NOON)

        assert path == tmp_path / "metrics-2025-03-10.json"
        entries = json.loads(path.read_text())
        assert entries[0] == {
            "name": "LCP",
            "value": 1800.5,
            "rating": "good",
            "navigationType": "navigate",
            "timestamp": "2025-03-10T12:00:00Z",
        }
        assert [entry["name"] for entry in entries] == ["LCP", "CLS"]

    @patch("backend.app.pdf.cache.os.replace", side_effect=OSError("disk full"))
    def test_failed_write_keeps_existing_entries(self, _replace: object, tmp_path: Path) -> None:
        """Test that an interrupted rewrite leaves the day's file intact."""
        write_day(tmp_path, NOON.date(), [{"name": "LCP", "value": 1200}])

        with pytest.raises(OSError, match="disk full"):
            record_web_vital(WebVital(name="CLS", value=0.02), tmp_path, now=NOON)

        path = metrics_file(tmp_path, NOON.date())
        assert json.loads(path.read_text()) == [{"name": "LCP", "value": 1200}]
        assert [p.name for p in tmp_path.iterdir()] == [path.name]

    def test_keeps_client_timestamp_and_extra_fields(self, tmp_path: Path) -> None:
        """Test that unknown fields survive and a sent timestamp wins."""
        vital = WebVital.model_validate(
            {"name": "FID", "value": 12, "timestamp": "2025-03-10T08:00:00Z", "page": "/lisbon"}
        )

        path = record_web_vital(vital, tmp_path, now=NOON)

        entry = json.loads(path.read_text())[0]
        assert entry["timestamp"] == "2025-03-10T08:00:00Z"
        assert entry["page"] == "/lisbon"

    def test_corrupt_file_is_replaced(self, tmp_path: Path) -> None:
        """Test that a corrupt daily file does not block new metrics."""
        metrics_file(tmp_path, NOON.date()).write_text("{not json", encoding="utf-8")

        path = record_web_vital(WebVital(name="TTFB", value=300), tmp_path, now=NOON)

        assert len(json.loads(path.read_text())) == 1


class TestSummarizeMetrics:
    """Test summaries over daily files."""

    def test_averages_and_pass_rates(self, tmp_path: Path) -> None:
        """Test rounding of averages and whole-percent pass rates."""
        write_day(
            tmp_path,
            date(2025, 3, 10),
            [
                {"name": "LCP", "value": 2000, "timestamp": "2025-03-10T10:00:00Z"},
                {"name": "LCP", "value": 3000, "timestamp": "2025-03-10T11:00:00Z"},
                {"name": "LCP", "value": 2400.333, "timestamp": "2025-03-10T12:00:00Z"},
                {"name": "CLS", "value": 0.05, "timestamp": "2025-03-10T09:00:00Z"},
            ],
        )

        summary = summarize_metrics(tmp_path, end=date(2025, 3, 10))

        assert summary.total == 4
        assert summary.averages["LCP"] == 2466.78
        assert summary.pass_rates["LCP"] == 67
        assert summary.pass_rates["CLS"] == 100
        assert "FID" not in summary.averages
        assert summary.budgets["LCP"] == 2500

    def test_newest_first_across_files_with_limit(self, tmp_path: Path) -> None:
        """Test ordering by timestamp and the limit."""
        write_day(
            tmp_path,
            date(2025, 3, 9),
            [{"name": "FCP", "value": 900, "timestamp": "2025-03-09T23:00:00Z"}],
        )
        write_day(
            tmp_path,
            date(2025, 3, 10),
            [
                {"name": "FCP", "value": 1000, "timestamp": "2025-03-10T01:00:00Z"},
                {"name": "FCP", "value": 1100, "timestamp": "2025-03-10T02:00:00Z"},
            ],
        )

        summary = summarize_metrics(tmp_path, end=date(2025, 3, 10), limit=2)

        assert [entry["value"] for entry in summary.metrics] == [1100, 1000]
        assert summary.averages["FCP"] == 1050

    def test_date_range_filters_files(self, tmp_path: Path) -> None:
        """Test that files outside [start, end] are skipped."""
        for day in (date(2025, 3, 8), date(2025, 3, 9), date(2025, 3, 10)):
            write_day(
                tmp_path, day, [{"name": "TTFB", "value": 100, "timestamp": f"{day}T00:00:00Z"}]
            )

        summary = summarize_metrics(tmp_path, start=date(2025, 3, 9), end=date(2025, 3, 9))

        assert summary.total == 1
        assert summary.metrics[0]["timestamp"] == "2025-03-09T00:00:00Z"

    def test_corrupt_and_stray_files_are_ignored(self, tmp_path: Path) -> None:
        """Test that bad files count as empty."""
        write_day(tmp_path, date(2025, 3, 10), [{"name": "CLS", "value": 0.3}])
        metrics_file(tmp_path, date(2025, 3, 9)).write_text("[{", encoding="utf-8")
        (tmp_path / "metrics-latest.json").write_text("[]", encoding="utf-8")

        summary = summarize_metrics(tmp_path, end=date(2025, 3, 10))

        assert summary.total == 1
        assert summary.pass_rates["CLS"] == 0

    def test_missing_directory(self, tmp_path: Path) -> None:
        """Test an empty summary before anything is recorded."""
        summary = summarize_metrics(tmp_path / "absent")

        assert summary.total == 0
        assert summary.metrics == []
        assert summary.averages == {}
