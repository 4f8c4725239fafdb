"""Tests for report notifications."""
import json
from datetime import datetime, timezone

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.notify.notifier import LoggingNotifier, Notification, NotificationType
from src.pipeline.models import GeneratedReport, ReportFormat


def _report():
    return GeneratedReport(
        id="rep-1",
        file_name="report_20240101_000000.docx",
        format=ReportFormat.DOCX,
        content=b"PK..",
        mime_type="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        generated_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        request_id="req-1",
        download_url="http://localhost:8080/api/reports/rep-1/download",
    )


class TestLoggingNotifier:

    def test_success_and_failure_recorded(self):
        """Test both notification kinds are recorded."""
        notifier = LoggingNotifier()
        notifier.notify_success(_report())
        notifier.notify_failure("req-2", "fetch failed")

        assert len(notifier.successes) == 1
        assert len(notifier.failures) == 1
        assert notifier.successes[0].report_id == "rep-1"
        assert notifier.successes[0].details["format"] == "DOCX"
        assert notifier.failures[0].request_id == "req-2"
        assert notifier.failures[0].message == "fetch failed"

    def test_jsonl_log(self, tmp_path):
        """Test notifications are appended to the JSONL log."""
        log_path = tmp_path / "logs" / "notifications.jsonl"
        notifier = LoggingNotifier(str(log_path))
        notifier.notify_success(_report())
        notifier.notify_failure("req-2", "boom")

        lines = [json.loads(line) for line in log_path.read_text().splitlines()]
        assert [line["notification_type"] for line in lines] == ["REPORT_READY", "REPORT_FAILED"]
        assert "report_id" not in lines[1]

    def test_to_dict_drops_none(self):
        """Test None fields are left out of the dict view."""
        notification = Notification(notification_type=NotificationType.REPORT_FAILED.value, message="x")
        d = notification.to_dict()
        assert set(d) == {"notification_type", "message", "timestamp"}
