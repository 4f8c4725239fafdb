"""Notifications for completed and failed report runs.

LoggingNotifier logs each event and keeps it in memory. When ``log_path`` is
set, events are also appended to a JSONL file.
"""

import json
import logging
import os
import threading
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from src.pipeline.models import GeneratedReport

logger = logging.getLogger(__name__)


class NotificationType(Enum):
    """Types of notifications."""
    REPORT_READY = "REPORT_READY"
    REPORT_FAILED = "REPORT_FAILED"


@dataclass
class Notification:
    """Individual notification."""
    notification_type: str
    message: str
    request_id: Optional[str] = None
    report_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        # Remove None values
        return {k: v for k, v in d.items() if v is not None}


class LoggingNotifier:
    """Notifier that logs events and optionally appends them to a JSONL file."""

    def __init__(self, log_path: Optional[str] = None):
        self.log_path = log_path
        self.sent: List[Notification] = []
        self._lock = threading.Lock()

    @property
    def successes(self) -> List[Notification]:
        return [n for n in self.sent if n.notification_type == NotificationType.REPORT_READY.value]

    @property
    def failures(self) -> List[Notification]:
        return [n for n in self.sent if n.notification_type == NotificationType.REPORT_FAILED.value]

    def _record(self, notification: Notification):
        with self._lock:
            self.sent.append(notification)
            if self.log_path:
                parent = os.path.dirname(self.log_path)
                if parent:
                    os.makedirs(parent, exist_ok=True)
                with open(self.log_path, 'a') as f:
                    f.write(json.dumps(notification.to_dict()) + "\n")

    def notify_success(self, report: GeneratedReport):
        logger.info(f"Report generated successfully: {report.id} ({report.file_name})")
        self._record(Notification(
            notification_type=NotificationType.REPORT_READY.value,
            message=f"Report ready: {report.file_name}",
            request_id=report.request_id or None,
            report_id=report.id,
            details={
                "format": report.format.value,
                "size_in_bytes": report.size_in_bytes,
                "download_url": report.download_url,
            },
        ))

    def notify_failure(self, request_id: str, message: str):
        logger.error(f"Report generation failed for request {request_id}: {message}")
        self._record(Notification(
            notification_type=NotificationType.REPORT_FAILED.value,
            message=message,
            request_id=request_id,
        ))
