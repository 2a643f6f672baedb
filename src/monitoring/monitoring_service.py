"""
Monitoring Service

Append-only JSONL log of extraction-quality events: OCR failures, vision
fallbacks, rejected photos and API errors. Counts over this file show how
often label photos are unusable without an external metrics stack.
"""

import json
import logging
import os
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterator, List, Literal, Optional

logger = logging.getLogger("Monitoring")

Severity = Literal["info", "warning", "error", "critical"]


@dataclass
class MonitoringEvent:
    """One line of the event log."""
    event_type: str
    severity: Severity
    message: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "MonitoringEvent":
        return cls(
            event_type=data["event_type"],
            severity=data.get("severity", "info"),
            message=data.get("message", ""),
            metadata=data.get("metadata") or {},
            timestamp=data.get("timestamp", ""),
        )

    @property
    def occurred_at(self) -> Optional[datetime]:
        try:
            return datetime.fromisoformat(self.timestamp)
        except ValueError:
            return None


class MonitoringService:
    """
    Extraction-quality event log with size-based rotation.

    Writes are serialized with a lock because requests run on a threadpool.
    A failed write is logged and dropped; it never fails the request.

    Usage:
        monitoring = MonitoringService(log_dir="logs")
        monitoring.log_vision_fallback(confidence=0.3, parsed_empty=True)
        monitoring.extraction_summary()
    """

    EVENT_OCR_FAILURE = "ocr_failure"
    EVENT_VISION_FALLBACK = "vision_fallback"
    EVENT_EXTRACTION_REJECTED = "extraction_rejected"
    EVENT_API_ERROR = "api_error"

    def __init__(
        self,
        log_dir: str = "logs",
        log_file: str = "monitoring.jsonl",
        max_file_size_mb: float = 10.0,
    ):
        """
        Args:
            log_dir: Directory for the event log (created if missing)
            log_file: Name of the active log file
            max_file_size_mb: Size at which the active file is rotated
        """
        self.log_dir = log_dir
        self.log_file = log_file
        self.log_path = os.path.join(log_dir, log_file)
        self.max_file_size = max_file_size_mb * 1024 * 1024
        self._lock = threading.Lock()

        os.makedirs(log_dir, exist_ok=True)

    # =========================================================================
    # WRITING
    # =========================================================================

    def log_event(
        self,
        event_type: str,
        severity: Severity,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> MonitoringEvent:
        event = MonitoringEvent(event_type, severity, message, metadata or {})
        self._append(event)
        return event

    def log_ocr_failure(self, reason: str, attempt: int = 1, user_id: Optional[str] = None):
        """An OCR engine call raised or timed out."""
        return self.log_event(
            self.EVENT_OCR_FAILURE,
            "warning",
            f"OCR call failed on attempt {attempt}: {reason}",
            {"attempt": attempt, "user_id": user_id},
        )

    def log_vision_fallback(self, confidence: float, parsed_empty: bool, user_id: Optional[str] = None):
        """OCR output was not trusted; the front image went to the vision model."""
        return self.log_event(
            self.EVENT_VISION_FALLBACK,
            "info",
            "Untrusted OCR output escalated to the vision model",
            {"ocr_confidence": round(confidence, 3), "parsed_empty": parsed_empty, "user_id": user_id},
        )

    def log_extraction_rejected(self, confidence: float, parsed_empty: bool, user_id: Optional[str] = None):
        """OCR output was not trusted and there was no front image to escalate."""
        return self.log_event(
            self.EVENT_EXTRACTION_REJECTED,
            "warning",
            "Label photo rejected as unreadable",
            {"ocr_confidence": round(confidence, 3), "parsed_empty": parsed_empty, "user_id": user_id},
        )

    def log_api_error(self, endpoint: str, error_message: str, status_code: Optional[int] = None):
        return self.log_event(
            self.EVENT_API_ERROR,
            "error",
            f"{endpoint} failed: {error_message}",
            {"endpoint": endpoint, "status_code": status_code},
        )

    def _append(self, event: MonitoringEvent) -> None:
        line = json.dumps(event.to_dict(), default=str)
        with self._lock:
            try:
                self._rotate_if_needed()
                with open(self.log_path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
            except OSError as e:
                logger.error("Could not write monitoring event (%s): %s", e, line)

    def _rotate_if_needed(self) -> None:
        if not os.path.exists(self.log_path):
            return
        if os.path.getsize(self.log_path) <= self.max_file_size:
            return

        suffix = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        rotated = os.path.join(self.log_dir, f"{self.log_file}.{suffix}")
        os.replace(self.log_path, rotated)
        logger.info("Rotated monitoring log to %s", rotated)

    # =========================================================================
    # READING
    # =========================================================================

    def _iter_events(self) -> Iterator[MonitoringEvent]:
        """Events from the active file, oldest first. Corrupt lines are skipped."""
        if not os.path.exists(self.log_path):
            return
        with open(self.log_path, "r", encoding="utf-8") as f:
            for line in f:
                if not line.strip():
                    continue
                try:
                    yield MonitoringEvent.from_dict(json.loads(line))
                except (json.JSONDecodeError, KeyError, TypeError):
                    continue

    def get_recent_events(self, count: int = 100, event_type: Optional[str] = None) -> List[dict]:
        """
        Latest events as dicts, oldest first.

        Args:
            count: Maximum number of events returned
            event_type: Only return events of this type
        """
        events = [
            e.to_dict() for e in self._iter_events()
            if event_type is None or e.event_type == event_type
        ]
        return events[-count:]

    def get_event_counts(self, hours: int = 24) -> Dict[str, int]:
        """Events per type within the last `hours` hours."""
        cutoff = datetime.now() - timedelta(hours=hours)
        counts: Dict[str, int] = {}
        for event in self._iter_events():
            occurred = event.occurred_at
            if occurred is None or occurred < cutoff:
                continue
            counts[event.event_type] = counts.get(event.event_type, 0) + 1
        return counts

    def extraction_summary(self, hours: int = 24) -> Dict[str, Any]:
        """
        How often label photos needed help or were unusable.

        Returns:
            {"visionFallbacks", "rejections", "ocrFailures", "meanFallbackConfidence"}
        """
        counts = self.get_event_counts(hours)
        cutoff = datetime.now() - timedelta(hours=hours)
        fallback_confidences = [
            e.metadata.get("ocr_confidence")
            for e in self._iter_events()
            if e.event_type == self.EVENT_VISION_FALLBACK
            and e.occurred_at is not None and e.occurred_at >= cutoff
            and e.metadata.get("ocr_confidence") is not None
        ]
        mean = (
            round(sum(fallback_confidences) / len(fallback_confidences), 3)
            if fallback_confidences else None
        )
        return {
            "visionFallbacks": counts.get(self.EVENT_VISION_FALLBACK, 0),
            "rejections": counts.get(self.EVENT_EXTRACTION_REJECTED, 0),
            "ocrFailures": counts.get(self.EVENT_OCR_FAILURE, 0),
            "meanFallbackConfidence": mean,
        }
