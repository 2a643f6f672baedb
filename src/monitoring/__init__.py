# Monitoring Package - JSONL event log
from .monitoring_service import MonitoringService, MonitoringEvent

__all__ = ["MonitoringService", "MonitoringEvent"]
