"""Monitor module - favorites polling, processing locks and submission."""

from bidbot.monitor.scheduler import MonitorScheduler
from bidbot.monitor.service import (
    AnnounceMonitor,
    AnnounceState,
    MonitorCycleStats,
    classify,
    is_biddable,
    lock_key,
)
from bidbot.monitor.submission import HttpSubmissionGateway, SubmissionGateway

__all__ = [
    "MonitorScheduler",
    "AnnounceMonitor",
    "AnnounceState",
    "MonitorCycleStats",
    "classify",
    "is_biddable",
    "lock_key",
    "HttpSubmissionGateway",
    "SubmissionGateway",
]
