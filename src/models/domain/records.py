"""Observation records kept by HistoryRecorder and EventLog"""

from dataclasses import dataclass
from datetime import datetime

from models.enums import LogSeverity


@dataclass(frozen=True)
class HistoryEntry:
    """One pin transition"""
    timestamp: datetime
    pin_id: int
    state: bool
    value: int


@dataclass(frozen=True)
class LogEntry:
    """One user-facing log line"""
    timestamp: datetime
    severity: LogSeverity
    message: str
