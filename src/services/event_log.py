"""Event log - bounded, user-facing record of what the simulator did"""

from datetime import datetime

from models.domain.records import LogEntry
from models.enums import LogLevel, LogSeverity
from services.bounded_log import BoundedLog
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.EVENT)

EVENT_LOG_CAPACITY = 100

_ECHO_LEVELS = {
    LogSeverity.INFO: LogLevel.INFO,
    LogSeverity.WARNING: LogLevel.WARN,
    LogSeverity.ERROR: LogLevel.ERROR,
}


class EventLog(BoundedLog[LogEntry]):
    """
    Keeps the last 100 log entries. Every entry is echoed to the console
    logger, even while recording is disabled.
    """

    def __init__(self, enabled: bool = True):
        super().__init__(EVENT_LOG_CAPACITY, enabled)

    def add(self, message: str, severity: LogSeverity = LogSeverity.INFO) -> bool:
        log.log(message, _ECHO_LEVELS[severity])
        return self.append(LogEntry(timestamp=datetime.now(), severity=severity, message=message))

    def info(self, message: str) -> bool:
        return self.add(message, LogSeverity.INFO)

    def warning(self, message: str) -> bool:
        return self.add(message, LogSeverity.WARNING)

    def error(self, message: str) -> bool:
        return self.add(message, LogSeverity.ERROR)

    def to_text(self, newest_first: bool = True) -> str:
        """`[ISO-timestamp] [SEVERITY] message` lines"""
        return "\n".join(
            f"[{entry.timestamp.isoformat()}] [{entry.severity.value.upper()}] {entry.message}"
            for entry in self.export(newest_first=newest_first)
        )
