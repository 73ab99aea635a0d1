import sys
from datetime import datetime
from typing import Optional, TextIO
from models.enums import LogLevel, LogCategory


# === ANSI COLORS ===
class Colors:
    """ANSI escape codes for colored terminal output"""
    RESET = '\033[0m'
    DIM = '\033[2m'

    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'
    WHITE = '\033[37m'

    BRIGHT_BLUE = '\033[94m'
    BRIGHT_MAGENTA = '\033[95m'
    BRIGHT_CYAN = '\033[96m'
    BRIGHT_GREEN = '\033[92m'
    BRIGHT_YELLOW = '\033[93m'
    BRIGHT_WHITE = '\033[97m'


CATEGORY_COLORS = {
    LogCategory.CONFIG: Colors.CYAN,
    LogCategory.PIN: Colors.BRIGHT_BLUE,
    LogCategory.GROUP: Colors.BRIGHT_GREEN,
    LogCategory.SCENARIO: Colors.BRIGHT_YELLOW,
    LogCategory.HISTORY: Colors.BRIGHT_CYAN,
    LogCategory.RECONCILE: Colors.MAGENTA,
    LogCategory.PRESET: Colors.BRIGHT_MAGENTA,
    LogCategory.EVENT: Colors.BRIGHT_MAGENTA,
    LogCategory.SYSTEM: Colors.BRIGHT_WHITE,
}

LEVEL_SYMBOLS = {
    LogLevel.DEBUG: '·',
    LogLevel.INFO: '✓',
    LogLevel.WARN: '⚠',
    LogLevel.ERROR: '✗',
}

LEVEL_COLORS = {
    LogLevel.DEBUG: Colors.DIM,
    LogLevel.INFO: Colors.GREEN,
    LogLevel.WARN: Colors.YELLOW,
    LogLevel.ERROR: Colors.RED,
}

_LEVEL_PRIORITY = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARN: 2,
    LogLevel.ERROR: 3,
}


# === CORE LOGGER ===
class Logger:
    """
    Structured logger with compact output format

    Format:
    [HH:MM:SS] CATEGORY · Message
               ├─ key: value
               └─ key: value

    Example:
    [14:23:45] SCENARIO  ✓ Scenario started
               └─ scenario: blink
    """

    def __init__(self, min_level: LogLevel = LogLevel.INFO, use_colors: bool = True,
                 stream: Optional[TextIO] = None):
        """
        Args:
            min_level: Minimum log level to display
            use_colors: Enable ANSI color codes (disable for file output)
            stream: Output stream (stdout when None)
        """
        self.min_level = min_level
        self.use_colors = use_colors
        self.stream = stream

    def _should_log(self, level: LogLevel) -> bool:
        return _LEVEL_PRIORITY[level] >= _LEVEL_PRIORITY[self.min_level]

    def _colorize(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{color}{text}{Colors.RESET}"

    def _write(self, line: str) -> None:
        print(line, file=self.stream or sys.stdout)

    def log(
        self,
        category: LogCategory,
        message: str,
        level: LogLevel = LogLevel.INFO,
        details: Optional[list] = None,
        **kwargs
    ):
        """
        Log a structured message

        Args:
            category: Log category (PIN, SCENARIO, etc.)
            message: Main message text
            level: Log level (DEBUG, INFO, WARN, ERROR)
            details: List of detail strings to show below message
            **kwargs: Additional key-value pairs to show as details
        """
        if not self._should_log(level):
            return

        timestamp = datetime.now().strftime('[%H:%M:%S]')
        cat = self._colorize(category.name.ljust(9), CATEGORY_COLORS.get(category, Colors.WHITE))
        sym = self._colorize(LEVEL_SYMBOLS.get(level, '·'), LEVEL_COLORS.get(level, Colors.WHITE))
        msg = self._colorize(message, LEVEL_COLORS.get(level, Colors.WHITE))

        self._write(f"{timestamp} {cat} {sym} {msg}")

        all_details = list(details or [])
        for k, v in kwargs.items():
            all_details.append(f"{k}: {v}")

        indent = " " * 11
        for i, d in enumerate(all_details):
            tree = "└─" if i == len(all_details) - 1 else "├─"
            self._write(f"{indent}{self._colorize(tree, Colors.DIM)} {d}")

    def debug(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.DEBUG, **kw)
    def info(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.INFO, **kw)
    def warn(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.WARN, **kw)
    def error(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.ERROR, **kw)

    def for_category(self, category: LogCategory) -> 'BoundLogger':
        """Return a contextual logger bound to a specific category."""
        return BoundLogger(self, category)


class BoundLogger:
    """Logger bound to a default category, with ability to override if needed."""

    def __init__(self, base: Logger, category: LogCategory):
        self._base = base
        self._category = category

    def log(self, message: str, level: LogLevel = LogLevel.INFO, category: Optional[LogCategory] = None, **kw):
        self._base.log(category or self._category, message, level, **kw)

    def debug(self, message: str, **kw): self.log(message, LogLevel.DEBUG, **kw)
    def info(self, message: str, **kw): self.log(message, LogLevel.INFO, **kw)
    def warn(self, message: str, **kw): self.log(message, LogLevel.WARN, **kw)
    def error(self, message: str, **kw): self.log(message, LogLevel.ERROR, **kw)


# === Global instance helpers ===
_logger = Logger()


def get_logger() -> Logger:
    return _logger


def configure_logger(min_level: LogLevel = LogLevel.INFO, use_colors: bool = True):
    """
    Configure the logger singleton in place.

    Bound loggers created at import time keep pointing at the same instance,
    so this must never rebind `_logger`.
    """
    _logger.min_level = min_level
    _logger.use_colors = use_colors
