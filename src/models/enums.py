"""
Enums for the GPIO simulator
"""

from enum import Enum, auto
from typing import Optional


class PinMode(Enum):
    """Pin operating modes"""
    INPUT = "input"
    OUTPUT = "output"
    PWM = "pwm"


class StepAction(Enum):
    """
    Scenario step actions

    ON/OFF force a level, TOGGLE inverts the level observed when the step
    runs, PWM sets the duty cycle on pins already in PWM mode.
    """
    ON = "on"
    OFF = "off"
    TOGGLE = "toggle"
    PWM = "pwm"

    @classmethod
    def parse(cls, value) -> Optional["StepAction"]:
        """Return the matching action or None for anything unrecognised"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value == value.strip().lower():
                    return member
        return None


class LogSeverity(Enum):
    """EventLog entry severities"""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class EngineState(Enum):
    """ScenarioEngine run states"""
    IDLE = auto()
    RUNNING = auto()


class StopReason(Enum):
    """Why a scenario run ended"""
    STOPPED = "stopped"      # explicit stop()
    COMPLETED = "completed"  # ran past the last step of a non-looping scenario
    REPLACED = "replaced"    # another run() took over


class LogLevel(Enum):
    """Log severity levels"""
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()


class LogCategory(Enum):
    """Log categories for grouping related events"""
    CONFIG = auto()      # Configuration loading, validation
    PIN = auto()         # Pin registry mutations
    GROUP = auto()       # Pin group bookkeeping
    SCENARIO = auto()    # Scenario collection and engine
    HISTORY = auto()     # History recorder
    RECONCILE = auto()   # Inbound external snapshots
    PRESET = auto()      # Preset save/load
    EVENT = auto()       # Event bus and event log echo
    API = auto()
    SYSTEM = auto()      # Startup, shutdown, errors

    GENERAL = auto()    # Default general category
