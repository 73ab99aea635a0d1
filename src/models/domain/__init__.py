"""Domain models"""

from .pin import Pin, PinGroup, PIN_COLORS, default_pin_color
from .scenario import Scenario, ScenarioStep
from .records import HistoryEntry, LogEntry
from .preset import Preset
from .board import BoardSpec

__all__ = [
    "Pin",
    "PinGroup",
    "PIN_COLORS",
    "default_pin_color",
    "Scenario",
    "ScenarioStep",
    "HistoryEntry",
    "LogEntry",
    "Preset",
    "BoardSpec",
]
