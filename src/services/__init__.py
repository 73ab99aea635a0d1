"""
Services layer

SimulatorService and ServiceContainer sit above the scenario engine and are
imported from their own modules.
"""

from .event_bus import EventBus
from .bounded_log import BoundedLog
from .history_recorder import HistoryRecorder
from .event_log import EventLog
from .pin_registry import PinRegistry
from .group_service import GroupService
from .scenario_service import ScenarioService
from .preset_service import PresetService

__all__ = [
    "EventBus",
    "BoundedLog",
    "HistoryRecorder",
    "EventLog",
    "PinRegistry",
    "GroupService",
    "ScenarioService",
    "PresetService",
]
