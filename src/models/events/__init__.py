"""
Event system for the GPIO simulator

Pin registry and scenario engine changes are published as typed events.
"""

from models.events.types import EventType
from models.events.base import Event
from models.events.sources import EventSource

from models.events.pin_events import (
    PinStateChangedEvent,
    PinConfigChangedEvent,
    PinsInitializedEvent,
    PinsReconciledEvent,
)
from models.events.scenario_events import (
    ScenarioStartedEvent,
    ScenarioStepExecutedEvent,
    ScenarioLoopedEvent,
    ScenarioStoppedEvent,
)

__all__ = [
    "EventType",
    "Event",
    "EventSource",

    "PinStateChangedEvent",
    "PinConfigChangedEvent",
    "PinsInitializedEvent",
    "PinsReconciledEvent",

    "ScenarioStartedEvent",
    "ScenarioStepExecutedEvent",
    "ScenarioLoopedEvent",
    "ScenarioStoppedEvent",
]
