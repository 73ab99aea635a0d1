from dataclasses import dataclass
from typing import List, Tuple

from models.domain.pin import Pin
from models.events.base import Event
from models.events.types import EventType
from models.events.sources import EventSource


@dataclass(init=False)
class PinStateChangedEvent(Event):
    """
    Fired once per pin transition (state, value and duty cycle changed
    together). `pin` is a copy taken right after the change.
    """

    pin: Pin

    def __init__(self, pin: Pin, source: EventSource = EventSource.MANUAL):
        super().__init__(type=EventType.PIN_STATE_CHANGED, source=source)
        self.pin = pin

    @property
    def pin_id(self) -> int:
        return self.pin.id


@dataclass(init=False)
class PinConfigChangedEvent(Event):
    """Fired when mode, pulls, interrupt, naming or group membership changes"""

    pin: Pin
    fields: Tuple[str, ...]

    def __init__(self, pin: Pin, fields: Tuple[str, ...], source: EventSource = EventSource.MANUAL):
        super().__init__(type=EventType.PIN_CONFIG_CHANGED, source=source)
        self.pin = pin
        self.fields = fields


@dataclass(init=False)
class PinsInitializedEvent(Event):
    """Fired when the whole pin set was replaced"""

    pins: List[Pin]
    board: str | None

    def __init__(self, pins: List[Pin], board: str | None = None, source: EventSource = EventSource.SYSTEM):
        super().__init__(type=EventType.PINS_INITIALIZED, source=source)
        self.pins = pins
        self.board = board


@dataclass(init=False)
class PinsReconciledEvent(Event):
    """Fired after an external snapshot was merged"""

    updated: List[Pin]
    ignored: int

    def __init__(self, updated: List[Pin], ignored: int):
        super().__init__(type=EventType.PINS_RECONCILED, source=EventSource.RECONCILIATION)
        self.updated = updated
        self.ignored = ignored
