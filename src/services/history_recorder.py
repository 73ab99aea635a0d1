"""History recorder - bounded record of pin transitions"""

from datetime import datetime
from typing import List

from models.domain.records import HistoryEntry
from models.events import EventType, PinStateChangedEvent
from services.bounded_log import BoundedLog
from services.event_bus import EventBus
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.HISTORY)

HISTORY_CAPACITY = 1000


class HistoryRecorder(BoundedLog[HistoryEntry]):
    """
    Keeps the last 1000 pin transitions.

    Subscribes synchronously to PIN_STATE_CHANGED so that a transition is
    recorded before the mutating call returns.
    """

    def __init__(self, event_bus: EventBus, enabled: bool = True):
        super().__init__(HISTORY_CAPACITY, enabled)
        self.event_bus = event_bus
        event_bus.subscribe(EventType.PIN_STATE_CHANGED, self.on_pin_state_changed, priority=100)
        log.debug("HistoryRecorder subscribed", capacity=HISTORY_CAPACITY, enabled=enabled)

    def on_pin_state_changed(self, event: PinStateChangedEvent) -> None:
        self.record(event.pin.id, event.pin.state)

    def record(self, pin_id: int, state: bool) -> bool:
        return self.append(HistoryEntry(
            timestamp=datetime.now(),
            pin_id=pin_id,
            state=state,
            value=1 if state else 0,
        ))

    def for_pin(self, pin_id: int) -> List[HistoryEntry]:
        return [e for e in self.export() if e.pin_id == pin_id]
