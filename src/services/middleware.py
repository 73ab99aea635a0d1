"""
Middleware for EventBus

Middleware = pipeline functions that process events before handlers.
Can modify events, block events, or log/validate events.
"""

from models.events import Event, EventType
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.EVENT)

# Events that carry the whole pin list; only their size is logged
_BULK_EVENTS = {EventType.PINS_INITIALIZED, EventType.PINS_RECONCILED}


def log_middleware(event: Event) -> Event:
    """
    Log all events for debugging

    Usage:
        event_bus.add_middleware(log_middleware)
    """
    source_str = event.source.name if event.source else "-"
    data = event.to_data()

    if event.type in _BULK_EVENTS:
        data_str = ", ".join(
            f"{k}={len(v)}" if isinstance(v, list) else f"{k}={v}" for k, v in data.items()
        )
    elif "pin" in data:
        pin = data["pin"]
        data_str = f"pin={pin.id} state={pin.state} duty={pin.duty_cycle}"
    else:
        data_str = str(data)

    log.debug(f"Event: {event.type.name} from {source_str} | {data_str}")
    return event
