"""
Event Bus - Central event routing system

Implements pub-sub pattern:
- Publishers: publish(event) (async) or emit(event) (sync)
- Subscribers: subscribe(event_type, handler, priority, filter_fn)
- Middleware: add_middleware(middleware_fn)
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from models.events import Event, EventType
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.EVENT)


@dataclass
class EventHandler:
    """Event handler registration"""
    handler: Callable[[Event], None]
    priority: int
    filter_fn: Optional[Callable[[Event], bool]]


class EventBus:
    """
    Central event bus for pub-sub event handling

    Features:
    - Priority-based handler execution (high priority first)
    - Per-handler filtering
    - Middleware pipeline (logging, blocking)
    - Async/sync handler support (auto-detected)
    - Fault tolerance (one handler crash doesn't stop others)

    `emit()` is the synchronous path used by mutation operations that must
    have their sync subscribers run before returning (history recording).
    Coroutine handlers reached through `emit()` are scheduled on the running
    loop, or on the loop given to `bind_loop()` when emitting from another
    thread.

    Example:
        bus = EventBus()
        bus.subscribe(EventType.PIN_STATE_CHANGED, recorder.on_pin_changed)
        bus.emit(PinStateChangedEvent(pin))
    """

    def __init__(self, history_limit: int = 100):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._middleware: List[Callable[[Event], Optional[Event]]] = []
        self._event_history: List[Event] = []
        self._history_limit = history_limit
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Loop used for coroutine handlers when emit() runs outside of it"""
        self._loop = loop

    def subscribe(
        self,
        event_type: EventType,
        handler: Callable[[Event], None],
        priority: int = 0,
        filter_fn: Optional[Callable[[Event], bool]] = None
    ) -> None:
        """
        Subscribe to event type

        Args:
            event_type: Which events to listen for
            handler: Function to call (can be async or sync)
            priority: Execution priority (higher = called first, default: 0)
            filter_fn: Optional filter (return True = handle, False = skip)
        """
        handlers = self._handlers.setdefault(event_type, [])
        handlers.append(EventHandler(handler, priority, filter_fn))
        handlers.sort(key=lambda h: h.priority, reverse=True)

        log.debug(
            "Event handler subscribed",
            event_type=event_type.name,
            handler=getattr(handler, "__name__", repr(handler)),
            priority=priority
        )

    def unsubscribe(self, event_type: EventType, handler: Callable[[Event], None]) -> None:
        handlers = self._handlers.get(event_type, [])
        self._handlers[event_type] = [h for h in handlers if h.handler != handler]

    def add_middleware(self, middleware: Callable[[Event], Optional[Event]]) -> None:
        """
        Add middleware to event processing pipeline

        Middleware may return a modified event, or None to block it.
        Runs in registration order.
        """
        self._middleware.append(middleware)

    def _prepare(self, event: Event) -> Optional[Event]:
        for middleware in self._middleware:
            event = middleware(event)
            if event is None:
                return None

        self._event_history.append(event)
        if len(self._event_history) > self._history_limit:
            self._event_history.pop(0)
        return event

    def _matching(self, event: Event) -> List[EventHandler]:
        return [
            entry for entry in self._handlers.get(event.type, [])
            if entry.filter_fn is None or entry.filter_fn(event)
        ]

    async def publish(self, event: Event) -> None:
        """
        Publish event to all subscribers, awaiting coroutine handlers in
        priority order.
        """
        event = self._prepare(event)
        if event is None:
            return

        for entry in self._matching(event):
            try:
                if asyncio.iscoroutinefunction(entry.handler):
                    await entry.handler(event)
                else:
                    entry.handler(event)
            except Exception as e:
                log.error(
                    f"Event handler failed: {entry.handler.__name__} for {event.type.name}",
                    exception=e
                )

    def emit(self, event: Event) -> None:
        """Synchronous publish; coroutine handlers are scheduled, not awaited"""
        event = self._prepare(event)
        if event is None:
            return

        for entry in self._matching(event):
            if asyncio.iscoroutinefunction(entry.handler):
                self._schedule(entry, event)
                continue
            try:
                entry.handler(event)
            except Exception as e:
                log.error(
                    f"Event handler failed: {entry.handler.__name__} for {event.type.name}",
                    exception=e
                )

    def _schedule(self, entry: EventHandler, event: Event) -> None:
        try:
            asyncio.get_running_loop().create_task(self._guarded(entry, event))
            return
        except RuntimeError:
            pass

        if self._loop is not None and self._loop.is_running():
            asyncio.run_coroutine_threadsafe(self._guarded(entry, event), self._loop)
        else:
            log.warn(
                "No running loop for async handler, event not delivered",
                handler=entry.handler.__name__,
                event_type=event.type.name
            )

    async def _guarded(self, entry: EventHandler, event: Event) -> None:
        try:
            await entry.handler(event)
        except Exception as e:
            log.error(
                f"Event handler failed: {entry.handler.__name__} for {event.type.name}",
                exception=e
            )

    def get_event_history(self, limit: int = 10) -> List[Event]:
        """Recent events, newest last"""
        return self._event_history[-limit:]

    def clear_history(self) -> None:
        self._event_history.clear()
