"""
Pin registry - authoritative pin state

Owns the pin collection. Every mutation runs under a single re-entrant lock,
so writers coming from different execution contexts (scenario engine on the
event loop, transport threads, API handlers) are serialized, and change
events are emitted in mutation order while the lock is held.
"""

import random
import threading
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from models.domain.board import BoardSpec
from models.domain.pin import Pin
from models.enums import PinMode
from models.errors import NotFoundError, ValidationError
from models.events import (
    EventSource,
    PinConfigChangedEvent,
    PinStateChangedEvent,
    PinsInitializedEvent,
    PinsReconciledEvent,
)
from models.payloads import ExternalPinRecord, PinRecord, parse_pin_config
from services.event_bus import EventBus
from utils.enum_helper import EnumHelper
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.PIN)

# Fields applyConfig may touch. State and duty cycle have their own
# operations because they record history.
CONFIG_FIELDS = ("name", "mode", "pull_up", "pull_down", "interrupt_enabled", "color", "notes")

# Fields a reconciliation record may overwrite
RECONCILE_FIELDS = ("name", "mode", "state", "duty_cycle", "pull_up", "pull_down",
                    "interrupt_enabled", "color", "notes")

# Returns the field changes to apply to a pin, or None to leave it alone
PinMutator = Callable[[Pin], Optional[Dict[str, Any]]]


def _validate_duty(duty: Any) -> int:
    if isinstance(duty, bool) or not isinstance(duty, int):
        raise ValidationError("Duty cycle must be an integer", details={"duty_cycle": duty})
    if not 0 <= duty <= 100:
        raise ValidationError("Duty cycle must be between 0 and 100", details={"duty_cycle": duty})
    return duty


def _parse_mode(mode: Any) -> PinMode:
    if isinstance(mode, PinMode):
        return mode
    try:
        return PinMode(str(mode).lower())
    except ValueError:
        raise ValidationError(
            f"Invalid pin mode: {mode}",
            details={"mode": mode, "valid_modes": EnumHelper.list_values(PinMode)},
        )


class PinRegistry:
    """
    Pure state container with validated mutation operations.

    Reads return copies; the stored records are never handed out.
    """

    def __init__(self, event_bus: EventBus):
        self.event_bus = event_bus
        self._pins: Dict[int, Pin] = {}
        self._lock = threading.RLock()
        self.board: Optional[str] = None

    @property
    def lock(self) -> threading.RLock:
        """
        The registry mutation lock.

        Collaborators that keep bookkeeping tied to pin writes (the scenario
        engine) take this same lock instead of their own, so there is a single
        lock order between them and the registry.
        """
        return self._lock

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, pin_id: int) -> Pin:
        with self._lock:
            return self._require(pin_id).copy()

    def find(self, pin_id: int) -> Optional[Pin]:
        with self._lock:
            pin = self._pins.get(pin_id)
            return pin.copy() if pin else None

    def ids(self) -> List[int]:
        with self._lock:
            return list(self._pins)

    def snapshot(self) -> List[Pin]:
        """Deep copy of all pins in board order"""
        with self._lock:
            return [pin.copy() for pin in self._pins.values()]

    def __contains__(self, pin_id: int) -> bool:
        return pin_id in self._pins

    def __len__(self) -> int:
        return len(self._pins)

    # ------------------------------------------------------------------
    # Whole-set replacement
    # ------------------------------------------------------------------

    def initialize(self, board: BoardSpec) -> List[Pin]:
        """
        Replace all pins with fresh ones for the board's valid GPIOs.

        Raises ValidationError for an empty or duplicated GPIO list; the
        previous pin set is kept in that case.
        """
        gpios = list(board.valid_gpios) if board else []
        if not gpios:
            raise ValidationError("Board has no valid GPIOs", details={"board": getattr(board, "model", None)})
        if len(set(gpios)) != len(gpios):
            raise ValidationError("Board GPIO list contains duplicates", details={"board": board.model})

        pins = [Pin.default(gpio) for gpio in gpios]
        self._replace(pins, board.model)
        log.info("Pins initialized", board=board.model, count=len(pins))
        return self.snapshot()

    def restore(self, records: Sequence[PinRecord], source: EventSource = EventSource.SYSTEM) -> List[Pin]:
        """Replace all pins with validated complete records (import, preset)"""
        if not records:
            raise ValidationError("Pin list is empty")
        self._replace([record.to_pin() for record in records], self.board, source)
        log.info("Pins restored", count=len(records))
        return self.snapshot()

    def _replace(self, pins: List[Pin], board: Optional[str], source: EventSource = EventSource.SYSTEM) -> None:
        with self._lock:
            self._pins = {pin.id: pin for pin in pins}
            self.board = board
            self.event_bus.emit(PinsInitializedEvent(self.snapshot(), board, source))

    # ------------------------------------------------------------------
    # Single-pin mutations
    # ------------------------------------------------------------------

    def set_state(self, pin_id: int, state: bool, source: EventSource = EventSource.MANUAL) -> Pin:
        with self._lock:
            pin = self._require(pin_id)
            pin.state = bool(state)
            return self._state_changed(pin, source)

    def toggle(self, pin_id: int, source: EventSource = EventSource.MANUAL) -> Pin:
        with self._lock:
            pin = self._require(pin_id)
            pin.state = not pin.state
            return self._state_changed(pin, source)

    def set_mode(self, pin_id: int, mode: Any) -> Pin:
        mode = _parse_mode(mode)
        with self._lock:
            pin = self._require(pin_id)
            pin.mode = mode
            return self._config_changed(pin, ("mode",))

    def set_duty_cycle(self, pin_id: int, duty: int, source: EventSource = EventSource.MANUAL) -> Pin:
        """Set PWM duty; out-of-range values are rejected, never clamped"""
        duty = _validate_duty(duty)
        with self._lock:
            pin = self._require(pin_id)
            pin.duty_cycle = duty
            pin.state = duty > 0
            return self._state_changed(pin, source)

    def apply_config(self, pin_id: int, fields: Mapping[str, Any]) -> Pin:
        """
        Merge only the supplied configuration fields.

        Setting pull_up or pull_down to True clears the other one. The
        whole call is validated before anything is written.
        """
        unknown = set(fields) - set(CONFIG_FIELDS)
        if unknown:
            raise ValidationError(
                "Unsupported configuration fields",
                details={"fields": sorted(unknown), "allowed": list(CONFIG_FIELDS)},
            )
        changes = parse_pin_config(fields).changes()

        with self._lock:
            pin = self._require(pin_id)
            self._merge(pin, changes)
            return self._config_changed(pin, tuple(changes))

    def assign_group(self, pin_ids: Iterable[int], group_id: Optional[str]) -> List[Pin]:
        """Set (or clear with None) the group reference; unknown ids are skipped"""
        updated = []
        with self._lock:
            for pin_id in pin_ids:
                pin = self._pins.get(pin_id)
                if pin is None:
                    continue
                pin.group = group_id
                updated.append(self._config_changed(pin, ("group",)))
        return updated

    def clear_group(self, group_id: str) -> List[Pin]:
        """Drop `group_id` from every pin that references it"""
        with self._lock:
            members = [pin.id for pin in self._pins.values() if pin.group == group_id]
            return self.assign_group(members, None)

    # ------------------------------------------------------------------
    # Batch mutations
    # ------------------------------------------------------------------

    def update_pins(
        self,
        pin_ids: Iterable[int],
        mutator: PinMutator,
        source: EventSource = EventSource.MANUAL,
    ) -> Tuple[List[Pin], List[int]]:
        """
        Apply `mutator` to each listed pin as one logical update.

        Returns (changed pins, unknown ids). Unknown ids do not abort the
        batch. One PinStateChangedEvent is emitted per changed pin, inside
        the lock, before this call returns.
        """
        changed: List[Pin] = []
        missing: List[int] = []
        with self._lock:
            for pin_id in dict.fromkeys(pin_ids):
                pin = self._pins.get(pin_id)
                if pin is None:
                    missing.append(pin_id)
                    continue
                changes = mutator(pin)
                if changes is None:
                    continue
                self._merge(pin, changes)
                changed.append(self._state_changed(pin, source))
        return changed, missing

    def refresh_inputs(self, rng: Optional[random.Random] = None, probability: float = 0.3) -> List[Pin]:
        """Simulate noise on input pins: each may flip to a random level"""
        rng = rng or random.Random()
        changed = []
        with self._lock:
            for pin in self._pins.values():
                if pin.mode is not PinMode.INPUT:
                    continue
                if rng.random() < probability:
                    pin.state = rng.random() > 0.5
                    changed.append(self._state_changed(pin, EventSource.INPUT_REFRESH))
        return changed

    def reconcile(self, records: Sequence[ExternalPinRecord]) -> List[Pin]:
        """
        Merge an authoritative external snapshot.

        Each record matches a local pin by id first, then by name. Matched
        pins get only the fields the record supplies; unmatched records are
        ignored and unmatched local pins are untouched.
        """
        updated: List[Pin] = []
        ignored = 0
        with self._lock:
            by_name = {pin.name: pin for pin in self._pins.values()}
            for record in records:
                pin = self._pins.get(record.id) if record.id is not None else None
                if pin is None and record.name is not None:
                    pin = by_name.get(record.name)
                if pin is None:
                    ignored += 1
                    continue

                changes = {k: v for k, v in record.supplied_fields().items() if k in RECONCILE_FIELDS}
                if not changes:
                    continue
                previous_state = pin.state
                old_name = pin.name
                self._merge(pin, changes)
                if pin.name != old_name:
                    by_name.pop(old_name, None)
                    by_name[pin.name] = pin

                if pin.state != previous_state or "duty_cycle" in changes:
                    self.event_bus.emit(PinStateChangedEvent(pin.copy(), EventSource.RECONCILIATION))
                updated.append(pin.copy())

            self.event_bus.emit(PinsReconciledEvent(updated, ignored))

        log.info("External snapshot reconciled", updated=len(updated), ignored=ignored)
        return updated

    # ------------------------------------------------------------------
    # Internals (call with the lock held)
    # ------------------------------------------------------------------

    def _require(self, pin_id: int) -> Pin:
        pin = self._pins.get(pin_id)
        if pin is None:
            raise NotFoundError("Pin", pin_id)
        return pin

    @staticmethod
    def _merge(pin: Pin, changes: Mapping[str, Any]) -> None:
        for key, value in changes.items():
            setattr(pin, key, value)
        if changes.get("pull_up"):
            pin.pull_down = False
        elif changes.get("pull_down"):
            pin.pull_up = False

    def _state_changed(self, pin: Pin, source: EventSource) -> Pin:
        copy = pin.copy()
        self.event_bus.emit(PinStateChangedEvent(copy, source))
        log.debug(f"Pin {pin.name} turned {'ON' if pin.state else 'OFF'}", source=source.name)
        return copy.copy()

    def _config_changed(self, pin: Pin, fields: Tuple[str, ...]) -> Pin:
        copy = pin.copy()
        self.event_bus.emit(PinConfigChangedEvent(copy, fields))
        return copy.copy()
