"""Pin domain models"""

from dataclasses import dataclass, field, replace
from typing import Optional, Set

from models.enums import PinMode

PIN_COLORS = [
    "red",
    "green",
    "blue",
    "yellow",
    "purple",
    "pink",
    "orange",
    "cyan",
    "lime",
    "teal",
    "indigo",
    "amber",
]


def default_pin_color(pin_id: int) -> str:
    """Display colour a pin gets when nothing else is configured"""
    return PIN_COLORS[pin_id % len(PIN_COLORS)]


@dataclass
class Pin:
    """
    Mutable pin record owned by PinRegistry.

    `value` is derived from `state`, so the two can never disagree.
    Pull-up/pull-down exclusivity and the duty cycle range are enforced by
    the registry's mutation operations.
    """
    id: int
    name: str
    mode: PinMode = PinMode.OUTPUT
    state: bool = False
    duty_cycle: int = 0
    pull_up: bool = False
    pull_down: bool = False
    interrupt_enabled: bool = False
    color: str = ""
    group: Optional[str] = None
    notes: str = ""

    def __post_init__(self):
        if not self.color:
            self.color = default_pin_color(self.id)

    @property
    def value(self) -> int:
        """Numeric projection of state"""
        return 1 if self.state else 0

    def copy(self) -> "Pin":
        return replace(self)

    @classmethod
    def default(cls, pin_id: int) -> "Pin":
        """Fresh pin as created on board initialization"""
        return cls(id=pin_id, name=f"GPIO {pin_id}")


@dataclass
class PinGroup:
    """Named set of pins. Pins refer back to it weakly by id."""
    id: str
    name: str
    color: str
    pins: Set[int] = field(default_factory=set)
