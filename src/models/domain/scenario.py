"""
Scenario domain models

A scenario is an ordered list of timed steps, optionally looping.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from models.enums import StepAction


@dataclass(frozen=True)
class ScenarioStep:
    """
    Single timed action.

    `action` holds a StepAction when recognised, otherwise the raw value as
    supplied. Unrecognised actions are kept so the engine can treat them as
    a per-pin no-op instead of rejecting the whole scenario.
    """
    pin_ids: Tuple[int, ...]
    action: Union[StepAction, str]
    delay_ms: int = 0
    value: Optional[int] = None

    @property
    def known_action(self) -> Optional[StepAction]:
        return self.action if isinstance(self.action, StepAction) else None

    @property
    def action_name(self) -> str:
        return self.action.value if isinstance(self.action, StepAction) else str(self.action)


@dataclass
class Scenario:
    """User-authored automation sequence"""
    id: str
    name: str
    steps: List[ScenarioStep] = field(default_factory=list)
    description: str = ""
    loop: bool = False
