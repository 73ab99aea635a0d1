"""Scenario service - validated scenario collection"""

import uuid
from typing import Any, Dict, List, Mapping, Sequence, Union

from models.domain.scenario import Scenario, ScenarioStep
from models.enums import StepAction
from models.errors import NotFoundError, ValidationError
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SCENARIO)

StepInput = Union[ScenarioStep, Mapping[str, Any]]


def _first(raw: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return default


def build_step(raw: StepInput, index: int) -> ScenarioStep:
    """
    Normalise one step.

    Accepts ScenarioStep instances or mappings using either
    `pin_ids`/`delay_ms` or the short `pins`/`delay` keys. An action that is
    not recognised is stored verbatim.
    """
    number = index + 1
    if isinstance(raw, ScenarioStep):
        pin_ids, action, delay, value = raw.pin_ids, raw.action, raw.delay_ms, raw.value
    elif isinstance(raw, Mapping):
        pin_ids = _first(raw, "pin_ids", "pins", default=())
        action = _first(raw, "action", default="")
        delay = _first(raw, "delay_ms", "delay", default=0)
        value = _first(raw, "value")
    else:
        raise ValidationError(f"Step {number} is not a step definition")

    try:
        pin_ids = tuple(dict.fromkeys(int(p) for p in pin_ids))
    except (TypeError, ValueError):
        raise ValidationError(f"Step {number} has invalid pin ids", details={"pins": pin_ids})
    if not pin_ids:
        raise ValidationError(f"Step {number} must target at least one pin")

    if isinstance(delay, bool) or not isinstance(delay, (int, float)) or delay < 0:
        raise ValidationError(f"Step {number} delay must be a non-negative number", details={"delay": delay})

    known = StepAction.parse(action)
    if known is StepAction.PWM:
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 100:
            raise ValidationError(
                f"Step {number} pwm value must be an integer between 0 and 100",
                details={"value": value},
            )
    elif known is not None and value is not None:
        raise ValidationError(f"Step {number} value is only allowed for pwm actions", details={"action": known.value})
    elif known is None:
        log.warn(f"Step {number} has unknown action '{action}', it will have no effect")
        value = None

    return ScenarioStep(
        pin_ids=pin_ids,
        action=known if known is not None else action,
        delay_ms=int(delay),
        value=value,
    )


class ScenarioService:
    """Create, look up and delete scenarios"""

    def __init__(self):
        self._scenarios: Dict[str, Scenario] = {}

    def get(self, scenario_id: str) -> Scenario:
        scenario = self._scenarios.get(scenario_id)
        if scenario is None:
            raise NotFoundError("Scenario", scenario_id)
        return scenario

    def get_all(self) -> List[Scenario]:
        return list(self._scenarios.values())

    def __contains__(self, scenario_id: str) -> bool:
        return scenario_id in self._scenarios

    def create_scenario(
        self,
        name: str,
        steps: Sequence[StepInput],
        loop: bool = False,
        description: str = "",
    ) -> Scenario:
        """Validate and store a scenario; nothing is stored on failure"""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Scenario name is required")
        if not steps:
            raise ValidationError("Scenario must have at least one step")

        built = [build_step(raw, index) for index, raw in enumerate(steps)]
        scenario = Scenario(
            id=f"scenario-{uuid.uuid4().hex[:8]}",
            name=name,
            steps=built,
            description=description or "",
            loop=bool(loop),
        )
        self._scenarios[scenario.id] = scenario
        log.info(f"Scenario created: {name}", id=scenario.id, steps=len(built), loop=scenario.loop)
        return scenario

    def delete_scenario(self, scenario_id: str) -> bool:
        scenario = self._scenarios.pop(scenario_id, None)
        if scenario is None:
            return False
        log.info(f"Scenario deleted: {scenario.name}", id=scenario_id)
        return True
