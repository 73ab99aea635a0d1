from dataclasses import dataclass

from models.enums import StopReason
from models.events.base import Event
from models.events.types import EventType
from models.events.sources import EventSource


@dataclass(init=False)
class ScenarioStartedEvent(Event):
    scenario_id: str
    epoch: int

    def __init__(self, scenario_id: str, epoch: int):
        super().__init__(type=EventType.SCENARIO_STARTED, source=EventSource.SCENARIO_ENGINE)
        self.scenario_id = scenario_id
        self.epoch = epoch


@dataclass(init=False)
class ScenarioStepExecutedEvent(Event):
    scenario_id: str
    step_index: int
    affected: int

    def __init__(self, scenario_id: str, step_index: int, affected: int):
        super().__init__(type=EventType.SCENARIO_STEP_EXECUTED, source=EventSource.SCENARIO_ENGINE)
        self.scenario_id = scenario_id
        self.step_index = step_index
        self.affected = affected


@dataclass(init=False)
class ScenarioLoopedEvent(Event):
    scenario_id: str
    iteration: int

    def __init__(self, scenario_id: str, iteration: int):
        super().__init__(type=EventType.SCENARIO_LOOPED, source=EventSource.SCENARIO_ENGINE)
        self.scenario_id = scenario_id
        self.iteration = iteration


@dataclass(init=False)
class ScenarioStoppedEvent(Event):
    scenario_id: str
    reason: StopReason

    def __init__(self, scenario_id: str, reason: StopReason):
        super().__init__(type=EventType.SCENARIO_STOPPED, source=EventSource.SCENARIO_ENGINE)
        self.scenario_id = scenario_id
        self.reason = reason
