from enum import Enum, auto


class EventType(Enum):
    # Pin registry
    PIN_STATE_CHANGED = auto()
    PIN_CONFIG_CHANGED = auto()
    PINS_INITIALIZED = auto()
    PINS_RECONCILED = auto()

    # Scenario engine
    SCENARIO_STARTED = auto()
    SCENARIO_STEP_EXECUTED = auto()
    SCENARIO_LOOPED = auto()
    SCENARIO_STOPPED = auto()
