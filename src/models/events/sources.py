from enum import Enum, auto


class EventSource(Enum):
    """Who caused a change"""
    MANUAL = auto()           # Direct pin commands (UI, API, CLI)
    SCENARIO_ENGINE = auto()  # Scenario step execution
    RECONCILIATION = auto()   # Authoritative snapshot from a remote peer
    INPUT_REFRESH = auto()    # Simulated input noise
    SYSTEM = auto()           # Initialization, preset load, import
