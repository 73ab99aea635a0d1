import pytest

from engine.scenario_engine import ScenarioEngine
from managers import ConfigManager
from models.domain import BoardSpec
from services import EventBus, EventLog, GroupService, HistoryRecorder, PinRegistry, ScenarioService
from services.service_container import ServiceContainer

TEST_GPIOS = (2, 3, 4, 5, 6, 17)


@pytest.fixture
def board():
    return BoardSpec(model="Test Board", valid_gpios=TEST_GPIOS)


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def history(event_bus):
    return HistoryRecorder(event_bus)


@pytest.fixture
def event_log():
    return EventLog()


@pytest.fixture
def registry(event_bus, history, board):
    """Registry initialized with the test board; history is already subscribed"""
    reg = PinRegistry(event_bus)
    reg.initialize(board)
    return reg


@pytest.fixture
def engine(registry, event_log, event_bus):
    eng = ScenarioEngine(registry, event_log, event_bus)
    yield eng
    eng.stop()


@pytest.fixture
def groups(registry):
    return GroupService(registry)


@pytest.fixture
def scenarios():
    return ScenarioService()


@pytest.fixture
def config_manager():
    manager = ConfigManager()
    manager.load()
    return manager


@pytest.fixture
def services(config_manager):
    """Fully wired container on the configured default board"""
    container = ServiceContainer.build(config_manager)
    container.simulator.initialize()
    yield container
    container.simulator.stop_auto_refresh()
    container.simulator.stop()
