"""Service Container - Dependency injection container for all core services"""

from dataclasses import dataclass

from engine.scenario_engine import ScenarioEngine
from managers.config_manager import ConfigManager
from services.event_bus import EventBus
from services.event_log import EventLog
from services.group_service import GroupService
from services.history_recorder import HistoryRecorder
from services.pin_registry import PinRegistry
from services.preset_service import PresetService
from services.scenario_service import ScenarioService
from services.simulator_service import SimulatorService


@dataclass
class ServiceContainer:
    """
    Centralized dependency injection container for all core services and managers.

    API endpoints talk to `simulator` (the command surface); the lower-level
    services are exposed for tests and diagnostics.

    Usage:
        services = ServiceContainer.build(config_manager)
        services.simulator.initialize()

        @app.get("/api/v1/pins")
        async def list_pins(services: ServiceContainer = Depends(get_service_container)):
            return services.simulator.snapshot_pins()
    """

    config_manager: ConfigManager
    event_bus: EventBus
    registry: PinRegistry
    history: HistoryRecorder
    event_log: EventLog
    engine: ScenarioEngine
    groups: GroupService
    scenarios: ScenarioService
    presets: PresetService
    simulator: SimulatorService

    @classmethod
    def build(cls, config_manager: ConfigManager) -> "ServiceContainer":
        """Wire every service from a loaded ConfigManager"""
        settings = config_manager.settings

        event_bus = EventBus()
        registry = PinRegistry(event_bus)
        history = HistoryRecorder(event_bus, enabled=settings.history_enabled)
        event_log = EventLog(enabled=settings.event_log_enabled)
        engine = ScenarioEngine(registry, event_log, event_bus)
        groups = GroupService(registry)
        scenarios = ScenarioService()
        presets = PresetService(registry)
        simulator = SimulatorService(
            config_manager=config_manager,
            registry=registry,
            history=history,
            event_log=event_log,
            engine=engine,
            groups=groups,
            scenarios=scenarios,
            presets=presets,
        )

        return cls(
            config_manager=config_manager,
            event_bus=event_bus,
            registry=registry,
            history=history,
            event_log=event_log,
            engine=engine,
            groups=groups,
            scenarios=scenarios,
            presets=presets,
            simulator=simulator,
        )
