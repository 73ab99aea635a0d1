"""
Simulator service - command surface of the GPIO simulator

Single entry point used by the REST layer and any other collaborator (CLI,
socket listener). Commands delegate to the registry, the engine and the
collection services; every rejected command is reported to the EventLog
before the error reaches the caller.
"""

import asyncio
import random
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from engine.scenario_engine import ScenarioEngine
from managers.config_manager import ConfigManager
from models.domain import BoardSpec, PinGroup, Preset, Scenario
from models.enums import LogSeverity
from models.errors import NotFoundError, SimulatorError
from models.events import EventSource
from models.payloads import parse_external_pins, parse_pin_records
from services.event_log import EventLog
from services.group_service import GroupService
from services.history_recorder import HistoryRecorder
from services.pin_registry import PinRegistry
from services.preset_service import PresetService
from services.scenario_service import ScenarioService, StepInput
from utils.logger import get_logger, LogCategory
from utils.serialization import Serializer

log = get_logger().for_category(LogCategory.SYSTEM)
reconcile_log = get_logger().for_category(LogCategory.RECONCILE)


class SimulatorService:
    """High-level simulator operations returning plain serializable data"""

    def __init__(
        self,
        config_manager: ConfigManager,
        registry: PinRegistry,
        history: HistoryRecorder,
        event_log: EventLog,
        engine: ScenarioEngine,
        groups: GroupService,
        scenarios: ScenarioService,
        presets: PresetService,
    ):
        self.config_manager = config_manager
        self.registry = registry
        self.history = history
        self.event_log = event_log
        self.engine = engine
        self.groups = groups
        self.scenarios = scenarios
        self.presets = presets

        self._refresh_task: Optional[asyncio.Task] = None

    @contextmanager
    def _reported(self) -> Iterator[None]:
        """Mirror any rejected command into the EventLog, then re-raise"""
        try:
            yield
        except NotFoundError as e:
            self.event_log.add(e.message, LogSeverity.WARNING)
            raise
        except SimulatorError as e:
            self.event_log.add(e.message, LogSeverity.ERROR)
            raise

    # ========================================================================
    # BOARD
    # ========================================================================

    def list_boards(self) -> List[BoardSpec]:
        return self.config_manager.list_boards()

    def initialize(self, model: Optional[str] = None) -> List[Dict[str, Any]]:
        """Replace all pins with the board's GPIOs (default board when None)"""
        with self._reported():
            board = self.config_manager.get_board(model)
            # No step may land between the pin replacement and the stop
            with self.registry.lock:
                pins = self.registry.initialize(board)
                self.engine.stop()
        self.groups.resync()
        self.event_log.info(f"System initialized: {board.model} with {len(pins)} pins")
        return [Serializer.pin_to_dict(pin) for pin in pins]

    # ========================================================================
    # PIN COMMANDS
    # ========================================================================

    def get_pin(self, pin_id: int) -> Dict[str, Any]:
        with self._reported():
            return Serializer.pin_to_dict(self.registry.get(pin_id))

    def toggle(self, pin_id: int) -> Dict[str, Any]:
        with self._reported():
            pin = self.registry.toggle(pin_id)
        self.event_log.info(f"Pin {pin.name} turned {'ON' if pin.state else 'OFF'}")
        return Serializer.pin_to_dict(pin)

    def set_state(self, pin_id: int, state: bool) -> Dict[str, Any]:
        with self._reported():
            pin = self.registry.set_state(pin_id, state)
        self.event_log.info(f"Pin {pin.name} turned {'ON' if pin.state else 'OFF'}")
        return Serializer.pin_to_dict(pin)

    def set_mode(self, pin_id: int, mode: Any) -> Dict[str, Any]:
        with self._reported():
            pin = self.registry.set_mode(pin_id, mode)
        self.event_log.info(f"Pin {pin.name} mode changed to {pin.mode.value}")
        return Serializer.pin_to_dict(pin)

    def set_duty_cycle(self, pin_id: int, duty: int) -> Dict[str, Any]:
        with self._reported():
            pin = self.registry.set_duty_cycle(pin_id, duty)
        self.event_log.info(f"Pin {pin.name} PWM value set to {pin.duty_cycle}%")
        return Serializer.pin_to_dict(pin)

    def apply_config(self, pin_id: int, fields: Mapping[str, Any]) -> Dict[str, Any]:
        with self._reported():
            pin = self.registry.apply_config(pin_id, fields)
        self.event_log.info(f"Pin {pin.name} configuration updated")
        return Serializer.pin_to_dict(pin)

    def refresh_pin_states(self, rng: Optional[random.Random] = None) -> List[Dict[str, Any]]:
        """Randomly flip input pins, as if their external signal changed"""
        changed = self.registry.refresh_inputs(rng)
        for pin in changed:
            self.event_log.info(f"Input pin {pin.name} changed to {'HIGH' if pin.state else 'LOW'}")
        self.event_log.info("Pin states refreshed")
        return [Serializer.pin_to_dict(pin) for pin in changed]

    # ========================================================================
    # QUERY / EXPORT / IMPORT
    # ========================================================================

    def snapshot_pins(self) -> List[Dict[str, Any]]:
        return [Serializer.pin_to_dict(pin) for pin in self.registry.snapshot()]

    def export_pins(self) -> List[Dict[str, Any]]:
        """Ordered pin records in the import format"""
        return self.snapshot_pins()

    def import_pins(self, payload: Any) -> List[Dict[str, Any]]:
        """Replace the whole pin set; a malformed payload changes nothing"""
        try:
            records = parse_pin_records(payload)
            self.registry.restore(records, EventSource.SYSTEM)
        except SimulatorError as e:
            self.event_log.error(f"Failed to import configuration: {e.message}")
            raise
        self.groups.resync()
        self.event_log.info("Configuration imported successfully")
        return self.snapshot_pins()

    def reconcile(self, payload: Any) -> List[Dict[str, Any]]:
        """
        Merge an authoritative external pin list (transport hook).

        Accepts a list of partial records, a {"pins": [...]} wrapper or the
        JSON text of either. A malformed payload is reported to the EventLog
        and raises TransportError; the registry is left unchanged.
        """
        try:
            records = parse_external_pins(payload)
        except SimulatorError as e:
            self.event_log.error(e.message)
            reconcile_log.warn("Rejected reconciliation payload", error=e.message)
            raise
        updated = self.registry.reconcile(records)
        self.event_log.info("Pins updated from server")
        return [Serializer.pin_to_dict(pin) for pin in updated]

    def export_history(self, newest_first: bool = False) -> List[Dict[str, Any]]:
        return [Serializer.history_to_dict(e) for e in self.history.export(newest_first=newest_first)]

    def export_log(self, newest_first: bool = False) -> List[Dict[str, Any]]:
        return [Serializer.log_to_dict(e) for e in self.event_log.export(newest_first=newest_first)]

    def export_log_text(self) -> str:
        return self.event_log.to_text(newest_first=True)

    def clear_history(self) -> None:
        self.history.clear()
        self.event_log.info("Pin history cleared")

    def clear_log(self) -> None:
        self.event_log.clear()
        self.event_log.info("Logs cleared")

    def set_history_enabled(self, enabled: bool) -> None:
        self.history.enabled = bool(enabled)
        log.info("Pin history recording " + ("enabled" if enabled else "disabled"))

    def set_log_enabled(self, enabled: bool) -> None:
        self.event_log.enabled = bool(enabled)
        log.info("Event log recording " + ("enabled" if enabled else "disabled"))

    # ========================================================================
    # GROUP COMMANDS
    # ========================================================================

    def list_groups(self) -> List[PinGroup]:
        return self.groups.get_all()

    def create_group(self, name: str, color: str, pin_ids: Iterable[int]) -> PinGroup:
        with self._reported():
            group = self.groups.create_group(name, color, pin_ids)
        self.event_log.info(f"Created pin group: {group.name} with {len(group.pins)} pins")
        return group

    def delete_group(self, group_id: str) -> bool:
        deleted = self.groups.delete_group(group_id)
        if deleted:
            self.event_log.info("Deleted pin group")
        return deleted

    # ========================================================================
    # SCENARIO COMMANDS
    # ========================================================================

    def list_scenarios(self) -> List[Scenario]:
        return self.scenarios.get_all()

    def get_scenario(self, scenario_id: str) -> Scenario:
        with self._reported():
            return self.scenarios.get(scenario_id)

    def create_scenario(
        self,
        name: str,
        steps: Sequence[StepInput],
        loop: bool = False,
        description: str = "",
    ) -> Scenario:
        with self._reported():
            scenario = self.scenarios.create_scenario(name, steps, loop, description)
        self.event_log.info(f"Saved scenario: {scenario.name} with {len(scenario.steps)} steps")
        return scenario

    def delete_scenario(self, scenario_id: str) -> bool:
        """Delete a scenario, stopping it first when it is the one running"""
        active = self.engine.active_scenario
        if active is not None and active.id == scenario_id:
            self.stop()
        deleted = self.scenarios.delete_scenario(scenario_id)
        if deleted:
            self.event_log.info("Deleted scenario")
        return deleted

    def run(self, scenario_id: str) -> int:
        """Start a stored scenario; returns the run epoch"""
        with self._reported():
            scenario = self.scenarios.get(scenario_id)
        return self.engine.run(scenario)

    def stop(self) -> bool:
        return self.engine.stop()

    def status(self) -> Dict[str, Any]:
        return self.engine.status()

    # ========================================================================
    # PRESET COMMANDS
    # ========================================================================

    def list_presets(self) -> List[Preset]:
        return self.presets.get_all()

    def save_preset(self, name: str, description: str = "") -> Preset:
        with self._reported():
            preset = self.presets.save_preset(name, description)
        self.event_log.info(f"Saved preset: {preset.name}")
        return preset

    def load_preset(self, preset_id: str) -> Preset:
        with self._reported():
            preset = self.presets.load_preset(preset_id)
        self.groups.resync()
        self.event_log.info(f"Loaded preset: {preset.name}")
        return preset

    def delete_preset(self, preset_id: str) -> bool:
        deleted = self.presets.delete_preset(preset_id)
        if deleted:
            self.event_log.info("Deleted preset")
        return deleted

    # ========================================================================
    # AUTO REFRESH
    # ========================================================================

    def start_auto_refresh(self, interval_ms: int) -> asyncio.Task:
        """Run refresh_pin_states every interval_ms until stopped"""
        self.stop_auto_refresh()
        self._refresh_task = asyncio.get_running_loop().create_task(
            self._auto_refresh_loop(interval_ms), name="auto-refresh"
        )
        log.info("Auto refresh started", interval_ms=interval_ms)
        return self._refresh_task

    def stop_auto_refresh(self) -> None:
        if self._refresh_task and not self._refresh_task.done():
            self._refresh_task.cancel()
            log.info("Auto refresh stopped")
        self._refresh_task = None

    async def _auto_refresh_loop(self, interval_ms: int) -> None:
        try:
            while True:
                await asyncio.sleep(interval_ms / 1000)
                self.refresh_pin_states()
        except asyncio.CancelledError:
            log.debug("Auto refresh task cancelled")
