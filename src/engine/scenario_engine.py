"""
Scenario Engine

Drives one scenario at a time through its steps, suspending for each step's
delay. State machine: IDLE -> RUNNING -> IDLE.

Every run gets a RunHandle stamped with a fresh epoch. stop() and run()
bump the engine epoch and cancel the pending sleep synchronously; a
continuation that wakes up with a stale epoch exits without touching any
pin.

Run state is guarded by the PinRegistry lock: steps mutate pins under it and
pin change subscribers may call stop() from any thread.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Optional

from models.domain.pin import Pin
from models.domain.scenario import Scenario, ScenarioStep
from models.enums import EngineState, PinMode, StepAction, StopReason
from models.errors import ValidationError
from models.events import (
    EventSource,
    ScenarioLoopedEvent,
    ScenarioStartedEvent,
    ScenarioStepExecutedEvent,
    ScenarioStoppedEvent,
)
from services.event_bus import EventBus
from services.event_log import EventLog
from services.pin_registry import PinRegistry
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SCENARIO)


@dataclass
class RunHandle:
    """Everything the engine knows about one run; discarded when it ends"""
    epoch: int
    scenario: Scenario
    task: Optional[asyncio.Task] = None
    step_index: int = 0
    iteration: int = 0

    def cancel(self) -> None:
        task = self.task
        if task is None or task.done():
            return
        loop = task.get_loop()
        if loop.is_closed():
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            if task is not asyncio.current_task():
                task.cancel()
        else:
            loop.call_soon_threadsafe(task.cancel)


class ScenarioEngine:
    """
    Cooperative, cancellable scenario sequencer.

    Only one scenario runs at a time. Calling run() while another scenario is
    active stops that run first (last writer wins). Pins are not locked
    against external writers; each step computes its outcome from its own
    action, except TOGGLE which inverts the level seen when the step runs.
    """

    def __init__(self, registry: PinRegistry, event_log: EventLog, event_bus: EventBus):
        self.registry = registry
        self.event_log = event_log
        self.event_bus = event_bus

        self.state = EngineState.IDLE
        self._run: Optional[RunHandle] = None
        self._epoch = 0
        self._lock = registry.lock

    # ============================================================
    # Core control methods
    # ============================================================

    def run(self, scenario: Scenario) -> int:
        """
        Start executing `scenario` from step 0; returns the run epoch.

        Must be called with a running event loop. Raises ValidationError
        for a scenario without steps (nothing changes in that case).
        """
        if not scenario.steps:
            self.event_log.error(f"Scenario {scenario.name} has no steps")
            raise ValidationError("Scenario must have at least one step", details={"scenario_id": scenario.id})

        loop = asyncio.get_running_loop()

        with self._lock:
            if self._run is not None:
                self.event_log.warning(
                    f"Replacing active scenario: {self._run.scenario.name} -> {scenario.name}"
                )
                self._finish(StopReason.REPLACED)

            self._epoch += 1
            handle = RunHandle(epoch=self._epoch, scenario=scenario)
            self._run = handle
            self.state = EngineState.RUNNING

            self.event_log.info(f"Running scenario: {scenario.name}")
            self.event_bus.emit(ScenarioStartedEvent(scenario.id, handle.epoch))

            handle.task = loop.create_task(
                self._run_loop(handle),
                name=f"scenario:{scenario.id}:{handle.epoch}",
            )
            return handle.epoch

    def stop(self) -> bool:
        """
        Stop the active run. Idempotent: returns False when already idle.

        Once this returns, no further step of the stopped run executes.
        """
        with self._lock:
            if self._run is None:
                return False
            self._finish(StopReason.STOPPED)
        self.event_log.info("Stopped scenario execution")
        return True

    async def wait(self) -> None:
        """Wait for the current run (if any) to end"""
        handle = self._run
        if handle is not None and handle.task is not None:
            await asyncio.wait({handle.task})

    # ------------------------------------------------------------
    # Runtime helpers
    # ------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self.state is EngineState.RUNNING

    @property
    def active_scenario(self) -> Optional[Scenario]:
        handle = self._run
        return handle.scenario if handle else None

    @property
    def epoch(self) -> int:
        return self._epoch

    def status(self) -> Dict[str, Any]:
        handle = self._run
        return {
            "state": self.state.name,
            "scenario_id": handle.scenario.id if handle else None,
            "scenario_name": handle.scenario.name if handle else None,
            "step_index": handle.step_index if handle else None,
            "iteration": handle.iteration if handle else None,
            "epoch": self._epoch,
        }

    # ------------------------------------------------------------
    # Internal run loop
    # ------------------------------------------------------------

    def _is_current(self, handle: RunHandle) -> bool:
        return self._run is handle and handle.epoch == self._epoch

    def _finish(self, reason: StopReason) -> None:
        """Tear down the active run (lock held)"""
        handle = self._run
        self._run = None
        self._epoch += 1
        self.state = EngineState.IDLE
        handle.cancel()
        self.event_bus.emit(ScenarioStoppedEvent(handle.scenario.id, reason))
        log.info("Scenario run ended", scenario=handle.scenario.name, reason=reason.value)

    async def _run_loop(self, handle: RunHandle) -> None:
        scenario = handle.scenario
        try:
            while True:
                with self._lock:
                    if not self._is_current(handle):
                        return

                    if handle.step_index >= len(scenario.steps):
                        if not scenario.loop:
                            self.event_log.info(f"Scenario completed: {scenario.name}")
                            self._finish(StopReason.COMPLETED)
                            return
                        handle.step_index = 0
                        handle.iteration += 1
                        self.event_log.info(f"Looping scenario: {scenario.name}")
                        self.event_bus.emit(ScenarioLoopedEvent(scenario.id, handle.iteration))

                    step = scenario.steps[handle.step_index]
                    self._execute_step(handle, step)

                await asyncio.sleep(max(0, step.delay_ms) / 1000)
                handle.step_index += 1

        except asyncio.CancelledError:
            log.debug(f"Scenario task for {scenario.name} cancelled", epoch=handle.epoch)
            # Cancelled from outside the engine (loop shutdown)
            with self._lock:
                if self._is_current(handle):
                    self._finish(StopReason.STOPPED)

    def _execute_step(self, handle: RunHandle, step: ScenarioStep) -> None:
        scenario = handle.scenario
        number = handle.step_index + 1
        action = step.known_action

        if action is None:
            self.event_log.warning(
                f"Unknown action '{step.action_name}' in step {number} of scenario: {scenario.name}"
            )
            changed, missing = [], []
        else:
            changed, missing = self.registry.update_pins(
                step.pin_ids,
                self._mutator(handle, step, action),
                EventSource.SCENARIO_ENGINE,
            )

        if missing:
            self.event_log.warning(
                f"Step {number} of scenario {scenario.name} references unknown pins: {missing}"
            )

        self.event_log.info(f"Executed step {number} of scenario: {scenario.name}")
        self.event_bus.emit(ScenarioStepExecutedEvent(scenario.id, handle.step_index, len(changed)))

    def _mutator(self, handle: RunHandle, step: ScenarioStep, action: StepAction):
        def mutate(pin: Pin) -> Optional[Dict[str, Any]]:
            if not self._is_current(handle):
                return None
            if action is StepAction.ON:
                return {"state": True}
            if action is StepAction.OFF:
                return {"state": False}
            if action is StepAction.TOGGLE:
                return {"state": not pin.state}
            if action is StepAction.PWM:
                # Only pins already in PWM mode follow a PWM step
                if pin.mode is not PinMode.PWM or step.value is None:
                    return None
                return {"duty_cycle": step.value, "state": step.value > 0}
            return None

        return mutate
