"""
ScenarioEngine timing, cancellation and replacement.

Delays are tens of milliseconds; assertions sample well inside each hold
window to tolerate scheduler jitter.
"""

import asyncio
import threading

import pytest

from models.domain import Scenario, ScenarioStep
from models.enums import EngineState, PinMode, StepAction, StopReason
from models.errors import ValidationError
from models.events import EventSource, EventType


def make_scenario(steps, loop=False, name="test", scenario_id="scenario-test"):
    return Scenario(id=scenario_id, name=name, steps=steps, loop=loop)


def step(pins, action, delay_ms=0, value=None):
    return ScenarioStep(pin_ids=tuple(pins), action=action, delay_ms=delay_ms, value=value)


def messages(event_log):
    return [e.message for e in event_log.export()]


@pytest.mark.asyncio
async def test_on_off_sequence_timing(engine, registry):
    scenario = make_scenario([
        step([2, 3], StepAction.ON, 100),
        step([2, 3], StepAction.OFF, 100),
    ])

    engine.run(scenario)
    assert engine.state is EngineState.RUNNING

    await asyncio.sleep(0.03)
    assert registry.get(2).state and registry.get(3).state
    assert registry.get(2).value == 1

    await asyncio.sleep(0.12)  # t ~ 150ms
    assert not registry.get(2).state and not registry.get(3).state
    assert engine.state is EngineState.RUNNING

    await asyncio.sleep(0.15)  # t ~ 300ms
    assert engine.state is EngineState.IDLE
    assert engine.active_scenario is None


@pytest.mark.asyncio
async def test_transitions_recorded_before_delay(engine, history):
    engine.run(make_scenario([step([2, 3], StepAction.ON, 200)]))

    await asyncio.sleep(0.02)

    assert engine.is_running
    assert [(e.pin_id, e.state) for e in history.export()] == [(2, True), (3, True)]


@pytest.mark.asyncio
async def test_completion_logs_and_emits_stop(engine, event_bus, event_log):
    stops = []
    event_bus.subscribe(EventType.SCENARIO_STOPPED, stops.append)

    engine.run(make_scenario([step([4], StepAction.TOGGLE, 0)], name="blink"))
    await engine.wait()

    assert engine.state is EngineState.IDLE
    assert [s.reason for s in stops] == [StopReason.COMPLETED]
    assert "Running scenario: blink" in messages(event_log)
    assert "Executed step 1 of scenario: blink" in messages(event_log)
    assert "Scenario completed: blink" in messages(event_log)


@pytest.mark.asyncio
async def test_stop_prevents_further_steps(engine, registry, history):
    engine.run(make_scenario([
        step([2], StepAction.ON, 50),
        step([3], StepAction.ON, 50),
    ]))
    await asyncio.sleep(0.01)

    assert engine.stop() is True
    assert engine.state is EngineState.IDLE
    recorded = len(history)

    await asyncio.sleep(0.15)
    assert registry.get(2).state is True
    assert registry.get(3).state is False
    assert len(history) == recorded


@pytest.mark.asyncio
async def test_stop_is_idempotent(engine, event_log):
    engine.run(make_scenario([step([2], StepAction.ON, 100)]))
    await asyncio.sleep(0)

    assert engine.stop() is True
    epoch = engine.epoch
    assert engine.stop() is False
    assert engine.epoch == epoch
    assert messages(event_log).count("Stopped scenario execution") == 1


def test_stop_when_idle_is_noop(engine):
    assert engine.stop() is False
    assert engine.state is EngineState.IDLE


@pytest.mark.asyncio
async def test_stop_before_first_step_applies_nothing(engine, registry, history):
    engine.run(make_scenario([step([2, 3], StepAction.ON, 10)]))
    engine.stop()

    await asyncio.sleep(0.05)
    assert not registry.get(2).state
    assert len(history) == 0


@pytest.mark.asyncio
async def test_empty_scenario_is_rejected(engine, event_log):
    with pytest.raises(ValidationError):
        engine.run(make_scenario([]))

    assert engine.state is EngineState.IDLE
    assert engine.epoch == 0
    assert event_log.export()[-1].message.endswith("has no steps")


@pytest.mark.asyncio
async def test_run_replaces_active_scenario(engine, registry, event_bus, event_log):
    stops = []
    event_bus.subscribe(EventType.SCENARIO_STOPPED, stops.append)

    first = make_scenario([step([2], StepAction.ON, 50), step([3], StepAction.ON, 50)],
                          name="first", scenario_id="scenario-a")
    second = make_scenario([step([4], StepAction.ON, 200)], name="second", scenario_id="scenario-b")

    first_epoch = engine.run(first)
    await asyncio.sleep(0.01)
    second_epoch = engine.run(second)
    await asyncio.sleep(0.1)

    assert second_epoch > first_epoch
    assert engine.active_scenario is second
    assert registry.get(2).state is True
    assert registry.get(3).state is False  # first run never reached its second step
    assert registry.get(4).state is True
    assert stops[0].scenario_id == "scenario-a"
    assert stops[0].reason is StopReason.REPLACED
    assert any(m.startswith("Replacing active scenario") for m in messages(event_log))


@pytest.mark.asyncio
async def test_looping_scenario_restarts_until_stopped(engine, registry, event_bus, event_log):
    loops = []
    event_bus.subscribe(EventType.SCENARIO_LOOPED, loops.append)

    engine.run(make_scenario([step([5], StepAction.TOGGLE, 10)], loop=True, name="pulse"))
    await asyncio.sleep(0.1)

    assert engine.is_running
    assert len(loops) >= 2
    assert "Looping scenario: pulse" in messages(event_log)
    assert engine.status()["iteration"] >= 2

    engine.stop()
    assert engine.state is EngineState.IDLE


@pytest.mark.asyncio
async def test_pwm_step_only_affects_pwm_pins(engine, registry):
    registry.set_mode(5, PinMode.PWM)

    engine.run(make_scenario([step([5, 6], StepAction.PWM, 0, value=40)]))
    await engine.wait()

    pwm_pin = registry.get(5)
    assert pwm_pin.duty_cycle == 40 and pwm_pin.state is True and pwm_pin.value == 1
    plain_pin = registry.get(6)
    assert plain_pin.duty_cycle == 0 and plain_pin.state is False


@pytest.mark.asyncio
async def test_pwm_zero_turns_pin_off(engine, registry):
    registry.set_mode(5, PinMode.PWM)
    registry.set_duty_cycle(5, 80)

    engine.run(make_scenario([step([5], StepAction.PWM, 0, value=0)]))
    await engine.wait()

    assert registry.get(5).state is False


@pytest.mark.asyncio
async def test_unknown_action_is_a_noop(engine, registry, history, event_log):
    engine.run(make_scenario([step([2], "blink", 0), step([3], StepAction.ON, 0)]))
    await engine.wait()

    assert registry.get(2).state is False
    assert registry.get(3).state is True
    assert [e.pin_id for e in history.export()] == [3]
    assert any("Unknown action 'blink'" in m for m in messages(event_log))


@pytest.mark.asyncio
async def test_unknown_pins_do_not_abort_step(engine, registry, event_log):
    engine.run(make_scenario([step([99, 2], StepAction.ON, 0)]))
    await engine.wait()

    assert registry.get(2).state is True
    assert any("unknown pins: [99]" in m for m in messages(event_log))


@pytest.mark.asyncio
async def test_on_step_ignores_external_writes(engine, registry):
    engine.run(make_scenario([
        step([2], StepAction.ON, 30),
        step([2], StepAction.ON, 30),
    ]))
    await asyncio.sleep(0.01)

    registry.set_state(2, False)  # external write between steps
    await engine.wait()

    assert registry.get(2).state is True


@pytest.mark.asyncio
async def test_toggle_uses_state_at_execution_time(engine, registry):
    engine.run(make_scenario([
        step([2], StepAction.TOGGLE, 30),
        step([2], StepAction.TOGGLE, 0),
    ]))
    await asyncio.sleep(0.01)
    assert registry.get(2).state is True

    registry.set_state(2, False)  # external write between steps
    await engine.wait()

    assert registry.get(2).state is True


@pytest.mark.asyncio
async def test_status_reports_active_run(engine):
    engine.run(make_scenario([step([2], StepAction.ON, 100)], name="status"))
    await asyncio.sleep(0.01)

    status = engine.status()
    assert status["state"] == "RUNNING"
    assert status["scenario_name"] == "status"
    assert status["step_index"] == 0
    assert status["epoch"] == engine.epoch

    engine.stop()
    assert engine.status()["scenario_id"] is None


# ---------------------------------------------------------------------------
# Cross-thread control and writers
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_stop_from_worker_thread_prevents_further_steps(engine, registry, history):
    engine.run(make_scenario([
        step([2], StepAction.ON, 100),
        step([3], StepAction.ON, 0),
    ]))
    await asyncio.sleep(0.02)

    stopped = await asyncio.get_running_loop().run_in_executor(None, engine.stop)

    assert stopped is True
    assert engine.state is EngineState.IDLE
    recorded = len(history)

    await asyncio.sleep(0.15)
    assert registry.get(2).state is True
    assert registry.get(3).state is False
    assert len(history) == recorded


@pytest.mark.asyncio
async def test_writer_threads_during_looping_run_keep_pins_consistent(engine, registry):
    violations = []

    def writer(pin_id):
        for i in range(300):
            if i % 2:
                registry.toggle(pin_id)
            else:
                registry.set_state(pin_id, i % 3 == 0)
            for pin in registry.snapshot():
                if pin.value != (1 if pin.state else 0) or (pin.pull_up and pin.pull_down):
                    violations.append(pin)

    engine.run(make_scenario([step([2, 3, 4, 5, 6], StepAction.TOGGLE, 0)], loop=True))
    loop = asyncio.get_running_loop()

    await asyncio.wait_for(
        asyncio.gather(
            loop.run_in_executor(None, writer, 17),
            loop.run_in_executor(None, writer, 2),
        ),
        timeout=10,
    )

    assert engine.is_running
    assert engine.stop() is True
    assert violations == []
    for pin in registry.snapshot():
        assert pin.value == (1 if pin.state else 0)


@pytest.mark.asyncio
async def test_pin_subscriber_can_stop_engine_from_writer_thread(engine, registry, event_bus):
    manual_changes = []

    def stop_every_fifty(event):
        if event.source is EventSource.MANUAL:
            manual_changes.append(event.pin_id)
            if len(manual_changes) % 50 == 0:
                engine.stop()

    event_bus.subscribe(EventType.PIN_STATE_CHANGED, stop_every_fifty)
    scenario = make_scenario([step([2, 3, 4, 5, 6], StepAction.TOGGLE, 0)], loop=True)

    def writer():
        for _ in range(500):
            registry.toggle(17)

    engine.run(scenario)
    worker = asyncio.get_running_loop().run_in_executor(None, writer)

    async def keep_running():
        while not worker.done():
            if not engine.is_running:
                engine.run(scenario)
            await asyncio.sleep(0)

    await asyncio.wait_for(asyncio.gather(worker, keep_running()), timeout=10)

    assert len(manual_changes) == 500
    engine.stop()
    assert engine.state is EngineState.IDLE


@pytest.mark.asyncio
async def test_task_cancelled_outside_engine_ends_the_run(engine, event_bus):
    stops = []
    event_bus.subscribe(EventType.SCENARIO_STOPPED, stops.append)

    engine.run(make_scenario([step([2], StepAction.ON, 500)]))
    await asyncio.sleep(0.01)

    tasks = [t for t in asyncio.all_tasks() if t.get_name().startswith("scenario:")]
    assert len(tasks) == 1
    tasks[0].cancel()
    await asyncio.sleep(0.01)

    assert engine.state is EngineState.IDLE
    assert engine.active_scenario is None
    assert [s.reason for s in stops] == [StopReason.STOPPED]
    assert engine.stop() is False


def test_engine_shares_registry_lock(engine, registry):
    acquired = []

    def try_stop():
        acquired.append(engine.stop())

    with registry.lock:
        worker = threading.Thread(target=try_stop)
        worker.start()
        worker.join(timeout=0.05)
        assert worker.is_alive()

    worker.join(timeout=1)
    assert acquired == [False]
