"""SimulatorService command surface, wired through ServiceContainer"""

import asyncio
import json

import pytest

from models.domain import BoardSpec
from models.enums import LogSeverity, PinMode
from models.errors import NotFoundError, TransportError, ValidationError


def last_log(services):
    return services.event_log.export()[-1]


def test_initialize_uses_default_board(services, config_manager):
    board = config_manager.get_board()
    pins = services.simulator.snapshot_pins()

    assert [p["id"] for p in pins] == list(board.valid_gpios)
    assert all(p["value"] == 0 for p in pins)
    assert last_log(services).message.startswith("System initialized")


def test_initialize_unknown_board_keeps_pins(services):
    before = services.simulator.snapshot_pins()

    with pytest.raises(NotFoundError):
        services.simulator.initialize("Commodore 64")

    assert services.simulator.snapshot_pins() == before
    assert last_log(services).severity is LogSeverity.WARNING


def test_toggle_logs_and_records(services):
    pin = services.simulator.toggle(17)

    assert pin["state"] is True and pin["value"] == 1
    assert last_log(services).message == "Pin GPIO 17 turned ON"
    assert services.simulator.export_history()[-1]["pin_id"] == 17


def test_rejected_commands_are_reported(services):
    with pytest.raises(ValidationError):
        services.simulator.set_duty_cycle(18, 150)
    assert last_log(services).severity is LogSeverity.ERROR

    with pytest.raises(NotFoundError):
        services.simulator.toggle(999)
    assert last_log(services).message == "Pin '999' not found"


def test_mode_duty_and_config(services):
    services.simulator.set_mode(18, "pwm")
    pin = services.simulator.set_duty_cycle(18, 25)
    assert pin["mode"] == "pwm" and pin["duty_cycle"] == 25 and pin["state"] is True

    pin = services.simulator.apply_config(18, {"pull_down": True, "notes": "servo"})
    assert pin["pull_down"] is True and pin["notes"] == "servo"
    assert last_log(services).message == "Pin GPIO 18 configuration updated"


def test_reconcile_malformed_payload_changes_nothing(services):
    before = services.simulator.snapshot_pins()

    for payload in ("{not json", [{"id": "seventeen"}], [{"id": 17, "pullUp": True, "pullDown": True}]):
        with pytest.raises(TransportError):
            services.simulator.reconcile(payload)
        assert last_log(services).severity is LogSeverity.ERROR

    assert services.simulator.snapshot_pins() == before


def test_reconcile_accepts_wrapped_json_text(services):
    payload = json.dumps({"type": "pinUpdate", "pins": [{"id": 17, "state": True, "mode": "input"}]})

    updated = services.simulator.reconcile(payload)

    assert [p["id"] for p in updated] == [17]
    pin = services.simulator.get_pin(17)
    assert pin["state"] is True and pin["mode"] == "input"
    assert last_log(services).message == "Pins updated from server"


def test_export_import_round_trip(services):
    services.simulator.toggle(17)
    services.simulator.apply_config(18, {"name": "Servo", "pull_up": True})
    exported = services.simulator.export_pins()

    services.simulator.initialize()
    imported = services.simulator.import_pins(exported)

    assert imported == exported


def test_import_malformed_payload_keeps_pins(services):
    before = services.simulator.snapshot_pins()

    with pytest.raises(TransportError):
        services.simulator.import_pins([{"id": 2, "name": "a"}, {"id": 2, "name": "b"}])
    with pytest.raises(TransportError):
        services.simulator.import_pins({"unexpected": True})

    assert services.simulator.snapshot_pins() == before
    assert last_log(services).message.startswith("Failed to import configuration")


def test_preset_save_and_load(services):
    services.simulator.toggle(17)
    services.simulator.set_mode(18, PinMode.INPUT)
    preset = services.simulator.save_preset("Demo", "two pins changed")

    services.simulator.initialize()
    assert services.simulator.get_pin(17)["state"] is False

    services.simulator.load_preset(preset.id)
    assert services.simulator.get_pin(17)["state"] is True
    assert services.simulator.get_pin(18)["mode"] == "input"
    assert last_log(services).message == "Loaded preset: Demo"


def test_preset_validation_and_delete(services):
    with pytest.raises(ValidationError):
        services.simulator.save_preset("  ")
    with pytest.raises(NotFoundError):
        services.simulator.load_preset("preset-missing")

    preset = services.simulator.save_preset("Temp")
    assert services.simulator.delete_preset(preset.id) is True
    assert services.simulator.delete_preset(preset.id) is False
    assert services.simulator.list_presets() == []


def test_group_commands(services):
    group = services.simulator.create_group("Pair", "red", [17, 18])
    assert last_log(services).message == "Created pin group: Pair with 2 pins"

    assert services.simulator.delete_group(group.id) is True
    assert services.simulator.delete_group(group.id) is False
    assert services.simulator.get_pin(17)["group"] is None


def test_create_scenario_failure_is_reported(services):
    with pytest.raises(ValidationError):
        services.simulator.create_scenario("", [{"pin_ids": [17], "action": "on"}])

    assert services.simulator.list_scenarios() == []
    assert last_log(services).message == "Scenario name is required"


def test_run_unknown_scenario(services):
    with pytest.raises(NotFoundError):
        services.simulator.run("scenario-missing")


@pytest.mark.asyncio
async def test_run_and_stop_scenario(services):
    scenario = services.simulator.create_scenario(
        "Blink", [{"pin_ids": [17], "action": "toggle", "delay_ms": 20}], loop=True
    )

    services.simulator.run(scenario.id)
    await asyncio.sleep(0.01)
    assert services.simulator.status()["state"] == "RUNNING"

    assert services.simulator.stop() is True
    assert services.simulator.status()["state"] == "IDLE"


@pytest.mark.asyncio
async def test_deleting_running_scenario_stops_engine(services):
    scenario = services.simulator.create_scenario(
        "Long", [{"pin_ids": [17], "action": "on", "delay_ms": 500}]
    )
    services.simulator.run(scenario.id)
    await asyncio.sleep(0.01)

    assert services.simulator.delete_scenario(scenario.id) is True
    assert services.engine.is_running is False
    assert "Stopped scenario execution" in [e.message for e in services.event_log.export()]


@pytest.mark.asyncio
async def test_rejected_initialize_keeps_scenario_running(services):
    services.config_manager.boards["Empty Board"] = BoardSpec(model="Empty Board", valid_gpios=())
    scenario = services.simulator.create_scenario(
        "Hold", [{"pin_ids": [17], "action": "on", "delay_ms": 500}]
    )
    services.simulator.run(scenario.id)
    await asyncio.sleep(0.01)
    before = services.simulator.snapshot_pins()

    with pytest.raises(ValidationError):
        services.simulator.initialize("Empty Board")

    assert services.engine.is_running
    assert services.simulator.snapshot_pins() == before
    assert last_log(services).severity is LogSeverity.ERROR


@pytest.mark.asyncio
async def test_initialize_stops_active_scenario(services):
    scenario = services.simulator.create_scenario(
        "Hold", [{"pin_ids": [17], "action": "on", "delay_ms": 500}]
    )
    services.simulator.run(scenario.id)
    await asyncio.sleep(0.01)

    pins = services.simulator.initialize()

    assert services.engine.is_running is False
    assert all(p["state"] is False for p in pins)

def test_history_and_log_maintenance(services):
    services.simulator.toggle(17)
    services.simulator.clear_history()
    assert services.simulator.export_history() == []
    assert last_log(services).message == "Pin history cleared"

    services.simulator.clear_log()
    log = services.simulator.export_log()
    assert [e["message"] for e in log] == ["Logs cleared"]
    assert services.simulator.export_log_text().endswith("[INFO] Logs cleared")


def test_recording_toggles(services):
    services.simulator.set_history_enabled(False)
    services.simulator.toggle(17)
    assert services.simulator.export_history() == []

    services.simulator.set_log_enabled(False)
    count = len(services.simulator.export_log())
    services.simulator.toggle(17)
    assert len(services.simulator.export_log()) == count


def test_refresh_pin_states(services):
    services.simulator.set_mode(17, "input")

    class AlwaysFlip:
        def random(self):
            return 0.0

    changed = services.simulator.refresh_pin_states(AlwaysFlip())

    assert [p["id"] for p in changed] == [17]
    assert changed[0]["state"] is False
    assert last_log(services).message == "Pin states refreshed"


@pytest.mark.asyncio
async def test_auto_refresh_task(services):
    task = services.simulator.start_auto_refresh(10)
    await asyncio.sleep(0.05)

    services.simulator.stop_auto_refresh()
    await asyncio.sleep(0)
    assert task.cancelled() or task.done()
    assert "Pin states refreshed" in [e.message for e in services.event_log.export()]
