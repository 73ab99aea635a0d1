"""REST API via FastAPI TestClient"""

import pytest
from fastapi.testclient import TestClient

from api.dependencies import set_service_container
from api.main import create_app


@pytest.fixture
def client(services):
    set_service_container(services)
    with TestClient(create_app()) as test_client:
        yield test_client
    set_service_container(None)


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_service_unavailable_without_container():
    set_service_container(None)
    with TestClient(create_app()) as client:
        assert client.get("/api/v1/pins").status_code == 503


def test_list_and_get_pins(client):
    body = client.get("/api/v1/pins").json()
    assert body["count"] == len(body["pins"]) == 26

    pin = client.get("/api/v1/pins/17").json()
    assert pin["name"] == "GPIO 17"
    assert pin["mode"] == "output"


def test_toggle_and_state(client):
    assert client.post("/api/v1/pins/17/toggle").json()["value"] == 1
    assert client.put("/api/v1/pins/17/state", json={"state": False}).json()["state"] is False


def test_unknown_pin_is_404(client):
    response = client.post("/api/v1/pins/999/toggle")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"
    assert response.json()["request_id"]


def test_duty_cycle_out_of_range_is_422(client):
    response = client.put("/api/v1/pins/18/duty-cycle", json={"duty_cycle": 150})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
    assert client.get("/api/v1/pins/18").json()["duty_cycle"] == 0


def test_request_body_validation_is_422(client):
    response = client.put("/api/v1/pins/18/state", json={"state": "maybe"})

    assert response.status_code == 422
    assert response.json()["validation_errors"][0]["field"] == "state"


def test_config_patch_enforces_pull_exclusivity(client):
    client.patch("/api/v1/pins/4/config", json={"pull_down": True})
    pin = client.patch("/api/v1/pins/4/config", json={"pull_up": True}).json()

    assert pin["pull_up"] is True and pin["pull_down"] is False


def test_reconcile(client):
    response = client.post("/api/v1/pins/reconcile", json={"pins": [{"id": 4, "state": True}]})
    assert response.status_code == 200
    assert response.json()["pins"][0]["state"] is True

    response = client.post("/api/v1/pins/reconcile", json=[{"id": "four"}])
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "TRANSPORT_ERROR"


def test_export_and_import(client):
    client.post("/api/v1/pins/17/toggle")
    exported = client.get("/api/v1/pins/export").json()

    client.post("/api/v1/system/initialize", json={"model": "Raspberry Pi 4 Model B"})
    response = client.post("/api/v1/pins/import", json=exported)

    assert response.status_code == 200
    assert client.get("/api/v1/pins/17").json()["state"] is True


def test_groups(client):
    response = client.post("/api/v1/groups", json={"name": "Pair", "color": "red", "pin_ids": [2, 3, 999]})
    assert response.status_code == 201
    group = response.json()
    assert group["pins"] == [2, 3]

    assert client.post("/api/v1/groups", json={"name": "", "pin_ids": [2]}).status_code == 422

    assert client.delete(f"/api/v1/groups/{group['id']}").json() == {"deleted": True}
    assert client.delete(f"/api/v1/groups/{group['id']}").json() == {"deleted": False}
    assert client.get("/api/v1/pins/2").json()["group"] is None


def test_scenario_lifecycle(client):
    response = client.post("/api/v1/scenarios", json={
        "name": "Blink",
        "loop": True,
        "steps": [
            {"pin_ids": [17], "action": "on", "delay_ms": 1000},
            {"pin_ids": [17], "action": "off", "delay_ms": 1000},
        ],
    })
    assert response.status_code == 201
    scenario_id = response.json()["id"]

    run = client.post(f"/api/v1/scenarios/{scenario_id}/run").json()
    assert run["scenario_id"] == scenario_id
    assert client.get("/api/v1/scenarios/status").json()["state"] == "RUNNING"

    assert client.post("/api/v1/scenarios/stop").json() == {"stopped": True}
    assert client.post("/api/v1/scenarios/stop").json() == {"stopped": False}
    assert client.get("/api/v1/scenarios/status").json()["state"] == "IDLE"

    assert client.delete(f"/api/v1/scenarios/{scenario_id}").json() == {"deleted": True}
    assert client.get("/api/v1/scenarios").json()["count"] == 0


def test_invalid_scenarios(client):
    response = client.post("/api/v1/scenarios", json={"name": "", "steps": [{"pin_ids": [2], "action": "on"}]})
    assert response.status_code == 422

    response = client.post("/api/v1/scenarios", json={"name": "Empty", "steps": []})
    assert response.status_code == 422

    assert client.post("/api/v1/scenarios/scenario-missing/run").status_code == 404
    assert client.get("/api/v1/scenarios").json()["count"] == 0


def test_presets(client):
    client.post("/api/v1/pins/17/toggle")
    preset = client.post("/api/v1/presets", json={"name": "On"}).json()
    client.post("/api/v1/pins/17/toggle")

    response = client.post(f"/api/v1/presets/{preset['id']}/load")

    assert response.status_code == 200
    assert client.get("/api/v1/pins/17").json()["state"] is True
    assert client.get("/api/v1/presets").json()["count"] == 1


def test_history_and_log(client):
    client.post("/api/v1/pins/17/toggle")

    history = client.get("/api/v1/history").json()
    assert history["count"] == 1
    assert history["entries"][0]["pin_id"] == 17

    assert client.put("/api/v1/history/enabled", json={"enabled": False}).json() == {"enabled": False}
    client.post("/api/v1/pins/17/toggle")
    assert client.get("/api/v1/history").json()["count"] == 1

    log = client.get("/api/v1/log", params={"newest_first": True}).json()
    assert log["entries"][0]["message"] == "Pin GPIO 17 turned OFF"

    text = client.get("/api/v1/log/text")
    assert text.headers["content-type"].startswith("text/plain")
    assert "[INFO] Pin GPIO 17 turned OFF" in text.text.splitlines()[0]

    client.delete("/api/v1/log")
    assert [e["message"] for e in client.get("/api/v1/log").json()["entries"]] == ["Logs cleared"]


def test_boards(client):
    body = client.get("/api/v1/system/boards").json()
    assert body["default_board"] == "Raspberry Pi 3 Model B+"
    assert len(body["boards"]) == 5

    assert client.post("/api/v1/system/initialize", json={"model": "Unknown"}).status_code == 404
