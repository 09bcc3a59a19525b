import pytest
from fastapi.testclient import TestClient

from core.clock import ManualClock
from core.run_controller import RunController
from web.backend import app as app_module


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(app_module, "controller",
                        RunController(clock=ManualClock(), raise_errors=True))
    return TestClient(app_module.app)


def create(client, name, total_time, quantum=1, aging=0, **extra):
    body = {"name": name, "total_time": total_time, "quantum": quantum,
            "aging_counter_initial": aging, **extra}
    response = client.post("/processes", json=body)
    assert response.status_code == 200, response.text
    return response.json()["process"]


def test_create_and_list(client):
    process = create(client, "editor", 10, quantum=2, aging=3)
    assert process["pid"] == 1
    assert process["state"] == "Inactive"
    assert process["slice_time"] == 5

    listed = client.get("/processes").json()["processes"]
    assert [p["name"] for p in listed] == ["editor"]


def test_invalid_body_is_rejected(client):
    response = client.post("/processes", json={"name": "x", "total_time": 0})
    assert response.status_code == 422


def test_duplicate_pid_conflicts(client):
    create(client, "a", 3, pid=5)
    response = client.post("/processes", json={"name": "b", "total_time": 3, "pid": "5"})
    assert response.status_code == 409


def test_commands_map_errors_to_status_codes(client):
    assert client.post("/processes/9/suspend").status_code == 404
    assert client.delete("/processes/9").status_code == 404

    create(client, "a", 3)
    assert client.post("/processes/1/explode").status_code == 404

    response = client.post("/processes/1/suspend")
    assert response.status_code == 200
    assert response.json()["process"]["state"] == "Suspended"

    assert client.post("/processes/1/suspend").status_code == 409
    assert client.patch("/processes/1", json={"name": " "}).status_code == 400
    assert client.patch("/processes/1", json={"name": "renamed"}).json()["process"]["name"] == "renamed"


def test_start_and_tick(client):
    create(client, "A", 2)
    create(client, "B", 1)

    started = client.post("/simulation/start").json()
    assert started["started"] is True
    assert started["state"]["running_pid"] == 1

    state = client.post("/simulation/tick", params={"count": 3}).json()["state"]
    assert state["tick"] == 3
    assert all(p["state"] == "Terminated" for p in state["queue"])
    assert state["statistics"]["completed"] == 2

    gantt = client.get("/simulation/gantt").json()["gantt_chart"]
    assert [(e["pid"], e["start_time"], e["end_time"]) for e in gantt] == [(1, 0, 2), (2, 2, 3)]

    log = client.get("/simulation/log", params={"since": 0}).json()
    assert log["next"] == len(log["event_log"])
    assert any("P2 → Terminated" in line for line in log["event_log"])


def test_start_empty_queue_reports_notification(client):
    body = client.post("/simulation/start").json()
    assert body["started"] is False
    assert body["state"]["notifications"][0]["level"] == "info"


def test_reorder_out_of_range_is_ignored(client):
    create(client, "a", 3)
    create(client, "b", 3)

    assert client.post("/queue/reorder", json={"from_index": 0, "to_index": 4}).json()["moved"] is False
    body = client.post("/queue/reorder", json={"from_index": 1, "to_index": 0}).json()
    assert body["moved"] is True
    assert [p["name"] for p in body["state"]["queue"]] == ["b", "a"]


def test_preset_and_sample_creation(client):
    presets = client.get("/presets").json()["presets"]
    assert len(presets) == 17

    firefox = client.post("/processes/preset/firefox").json()["process"]
    assert (firefox["name"], firefox["total_time"], firefox["quantum"]) == ("Firefox", 20, 4)
    assert client.post("/processes/preset/notepad").status_code == 400

    sample = client.post("/processes/from-sample",
                         json={"pid": 4242, "name": "worker", "cpu_usage": 12}).json()["process"]
    assert sample["pid"] == "4242"
    assert sample["total_time"] == 12
    assert sample["quantum"] == 10


def test_config_locked_while_running(client):
    body = client.post("/simulation/config", json={"default_quantum": 3}).json()
    assert body["config"]["default_quantum"] == 3
    created = client.post("/processes", json={"name": "a", "total_time": 6}).json()
    assert created["process"]["quantum"] == 3

    client.post("/simulation/start")
    assert client.post("/simulation/config", json={}).status_code == 409


def test_snapshot_round_trip(client):
    create(client, "a", 4, quantum=2)
    client.post("/simulation/start")
    client.post("/simulation/tick")
    saved = client.get("/snapshot").json()

    client.post("/simulation/clear")
    assert client.get("/processes").json()["processes"] == []

    restored = client.put("/snapshot", json=saved).json()["state"]
    assert restored["tick"] == 1
    assert restored["running"] is False
    assert restored["queue"][0]["remaining_time"] == 3

    bad = {"queue": [{"pid": 1, "name": "x", "total_time": 2, "quantum": 1,
                      "remaining_time": 9}]}
    assert client.put("/snapshot", json=bad).status_code == 400


def test_websocket_step_and_run(client):
    create(client, "A", 2)
    create(client, "B", 1)

    with client.websocket_connect("/ws/realtime") as ws:
        ws.send_json({"action": "step"})
        first = ws.receive_json()
        assert first["type"] == "step_result"
        assert first["tick"] == 1
        assert first["complete"] is False
        assert first["new_gantt"] == [{"pid": 1, "start_time": 0, "end_time": 1,
                                       "state": "Running"}]

        ws.send_json({"action": "run", "speed": 1000})
        results = [ws.receive_json(), ws.receive_json()]
        assert results[-1]["complete"] is True
        assert results[-1]["tick"] == 3

        ws.send_json({"action": "dance"})
        assert ws.receive_json()["type"] == "error"


def test_tick_while_stopped_is_ignored(client):
    create(client, "a", 3)
    client.post("/processes/1/suspend")

    state = client.post("/simulation/tick", params={"count": 2}).json()["state"]
    assert state["tick"] == 0
    assert state["running"] is False
    assert state["queue"][0]["state"] == "Suspended"


def test_websocket_run_rejects_non_positive_speed(client):
    create(client, "A", 2)

    with client.websocket_connect("/ws/realtime") as ws:
        ws.send_json({"action": "run", "speed": 0})
        error = ws.receive_json()
        assert error["type"] == "error"
        assert "speed" in error["message"]

        ws.send_json({"action": "state"})
        state = ws.receive_json()
        assert state["type"] == "state"
        assert state["tick"] == 0
