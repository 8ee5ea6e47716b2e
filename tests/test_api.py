import time

import pytest
from fastapi.testclient import TestClient

import weighline.main as main
from weighline.core.config import settings
from weighline.drivers.device_sim import SIM_PHOTOCELL_URL, SIM_SCALE_URL


FAST = {"scale_url": SIM_SCALE_URL, "photocell_url": SIM_PHOTOCELL_URL, "polling_interval_ms": 10}


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(settings, "mode", "sim")
    monkeypatch.setattr(settings, "line_unit", "g")
    monkeypatch.setattr(settings, "decimal_precision", None)
    devices = main.sim_devices
    devices.offline = False
    devices.scale.set_fault(None)
    devices.scale.set_manual(250.0, stable=True)
    devices.photocell.set_fault(None)
    devices.photocell.set_present(False)
    main.classifier.bind(None, line_unit="g")

    with TestClient(main.app) as c:
        r = c.put("/api/sensors/config", json=FAST)
        assert r.status_code == 200
        yield c


def wait_for(client, predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while True:
        body = client.get("/api/live").json()
        if predicate(body) or time.monotonic() > deadline:
            return body
        time.sleep(0.02)


def test_live_reports_classified_weight(client):
    r = client.put("/api/product", json={
        "target_weight": 250, "min_weight": 245, "max_weight": 255, "unit": "g",
    })
    assert r.status_code == 200

    body = wait_for(client, lambda b: b["weight"]["status"] == "stable")
    assert body["weight"]["value"] == 250.0
    assert body["weight"]["display"] == "250.0"
    assert body["is_scale_connected"] is True
    assert body["is_photocell_connected"] is True
    assert body["evaluation"]["validity"] == "ok"
    assert body["product"]["min_weight"] == 245


def test_live_follows_device_changes(client):
    client.put("/api/product", json={
        "target_weight": 250, "min_weight": 245, "max_weight": 255,
    })
    client.post("/api/sim/scale/manual", json={"value": 260, "stable": True})
    client.post("/api/sim/photocell", json={"present": True})

    body = wait_for(client, lambda b: b["photocell_state"] == 1 and b["weight"]["value"] == 260.0)
    assert body["evaluation"]["validity"] == "overweight"

    client.post("/api/sim/scale/manual", json={"value": 230, "stable": False})
    body = wait_for(client, lambda b: b["weight"]["status"] == "unstable")
    assert body["evaluation"]["validity"] is None


def test_device_fault_and_offline(client):
    client.post("/api/sim/scale/fault", json={"text": "error"})
    client.post("/api/sim/photocell/fault", json={"text": "?"})
    body = wait_for(client, lambda b: b["weight"]["status"] == "error" and b["errors"].get("photocell"))
    assert body["weight"]["display"] == "---"
    assert body["is_scale_connected"] is False
    assert body["errors"] == {"photocell": "Invalid response"}

    client.post("/api/sim/offline", json={"offline": True})
    body = wait_for(client, lambda b: b["weight"]["status"] == "disconnected")
    assert "scale" in body["errors"]
    assert body["weight"]["display"] == "---"
    assert body["is_photocell_connected"] is False


def test_sensor_config_roundtrip_and_idle(client):
    r = client.get("/api/sensors/config")
    assert r.json() == {**FAST, "running": True}

    r = client.put("/api/sensors/config", json={"scale_url": None, "photocell_url": ""})
    assert r.json()["running"] is False
    body = client.get("/api/live").json()
    assert body["weight"]["status"] == "disconnected"
    assert body["weight"]["display"] == "---"


def test_sensor_config_validation(client):
    r = client.put("/api/sensors/config", json={"scale_url": SIM_SCALE_URL, "polling_interval_ms": 0})
    assert r.status_code == 422


def test_product_validation(client):
    r = client.put("/api/product", json={"target_weight": 1, "min_weight": 5, "max_weight": 2})
    assert r.status_code == 422
    r = client.put("/api/product", json={"target_weight": 1, "min_weight": 0, "max_weight": 2, "unit": "stone"})
    assert r.status_code == 400

    client.put("/api/product", json={"target_weight": 1, "min_weight": 0, "max_weight": 2, "unit": "kg"})
    assert client.get("/api/product").json()["product"]["unit"] == "kg"
    assert client.delete("/api/product").json() == {"ok": True, "product": None}


def test_product_sets_line_unit_and_precision(client):
    client.post("/api/sim/scale/manual", json={"value": 0.2, "stable": True})
    client.put("/api/product", json={
        "target_weight": 250, "min_weight": 245, "max_weight": 255, "unit": "g",
        "line_unit": "kg", "decimal_precision": 2,
    })
    body = wait_for(client, lambda b: b["weight"]["value"] == 0.2)
    assert body["weight"]["display"] == "0.20"
    assert body["evaluation"]["display_unit"] == "kg"
    assert body["evaluation"]["validation_value"] == pytest.approx(200.0)
    assert body["evaluation"]["validity"] == "underweight"


def test_product_binding_leaves_global_settings_alone(client):
    r = client.put("/api/product", json={
        "target_weight": 250, "min_weight": 245, "max_weight": 255,
        "line_unit": "kg", "decimal_precision": 2,
    })
    assert r.json()["decimal_precision"] == 2
    assert settings.line_unit == "g"
    assert settings.decimal_precision is None

    r = client.get("/api/product").json()
    assert (r["line_unit"], r["decimal_precision"]) == ("kg", 2)

    client.delete("/api/product")
    assert client.get("/api/product").json()["decimal_precision"] is None
    assert settings.decimal_precision is None


def test_sensor_check_endpoint(client):
    r = client.post("/api/sensors/test", json={"url": SIM_SCALE_URL})
    assert r.json() == {"connected": True, "raw": "s-250.0", "weight": 250.0, "error": None}

    r = client.post("/api/sensors/test", json={"url": "nonsense"})
    assert r.status_code == 400


def test_convert_and_stats(client):
    r = client.post("/api/convert", json={"value": 1.5, "from_unit": "kg", "to_unit": "g"})
    assert r.json() == {"value": 1500.0, "unit": "g", "formatted": "1500.0"}

    r = client.post("/api/stats", json={"items": [
        {"weight": 250, "status": "ok"},
        {"weight": 240, "status": "underweight"},
    ]})
    body = r.json()
    assert body["total"] == 2
    assert body["ok_rate"] == 50.0
    assert body["avg_weight"] == 245.0


def test_sim_endpoints_disabled_outside_sim_mode(client, monkeypatch):
    monkeypatch.setattr(settings, "mode", "real")
    assert client.get("/api/sim/status").status_code == 404
    assert client.post("/api/sim/photocell", json={"present": True}).status_code == 404


def test_stats_accepts_naive_start_time(client):
    r = client.post("/api/stats", json={
        "items": [{"weight": 250, "status": "ok"}],
        "started_at": "2026-01-01T00:00:00",
    })
    assert r.status_code == 200
    assert r.json()["rate_per_hour"] > 0
