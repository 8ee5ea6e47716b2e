from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from ..core.config import settings
from ..core.timeutil import now_local
from ..domain.classifier import evaluate
from ..domain.models import ProductionItem, SensorConfig, ToleranceWindow
from ..domain.stats import summarize
from ..domain.units import convert_weight, format_weight, is_known_unit
from ..drivers.device_sim import PatternConfig, SimulatedDeviceTransport
from ..drivers.http_device import check_device
from ..services.feedback import ClassifyingObserver
from ..services.poller import SensorPoller
from .schemas import (
    ConvertRequest,
    DeviceCheckRequest,
    ProductIn,
    SensorConfigIn,
    SimFaultRequest,
    SimOfflineRequest,
    SimPatternRequest,
    SimPhotocellRequest,
    SimScaleManualRequest,
    StatsRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Dependency getters ---
# Placeholders; main.py wires the real objects via app.dependency_overrides.
def get_poller() -> SensorPoller:  # overridden in main
    raise RuntimeError("Poller dependency not configured")

def get_classifier() -> ClassifyingObserver:  # overridden in main
    raise RuntimeError("Classifier dependency not configured")

def get_sim_devices() -> SimulatedDeviceTransport:  # overridden in main
    raise RuntimeError("Simulated devices dependency not configured")


def _product_out(p: ToleranceWindow | None):
    if p is None:
        return None
    return {
        "target_weight": p.target_weight,
        "min_weight": p.min_weight,
        "max_weight": p.max_weight,
        "unit": p.unit,
        "label": p.label,
    }


def _config_out(cfg: SensorConfig):
    return {
        "scale_url": cfg.scale_url,
        "photocell_url": cfg.photocell_url,
        "polling_interval_ms": cfg.polling_interval_ms,
    }


@router.get("/live")
async def get_live(
    poller: SensorPoller = Depends(get_poller),
    clf: ClassifyingObserver = Depends(get_classifier),
):
    snap = poller.snapshot
    ev = evaluate(snap.weight, clf.product, clf.line_unit)
    w = snap.weight
    display = "---"
    if w.has_value:
        display = format_weight(ev.display_value, ev.display_unit, clf.decimal_precision)
    return {
        "app": settings.app_name,
        "mode": settings.mode,
        "now_local": now_local().isoformat(),
        "weight": {
            "value": w.value,
            "status": w.status,
            "ts_utc": w.ts_utc.isoformat(),
            "display": display,
        },
        "photocell_state": snap.photocell_state,
        "is_scale_connected": snap.is_scale_connected,
        "is_photocell_connected": snap.is_photocell_connected,
        "errors": dict(snap.errors),
        "evaluation": asdict(ev),
        "product": _product_out(clf.product),
        "ts_utc": snap.ts_utc.isoformat(),
    }


@router.get("/sensors/config")
async def get_sensor_config(poller: SensorPoller = Depends(get_poller)):
    return {**_config_out(poller.config), "running": poller.running}


@router.put("/sensors/config")
async def replace_sensor_config(req: SensorConfigIn, poller: SensorPoller = Depends(get_poller)):
    cfg = SensorConfig(
        scale_url=req.scale_url,
        photocell_url=req.photocell_url,
        polling_interval_ms=req.polling_interval_ms,
    )
    await poller.reconfigure(cfg)
    logger.info("Sensor config replaced: %s", _config_out(cfg))
    return {"ok": True, **_config_out(cfg), "running": poller.running}


@router.post("/sensors/test")
async def check_sensor(req: DeviceCheckRequest, devices: SimulatedDeviceTransport = Depends(get_sim_devices)):
    transport = devices if settings.mode == "sim" else None
    try:
        result = await check_device(req.url, timeout=req.timeout, transport=transport)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return asdict(result)


@router.get("/product")
async def get_product(clf: ClassifyingObserver = Depends(get_classifier)):
    return {
        "product": _product_out(clf.product),
        "line_unit": clf.line_unit,
        "decimal_precision": clf.decimal_precision,
    }


@router.put("/product")
async def bind_product(req: ProductIn, clf: ClassifyingObserver = Depends(get_classifier)):
    for unit in (req.unit, req.line_unit):
        if unit is not None and not is_known_unit(unit):
            # Not fatal for conversion, but a stored window should use a known unit
            raise HTTPException(status_code=400, detail=f"Unknown weight unit: {unit}")

    product = ToleranceWindow(
        target_weight=req.target_weight,
        min_weight=req.min_weight,
        max_weight=req.max_weight,
        unit=req.unit,
        label=req.label,
    )
    clf.bind(product, line_unit=req.line_unit, decimal_precision=req.decimal_precision)
    return {
        "ok": True,
        "product": _product_out(product),
        "line_unit": clf.line_unit,
        "decimal_precision": clf.decimal_precision,
    }


@router.delete("/product")
async def unbind_product(clf: ClassifyingObserver = Depends(get_classifier)):
    clf.bind(None)
    return {"ok": True, "product": None}


@router.post("/convert")
async def convert(req: ConvertRequest):
    value = convert_weight(req.value, req.from_unit, req.to_unit)
    return {
        "value": value,
        "unit": req.to_unit,
        "formatted": format_weight(value, req.to_unit, req.precision),
    }


@router.post("/stats")
async def stats(req: StatsRequest):
    items = [ProductionItem(weight=i.weight, status=i.status) for i in req.items]
    return asdict(summarize(items, started_at=req.started_at))


# --- Simulation endpoints ---
def _require_sim(devices: SimulatedDeviceTransport) -> SimulatedDeviceTransport:
    if settings.mode != "sim":
        raise HTTPException(status_code=404, detail="Simulation disabled (mode is not 'sim')")
    return devices


@router.get("/sim/status")
async def sim_status(devices: SimulatedDeviceTransport = Depends(get_sim_devices)):
    d = _require_sim(devices)
    return {"offline": d.offline, "scale": d.scale.status(), "photocell": d.photocell.status()}


@router.post("/sim/scale/manual")
async def sim_scale_manual(req: SimScaleManualRequest, devices: SimulatedDeviceTransport = Depends(get_sim_devices)):
    _require_sim(devices).scale.set_manual(req.value, stable=req.stable)
    return {"ok": True, "mode": "manual", "value": req.value, "stable": req.stable}


@router.post("/sim/scale/pattern")
async def sim_scale_pattern(req: SimPatternRequest, devices: SimulatedDeviceTransport = Depends(get_sim_devices)):
    cfg = PatternConfig(**req.model_dump())
    _require_sim(devices).scale.set_pattern(cfg)
    return {"ok": True, "pattern": cfg.__dict__}


@router.post("/sim/scale/fault")
async def sim_scale_fault(req: SimFaultRequest, devices: SimulatedDeviceTransport = Depends(get_sim_devices)):
    _require_sim(devices).scale.set_fault(req.text)
    return {"ok": True, "fault": req.text}


@router.post("/sim/photocell")
async def sim_photocell(req: SimPhotocellRequest, devices: SimulatedDeviceTransport = Depends(get_sim_devices)):
    _require_sim(devices).photocell.set_present(req.present)
    return {"ok": True, "present": req.present}


@router.post("/sim/photocell/fault")
async def sim_photocell_fault(req: SimFaultRequest, devices: SimulatedDeviceTransport = Depends(get_sim_devices)):
    _require_sim(devices).photocell.set_fault(req.text)
    return {"ok": True, "fault": req.text}


@router.post("/sim/offline")
async def sim_offline(req: SimOfflineRequest, devices: SimulatedDeviceTransport = Depends(get_sim_devices)):
    _require_sim(devices).offline = req.offline
    return {"ok": True, "offline": req.offline}
