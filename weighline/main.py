from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .core.config import settings
from .core.log import configure_logging

from .api.routes import router as api_router
import weighline.api.routes as routes_module

from .domain.models import SensorConfig
from .drivers.device_sim import (
    SIM_PHOTOCELL_URL,
    SIM_SCALE_URL,
    SimulatedDeviceTransport,
    SimulatedPhotocell,
    SimulatedScale,
)
from .services.feedback import ClassifyingObserver, LoggingListener
from .services.poller import SensorPoller


logger = logging.getLogger(__name__)


def build_sensor_config() -> SensorConfig:
    scale_url = settings.scale_url
    photocell_url = settings.photocell_url
    if settings.mode.lower() == "sim":
        scale_url = scale_url or SIM_SCALE_URL
        photocell_url = photocell_url or SIM_PHOTOCELL_URL
    return SensorConfig(
        scale_url=scale_url,
        photocell_url=photocell_url,
        polling_interval_ms=settings.polling_interval_ms,
    )


# --- Singletons ---
sim_devices = SimulatedDeviceTransport(SimulatedScale(), SimulatedPhotocell())
classifier = ClassifyingObserver(
    LoggingListener(),
    line_unit=settings.line_unit,
    decimal_precision=settings.decimal_precision,
)
poller: SensorPoller | None = None


def get_poller() -> SensorPoller:
    assert poller is not None
    return poller


def get_classifier() -> ClassifyingObserver:
    return classifier


def get_sim_devices() -> SimulatedDeviceTransport:
    return sim_devices


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Starting %s (mode=%s)", settings.app_name, settings.mode)

    global poller
    transport = sim_devices if settings.mode.lower() == "sim" else None
    poller = SensorPoller(build_sensor_config(), transport=transport)
    poller.subscribe(classifier)
    await poller.start()

    try:
        yield
    finally:
        if poller:
            poller.unsubscribe(classifier)
            await poller.aclose()

        logger.info("Shutdown complete")


app = FastAPI(title=settings.app_name, lifespan=lifespan)

# Make the dependency functions in routes resolve to the real ones
app.dependency_overrides[routes_module.get_poller] = get_poller
app.dependency_overrides[routes_module.get_classifier] = get_classifier
app.dependency_overrides[routes_module.get_sim_devices] = get_sim_devices

app.include_router(api_router, prefix="/api")
