from __future__ import annotations

import logging

import httpx

from .base import PhotocellSample, ScaleSample, Sensor
from ..domain.models import WeightReading
from ..domain.parsers import parse_photocell, parse_weight
from ..drivers.http_device import fetch_text

logger = logging.getLogger(__name__)

INVALID_RESPONSE = "Invalid response"


class HttpScale(Sensor[ScaleSample]):
    @property
    def sensor_id(self) -> str:
        return "scale"

    async def read(self, client: httpx.AsyncClient) -> ScaleSample:
        result = await fetch_text(client, self.url)
        if not result.ok:
            # Device unreachable: distinct from the device answering "error"
            return ScaleSample(
                weight=WeightReading(value=0.0, status="disconnected"),
                connected=False,
                error=result.error,
            )

        parsed = parse_weight(result.text or "")
        if parsed.status == "error":
            logger.debug("Scale reported error: %r", result.text)
        return ScaleSample(
            weight=WeightReading(value=parsed.value, status=parsed.status),
            connected=parsed.status != "error",
        )


class HttpPhotocell(Sensor[PhotocellSample]):
    @property
    def sensor_id(self) -> str:
        return "photocell"

    async def read(self, client: httpx.AsyncClient) -> PhotocellSample:
        result = await fetch_text(client, self.url)
        if not result.ok:
            return PhotocellSample(state=0, connected=False, error=result.error)

        parsed = parse_photocell(result.text or "")
        if parsed.is_error:
            logger.debug("Photocell invalid response: %r", result.text)
            return PhotocellSample(state=0, connected=False, error=INVALID_RESPONSE)
        return PhotocellSample(state=parsed.state, connected=True)
