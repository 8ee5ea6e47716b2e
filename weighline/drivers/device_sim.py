from __future__ import annotations
import math
import random
from dataclasses import dataclass
from threading import Lock
from typing import Literal, Optional

import httpx

from ..core.timeutil import now_utc


PatternType = Literal["manual", "sine", "step", "ramp", "random"]

SIM_HOST = "sim.local"
SIM_BASE_URL = f"http://{SIM_HOST}"
SIM_SCALE_URL = f"{SIM_BASE_URL}/scale"
SIM_PHOTOCELL_URL = f"{SIM_BASE_URL}/photocell"


@dataclass
class PatternConfig:
    type: PatternType = "manual"
    baseline: float = 250.0
    amplitude: float = 10.0
    period_s: float = 60.0
    noise: float = 0.0
    step_low: float = 240.0
    step_high: float = 260.0
    step_period_s: float = 20.0
    ramp_min: float = 0.0
    ramp_max: float = 300.0
    ramp_period_s: float = 30.0


class SimulatedScale:
    """Scale answering in the ``s-``/``i-`` text protocol."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._manual_value = 250.0
        self._stable = True
        self._fault: Optional[str] = None
        self._pattern = PatternConfig()
        self._t0 = now_utc()

    def set_manual(self, value: float, stable: bool = True) -> None:
        with self._lock:
            self._pattern.type = "manual"
            self._manual_value = float(value)
            self._stable = stable

    def set_pattern(self, cfg: PatternConfig) -> None:
        with self._lock:
            self._pattern = cfg

    def set_fault(self, text: Optional[str]) -> None:
        """Answer ``text`` verbatim (e.g. ``"error"``) until cleared with None."""
        with self._lock:
            self._fault = text

    def status(self) -> dict:
        with self._lock:
            return {
                "manual_value": self._manual_value,
                "stable": self._stable,
                "fault": self._fault,
                "pattern": self._pattern.__dict__,
            }

    def _pattern_value(self, t: float) -> float:
        p = self._pattern
        if p.type == "manual":
            return self._manual_value

        if p.type == "sine":
            return p.baseline + p.amplitude * math.sin(2 * math.pi * t / max(p.period_s, 1.0))

        if p.type == "step":
            phase = (t % max(p.step_period_s, 1.0)) / max(p.step_period_s, 1.0)
            return p.step_high if phase >= 0.5 else p.step_low

        if p.type == "ramp":
            phase = (t % max(p.ramp_period_s, 1.0)) / max(p.ramp_period_s, 1.0)
            return p.ramp_min + (p.ramp_max - p.ramp_min) * phase

        if p.type == "random":
            return p.baseline + random.uniform(-p.amplitude, p.amplitude)

        return p.baseline

    def text(self) -> str:
        with self._lock:
            if self._fault is not None:
                return self._fault
            t = (now_utc() - self._t0).total_seconds()
            value = self._pattern_value(t)
            if self._pattern.noise > 0:
                value += random.uniform(-self._pattern.noise, self._pattern.noise)
            # Patterned weights are moving, so only a manual weight reads stable
            stable = self._stable if self._pattern.type == "manual" else False
        return f"{'s' if stable else 'i'}-{max(0.0, value):.1f}"


class SimulatedPhotocell:
    def __init__(self) -> None:
        self._lock = Lock()
        self._present = False
        self._fault: Optional[str] = None

    def set_present(self, present: bool) -> None:
        with self._lock:
            self._present = bool(present)

    def set_fault(self, text: Optional[str]) -> None:
        with self._lock:
            self._fault = text

    def status(self) -> dict:
        with self._lock:
            return {"present": self._present, "fault": self._fault}

    def text(self) -> str:
        with self._lock:
            if self._fault is not None:
                return self._fault
            return "1" if self._present else "0"


class SimulatedDeviceTransport(httpx.AsyncBaseTransport):
    """Serves the simulated devices under ``SIM_BASE_URL`` to an httpx client."""

    def __init__(self, scale: SimulatedScale, photocell: SimulatedPhotocell) -> None:
        self.scale = scale
        self.photocell = photocell
        self.offline = False

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if self.offline:
            raise httpx.ConnectError("Simulated device offline", request=request)

        if request.url.host != SIM_HOST:
            return httpx.Response(404, text="Not found", request=request)
        if request.url.path == "/scale":
            return httpx.Response(200, text=self.scale.text(), request=request)
        if request.url.path == "/photocell":
            return httpx.Response(200, text=self.photocell.text(), request=request)
        return httpx.Response(404, text="Not found", request=request)
