from __future__ import annotations
import asyncio
import logging
from typing import Optional

import httpx

from ..domain.interfaces import SnapshotObserver
from ..domain.models import SensorConfig, SensorSnapshot
from ..core.timeutil import now_utc
from ..sensors.base import PhotocellSample, ScaleSample
from ..sensors.http_sensors import HttpPhotocell, HttpScale


logger = logging.getLogger(__name__)


async def _unwired_scale() -> ScaleSample:
    return ScaleSample.unwired()


async def _unwired_photocell() -> PhotocellSample:
    return PhotocellSample.unwired()


class SensorPoller:
    """Polls the scale and photocell of one line on a fixed interval.

    At most one polling task is alive at a time: ``reconfigure`` and
    ``stop`` cancel the running task before anything else happens. Each
    tick is an independent attempt; there is no retry or backoff.
    The latest state is exposed as ``snapshot`` and pushed to subscribers.
    """

    def __init__(
        self,
        config: Optional[SensorConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or SensorConfig()
        self._client = client
        self._owns_client = client is None
        self._transport = transport

        self._task: Optional[asyncio.Task] = None
        # Serializes stop/config/start so overlapping reconfigures cannot interleave
        self._lock = asyncio.Lock()
        self._generation = 0
        self._scale: Optional[HttpScale] = None
        self._photocell: Optional[HttpPhotocell] = None
        self._observers: list[SnapshotObserver] = []

        self.snapshot = SensorSnapshot.disconnected()
        self.cycles = 0

    @property
    def config(self) -> SensorConfig:
        return self._config

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, observer: SnapshotObserver) -> None:
        self._observers.append(observer)

    def unsubscribe(self, observer: SnapshotObserver) -> None:
        try:
            self._observers.remove(observer)
        except ValueError:
            pass

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            # Transport default timeout; no per-device override
            self._client = httpx.AsyncClient(transport=self._transport)
        return self._client

    def _bind_sensors(self, config: SensorConfig) -> None:
        self._scale = HttpScale(config.scale_url) if config.scale_url else None
        self._photocell = HttpPhotocell(config.photocell_url) if config.photocell_url else None

    async def start(self) -> None:
        if self.running:
            return

        self._generation += 1
        if self._config.is_idle:
            logger.info("Sensor poller idle (no scale or photocell URL)")
            self._publish(SensorSnapshot.disconnected())
            return

        self._ensure_client()
        self._bind_sensors(self._config)
        logger.info(
            "Sensor poller started (scale=%s photocell=%s interval_ms=%d)",
            self._config.scale_url,
            self._config.photocell_url,
            self._config.polling_interval_ms,
        )
        self._task = asyncio.create_task(self._run(self._generation), name="sensor_poller")

    async def stop(self) -> None:
        task, self._task = self._task, None
        # Bumping the generation drops results of any cycle still in flight
        self._generation += 1
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Sensor poller stopped")

    async def reconfigure(self, config: SensorConfig) -> None:
        async with self._lock:
            await self.stop()
            self._config = config
            await self.start()

    async def aclose(self) -> None:
        async with self._lock:
            await self.stop()
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def poll_once(self) -> SensorSnapshot:
        """Run a single cycle against the current configuration and publish it."""
        self._ensure_client()
        self._bind_sensors(self._config)
        snapshot = await self._cycle()
        self._publish(snapshot)
        return snapshot

    async def _cycle(self) -> SensorSnapshot:
        client = self._ensure_client()
        scale, photocell = await asyncio.gather(
            self._scale.read(client) if self._scale else _unwired_scale(),
            self._photocell.read(client) if self._photocell else _unwired_photocell(),
        )

        errors: dict[str, str] = {}
        if scale.error:
            errors["scale"] = scale.error
        if photocell.error:
            errors["photocell"] = photocell.error

        return SensorSnapshot(
            weight=scale.weight,
            photocell_state=photocell.state,
            is_scale_connected=scale.connected,
            is_photocell_connected=photocell.connected,
            errors=errors,
            ts_utc=now_utc(),
        )

    def _publish(self, snapshot: SensorSnapshot) -> None:
        # Single assignment: value, status and flags always move together
        self.snapshot = snapshot
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception:
                logger.exception("Snapshot observer %r failed", observer)

    async def _run(self, generation: int) -> None:
        loop = asyncio.get_running_loop()
        interval = self._config.interval_s

        while True:
            started = loop.time()
            try:
                snapshot = await self._cycle()
                if generation == self._generation:
                    self.cycles += 1
                    self._publish(snapshot)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception("Sensor poll cycle error: %s", e)

            # Fixed rate: sleep whatever is left of the period
            await asyncio.sleep(max(0.0, interval - (loop.time() - started)))
