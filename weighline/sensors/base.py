from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

import httpx

from ..domain.models import PhotocellState, WeightReading


@dataclass(frozen=True)
class ScaleSample:
    weight: WeightReading
    connected: bool
    error: Optional[str] = None

    @classmethod
    def unwired(cls) -> "ScaleSample":
        return cls(weight=WeightReading(value=0.0, status="disconnected"), connected=False)


@dataclass(frozen=True)
class PhotocellSample:
    state: PhotocellState
    connected: bool
    error: Optional[str] = None

    @classmethod
    def unwired(cls) -> "PhotocellSample":
        return cls(state=0, connected=False)


SampleT = TypeVar("SampleT", ScaleSample, PhotocellSample)


class Sensor(ABC, Generic[SampleT]):
    """A text-protocol device reachable by HTTP GET."""

    def __init__(self, url: str) -> None:
        self._url = url

    @property
    def url(self) -> str:
        return self._url

    @property
    @abstractmethod
    def sensor_id(self) -> str:
        ...

    @abstractmethod
    async def read(self, client: httpx.AsyncClient) -> SampleT:
        """Fetch and classify one sample. Never raises for device faults."""
        ...
