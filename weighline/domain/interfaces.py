from __future__ import annotations
from typing import Optional, Protocol, runtime_checkable
from .models import SensorSnapshot, Validity


@runtime_checkable
class SnapshotObserver(Protocol):
    def __call__(self, snapshot: SensorSnapshot) -> None:
        ...


@runtime_checkable
class ClassificationListener(Protocol):
    """Side-effect channel fired when a reading's validity changes (beeps, lamps...)."""

    def on_classified(self, validity: Optional[Validity]) -> None:
        ...
