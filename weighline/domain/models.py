from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Mapping, Optional

from ..core.timeutil import now_utc


WeightStatus = Literal["stable", "unstable", "error", "offline", "disconnected"]
PhotocellState = Literal[0, 1]
Validity = Literal["ok", "underweight", "overweight"]

# Statuses whose value is meaningless (carried as 0 by convention)
NO_VALUE_STATUSES = frozenset({"error", "offline", "disconnected"})


@dataclass(frozen=True)
class WeightReading:
    value: float
    status: WeightStatus
    ts_utc: datetime = field(default_factory=now_utc)

    @property
    def has_value(self) -> bool:
        return self.status not in NO_VALUE_STATUSES


@dataclass(frozen=True)
class SensorConfig:
    scale_url: Optional[str] = None
    photocell_url: Optional[str] = None
    polling_interval_ms: int = 200

    def __post_init__(self) -> None:
        if isinstance(self.polling_interval_ms, bool) or not isinstance(self.polling_interval_ms, int):
            raise ValueError(f"polling_interval_ms must be an integer, got {self.polling_interval_ms!r}")
        if self.polling_interval_ms <= 0:
            raise ValueError(f"polling_interval_ms must be positive, got {self.polling_interval_ms}")
        # Empty strings mean "not wired", same as None
        if not self.scale_url:
            object.__setattr__(self, "scale_url", None)
        if not self.photocell_url:
            object.__setattr__(self, "photocell_url", None)

    @property
    def is_idle(self) -> bool:
        return self.scale_url is None and self.photocell_url is None

    @property
    def interval_s(self) -> float:
        return self.polling_interval_ms / 1000.0


@dataclass(frozen=True)
class ToleranceWindow:
    """Product weight window, expressed in ``unit``."""
    target_weight: float
    min_weight: float
    max_weight: float
    unit: str = "g"
    label: str = ""


@dataclass(frozen=True)
class SensorSnapshot:
    weight: WeightReading
    photocell_state: PhotocellState = 0
    is_scale_connected: bool = False
    is_photocell_connected: bool = False
    errors: Mapping[str, str] = field(default_factory=dict)
    ts_utc: datetime = field(default_factory=now_utc)

    @classmethod
    def disconnected(cls) -> "SensorSnapshot":
        return cls(weight=WeightReading(value=0.0, status="disconnected"))


@dataclass(frozen=True)
class Evaluation:
    display_value: float
    display_unit: str
    validation_value: float
    validation_unit: str
    validity: Optional[Validity]


@dataclass(frozen=True)
class ProductionItem:
    weight: float
    status: Validity
    ts_utc: Optional[datetime] = None
