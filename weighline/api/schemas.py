from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, Field, model_validator
from typing import Optional, Literal, List


class SensorConfigIn(BaseModel):
    scale_url: Optional[str] = None
    photocell_url: Optional[str] = None
    polling_interval_ms: int = Field(default=200, gt=0)


class ProductIn(BaseModel):
    target_weight: float = Field(ge=0)
    min_weight: float = Field(ge=0)
    max_weight: float = Field(ge=0)
    unit: str = "g"
    label: str = ""
    # Line-side overrides (scale unit and display precision)
    line_unit: Optional[str] = None
    decimal_precision: Optional[int] = Field(default=None, ge=0, le=6)

    @model_validator(mode="after")
    def _check_window(self) -> "ProductIn":
        if self.min_weight > self.max_weight:
            raise ValueError("min_weight must not exceed max_weight")
        return self


class DeviceCheckRequest(BaseModel):
    url: str
    timeout: float = Field(default=3.0, gt=0, le=30)


class ConvertRequest(BaseModel):
    value: float
    from_unit: str
    to_unit: str
    precision: Optional[int] = Field(default=None, ge=0, le=6)


class ItemIn(BaseModel):
    weight: float
    status: Literal["ok", "underweight", "overweight"]


class StatsRequest(BaseModel):
    items: List[ItemIn]
    started_at: Optional[datetime] = None


class SimScaleManualRequest(BaseModel):
    value: float = Field(ge=0)
    stable: bool = True


class SimPatternRequest(BaseModel):
    type: Literal["manual", "sine", "step", "ramp", "random"]
    baseline: float = 250
    amplitude: float = 10
    period_s: float = 60
    noise: float = 0
    step_low: float = 240
    step_high: float = 260
    step_period_s: float = 20
    ramp_min: float = 0
    ramp_max: float = 300
    ramp_period_s: float = 30


class SimFaultRequest(BaseModel):
    # Raw text the device answers with; null clears the fault
    text: Optional[str] = None


class SimPhotocellRequest(BaseModel):
    present: bool


class SimOfflineRequest(BaseModel):
    offline: bool
