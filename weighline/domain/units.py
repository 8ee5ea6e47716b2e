"""Mass unit conversion for scale readings.

Every conversion pivots through grams. Unknown unit symbols never raise:
a unit mismatch is cosmetic and must not block a line's display, so the
value is passed through and a warning is logged.
"""
from __future__ import annotations
import logging
from typing import Optional

logger = logging.getLogger(__name__)


# Grams per unit
TO_GRAMS: dict[str, float] = {
    "g": 1.0,
    "kg": 1000.0,
    "lb": 453.592,
    "oz": 28.3495,
    "mg": 0.001,
}

SUPPORTED_UNITS = tuple(TO_GRAMS)

_PRECISION: dict[str, int] = {
    "kg": 3,
    "lb": 3,
    "g": 1,
    "oz": 1,
    "mg": 0,
}
DEFAULT_PRECISION = 2


def is_known_unit(unit: str) -> bool:
    return unit.lower() in TO_GRAMS


def convert_weight(value: float, from_unit: str, to_unit: str) -> float:
    if from_unit == to_unit:
        return value

    from_factor = TO_GRAMS.get(from_unit.lower())
    to_factor = TO_GRAMS.get(to_unit.lower())
    if from_factor is None or to_factor is None:
        logger.warning(
            "Unknown weight unit: %s or %s, returning original value", from_unit, to_unit
        )
        return value

    return value * from_factor / to_factor


def unit_precision(unit: str) -> int:
    return _PRECISION.get(unit.lower(), DEFAULT_PRECISION)


def format_weight(value: float, unit: str, precision: Optional[int] = None) -> str:
    digits = unit_precision(unit) if precision is None else precision
    return f"{value:.{digits}f}"
