from __future__ import annotations
from typing import Optional

from .models import Evaluation, ToleranceWindow, Validity, WeightReading, WeightStatus
from .units import convert_weight


def classify(
    converted_value: float,
    product: Optional[ToleranceWindow],
    status: WeightStatus = "stable",
) -> Optional[Validity]:
    """Judge a reading already converted into the product's unit.

    Only stable readings are judged; bounds are inclusive.
    """
    if product is None or status != "stable":
        return None
    if converted_value < product.min_weight:
        return "underweight"
    if converted_value > product.max_weight:
        return "overweight"
    return "ok"


def evaluate(
    reading: WeightReading,
    product: Optional[ToleranceWindow],
    line_unit: str = "g",
) -> Evaluation:
    """Prepare a reading for display and judge it against ``product``.

    The scale reports in ``line_unit``; validation happens in the
    product's unit (falling back to the line unit when no product is bound).
    """
    product_unit = product.unit if product and product.unit else line_unit

    if reading.has_value:
        display_value = reading.value
        validation_value = convert_weight(reading.value, line_unit, product_unit)
    else:
        display_value = 0.0
        validation_value = 0.0

    return Evaluation(
        display_value=display_value,
        display_unit=line_unit,
        validation_value=validation_value,
        validation_unit=product_unit,
        validity=classify(validation_value, product, reading.status),
    )
