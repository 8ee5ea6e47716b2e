from __future__ import annotations
import logging
from typing import Optional

from ..domain.classifier import evaluate
from ..domain.interfaces import ClassificationListener
from ..domain.models import Evaluation, SensorSnapshot, ToleranceWindow, Validity

logger = logging.getLogger(__name__)


class LoggingListener:
    def on_classified(self, validity: Optional[Validity]) -> None:
        if validity in ("underweight", "overweight"):
            logger.warning("Weight out of tolerance: %s", validity)
        else:
            logger.info("Weight validity: %s", validity)


class ClassifyingObserver:
    """Re-judges every snapshot against the bound product.

    Subscribed to the poller; notifies ``listener`` only when the validity
    changes so a held weight does not re-trigger feedback on every tick.
    """

    def __init__(
        self,
        listener: ClassificationListener,
        product: Optional[ToleranceWindow] = None,
        line_unit: str = "g",
        decimal_precision: Optional[int] = None,
    ) -> None:
        self._listener = listener
        self._product = product
        self._line_unit = line_unit
        self._default_precision = decimal_precision
        self._decimal_precision = decimal_precision
        self._last_validity: Optional[Validity] = None
        self.last: Optional[Evaluation] = None

    @property
    def product(self) -> Optional[ToleranceWindow]:
        return self._product

    @property
    def line_unit(self) -> str:
        return self._line_unit

    @property
    def decimal_precision(self) -> Optional[int]:
        """Display precision for this binding; None means the unit default.

        A bind without an explicit precision falls back to the one given at
        construction.
        """
        return self._decimal_precision

    def bind(
        self,
        product: Optional[ToleranceWindow],
        line_unit: Optional[str] = None,
        decimal_precision: Optional[int] = None,
    ) -> None:
        self._product = product
        if line_unit:
            self._line_unit = line_unit
        self._decimal_precision = (
            self._default_precision if decimal_precision is None else decimal_precision
        )
        self._last_validity = None
        self.last = None

    def __call__(self, snapshot: SensorSnapshot) -> None:
        ev = evaluate(snapshot.weight, self._product, self._line_unit)
        self.last = ev
        if ev.validity != self._last_validity:
            self._last_validity = ev.validity
            self._listener.on_classified(ev.validity)
