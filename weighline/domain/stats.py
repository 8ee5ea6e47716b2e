from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from .models import ProductionItem
from ..core.timeutil import now_utc


@dataclass(frozen=True)
class ProductionStats:
    total: int
    ok: int
    underweight: int
    overweight: int
    ok_rate: float        # percent
    total_weight: float
    avg_weight: float
    rate_per_hour: float


def _as_utc(ts: datetime) -> datetime:
    # Naive timestamps are taken to be UTC
    return ts.replace(tzinfo=timezone.utc) if ts.tzinfo is None else ts


def summarize(
    items: Iterable[ProductionItem],
    started_at: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> ProductionStats:
    items = list(items)
    total = len(items)
    ok = sum(1 for i in items if i.status == "ok")
    under = sum(1 for i in items if i.status == "underweight")
    over = sum(1 for i in items if i.status == "overweight")
    total_weight = sum(i.weight for i in items)

    rate_per_hour = 0.0
    if started_at is not None and total > 0:
        hours = (_as_utc(now or now_utc()) - _as_utc(started_at)).total_seconds() / 3600.0
        rate_per_hour = total / hours if hours > 0 else 0.0

    return ProductionStats(
        total=total,
        ok=ok,
        underweight=under,
        overweight=over,
        ok_rate=(ok / total) * 100.0 if total else 0.0,
        total_weight=total_weight,
        avg_weight=total_weight / total if total else 0.0,
        rate_per_hour=rate_per_hour,
    )
