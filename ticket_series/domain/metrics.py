"""Marketing efficiency metrics over a window of estimated daily sales."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from ticket_series.config import SETTINGS

from .models import DistributedItem
from .reconciliation import iter_days


def apply_mva(amount: Decimal, include_mva: bool) -> Decimal:
    """Ad platforms report spend excluding MVA; add it when asked."""
    if not include_mva:
        return Decimal(amount)
    return Decimal(amount) * (1 + SETTINGS.mva_rate)


@dataclass(frozen=True)
class DailyBreakdown:
    date: date
    ad_spend: Decimal
    tickets: int
    revenue: Decimal
    roas: Decimal | None


@dataclass(frozen=True)
class PeriodMetrics:
    ad_spend: Decimal
    revenue_delta: Decimal
    tickets_delta: int
    roas: Decimal | None
    cpt: Decimal | None
    mer: Decimal | None
    daily: Sequence[DailyBreakdown] = field(default_factory=tuple)


def _ratio(numerator: Decimal, denominator: Decimal | int) -> Decimal | None:
    if not denominator:
        return None
    return Decimal(numerator) / Decimal(denominator)


def period_metrics(
    items: Iterable[DistributedItem],
    ad_spend: Mapping[date, Decimal],
    window_start: date,
    window_end: date,
    include_mva: bool = True,
    include_daily: bool = False,
) -> PeriodMetrics:
    """ROAS, cost per ticket and MER for ``[window_start, window_end]``.

    All items count here, estimated or not, since the totals are deltas over
    the whole window.
    """
    tickets_by_day: dict[date, int] = {}
    revenue_by_day: dict[date, Decimal] = {}
    for item in items:
        if not window_start <= item.date <= window_end:
            continue
        tickets_by_day[item.date] = tickets_by_day.get(item.date, 0) + item.tickets
        revenue_by_day[item.date] = revenue_by_day.get(item.date, Decimal("0")) + item.revenue

    spend_by_day = {
        day: apply_mva(amount, include_mva)
        for day, amount in ad_spend.items()
        if window_start <= day <= window_end
    }

    total_spend = sum(spend_by_day.values(), Decimal("0"))
    total_tickets = sum(tickets_by_day.values())
    total_revenue = sum(revenue_by_day.values(), Decimal("0"))

    mer = _ratio(total_spend, total_revenue)
    daily: tuple[DailyBreakdown, ...] = ()
    if include_daily:
        daily = tuple(
            DailyBreakdown(
                date=day,
                ad_spend=spend_by_day.get(day, Decimal("0")),
                tickets=tickets_by_day.get(day, 0),
                revenue=revenue_by_day.get(day, Decimal("0")),
                roas=_ratio(revenue_by_day.get(day, Decimal("0")), spend_by_day.get(day, Decimal("0"))),
            )
            for day in iter_days(window_start, window_end)
        )

    return PeriodMetrics(
        ad_spend=total_spend,
        revenue_delta=total_revenue,
        tickets_delta=total_tickets,
        roas=_ratio(total_revenue, total_spend),
        cpt=_ratio(total_spend, total_tickets),
        mer=mer * 100 if mer is not None else None,
        daily=daily,
    )
