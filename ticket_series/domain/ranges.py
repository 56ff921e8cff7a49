"""Precomputed distribution ranges: building them and expanding them into daily items."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from .models import DistributedItem, DistributionRange, DistributionWeight, Snapshot
from .reconciliation import ONE_DAY, spread


def build_ranges(
    snapshots: Sequence[Snapshot],
    show_id: str,
    sales_start_date: date | None = None,
) -> list[DistributionRange]:
    """Walk a show's snapshots once and record every delta as a range.

    Zero-growth reports still get a range so their dates stay marked as
    report dates.
    """
    ranges: list[DistributionRange] = []
    previous_tickets = 0
    previous_revenue = Decimal("0")
    previous_date = sales_start_date
    anchored_on_sales_start = sales_start_date is not None

    for snapshot in sorted(snapshots, key=lambda s: s.effective_date):
        current = snapshot.effective_date
        if previous_date is None:
            previous_tickets = snapshot.cumulative_tickets
            previous_revenue = snapshot.cumulative_revenue
            previous_date = current
            continue

        start = previous_date if anchored_on_sales_start else previous_date + ONE_DAY
        ranges.append(
            DistributionRange(
                show_id=show_id,
                start_date=min(start, current),
                end_date=current,
                tickets=max(0, snapshot.cumulative_tickets - previous_tickets),
                revenue=max(Decimal("0"), snapshot.cumulative_revenue - previous_revenue),
                is_report_date=True,
            )
        )
        previous_tickets = snapshot.cumulative_tickets
        previous_revenue = snapshot.cumulative_revenue
        previous_date = current
        anchored_on_sales_start = False

    return ranges


def report_dates_by_show(ranges: Iterable[DistributionRange]) -> dict[str, set[date]]:
    dates: dict[str, set[date]] = defaultdict(set)
    for item in ranges:
        if item.is_report_date:
            dates[item.show_id].add(item.end_date)
    return dict(dates)


def expand(
    ranges: Sequence[DistributionRange],
    entity_id_map: Mapping[str, str],
    window_start: date,
    window_end: date,
    weight: DistributionWeight | str = DistributionWeight.EVEN,
) -> list[DistributedItem]:
    """Spread each range over its days and keep those inside the window.

    Ranges whose show has no entity in ``entity_id_map`` are ignored.
    """
    report_dates = report_dates_by_show(ranges)
    items: list[DistributedItem] = []

    for item in ranges:
        entity_id = entity_id_map.get(item.show_id)
        if entity_id is None:
            continue
        show_reports = report_dates.get(item.show_id, set())

        if item.tickets == 0 and item.revenue == 0:
            if item.is_report_date and window_start <= item.end_date <= window_end:
                items.append(
                    DistributedItem(
                        date=item.end_date,
                        entity_id=entity_id,
                        tickets=0,
                        revenue=Decimal("0"),
                        is_estimated=False,
                    )
                )
            continue

        start = min(item.start_date, item.end_date)
        for daily in spread(entity_id, start, item.end_date, item.tickets, item.revenue, weight, show_reports):
            if not window_start <= daily.date <= window_end:
                continue
            is_estimated = daily.date not in show_reports
            if is_estimated != daily.is_estimated:
                daily = replace(daily, is_estimated=is_estimated)
            items.append(daily)

    return items
