"""Turning cumulative report snapshots into per-day sales items."""
from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Collection, Iterable, Sequence

from .allocation import distribute, distribute_amount
from .models import DistributedItem, DistributionWeight, Snapshot, TicketReport

LOGGER = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def effective_date(report: TicketReport) -> date | None:
    """Date a report describes: its sale date, else the day before it was received."""
    if report.sale_date is not None:
        return report.sale_date
    if report.reported_at is not None:
        return report.reported_at.date() - ONE_DAY
    return None


def to_snapshots(reports: Iterable[TicketReport]) -> list[Snapshot]:
    """Order reports by effective date, keeping the latest report per date.

    Reports without any usable date are dropped.
    """
    latest: dict[date, tuple[tuple[float, int], TicketReport]] = {}
    for position, report in enumerate(reports):
        day = effective_date(report)
        if day is None:
            LOGGER.debug("Skipping report for show %s without sale date or receipt time", report.show_id)
            continue
        received = report.reported_at.timestamp() if report.reported_at else float("-inf")
        rank = (received, position)
        current = latest.get(day)
        if current is None or rank >= current[0]:
            latest[day] = (rank, report)

    return [
        Snapshot(
            effective_date=day,
            cumulative_tickets=max(0, int(report.quantity_sold or 0)),
            cumulative_revenue=max(Decimal("0"), Decimal(report.revenue or 0)),
        )
        for day, (_, report) in sorted(latest.items())
    ]


def iter_days(start: date, end: date) -> Iterable[date]:
    day = start
    while day <= end:
        yield day
        day += ONE_DAY


def spread(
    entity_id: str,
    start: date,
    end: date,
    tickets: int,
    revenue: Decimal,
    weight: DistributionWeight | str,
    report_dates: Collection[date],
) -> list[DistributedItem]:
    """Allocate a delta over ``[start, end]``; ``end`` and known report dates count as actual."""
    days = (end - start).days + 1
    ticket_parts = distribute(tickets, days, weight)
    revenue_parts = distribute_amount(revenue, days, weight)
    return [
        DistributedItem(
            date=day,
            entity_id=entity_id,
            tickets=ticket_parts[i],
            revenue=revenue_parts[i],
            is_estimated=day != end and day not in report_dates,
        )
        for i, day in enumerate(iter_days(start, end))
    ]


def reconcile(
    snapshots: Sequence[Snapshot],
    entity_id: str,
    sales_start_date: date | None = None,
    report_dates: Collection[date] | None = None,
    weight: DistributionWeight | str = DistributionWeight.EVEN,
) -> list[DistributedItem]:
    """Convert one show's cumulative snapshots into daily items.

    Without a sales start date the first snapshot only seeds the running
    baseline, so a show with a single report and no start date yields
    nothing. A report showing no growth yields an explicit zero item on its
    date.
    """
    if not snapshots:
        return []
    ordered = sorted(snapshots, key=lambda s: s.effective_date)
    if report_dates is None:
        report_dates = {s.effective_date for s in ordered}

    items: list[DistributedItem] = []
    previous_tickets = 0
    previous_revenue = Decimal("0")
    previous_date = sales_start_date
    anchored_on_sales_start = sales_start_date is not None

    for snapshot in ordered:
        current = snapshot.effective_date
        if previous_date is None:
            previous_tickets = snapshot.cumulative_tickets
            previous_revenue = snapshot.cumulative_revenue
            previous_date = current
            continue

        ticket_delta = snapshot.cumulative_tickets - previous_tickets
        revenue_delta = max(Decimal("0"), snapshot.cumulative_revenue - previous_revenue)

        if ticket_delta <= 0:
            items.append(
                DistributedItem(
                    date=current,
                    entity_id=entity_id,
                    tickets=0,
                    revenue=revenue_delta,
                    is_estimated=False,
                )
            )
        else:
            start = previous_date if anchored_on_sales_start else previous_date + ONE_DAY
            if start >= current:
                items.append(
                    DistributedItem(
                        date=current,
                        entity_id=entity_id,
                        tickets=ticket_delta,
                        revenue=revenue_delta,
                        is_estimated=False,
                    )
                )
            else:
                items.extend(spread(entity_id, start, current, ticket_delta, revenue_delta, weight, report_dates))

        previous_tickets = snapshot.cumulative_tickets
        previous_revenue = snapshot.cumulative_revenue
        previous_date = current
        anchored_on_sales_start = False

    return items
