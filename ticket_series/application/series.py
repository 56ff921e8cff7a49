"""Pure orchestration from shows or ranges to date matrices."""
from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Mapping, Sequence

from ticket_series.config import SETTINGS
from ticket_series.domain.aggregation import aggregate, to_cumulative
from ticket_series.domain.models import (
    DateMatrix,
    DateWindow,
    DistributedItem,
    DistributionRange,
    DistributionWeight,
    Metric,
    SeriesRow,
    SeriesValue,
)
from ticket_series.domain.ranges import expand
from ticket_series.domain.reconciliation import reconcile, to_snapshots

from .dto import ShowSales


def resolve_window(
    date_range: str,
    today: date,
    custom_start: date | None = None,
    custom_end: date | None = None,
) -> DateWindow:
    """Presets end yesterday; a custom range needs both bounds or falls back to the default preset."""
    if date_range == "custom" and custom_start and custom_end:
        return DateWindow(custom_start, custom_end)
    days = SETTINGS.date_range_days.get(date_range, SETTINGS.default_range_days)
    return DateWindow(today - timedelta(days=days), today - timedelta(days=1))


def entity_order(shows: Iterable[ShowSales]) -> list[str]:
    return list(dict.fromkeys(show.entity_id for show in shows))


def distribute_shows(
    shows: Sequence[ShowSales],
    weight: DistributionWeight | str = DistributionWeight.EVEN,
) -> list[DistributedItem]:
    """Daily items for every show over its whole report history."""
    items: list[DistributedItem] = []
    for show in shows:
        snapshots = to_snapshots(show.reports)
        items.extend(reconcile(snapshots, show.entity_id, show.sales_start_date, weight=weight))
    return items


def compute_daily_series(
    shows: Sequence[ShowSales],
    window: DateWindow,
    weight: DistributionWeight | str = DistributionWeight.EVEN,
    metric: Metric | str = Metric.TICKETS_DAILY,
    entity_ids: Sequence[str] | None = None,
) -> DateMatrix:
    if entity_ids is None:
        entity_ids = entity_order(shows)
    return aggregate(distribute_shows(shows, weight), entity_ids, window.start, window.end, metric)


def compute_daily_series_from_ranges(
    ranges: Sequence[DistributionRange],
    entity_id_map: Mapping[str, str],
    window: DateWindow,
    weight: DistributionWeight | str = DistributionWeight.EVEN,
    metric: Metric | str = Metric.TICKETS_DAILY,
    entity_ids: Sequence[str] | None = None,
) -> DateMatrix:
    if entity_ids is None:
        entity_ids = list(dict.fromkeys(entity_id_map.values()))
    items = expand(ranges, entity_id_map, window.start, window.end, weight)
    return aggregate(items, entity_ids, window.start, window.end, metric)


def compute_cumulative_series(
    matrix: Sequence[SeriesRow],
    entity_ids: Sequence[str],
    baselines: Mapping[str, SeriesValue] | None = None,
) -> DateMatrix:
    return to_cumulative(matrix, entity_ids, baselines)
