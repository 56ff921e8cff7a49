"""Application services orchestrating the chart series workflow."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Sequence

from ticket_series.config import SETTINGS
from ticket_series.domain.aggregation import (
    aggregate,
    compute_baselines,
    mark_missing,
    select_entities,
    to_cumulative,
    without_estimates,
)
from ticket_series.domain.models import (
    ChartPreferences,
    DateMatrix,
    DateWindow,
    DistributedItem,
    DistributionWeight,
    Metric,
    ShowInfo,
)
from ticket_series.domain.ranges import expand
from ticket_series.domain.repositories import DistributionRangeProvider, SalesDataProvider
from ticket_series.infrastructure.storage.result_cache import ResultCache, cache_key, merge

from .dto import ChartSeriesRequest, ChartSeriesResponse, ShowSales
from .series import distribute_shows, resolve_window

LOGGER = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def _now() -> datetime:
    return datetime.now(SETTINGS.timezone)


@dataclass(slots=True)
class ChartSeriesContext:
    provider: SalesDataProvider
    cache: ResultCache | None = None
    range_provider: DistributionRangeProvider | None = None
    clock: Callable[[], datetime] = field(default=_now)


def range_label(prefs: ChartPreferences) -> str:
    if prefs.date_range == "custom" and prefs.custom_start and prefs.custom_end:
        return f"custom:{prefs.custom_start.isoformat()}:{prefs.custom_end.isoformat()}"
    return prefs.date_range


class BuildChartSeriesUseCase:
    """Daily or cumulative series for a set of entities, reading through the cache.

    On a cache hit only the days after the cached history are recomputed.
    """

    def __init__(self, context: ChartSeriesContext) -> None:
        self._context = context

    def execute(self, request: ChartSeriesRequest) -> ChartSeriesResponse:
        prefs = request.preferences
        metric = Metric(prefs.metric)
        weight = DistributionWeight(prefs.distribution_weight)
        entity_ids = tuple(request.entity_ids)
        today = request.today or self._context.clock().date()
        window = resolve_window(prefs.date_range, today, prefs.custom_start, prefs.custom_end)

        shows = self._context.provider.list_shows(entity_ids)
        loader = self._item_loader(shows, weight)

        cache = self._context.cache
        key = cache_key(range_label(prefs), metric, weight, entity_ids)
        entry = cache.get(key, entity_ids) if cache is not None else None

        tail_start = window.start
        cached_rows: DateMatrix = ()
        if entry is not None:
            cached_rows = tuple(row for row in entry.data if row.date in window)
            tail_start = max(window.start, entry.cached_up_to_date + ONE_DAY)

        fresh: DateMatrix = ()
        if tail_start <= window.end:
            fresh = aggregate(loader(tail_start, window.end), entity_ids, tail_start, window.end, metric)
        daily = merge(cached_rows, fresh, entry.cached_up_to_date if entry else None)
        LOGGER.debug(
            "Built %d rows for %s (%d cached, %d fresh)", len(daily), key, len(cached_rows), len(fresh)
        )

        # only a fetch covering settled days may rewrite the entry
        if cache is not None and any(row.date < cache.yesterday() for row in fresh):
            cache.put(key, daily, entity_ids)

        daily = mark_missing(daily, shows)

        visible = self._visible_entities(entity_ids, request.selected_entities)
        matrix = select_entities(daily, request.selected_entities)
        if metric.is_cumulative:
            history = loader(None, window.start - ONE_DAY)
            baselines = compute_baselines(history, visible, window.start, metric)
            matrix = to_cumulative(matrix, visible, baselines)
        if not prefs.show_estimations:
            matrix = without_estimates(matrix)

        return ChartSeriesResponse(
            matrix=matrix,
            window=window,
            entity_ids=tuple(visible),
            from_cache=entry is not None,
        )

    def _item_loader(
        self,
        shows: Sequence[ShowInfo],
        weight: DistributionWeight,
    ) -> Callable[[date | None, date], list[DistributedItem]]:
        """Returns a function yielding items dated within ``[start, end]``."""
        show_ids = [show.show_id for show in shows]
        range_provider = self._context.range_provider

        if range_provider is not None:
            entity_map = {show.show_id: show.entity_id for show in shows}

            def from_ranges(start: date | None, end: date) -> list[DistributedItem]:
                ranges = range_provider.list_ranges(show_ids, start, end)
                if not ranges:
                    return []
                lower = start if start is not None else min(r.start_date for r in ranges)
                return expand(ranges, entity_map, lower, end, weight)

            return from_ranges

        reports = self._context.provider.list_reports(show_ids)
        by_show: dict[str, list] = {show_id: [] for show_id in show_ids}
        for report in reports:
            by_show.setdefault(report.show_id, []).append(report)
        items = distribute_shows(
            [
                ShowSales(show.show_id, show.entity_id, by_show.get(show.show_id, ()), show.sales_start_date)
                for show in shows
            ],
            weight,
        )

        def from_reports(start: date | None, end: date) -> list[DistributedItem]:
            return [item for item in items if item.date <= end and (start is None or item.date >= start)]

        return from_reports

    @staticmethod
    def _visible_entities(entity_ids: Sequence[str], selected: Sequence[str]) -> list[str]:
        if not selected or "all" in selected:
            return list(entity_ids)
        return [entity_id for entity_id in selected if entity_id in entity_ids]
