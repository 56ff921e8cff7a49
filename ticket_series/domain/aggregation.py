"""Folding daily items into dense date matrices and cumulative views."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from ticket_series.config import SETTINGS

from .models import (
    ZERO,
    DateMatrix,
    DistributedItem,
    Metric,
    MissingEntity,
    Number,
    SeriesRow,
    SeriesValue,
    ShowInfo,
)
from .reconciliation import iter_days


def item_value(item: DistributedItem, metric: Metric) -> tuple[Number, Number]:
    """(actual, estimated) contribution of one item for ``metric``.

    Estimated revenue is only surfaced when the settings ask for it.
    """
    if metric.is_revenue:
        if not item.is_estimated:
            return item.revenue, Decimal("0")
        if SETTINGS.surface_estimated_revenue:
            return Decimal("0"), item.revenue
        return Decimal("0"), Decimal("0")
    if item.is_estimated:
        return 0, item.tickets
    return item.tickets, 0


def _zero(metric: Metric) -> Number:
    return Decimal("0") if metric.is_revenue else 0


def aggregate(
    items: Iterable[DistributedItem],
    entity_ids: Sequence[str],
    window_start: date,
    window_end: date,
    metric: Metric | str = Metric.TICKETS_DAILY,
) -> DateMatrix:
    metric = Metric(metric)
    zero = _zero(metric)
    cells: dict[date, dict[str, list[Number]]] = {
        day: {entity_id: [zero, zero] for entity_id in entity_ids} for day in iter_days(window_start, window_end)
    }
    reported: dict[date, set[str]] = {day: set() for day in cells}

    for item in items:
        row = cells.get(item.date)
        if row is None or item.entity_id not in row:
            continue
        actual, estimated = item_value(item, metric)
        cell = row[item.entity_id]
        cell[0] += actual
        cell[1] += estimated
        if not item.is_estimated:
            reported[item.date].add(item.entity_id)

    return tuple(
        SeriesRow(
            date=day,
            values={entity_id: SeriesValue(actual, estimated) for entity_id, (actual, estimated) in row.items()},
            reported=frozenset(reported[day]),
        )
        for day, row in sorted(cells.items())
    )


def compute_baselines(
    items: Iterable[DistributedItem],
    entity_ids: Sequence[str],
    window_start: date,
    metric: Metric | str = Metric.TICKETS_DAILY,
) -> dict[str, SeriesValue]:
    """Totals accrued by each entity before ``window_start``."""
    metric = Metric(metric)
    zero = _zero(metric)
    totals: dict[str, list[Number]] = {entity_id: [zero, zero] for entity_id in entity_ids}
    for item in items:
        if item.date >= window_start or item.entity_id not in totals:
            continue
        actual, estimated = item_value(item, metric)
        totals[item.entity_id][0] += actual
        totals[item.entity_id][1] += estimated
    return {entity_id: SeriesValue(actual, estimated) for entity_id, (actual, estimated) in totals.items()}


def to_cumulative(
    matrix: Sequence[SeriesRow],
    entity_ids: Sequence[str],
    baselines: Mapping[str, SeriesValue] | None = None,
) -> DateMatrix:
    """Running totals per entity, optionally seeded with pre-window baselines.

    ``actual + estimated`` of every output cell equals the true running total.
    """
    baselines = baselines or {}
    running_total: dict[str, Number] = {}
    running_estimated: dict[str, Number] = {}
    for entity_id in entity_ids:
        baseline = baselines.get(entity_id, ZERO)
        running_total[entity_id] = baseline.actual + baseline.estimated
        running_estimated[entity_id] = baseline.estimated

    rows: list[SeriesRow] = []
    for row in matrix:
        values: dict[str, SeriesValue] = {}
        for entity_id in entity_ids:
            day = row.value(entity_id)
            running_total[entity_id] += day.actual + day.estimated
            running_estimated[entity_id] += day.estimated
            values[entity_id] = SeriesValue(
                actual=running_total[entity_id] - running_estimated[entity_id],
                estimated=running_estimated[entity_id],
            )
        rows.append(replace(row, values=values))
    return tuple(rows)


def mark_missing(matrix: Sequence[SeriesRow], shows: Iterable[ShowInfo]) -> DateMatrix:
    """Flag entities that are selling for an upcoming show but have nothing on a date.

    A show counts from its sales start until the day before it plays. Each
    flagged entity carries the date of its earliest such show.
    """
    shows_by_entity: dict[str, list[ShowInfo]] = defaultdict(list)
    for show in shows:
        if show.show_date is not None and show.sales_start_date is not None:
            shows_by_entity[show.entity_id].append(show)

    rows: list[SeriesRow] = []
    for row in matrix:
        missing: list[MissingEntity] = []
        for entity_id, entity_shows in shows_by_entity.items():
            upcoming = [s.show_date for s in entity_shows if s.sales_start_date <= row.date < s.show_date]
            if not upcoming:
                continue
            if row.value(entity_id).total > 0 or entity_id in row.reported:
                continue
            missing.append(MissingEntity(entity_id=entity_id, show_date=min(upcoming)))
        rows.append(replace(row, missing=tuple(missing)))
    return tuple(rows)


def select_entities(matrix: Sequence[SeriesRow], entity_ids: Sequence[str]) -> DateMatrix:
    """Keep only ``entity_ids``; an empty selection or ``"all"`` keeps everything."""
    if not entity_ids or "all" in entity_ids:
        return tuple(matrix)
    wanted = set(entity_ids)
    return tuple(
        replace(
            row,
            values={entity_id: value for entity_id, value in row.values.items() if entity_id in wanted},
            reported=row.reported & wanted,
            missing=tuple(m for m in row.missing if m.entity_id in wanted),
        )
        for row in matrix
    )


def without_estimates(matrix: Sequence[SeriesRow]) -> DateMatrix:
    return tuple(
        replace(
            row,
            values={
                entity_id: SeriesValue(
                    actual=value.actual,
                    estimated=Decimal("0") if isinstance(value.estimated, Decimal) else 0,
                )
                for entity_id, value in row.values.items()
            },
        )
        for row in matrix
    )
