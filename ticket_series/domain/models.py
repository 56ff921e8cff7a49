"""Domain models for the ticket sales series engine.

Reports arrive as cumulative snapshots per show. Everything downstream of
reconciliation works on per-day items and dense date matrices.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Mapping, Union

Number = Union[int, Decimal]


class DistributionWeight(str, Enum):
    """Shape used when a delta is spread across several days."""

    EVEN = "even"
    EARLY = "early"
    LATE = "late"


class Metric(str, Enum):
    TICKETS_DAILY = "tickets_daily"
    REVENUE_DAILY = "revenue_daily"
    TICKETS_CUMULATIVE = "tickets_cumulative"
    REVENUE_CUMULATIVE = "revenue_cumulative"

    @property
    def is_revenue(self) -> bool:
        return self in (Metric.REVENUE_DAILY, Metric.REVENUE_CUMULATIVE)

    @property
    def is_cumulative(self) -> bool:
        return self in (Metric.TICKETS_CUMULATIVE, Metric.REVENUE_CUMULATIVE)


@dataclass(frozen=True)
class TicketReport:
    """Raw cumulative report row as delivered by a ticketing platform."""

    show_id: str
    quantity_sold: int
    revenue: Decimal
    sale_date: date | None = None
    reported_at: datetime | None = None


@dataclass(frozen=True)
class Snapshot:
    """Cumulative totals as of the end of ``effective_date``."""

    effective_date: date
    cumulative_tickets: int
    cumulative_revenue: Decimal


@dataclass(frozen=True)
class DistributedItem:
    date: date
    entity_id: str
    tickets: int
    revenue: Decimal
    is_estimated: bool


@dataclass(frozen=True)
class DistributionRange:
    """A delta already computed upstream, to be spread over ``[start_date, end_date]``."""

    show_id: str
    start_date: date
    end_date: date
    tickets: int
    revenue: Decimal
    is_report_date: bool = True


@dataclass(frozen=True)
class ShowInfo:
    show_id: str
    entity_id: str
    sales_start_date: date | None = None
    show_date: date | None = None


@dataclass(frozen=True)
class SeriesValue:
    actual: Number = 0
    estimated: Number = 0

    @property
    def total(self) -> Number:
        return self.actual + self.estimated


ZERO = SeriesValue()


@dataclass(frozen=True)
class MissingEntity:
    """An entity selling for an upcoming show that has nothing for a date."""

    entity_id: str
    show_date: date


@dataclass(frozen=True)
class SeriesRow:
    """One date of a date matrix.

    ``reported`` holds the entities that had a real report on this date,
    including reports that showed no growth. ``missing`` lists entities
    whose sales had started for an upcoming show but which show neither
    sales nor a report on this date.
    """

    date: date
    values: Mapping[str, SeriesValue] = field(default_factory=dict)
    reported: frozenset[str] = frozenset()
    missing: tuple[MissingEntity, ...] = ()

    def value(self, entity_id: str) -> SeriesValue:
        return self.values.get(entity_id, ZERO)


DateMatrix = tuple[SeriesRow, ...]


@dataclass(frozen=True)
class DateWindow:
    """Inclusive range of dates shown on a chart."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Window end {self.end} is before start {self.start}")

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and self.start <= day <= self.end


@dataclass(frozen=True)
class ChartPreferences:
    date_range: str = "14d"
    custom_start: date | None = None
    custom_end: date | None = None
    metric: Metric = Metric.TICKETS_DAILY
    show_estimations: bool = True
    distribution_weight: DistributionWeight = DistributionWeight.EVEN
    show_ad_spend: bool = True
    include_mva: bool = False
