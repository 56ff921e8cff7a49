"""Application-level DTOs for chart series requests."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Sequence

from ticket_series.domain.models import ChartPreferences, DateMatrix, DateWindow, TicketReport


@dataclass(slots=True, frozen=True)
class ShowSales:
    """One show's reports, keyed to the entity its sales are charted under."""

    show_id: str
    entity_id: str
    reports: Sequence[TicketReport]
    sales_start_date: date | None = None


@dataclass(slots=True, frozen=True)
class ChartSeriesRequest:
    entity_ids: Sequence[str]
    preferences: ChartPreferences = field(default_factory=ChartPreferences)
    selected_entities: Sequence[str] = ()
    today: date | None = None


@dataclass(slots=True, frozen=True)
class ChartSeriesResponse:
    matrix: DateMatrix
    window: DateWindow
    entity_ids: tuple[str, ...]
    from_cache: bool
