"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .models import DistributionRange, ShowInfo, TicketReport


class SalesDataProvider(Protocol):
    """Provides shows and their raw cumulative reports."""

    def list_shows(self, entity_ids: Sequence[str]) -> Sequence[ShowInfo]:
        ...

    def list_reports(self, show_ids: Sequence[str]) -> Sequence[TicketReport]:
        ...


class DistributionRangeProvider(Protocol):
    """Provides precomputed distribution ranges overlapping ``[start, end]``."""

    def list_ranges(self, show_ids: Sequence[str], start: date | None, end: date) -> Sequence[DistributionRange]:
        ...


class KeyValueStore(Protocol):
    """String store backing the result cache. ``set`` raises ``StoreFullError`` when out of room."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class StoreFullError(Exception):
    """Raised by a store that cannot accept a write."""
