"""Export-file-backed repositories for ticket report data."""
from __future__ import annotations

from dataclasses import replace
from datetime import date
from io import BytesIO
from pathlib import Path
from typing import Sequence

from ticket_series.domain.models import DistributionRange, ShowInfo, TicketReport
from ticket_series.domain.ranges import build_ranges
from ticket_series.domain.reconciliation import to_snapshots
from ticket_series.domain.repositories import DistributionRangeProvider, SalesDataProvider
from ticket_series.infrastructure.parsing.reports import reports_to_records
from ticket_series.infrastructure.parsing.utils import ensure_bytes


class ExportSalesRepository(SalesDataProvider, DistributionRangeProvider):
    """Serves shows, reports and derived ranges from one CSV or Excel export.

    With ``group_by="show"`` every show is its own entity; otherwise shows
    are keyed to the export's ``entity_id`` column.
    """

    def __init__(self, source: BytesIO | Path | bytes, group_by: str = "entity") -> None:
        name = source.name if isinstance(source, Path) else None
        shows, reports = reports_to_records(ensure_bytes(source), name=name)
        if group_by == "show":
            shows = [replace(s, entity_id=s.show_id) for s in shows]
        self._shows = {show.show_id: show for show in shows}
        self._reports = tuple(reports)

    def entity_ids(self) -> list[str]:
        return sorted({show.entity_id for show in self._shows.values()})

    def list_shows(self, entity_ids: Sequence[str]) -> Sequence[ShowInfo]:
        wanted = set(entity_ids)
        return [show for show in self._shows.values() if show.entity_id in wanted]

    def list_reports(self, show_ids: Sequence[str]) -> Sequence[TicketReport]:
        wanted = set(show_ids)
        return [report for report in self._reports if report.show_id in wanted]

    def list_ranges(self, show_ids: Sequence[str], start: date | None, end: date) -> Sequence[DistributionRange]:
        ranges: list[DistributionRange] = []
        for show_id in show_ids:
            show = self._shows.get(show_id)
            if show is None:
                continue
            snapshots = to_snapshots(r for r in self._reports if r.show_id == show_id)
            ranges.extend(
                item
                for item in build_ranges(snapshots, show_id, show.sales_start_date)
                if item.start_date <= end and (start is None or item.end_date >= start)
            )
        return ranges
