"""Ticket report export parser producing shows and cumulative report rows.

Expected columns (case and spacing are normalized):
``show_id``, ``quantity_sold``, ``revenue``, ``sale_date``, ``reported_at``,
and optionally ``entity_id`` (stop or project), ``sales_start_date`` and
``show_date``.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from io import BytesIO
from pathlib import Path
from typing import Sequence

import pandas as pd

from ticket_series.domain.models import ShowInfo, TicketReport
from ticket_series.infrastructure.parsing.utils import (
    ensure_bytes,
    parse_date,
    parse_datetime,
    parse_decimal,
    parse_int,
    read_table,
)

LOGGER = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("show_id", "quantity_sold")


def normalize_reports(df: pd.DataFrame) -> pd.DataFrame:
    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        raise ValueError(f"Report export is missing columns: {', '.join(missing)}")
    work = df.copy()
    for column in ("revenue", "sale_date", "reported_at", "entity_id", "sales_start_date", "show_date"):
        if column not in work.columns:
            work[column] = ""
    work["show_id"] = work["show_id"].fillna("").astype(str).str.strip()
    work["entity_id"] = work["entity_id"].fillna("").astype(str).str.strip()
    work = work[work["show_id"] != ""].copy()
    mask = work["entity_id"] == ""
    work.loc[mask, "entity_id"] = work.loc[mask, "show_id"]
    return work


def reports_to_records(
    source: BytesIO | Path | bytes,
    name: str | None = None,
) -> tuple[Sequence[ShowInfo], Sequence[TicketReport]]:
    raw_bytes = ensure_bytes(source)
    if name is None and isinstance(source, Path):
        name = source.name
    normalized = normalize_reports(read_table(raw_bytes, name))

    shows: dict[str, ShowInfo] = {}
    reports: list[TicketReport] = []
    for _, row in normalized.iterrows():
        show_id = row["show_id"]
        sales_start = parse_date(row.get("sales_start_date"))
        show_date = parse_date(row.get("show_date"))
        known = shows.get(show_id)
        if known is None:
            shows[show_id] = ShowInfo(
                show_id=show_id,
                entity_id=row["entity_id"],
                sales_start_date=sales_start,
                show_date=show_date,
            )
        elif (known.sales_start_date is None and sales_start) or (known.show_date is None and show_date):
            shows[show_id] = replace(
                known,
                sales_start_date=known.sales_start_date or sales_start,
                show_date=known.show_date or show_date,
            )
        reports.append(
            TicketReport(
                show_id=show_id,
                quantity_sold=parse_int(row.get("quantity_sold")),
                revenue=parse_decimal(row.get("revenue")),
                sale_date=parse_date(row.get("sale_date")),
                reported_at=parse_datetime(row.get("reported_at")),
            )
        )
    LOGGER.debug("Parsed %d reports for %d shows", len(reports), len(shows))
    return list(shows.values()), reports
