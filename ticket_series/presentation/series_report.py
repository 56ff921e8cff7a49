"""Flat renderings of date matrices for charts and downloads."""
from __future__ import annotations

import csv
import io
from typing import Sequence

import pandas as pd

from ticket_series.domain.models import SeriesRow

ESTIMATED_SUFFIX = "_estimated"


def matrix_to_rows(matrix: Sequence[SeriesRow], entity_ids: Sequence[str]) -> list[dict[str, object]]:
    """One dict per date with ``<entity>`` and ``<entity>_estimated`` columns.

    ``missing`` entries read ``<entity>@<next show date>``.
    """
    listed = set(entity_ids)
    rows: list[dict[str, object]] = []
    for row in matrix:
        flat: dict[str, object] = {"date": row.date.isoformat()}
        for entity_id in entity_ids:
            value = row.value(entity_id)
            flat[entity_id] = value.actual
            flat[f"{entity_id}{ESTIMATED_SUFFIX}"] = value.estimated
        flat["reported"] = ",".join(sorted(row.reported & listed))
        flat["missing"] = ",".join(
            f"{m.entity_id}@{m.show_date.isoformat()}" for m in row.missing if m.entity_id in listed
        )
        rows.append(flat)
    return rows


def matrix_to_dataframe(matrix: Sequence[SeriesRow], entity_ids: Sequence[str]) -> pd.DataFrame:
    columns = ["date"]
    for entity_id in entity_ids:
        columns.extend([entity_id, f"{entity_id}{ESTIMATED_SUFFIX}"])
    frame = pd.DataFrame(matrix_to_rows(matrix, entity_ids), columns=columns + ["reported", "missing"])
    frame["date"] = pd.to_datetime(frame["date"])
    return frame.set_index("date")


def render_csv(matrix: Sequence[SeriesRow], entity_ids: Sequence[str]) -> bytes:
    rows = matrix_to_rows(matrix, entity_ids)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(rows[0].keys()) if rows else [])
    if rows:
        writer.writeheader()
        writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")
