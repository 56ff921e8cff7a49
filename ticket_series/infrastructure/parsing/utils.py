"""Shared parsing utilities for ticket report exports."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from io import BytesIO
from pathlib import Path

import pandas as pd


def ensure_bytes(source: BytesIO | Path | bytes) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, BytesIO):
        return source.getvalue()
    if isinstance(source, Path):
        return source.read_bytes()
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    s = str(value).strip()
    return not s or s.upper() in {"NAN", "NAT", "NONE"}


def parse_decimal(value: object) -> Decimal:
    if _is_blank(value):
        return Decimal("0")
    s = str(value).strip()
    negative = False
    if s.startswith("(") and s.endswith(")"):
        negative = True
        s = s[1:-1]
    for ch in [",", "kr", "NOK", "$", "€", "£", " "]:
        s = s.replace(ch, "")
    try:
        result = Decimal(s)
    except InvalidOperation:
        return Decimal("0")
    if negative:
        result = -result
    return result


def parse_int(value: object) -> int:
    return int(parse_decimal(value).to_integral_value())


def parse_datetime(value: object) -> datetime | None:
    if _is_blank(value):
        return None
    parsed = pd.to_datetime(str(value).strip(), errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def parse_date(value: object) -> date | None:
    parsed = parse_datetime(value)
    return parsed.date() if parsed is not None else None


def read_table(raw: bytes, name: str | None = None) -> pd.DataFrame:
    """Read a CSV or Excel export into a string-typed frame."""
    is_excel = raw[:2] == b"PK" or (name or "").lower().endswith((".xlsx", ".xlsm"))
    if is_excel:
        frame = pd.read_excel(BytesIO(raw), engine="openpyxl", dtype=str)
    else:
        frame = pd.read_csv(BytesIO(raw), dtype=str, keep_default_na=False)
    frame.columns = [str(column).strip().lower().replace(" ", "_") for column in frame.columns]
    return frame
