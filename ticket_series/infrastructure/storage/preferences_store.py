"""Storage helpers for chart preferences."""
from __future__ import annotations

from dataclasses import asdict
from datetime import date
from pathlib import Path
import json
from typing import Any

from ticket_series.config import PREFERENCES_PATH
from ticket_series.domain.models import ChartPreferences, DistributionWeight, Metric

DEFAULT_PREFERENCES = ChartPreferences()


def _parse_date(value: Any) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        return None


def _normalize_preferences(raw: dict[str, Any] | None) -> ChartPreferences:
    if not isinstance(raw, dict):
        return DEFAULT_PREFERENCES
    merged: dict[str, Any] = asdict(DEFAULT_PREFERENCES)
    merged.update({key: value for key, value in raw.items() if key in merged})
    try:
        metric = Metric(merged["metric"])
    except ValueError:
        metric = DEFAULT_PREFERENCES.metric
    try:
        weight = DistributionWeight(merged["distribution_weight"])
    except ValueError:
        weight = DEFAULT_PREFERENCES.distribution_weight
    return ChartPreferences(
        date_range=str(merged["date_range"]),
        custom_start=_parse_date(merged["custom_start"]),
        custom_end=_parse_date(merged["custom_end"]),
        metric=metric,
        show_estimations=bool(merged["show_estimations"]),
        distribution_weight=weight,
        show_ad_spend=bool(merged["show_ad_spend"]),
        include_mva=bool(merged["include_mva"]),
    )


def load_preferences(path: Path | None = None) -> ChartPreferences:
    prefs_path = path or PREFERENCES_PATH
    if not prefs_path.exists():
        return DEFAULT_PREFERENCES
    try:
        data = json.loads(prefs_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return DEFAULT_PREFERENCES
    return _normalize_preferences(data)


def save_preferences(prefs: ChartPreferences, path: Path | None = None) -> ChartPreferences:
    prefs_path = path or PREFERENCES_PATH
    prefs_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "date_range": prefs.date_range,
        "custom_start": prefs.custom_start.isoformat() if prefs.custom_start else None,
        "custom_end": prefs.custom_end.isoformat() if prefs.custom_end else None,
        "metric": Metric(prefs.metric).value,
        "show_estimations": prefs.show_estimations,
        "distribution_weight": DistributionWeight(prefs.distribution_weight).value,
        "show_ad_spend": prefs.show_ad_spend,
        "include_mva": prefs.include_mva,
    }
    prefs_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    return _normalize_preferences(payload)
