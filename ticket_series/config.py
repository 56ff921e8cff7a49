"""Central configuration for the ticket series package."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta, timezone, tzinfo
from decimal import Decimal
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"
CACHE_DIR = DATA_DIR / "cache"
PREFERENCES_PATH = DATA_DIR / "chart_preferences.json"

# Presets end yesterday and reach back this many days.
DATE_RANGE_DAYS = {"7d": 7, "14d": 14, "28d": 28}


@dataclass(slots=True, frozen=True)
class Settings:
    timezone: tzinfo
    cache_ttl: timedelta
    cache_version: int
    cache_blob_key: str
    default_weight: str
    default_range_days: int
    date_range_days: dict[str, int] = field(default_factory=dict)
    revenue_places: int = 2
    mva_rate: Decimal = Decimal("0.25")
    surface_estimated_revenue: bool = False


SETTINGS = Settings(
    timezone=timezone.utc,
    cache_ttl=timedelta(minutes=5),
    cache_version=1,
    cache_blob_key="ticket_series_chart_cache",
    default_weight="even",
    default_range_days=14,
    date_range_days=dict(DATE_RANGE_DAYS),
)
