"""Daily ticket sales series from sparse cumulative reports."""
from ticket_series.application.series import (
    compute_cumulative_series,
    compute_daily_series,
    compute_daily_series_from_ranges,
    resolve_window,
)
from ticket_series.application.use_cases import BuildChartSeriesUseCase, ChartSeriesContext
from ticket_series.domain.allocation import distribute
from ticket_series.infrastructure.storage.result_cache import ResultCache, cache_key

__all__ = [
    "BuildChartSeriesUseCase",
    "ChartSeriesContext",
    "ResultCache",
    "cache_key",
    "compute_cumulative_series",
    "compute_daily_series",
    "compute_daily_series_from_ranges",
    "distribute",
    "resolve_window",
]
