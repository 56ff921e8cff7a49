from datetime import date, datetime
from decimal import Decimal

import pytest

from ticket_series.application.dto import ShowSales
from ticket_series.application.series import (
    compute_cumulative_series,
    compute_daily_series,
    compute_daily_series_from_ranges,
    resolve_window,
)
from ticket_series.domain.models import DateWindow, DistributionRange, SeriesValue, TicketReport


def report(show_id: str, day: int, tickets: int, revenue: str = "0") -> TicketReport:
    return TicketReport(show_id, tickets, Decimal(revenue), sale_date=date(2024, 1, day))


def test_resolve_presets_end_yesterday():
    window = resolve_window("7d", today=date(2024, 3, 10))
    assert window == DateWindow(date(2024, 3, 3), date(2024, 3, 9))
    assert window.days == 7


def test_resolve_custom_and_fallback():
    custom = resolve_window("custom", date(2024, 3, 10), date(2024, 1, 1), date(2024, 1, 31))
    assert custom == DateWindow(date(2024, 1, 1), date(2024, 1, 31))

    assert resolve_window("custom", date(2024, 3, 10)).days == 14
    assert resolve_window("90d", date(2024, 3, 10)).days == 14


def test_window_rejects_reversed_bounds():
    with pytest.raises(ValueError):
        DateWindow(date(2024, 1, 2), date(2024, 1, 1))


def test_daily_series_aggregates_shows_per_entity():
    shows = [
        ShowSales("show-a", "stop-1", [report("show-a", 1, 20), report("show-a", 6, 50)]),
        ShowSales("show-b", "stop-1", [report("show-b", 6, 10)], sales_start_date=date(2024, 1, 6)),
        ShowSales("show-c", "stop-2", [report("show-c", 3, 7)], sales_start_date=date(2024, 1, 1)),
    ]

    matrix = compute_daily_series(shows, DateWindow(date(2024, 1, 1), date(2024, 1, 6)), "even")

    assert matrix[5].value("stop-1") == SeriesValue(16, 0)
    assert matrix[1].value("stop-1") == SeriesValue(0, 6)
    assert [row.value("stop-2").total for row in matrix] == [2, 2, 3, 0, 0, 0]
    assert set(matrix[0].values) == {"stop-1", "stop-2"}


def test_daily_series_drops_undated_reports():
    shows = [
        ShowSales(
            "show-a",
            "stop-1",
            [report("show-a", 2, 5), TicketReport("show-a", 500, Decimal("0")), report("show-a", 3, 8)],
        )
    ]

    matrix = compute_daily_series(shows, DateWindow(date(2024, 1, 1), date(2024, 1, 3)))

    assert matrix[2].value("stop-1") == SeriesValue(3, 0)


def test_ranges_path_matches_snapshot_path():
    ranges = [
        DistributionRange("show-a", date(2024, 1, 2), date(2024, 1, 6), 30, Decimal("0")),
        DistributionRange("show-b", date(2024, 1, 6), date(2024, 1, 6), 10, Decimal("0")),
    ]
    shows = [
        ShowSales("show-a", "stop-1", [report("show-a", 1, 20), report("show-a", 6, 50)]),
        ShowSales("show-b", "stop-1", [report("show-b", 6, 10)], sales_start_date=date(2024, 1, 6)),
    ]
    window = DateWindow(date(2024, 1, 1), date(2024, 1, 6))

    from_ranges = compute_daily_series_from_ranges(ranges, {"show-a": "stop-1", "show-b": "stop-1"}, window)
    from_reports = compute_daily_series(shows, window)

    assert [row.values for row in from_ranges] == [row.values for row in from_reports]


def test_cumulative_series_from_daily():
    shows = [ShowSales("show-a", "stop-1", [report("show-a", 1, 20), report("show-a", 3, 26)])]
    daily = compute_daily_series(shows, DateWindow(date(2024, 1, 1), date(2024, 1, 3)))

    cumulative = compute_cumulative_series(daily, ["stop-1"], {"stop-1": SeriesValue(20, 0)})

    assert [row.value("stop-1") for row in cumulative] == [
        SeriesValue(20, 0),
        SeriesValue(20, 3),
        SeriesValue(23, 3),
    ]


def test_reports_with_receipt_time_only_use_previous_day():
    shows = [
        ShowSales(
            "show-a",
            "stop-1",
            [
                TicketReport("show-a", 4, Decimal("0"), reported_at=datetime(2024, 1, 2, 9)),
                TicketReport("show-a", 9, Decimal("0"), reported_at=datetime(2024, 1, 3, 9)),
            ],
        )
    ]

    matrix = compute_daily_series(shows, DateWindow(date(2024, 1, 1), date(2024, 1, 3)))

    assert matrix[1].value("stop-1") == SeriesValue(5, 0)
    assert matrix[1].reported == frozenset({"stop-1"})
