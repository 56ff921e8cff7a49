from datetime import date, datetime
from decimal import Decimal

from ticket_series.domain.models import Snapshot, TicketReport
from ticket_series.domain.reconciliation import effective_date, reconcile, to_snapshots


def snap(day: int, tickets: int, revenue: str = "0") -> Snapshot:
    return Snapshot(
        effective_date=date(2024, 1, day),
        cumulative_tickets=tickets,
        cumulative_revenue=Decimal(revenue),
    )


def by_date(items):
    return {item.date: item for item in items}


def test_no_snapshots_yields_nothing():
    assert reconcile([], "stop-1", sales_start_date=date(2024, 1, 1)) == []


def test_single_snapshot_spread_from_sales_start():
    items = reconcile([snap(6, 60)], "stop-1", sales_start_date=date(2024, 1, 1), weight="even")

    assert [item.date for item in items] == [date(2024, 1, d) for d in range(1, 7)]
    assert [item.tickets for item in items] == [10] * 6
    assert [item.is_estimated for item in items] == [True] * 5 + [False]


def test_single_snapshot_on_or_before_sales_start_is_actual():
    items = reconcile([snap(6, 60, "600")], "stop-1", sales_start_date=date(2024, 1, 6))

    assert len(items) == 1
    assert items[0].date == date(2024, 1, 6)
    assert items[0].tickets == 60
    assert items[0].revenue == Decimal("600")
    assert not items[0].is_estimated


def test_single_snapshot_without_sales_start_contributes_nothing():
    assert reconcile([snap(6, 60)], "stop-1") == []


def test_gap_between_reports_starts_day_after_previous_report():
    items = reconcile([snap(1, 20), snap(6, 50)], "stop-1", weight="even")

    assert [item.date for item in items] == [date(2024, 1, d) for d in range(2, 7)]
    assert [item.tickets for item in items] == [6, 6, 6, 6, 6]
    assert [item.is_estimated for item in items] == [True, True, True, True, False]


def test_decreasing_snapshot_emits_zero_report_item():
    items = reconcile([snap(1, 20), snap(6, 50), snap(10, 45)], "stop-1")
    day_ten = [item for item in items if item.date == date(2024, 1, 10)]

    assert len(day_ten) == 1
    assert day_ten[0].tickets == 0
    assert not day_ten[0].is_estimated
    assert all(item.tickets >= 0 and item.revenue >= 0 for item in items)


def test_decrease_resets_baseline_to_reported_total():
    items = reconcile([snap(1, 20), snap(2, 15), snap(3, 25)], "stop-1")
    assert by_date(items)[date(2024, 1, 3)].tickets == 10


def test_consecutive_reports_are_all_actual():
    items = reconcile([snap(1, 5), snap(2, 9), snap(3, 12)], "stop-1")

    assert [(item.date.day, item.tickets, item.is_estimated) for item in items] == [
        (2, 4, False),
        (3, 3, False),
    ]


def test_known_report_dates_inside_gap_are_not_estimated():
    items = reconcile(
        [snap(1, 0), snap(5, 40)],
        "stop-1",
        report_dates={date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 5)},
    )
    flags = {item.date.day: item.is_estimated for item in items}
    assert flags == {2: True, 3: False, 4: True, 5: False}


def test_round_trip_matches_cumulative_differences():
    snapshots = [snap(1, 3, "30"), snap(4, 17, "170"), snap(9, 40, "400"), snap(12, 41, "410")]
    items = reconcile(snapshots, "stop-1", sales_start_date=date(2023, 12, 28), weight="late")

    for previous, current in zip([None] + snapshots[:-1], snapshots):
        lower = previous.effective_date if previous else date(2023, 12, 27)
        window = [item for item in items if lower < item.date <= current.effective_date]
        baseline = previous.cumulative_tickets if previous else 0
        assert sum(item.tickets for item in window) == current.cumulative_tickets - baseline
        assert sum(item.revenue for item in window) == current.cumulative_revenue - (
            previous.cumulative_revenue if previous else 0
        )


def test_estimated_flag_only_off_on_report_dates():
    snapshots = [snap(2, 10), snap(8, 30), snap(15, 31)]
    items = reconcile(snapshots, "stop-1", sales_start_date=date(2024, 1, 1), weight="early")
    report_days = {s.effective_date for s in snapshots}

    for item in items:
        assert item.is_estimated == (item.date not in report_days)


def test_revenue_delta_floored_at_zero():
    items = reconcile([snap(1, 10, "100"), snap(3, 12, "90")], "stop-1")
    assert all(item.revenue >= 0 for item in items)
    assert sum(item.tickets for item in items) == 2


def test_effective_date_prefers_sale_date_then_previous_day():
    with_sale_date = TicketReport("s", 1, Decimal("1"), sale_date=date(2024, 3, 1), reported_at=datetime(2024, 3, 9, 8))
    from_receipt = TicketReport("s", 1, Decimal("1"), reported_at=datetime(2024, 3, 9, 8))
    undated = TicketReport("s", 1, Decimal("1"))

    assert effective_date(with_sale_date) == date(2024, 3, 1)
    assert effective_date(from_receipt) == date(2024, 3, 8)
    assert effective_date(undated) is None


def test_to_snapshots_skips_undated_and_keeps_latest_per_day():
    reports = [
        TicketReport("s", 30, Decimal("300"), reported_at=datetime(2024, 3, 3, 18)),
        TicketReport("s", 10, Decimal("100"), reported_at=datetime(2024, 3, 2, 9)),
        TicketReport("s", 25, Decimal("250"), reported_at=datetime(2024, 3, 3, 9)),
        TicketReport("s", 99, Decimal("990")),
    ]

    snapshots = to_snapshots(reports)

    assert [(s.effective_date, s.cumulative_tickets) for s in snapshots] == [
        (date(2024, 3, 1), 10),
        (date(2024, 3, 2), 30),
    ]
