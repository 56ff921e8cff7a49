from datetime import date
from decimal import Decimal

from ticket_series.domain.models import MissingEntity, SeriesRow, SeriesValue
from ticket_series.presentation.series_report import matrix_to_dataframe, matrix_to_rows, render_csv


def make_matrix() -> tuple[SeriesRow, ...]:
    return (
        SeriesRow(date(2024, 1, 1), {"p1": SeriesValue(0, 3), "p2": SeriesValue(2, 0)}, frozenset({"p2"})),
        SeriesRow(date(2024, 1, 2), {"p1": SeriesValue(4, 0)}, frozenset({"p1"})),
    )


def test_rows_fill_missing_entities_with_zero():
    rows = matrix_to_rows(make_matrix(), ["p1", "p2"])

    assert rows[0] == {"date": "2024-01-01", "p1": 0, "p1_estimated": 3, "p2": 2, "p2_estimated": 0, "reported": "p2", "missing": ""}
    assert rows[1]["p2"] == 0
    assert rows[1]["reported"] == "p1"


def test_rows_only_report_listed_entities():
    rows = matrix_to_rows(make_matrix(), ["p1"])

    assert rows[0]["reported"] == ""
    assert "p2" not in rows[0]


def test_render_csv():
    text = render_csv(make_matrix(), ["p1", "p2"]).decode("utf-8").splitlines()

    assert text[0] == "date,p1,p1_estimated,p2,p2_estimated,reported,missing"
    assert text[2] == "2024-01-02,4,0,0,0,p1,"
    assert render_csv((), ["p1"]) == b""


def test_dataframe_is_indexed_by_date():
    matrix = (SeriesRow(date(2024, 1, 1), {"p1": SeriesValue(Decimal("10.50"), Decimal("0"))}),)

    frame = matrix_to_dataframe(matrix, ["p1"])

    assert list(frame.columns) == ["p1", "p1_estimated", "reported", "missing"]
    assert frame.index[0].date() == date(2024, 1, 1)
    assert frame.loc[frame.index[0], "p1"] == Decimal("10.50")


def test_missing_entities_are_rendered_with_next_show_date():
    matrix = (
        SeriesRow(
            date(2024, 1, 1),
            {"p1": SeriesValue(0, 0)},
            missing=(MissingEntity("p1", date(2024, 2, 1)), MissingEntity("p9", date(2024, 3, 1))),
        ),
    )

    rows = matrix_to_rows(matrix, ["p1"])

    assert rows[0]["missing"] == "p1@2024-02-01"
