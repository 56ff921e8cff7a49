from decimal import Decimal

import pytest

from ticket_series.domain.allocation import distribute, distribute_amount
from ticket_series.domain.models import DistributionWeight


def test_even_puts_remainder_on_last_days():
    assert distribute(10, 3, "even") == [3, 3, 4]
    assert distribute(11, 4, DistributionWeight.EVEN) == [2, 3, 3, 3]


def test_early_weights_front_load_and_bump_heaviest_day():
    assert distribute(10, 3, "early") == [6, 3, 1]


def test_late_weights_back_load():
    assert distribute(10, 3, "late") == [1, 3, 6]


def test_single_day_is_identity():
    for weight in DistributionWeight:
        assert distribute(37, 1, weight) == [37]


def test_zero_delta_gives_zeros():
    assert distribute(0, 4, "late") == [0, 0, 0, 0]


def test_degenerate_inputs_stay_total():
    assert distribute(5, 0, "even") == []
    assert distribute(-3, 2, "even") == [0, 0]


@pytest.mark.parametrize("weight", list(DistributionWeight))
def test_sum_and_non_negativity(weight):
    for delta in (1, 7, 99, 1000):
        for days in (1, 2, 5, 13, 31):
            parts = distribute(delta, days, weight)
            assert len(parts) == days
            assert sum(parts) == delta
            assert all(part >= 0 for part in parts)


def test_unknown_weight_rejected():
    with pytest.raises(ValueError):
        distribute(10, 3, "middle")


def test_amount_sums_exactly_in_cents():
    parts = distribute_amount(Decimal("100.00"), 3, "even")
    assert parts == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
    assert sum(parts) == Decimal("100.00")


def test_negative_amount_clamped():
    assert distribute_amount(Decimal("-5"), 2, "even") == [Decimal("0.00"), Decimal("0.00")]
