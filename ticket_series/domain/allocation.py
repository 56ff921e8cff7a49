"""Integer allocation of deltas across days."""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from ticket_series.config import SETTINGS

from .models import DistributionWeight


def _triangular_weights(days: int, weight: DistributionWeight) -> list[int]:
    if weight is DistributionWeight.EARLY:
        return [days - i for i in range(days)]
    return [i + 1 for i in range(days)]


def distribute(delta: int, days: int, weight: DistributionWeight | str = DistributionWeight.EVEN) -> list[int]:
    """Split ``delta`` across ``days`` so that the parts sum to exactly ``delta``.

    ``even`` puts the rounding remainder on the last days. ``early`` and
    ``late`` use triangular weights and hand leftover units to the heaviest
    days first.
    """
    weight = DistributionWeight(weight)
    if days <= 0:
        return []
    delta = max(0, int(delta))
    if days == 1:
        return [delta]
    if delta == 0:
        return [0] * days

    if weight is DistributionWeight.EVEN:
        base, remainder = divmod(delta, days)
        return [base + (1 if i >= days - remainder else 0) for i in range(days)]

    weights = _triangular_weights(days, weight)
    total_weight = sum(weights)
    floors = [delta * w // total_weight for w in weights]
    remainder = delta - sum(floors)

    # stable sort keeps ties in day order
    order = sorted(range(days), key=lambda i: weights[i], reverse=True)
    bumped = set(order[:remainder])
    return [value + (1 if i in bumped else 0) for i, value in enumerate(floors)]


def _minor_unit(places: int) -> Decimal:
    return Decimal(1).scaleb(-places)


def distribute_amount(
    amount: Decimal,
    days: int,
    weight: DistributionWeight | str = DistributionWeight.EVEN,
    places: int | None = None,
) -> list[Decimal]:
    """Spread a money amount in whole minor units (cents by default)."""
    places = SETTINGS.revenue_places if places is None else places
    unit = _minor_unit(places)
    amount = Decimal(amount) if amount is not None else Decimal("0")
    if amount < 0:
        amount = Decimal("0")
    minor = int((amount / unit).to_integral_value(rounding=ROUND_HALF_UP))
    return [(Decimal(part) * unit).quantize(unit) for part in distribute(minor, days, weight)]
