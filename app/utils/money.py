"""
Money conversion between rupees on the wire and integer paise in storage.

Every stored amount, balance and aggregate is an int number of paise so
sums and differences are exact; floats only appear at the API edge.
"""
from decimal import Decimal, ROUND_HALF_UP


def to_paise(rupees: float) -> int:
    """12.345 -> 1235 (half up, on the decimal text of the value)."""
    return int((Decimal(str(rupees)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_paise(paise: int) -> float:
    """1235 -> 12.35"""
    return paise / 100
