from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable


CENT = Decimal('0.01')
ZERO = Decimal('0.00')


def to_money(value: Decimal | int | str) -> Decimal:
    """Round to cents, half-up, the way amounts are printed on a receipt."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Decimal]) -> Decimal:
    return to_money(sum(values, ZERO))
