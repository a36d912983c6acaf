from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

TWO_PLACES = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    # str() first so floats don't carry binary noise
    return Decimal(str(value))


def quantize_money(value: Any) -> Decimal:
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def money_sum(values: Iterable[Any]) -> Decimal:
    return sum((to_decimal(v) for v in values), Decimal("0"))
