"""
Claim Capping Rules

There are TWO caps and they apply at different points:

1. TRANSACTION CAP - applied once, when an expense is stored.
   A single receipt above the cap is stored at the cap.
2. DAILY CAP - applied only in derived views (summary, export).
   The raw daily total is kept; the claimable value is the capped one.

Money is handled as Decimal. Rounding is half away from zero on the
cents value and happens after every addition, not only at the end.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Union

DAILY_CAP = Decimal("50.00")
TRANSACTION_CAP = Decimal("50.00")

CENT = Decimal("0.01")

Amount = Union[Decimal, float, int, str]


def round_to_cents(value: Amount) -> Decimal:
    """
    Round a monetary value to 2 decimal places.

    Floats go through their shortest string form so that 0.1 + 0.2
    style drift never reaches the quantize step.
    """
    if isinstance(value, float):
        value = repr(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def sum_to_cents(amounts: Iterable[Amount]) -> Decimal:
    """Running sum, rounded to cents after each addition."""
    total = Decimal("0.00")
    for amount in amounts:
        total = round_to_cents(total + round_to_cents(amount))
    return total


def cap_transaction(amount: Amount, cap: Decimal = TRANSACTION_CAP) -> Decimal:
    """Clamp a single expense to the transaction cap before storage."""
    return round_to_cents(min(round_to_cents(amount), cap))


def cap_daily(total: Amount, cap: Decimal = DAILY_CAP) -> Decimal:
    """Claimable value of a raw daily total."""
    return round_to_cents(min(round_to_cents(total), cap))


def daily_claimable(
    amounts: Iterable[Amount],
    cap: Decimal = DAILY_CAP,
) -> tuple[Decimal, Decimal]:
    """
    Sum same-day amounts and cap the result.

    Returns:
        (daily_total, claimable_daily)
    """
    total = sum_to_cents(amounts)
    return total, cap_daily(total, cap)
