"""Claim capping rules."""

from meal_tracker.rules.capping import (
    DAILY_CAP,
    TRANSACTION_CAP,
    cap_daily,
    cap_transaction,
    daily_claimable,
    round_to_cents,
    sum_to_cents,
)

__all__ = [
    "DAILY_CAP",
    "TRANSACTION_CAP",
    "cap_daily",
    "cap_transaction",
    "daily_claimable",
    "round_to_cents",
    "sum_to_cents",
]
