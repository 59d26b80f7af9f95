"""Merger allocation arithmetic.

All functions are pure. Division by a zero denominator follows IEEE float
semantics (``inf`` or ``nan``) instead of raising, so a zeroed bundle still
renders.
"""
from __future__ import annotations

import math

from .models import TokenRow


def divide(numerator: float, denominator: float) -> float:
    """IEEE-style division: x/0 is ±inf, 0/0 is nan."""
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def allocation(total_new_tokens: float, fraction: float) -> float:
    """New tokens assigned to holders of one existing token."""
    return total_new_tokens * fraction


def exchange_ratio(supply: float, allocated: float) -> float:
    """Existing-token units that convert into one new token."""
    return divide(supply, allocated)


def implied_price(ratio: float, price: float) -> float:
    """USD price of one new token implied by the existing token's price."""
    return ratio * price


def new_tokens_for_input(amount: float, supply: float, allocated: float) -> float:
    """New tokens received for ``amount`` units of the existing token."""
    return divide(amount, supply) * allocated


def parse_amount(text: object) -> float:
    """Parse user input to a non-negative decimal; anything else is zero."""
    if text is None or isinstance(text, bool):
        return 0.0
    try:
        value = float(str(text).strip().replace(",", ""))
    except ValueError:
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def compute_row(
    symbol: str,
    supply: float,
    price: float,
    fraction: float,
    total_new_tokens: float,
    amount: float,
) -> TokenRow:
    allocated = allocation(total_new_tokens, fraction)
    ratio = exchange_ratio(supply, allocated)
    return TokenRow(
        symbol=symbol,
        supply=supply,
        price=price,
        fraction=fraction,
        allocation=allocated,
        exchange_ratio=ratio,
        implied_price=implied_price(ratio, price),
        new_tokens_for_input=new_tokens_for_input(amount, supply, allocated),
    )
