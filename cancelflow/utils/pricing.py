# cancelflow/utils/pricing.py
# All amounts are integer cents.
from __future__ import annotations

DOWNSELL_DISCOUNT_CENTS = 1000
SPECIAL_DISCOUNT_PERCENT = 50


def format_price(cents: int) -> str:
    return f"${cents / 100:.2f}"


def calculate_discounted_price(current_price: int, discount: int) -> int:
    return max(current_price - discount, 0)


def downsell_price(current_price: int, discount: int = DOWNSELL_DISCOUNT_CENTS) -> int:
    """Flat discount offered to variant B, never below zero."""
    return calculate_discounted_price(current_price, discount)


def special_discount_price(current_price: int, percent: int = SPECIAL_DISCOUNT_PERCENT) -> int:
    return current_price - (current_price * percent) // 100
