"""Money helpers for Luffy Streaming.

Storage unit: USD as ``Decimal`` with two places (``Numeric(12, 2)``).
Display unit: PEN, derived from USD with the configured exchange rate.

Conversion chain
----------------
USD × USD_TO_PEN_RATE → PEN
order total × COMMISSION_RATE → commission
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Union

from pydantic import PlainSerializer

# ─── constants ───────────────────────────────────────────────────────────────

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Number = Union[Decimal, int, float, str]


# ─── helpers ─────────────────────────────────────────────────────────────────


def to_money(value: Number) -> Decimal:
    """Quantize to cents (round half-up). Floats go through ``str`` first."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def usd_to_pen(usd: Number, rate: Number) -> Decimal:
    """Convert a USD price to PEN. ``3.10 USD × 3.66 = 11.35 PEN``."""
    return to_money(Decimal(str(usd)) * Decimal(str(rate)))


def commission_for(total: Number, rate: Number) -> Decimal:
    """Affiliate commission on an order total. ``4.00 × 0.10 = 0.40``."""
    return to_money(Decimal(str(total)) * Decimal(str(rate)))


# ─── pydantic ────────────────────────────────────────────────────────────────

# Decimal in Python, plain number on the wire.
Money = Annotated[
    Decimal, PlainSerializer(lambda v: float(v), return_type=float, when_used="json")
]
