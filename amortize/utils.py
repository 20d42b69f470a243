"""Utility functions for the amortization engine.

This module provides helpers for converting user input into ``Decimal``
amounts, for rounding monetary values to cents and for normalising payment
numbers coming from loosely typed sources such as JSON object keys.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext
from typing import Any

from .errors import InvalidInput

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_cents(value: Decimal) -> Decimal:
    """Round ``value`` to the smallest currency unit using ROUND_HALF_UP.

    Half-up is used everywhere a monetary value is produced, so ``2.345``
    becomes ``2.35`` and ``-2.345`` becomes ``-2.35``. Values with too many
    digits to hold cents at the current precision raise ``InvalidInput``.
    """
    try:
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidInput(f"amount too large: {value}") from None


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    strings. It raises ``ValueError`` if conversion fails.
    """
    try:
        cleaned = value.replace(",", "")
        return Decimal(cleaned)
    except (InvalidOperation, AttributeError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc


def to_decimal(value: Any, name: str) -> Decimal:
    """Return ``value`` as a finite ``Decimal`` or raise ``InvalidInput``.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")`` rather
    than its binary expansion.
    """
    if isinstance(value, bool):
        raise InvalidInput(f"{name} must be a number")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = decimal_from_str(str(value))
        except ValueError:
            raise InvalidInput(f"{name} must be a number") from None
    else:
        raise InvalidInput(f"{name} must be a number")
    if not result.is_finite():
        raise InvalidInput(f"{name} must be a finite number")
    return result


def parse_payment_number(key: Any) -> int:
    """Normalise an extra-payment key to a positive ``int``.

    Integers are accepted as-is and strings of decimal digits (as found in
    JSON object keys) are converted. Anything else raises ``InvalidInput``.
    """
    if isinstance(key, str) and key.strip().isdigit():
        key = int(key.strip())
    if isinstance(key, bool) or not isinstance(key, int) or key <= 0:
        raise InvalidInput(f"extra payment key must be a positive integer: {key!r}")
    return key
