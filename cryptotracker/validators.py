"""Coercion of upstream numeric values."""

import math
import typing as t
from decimal import Decimal


def validate_number(raw: t.Any) -> float:
    """Coerce an upstream value into a finite float.

    Numbers, decimals and numeric strings are parsed; anything else, and
    any result that is NaN or infinite, becomes ``0.0``.

    :param raw: Value taken from an upstream payload.
    :return: A finite float.
    """
    if isinstance(raw, bool):
        return 0.0
    try:
        if isinstance(raw, str):
            value = float(raw.strip())
        elif isinstance(raw, (int, float, Decimal)):
            value = float(raw)
        else:
            return 0.0
    except (ValueError, OverflowError, ArithmeticError):
        return 0.0
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


def non_negative(raw: t.Any) -> float:
    """Validate ``raw`` and clamp it at zero.

    :param raw: Value taken from an upstream payload.
    :return: A finite float >= 0.
    """
    return max(0.0, validate_number(raw))
