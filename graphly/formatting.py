"""Numeric display formatting shared by axis labels, stats and equations."""

from __future__ import annotations

import math
from numbers import Real
from typing import Any, Union

DisplayValue = Union[float, int, str]

# |v| at or above this is shown in exponent form
LARGE_THRESHOLD: float = 10000.0
# 0 < |v| below this is shown in exponent form
SMALL_THRESHOLD: float = 0.001


def to_exponential(value: float, digits: int = 2) -> str:
    """Exponent notation with a compact signed exponent, e.g. ``1.23e+4``."""
    text = f"{value:.{digits}e}"
    mantissa, _, exponent = text.partition("e")
    exp = int(exponent)
    sign = "+" if exp >= 0 else "-"
    return f"{mantissa}e{sign}{abs(exp)}"


def format_number(value: Any) -> DisplayValue:
    """Format a value for display.

    Non-numbers are returned unchanged, zero stays ``0``, very large or very
    small magnitudes become an exponent string and everything else is rounded
    to three decimals.
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        return value
    if value == 0:
        return 0
    v = float(value)
    if not math.isfinite(v):
        return v
    magnitude = abs(v)
    if magnitude >= LARGE_THRESHOLD or magnitude < SMALL_THRESHOLD:
        return to_exponential(v, 2)
    return float(f"{v:.3f}")


def format_equation_number(value: float) -> str:
    """Coefficient formatting for equation strings."""
    if value != 0 and abs(value) < SMALL_THRESHOLD:
        return to_exponential(value, 2)
    # adding 0.0 turns -0.0 into 0.0
    return f"{value + 0.0:.3f}"
