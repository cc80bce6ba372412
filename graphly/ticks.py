"""Axis tick values: nice 1/2/5 x 10^k steps, or a caller-fixed interval."""

from __future__ import annotations

import math
from typing import Optional

DEFAULT_MAX_TICKS: int = 8
MAX_INTERVAL_TICKS: int = 1000


def nice_step(rough_step: float) -> float:
    """Round *rough_step* to 1, 2, 5 or 10 times a power of ten; 0.0 when impossible."""
    if not (rough_step > 0 and math.isfinite(rough_step)):
        return 0.0
    exponent = math.floor(math.log10(rough_step))
    magnitude = 10.0 ** exponent
    if magnitude == 0:
        return 0.0
    fraction = rough_step / magnitude
    if fraction < 1.5:
        nice = 1.0
    elif fraction < 3:
        nice = 2.0
    elif fraction < 7:
        nice = 5.0
    else:
        nice = 10.0
    return nice * magnitude


def nice_ticks(
    lo: Optional[float], hi: Optional[float], max_ticks: int = DEFAULT_MAX_TICKS
) -> list[float]:
    """Round-number ticks covering ``[lo, hi]``.

    Empty when the bounds are equal or either is auto (None); ``[lo]`` when
    the range is negative.
    """
    if lo is None or hi is None or lo == hi:
        return []
    if not (math.isfinite(lo) and math.isfinite(hi)):
        return []
    span = hi - lo
    if span <= 0:
        return [lo]
    if not math.isfinite(span):
        return []
    step = nice_step(span / (max(max_ticks, 2) - 1))
    if step == 0:
        return []
    start = math.ceil(lo / step) * step
    end = math.floor(hi / step) * step
    epsilon = step / 1000
    ticks: list[float] = []
    i = 0
    while (t := start + i * step) <= end + epsilon and i < MAX_INTERVAL_TICKS:
        ticks.append(t)
        i += 1
    return ticks


def interval_ticks(lo: float, hi: float, interval: float) -> list[float]:
    """Every multiple of *interval* from the first one >= lo up to hi."""
    if interval <= 0 or not (math.isfinite(lo) and math.isfinite(hi)):
        return []
    start = math.ceil(lo / interval) * interval
    ticks: list[float] = []
    i = 0
    while (t := start + i * interval) <= hi and i < MAX_INTERVAL_TICKS:
        ticks.append(t)
        i += 1
    return ticks


def axis_ticks(
    lo: Optional[float],
    hi: Optional[float],
    interval: Optional[float] = None,
    max_ticks: int = DEFAULT_MAX_TICKS,
) -> list[float]:
    if interval is not None and interval > 0:
        if lo is None or hi is None:
            return []
        return interval_ticks(lo, hi, interval)
    return nice_ticks(lo, hi, max_ticks)
