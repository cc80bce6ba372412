from __future__ import annotations

from typing import Optional

import numpy as np

from graphly.points import Point, points_from_arrays
from graphly.regression import RegressionKind, RegressionResult

TRENDLINE_RESOLUTION: int = 150
# clamp band, in multiples of the data's y-range beyond each side
SAFETY_FACTOR: float = 5.0
DEFAULT_Y_RANGE: float = 10.0


def safety_band(y_data_min: float, y_data_max: float) -> tuple[float, float]:
    y_range = abs(y_data_max - y_data_min) or DEFAULT_Y_RANGE
    return y_data_min - SAFETY_FACTOR * y_range, y_data_max + SAFETY_FACTOR * y_range


def sample_trendline(
    result: Optional[RegressionResult],
    x_min: Optional[float],
    x_max: Optional[float],
    y_data_min: float,
    y_data_max: float,
    resolution: int = TRENDLINE_RESOLUTION,
) -> list[Point]:
    """Evenly sample a fitted model over ``[x_min, x_max]`` for display.

    Values are clamped into the safety band around the data's y-range so an
    exploding model cannot distort the chart scale.  Samples the model cannot
    produce (logarithmic at x <= 0, fractional powers of negative x) are
    skipped.  An auto bound (None) or a missing result gives an empty list.
    """
    if result is None or x_min is None or x_max is None or resolution < 2:
        return []
    xs = np.linspace(float(x_min), float(x_max), resolution, dtype=np.float64)
    if result.kind is RegressionKind.LOGARITHMIC:
        xs = xs[xs > 0]
    ys = result.predict(xs)
    keep = ~np.isnan(ys)
    low, high = safety_band(y_data_min, y_data_max)
    return points_from_arrays(xs[keep], np.clip(ys[keep], low, high))
