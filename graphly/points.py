from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

FloatArray = NDArray[np.floating[Any]]


@dataclass(frozen=True, slots=True)
class Point:
    x: float
    y: float


def points_from_arrays(x: FloatArray, y: FloatArray) -> list[Point]:
    """Pair up two arrays, keeping only positions where both values are finite."""
    xs = np.asarray(x, dtype=np.float64)
    ys = np.asarray(y, dtype=np.float64)
    keep = np.isfinite(xs) & np.isfinite(ys)
    return [Point(float(px), float(py)) for px, py in zip(xs[keep], ys[keep])]


def points_to_arrays(points: list[Point]) -> tuple[FloatArray, FloatArray]:
    xs = np.fromiter((p.x for p in points), dtype=np.float64, count=len(points))
    ys = np.fromiter((p.y for p in points), dtype=np.float64, count=len(points))
    return xs, ys
