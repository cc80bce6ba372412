from __future__ import annotations

import math
import re
from dataclasses import dataclass
from numbers import Real
from typing import Any, Iterable, Mapping, Optional

import numpy as np

RawRow = Mapping[str, Any]

_NUMERIC_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True, slots=True)
class Stats:
    mean_x: float = 0.0
    mean_y: float = 0.0
    std_dev_x: float = 0.0
    std_dev_y: float = 0.0
    n: int = 0


def coerce_number(value: Any) -> Optional[float]:
    """Numeric value of a raw cell, or None when it has no finite number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, Real):
        v = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not _NUMERIC_RE.fullmatch(text):
            return None
        v = float(text)
    else:
        return None
    return v if math.isfinite(v) else None


def numeric_pairs(rows: Iterable[RawRow], x_key: str, y_key: str) -> list[tuple[float, float]]:
    """(x, y) for every row whose two keyed cells are finite numbers, in row order."""
    pairs: list[tuple[float, float]] = []
    for row in rows:
        x = coerce_number(row.get(x_key))
        y = coerce_number(row.get(y_key))
        if x is not None and y is not None:
            pairs.append((x, y))
    return pairs


def describe(rows: Optional[Iterable[RawRow]], x_key: str, y_key: str) -> Stats:
    """Means and population standard deviations of the two keyed columns."""
    if rows is None:
        return Stats()
    pairs = numeric_pairs(rows, x_key, y_key)
    if not pairs:
        return Stats()
    data = np.asarray(pairs, dtype=np.float64)
    means = data.mean(axis=0)
    stds = data.std(axis=0)
    return Stats(
        mean_x=float(means[0]),
        mean_y=float(means[1]),
        std_dev_x=float(stds[0]),
        std_dev_y=float(stds[1]),
        n=len(pairs),
    )
