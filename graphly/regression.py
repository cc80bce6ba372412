"""
Closed-form regression over five model families.

Families
--------
linear        y = slope*x + intercept        OLS sums
quadratic     y = a*x^2 + b*x + c            normal equations, Cramer's rule
exponential   y = a*exp(b*x)                 OLS on (x, ln y),      y > 0
power         y = a*x^b                      OLS on (ln x, ln y),   x > 0, y > 0
logarithmic   y = a + b*ln(x)                OLS on (ln x, y),      x > 0

Each family has one fit function and one generate function, looked up by
``RegressionKind`` in the dispatch tables at the bottom of the module.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Mapping, Optional, Sequence

import numpy as np

from graphly.formatting import format_equation_number as _fmt
from graphly.points import FloatArray, Point, points_to_arrays

logger = logging.getLogger(__name__)

MIN_POINTS: int = 2


class RegressionKind(str, Enum):
    LINEAR = "linear"
    QUADRATIC = "quadratic"
    EXPONENTIAL = "exponential"
    POWER = "power"
    LOGARITHMIC = "logarithmic"


@dataclass(frozen=True, slots=True)
class RegressionResult:
    kind: RegressionKind
    params: Mapping[str, float] = field(default_factory=dict)
    r2: Optional[float] = None
    equation: str = ""

    def predict(self, x: FloatArray) -> FloatArray:
        """Evaluate the fitted closed form at *x* (NaN/inf are not filtered)."""
        xs = np.asarray(x, dtype=np.float64)
        with np.errstate(all="ignore"):
            return np.asarray(_GENERATORS[self.kind](self.params, xs), dtype=np.float64)

    def __getitem__(self, name: str) -> float:
        return self.params[name]


# ===========================================================================
# Shared helpers
# ===========================================================================

def _linear_sums(u: FloatArray, v: FloatArray) -> Optional[tuple[float, float]]:
    """Least-squares v ~ slope*u + intercept.  None when u has no spread."""
    n = len(u)
    sum_u = float(np.sum(u))
    sum_v = float(np.sum(v))
    sum_uv = float(np.sum(u * v))
    sum_u2 = float(np.sum(u * u))
    denom = n * sum_u2 - sum_u * sum_u
    if denom == 0:
        return None
    slope = (n * sum_uv - sum_u * sum_v) / denom
    intercept = (sum_v - slope * sum_u) / n
    if not (math.isfinite(slope) and math.isfinite(intercept)):
        return None
    return slope, intercept


def coefficient_of_determination(y_true: FloatArray, y_pred: FloatArray) -> float:
    """R^2 = 1 - SSres/SStot, 0 when the data has no variance, never negative."""
    ss_tot = float(np.sum((y_true - np.mean(y_true)) ** 2))
    if ss_tot == 0:
        return 0.0
    ss_res = float(np.sum((y_true - y_pred) ** 2))
    r2 = 1.0 - ss_res / ss_tot
    if not math.isfinite(r2):
        return 0.0
    return max(0.0, r2)


def det3(m: Sequence[Sequence[float]]) -> float:
    return (m[0][0] * (m[1][1] * m[2][2] - m[2][1] * m[1][2])
            - m[0][1] * (m[1][0] * m[2][2] - m[1][2] * m[2][0])
            + m[0][2] * (m[1][0] * m[2][1] - m[1][1] * m[2][0]))


def _valid_arrays(points: Iterable[Point]) -> tuple[FloatArray, FloatArray]:
    pts = [p for p in points if math.isfinite(p.x) and math.isfinite(p.y)]
    pts.sort(key=lambda p: p.x)
    return points_to_arrays(pts)


# ===========================================================================
# Per-family fitters: (x, y) -> params or None
# ===========================================================================

Params = dict[str, float]


def _fit_linear(x: FloatArray, y: FloatArray) -> Optional[Params]:
    line = _linear_sums(x, y)
    if line is None:
        return None
    return {"slope": line[0], "intercept": line[1]}


def _fit_quadratic(x: FloatArray, y: FloatArray) -> Optional[Params]:
    x2 = x * x
    s00 = float(len(x))
    s10, s20 = float(np.sum(x)), float(np.sum(x2))
    s30, s40 = float(np.sum(x2 * x)), float(np.sum(x2 * x2))
    s01, s11, s21 = float(np.sum(y)), float(np.sum(x * y)), float(np.sum(x2 * y))

    det = det3([[s00, s10, s20], [s10, s20, s30], [s20, s30, s40]])
    if det == 0:
        return None
    c = det3([[s01, s10, s20], [s11, s20, s30], [s21, s30, s40]]) / det
    b = det3([[s00, s01, s20], [s10, s11, s30], [s20, s21, s40]]) / det
    a = det3([[s00, s10, s01], [s10, s20, s11], [s20, s30, s21]]) / det
    if not all(math.isfinite(v) for v in (a, b, c)):
        return None
    return {"a": a, "b": b, "c": c}


def _fit_exponential(x: FloatArray, y: FloatArray) -> Optional[Params]:
    line = _linear_sums(x, np.log(y))
    if line is None:
        return None
    try:
        a = math.exp(line[1])
    except OverflowError:
        return None
    return {"a": a, "b": line[0]}


def _fit_power(x: FloatArray, y: FloatArray) -> Optional[Params]:
    line = _linear_sums(np.log(x), np.log(y))
    if line is None:
        return None
    try:
        a = math.exp(line[1])
    except OverflowError:
        return None
    return {"a": a, "b": line[0]}


def _fit_logarithmic(x: FloatArray, y: FloatArray) -> Optional[Params]:
    line = _linear_sums(np.log(x), y)
    if line is None:
        return None
    return {"a": line[1], "b": line[0]}


# ===========================================================================
# Per-family generators: (params, x) -> y
# ===========================================================================

def _gen_linear(p: Mapping[str, float], x: FloatArray) -> FloatArray:
    return p["slope"] * x + p["intercept"]


def _gen_quadratic(p: Mapping[str, float], x: FloatArray) -> FloatArray:
    return p["a"] * x * x + p["b"] * x + p["c"]


def _gen_exponential(p: Mapping[str, float], x: FloatArray) -> FloatArray:
    return p["a"] * np.exp(p["b"] * x)


def _gen_power(p: Mapping[str, float], x: FloatArray) -> FloatArray:
    return p["a"] * np.power(x, p["b"])


def _gen_logarithmic(p: Mapping[str, float], x: FloatArray) -> FloatArray:
    # x <= 0 is outside the model; NaN lets samplers skip it
    safe = np.where(x > 0, x, np.nan)
    return p["a"] + p["b"] * np.log(safe)


# ===========================================================================
# Equation strings
# ===========================================================================

def _eq_linear(p: Mapping[str, float]) -> str:
    return f"y = {_fmt(p['slope'])}x + {_fmt(p['intercept'])}"


def _eq_quadratic(p: Mapping[str, float]) -> str:
    return f"y = {_fmt(p['a'])}x² + {_fmt(p['b'])}x + {_fmt(p['c'])}"


def _eq_exponential(p: Mapping[str, float]) -> str:
    return f"y = {_fmt(p['a'])}e^({_fmt(p['b'])}x)"


def _eq_power(p: Mapping[str, float]) -> str:
    return f"y = {_fmt(p['a'])}x^{_fmt(p['b'])}"


def _eq_logarithmic(p: Mapping[str, float]) -> str:
    return f"y = {_fmt(p['a'])} + {_fmt(p['b'])}ln(x)"


# ===========================================================================
# Dispatch
# ===========================================================================

Fitter = Callable[[FloatArray, FloatArray], Optional[Params]]
Generator = Callable[[Mapping[str, float], FloatArray], FloatArray]
DomainMask = Callable[[FloatArray, FloatArray], FloatArray]

_FITTERS: dict[RegressionKind, Fitter] = {
    RegressionKind.LINEAR: _fit_linear,
    RegressionKind.QUADRATIC: _fit_quadratic,
    RegressionKind.EXPONENTIAL: _fit_exponential,
    RegressionKind.POWER: _fit_power,
    RegressionKind.LOGARITHMIC: _fit_logarithmic,
}

_GENERATORS: dict[RegressionKind, Generator] = {
    RegressionKind.LINEAR: _gen_linear,
    RegressionKind.QUADRATIC: _gen_quadratic,
    RegressionKind.EXPONENTIAL: _gen_exponential,
    RegressionKind.POWER: _gen_power,
    RegressionKind.LOGARITHMIC: _gen_logarithmic,
}

_EQUATIONS: dict[RegressionKind, Callable[[Mapping[str, float]], str]] = {
    RegressionKind.LINEAR: _eq_linear,
    RegressionKind.QUADRATIC: _eq_quadratic,
    RegressionKind.EXPONENTIAL: _eq_exponential,
    RegressionKind.POWER: _eq_power,
    RegressionKind.LOGARITHMIC: _eq_logarithmic,
}

# Families restricted to part of the plane; absent kinds accept every point.
_DOMAINS: dict[RegressionKind, DomainMask] = {
    RegressionKind.EXPONENTIAL: lambda x, y: y > 0,
    RegressionKind.POWER: lambda x, y: (x > 0) & (y > 0),
    RegressionKind.LOGARITHMIC: lambda x, y: x > 0,
}


def fit_regression(
    points: Iterable[Point], kind: RegressionKind | str = RegressionKind.LINEAR
) -> Optional[RegressionResult]:
    """Fit *kind* to *points*.

    Returns None when there are too few valid points, too few points in the
    family's domain, or the system is degenerate.  None is an expected
    outcome, not an error.
    """
    kind = RegressionKind(kind)
    x, y = _valid_arrays(points)
    if len(x) < MIN_POINTS:
        logger.debug("%s fit skipped: %d valid points", kind.value, len(x))
        return None

    mask = _DOMAINS.get(kind)
    if mask is not None:
        keep = mask(x, y)
        x, y = x[keep], y[keep]
        if len(x) < MIN_POINTS:
            logger.debug("%s fit skipped: %d points in domain", kind.value, len(x))
            return None

    with np.errstate(all="ignore"):
        params = _FITTERS[kind](x, y)
        if params is None:
            logger.debug("%s fit degenerate for %d points", kind.value, len(x))
            return None
        y_pred = np.asarray(_GENERATORS[kind](params, x), dtype=np.float64)
        r2 = coefficient_of_determination(y, y_pred)

    return RegressionResult(
        kind=kind,
        params=params,
        r2=r2,
        equation=_EQUATIONS[kind](params),
    )
