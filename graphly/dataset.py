"""
Datasets and the per-render view handed to the chart surface.

Every field of ``DatasetView`` is recomputed from the dataset rows, its
configuration and the current domain; nothing is cached between renders.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Sequence

from graphly.expression import sample_function
from graphly.points import Point
from graphly.regression import RegressionKind, fit_regression
from graphly.settings import ChartSettings
from graphly.stats import RawRow, Stats, coerce_number, describe, numeric_pairs
from graphly.trendline import sample_trendline
from graphly.viewport import Bounds, Domain

logger = logging.getLogger(__name__)

DATASET_KINDS: tuple[str, ...] = ("scatter", "line", "function")


@dataclass(frozen=True, slots=True)
class DatasetConfig:
    kind: str = "scatter"
    x_key: str = "x"
    y_key: str = "y"
    show_trendline: bool = False
    trendline_kind: RegressionKind = RegressionKind.LINEAR

    def __post_init__(self) -> None:
        if self.kind not in DATASET_KINDS:
            raise ValueError(f"kind must be one of {DATASET_KINDS}, got {self.kind!r}")
        if not self.x_key or not self.y_key:
            raise ValueError("x_key and y_key must be non-empty")
        # accepts the plain string names as well
        object.__setattr__(self, "trendline_kind", RegressionKind(self.trendline_kind))

    @property
    def is_function(self) -> bool:
        return self.kind == "function"


@dataclass(frozen=True, slots=True)
class Dataset:
    name: str
    rows: Sequence[RawRow] = ()
    config: DatasetConfig = field(default_factory=DatasetConfig)
    visible: bool = True
    equation: str = ""          # user-typed f(x) for function datasets


# ===========================================================================
# Editing: every change returns a new Dataset
# ===========================================================================

def new_data_dataset(name: str = "New Dataset") -> Dataset:
    """Line dataset with a single (0, 0) row, ready for typing values in."""
    return Dataset(name, ({"x": 0.0, "y": 0.0},), DatasetConfig(kind="line"))


def new_function_dataset(equation: str = "x^2", name: Optional[str] = None) -> Dataset:
    return Dataset(
        name or f"f(x) = {equation}",
        config=DatasetConfig(kind="function"),
        equation=equation,
    )


def with_cell(dataset: Dataset, index: int, key: str, raw: str) -> Dataset:
    """Set one cell; numeric text is stored as a float, anything else as text."""
    if not 0 <= index < len(dataset.rows):
        raise IndexError(f"row {index} out of range for {dataset.name!r}")
    value = coerce_number(raw)
    rows = list(dataset.rows)
    rows[index] = {**rows[index], key: value if value is not None else raw.strip()}
    return replace(dataset, rows=tuple(rows))


def with_row_added(dataset: Dataset) -> Dataset:
    """Append a row continuing the x sequence, y copied from the last row."""
    cfg = dataset.config
    last = dataset.rows[-1] if dataset.rows else {}
    x = coerce_number(last.get(cfg.x_key))
    y = coerce_number(last.get(cfg.y_key))
    row = {cfg.x_key: (x + 1.0) if x is not None else 0.0, cfg.y_key: y if y is not None else 0.0}
    return replace(dataset, rows=(*dataset.rows, row))


def with_row_removed(dataset: Dataset, index: int) -> Dataset:
    if not 0 <= index < len(dataset.rows):
        raise IndexError(f"row {index} out of range for {dataset.name!r}")
    return replace(dataset, rows=tuple(dataset.rows[:index]) + tuple(dataset.rows[index + 1:]))


def with_visibility(dataset: Dataset, visible: bool) -> Dataset:
    return replace(dataset, visible=visible)


def with_trendline(dataset: Dataset, kind: Optional[RegressionKind | str]) -> Dataset:
    """Show a trendline of *kind*, or hide it when *kind* is None."""
    cfg = dataset.config
    if kind is None:
        return replace(dataset, config=replace(cfg, show_trendline=False))
    return replace(dataset, config=replace(cfg, show_trendline=True, trendline_kind=RegressionKind(kind)))


@dataclass(frozen=True, slots=True)
class DatasetView:
    dataset: Dataset
    points: list[Point]
    trendline: list[Point]
    stats: Stats
    r2: Optional[float] = None
    equation: Optional[str] = None


def project_points(rows: Iterable[RawRow], x_key: str, y_key: str) -> list[Point]:
    """Points of the rows with numeric x and y, sorted by x."""
    points = [Point(x, y) for x, y in numeric_pairs(rows, x_key, y_key)]
    points.sort(key=lambda p: p.x)
    return points


def data_bounds(datasets: Iterable[Dataset]) -> Optional[Bounds]:
    """Bounding box of the visible data datasets; None when none has a point."""
    x_lo = y_lo = float("inf")
    x_hi = y_hi = float("-inf")
    found = False
    for ds in datasets:
        if not ds.visible or ds.config.is_function:
            continue
        for x, y in numeric_pairs(ds.rows, ds.config.x_key, ds.config.y_key):
            x_lo, x_hi = min(x_lo, x), max(x_hi, x)
            y_lo, y_hi = min(y_lo, y), max(y_hi, y)
            found = True
    if not found:
        return None
    return Bounds(x_lo, x_hi, y_lo, y_hi)


def render_range(domain: Domain, buffer: float) -> tuple[float, float]:
    """Visible x-range extended by *buffer* times its width on each side."""
    extra = domain.x_range * buffer
    return domain.x[0] - extra, domain.x[1] + extra


def build_dataset_view(
    dataset: Dataset,
    domain: Domain,
    bounds: Optional[Bounds],
    settings: Optional[ChartSettings] = None,
) -> DatasetView:
    """Everything the chart needs to draw *dataset* in the current *domain*.

    *domain* must be explicit (see ``ViewportController.current_domain``) and
    *bounds* is the global data bounding box used to clamp trendlines.
    """
    settings = settings or ChartSettings()
    x_lo, x_hi = render_range(domain, settings.render_buffer)

    if dataset.config.is_function:
        points = (sample_function(dataset.equation, x_lo, x_hi, settings.function_resolution)
                  if dataset.equation else [])
        return DatasetView(dataset, points, [], Stats())

    cfg = dataset.config
    points = project_points(dataset.rows, cfg.x_key, cfg.y_key)
    stats = describe(dataset.rows, cfg.x_key, cfg.y_key)
    if not cfg.show_trendline:
        return DatasetView(dataset, points, [], stats)

    result = fit_regression(points, cfg.trendline_kind)
    if result is None:
        logger.debug("No %s trendline for dataset %r", cfg.trendline_kind.value, dataset.name)
        return DatasetView(dataset, points, [], stats)

    y_min, y_max = (bounds.y_min, bounds.y_max) if bounds is not None else (-10.0, 10.0)
    trend = sample_trendline(result, x_lo, x_hi, y_min, y_max, settings.trendline_resolution)
    return DatasetView(dataset, points, trend, stats, result.r2, result.equation)


def build_views(
    datasets: Sequence[Dataset], domain: Domain, settings: Optional[ChartSettings] = None
) -> list[DatasetView]:
    """Views for every dataset (visible or not), sharing one bounding box."""
    bounds = data_bounds(datasets)
    return [build_dataset_view(ds, domain, bounds, settings) for ds in datasets]
