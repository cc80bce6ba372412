"""Graphly: data and function plotting with trendlines and a navigable viewport."""

from graphly.dataset import Dataset, DatasetConfig, DatasetView, build_views, data_bounds
from graphly.expression import ExpressionError, compile_expression, sample_function
from graphly.formatting import format_equation_number, format_number
from graphly.regression import RegressionKind, RegressionResult, fit_regression
from graphly.settings import ChartSettings
from graphly.stats import Stats, describe
from graphly.ticks import axis_ticks, nice_ticks
from graphly.trendline import sample_trendline
from graphly.viewport import AxisMask, Bounds, Domain, ViewportController

__version__ = "0.1.0"

__all__ = [
    "AxisMask",
    "Bounds",
    "ChartSettings",
    "Dataset",
    "DatasetConfig",
    "DatasetView",
    "Domain",
    "ExpressionError",
    "RegressionKind",
    "RegressionResult",
    "Stats",
    "ViewportController",
    "axis_ticks",
    "build_views",
    "compile_expression",
    "data_bounds",
    "describe",
    "fit_regression",
    "format_equation_number",
    "format_number",
    "nice_ticks",
    "sample_function",
    "sample_trendline",
]
