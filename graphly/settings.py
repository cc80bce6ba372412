from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

ASPECT_RATIOS: tuple[str, ...] = ("auto", "square")


@dataclass(frozen=True, slots=True)
class ChartSettings:
    aspect_ratio: str = "auto"
    enable_zoom: bool = True
    show_grid: bool = True
    x_grid_interval: Optional[float] = None   # None = nice ticks
    y_grid_interval: Optional[float] = None
    max_ticks: int = 8
    function_resolution: int = 200
    trendline_resolution: int = 150
    render_buffer: float = 0.5                # fraction of x-range drawn past each edge
    default_window: float = 10.0              # half-width of the empty-chart domain
    x_axis_label: str = "X"
    y_axis_label: str = "Y"
    latex_approx: bool = True
    latex_decimals: int = 3

    def __post_init__(self) -> None:
        if self.aspect_ratio not in ASPECT_RATIOS:
            raise ValueError(
                f"aspect_ratio must be one of {ASPECT_RATIOS}, got {self.aspect_ratio!r}"
            )
        for name in ("x_grid_interval", "y_grid_interval"):
            value = getattr(self, name)
            if value is not None and not value > 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.max_ticks < 2:
            raise ValueError(f"max_ticks must be at least 2, got {self.max_ticks}")
        if self.function_resolution < 2:
            raise ValueError(
                f"function_resolution must be at least 2, got {self.function_resolution}"
            )
        if self.trendline_resolution < 2:
            raise ValueError(
                f"trendline_resolution must be at least 2, got {self.trendline_resolution}"
            )
        if self.render_buffer < 0:
            raise ValueError(f"render_buffer cannot be negative: {self.render_buffer}")
        if not self.default_window > 0:
            raise ValueError(f"default_window must be positive, got {self.default_window}")
        if not (0 <= self.latex_decimals <= 10):
            raise ValueError(f"latex_decimals must be in [0, 10], got {self.latex_decimals}")

    @property
    def square(self) -> bool:
        return self.aspect_ratio == "square"

    def updated(self, **changes: Any) -> ChartSettings:
        """Copy with *changes* applied (validated like the constructor)."""
        return replace(self, **changes)
