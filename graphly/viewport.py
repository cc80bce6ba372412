"""
Viewport / domain math.

The visible rectangle is an immutable ``Domain``.  Every navigation gesture is
a pure function from one domain to the next; ``ViewportController`` only
remembers the latest explicit domain and recomputes the auto domain from the
data bounds when there is none.

Screen and data space differ in orientation on one axis only: dragging right
moves the view left (x inverted) while dragging down moves the view down
(y proportional).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Flag
from typing import Optional

from graphly.settings import ChartSettings
from graphly.ticks import axis_ticks

logger = logging.getLogger(__name__)

Bound = Optional[float]   # None = auto

AUTO_PADDING: float = 0.1
ZOOM_IN_FACTOR: float = 0.8
ZOOM_OUT_FACTOR: float = 1.25
WHEEL_STEP: float = 0.1
FINE_WHEEL_STEP_SMALL: float = 0.02
FINE_WHEEL_STEP_LARGE: float = 0.05
FINE_WHEEL_THRESHOLD: float = 50.0
PINCH_IN_FACTOR: float = 0.95
PINCH_OUT_FACTOR: float = 1.05
# pixel size assumed for pan maths before the container has been measured
FALLBACK_WIDTH: float = 500.0
FALLBACK_HEIGHT: float = 300.0


class AxisMask(Flag):
    NONE = 0
    X = 1
    Y = 2
    BOTH = X | Y


@dataclass(frozen=True, slots=True)
class Bounds:
    x_min: float
    x_max: float
    y_min: float
    y_max: float


@dataclass(frozen=True, slots=True)
class ContainerSize:
    width: float = 0.0
    height: float = 0.0

    @property
    def measured(self) -> bool:
        return self.width > 0 and self.height > 0


@dataclass(frozen=True, slots=True)
class Domain:
    x: tuple[Bound, Bound] = (None, None)
    y: tuple[Bound, Bound] = (None, None)

    @classmethod
    def auto(cls) -> Domain:
        return cls()

    @classmethod
    def of(cls, x_min: float, x_max: float, y_min: float, y_max: float) -> Domain:
        return cls((float(x_min), float(x_max)), (float(y_min), float(y_max)))

    @property
    def is_auto(self) -> bool:
        return self.x[0] is None

    @property
    def x_range(self) -> float:
        return self._hi(self.x) - self._lo(self.x)

    @property
    def y_range(self) -> float:
        return self._hi(self.y) - self._lo(self.y)

    @property
    def x_center(self) -> float:
        return (self._hi(self.x) + self._lo(self.x)) / 2

    @property
    def y_center(self) -> float:
        return (self._hi(self.y) + self._lo(self.y)) / 2

    @staticmethod
    def _lo(pair: tuple[Bound, Bound]) -> float:
        if pair[0] is None:
            raise ValueError("auto domain has no extent")
        return pair[0]

    @staticmethod
    def _hi(pair: tuple[Bound, Bound]) -> float:
        if pair[1] is None:
            raise ValueError("auto domain has no extent")
        return pair[1]


# ===========================================================================
# Pure transitions
# ===========================================================================

def default_bounds(half_width: float = 10.0) -> Bounds:
    return Bounds(-half_width, half_width, -half_width, half_width)


def auto_domain(bounds: Optional[Bounds], default_window: float = 10.0) -> Domain:
    """Data bounding box padded by 10% per side; a fixed window without data."""
    if bounds is None:
        bounds = default_bounds(default_window)
    x_pad = (bounds.x_max - bounds.x_min) * AUTO_PADDING or 1.0
    y_pad = (bounds.y_max - bounds.y_min) * AUTO_PADDING or 1.0
    return Domain.of(
        bounds.x_min - x_pad, bounds.x_max + x_pad,
        bounds.y_min - y_pad, bounds.y_max + y_pad,
    )


def apply_aspect_lock(domain: Domain, container: ContainerSize) -> Domain:
    """Rescale y so one data unit spans the same pixels on both axes."""
    if domain.is_auto or not container.measured:
        return domain
    y_range = domain.x_range * (container.height / container.width)
    y_center = domain.y_center
    return Domain(domain.x, (y_center - y_range / 2, y_center + y_range / 2))


def _scale_about_center(center: float, span: float, factor: float) -> tuple[Bound, Bound]:
    half = span * factor / 2
    return (center - half, center + half)


def zoom_domain(
    domain: Domain, factor: float, axes: AxisMask = AxisMask.BOTH
) -> Domain:
    """Scale the domain by *factor* about its midpoint on the masked axes."""
    if domain.is_auto:
        return domain
    x = domain.x
    y = domain.y
    if AxisMask.X in axes:
        x = _scale_about_center(domain.x_center, domain.x_range, factor)
    if AxisMask.Y in axes:
        y = _scale_about_center(domain.y_center, domain.y_range, factor)
    return Domain(x, y)


def pan_domain(
    domain: Domain, dx_pixels: float, dy_pixels: float, container: ContainerSize
) -> Domain:
    """Translate by a pixel drag: x moves against the pointer, y with it."""
    if domain.is_auto:
        return domain
    width = container.width or FALLBACK_WIDTH
    height = container.height or FALLBACK_HEIGHT
    x_shift = -1 * (dx_pixels / width) * domain.x_range
    y_shift = (dy_pixels / height) * domain.y_range
    return Domain(
        (domain.x[0] + x_shift, domain.x[1] + x_shift),
        (domain.y[0] + y_shift, domain.y[1] + y_shift),
    )


def wheel_zoom_factor(delta_y: float, pixel_mode: bool) -> float:
    """Scale for one wheel event.

    Notched wheels move 10% per event; pixel-precise devices (trackpads) are
    damped to 2% for small deltas and 5% otherwise.  Positive delta zooms out.
    """
    step = WHEEL_STEP
    if pixel_mode:
        step = FINE_WHEEL_STEP_SMALL if abs(delta_y) < FINE_WHEEL_THRESHOLD else FINE_WHEEL_STEP_LARGE
    return 1 + step if delta_y > 0 else 1 - step


def wheel_axes(ctrl: bool = False, meta: bool = False, shift: bool = False) -> AxisMask:
    """Ctrl/Meta pins the x axis, Shift pins the y axis."""
    axes = AxisMask.NONE
    if not (ctrl or meta):
        axes |= AxisMask.X
    if not shift:
        axes |= AxisMask.Y
    return axes


def pinch_zoom_factor(previous_distance: float, current_distance: float) -> float:
    return PINCH_IN_FACTOR if current_distance - previous_distance > 0 else PINCH_OUT_FACTOR


# ===========================================================================
# Controller
# ===========================================================================

class ViewportController:
    """Owns the explicit domain of one chart and applies navigation gestures.

    Parameters
    ----------
    settings : ChartSettings
        Aspect-ratio mode, zoom enablement, grid intervals and tick count.
    bounds : Bounds, optional
        Bounding box of the visible data; None falls back to the default window.
    """

    def __init__(
        self,
        settings: Optional[ChartSettings] = None,
        bounds: Optional[Bounds] = None,
    ) -> None:
        self._settings = settings or ChartSettings()
        self._bounds = bounds
        self._container = ContainerSize()
        self._explicit = Domain.auto()
        self._pinch_distance: Optional[float] = None

    @property
    def settings(self) -> ChartSettings:
        return self._settings

    @property
    def container(self) -> ContainerSize:
        return self._container

    @property
    def explicit_domain(self) -> Domain:
        return self._explicit

    @property
    def pinch_distance(self) -> Optional[float]:
        """Finger distance of the pinch in progress, None when idle."""
        return self._pinch_distance

    def set_settings(self, settings: ChartSettings) -> None:
        self._settings = settings

    def set_data_bounds(self, bounds: Optional[Bounds]) -> None:
        self._bounds = bounds

    def set_container_size(self, width: float, height: float) -> None:
        self._container = ContainerSize(float(width), float(height))

    def current_domain(self) -> Domain:
        domain = self._explicit
        if domain.is_auto:
            domain = auto_domain(self._bounds, self._settings.default_window)
        if self._settings.square:
            domain = apply_aspect_lock(domain, self._container)
        return domain

    def x_ticks(self) -> list[float]:
        d = self.current_domain()
        return axis_ticks(d.x[0], d.x[1], self._settings.x_grid_interval, self._settings.max_ticks)

    def y_ticks(self) -> list[float]:
        d = self.current_domain()
        return axis_ticks(d.y[0], d.y[1], self._settings.y_grid_interval, self._settings.max_ticks)

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    def zoom_at(self, factor: float, axes: AxisMask = AxisMask.BOTH) -> Domain:
        if self._settings.enable_zoom:
            self._explicit = zoom_domain(self.current_domain(), factor, axes)
        return self.current_domain()

    def zoom_in(self) -> Domain:
        return self.zoom_at(ZOOM_IN_FACTOR)

    def zoom_out(self) -> Domain:
        return self.zoom_at(ZOOM_OUT_FACTOR)

    def wheel(
        self,
        delta_y: float,
        pixel_mode: bool = False,
        ctrl: bool = False,
        meta: bool = False,
        shift: bool = False,
    ) -> Domain:
        return self.zoom_at(wheel_zoom_factor(delta_y, pixel_mode), wheel_axes(ctrl, meta, shift))

    def pan_by(self, dx_pixels: float, dy_pixels: float) -> Domain:
        if self._settings.enable_zoom:
            self._explicit = pan_domain(self.current_domain(), dx_pixels, dy_pixels, self._container)
        return self.current_domain()

    def pinch_start(self, distance: float) -> None:
        if self._settings.enable_zoom:
            self._pinch_distance = distance

    def pinch_move(self, distance: float) -> Domain:
        if not self._pinch_distance:
            return self.current_domain()
        factor = pinch_zoom_factor(self._pinch_distance, distance)
        self._pinch_distance = distance
        return self.zoom_at(factor)

    def pinch_end(self) -> None:
        self._pinch_distance = None

    def reset_to_auto(self) -> Domain:
        logger.debug("Viewport reset to auto")
        self._explicit = Domain.auto()
        self._pinch_distance = None
        return self.current_domain()
