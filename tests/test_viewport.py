import pytest

from graphly.settings import ChartSettings
from graphly.ticks import nice_ticks
from graphly.viewport import (
    AxisMask,
    Bounds,
    ContainerSize,
    Domain,
    ViewportController,
    apply_aspect_lock,
    auto_domain,
    pan_domain,
    pinch_zoom_factor,
    wheel_axes,
    wheel_zoom_factor,
    zoom_domain,
)


def _approx_domain(d: Domain, x, y):
    assert d.x == pytest.approx(x), f"x range {d.x} != {x}"
    assert d.y == pytest.approx(y), f"y range {d.y} != {y}"


# ---------------------------------------------------------------------------
# Pure transitions
# ---------------------------------------------------------------------------

def test_auto_domain_pads_ten_percent():
    _approx_domain(auto_domain(Bounds(0, 10, 0, 20)), (-1, 11), (-2, 22))


def test_auto_domain_without_data_uses_default_window():
    _approx_domain(auto_domain(None), (-12, 12), (-12, 12))


def test_auto_domain_zero_span_pads_by_one():
    _approx_domain(auto_domain(Bounds(5, 5, 1, 1)), (4, 6), (0, 2))


def test_aspect_lock_matches_pixel_ratio_and_keeps_center():
    d = apply_aspect_lock(Domain.of(0, 10, 0, 10), ContainerSize(800, 400))
    _approx_domain(d, (0, 10), (2.5, 7.5))
    assert d.y_range / d.x_range == pytest.approx(400 / 800)


def test_aspect_lock_waits_for_measurement():
    d = Domain.of(0, 10, 0, 10)
    assert apply_aspect_lock(d, ContainerSize()) == d


def test_zoom_in_then_out_restores_domain():
    d = Domain.of(-10, 10, -5, 5)
    zoomed = zoom_domain(d, 0.8)
    _approx_domain(zoomed, (-8, 8), (-4, 4))
    _approx_domain(zoom_domain(zoomed, 1.25), (-10, 10), (-5, 5))


def test_zoom_respects_axis_mask():
    d = Domain.of(0, 10, 0, 10)
    _approx_domain(zoom_domain(d, 0.5, AxisMask.X), (2.5, 7.5), (0, 10))
    _approx_domain(zoom_domain(d, 0.5, AxisMask.Y), (0, 10), (2.5, 7.5))
    assert zoom_domain(d, 0.5, AxisMask.NONE) == d


def test_auto_domain_is_not_zoomed_or_panned():
    assert zoom_domain(Domain.auto(), 0.5).is_auto
    assert pan_domain(Domain.auto(), 10, 10, ContainerSize(100, 100)).is_auto


def test_pan_moves_x_against_and_y_with_the_pointer():
    d = pan_domain(Domain.of(0, 10, 0, 10), 10, 10, ContainerSize(100, 100))
    _approx_domain(d, (-1, 9), (1, 11))


def test_pan_falls_back_to_default_size():
    d = pan_domain(Domain.of(0, 10, 0, 10), 50, 30, ContainerSize())
    _approx_domain(d, (-1, 9), (1, 11))


@pytest.mark.parametrize(
    "delta, pixel, expected",
    [
        (100, False, 1.1),
        (-100, False, 0.9),
        (10, True, 1.02),
        (-10, True, 0.98),
        (80, True, 1.05),
        (-80, True, 0.95),
    ],
)
def test_wheel_zoom_factor(delta, pixel, expected):
    assert wheel_zoom_factor(delta, pixel) == pytest.approx(expected)


def test_wheel_axes_modifiers():
    assert wheel_axes() == AxisMask.BOTH
    assert wheel_axes(ctrl=True) == AxisMask.Y
    assert wheel_axes(meta=True) == AxisMask.Y
    assert wheel_axes(shift=True) == AxisMask.X
    assert wheel_axes(ctrl=True, shift=True) == AxisMask.NONE


def test_pinch_factor():
    assert pinch_zoom_factor(100, 120) == 0.95
    assert pinch_zoom_factor(100, 80) == 1.05


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

def test_controller_auto_follows_data_bounds():
    vc = ViewportController(bounds=Bounds(0, 10, 0, 10))
    _approx_domain(vc.current_domain(), (-1, 11), (-1, 11))
    vc.set_data_bounds(Bounds(0, 20, 0, 10))
    _approx_domain(vc.current_domain(), (-2, 22), (-1, 11))


def test_controller_zoom_sets_explicit_domain_and_reset_clears_it():
    vc = ViewportController(bounds=Bounds(0, 10, 0, 10))
    vc.zoom_in()
    assert not vc.explicit_domain.is_auto
    _approx_domain(vc.current_domain(), (0.2, 9.8), (0.2, 9.8))
    # explicit domain survives data changes
    vc.set_data_bounds(Bounds(0, 100, 0, 100))
    _approx_domain(vc.current_domain(), (0.2, 9.8), (0.2, 9.8))
    vc.reset_to_auto()
    assert vc.explicit_domain.is_auto
    _approx_domain(vc.current_domain(), (-10, 110), (-10, 110))


def test_controller_wheel_with_ctrl_keeps_x():
    vc = ViewportController(bounds=Bounds(0, 10, 0, 10))
    vc.wheel(100, ctrl=True)
    _approx_domain(vc.current_domain(), (-1, 11), (-1.6, 11.6))


def test_controller_pan_uses_container_size():
    vc = ViewportController(bounds=Bounds(0, 10, 0, 10))
    vc.set_container_size(120, 120)
    vc.pan_by(12, 0)
    _approx_domain(vc.current_domain(), (-2.2, 9.8), (-1, 11))


def test_controller_pinch_sequence():
    vc = ViewportController(bounds=Bounds(0, 10, 0, 10))
    before = vc.current_domain()
    assert vc.pinch_move(120) == before
    vc.pinch_start(100)
    assert vc.pinch_distance == 100
    vc.pinch_move(120)
    assert vc.current_domain().x_range == pytest.approx(12 * 0.95)
    vc.pinch_end()
    assert vc.pinch_distance is None


def test_disabled_zoom_ignores_all_navigation():
    vc = ViewportController(ChartSettings(enable_zoom=False), Bounds(0, 10, 0, 10))
    before = vc.current_domain()
    vc.zoom_in()
    vc.zoom_out()
    vc.wheel(-100)
    vc.pan_by(50, 50)
    vc.pinch_start(100)
    vc.pinch_move(200)
    assert vc.explicit_domain.is_auto
    assert vc.current_domain() == before


def test_square_aspect_applies_to_current_domain():
    vc = ViewportController(ChartSettings(aspect_ratio="square"), Bounds(0, 10, 0, 10))
    vc.set_container_size(200, 100)
    d = vc.current_domain()
    assert d.y_range == pytest.approx(d.x_range / 2)
    assert d.y_center == pytest.approx(5.0)


def test_controller_ticks_honour_grid_interval():
    vc = ViewportController(ChartSettings(x_grid_interval=5), Bounds(0, 10, 0, 10))
    assert vc.x_ticks() == [0, 5, 10]
    assert vc.y_ticks() == nice_ticks(-1, 11)
