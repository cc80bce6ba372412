import pytest

from graphly.ticks import MAX_INTERVAL_TICKS, axis_ticks, interval_ticks, nice_step, nice_ticks
from graphly.viewport import Bounds, ViewportController


@pytest.mark.parametrize(
    "rough, expected",
    [(0.14, 0.1), (14.3, 10.0), (2.5, 2.0), (0.04, 0.05), (8.0, 10.0)],
)
def test_nice_step(rough, expected):
    assert nice_step(rough) == pytest.approx(expected)


def test_zero_to_hundred():
    ticks = nice_ticks(0, 100, 8)
    assert ticks == [0, 10, 20, 30, 40, 50, 60, 70, 80, 90, 100]
    assert max(ticks) <= 100 + 10 / 1000


def test_ticks_start_on_first_multiple_inside_range():
    assert nice_ticks(-3, 17) == [-2, 0, 2, 4, 6, 8, 10, 12, 14, 16]


def test_fractional_range_absorbs_drift():
    ticks = nice_ticks(0, 1)
    assert len(ticks) == 11
    assert ticks[-1] == pytest.approx(1.0)


def test_degenerate_ranges():
    assert nice_ticks(5, 5) == []
    assert nice_ticks(None, 3) == []
    assert nice_ticks(10, 0) == [10]


def test_explicit_interval_overrides_nice_ticks():
    assert axis_ticks(-1, 3.5, interval=1) == [-1, 0, 1, 2, 3]
    assert axis_ticks(0.5, 10, interval=2.5) == [2.5, 5.0, 7.5, 10.0]
    assert axis_ticks(0, 100, interval=None) == nice_ticks(0, 100)


def test_interval_ticks_are_capped():
    assert len(interval_ticks(0, 1e9, 1)) == MAX_INTERVAL_TICKS
    assert interval_ticks(0, 10, 0) == []


def test_underflowing_step_gives_no_ticks():
    assert nice_step(0.0) == 0.0
    assert nice_step(float("inf")) == 0.0
    assert nice_ticks(-5e-324, 5e-324) == []
    assert nice_ticks(-1e308, 1.7e308) == []


def test_deep_zoom_around_origin_never_raises():
    vc = ViewportController(bounds=Bounds(-1, 1, -1, 1))
    for _ in range(4000):
        vc.zoom_in()
        assert isinstance(vc.x_ticks(), list)
        assert isinstance(vc.y_ticks(), list)
