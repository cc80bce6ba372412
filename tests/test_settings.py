import logging

import pytest

from graphly.logs import LOG_LEVEL_ENV, setup_logger
from graphly.settings import ChartSettings


def test_defaults():
    s = ChartSettings()
    assert s.aspect_ratio == "auto" and not s.square
    assert s.enable_zoom and s.show_grid
    assert s.x_grid_interval is None and s.y_grid_interval is None


@pytest.mark.parametrize(
    "changes",
    [
        {"aspect_ratio": "wide"},
        {"x_grid_interval": 0},
        {"y_grid_interval": -1.0},
        {"max_ticks": 1},
        {"function_resolution": 1},
        {"trendline_resolution": 0},
        {"render_buffer": -0.1},
        {"default_window": 0},
        {"latex_decimals": 11},
    ],
)
def test_invalid_values_are_rejected(changes):
    with pytest.raises(ValueError):
        ChartSettings(**changes)


def test_updated_returns_validated_copy():
    s = ChartSettings()
    square = s.updated(aspect_ratio="square", x_grid_interval=2.0)
    assert square.square and square.x_grid_interval == 2.0
    assert not s.square
    with pytest.raises(ValueError):
        s.updated(max_ticks=0)


def test_setup_logger_does_not_stack_handlers():
    logger = setup_logger("graphly.tests.once", "DEBUG")
    setup_logger("graphly.tests.once", "DEBUG")
    streams = [h for h in logger.handlers if isinstance(h, logging.StreamHandler)]
    assert len(streams) == 1
    assert logger.level == logging.DEBUG


def test_setup_logger_reads_environment(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV, "warning")
    assert setup_logger("graphly.tests.env").level == logging.WARNING
