import math

import numpy as np
import pytest

from graphly.points import Point
from graphly.regression import (
    RegressionKind,
    coefficient_of_determination,
    det3,
    fit_regression,
)


def _points(xs, f):
    return [Point(float(x), float(f(x))) for x in xs]


def test_linear_exact_recovery():
    res = fit_regression(_points(range(5), lambda x: 2 * x + 1), "linear")
    assert res is not None
    assert res["slope"] == pytest.approx(2.0)
    assert res["intercept"] == pytest.approx(1.0)
    assert res.r2 == pytest.approx(1.0)
    assert res.equation == "y = 2.000x + 1.000"


def test_quadratic_exact_recovery():
    res = fit_regression(_points(range(-2, 4), lambda x: x * x - 2 * x + 1), RegressionKind.QUADRATIC)
    assert res is not None
    assert res["a"] == pytest.approx(1.0, abs=1e-9)
    assert res["b"] == pytest.approx(-2.0, abs=1e-9)
    assert res["c"] == pytest.approx(1.0, abs=1e-9)
    assert res.r2 == pytest.approx(1.0)
    assert res.equation == "y = 1.000x² + -2.000x + 1.000"


def test_exponential_exact_recovery():
    res = fit_regression(_points(range(5), lambda x: 2 * math.exp(0.5 * x)), "exponential")
    assert res["a"] == pytest.approx(2.0)
    assert res["b"] == pytest.approx(0.5)
    assert res.equation == "y = 2.000e^(0.500x)"


def test_power_exact_recovery():
    res = fit_regression(_points(range(1, 6), lambda x: 3 * x ** 2), "power")
    assert res["a"] == pytest.approx(3.0)
    assert res["b"] == pytest.approx(2.0)
    assert res.equation == "y = 3.000x^2.000"


def test_logarithmic_exact_recovery():
    res = fit_regression(_points(range(1, 6), lambda x: 1 + 2 * math.log(x)), "logarithmic")
    assert res["a"] == pytest.approx(1.0)
    assert res["b"] == pytest.approx(2.0)
    assert res.equation == "y = 1.000 + 2.000ln(x)"


@pytest.mark.parametrize(
    "kind, bad_point",
    [
        ("exponential", Point(2.5, -1.0)),
        ("power", Point(-1.0, 4.0)),
        ("logarithmic", Point(0.0, 7.0)),
    ],
)
def test_points_outside_the_model_domain_are_ignored(kind, bad_point):
    good = _points(range(1, 6), lambda x: 1.5 * x + 2)
    base = fit_regression(good, kind)
    with_bad = fit_regression(good + [bad_point], kind)
    assert base is not None and with_bad is not None
    for name, value in base.params.items():
        assert with_bad[name] == pytest.approx(value), f"{kind} {name} changed"
    assert with_bad.r2 == pytest.approx(base.r2)


def test_non_finite_points_are_ignored():
    pts = _points(range(4), lambda x: 3 * x) + [Point(float("nan"), 1.0), Point(1.0, float("inf"))]
    res = fit_regression(pts, "linear")
    assert res["slope"] == pytest.approx(3.0)


def test_unfittable_inputs_give_none():
    assert fit_regression([], "linear") is None
    assert fit_regression([Point(1.0, 1.0)], "linear") is None
    assert fit_regression([Point(2.0, 1.0), Point(2.0, 5.0)], "linear") is None
    assert fit_regression([Point(1.0, -1.0), Point(2.0, -2.0)], "exponential") is None
    assert fit_regression([Point(-1.0, 1.0), Point(2.0, 2.0)], "power") is None
    assert fit_regression([Point(0.0, 1.0), Point(-3.0, 2.0)], "logarithmic") is None


def test_unknown_kind_is_rejected():
    with pytest.raises(ValueError):
        fit_regression(_points(range(3), lambda x: x), "cubic")


def test_constant_data_has_zero_r2():
    res = fit_regression(_points(range(4), lambda x: 5.0), "linear")
    assert res["slope"] == pytest.approx(0.0)
    assert res.r2 == 0.0


def test_r2_stays_in_unit_interval_for_noisy_data():
    rng = np.random.default_rng(7)
    xs = rng.uniform(1, 10, size=200)
    ys = 0.4 * xs + rng.normal(0, 3, size=200)
    pts = [Point(float(x), float(y)) for x, y in zip(xs, ys)]
    for kind in RegressionKind:
        res = fit_regression(pts, kind)
        if res is not None:
            assert 0.0 <= res.r2 <= 1.0, f"{kind.value} r2 out of range: {res.r2}"


def test_r2_is_never_negative():
    y = np.array([1.0, 2.0, 3.0])
    assert coefficient_of_determination(y, np.array([10.0, -10.0, 10.0])) == 0.0


def test_predict_matches_generator():
    res = fit_regression(_points(range(5), lambda x: 2 * x + 1), "linear")
    np.testing.assert_allclose(res.predict(np.array([10.0, -1.0])), [21.0, -1.0])


def test_det3():
    assert det3([[1, 0, 0], [0, 2, 0], [0, 0, 3]]) == 6
    assert det3([[1, 2, 3], [2, 4, 6], [0, 1, 1]]) == 0


def test_quadratic_singular_systems_give_none():
    assert fit_regression([Point(0.0, 1.0), Point(1.0, 2.0)], "quadratic") is None
    same_x = [Point(2.0, 1.0), Point(2.0, 3.0), Point(2.0, 5.0)]
    assert fit_regression(same_x, "quadratic") is None
    # a line through three points is still a valid (flat) quadratic
    res = fit_regression(_points(range(3), lambda x: 2 * x), "quadratic")
    assert res["a"] == pytest.approx(0.0, abs=1e-12)
