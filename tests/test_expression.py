import math

import numpy as np
import pytest

from graphly.expression import (
    ExpressionError,
    compile_expression,
    parse_expression,
    sample_function,
    tokenize,
)


def test_sample_quadratic_on_small_grid():
    pts = sample_function("2x^2+3", -2, 2, 4)
    assert [p.x for p in pts] == [-2.0, -1.0, 0.0, 1.0, 2.0]
    assert [p.y for p in pts] == pytest.approx([11, 5, 3, 5, 11])


def test_malformed_expression_gives_no_samples():
    assert sample_function("2x+*3", -1, 1, 10) == []
    assert sample_function("sin(x", -1, 1, 10) == []
    assert sample_function("", -1, 1, 10) == []


def test_non_finite_samples_are_dropped():
    pts = sample_function("sqrt(x)", -1, 1, 2)
    assert [(p.x, p.y) for p in pts] == [(0.0, 0.0), (1.0, 1.0)]
    pts = sample_function("1/x", -1, 1, 2)
    assert all(math.isfinite(p.y) for p in pts)
    assert len(pts) == 2


def test_unusable_range_gives_no_samples():
    assert sample_function("x", 1, -1) == []
    assert sample_function("x", float("nan"), 1) == []


@pytest.mark.parametrize(
    "text, x, expected",
    [
        ("2x", 3, 6.0),
        ("3(x+1)", 1, 6.0),
        ("(x+1)2", 1, 4.0),
        ("(x+1)x", 2, 6.0),
        ("2sin(x)", 0, 0.0),
        ("2^3^2", 0, 512.0),
        ("2^-1", 0, 0.5),
        ("-x^2", 3, -9.0),
        ("log(100)", 0, 2.0),
        ("ln(e)", 0, 1.0),
        ("abs(-4)/2", 0, 2.0),
        ("SIN( PI / 2 )", 0, 1.0),
        ("2pi", 0, 2 * math.pi),
    ],
)
def test_compiled_values(text, x, expected):
    f = compile_expression(text)
    assert f(x) == pytest.approx(expected), f"{text} at x={x}"


def test_failures_evaluate_to_nan():
    assert math.isnan(compile_expression("1/0")(0))
    assert math.isnan(compile_expression("foo(x)")(1))
    assert math.isnan(compile_expression("ln(x)")(-1))


def test_compiled_function_is_vectorised():
    f = compile_expression("x^2")
    ys = f(np.array([1.0, 2.0, 3.0]))
    assert isinstance(ys, np.ndarray)
    np.testing.assert_allclose(ys, [1.0, 4.0, 9.0])


def test_implicit_multiplication_tokens():
    texts = [t.text for t in tokenize("2x(x+1)")]
    assert texts == ["2", "*", "x", "(", "x", "+", "1", ")"]


def test_adjacent_parentheses_do_not_multiply():
    with pytest.raises(ExpressionError):
        parse_expression("(x+1)(x-1)")
    with pytest.raises(ExpressionError):
        parse_expression("x(2)")


def test_unknown_character_reports_position():
    with pytest.raises(ExpressionError) as info:
        parse_expression("x + $")
    assert info.value.position == 2


def test_very_long_sums_do_not_raise():
    long_sum = "+".join(["x"] * 5000)
    assert sample_function(long_sum, -1, 1, 4) == []
    assert math.isnan(compile_expression(long_sum)(1.0))
    assert sample_function("+".join(["x"] * 300), -1, 1, 4)[-1].y == pytest.approx(300.0)
