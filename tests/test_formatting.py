import math

from graphly.formatting import format_equation_number, format_number, to_exponential


def test_large_values_use_exponent_notation():
    assert format_number(12345) == "1.23e+4"
    assert format_number(-20000) == "-2.00e+4"


def test_small_values_use_exponent_notation():
    assert format_number(0.0005) == "5.00e-4"


def test_mid_range_rounds_to_three_decimals():
    assert format_number(3.14159) == 3.142
    assert format_number(9999.5) == 9999.5


def test_zero_and_non_numbers_pass_through():
    assert format_number(0) == 0
    assert format_number("abc") == "abc"
    assert format_number(None) is None
    assert format_number(True) is True


def test_non_finite_is_returned_as_float():
    assert math.isinf(format_number(float("inf")))


def test_to_exponential_drops_exponent_padding():
    assert to_exponential(1.0e-12) == "1.00e-12"
    assert to_exponential(1.0) == "1.00e+0"


def test_equation_number_only_switches_for_tiny_values():
    assert format_equation_number(2.0) == "2.000"
    assert format_equation_number(123456.0) == "123456.000"
    assert format_equation_number(0.0001) == "1.00e-4"
    assert format_equation_number(0.0) == "0.000"
    assert format_equation_number(-0.0) == "0.000"
