"""
LaTeX rendering for fitted trendlines and user-typed functions.

Regression results are rebuilt as sympy expressions from their parameters;
expression trees from ``graphly.expression`` are translated node by node.
"""

from __future__ import annotations

import logging
from typing import Callable, Union

import sympy as sp

from graphly.expression import (
    BinaryOp,
    Call,
    Constant,
    ExpressionError,
    Negate,
    Node,
    Number,
    Variable,
    parse_expression,
)
from graphly.regression import RegressionKind, RegressionResult

logger = logging.getLogger(__name__)

_SYMPY_FUNCTIONS: dict[str, Callable[[sp.Expr], sp.Expr]] = {
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "log": lambda a: sp.log(a, 10),
    "ln": sp.log,
    "sqrt": sp.sqrt,
    "abs": sp.Abs,
}

_SYMPY_CONSTANTS: dict[str, sp.Expr] = {
    "pi": sp.pi,
    "e": sp.E,
}


class LaTeXGenerator:
    """Converts a RegressionResult or an equation string to display-math LaTeX.

    Parameters
    ----------
    approx : bool
        When True (default) numeric coefficients are rendered as rounded
        decimals with *decimals* digits after the point.  When False, exact
        rational fractions are used.
    decimals : int
        Number of digits after the decimal point in approximate mode.
    """

    def __init__(self, approx: bool = True, decimals: int = 3) -> None:
        self.approx = approx
        self.decimals = max(0, min(10, int(decimals)))
        self._x = sp.Symbol("x")
        self._dispatch: dict[RegressionKind, Callable[[RegressionResult], sp.Expr]] = {
            RegressionKind.LINEAR: self._linear,
            RegressionKind.QUADRATIC: self._quadratic,
            RegressionKind.EXPONENTIAL: self._exponential,
            RegressionKind.POWER: self._power,
            RegressionKind.LOGARITHMIC: self._logarithmic,
        }

    def reconfigure(self, approx: bool, decimals: int) -> None:
        self.approx = approx
        self.decimals = max(0, min(10, int(decimals)))

    def generate(self, result: RegressionResult) -> str:
        try:
            return self._wrap(self._dispatch[result.kind](result))
        except (KeyError, TypeError, ValueError, ArithmeticError):
            return self._fallback(result.equation)

    def generate_expression(self, text: str) -> str:
        """LaTeX for a user-typed f(x); the raw text when it does not parse."""
        try:
            tree = parse_expression(text)
        except ExpressionError as exc:
            logger.debug("No LaTeX for %r: %s", text, exc)
            return self._fallback(text)
        try:
            return f"$$f(x) = {sp.latex(self.to_sympy(tree))}$$"
        except RecursionError:
            logger.debug("No LaTeX for %r: nested too deeply", text)
            return self._fallback(text)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _n(self, v: float) -> sp.Expr:
        """Approx mode gives a rounded sp.Float, exact mode a bounded Rational."""
        if self.approx:
            return sp.Float(f"{v:.{self.decimals}f}")
        return sp.Rational(v).limit_denominator(1000)

    def _round_floats(self, expr: sp.Basic) -> sp.Basic:
        if isinstance(expr, sp.Float):
            return sp.Float(f"{float(expr):.{self.decimals}f}")
        if expr.args:
            return expr.func(*[self._round_floats(a) for a in expr.args])
        return expr

    def _wrap(self, expr: sp.Basic) -> str:
        if self.approx:
            return f"$$f(x) = {sp.latex(self._round_floats(expr))}$$"
        return f"$$f(x) = {sp.latex(expr)}$$"

    def to_sympy(self, node: Node) -> sp.Expr:
        """Translate an expression tree without simplifying it."""
        if isinstance(node, Number):
            return sp.Float(node.value) if not node.value.is_integer() else sp.Integer(int(node.value))
        if isinstance(node, Variable):
            return self._x
        if isinstance(node, Constant):
            return _SYMPY_CONSTANTS[node.name]
        if isinstance(node, Negate):
            return -self.to_sympy(node.operand)
        if isinstance(node, Call):
            return _SYMPY_FUNCTIONS[node.function](self.to_sympy(node.argument))
        if isinstance(node, BinaryOp):
            left = self.to_sympy(node.left)
            right = self.to_sympy(node.right)
            if node.op == "+":
                return sp.Add(left, right, evaluate=False)
            if node.op == "-":
                return sp.Add(left, sp.Mul(-1, right, evaluate=False), evaluate=False)
            if node.op == "*":
                return sp.Mul(left, right, evaluate=False)
            if node.op == "/":
                return sp.Mul(left, sp.Pow(right, -1, evaluate=False), evaluate=False)
            return sp.Pow(left, right, evaluate=False)
        raise TypeError(f"unknown expression node {type(node).__name__}")

    # ------------------------------------------------------------------
    # Per-kind builders
    # ------------------------------------------------------------------

    def _linear(self, r: RegressionResult) -> sp.Expr:
        return self._n(r["slope"]) * self._x + self._n(r["intercept"])

    def _quadratic(self, r: RegressionResult) -> sp.Expr:
        x = self._x
        return self._n(r["a"]) * x ** 2 + self._n(r["b"]) * x + self._n(r["c"])

    def _exponential(self, r: RegressionResult) -> sp.Expr:
        return self._n(r["a"]) * sp.exp(self._n(r["b"]) * self._x)

    def _power(self, r: RegressionResult) -> sp.Expr:
        return self._n(r["a"]) * self._x ** self._n(r["b"])

    def _logarithmic(self, r: RegressionResult) -> sp.Expr:
        return self._n(r["a"]) + self._n(r["b"]) * sp.ln(self._x)

    @staticmethod
    def _fallback(text: Union[str, None]) -> str:
        return rf"$$\text{{{text or '?'}}}$$"
