"""
Expression evaluator for user-typed functions of x.

Pipeline: normalise -> tokenize -> recursive-descent parse -> tree of nodes
evaluated with numpy ufuncs.  Nothing is ever handed to ``eval``.

Grammar
-------
    expr    := term (('+' | '-') term)*
    term    := unary (('*' | '/') unary)*
    unary   := ('+' | '-') unary | power
    power   := primary ('^' unary)?
    primary := NUMBER | 'x' | CONSTANT | FUNCTION '(' expr ')' | '(' expr ')'

Implicit multiplication is inserted between a numeral and a following letter
or '(' (``2x``, ``3(x+1)``, ``2sin(x)``) and between ')' and a following
letter or numeral (``(x+1)x``, ``(x+1)2``).  No other adjacency multiplies.
"""

from __future__ import annotations

import logging
import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional, Union

import numpy as np

from graphly.points import FloatArray, Point, points_from_arrays

logger = logging.getLogger(__name__)

Scalar = Union[float, FloatArray]
UFunc = Callable[[FloatArray], FloatArray]

VARIABLE: str = "x"

FUNCTIONS: dict[str, UFunc] = {
    "sin": np.sin,
    "cos": np.cos,
    "tan": np.tan,
    "log": np.log10,
    "ln": np.log,
    "sqrt": np.sqrt,
    "abs": np.abs,
}

CONSTANTS: dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
}

DEFAULT_X_MIN: float = -10.0
DEFAULT_X_MAX: float = 10.0
DEFAULT_RESOLUTION: int = 200

_TOKEN_RE = re.compile(
    r"(?P<number>\d+\.?\d*|\.\d+)"
    r"|(?P<name>[a-z]+)"
    r"|(?P<op>[-+*/^])"
    r"|(?P<lparen>\()"
    r"|(?P<rparen>\))"
)


class ExpressionError(ValueError):
    """Raised when an expression cannot be tokenized or parsed."""

    def __init__(self, message: str, position: Optional[int] = None) -> None:
        if position is not None:
            message = f"{message} (at position {position})"
        super().__init__(message)
        self.position = position


# ===========================================================================
# Tokens
# ===========================================================================

@dataclass(frozen=True, slots=True)
class Token:
    kind: str
    text: str
    position: int


def normalize(text: str) -> str:
    return re.sub(r"\s+", "", text).lower()


def tokenize(text: str) -> list[Token]:
    """Split normalised text into tokens, inserting implicit '*' tokens."""
    source = normalize(text)
    tokens: list[Token] = []
    pos = 0
    while pos < len(source):
        match = _TOKEN_RE.match(source, pos)
        if match is None:
            raise ExpressionError(f"unexpected character {source[pos]!r}", pos)
        kind = match.lastgroup or ""
        tok = Token(kind, match.group(), pos)
        if tokens and _implies_multiplication(tokens[-1], tok):
            tokens.append(Token("op", "*", pos))
        tokens.append(tok)
        pos = match.end()
    return tokens


def _implies_multiplication(prev: Token, nxt: Token) -> bool:
    if prev.kind == "number" and prev.text[-1].isdigit():
        return nxt.kind in ("name", "lparen")
    if prev.kind == "rparen":
        return nxt.kind == "name" or (nxt.kind == "number" and nxt.text[0].isdigit())
    return False


# ===========================================================================
# Expression tree
# ===========================================================================

class Node(ABC):

    @abstractmethod
    def evaluate(self, x: FloatArray) -> FloatArray:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class Number(Node):
    value: float

    def evaluate(self, x: FloatArray) -> FloatArray:
        return np.full(np.shape(x), self.value, dtype=np.float64)


@dataclass(frozen=True, slots=True)
class Constant(Node):
    name: str

    def evaluate(self, x: FloatArray) -> FloatArray:
        return np.full(np.shape(x), CONSTANTS[self.name], dtype=np.float64)


@dataclass(frozen=True, slots=True)
class Variable(Node):

    def evaluate(self, x: FloatArray) -> FloatArray:
        return np.asarray(x, dtype=np.float64)


@dataclass(frozen=True, slots=True)
class Negate(Node):
    operand: Node

    def evaluate(self, x: FloatArray) -> FloatArray:
        return np.negative(self.operand.evaluate(x))


_BINARY_UFUNCS: dict[str, Callable[[FloatArray, FloatArray], FloatArray]] = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "/": np.divide,
    "^": np.power,
}


@dataclass(frozen=True, slots=True)
class BinaryOp(Node):
    op: str
    left: Node
    right: Node

    def evaluate(self, x: FloatArray) -> FloatArray:
        return _BINARY_UFUNCS[self.op](self.left.evaluate(x), self.right.evaluate(x))


@dataclass(frozen=True, slots=True)
class Call(Node):
    function: str
    argument: Node

    def evaluate(self, x: FloatArray) -> FloatArray:
        return FUNCTIONS[self.function](self.argument.evaluate(x))


# ===========================================================================
# Parser
# ===========================================================================

class _Parser:

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._index = 0

    def parse(self) -> Node:
        if not self._tokens:
            raise ExpressionError("empty expression")
        node = self._expr()
        tok = self._peek()
        if tok is not None:
            raise ExpressionError(f"unexpected {tok.text!r}", tok.position)
        return node

    def _peek(self) -> Optional[Token]:
        return self._tokens[self._index] if self._index < len(self._tokens) else None

    def _advance(self) -> Token:
        tok = self._peek()
        if tok is None:
            raise ExpressionError("unexpected end of expression")
        self._index += 1
        return tok

    def _accept_op(self, *ops: str) -> Optional[str]:
        tok = self._peek()
        if tok is not None and tok.kind == "op" and tok.text in ops:
            self._index += 1
            return tok.text
        return None

    def _expect(self, kind: str) -> Token:
        tok = self._advance()
        if tok.kind != kind:
            raise ExpressionError(f"expected {kind}, got {tok.text!r}", tok.position)
        return tok

    def _expr(self) -> Node:
        node = self._term()
        while (op := self._accept_op("+", "-")) is not None:
            node = BinaryOp(op, node, self._term())
        return node

    def _term(self) -> Node:
        node = self._unary()
        while (op := self._accept_op("*", "/")) is not None:
            node = BinaryOp(op, node, self._unary())
        return node

    def _unary(self) -> Node:
        op = self._accept_op("+", "-")
        if op == "-":
            return Negate(self._unary())
        if op == "+":
            return self._unary()
        return self._power()

    def _power(self) -> Node:
        base = self._primary()
        if self._accept_op("^") is not None:
            # right-associative: 2^3^2 == 2^(3^2)
            return BinaryOp("^", base, self._unary())
        return base

    def _primary(self) -> Node:
        tok = self._advance()
        if tok.kind == "number":
            return Number(float(tok.text))
        if tok.kind == "lparen":
            node = self._expr()
            self._expect("rparen")
            return node
        if tok.kind == "name":
            if tok.text == VARIABLE:
                return Variable()
            if tok.text in CONSTANTS:
                return Constant(tok.text)
            if tok.text in FUNCTIONS:
                self._expect("lparen")
                arg = self._expr()
                self._expect("rparen")
                return Call(tok.text, arg)
            raise ExpressionError(f"unknown name {tok.text!r}", tok.position)
        raise ExpressionError(f"unexpected {tok.text!r}", tok.position)


def parse_expression(text: str) -> Node:
    """Parse *text* into an expression tree.  Raises ExpressionError."""
    try:
        return _Parser(tokenize(text)).parse()
    except RecursionError as exc:
        raise ExpressionError("expression is nested too deeply") from exc


# ===========================================================================
# Evaluation
# ===========================================================================

def evaluate_tree(tree: Node, x: FloatArray) -> FloatArray:
    """Evaluate elementwise; any non-finite result becomes NaN.

    A tree nested too deeply to walk evaluates to NaN everywhere.
    """
    xs = np.asarray(x, dtype=np.float64)
    try:
        with np.errstate(all="ignore"):
            y = np.asarray(tree.evaluate(xs), dtype=np.float64)
    except RecursionError:
        logger.debug("Expression tree too deep to evaluate")
        return np.full(xs.shape, np.nan)
    return np.where(np.isfinite(y), y, np.nan)


def compile_expression(text: str) -> Callable[[Scalar], Scalar]:
    """Build ``f(x)`` for *text*.

    Scalars map to a float, arrays map elementwise.  Failed or non-finite
    evaluations give NaN; an unparsable expression gives a function that is
    NaN everywhere.
    """
    try:
        tree: Optional[Node] = parse_expression(text)
    except ExpressionError as exc:
        logger.debug("Cannot compile %r: %s", text, exc)
        tree = None

    def evaluate(x: Scalar) -> Scalar:
        xs = np.asarray(x, dtype=np.float64)
        ys = evaluate_tree(tree, xs) if tree is not None else np.full(xs.shape, np.nan)
        if ys.ndim == 0:
            return float(ys)
        return ys

    return evaluate


def sample_function(
    text: str,
    x_min: float = DEFAULT_X_MIN,
    x_max: float = DEFAULT_X_MAX,
    resolution: int = DEFAULT_RESOLUTION,
) -> list[Point]:
    """Sample *text* on ``resolution`` equal steps over ``[x_min, x_max]``.

    Only finite samples are returned.  A malformed expression or an unusable
    range gives an empty list.
    """
    if resolution < 1 or not (math.isfinite(x_min) and math.isfinite(x_max)):
        return []
    if x_max < x_min:
        return []
    try:
        tree = parse_expression(text)
    except ExpressionError as exc:
        logger.debug("No samples for %r: %s", text, exc)
        return []
    xs = np.linspace(x_min, x_max, resolution + 1, dtype=np.float64)
    return points_from_arrays(xs, evaluate_tree(tree, xs))
