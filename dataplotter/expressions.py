"""Arithmetic expressions with SI prefixes, evaluated by a small script engine.

The engine understands the arithmetic subset of the usual scripting syntax:
numbers, ``+ - * / % **``, parentheses, variables, ``Math.<function>`` calls,
``Math.PI`` and friends, ``;`` separated statements and comments.
"""

from __future__ import annotations

import math
import random
import re
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Callable, Mapping, NamedTuple, Sequence

MICRO_SIGN = "\u00b5"

PREFIXES = MappingProxyType(
    {
        "E": "1e18",
        "P": "1e15",
        "T": "1e12",
        "G": "1e9",
        "M": "1e6",
        "k": "1e3",
        "m": "1e-3",
        "u": "1e-6",
        "n": "1e-9",
        "p": "1e-12",
        "f": "1e-15",
        "a": "1e-18",
    }
)

_SI_PREFIX = re.compile(r"(\d+\.?\d*)\s*([TMkmGun]?)", re.ASCII)
_JS_FUNCTIONS = re.compile(
    r"(\b(acos|asin|atan2|atan|cbrt|ceil|cos|cosh|exp|floor|log10|log2|log|max|min|pow"
    r"|random|round|sin|sinh|sqrt|tan|tanh|PI)\b)",
    re.ASCII,
)


class ExpressionError(ValueError):
    """An expression cannot be parsed or does not evaluate to a number."""


def replace_unit_prefixes(expr: str) -> str:
    """Turn numbers with an SI prefix (``5m``, ``2 k``) into products (``5*1e-3``)."""
    expr = expr.replace(MICRO_SIGN, "u")

    def substitute(match: re.Match[str]) -> str:
        number, prefix = match.group(1), match.group(2)
        return number + ("*" + PREFIXES[prefix] if prefix in PREFIXES else "")

    return _SI_PREFIX.sub(substitute, expr)


def replace_function_names(expr: str) -> str:
    """Prefix known math function names (and ``PI``) with ``Math.``."""
    return _JS_FUNCTIONS.sub(lambda match: "Math." + match.group(), expr)


# --- numeric semantics -----------------------------------------------------


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ExpressionError("value is not a number")
    return float(value)


def _add(a: float, b: float) -> float:
    return a + b


def _subtract(a: float, b: float) -> float:
    return a - b


def _multiply(a: float, b: float) -> float:
    return a * b


def _divide(a: float, b: float) -> float:
    if b != 0:
        return a / b
    if a == 0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _modulo(a: float, b: float) -> float:
    if b == 0 or math.isnan(a) or math.isnan(b) or math.isinf(a):
        return math.nan
    if math.isinf(b):
        return a
    return math.fmod(a, b)


def _is_odd_integer(y: float) -> bool:
    return math.isfinite(y) and y.is_integer() and y % 2 == 1


def _power(x: float, y: float) -> float:
    if math.isnan(y):
        return math.nan
    if y == 0:
        return 1.0
    if abs(x) == 1 and math.isinf(y):
        return math.nan
    try:
        return math.pow(x, y)
    except OverflowError:
        return -math.inf if x < 0 and _is_odd_integer(y) else math.inf
    except ValueError:
        if x == 0 and y < 0:
            return -math.inf if math.copysign(1.0, x) < 0 and _is_odd_integer(y) else math.inf
        return math.nan


# --- the Math namespace ----------------------------------------------------


class _Function:
    __slots__ = ("name", "_impl")

    def __init__(self, name: str, impl: Callable[["Engine", Sequence[float]], float]) -> None:
        self.name = name
        self._impl = impl

    def __call__(self, engine: "Engine", args: Sequence[float]) -> float:
        return self._impl(engine, args)


def _arg(args: Sequence[float], index: int) -> float:
    return args[index] if index < len(args) else math.nan


def _unary(f: Callable[[float], float], overflow: Callable[[float], float] = lambda x: math.inf):
    def impl(engine: "Engine", args: Sequence[float]) -> float:
        x = _arg(args, 0)
        try:
            return float(f(x))
        except ValueError:
            return math.nan
        except OverflowError:
            return overflow(x)

    return impl


def _integral(f: Callable[[float], int]) -> Callable[[float], float]:
    return lambda x: x if not math.isfinite(x) else float(f(x))


def _logarithm(f: Callable[[float], float]) -> Callable[[float], float]:
    def log(x: float) -> float:
        if math.isnan(x) or x < 0:
            return math.nan
        if x == 0:
            return -math.inf
        return f(x)

    return log


def _sign(x: float) -> float:
    if math.isnan(x) or x == 0:
        return x
    return 1.0 if x > 0 else -1.0


def _cbrt(x: float) -> float:
    return math.copysign(abs(x) ** (1.0 / 3.0), x)


def _max(engine: "Engine", args: Sequence[float]) -> float:
    if any(math.isnan(a) for a in args):
        return math.nan
    return max(args, default=-math.inf)


def _min(engine: "Engine", args: Sequence[float]) -> float:
    if any(math.isnan(a) for a in args):
        return math.nan
    return min(args, default=math.inf)


def _atan2(engine: "Engine", args: Sequence[float]) -> float:
    return math.atan2(_arg(args, 0), _arg(args, 1))


def _pow(engine: "Engine", args: Sequence[float]) -> float:
    return _power(_arg(args, 0), _arg(args, 1))


def _hypot(engine: "Engine", args: Sequence[float]) -> float:
    return math.hypot(*args)


def _random(engine: "Engine", args: Sequence[float]) -> float:
    return engine.rng.random()


_FUNCTIONS: dict[str, Callable[["Engine", Sequence[float]], float]] = {
    "abs": _unary(abs),
    "acos": _unary(math.acos),
    "asin": _unary(math.asin),
    "atan": _unary(math.atan),
    "atan2": _atan2,
    "cbrt": _unary(_cbrt),
    "ceil": _unary(_integral(math.ceil)),
    "cos": _unary(math.cos),
    "cosh": _unary(math.cosh),
    "exp": _unary(math.exp),
    "floor": _unary(_integral(math.floor)),
    "hypot": _hypot,
    "log": _unary(_logarithm(math.log)),
    "log10": _unary(_logarithm(math.log10)),
    "log2": _unary(_logarithm(math.log2)),
    "max": _max,
    "min": _min,
    "pow": _pow,
    "random": _random,
    "round": _unary(lambda x: x if not math.isfinite(x) else float(math.floor(x + 0.5))),
    "sign": _unary(_sign),
    "sin": _unary(math.sin),
    "sinh": _unary(math.sinh, overflow=lambda x: math.copysign(math.inf, x)),
    "sqrt": _unary(math.sqrt),
    "tan": _unary(math.tan),
    "tanh": _unary(math.tanh),
    "trunc": _unary(_integral(math.trunc)),
}

_MATH: Mapping[str, Any] = MappingProxyType(
    {
        "PI": math.pi,
        "E": math.e,
        "LN2": math.log(2),
        "LN10": math.log(10),
        "LOG2E": math.log2(math.e),
        "LOG10E": math.log10(math.e),
        "SQRT2": math.sqrt(2),
        "SQRT1_2": math.sqrt(0.5),
        **{name: _Function(name, impl) for name, impl in _FUNCTIONS.items()},
    }
)

_GLOBALS: Mapping[str, Any] = MappingProxyType({"Math": _MATH, "Infinity": math.inf, "NaN": math.nan})


# --- lexer and parser --------------------------------------------------------

_LEXEME = re.compile(
    r"""
    (?P<space>\s+)
  | (?P<comment>//[^\n]*|/\*.*?\*/)
  | (?P<number>(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)
  | (?P<name>[A-Za-z_$][A-Za-z0-9_$]*)
  | (?P<op>\*\*|[-+*/%(),.;])
    """,
    re.VERBOSE | re.DOTALL,
)

_SKIPPED = frozenset({"space", "comment"})


class _Lexeme(NamedTuple):
    kind: str
    text: str


_Node = Callable[["Engine"], Any]


def _lex(expr: str) -> list[_Lexeme]:
    lexemes = []
    pos = 0
    while pos < len(expr):
        match = _LEXEME.match(expr, pos)
        if match is None:
            raise ExpressionError(f"unexpected character {expr[pos]!r}")
        pos = match.end()
        kind = match.lastgroup
        if kind in _SKIPPED:
            continue
        lexemes.append(_Lexeme(kind, match.group()))
    return lexemes


def _lookup(engine: "Engine", name: str) -> Any:
    if name in engine.variables:
        return engine.variables[name]
    if name in _GLOBALS:
        return _GLOBALS[name]
    raise ExpressionError(f"{name} is not defined")


def _constant(value: float) -> _Node:
    return lambda engine: value


def _variable(name: str) -> _Node:
    return lambda engine: _lookup(engine, name)


def _binary(op: Callable[[float, float], float], left: _Node, right: _Node) -> _Node:
    return lambda engine: op(_number(left(engine)), _number(right(engine)))


def _negate(operand: _Node) -> _Node:
    return lambda engine: -_number(operand(engine))


def _positive(operand: _Node) -> _Node:
    return lambda engine: _number(operand(engine))


def _member(obj_node: _Node, name: str) -> _Node:
    def get(engine: "Engine") -> Any:
        obj = obj_node(engine)
        if isinstance(obj, Mapping) and name in obj:
            return obj[name]
        raise ExpressionError(f"no property {name!r}")

    return get


def _call(callee: _Node, arguments: list[_Node]) -> _Node:
    def call(engine: "Engine") -> float:
        function = callee(engine)
        if not isinstance(function, _Function):
            raise ExpressionError("value is not a function")
        return function(engine, [_number(arg(engine)) for arg in arguments])

    return call


def _sequence(statements: list[_Node]) -> _Node:
    def run(engine: "Engine") -> Any:
        value = None
        for statement in statements:
            value = statement(engine)
        return value

    return run


class _Parser:
    def __init__(self, lexemes: list[_Lexeme]) -> None:
        self._lexemes = lexemes
        self._pos = 0

    def _peek(self) -> _Lexeme | None:
        return self._lexemes[self._pos] if self._pos < len(self._lexemes) else None

    def _accept(self, op: str) -> bool:
        lexeme = self._peek()
        if lexeme is not None and lexeme.kind == "op" and lexeme.text == op:
            self._pos += 1
            return True
        return False

    def _expect(self, op: str) -> None:
        if not self._accept(op):
            lexeme = self._peek()
            where = "at end of expression" if lexeme is None else f"before {lexeme.text!r}"
            raise ExpressionError(f"expected {op!r} {where}")

    def program(self) -> _Node | None:
        statements = []
        while self._peek() is not None:
            if self._accept(";"):
                continue
            statements.append(self._additive())
            if self._peek() is not None:
                self._expect(";")
        return _sequence(statements) if statements else None

    def _additive(self) -> _Node:
        node = self._multiplicative()
        while True:
            if self._accept("+"):
                node = _binary(_add, node, self._multiplicative())
            elif self._accept("-"):
                node = _binary(_subtract, node, self._multiplicative())
            else:
                return node

    def _multiplicative(self) -> _Node:
        node = self._unary()
        while True:
            if self._accept("*"):
                node = _binary(_multiply, node, self._unary())
            elif self._accept("/"):
                node = _binary(_divide, node, self._unary())
            elif self._accept("%"):
                node = _binary(_modulo, node, self._unary())
            else:
                return node

    def _unary(self) -> _Node:
        if self._accept("-"):
            return _negate(self._unary())
        if self._accept("+"):
            return _positive(self._unary())
        return self._exponent()

    def _exponent(self) -> _Node:
        base = self._postfix()
        if self._accept("**"):
            return _binary(_power, base, self._unary())
        return base

    def _postfix(self) -> _Node:
        node = self._primary()
        while True:
            if self._accept("."):
                lexeme = self._peek()
                if lexeme is None or lexeme.kind != "name":
                    raise ExpressionError("expected a property name after '.'")
                self._pos += 1
                node = _member(node, lexeme.text)
            elif self._accept("("):
                arguments: list[_Node] = []
                if not self._accept(")"):
                    while True:
                        arguments.append(self._additive())
                        if self._accept(")"):
                            break
                        self._expect(",")
                node = _call(node, arguments)
            else:
                return node

    def _primary(self) -> _Node:
        lexeme = self._peek()
        if lexeme is None:
            raise ExpressionError("unexpected end of expression")
        if lexeme.kind == "number":
            self._pos += 1
            return _constant(float(lexeme.text))
        if lexeme.kind == "name":
            self._pos += 1
            return _variable(lexeme.text)
        if self._accept("("):
            node = self._additive()
            self._expect(")")
            return node
        raise ExpressionError(f"unexpected {lexeme.text!r}")


@lru_cache(maxsize=256)
def _compile(expr: str) -> _Node | None:
    return _Parser(_lex(expr)).program()


class Engine:
    """Evaluates expressions against a set of named variables."""

    def __init__(self, variables: Mapping[str, float] | None = None, rng: random.Random | None = None) -> None:
        self.variables: dict[str, float] = dict(variables or {})
        self.rng = rng if rng is not None else random.Random()

    def evaluate(self, expr: str) -> float:
        """Value of ``expr``; raises ExpressionError unless it is a number."""
        program = _compile(expr)
        if program is None:
            raise ExpressionError("expression has no value")
        return _number(program(self))


# --- parsers -----------------------------------------------------------------

VALID_CHARS = frozenset("0123456789+-*/ekMGTPEmunpfa., " + MICRO_SIGN)


class SimpleExpressionParser:
    """Evaluates short numeric inputs such as ``1,5k`` or ``/2``."""

    def __init__(self) -> None:
        self.engine = Engine()

    def validate(self, expression: str) -> bool:
        """Whether ``expression`` holds only characters this parser accepts."""
        return all(c in VALID_CHARS for c in expression)

    def evaluate(self, expression: str) -> float:
        """Numeric value of ``expression``; raises ExpressionError if it has none."""
        expr = expression.strip().replace(",", ".").replace(MICRO_SIGN, "u")
        if not expr:
            raise ExpressionError("expression is empty")
        if expr[0] == "/":
            expr = "1" + expr
        for prefix in sorted(PREFIXES):
            expr = expr.replace(prefix, "*" + PREFIXES[prefix])
        return self.engine.evaluate(expr)


class VariableExpression:
    """An expression of engine variables, checked once and evaluated repeatedly."""

    def __init__(self) -> None:
        self.expression = ""

    def set_expression(self, engine: Engine, expr: str) -> bool:
        """Normalise and store ``expr`` if it evaluates to a number; otherwise clear it."""
        expr = expr.replace("pi", "PI").replace("Pi", "PI")
        expr = replace_function_names(replace_unit_prefixes(expr))
        try:
            engine.evaluate(expr)
        except ExpressionError:
            self.expression = ""
            return False
        self.expression = expr
        return True

    def evaluate(self, engine: Engine) -> float:
        """Value of the stored expression with the engine's current variables."""
        return engine.evaluate(self.expression)