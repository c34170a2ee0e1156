"""
Constant-expression compiler built on pyparsing.

One grammar serves two callers:

- the Verilog extractor, which resolves range bounds and parameter values
  such as ``WIDTH-1``, ``$clog2(DEPTH)`` or ``8'hFF`` (integer semantics,
  ``/`` truncates);
- the architecture catalog, whose closed-form delay and area formulas
  (``log2(width) * 0.3 + 0.5``) are compiled once at load time and evaluated
  with real-number semantics.

Expressions are parsed into a tree of small closures so repeated evaluation
does not re-parse the text.
"""

import logging
import math
from functools import lru_cache
from typing import Callable, Dict, Mapping, Optional, Union

from pyparsing import (
    DelimitedList,
    Forward,
    Group,
    OpAssoc,
    Opt,
    ParseBaseException,
    ParserElement,
    Regex,
    Suppress,
    infix_notation,
    one_of,
)

from rtlcraft.errors import ExpressionError

logger = logging.getLogger(__name__)

# infix_notation is exponential without memoization
ParserElement.enable_packrat()

Number = Union[int, float]


def _clog2(value: Number) -> int:
    """Verilog ``$clog2``: ceiling of log2, with ``$clog2(0) == $clog2(1) == 0``."""
    value = math.ceil(value)
    if value <= 1:
        return 0
    return (int(value) - 1).bit_length()


FUNCTIONS: Dict[str, Callable[..., Number]] = {
    "$clog2": _clog2,
    "log2": math.log2,
    "sqrt": math.sqrt,
    "ceil": math.ceil,
    "floor": math.floor,
    "min": min,
    "max": max,
    "abs": abs,
}


class _Scope:
    __slots__ = ("variables", "integer")

    def __init__(self, variables: Mapping[str, Number], integer: bool):
        self.variables = variables
        self.integer = integer


Node = Callable[[_Scope], Number]


def _constant(value: Number) -> Node:
    return lambda scope: value


def _sized_literal_action(tokens):
    # 8'hFF, 'd10, 4'sb1010
    text = tokens[0].replace("_", "").replace(" ", "")
    _, _, rest = text.partition("'")
    rest = rest.lstrip("sS")
    base = {"b": 2, "o": 8, "d": 10, "h": 16}[rest[0].lower()]
    try:
        return _constant(int(rest[1:], base))
    except ValueError as e:
        raise ExpressionError(f"Invalid sized literal '{tokens[0]}'") from e


def _real_action(tokens):
    return _constant(float(tokens[0]))


def _integer_action(tokens):
    return _constant(int(tokens[0].replace("_", "")))


def _variable_action(tokens):
    name = tokens[0]

    def lookup(scope: _Scope) -> Number:
        try:
            return scope.variables[name]
        except KeyError:
            raise ExpressionError(f"Unknown identifier '{name}'") from None

    return lookup


def _call_action(tokens):
    name = tokens[0]
    arguments = list(tokens[1])
    function = FUNCTIONS.get(name)
    if function is None:
        raise ExpressionError(f"Unknown function '{name}'")

    def call(scope: _Scope) -> Number:
        return function(*(argument(scope) for argument in arguments))

    return call


def _apply(op: str, left: Number, right: Number, integer: bool) -> Number:
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if op == "/":
        if integer and isinstance(left, int) and isinstance(right, int):
            # Verilog integer division truncates toward zero
            return int(left / right)
        return left / right
    if op == "%":
        return math.fmod(left, right) if not integer else int(math.fmod(left, right))
    if op == "**":
        return left**right
    if op == "<<":
        return int(left) << int(right)
    if op == ">>":
        return int(left) >> int(right)
    raise ExpressionError(f"Unsupported operator '{op}'")


def _left_binary_action(tokens):
    items = list(tokens[0])

    def fold(scope: _Scope) -> Number:
        value = items[0](scope)
        for index in range(1, len(items), 2):
            value = _apply(items[index], value, items[index + 1](scope), scope.integer)
        return value

    return fold


def _right_binary_action(tokens):
    items = list(tokens[0])

    def fold(scope: _Scope) -> Number:
        value = items[-1](scope)
        for index in range(len(items) - 2, 0, -2):
            value = _apply(items[index], items[index - 1](scope), value, scope.integer)
        return value

    return fold


def _unary_action(tokens):
    op, operand = tokens[0][0], tokens[0][1]
    if op == "-":
        return lambda scope: -operand(scope)
    return operand


def _build_grammar() -> ParserElement:
    expression = Forward()

    sized_literal = Regex(r"(?:\d[\d_]*)?\s*'[sS]?[bBoOdDhH]\s*[0-9a-fA-F_]+")
    sized_literal.set_parse_action(_sized_literal_action)
    real = Regex(r"\d+\.\d*(?:[eE][-+]?\d+)?|\d+[eE][-+]?\d+")
    real.set_parse_action(_real_action)
    integer = Regex(r"\d[\d_]*")
    integer.set_parse_action(_integer_action)

    identifier = Regex(r"[A-Za-z_$][A-Za-z0-9_$]*")
    call = identifier + Suppress("(") + Group(Opt(DelimitedList(expression))) + Suppress(")")
    call.set_parse_action(_call_action)
    variable = identifier.copy().set_parse_action(_variable_action)

    operand = sized_literal | real | integer | call | variable

    expression <<= infix_notation(
        operand,
        [
            ("**", 2, OpAssoc.RIGHT, _right_binary_action),
            (one_of("+ -"), 1, OpAssoc.RIGHT, _unary_action),
            (one_of("* / %"), 2, OpAssoc.LEFT, _left_binary_action),
            (one_of("+ -"), 2, OpAssoc.LEFT, _left_binary_action),
            (one_of("<< >>"), 2, OpAssoc.LEFT, _left_binary_action),
        ],
    )
    return expression


_GRAMMAR = _build_grammar()


class Expression:
    """A compiled constant expression.

    Args:
        text: Source text of the expression
        root: Compiled evaluation tree
    """

    def __init__(self, text: str, root: Node):
        self.text = text
        self._root = root

    def evaluate(
        self, variables: Optional[Mapping[str, Number]] = None, integer: bool = False
    ) -> Number:
        """
        Evaluate the expression.

        Args:
            variables: Values for identifiers referenced by the expression
            integer: Use Verilog integer semantics (``/`` and ``%`` truncate)

        Returns:
            The numeric value

        Raises:
            ExpressionError: On unknown identifiers or arithmetic errors
        """
        scope = _Scope(variables or {}, integer)
        try:
            return self._root(scope)
        except ExpressionError:
            raise
        except (ZeroDivisionError, ValueError, OverflowError, TypeError) as e:
            raise ExpressionError(f"Cannot evaluate '{self.text}': {e}") from e

    def __call__(self, **variables: Number) -> float:
        return float(self.evaluate(variables))

    def __repr__(self) -> str:
        return f"Expression({self.text!r})"


@lru_cache(maxsize=512)
def compile_expression(text: str) -> Expression:
    """
    Parse ``text`` into an :class:`Expression`.

    Raises:
        ExpressionError: If the text is not a valid constant expression
    """
    try:
        root = _GRAMMAR.parse_string(text, parse_all=True)[0]
    except ParseBaseException as e:
        raise ExpressionError(f"Invalid expression '{text}': {e}") from e
    return Expression(text, root)


def evaluate_constant(text: str, variables: Optional[Mapping[str, Number]] = None) -> Optional[int]:
    """
    Evaluate a Verilog constant expression to an integer.

    Returns ``None`` instead of raising when the text cannot be resolved,
    e.g. because it references an unknown parameter.
    """
    try:
        value = compile_expression(text.strip()).evaluate(variables, integer=True)
    except ExpressionError as e:
        logger.debug("Unresolved constant expression %r: %s", text, e)
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    return value
