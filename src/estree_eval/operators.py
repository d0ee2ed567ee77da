"""
Binary, unary and compound assignment operator semantics.

Each table maps an operator token to a function over already-evaluated
operands. Short-circuiting operators (`&&`, `||`) and `delete`/`typeof`,
which need the unevaluated operand, are handled by the evaluator itself.
"""

import math
from typing import Any, Callable, Dict, Optional

from .errors import TypeError as ExprTypeError
from .members import has_property
from .prototypes import NativeFunction
from .values import (
    INFINITY,
    MAX_SAFE_INTEGER,
    NAN,
    JSFunction,
    is_callable,
    is_object,
    loose_equals,
    strict_equals,
    to_int32,
    to_number,
    to_primitive,
    to_string,
    to_uint32,
)

# ============================================================
# Arithmetic
# ============================================================


def _normalize(number: Any) -> Any:
    """Keeps ints exact while they are safe integers, then falls back to float."""
    if isinstance(number, int) and abs(number) > MAX_SAFE_INTEGER:
        try:
            return float(number)
        except OverflowError:
            return INFINITY if number > 0 else -INFINITY
    return number


def add(left: Any, right: Any) -> Any:
    left = to_primitive(left)
    right = to_primitive(right)
    if isinstance(left, str) or isinstance(right, str):
        return to_string(left) + to_string(right)
    return _normalize(to_number(left) + to_number(right))


def subtract(left: Any, right: Any) -> Any:
    return _normalize(to_number(left) - to_number(right))


def multiply(left: Any, right: Any) -> Any:
    a = to_number(left)
    b = to_number(right)
    if isinstance(a, int) and isinstance(b, int):
        if (a == 0 and b < 0) or (b == 0 and a < 0):
            return -0.0
        return _normalize(a * b)
    return float(a) * float(b)


def divide(left: Any, right: Any) -> Any:
    a = float(to_number(left))
    b = float(to_number(right))
    if b == 0:
        if a == 0 or math.isnan(a):
            return NAN
        negative = (a < 0) != (math.copysign(1.0, b) < 0)
        return -INFINITY if negative else INFINITY
    result = a / b
    if result == 0:
        return result if math.copysign(1.0, result) < 0 else 0
    if result.is_integer() and abs(result) <= MAX_SAFE_INTEGER:
        return int(result)
    return result


def remainder(left: Any, right: Any) -> Any:
    a = to_number(left)
    b = to_number(right)
    if isinstance(a, int) and isinstance(b, int):
        if b == 0:
            return NAN
        result = abs(a) % abs(b)
        if a < 0:
            return -result if result else -0.0
        return result
    a = float(a)
    b = float(b)
    if math.isnan(a) or math.isnan(b) or math.isinf(a) or b == 0:
        return NAN
    if math.isinf(b):
        return a
    return math.fmod(a, b)


def exponentiate(left: Any, right: Any) -> Any:
    base = to_number(left)
    exponent = to_number(right)
    if isinstance(exponent, float) and math.isnan(exponent):
        return NAN
    if exponent == 0:
        return 1
    if isinstance(base, float) and math.isnan(base):
        return NAN
    if abs(base) == 1 and isinstance(exponent, float) and math.isinf(exponent):
        return NAN
    if isinstance(base, int) and isinstance(exponent, int) and 0 <= exponent <= 1024:
        return _normalize(base**exponent)
    try:
        result = math.pow(base, exponent)
    except OverflowError:
        negative = base < 0 and float(exponent).is_integer() and int(exponent) % 2 == 1
        return -INFINITY if negative else INFINITY
    except ValueError:
        # Negative zero raised to a negative power, or a negative base with
        # a fractional exponent.
        if base == 0:
            odd = float(exponent).is_integer() and int(exponent) % 2 == 1
            return -INFINITY if odd and math.copysign(1.0, base) < 0 else INFINITY
        return NAN
    return result


# ============================================================
# Bitwise
# ============================================================


def left_shift(left: Any, right: Any) -> int:
    return to_int32(to_int32(left) << (to_uint32(right) & 31))


def signed_right_shift(left: Any, right: Any) -> int:
    return to_int32(left) >> (to_uint32(right) & 31)


def unsigned_right_shift(left: Any, right: Any) -> int:
    return to_uint32(left) >> (to_uint32(right) & 31)


def bitwise_and(left: Any, right: Any) -> int:
    return to_int32(left) & to_int32(right)


def bitwise_or(left: Any, right: Any) -> int:
    return to_int32(left) | to_int32(right)


def bitwise_xor(left: Any, right: Any) -> int:
    return to_int32(left) ^ to_int32(right)


# ============================================================
# Relational
# ============================================================


def _less_than(left: Any, right: Any) -> Optional[bool]:
    """Abstract relational comparison. None means the comparison is undefined."""
    left = to_primitive(left, "number")
    right = to_primitive(right, "number")
    if isinstance(left, str) and isinstance(right, str):
        return left < right
    a = to_number(left)
    b = to_number(right)
    if (isinstance(a, float) and math.isnan(a)) or (isinstance(b, float) and math.isnan(b)):
        return None
    return a < b


def less_than(left: Any, right: Any) -> bool:
    return _less_than(left, right) is True


def greater_than(left: Any, right: Any) -> bool:
    return _less_than(right, left) is True


def less_than_or_equal(left: Any, right: Any) -> bool:
    result = _less_than(right, left)
    return result is False


def greater_than_or_equal(left: Any, right: Any) -> bool:
    result = _less_than(left, right)
    return result is False


def instance_of(left: Any, right: Any) -> bool:
    if not is_callable(right):
        raise ExprTypeError("Right-hand side of 'instanceof' is not callable")
    if isinstance(right, NativeFunction):
        return right.has_instance(left)
    if isinstance(right, JSFunction):
        raise ExprTypeError(
            "Function has non-object prototype 'undefined' in instanceof check"
        )
    if not is_object(left):
        return False
    if isinstance(right, type):
        return isinstance(left, right)
    return False


def in_operator(left: Any, right: Any) -> bool:
    return has_property(right, left)


BINARY_OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "==": loose_equals,
    "!=": lambda left, right: not loose_equals(left, right),
    "===": strict_equals,
    "!==": lambda left, right: not strict_equals(left, right),
    "<": less_than,
    "<=": less_than_or_equal,
    ">": greater_than,
    ">=": greater_than_or_equal,
    "<<": left_shift,
    ">>": signed_right_shift,
    ">>>": unsigned_right_shift,
    "+": add,
    "-": subtract,
    "*": multiply,
    "/": divide,
    "%": remainder,
    "**": exponentiate,
    "|": bitwise_or,
    "^": bitwise_xor,
    "&": bitwise_and,
    "in": in_operator,
    "instanceof": instance_of,
}


# ============================================================
# Unary
# ============================================================


def negate(value: Any) -> Any:
    number = to_number(value)
    if number == 0 and isinstance(number, int):
        return -0.0
    return -number


def plus(value: Any) -> Any:
    return to_number(value)


def bitwise_not(value: Any) -> int:
    return ~to_int32(value)


# `typeof`, `!`, `void` and `delete` are evaluated by the dispatcher.
UNARY_OPERATORS: Dict[str, Callable[[Any], Any]] = {
    "-": negate,
    "+": plus,
    "~": bitwise_not,
}


# Compound assignment operator to the binary operator it applies.
COMPOUND_ASSIGNMENT: Dict[str, str] = {
    "+=": "+",
    "-=": "-",
    "*=": "*",
    "/=": "/",
    "%=": "%",
    "**=": "**",
    "<<=": "<<",
    ">>=": ">>",
    ">>>=": ">>>",
    "|=": "|",
    "^=": "^",
    "&=": "&",
}


def apply_binary(operator: str, left: Any, right: Any) -> Any:
    """Applies a binary operator token to evaluated operands."""
    return BINARY_OPERATORS[operator](left, right)
