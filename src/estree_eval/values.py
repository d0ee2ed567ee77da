"""
Runtime value model and coercion rules.

Values map onto Python as follows:
- number -> int or float (never bool)
- string -> str
- boolean -> bool
- null -> None
- undefined -> the UNDEFINED singleton
- array -> list (tuples are read as arrays too)
- object -> dict / Mapping, or an arbitrary host object
- function -> JSFunction subclasses or any Python callable
- regular expression -> RegExp

The conversion functions (to_primitive, to_number, to_string, to_int32,
to_uint32, to_boolean) and the equality algorithms are the only place
coercion happens; operators and built-ins call them instead of converting
ad hoc.
"""

import math
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, List, Optional, Sequence

from .errors import RangeError
from .errors import TypeError as ExprTypeError

MAX_SAFE_INTEGER = 2**53 - 1

NAN = float("nan")
INFINITY = float("inf")


class Undefined:
    """The absent value. There is exactly one instance, UNDEFINED."""

    _instance: Optional["Undefined"] = None

    def __new__(cls) -> "Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "Undefined":
        return self

    def __deepcopy__(self, memo: Any) -> "Undefined":
        return self

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED = Undefined()


class JSFunction(ABC):
    """
    Base class for callables that take an explicit receiver.

    Python callables that are not JSFunction instances are called with the
    arguments only; the receiver is dropped.
    """

    name: str = ""

    @abstractmethod
    def call(self, this: Any, args: Sequence[Any]) -> Any:
        """Invokes the function with a receiver and positional arguments."""

    @property
    def length(self) -> int:
        return 0

    def __call__(self, *args: Any) -> Any:
        return self.call(UNDEFINED, list(args))


_FLAG_MAP = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL}
_VALID_FLAGS = "dgimsuyv"
_NAMED_GROUP = re.compile(r"\(\?<(?=[A-Za-z_$])")


class RegExp:
    """Regular expression value backed by Python's re module."""

    def __init__(self, source: str, flags: str = ""):
        for flag in flags:
            if flag not in _VALID_FLAGS or flags.count(flag) > 1:
                raise ExprTypeError(f"Invalid regular expression flags '{flags}'")
        self.source = source
        self.flags = "".join(sorted(flags))
        self.last_index = 0
        re_flags = 0
        for flag in self.flags:
            re_flags |= _FLAG_MAP.get(flag, 0)
        if "u" not in self.flags and "v" not in self.flags:
            re_flags |= re.ASCII
        try:
            self.pattern = re.compile(_NAMED_GROUP.sub("(?P<", source), re_flags)
        except re.error as e:
            raise ExprTypeError(
                f"Invalid regular expression: /{source}/: {e}"
            ) from e

    @property
    def is_global(self) -> bool:
        return "g" in self.flags

    @property
    def is_sticky(self) -> bool:
        return "y" in self.flags

    def __repr__(self) -> str:
        return f"/{self.source}/{self.flags}"


# ============================================================
# Type Inspection
# ============================================================


def is_number(value: Any) -> bool:
    """Checks for a number value (bool is excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_callable(value: Any) -> bool:
    if isinstance(value, JSFunction):
        return True
    return callable(value) and not isinstance(value, (Mapping, list, tuple, str, RegExp))


def is_object(value: Any) -> bool:
    """Checks for a non-primitive value."""
    return not (
        value is UNDEFINED
        or value is None
        or isinstance(value, (bool, str))
        or is_number(value)
    )


def type_of(value: Any) -> str:
    """Returns the type tag used by the typeof operator. Never fails."""
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "object"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if is_callable(value):
        return "function"
    return "object"


def describe(value: Any) -> str:
    """Short description of a value for error messages."""
    if isinstance(value, str):
        return f'"{value}"'
    if is_array(value):
        return "array"
    if isinstance(value, Mapping):
        return "#<Object>"
    if is_callable(value):
        return to_string(value)
    if is_object(value) and not isinstance(value, RegExp):
        return f"#<{type(value).__name__}>"
    return to_string(value)


# ============================================================
# Conversions
# ============================================================


def to_boolean(value: Any) -> bool:
    """Truthiness of a value."""
    if value is UNDEFINED or value is None:
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        return not (value == 0 or math.isnan(value))
    if isinstance(value, str):
        return value != ""
    return True


def to_primitive(value: Any, hint: str = "default") -> Any:
    """
    Converts an object to a primitive value.

    Mappings may provide their own valueOf/toString callables; arrays join
    their elements; functions and regular expressions render as source text.
    """
    if not is_object(value):
        return value

    if isinstance(value, Mapping):
        order = ("toString", "valueOf") if hint == "string" else ("valueOf", "toString")
        for method_name in order:
            method = value.get(method_name, UNDEFINED)
            if is_callable(method):
                result = call_function(method, value, [])
                if not is_object(result):
                    return result
        # An own toString shadows the default one
        if "toString" in value:
            raise ExprTypeError("Cannot convert object to primitive value")
        return "[object Object]"

    if is_array(value):
        return ",".join(
            "" if item is UNDEFINED or item is None else to_string(item)
            for item in value
        )

    if isinstance(value, RegExp):
        return f"/{value.source}/{value.flags}"

    if isinstance(value, JSFunction):
        return f"function {value.name}() {{ [native code] }}"

    if callable(value):
        name = getattr(value, "__name__", "")
        return f"function {name}() {{ [native code] }}"

    return str(value)


_DECIMAL_LITERAL = re.compile(
    r"^[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*(?:[eE][+-]?[0-9]+)?|\.[0-9]+(?:[eE][+-]?[0-9]+)?))$"
)
WHITESPACE = " \t\n\r\v\f" + "".join(
    chr(code)
    for code in (0xA0, 0x1680, *range(0x2000, 0x200B), 0x2028, 0x2029, 0x202F, 0x205F, 0x3000, 0xFEFF)
)
_INTEGER_LITERAL = re.compile(r"^[+-]?[0-9]+$")
_RADIX_PREFIXES = {
    "0x": (16, re.compile(r"^[0-9a-fA-F]+$")),
    "0o": (8, re.compile(r"^[0-7]+$")),
    "0b": (2, re.compile(r"^[01]+$")),
}


def string_to_number(text: str) -> float:
    """Converts a string to a number the way the Number() conversion does."""
    text = text.strip(WHITESPACE)
    if text == "":
        return 0
    prefix = _RADIX_PREFIXES.get(text[:2].lower())
    if prefix is not None:
        base, digits = prefix
        if not digits.match(text[2:]):
            return NAN
        return int(text[2:], base)
    if not _DECIMAL_LITERAL.match(text):
        return NAN
    if text.lstrip("+-") == "Infinity":
        return -INFINITY if text.startswith("-") else INFINITY
    if _INTEGER_LITERAL.match(text) and abs(int(text)) <= MAX_SAFE_INTEGER:
        return int(text)
    return float(text)


def to_number(value: Any) -> float:
    """Converts a value to a number."""
    if is_number(value):
        return value
    if value is UNDEFINED:
        return NAN
    if value is None:
        return 0
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, str):
        return string_to_number(value)
    return to_number(to_primitive(value, "number"))


def to_integer(value: Any) -> int:
    """ToIntegerOrInfinity, with infinities clamped to very large ints."""
    number = to_number(value)
    if isinstance(number, int):
        return number
    if math.isnan(number):
        return 0
    if math.isinf(number):
        return MAX_SAFE_INTEGER if number > 0 else -MAX_SAFE_INTEGER
    return int(number)


def to_int32(value: Any) -> int:
    number = to_number(value)
    if not isinstance(number, int):
        if math.isnan(number) or math.isinf(number):
            return 0
        number = int(number)
    number &= 0xFFFFFFFF
    return number - 0x100000000 if number >= 0x80000000 else number


def to_uint32(value: Any) -> int:
    number = to_number(value)
    if not isinstance(number, int):
        if math.isnan(number) or math.isinf(number):
            return 0
        number = int(number)
    return number & 0xFFFFFFFF


def _shortest_digits(number: float) -> tuple[str, int]:
    """Returns (digits, n) so that number == 0.digits * 10**n, shortest round-trip."""
    text = repr(float(number))
    if "e" in text:
        mantissa, exponent_text = text.split("e")
        exponent = int(exponent_text)
    else:
        mantissa, exponent = text, 0
    if "." in mantissa:
        int_part, frac_part = mantissa.split(".")
    else:
        int_part, frac_part = mantissa, ""
    digits = int_part + frac_part
    point = len(int_part) + exponent
    stripped = digits.lstrip("0")
    point -= len(digits) - len(stripped)
    digits = stripped.rstrip("0")
    return digits, point


def number_to_string(number: float, radix: int = 10) -> str:
    """Converts a number to its canonical string form."""
    if isinstance(number, float):
        if math.isnan(number):
            return "NaN"
        if math.isinf(number):
            return "Infinity" if number > 0 else "-Infinity"
        if number == 0:
            return "0"
        if number.is_integer() and abs(number) < 1e21 and radix == 10:
            return str(int(number))
    elif radix == 10:
        if abs(number) < 10**21:
            return str(number)
        return number_to_string(float(number))

    if radix != 10:
        return _number_to_radix(number, radix)

    sign = "-" if number < 0 else ""
    digits, n = _shortest_digits(abs(number))
    k = len(digits)
    if k <= n <= 21:
        body = digits + "0" * (n - k)
    elif 0 < n <= 21:
        body = digits[:n] + "." + digits[n:]
    elif -6 < n <= 0:
        body = "0." + "0" * (-n) + digits
    else:
        exponent = n - 1
        exponent_text = f"e{'+' if exponent >= 0 else '-'}{abs(exponent)}"
        if k == 1:
            body = digits + exponent_text
        else:
            body = digits[0] + "." + digits[1:] + exponent_text
    return sign + body


_RADIX_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _number_to_radix(number: float, radix: int) -> str:
    if isinstance(number, float) and (math.isnan(number) or math.isinf(number)):
        return number_to_string(number)
    sign = "-" if number < 0 else ""
    number = abs(number)
    integer = int(number)
    fraction = number - integer

    if integer == 0:
        int_digits = "0"
    else:
        chars: List[str] = []
        while integer:
            integer, remainder = divmod(integer, radix)
            chars.append(_RADIX_DIGITS[remainder])
        int_digits = "".join(reversed(chars))

    frac_digits: List[str] = []
    while fraction and len(frac_digits) < 52:
        fraction *= radix
        digit = int(fraction)
        frac_digits.append(_RADIX_DIGITS[digit])
        fraction -= digit

    if frac_digits:
        return f"{sign}{int_digits}.{''.join(frac_digits).rstrip('0')}"
    return f"{sign}{int_digits}"


def check_radix(radix: Any) -> int:
    value = 10 if radix is UNDEFINED else to_integer(radix)
    if value < 2 or value > 36:
        raise RangeError("toString() radix must be between 2 and 36")
    return value


def to_string(value: Any) -> str:
    """Converts a value to a string."""
    if isinstance(value, str):
        return value
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return number_to_string(value)
    return to_string(to_primitive(value, "string"))


def to_property_key(value: Any) -> str:
    """Converts a computed member key to the string used for lookup."""
    if isinstance(value, str):
        return value
    return to_string(value)


# ============================================================
# Equality
# ============================================================


def strict_equals(left: Any, right: Any) -> bool:
    """Strict equality (===)."""
    if is_number(left) and is_number(right):
        return left == right
    if left is UNDEFINED or right is UNDEFINED:
        return left is right
    if left is None or right is None:
        return left is right
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, str) or isinstance(right, str):
        return isinstance(left, str) and isinstance(right, str) and left == right
    return left is right


def same_value_zero(left: Any, right: Any) -> bool:
    """Equality used by includes(): like === but NaN equals NaN."""
    if (
        isinstance(left, float)
        and isinstance(right, float)
        and math.isnan(left)
        and math.isnan(right)
    ):
        return True
    return strict_equals(left, right)


def loose_equals(left: Any, right: Any) -> bool:
    """Abstract (weak) equality (==)."""
    left_nullish = left is UNDEFINED or left is None
    right_nullish = right is UNDEFINED or right is None
    if left_nullish or right_nullish:
        return left_nullish and right_nullish

    left_object = is_object(left)
    right_object = is_object(right)
    if left_object and right_object:
        return left is right

    if isinstance(left, bool):
        return loose_equals(1 if left else 0, right)
    if isinstance(right, bool):
        return loose_equals(left, 1 if right else 0)

    if left_object:
        return loose_equals(to_primitive(left), right)
    if right_object:
        return loose_equals(left, to_primitive(right))

    if is_number(left) and isinstance(right, str):
        return left == string_to_number(right)
    if isinstance(left, str) and is_number(right):
        return string_to_number(left) == right

    return strict_equals(left, right)


# ============================================================
# Invocation
# ============================================================


def call_function(
    fn: Any,
    this: Any,
    args: Sequence[Any],
    description: Optional[str] = None,
) -> Any:
    """
    Invokes a callable value with a receiver.

    JSFunction instances receive the receiver; plain Python callables are
    called with the arguments only. Exceptions raised by the callee are not
    caught.
    """
    if isinstance(fn, JSFunction):
        return fn.call(this, args)
    if is_callable(fn):
        return fn(*args)
    raise ExprTypeError(f"{description or describe(fn)} is not a function")
