"""
Standard global bindings.

Provides the constructors, namespaces and helper functions expressions
usually expect to find in scope (`Math`, `Number`, `parseInt`, ...). None of
these perform I/O; `Math.random` is the only non-deterministic member.
"""

import math
import random
import re
from collections.abc import Mapping, MutableMapping
from typing import Any, Callable, Dict, List, Optional

from .errors import RangeError
from .errors import TypeError as ExprTypeError
from .expansion import iterate_spread
from .members import get_property
from .operators import exponentiate
from .prototypes import NativeFunction
from .scope import Scope
from .values import (
    INFINITY,
    MAX_SAFE_INTEGER,
    NAN,
    UNDEFINED,
    WHITESPACE,
    RegExp,
    call_function,
    is_array,
    is_callable,
    is_number,
    is_object,
    string_to_number,
    to_boolean,
    to_integer,
    to_number,
    to_string,
)

_RADIX_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_FLOAT_PREFIX = re.compile(
    r"^[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)"
)


def _native(name: str, length: int = 0, **kwargs: Any) -> Callable[[Callable[..., Any]], NativeFunction]:
    def decorator(impl: Callable[..., Any]) -> NativeFunction:
        return NativeFunction(name, impl, length, **kwargs)

    return decorator


def _integral(number: float) -> Any:
    """Returns an int for finite integral results within the safe range."""
    if isinstance(number, float) and number.is_integer() and abs(number) <= MAX_SAFE_INTEGER:
        return int(number)
    return number


def _is_nan(number: Any) -> bool:
    return isinstance(number, float) and math.isnan(number)


# ============================================================
# Global Functions
# ============================================================


@_native("parseInt", 2)
def _parse_int(_this: Any, value: Any = UNDEFINED, radix: Any = UNDEFINED, *_: Any) -> Any:
    """parseInt(s: string, radix?: number) -> number - Parses a leading integer."""
    text = to_string(value).strip(WHITESPACE)
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    base = to_integer(radix) if radix is not UNDEFINED else 0
    strip_prefix = True
    if base != 0:
        if base < 2 or base > 36:
            return NAN
        strip_prefix = base == 16
    else:
        base = 10
    if strip_prefix and text[:2].lower() == "0x":
        text = text[2:]
        base = 16

    digits = _RADIX_DIGITS[:base]
    end = 0
    while end < len(text) and text[end].lower() in digits:
        end += 1
    if end == 0:
        return NAN

    number = sign * int(text[:end], base)
    if abs(number) > MAX_SAFE_INTEGER:
        return float(number)
    return number


@_native("parseFloat", 1)
def _parse_float(_this: Any, value: Any = UNDEFINED, *_: Any) -> Any:
    """parseFloat(s: string) -> number - Parses a leading decimal number."""
    text = to_string(value).strip(WHITESPACE)
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        return NAN
    return string_to_number(match.group(0))


@_native("isNaN", 1)
def _global_is_nan(_this: Any, value: Any = UNDEFINED, *_: Any) -> bool:
    return _is_nan(to_number(value))


@_native("isFinite", 1)
def _global_is_finite(_this: Any, value: Any = UNDEFINED, *_: Any) -> bool:
    number = to_number(value)
    return not (_is_nan(number) or (isinstance(number, float) and math.isinf(number)))


# ============================================================
# Math
# ============================================================


def _math_unary(name: str, fn: Callable[[float], float]) -> NativeFunction:
    def impl(_this: Any, value: Any = UNDEFINED, *_: Any) -> Any:
        number = to_number(value)
        if _is_nan(number):
            return NAN
        try:
            return _integral(fn(number))
        except ValueError:
            # Outside the function's domain (e.g. Math.sqrt(-1))
            return NAN
        except OverflowError:
            return INFINITY

    return NativeFunction(name, impl, 1)


def _round(number: float) -> float:
    if math.isinf(number) or number == 0:
        return number
    return float(math.floor(number + 0.5))


def _sign(number: float) -> float:
    if number == 0:
        return number
    return 1 if number > 0 else -1


def _log(fn: Callable[[float], float]) -> Callable[[float], float]:
    def impl(number: float) -> float:
        if number == 0:
            return -INFINITY
        return fn(number)

    return impl


def _math_extreme(name: str, pick: Callable[..., Any], empty: float) -> NativeFunction:
    def impl(_this: Any, *args: Any) -> Any:
        numbers = [to_number(arg) for arg in args]
        if not numbers:
            return empty
        if any(_is_nan(number) for number in numbers):
            return NAN
        return pick(numbers)

    return NativeFunction(name, impl, 2)


@_native("pow", 2)
def _math_pow(_this: Any, base: Any = UNDEFINED, exponent: Any = UNDEFINED, *_: Any) -> Any:
    return exponentiate(base, exponent)


@_native("atan2", 2)
def _math_atan2(_this: Any, y: Any = UNDEFINED, x: Any = UNDEFINED, *_: Any) -> Any:
    return math.atan2(to_number(y), to_number(x))


@_native("hypot", 2)
def _math_hypot(_this: Any, *args: Any) -> Any:
    return _integral(math.hypot(*(to_number(arg) for arg in args)))


@_native("random")
def _math_random(_this: Any, *_: Any) -> float:
    return random.random()


def _create_math() -> Dict[str, Any]:
    namespace: Dict[str, Any] = {
        "E": math.e,
        "LN10": math.log(10),
        "LN2": math.log(2),
        "LOG10E": 1 / math.log(10),
        "LOG2E": 1 / math.log(2),
        "PI": math.pi,
        "SQRT1_2": math.sqrt(0.5),
        "SQRT2": math.sqrt(2),
        "abs": _math_unary("abs", abs),
        "acos": _math_unary("acos", math.acos),
        "asin": _math_unary("asin", math.asin),
        "atan": _math_unary("atan", math.atan),
        "atan2": _math_atan2,
        "cbrt": _math_unary("cbrt", lambda x: math.copysign(abs(x) ** (1 / 3), x)),
        "ceil": _math_unary("ceil", lambda x: x if math.isinf(x) else float(math.ceil(x))),
        "cos": _math_unary("cos", math.cos),
        "exp": _math_unary("exp", math.exp),
        "floor": _math_unary("floor", lambda x: x if math.isinf(x) else float(math.floor(x))),
        "hypot": _math_hypot,
        "log": _math_unary("log", _log(math.log)),
        "log10": _math_unary("log10", _log(math.log10)),
        "log2": _math_unary("log2", _log(math.log2)),
        "max": _math_extreme("max", max, -INFINITY),
        "min": _math_extreme("min", min, INFINITY),
        "pow": _math_pow,
        "random": _math_random,
        "round": _math_unary("round", _round),
        "sign": _math_unary("sign", _sign),
        "sin": _math_unary("sin", math.sin),
        "sqrt": _math_unary("sqrt", math.sqrt),
        "tan": _math_unary("tan", math.tan),
        "trunc": _math_unary("trunc", lambda x: x if math.isinf(x) else float(math.trunc(x))),
    }
    return namespace


# ============================================================
# Constructors
# ============================================================


def _number_is_integer(_this: Any, value: Any = UNDEFINED, *_: Any) -> bool:
    if not is_number(value):
        return False
    return isinstance(value, int) or (math.isfinite(value) and value.is_integer())


def _number_is_safe_integer(_this: Any, value: Any = UNDEFINED, *_: Any) -> bool:
    return _number_is_integer(_this, value) and abs(value) <= MAX_SAFE_INTEGER


def _create_number() -> NativeFunction:
    def impl(_this: Any, *args: Any) -> Any:
        return to_number(args[0]) if args else 0

    return NativeFunction(
        "Number",
        impl,
        1,
        properties={
            "EPSILON": 2.0**-52,
            "MAX_SAFE_INTEGER": MAX_SAFE_INTEGER,
            "MIN_SAFE_INTEGER": -MAX_SAFE_INTEGER,
            "MAX_VALUE": 1.7976931348623157e308,
            "MIN_VALUE": 5e-324,
            "NaN": NAN,
            "NEGATIVE_INFINITY": -INFINITY,
            "POSITIVE_INFINITY": INFINITY,
            "isFinite": NativeFunction(
                "isFinite",
                lambda _this, value=UNDEFINED, *_: is_number(value)
                and math.isfinite(value),
                1,
            ),
            "isInteger": NativeFunction("isInteger", _number_is_integer, 1),
            "isNaN": NativeFunction(
                "isNaN", lambda _this, value=UNDEFINED, *_: _is_nan(value), 1
            ),
            "isSafeInteger": NativeFunction("isSafeInteger", _number_is_safe_integer, 1),
            "parseFloat": _parse_float,
            "parseInt": _parse_int,
        },
        instance_check=lambda value: False,
    )


def _string_from_char_code(_this: Any, *codes: Any) -> str:
    return "".join(chr(to_integer(code) & 0xFFFF) for code in codes)


def _create_string() -> NativeFunction:
    def impl(_this: Any, *args: Any) -> str:
        return to_string(args[0]) if args else ""

    return NativeFunction(
        "String",
        impl,
        1,
        properties={"fromCharCode": NativeFunction("fromCharCode", _string_from_char_code, 1)},
        instance_check=lambda value: False,
    )


def _create_boolean() -> NativeFunction:
    return NativeFunction(
        "Boolean",
        lambda _this, value=UNDEFINED, *_: to_boolean(value),
        1,
        instance_check=lambda value: False,
    )


def _array_from(
    _this: Any, items: Any = UNDEFINED, map_fn: Any = UNDEFINED, this_arg: Any = UNDEFINED, *_: Any
) -> List[Any]:
    if items is UNDEFINED or items is None:
        raise ExprTypeError(f"{to_string(items)} is not iterable")
    if map_fn is not UNDEFINED and not is_callable(map_fn):
        raise ExprTypeError(f"{to_string(map_fn)} is not a function")
    if isinstance(items, Mapping):
        length = to_integer(items.get("length", 0))
        values = [items.get(str(index), UNDEFINED) for index in range(max(length, 0))]
    elif is_number(items) or isinstance(items, bool):
        values = []
    else:
        values = iterate_spread(items)
    if map_fn is UNDEFINED:
        return values
    return [call_function(map_fn, this_arg, [value, index]) for index, value in enumerate(values)]


def _create_array() -> NativeFunction:
    def impl(_this: Any, *args: Any) -> List[Any]:
        if len(args) == 1 and is_number(args[0]):
            length = args[0]
            if to_integer(length) != length or length < 0 or length > 2**32 - 1:
                raise RangeError("Invalid array length")
            return [UNDEFINED] * int(length)
        return list(args)

    return NativeFunction(
        "Array",
        impl,
        1,
        properties={
            "from": NativeFunction("from", _array_from, 1),
            "isArray": NativeFunction(
                "isArray", lambda _this, value=UNDEFINED, *_: is_array(value), 1
            ),
            "of": NativeFunction("of", lambda _this, *items: list(items)),
        },
        instance_check=is_array,
    )


def _own_keys(value: Any) -> List[str]:
    if value is UNDEFINED or value is None:
        raise ExprTypeError("Cannot convert undefined or null to object")
    if isinstance(value, Mapping):
        return [to_string(key) for key in value]
    if is_array(value) or isinstance(value, str):
        return [str(index) for index in range(len(value))]
    return []


def _object_keys(_this: Any, value: Any = UNDEFINED, *_: Any) -> List[str]:
    return _own_keys(value)


def _object_values(_this: Any, value: Any = UNDEFINED, *_: Any) -> List[Any]:
    return [get_property(value, key) for key in _own_keys(value)]


def _object_entries(_this: Any, value: Any = UNDEFINED, *_: Any) -> List[Any]:
    return [[key, get_property(value, key)] for key in _own_keys(value)]


def _object_assign(_this: Any, target: Any = UNDEFINED, *sources: Any) -> Any:
    if not isinstance(target, MutableMapping):
        raise ExprTypeError("Object.assign target must be a mutable object")
    for source in sources:
        if source is UNDEFINED or source is None:
            continue
        for key in _own_keys(source):
            target[key] = get_property(source, key)
    return target


def _object_from_entries(_this: Any, entries: Any = UNDEFINED, *_: Any) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for entry in iterate_spread(entries):
        if not is_array(entry):
            raise ExprTypeError(f"Iterator value {to_string(entry)} is not an entry object")
        key = entry[0] if len(entry) > 0 else UNDEFINED
        result[to_string(key)] = entry[1] if len(entry) > 1 else UNDEFINED
    return result


def _create_object() -> NativeFunction:
    def impl(_this: Any, value: Any = UNDEFINED, *_: Any) -> Any:
        if value is UNDEFINED or value is None:
            return {}
        return value

    return NativeFunction(
        "Object",
        impl,
        1,
        properties={
            "assign": NativeFunction("assign", _object_assign, 2),
            "entries": NativeFunction("entries", _object_entries, 1),
            "fromEntries": NativeFunction("fromEntries", _object_from_entries, 1),
            "keys": NativeFunction("keys", _object_keys, 1),
            "values": NativeFunction("values", _object_values, 1),
        },
        instance_check=is_object,
    )


def _create_regexp() -> NativeFunction:
    def impl(_this: Any, pattern: Any = UNDEFINED, flags: Any = UNDEFINED, *_: Any) -> RegExp:
        if isinstance(pattern, RegExp):
            return RegExp(pattern.source, pattern.flags if flags is UNDEFINED else to_string(flags))
        source = "(?:)" if pattern is UNDEFINED else to_string(pattern)
        return RegExp(source, "" if flags is UNDEFINED else to_string(flags))

    return NativeFunction(
        "RegExp", impl, 2, instance_check=lambda value: isinstance(value, RegExp)
    )


def standard_globals() -> Dict[str, Any]:
    """Returns a fresh mapping of the standard global bindings."""
    return {
        "undefined": UNDEFINED,
        "NaN": NAN,
        "Infinity": INFINITY,
        "Math": _create_math(),
        "Number": _create_number(),
        "String": _create_string(),
        "Boolean": _create_boolean(),
        "Array": _create_array(),
        "Object": _create_object(),
        "RegExp": _create_regexp(),
        "parseInt": _parse_int,
        "parseFloat": _parse_float,
        "isNaN": _global_is_nan,
        "isFinite": _global_is_finite,
    }


def create_global_scope(bindings: Optional[MutableMapping[str, Any]] = None) -> Scope:
    """
    Creates a scope for evaluating expressions.

    Args:
        bindings: Host variables. The mapping is held by reference, so the
            host sees top-level assignments made by expressions.

    Returns:
        A frame holding the host bindings whose parent holds the standard
        globals. Host bindings shadow globals of the same name.
    """
    return Scope(bindings if bindings is not None else {}, parent=Scope(standard_globals()))
