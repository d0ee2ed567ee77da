"""
Native functions and the built-in prototype tables.

Prototype methods receive the receiver explicitly as their first argument
(`impl(this, *args)`), which is why method calls must bind the object they
were looked up on. Called without a compatible receiver they raise
TypeError, as the modeled built-ins do.
"""

import functools
import math
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence

from .errors import RangeError
from .errors import TypeError as ExprTypeError
from .values import (
    UNDEFINED,
    WHITESPACE,
    JSFunction,
    RegExp,
    call_function,
    check_radix,
    describe,
    is_array,
    is_callable,
    is_number,
    number_to_string,
    same_value_zero,
    strict_equals,
    to_boolean,
    to_integer,
    to_number,
    to_primitive,
    to_string,
    to_uint32,
)


class NativeFunction(JSFunction):
    """A callable implemented in Python that receives its receiver explicitly."""

    def __init__(
        self,
        name: str,
        impl: Callable[..., Any],
        length: int = 0,
        properties: Optional[Dict[str, Any]] = None,
        instance_check: Optional[Callable[[Any], bool]] = None,
    ):
        self.name = name
        self._impl = impl
        self._length = length
        self.properties: Dict[str, Any] = dict(properties or {})
        self._instance_check = instance_check

    @property
    def length(self) -> int:
        return self._length

    def call(self, this: Any, args: Sequence[Any]) -> Any:
        return self._impl(this, *args)

    def has_instance(self, value: Any) -> bool:
        """Implements `value instanceof this`."""
        if self._instance_check is None:
            raise ExprTypeError(
                "Function has non-object prototype 'undefined' in instanceof check"
            )
        return self._instance_check(value)

    def __repr__(self) -> str:
        return f"<native function {self.name}>"


PrototypeTable = Dict[str, NativeFunction]

OBJECT_PROTOTYPE: PrototypeTable = {}
FUNCTION_PROTOTYPE: PrototypeTable = {}
NUMBER_PROTOTYPE: PrototypeTable = {}
BOOLEAN_PROTOTYPE: PrototypeTable = {}
STRING_PROTOTYPE: PrototypeTable = {}
ARRAY_PROTOTYPE: PrototypeTable = {}
REGEXP_PROTOTYPE: PrototypeTable = {}


def _define(table: PrototypeTable, name: str, length: int = 0):
    def decorator(impl: Callable[..., Any]) -> Callable[..., Any]:
        table[name] = NativeFunction(name, impl, length)
        return impl

    return decorator


# ============================================================
# Receiver Checks
# ============================================================


def _this_string(this: Any, method: str) -> str:
    if this is UNDEFINED or this is None:
        raise ExprTypeError(f"String.prototype.{method} called on null or undefined")
    return to_string(this)


def _this_number(this: Any, method: str) -> float:
    if not is_number(this):
        raise ExprTypeError(
            f"Number.prototype.{method} requires that 'this' be a Number"
        )
    return this


def _this_array(this: Any, method: str) -> Sequence[Any]:
    if not is_array(this):
        raise ExprTypeError(
            f"Array.prototype.{method} called on incompatible receiver {describe(this)}"
        )
    return this


def _mutable_array(this: Any, method: str) -> List[Any]:
    array = _this_array(this, method)
    if not isinstance(array, list):
        raise ExprTypeError(f"Cannot modify a read-only array with {method}")
    return array


def _this_regexp(this: Any, method: str) -> RegExp:
    if not isinstance(this, RegExp):
        raise ExprTypeError(
            f"RegExp.prototype.{method} called on incompatible receiver {describe(this)}"
        )
    return this


def _this_function(this: Any, method: str) -> Any:
    if not is_callable(this):
        raise ExprTypeError(f"Function.prototype.{method} called on non-function")
    return this


def _callback(fn: Any) -> Any:
    if not is_callable(fn):
        raise ExprTypeError(f"{describe(fn)} is not a function")
    return fn


def _relative_index(value: Any, length: int, default: int) -> int:
    """Resolves a possibly negative index argument against a length."""
    if value is UNDEFINED:
        return default
    index = to_integer(value)
    if index < 0:
        return max(length + index, 0)
    return min(index, length)


# ============================================================
# Object Prototype
# ============================================================


@_define(OBJECT_PROTOTYPE, "hasOwnProperty", 1)
def _object_has_own_property(this: Any, key: Any = UNDEFINED, *_: Any) -> bool:
    name = to_string(key)
    if isinstance(this, Mapping):
        return name in this
    if is_array(this) or isinstance(this, str):
        return name == "length" or (name.isdigit() and int(name) < len(this))
    return False


@_define(OBJECT_PROTOTYPE, "toString")
def _object_to_string(this: Any, *_: Any) -> str:
    if this is UNDEFINED:
        return "[object Undefined]"
    if this is None:
        return "[object Null]"
    if is_array(this):
        return "[object Array]"
    if is_callable(this):
        return "[object Function]"
    return "[object Object]"


@_define(OBJECT_PROTOTYPE, "valueOf")
def _object_value_of(this: Any, *_: Any) -> Any:
    return this


# ============================================================
# Function Prototype
# ============================================================


@_define(FUNCTION_PROTOTYPE, "call", 1)
def _function_call(this: Any, this_arg: Any = UNDEFINED, *args: Any) -> Any:
    return call_function(_this_function(this, "call"), this_arg, list(args))


@_define(FUNCTION_PROTOTYPE, "apply", 2)
def _function_apply(
    this: Any, this_arg: Any = UNDEFINED, args: Any = UNDEFINED, *_: Any
) -> Any:
    fn = _this_function(this, "apply")
    if args is UNDEFINED or args is None:
        return call_function(fn, this_arg, [])
    if not is_array(args):
        raise ExprTypeError("CreateListFromArrayLike called on non-object")
    return call_function(fn, this_arg, list(args))


@_define(FUNCTION_PROTOTYPE, "bind", 1)
def _function_bind(this: Any, this_arg: Any = UNDEFINED, *bound_args: Any) -> NativeFunction:
    fn = _this_function(this, "bind")
    name = getattr(fn, "name", None) or getattr(fn, "__name__", "")

    def bound(_this: Any, *args: Any) -> Any:
        return call_function(fn, this_arg, [*bound_args, *args])

    length = max(getattr(fn, "length", 0) - len(bound_args), 0)
    return NativeFunction(f"bound {name}", bound, length)


@_define(FUNCTION_PROTOTYPE, "toString")
def _function_to_string(this: Any, *_: Any) -> str:
    return to_primitive(_this_function(this, "toString"), "string")


# ============================================================
# Number and Boolean Prototypes
# ============================================================


@_define(NUMBER_PROTOTYPE, "toString", 1)
def _number_to_string(this: Any, radix: Any = UNDEFINED, *_: Any) -> str:
    number = _this_number(this, "toString")
    return number_to_string(number, check_radix(radix))


@_define(NUMBER_PROTOTYPE, "toFixed", 1)
def _number_to_fixed(this: Any, digits: Any = UNDEFINED, *_: Any) -> str:
    number = _this_number(this, "toFixed")
    places = to_integer(digits)
    if places < 0 or places > 100:
        raise RangeError("toFixed() digits argument must be between 0 and 100")
    if isinstance(number, float) and math.isnan(number):
        return "NaN"
    if abs(number) >= 1e21:
        return to_string(number)
    quantum = Decimal(1).scaleb(-places)
    text = str(Decimal(abs(number)).quantize(quantum, rounding=ROUND_HALF_UP))
    return f"-{text}" if number < 0 else text


@_define(NUMBER_PROTOTYPE, "valueOf")
def _number_value_of(this: Any, *_: Any) -> float:
    return _this_number(this, "valueOf")


@_define(BOOLEAN_PROTOTYPE, "toString")
def _boolean_to_string(this: Any, *_: Any) -> str:
    if not isinstance(this, bool):
        raise ExprTypeError("Boolean.prototype.toString requires that 'this' be a Boolean")
    return "true" if this else "false"


@_define(BOOLEAN_PROTOTYPE, "valueOf")
def _boolean_value_of(this: Any, *_: Any) -> bool:
    if not isinstance(this, bool):
        raise ExprTypeError("Boolean.prototype.valueOf requires that 'this' be a Boolean")
    return this


# ============================================================
# String Prototype
# ============================================================


@_define(STRING_PROTOTYPE, "at", 1)
def _string_at(this: Any, index: Any = UNDEFINED, *_: Any) -> Any:
    s = _this_string(this, "at")
    position = to_integer(index)
    if position < 0:
        position += len(s)
    if position < 0 or position >= len(s):
        return UNDEFINED
    return s[position]


@_define(STRING_PROTOTYPE, "charAt", 1)
def _string_char_at(this: Any, index: Any = UNDEFINED, *_: Any) -> str:
    s = _this_string(this, "charAt")
    position = to_integer(index)
    return s[position] if 0 <= position < len(s) else ""


@_define(STRING_PROTOTYPE, "charCodeAt", 1)
def _string_char_code_at(this: Any, index: Any = UNDEFINED, *_: Any) -> float:
    s = _this_string(this, "charCodeAt")
    position = to_integer(index)
    return ord(s[position]) if 0 <= position < len(s) else float("nan")


@_define(STRING_PROTOTYPE, "concat", 1)
def _string_concat(this: Any, *args: Any) -> str:
    s = _this_string(this, "concat")
    return s + "".join(to_string(arg) for arg in args)


def _search_string(value: Any, method: str) -> str:
    if isinstance(value, RegExp):
        raise ExprTypeError(
            f"First argument to String.prototype.{method} must not be a regular expression"
        )
    return to_string(value)


@_define(STRING_PROTOTYPE, "includes", 1)
def _string_includes(
    this: Any, search: Any = UNDEFINED, position: Any = UNDEFINED, *_: Any
) -> bool:
    s = _this_string(this, "includes")
    needle = _search_string(search, "includes")
    start = min(max(to_integer(position), 0), len(s))
    return s.find(needle, start) != -1


@_define(STRING_PROTOTYPE, "startsWith", 1)
def _string_starts_with(
    this: Any, search: Any = UNDEFINED, position: Any = UNDEFINED, *_: Any
) -> bool:
    s = _this_string(this, "startsWith")
    needle = _search_string(search, "startsWith")
    start = min(max(to_integer(position), 0), len(s))
    return s.startswith(needle, start)


@_define(STRING_PROTOTYPE, "endsWith", 1)
def _string_ends_with(
    this: Any, search: Any = UNDEFINED, end_position: Any = UNDEFINED, *_: Any
) -> bool:
    s = _this_string(this, "endsWith")
    needle = _search_string(search, "endsWith")
    end = len(s) if end_position is UNDEFINED else min(max(to_integer(end_position), 0), len(s))
    return s[:end].endswith(needle)


@_define(STRING_PROTOTYPE, "indexOf", 1)
def _string_index_of(
    this: Any, search: Any = UNDEFINED, position: Any = UNDEFINED, *_: Any
) -> int:
    s = _this_string(this, "indexOf")
    start = min(max(to_integer(position), 0), len(s))
    return s.find(to_string(search), start)


@_define(STRING_PROTOTYPE, "lastIndexOf", 1)
def _string_last_index_of(
    this: Any, search: Any = UNDEFINED, position: Any = UNDEFINED, *_: Any
) -> int:
    s = _this_string(this, "lastIndexOf")
    needle = to_string(search)
    number = to_number(position)
    if isinstance(number, float) and math.isnan(number):
        start = len(s)
    else:
        start = min(max(to_integer(number), 0), len(s))
    return s.rfind(needle, 0, start + len(needle))


@_define(STRING_PROTOTYPE, "slice", 2)
def _string_slice(this: Any, start: Any = UNDEFINED, end: Any = UNDEFINED, *_: Any) -> str:
    s = _this_string(this, "slice")
    begin = _relative_index(start, len(s), 0)
    finish = _relative_index(end, len(s), len(s))
    return s[begin:finish] if begin < finish else ""


@_define(STRING_PROTOTYPE, "substring", 2)
def _string_substring(
    this: Any, start: Any = UNDEFINED, end: Any = UNDEFINED, *_: Any
) -> str:
    s = _this_string(this, "substring")
    begin = min(max(to_integer(start), 0), len(s))
    finish = len(s) if end is UNDEFINED else min(max(to_integer(end), 0), len(s))
    if begin > finish:
        begin, finish = finish, begin
    return s[begin:finish]


@_define(STRING_PROTOTYPE, "toUpperCase")
def _string_to_upper_case(this: Any, *_: Any) -> str:
    return _this_string(this, "toUpperCase").upper()


@_define(STRING_PROTOTYPE, "toLowerCase")
def _string_to_lower_case(this: Any, *_: Any) -> str:
    return _this_string(this, "toLowerCase").lower()


@_define(STRING_PROTOTYPE, "trim")
def _string_trim(this: Any, *_: Any) -> str:
    return _this_string(this, "trim").strip(WHITESPACE)


@_define(STRING_PROTOTYPE, "trimStart")
def _string_trim_start(this: Any, *_: Any) -> str:
    return _this_string(this, "trimStart").lstrip(WHITESPACE)


@_define(STRING_PROTOTYPE, "trimEnd")
def _string_trim_end(this: Any, *_: Any) -> str:
    return _this_string(this, "trimEnd").rstrip(WHITESPACE)


def _pad(this: Any, method: str, target_length: Any, pad_string: Any, at_start: bool) -> str:
    s = _this_string(this, method)
    length = to_integer(target_length)
    filler = " " if pad_string is UNDEFINED else to_string(pad_string)
    if length <= len(s) or filler == "":
        return s
    needed = length - len(s)
    padding = (filler * (needed // len(filler) + 1))[:needed]
    return padding + s if at_start else s + padding


@_define(STRING_PROTOTYPE, "padStart", 2)
def _string_pad_start(
    this: Any, target_length: Any = UNDEFINED, pad_string: Any = UNDEFINED, *_: Any
) -> str:
    return _pad(this, "padStart", target_length, pad_string, at_start=True)


@_define(STRING_PROTOTYPE, "padEnd", 2)
def _string_pad_end(
    this: Any, target_length: Any = UNDEFINED, pad_string: Any = UNDEFINED, *_: Any
) -> str:
    return _pad(this, "padEnd", target_length, pad_string, at_start=False)


@_define(STRING_PROTOTYPE, "repeat", 1)
def _string_repeat(this: Any, count: Any = UNDEFINED, *_: Any) -> str:
    s = _this_string(this, "repeat")
    number = to_number(count)
    if (isinstance(number, float) and math.isinf(number)) or to_integer(number) < 0:
        raise RangeError(f"Invalid count value: {to_string(number)}")
    return s * to_integer(number)


def _regexp_split(s: str, regexp: RegExp, limit: int) -> List[Any]:
    if s == "":
        return [] if regexp.pattern.match(s) else [s]
    parts: List[Any] = []
    last_end = 0
    position = 0
    while position < len(s):
        match = regexp.pattern.match(s, position)
        if match is None or match.end() == last_end:
            position += 1
            continue
        parts.append(s[last_end:position])
        if len(parts) == limit:
            return parts
        for group in match.groups():
            parts.append(UNDEFINED if group is None else group)
            if len(parts) == limit:
                return parts
        last_end = match.end()
        position = last_end
    parts.append(s[last_end:])
    return parts


@_define(STRING_PROTOTYPE, "split", 2)
def _string_split(
    this: Any, separator: Any = UNDEFINED, limit: Any = UNDEFINED, *_: Any
) -> List[Any]:
    s = _this_string(this, "split")
    max_parts = 2**32 - 1 if limit is UNDEFINED else to_uint32(limit)
    if max_parts == 0:
        return []
    if separator is UNDEFINED:
        return [s]
    if isinstance(separator, RegExp):
        return _regexp_split(s, separator, max_parts)
    sep = to_string(separator)
    if sep == "":
        return list(s)[:max_parts]
    return s.split(sep)[:max_parts]


def _expand_replacement(
    template: str, matched: str, position: int, s: str, groups: Sequence[Any]
) -> str:
    """Expands $-patterns in a replacement string."""
    result: List[str] = []
    i = 0
    while i < len(template):
        ch = template[i]
        if ch != "$" or i + 1 >= len(template):
            result.append(ch)
            i += 1
            continue
        nxt = template[i + 1]
        if nxt == "$":
            result.append("$")
            i += 2
        elif nxt == "&":
            result.append(matched)
            i += 2
        elif nxt == "`":
            result.append(s[:position])
            i += 2
        elif nxt == "'":
            result.append(s[position + len(matched):])
            i += 2
        elif nxt.isdigit() and nxt.isascii():
            two = template[i + 1 : i + 3]
            if len(two) == 2 and two.isdigit() and 1 <= int(two) <= len(groups):
                group = groups[int(two) - 1]
                i += 3
            elif 1 <= int(nxt) <= len(groups):
                group = groups[int(nxt) - 1]
                i += 2
            else:
                result.append(ch)
                i += 1
                continue
            result.append("" if group is UNDEFINED else to_string(group))
        else:
            result.append(ch)
            i += 1
    return "".join(result)


def _replacement_text(
    replacement: Any, matched: str, position: int, s: str, groups: Sequence[Any]
) -> str:
    if is_callable(replacement):
        return to_string(
            call_function(replacement, UNDEFINED, [matched, *groups, position, s])
        )
    return _expand_replacement(to_string(replacement), matched, position, s, groups)


def _regexp_replace(s: str, regexp: RegExp, replacement: Any, replace_all: bool) -> str:
    matches = list(regexp.pattern.finditer(s)) if replace_all else []
    if not replace_all:
        first = regexp.pattern.search(s)
        matches = [first] if first is not None else []
    if regexp.is_global:
        regexp.last_index = 0
    result: List[str] = []
    last_end = 0
    for match in matches:
        groups = [UNDEFINED if g is None else g for g in match.groups()]
        result.append(s[last_end : match.start()])
        result.append(_replacement_text(replacement, match.group(0), match.start(), s, groups))
        last_end = match.end()
    result.append(s[last_end:])
    return "".join(result)


def _string_positions(s: str, needle: str, replace_all: bool) -> List[int]:
    positions: List[int] = []
    start = 0
    while True:
        found = s.find(needle, start)
        if found == -1:
            return positions
        positions.append(found)
        if not replace_all:
            return positions
        start = found + max(len(needle), 1)
        if start > len(s):
            return positions


def _replace(this: Any, method: str, pattern: Any, replacement: Any, replace_all: bool) -> str:
    s = _this_string(this, method)
    if isinstance(pattern, RegExp):
        if method == "replaceAll" and not pattern.is_global:
            raise ExprTypeError("replaceAll must be called with a global RegExp")
        return _regexp_replace(s, pattern, replacement, replace_all or pattern.is_global)
    needle = to_string(pattern)
    result: List[str] = []
    last_end = 0
    for position in _string_positions(s, needle, replace_all):
        result.append(s[last_end:position])
        result.append(_replacement_text(replacement, needle, position, s, []))
        last_end = position + len(needle)
    result.append(s[last_end:])
    return "".join(result)


@_define(STRING_PROTOTYPE, "replace", 2)
def _string_replace(
    this: Any, pattern: Any = UNDEFINED, replacement: Any = UNDEFINED, *_: Any
) -> str:
    return _replace(this, "replace", pattern, replacement, replace_all=False)


@_define(STRING_PROTOTYPE, "replaceAll", 2)
def _string_replace_all(
    this: Any, pattern: Any = UNDEFINED, replacement: Any = UNDEFINED, *_: Any
) -> str:
    return _replace(this, "replaceAll", pattern, replacement, replace_all=True)


def _as_regexp(value: Any) -> RegExp:
    if isinstance(value, RegExp):
        return value
    return RegExp("(?:)" if value is UNDEFINED else to_string(value))


@_define(STRING_PROTOTYPE, "match", 1)
def _string_match(this: Any, pattern: Any = UNDEFINED, *_: Any) -> Any:
    s = _this_string(this, "match")
    regexp = _as_regexp(pattern)
    if not regexp.is_global:
        return regexp_exec(regexp, s)
    regexp.last_index = 0
    found = [match.group(0) for match in regexp.pattern.finditer(s)]
    return found or None


@_define(STRING_PROTOTYPE, "search", 1)
def _string_search(this: Any, pattern: Any = UNDEFINED, *_: Any) -> int:
    s = _this_string(this, "search")
    match = _as_regexp(pattern).pattern.search(s)
    return -1 if match is None else match.start()


@_define(STRING_PROTOTYPE, "toString")
def _string_to_string(this: Any, *_: Any) -> str:
    if not isinstance(this, str):
        raise ExprTypeError("String.prototype.toString requires that 'this' be a String")
    return this


STRING_PROTOTYPE["valueOf"] = NativeFunction("valueOf", _string_to_string)


# ============================================================
# Array Prototype
# ============================================================


@_define(ARRAY_PROTOTYPE, "at", 1)
def _array_at(this: Any, index: Any = UNDEFINED, *_: Any) -> Any:
    array = _this_array(this, "at")
    position = to_integer(index)
    if position < 0:
        position += len(array)
    if position < 0 or position >= len(array):
        return UNDEFINED
    return array[position]


@_define(ARRAY_PROTOTYPE, "concat", 1)
def _array_concat(this: Any, *items: Any) -> List[Any]:
    result = list(_this_array(this, "concat"))
    for item in items:
        if is_array(item):
            result.extend(item)
        else:
            result.append(item)
    return result


@_define(ARRAY_PROTOTYPE, "every", 1)
def _array_every(this: Any, callback: Any = UNDEFINED, this_arg: Any = UNDEFINED, *_: Any) -> bool:
    array = _this_array(this, "every")
    fn = _callback(callback)
    index = 0
    while index < len(array):
        if not to_boolean(call_function(fn, this_arg, [array[index], index, array])):
            return False
        index += 1
    return True


@_define(ARRAY_PROTOTYPE, "some", 1)
def _array_some(this: Any, callback: Any = UNDEFINED, this_arg: Any = UNDEFINED, *_: Any) -> bool:
    array = _this_array(this, "some")
    fn = _callback(callback)
    index = 0
    while index < len(array):
        if to_boolean(call_function(fn, this_arg, [array[index], index, array])):
            return True
        index += 1
    return False


@_define(ARRAY_PROTOTYPE, "filter", 1)
def _array_filter(
    this: Any, callback: Any = UNDEFINED, this_arg: Any = UNDEFINED, *_: Any
) -> List[Any]:
    array = _this_array(this, "filter")
    fn = _callback(callback)
    result = []
    length = len(array)
    for index in range(length):
        if index >= len(array):
            break
        item = array[index]
        if to_boolean(call_function(fn, this_arg, [item, index, array])):
            result.append(item)
    return result


@_define(ARRAY_PROTOTYPE, "find", 1)
def _array_find(this: Any, callback: Any = UNDEFINED, this_arg: Any = UNDEFINED, *_: Any) -> Any:
    array = _this_array(this, "find")
    fn = _callback(callback)
    for index in range(len(array)):
        item = array[index] if index < len(array) else UNDEFINED
        if to_boolean(call_function(fn, this_arg, [item, index, array])):
            return item
    return UNDEFINED


@_define(ARRAY_PROTOTYPE, "findIndex", 1)
def _array_find_index(
    this: Any, callback: Any = UNDEFINED, this_arg: Any = UNDEFINED, *_: Any
) -> int:
    array = _this_array(this, "findIndex")
    fn = _callback(callback)
    for index in range(len(array)):
        item = array[index] if index < len(array) else UNDEFINED
        if to_boolean(call_function(fn, this_arg, [item, index, array])):
            return index
    return -1


def _flatten(items: Sequence[Any], depth: int) -> List[Any]:
    result: List[Any] = []
    for item in items:
        if is_array(item) and depth > 0:
            result.extend(_flatten(item, depth - 1))
        else:
            result.append(item)
    return result


@_define(ARRAY_PROTOTYPE, "flat")
def _array_flat(this: Any, depth: Any = UNDEFINED, *_: Any) -> List[Any]:
    array = _this_array(this, "flat")
    return _flatten(array, 1 if depth is UNDEFINED else to_integer(depth))


@_define(ARRAY_PROTOTYPE, "flatMap", 1)
def _array_flat_map(
    this: Any, callback: Any = UNDEFINED, this_arg: Any = UNDEFINED, *_: Any
) -> List[Any]:
    mapped = _array_map(this, callback, this_arg)
    return _flatten(mapped, 1)


@_define(ARRAY_PROTOTYPE, "forEach", 1)
def _array_for_each(
    this: Any, callback: Any = UNDEFINED, this_arg: Any = UNDEFINED, *_: Any
) -> Any:
    array = _this_array(this, "forEach")
    fn = _callback(callback)
    for index in range(len(array)):
        if index >= len(array):
            break
        call_function(fn, this_arg, [array[index], index, array])
    return UNDEFINED


@_define(ARRAY_PROTOTYPE, "includes", 1)
def _array_includes(
    this: Any, search: Any = UNDEFINED, from_index: Any = UNDEFINED, *_: Any
) -> bool:
    array = _this_array(this, "includes")
    start = _relative_index(from_index, len(array), 0)
    return any(same_value_zero(item, search) for item in array[start:])


@_define(ARRAY_PROTOTYPE, "indexOf", 1)
def _array_index_of(
    this: Any, search: Any = UNDEFINED, from_index: Any = UNDEFINED, *_: Any
) -> int:
    array = _this_array(this, "indexOf")
    start = _relative_index(from_index, len(array), 0)
    for index in range(start, len(array)):
        if strict_equals(array[index], search):
            return index
    return -1


@_define(ARRAY_PROTOTYPE, "lastIndexOf", 1)
def _array_last_index_of(
    this: Any, search: Any = UNDEFINED, from_index: Any = UNDEFINED, *_: Any
) -> int:
    array = _this_array(this, "lastIndexOf")
    if from_index is UNDEFINED:
        start = len(array) - 1
    else:
        start = to_integer(from_index)
        start = min(start, len(array) - 1) if start >= 0 else len(array) + start
    for index in range(start, -1, -1):
        if strict_equals(array[index], search):
            return index
    return -1


@_define(ARRAY_PROTOTYPE, "join", 1)
def _array_join(this: Any, separator: Any = UNDEFINED, *_: Any) -> str:
    array = _this_array(this, "join")
    sep = "," if separator is UNDEFINED else to_string(separator)
    return sep.join(
        "" if item is UNDEFINED or item is None else to_string(item) for item in array
    )


@_define(ARRAY_PROTOTYPE, "map", 1)
def _array_map(
    this: Any, callback: Any = UNDEFINED, this_arg: Any = UNDEFINED, *_: Any
) -> List[Any]:
    array = _this_array(this, "map")
    fn = _callback(callback)
    result = []
    for index in range(len(array)):
        item = array[index] if index < len(array) else UNDEFINED
        result.append(call_function(fn, this_arg, [item, index, array]))
    return result


@_define(ARRAY_PROTOTYPE, "pop")
def _array_pop(this: Any, *_: Any) -> Any:
    array = _mutable_array(this, "pop")
    return array.pop() if array else UNDEFINED


@_define(ARRAY_PROTOTYPE, "push", 1)
def _array_push(this: Any, *items: Any) -> int:
    array = _mutable_array(this, "push")
    array.extend(items)
    return len(array)


@_define(ARRAY_PROTOTYPE, "shift")
def _array_shift(this: Any, *_: Any) -> Any:
    array = _mutable_array(this, "shift")
    return array.pop(0) if array else UNDEFINED


@_define(ARRAY_PROTOTYPE, "unshift", 1)
def _array_unshift(this: Any, *items: Any) -> int:
    array = _mutable_array(this, "unshift")
    array[0:0] = items
    return len(array)


@_define(ARRAY_PROTOTYPE, "reduce", 1)
def _array_reduce(this: Any, callback: Any = UNDEFINED, *rest: Any) -> Any:
    array = _this_array(this, "reduce")
    fn = _callback(callback)
    index = 0
    if rest:
        accumulator = rest[0]
    elif array:
        accumulator = array[0]
        index = 1
    else:
        raise ExprTypeError("Reduce of empty array with no initial value")
    while index < len(array):
        accumulator = call_function(fn, UNDEFINED, [accumulator, array[index], index, array])
        index += 1
    return accumulator


@_define(ARRAY_PROTOTYPE, "reverse")
def _array_reverse(this: Any, *_: Any) -> List[Any]:
    array = _mutable_array(this, "reverse")
    array.reverse()
    return array


@_define(ARRAY_PROTOTYPE, "slice", 2)
def _array_slice(this: Any, start: Any = UNDEFINED, end: Any = UNDEFINED, *_: Any) -> List[Any]:
    array = _this_array(this, "slice")
    begin = _relative_index(start, len(array), 0)
    finish = _relative_index(end, len(array), len(array))
    return list(array[begin:finish])


@_define(ARRAY_PROTOTYPE, "sort", 1)
def _array_sort(this: Any, compare: Any = UNDEFINED, *_: Any) -> List[Any]:
    if compare is not UNDEFINED and not is_callable(compare):
        raise ExprTypeError(
            "The comparison function must be either a function or undefined"
        )
    array = _mutable_array(this, "sort")
    defined = [item for item in array if item is not UNDEFINED]
    missing = [item for item in array if item is UNDEFINED]

    if compare is UNDEFINED:
        defined.sort(key=to_string)
    else:

        def _compare(left: Any, right: Any) -> int:
            order = to_number(call_function(compare, UNDEFINED, [left, right]))
            if order < 0:
                return -1
            if order > 0:
                return 1
            return 0

        defined.sort(key=functools.cmp_to_key(_compare))

    array[:] = defined + missing
    return array


@_define(ARRAY_PROTOTYPE, "toString")
def _array_to_string(this: Any, *_: Any) -> str:
    return _array_join(this)


# ============================================================
# RegExp Prototype
# ============================================================


def regexp_exec(regexp: RegExp, s: str) -> Optional[List[Any]]:
    """Runs a regular expression, honouring lastIndex for g and y flags."""
    tracks_position = regexp.is_global or regexp.is_sticky
    start = regexp.last_index if tracks_position else 0
    if start > len(s):
        regexp.last_index = 0
        return None
    if regexp.is_sticky:
        match = regexp.pattern.match(s, start)
    else:
        match = regexp.pattern.search(s, start)
    if match is None:
        if tracks_position:
            regexp.last_index = 0
        return None
    if tracks_position:
        regexp.last_index = match.end()
    return [match.group(0), *(UNDEFINED if g is None else g for g in match.groups())]


@_define(REGEXP_PROTOTYPE, "exec", 1)
def _regexp_exec(this: Any, value: Any = UNDEFINED, *_: Any) -> Optional[List[Any]]:
    return regexp_exec(_this_regexp(this, "exec"), to_string(value))


@_define(REGEXP_PROTOTYPE, "test", 1)
def _regexp_test(this: Any, value: Any = UNDEFINED, *_: Any) -> bool:
    return regexp_exec(_this_regexp(this, "test"), to_string(value)) is not None


@_define(REGEXP_PROTOTYPE, "toString")
def _regexp_to_string(this: Any, *_: Any) -> str:
    regexp = _this_regexp(this, "toString")
    return f"/{regexp.source}/{regexp.flags}"


# Read-only data properties exposed by regular expressions.
REGEXP_ACCESSORS: Dict[str, Callable[[RegExp], Any]] = {
    "source": lambda regexp: regexp.source,
    "flags": lambda regexp: regexp.flags,
    "global": lambda regexp: regexp.is_global,
    "ignoreCase": lambda regexp: "i" in regexp.flags,
    "multiline": lambda regexp: "m" in regexp.flags,
    "sticky": lambda regexp: regexp.is_sticky,
    "lastIndex": lambda regexp: regexp.last_index,
}
