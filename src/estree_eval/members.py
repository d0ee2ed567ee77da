"""
Property access on runtime values.

Reads resolve own properties first and then fall back to the built-in
prototype table for the value's family. Writes and deletes only ever touch
the target container itself.
"""

from collections.abc import Mapping, MutableMapping
from typing import Any, Optional

from .errors import RangeError
from .errors import TypeError as ExprTypeError
from .prototypes import (
    ARRAY_PROTOTYPE,
    BOOLEAN_PROTOTYPE,
    FUNCTION_PROTOTYPE,
    NUMBER_PROTOTYPE,
    OBJECT_PROTOTYPE,
    REGEXP_ACCESSORS,
    REGEXP_PROTOTYPE,
    STRING_PROTOTYPE,
    NativeFunction,
)
from .values import (
    MAX_SAFE_INTEGER,
    UNDEFINED,
    RegExp,
    describe,
    is_array,
    is_callable,
    is_number,
    is_object,
    to_integer,
    to_number,
    to_property_key,
    to_string,
)


def array_index(name: str) -> Optional[int]:
    """Returns the index a canonical numeric key names, or None."""
    if name.isdigit() and name.isascii() and (name == "0" or not name.startswith("0")):
        return int(name)
    return None


def _function_property(fn: Any, name: str) -> Any:
    if isinstance(fn, NativeFunction) and name in fn.properties:
        return fn.properties[name]
    if name == "name":
        return getattr(fn, "name", None) or getattr(fn, "__name__", "")
    if name == "length":
        return getattr(fn, "length", 0)
    if name in FUNCTION_PROTOTYPE:
        return FUNCTION_PROTOTYPE[name]
    return OBJECT_PROTOTYPE.get(name, UNDEFINED)


def _host_attribute(obj: Any, name: str) -> Any:
    if name.startswith("__") and name.endswith("__"):
        return UNDEFINED
    return getattr(obj, name, UNDEFINED)


def get_property(obj: Any, key: Any) -> Any:
    """Reads `obj[key]`. Missing properties read as UNDEFINED."""
    if obj is UNDEFINED or obj is None:
        raise ExprTypeError(
            f"Cannot read properties of {to_string(obj)} (reading '{to_property_key(key)}')"
        )
    name = to_property_key(key)

    if isinstance(obj, Mapping):
        if name in obj:
            return obj[name]
        if is_number(key) and key in obj:
            return obj[key]
        return OBJECT_PROTOTYPE.get(name, UNDEFINED)

    if isinstance(obj, str):
        index = array_index(name)
        if index is not None:
            return obj[index] if index < len(obj) else UNDEFINED
        if name == "length":
            return len(obj)
        return STRING_PROTOTYPE.get(name, OBJECT_PROTOTYPE.get(name, UNDEFINED))

    if is_array(obj):
        index = array_index(name)
        if index is not None:
            return obj[index] if index < len(obj) else UNDEFINED
        if name == "length":
            return len(obj)
        return ARRAY_PROTOTYPE.get(name, OBJECT_PROTOTYPE.get(name, UNDEFINED))

    if isinstance(obj, bool):
        return BOOLEAN_PROTOTYPE.get(name, OBJECT_PROTOTYPE.get(name, UNDEFINED))

    if is_number(obj):
        return NUMBER_PROTOTYPE.get(name, OBJECT_PROTOTYPE.get(name, UNDEFINED))

    if isinstance(obj, RegExp):
        if name in REGEXP_ACCESSORS:
            return REGEXP_ACCESSORS[name](obj)
        return REGEXP_PROTOTYPE.get(name, OBJECT_PROTOTYPE.get(name, UNDEFINED))

    if is_callable(obj):
        return _function_property(obj, name)

    value = _host_attribute(obj, name)
    if value is UNDEFINED:
        return OBJECT_PROTOTYPE.get(name, UNDEFINED)
    return value


def _set_array_length(array: list, value: Any) -> None:
    number = to_number(value)
    length = to_integer(number)
    if length != number or length < 0 or length > 2**32 - 1:
        raise RangeError("Invalid array length")
    if length < len(array):
        del array[length:]
    else:
        array.extend([UNDEFINED] * (length - len(array)))


def set_property(obj: Any, key: Any, value: Any) -> Any:
    """Stores `obj[key] = value` and returns the stored value."""
    if obj is UNDEFINED or obj is None:
        raise ExprTypeError(
            f"Cannot set properties of {to_string(obj)} (setting '{to_property_key(key)}')"
        )
    name = to_property_key(key)

    if isinstance(obj, MutableMapping):
        obj[name] = value
        return value

    if isinstance(obj, list):
        index = array_index(name)
        if index is not None:
            if index > MAX_SAFE_INTEGER:
                raise RangeError("Invalid array length")
            if index >= len(obj):
                obj.extend([UNDEFINED] * (index - len(obj) + 1))
            obj[index] = value
            return value
        if name == "length":
            _set_array_length(obj, value)
            return value
        raise ExprTypeError(f"Cannot create property '{name}' on array")

    if isinstance(obj, RegExp) and name == "lastIndex":
        obj.last_index = to_integer(value)
        return value

    if not is_object(obj) or isinstance(obj, (Mapping, tuple, RegExp)) or is_callable(obj):
        raise ExprTypeError(
            f"Cannot create property '{name}' on {describe(obj)}"
        )

    if name.startswith("__") and name.endswith("__"):
        raise ExprTypeError(f"Cannot assign to read only property '{name}'")
    setattr(obj, name, value)
    return value


def delete_property(obj: Any, key: Any) -> bool:
    """
    Removes `obj[key]`.

    Returns True when the container permits the deletion, including when the
    key was never there, and False when it refuses (string characters, array
    length, read-only containers).
    """
    if obj is UNDEFINED or obj is None:
        raise ExprTypeError(
            "Cannot convert undefined or null to object"
        )
    name = to_property_key(key)

    if isinstance(obj, MutableMapping):
        if name in obj:
            del obj[name]
        return True

    if isinstance(obj, Mapping):
        return name not in obj

    if isinstance(obj, str):
        return name != "length" and not (
            array_index(name) is not None and array_index(name) < len(obj)
        )

    if is_array(obj):
        index = array_index(name)
        if name == "length":
            return False
        if index is None or index >= len(obj):
            return True
        if not isinstance(obj, list):
            return False
        # Deleting leaves a hole, which reads as undefined.
        obj[index] = UNDEFINED
        return True

    if not is_object(obj) or isinstance(obj, RegExp) or is_callable(obj):
        return True

    if name.startswith("__") and name.endswith("__"):
        return False
    try:
        delattr(obj, name)
    except AttributeError:
        return not hasattr(obj, name)
    return True


def has_property(obj: Any, key: Any) -> bool:
    """Implements `key in obj`."""
    if not is_object(obj):
        raise ExprTypeError(
            f"Cannot use 'in' operator to search for '{to_property_key(key)}' in {to_string(obj)}"
        )
    return get_property(obj, key) is not UNDEFINED or _owns(obj, to_property_key(key))


def _owns(obj: Any, name: str) -> bool:
    if isinstance(obj, Mapping):
        return name in obj
    if is_array(obj):
        index = array_index(name)
        return index is not None and index < len(obj)
    return False
