"""
Spread expansion and template literal rendering.
"""

from collections.abc import Iterable, Mapping
from typing import Any, Callable, List, Optional, Sequence

from .ast import AstNode, SpreadElement, TemplateLiteral
from .errors import TypeError as ExprTypeError
from .errors import UnsupportedConstruct
from .values import UNDEFINED, describe, to_string

Evaluate = Callable[[AstNode], Any]


def iterate_spread(value: Any) -> List[Any]:
    """Returns the items a spread operand contributes, in order."""
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, str):
        return list(value)
    if isinstance(value, Iterable) and not isinstance(value, (Mapping, bytes)):
        return list(value)
    raise ExprTypeError(f"{describe(value)} is not iterable")


def expand_elements(
    elements: Sequence[Optional[AstNode]], evaluate: Evaluate
) -> List[Any]:
    """
    Evaluates array elements or call arguments left to right.

    Spread elements are inlined where they appear; holes read as UNDEFINED.
    """
    values: List[Any] = []
    for element in elements:
        if element is None:
            values.append(UNDEFINED)
        elif isinstance(element, SpreadElement):
            values.extend(iterate_spread(evaluate(element.argument)))
        else:
            values.append(evaluate(element))
    return values


def render_template(node: TemplateLiteral, evaluate: Evaluate) -> str:
    if len(node.quasis) != len(node.expressions) + 1:
        raise UnsupportedConstruct(
            "template literal must have one more text segment than expressions.",
            node.position,
        )
    parts: List[str] = []
    for index, quasi in enumerate(node.quasis):
        parts.append(quasi.cooked if quasi.cooked is not None else quasi.raw)
        if index < len(node.expressions):
            parts.append(to_string(evaluate(node.expressions[index])))
    return "".join(parts)
