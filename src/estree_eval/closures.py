"""
Callables built from arrow-function nodes.
"""

from typing import Any, Callable, List, Mapping, Optional, Sequence

from .ast import ArrowFunctionExpression, AstNode, Identifier, RestElement
from .errors import UnsupportedConstruct
from .scope import Scope
from .values import UNDEFINED, JSFunction

Evaluate = Callable[[AstNode, Mapping[str, Any]], Any]


class Closure(JSFunction):
    """
    An arrow function paired with the scope it was defined in.

    Calls evaluate the body in a fresh frame whose parent is the captured
    scope, never the caller's. The receiver is ignored; arrow functions do
    not bind one.
    """

    def __init__(
        self,
        params: Sequence[str],
        rest: Optional[str],
        body: AstNode,
        scope: Mapping[str, Any],
        evaluate: Evaluate,
        name: str = "",
    ):
        self.params = list(params)
        self.rest = rest
        self.body = body
        self.scope = scope
        self.name = name
        self._evaluate = evaluate

    @property
    def length(self) -> int:
        return len(self.params)

    def call(self, this: Any, args: Sequence[Any]) -> Any:
        frame = Scope(parent=self.scope)
        for index, name in enumerate(self.params):
            frame[name] = args[index] if index < len(args) else UNDEFINED
        if self.rest is not None:
            frame[self.rest] = list(args[len(self.params):])
        return self._evaluate(self.body, frame)

    def __repr__(self) -> str:
        signature = list(self.params)
        if self.rest is not None:
            signature.append(f"...{self.rest}")
        return f"<closure ({', '.join(signature)}) => ...>"


def create_closure(
    node: ArrowFunctionExpression,
    scope: Mapping[str, Any],
    evaluate: Evaluate,
) -> Closure:
    """
    Validates an arrow-function node and captures the defining scope.

    Raises UnsupportedConstruct before constructing anything when the node
    is async, a generator, has a block body, or declares a parameter other
    than a plain name or a single trailing rest name.
    """
    if node.is_async:
        raise UnsupportedConstruct("async functions are not supported.", node.position)
    if node.generator:
        raise UnsupportedConstruct("generator functions are not supported.", node.position)
    if not node.expression:
        raise UnsupportedConstruct(
            "function body must be a single expression.", node.position
        )

    params: List[str] = []
    rest: Optional[str] = None
    for index, param in enumerate(node.params):
        if isinstance(param, Identifier):
            params.append(param.name)
        elif isinstance(param, RestElement):
            if index != len(node.params) - 1:
                raise UnsupportedConstruct(
                    "rest parameter must be last formal parameter.", param.position
                )
            if not isinstance(param.argument, Identifier):
                raise UnsupportedConstruct(
                    f'"{param.argument.type}" parameter expressions are not supported.',
                    param.position,
                )
            rest = param.argument.name
        else:
            raise UnsupportedConstruct(
                f'"{param.type}" parameter expressions are not supported.',
                param.position,
            )

    return Closure(params, rest, node.body, scope, evaluate)
