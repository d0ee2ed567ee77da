"""
Expression evaluator.

Evaluates an ESTree-shaped AST against a scope and returns a value.

Semantics:
- Identifiers resolve through the scope chain; unresolved names read as
  UNDEFINED.
- Assignments and deletes of plain names only touch the frame passed to
  the current evaluate call.
- Method calls bind the object they were looked up on as the receiver.
- Runtime type and range errors raised by operators, property access or
  callees propagate as raised.
"""

import logging
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .ast import (
    ArrayExpression,
    ArrayPattern,
    ArrowFunctionExpression,
    AssignmentExpression,
    AstNode,
    BinaryExpression,
    CallExpression,
    ConditionalExpression,
    Identifier,
    Literal,
    LogicalExpression,
    MemberExpression,
    Super,
    TemplateLiteral,
    UnaryExpression,
)
from .closures import create_closure
from .errors import (
    ExpressionError,
    InvalidOperator,
    UnsupportedConstruct,
    UnsupportedNodeKind,
)
from .errors import TypeError as ExprTypeError
from .expansion import expand_elements, render_template
from .globals import create_global_scope
from .limits import ExpressionLimits
from .members import delete_property, get_property, set_property
from .operators import BINARY_OPERATORS, COMPOUND_ASSIGNMENT, UNARY_OPERATORS, apply_binary
from .parser import parse
from .scope import delete_binding, lookup
from .values import UNDEFINED, RegExp, call_function, to_boolean, type_of

logger = logging.getLogger("estree_eval.evaluator")

ScopeLike = Mapping[str, Any]

RECOGNIZED_NODE_KINDS = frozenset(
    {
        "ArrayExpression",
        "ArrowFunctionExpression",
        "AssignmentExpression",
        "BinaryExpression",
        "CallExpression",
        "ConditionalExpression",
        "Identifier",
        "Literal",
        "LogicalExpression",
        "MemberExpression",
        "TemplateLiteral",
        "UnaryExpression",
    }
)


@dataclass
class EvaluationResult:
    """Result of expression evaluation."""

    value: Any
    """The evaluated value (UNDEFINED when evaluation failed)."""

    success: bool
    """Whether evaluation succeeded."""

    error: Optional[str] = None
    """Error message if evaluation failed."""


class Evaluator:
    """
    Evaluates AST nodes against a scope.

    The evaluator keeps no state between calls apart from the optional
    source text, which is attached to errors so they can point at the
    offending position.
    """

    def __init__(self, source: Optional[str] = None):
        self._source = source
        self._handlers: Dict[str, Callable[[Any, ScopeLike], Any]] = {
            "ArrayExpression": self._evaluate_array,
            "ArrowFunctionExpression": self._evaluate_arrow_function,
            "AssignmentExpression": self._evaluate_assignment,
            "BinaryExpression": self._evaluate_binary,
            "CallExpression": self._evaluate_call,
            "ConditionalExpression": self._evaluate_conditional,
            "Identifier": self._evaluate_identifier,
            "Literal": self._evaluate_literal,
            "LogicalExpression": self._evaluate_logical,
            "MemberExpression": self._evaluate_member,
            "TemplateLiteral": self._evaluate_template,
            "UnaryExpression": self._evaluate_unary,
        }

    def evaluate(self, node: AstNode, scope: ScopeLike) -> Any:
        """Evaluates an AST node and returns the value."""
        kind = getattr(node, "type", type(node).__name__)
        handler = self._handlers.get(kind)
        if handler is None:
            raise UnsupportedNodeKind(kind, getattr(node, "position", None), self._source)
        try:
            return handler(node, scope)
        except ExpressionError as error:
            # The innermost failing node provides the position.
            if error.position is None:
                error.position = node.position
            if error.expression is None:
                error.expression = self._source
            raise

    # ============================================================
    # Leaves
    # ============================================================

    def _evaluate_literal(self, node: Literal, scope: ScopeLike) -> Any:
        value = node.value
        if isinstance(value, RegExp):
            # Each evaluation of a regex literal yields a fresh object.
            return RegExp(value.source, value.flags)
        return value

    def _evaluate_identifier(self, node: Identifier, scope: ScopeLike) -> Any:
        return lookup(scope, node.name)

    def _evaluate_array(self, node: ArrayExpression, scope: ScopeLike) -> Any:
        return expand_elements(node.elements, lambda element: self.evaluate(element, scope))

    def _evaluate_template(self, node: TemplateLiteral, scope: ScopeLike) -> str:
        return render_template(node, lambda expression: self.evaluate(expression, scope))

    def _evaluate_arrow_function(self, node: ArrowFunctionExpression, scope: ScopeLike) -> Any:
        return create_closure(node, scope, self.evaluate)

    # ============================================================
    # Operators
    # ============================================================

    def _evaluate_conditional(self, node: ConditionalExpression, scope: ScopeLike) -> Any:
        if to_boolean(self.evaluate(node.test, scope)):
            return self.evaluate(node.consequent, scope)
        return self.evaluate(node.alternate, scope)

    def _evaluate_logical(self, node: LogicalExpression, scope: ScopeLike) -> Any:
        if node.operator not in ("&&", "||"):
            raise InvalidOperator(node.operator, "logical", node.position, self._source)
        left = self.evaluate(node.left, scope)
        if node.operator == "&&":
            return self.evaluate(node.right, scope) if to_boolean(left) else left
        return left if to_boolean(left) else self.evaluate(node.right, scope)

    def _evaluate_binary(self, node: BinaryExpression, scope: ScopeLike) -> Any:
        operator = BINARY_OPERATORS.get(node.operator)
        if operator is None:
            raise InvalidOperator(node.operator, "binary", node.position, self._source)
        left = self.evaluate(node.left, scope)
        right = self.evaluate(node.right, scope)
        return operator(left, right)

    def _evaluate_unary(self, node: UnaryExpression, scope: ScopeLike) -> Any:
        if not node.prefix:
            raise UnsupportedConstruct(
                f'UnaryExpression with prefix: "false" and operator "{node.operator}" '
                "not supported.",
                node.position,
                self._source,
            )
        if node.operator == "delete":
            return self._evaluate_delete(node, scope)
        if node.operator == "typeof":
            return type_of(self.evaluate(node.argument, scope))

        if node.operator == "!":
            return not to_boolean(self.evaluate(node.argument, scope))
        if node.operator == "void":
            self.evaluate(node.argument, scope)
            return UNDEFINED

        operator = UNARY_OPERATORS.get(node.operator)
        if operator is None:
            raise InvalidOperator(node.operator, "unary", node.position, self._source)
        return operator(self.evaluate(node.argument, scope))

    def _evaluate_delete(self, node: UnaryExpression, scope: ScopeLike) -> bool:
        target = node.argument
        if isinstance(target, Identifier):
            return delete_binding(scope, target.name)
        if isinstance(target, MemberExpression):
            if isinstance(target.object, Super):
                raise UnsupportedConstruct(
                    "delete not supported with super expressions.",
                    target.position,
                    self._source,
                )
            obj = self.evaluate(target.object, scope)
            return delete_property(obj, self._member_key(target, scope))
        raise UnsupportedConstruct(
            f"Unsupported delete expression argument: {target.type}.",
            target.position,
            self._source,
        )

    # ============================================================
    # Assignment
    # ============================================================

    def _evaluate_assignment(self, node: AssignmentExpression, scope: ScopeLike) -> Any:
        operator = node.operator
        if operator != "=" and operator not in COMPOUND_ASSIGNMENT:
            raise InvalidOperator(operator, "assignment", node.position, self._source)

        target = node.left
        if isinstance(target, Identifier):
            if operator == "=":
                value = self.evaluate(node.right, scope)
            else:
                current = lookup(scope, target.name)
                value = self._apply_compound(operator, current, node.right, scope)
            if not isinstance(scope, MutableMapping):
                raise ExprTypeError(
                    f"Cannot assign to '{target.name}' in a read-only scope",
                    target.position,
                    self._source,
                )
            scope[target.name] = value
            return value

        if isinstance(target, MemberExpression):
            if isinstance(target.object, Super):
                raise UnsupportedConstruct(
                    "Cannot assign Super", target.position, self._source
                )
            obj = self.evaluate(target.object, scope)
            key = self._member_key(target, scope)
            if operator == "=":
                value = self.evaluate(node.right, scope)
            else:
                current = get_property(obj, key)
                value = self._apply_compound(operator, current, node.right, scope)
            return set_property(obj, key, value)

        if isinstance(target, ArrayPattern):
            raise UnsupportedConstruct(
                "ArrayPattern assignment is not supported.", target.position, self._source
            )
        raise UnsupportedConstruct(
            f"{target.type} assignment is not supported.", target.position, self._source
        )

    def _apply_compound(
        self, operator: str, current: Any, right: AstNode, scope: ScopeLike
    ) -> Any:
        value = self.evaluate(right, scope)
        return apply_binary(COMPOUND_ASSIGNMENT[operator], current, value)

    # ============================================================
    # Members and Calls
    # ============================================================

    def _member_key(self, node: MemberExpression, scope: ScopeLike) -> Any:
        if node.computed:
            return self.evaluate(node.property, scope)
        if isinstance(node.property, Identifier):
            return node.property.name
        raise UnsupportedConstruct(
            f"{node.property.type} member names are not supported.",
            node.property.position,
            self._source,
        )

    def _evaluate_member(self, node: MemberExpression, scope: ScopeLike) -> Any:
        if isinstance(node.object, Super):
            raise UnsupportedConstruct(
                "Cannot read properties of super", node.object.position, self._source
            )
        obj = self.evaluate(node.object, scope)
        return get_property(obj, self._member_key(node, scope))

    def _evaluate_call(self, node: CallExpression, scope: ScopeLike) -> Any:
        callee = node.callee
        if isinstance(callee, Super):
            raise UnsupportedConstruct("Cannot call Super", callee.position, self._source)

        if isinstance(callee, MemberExpression):
            if isinstance(callee.object, Super):
                raise UnsupportedConstruct(
                    "Cannot call Super", callee.object.position, self._source
                )
            receiver = self.evaluate(callee.object, scope)
            fn = get_property(receiver, self._member_key(callee, scope))
        else:
            receiver = UNDEFINED
            fn = self.evaluate(callee, scope)

        args = expand_elements(node.arguments, lambda argument: self.evaluate(argument, scope))
        return call_function(fn, receiver, args, _describe_node(callee))


def _describe_node(node: AstNode) -> str:
    """Renders a callee for "is not a function" messages."""
    if isinstance(node, Identifier):
        return node.name
    if isinstance(node, MemberExpression):
        if not node.computed and isinstance(node.property, Identifier):
            return f"{_describe_node(node.object)}.{node.property.name}"
        return f"{_describe_node(node.object)}[...]"
    if isinstance(node, CallExpression):
        return f"{_describe_node(node.callee)}(...)"
    if isinstance(node, Literal):
        return node.raw if node.raw is not None else repr(node.value)
    return node.type


def evaluate(node: AstNode, scope: ScopeLike, source: Optional[str] = None) -> Any:
    """
    Evaluates an AST against a scope and returns the value.

    Args:
        node: The root node to evaluate
        scope: The variable environment (a Scope or any mapping)
        source: Optional source text used to annotate errors

    Returns:
        The resulting value

    Raises:
        ExpressionError: subclasses for unsupported nodes, constructs and
            operators, and for runtime type and range errors
    """
    return Evaluator(source).evaluate(node, scope)


def try_evaluate(
    node: AstNode, scope: ScopeLike, source: Optional[str] = None
) -> EvaluationResult:
    """
    Evaluates an AST and reports failure in the result instead of raising.

    Args:
        node: The root node to evaluate
        scope: The variable environment
        source: Optional source text used to annotate errors

    Returns:
        The evaluation result with value and success status
    """
    try:
        value = Evaluator(source).evaluate(node, scope)
        return EvaluationResult(value=value, success=True)
    except Exception as error:
        logger.debug(
            "evaluation_failed",
            extra={
                "node_type": getattr(node, "type", None),
                "error_type": type(error).__name__,
                "error": str(error),
            },
        )
        return EvaluationResult(value=UNDEFINED, success=False, error=str(error))


def evaluate_expression(
    source: str,
    scope: Optional[ScopeLike] = None,
    limits: Optional[ExpressionLimits] = None,
) -> Any:
    """
    Parses expression text with the bundled parser and evaluates it.

    When no scope is given the expression runs against a fresh global scope.
    """
    node = parse(source, limits)
    if scope is None:
        scope = create_global_scope()
    return Evaluator(source).evaluate(node, scope)
