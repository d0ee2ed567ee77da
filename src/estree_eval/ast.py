"""
Abstract Syntax Tree (AST) node types for the expression language.

Node kinds and field names follow ESTree, so trees produced by the bundled
parser and trees loaded from an external ESTree parser look the same to the
evaluator. Nodes are immutable; the evaluator never changes them and a tree
can be evaluated any number of times.
"""

from abc import ABC
from dataclasses import dataclass, fields
from typing import Any, Iterator, Literal as TypingLiteral, Mapping, Optional, Sequence, Union

# ============================================================
# Operator Types
# ============================================================

UnaryOperator = TypingLiteral["-", "+", "!", "~", "typeof", "void", "delete"]

BinaryOperator = TypingLiteral[
    "==",
    "!=",
    "===",
    "!==",
    "<",
    "<=",
    ">",
    ">=",
    "<<",
    ">>",
    ">>>",
    "+",
    "-",
    "*",
    "/",
    "%",
    "**",
    "|",
    "^",
    "&",
    "in",
    "instanceof",
]

LogicalOperator = TypingLiteral["||", "&&", "??"]

AssignmentOperator = TypingLiteral[
    "=",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "**=",
    "<<=",
    ">>=",
    ">>>=",
    "|=",
    "^=",
    "&=",
    "&&=",
    "||=",
    "??=",
]


# ============================================================
# AST Node Types
# ============================================================


@dataclass(frozen=True)
class AstNodeBase(ABC):
    """Base class for all AST nodes."""

    position: int
    """Position in source expression (for error reporting)."""


@dataclass(frozen=True)
class Identifier(AstNodeBase):
    """Identifier node."""

    name: str

    @property
    def type(self) -> TypingLiteral["Identifier"]:
        return "Identifier"


@dataclass(frozen=True)
class Literal(AstNodeBase):
    """Literal node (string, number, boolean, null or regular expression)."""

    value: Any
    raw: Optional[str] = None

    @property
    def type(self) -> TypingLiteral["Literal"]:
        return "Literal"


@dataclass(frozen=True)
class ArrayExpression(AstNodeBase):
    """Array literal node. A None element is a hole (`[1, , 2]`)."""

    elements: Sequence[Optional["AstNode"]]

    @property
    def type(self) -> TypingLiteral["ArrayExpression"]:
        return "ArrayExpression"


@dataclass(frozen=True)
class SpreadElement(AstNodeBase):
    """Spread element inside an array literal or an argument list."""

    argument: "AstNode"

    @property
    def type(self) -> TypingLiteral["SpreadElement"]:
        return "SpreadElement"


@dataclass(frozen=True)
class RestElement(AstNodeBase):
    """Trailing collector parameter (`...rest`)."""

    argument: "AstNode"

    @property
    def type(self) -> TypingLiteral["RestElement"]:
        return "RestElement"


@dataclass(frozen=True)
class AssignmentPattern(AstNodeBase):
    """Parameter with a default value (`a = 1`)."""

    left: "AstNode"
    right: "AstNode"

    @property
    def type(self) -> TypingLiteral["AssignmentPattern"]:
        return "AssignmentPattern"


@dataclass(frozen=True)
class ArrayPattern(AstNodeBase):
    """Array destructuring target (`[a, b] = x`)."""

    elements: Sequence[Optional["AstNode"]]

    @property
    def type(self) -> TypingLiteral["ArrayPattern"]:
        return "ArrayPattern"


@dataclass(frozen=True)
class ArrowFunctionExpression(AstNodeBase):
    """Arrow function node (`(a, ...rest) => body`)."""

    params: Sequence["AstNode"]
    body: "AstNode"
    expression: bool = True
    is_async: bool = False
    generator: bool = False

    @property
    def type(self) -> TypingLiteral["ArrowFunctionExpression"]:
        return "ArrowFunctionExpression"


@dataclass(frozen=True)
class AssignmentExpression(AstNodeBase):
    """Assignment node (`a = 1`, `a.b += 2`)."""

    operator: str
    left: "AstNode"
    right: "AstNode"

    @property
    def type(self) -> TypingLiteral["AssignmentExpression"]:
        return "AssignmentExpression"


@dataclass(frozen=True)
class BinaryExpression(AstNodeBase):
    """Binary operator node."""

    operator: str
    left: "AstNode"
    right: "AstNode"

    @property
    def type(self) -> TypingLiteral["BinaryExpression"]:
        return "BinaryExpression"


@dataclass(frozen=True)
class LogicalExpression(AstNodeBase):
    """Short-circuiting logical operator node."""

    operator: str
    left: "AstNode"
    right: "AstNode"

    @property
    def type(self) -> TypingLiteral["LogicalExpression"]:
        return "LogicalExpression"


@dataclass(frozen=True)
class UnaryExpression(AstNodeBase):
    """Unary operator node."""

    operator: str
    argument: "AstNode"
    prefix: bool = True

    @property
    def type(self) -> TypingLiteral["UnaryExpression"]:
        return "UnaryExpression"


@dataclass(frozen=True)
class UpdateExpression(AstNodeBase):
    """Increment/decrement node (`++a`, `a--`)."""

    operator: str
    argument: "AstNode"
    prefix: bool

    @property
    def type(self) -> TypingLiteral["UpdateExpression"]:
        return "UpdateExpression"


@dataclass(frozen=True)
class CallExpression(AstNodeBase):
    """Call node (`f(a, ...b)`, `obj.m(a)`)."""

    callee: "AstNode"
    arguments: Sequence["AstNode"]

    @property
    def type(self) -> TypingLiteral["CallExpression"]:
        return "CallExpression"


@dataclass(frozen=True)
class MemberExpression(AstNodeBase):
    """Member access node (`obj.property` or `obj[expression]`)."""

    object: "AstNode"
    property: "AstNode"
    computed: bool = False

    @property
    def type(self) -> TypingLiteral["MemberExpression"]:
        return "MemberExpression"


@dataclass(frozen=True)
class ConditionalExpression(AstNodeBase):
    """Ternary operator node (test ? consequent : alternate)."""

    test: "AstNode"
    consequent: "AstNode"
    alternate: "AstNode"

    @property
    def type(self) -> TypingLiteral["ConditionalExpression"]:
        return "ConditionalExpression"


@dataclass(frozen=True)
class TemplateElement(AstNodeBase):
    """Literal text segment of a template literal."""

    cooked: Optional[str]
    raw: str
    tail: bool = False

    @property
    def type(self) -> TypingLiteral["TemplateElement"]:
        return "TemplateElement"


@dataclass(frozen=True)
class TemplateLiteral(AstNodeBase):
    """Template literal node. `quasis` has one more entry than `expressions`."""

    quasis: Sequence[TemplateElement]
    expressions: Sequence["AstNode"]

    @property
    def type(self) -> TypingLiteral["TemplateLiteral"]:
        return "TemplateLiteral"


@dataclass(frozen=True)
class SequenceExpression(AstNodeBase):
    """Comma-separated expression list (`a, b`)."""

    expressions: Sequence["AstNode"]

    @property
    def type(self) -> TypingLiteral["SequenceExpression"]:
        return "SequenceExpression"


@dataclass(frozen=True)
class ThisExpression(AstNodeBase):
    """The `this` keyword."""

    @property
    def type(self) -> TypingLiteral["ThisExpression"]:
        return "ThisExpression"


@dataclass(frozen=True)
class Super(AstNodeBase):
    """The `super` pseudo-reference."""

    @property
    def type(self) -> TypingLiteral["Super"]:
        return "Super"


@dataclass(frozen=True)
class OpaqueNode(AstNodeBase):
    """Placeholder for a node kind this package does not model."""

    kind: str
    fields: Mapping[str, Any]

    @property
    def type(self) -> str:
        return self.kind


# Union type for all AST nodes
AstNode = Union[
    Identifier,
    Literal,
    ArrayExpression,
    SpreadElement,
    RestElement,
    AssignmentPattern,
    ArrayPattern,
    ArrowFunctionExpression,
    AssignmentExpression,
    BinaryExpression,
    LogicalExpression,
    UnaryExpression,
    UpdateExpression,
    CallExpression,
    MemberExpression,
    ConditionalExpression,
    TemplateElement,
    TemplateLiteral,
    SequenceExpression,
    ThisExpression,
    Super,
    OpaqueNode,
]


# ============================================================
# AST Utilities
# ============================================================


def iter_child_nodes(node: AstNode) -> Iterator[AstNode]:
    """Yields the direct children of a node in field order."""
    if isinstance(node, OpaqueNode):
        return
    for field in fields(node):
        value = getattr(node, field.name)
        if isinstance(value, AstNodeBase):
            yield value
        elif isinstance(value, (list, tuple)):
            for item in value:
                if isinstance(item, AstNodeBase):
                    yield item


def count_ast_nodes(node: AstNode) -> int:
    """Counts the total number of nodes in an AST."""
    count = 0
    stack = [node]
    while stack:
        current = stack.pop()
        count += 1
        stack.extend(iter_child_nodes(current))
    return count


def calculate_ast_depth(node: AstNode) -> int:
    """Calculates the maximum depth of an AST."""
    max_depth = 0
    stack = [(node, 1)]
    while stack:
        current, depth = stack.pop()
        max_depth = max(max_depth, depth)
        stack.extend((child, depth + 1) for child in iter_child_nodes(current))
    return max_depth


def _label(node: AstNode) -> str:
    if isinstance(node, Identifier):
        return f"Identifier: {node.name}"
    if isinstance(node, Literal):
        return f"Literal: {node.raw if node.raw is not None else repr(node.value)}"
    if isinstance(node, (BinaryExpression, LogicalExpression, AssignmentExpression)):
        return f"{node.type}: {node.operator}"
    if isinstance(node, (UnaryExpression, UpdateExpression)):
        fix = "prefix" if node.prefix else "postfix"
        return f"{node.type}: {node.operator} ({fix})"
    if isinstance(node, MemberExpression):
        return f"MemberExpression: {'computed' if node.computed else 'named'}"
    if isinstance(node, ArrowFunctionExpression):
        flags = [name for name in ("is_async", "generator") if getattr(node, name)]
        if not node.expression:
            flags.append("block")
        return "ArrowFunctionExpression" + (f" [{', '.join(flags)}]" if flags else "")
    if isinstance(node, TemplateElement):
        return f'TemplateElement: "{node.raw}"'
    return node.type


def ast_to_string(node: AstNode, indent: int = 0) -> str:
    """Returns a human-readable representation of an AST node for debugging."""
    prefix = "  " * indent
    lines = [f"{prefix}{_label(node)}"]
    for child in iter_child_nodes(node):
        lines.append(ast_to_string(child, indent + 1))
    return "\n".join(lines)
