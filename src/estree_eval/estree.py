"""
Loading ESTree documents produced by external JavaScript parsers.

Trees emitted by acorn, esprima and similar tools (serialized as JSON or
YAML) are converted into this package's node dataclasses. Node kinds the
evaluator does not model are kept as OpaqueNode placeholders so that
evaluation reports them with the kind's own name.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Literal as TypingLiteral, Optional

import yaml

from .ast import (
    ArrayExpression,
    ArrayPattern,
    ArrowFunctionExpression,
    AssignmentExpression,
    AssignmentPattern,
    AstNode,
    BinaryExpression,
    CallExpression,
    ConditionalExpression,
    Identifier,
    Literal,
    LogicalExpression,
    MemberExpression,
    OpaqueNode,
    RestElement,
    SequenceExpression,
    SpreadElement,
    Super,
    TemplateElement,
    TemplateLiteral,
    ThisExpression,
    UnaryExpression,
    UpdateExpression,
)
from .errors import ExpressionError, ParseError
from .values import MAX_SAFE_INTEGER, RegExp

logger = logging.getLogger("estree_eval.estree")

DocumentFormat = TypingLiteral["json", "yaml"]


def _position(data: Mapping[str, Any]) -> int:
    start = data.get("start")
    if isinstance(start, int):
        return start
    span = data.get("range")
    if isinstance(span, (list, tuple)) and span and isinstance(span[0], int):
        return span[0]
    return 0


class _Converter:
    """Converts ESTree mappings into node dataclasses."""

    def __init__(self) -> None:
        self._converters: Dict[str, Callable[[Mapping[str, Any], int], AstNode]] = {
            "ArrayExpression": self._array_expression,
            "ArrayPattern": self._array_pattern,
            "ArrowFunctionExpression": self._arrow_function,
            "AssignmentExpression": self._operator_node(AssignmentExpression),
            "AssignmentPattern": self._assignment_pattern,
            "BinaryExpression": self._operator_node(BinaryExpression),
            "CallExpression": self._call_expression,
            "ConditionalExpression": self._conditional,
            "Identifier": self._identifier,
            "Literal": self._literal,
            "LogicalExpression": self._operator_node(LogicalExpression),
            "MemberExpression": self._member_expression,
            "RestElement": self._rest_element,
            "SequenceExpression": self._sequence,
            "SpreadElement": self._spread_element,
            "Super": lambda data, position: Super(position=position),
            "TemplateElement": self._template_element,
            "TemplateLiteral": self._template_literal,
            "ThisExpression": lambda data, position: ThisExpression(position=position),
            "UnaryExpression": self._unary_expression,
            "UpdateExpression": self._update_expression,
        }

    def convert(self, data: Any) -> AstNode:
        if not isinstance(data, Mapping):
            raise ParseError(f"ESTree node must be an object, got {type(data).__name__}")
        kind = data.get("type")
        if not isinstance(kind, str):
            raise ParseError("ESTree node is missing its 'type'", _position(data))

        position = _position(data)

        # Wrappers around a single expression
        if kind == "Program":
            body = data.get("body")
            if not isinstance(body, list) or len(body) != 1:
                raise ParseError(
                    "Program must contain exactly one expression statement", position
                )
            return self.convert(body[0])
        if kind in ("ExpressionStatement", "ParenthesizedExpression"):
            return self.convert(self._field(data, "expression", position))

        converter = self._converters.get(kind)
        if converter is None:
            logger.debug("unrecognized_estree_node", extra={"kind": kind, "position": position})
            return OpaqueNode(position=position, kind=kind, fields=dict(data))
        return converter(data, position)

    # ============================================================
    # Field Helpers
    # ============================================================

    def _field(self, data: Mapping[str, Any], name: str, position: int) -> Any:
        if name not in data:
            raise ParseError(f"{data.get('type')} node is missing '{name}'", position)
        return data[name]

    def _child(self, data: Mapping[str, Any], name: str, position: int) -> AstNode:
        return self.convert(self._field(data, name, position))

    def _children(
        self, data: Mapping[str, Any], name: str, position: int, holes: bool = False
    ) -> tuple:
        items = self._field(data, name, position)
        if not isinstance(items, list):
            raise ParseError(f"{data.get('type')}.{name} must be a list", position)
        converted: List[Optional[AstNode]] = []
        for item in items:
            if item is None and holes:
                converted.append(None)
            else:
                converted.append(self.convert(item))
        return tuple(converted)

    def _operator(self, data: Mapping[str, Any], position: int) -> str:
        operator = self._field(data, "operator", position)
        if not isinstance(operator, str):
            raise ParseError(f"{data.get('type')}.operator must be a string", position)
        return operator

    # ============================================================
    # Node Converters
    # ============================================================

    def _identifier(self, data: Mapping[str, Any], position: int) -> AstNode:
        name = self._field(data, "name", position)
        if not isinstance(name, str):
            raise ParseError("Identifier.name must be a string", position)
        return Identifier(position=position, name=name)

    def _literal(self, data: Mapping[str, Any], position: int) -> AstNode:
        raw = data.get("raw")
        regex = data.get("regex")
        if isinstance(regex, Mapping):
            try:
                value: Any = RegExp(str(regex.get("pattern", "")), str(regex.get("flags", "")))
            except ExpressionError as e:
                raise ParseError(e.message, position) from e
            return Literal(position=position, value=value, raw=raw)
        if "bigint" in data:
            raise ParseError("BigInt literals are not supported", position)

        value = data.get("value")
        if isinstance(value, float) and value.is_integer() and abs(value) <= MAX_SAFE_INTEGER:
            value = int(value)
        elif isinstance(value, int) and not isinstance(value, bool) and abs(value) > MAX_SAFE_INTEGER:
            value = float(value)
        elif value is not None and not isinstance(value, (str, bool, int, float)):
            raise ParseError(
                f"Unsupported literal value of type {type(value).__name__}", position
            )
        return Literal(position=position, value=value, raw=raw)

    def _array_expression(self, data: Mapping[str, Any], position: int) -> AstNode:
        return ArrayExpression(
            position=position, elements=self._children(data, "elements", position, holes=True)
        )

    def _array_pattern(self, data: Mapping[str, Any], position: int) -> AstNode:
        return ArrayPattern(
            position=position, elements=self._children(data, "elements", position, holes=True)
        )

    def _spread_element(self, data: Mapping[str, Any], position: int) -> AstNode:
        return SpreadElement(position=position, argument=self._child(data, "argument", position))

    def _rest_element(self, data: Mapping[str, Any], position: int) -> AstNode:
        return RestElement(position=position, argument=self._child(data, "argument", position))

    def _assignment_pattern(self, data: Mapping[str, Any], position: int) -> AstNode:
        return AssignmentPattern(
            position=position,
            left=self._child(data, "left", position),
            right=self._child(data, "right", position),
        )

    def _arrow_function(self, data: Mapping[str, Any], position: int) -> AstNode:
        return ArrowFunctionExpression(
            position=position,
            params=self._children(data, "params", position),
            body=self._child(data, "body", position),
            expression=bool(data.get("expression", True)),
            is_async=bool(data.get("async", False)),
            generator=bool(data.get("generator", False)),
        )

    def _operator_node(self, node_class: Any) -> Callable[[Mapping[str, Any], int], AstNode]:
        def convert(data: Mapping[str, Any], position: int) -> AstNode:
            return node_class(
                position=position,
                operator=self._operator(data, position),
                left=self._child(data, "left", position),
                right=self._child(data, "right", position),
            )

        return convert

    def _unary_expression(self, data: Mapping[str, Any], position: int) -> AstNode:
        return UnaryExpression(
            position=position,
            operator=self._operator(data, position),
            argument=self._child(data, "argument", position),
            prefix=bool(data.get("prefix", True)),
        )

    def _update_expression(self, data: Mapping[str, Any], position: int) -> AstNode:
        return UpdateExpression(
            position=position,
            operator=self._operator(data, position),
            argument=self._child(data, "argument", position),
            prefix=bool(data.get("prefix", False)),
        )

    def _call_expression(self, data: Mapping[str, Any], position: int) -> AstNode:
        return CallExpression(
            position=position,
            callee=self._child(data, "callee", position),
            arguments=self._children(data, "arguments", position),
        )

    def _member_expression(self, data: Mapping[str, Any], position: int) -> AstNode:
        return MemberExpression(
            position=position,
            object=self._child(data, "object", position),
            property=self._child(data, "property", position),
            computed=bool(data.get("computed", False)),
        )

    def _conditional(self, data: Mapping[str, Any], position: int) -> AstNode:
        return ConditionalExpression(
            position=position,
            test=self._child(data, "test", position),
            consequent=self._child(data, "consequent", position),
            alternate=self._child(data, "alternate", position),
        )

    def _sequence(self, data: Mapping[str, Any], position: int) -> AstNode:
        return SequenceExpression(
            position=position, expressions=self._children(data, "expressions", position)
        )

    def _template_element(self, data: Mapping[str, Any], position: int) -> AstNode:
        value = self._field(data, "value", position)
        if not isinstance(value, Mapping) or not isinstance(value.get("raw"), str):
            raise ParseError("TemplateElement.value must have a 'raw' string", position)
        cooked = value.get("cooked")
        return TemplateElement(
            position=position,
            cooked=cooked if isinstance(cooked, str) else None,
            raw=value["raw"],
            tail=bool(data.get("tail", False)),
        )

    def _template_literal(self, data: Mapping[str, Any], position: int) -> AstNode:
        quasis = self._children(data, "quasis", position)
        for quasi in quasis:
            if not isinstance(quasi, TemplateElement):
                raise ParseError(
                    "TemplateLiteral.quasis must contain TemplateElement nodes", position
                )
        return TemplateLiteral(
            position=position,
            quasis=quasis,
            expressions=self._children(data, "expressions", position),
        )


def from_estree(data: Mapping[str, Any]) -> AstNode:
    """
    Converts an ESTree mapping into node dataclasses.

    Program and ExpressionStatement wrappers around a single expression are
    unwrapped. Unrecognized node kinds become OpaqueNode placeholders.

    Raises:
        ParseError: If the mapping is not a well-formed ESTree node
    """
    return _Converter().convert(data)


def detect_format(content: str) -> DocumentFormat:
    """Sniffs whether a document is JSON or YAML by its first character."""
    trimmed = content.lstrip()
    if trimmed.startswith("{") or trimmed.startswith("["):
        return "json"
    return "yaml"


def _parse_json(content: str) -> Any:
    return json.loads(content)


def _parse_yaml(content: str) -> Any:
    return yaml.safe_load(content or "")


def load_estree(content: str, format: Optional[DocumentFormat] = None) -> AstNode:
    """
    Parses a serialized ESTree document and converts it.

    Args:
        content: The JSON or YAML document text
        format: "json" or "yaml"; sniffed from the content when omitted

    Returns:
        The converted AST

    Raises:
        ParseError: If the document cannot be parsed or is not a valid tree
    """
    detected_format = format or detect_format(content)
    if detected_format not in ("json", "yaml"):
        raise ParseError(f"Unsupported ESTree document format: {detected_format}")

    try:
        if detected_format == "json":
            document = _parse_json(content)
        else:
            document = _parse_yaml(content)
    except (ValueError, yaml.YAMLError) as parse_error:
        message = str(parse_error)
        logger.debug(
            "estree_parse_failed",
            extra={"format": detected_format, "error": message},
        )
        raise ParseError(f"Failed to parse ESTree {detected_format}: {message}") from parse_error

    if not isinstance(document, Mapping):
        raise ParseError(f"Parsed ESTree {detected_format} document must be an object")
    return from_estree(document)
