"""
Resource limits for expression parsing.

These limits protect hosts that parse untrusted expression text against
overly large or deeply nested trees. They are applied by the reference
parser; the evaluator itself only recurses as deep as the tree it is given.
"""

from dataclasses import dataclass
from typing import Optional

from .errors import LimitExceededError


@dataclass(frozen=True)
class ExpressionLimits:
    """Expression limits configuration."""

    # Maximum expression string length in characters
    max_expression_length: int = 4096

    # Maximum AST depth (nesting level)
    max_ast_depth: int = 64

    # Maximum number of AST nodes
    max_ast_nodes: int = 1024

    # Maximum array literal length
    max_array_length: int = 256

    # Maximum function call arguments
    max_function_args: int = 32


# Default expression limits.
#
# These values are chosen to allow reasonable formulas and templates while
# keeping parsed trees small.
DEFAULT_EXPRESSION_LIMITS = ExpressionLimits()


def check_expression_length(
    expression: str, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates that expression length is within limits."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if len(expression) > limits.max_expression_length:
        raise LimitExceededError(
            "max_expression_length", limits.max_expression_length, len(expression)
        )


def check_ast_depth(depth: int, limits: Optional[ExpressionLimits] = None) -> None:
    """Validates AST or nesting depth."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if depth > limits.max_ast_depth:
        raise LimitExceededError("max_ast_depth", limits.max_ast_depth, depth)


def check_ast_node_count(
    count: int, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates AST node count after parsing."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if count > limits.max_ast_nodes:
        raise LimitExceededError("max_ast_nodes", limits.max_ast_nodes, count)


def check_array_length(length: int, limits: Optional[ExpressionLimits] = None) -> None:
    """Validates array literal length during parsing."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if length > limits.max_array_length:
        raise LimitExceededError("max_array_length", limits.max_array_length, length)


def check_function_arg_count(
    count: int, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates call argument count."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if count > limits.max_function_args:
        raise LimitExceededError("max_function_args", limits.max_function_args, count)
