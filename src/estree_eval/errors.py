"""
Error types for the expression evaluation engine.

All expression errors extend ExpressionError for consistent handling.
"""

import builtins
from typing import Optional


class ExpressionError(Exception):
    """
    Base error class for all expression-related errors.
    """

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.position = position
        self.expression = expression

    def format_with_context(self) -> str:
        """
        Returns a formatted error message with position context.
        """
        if self.expression is None or self.position is None:
            return self.message

        pointer = " " * self.position + "^"
        return f"{self.message}\n  {self.expression}\n  {pointer}"


class TokenizerError(ExpressionError):
    """
    Error thrown during tokenization (lexical analysis).
    """

    pass


class ParseError(ExpressionError):
    """
    Error thrown during parsing (syntax analysis) or tree loading.
    """

    pass


class LimitExceededError(ExpressionError):
    """
    Error thrown when expression limits are exceeded.
    """

    def __init__(self, limit_name: str, limit: int, actual: int):
        message = f"Limit exceeded: {limit_name} (limit: {limit}, actual: {actual})"
        super().__init__(message)
        self.limit_name = limit_name
        self.limit = limit
        self.actual = actual


class EvaluationError(ExpressionError):
    """
    Error thrown during evaluation.
    """

    pass


class UnsupportedNodeKind(EvaluationError):
    """
    Error thrown for a node kind outside the recognized set.
    """

    def __init__(
        self,
        kind: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(f'Node type "{kind}" is not supported.', position, expression)
        self.kind = kind


class UnsupportedConstruct(EvaluationError):
    """
    Error thrown when a recognized node kind is used in a disallowed form.
    """

    pass


class InvalidOperator(EvaluationError):
    """
    Error thrown for an operator token outside the set known for its node kind.
    """

    def __init__(
        self,
        operator: str,
        node_type: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(
            f'Unexpected {node_type} operator "{operator}".', position, expression
        )
        self.operator = operator
        self.node_type = node_type


class TypeError(EvaluationError, builtins.TypeError):
    """
    Type error raised by the modeled computation itself.

    Examples are calling a non-callable value, reading a property of null,
    or spreading a value that is not iterable.
    """

    pass


class RangeError(EvaluationError, builtins.ValueError):
    """
    Range error raised by the modeled computation (e.g. an invalid radix).
    """

    pass
