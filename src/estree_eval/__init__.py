"""
ESTree expression evaluator.

This package evaluates parsed JavaScript expression trees (ESTree node
shapes) against a caller-supplied scope, with JavaScript coercion rules,
closures, spread and receiver-bound method calls. A small reference parser
and an ESTree document loader are included to produce trees.
"""

# Core types and utilities
from .ast import (
    ArrayExpression,
    ArrayPattern,
    ArrowFunctionExpression,
    AssignmentExpression,
    AssignmentPattern,
    AstNode,
    AstNodeBase,
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
    ast_to_string,
    calculate_ast_depth,
    count_ast_nodes,
)
from .closures import Closure
from .errors import (
    EvaluationError,
    ExpressionError,
    InvalidOperator,
    LimitExceededError,
    ParseError,
    RangeError,
    TokenizerError,
    TypeError,
    UnsupportedConstruct,
    UnsupportedNodeKind,
)

# ESTree documents
from .estree import from_estree, load_estree

# Evaluator
from .evaluator import (
    RECOGNIZED_NODE_KINDS,
    EvaluationResult,
    Evaluator,
    evaluate,
    evaluate_expression,
    try_evaluate,
)
from .globals import create_global_scope, standard_globals
from .limits import DEFAULT_EXPRESSION_LIMITS, ExpressionLimits

# Parser
from .parser import Parser, parse
from .prototypes import NativeFunction
from .scope import Scope

# Tokenizer
from .tokenizer import Token, Tokenizer, TokenType, tokenize
from .values import UNDEFINED, JSFunction, RegExp, Undefined

__all__ = [
    # AST types
    "AstNode",
    "AstNodeBase",
    "ArrayExpression",
    "ArrayPattern",
    "ArrowFunctionExpression",
    "AssignmentExpression",
    "AssignmentPattern",
    "BinaryExpression",
    "CallExpression",
    "ConditionalExpression",
    "Identifier",
    "Literal",
    "LogicalExpression",
    "MemberExpression",
    "OpaqueNode",
    "RestElement",
    "SequenceExpression",
    "SpreadElement",
    "Super",
    "TemplateElement",
    "TemplateLiteral",
    "ThisExpression",
    "UnaryExpression",
    "UpdateExpression",
    "count_ast_nodes",
    "calculate_ast_depth",
    "ast_to_string",
    # Errors
    "ExpressionError",
    "TokenizerError",
    "ParseError",
    "LimitExceededError",
    "EvaluationError",
    "UnsupportedNodeKind",
    "UnsupportedConstruct",
    "InvalidOperator",
    "TypeError",
    "RangeError",
    # Limits
    "ExpressionLimits",
    "DEFAULT_EXPRESSION_LIMITS",
    # Tokenizer
    "Token",
    "TokenType",
    "Tokenizer",
    "tokenize",
    # Parser
    "Parser",
    "parse",
    # ESTree documents
    "from_estree",
    "load_estree",
    # Runtime values
    "UNDEFINED",
    "Undefined",
    "JSFunction",
    "NativeFunction",
    "Closure",
    "RegExp",
    "Scope",
    "create_global_scope",
    "standard_globals",
    # Evaluator
    "RECOGNIZED_NODE_KINDS",
    "EvaluationResult",
    "Evaluator",
    "evaluate",
    "try_evaluate",
    "evaluate_expression",
]
