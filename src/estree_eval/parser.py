"""
Parser for the expression language.

Parses a stream of tokens into an ESTree-shaped Abstract Syntax Tree (AST).
Uses recursive descent for the expression forms and precedence climbing for
binary operators.

Precedence (lowest to highest):
1. Sequence: ,
2. Assignment and arrow functions: = += ... =>  (right associative)
3. Conditional: ? :
4. Logical OR and nullish coalescing: || ??
5. Logical AND: &&
6. Bitwise OR: |
7. Bitwise XOR: ^
8. Bitwise AND: &
9. Equality: == != === !==
10. Relational: < <= > >= in instanceof
11. Shift: << >> >>>
12. Additive: + -
13. Multiplicative: * / %
14. Exponent: **  (right associative)
15. Unary: ! ~ + - typeof void delete ++ --
16. Postfix: ++ --
17. Member and call: . [] ()
18. Primary: literals, identifiers, templates, arrays, parentheses
"""

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Set

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
    RestElement,
    SequenceExpression,
    SpreadElement,
    Super,
    TemplateElement,
    TemplateLiteral,
    ThisExpression,
    UnaryExpression,
    UpdateExpression,
    calculate_ast_depth,
    count_ast_nodes,
)
from .errors import ExpressionError, ParseError
from .limits import (
    DEFAULT_EXPRESSION_LIMITS,
    ExpressionLimits,
    check_array_length,
    check_ast_depth,
    check_ast_node_count,
    check_function_arg_count,
)
from .tokenizer import Token, TokenType, tokenize
from .values import RegExp

BINARY_PRECEDENCE: Dict[str, int] = {
    "??": 1,
    "||": 1,
    "&&": 2,
    "|": 3,
    "^": 4,
    "&": 5,
    "==": 6,
    "!=": 6,
    "===": 6,
    "!==": 6,
    "<": 7,
    "<=": 7,
    ">": 7,
    ">=": 7,
    "in": 7,
    "instanceof": 7,
    "<<": 8,
    ">>": 8,
    ">>>": 8,
    "+": 9,
    "-": 9,
    "*": 10,
    "/": 10,
    "%": 10,
    "**": 11,
}

LOGICAL_OPERATORS = frozenset({"||", "&&", "??"})

ASSIGNMENT_OPERATORS = frozenset(
    {
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
    }
)

UNARY_PUNCTUATORS = frozenset({"!", "~", "+", "-"})
UNARY_KEYWORDS = frozenset({"typeof", "void", "delete"})

_OPENERS = {"(": ")", "[": "]", "{": "}"}


class Parser:
    """Parser for expression strings."""

    def __init__(
        self,
        tokens: List[Token],
        source: str,
        limits: ExpressionLimits = DEFAULT_EXPRESSION_LIMITS,
    ):
        self._tokens = tokens
        self._source = source
        self._limits = limits
        self._current = 0
        self._depth = 0
        # ids of nodes written inside parentheses
        self._parenthesized: Set[int] = set()

    def parse(self) -> AstNode:
        """Parses the token stream into an AST."""
        ast = self._parse_complete()

        # Validate AST limits
        depth = calculate_ast_depth(ast)
        check_ast_depth(depth, self._limits)

        node_count = count_ast_nodes(ast)
        check_ast_node_count(node_count, self._limits)

        return ast

    def _parse_complete(self) -> AstNode:
        if self._is_at_end():
            raise ParseError("Unexpected end of expression", self._peek().position, self._source)

        ast = self._parse_expression()

        if not self._is_at_end():
            raise self._unexpected(self._peek())
        return ast

    @contextmanager
    def _nested(self) -> Iterator[None]:
        """Tracks recursion so deep nesting fails before the call stack does."""
        self._depth += 1
        try:
            check_ast_depth(self._depth, self._limits)
            yield
        finally:
            self._depth -= 1

    # ============================================================
    # Token Helpers
    # ============================================================

    def _is_at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self, offset: int = 0) -> Token:
        index = min(self._current + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def _previous(self) -> Token:
        return self._tokens[self._current - 1]

    def _advance(self) -> Token:
        if not self._is_at_end():
            self._current += 1
        return self._previous()

    def _check(self, token_type: TokenType, value: Optional[str] = None, offset: int = 0) -> bool:
        token = self._peek(offset)
        if token.type != token_type:
            return False
        return value is None or token.value == value

    def _check_punctuator(self, *values: str) -> bool:
        token = self._peek()
        return token.type == TokenType.PUNCTUATOR and token.value in values

    def _match_punctuator(self, *values: str) -> bool:
        if self._check_punctuator(*values):
            self._advance()
            return True
        return False

    def _consume_punctuator(self, value: str, message: str) -> Token:
        if self._check_punctuator(value):
            return self._advance()
        token = self._peek()
        raise ParseError(message, token.position, self._source)

    def _unexpected(self, token: Token) -> ParseError:
        if token.type == TokenType.EOF:
            return ParseError("Unexpected end of expression", token.position, self._source)
        return ParseError(
            f"Unexpected token: {token.value or token.type.value}",
            token.position,
            self._source,
        )

    def _mark_parenthesized(self, node: AstNode) -> AstNode:
        self._parenthesized.add(id(node))
        return node

    def _is_parenthesized(self, node: AstNode) -> bool:
        return id(node) in self._parenthesized

    # ============================================================
    # Expression Parsing (by precedence, lowest to highest)
    # ============================================================

    def _parse_expression(self) -> AstNode:
        """Parses comma-separated expressions."""
        position = self._peek().position
        node = self._parse_assignment()
        if not self._check_punctuator(","):
            return node

        expressions = [node]
        while self._match_punctuator(","):
            expressions.append(self._parse_assignment())
        return SequenceExpression(position=position, expressions=tuple(expressions))

    def _parse_assignment(self) -> AstNode:
        """Parses assignments and arrow functions (right associative)."""
        with self._nested():
            return self._parse_assignment_target()

    def _parse_assignment_target(self) -> AstNode:
        arrow = self._try_parse_arrow()
        if arrow is not None:
            return arrow

        left = self._parse_conditional()

        token = self._peek()
        if token.type == TokenType.PUNCTUATOR and token.value in ASSIGNMENT_OPERATORS:
            self._advance()
            target = self._to_assignment_target(left, token.value)
            right = self._parse_assignment()
            return AssignmentExpression(
                position=token.position,
                operator=token.value,
                left=target,
                right=right,
            )

        return left

    def _to_assignment_target(self, node: AstNode, operator: str) -> AstNode:
        if isinstance(node, (Identifier, MemberExpression)):
            return node
        if (
            operator == "="
            and isinstance(node, ArrayExpression)
            and not self._is_parenthesized(node)
        ):
            return self._to_pattern(node)
        raise ParseError(
            "Invalid left-hand side in assignment", node.position, self._source
        )

    def _to_pattern(self, node: AstNode) -> AstNode:
        """Reinterprets an array literal as a destructuring target."""
        if isinstance(node, (Identifier, MemberExpression)):
            return node
        if isinstance(node, ArrayExpression) and not self._is_parenthesized(node):
            elements: List[Optional[AstNode]] = []
            for index, element in enumerate(node.elements):
                if element is None:
                    elements.append(None)
                elif isinstance(element, SpreadElement):
                    if index != len(node.elements) - 1:
                        raise ParseError(
                            "Rest element must be last element",
                            element.position,
                            self._source,
                        )
                    elements.append(
                        RestElement(
                            position=element.position,
                            argument=self._to_pattern(element.argument),
                        )
                    )
                else:
                    elements.append(self._to_pattern(element))
            return ArrayPattern(position=node.position, elements=tuple(elements))
        if isinstance(node, AssignmentExpression) and node.operator == "=":
            return AssignmentPattern(
                position=node.position,
                left=self._to_pattern(node.left),
                right=node.right,
            )
        raise ParseError(
            "Invalid destructuring assignment target", node.position, self._source
        )

    def _parse_conditional(self) -> AstNode:
        """Parses ternary expressions: test ? consequent : alternate"""
        position = self._peek().position
        node = self._parse_binary(1)

        if self._match_punctuator("?"):
            consequent = self._parse_assignment()
            self._consume_punctuator(":", "Expected ':' in conditional expression")
            alternate = self._parse_assignment()

            node = ConditionalExpression(
                position=position,
                test=node,
                consequent=consequent,
                alternate=alternate,
            )

        return node

    def _binary_operator(self) -> Optional[str]:
        token = self._peek()
        if token.type == TokenType.PUNCTUATOR and token.value in BINARY_PRECEDENCE:
            return token.value
        if token.type == TokenType.KEYWORD and token.value in ("in", "instanceof"):
            return token.value
        return None

    def _parse_binary(self, min_precedence: int) -> AstNode:
        """Parses binary and logical operators by precedence climbing."""
        left = self._parse_unary()

        while True:
            operator = self._binary_operator()
            if operator is None:
                break
            precedence = BINARY_PRECEDENCE[operator]
            if precedence < min_precedence:
                break

            token = self._advance()
            if operator == "**":
                if isinstance(left, UnaryExpression) and not self._is_parenthesized(left):
                    raise ParseError(
                        "Unary operator used immediately before exponentiation "
                        "expression. Parenthesis must be used to disambiguate "
                        "operator precedence",
                        token.position,
                        self._source,
                    )
                next_precedence = precedence
            else:
                next_precedence = precedence + 1
            with self._nested():
                right = self._parse_binary(next_precedence)

            if operator in LOGICAL_OPERATORS:
                left = LogicalExpression(
                    position=token.position, operator=operator, left=left, right=right
                )
            else:
                left = BinaryExpression(
                    position=token.position, operator=operator, left=left, right=right
                )

        return left

    def _parse_unary(self) -> AstNode:
        """Parses prefix operators: ! ~ + - typeof void delete ++ --"""
        token = self._peek()
        is_unary = (
            token.type == TokenType.PUNCTUATOR and token.value in UNARY_PUNCTUATORS
        ) or (token.type == TokenType.KEYWORD and token.value in UNARY_KEYWORDS)

        if is_unary:
            self._advance()
            with self._nested():
                argument = self._parse_unary()
            return UnaryExpression(
                position=token.position,
                operator=token.value,
                argument=argument,
                prefix=True,
            )

        if self._check_punctuator("++", "--"):
            self._advance()
            with self._nested():
                argument = self._parse_unary()
            self._check_update_target(argument)
            return UpdateExpression(
                position=token.position,
                operator=token.value,
                argument=argument,
                prefix=True,
            )

        if self._check(TokenType.KEYWORD, "await"):
            raise ParseError("await expressions are not supported", token.position, self._source)

        return self._parse_postfix()

    def _check_update_target(self, node: AstNode) -> None:
        if not isinstance(node, (Identifier, MemberExpression)):
            raise ParseError(
                "Invalid left-hand side expression in update operation",
                node.position,
                self._source,
            )

    def _parse_postfix(self) -> AstNode:
        """Parses postfix update: a++ a--"""
        node = self._parse_call_member()

        if self._check_punctuator("++", "--"):
            token = self._advance()
            self._check_update_target(node)
            return UpdateExpression(
                position=token.position,
                operator=token.value,
                argument=node,
                prefix=False,
            )

        return node

    def _parse_call_member(self) -> AstNode:
        """Parses member access and calls: . [] ()"""
        node = self._parse_primary()

        while True:
            if self._match_punctuator("."):
                position = self._previous().position
                name_token = self._peek()
                if name_token.type not in (
                    TokenType.IDENTIFIER,
                    TokenType.KEYWORD,
                    TokenType.TRUE,
                    TokenType.FALSE,
                    TokenType.NULL,
                ):
                    raise ParseError(
                        "Expected property name after '.'", name_token.position, self._source
                    )
                self._advance()
                node = MemberExpression(
                    position=position,
                    object=node,
                    property=Identifier(position=name_token.position, name=name_token.value),
                    computed=False,
                )
            elif self._match_punctuator("["):
                position = self._previous().position
                index = self._parse_expression()
                self._consume_punctuator("]", "Expected ']' after computed member")
                node = MemberExpression(
                    position=position, object=node, property=index, computed=True
                )
            elif self._match_punctuator("("):
                position = self._previous().position
                args = self._parse_argument_list()
                check_function_arg_count(len(args), self._limits)
                node = CallExpression(position=position, callee=node, arguments=tuple(args))
            elif self._check_punctuator("?."):
                raise ParseError(
                    "Optional chaining is not supported", self._peek().position, self._source
                )
            elif self._check(TokenType.TEMPLATE):
                raise ParseError(
                    "Tagged templates are not supported", self._peek().position, self._source
                )
            else:
                break

        return node

    def _parse_argument_list(self) -> List[AstNode]:
        """Parses call arguments (already consumed opening paren)."""
        args: List[AstNode] = []

        while not self._check_punctuator(")"):
            args.append(self._parse_element())
            if not self._check_punctuator(")"):
                self._consume_punctuator(",", "Expected ',' or ')' after argument")

        self._consume_punctuator(")", "Expected ')' after function arguments")
        return args

    def _parse_element(self) -> AstNode:
        """Parses an argument or array element, which may be a spread."""
        if self._match_punctuator("..."):
            position = self._previous().position
            return SpreadElement(position=position, argument=self._parse_assignment())
        return self._parse_assignment()

    # ============================================================
    # Arrow Functions
    # ============================================================

    def _closing_index(self, start: int) -> Optional[int]:
        """Returns the index of the token closing the bracket at `start`."""
        stack: List[str] = []
        index = start
        while index < len(self._tokens):
            token = self._tokens[index]
            if token.type == TokenType.EOF:
                return None
            if token.type == TokenType.PUNCTUATOR:
                if token.value in _OPENERS:
                    stack.append(_OPENERS[token.value])
                elif token.value in (")", "]", "}"):
                    if not stack or stack.pop() != token.value:
                        return None
                    if not stack:
                        return index
            index += 1
        return None

    def _is_arrow_at(self, index: int) -> bool:
        token = self._tokens[index] if index < len(self._tokens) else None
        if token is None:
            return False
        if token.type == TokenType.IDENTIFIER:
            following = self._tokens[index + 1] if index + 1 < len(self._tokens) else None
            return (
                following is not None
                and following.type == TokenType.PUNCTUATOR
                and following.value == "=>"
            )
        if token.type == TokenType.PUNCTUATOR and token.value == "(":
            closing = self._closing_index(index)
            if closing is None or closing + 1 >= len(self._tokens):
                return False
            following = self._tokens[closing + 1]
            return following.type == TokenType.PUNCTUATOR and following.value == "=>"
        return False

    def _try_parse_arrow(self) -> Optional[AstNode]:
        start = self._peek()
        is_async = False
        if (
            start.type == TokenType.IDENTIFIER
            and start.value == "async"
            and self._is_arrow_at(self._current + 1)
        ):
            is_async = True
        elif not self._is_arrow_at(self._current):
            return None

        if is_async:
            self._advance()

        if self._check(TokenType.IDENTIFIER):
            name = self._advance()
            params: List[AstNode] = [Identifier(position=name.position, name=name.value)]
        else:
            self._consume_punctuator("(", "Expected '(' before arrow parameters")
            params = self._parse_arrow_params()

        self._consume_punctuator("=>", "Expected '=>' after arrow parameters")

        if self._check_punctuator("{"):
            raise ParseError(
                "Block-bodied arrow functions are not supported",
                self._peek().position,
                self._source,
            )

        body = self._parse_assignment()
        return ArrowFunctionExpression(
            position=start.position,
            params=tuple(params),
            body=body,
            expression=True,
            is_async=is_async,
        )

    def _parse_arrow_params(self) -> List[AstNode]:
        """Parses arrow parameters (already consumed opening paren)."""
        params: List[AstNode] = []

        while not self._check_punctuator(")"):
            token = self._peek()
            if self._match_punctuator("..."):
                name = self._consume_identifier("Expected parameter name after '...'")
                params.append(RestElement(position=token.position, argument=name))
                if not self._check_punctuator(")"):
                    raise ParseError(
                        "Rest parameter must be last formal parameter",
                        self._peek().position,
                        self._source,
                    )
                break

            if self._check_punctuator("[", "{"):
                raise ParseError(
                    "Destructuring parameters are not supported",
                    token.position,
                    self._source,
                )

            name = self._consume_identifier("Expected parameter name")
            if self._match_punctuator("="):
                default = self._parse_assignment()
                params.append(
                    AssignmentPattern(position=name.position, left=name, right=default)
                )
            else:
                params.append(name)

            if not self._check_punctuator(")"):
                self._consume_punctuator(",", "Expected ',' or ')' after parameter")

        self._consume_punctuator(")", "Expected ')' after arrow parameters")
        check_function_arg_count(len(params), self._limits)
        return params

    def _consume_identifier(self, message: str) -> Identifier:
        token = self._peek()
        if token.type != TokenType.IDENTIFIER:
            raise ParseError(message, token.position, self._source)
        self._advance()
        return Identifier(position=token.position, name=token.value)

    # ============================================================
    # Primary Expressions
    # ============================================================

    def _parse_primary(self) -> AstNode:
        """Parses primary expressions: literals, identifiers, parentheses, arrays."""
        token = self._peek()
        position = token.position

        # Boolean and null literals
        if self._check(TokenType.TRUE):
            self._advance()
            return Literal(position=position, value=True, raw=token.value)
        if self._check(TokenType.FALSE):
            self._advance()
            return Literal(position=position, value=False, raw=token.value)
        if self._check(TokenType.NULL):
            self._advance()
            return Literal(position=position, value=None, raw=token.value)

        # String and number literals
        if self._check(TokenType.STRING) or self._check(TokenType.NUMBER):
            self._advance()
            return Literal(position=position, value=token.literal, raw=token.value)

        if self._check(TokenType.REGEX):
            self._advance()
            pattern, flags = token.literal
            try:
                value = RegExp(pattern, flags)
            except ExpressionError as e:
                raise ParseError(e.message, position, self._source) from e
            return Literal(position=position, value=value, raw=token.value)

        if self._check(TokenType.TEMPLATE):
            self._advance()
            return self._parse_template(token)

        # Identifier
        if self._check(TokenType.IDENTIFIER):
            self._advance()
            return Identifier(position=position, name=token.value)

        if self._check(TokenType.KEYWORD):
            return self._parse_keyword(token)

        # Parenthesized expression
        if self._match_punctuator("("):
            if self._check_punctuator(")"):
                raise self._unexpected(self._peek())
            expr = self._parse_expression()
            self._consume_punctuator(")", "Expected ')' after expression")
            return self._mark_parenthesized(expr)

        # Array literal
        if self._match_punctuator("["):
            return self._parse_array(position)

        if self._check_punctuator("{"):
            raise ParseError("Object literals are not supported", position, self._source)

        raise self._unexpected(token)

    def _parse_keyword(self, token: Token) -> AstNode:
        position = token.position
        if token.value == "this":
            self._advance()
            return ThisExpression(position=position)
        if token.value == "super":
            self._advance()
            if not self._check_punctuator(".", "[", "("):
                raise ParseError("'super' keyword unexpected here", position, self._source)
            return Super(position=position)
        if token.value in ("function", "class"):
            raise ParseError(
                f"{token.value} expressions are not supported", position, self._source
            )
        if token.value == "new":
            raise ParseError("new expressions are not supported", position, self._source)
        raise self._unexpected(token)

    def _parse_array(self, position: int) -> AstNode:
        """Parses array elements (already consumed opening bracket)."""
        elements: List[Optional[AstNode]] = []

        while not self._check_punctuator("]"):
            if self._match_punctuator(","):
                elements.append(None)
                continue
            elements.append(self._parse_element())
            if not self._check_punctuator("]"):
                self._consume_punctuator(",", "Expected ',' or ']' after array element")

        self._consume_punctuator("]", "Expected ']' after array elements")
        check_array_length(len(elements), self._limits)

        return ArrayExpression(position=position, elements=tuple(elements))

    def _parse_template(self, token: Token) -> AstNode:
        data = token.literal
        quasis = tuple(
            TemplateElement(
                position=part.position,
                cooked=part.cooked,
                raw=part.raw,
                tail=index == len(data.quasis) - 1,
            )
            for index, part in enumerate(data.quasis)
        )
        expressions = []
        for tokens in data.expressions:
            sub_parser = Parser(tokens, self._source, self._limits)
            sub_parser._depth = self._depth
            expressions.append(sub_parser._parse_complete())
        return TemplateLiteral(
            position=token.position, quasis=quasis, expressions=tuple(expressions)
        )


def parse(
    source: str, limits: Optional[ExpressionLimits] = None
) -> AstNode:
    """
    Parses an expression string into an AST.

    Args:
        source: The expression string to parse
        limits: Optional expression limits

    Returns:
        The parsed AST

    Raises:
        TokenizerError: If tokenization fails
        ParseError: If parsing fails
        LimitExceededError: If the expression exceeds a limit
    """
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    tokens = tokenize(source, limits)
    parser = Parser(tokens, source, limits)
    return parser.parse()
