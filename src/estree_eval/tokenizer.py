"""
Tokenizer (lexer) for the expression language.

Converts expression strings into a stream of tokens for the parser. Whether
a `/` starts a regular expression literal or is a division operator depends
on the previous token, so the decision is made here rather than in the
parser. Template literals are tokenized eagerly: each `${...}` section is
tokenized into its own token list, terminated by an EOF token.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple

from .errors import TokenizerError
from .limits import ExpressionLimits, check_ast_depth, check_expression_length
from .values import MAX_SAFE_INTEGER, WHITESPACE


class TokenType(Enum):
    """Token types produced by the tokenizer."""

    # Literals
    STRING = "STRING"
    NUMBER = "NUMBER"
    TEMPLATE = "TEMPLATE"
    REGEX = "REGEX"
    TRUE = "TRUE"
    FALSE = "FALSE"
    NULL = "NULL"

    # Names
    IDENTIFIER = "IDENTIFIER"
    KEYWORD = "KEYWORD"

    # Operators and delimiters
    PUNCTUATOR = "PUNCTUATOR"

    # Special
    EOF = "EOF"


@dataclass
class TemplatePart:
    """Literal text of a template literal between substitutions."""

    cooked: str
    raw: str
    position: int


@dataclass
class TemplateData:
    """Parsed structure of a template literal token."""

    quasis: List[TemplatePart] = field(default_factory=list)
    expressions: List[List["Token"]] = field(default_factory=list)


@dataclass
class Token:
    """A token produced by the tokenizer."""

    type: TokenType
    value: str
    position: int
    literal: Any = None
    """Decoded value for STRING, NUMBER, REGEX and TEMPLATE tokens."""


# Reserved words. `async` stays an identifier; the parser treats it
# contextually.
KEYWORDS = frozenset(
    {
        "await",
        "break",
        "case",
        "catch",
        "class",
        "const",
        "continue",
        "debugger",
        "default",
        "delete",
        "do",
        "else",
        "enum",
        "export",
        "extends",
        "finally",
        "for",
        "function",
        "if",
        "import",
        "in",
        "instanceof",
        "let",
        "new",
        "return",
        "super",
        "switch",
        "this",
        "throw",
        "try",
        "typeof",
        "var",
        "void",
        "while",
        "with",
        "yield",
    }
)

LITERAL_KEYWORDS = {
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "null": TokenType.NULL,
}

# Longest first, so a prefix never wins over a longer operator.
PUNCTUATORS: Tuple[str, ...] = (
    ">>>=",
    "...",
    "===",
    "!==",
    "**=",
    "<<=",
    ">>=",
    ">>>",
    "&&=",
    "||=",
    "??=",
    "=>",
    "==",
    "!=",
    "<=",
    ">=",
    "&&",
    "||",
    "??",
    "?.",
    "++",
    "--",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "&=",
    "|=",
    "^=",
    "**",
    "<<",
    ">>",
    "{",
    "}",
    "(",
    ")",
    "[",
    "]",
    ";",
    ",",
    "<",
    ">",
    "+",
    "-",
    "*",
    "/",
    "%",
    "&",
    "|",
    "^",
    "!",
    "~",
    "?",
    ":",
    "=",
    ".",
)

# After these punctuators an operand is expected, so `/` starts a regex.
_OPERAND_CLOSERS = frozenset({")", "]", "}"})
_OPERAND_KEYWORDS = frozenset({"this", "super"})

_LINE_TERMINATORS = "\n\r" + chr(0x2028) + chr(0x2029)

_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
    "v": "\v",
}


def _is_digit(ch: str) -> bool:
    """Checks if a character is a digit."""
    return "0" <= ch <= "9"


def _is_identifier_start(ch: str) -> bool:
    """Checks if a character can start an identifier."""
    return ch == "$" or ch.isidentifier()


def _is_identifier_part(ch: str) -> bool:
    """Checks if a character can continue an identifier."""
    if ch == "":
        return False
    return ch in ("$", chr(0x200C), chr(0x200D)) or ("_" + ch).isidentifier()


def _is_whitespace(ch: str) -> bool:
    """Checks if a character is whitespace or a line terminator."""
    return ch != "" and (ch in WHITESPACE or ch in _LINE_TERMINATORS)


def _number_value(text: str) -> Any:
    """Converts numeric literal text to an int (when exact) or a float."""
    lowered = text.lower()
    if lowered.startswith(("0x", "0o", "0b")):
        value: Any = int(text[2:], {"x": 16, "o": 8, "b": 2}[lowered[1]])
    elif "." in text or "e" in lowered:
        value = float(text)
        if value.is_integer() and abs(value) <= MAX_SAFE_INTEGER:
            value = int(value)
    else:
        value = int(text)
    if isinstance(value, int) and value > MAX_SAFE_INTEGER:
        value = float(value)
    return value


class Tokenizer:
    """Tokenizer for expression strings."""

    def __init__(self, source: str, limits: Optional[ExpressionLimits] = None):
        self._source = source
        self._limits = limits
        self._position = 0
        self._tokens: List[Token] = []
        self._template_depth = 0

    def tokenize(self) -> List[Token]:
        """Tokenizes the source expression and returns all tokens."""
        check_expression_length(self._source, self._limits)

        while not self._is_at_end():
            self._scan_token()

        self._tokens.append(Token(TokenType.EOF, "", self._position))
        return self._tokens

    def _is_at_end(self) -> bool:
        return self._position >= len(self._source)

    def _peek(self, offset: int = 0) -> str:
        index = self._position + offset
        if index >= len(self._source):
            return ""
        return self._source[index]

    def _advance(self) -> str:
        ch = self._source[self._position]
        self._position += 1
        return ch

    def _add_token(
        self, token_type: TokenType, value: str, position: int, literal: Any = None
    ) -> None:
        self._tokens.append(Token(token_type, value, position, literal))

    def _error(self, message: str, position: int) -> TokenizerError:
        return TokenizerError(message, position, self._source)

    def _regex_allowed(self) -> bool:
        """Checks whether a `/` at this point begins a regular expression."""
        if not self._tokens:
            return True
        previous = self._tokens[-1]
        if previous.type == TokenType.PUNCTUATOR:
            return previous.value not in _OPERAND_CLOSERS
        if previous.type == TokenType.KEYWORD:
            return previous.value not in _OPERAND_KEYWORDS
        return False

    def _scan_token(self) -> None:
        start_position = self._position
        ch = self._peek()

        if _is_whitespace(ch):
            self._advance()
            return

        if ch == "/" and self._peek(1) == "/":
            while not self._is_at_end() and self._peek() not in _LINE_TERMINATORS:
                self._advance()
            return

        if ch == "/" and self._peek(1) == "*":
            end = self._source.find("*/", self._position + 2)
            if end == -1:
                raise self._error("Unterminated comment", start_position)
            self._position = end + 2
            return

        if ch in ('"', "'"):
            self._advance()
            self._scan_string(ch, start_position)
            return

        if ch == "`":
            self._advance()
            self._scan_template(start_position)
            return

        if _is_digit(ch) or (ch == "." and _is_digit(self._peek(1))):
            self._scan_number(start_position)
            return

        if _is_identifier_start(ch):
            self._scan_identifier(start_position)
            return

        if ch == "/" and self._regex_allowed():
            self._advance()
            self._scan_regex(start_position)
            return

        for punctuator in PUNCTUATORS:
            if self._source.startswith(punctuator, self._position):
                # `a?.5:b` is a conditional, not optional chaining.
                if punctuator == "?." and _is_digit(self._peek(2)):
                    continue
                self._position += len(punctuator)
                self._add_token(TokenType.PUNCTUATOR, punctuator, start_position)
                return

        raise self._error(f"Unexpected character: '{ch}'", start_position)

    # ============================================================
    # Strings and Templates
    # ============================================================

    def _read_hex(self, count: int, escape_position: int) -> int:
        digits = self._source[self._position : self._position + count]
        if len(digits) != count or not all(c in "0123456789abcdefABCDEF" for c in digits):
            raise self._error("Invalid hexadecimal escape sequence", escape_position)
        self._position += count
        return int(digits, 16)

    def _scan_escape(self, start_position: int) -> str:
        """Decodes one escape sequence; the backslash is already consumed."""
        escape_position = self._position - 1
        if self._is_at_end():
            raise self._error("Unterminated string", start_position)
        escaped = self._advance()

        if escaped in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[escaped]
        if escaped == "0" and not _is_digit(self._peek()):
            return "\0"
        if escaped == "x":
            return chr(self._read_hex(2, escape_position))
        if escaped == "u":
            if self._peek() == "{":
                end = self._source.find("}", self._position)
                digits = self._source[self._position + 1 : end] if end != -1 else ""
                if not digits or not all(c in "0123456789abcdefABCDEF" for c in digits):
                    raise self._error("Invalid Unicode escape sequence", escape_position)
                code = int(digits, 16)
                if code > 0x10FFFF:
                    raise self._error("Undefined Unicode code-point", escape_position)
                self._position = end + 1
                return chr(code)
            return chr(self._read_hex(4, escape_position))
        if escaped == "\r":
            # Line continuation; \r\n counts as one terminator.
            if self._peek() == "\n":
                self._advance()
            return ""
        if escaped in _LINE_TERMINATORS:
            return ""
        if _is_digit(escaped):
            raise self._error(
                "Octal escape sequences are not allowed", escape_position
            )
        return escaped

    def _scan_string(self, quote: str, start_position: int) -> None:
        chars: List[str] = []

        while not self._is_at_end() and self._peek() != quote:
            ch = self._advance()

            if ch == "\\":
                chars.append(self._scan_escape(start_position))
            elif ch in ("\n", "\r"):
                raise self._error(
                    "Unterminated string (newline in string literal)", start_position
                )
            else:
                chars.append(ch)

        if self._is_at_end():
            raise self._error("Unterminated string", start_position)

        # Consume closing quote
        self._advance()

        text = self._source[start_position : self._position]
        self._add_token(TokenType.STRING, text, start_position, "".join(chars))

    def _scan_template(self, start_position: int) -> None:
        data = TemplateData()
        part_start = self._position
        cooked: List[str] = []

        while True:
            if self._is_at_end():
                raise self._error("Unterminated template literal", start_position)
            ch = self._advance()

            if ch == "`":
                raw = self._source[part_start : self._position - 1]
                data.quasis.append(TemplatePart("".join(cooked), _normalize_raw(raw), part_start))
                break

            if ch == "$" and self._peek() == "{":
                raw = self._source[part_start : self._position - 1]
                data.quasis.append(TemplatePart("".join(cooked), _normalize_raw(raw), part_start))
                self._advance()
                data.expressions.append(self._scan_substitution(start_position))
                part_start = self._position
                cooked = []
            elif ch == "\\":
                cooked.append(self._scan_escape(start_position))
            elif ch == "\r":
                # Line terminators in templates are normalized to \n.
                if self._peek() == "\n":
                    self._advance()
                cooked.append("\n")
            else:
                cooked.append(ch)

        text = self._source[start_position : self._position]
        self._add_token(TokenType.TEMPLATE, text, start_position, data)

    def _scan_substitution(self, template_position: int) -> List[Token]:
        """Tokenizes a `${...}` section up to its closing brace."""
        outer_tokens = self._tokens
        self._tokens = []
        self._template_depth += 1
        depth = 0
        try:
            # Each substitution nests at least one level in the parsed tree.
            check_ast_depth(self._template_depth, self._limits)
            while True:
                if self._is_at_end():
                    raise self._error("Unterminated template literal", template_position)
                self._scan_token()
                if not self._tokens or self._tokens[-1].type != TokenType.PUNCTUATOR:
                    continue
                value = self._tokens[-1].value
                if value == "{":
                    depth += 1
                elif value == "}":
                    if depth == 0:
                        closing = self._tokens.pop()
                        self._tokens.append(Token(TokenType.EOF, "", closing.position))
                        return self._tokens
                    depth -= 1
        finally:
            self._tokens = outer_tokens
            self._template_depth -= 1

    # ============================================================
    # Numbers, Identifiers and Regular Expressions
    # ============================================================

    def _scan_number(self, start_position: int) -> None:
        prefix = self._source[self._position : self._position + 2].lower()
        if prefix in ("0x", "0o", "0b"):
            self._position += 2
            allowed = {"0x": "0123456789abcdefABCDEF", "0o": "01234567", "0b": "01"}[prefix]
            digits_start = self._position
            while self._peek() != "" and self._peek() in allowed:
                self._advance()
            if self._position == digits_start:
                raise self._error("Invalid number: missing digits", start_position)
        else:
            while _is_digit(self._peek()):
                self._advance()

            # Fractional part
            if self._peek() == ".":
                self._advance()
                while _is_digit(self._peek()):
                    self._advance()

            # Exponent part
            if self._peek() in ("e", "E"):
                self._advance()
                if self._peek() in ("+", "-"):
                    self._advance()
                if not _is_digit(self._peek()):
                    raise self._error(
                        "Invalid number: expected exponent digits", start_position
                    )
                while _is_digit(self._peek()):
                    self._advance()

        if _is_identifier_start(self._peek()) or _is_digit(self._peek()):
            raise self._error(
                "Invalid number: identifier starts immediately after numeric literal",
                self._position,
            )

        text = self._source[start_position : self._position]
        self._add_token(TokenType.NUMBER, text, start_position, _number_value(text))

    def _scan_identifier(self, start_position: int) -> None:
        while _is_identifier_part(self._peek()):
            self._advance()

        value = self._source[start_position : self._position]
        if value in LITERAL_KEYWORDS:
            self._add_token(LITERAL_KEYWORDS[value], value, start_position)
        elif value in KEYWORDS:
            self._add_token(TokenType.KEYWORD, value, start_position)
        else:
            self._add_token(TokenType.IDENTIFIER, value, start_position)

    def _scan_regex(self, start_position: int) -> None:
        in_class = False
        pattern: List[str] = []

        while True:
            if self._is_at_end() or self._peek() in _LINE_TERMINATORS:
                raise self._error(
                    "Unterminated regular expression", start_position
                )
            ch = self._advance()
            if ch == "\\":
                if self._is_at_end() or self._peek() in _LINE_TERMINATORS:
                    raise self._error(
                        "Unterminated regular expression", start_position
                    )
                pattern.append(ch + self._advance())
                continue
            if ch == "[":
                in_class = True
            elif ch == "]":
                in_class = False
            elif ch == "/" and not in_class:
                break
            pattern.append(ch)

        flags_start = self._position
        while _is_identifier_part(self._peek()):
            self._advance()
        flags = self._source[flags_start : self._position]

        text = self._source[start_position : self._position]
        self._add_token(TokenType.REGEX, text, start_position, ("".join(pattern), flags))


def _normalize_raw(raw: str) -> str:
    return raw.replace("\r\n", "\n").replace("\r", "\n")


def tokenize(source: str, limits: Optional[ExpressionLimits] = None) -> List[Token]:
    """
    Tokenizes an expression string into tokens.

    Args:
        source: The expression string to tokenize
        limits: Optional expression limits

    Returns:
        List of tokens

    Raises:
        TokenizerError: If the expression contains invalid tokens
        LimitExceededError: If the expression is longer than allowed
    """
    tokenizer = Tokenizer(source, limits)
    return tokenizer.tokenize()
