"""
Tests for the expression tokenizer.
"""

import pytest

from estree_eval import (
    ExpressionLimits,
    LimitExceededError,
    TokenizerError,
    TokenType,
    tokenize,
)


def kinds(source):
    return [(t.type, t.value) for t in tokenize(source)[:-1]]


class TestStringLiterals:
    """Tests for string literal tokenization."""

    def test_tokenizes_double_quoted_strings(self):
        tokens = tokenize('"hello"')
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == '"hello"'
        assert tokens[0].literal == "hello"
        assert tokens[0].position == 0

    def test_tokenizes_single_quoted_strings(self):
        tokens = tokenize("'hello'")
        assert tokens[0].literal == "hello"

    def test_decodes_simple_escapes(self):
        tokens = tokenize(r'"a\nb\tc\\d\"e"')
        assert tokens[0].literal == 'a\nb\tc\\d"e'

    def test_decodes_hex_and_unicode_escapes(self):
        tokens = tokenize(r'"\x41B\u{43}\u{1F600}"')
        assert tokens[0].literal == "ABC\U0001F600"

    def test_decodes_null_escape(self):
        tokens = tokenize(r'"a\0b"')
        assert tokens[0].literal == "a\0b"

    def test_line_continuation_is_removed(self):
        tokens = tokenize('"a\\\nb"')
        assert tokens[0].literal == "ab"

    def test_rejects_octal_escapes(self):
        with pytest.raises(TokenizerError, match="Octal"):
            tokenize(r'"\12"')

    def test_rejects_invalid_hex_escape(self):
        with pytest.raises(TokenizerError, match="hexadecimal"):
            tokenize(r'"\xZZ"')

    def test_rejects_unterminated_string(self):
        with pytest.raises(TokenizerError, match="Unterminated string"):
            tokenize('"hello')

    def test_rejects_newline_in_string(self):
        with pytest.raises(TokenizerError, match="newline"):
            tokenize('"a\nb"')


class TestNumberLiterals:
    """Tests for numeric literal tokenization."""

    def test_tokenizes_integers(self):
        tokens = tokenize("42")
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == "42"
        assert tokens[0].literal == 42
        assert isinstance(tokens[0].literal, int)

    def test_tokenizes_decimals(self):
        assert tokenize("3.25")[0].literal == 3.25

    def test_tokenizes_leading_dot(self):
        assert tokenize(".5")[0].literal == 0.5

    def test_integral_decimals_become_ints(self):
        assert tokenize("1.0")[0].literal == 1
        assert isinstance(tokenize("1.0")[0].literal, int)
        assert tokenize("1e3")[0].literal == 1000
        assert tokenize("1.5e2")[0].literal == 150

    def test_tokenizes_negative_exponent(self):
        tokens = tokenize("2.5E-3")
        assert tokens[0].value == "2.5E-3"
        assert tokens[0].literal == pytest.approx(0.0025)

    def test_tokenizes_prefixed_integers(self):
        assert tokenize("0x1F")[0].literal == 31
        assert tokenize("0o17")[0].literal == 15
        assert tokenize("0b101")[0].literal == 5

    def test_large_integers_become_floats(self):
        literal = tokenize("9007199254740993")[0].literal
        assert isinstance(literal, float)

    def test_rejects_identifier_after_number(self):
        with pytest.raises(TokenizerError, match="identifier starts immediately"):
            tokenize("3in")

    def test_rejects_missing_exponent_digits(self):
        with pytest.raises(TokenizerError, match="exponent"):
            tokenize("1e")

    def test_rejects_missing_prefixed_digits(self):
        with pytest.raises(TokenizerError, match="missing digits"):
            tokenize("0x")


class TestKeywordsAndIdentifiers:
    """Tests for identifier and keyword tokenization."""

    def test_tokenizes_literal_keywords(self):
        assert kinds("true false null") == [
            (TokenType.TRUE, "true"),
            (TokenType.FALSE, "false"),
            (TokenType.NULL, "null"),
        ]

    def test_tokenizes_reserved_words_as_keywords(self):
        assert kinds("typeof void delete in instanceof") == [
            (TokenType.KEYWORD, "typeof"),
            (TokenType.KEYWORD, "void"),
            (TokenType.KEYWORD, "delete"),
            (TokenType.KEYWORD, "in"),
            (TokenType.KEYWORD, "instanceof"),
        ]

    def test_async_and_undefined_are_identifiers(self):
        assert kinds("async undefined") == [
            (TokenType.IDENTIFIER, "async"),
            (TokenType.IDENTIFIER, "undefined"),
        ]

    def test_tokenizes_dollar_and_underscore_identifiers(self):
        assert kinds("$el _private var123") == [
            (TokenType.IDENTIFIER, "$el"),
            (TokenType.IDENTIFIER, "_private"),
            (TokenType.IDENTIFIER, "var123"),
        ]

    def test_tokenizes_unicode_identifiers(self):
        assert kinds("café") == [(TokenType.IDENTIFIER, "café")]


class TestPunctuators:
    """Tests for operator and delimiter tokenization."""

    def test_prefers_longest_operator(self):
        assert [v for _, v in kinds("a >>>= b")] == ["a", ">>>=", "b"]
        assert [v for _, v in kinds("a !== b")] == ["a", "!==", "b"]
        assert [v for _, v in kinds("a ** b")] == ["a", "**", "b"]

    def test_tokenizes_spread_and_arrow(self):
        assert [v for _, v in kinds("(...a) => a")] == ["(", "...", "a", ")", "=>", "a"]

    def test_question_dot_before_digit_is_conditional(self):
        assert [v for _, v in kinds("a?.5:1")] == ["a", "?", ".5", ":", "1"]

    def test_rejects_unknown_characters(self):
        with pytest.raises(TokenizerError, match="Unexpected character: '#'"):
            tokenize("a # b")

    def test_error_carries_position(self):
        with pytest.raises(TokenizerError) as exc_info:
            tokenize("a @ b")
        assert exc_info.value.position == 2
        assert exc_info.value.expression == "a @ b"


class TestRegexLiterals:
    """Tests for regular expression literal detection."""

    def test_slash_at_start_is_regex(self):
        tokens = tokenize("/abc/.test(s)")
        assert tokens[0].type == TokenType.REGEX
        assert tokens[0].value == "/abc/"
        assert tokens[0].literal == ("abc", "")

    def test_regex_flags(self):
        tokens = tokenize("x = /ab+c/gi")
        assert tokens[2].type == TokenType.REGEX
        assert tokens[2].literal == ("ab+c", "gi")

    def test_slash_after_operand_is_division(self):
        assert [t for t, _ in kinds("a / b / c")] == [
            TokenType.IDENTIFIER,
            TokenType.PUNCTUATOR,
            TokenType.IDENTIFIER,
            TokenType.PUNCTUATOR,
            TokenType.IDENTIFIER,
        ]

    def test_slash_after_closing_paren_is_division(self):
        assert (TokenType.PUNCTUATOR, "/") in kinds("(a) / 2")

    def test_slash_inside_class_does_not_end_regex(self):
        tokens = tokenize("/[/]x/")
        assert tokens[0].literal == ("[/]x", "")

    def test_escaped_slash_is_kept(self):
        tokens = tokenize(r"/a\/b/")
        assert tokens[0].literal == (r"a\/b", "")

    def test_rejects_unterminated_regex(self):
        with pytest.raises(TokenizerError, match="Unterminated regular expression"):
            tokenize("/abc")


class TestTemplates:
    """Tests for template literal tokenization."""

    def test_plain_template(self):
        tokens = tokenize("`hello`")
        assert tokens[0].type == TokenType.TEMPLATE
        data = tokens[0].literal
        assert [q.cooked for q in data.quasis] == ["hello"]
        assert data.expressions == []

    def test_template_with_substitution(self):
        data = tokenize("`a${b}c`")[0].literal
        assert [q.cooked for q in data.quasis] == ["a", "c"]
        assert [(t.type, t.value) for t in data.expressions[0]] == [
            (TokenType.IDENTIFIER, "b"),
            (TokenType.EOF, ""),
        ]

    def test_braces_inside_substitution_are_balanced(self):
        data = tokenize("`${[1, 2].map(x => ({}))}`")[0].literal
        values = [t.value for t in data.expressions[0]]
        assert values[-2] == ")"
        assert values.count("{") == values.count("}") == 1

    def test_nested_templates(self):
        data = tokenize("`a${`b${c}`}`")[0].literal
        inner = data.expressions[0][0]
        assert inner.type == TokenType.TEMPLATE
        assert [q.cooked for q in inner.literal.quasis] == ["b", ""]

    def test_cooked_and_raw_text(self):
        data = tokenize(r"`a\nb`")[0].literal
        assert data.quasis[0].cooked == "a\nb"
        assert data.quasis[0].raw == r"a\nb"

    def test_carriage_returns_are_normalized(self):
        data = tokenize("`a\r\nb`")[0].literal
        assert data.quasis[0].cooked == "a\nb"
        assert data.quasis[0].raw == "a\nb"

    def test_rejects_unterminated_template(self):
        with pytest.raises(TokenizerError, match="Unterminated template"):
            tokenize("`abc")

    def test_rejects_unterminated_substitution(self):
        with pytest.raises(TokenizerError, match="Unterminated template"):
            tokenize("`${a")


class TestWhitespaceAndComments:
    """Tests for skipped input."""

    def test_skips_comments(self):
        assert [v for _, v in kinds("1 /* c */ + // x\n 2")] == ["1", "+", "2"]

    def test_rejects_unterminated_comment(self):
        with pytest.raises(TokenizerError, match="Unterminated comment"):
            tokenize("1 /* c")

    def test_skips_unicode_whitespace(self):
        assert [v for _, v in kinds("1\u00a0+\u30002")] == ["1", "+", "2"]

    def test_ends_with_eof(self):
        tokens = tokenize("  ")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF
        assert tokens[0].position == 2


class TestLimits:
    """Tests for tokenizer limits."""

    def test_rejects_overlong_expressions(self):
        with pytest.raises(LimitExceededError) as exc_info:
            tokenize("x" * 5000)
        assert exc_info.value.limit_name == "max_expression_length"

    def test_custom_limits(self):
        with pytest.raises(LimitExceededError):
            tokenize("123456", ExpressionLimits(max_expression_length=5))
