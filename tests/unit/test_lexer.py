"""
Unit tests for the RobotML Lexer.
"""

import pytest

from robotml.compiler.lexer import Lexer
from robotml.compiler.tokens import TokenType
from robotml.utils.errors import LexerError


def types_of(tokens):
    return [t.type for t in tokens]


class TestLexerBasics:
    """Basic lexer functionality tests."""

    def test_empty_source(self, tokenize):
        """Empty source yields just EOF."""
        tokens = tokenize("")
        assert types_of(tokens) == [TokenType.EOF]

    def test_newlines_are_whitespace(self, tokenize):
        """Newlines never produce tokens."""
        tokens = tokenize("\n\n  \t\n")
        assert types_of(tokens) == [TokenType.EOF]

    def test_function_header(self, tokenize):
        tokens = tokenize("let number f(cm a) {}")
        assert types_of(tokens) == [
            TokenType.LET,
            TokenType.TYPE_NUMBER,
            TokenType.IDENTIFIER,
            TokenType.LPAREN,
            TokenType.TYPE_CM,
            TokenType.IDENTIFIER,
            TokenType.RPAREN,
            TokenType.LBRACE,
            TokenType.RBRACE,
            TokenType.EOF,
        ]

    def test_iteration_matches_tokenize(self):
        lexer = Lexer("var number x = 1")
        assert [t.type for t in lexer] == types_of(Lexer("var number x = 1").tokenize())


class TestLexerNumbers:
    """Tests for number literals."""

    def test_integer(self, tokenize):
        token = tokenize("42")[0]
        assert token.type == TokenType.NUMBER
        assert token.value == 42
        assert isinstance(token.value, int)

    def test_decimal(self, tokenize):
        token = tokenize("2.5")[0]
        assert token.value == 2.5
        assert isinstance(token.value, float)

    def test_trailing_dot_is_not_decimal(self, tokenize):
        """A dot without digits after it is not part of the number."""
        with pytest.raises(LexerError):
            tokenize("3.")

    def test_minus_is_separate_token(self, tokenize):
        assert types_of(tokenize("-5")) == [TokenType.MINUS, TokenType.NUMBER, TokenType.EOF]


class TestLexerKeywords:
    """Tests for keyword recognition."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Forward", TokenType.FORWARD),
            ("Backward", TokenType.BACKWARD),
            ("Left", TokenType.LEFT),
            ("Right", TokenType.RIGHT),
            ("Clock", TokenType.CLOCK),
            ("Rotate", TokenType.ROTATE),
            ("Speed", TokenType.SPEED),
            ("setSpeed", TokenType.SPEED),
            ("loop", TokenType.LOOP),
            ("in", TokenType.IN),
            ("and", TokenType.AND),
            ("or", TokenType.OR),
            ("true", TokenType.TRUE),
            ("false", TokenType.FALSE),
        ],
    )
    def test_keyword(self, tokenize, text, expected):
        assert tokenize(text)[0].type == expected

    def test_command_keywords_are_case_sensitive(self, tokenize):
        """Lowercase `forward` is an ordinary identifier."""
        token = tokenize("forward")[0]
        assert token.type == TokenType.IDENTIFIER
        assert token.value == "forward"

    def test_type_keywords(self, tokenize):
        tokens = tokenize("void number boolean cm mm")
        assert all(t.is_type_keyword for t in tokens[:-1])
        assert not tokens[-1].is_type_keyword


class TestLexerOperators:
    """Tests for operators and delimiters."""

    def test_double_char_operators(self, tokenize):
        assert types_of(tokenize("== != <= >=")) == [
            TokenType.EQ,
            TokenType.NE,
            TokenType.LE,
            TokenType.GE,
            TokenType.EOF,
        ]

    def test_single_char_operators(self, tokenize):
        assert types_of(tokenize("+ - * / % < > = , ( ) { }"))[:-1] == [
            TokenType.PLUS,
            TokenType.MINUS,
            TokenType.STAR,
            TokenType.SLASH,
            TokenType.PERCENT,
            TokenType.LT,
            TokenType.GT,
            TokenType.ASSIGN,
            TokenType.COMMA,
            TokenType.LPAREN,
            TokenType.RPAREN,
            TokenType.LBRACE,
            TokenType.RBRACE,
        ]

    def test_division_is_not_a_comment(self, tokenize):
        assert types_of(tokenize("1/0")) == [
            TokenType.NUMBER,
            TokenType.SLASH,
            TokenType.NUMBER,
            TokenType.EOF,
        ]


class TestLexerComments:
    """Tests for comment tokens."""

    def test_line_comment(self, tokenize):
        tokens = tokenize("// turn around\nClock 180")
        assert tokens[0].type == TokenType.COMMENT
        assert tokens[0].value == "turn around"
        assert tokens[1].type == TokenType.CLOCK

    def test_block_comment(self, tokenize):
        tokens = tokenize("/* a\n b */ Speed 5")
        assert tokens[0].type == TokenType.COMMENT
        assert tokens[0].value == "a\n b"
        assert tokens[1].type == TokenType.SPEED
        assert tokens[1].location.line == 2

    def test_unterminated_block_comment(self, tokenize):
        with pytest.raises(LexerError, match="Unterminated"):
            tokenize("/* never closed")


class TestLexerLocations:
    """Tests for source location tracking."""

    def test_line_and_column(self, tokenize):
        tokens = tokenize("main() {\n    Clock 90\n}")
        clock = next(t for t in tokens if t.type == TokenType.CLOCK)
        assert clock.location.line == 2
        assert clock.location.column == 5

    def test_filename_recorded(self, tokenize):
        assert tokenize("x")[0].location.filename == "test.rml"

    def test_invalid_character(self, tokenize):
        with pytest.raises(LexerError) as exc_info:
            tokenize("Speed 5 $")
        assert exc_info.value.location.column == 9
        assert "$" in str(exc_info.value)
