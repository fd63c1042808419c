"""
RobotML Lexer (Tokenizer).

Transforms RobotML source code into a stream of tokens. Comments are
emitted as COMMENT tokens rather than skipped so that they can appear as
statements in the tree.
"""

from typing import Iterator, Optional

from robotml.compiler.tokens import (
    DOUBLE_CHAR_TOKENS,
    KEYWORDS,
    SINGLE_CHAR_TOKENS,
    Token,
    TokenType,
)
from robotml.utils.errors import LexerError, SourceLocation


class Lexer:
    """
    Tokenizer for RobotML source code.

    The lexer supports:
    - Identifiers and keywords (command keywords are case-sensitive)
    - Integer and decimal number literals
    - Comments (// single line, /* multi-line */)
    - Curly-brace blocks; newlines are insignificant

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()
    """

    def __init__(self, source: str, filename: Optional[str] = None) -> None:
        """
        Initialize the lexer with source code.

        Args:
            source: The RobotML source code to tokenize
            filename: Optional filename for error reporting
        """
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []
        self._line_start = 0

    @property
    def _current_char(self) -> Optional[str]:
        """Return the current character or None if at end."""
        if self.pos >= len(self.source):
            return None
        return self.source[self.pos]

    @property
    def _peek_char(self) -> Optional[str]:
        """Return the next character without consuming it."""
        peek_pos = self.pos + 1
        if peek_pos >= len(self.source):
            return None
        return self.source[peek_pos]

    def _location(self) -> SourceLocation:
        return SourceLocation(
            line=self.line,
            column=self.column,
            offset=self.pos,
            filename=self.filename,
        )

    def _current_line_text(self) -> str:
        """Extract the current line of source for error messages."""
        end = self.source.find("\n", self._line_start)
        if end == -1:
            end = len(self.source)
        return self.source[self._line_start:end]

    def _advance(self) -> str:
        """Consume and return the current character."""
        char = self.source[self.pos]
        self.pos += 1

        if char == "\n":
            self.line += 1
            self.column = 1
            self._line_start = self.pos
        else:
            self.column += 1

        return char

    def _skip_whitespace(self) -> None:
        while self._current_char is not None and self._current_char in " \t\r\n":
            self._advance()

    def _read_line_comment(self) -> Token:
        """Read a // comment up to (not including) the end of the line."""
        start_loc = self._location()
        self._advance()  # /
        self._advance()  # /

        chars: list[str] = []
        while self._current_char is not None and self._current_char != "\n":
            chars.append(self._advance())

        return Token(TokenType.COMMENT, "".join(chars).strip(), start_loc)

    def _read_block_comment(self) -> Token:
        """Read a /* ... */ comment."""
        start_loc = self._location()
        line_text = self._current_line_text()
        self._advance()  # /
        self._advance()  # *

        chars: list[str] = []
        while True:
            if self._current_char is None:
                raise LexerError("Unterminated multi-line comment", start_loc, line_text)
            if self._current_char == "*" and self._peek_char == "/":
                self._advance()  # *
                self._advance()  # /
                break
            chars.append(self._advance())

        return Token(TokenType.COMMENT, "".join(chars).strip(), start_loc)

    def _read_number(self) -> Token:
        """Read an integer or decimal literal."""
        start_loc = self._location()
        chars: list[str] = []

        while self._current_char is not None and self._current_char.isdigit():
            chars.append(self._advance())

        if self._current_char == "." and self._peek_char is not None and self._peek_char.isdigit():
            chars.append(self._advance())
            while self._current_char is not None and self._current_char.isdigit():
                chars.append(self._advance())
            return Token(TokenType.NUMBER, float("".join(chars)), start_loc)

        return Token(TokenType.NUMBER, int("".join(chars)), start_loc)

    def _read_identifier_or_keyword(self) -> Token:
        start_loc = self._location()
        chars: list[str] = []

        while self._current_char is not None and (
            self._current_char.isalnum() or self._current_char == "_"
        ):
            chars.append(self._advance())

        text = "".join(chars)
        token_type = KEYWORDS.get(text, TokenType.IDENTIFIER)
        return Token(token_type, text, start_loc)

    def _read_operator(self) -> Optional[Token]:
        start_loc = self._location()

        if self._peek_char is not None:
            pair = self._current_char + self._peek_char
            if pair in DOUBLE_CHAR_TOKENS:
                self._advance()
                self._advance()
                return Token(DOUBLE_CHAR_TOKENS[pair], pair, start_loc)

        char = self._current_char
        if char in SINGLE_CHAR_TOKENS:
            self._advance()
            return Token(SINGLE_CHAR_TOKENS[char], char, start_loc)

        return None

    def _next_token(self) -> Token:
        """Scan and return the next token."""
        self._skip_whitespace()

        if self._current_char is None:
            return Token(TokenType.EOF, None, self._location())

        if self._current_char == "/" and self._peek_char == "/":
            return self._read_line_comment()

        if self._current_char == "/" and self._peek_char == "*":
            return self._read_block_comment()

        if self._current_char.isdigit():
            return self._read_number()

        if self._current_char.isalpha() or self._current_char == "_":
            return self._read_identifier_or_keyword()

        op_token = self._read_operator()
        if op_token is not None:
            return op_token

        raise LexerError(
            f"Unexpected character: {self._current_char!r}",
            self._location(),
            self._current_line_text(),
        )

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire source code.

        Returns:
            A list of all tokens including the final EOF token.
        """
        self.tokens = []
        self.pos = 0
        self.line = 1
        self.column = 1
        self._line_start = 0

        while True:
            token = self._next_token()
            self.tokens.append(token)
            if token.type == TokenType.EOF:
                break

        return self.tokens

    def __iter__(self) -> Iterator[Token]:
        if not self.tokens:
            self.tokenize()
        return iter(self.tokens)


def tokenize(source: str, filename: Optional[str] = None) -> list[Token]:
    """
    Convenience function to tokenize source code.

    Args:
        source: RobotML source code
        filename: Optional filename for error reporting

    Returns:
        List of tokens
    """
    return Lexer(source, filename).tokenize()
