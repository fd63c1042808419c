"""
Token definitions for the RobotML lexer.

This module defines all token types recognized by the RobotML surface
syntax: keywords (including the robot command keywords), operators,
punctuation, literals and comments.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from robotml.utils.errors import SourceLocation


class TokenType(Enum):
    """Enumeration of all token types in RobotML."""

    # End of file
    EOF = auto()

    # Literals
    NUMBER = auto()
    TRUE = auto()
    FALSE = auto()

    # Identifiers
    IDENTIFIER = auto()

    # Comments (kept so the parser can turn them into Comment statements)
    COMMENT = auto()

    # Declaration keywords
    LET = auto()
    VAR = auto()
    RETURN = auto()
    LOOP = auto()
    IN = auto()
    AND = auto()
    OR = auto()

    # Type keywords
    TYPE_VOID = auto()
    TYPE_NUMBER = auto()
    TYPE_BOOLEAN = auto()
    TYPE_CM = auto()
    TYPE_MM = auto()

    # Robot command keywords
    FORWARD = auto()
    BACKWARD = auto()
    LEFT = auto()
    RIGHT = auto()
    CLOCK = auto()
    ROTATE = auto()
    SPEED = auto()

    # Arithmetic operators
    PLUS = auto()  # +
    MINUS = auto()  # -
    STAR = auto()  # *
    SLASH = auto()  # /
    PERCENT = auto()  # %

    # Comparison operators
    EQ = auto()  # ==
    NE = auto()  # !=
    LT = auto()  # <
    LE = auto()  # <=
    GT = auto()  # >
    GE = auto()  # >=

    # Assignment
    ASSIGN = auto()  # =

    # Delimiters
    LPAREN = auto()  # (
    RPAREN = auto()  # )
    LBRACE = auto()  # {
    RBRACE = auto()  # }
    COMMA = auto()  # ,


# Keyword mapping. Robot commands are capitalised as in the language;
# `Speed` and `setSpeed` are synonyms.
KEYWORDS: dict[str, TokenType] = {
    "let": TokenType.LET,
    "var": TokenType.VAR,
    "return": TokenType.RETURN,
    "loop": TokenType.LOOP,
    "in": TokenType.IN,
    "and": TokenType.AND,
    "or": TokenType.OR,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "void": TokenType.TYPE_VOID,
    "number": TokenType.TYPE_NUMBER,
    "boolean": TokenType.TYPE_BOOLEAN,
    "cm": TokenType.TYPE_CM,
    "mm": TokenType.TYPE_MM,
    "Forward": TokenType.FORWARD,
    "Backward": TokenType.BACKWARD,
    "Left": TokenType.LEFT,
    "Right": TokenType.RIGHT,
    "Clock": TokenType.CLOCK,
    "Rotate": TokenType.ROTATE,
    "Speed": TokenType.SPEED,
    "setSpeed": TokenType.SPEED,
}

TYPE_KEYWORDS = frozenset(
    {
        TokenType.TYPE_VOID,
        TokenType.TYPE_NUMBER,
        TokenType.TYPE_BOOLEAN,
        TokenType.TYPE_CM,
        TokenType.TYPE_MM,
    }
)

MOVEMENT_KEYWORDS = frozenset(
    {TokenType.FORWARD, TokenType.BACKWARD, TokenType.LEFT, TokenType.RIGHT}
)

DOUBLE_CHAR_TOKENS: dict[str, TokenType] = {
    "==": TokenType.EQ,
    "!=": TokenType.NE,
    "<=": TokenType.LE,
    ">=": TokenType.GE,
}

SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "%": TokenType.PERCENT,
    "<": TokenType.LT,
    ">": TokenType.GT,
    "=": TokenType.ASSIGN,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ",": TokenType.COMMA,
}


@dataclass(frozen=True, slots=True)
class Token:
    """
    Represents a single token from the source code.

    Attributes:
        type: The type of this token
        value: The literal value (for numbers) or lexeme text
        location: Source location of this token
    """

    type: TokenType
    value: Any
    location: SourceLocation

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.location})"
        return f"Token({self.type.name}, {self.location})"

    @property
    def is_type_keyword(self) -> bool:
        """Check if this token names a type."""
        return self.type in TYPE_KEYWORDS
