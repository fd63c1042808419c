"""
RobotML Utilities Package.

Common utilities for error handling and source locations.
"""

from robotml.utils.errors import (
    AstFormatError,
    DuplicateSymbolError,
    InterpreterError,
    LexerError,
    ParserError,
    RobotMLError,
    SourceLocation,
)

__all__ = [
    "RobotMLError",
    "LexerError",
    "ParserError",
    "AstFormatError",
    "DuplicateSymbolError",
    "InterpreterError",
    "SourceLocation",
]
