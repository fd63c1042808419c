"""
Error types and source location tracking for RobotML.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Attributes:
        line: 1-indexed line number
        column: 1-indexed column number
        offset: 0-indexed byte offset from start of source
        filename: Optional filename for error reporting
    """

    line: int
    column: int
    offset: int = 0
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


class RobotMLError(Exception):
    """Base exception for all RobotML errors."""

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> None:
        self.message = message
        self.location = location
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = []

        if self.location:
            parts.append(f"[{self.location}]")

        parts.append(self.message)

        if self.source_line and self.location:
            parts.append(f"\n    {self.source_line}")
            # Caret under the offending column
            padding = " " * (4 + self.location.column - 1)
            parts.append(f"\n{padding}^")

        return " ".join(parts) if not self.source_line else parts[0] + " " + "".join(parts[1:])


class LexerError(RobotMLError):
    """Raised when the lexer encounters an invalid token or character."""

    pass


class ParserError(RobotMLError):
    """Raised when the parser encounters a syntax error."""

    pass


class AstFormatError(RobotMLError):
    """
    Raised when a serialized AST cannot be decoded.

    The `path` attribute holds the JSON path of the offending object
    (for example ``#/functions@0/block/statements@2``).
    """

    def __init__(self, message: str, path: str = "#") -> None:
        self.path = path
        super().__init__(f"{message} (at {path})")


class DuplicateSymbolError(RobotMLError):
    """Raised by the scope table when a name is declared twice in one scope."""

    def __init__(self, name: str, location: Optional[SourceLocation] = None) -> None:
        self.name = name
        super().__init__(f"Variable '{name}' is already declared in this scope", location)


class InterpreterError(RobotMLError):
    """
    Raised when program execution cannot continue.

    Interpretation is fail-fast: the whole run is aborted and no partial
    command list is returned.
    """

    def __init__(self, message: str, node: Any = None) -> None:
        self.node = node
        super().__init__(message, getattr(node, "location", None))
