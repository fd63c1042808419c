"""
Diagnostics produced by the RobotML type checker.

Diagnostics are advisory: the checker never aborts, it accumulates records
in a sink and hands the full list back. This module defines the record, the
sink the checker writes to, and a compiler-style terminal renderer.

Example output:
    error[E0092]: Division by zero
      --> square.rml:3:15
       |
     3 |     Speed 10 / 0
       |               ^
       |
"""

from __future__ import annotations

import builtins
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from robotml.utils.errors import SourceLocation


# =============================================================================
# Diagnostic Severity Levels
# =============================================================================


class DiagnosticSeverity(Enum):
    """Severity level for diagnostic messages."""

    ERROR = "error"  # Program is ill-typed
    WARNING = "warning"  # Program runs but is probably wrong
    INFO = "info"  # Informational (implicit unit casts)

    def color_code(self) -> str:
        """Get ANSI color code for terminal output."""
        colors = {
            DiagnosticSeverity.ERROR: "\033[91m",  # Red
            DiagnosticSeverity.WARNING: "\033[93m",  # Yellow
            DiagnosticSeverity.INFO: "\033[96m",  # Cyan
        }
        return colors.get(self, "")

    @property
    def label(self) -> str:
        """Get the label for this severity."""
        return self.value


# =============================================================================
# Core Diagnostic Type
# =============================================================================


@dataclass(slots=True)
class Diagnostic:
    """
    One checker finding.

    Attributes:
        severity: ERROR, WARNING or INFO
        message: Human-readable description
        node: The AST node the finding is attached to
        property: Optional name of the node field that is at fault
        index: Optional index into a list-valued `property`
        code: Short stable code such as "E0092"
    """

    severity: DiagnosticSeverity
    message: str
    node: Any = None
    property: Optional[str] = None
    index: Optional[int] = None
    code: str = ""

    # The `property` field shadows the builtin inside this class body
    @builtins.property
    def location(self) -> Optional[SourceLocation]:
        """Source location of the offending node, if it has one."""
        return getattr(self.node, "location", None)

    @builtins.property
    def is_error(self) -> bool:
        return self.severity == DiagnosticSeverity.ERROR

    def to_dict(self) -> dict[str, Any]:
        """Plain mapping suitable for JSON output."""
        loc = self.location
        result: dict[str, Any] = {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
        }
        if loc is not None:
            result["line"] = loc.line
            result["column"] = loc.column
        if self.property is not None:
            result["property"] = self.property
        if self.index is not None:
            result["index"] = self.index
        return result

    def __str__(self) -> str:
        loc = self.location
        prefix = f"{loc}: " if loc else ""
        return f"{prefix}{self.severity.label}: {self.message}"


# =============================================================================
# Diagnostic Sink
# =============================================================================


@dataclass
class DiagnosticSink:
    """
    Accumulates diagnostics for a single checking run.

    The checker only ever calls `accept`; everything else is for callers
    inspecting the outcome.
    """

    diagnostics: list[Diagnostic] = field(default_factory=list)

    def accept(
        self,
        severity: DiagnosticSeverity,
        message: str,
        node: Any = None,
        property: Optional[str] = None,
        index: Optional[int] = None,
        code: str = "",
    ) -> Diagnostic:
        """Record a diagnostic and return it."""
        diag = Diagnostic(severity, message, node, property, index, code)
        self.diagnostics.append(diag)
        return diag

    def has_errors(self) -> bool:
        """Check if any error diagnostics have been recorded."""
        return any(d.severity == DiagnosticSeverity.ERROR for d in self.diagnostics)

    def error_count(self) -> int:
        return count_severity(self.diagnostics, DiagnosticSeverity.ERROR)

    def warning_count(self) -> int:
        return count_severity(self.diagnostics, DiagnosticSeverity.WARNING)

    def clear(self) -> None:
        self.diagnostics.clear()


def count_severity(diagnostics: list[Diagnostic], severity: DiagnosticSeverity) -> int:
    """Count diagnostics of one severity."""
    return sum(1 for d in diagnostics if d.severity == severity)


# =============================================================================
# Formatting
# =============================================================================


def format_diagnostic(
    diag: Diagnostic,
    source: str = "",
    filename: str = "<input>",
    use_color: bool = True,
) -> str:
    """
    Format a diagnostic with its source line and a caret under the column.

    Args:
        diag: The diagnostic to format
        source: Full source text the diagnostic refers to (may be empty)
        filename: Fallback filename when the location carries none
        use_color: Whether to use ANSI color codes

    Returns:
        Formatted multi-line string
    """
    lines: list[str] = []
    src_lines = source.splitlines() if source else []

    reset = "\033[0m" if use_color else ""
    bold = "\033[1m" if use_color else ""
    blue = "\033[94m" if use_color else ""
    severity_color = diag.severity.color_code() if use_color else ""

    code = f"[{diag.code}]" if diag.code else ""
    lines.append(
        f"{severity_color}{bold}{diag.severity.label}{code}{reset}: {bold}{diag.message}{reset}"
    )

    loc = diag.location
    if loc is None:
        return "\n".join(lines)

    lines.append(f"  {blue}-->{reset} {loc.filename or filename}:{loc.line}:{loc.column}")

    if 1 <= loc.line <= len(src_lines):
        source_line = src_lines[loc.line - 1]
        lines.append(f"   {blue}|{reset}")
        lines.append(f"{blue}{loc.line:3} |{reset} {source_line}")
        padding = " " * (loc.column - 1)
        lines.append(f"   {blue}|{reset} {padding}{severity_color}^{reset}")
        lines.append(f"   {blue}|{reset}")

    return "\n".join(lines)


def format_all(
    diagnostics: list[Diagnostic],
    source: str = "",
    filename: str = "<input>",
    use_color: bool = True,
) -> str:
    """Format all diagnostics as a single string."""
    return "\n\n".join(
        format_diagnostic(d, source, filename, use_color) for d in diagnostics
    )


__all__ = [
    "DiagnosticSeverity",
    "Diagnostic",
    "DiagnosticSink",
    "count_severity",
    "format_diagnostic",
    "format_all",
]
