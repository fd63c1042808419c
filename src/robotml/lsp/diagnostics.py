"""
Diagnostic generation for the RobotML language server.

Converts front-end errors (lexer, parser) and type checker diagnostics into
LSP diagnostics for display in editors.
"""

from typing import Optional

from lsprotocol import types

from robotml.compiler import parse_source
from robotml.compiler.diagnostics import Diagnostic as CheckerDiagnostic
from robotml.compiler.diagnostics import DiagnosticSeverity
from robotml.compiler.type_checker import TypeChecker
from robotml.utils.errors import RobotMLError, SourceLocation

SOURCE_NAME = "robotml"

SEVERITY_MAP = {
    DiagnosticSeverity.ERROR: types.DiagnosticSeverity.Error,
    DiagnosticSeverity.WARNING: types.DiagnosticSeverity.Warning,
    DiagnosticSeverity.INFO: types.DiagnosticSeverity.Information,
}

_TOKEN_BREAKS = "(){},"


class DiagnosticProvider:
    """
    Generates LSP diagnostics from RobotML source code.

    A lexer or parser error yields a single diagnostic and stops there;
    otherwise every type checker diagnostic is reported.
    """

    def __init__(self, source: str, uri: str) -> None:
        """
        Initialize the diagnostic provider.

        Args:
            source: The RobotML source code to analyze
            uri: The document URI
        """
        self.source = source
        self.uri = uri
        self._lines = source.splitlines()
        self._diagnostics: list[types.Diagnostic] = []

    def get_diagnostics(self) -> list[types.Diagnostic]:
        """
        Get all diagnostics for the document.

        Returns:
            List of LSP diagnostic objects
        """
        self._diagnostics = []

        try:
            program = parse_source(self.source, self.uri)
        except RobotMLError as e:
            self._add_front_end_error(e)
            return self._diagnostics

        for diag in TypeChecker().check(program):
            self._add_checker_diagnostic(diag)

        return self._diagnostics

    def _add_front_end_error(self, error: RobotMLError) -> None:
        self._diagnostics.append(
            types.Diagnostic(
                range=self._range_at(error.location),
                message=error.message,
                severity=types.DiagnosticSeverity.Error,
                source=SOURCE_NAME,
            )
        )

    def _add_checker_diagnostic(self, diag: CheckerDiagnostic) -> None:
        self._diagnostics.append(
            types.Diagnostic(
                range=self._range_at(diag.location),
                message=diag.message,
                severity=SEVERITY_MAP.get(diag.severity, types.DiagnosticSeverity.Error),
                source=SOURCE_NAME,
                code=diag.code or None,
            )
        )

    def _range_at(self, location: Optional[SourceLocation]) -> types.Range:
        """
        Build a range covering the token that starts at `location`.

        Diagnostics without a location are attached to the start of the
        document.
        """
        if location is None:
            return types.Range(
                start=types.Position(line=0, character=0),
                end=types.Position(line=0, character=1),
            )

        line = max(0, location.line - 1)  # Convert to 0-indexed
        character = max(0, location.column - 1)
        end_character = character + 1

        if line < len(self._lines):
            rest_of_line = self._lines[line][character:]
            for i, c in enumerate(rest_of_line):
                if c.isspace() or c in _TOKEN_BREAKS:
                    end_character = character + max(1, i)
                    break
            else:
                end_character = character + max(1, len(rest_of_line))

        return types.Range(
            start=types.Position(line=line, character=character),
            end=types.Position(line=line, character=end_character),
        )


def get_diagnostics_for_document(source: str, uri: str) -> list[types.Diagnostic]:
    """
    Convenience function to get diagnostics for a document.

    Args:
        source: The RobotML source code
        uri: The document URI

    Returns:
        List of LSP diagnostics
    """
    return DiagnosticProvider(source, uri).get_diagnostics()
