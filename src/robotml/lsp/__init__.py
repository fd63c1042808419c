"""
RobotML Language Server.

Publishes parse errors and type checker diagnostics to editors and answers
the ``robotml/interpret`` notification with the robot commands a document
produces.
"""

from robotml.lsp.diagnostics import DiagnosticProvider, get_diagnostics_for_document
from robotml.lsp.server import RobotMLLanguageServer, create_server, interpret_document

__all__ = [
    "DiagnosticProvider",
    "get_diagnostics_for_document",
    "RobotMLLanguageServer",
    "create_server",
    "interpret_document",
]
