"""
Pytest configuration and shared fixtures for RobotML tests.
"""

from dataclasses import dataclass, field
from typing import Optional

import pytest

from robotml.compiler.ast_nodes import Program
from robotml.compiler.diagnostics import Diagnostic, DiagnosticSeverity
from robotml.compiler.lexer import Lexer
from robotml.compiler.linker import link
from robotml.compiler.parser import Parser
from robotml.compiler.tokens import Token
from robotml.compiler.type_checker import TypeChecker
from robotml.runtime.commands import InterpreterResult
from robotml.runtime.interpreter import Interpreter


@pytest.fixture
def lexer_factory():
    """Factory fixture for creating lexers."""

    def _create_lexer(source: str, filename: str = "test.rml") -> Lexer:
        return Lexer(source, filename)

    return _create_lexer


@pytest.fixture
def parser_factory(lexer_factory):
    """Factory fixture for creating parsers from source."""

    def _create_parser(source: str) -> Parser:
        tokens = lexer_factory(source).tokenize()
        return Parser(tokens, source)

    return _create_parser


@pytest.fixture
def tokenize(lexer_factory):
    """Fixture to tokenize source code."""

    def _tokenize(source: str) -> list[Token]:
        return lexer_factory(source).tokenize()

    return _tokenize


@pytest.fixture
def parse(parser_factory):
    """Fixture to parse source code into an unlinked AST."""

    def _parse(source: str) -> Program:
        return parser_factory(source).parse()

    return _parse


@pytest.fixture
def parse_linked(parse):
    """Fixture to parse and link source code."""

    def _parse_linked(source: str) -> Program:
        return link(parse(source))

    return _parse_linked


# =============================================================================
# Checking and interpretation
# =============================================================================


@dataclass
class CheckResult:
    """Diagnostics of one checker run, with severity helpers."""

    program: Program
    diagnostics: list[Diagnostic] = field(default_factory=list)
    checker: Optional[TypeChecker] = None

    def of(self, severity: DiagnosticSeverity) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == severity]

    @property
    def errors(self) -> list[Diagnostic]:
        return self.of(DiagnosticSeverity.ERROR)

    @property
    def warnings(self) -> list[Diagnostic]:
        return self.of(DiagnosticSeverity.WARNING)

    @property
    def infos(self) -> list[Diagnostic]:
        return self.of(DiagnosticSeverity.INFO)

    def codes(self) -> list[str]:
        return [d.code for d in self.diagnostics]


@pytest.fixture
def check_source(parse_linked):
    """Fixture to type check source code."""

    def _check(source: str) -> CheckResult:
        program = parse_linked(source)
        checker = TypeChecker()
        return CheckResult(program, checker.check(program), checker)

    return _check


@pytest.fixture
def run_source(parse_linked):
    """Fixture to interpret source code without type checking."""

    def _run(source: str) -> InterpreterResult:
        return Interpreter().interpret(parse_linked(source))

    return _run


@pytest.fixture
def command_dicts(run_source):
    """Fixture returning the interpreted commands as plain dicts."""

    def _dicts(source: str) -> list[dict]:
        return [c.to_dict() for c in run_source(source).commands]

    return _dicts
