"""
Check-then-run pipeline for RobotML programs.

The type checker and the interpreter are independent passes. The pipeline
composes them: it optionally checks the program first and, in strict mode,
refuses to interpret a program with error diagnostics.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from robotml.compiler import parse_source
from robotml.compiler.ast_json import load_program
from robotml.compiler.ast_nodes import Program
from robotml.compiler.diagnostics import Diagnostic, DiagnosticSeverity, count_severity
from robotml.compiler.type_checker import TypeChecker
from robotml.runtime.commands import InterpreterResult
from robotml.runtime.interpreter import Interpreter
from robotml.utils.errors import RobotMLError

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """
    Complete result of a pipeline run.

    Attributes:
        diagnostics: Checker diagnostics (empty when checking is disabled)
        result: Interpreter output, or None if interpretation did not happen
        error: The error that stopped the run, if any
        program: The program that was run (useful for further processing)
    """

    diagnostics: list[Diagnostic] = field(default_factory=list)
    result: Optional[InterpreterResult] = None
    error: Optional[RobotMLError] = None
    program: Optional[Program] = None

    @property
    def success(self) -> bool:
        return self.error is None and self.result is not None

    @property
    def error_count(self) -> int:
        return count_severity(self.diagnostics, DiagnosticSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return count_severity(self.diagnostics, DiagnosticSeverity.WARNING)

    def __str__(self) -> str:
        lines = ["Run Result:"]
        lines.append(f"  Success: {self.success}")
        if self.diagnostics:
            lines.append(f"  Errors: {self.error_count}, Warnings: {self.warning_count}")
            for diag in self.diagnostics[:5]:
                lines.append(f"    - {diag}")
            if len(self.diagnostics) > 5:
                lines.append(f"    ... and {len(self.diagnostics) - 5} more")
        if self.result is not None:
            lines.append(f"  Commands: {len(self.result.commands)}")
        if self.error is not None:
            lines.append(f"  Error: {self.error}")
        return "\n".join(lines)


class StrictModeError(RobotMLError):
    """Raised into RunResult.error when strict mode blocks interpretation."""


class RunPipeline:
    """
    Runs the checker and the interpreter over one program.

    Example:
        pipeline = RunPipeline(strict=True)
        outcome = pipeline.run_source(source, "square.rml")
        if outcome.success:
            print(outcome.result.to_json())

    Attributes:
        check_types: Run the type checker before interpreting
        strict: Do not interpret a program that has error diagnostics
        warnings_as_errors: In strict mode, warnings also block interpretation
    """

    def __init__(
        self,
        check_types: bool = True,
        strict: bool = False,
        warnings_as_errors: bool = False,
    ) -> None:
        self.check_types = check_types
        self.strict = strict
        self.warnings_as_errors = warnings_as_errors

    def check(self, program: Program) -> list[Diagnostic]:
        return TypeChecker().check(program)

    def run(self, program: Program) -> RunResult:
        """
        Check (if enabled) and interpret a linked program.

        Runtime faults are captured in `RunResult.error`, never raised.
        """
        outcome = RunResult(program=program)

        if self.check_types:
            outcome.diagnostics = self.check(program)
            logger.info(
                f"Type check: {outcome.error_count} error(s), {outcome.warning_count} warning(s)"
            )
            blocking = self._blocking(outcome.diagnostics)
            if self.strict and blocking:
                outcome.error = StrictModeError(
                    f"Program has {len(blocking)} blocking diagnostic(s); not interpreting"
                )
                return outcome

        try:
            outcome.result = Interpreter().interpret(program)
        except RobotMLError as exc:
            logger.info(f"Interpretation aborted: {exc}")
            outcome.error = exc
        return outcome

    def run_source(self, source: str, filename: Optional[str] = None) -> RunResult:
        """Parse, link, check and interpret RobotML source code."""
        try:
            program = parse_source(source, filename)
        except RobotMLError as exc:
            return RunResult(error=exc)
        return self.run(program)

    def run_file(self, path: Union[str, Path]) -> RunResult:
        """Run a ``.rml`` source file or a ``.json`` serialised AST."""
        path = Path(path)
        try:
            if path.suffix == ".json":
                program = load_program(path)
            else:
                return self.run_source(path.read_text(encoding="utf-8"), str(path))
        except RobotMLError as exc:
            return RunResult(error=exc)
        return self.run(program)

    def _blocking(self, diagnostics: list[Diagnostic]) -> list[Diagnostic]:
        severities = {DiagnosticSeverity.ERROR}
        if self.warnings_as_errors:
            severities.add(DiagnosticSeverity.WARNING)
        return [d for d in diagnostics if d.severity in severities]


def run_source(source: str, filename: Optional[str] = None, **options: bool) -> RunResult:
    """Convenience function: run source with a fresh pipeline."""
    return RunPipeline(**options).run_source(source, filename)
