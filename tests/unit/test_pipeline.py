"""
Unit tests for the check-then-run pipeline.
"""

from robotml.compiler.ast_json import save_program
from robotml.compiler.ast_nodes import NumberLiteral, Speed
from robotml.compiler.diagnostics import (
    Diagnostic,
    DiagnosticSeverity,
    DiagnosticSink,
    format_all,
    format_diagnostic,
)
from robotml.pipeline import RunPipeline, StrictModeError, run_source
from robotml.utils.errors import InterpreterError, ParserError, SourceLocation


class TestRunPipeline:
    def test_clean_program(self):
        outcome = RunPipeline().run_source("main() { Clock 90 }")
        assert outcome.success
        assert outcome.diagnostics == []
        assert [c.to_dict() for c in outcome.result.commands] == [
            {"type": "turn", "angle": 90, "timestamp": 1}
        ]

    def test_errors_do_not_block_by_default(self):
        outcome = RunPipeline().run_source("main() { Speed 5 var boolean b = 1 }")
        assert outcome.error_count == 1
        assert outcome.success
        assert len(outcome.result) == 1

    def test_strict_mode_blocks_errors(self):
        outcome = RunPipeline(strict=True).run_source("main() { Speed 5 var boolean b = 1 }")
        assert isinstance(outcome.error, StrictModeError)
        assert outcome.result is None
        assert not outcome.success

    def test_strict_mode_allows_warnings(self):
        outcome = RunPipeline(strict=True).run_source("main() { Forward 10 }")
        assert outcome.warning_count == 1
        assert outcome.success

    def test_warnings_as_errors(self):
        pipeline = RunPipeline(strict=True, warnings_as_errors=True)
        outcome = pipeline.run_source("main() { Forward 10 }")
        assert isinstance(outcome.error, StrictModeError)

    def test_no_check(self):
        outcome = RunPipeline(check_types=False).run_source("main() { var boolean b = 1 }")
        assert outcome.diagnostics == []
        assert outcome.success

    def test_parse_error_is_captured(self):
        outcome = RunPipeline().run_source("main() { Clock }")
        assert isinstance(outcome.error, ParserError)
        assert outcome.program is None

    def test_runtime_error_is_captured(self):
        outcome = RunPipeline().run_source("main() { Speed 1/0 }")
        assert outcome.error_count == 1
        assert isinstance(outcome.error, InterpreterError)
        assert outcome.result is None

    def test_str_summary(self):
        text = str(RunPipeline().run_source("main() { Forward 10 }"))
        assert "Success: True" in text
        assert "Warnings: 1" in text
        assert "Commands: 1" in text

    def test_convenience_function(self):
        outcome = run_source("main() { Speed 1/0 }", strict=True)
        assert isinstance(outcome.error, StrictModeError)


class TestRunFile:
    def test_source_file(self, tmp_path):
        path = tmp_path / "turn.rml"
        path.write_text("main() { Clock 45 }", encoding="utf-8")
        outcome = RunPipeline().run_file(path)
        assert outcome.success
        assert outcome.result.commands[0].angle == 45

    def test_json_file(self, tmp_path, parse_linked):
        path = tmp_path / "turn.json"
        save_program(parse_linked("main() { Clock 45 }"), path)
        outcome = RunPipeline().run_file(str(path))
        assert outcome.success
        assert outcome.result.commands[0].angle == 45

    def test_malformed_json_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text('{"$type": "DSLProgram", "functions": 3}', encoding="utf-8")
        outcome = RunPipeline().run_file(path)
        assert outcome.error is not None
        assert outcome.result is None


class TestDiagnosticFormatting:
    def test_format_with_source_line(self, check_source):
        source = "main() {\n    Speed 1/0\n}"
        result = check_source(source)
        text = format_diagnostic(result.errors[0], source, "sq.rml", use_color=False)
        lines = text.splitlines()
        assert lines[0] == "error[E0092]: Division by zero"
        assert lines[1].strip().startswith("-->")
        assert "Speed 1/0" in text
        assert "^" in lines[-2]

    def test_format_without_location(self):
        diag = Diagnostic(DiagnosticSeverity.WARNING, "Program has no functions defined", code="W0001")
        assert format_diagnostic(diag, use_color=False) == "warning[W0001]: Program has no functions defined"

    def test_format_all_separates_entries(self):
        diags = [
            Diagnostic(DiagnosticSeverity.INFO, "one"),
            Diagnostic(DiagnosticSeverity.INFO, "two"),
        ]
        assert format_all(diags, use_color=False) == "info: one\n\ninfo: two"

    def test_sink_counts(self):
        sink = DiagnosticSink()
        sink.accept(DiagnosticSeverity.ERROR, "bad", code="E0001")
        sink.accept(DiagnosticSeverity.WARNING, "odd")
        assert sink.has_errors()
        assert sink.error_count() == 1
        assert sink.warning_count() == 1
        sink.clear()
        assert not sink.has_errors()

    def test_to_dict(self, check_source):
        result = check_source("main() {\n  Clock true\n}")
        data = result.errors[0].to_dict()
        assert data["severity"] == "error"
        assert data["code"] == "E0040"
        assert data["line"] == 2

    def test_property_field_and_location(self):
        node = Speed(NumberLiteral(4, "-"), location=SourceLocation(3, 5, filename="fast.rml"))
        diag = Diagnostic(
            DiagnosticSeverity.ERROR, "Speed value must be positive", node, property="value", code="E0060"
        )
        assert diag.property == "value"
        assert diag.location == SourceLocation(3, 5, filename="fast.rml")
        assert diag.is_error
        assert diag.to_dict() == {
            "severity": "error",
            "code": "E0060",
            "message": "Speed value must be positive",
            "line": 3,
            "column": 5,
            "property": "value",
        }
        assert str(diag) == "fast.rml:3:5: error: Speed value must be positive"
