"""
Unit tests for the robotml command-line interface.
"""

import json

import pytest

from robotml.cli import Colors, main


SQUARE = """
main() {
    setSpeed 10 in cm
    var number i = 0
    loop i < 4 {
        Forward 20 in cm
        Clock 90
        i = i + 1
    }
}
"""


@pytest.fixture(autouse=True)
def no_colors():
    Colors.disable()


@pytest.fixture
def write_program(tmp_path):
    """Write source to a file in a temporary directory and return its path."""

    def _write(source: str, name: str = "prog.rml"):
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return path

    return _write


class TestCheckCommand:
    def test_passes(self, write_program, capsys):
        path = write_program(SQUARE)
        assert main(["check", str(path)]) == 0
        assert "[ok] Type check passed (0 error(s), 0 warning(s))" in capsys.readouterr().out

    def test_fails_on_error(self, write_program, capsys):
        path = write_program("main() { Clock true }")
        assert main(["c", str(path)]) == 1
        captured = capsys.readouterr()
        assert "[!!] Type check failed" in captured.out
        assert "error[E0040]" in captured.err

    def test_warnings_pass_unless_promoted(self, write_program):
        path = write_program("main() { Forward 10 }")
        assert main(["check", str(path)]) == 0
        assert main(["check", "--warnings-as-errors", str(path)]) == 1

    def test_json_format(self, write_program, capsys):
        path = write_program("main() {\n  Speed -2\n}")
        assert main(["check", "--format", "json", str(path)]) == 1
        data = json.loads(capsys.readouterr().out)
        assert len(data) == 1
        assert data[0]["severity"] == "error"
        assert data[0]["code"] == "E0060"
        assert data[0]["message"] == "Speed value must be positive"
        assert data[0]["line"] == 2

    def test_syntax_error(self, write_program, capsys):
        path = write_program("main() { loop }")
        assert main(["check", str(path)]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main(["check", str(tmp_path / "nope.rml")]) == 1
        assert "File not found" in capsys.readouterr().err


class TestRunCommand:
    def test_text_output(self, write_program, capsys):
        path = write_program(SQUARE)
        assert main(["run", str(path)]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 9
        assert lines[0].split() == ["1", "setSpeed", "10", "cm"]
        assert lines[1].split() == ["2", "move", "20", "cm", "forward"]
        assert lines[2].split() == ["3", "turn", "90"]

    def test_json_output_to_file(self, write_program, tmp_path, capsys):
        path = write_program(SQUARE)
        out = tmp_path / "commands.json"
        assert main(["r", "--format", "json", "-o", str(out), str(path)]) == 0
        assert "Wrote 9 command(s)" in capsys.readouterr().out
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["timestamps"] == list(range(1, 10))
        assert data["commands"][0] == {"type": "setSpeed", "value": 10, "unit": "cm", "timestamp": 1}

    def test_strict_blocks(self, write_program, capsys):
        path = write_program("main() { Clock 5 var boolean b = 2 }")
        assert main(["run", "--strict", str(path)]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "not interpreting" in captured.err

    def test_runtime_error(self, write_program, capsys):
        path = write_program("main() { Speed 4 % 0 }")
        assert main(["run", "--no-check", str(path)]) == 1
        assert "Modulo by zero" in capsys.readouterr().err

    def test_serialised_ast(self, write_program, tmp_path, capsys):
        source = write_program("main() { Clock 30 }")
        ast_path = tmp_path / "prog.json"
        assert main(["ast", "-o", str(ast_path), str(source)]) == 0
        capsys.readouterr()
        assert main(["run", "--format", "json", str(ast_path)]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["commands"] == [{"type": "turn", "angle": 30, "timestamp": 1}]


class TestDebugCommands:
    def test_ast(self, write_program, capsys):
        path = write_program("main() { Clock 1 }")
        assert main(["ast", str(path)]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["$type"] == "DSLProgram"
        assert data["functions"][0]["name"] == "main"

    def test_tokens(self, write_program, capsys):
        path = write_program("main() { Clock 1 }")
        assert main(["tokens", str(path)]) == 0
        out = capsys.readouterr().out
        assert "Token(CLOCK" in out
        assert "Token(NUMBER" in out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage: robotml" in capsys.readouterr().out
