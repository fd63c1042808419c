"""
End-to-end tests for RobotML programs.

These tests drive whole programs from source through the checker and the
interpreter and compare the resulting robot commands.
"""

import pytest

from robotml import RunPipeline, check, interpret, parse_source
from robotml.compiler.ast_json import dumps, loads
from robotml.compiler.diagnostics import DiagnosticSeverity
from robotml.utils.errors import InterpreterError


def run(source: str) -> list[dict]:
    return interpret(parse_source(source)).to_dict()["commands"]


class TestReferencePrograms:
    """Small programs with known command output."""

    def test_single_forward(self):
        assert run("main(){ Forward 100 in cm }") == [
            {"type": "move", "distance": 100, "unit": "cm", "direction": "forward", "timestamp": 1}
        ]

    def test_counted_loop(self):
        commands = run("main(){ var number i = 0 loop i < 3 { Clock 90 i = i + 1 } }")
        assert commands == [
            {"type": "turn", "angle": 90, "timestamp": 1},
            {"type": "turn", "angle": 90, "timestamp": 2},
            {"type": "turn", "angle": 90, "timestamp": 3},
        ]

    def test_no_main(self):
        result = interpret(parse_source("helper() { Clock 90 }"))
        assert result.commands == []
        assert result.timestamps == []

    def test_division_by_zero_flagged_before_running(self):
        outcome = RunPipeline(strict=True).run_source("main(){ Speed 1/0 }")
        assert [d.code for d in outcome.diagnostics] == ["E0092"]
        assert outcome.result is None

    def test_all_directions(self):
        source = """
main() {
    var cm step = 5
    Forward step
    Backward step
    Left 2 in mm
    Right 3
}
"""
        assert [(c["direction"], c["distance"], c["unit"]) for c in run(source)] == [
            ("forward", 5, "cm"),
            ("backward", -5, "cm"),
            ("left", 2, "mm"),
            ("right", 3, "mm"),
        ]


class TestCheckerProperties:
    @pytest.mark.parametrize("unit", ["cm", "mm"])
    @pytest.mark.parametrize("literal", ["0", "7", "2.5"])
    def test_literal_into_unit(self, unit, literal):
        diagnostics = check(parse_source(f"main() {{ var {unit} d = {literal} }}"))
        severities = [d.severity for d in diagnostics]
        assert DiagnosticSeverity.ERROR not in severities
        assert severities.count(DiagnosticSeverity.INFO) == 1

    @pytest.mark.parametrize(
        "declared, expression",
        [
            ("boolean", "4"),
            ("boolean", "2 * 3"),
            ("number", "false"),
            ("number", "1 == 1"),
            ("number", "true or false"),
        ],
    )
    def test_number_boolean_mismatch(self, declared, expression):
        diagnostics = check(parse_source(f"main() {{ var {declared} v = {expression} }}"))
        assert sum(1 for d in diagnostics if d.is_error) == 1

    @pytest.mark.parametrize("declared, passed", [(0, 1), (2, 0), (2, 3), (3, 1)])
    def test_arity(self, declared, passed):
        params = ", ".join(f"number p{i}" for i in range(declared))
        args = ", ".join(str(i) for i in range(passed))
        diagnostics = check(parse_source(f"f({params}) {{}} main() {{ f({args}) }}"))
        errors = [d for d in diagnostics if d.is_error]
        assert len(errors) == 1
        assert f"expects {declared} argument(s), but got {passed}" in errors[0].message

    def test_return_nested_in_loop_satisfies_check(self):
        """A return that may never run still counts: only its presence is checked."""
        source = "let number f() { loop false { return 1 } } main() { f() }"
        assert [d for d in check(parse_source(source)) if d.is_error] == []
        assert run(source) == []

    def test_return_after_loop_counts_directly(self):
        source = "let number f() { loop false { Clock 1 } return 2 } main() { Clock f() }"
        assert check(parse_source(source)) == []
        assert run(source) == [{"type": "turn", "angle": 2, "timestamp": 1}]


class TestInterpreterProperties:
    def test_and_short_circuits(self):
        source = """
let boolean noisy() {
    Clock 1
    return true
}
main() {
    var boolean b = false and noisy()
    Speed 5
}
"""
        assert [c["type"] for c in run(source)] == ["setSpeed"]

    def test_or_short_circuits(self):
        source = """
let boolean noisy() {
    Clock 1
    return false
}
main() {
    var boolean b = true or noisy()
}
"""
        assert run(source) == []

    def test_right_operand_runs_when_needed(self):
        source = """
let boolean noisy() {
    Clock 1
    return true
}
main() {
    var boolean b = true and noisy()
}
"""
        assert [c["type"] for c in run(source)] == ["turn"]

    @pytest.mark.parametrize("start", [17, 3.5, 250])
    def test_unit_round_trip(self, start):
        source = f"main() {{ var mm a = {start} var cm b = a in cm var mm c = b in mm Forward c }}"
        command = run(source)[0]
        assert command["unit"] == "mm"
        assert command["distance"] == pytest.approx(start)

    def test_cm_to_mm_conversion(self):
        command = run("main() { var cm a = 4 Forward a in mm }")[0]
        assert (command["distance"], command["unit"]) == (40, "mm")

    def test_timestamps_strictly_increase(self):
        source = """
zigzag(number n) {
    var number i = 0
    loop i < n {
        Left 1 in cm
        Right 1 in cm
        i = i + 1
    }
}
main() {
    setSpeed 3
    zigzag(4)
    Clock -45
}
"""
        result = interpret(parse_source(source))
        stamps = [c.timestamp for c in result.commands]
        assert stamps == list(range(1, len(stamps) + 1))
        assert result.timestamps == stamps
        assert result.commands[-1].angle == -45

    def test_functions_do_not_see_caller_locals(self):
        source = "peek() { Clock x } main() { var number x = 5 peek() }"
        with pytest.raises(InterpreterError, match="Variable 'x' not found"):
            run(source)

    def test_arguments_evaluated_in_caller(self):
        source = """
let number twice(number v) {
    return v * 2
}
main() {
    var number v = 21
    Clock twice(v)
}
"""
        assert run(source)[0]["angle"] == 42

    def test_early_return_stops_function(self):
        source = """
let number first() {
    var number i = 0
    loop true {
        i = i + 1
        loop i > 2 {
            return i
        }
    }
}
main() {
    Clock first()
    Speed 1
}
"""
        assert [c.get("angle") for c in run(source)] == [3, None]

    def test_failure_discards_commands(self):
        with pytest.raises(InterpreterError, match="Function 'ghost' not found"):
            run("main() { Clock 1 ghost() }")


class TestSerialisedPrograms:
    def test_json_round_trip_runs_identically(self):
        source = """
let cm side(number k) {
    return k * 10
}
main() {
    // outline
    var number k = 1
    loop k <= 2 {
        Forward side(k)
        Clock 90
        k = k + 1
    }
}
"""
        program = parse_source(source)
        restored = loads(dumps(program))
        assert interpret(restored).to_dict() == interpret(program).to_dict()
        assert [d.code for d in check(restored)] == [d.code for d in check(program)]
