"""
Unit tests for robot commands and the command recorder.
"""

import json

from robotml.compiler.types import RobotType
from robotml.runtime.commands import (
    CommandRecorder,
    InterpreterResult,
    MoveCommand,
    SetSpeedCommand,
    TurnCommand,
)


class TestCommandRecorder:
    def test_timestamps_increase_by_one(self):
        recorder = CommandRecorder()
        recorder.turn(90)
        recorder.move(10, RobotType.CM, "forward")
        recorder.set_speed(5)
        result = recorder.result()
        assert result.timestamps == [1, 2, 3]
        assert recorder.current_time == 3

    def test_unit_enums_are_recorded_as_strings(self):
        recorder = CommandRecorder()
        move = recorder.move(10, RobotType.MM, "left")
        speed = recorder.set_speed(2, RobotType.CM)
        assert move.unit == "mm"
        assert speed.unit == "cm"

    def test_result_is_a_snapshot(self):
        recorder = CommandRecorder()
        recorder.turn(1)
        result = recorder.result()
        recorder.turn(2)
        assert len(result) == 1


class TestCommandShapes:
    def test_turn(self):
        assert TurnCommand(45, 1).to_dict() == {"type": "turn", "angle": 45, "timestamp": 1}

    def test_move(self):
        command = MoveCommand(-5, "cm", "backward", 2)
        assert command.to_dict() == {
            "type": "move",
            "distance": -5,
            "unit": "cm",
            "direction": "backward",
            "timestamp": 2,
        }

    def test_set_speed_without_unit(self):
        assert SetSpeedCommand(10, 3).to_dict() == {"type": "setSpeed", "value": 10, "timestamp": 3}

    def test_result_json(self):
        result = InterpreterResult([TurnCommand(90, 1)], [1])
        decoded = json.loads(result.to_json())
        assert decoded == {"commands": [{"type": "turn", "angle": 90, "timestamp": 1}], "timestamps": [1]}
