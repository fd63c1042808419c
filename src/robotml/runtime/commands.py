"""
Robot command model and the per-run command recorder.

Commands are immutable records. Each one carries the timestamp assigned when
it was recorded; timestamps start at 1 and increase by exactly 1 per
command, so list order and timestamp order always agree.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from robotml.compiler.types import RobotType

logger = logging.getLogger(__name__)

Number = Union[int, float]


@dataclass(frozen=True, slots=True)
class TurnCommand:
    """Turn by `angle` degrees (positive is clockwise)."""

    angle: Number
    timestamp: int

    type = "turn"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "angle": self.angle, "timestamp": self.timestamp}


@dataclass(frozen=True, slots=True)
class MoveCommand:
    """
    Move by `distance` in `unit`.

    `direction` is ``forward``/``backward`` for a longitudinal move (a
    backward move has a negative distance) and ``left``/``right`` for a
    lateral one.
    """

    distance: Number
    unit: str
    direction: str
    timestamp: int

    type = "move"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "distance": self.distance,
            "unit": self.unit,
            "direction": self.direction,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True, slots=True)
class SetSpeedCommand:
    """Set the robot speed. `unit` is set when the value was a distance."""

    value: Number
    timestamp: int
    unit: Optional[str] = None

    type = "setSpeed"

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type, "value": self.value}
        if self.unit is not None:
            result["unit"] = self.unit
        result["timestamp"] = self.timestamp
        return result


RobotCommand = Union[TurnCommand, MoveCommand, SetSpeedCommand]


@dataclass
class InterpreterResult:
    """The output of one interpretation run."""

    commands: list[RobotCommand] = field(default_factory=list)
    timestamps: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "commands": [c.to_dict() for c in self.commands],
            "timestamps": list(self.timestamps),
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __len__(self) -> int:
        return len(self.commands)


class CommandRecorder:
    """
    Owns the command list and the time counter of a single run.

    Usage:
        recorder = CommandRecorder()
        recorder.turn(90)
        recorder.move(100, "cm", "forward")
        result = recorder.result()
    """

    def __init__(self) -> None:
        self.current_time = 0
        self.commands: list[RobotCommand] = []

    def _tick(self) -> int:
        self.current_time += 1
        return self.current_time

    def _append(self, command: RobotCommand) -> RobotCommand:
        self.commands.append(command)
        logger.debug(f"t={command.timestamp} {command.to_dict()}")
        return command

    def turn(self, angle: Number) -> TurnCommand:
        return self._append(TurnCommand(angle, self._tick()))

    def move(self, distance: Number, unit: Union[RobotType, str], direction: str) -> MoveCommand:
        unit_name = getattr(unit, "value", unit)
        return self._append(MoveCommand(distance, unit_name, direction, self._tick()))

    def set_speed(self, value: Number, unit: Optional[Union[RobotType, str]] = None) -> SetSpeedCommand:
        unit_name = getattr(unit, "value", unit)
        return self._append(SetSpeedCommand(value, self._tick(), unit_name))

    def result(self) -> InterpreterResult:
        return InterpreterResult(
            commands=list(self.commands),
            timestamps=[c.timestamp for c in self.commands],
        )
