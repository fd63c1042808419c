"""
RobotML Runtime Package.

Executes linked programs and records the robot commands they issue.
"""

from robotml.runtime.commands import (
    CommandRecorder,
    InterpreterResult,
    MoveCommand,
    RobotCommand,
    SetSpeedCommand,
    TurnCommand,
)
from robotml.runtime.environment import Environment
from robotml.runtime.interpreter import Continuing, Interpreter, Returned, interpret
from robotml.runtime.values import UnitValue

__all__ = [
    "Interpreter",
    "interpret",
    "InterpreterResult",
    "Continuing",
    "Returned",
    "Environment",
    "UnitValue",
    "CommandRecorder",
    "RobotCommand",
    "TurnCommand",
    "MoveCommand",
    "SetSpeedCommand",
]
