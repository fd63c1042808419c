"""
RobotML - A domain-specific language for commanding a simulated robot.

Programs move, turn and set the speed of a robot using numbers, booleans
and distances typed in centimetres or millimetres. The package provides a
unit-aware type checker and an interpreter that turns a program into a
timestamped list of robot commands.
"""

from robotml.compiler import parse_source
from robotml.compiler.type_checker import check
from robotml.pipeline import RunPipeline, RunResult
from robotml.runtime.interpreter import interpret

__version__ = "0.1.0"
__all__ = [
    "parse_source",
    "check",
    "interpret",
    "RunPipeline",
    "RunResult",
]
