"""
Tree-walking interpreter for RobotML.

`interpret(program)` runs the ``main`` function of a linked program and
returns the robot commands it recorded. All run state (the global frame,
the function table and the command recorder) lives in a `_Run` object
created per call and dropped afterwards; environments are passed down the
traversal explicitly.

Statement execution returns `Continuing` or `Returned(value)`. A `Returned`
stops the remaining statements of every enclosing block and loop up to the
function call that receives it.

Execution is fail-fast: any runtime fault raises InterpreterError and no
partial result is produced.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Union

from robotml.compiler.ast_nodes import (
    ArithmeticOperator,
    BinaryOperation,
    Block,
    BooleanExpr,
    BooleanLiteral,
    Cast,
    Clock,
    Comment,
    Comparator,
    Forward,
    FunctionCall,
    FunctionDef,
    LogicalExpr,
    LogicalOperator,
    Loop,
    Movement,
    MovementDirection,
    NumberLiteral,
    ParenExpr,
    Program,
    Return,
    Rotation,
    Speed,
    Variable,
    VariableAssign,
    VariableDecl,
)
from robotml.compiler.types import RobotType
from robotml.runtime.commands import CommandRecorder, InterpreterResult
from robotml.runtime.environment import Environment
from robotml.runtime.values import (
    UnitValue,
    Value,
    coerce_to_declared,
    default_value,
    is_number,
    magnitude,
    strict_equals,
)
from robotml.utils.errors import InterpreterError

logger = logging.getLogger(__name__)

ENTRY_POINT = "main"


# =============================================================================
# Statement results
# =============================================================================


@dataclass(frozen=True, slots=True)
class Continuing:
    """Execution falls through to the next statement."""


@dataclass(frozen=True, slots=True)
class Returned:
    """A return statement ran; `value` is None for a bare return."""

    value: Value = None


CONTINUE = Continuing()

ExecResult = Union[Continuing, Returned]


# =============================================================================
# Interpreter
# =============================================================================


class Interpreter:
    """
    Executes RobotML programs.

    The interpreter keeps no state between runs; each `interpret` call builds
    its own environment, function table and recorder.

    Usage:
        result = Interpreter().interpret(program)
        for command in result.commands:
            print(command.to_dict())
    """

    def interpret(self, program: Program) -> InterpreterResult:
        """
        Run `program` from its ``main`` function.

        Returns:
            The recorded commands; empty if the program has no ``main``.

        Raises:
            InterpreterError: On any runtime fault.
        """
        run = _Run(program)
        result = run.execute()
        logger.info(f"Interpretation finished: {len(result.commands)} command(s) recorded")
        return result


class _Run:
    """State of a single interpretation run."""

    def __init__(self, program: Program) -> None:
        self.program = program
        self.globals = Environment()
        self.recorder = CommandRecorder()
        self.functions: dict[str, FunctionDef] = {}
        for func in program.functions:
            self.functions[func.name] = func

    def execute(self) -> InterpreterResult:
        main = self.functions.get(ENTRY_POINT)
        if main is None:
            logger.info(f"No '{ENTRY_POINT}' function; nothing to run")
            return self.recorder.result()

        frame = self.globals.child()
        for param in main.params:
            frame.define(param.name, default_value(param.type))
        self.exec_block(main.body, frame)
        return self.recorder.result()

    # -------------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------------

    def exec_block(self, block: Block, env: Environment) -> ExecResult:
        frame = env.child()
        for statement in block.statements:
            result = self.exec_statement(statement, frame)
            if isinstance(result, Returned):
                return result
        return CONTINUE

    def exec_statement(self, node: Any, env: Environment) -> ExecResult:
        match node:
            case VariableDecl(name=name, type=type_, init=init):
                value = default_value(type_) if init is None else self.evaluate(init, env)
                env.define(name, coerce_to_declared(value, type_))
            case VariableAssign(target=target, value=value_expr):
                value = self.evaluate(value_expr, env)
                declared = getattr(target.ref, "type", None)
                env.set(target.name, coerce_to_declared(value, declared), node)
            case Return(value=value_expr):
                return Returned(None if value_expr is None else self.evaluate(value_expr, env))
            case Loop(condition=condition, body=body):
                while _truthy(self.evaluate(condition, env), condition):
                    result = self.exec_block(body, env)
                    if isinstance(result, Returned):
                        return result
            case FunctionCall():
                self.call(node, env)
            case Comment():
                pass
            case Movement():
                self.exec_movement(node, env)
            case Clock(angle=angle, sign=sign):
                value = self._numeric(self.evaluate(angle, env), node, "Clock angle")
                self.recorder.turn(-value if sign == "-" else value)
            case Rotation(angle=angle):
                self.recorder.turn(self._numeric(self.evaluate(angle, env), node, "Rotation angle"))
            case Speed(value=value_expr):
                value = self.evaluate(value_expr, env)
                if isinstance(value, UnitValue):
                    self.recorder.set_speed(value.value, value.unit)
                else:
                    self.recorder.set_speed(self._numeric(value, node, "Speed value"))
            case Forward(distance=distance, unit=unit):
                parsed = RobotType.parse(unit)
                if parsed not in (RobotType.CM, RobotType.MM):
                    raise InterpreterError(f"Unknown unit: {getattr(unit, 'value', unit)}", node)
                self.recorder.move(distance, parsed, "forward")
            case _:
                raise InterpreterError(f"Unknown statement type: {type(node).__name__}", node)
        return CONTINUE

    def exec_movement(self, node: Movement, env: Environment) -> None:
        value = self.evaluate(node.value, env)
        if isinstance(value, UnitValue):
            distance, unit = value.value, value.unit
        else:
            distance, unit = value, node.unit or RobotType.MM
        distance = self._numeric(distance, node, "Movement value")

        match node.direction:
            case MovementDirection.FORWARD:
                self.recorder.move(distance, unit, "forward")
            case MovementDirection.BACKWARD:
                self.recorder.move(-distance, unit, "backward")
            case MovementDirection.LEFT:
                self.recorder.move(distance, unit, "left")
            case MovementDirection.RIGHT:
                self.recorder.move(distance, unit, "right")
            case _:
                raise InterpreterError(
                    f"Unknown direction: {getattr(node.direction, 'value', node.direction)}", node
                )

    def call(self, node: FunctionCall, env: Environment) -> Value:
        name = node.ref.name if node.ref is not None else node.name
        func = self.functions.get(name)
        if func is None:
            raise InterpreterError(f"Function '{name}' not found", node)
        if len(node.args) != len(func.params):
            raise InterpreterError(
                f"Function '{name}' expects {len(func.params)} argument(s), "
                f"but got {len(node.args)}",
                node,
            )

        args = [self.evaluate(arg, env) for arg in node.args]

        frame = self.globals.child()
        for param, arg in zip(func.params, args):
            frame.define(param.name, coerce_to_declared(arg, param.type))

        result = self.exec_block(func.body, frame)
        return result.value if isinstance(result, Returned) else None

    # -------------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------------

    def evaluate(self, node: Any, env: Environment) -> Value:
        match node:
            case NumberLiteral():
                return node.signed_value
            case BooleanLiteral(value=value):
                return value
            case Variable(name=name):
                return env.get(name, node)
            case FunctionCall():
                return self.call(node, env)
            case BinaryOperation():
                return self.eval_arithmetic(node, env)
            case BooleanExpr():
                return self.eval_comparison(node, env)
            case LogicalExpr(left=left, operator=operator, right=right):
                if operator == LogicalOperator.AND:
                    return _truthy(self.evaluate(left, env), left) and _truthy(
                        self.evaluate(right, env), right
                    )
                if operator == LogicalOperator.OR:
                    return _truthy(self.evaluate(left, env), left) or _truthy(
                        self.evaluate(right, env), right
                    )
                raise InterpreterError(f"Unknown logical operator: {operator}", node)
            case ParenExpr(expr=inner):
                return self.evaluate(inner, env)
            case Cast():
                return self.eval_cast(node, env)
        raise InterpreterError(f"Unknown expression type: {type(node).__name__}", node)

    def eval_arithmetic(self, node: BinaryOperation, env: Environment) -> Value:
        left = magnitude(self.evaluate(node.left, env))
        right = magnitude(self.evaluate(node.right, env))

        match node.operator:
            case ArithmeticOperator.ADD:
                return left + right
            case ArithmeticOperator.SUB:
                return left - right
            case ArithmeticOperator.MUL:
                return left * right
            case ArithmeticOperator.DIV:
                if right == 0:
                    raise InterpreterError("Division by zero", node)
                return _tidy(left / right)
            case ArithmeticOperator.MOD:
                if right == 0:
                    raise InterpreterError("Modulo by zero", node)
                remainder = math.fmod(left, right)
                if isinstance(left, int) and isinstance(right, int):
                    return int(remainder)
                return remainder
        raise InterpreterError(
            f"Unknown operator: {getattr(node.operator, 'value', node.operator)}", node
        )

    def eval_comparison(self, node: BooleanExpr, env: Environment) -> bool:
        left = self.evaluate(node.left, env)
        right = self.evaluate(node.right, env)

        match node.comparator:
            case Comparator.EQ:
                return strict_equals(left, right)
            case Comparator.NE:
                return not strict_equals(left, right)
            case Comparator.LT:
                return magnitude(left) < magnitude(right)
            case Comparator.LE:
                return magnitude(left) <= magnitude(right)
            case Comparator.GT:
                return magnitude(left) > magnitude(right)
            case Comparator.GE:
                return magnitude(left) >= magnitude(right)
        raise InterpreterError(
            f"Unknown comparator: {getattr(node.comparator, 'value', node.comparator)}", node
        )

    def eval_cast(self, node: Cast, env: Environment) -> Value:
        value = self.evaluate(node.value, env)
        target = RobotType.parse(node.type)

        if target == RobotType.NUMBER:
            return int(value) if isinstance(value, bool) else magnitude(value)
        if target == RobotType.BOOLEAN:
            return bool(magnitude(value))
        if target in (RobotType.CM, RobotType.MM):
            if isinstance(value, UnitValue):
                converted = value.to(target)
                return UnitValue(_tidy(converted.value), target)
            if isinstance(value, bool):
                value = int(value)
            if not is_number(value):
                raise InterpreterError(f"Cannot cast {value!r} to {target}", node)
            return UnitValue(value, target)
        raise InterpreterError(f"Unknown cast type: {getattr(node.type, 'value', node.type)}", node)

    def _numeric(self, value: Value, node: Any, what: str) -> Union[int, float]:
        value = magnitude(value)
        if not is_number(value):
            raise InterpreterError(f"{what} must be numeric, got {value!r}", node)
        return value


# =============================================================================
# Helpers
# =============================================================================


def _truthy(value: Value, node: Any) -> bool:
    value = magnitude(value)
    if value is None:
        raise InterpreterError("Condition has no value", node)
    return bool(value)


def _tidy(value: Union[int, float]) -> Union[int, float]:
    """Collapse an integral float such as ``5.0`` to ``5``."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def interpret(program: Program) -> InterpreterResult:
    """
    Convenience function to run a program with a fresh interpreter.

    Args:
        program: A linked Program

    Returns:
        The recorded robot commands and their timestamps
    """
    return Interpreter().interpret(program)


__all__ = ["Interpreter", "InterpreterResult", "Continuing", "Returned", "interpret"]
