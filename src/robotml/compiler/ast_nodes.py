"""
Abstract Syntax Tree (AST) node definitions for RobotML.

The tree is a closed set of plain dataclasses: one set of statement variants
and one set of expression variants. Passes dispatch on the concrete class
with ``match`` instead of double-dispatch visitors.

Nodes compare and hash by identity (``eq=False``) so a pass may key side
tables on them. Reference fields (``Variable.ref`` and ``FunctionCall.ref``)
point at the declaring node and are filled in by the front end (the linker
or the JSON decoder). The checker and the interpreter only read them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Union

from robotml.compiler.types import RobotType
from robotml.utils.errors import SourceLocation


# -----------------------------------------------------------------------------
# Operator and direction enums
# -----------------------------------------------------------------------------


class MovementDirection(str, Enum):
    """Direction keyword of a movement command."""

    FORWARD = "Forward"
    BACKWARD = "Backward"
    LEFT = "Left"
    RIGHT = "Right"


class ArithmeticOperator(str, Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"


class Comparator(str, Enum):
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    EQ = "=="
    NE = "!="


class LogicalOperator(str, Enum):
    AND = "and"
    OR = "or"


# -----------------------------------------------------------------------------
# Program structure
# -----------------------------------------------------------------------------


@dataclass(eq=False, slots=True)
class Program:
    """Root node: the ordered function definitions of one source file."""

    functions: list[FunctionDef] = field(default_factory=list)
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class FunctionDef:
    """
    A function definition.

    Example:
        let number double(number x) { return x * 2 }
    """

    name: str
    return_type: RobotType
    params: list[Parameter] = field(default_factory=list)
    body: Block = field(default_factory=lambda: Block())
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class Parameter:
    """A typed function parameter."""

    name: str
    type: RobotType
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class Block:
    """A brace-delimited statement sequence. Introduces one lexical scope."""

    statements: list[Statement] = field(default_factory=list)
    location: Optional[SourceLocation] = None


# -----------------------------------------------------------------------------
# Statements
# -----------------------------------------------------------------------------


@dataclass(eq=False, slots=True)
class VariableDecl:
    """
    A variable declaration with an optional initializer.

    Example:
        var cm distance = 30
    """

    name: str
    type: RobotType
    init: Optional[Expression] = None
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class VariableAssign:
    """Assignment to an already declared variable: ``i = i + 1``."""

    target: Variable
    value: Expression
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class Return:
    """A return statement. `value` is None for a bare ``return``."""

    value: Optional[Expression] = None
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class Loop:
    """A while-style loop: ``loop cond { ... }``."""

    condition: Expression
    body: Block
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class Comment:
    """A source comment kept in statement position. Has no effect."""

    text: str
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class Movement:
    """
    A movement command.

    `direction` is normally a MovementDirection. A decoded AST may carry any
    other spelling as a plain string so the checker can report it. `unit` is
    an explicit unit recorded by the front end, if any.
    """

    direction: Union[MovementDirection, str]
    value: Expression
    unit: Optional[RobotType] = None
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class Clock:
    """A clockwise turn by `angle` degrees; a ``-`` sign turns the other way."""

    angle: Expression
    sign: Optional[str] = None
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class Rotation:
    """A turn by `angle` degrees."""

    angle: Expression
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class Speed:
    """Set the robot speed."""

    value: Expression
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class Forward:
    """Legacy movement form: a literal distance with a unit keyword."""

    distance: float
    unit: Union[RobotType, str]
    location: Optional[SourceLocation] = None


# -----------------------------------------------------------------------------
# Expressions
# -----------------------------------------------------------------------------


@dataclass(eq=False, slots=True)
class NumberLiteral:
    """A numeric literal. `sign` is ``"-"`` for a negated literal."""

    value: float
    sign: Optional[str] = None
    location: Optional[SourceLocation] = None

    @property
    def signed_value(self) -> float:
        return -self.value if self.sign == "-" else self.value


@dataclass(eq=False, slots=True)
class BooleanLiteral:
    value: bool
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class Variable:
    """A use of a variable or parameter; `ref` is the declaring node."""

    name: str
    ref: Optional[Union[VariableDecl, Parameter]] = None
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class FunctionCall:
    """A call, used either as a statement or as an expression."""

    name: str
    args: list[Expression] = field(default_factory=list)
    ref: Optional[FunctionDef] = None
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class BinaryOperation:
    left: Expression
    operator: Union[ArithmeticOperator, str]
    right: Expression
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class BooleanExpr:
    """A comparison between two expressions."""

    left: Expression
    comparator: Union[Comparator, str]
    right: Expression
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class LogicalExpr:
    """A short-circuiting ``and``/``or``."""

    left: Expression
    operator: Union[LogicalOperator, str]
    right: Expression
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class ParenExpr:
    expr: Expression
    location: Optional[SourceLocation] = None


@dataclass(eq=False, slots=True)
class Cast:
    """
    A conversion: ``value in type``.

    `type` is normally a RobotType; a decoded AST may carry an unknown
    spelling as a plain string.
    """

    value: Expression
    type: Union[RobotType, str]
    location: Optional[SourceLocation] = None


# -----------------------------------------------------------------------------
# Variant sets
# -----------------------------------------------------------------------------

Expression = Union[
    NumberLiteral,
    BooleanLiteral,
    Variable,
    FunctionCall,
    BinaryOperation,
    BooleanExpr,
    LogicalExpr,
    ParenExpr,
    Cast,
]

Command = Union[Movement, Clock, Rotation, Speed, Forward]

Statement = Union[
    VariableDecl,
    VariableAssign,
    Return,
    Loop,
    FunctionCall,
    Comment,
    Movement,
    Clock,
    Rotation,
    Speed,
    Forward,
]

Node = Union[Program, FunctionDef, Parameter, Block, Statement, Expression]

EXPRESSION_TYPES = (
    NumberLiteral,
    BooleanLiteral,
    Variable,
    FunctionCall,
    BinaryOperation,
    BooleanExpr,
    LogicalExpr,
    ParenExpr,
    Cast,
)

COMMAND_TYPES = (Movement, Clock, Rotation, Speed, Forward)


def iter_children(node: Node) -> Iterator[Node]:
    """Yield the direct child nodes of `node` in source order."""
    match node:
        case Program(functions=functions):
            yield from functions
        case FunctionDef(params=params, body=body):
            yield from params
            yield body
        case Block(statements=statements):
            yield from statements
        case VariableDecl(init=init):
            if init is not None:
                yield init
        case VariableAssign(target=target, value=value):
            yield target
            yield value
        case Return(value=value):
            if value is not None:
                yield value
        case Loop(condition=condition, body=body):
            yield condition
            yield body
        case FunctionCall(args=args):
            yield from args
        case Movement(value=value) | Speed(value=value) | Cast(value=value):
            yield value
        case Clock(angle=angle) | Rotation(angle=angle):
            yield angle
        case BinaryOperation(left=left, right=right) | BooleanExpr(
            left=left, right=right
        ) | LogicalExpr(left=left, right=right):
            yield left
            yield right
        case ParenExpr(expr=expr):
            yield expr


def walk(node: Node) -> Iterator[Node]:
    """Yield `node` and all of its descendants, depth-first pre-order."""
    yield node
    for child in iter_children(node):
        yield from walk(child)
