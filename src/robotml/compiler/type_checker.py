"""
Type Checking Module for RobotML.

The checker walks a linked program once, depth-first, and reports problems
as diagnostics instead of raising. It:

1. Tracks declarations in a ScopeTable (a block's declarations are visible
   to the statements that follow them)
2. Infers the type of every expression (`type_of`)
3. Checks assignments, arguments and returns against the unit-aware
   compatibility rule in `robotml.compiler.types`
4. Applies the robot-command rules (unit casts, speeds, directions)

A number literal flowing into a ``cm`` or ``mm`` target is not an error: it
is recorded in a side table as carrying that unit and an info diagnostic is
emitted. The AST itself is never modified.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

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
from robotml.compiler.diagnostics import Diagnostic, DiagnosticSeverity, DiagnosticSink
from robotml.compiler.scope import ScopeTable
from robotml.compiler.types import (
    CAST_TYPES,
    RETURN_TYPES,
    VALUE_TYPES,
    RobotType,
    is_boolean_type,
    is_compatible,
    is_numeric_type,
)
from robotml.utils.errors import DuplicateSymbolError


ERROR = DiagnosticSeverity.ERROR
WARNING = DiagnosticSeverity.WARNING
INFO = DiagnosticSeverity.INFO

ORDERING_COMPARATORS = (Comparator.LT, Comparator.LE, Comparator.GT, Comparator.GE)


class TypeChecker:
    """
    Performs type inference and checking on a RobotML AST.

    A checker holds per-run state only; `check` resets it, so one instance
    may be reused sequentially but not shared between concurrent runs.

    Usage:
        checker = TypeChecker()
        diagnostics = checker.check(program)
        for diag in diagnostics:
            print(diag)
    """

    def __init__(self) -> None:
        self._scopes = ScopeTable()
        self._sink = DiagnosticSink()
        self._unit_tags: dict[Any, RobotType] = {}
        self._function: Optional[FunctionDef] = None

    # -------------------------------------------------------------------------
    # Public Interface
    # -------------------------------------------------------------------------

    def check(self, program: Program) -> list[Diagnostic]:
        """
        Type check the entire program.

        Args:
            program: The Program AST node to check

        Returns:
            Every diagnostic found, in traversal order
        """
        self._scopes = ScopeTable()
        self._sink = DiagnosticSink()
        self._unit_tags = {}
        self._function = None

        self._check_program(program)
        return list(self._sink.diagnostics)

    @property
    def unit_tags(self) -> Mapping[Any, RobotType]:
        """Literal nodes tagged with an implicit unit during the last run."""
        return dict(self._unit_tags)

    def type_of(self, expr: Any) -> RobotType:
        """
        Infer the type of an expression against the current scope.

        Never reports anything; expressions whose type cannot be determined
        come back as ``RobotType.UNKNOWN``.
        """
        tagged = self._unit_tags.get(expr)
        if tagged is not None:
            return tagged

        match expr:
            case NumberLiteral():
                return RobotType.NUMBER
            case BooleanLiteral():
                return RobotType.BOOLEAN
            case Variable(name=name, ref=ref):
                symbol = self._scopes.resolve(name)
                if symbol is not None:
                    return symbol.type
                if ref is not None:
                    return RobotType.parse(ref.type) or RobotType.UNKNOWN
                return RobotType.UNKNOWN
            case BinaryOperation():
                return RobotType.NUMBER
            case BooleanExpr() | LogicalExpr():
                return RobotType.BOOLEAN
            case ParenExpr(expr=inner):
                return self.type_of(inner)
            case Cast(type=target):
                parsed = RobotType.parse(target)
                return parsed if parsed in CAST_TYPES else RobotType.UNKNOWN
            case FunctionCall(ref=ref):
                if ref is None:
                    return RobotType.UNKNOWN
                return RobotType.parse(ref.return_type) or RobotType.UNKNOWN
        return RobotType.UNKNOWN

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def _report(
        self,
        severity: DiagnosticSeverity,
        code: str,
        message: str,
        node: Any,
        property: Optional[str] = None,
        index: Optional[int] = None,
    ) -> None:
        self._sink.accept(severity, message, node, property, index, code)

    # -------------------------------------------------------------------------
    # Program structure
    # -------------------------------------------------------------------------

    def _check_program(self, program: Program) -> None:
        if not program.functions:
            self._report(WARNING, "W0001", "Program has no functions defined", program)
            return

        if not any(f.name == "main" for f in program.functions):
            self._report(
                WARNING,
                "W0002",
                'Program has no entry point function named "main"',
                program,
            )

        seen: set[str] = set()
        for func in program.functions:
            if func.name in seen:
                self._report(
                    ERROR,
                    "E0001",
                    f"Function name '{func.name}' is already defined",
                    func,
                    "name",
                )
            seen.add(func.name)

        for func in program.functions:
            self._check_function(func)

    def _check_function(self, func: FunctionDef) -> None:
        self._function = func
        self._scopes.enter_scope()

        duplicates: list[str] = []
        for param in func.params:
            if RobotType.parse(param.type) not in VALUE_TYPES:
                self._report(
                    ERROR,
                    "E0003",
                    f"Parameter '{param.name}' cannot have type \"{param.type}\"",
                    param,
                    "type",
                )
            if self._scopes.lookup_local(param.name) is not None:
                if param.name not in duplicates:
                    duplicates.append(param.name)
                continue
            self._scopes.declare(param.name, RobotType.parse(param.type) or RobotType.UNKNOWN, param)

        if duplicates:
            self._report(
                ERROR,
                "E0002",
                f"Function '{func.name}' has duplicate parameter name(s): {', '.join(duplicates)}.",
                func,
                "params",
            )

        if RobotType.parse(func.return_type) not in RETURN_TYPES:
            self._report(
                ERROR,
                "E0004",
                f"Invalid return type \"{func.return_type}\" for function '{func.name}'",
                func,
                "return_type",
            )
        elif func.return_type != RobotType.VOID and not _block_has_return(func.body):
            self._report(
                ERROR,
                "E0005",
                f'Function "{func.name}" has return type "{func.return_type}" '
                "but no return statement",
                func,
                "name",
            )

        self._check_block(func.body)

        self._scopes.exit_scope()
        self._function = None

    def _check_block(self, block: Block) -> None:
        self._scopes.enter_scope()
        for statement in block.statements:
            self._check_statement(statement)
        self._scopes.exit_scope()

    # -------------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------------

    def _check_statement(self, node: Any) -> None:
        match node:
            case VariableDecl():
                self._check_variable_decl(node)
            case VariableAssign():
                self._check_variable_assign(node)
            case Return():
                self._check_return(node)
            case Loop():
                self._check_loop(node)
            case FunctionCall():
                self._check_function_call(node)
            case Movement():
                self._check_movement(node)
            case Clock():
                self._check_clock(node)
            case Rotation():
                self._check_rotation(node)
            case Speed():
                self._check_speed(node)
            case Forward():
                self._check_forward(node)
            case Comment():
                pass
            case _:
                self._report(
                    ERROR,
                    "E0099",
                    f"Unsupported statement '{type(node).__name__}'",
                    node,
                )

    def _check_variable_decl(self, node: VariableDecl) -> None:
        if RobotType.parse(node.type) not in VALUE_TYPES:
            self._report(
                ERROR,
                "E0010",
                f"Variable '{node.name}' cannot have type \"{node.type}\"",
                node,
                "type",
            )

        # Declared before the initializer is visited, as in `var number x = x`
        try:
            self._scopes.declare(node.name, RobotType.parse(node.type) or RobotType.UNKNOWN, node)
        except DuplicateSymbolError as exc:
            self._report(ERROR, "E0011", exc.message, node, "name")

        if node.init is not None:
            self._check_expression(node.init)
            self._check_assignment(RobotType.parse(node.type), node.init, node, "init")

    def _check_variable_assign(self, node: VariableAssign) -> None:
        self._check_variable(node.target)
        target_type = self.type_of(node.target) if node.target.ref is not None else None
        self._check_expression(node.value)
        if target_type is not None:
            self._check_assignment(target_type, node.value, node, "value")

    def _check_assignment(
        self,
        target: Optional[RobotType],
        value: Any,
        node: Any,
        property: str,
    ) -> None:
        """Check that `value` may be stored in a `target`-typed slot."""
        if target is None or target == RobotType.UNKNOWN:
            return

        value_type = self.type_of(value)
        if {target, value_type} == {RobotType.NUMBER, RobotType.BOOLEAN}:
            self._report(
                ERROR,
                "E0012",
                f"Cannot assign {value_type} to {target}",
                node,
                property,
            )
            return

        if self._tag_unit(target, value, node, property):
            return

        if not is_compatible(value_type, target):
            self._report(
                ERROR,
                "E0013",
                f'Cannot assign value of type "{value_type}" to variable of type "{target}"',
                node,
                property,
            )

    def _tag_unit(
        self,
        target: RobotType,
        value: Any,
        node: Any,
        property: str,
        index: Optional[int] = None,
    ) -> bool:
        """Record an implicit unit on a number literal flowing into a unit slot."""
        if not target.is_unit or not isinstance(value, NumberLiteral):
            return False
        if self.type_of(value) != RobotType.NUMBER:
            return False
        self._unit_tags[value] = target
        self._report(INFO, "I0001", f"Automatically cast number to {target}", node, property, index)
        return True

    def _check_return(self, node: Return) -> None:
        func = self._function
        if func is None:
            self._report(ERROR, "E0020", "Return statement outside function body", node)
            return

        if node.value is not None:
            self._check_expression(node.value)

        if func.return_type == RobotType.VOID:
            if node.value is not None:
                self._report(ERROR, "E0021", "Void function should not return a value", node, "value")
            return

        if node.value is None:
            self._report(
                ERROR,
                "E0022",
                f'Function "{func.name}" must return a value of type "{func.return_type}"',
                node,
            )
            return

        value_type = self.type_of(node.value)
        if not is_compatible(value_type, func.return_type):
            self._report(
                ERROR,
                "E0023",
                f'Cannot return value of type "{value_type}" from function '
                f'that returns "{func.return_type}"',
                node,
                "value",
            )

    def _check_loop(self, node: Loop) -> None:
        self._check_expression(node.condition)
        condition_type = self.type_of(node.condition)
        if not is_boolean_type(condition_type):
            self._report(
                ERROR,
                "E0030",
                f'Loop condition must be boolean, got "{condition_type}"',
                node,
                "condition",
            )
        self._check_block(node.body)

    # -------------------------------------------------------------------------
    # Robot commands
    # -------------------------------------------------------------------------

    def _check_movement(self, node: Movement) -> None:
        self._check_expression(node.value)
        self._require_numeric(node.value, "Movement value must be numeric", node, "value")

        value_type = self.type_of(node.value)
        if isinstance(node.value, Cast):
            if RobotType.parse(node.value.type) in (RobotType.NUMBER, RobotType.BOOLEAN):
                self._report(
                    ERROR,
                    "E0041",
                    "Movement value can only be cast to mm or cm.",
                    node,
                    "value",
                )
        elif value_type == RobotType.NUMBER:
            self._report(
                WARNING,
                "W0040",
                "Movement value should include a unit (using cast to cm or mm)",
                node,
                "value",
            )

        if node.direction not in tuple(MovementDirection):
            self._report(
                ERROR,
                "E0042",
                f'Invalid movement direction "{_spelling(node.direction)}"',
                node,
                "direction",
            )

    def _check_clock(self, node: Clock) -> None:
        self._check_expression(node.angle)
        self._require_numeric(node.angle, "Clock angle must be numeric", node, "angle")
        if isinstance(node.angle, Cast):
            self._report(ERROR, "E0050", "Clock angle cannot be cast.", node, "angle")
        if node.sign not in (None, "+", "-"):
            self._report(ERROR, "E0051", f'Invalid clock sign "{node.sign}"', node, "sign")

    def _check_rotation(self, node: Rotation) -> None:
        self._check_expression(node.angle)
        self._require_numeric(node.angle, "Rotation angle must be numeric", node, "angle")

    def _check_speed(self, node: Speed) -> None:
        self._check_expression(node.value)
        self._require_numeric(node.value, "Speed value must be numeric", node, "value")

        if _is_negative_literal(node.value):
            self._report(ERROR, "E0060", "Speed value must be positive", node, "value")

        if isinstance(node.value, Cast) and RobotType.parse(node.value.type) in (
            RobotType.NUMBER,
            RobotType.BOOLEAN,
        ):
            self._report(ERROR, "E0061", "Speed value can only be cast to cm or mm.", node, "value")

    def _check_forward(self, node: Forward) -> None:
        if RobotType.parse(node.unit) not in (RobotType.CM, RobotType.MM):
            self._report(
                ERROR,
                "E0070",
                f'Invalid unit "{_spelling(node.unit)}" (expected cm or mm)',
                node,
                "unit",
            )
        if isinstance(node.distance, bool) or not isinstance(node.distance, (int, float)):
            self._report(ERROR, "E0071", "Forward distance must be numeric", node, "distance")

    def _require_numeric(self, expr: Any, message: str, node: Any, property: str) -> None:
        expr_type = self.type_of(expr)
        if not is_numeric_type(expr_type):
            self._report(ERROR, "E0040", f'{message}, got "{expr_type}"', node, property)

    # -------------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------------

    def _check_expression(self, node: Any) -> None:
        match node:
            case NumberLiteral() | BooleanLiteral():
                pass
            case Variable():
                self._check_variable(node)
            case FunctionCall():
                self._check_function_call(node)
            case BinaryOperation():
                self._check_binary_operation(node)
            case BooleanExpr():
                self._check_comparison(node)
            case LogicalExpr():
                self._check_logical(node)
            case ParenExpr(expr=inner):
                self._check_expression(inner)
            case Cast():
                self._check_cast(node)
            case _:
                self._report(
                    ERROR,
                    "E0098",
                    f"Unsupported expression '{type(node).__name__}'",
                    node,
                )

    def _check_variable(self, node: Variable) -> None:
        if node.ref is None:
            self._report(ERROR, "E0080", f"Reference to undefined variable '{node.name}'", node)
            return
        if self._scopes.resolve(node.name) is None:
            self._report(
                WARNING,
                "W0080",
                f"Variable '{node.name}' might be used outside its scope",
                node,
            )

    def _check_function_call(self, node: FunctionCall) -> None:
        for arg in node.args:
            self._check_expression(arg)

        func = node.ref
        if func is None:
            self._report(ERROR, "E0081", f"Reference to undefined function '{node.name}'", node)
            return

        if len(node.args) != len(func.params):
            self._report(
                ERROR,
                "E0082",
                f"Function call '{func.name}' expects {len(func.params)} argument(s), "
                f"but got {len(node.args)}.",
                node,
            )
            return

        for index, (arg, param) in enumerate(zip(node.args, func.params)):
            param_type = RobotType.parse(param.type) or RobotType.UNKNOWN
            if self._tag_unit(param_type, arg, node, "args", index):
                continue
            arg_type = self.type_of(arg)
            if not is_compatible(arg_type, param_type):
                self._report(
                    ERROR,
                    "E0083",
                    f"Argument {index + 1} of function '{func.name}' expects type "
                    f"'{param_type}', but got '{arg_type}'",
                    node,
                    "args",
                    index,
                )

    def _check_binary_operation(self, node: BinaryOperation) -> None:
        self._check_expression(node.left)
        self._check_expression(node.right)

        for side, operand in (("left", node.left), ("right", node.right)):
            operand_type = self.type_of(operand)
            if not is_numeric_type(operand_type):
                self._report(
                    ERROR,
                    "E0090",
                    f'{side.capitalize()} operand of binary operation must be numeric, '
                    f'got "{operand_type}"',
                    node,
                    side,
                )

        if node.operator not in tuple(ArithmeticOperator):
            self._report(
                ERROR,
                "E0091",
                f'Unknown arithmetic operator "{_spelling(node.operator)}"',
                node,
                "operator",
            )
        elif node.operator in (ArithmeticOperator.DIV, ArithmeticOperator.MOD) and _is_zero_literal(
            node.right
        ):
            self._report(ERROR, "E0092", "Division by zero", node, "right")

    def _check_comparison(self, node: BooleanExpr) -> None:
        self._check_expression(node.left)
        self._check_expression(node.right)

        if node.comparator not in tuple(Comparator):
            self._report(
                ERROR,
                "E0093",
                f'Unknown comparator "{_spelling(node.comparator)}"',
                node,
                "comparator",
            )
            return

        left_type = self.type_of(node.left)
        right_type = self.type_of(node.right)
        if (
            left_type == RobotType.BOOLEAN
            and right_type == RobotType.BOOLEAN
            and node.comparator in ORDERING_COMPARATORS
        ):
            self._report(
                ERROR,
                "E0094",
                f"Cannot use '{_spelling(node.comparator)}' operator with boolean values",
                node,
                "comparator",
            )
        elif not is_compatible(left_type, right_type):
            self._report(
                ERROR,
                "E0095",
                f'Cannot compare incompatible types "{left_type}" and "{right_type}"',
                node,
            )

    def _check_logical(self, node: LogicalExpr) -> None:
        self._check_expression(node.left)
        self._check_expression(node.right)

        if node.operator not in tuple(LogicalOperator):
            self._report(
                ERROR,
                "E0096",
                f'Unknown logical operator "{_spelling(node.operator)}"',
                node,
                "operator",
            )

        for side, operand in (("left", node.left), ("right", node.right)):
            operand_type = self.type_of(operand)
            if not is_boolean_type(operand_type):
                self._report(
                    ERROR,
                    "E0097",
                    f'{side.capitalize()} operand of logical expression must be boolean, '
                    f'got "{operand_type}"',
                    node,
                    side,
                )

    def _check_cast(self, node: Cast) -> None:
        self._check_expression(node.value)

        target = RobotType.parse(node.type)
        if target not in CAST_TYPES:
            self._report(ERROR, "E0100", f'Invalid cast type "{_spelling(node.type)}"', node, "type")
            return

        value_type = self.type_of(node.value)
        if value_type == RobotType.BOOLEAN and target.is_numeric:
            self._report(ERROR, "E0101", f'Cannot cast boolean to "{target}"', node)
        elif value_type.is_numeric and target == RobotType.BOOLEAN:
            self._report(ERROR, "E0102", f'Cannot cast "{value_type}" to boolean', node)


# =============================================================================
# Helpers
# =============================================================================


def _block_has_return(block: Block) -> bool:
    """
    Check for a return directly in `block` or in a (nested) loop body.

    Returns inside any other construct are not considered.
    """
    for statement in block.statements:
        if isinstance(statement, Return):
            return True
        if isinstance(statement, Loop) and _block_has_return(statement.body):
            return True
    return False


def _is_zero_literal(expr: Any) -> bool:
    return isinstance(expr, NumberLiteral) and expr.value == 0


def _is_negative_literal(expr: Any) -> bool:
    return isinstance(expr, NumberLiteral) and expr.signed_value < 0


def _spelling(value: Any) -> str:
    """Source spelling of an enum member or a raw string."""
    return getattr(value, "value", value)


def check(program: Program) -> list[Diagnostic]:
    """
    Convenience function to type check a program with a fresh checker.

    Args:
        program: The Program AST to check

    Returns:
        A list of diagnostics found
    """
    return TypeChecker().check(program)


__all__ = ["TypeChecker", "check"]
