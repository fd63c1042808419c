"""JSON serialization/deserialization for RobotML ASTs.

The object shape follows the Langium serialisation of the RobotML grammar:
every node carries a ``$type`` discriminant and cross references are
``{"$ref": "#/functions@0/block/statements@1", "$refText": "x"}`` objects
whose path addresses the declaring node from the root.

Decoding is two-phase: all nodes are built first, then references are
resolved against the declarations found at their paths. A reference that
carries only ``$refText`` stays unresolved (``ref=None``) so the checker can
report it. Unknown direction, operator and cast spellings are kept as plain
strings for the same reason; anything else malformed raises AstFormatError.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Union

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
    Parameter,
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
from robotml.utils.errors import AstFormatError


# -----------------------------------------------------------------------------
# Encoding
# -----------------------------------------------------------------------------


def program_to_obj(program: Program) -> dict[str, Any]:
    """Convert a program to a JSON-compatible dict."""
    paths: dict[int, str] = {}
    for f_index, func in enumerate(program.functions):
        func_path = f"#/functions@{f_index}"
        paths[id(func)] = func_path
        for p_index, param in enumerate(func.params):
            paths[id(param)] = f"{func_path}/params@{p_index}"
        _collect_decl_paths(func.body, f"{func_path}/block", paths)

    return {
        "$type": "DSLProgram",
        "functions": [_function_to_obj(func, paths) for func in program.functions],
    }


def _collect_decl_paths(block: Block, path: str, paths: dict[int, str]) -> None:
    for index, statement in enumerate(block.statements):
        stmt_path = f"{path}/statements@{index}"
        if isinstance(statement, VariableDecl):
            paths[id(statement)] = stmt_path
        elif isinstance(statement, Loop):
            _collect_decl_paths(statement.body, f"{stmt_path}/block", paths)


def _ref_to_obj(name: str, target: Any, paths: dict[int, str]) -> dict[str, Any]:
    obj: dict[str, Any] = {"$refText": name}
    if target is not None and id(target) in paths:
        obj["$ref"] = paths[id(target)]
    return obj


def _spelling(value: Any) -> Any:
    return getattr(value, "value", value)


def _function_to_obj(func: FunctionDef, paths: dict[int, str]) -> dict[str, Any]:
    return {
        "$type": "FunctionDef",
        "name": func.name,
        "returnType": _spelling(func.return_type),
        "params": [
            {"$type": "VariableFunDecl", "name": p.name, "type": _spelling(p.type)}
            for p in func.params
        ],
        "block": _block_to_obj(func.body, paths),
    }


def _block_to_obj(block: Block, paths: dict[int, str]) -> dict[str, Any]:
    return {
        "$type": "Block",
        "statements": [_node_to_obj(s, paths) for s in block.statements],
    }


def _node_to_obj(node: Any, paths: dict[int, str]) -> dict[str, Any]:
    def enc(child: Any) -> Any:
        return None if child is None else _node_to_obj(child, paths)

    if isinstance(node, VariableDecl):
        obj = {"$type": "VariableDecl", "name": node.name, "type": _spelling(node.type)}
        if node.init is not None:
            obj["expr"] = enc(node.init)
        return obj
    if isinstance(node, VariableAssign):
        return {
            "$type": "VariableAssign",
            "variable": _ref_to_obj(node.target.name, node.target.ref, paths),
            "value": enc(node.value),
        }
    if isinstance(node, Return):
        obj = {"$type": "Return"}
        if node.value is not None:
            obj["value"] = enc(node.value)
        return obj
    if isinstance(node, Loop):
        return {
            "$type": "Loop",
            "condition": enc(node.condition),
            "block": _block_to_obj(node.body, paths),
        }
    if isinstance(node, FunctionCall):
        return {
            "$type": "FunctionCall",
            "functioncall": _ref_to_obj(node.name, node.ref, paths),
            "args": [enc(a) for a in node.args],
        }
    if isinstance(node, Comment):
        return {"$type": "Comment", "text": node.text}
    if isinstance(node, Movement):
        obj = {"$type": "Movement", "direction": _spelling(node.direction), "value": enc(node.value)}
        if node.unit is not None:
            obj["unit"] = _spelling(node.unit)
        return obj
    if isinstance(node, Clock):
        obj = {"$type": "Clock", "angle": enc(node.angle)}
        if node.sign is not None:
            obj["sign"] = node.sign
        return obj
    if isinstance(node, Rotation):
        return {"$type": "Rotation", "angle": enc(node.angle)}
    if isinstance(node, Speed):
        return {"$type": "Speed", "value": enc(node.value)}
    if isinstance(node, Forward):
        return {"$type": "Forward", "distance": node.distance, "unit": _spelling(node.unit)}
    if isinstance(node, NumberLiteral):
        obj = {"$type": "NumberLiteral", "value": node.value}
        if node.sign is not None:
            obj["sign"] = node.sign
        return obj
    if isinstance(node, BooleanLiteral):
        return {"$type": "BooleanLiteral", "value": node.value}
    if isinstance(node, Variable):
        return {"$type": "Variable", "ref": _ref_to_obj(node.name, node.ref, paths)}
    if isinstance(node, BinaryOperation):
        return {
            "$type": "BinaryOperation",
            "left": enc(node.left),
            "operator": _spelling(node.operator),
            "right": enc(node.right),
        }
    if isinstance(node, BooleanExpr):
        return {
            "$type": "BooleanExpr",
            "left": enc(node.left),
            "comparator": _spelling(node.comparator),
            "right": enc(node.right),
        }
    if isinstance(node, LogicalExpr):
        return {
            "$type": "LogicalExpr",
            "left": enc(node.left),
            "operator": _spelling(node.operator),
            "right": enc(node.right),
        }
    if isinstance(node, ParenExpr):
        return {"$type": "ParenExpr", "expr": enc(node.expr)}
    if isinstance(node, Cast):
        return {"$type": "Cast", "value": enc(node.value), "type": _spelling(node.type)}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


# -----------------------------------------------------------------------------
# Decoding
# -----------------------------------------------------------------------------


class _Decoder:
    """Builds nodes, then resolves the recorded references by path."""

    def __init__(self) -> None:
        self.declarations: dict[str, Any] = {}
        self.pending: list[tuple[Any, str, str]] = []

    def program(self, obj: Any) -> Program:
        obj = _require_dict(obj, "#")
        if obj.get("$type", "DSLProgram") != "DSLProgram":
            raise AstFormatError(f"Expected DSLProgram, got {obj.get('$type')!r}", "#")
        functions = [
            self.function(f, f"#/functions@{i}")
            for i, f in enumerate(_require_list(obj.get("functions", []), "#/functions"))
        ]
        program = Program(functions)
        self._resolve()
        return program

    def _resolve(self) -> None:
        for node, ref_path, at in self.pending:
            target = self.declarations.get(ref_path)
            if target is None:
                raise AstFormatError(f"Unresolvable reference {ref_path!r}", at)
            if isinstance(node, FunctionCall) and not isinstance(target, FunctionDef):
                raise AstFormatError(f"Reference {ref_path!r} is not a function", at)
            if isinstance(node, Variable) and not isinstance(target, (VariableDecl, Parameter)):
                raise AstFormatError(f"Reference {ref_path!r} is not a variable", at)
            node.ref = target

    def function(self, obj: Any, path: str) -> FunctionDef:
        obj = _require_type(obj, "FunctionDef", path)
        params: list[Parameter] = []
        for index, p in enumerate(_require_list(obj.get("params", []), f"{path}/params")):
            p_path = f"{path}/params@{index}"
            p = _require_type(p, "VariableFunDecl", p_path)
            param = Parameter(_require_str(p, "name", p_path), _type_field(p, "type", p_path))
            self.declarations[p_path] = param
            params.append(param)

        return_type = RobotType.VOID
        if obj.get("returnType") is not None:
            return_type = _type_field(obj, "returnType", path)

        func = FunctionDef(
            _require_str(obj, "name", path),
            return_type,
            params,
            self.block(obj.get("block", {"$type": "Block"}), f"{path}/block"),
        )
        self.declarations[path] = func
        return func

    def block(self, obj: Any, path: str) -> Block:
        obj = _require_type(obj, "Block", path)
        statements = _require_list(obj.get("statements", []), f"{path}/statements")
        return Block([self.node(s, f"{path}/statements@{i}") for i, s in enumerate(statements)])

    def reference(self, node: Any, obj: Any, path: str) -> str:
        """Record `obj` as a pending reference of `node`; return its text."""
        obj = _require_dict(obj, path)
        ref = obj.get("$ref")
        text = obj.get("$refText")
        if ref is not None:
            if not isinstance(ref, str):
                raise AstFormatError("'$ref' must be a string", path)
            # Drop any document URI in front of the fragment
            ref_path = "#" + ref.split("#", 1)[1] if "#" in ref else ref
            self.pending.append((node, ref_path, path))
        if text is None:
            text = ref.rsplit("/", 1)[-1] if isinstance(ref, str) else ""
        return str(text)

    def node(self, obj: Any, path: str) -> Any:
        obj = _require_dict(obj, path)
        node_type = obj.get("$type")
        builder = self._builders().get(node_type)
        if builder is None:
            raise AstFormatError(f"Unknown node type {node_type!r}", path)
        return builder(obj, path)

    def optional(self, obj: dict[str, Any], key: str, path: str) -> Any:
        value = obj.get(key)
        return None if value is None else self.node(value, f"{path}/{key}")

    def required(self, obj: dict[str, Any], key: str, path: str) -> Any:
        if obj.get(key) is None:
            raise AstFormatError(f"Missing required field {key!r}", path)
        return self.node(obj[key], f"{path}/{key}")

    def _builders(self) -> dict[str, Callable[[dict[str, Any], str], Any]]:
        return {
            "VariableDecl": self._variable_decl,
            "VariableAssign": self._variable_assign,
            "Return": lambda o, p: Return(self.optional(o, "value", p)),
            "Loop": lambda o, p: Loop(
                self.required(o, "condition", p),
                self.block(o.get("block", {"$type": "Block"}), f"{p}/block"),
            ),
            "FunctionCall": self._function_call,
            "Comment": lambda o, p: Comment(str(o.get("text", ""))),
            "Movement": lambda o, p: Movement(
                _lenient(MovementDirection, _require_str(o, "direction", p)),
                self.required(o, "value", p),
                RobotType.parse(o.get("unit")),
            ),
            "Clock": lambda o, p: Clock(self.required(o, "angle", p), o.get("sign")),
            "Rotation": lambda o, p: Rotation(self.required(o, "angle", p)),
            "Speed": lambda o, p: Speed(self.required(o, "value", p)),
            "Forward": lambda o, p: Forward(
                _require_number(o, "distance", p),
                _lenient_type(_require_str(o, "unit", p)),
            ),
            "NumberLiteral": lambda o, p: NumberLiteral(_require_number(o, "value", p), o.get("sign")),
            "BooleanLiteral": self._boolean_literal,
            "Variable": self._variable,
            "BinaryOperation": lambda o, p: BinaryOperation(
                self.required(o, "left", p),
                _lenient(ArithmeticOperator, _require_str(o, "operator", p)),
                self.required(o, "right", p),
            ),
            "BooleanExpr": lambda o, p: BooleanExpr(
                self.required(o, "left", p),
                _lenient(Comparator, _require_str(o, "comparator", p)),
                self.required(o, "right", p),
            ),
            "LogicalExpr": lambda o, p: LogicalExpr(
                self.required(o, "left", p),
                _lenient(LogicalOperator, _require_str(o, "operator", p)),
                self.required(o, "right", p),
            ),
            "ParenExpr": lambda o, p: ParenExpr(self.required(o, "expr", p)),
            "Cast": lambda o, p: Cast(
                self.required(o, "value", p),
                _lenient_type(_require_str(o, "type", p)),
            ),
        }

    def _variable_decl(self, obj: dict[str, Any], path: str) -> VariableDecl:
        decl = VariableDecl(
            _require_str(obj, "name", path),
            _type_field(obj, "type", path),
            self.optional(obj, "expr", path),
        )
        self.declarations[path] = decl
        return decl

    def _variable_assign(self, obj: dict[str, Any], path: str) -> VariableAssign:
        if "variable" not in obj:
            raise AstFormatError("Missing required field 'variable'", path)
        target = Variable("")
        target.name = self.reference(target, obj["variable"], f"{path}/variable")
        return VariableAssign(target, self.required(obj, "value", path))

    def _function_call(self, obj: dict[str, Any], path: str) -> FunctionCall:
        call = FunctionCall("")
        if "functioncall" not in obj:
            raise AstFormatError("Missing required field 'functioncall'", path)
        call.name = self.reference(call, obj["functioncall"], f"{path}/functioncall")
        args = _require_list(obj.get("args", []), f"{path}/args")
        call.args = [self.node(a, f"{path}/args@{i}") for i, a in enumerate(args)]
        return call

    def _variable(self, obj: dict[str, Any], path: str) -> Variable:
        if "ref" not in obj:
            raise AstFormatError("Missing required field 'ref'", path)
        variable = Variable("")
        variable.name = self.reference(variable, obj["ref"], f"{path}/ref")
        return variable

    def _boolean_literal(self, obj: dict[str, Any], path: str) -> BooleanLiteral:
        value = obj.get("value")
        if isinstance(value, str) and value in ("true", "false"):
            value = value == "true"
        if not isinstance(value, bool):
            raise AstFormatError("BooleanLiteral value must be a boolean", path)
        return BooleanLiteral(value)


def _require_dict(obj: Any, path: str) -> dict[str, Any]:
    if not isinstance(obj, dict):
        raise AstFormatError(f"Expected an object, got {type(obj).__name__}", path)
    return obj


def _require_list(obj: Any, path: str) -> list[Any]:
    if not isinstance(obj, list):
        raise AstFormatError(f"Expected an array, got {type(obj).__name__}", path)
    return obj


def _require_type(obj: Any, node_type: str, path: str) -> dict[str, Any]:
    obj = _require_dict(obj, path)
    if obj.get("$type", node_type) != node_type:
        raise AstFormatError(f"Expected {node_type}, got {obj.get('$type')!r}", path)
    return obj


def _require_str(obj: dict[str, Any], key: str, path: str) -> str:
    value = obj.get(key)
    if not isinstance(value, str):
        raise AstFormatError(f"Field {key!r} must be a string", path)
    return value


def _require_number(obj: dict[str, Any], key: str, path: str) -> Union[int, float]:
    value = obj.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise AstFormatError(f"Field {key!r} must be a number", path)
    return value


def _type_field(obj: dict[str, Any], key: str, path: str) -> RobotType:
    value = _require_str(obj, key, path)
    parsed = RobotType.parse(value)
    if parsed is None or parsed == RobotType.UNKNOWN:
        raise AstFormatError(f"Unknown type {value!r}", path)
    return parsed


def _lenient(enum_cls: Any, value: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _lenient_type(value: str) -> Union[RobotType, str]:
    parsed = RobotType.parse(value)
    if parsed is None or parsed == RobotType.UNKNOWN:
        return value
    return parsed


def program_from_obj(obj: Any) -> Program:
    """
    Build a linked program from a Langium-shaped JSON object.

    Raises:
        AstFormatError: If the object is not a well-formed program.
    """
    return _Decoder().program(obj)


# -----------------------------------------------------------------------------
# File helpers
# -----------------------------------------------------------------------------


def dumps(program: Program, indent: int = 2) -> str:
    return json.dumps(program_to_obj(program), indent=indent)


def loads(text: str) -> Program:
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as exc:
        raise AstFormatError(f"Invalid JSON: {exc.msg} (line {exc.lineno})") from exc
    return program_from_obj(obj)


def save_program(program: Program, path: Union[str, Path]) -> None:
    Path(path).write_text(dumps(program), encoding="utf-8")


def load_program(path: Union[str, Path]) -> Program:
    return loads(Path(path).read_text(encoding="utf-8"))
