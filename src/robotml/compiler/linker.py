"""
Reference linker for parsed RobotML programs.

Fills in `Variable.ref` and `FunctionCall.ref` so the checker and the
interpreter can follow references without re-resolving names.

Resolution rules:
- Functions resolve by name across the whole program; the first
  definition of a name wins.
- Variables resolve through the chain of enclosing blocks, innermost
  first, and then the function's parameters. A block's declarations are
  visible anywhere inside that block, including before the declaration
  (the checker reports such uses as out of scope).
- Names that resolve nowhere are left with ``ref=None``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from robotml.compiler.ast_nodes import (
    Block,
    FunctionCall,
    FunctionDef,
    Loop,
    Parameter,
    Program,
    Variable,
    VariableDecl,
    iter_children,
)

logger = logging.getLogger(__name__)

Declaration = Union[VariableDecl, Parameter]


class Linker:
    """
    Resolves the references of one program in place.

    Usage:
        linker = Linker()
        linker.link(program)
        linker.unresolved  # names that could not be resolved
    """

    def __init__(self) -> None:
        self._functions: dict[str, FunctionDef] = {}
        self._scopes: list[dict[str, Declaration]] = []
        self.unresolved: list[Union[Variable, FunctionCall]] = []

    def link(self, program: Program) -> Program:
        """Resolve every reference in `program` and return it."""
        self._functions = {}
        self._scopes = []
        self.unresolved = []

        for func in program.functions:
            self._functions.setdefault(func.name, func)

        for func in program.functions:
            params: dict[str, Declaration] = {}
            for param in func.params:
                params.setdefault(param.name, param)
            self._scopes = [params]
            self._link_block(func.body)

        if self.unresolved:
            logger.debug(
                f"{len(self.unresolved)} unresolved reference(s): "
                f"{', '.join(sorted({node.name for node in self.unresolved}))}"
            )
        return program

    def _link_block(self, block: Block) -> None:
        declared: dict[str, Declaration] = {}
        for statement in block.statements:
            if isinstance(statement, VariableDecl):
                declared.setdefault(statement.name, statement)

        self._scopes.append(declared)
        for statement in block.statements:
            self._link_node(statement)
        self._scopes.pop()

    def _link_node(self, node: Any) -> None:
        if isinstance(node, Loop):
            self._link_node(node.condition)
            self._link_block(node.body)
            return

        if isinstance(node, Variable):
            node.ref = self._resolve_variable(node.name)
            if node.ref is None:
                self.unresolved.append(node)
        elif isinstance(node, FunctionCall):
            node.ref = self._functions.get(node.name)
            if node.ref is None:
                self.unresolved.append(node)

        for child in iter_children(node):
            self._link_node(child)

    def _resolve_variable(self, name: str) -> Optional[Declaration]:
        for scope in reversed(self._scopes):
            if name in scope:
                return scope[name]
        return None


def link(program: Program) -> Program:
    """
    Convenience function to link a program with a fresh linker.

    Args:
        program: A freshly parsed Program

    Returns:
        The same Program, with references filled in
    """
    return Linker().link(program)
