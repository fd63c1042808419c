"""
Scope table used by the type checker.

The table tracks a current depth. Every declared symbol remembers the depth
it was declared at, and `exit_scope` drops everything declared at the depth
being left. Each name maps to a stack of symbols so that leaving an inner
scope uncovers whatever the inner declaration shadowed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from robotml.compiler.types import RobotType
from robotml.utils.errors import DuplicateSymbolError


@dataclass(frozen=True, slots=True)
class Symbol:
    """A declared name: its type, declaring node, and scope depth."""

    name: str
    type: RobotType
    node: Any
    depth: int


class ScopeTable:
    """
    Compile-time symbol table with explicit enter/exit depth tracking.

    Example:
        table = ScopeTable()
        table.enter_scope()
        table.declare("x", RobotType.NUMBER, decl)
        table.resolve("x")  # Symbol(name='x', ...)
        table.exit_scope()
        table.resolve("x")  # None
    """

    def __init__(self) -> None:
        self._depth = 0
        self._symbols: dict[str, list[Symbol]] = {}

    @property
    def depth(self) -> int:
        return self._depth

    def enter_scope(self) -> None:
        self._depth += 1

    def exit_scope(self) -> None:
        """Drop every symbol declared at the current depth, then step out."""
        for name in list(self._symbols):
            stack = self._symbols[name]
            while stack and stack[-1].depth == self._depth:
                stack.pop()
            if not stack:
                del self._symbols[name]
        if self._depth > 0:
            self._depth -= 1

    def declare(self, name: str, type_: RobotType, node: Any = None) -> Symbol:
        """
        Declare `name` at the current depth.

        Raises:
            DuplicateSymbolError: If `name` is already declared at this depth.
        """
        stack = self._symbols.setdefault(name, [])
        if stack and stack[-1].depth == self._depth:
            raise DuplicateSymbolError(name, getattr(node, "location", None))
        symbol = Symbol(name, type_, node, self._depth)
        stack.append(symbol)
        return symbol

    def resolve(self, name: str) -> Optional[Symbol]:
        """Return the innermost visible symbol for `name`, or None."""
        stack = self._symbols.get(name)
        return stack[-1] if stack else None

    def lookup_local(self, name: str) -> Optional[Symbol]:
        """Return the symbol for `name` only if declared at the current depth."""
        symbol = self.resolve(name)
        if symbol is not None and symbol.depth == self._depth:
            return symbol
        return None
