"""Evaluation environment: a chain of variable-binding frames."""

from __future__ import annotations

from typing import Any, Optional

from robotml.utils.errors import InterpreterError


class Environment:
    """
    One frame of runtime variable bindings with an optional parent.

    Frames are created per block and per function call. Function frames are
    parented to the global frame, not to the caller's frame.
    """

    def __init__(self, parent: Optional[Environment] = None) -> None:
        self.parent = parent
        self.values: dict[str, Any] = {}

    def child(self) -> Environment:
        return Environment(self)

    def define(self, name: str, value: Any) -> None:
        """Bind `name` in this frame, replacing any binding it already holds."""
        self.values[name] = value

    def get(self, name: str, node: Any = None) -> Any:
        """Look `name` up from this frame outwards."""
        env: Optional[Environment] = self
        while env is not None:
            if name in env.values:
                return env.values[name]
            env = env.parent
        raise InterpreterError(f"Variable '{name}' not found", node)

    def set(self, name: str, value: Any, node: Any = None) -> None:
        """Rebind `name` in the nearest frame that already holds it."""
        env = self.find(name)
        if env is None:
            raise InterpreterError(f"Cannot assign to undeclared variable '{name}'", node)
        env.values[name] = value

    def find(self, name: str) -> Optional[Environment]:
        """Return the nearest frame binding `name`, or None."""
        env: Optional[Environment] = self
        while env is not None:
            if name in env.values:
                return env
            env = env.parent
        return None
