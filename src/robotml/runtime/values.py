"""
Runtime values for the RobotML interpreter.

Numbers and booleans are plain Python ``int``/``float``/``bool``. A distance
is a `UnitValue` pairing a magnitude with its unit. Arithmetic does not
carry units: operands are reduced to their magnitude first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from robotml.compiler.types import MM_PER_CM, RobotType


@dataclass(frozen=True, slots=True)
class UnitValue:
    """A distance: a magnitude tagged with ``cm`` or ``mm``."""

    value: Union[int, float]
    unit: RobotType

    def to(self, unit: RobotType) -> UnitValue:
        """Convert to `unit` using the fixed 10:1 mm per cm ratio."""
        if unit == self.unit:
            return self
        if self.unit == RobotType.CM and unit == RobotType.MM:
            return UnitValue(self.value * MM_PER_CM, unit)
        if self.unit == RobotType.MM and unit == RobotType.CM:
            return UnitValue(self.value / MM_PER_CM, unit)
        raise ValueError(f"Cannot convert {self.unit} to {unit}")

    def __str__(self) -> str:
        return f"{self.value}{self.unit}"


Value = Union[int, float, bool, UnitValue, None]


def magnitude(value: Any) -> Any:
    """Strip the unit from a UnitValue; other values pass through."""
    if isinstance(value, UnitValue):
        return value.value
    return value


def is_number(value: Any) -> bool:
    """Check for a plain number. Booleans are not numbers here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def default_value(type_: RobotType) -> Value:
    """Value bound by a declaration that has no initializer."""
    if type_ == RobotType.NUMBER:
        return 0
    if type_ == RobotType.BOOLEAN:
        return False
    if type_ in (RobotType.CM, RobotType.MM):
        return UnitValue(0, type_)
    return None


def coerce_to_declared(value: Value, type_: Any) -> Value:
    """
    Give a bare number flowing into a ``cm``/``mm`` slot its unit.

    Values of any other shape are stored unchanged.
    """
    if type_ in (RobotType.CM, RobotType.MM) and is_number(value):
        return UnitValue(value, RobotType(type_))
    return value


def strict_equals(left: Value, right: Value) -> bool:
    """Equality without cross-kind coercion: ``true`` never equals ``1``."""
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return magnitude(left) == magnitude(right)
