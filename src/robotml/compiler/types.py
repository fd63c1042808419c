"""
Type domain for the RobotML checker.

RobotML has five source-level types: ``number``, ``boolean``, the two
distance units ``cm`` and ``mm``, and ``void`` for functions without a
result. ``unknown`` is internal: it is what the checker infers for an
expression it cannot type (an unresolved variable, an unlinked call) and it
is compatible with everything so a single defect is reported once.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class RobotType(str, Enum):
    """A RobotML type. Members compare equal to their source spelling."""

    NUMBER = "number"
    BOOLEAN = "boolean"
    CM = "cm"
    MM = "mm"
    VOID = "void"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value

    @property
    def is_unit(self) -> bool:
        """Check if this is a distance unit type (cm or mm)."""
        return self in (RobotType.CM, RobotType.MM)

    @property
    def is_numeric(self) -> bool:
        """Check if values of this type can take part in arithmetic."""
        return self in (RobotType.NUMBER, RobotType.CM, RobotType.MM)

    @classmethod
    def parse(cls, name: object) -> Optional[RobotType]:
        """Return the type spelled `name`, or None if it is not a type."""
        if isinstance(name, RobotType):
            return name
        try:
            return cls(name)
        except ValueError:
            return None


# Types accepted as declared types of variables and parameters
VALUE_TYPES = frozenset({RobotType.NUMBER, RobotType.BOOLEAN, RobotType.CM, RobotType.MM})

# Types a function may declare as its return type
RETURN_TYPES = VALUE_TYPES | {RobotType.VOID}

# Targets of the `in` cast
CAST_TYPES = VALUE_TYPES

# Number of millimetres in one centimetre
MM_PER_CM = 10


def is_compatible(source: object, target: object) -> bool:
    """
    Check if a value of type `source` can be used where `target` is expected.

    Identical types are compatible, ``number`` converts to and from both
    units, ``cm`` and ``mm`` convert into each other, and ``boolean`` is
    compatible only with itself.
    """
    if source == target:
        return True
    if source == RobotType.UNKNOWN or target == RobotType.UNKNOWN:
        return True

    numeric = (RobotType.NUMBER, RobotType.CM, RobotType.MM)
    return source in numeric and target in numeric


def is_numeric_type(type_: object) -> bool:
    """Check if `type_` may appear as an arithmetic operand (unknown passes)."""
    return type_ in (RobotType.NUMBER, RobotType.CM, RobotType.MM, RobotType.UNKNOWN)


def is_boolean_type(type_: object) -> bool:
    """Check if `type_` may appear as a condition (unknown passes)."""
    return type_ in (RobotType.BOOLEAN, RobotType.UNKNOWN)
