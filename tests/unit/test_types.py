"""
Unit tests for the RobotML type domain.
"""

import pytest

from robotml.compiler.types import (
    VALUE_TYPES,
    RobotType,
    is_boolean_type,
    is_compatible,
    is_numeric_type,
)


class TestRobotType:
    def test_members_equal_spelling(self):
        assert RobotType.CM == "cm"
        assert str(RobotType.BOOLEAN) == "boolean"

    def test_parse(self):
        assert RobotType.parse("mm") is RobotType.MM
        assert RobotType.parse(RobotType.VOID) is RobotType.VOID
        assert RobotType.parse("inch") is None

    def test_unit_and_numeric_flags(self):
        assert RobotType.CM.is_unit and RobotType.MM.is_unit
        assert not RobotType.NUMBER.is_unit
        assert RobotType.NUMBER.is_numeric
        assert not RobotType.BOOLEAN.is_numeric

    def test_void_is_not_a_value_type(self):
        assert RobotType.VOID not in VALUE_TYPES


class TestCompatibility:
    """Tests for the unit-aware compatibility rule."""

    @pytest.mark.parametrize(
        "source,target",
        [
            (RobotType.NUMBER, RobotType.NUMBER),
            (RobotType.NUMBER, RobotType.CM),
            (RobotType.MM, RobotType.NUMBER),
            (RobotType.CM, RobotType.MM),
            (RobotType.BOOLEAN, RobotType.BOOLEAN),
            (RobotType.UNKNOWN, RobotType.BOOLEAN),
            (RobotType.CM, RobotType.UNKNOWN),
        ],
    )
    def test_compatible(self, source, target):
        assert is_compatible(source, target)

    @pytest.mark.parametrize(
        "source,target",
        [
            (RobotType.BOOLEAN, RobotType.NUMBER),
            (RobotType.NUMBER, RobotType.BOOLEAN),
            (RobotType.CM, RobotType.BOOLEAN),
            (RobotType.VOID, RobotType.NUMBER),
        ],
    )
    def test_incompatible(self, source, target):
        assert not is_compatible(source, target)

    def test_operand_predicates(self):
        assert is_numeric_type(RobotType.MM)
        assert is_numeric_type(RobotType.UNKNOWN)
        assert not is_numeric_type(RobotType.BOOLEAN)
        assert is_boolean_type(RobotType.BOOLEAN)
        assert is_boolean_type(RobotType.UNKNOWN)
        assert not is_boolean_type(RobotType.NUMBER)
