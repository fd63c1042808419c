"""
Unit tests for runtime environments and values.
"""

import pytest

from robotml.compiler.types import RobotType
from robotml.runtime.environment import Environment
from robotml.runtime.values import (
    UnitValue,
    coerce_to_declared,
    default_value,
    is_number,
    magnitude,
    strict_equals,
)
from robotml.utils.errors import InterpreterError


class TestEnvironment:
    """Tests for the frame chain."""

    def test_define_and_get(self):
        env = Environment()
        env.define("x", 1)
        assert env.get("x") == 1

    def test_lookup_walks_outwards(self):
        outer = Environment()
        outer.define("x", 1)
        inner = outer.child()
        assert inner.get("x") == 1

    def test_inner_definition_shadows(self):
        outer = Environment()
        outer.define("x", 1)
        inner = outer.child()
        inner.define("x", 2)
        assert inner.get("x") == 2
        assert outer.get("x") == 1

    def test_set_rebinds_nearest_holder(self):
        outer = Environment()
        outer.define("x", 1)
        inner = outer.child().child()
        inner.set("x", 5)
        assert outer.get("x") == 5
        assert "x" not in inner.values

    def test_get_missing(self):
        with pytest.raises(InterpreterError, match="Variable 'y' not found"):
            Environment().get("y")

    def test_set_missing(self):
        with pytest.raises(InterpreterError, match="undeclared variable 'y'"):
            Environment().child().set("y", 1)

    def test_find(self):
        outer = Environment()
        outer.define("x", 1)
        inner = outer.child()
        assert inner.find("x") is outer
        assert inner.find("z") is None


class TestValues:
    """Tests for runtime value helpers."""

    def test_unit_conversion(self):
        assert UnitValue(3, RobotType.CM).to(RobotType.MM) == UnitValue(30, RobotType.MM)
        assert UnitValue(25, RobotType.MM).to(RobotType.CM) == UnitValue(2.5, RobotType.CM)
        value = UnitValue(4, RobotType.MM)
        assert value.to(RobotType.MM) is value

    def test_round_trip_within_tolerance(self):
        start = UnitValue(17.3, RobotType.MM)
        back = start.to(RobotType.CM).to(RobotType.MM)
        assert back.value == pytest.approx(start.value)

    def test_conversion_to_non_unit(self):
        with pytest.raises(ValueError):
            UnitValue(1, RobotType.CM).to(RobotType.NUMBER)

    def test_str(self):
        assert str(UnitValue(5, RobotType.CM)) == "5cm"

    def test_defaults(self):
        assert default_value(RobotType.NUMBER) == 0
        assert default_value(RobotType.BOOLEAN) is False
        assert default_value(RobotType.MM) == UnitValue(0, RobotType.MM)
        assert default_value(RobotType.VOID) is None

    def test_coerce(self):
        assert coerce_to_declared(5, RobotType.CM) == UnitValue(5, RobotType.CM)
        assert coerce_to_declared(5, RobotType.NUMBER) == 5
        unit = UnitValue(2, RobotType.MM)
        assert coerce_to_declared(unit, RobotType.CM) is unit
        assert coerce_to_declared(True, RobotType.CM) is True

    def test_magnitude_and_number(self):
        assert magnitude(UnitValue(7, RobotType.CM)) == 7
        assert magnitude(3) == 3
        assert is_number(2.5)
        assert not is_number(True)

    def test_strict_equals(self):
        assert strict_equals(1, 1.0)
        assert not strict_equals(1, True)
        assert not strict_equals(False, 0)
        assert strict_equals(True, True)
        assert strict_equals(UnitValue(2, RobotType.CM), 2)
