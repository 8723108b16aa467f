"""Tests for the type caster."""

import threading
from datetime import date
from decimal import Decimal
from enum import Enum, IntEnum
from fractions import Fraction
from pathlib import Path

import pytest

from nproperty import IllegalTypeError, TypeCaster, type_caster
from nproperty.typecaster import cast, is_castable


class Level(IntEnum):
    LOW = 1
    HIGH = 2


class Mode(Enum):
    FAST = "fast"


@pytest.mark.parametrize(
    "klass, raw, expected",
    [
        (str, " spaced ", " spaced "),
        (int, " 42 ", 42),
        (int, "-7", -7),
        (float, "2.5", 2.5),
        (complex, "1+2j", 1 + 2j),
        (bool, "TRUE", True),
        (bool, "off", False),
        (Decimal, "0.10", Decimal("0.10")),
        (Fraction, "1/3", Fraction(1, 3)),
        (Path, "etc/app.ini", Path("etc/app.ini")),
        (Level, "HIGH", Level.HIGH),
        (Level, "1", Level.LOW),
        (Mode, "fast", Mode.FAST),
    ],
)
def test_builtin_casts(klass, raw, expected):
    """Test the built-in conversions."""
    assert cast(klass, raw) == expected


@pytest.mark.parametrize(
    "klass, raw",
    [
        (int, "1.5"),
        (float, "abc"),
        (bool, "maybe"),
        (Decimal, "ten"),
        (Fraction, "1/0"),
        (Mode, "slow"),
        (int, None),
    ],
)
def test_invalid_values_raise_value_error(klass, raw):
    """Test that malformed values raise ValueError."""
    with pytest.raises(ValueError):
        cast(klass, raw)


def test_unknown_type_is_not_castable():
    """Test that unknown and generic types are not castable."""
    assert not is_castable(date)
    assert not is_castable(list[int])
    with pytest.raises(IllegalTypeError):
        cast(date, "2024-01-01")


def test_registered_converter():
    """Test that a registered converter makes a type castable."""
    caster = TypeCaster()
    caster.register(date, date.fromisoformat)

    assert caster.is_castable(date)
    assert caster.cast(date, "2024-01-31") == date(2024, 1, 31)

    caster.unregister(date)
    assert not caster.is_castable(date)


def test_registered_converter_takes_precedence():
    """Test that a registered converter overrides the built-in one."""
    caster = TypeCaster()
    caster.register(int, lambda raw: int(raw, 16))

    assert caster.cast(int, "ff") == 255
    assert cast(int, "10") == 10


def test_default_values():
    """Test the array slot defaults per type."""
    caster = TypeCaster()

    assert caster.default_value(int) == 0
    assert caster.default_value(bool) is False
    assert caster.default_value(str) is None
    assert caster.default_value(Mode) is None


def test_concurrent_registration_on_the_module_caster():
    """Test that converters registered from several threads all land in the registry."""
    klasses = [type(f"Unit{i}", (), {}) for i in range(16)]
    threads = [
        threading.Thread(target=type_caster.register, args=(klass, lambda raw: raw))
        for klass in klasses
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    try:
        assert all(is_castable(klass) for klass in klasses)
    finally:
        for klass in klasses:
            type_caster.unregister(klass)
    assert not any(is_castable(klass) for klass in klasses)
