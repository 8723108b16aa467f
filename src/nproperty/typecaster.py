"""Conversion of raw configuration strings to Python values.

The binder asks `is_castable` first. Castable types are converted with `cast`, and a
failure there is recoverable (the listener is told and the member is skipped). Types
that are not castable are built by calling the type with the raw string instead.

Custom converters can be plugged in per type:

```python
from nproperty import type_caster

type_caster.register(timedelta, lambda raw: timedelta(seconds=float(raw)))
```
"""

from decimal import Decimal, InvalidOperation
from enum import Enum
from fractions import Fraction
from pathlib import Path
from threading import Lock
from typing import Any, Callable, TypeVar, get_origin

from .errors import IllegalTypeError

T = TypeVar("T")
E = TypeVar("E", bound=Enum)

_TRUE_STRINGS = frozenset(["1", "true", "yes", "on"])
_FALSE_STRINGS = frozenset(["0", "false", "no", "off"])


def _to_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    raise ValueError(f"Invalid boolean value: {raw!r}")


def _to_decimal(raw: str) -> Decimal:
    try:
        return Decimal(raw.strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid decimal value: {raw!r}") from e


def _to_fraction(raw: str) -> Fraction:
    try:
        return Fraction(raw.strip())
    except ZeroDivisionError as e:
        raise ValueError(f"Invalid fraction value: {raw!r}") from e


_BUILTIN_CONVERTERS: dict[type, Callable[[str], Any]] = {
    str: lambda raw: raw,
    int: lambda raw: int(raw.strip()),
    float: lambda raw: float(raw.strip()),
    complex: lambda raw: complex(raw.strip()),
    bool: _to_bool,
    Decimal: _to_decimal,
    Fraction: _to_fraction,
    Path: Path,
}

_DEFAULT_VALUES: dict[type, Any] = {
    int: 0,
    float: 0.0,
    complex: 0j,
    bool: False,
    Decimal: Decimal(0),
    Fraction: Fraction(0),
}


def _to_enum(klass: type[E], raw: str) -> E:
    name = raw.strip()
    if name in klass.__members__:
        return klass.__members__[name]
    for member in klass:
        if str(member.value) == name:
            return member
    raise ValueError(f"{raw!r} is not a member of {klass.__name__}")


class TypeCaster:
    """Converts raw strings to the types the binder meets on fields and setter parameters.

    Built-in conversions cover `str`, `int`, `float`, `complex`, `bool`, `Decimal`,
    `Fraction`, `Path` and every `Enum` subclass. Converters registered with
    `register` take precedence over the built-in ones.
    """

    def __init__(self):
        self.__converters: dict[type, Callable[[str], Any]] = {}
        self.__lock = Lock()

    def register(self, klass: type[T], converter: Callable[[str], T]) -> None:
        """Register a converter for a type.

        A converter should raise `ValueError` for malformed input so that the failure is
        reported as an invalid cast rather than aborting the parse.

        Args:
            klass: The exact type the converter produces.
            converter: A callable that takes the raw string and returns the converted value.
        """
        with self.__lock:
            self.__converters[klass] = converter

    def unregister(self, klass: type) -> None:
        with self.__lock:
            self.__converters.pop(klass, None)

    def is_castable(self, klass: Any) -> bool:
        if not isinstance(klass, type) or get_origin(klass) is not None:
            return False
        return (
            klass in self.__converters
            or klass in _BUILTIN_CONVERTERS
            or issubclass(klass, Enum)
        )

    def cast(self, klass: Any, raw: str | None) -> Any:
        """Convert a raw string to `klass`.

        Raises:
            IllegalTypeError: If `klass` is not castable.
            ValueError: If `raw` is not a valid representation of `klass`.
        """
        if not self.is_castable(klass):
            raise IllegalTypeError(f"Type {klass!r} is not castable")
        if raw is None:
            raise ValueError(f"Cannot cast a missing value to {klass.__name__}")
        converter = self.__converters.get(klass)
        if converter is not None:
            return converter(raw)
        converter = _BUILTIN_CONVERTERS.get(klass)
        if converter is not None:
            return converter(raw)
        return _to_enum(klass, raw)

    def default_value(self, klass: Any) -> Any:
        """The value left in an array slot whose element failed to convert."""
        return _DEFAULT_VALUES.get(klass)


type_caster = TypeCaster()


def is_castable(klass: Any) -> bool:
    return type_caster.is_castable(klass)


def cast(klass: Any, raw: str | None) -> Any:
    return type_caster.cast(klass, raw)
