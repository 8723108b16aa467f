"""Markers that tell the binder which members to populate and how.

Example usage:

```python
from typing import Annotated, ClassVar
from nproperty import Cfg, cfg

@cfg
class ServerConfig:
    PORT: ClassVar[int] = 8080
    HOSTS: Annotated[tuple[str, ...], Cfg(splitter=",")] = ()
    SECRET: Annotated[str, Cfg(ignore=True)] = ""

    @cfg("LOG_LEVEL")
    def set_log_level(self, level: str) -> None:
        self.log_level = level.upper()
```

A class-level `@cfg` lets every declared field bind by its own name. Without it,
only fields carrying a `Cfg` in their `Annotated` metadata are bound.

Attributes:
    DEFAULT_SPLITTER: The delimiter used for array and list values when no splitter is given.
"""

from dataclasses import dataclass
from typing import Any, TypeVar, overload

T = TypeVar("T")

DEFAULT_SPLITTER = ";"

MARKER_ATTR = "__nproperty_cfg__"


@dataclass(frozen=True)
class Cfg:
    """Binding options of a member.

    Args:
        value: The configuration key. An empty key falls back to the member's own name.
        ignore: Never bind this member, even when its class carries the class-level marker.
        splitter: The delimiter for array and list values.
    """

    value: str = ""
    ignore: bool = False
    splitter: str = DEFAULT_SPLITTER

    def __post_init__(self):
        if not self.splitter:
            raise ValueError("Splitter must be a non-empty string")

    def __call__(self, target: T) -> T:
        """Attach these options to a class or a method, returning it unchanged."""
        holder = (
            target.__func__ if isinstance(target, (classmethod, staticmethod)) else target
        )
        setattr(holder, MARKER_ATTR, self)
        return target

    def key_for(self, identifier: str) -> str:
        return self.value if self.value else identifier


@overload
def cfg(target: T, /) -> T: ...


@overload
def cfg(
    value: str = "", /, *, ignore: bool = False, splitter: str = DEFAULT_SPLITTER
) -> Cfg: ...


def cfg(
    value: Any = "", /, *, ignore: bool = False, splitter: str = DEFAULT_SPLITTER
) -> Any:
    """Mark a class or a setter method for binding.

    Works both bare (`@cfg`) and with options (`@cfg("KEY", splitter=",")`).
    """
    if isinstance(value, str):
        return Cfg(value, ignore=ignore, splitter=splitter)
    return Cfg(ignore=ignore, splitter=splitter)(value)


def class_marker(klass: type) -> Cfg | None:
    # Only the class's own dict counts, subclasses do not inherit the marker
    marker = vars(klass).get(MARKER_ATTR)
    return marker if isinstance(marker, Cfg) else None


def method_marker(member: Any) -> Cfg | None:
    if isinstance(member, (classmethod, staticmethod)):
        member = member.__func__
    marker = getattr(member, MARKER_ATTR, None)
    return marker if isinstance(marker, Cfg) else None


def annotation_marker(metadata: tuple[Any, ...]) -> Cfg | None:
    for item in metadata:
        if isinstance(item, Cfg):
            return item
    return None


def demangle_attr(klass: type, attr: str) -> str:
    """Return the name of a private member as it was written in the class body."""
    prefix = f"_{klass.__name__.lstrip('_')}__"
    if attr.startswith(prefix) and not attr.endswith("__"):
        return "__" + attr[len(prefix) :]
    return attr
