from typing import Protocol, runtime_checkable

LISTENER_HOOKS = (
    "on_start",
    "on_property_miss",
    "on_invalid_property_cast",
    "on_done",
)


@runtime_checkable
class PropertyListener(Protocol):
    """Callbacks a binding target can implement to observe a parse.

    The binder checks which of these hooks are present once, at the start of a parse,
    and calls only those. A target may therefore implement any subset of them; the
    protocol is also a convenient base class with no-op hooks.
    """

    def on_start(self, source_name: str) -> None:
        """Called before the source is read."""

    def on_property_miss(self, key: str) -> None:
        """Called when a bound member's key is absent from the source."""

    def on_invalid_property_cast(self, key: str, value: str | None) -> None:
        """Called when a raw value (or one token of a split value) fails to convert."""

    def on_done(self, source_name: str) -> None:
        """Called after every field and method was processed."""
