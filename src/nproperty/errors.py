"""Exceptions raised by nproperty.

Only structural failures leave a parse call. Missing keys and bad conversions are
reported to the listener instead (see `nproperty.listener`).
"""


class NPropertyError(Exception):
    """Base class of every error raised by nproperty."""


class SourceUnreadableError(NPropertyError, OSError):
    """The configuration source could not be opened, decoded or parsed."""


class IllegalTypeError(NPropertyError, TypeError):
    """The type caster does not know how to convert to the requested type."""


class InvalidListTargetError(NPropertyError, TypeError):
    """A list field was `None` when the binder tried to append to it."""


class CustomConstructionError(NPropertyError, TypeError):
    """A non-castable field type could not be built from its raw string value."""
