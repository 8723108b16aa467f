import locale
import os
from typing import IO, Protocol

from ..errors import SourceUnreadableError


class SourceReader(Protocol):
    """Reads a configuration source into a flat key-to-string mapping."""

    def __call__(
        self, stream: IO[str] | IO[bytes], *, encoding: str | None = None
    ) -> dict[str, str]: ...


def stream_name(stream: IO) -> str:
    name = getattr(stream, "name", None)
    if isinstance(name, (str, bytes)):
        return os.fsdecode(name)
    return str(name) if isinstance(name, int) else "<stream>"


def read_text(stream: IO[str] | IO[bytes], encoding: str | None = None) -> str:
    """Read a whole stream as text.

    Text streams are taken as they are, since the caller already decoded them. Byte
    streams are decoded with `encoding`, or with the locale's preferred encoding.
    """
    try:
        data = stream.read()
    except OSError as e:
        raise SourceUnreadableError(f"Failed to read {stream_name(stream)}: {e}") from e
    if isinstance(data, str):
        return data
    try:
        return data.decode(encoding or locale.getpreferredencoding(False))
    except (UnicodeDecodeError, LookupError) as e:
        raise SourceUnreadableError(
            f"Failed to decode {stream_name(stream)}: {e}"
        ) from e
