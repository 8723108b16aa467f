import re
from typing import IO, Iterator

from ..errors import SourceUnreadableError
from .sourcereader import SourceReader, read_text

_NATURAL_LINE = re.compile(r"\r\n|\r|\n")
_WHITESPACE = " \t\f"
_SEPARATORS = "=:"
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


class PropertiesReader(SourceReader):
    """Reads the `key=value` text format of Java `.properties` files.

    The format details:
        - `#` and `!` start a comment line. Blank lines are skipped.
        - The key ends at the first unescaped `=`, `:` or whitespace; whitespace around
          the separator is dropped.
        - A line ending in an odd number of backslashes continues on the next line,
          whose leading whitespace is dropped.
        - `\\t`, `\\n`, `\\r`, `\\f` and `\\uXXXX` are escapes; any other escaped
          character stands for itself.
    """

    def __call__(
        self, stream: IO[str] | IO[bytes], *, encoding: str | None = None
    ) -> dict[str, str]:
        return self.loads(read_text(stream, encoding))

    def loads(self, text: str) -> dict[str, str]:
        properties: dict[str, str] = {}
        for line in self.__logical_lines(text):
            key, value = self.__split(line)
            properties[self.__unescape(key)] = self.__unescape(value)
        return properties

    @staticmethod
    def __logical_lines(text: str) -> Iterator[str]:
        pending: list[str] = []
        for natural in _NATURAL_LINE.split(text):
            stripped = natural.lstrip(_WHITESPACE)
            if not pending and (not stripped or stripped[0] in "#!"):
                continue
            trailing = len(stripped) - len(stripped.rstrip("\\"))
            if trailing % 2 == 1:
                pending.append(stripped[:-1])
                continue
            pending.append(stripped)
            yield "".join(pending)
            pending = []
        if pending:
            yield "".join(pending)

    @staticmethod
    def __split(line: str) -> tuple[str, str]:
        index = 0
        escaped = False
        while index < len(line):
            char = line[index]
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char in _SEPARATORS or char in _WHITESPACE:
                break
            index += 1
        key = line[:index]
        rest = line[index:].lstrip(_WHITESPACE)
        if rest and rest[0] in _SEPARATORS:
            rest = rest[1:].lstrip(_WHITESPACE)
        return key, rest

    @staticmethod
    def __unescape(text: str) -> str:
        if "\\" not in text:
            return text
        chars: list[str] = []
        index = 0
        while index < len(text):
            char = text[index]
            index += 1
            if char != "\\" or index >= len(text):
                chars.append(char)
                continue
            char = text[index]
            index += 1
            if char == "u":
                digits = text[index : index + 4]
                if len(digits) != 4 or any(
                    d not in "0123456789abcdefABCDEF" for d in digits
                ):
                    raise SourceUnreadableError(
                        f"Malformed \\uxxxx escape: \\u{digits}"
                    )
                chars.append(chr(int(digits, 16)))
                index += 4
            else:
                chars.append(_ESCAPES.get(char, char))
        # \uXXXX surrogate pairs form a single character
        return (
            "".join(chars)
            .encode("utf-16-le", "surrogatepass")
            .decode("utf-16-le", "surrogatepass")
        )
