import xml.etree.ElementTree as ET
from typing import IO

from ..errors import SourceUnreadableError
from .sourcereader import SourceReader, stream_name


class XmlReader(SourceReader):
    """Reads the XML property format of Java's `Properties.loadFromXML`.

    ```xml
    <?xml version="1.0" encoding="UTF-8"?>
    <!DOCTYPE properties SYSTEM "http://java.sun.com/dtd/properties.dtd">
    <properties>
        <comment>Optional</comment>
        <entry key="MY_INT_VALUE">1</entry>
    </properties>
    ```

    Byte input is handed to the XML parser as it is, so the encoding declared in the
    document wins unless an explicit `encoding` is given.
    """

    def __call__(
        self, stream: IO[str] | IO[bytes], *, encoding: str | None = None
    ) -> dict[str, str]:
        try:
            data = stream.read()
        except OSError as e:
            raise SourceUnreadableError(
                f"Failed to read {stream_name(stream)}: {e}"
            ) from e
        if isinstance(data, bytes) and encoding is not None:
            try:
                data = data.decode(encoding)
            except (UnicodeDecodeError, LookupError) as e:
                raise SourceUnreadableError(
                    f"Failed to decode {stream_name(stream)}: {e}"
                ) from e
        return self.loads(data)

    def loads(self, document: str | bytes) -> dict[str, str]:
        try:
            root = ET.fromstring(document)
        except ET.ParseError as e:
            raise SourceUnreadableError(f"Malformed XML properties: {e}") from e
        if root.tag != "properties":
            raise SourceUnreadableError(
                f"Expected a <properties> root element, found <{root.tag}>"
            )
        properties: dict[str, str] = {}
        for entry in root.iter("entry"):
            key = entry.get("key")
            if key is None:
                raise SourceUnreadableError("XML property entry without a key attribute")
            properties[key] = entry.text or ""
        return properties
