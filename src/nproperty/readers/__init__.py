"""Readers that turn configuration sources into flat key-to-string mappings.

Attributes:
    PropertiesReader: Reads the Java `.properties` text format.
    XmlReader: Reads the Java XML property format.
    SourceReader: The protocol both readers implement.
"""

from .sourcereader import SourceReader
from .propertiesreader import PropertiesReader
from .xmlreader import XmlReader

__all__ = ["SourceReader", "PropertiesReader", "XmlReader"]
