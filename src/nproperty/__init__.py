"""Bind `.properties` and XML property files onto Python objects.

Example usage:

```python
from typing import Annotated, ClassVar
from nproperty import Cfg, cfg, parse

@cfg
class Settings:
    WORKERS: int = 1
    HOSTS: Annotated[tuple[str, ...], Cfg("HOST_LIST", splitter=",")] = ()

    def on_property_miss(self, key: str) -> None:
        print(f"{key} is not configured")

settings = Settings()
parse(settings, "settings.properties")
```
"""

from . import log, readers
from .cfg import DEFAULT_SPLITTER, Cfg, cfg
from .errors import (
    CustomConstructionError,
    IllegalTypeError,
    InvalidListTargetError,
    NPropertyError,
    SourceUnreadableError,
)
from .listener import PropertyListener
from .parser import bind, parse, parse_xml, split_value
from .readers import PropertiesReader, SourceReader, XmlReader
from .typecaster import TypeCaster, type_caster

__all__ = [
    "log",
    "readers",
    "Cfg",
    "cfg",
    "DEFAULT_SPLITTER",
    "parse",
    "parse_xml",
    "bind",
    "split_value",
    "PropertyListener",
    "PropertiesReader",
    "XmlReader",
    "SourceReader",
    "TypeCaster",
    "type_caster",
    "NPropertyError",
    "SourceUnreadableError",
    "IllegalTypeError",
    "InvalidListTargetError",
    "CustomConstructionError",
]
