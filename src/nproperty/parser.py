"""Binding of flat configuration sources onto objects.

`parse` reads a `.properties` source and `parse_xml` reads an XML property source; both
then populate the target's marked fields and call its marked setter methods:

```python
from typing import Annotated, ClassVar
from nproperty import Cfg, cfg, parse

@cfg
class MainConfig:
    SOME_OPTION: ClassVar[int] = 0
    PORTS: ClassVar[Annotated[list[int], Cfg(splitter=",")]] = []

parse(MainConfig, "main.properties")
```

Binding a class only touches its `ClassVar` fields and its `classmethod`/`staticmethod`
setters. Binding an instance touches every declared field (`ClassVar` fields are still
written on the class) and every marked method.

Members whose key is missing, and values that fail to convert, are reported to the
listener (see `nproperty.listener`) and otherwise skipped. Only structural problems
raise: an unreadable source, a `None` list field, or a custom type that cannot be built
from its raw string.
"""

import inspect
import os
import types
from collections.abc import MutableSequence
from contextlib import contextmanager
from enum import Enum
from typing import (
    IO,
    Annotated,
    Any,
    Callable,
    ClassVar,
    Iterator,
    Mapping,
    TypeAlias,
    Union,
    get_args,
    get_origin,
)

from .cfg import (
    DEFAULT_SPLITTER,
    Cfg,
    annotation_marker,
    class_marker,
    demangle_attr,
    method_marker,
)
from .errors import (
    CustomConstructionError,
    IllegalTypeError,
    InvalidListTargetError,
    SourceUnreadableError,
)
from .listener import LISTENER_HOOKS
from .log import LOGGER
from .readers import PropertiesReader, SourceReader, XmlReader
from .readers.sourcereader import stream_name
from .typecaster import TypeCaster, type_caster

Source: TypeAlias = str | os.PathLike[str] | IO[str] | IO[bytes]


class _Kind(Enum):
    SCALAR = "scalar"
    ARRAY = "array"
    LIST = "list"


def _unwrap(annotation: Any) -> tuple[Any, Cfg | None, bool]:
    """Strip `Annotated`, `ClassVar` and `Optional` from a declared type.

    Returns:
        The bare type, the `Cfg` marker found in `Annotated` metadata (if any) and
        whether the declaration was a `ClassVar`.
    """
    marker: Cfg | None = None
    is_static = False
    while True:
        if annotation is ClassVar:
            return Any, marker, True
        origin = get_origin(annotation)
        if origin is Annotated:
            marker = marker or annotation_marker(annotation.__metadata__)
            annotation = get_args(annotation)[0]
        elif origin is ClassVar:
            is_static = True
            annotation = get_args(annotation)[0]
        elif origin is Union or origin is types.UnionType:
            members = [arg for arg in get_args(annotation) if arg is not type(None)]
            if len(members) != 1:
                return annotation, marker, is_static
            annotation = members[0]
        else:
            return annotation, marker, is_static


def _classify(annotation: Any) -> tuple[_Kind, Any]:
    origin = get_origin(annotation)
    if annotation is tuple or origin is tuple:
        args = get_args(annotation)
        return _Kind.ARRAY, _unwrap(args[0])[0] if args else str
    if annotation is list or origin is list or origin is MutableSequence:
        args = get_args(annotation)
        return _Kind.LIST, _unwrap(args[0])[0] if args else str
    if annotation is Any or annotation is object:
        return _Kind.SCALAR, str
    return _Kind.SCALAR, annotation


def split_value(raw: str, splitter: str = DEFAULT_SPLITTER) -> list[str]:
    """Split a raw value into tokens, dropping trailing empty tokens.

    A value without any splitter is a single token, even when it is empty.
    """
    tokens = raw.split(splitter)
    if len(tokens) == 1:
        return tokens
    while tokens and tokens[-1] == "":
        tokens.pop()
    return tokens


def _assign(owner: Any, attr: str, value: Any) -> None:
    try:
        setattr(owner, attr, value)
    except AttributeError:
        if isinstance(owner, type):
            raise
        # Frozen dataclasses and read-only __setattr__ overrides
        object.__setattr__(owner, attr, value)


def _single_parameter(method: Callable[..., Any]) -> inspect.Parameter | None:
    parameters = list(inspect.signature(method, eval_str=True).parameters.values())
    if len(parameters) != 1:
        return None
    if parameters[0].kind not in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        return None
    return parameters[0]


def _listener_hooks(target: Any, listener: Any | None) -> dict[str, Callable[..., Any]]:
    if listener is None:
        # A class is never its own listener, its hooks would be unbound
        if isinstance(target, type):
            return {}
        listener = target
    hooks: dict[str, Callable[..., Any]] = {}
    for hook in LISTENER_HOOKS:
        fn = getattr(listener, hook, None)
        if callable(fn):
            hooks[hook] = fn
    return hooks


class _Binder:
    def __init__(
        self,
        target: Any,
        *,
        listener: Any | None,
        caster: TypeCaster | None,
    ):
        self.target = target
        self.is_class = isinstance(target, type)
        self.klass: type = target if self.is_class else type(target)
        self.caster = caster if caster is not None else type_caster
        self.__hooks = _listener_hooks(target, listener)
        self.properties: Mapping[str, str | None] = {}

    def notify(self, hook: str, *args: Any) -> None:
        fn = self.__hooks.get(hook)
        if fn is not None:
            fn(*args)

    def __miss(self, name: str) -> None:
        LOGGER.debug("miss", f"{self.klass.__qualname__}: no property {name}")
        self.notify("on_property_miss", name)

    def __invalid_cast(self, name: str, value: str | None, error: Exception) -> None:
        LOGGER.debug(
            "invalid cast",
            f"{self.klass.__qualname__}: property {name}={value!r} ({error})",
        )
        self.notify("on_invalid_property_cast", name, value)

    def bind(self, properties: Mapping[str, str | None]) -> None:
        self.properties = properties
        self.bind_fields()
        self.bind_methods()

    def bind_fields(self) -> None:
        bind_unmarked = class_marker(self.klass) is not None
        annotations = inspect.get_annotations(self.klass, eval_str=True)
        for attr, annotation in annotations.items():
            field_type, marker, is_static = _unwrap(annotation)
            if self.is_class and not is_static:
                continue
            if marker is not None:
                if marker.ignore:
                    continue
            elif not bind_unmarked:
                continue

            identifier = demangle_attr(self.klass, attr)
            name = marker.key_for(identifier) if marker is not None else identifier
            if name not in self.properties:
                self.__miss(name)
                continue
            raw = self.properties[name]
            if raw is None:
                continue

            owner = self.klass if (self.is_class or is_static) else self.target
            splitter = marker.splitter if marker is not None else DEFAULT_SPLITTER
            kind, value_type = _classify(field_type)
            match kind:
                case _Kind.SCALAR:
                    self.__bind_scalar(owner, attr, name, value_type, raw)
                case _Kind.ARRAY:
                    self.__bind_array(owner, attr, name, value_type, raw, splitter)
                case _Kind.LIST:
                    self.__bind_list(owner, attr, name, value_type, raw, splitter)

    def __bind_scalar(
        self, owner: Any, attr: str, name: str, value_type: Any, raw: str
    ) -> None:
        if self.caster.is_castable(value_type):
            try:
                value = self.caster.cast(value_type, raw)
            except (IllegalTypeError, ValueError) as e:
                self.__invalid_cast(name, raw, e)
                return
        else:
            try:
                value = value_type(raw)
            except Exception as e:
                raise CustomConstructionError(
                    f"Cannot build {value_type!r} from property {name}={raw!r}: {e}"
                ) from e
        _assign(owner, attr, value)
        LOGGER.debug("bind", f"{self.klass.__qualname__}.{attr} <- {name}")

    def __bind_array(
        self,
        owner: Any,
        attr: str,
        name: str,
        element_type: Any,
        raw: str,
        splitter: str,
    ) -> None:
        elements = []
        for token in split_value(raw, splitter):
            try:
                elements.append(self.caster.cast(element_type, token))
            except (IllegalTypeError, ValueError) as e:
                self.__invalid_cast(name, token, e)
                elements.append(self.caster.default_value(element_type))
        _assign(owner, attr, tuple(elements))
        LOGGER.debug(
            "bind", f"{self.klass.__qualname__}.{attr} <- {name} ({len(elements)} items)"
        )

    def __bind_list(
        self,
        owner: Any,
        attr: str,
        name: str,
        element_type: Any,
        raw: str,
        splitter: str,
    ) -> None:
        container = getattr(owner, attr, None)
        if container is None:
            raise InvalidListTargetError(
                f"Cannot bind property {name} to a None list. Please initialize "
                f"{self.klass.__qualname__}.{attr} before parsing."
            )
        if not isinstance(owner, type) and attr not in getattr(owner, "__dict__", {}):
            # An instance never appends to a list it inherits from its class
            container = list(container)
            _assign(owner, attr, container)
        appended = 0
        for token in split_value(raw, splitter):
            try:
                value = self.caster.cast(element_type, token)
            except (IllegalTypeError, ValueError) as e:
                self.__invalid_cast(name, token, e)
                continue
            container.append(value)
            appended += 1
        LOGGER.debug(
            "bind", f"{self.klass.__qualname__}.{attr} <- {name} ({appended} items)"
        )

    def bind_methods(self) -> None:
        for attr, member in list(vars(self.klass).items()):
            marker = method_marker(member)
            if marker is None or marker.ignore:
                continue
            is_static = isinstance(member, (classmethod, staticmethod))
            if not (is_static or inspect.isfunction(member)):
                continue
            if self.is_class and not is_static:
                continue

            name = marker.key_for(demangle_attr(self.klass, attr))
            if name not in self.properties:
                self.__miss(name)
                continue

            method = getattr(self.target, attr)
            parameter = _single_parameter(method)
            if parameter is None:
                LOGGER.warning(
                    "skip",
                    f"{self.klass.__qualname__}.{attr} is marked for binding but does "
                    "not take exactly one positional parameter",
                )
                continue
            raw = self.properties[name]

            value_type = _unwrap(parameter.annotation)[0]
            if value_type in (inspect.Parameter.empty, Any, object):
                value_type = str

            if raw is None and value_type is str:
                method(raw)
                continue
            try:
                value = self.caster.cast(value_type, raw)
            except (IllegalTypeError, ValueError) as e:
                self.__invalid_cast(name, raw, e)
                continue
            try:
                method(value)
            except Exception as e:
                self.__invalid_cast(name, raw, e)
                continue
            LOGGER.debug("bind", f"{self.klass.__qualname__}.{attr}({name})")


@contextmanager
def _open_source(source: Source) -> Iterator[IO[str] | IO[bytes]]:
    if isinstance(source, (str, os.PathLike)):
        try:
            stream = open(source, "rb")
        except OSError as e:
            raise SourceUnreadableError(
                f"Cannot open configuration file {os.fspath(source)}: {e}"
            ) from e
        with stream:
            yield stream
    else:
        yield source


def _source_name(source: Source) -> str:
    if isinstance(source, (str, os.PathLike)):
        return os.fspath(source)
    return stream_name(source)


def _parse(
    reader: SourceReader,
    target: Any,
    source: Source,
    source_name: str | None,
    *,
    encoding: str | None,
    listener: Any | None,
    caster: TypeCaster | None,
) -> dict[str, str]:
    binder = _Binder(target, listener=listener, caster=caster)
    name = source_name if source_name is not None else _source_name(source)
    binder.notify("on_start", name)
    with _open_source(source) as stream:
        properties = reader(stream, encoding=encoding)
    LOGGER.debug("load", f"{len(properties)} properties from {name}")
    binder.bind(properties)
    binder.notify("on_done", name)
    return properties


def parse(
    target: Any,
    source: Source,
    source_name: str | None = None,
    *,
    encoding: str | None = None,
    listener: Any | None = None,
    caster: TypeCaster | None = None,
) -> dict[str, str]:
    """Parse a `.properties` source and bind it onto `target`.

    Args:
        target: The object to populate, or a class to populate its `ClassVar` fields only.
        source: A file path, or an open text or binary stream. Streams are read to the end but not closed.
        source_name: The name reported to the listener. Defaults to the path or the stream's name.
        encoding: The encoding of files and binary streams. Defaults to the locale's encoding.
        listener: The object receiving the listener callbacks. Defaults to `target` itself.
        caster: The type caster to convert values with. Defaults to the shared `type_caster`.

    Returns:
        The key-to-string mapping that was read from the source.

    Raises:
        SourceUnreadableError: If the source cannot be opened, read or decoded.
        InvalidListTargetError: If a list field holds `None`.
        CustomConstructionError: If a non-castable field type cannot be built from its value.
    """
    return _parse(
        PropertiesReader(),
        target,
        source,
        source_name,
        encoding=encoding,
        listener=listener,
        caster=caster,
    )


def parse_xml(
    target: Any,
    source: Source,
    source_name: str | None = None,
    *,
    encoding: str | None = None,
    listener: Any | None = None,
    caster: TypeCaster | None = None,
) -> dict[str, str]:
    """Parse an XML property source and bind it onto `target`.

    This is the XML counterpart of `parse` and takes the same arguments. When no
    `encoding` is given, byte input is decoded as the XML declaration says.
    """
    return _parse(
        XmlReader(),
        target,
        source,
        source_name,
        encoding=encoding,
        listener=listener,
        caster=caster,
    )


def bind(
    target: Any,
    properties: Mapping[str, str | None],
    source_name: str = "<mapping>",
    *,
    listener: Any | None = None,
    caster: TypeCaster | None = None,
) -> dict[str, str | None]:
    """Bind an already loaded key-to-string mapping onto `target`.

    Behaves like `parse` minus the reading, for sources read by a custom reader.
    """
    binder = _Binder(target, listener=listener, caster=caster)
    binder.notify("on_start", source_name)
    binder.bind(properties)
    binder.notify("on_done", source_name)
    return dict(properties)
