# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import dataclasses
from collections.abc import Callable, Iterable, MutableSequence, Sequence
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum, auto
from functools import lru_cache
from inspect import Parameter, signature
from types import MemberDescriptorType, NoneType, UnionType
from typing import Annotated, Any, ClassVar, Final, TypeAliasType, Union, get_args, get_origin, get_type_hints
from uuid import UUID

from loosexml.datamodel import URI, DataAdapter, DataAdapterType
from loosexml.exceptions import UnsupportedTypeError
from loosexml.python import reprproxy
from loosexml.python.types import Marker

__all__ = (  # noqa: RUF022
    'CoercionKind',
    'AwareDatetime',

    'DeserializeAs',
    'deserialize_as',

    'MemberDescriptor',
    'TypeDescriptor',
    'TypeInfo',

    'describe',
    'inspect_type',
    'is_bare_collection',
    'type_name',
)


class CoercionKind(Enum):
    BOOLEAN = auto()
    INTEGER = auto()
    FLOAT = auto()
    DECIMAL = auto()
    ENUM = auto()
    STRING = auto()
    DATETIME = auto()
    DATETIME_OFFSET = auto()
    GUID = auto()
    DURATION = auto()
    URI = auto()
    COLLECTION = auto()
    LIST_DERIVATIVE = auto()
    NESTED = auto()

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}.{self.name}'

    @property
    def is_scalar(self) -> bool:
        return self not in {CoercionKind.COLLECTION, CoercionKind.LIST_DERIVATIVE, CoercionKind.NESTED}


# A datetime that keeps (or is given) a UTC offset when parsed
type AwareDatetime = Annotated[datetime, CoercionKind.DATETIME_OFFSET]


@dataclasses.dataclass(frozen=True, slots=True)
class DeserializeAs:
    """
    Override the name under which a member is looked up in XML.

    Used as typing.Annotated metadata:

      page_count: Annotated[int, DeserializeAs('pages')]
      token: Annotated[str, DeserializeAs(attribute=True)]

    When attribute is true, the member is only looked up among attributes.
    """

    name: str | None = None
    attribute: bool = False


def deserialize_as[T: type](name: str) -> Callable[[T], T]:
    """Class decorator that sets the element name used when looking for items of this type in a list"""

    def decorate_class(cls: T) -> T:
        cls._xml_name_ = name
        return cls

    return decorate_class


_scalar_types: tuple[tuple[type, CoercionKind], ...] = (
    (bool, CoercionKind.BOOLEAN),
    (Enum, CoercionKind.ENUM),  # before int, to catch IntEnum
    (int, CoercionKind.INTEGER),
    (float, CoercionKind.FLOAT),
    (Decimal, CoercionKind.DECIMAL),
    (URI, CoercionKind.URI),  # before str
    (str, CoercionKind.STRING),
    (datetime, CoercionKind.DATETIME),
    (UUID, CoercionKind.GUID),
    (timedelta, CoercionKind.DURATION),
)

_sequence_origins = frozenset({list, Sequence, MutableSequence, Iterable})


@dataclasses.dataclass(frozen=True, slots=True)
class TypeInfo:
    """The result of analysing a type hint"""

    type: Any
    kind: CoercionKind
    nullable: bool = False
    element_type: Any = None
    generic: bool = False
    override: DeserializeAs | None = None
    adapter: DataAdapterType | None = None


def _list_element_type(cls: type) -> Any:
    for klass in cls.__mro__:
        for base in getattr(klass, '__orig_bases__', ()):
            origin = get_origin(base)
            if isinstance(origin, type) and issubclass(origin, list) and (args := get_args(base)):
                return args[0]
    return str


def inspect_type(hint: Any) -> TypeInfo:  # noqa: C901, PLR0912
    """Classify a type hint into its coercion kind, unwrapping Annotated and Optional"""
    nullable = False
    override = None
    adapter = None
    kind = None

    while True:
        origin = get_origin(hint)
        if origin is Annotated:
            hint, *metadata = get_args(hint)
            for item in metadata:
                match item:
                    case DeserializeAs():
                        if override is not None:
                            raise TypeError('DeserializeAs can only be specified once per member')
                        override = item
                    case CoercionKind():
                        kind = item
                    case DataAdapter():
                        adapter = item
        elif origin in (Union, UnionType) and NoneType in get_args(hint):
            arguments = [argument for argument in get_args(hint) if argument is not NoneType]
            if len(arguments) != 1:
                break
            nullable = True
            hint = arguments[0]
        elif isinstance(hint, TypeAliasType):
            hint = hint.__value__
        else:
            break

    if kind is not None:
        return TypeInfo(hint, kind, nullable=nullable, override=override, adapter=adapter)

    origin = get_origin(hint)

    if isinstance(hint, type):
        if issubclass(hint, list):
            if hint is list:
                return TypeInfo(hint, CoercionKind.COLLECTION, nullable=nullable, element_type=str, override=override, adapter=adapter)
            return TypeInfo(hint, CoercionKind.LIST_DERIVATIVE, nullable=nullable, element_type=_list_element_type(hint), override=override, adapter=adapter)
        for data_type, data_kind in _scalar_types:
            if issubclass(hint, data_type):
                return TypeInfo(hint, data_kind, nullable=nullable, override=override, adapter=adapter)
    elif origin in _sequence_origins:
        element_type = next(iter(get_args(hint)), str)
        return TypeInfo(hint, CoercionKind.COLLECTION, nullable=nullable, element_type=element_type, override=override, adapter=adapter)
    elif isinstance(origin, type) and issubclass(origin, list):
        element_type = next(iter(get_args(hint)), str)
        return TypeInfo(hint, CoercionKind.LIST_DERIVATIVE, nullable=nullable, element_type=element_type, generic=True, override=override, adapter=adapter)

    return TypeInfo(hint, CoercionKind.NESTED, nullable=nullable, override=override, adapter=adapter)


def is_bare_collection(target_type: Any) -> bool:
    """Tell if a target type is a list (list[T], Sequence[T], ...) or a list derivative"""
    return inspect_type(target_type).kind in {CoercionKind.COLLECTION, CoercionKind.LIST_DERIVATIVE}


def type_name(data_type: Any) -> str:
    """The element name of a type: the one given with deserialize_as, or the class name"""
    cls = get_origin(data_type) or data_type
    if not isinstance(cls, type):
        return str(reprproxy(data_type))
    return cls.__dict__.get('_xml_name_') or cls.__name__


@dataclasses.dataclass(frozen=True, slots=True)
class MemberDescriptor:
    """
    The metadata of a writable member of a target type.

    Besides the member name and its optional override lookup name, the member
    descriptor holds the declared type (with Annotated and Optional stripped),
    the coercion kind that governs its conversion and the means to assign it.
    """

    name: str
    type: Any
    kind: CoercionKind
    xml_name: str | None = None
    nullable: bool = False
    element_type: Any = None
    generic: bool = False
    attribute: bool = False
    adapter: DataAdapterType | None = None
    default: Any = Marker.NoDefault
    default_factory: Callable[[], Any] | None = None
    setter: Callable[[object, str, Any], None] = setattr

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}({self.name!r}, {reprproxy(self.type)}, {self.kind!r}, xml_name={self.xml_name!r})'

    @property
    def lookup_name(self) -> str:
        return self.xml_name or self.name

    def make_default(self) -> Any:
        if self.default_factory is not None:
            return self.default_factory()
        return None if self.default is Marker.NoDefault else self.default

    def assign(self, instance: object, value: Any) -> None:
        self.setter(instance, self.name, value)


@dataclasses.dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """The name and the ordered writable members of a target type"""

    type: Any
    name: str
    info: TypeInfo
    members: tuple[MemberDescriptor, ...]

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}({reprproxy(self.type)}, members=[{', '.join(member.name for member in self.members)}])'

    @property
    def kind(self) -> CoercionKind:
        return self.info.kind

    @property
    def element_type(self) -> Any:
        return self.info.element_type

    def create_instance(self) -> Any:
        """Create a new instance of the type with all its members set to their defaults"""
        cls = get_origin(self.type) or self.type
        try:
            parameters = signature(cls).parameters.values()
        except (TypeError, ValueError):
            parameters = None
        try:
            if parameters is None or all(p.default is not Parameter.empty or p.kind in {Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD} for p in parameters):
                return cls()
            instance = cls.__new__(cls)
        except TypeError as exc:
            raise UnsupportedTypeError(self.type, str(exc)) from exc
        for member in self.members:
            member.assign(instance, member.make_default())
        return instance


def _frozen_setter(instance: object, name: str, value: Any) -> None:
    object.__setattr__(instance, name, value)


def _member(name: str, hint: Any, default: Any, default_factory: Callable[[], Any] | None, setter: Callable[[object, str, Any], None]) -> MemberDescriptor:
    info = inspect_type(hint)
    override = info.override or DeserializeAs()
    return MemberDescriptor(
        name=name,
        type=info.type,
        kind=info.kind,
        xml_name=override.name,
        nullable=info.nullable,
        element_type=info.element_type,
        generic=info.generic,
        attribute=override.attribute,
        adapter=info.adapter,
        default=default,
        default_factory=default_factory,
        setter=setter,
    )


def _is_class_var(hint: Any) -> bool:
    return hint is ClassVar or get_origin(hint) is ClassVar or hint is Final or get_origin(hint) is Final


@lru_cache(maxsize=None)
def describe(target_type: Any) -> TypeDescriptor:
    """Build the descriptor of a target type. The result is cached per type."""
    info = inspect_type(target_type)
    cls = get_origin(info.type) or info.type
    if not isinstance(cls, type):
        raise UnsupportedTypeError(target_type, 'not a class')

    try:
        hints = get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as exc:
        raise UnsupportedTypeError(target_type, f'cannot resolve annotations: {exc!s}') from exc

    is_dataclass = dataclasses.is_dataclass(cls)
    dataclass_fields = {field.name: field for field in dataclasses.fields(cls)} if is_dataclass else {}
    frozen = is_dataclass and cls.__dataclass_params__.frozen  # type: ignore[attr-defined]
    setter = _frozen_setter if frozen else setattr

    properties: dict[str, property] = {}
    for klass in reversed(cls.__mro__):
        for name, value in vars(klass).items():
            if isinstance(value, property):
                properties[name] = value
            elif name in properties:
                del properties[name]

    members: dict[str, MemberDescriptor] = {}

    for name, hint in hints.items():
        if name.startswith('_') or _is_class_var(hint) or name in properties:
            continue
        default: Any = Marker.NoDefault
        default_factory = None
        if name in dataclass_fields:
            field = dataclass_fields[name]
            if field.default is not dataclasses.MISSING:
                default = field.default
            if field.default_factory is not dataclasses.MISSING:
                default_factory = field.default_factory
        else:
            value = getattr(cls, name, Marker.NoDefault)
            if not isinstance(value, MemberDescriptorType):
                default = value
        members[name] = _member(name, hint, default, default_factory, setter)

    for name, prop in properties.items():
        if name.startswith('_') or prop.fset is None:
            continue
        try:
            hint = get_type_hints(prop.fget, include_extras=True).get('return', str) if prop.fget is not None else str
        except (NameError, TypeError) as exc:
            raise UnsupportedTypeError(target_type, f'cannot resolve the type of property {name!r}: {exc!s}') from exc
        members[name] = _member(name, hint, Marker.NoDefault, None, setattr)

    return TypeDescriptor(type=info.type, name=type_name(info.type), info=info, members=tuple(members.values()))
