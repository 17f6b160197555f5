# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import re
from collections.abc import Callable, Iterator, Mapping, MutableMapping
from datetime import UTC, datetime, timedelta
from types import new_class
from typing import ClassVar, Protocol, Self, runtime_checkable
from urllib.parse import SplitResult, urlsplit
from uuid import UUID

__all__ = (  # noqa: RUF022
    'DataConverter',
    'DataAdapter',
    'ConverterRegistry',

    'URI',

    'BooleanAdapter',
    'DatetimeOffsetAdapter',
    'DurationAdapter',
    'GUIDAdapter',

    'IntegerAdapter',
    'Int8Adapter',
    'Int16Adapter',
    'Int32Adapter',
    'Int64Adapter',
    'UInt8Adapter',
    'UInt16Adapter',
    'UInt32Adapter',
    'UInt64Adapter',
)


@runtime_checkable
class DataConverter(Protocol):
    """A protocol that describes a data type that knows how to parse itself from XML text"""

    @classmethod
    def xml_parse(cls, value: str) -> Self:
        """Parse XML text into the data type"""
        ...


@runtime_checkable
class DataAdapter[T](Protocol):
    """A protocol that describes an external adapter that parses XML text into a data type T"""

    @staticmethod
    def xml_parse(value: str, /) -> T:
        """Parse XML text into the data type"""
        ...


type DataAdapterType[T] = type[DataAdapter[T]]


def _function2adapter[T](function: Callable[[str], T]) -> DataAdapterType[T]:
    # Turn a plain text -> value function into a DataAdapter by creating a stand-in adapter on the fly,
    # so that the registry can hand out adapters without callers having to tell the two apart.

    def prepare(ns: dict) -> None:
        ns['xml_parse'] = staticmethod(function)

    name = getattr(function, '__name__', 'function')
    adapter = new_class(f'{name.title().replace('_', '')}AdapterStandIn', (), exec_body=prepare)
    adapter.__module__ = __name__
    adapter.__qualname__ = f'_function2adapter.<generated>.{adapter.__name__}'

    return adapter


class ConverterRegistry:
    """
    An explicit mapping from a type to the adapter that parses it from text.

    The registry is supplied by the application to the deserializer before any
    mapping takes place and it is only consulted as a last resort, for member
    types that have no built-in conversion. Types that implement the
    DataConverter protocol are their own converters and need not be registered.
    """

    _adapters: MutableMapping[object, DataAdapterType]

    def __init__(self, adapters: Mapping[object, DataAdapterType | Callable[[str], object]] | None = None) -> None:
        self._adapters = {}
        for data_type, adapter in (adapters or {}).items():
            self.associate(data_type, adapter)

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}({self._adapters!r})'

    def __contains__(self, data_type: object) -> bool:
        return self.get_adapter(data_type) is not None

    def __iter__(self) -> Iterator[object]:
        return iter(self._adapters)

    def __len__(self) -> int:
        return len(self._adapters)

    def associate[T](self, data_type: type[T] | object, adapter: DataAdapterType[T] | Callable[[str], T]) -> None:
        if isinstance(data_type, type) and issubclass(data_type, DataConverter):
            raise TypeError(f'{data_type.__qualname__} implements the DataConverter protocol and cannot be associated with another adapter')
        if not isinstance(adapter, DataAdapter):
            if not callable(adapter):
                raise TypeError(f'adapter must implement the DataAdapter protocol or be callable, not {type(adapter).__qualname__!r}')
            adapter = _function2adapter(adapter)
        self._adapters[data_type] = adapter  # type: ignore[assignment]

    def get_adapter[T](self, data_type: type[T] | object) -> DataAdapterType[T] | None:
        try:
            adapter = self._adapters.get(data_type, None)
        except TypeError:  # unhashable type expression
            return None
        if adapter is None and isinstance(data_type, type) and issubclass(data_type, DataConverter):
            adapter = data_type  # a type that implements the DataConverter protocol is its own adapter
        return adapter


class URI(str):
    """A relative or absolute URI reference"""

    __slots__ = ('parts',)

    parts: SplitResult

    def __new__(cls, value: str, /) -> Self:
        self = super().__new__(cls, value.strip())
        self.parts = urlsplit(self)
        return self

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({super().__repr__()})'

    @property
    def is_absolute(self) -> bool:
        return bool(self.parts.scheme)

    @property
    def scheme(self) -> str:
        return self.parts.scheme

    @property
    def host(self) -> str | None:
        return self.parts.hostname

    @property
    def path(self) -> str:
        return self.parts.path

    @property
    def query(self) -> str:
        return self.parts.query

    @property
    def fragment(self) -> str:
        return self.parts.fragment


class BooleanAdapter:
    @staticmethod
    def xml_parse(value: str) -> bool:
        match value.strip().lower():
            case 'true' | '1':
                return True
            case 'false' | '0':
                return False
            case _:
                raise ValueError(f'Invalid boolean value: {value!r}')


_xml_datetime = re.compile(r'(?P<date>[0-9]{4}-[0-9]{2}-[0-9]{2})(?:T(?P<time>[0-9]{2}:[0-9]{2}:[0-9]{2})(?P<fraction>\.[0-9]+)?)?(?P<offset>Z|[+-][0-9]{2}:[0-9]{2})?')


class DatetimeOffsetAdapter:
    """Strict xs:dateTime and xs:date parsing that always yields an offset aware datetime (UTC if unspecified)"""

    @staticmethod
    def xml_parse(value: str) -> datetime:
        match = _xml_datetime.fullmatch(value.strip())
        if match is None:
            raise ValueError(f'Invalid xs:dateTime value: {value!r}')
        date, time, fraction, offset = match.group('date', 'time', 'fraction', 'offset')
        fraction = fraction[:7] if fraction else ''  # microsecond precision
        result = datetime.fromisoformat(f'{date}T{time or '00:00:00'}{fraction}{offset or ''}')
        return result if result.tzinfo is not None else result.replace(tzinfo=UTC)


_xml_duration = re.compile(
    r'(?P<sign>-)?P'
    r'(?:(?P<years>[0-9]+)Y)?(?:(?P<months>[0-9]+)M)?(?:(?P<days>[0-9]+)D)?'
    r'(?P<time>T(?:(?P<hours>[0-9]+)H)?(?:(?P<minutes>[0-9]+)M)?(?:(?P<seconds>[0-9]+(?:\.[0-9]+)?)S)?)?',
)


class DurationAdapter:
    """Parse xs:duration values. Years count as 365 days and months as 30 days."""

    @staticmethod
    def xml_parse(value: str) -> timedelta:
        match = _xml_duration.fullmatch(value.strip())
        if match is None:
            raise ValueError(f'Invalid xs:duration value: {value!r}')
        parts = match.groupdict()
        # at least one component must be present and T must be followed by a time component
        if match.group('time') == 'T' or not any(parts[unit] for unit in ('years', 'months', 'days', 'hours', 'minutes', 'seconds')):
            raise ValueError(f'Invalid xs:duration value: {value!r}')
        days = int(parts['years'] or 0) * 365 + int(parts['months'] or 0) * 30 + int(parts['days'] or 0)
        duration = timedelta(days=days, hours=int(parts['hours'] or 0), minutes=int(parts['minutes'] or 0), seconds=float(parts['seconds'] or 0))
        return -duration if parts['sign'] else duration


class GUIDAdapter:
    @staticmethod
    def xml_parse(value: str) -> UUID:
        value = value.strip()
        if not value:
            return UUID(int=0)
        if value.startswith('(') and value.endswith(')'):
            value = value[1:-1]
        return UUID(value)


class IntegerAdapter:
    """
    Parse an integer that has to fit in a fixed width machine integer.

    XML produced by statically typed services often carries fields declared
    as short, unsigned byte and so on. Binding such a member to one of the
    sized adapters rejects values the producer could never have sent:

      level: Annotated[int, UInt8Adapter] = 0

    The base class itself accepts any integer.
    """

    limits: ClassVar[range | None] = None
    description: ClassVar[str] = 'integer'

    def __init_subclass__(cls, *, bits: int, signed: bool = True, **kw: object) -> None:
        super().__init_subclass__(**kw)
        if bits <= 0:
            raise ValueError('bits must be a positive integer')
        start = -(2 ** (bits - 1)) if signed else 0
        cls.limits = range(start, start + 2**bits)
        cls.description = f'{"signed" if signed else "unsigned"} {bits}-bit integer'

    @classmethod
    def xml_parse(cls, value: str) -> int:
        number = int(value.strip())
        if cls.limits is not None and number not in cls.limits:
            raise ValueError(f'{number} is out of range for {cls.description} ({cls.limits.start} to {cls.limits[-1]})')
        return number


class Int8Adapter(IntegerAdapter, bits=8):
    pass


class Int16Adapter(IntegerAdapter, bits=16):
    pass


class Int32Adapter(IntegerAdapter, bits=32):
    pass


class Int64Adapter(IntegerAdapter, bits=64):
    pass


class UInt8Adapter(IntegerAdapter, bits=8, signed=False):
    pass


class UInt16Adapter(IntegerAdapter, bits=16, signed=False):
    pass


class UInt32Adapter(IntegerAdapter, bits=32, signed=False):
    pass


class UInt64Adapter(IntegerAdapter, bits=64, signed=False):
    pass
