# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum
from typing import Any, assert_never

from loosexml.context import MappingContext
from loosexml.culture import Culture, name_variants
from loosexml.datamodel import BooleanAdapter, DataAdapterType, DatetimeOffsetAdapter, DurationAdapter, GUIDAdapter
from loosexml.descriptors import CoercionKind
from loosexml.exceptions import ConversionError

__all__ = 'coerce', 'find_enum_value', 'parse_with'


def find_enum_value[E: Enum](enum_type: type[E], value: str, culture: Culture) -> E:
    """
    Find the enum member matching a text value.

    The text is compared case insensitively against the spelling variants of
    the member names (ActiveUser, activeUser, active_user, active-user, ...),
    then against the string values of the members and finally it's used as
    the underlying value of the enum.
    """
    wanted = culture.casefold(value.strip())
    for name, member in enum_type.__members__.items():
        if any(culture.casefold(variant) == wanted for variant in name_variants(name, culture)):
            return member
    for member in enum_type.__members__.values():
        if isinstance(member.value, str) and culture.casefold(member.value) == wanted:
            return member
    try:
        return enum_type(culture.parse_integer(value))
    except ValueError:
        raise ValueError(f'{value!r} is not a valid {enum_type.__qualname__}') from None


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _parse_datetime_offset(value: str, data_type: Any, context: MappingContext) -> datetime:
    try:
        return DatetimeOffsetAdapter.xml_parse(value)
    except ValueError:
        pass
    adapter = context.converters.get_adapter(data_type)
    if adapter is not None:
        return adapter.xml_parse(value)
    return _aware(context.culture.parse_datetime(value))


def _convert(value: str, data_type: Any, kind: CoercionKind, context: MappingContext) -> Any:  # noqa: C901, PLR0911
    culture = context.culture
    match kind:
        case CoercionKind.BOOLEAN:
            return BooleanAdapter.xml_parse(value)
        case CoercionKind.INTEGER:
            number = culture.parse_integer(value)
            return number if data_type is int else data_type(number)
        case CoercionKind.FLOAT:
            return culture.parse_float(value)
        case CoercionKind.DECIMAL:
            return culture.parse_decimal(value)
        case CoercionKind.ENUM:
            return find_enum_value(data_type, value, culture)
        case CoercionKind.STRING:
            return value if data_type is str else data_type(value)
        case CoercionKind.URI:
            return data_type(value)
        case CoercionKind.DATETIME:
            if context.date_format:
                return culture.parse_exact(value, context.date_format)
            return culture.parse_datetime(value)
        case CoercionKind.DATETIME_OFFSET:
            return _parse_datetime_offset(value, data_type, context)
        case CoercionKind.GUID:
            return GUIDAdapter.xml_parse(value)
        case CoercionKind.DURATION:
            return DurationAdapter.xml_parse(value)
        case CoercionKind.COLLECTION | CoercionKind.LIST_DERIVATIVE | CoercionKind.NESTED:
            raise TypeError(f'{kind!r} values are not converted from text')
        case _:
            assert_never(kind)


def coerce(value: str, data_type: Any, kind: CoercionKind, context: MappingContext, member: str | None = None) -> Any:
    """Convert the text value of an element or attribute into a value of the given scalar kind"""
    try:
        return _convert(value, data_type, kind, context)
    except ValueError as exc:
        raise ConversionError(value, data_type, member, str(exc)) from exc


def parse_with[T](adapter: DataAdapterType[T] | Callable[[str], T], value: str, data_type: Any, member: str | None = None) -> T:
    """Convert a text value using an explicit or registered adapter"""
    parse = getattr(adapter, 'xml_parse', adapter)
    try:
        return parse(value)
    except ValueError as exc:
        raise ConversionError(value, data_type, member, str(exc)) from exc
