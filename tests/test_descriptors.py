# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Annotated, ClassVar
from uuid import UUID

import pytest

from loosexml import URI, AwareDatetime, CoercionKind, DeserializeAs, UnsupportedTypeError, deserialize_as
from loosexml.datamodel import Int8Adapter
from loosexml.descriptors import describe, inspect_type, is_bare_collection, type_name


class Item:
    name: str = ''


class Items(list[Item]):
    page: int = 0


class Paged[T](list[T]):
    total: int = 0


class Color(Enum):
    Red = 'red'
    Green = 'green'


class Level(IntEnum):
    Low = 1
    High = 2


class TestInspectType:

    def test_scalars(self) -> None:
        expected = {
            bool: CoercionKind.BOOLEAN,
            int: CoercionKind.INTEGER,
            float: CoercionKind.FLOAT,
            Decimal: CoercionKind.DECIMAL,
            Color: CoercionKind.ENUM,
            Level: CoercionKind.ENUM,
            str: CoercionKind.STRING,
            URI: CoercionKind.URI,
            datetime: CoercionKind.DATETIME,
            UUID: CoercionKind.GUID,
            timedelta: CoercionKind.DURATION,
        }
        for data_type, kind in expected.items():
            info = inspect_type(data_type)
            assert info.type is data_type
            assert info.kind is kind
            assert info.kind.is_scalar
            assert not info.nullable

    def test_nullable(self) -> None:
        info = inspect_type(int | None)
        assert info.type is int
        assert info.kind is CoercionKind.INTEGER
        assert info.nullable

        info = inspect_type(Annotated[Color | None, DeserializeAs('colour')])
        assert info.type is Color
        assert info.nullable
        assert info.override == DeserializeAs('colour')

        # unions of several types are not nullable wrappers and they end up as nested types
        assert inspect_type(int | str | None).kind is CoercionKind.NESTED

    def test_collections(self) -> None:
        info = inspect_type(list[Item])
        assert info.kind is CoercionKind.COLLECTION
        assert info.element_type is Item
        assert not info.kind.is_scalar

        info = inspect_type(Sequence[int])
        assert info.kind is CoercionKind.COLLECTION
        assert info.element_type is int

        info = inspect_type(list)
        assert info.kind is CoercionKind.COLLECTION
        assert info.element_type is str

        info = inspect_type(Items)
        assert info.kind is CoercionKind.LIST_DERIVATIVE
        assert info.element_type is Item
        assert not info.generic

        info = inspect_type(Paged[Item])
        assert info.kind is CoercionKind.LIST_DERIVATIVE
        assert info.element_type is Item
        assert info.generic

        assert is_bare_collection(list[Item])
        assert is_bare_collection(Items)
        assert not is_bare_collection(Item)
        assert not is_bare_collection(str)

    def test_annotations(self) -> None:
        info = inspect_type(AwareDatetime)
        assert info.type is datetime
        assert info.kind is CoercionKind.DATETIME_OFFSET

        info = inspect_type(Annotated[int, Int8Adapter])
        assert info.kind is CoercionKind.INTEGER
        assert info.adapter is Int8Adapter

        info = inspect_type(Annotated[str, CoercionKind.URI])
        assert info.type is str
        assert info.kind is CoercionKind.URI

        assert inspect_type(Item).kind is CoercionKind.NESTED

        with pytest.raises(TypeError, match=r'DeserializeAs can only be specified once per member'):
            inspect_type(Annotated[int, DeserializeAs('a'), DeserializeAs('b')])


class TestDescribe:

    def test_dataclass(self) -> None:
        @dataclass
        class Person:
            name: str = ''
            age: int | None = None
            tags: list[str] = field(default_factory=list)
            count: Annotated[int, DeserializeAs('total-count')] = 0
            token: Annotated[str, DeserializeAs(attribute=True)] = ''
            kind: ClassVar[str] = 'person'
            _secret: str = ''

        descriptor = describe(Person)
        members = {member.name: member for member in descriptor.members}

        assert descriptor.name == 'Person'
        assert descriptor.kind is CoercionKind.NESTED
        assert list(members) == ['name', 'age', 'tags', 'count', 'token']
        assert describe(Person) is descriptor

        assert members['age'].nullable
        assert members['age'].type is int
        assert members['tags'].kind is CoercionKind.COLLECTION
        assert members['tags'].element_type is str
        assert members['tags'].make_default() == []
        assert members['count'].lookup_name == 'total-count'
        assert members['token'].attribute
        assert members['token'].lookup_name == 'token'

    def test_plain_class(self) -> None:
        class Base:
            id: int = 0

        class Account(Base):
            number: str = ''
            label: str = 'none'

            def __init__(self) -> None:
                self._balance = Decimal(0)

            @property
            def balance(self) -> Decimal:
                return self._balance

            @balance.setter
            def balance(self, value: Decimal) -> None:
                self._balance = value

            @property
            def display(self) -> str:
                return f'{self.number}: {self._balance}'

        class ReadOnlyLabel(Account):
            @property
            def label(self) -> str:  # type: ignore[override]
                return 'fixed'

        assert [member.name for member in describe(Account).members] == ['id', 'number', 'label', 'balance']
        assert [member.name for member in describe(ReadOnlyLabel).members] == ['id', 'number', 'balance']

        balance = next(member for member in describe(Account).members if member.name == 'balance')
        assert balance.kind is CoercionKind.DECIMAL

        account = describe(Account).create_instance()
        balance.assign(account, Decimal('1.5'))
        assert account.balance == Decimal('1.5')

    def test_list_derivatives(self) -> None:
        descriptor = describe(Items)
        assert descriptor.kind is CoercionKind.LIST_DERIVATIVE
        assert descriptor.element_type is Item
        assert [member.name for member in descriptor.members] == ['page']

        descriptor = describe(Paged[Item])
        assert descriptor.name == 'Paged'
        assert [member.name for member in descriptor.members] == ['total']
        assert isinstance(descriptor.create_instance(), Paged)

    def test_type_name(self) -> None:
        @deserialize_as('entry')
        class Entry:
            pass

        class SubEntry(Entry):
            pass

        assert type_name(Item) == 'Item'
        assert type_name(Entry) == 'entry'
        assert type_name(SubEntry) == 'SubEntry'
        assert type_name(Paged[Item]) == 'Paged'

    def test_create_instance(self) -> None:
        @dataclass(frozen=True)
        class Point:
            x: int
            y: int = 0
            labels: list[str] = field(default_factory=list)

        point = describe(Point).create_instance()
        assert point.x is None
        assert point.y == 0
        assert point.labels == []

        members = {member.name: member for member in describe(Point).members}
        members['x'].assign(point, 7)
        assert point.x == 7

        class Strict:
            value: int = 0

            def __new__(cls, value: int) -> 'Strict':
                instance = super().__new__(cls)
                instance.value = value
                return instance

        with pytest.raises(UnsupportedTypeError, match=r'Cannot map XML into .*Strict'):
            describe(Strict).create_instance()

        with pytest.raises(UnsupportedTypeError, match=r'not a class'):
            describe('Item')
