# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Map XML documents into application defined types, being lenient about names.

  @dataclass
  class User:
      first_name: str = ''
      age: int = 0
      groups: list[Group] = field(default_factory=list)

  user = deserialize('<User><FirstName>Jane</FirstName><age>42</age>...</User>', User)
"""

from loosexml.__info__ import __version__
from loosexml.culture import Culture
from loosexml.datamodel import URI, ConverterRegistry, DataAdapter, DataConverter
from loosexml.descriptors import AwareDatetime, CoercionKind, DeserializeAs, deserialize_as
from loosexml.deserializer import Response, XMLDeserializer, deserialize
from loosexml.exceptions import ConversionError, UnsupportedTypeError, XMLSyntaxError

__all__ = (  # noqa: RUF022
    '__version__',

    'XMLDeserializer',
    'deserialize',
    'Response',

    'Culture',
    'ConverterRegistry',
    'DataAdapter',
    'DataConverter',
    'URI',

    'AwareDatetime',
    'CoercionKind',
    'DeserializeAs',
    'deserialize_as',

    'ConversionError',
    'UnsupportedTypeError',
    'XMLSyntaxError',
)
