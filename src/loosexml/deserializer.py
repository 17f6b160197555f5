# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol, overload, runtime_checkable

from loosexml.context import MappingContext
from loosexml.culture import Culture
from loosexml.datamodel import ConverterRegistry, DataAdapterType
from loosexml.descriptors import describe, inspect_type, is_bare_collection, type_name
from loosexml.document import locate_root, parse_document, strip_namespaces
from loosexml.mapper import TypeMapper
from loosexml.python import reprproxy

__all__ = 'Response', 'XMLDeserializer', 'deserialize'


log = logging.getLogger(__name__)


@runtime_checkable
class Response(Protocol):
    """Anything that carries the raw content of a response (for example an HTTP response)"""

    @property
    def content(self) -> str | bytes | None: ...


type Converters = ConverterRegistry | Mapping[object, DataAdapterType | Callable[[str], object]]


class XMLDeserializer:
    """
    Deserialize XML documents into instances of application defined types.

    The configuration is given when the deserializer is created and it does
    not change afterwards, so one deserializer can be used for any number of
    documents. Every call maps its document independently.

      root_element  the name of the element under the document root to start mapping from
      namespace     the namespace of the elements. If not given, namespaces are removed from
                    the document and names are matched without them
      date_format   the format of datetime values, either a strftime format or a pattern
                    like yyyy-MM-dd. If not given, datetime values are parsed leniently
      culture       the culture used to parse numbers and dates and to change the case of names
      converters    a ConverterRegistry, or a mapping from types to adapters, used to parse
                    the values of types that have no built-in conversion
    """

    def __init__(
            self,
            *,
            root_element: str | None = None,
            namespace: str | None = None,
            date_format: str | None = None,
            culture: Culture | str = Culture.invariant,
            converters: Converters | None = None,
    ) -> None:
        self.root_element = root_element
        self.namespace = namespace
        self.date_format = date_format
        self.culture = Culture.get(culture) if isinstance(culture, str) else culture
        self.converters = converters if isinstance(converters, ConverterRegistry) else ConverterRegistry(converters)

    def __repr__(self) -> str:
        return (
            f'{self.__class__.__qualname__}(root_element={self.root_element!r}, namespace={self.namespace!r}, '
            f'date_format={self.date_format!r}, culture={self.culture.name!r})'
        )

    @overload
    def deserialize[T](self, response: Response, target_type: type[T]) -> T | None: ...

    @overload
    def deserialize(self, response: Response, target_type: Any) -> Any: ...

    def deserialize(self, response: Response, target_type: Any) -> Any:
        """Map the content of a response into a new instance of target_type. Empty content gives None."""
        return self.deserialize_string(response.content, target_type)

    @overload
    def deserialize_string[T](self, content: str | bytes | None, target_type: type[T]) -> T | None: ...

    @overload
    def deserialize_string(self, content: str | bytes | None, target_type: Any) -> Any: ...

    def deserialize_string(self, content: str | bytes | None, target_type: Any) -> Any:
        """Map an XML document into a new instance of target_type. Empty content gives None."""
        if not content:
            return None

        document = parse_document(content)
        if self.namespace is None:
            strip_namespaces(document)
        root = locate_root(document, self.root_element, self.namespace)

        context = MappingContext(namespace=self.namespace, culture=self.culture, date_format=self.date_format, converters=self.converters)
        mapper = TypeMapper(context)

        log.debug('Deserializing %s from %r', reprproxy(target_type), root.tag if root is not None else None)

        if is_bare_collection(target_type):
            return mapper.lists.populate(root, inspect_type(target_type), type_name(target_type))

        descriptor = describe(target_type)
        return mapper.map(descriptor.create_instance(), root, descriptor)


def deserialize(content: str | bytes | None, target_type: Any, **options: Any) -> Any:
    """Map an XML document into a new instance of target_type, using a deserializer configured with options"""
    return XMLDeserializer(**options).deserialize_string(content, target_type)
