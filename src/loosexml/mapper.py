# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
from collections.abc import Callable
from typing import Any

from loosexml.coercion import coerce, parse_with
from loosexml.context import MappingContext
from loosexml.culture import camel_case, strip_separators
from loosexml.descriptors import CoercionKind, MemberDescriptor, TypeDescriptor, TypeInfo, describe, inspect_type, type_name
from loosexml.resolver import ETreeElement, child_elements, descendants, element_value, find_element, find_value, first_child, local_name

__all__ = 'ListPopulator', 'TypeMapper'


log = logging.getLogger(__name__)


class TypeMapper:
    """
    Fill in the members of an object from an XML element, recursively.

    Every writable member of the target type is looked up under the element
    using the naming heuristics of the resolver and its text is converted
    according to the member's coercion kind. Nested objects and collections
    are created and mapped recursively. A member without a corresponding
    element or attribute keeps its default value. lxml cannot tell <name/> from
    <name></name>, so an element without text, children or attributes counts
    as missing and a str member keeps its default instead of becoming empty.
    """

    def __init__(self, context: MappingContext) -> None:
        self.context = context
        self.lists = ListPopulator(self)

    def create_and_map(self, data_type: Any, element: ETreeElement) -> Any:
        """Create a value of the given type from an element"""
        info = inspect_type(data_type)
        if info.kind.is_scalar:
            return coerce(element_value(element), info.type, info.kind, self.context)
        if info.kind in {CoercionKind.COLLECTION, CoercionKind.LIST_DERIVATIVE}:
            return self.lists.populate(element, info, type_name(info.type))
        adapter = self.context.converters.get_adapter(info.type)
        if adapter is not None:
            return parse_with(adapter, element_value(element), info.type)
        descriptor = describe(info.type)
        return self.map(descriptor.create_instance(), element, descriptor)

    def map[T](self, instance: T, element: ETreeElement | None, descriptor: TypeDescriptor | None = None) -> T:
        """Map the members of an existing instance from an element"""
        if descriptor is None:
            descriptor = describe(type(instance))
        if element is None:
            return instance
        for member in descriptor.members:
            self.map_member(instance, element, member)
        return instance

    def value_from_xml(self, element: ETreeElement, member: MemberDescriptor) -> str | None:
        """The text of the element or attribute that corresponds to the member, or None if there is none"""
        return find_value(element, member.lookup_name, self.context, attribute=member.attribute)

    def map_member(self, instance: object, element: ETreeElement, member: MemberDescriptor) -> None:  # noqa: C901, PLR0912
        name = member.lookup_name
        value = self.value_from_xml(element, member)

        if value is None:
            if member.kind is CoercionKind.COLLECTION:
                member.assign(instance, self.lists.populate_inline(element, member))
            return

        if member.nullable and member.kind.is_scalar and value == '':
            member.assign(instance, None)
            return

        if member.adapter is not None:
            member.assign(instance, parse_with(member.adapter, value, member.type, member.name))
            return

        match member.kind:
            case CoercionKind.DATETIME_OFFSET if value == '':
                pass
            case kind if kind.is_scalar:
                member.assign(instance, coerce(value, member.type, kind, self.context, member.name))
            case CoercionKind.COLLECTION:
                member.assign(instance, self.lists.populate_wrapped(element, member))
            case CoercionKind.LIST_DERIVATIVE:
                info = TypeInfo(member.type, member.kind, element_type=member.element_type, generic=member.generic)
                member.assign(instance, self.lists.populate(element, info, name))
            case CoercionKind.NESTED:
                adapter = self.context.converters.get_adapter(member.type)
                if adapter is not None:
                    member.assign(instance, parse_with(adapter, value, member.type, member.name))
                    return
                source = find_element(element, name, self.context)
                if source is not None:
                    log.debug('Mapping nested %s for member %r from %r', type_name(member.type), member.name, source.tag)
                    member.assign(instance, self.create_and_map(member.type, source))


class ListPopulator:
    """
    Build lists of objects from repeated elements.

    Lists are either bare collections (list[Item]) or list derivatives, which
    are list subclasses that also have members of their own:

      class Items(list[Item]):
          page: int = 0

    For list derivatives the list items and the extra members are both filled
    in from the same part of the document.
    """

    def __init__(self, mapper: TypeMapper) -> None:
        self.mapper = mapper

    @property
    def context(self) -> MappingContext:
        return self.mapper.context

    def create_items(self, element_type: Any, elements: list[ETreeElement]) -> list[Any]:
        return [self.mapper.create_and_map(element_type, element) for element in elements]

    def find_items(self, root: ETreeElement, name: str) -> list[ETreeElement]:
        """Find the descendants of root that represent items named name"""
        culture = self.context.culture
        target = strip_separators(name)
        lower_target = culture.lower(target)
        folded_target = culture.casefold(target)

        searches: list[Callable[[], list[ETreeElement]]] = [
            lambda: list(descendants(root, self.context.qualify(name))),
            lambda: list(descendants(root, self.context.qualify(culture.lower(name)))),
            lambda: list(descendants(root, self.context.qualify(camel_case(name, culture)))),
            lambda: [node for node in descendants(root) if strip_separators(local_name(node.tag)) == target],
            lambda: [node for node in descendants(root) if strip_separators(local_name(node.tag)) == lower_target],
            lambda: [node for node in descendants(root) if culture.casefold(strip_separators(local_name(node.tag))) == folded_target],
        ]
        for search in searches:
            elements = search()
            if elements:
                return elements
        return []

    def populate(self, root: ETreeElement | None, info: TypeInfo, name: str) -> list[Any]:
        """
        Create a list (or a list derivative) from the items found under root.

        For list derivatives, the members of the list object are mapped from
        the child of root named name, or from root itself if there is no such
        child.
        """
        descriptor = None
        if info.kind is CoercionKind.COLLECTION:
            instance: list[Any] = []
        else:
            descriptor = describe(info.type)
            instance = descriptor.create_instance()
        if root is None:
            return instance

        item_name = type_name(info.element_type)
        elements = self.find_items(root, item_name)
        log.debug('Found %d %r items under %r', len(elements), item_name, root.tag)
        instance.extend(self.create_items(info.element_type, elements))

        if info.kind is CoercionKind.LIST_DERIVATIVE:
            self.mapper.map(instance, self.find_container(root, name), descriptor)

        return instance

    def find_container(self, root: ETreeElement, name: str) -> ETreeElement:
        culture = self.context.culture
        for candidate in (name, culture.lower(name), camel_case(name, culture)):
            element = first_child(root, self.context.qualify(candidate))
            if element is not None:
                return element
        return root

    def populate_wrapped(self, root: ETreeElement, member: MemberDescriptor) -> list[Any]:
        """Create the list for a member whose items are wrapped in an element named after the member"""
        container = find_element(root, member.lookup_name, self.context)
        if container is None:
            return []
        first = next(child_elements(container), None)
        if first is None:
            return []
        return self.create_items(member.element_type, list(child_elements(container, first.tag)))

    def populate_inline(self, root: ETreeElement, member: MemberDescriptor) -> list[Any]:
        """Create the list for a member whose items are not wrapped, but appear as repeated siblings"""
        first = find_element(root, type_name(member.element_type), self.context)
        if first is None:
            return []
        parent = first.getparent()
        siblings = list(child_elements(parent, first.tag)) if parent is not None and first is not root else [first]
        log.debug('Found %d inline %r items for member %r', len(siblings), first.tag, member.name)
        return self.create_items(member.element_type, siblings)
