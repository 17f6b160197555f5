# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Heuristic lookup of the XML element or attribute that holds a member's value.

Real world XML APIs are inconsistent about how they spell names, so a member
named first_name may have to be found as <first_name>, <firstName>,
<FirstName>, <first-name> or as an attribute with any of these spellings.
The lookup tries the candidate spellings in a fixed order and the first one
that matches wins, even if a later spelling matches an element that occurs
earlier in the document.
"""

import logging
from collections import deque
from collections.abc import Callable, Iterator

from lxml import etree

from loosexml.context import MappingContext, qualify
from loosexml.culture import camel_case, strip_separators

__all__ = (  # noqa: RUF022
    'ETreeElement',

    'local_name',
    'has_content',
    'element_value',
    'iter_by_depth',
    'first_child',
    'descendants',
    'child_elements',
    'find_element',
    'find_attribute',
    'find_value',
)


log = logging.getLogger(__name__)

# noinspection PyProtectedMember
type ETreeElement = etree._Element  # noqa: SLF001


def local_name(tag: str) -> str:
    return tag.rpartition('}')[2]


def child_elements(element: ETreeElement, tag: str | None = None) -> Iterator[ETreeElement]:
    if tag is None:
        return element.iterchildren(etree.Element)
    return element.iterchildren(tag)


def first_child(element: ETreeElement, tag: str) -> ETreeElement | None:
    return next(element.iterchildren(tag), None)


def descendants(element: ETreeElement, tag: str | None = None) -> Iterator[ETreeElement]:
    """Iterate the descendants of an element (excluding itself) in document order"""
    return element.iterdescendants(tag if tag is not None else etree.Element)


def has_content(element: ETreeElement) -> bool:
    """Tell if an element has text, child nodes or attributes (<name/> has none of them)"""
    return element.text is not None or len(element) > 0 or len(element.attrib) > 0


def element_value(element: ETreeElement) -> str:
    """The concatenated text of the element and all its descendants"""
    return str(element.xpath('string()'))


def iter_by_depth(element: ETreeElement, *, include_self: bool = False) -> Iterator[ETreeElement]:
    """Iterate the descendants of an element ordered by depth, in document order within the same depth"""
    queue = deque([element] if include_self else child_elements(element))
    while queue:
        node = queue.popleft()
        yield node
        queue.extend(child_elements(node))


def _scan(root: ETreeElement, match: Callable[[str], bool]) -> ETreeElement | None:
    return next((node for node in iter_by_depth(root) if match(strip_separators(local_name(node.tag)))), None)


def _scan_attributes(root: ETreeElement, match: Callable[[str], bool]) -> tuple[ETreeElement, str, str] | None:
    for element in iter_by_depth(root, include_self=True):
        for attribute, value in element.attrib.items():
            if match(strip_separators(local_name(attribute))):
                return element, attribute, value
    return None


def _find_folded_element(root: ETreeElement, name: str, context: MappingContext) -> ETreeElement | None:
    culture = context.culture
    folded_target = culture.casefold(strip_separators(name))
    element = _scan(root, lambda candidate: culture.casefold(candidate) == folded_target)
    if element is not None:
        log.debug('Found element %r for %r by scanning the descendants of %r ignoring case', element.tag, name, root.tag)
    return element


def find_element(root: ETreeElement, name: str, context: MappingContext, *, fold_case: bool = True) -> ETreeElement | None:
    """
    Find the element that corresponds to name, starting from root.

    The direct children of root are searched for the exact name, then for the
    lower case and the camel case forms of it, all within the configured
    namespace. A name of Value stands for root itself. Failing that, all the
    descendants of root are scanned (closest first) for one whose local name
    without underscores and dashes is the same as the name without them,
    first exactly and then against the lower case form. With fold_case the
    scan is repeated one last time ignoring case on both sides.
    """
    culture = context.culture
    namespace = context.namespace

    for form, candidate in (('exact', name), ('lower case', culture.lower(name)), ('camel case', camel_case(name, culture))):
        element = first_child(root, qualify(candidate, namespace))
        if element is not None:
            log.debug('Found element %r for %r using the %s name', element.tag, name, form)
            return element

    if name in {'Value', 'value'}:
        return root

    target = strip_separators(name)
    lower_target = culture.lower(target)

    element = _scan(root, lambda candidate: candidate == target)
    if element is None:
        element = _scan(root, lambda candidate: candidate == lower_target)
    if element is not None:
        log.debug('Found element %r for %r by scanning the descendants of %r', element.tag, name, root.tag)
        return element
    return _find_folded_element(root, name, context) if fold_case else None


def find_attribute(root: ETreeElement, name: str, context: MappingContext, *, fold_case: bool = True) -> str | None:
    """
    Find the value of the attribute that corresponds to name.

    The attributes of root and of all its descendants (closest first) are
    searched for one whose local name without underscores and dashes is
    either the name, or its lower case or camel case form. With fold_case
    the search is then repeated ignoring case and separators on both sides.
    """
    culture = context.culture
    names = {name, culture.lower(name), camel_case(name, culture)}
    folded_target = culture.casefold(strip_separators(name))

    found = _scan_attributes(root, lambda candidate: candidate in names)
    if found is None and fold_case:
        found = _scan_attributes(root, lambda candidate: culture.casefold(candidate) == folded_target)
    if found is None:
        return None
    element, attribute, value = found
    log.debug('Found attribute %r on %r for %r', attribute, element.tag, name)
    return value


def find_value(root: ETreeElement, name: str, context: MappingContext, *, attribute: bool = False) -> str | None:
    """
    Find the text that corresponds to name, from an element or an attribute.

    Elements are looked up first, then attributes. The searches that ignore
    case come last, so an attribute spelled like the name wins over an
    element that only matches when case is ignored. An element without any
    content counts as missing. With attribute only attributes are searched.
    """
    if not attribute:
        element = find_element(root, name, context, fold_case=False)
        if element is not None:
            return element_value(element) if has_content(element) else None
    value = find_attribute(root, name, context, fold_case=False)
    if value is not None:
        return value
    if not attribute:
        element = _find_folded_element(root, name, context)
        if element is not None:
            return element_value(element) if has_content(element) else None
    return find_attribute(root, name, context)
