# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging

from lxml import etree

from loosexml.context import qualify
from loosexml.resolver import ETreeElement, first_child

__all__ = 'locate_root', 'parse_document', 'strip_namespaces'


log = logging.getLogger(__name__)

_str_parser = etree.XMLParser(encoding='utf-8', resolve_entities=False)
_bytes_parser = etree.XMLParser(resolve_entities=False)


def parse_document(content: str | bytes) -> ETreeElement:
    """
    Parse XML content into an element tree and return its root element.

    Text content is allowed to carry an XML declaration that names some other
    encoding than UTF-8, since it's already decoded. Malformed input raises
    lxml.etree.XMLSyntaxError.
    """
    if isinstance(content, str):
        return etree.fromstring(content.encode('utf-8'), parser=_str_parser)
    return etree.fromstring(content, parser=_bytes_parser)


def strip_namespaces(root: ETreeElement) -> None:
    """
    Remove the namespaces from all the element and attribute names in the tree.

    The tree is modified in place. When two attributes of the same element end
    up with the same local name, the first one is kept. Namespace declarations
    that are no longer used are dropped.
    """
    for element in root.iter(etree.Element):
        element.tag = etree.QName(element).localname
        attrib = element.attrib
        if any(name.startswith('{') for name in attrib):
            attributes = list(attrib.items())
            attrib.clear()
            for name, value in attributes:
                local = etree.QName(name).localname
                if local not in attrib:
                    attrib[local] = value
    etree.cleanup_namespaces(root)


def locate_root(root: ETreeElement, root_element: str | None, namespace: str | None = None) -> ETreeElement | None:
    """
    Return the element that mapping starts from.

    That is the document root, unless a root element name is given, in which
    case it is the first child of the document root with that name, or None
    if there is no such child.
    """
    if root_element is None:
        return root
    element = first_child(root, qualify(root_element, namespace))
    if element is None:
        log.debug('The root element %r was not found under %r', root_element, root.tag)
    return element
