# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest

from loosexml import XMLSyntaxError
from loosexml.document import locate_root, parse_document, strip_namespaces


class TestDocument:

    def test_parse(self) -> None:
        assert parse_document('<root>text</root>').text == 'text'
        assert parse_document(b'<root>text</root>').text == 'text'

        # text that was already decoded can still carry its original encoding declaration
        assert parse_document('<?xml version="1.0" encoding="ISO-8859-1"?><root>José</root>').text == 'José'
        assert parse_document(b'<?xml version="1.0" encoding="ISO-8859-1"?><root>Jos\xe9</root>').text == 'José'

        with pytest.raises(XMLSyntaxError):
            parse_document('<root>')

        with pytest.raises(XMLSyntaxError):
            parse_document('not xml')

    def test_entities_are_not_resolved(self) -> None:
        document = '<!DOCTYPE root [<!ENTITY secret SYSTEM "file:///etc/passwd">]><root>&secret;</root>'
        root = parse_document(document)
        assert 'root:' not in (root.xpath('string()') or '')

    def test_strip_namespaces(self) -> None:
        root = parse_document('<a:root xmlns:a="urn:a" xmlns:b="urn:b" b:attr="1" plain="2"><b:child/><other xmlns="urn:c"/><!-- c --><?pi x?></a:root>')
        strip_namespaces(root)

        assert root.tag == 'root'
        assert dict(root.attrib) == {'attr': '1', 'plain': '2'}
        assert [child.tag for child in root.iterchildren('*')] == ['child', 'other']
        assert root.nsmap == {}
        assert all(child.nsmap == {} for child in root.iterchildren('*'))

    def test_strip_namespaces_duplicate_attributes(self) -> None:
        root = parse_document('<root xmlns:a="urn:a" xmlns:b="urn:b" a:id="first" b:id="second"/>')
        strip_namespaces(root)

        assert dict(root.attrib) == {'id': 'first'}

    def test_locate_root(self) -> None:
        root = parse_document('<response><meta/><person>a</person><person>b</person></response>')

        assert locate_root(root, None) is root
        assert locate_root(root, 'person').text == 'a'  # type: ignore[union-attr]
        assert locate_root(root, 'missing') is None

        root = parse_document('<response xmlns="urn:x"><person>a</person></response>')
        assert locate_root(root, 'person') is None
        assert locate_root(root, 'person', 'urn:x').text == 'a'  # type: ignore[union-attr]
