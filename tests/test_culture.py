# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import math
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from loosexml.culture import Culture, camel_case, name_variants, strip_separators, translate_date_format


class TestCulture:

    def test_registry(self) -> None:
        assert Culture.get('invariant') is Culture.invariant
        assert Culture.get('de-de') is Culture.get('de-DE')
        assert Culture.get('tr-TR').dotted_i

        with pytest.raises(LookupError, match=r"Unknown culture: 'xx-XX'"):
            Culture.get('xx-XX')

    def test_casing(self) -> None:
        invariant = Culture.invariant
        turkish = Culture.get('tr-TR')

        assert invariant.lower('ID') == 'id'
        assert invariant.upper('id') == 'ID'
        assert turkish.lower('ID') == 'ıd'
        assert turkish.upper('id') == 'İD'
        assert turkish.lower('İstanbul') == 'istanbul'
        assert invariant.casefold('Straße') == 'strasse'

    def test_integers(self) -> None:
        culture = Culture.invariant

        assert culture.parse_integer('42') == 42
        assert culture.parse_integer(' -7 ') == -7
        assert culture.parse_integer('+3') == 3

        for text in ('', '4.2', '0x10', '1_000', 'forty two'):
            with pytest.raises(ValueError, match=r'invalid integer literal'):
                culture.parse_integer(text)

    def test_floats(self) -> None:
        invariant = Culture.invariant
        german = Culture.get('de-DE')
        french = Culture.get('fr-FR')

        assert invariant.parse_float('3.5') == 3.5
        assert invariant.parse_float('1,234.5') == 1234.5
        assert invariant.parse_float('1e3') == 1000.0
        assert invariant.parse_float('.5') == 0.5
        assert invariant.parse_float('-Infinity') == -math.inf
        assert math.isnan(invariant.parse_float('NaN'))
        assert german.parse_float('1.234,5') == 1234.5
        assert french.parse_float('1 234,5') == 1234.5

        with pytest.raises(ValueError, match=r'invalid floating point literal'):
            invariant.parse_float('three')

    def test_decimals(self) -> None:
        assert Culture.invariant.parse_decimal('10.25') == Decimal('10.25')
        assert Culture.get('de-DE').parse_decimal('1.000,25') == Decimal('1000.25')

        with pytest.raises(ValueError, match=r'invalid decimal literal'):
            Culture.invariant.parse_decimal('1e3')

        with pytest.raises(ValueError, match=r'invalid decimal literal'):
            Culture.invariant.parse_decimal('NaN')

    def test_dates(self) -> None:
        invariant = Culture.invariant
        british = Culture.get('en-GB')

        assert invariant.parse_datetime('2021-03-15T10:20:30') == datetime(2021, 3, 15, 10, 20, 30)  # noqa: DTZ001
        assert invariant.parse_datetime('03/15/2021') == datetime(2021, 3, 15)  # noqa: DTZ001
        assert invariant.parse_datetime('March 15, 2021') == datetime(2021, 3, 15)  # noqa: DTZ001
        assert british.parse_datetime('15/03/2021') == datetime(2021, 3, 15)  # noqa: DTZ001
        assert invariant.parse_datetime('Mon, 15 Mar 2021 10:00:00 +0000') == datetime(2021, 3, 15, 10, tzinfo=UTC)

        with pytest.raises(ValueError, match=r'unrecognized date/time'):
            invariant.parse_datetime('yesterday')

    def test_exact_dates(self) -> None:
        culture = Culture.invariant

        assert culture.parse_exact('2020-02-28', 'yyyy-MM-dd') == datetime(2020, 2, 28)  # noqa: DTZ001
        assert culture.parse_exact('28/02/2020 13:45', '%d/%m/%Y %H:%M') == datetime(2020, 2, 28, 13, 45)  # noqa: DTZ001

        with pytest.raises(ValueError, match=r'does not match format'):
            culture.parse_exact('31-02-2020', 'yyyy-MM-dd')


class TestNaming:

    def test_strip_separators(self) -> None:
        assert strip_separators('first_name') == 'firstname'
        assert strip_separators('first-name') == 'firstname'
        assert strip_separators('FirstName') == 'FirstName'

    def test_camel_case(self) -> None:
        culture = Culture.invariant

        assert camel_case('FirstName', culture) == 'firstName'
        assert camel_case('first_name', culture) == 'firstName'
        assert camel_case('ID', culture) == 'id'
        assert camel_case('NAME_ID', culture) == 'nameId'
        assert camel_case('value', culture) == 'value'
        assert camel_case('', culture) == ''

    def test_name_variants(self) -> None:
        variants = name_variants('ActiveUser', Culture.invariant)

        assert variants[0] == 'ActiveUser'
        assert len(variants) == len(set(variants))
        assert {'activeUser', 'activeuser', 'Active_User', 'active_user', 'Active-User', 'active-user', 'Active User'}.issubset(variants)

    def test_date_format_translation(self) -> None:
        assert translate_date_format('yyyy-MM-dd') == '%Y-%m-%d'
        assert translate_date_format("yyyy-MM-dd'T'HH:mm:ss") == '%Y-%m-%dT%H:%M:%S'
        assert translate_date_format('dd MMM yyyy hh:mm tt') == '%d %b %Y %I:%M %p'
        assert translate_date_format(r'HH\h mm') == '%Hh %M'
        assert translate_date_format('%d/%m/%Y') == '%d/%m/%Y'

        with pytest.raises(ValueError, match=r'unterminated quoted literal'):
            translate_date_format("yyyy'T")
