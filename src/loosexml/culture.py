# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from email.utils import parsedate_to_datetime
from typing import ClassVar, Self

__all__ = 'Culture', 'camel_case', 'name_variants', 'strip_separators', 'translate_date_format'


_integer_pattern = re.compile(r'[+-]?[0-9]+')
_float_pattern = re.compile(r'[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?')
_decimal_pattern = re.compile(r'[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)')

_special_floats = {'nan': float('nan'), 'infinity': float('inf'), '+infinity': float('inf'), '-infinity': float('-inf'), 'inf': float('inf'), '-inf': float('-inf')}


@dataclass(frozen=True, slots=True)
class Culture:
    """
    The locale dependent rules used while converting text found in XML.

    A culture describes how numbers are written (decimal and group separators),
    the generic date/time patterns tried after ISO 8601 fails, and the casing
    rules used when deriving lower-case and camel-case lookup names.
    """

    name: str
    decimal_separator: str = '.'
    group_separators: tuple[str, ...] = (',',)
    date_formats: tuple[str, ...] = ()
    dotted_i: bool = False  # Turkish and Azeri casing of the dotted/dotless i

    _registry: ClassVar[dict[str, 'Culture']] = {}

    invariant: ClassVar['Culture']

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}({self.name!r})'

    @classmethod
    def register(cls, culture: 'Culture') -> 'Culture':
        cls._registry[culture.name.lower()] = culture
        return culture

    @classmethod
    def get(cls, name: str) -> Self:
        try:
            return cls._registry[name.lower()]  # type: ignore[return-value]
        except KeyError:
            raise LookupError(f'Unknown culture: {name!r}') from None

    # Casing

    def lower(self, text: str) -> str:
        if self.dotted_i:
            text = text.replace('I', 'ı').replace('İ', 'i')
        return text.lower()

    def upper(self, text: str) -> str:
        if self.dotted_i:
            text = text.replace('i', 'İ').replace('ı', 'I')
        return text.upper()

    def casefold(self, text: str) -> str:
        return self.lower(text).casefold()

    # Numbers

    def _normalize_number(self, text: str) -> str:
        text = text.strip()
        for separator in self.group_separators:
            if separator != self.decimal_separator:
                text = text.replace(separator, '')
        if self.decimal_separator != '.':
            text = text.replace(self.decimal_separator, '.')
        return text

    def parse_integer(self, text: str) -> int:
        value = text.strip()
        if _integer_pattern.fullmatch(value) is None:
            raise ValueError(f'invalid integer literal: {text!r}')
        return int(value)

    def parse_float(self, text: str) -> float:
        value = self._normalize_number(text)
        if value.lower() in _special_floats:
            return _special_floats[value.lower()]
        if _float_pattern.fullmatch(value) is None:
            raise ValueError(f'invalid floating point literal: {text!r}')
        return float(value)

    def parse_decimal(self, text: str) -> Decimal:
        value = self._normalize_number(text)
        if _decimal_pattern.fullmatch(value) is None:
            raise ValueError(f'invalid decimal literal: {text!r}')
        try:
            return Decimal(value)
        except InvalidOperation as exc:
            raise ValueError(f'invalid decimal literal: {text!r}') from exc

    # Dates

    def parse_datetime(self, text: str) -> datetime:
        """Parse a date/time using ISO 8601, the culture's patterns and finally RFC 2822"""
        value = text.strip()
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass
        for date_format in self.date_formats:
            try:
                return datetime.strptime(value, date_format)  # noqa: DTZ007
            except ValueError:
                continue
        try:
            return parsedate_to_datetime(value)
        except (TypeError, ValueError, IndexError):
            raise ValueError(f'unrecognized date/time: {text!r}') from None

    def parse_exact(self, text: str, date_format: str) -> datetime:
        """Parse a date/time that must match the given strftime or .NET style pattern"""
        return datetime.strptime(text, translate_date_format(date_format))  # noqa: DTZ007


_us_formats = (
    '%m/%d/%Y %H:%M:%S',
    '%m/%d/%Y %I:%M:%S %p',
    '%m/%d/%Y %H:%M',
    '%m/%d/%Y',
    '%Y/%m/%d %H:%M:%S',
    '%Y/%m/%d',
    '%d %B %Y',
    '%d %b %Y',
    '%B %d, %Y',
    '%b %d, %Y',
)

Culture.invariant = Culture.register(Culture('invariant', date_formats=_us_formats))

Culture.register(Culture('en-US', date_formats=_us_formats))
Culture.register(Culture('en-GB', date_formats=('%d/%m/%Y %H:%M:%S', '%d/%m/%Y %H:%M', '%d/%m/%Y', '%d %B %Y', '%d %b %Y')))
Culture.register(Culture('de-DE', decimal_separator=',', group_separators=('.',), date_formats=('%d.%m.%Y %H:%M:%S', '%d.%m.%Y %H:%M', '%d.%m.%Y')))
Culture.register(Culture('fr-FR', decimal_separator=',', group_separators=('\u202f', '\u00a0', ' '), date_formats=('%d/%m/%Y %H:%M:%S', '%d/%m/%Y %H:%M', '%d/%m/%Y')))
Culture.register(Culture('tr-TR', decimal_separator=',', group_separators=('.',), date_formats=('%d.%m.%Y %H:%M:%S', '%d.%m.%Y %H:%M', '%d.%m.%Y'), dotted_i=True))


# Naming helpers

def strip_separators(name: str) -> str:
    """Remove the underscores and dashes from a name"""
    return name.replace('_', '').replace('-', '')


def _is_upper_case(word: str) -> bool:
    return re.fullmatch(r'[A-Z]+', word) is not None


def pascal_case(name: str, culture: Culture) -> str:
    if not name:
        return name
    words = name.replace('_', ' ').split(' ')
    if len(words) > 1 or _is_upper_case(words[0]):
        for index, word in enumerate(words):
            if word:
                rest = word[1:]
                if _is_upper_case(rest):
                    rest = culture.lower(rest)
                words[index] = culture.upper(word[0]) + rest
        return ''.join(words)
    return culture.upper(words[0][:1]) + words[0][1:]


def camel_case(name: str, culture: Culture) -> str:
    """
    Return the camel case form of a name.

    Underscore separated and all upper case names are pascal-cased first
    (first_name -> firstName, ID -> id, NAME_ID -> nameId), then the initial
    letter is lowered (FirstName -> firstName).
    """
    name = pascal_case(name, culture)
    return culture.lower(name[:1]) + name[1:]


def _add_separators(name: str, separator: str) -> str:
    name = re.sub(r'([A-Z]+)([A-Z][a-z])', rf'\1{separator}\2', name)
    name = re.sub(r'([a-z\d])([A-Z])', rf'\1{separator}\2', name)
    return re.sub(r'[-_\s]', separator, name)


def name_variants(name: str, culture: Culture) -> list[str]:
    """The spellings under which an enum member name may appear in XML"""
    underscored = _add_separators(name, '_')
    dashed = _add_separators(name, '-')
    variants = [
        name,
        camel_case(name, culture),
        culture.lower(name),
        underscored,
        culture.lower(underscored),
        dashed,
        culture.lower(dashed),
        _add_separators(name, ' '),
    ]
    return list(dict.fromkeys(variants))


# .NET style custom date/time patterns (yyyy-MM-dd HH:mm:ss) to strftime patterns

_date_tokens = (
    ('yyyy', '%Y'),
    ('yy', '%y'),
    ('MMMM', '%B'),
    ('MMM', '%b'),
    ('MM', '%m'),
    ('M', '%m'),
    ('dddd', '%A'),
    ('ddd', '%a'),
    ('dd', '%d'),
    ('d', '%d'),
    ('HH', '%H'),
    ('H', '%H'),
    ('hh', '%I'),
    ('h', '%I'),
    ('mm', '%M'),
    ('m', '%M'),
    ('ss', '%S'),
    ('s', '%S'),
    ('ffffff', '%f'),
    ('fffff', '%f'),
    ('ffff', '%f'),
    ('fff', '%f'),
    ('ff', '%f'),
    ('f', '%f'),
    ('tt', '%p'),
    ('zzz', '%z'),
    ('zz', '%z'),
    ('z', '%z'),
    ('K', '%z'),
)


def translate_date_format(date_format: str) -> str:
    """
    Translate a .NET style custom date/time pattern to a strftime pattern.

    Patterns that already contain strftime directives are returned unchanged.
    Quoted text ('T' or "T") and backslash escaped characters are literals.
    """
    if '%' in date_format:
        return date_format
    result: list[str] = []
    position = 0
    length = len(date_format)
    while position < length:
        char = date_format[position]
        if char in '\'"':
            end = date_format.find(char, position + 1)
            if end == -1:
                raise ValueError(f'unterminated quoted literal in date format {date_format!r}')
            result.append(date_format[position + 1:end])
            position = end + 1
            continue
        if char == '\\' and position + 1 < length:
            result.append(date_format[position + 1])
            position += 2
            continue
        for token, directive in _date_tokens:
            if date_format.startswith(token, position):
                result.append(directive)
                position += len(token)
                break
        else:
            result.append(char)
            position += 1
    return ''.join(result)
