# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from dataclasses import dataclass, field

from loosexml.culture import Culture
from loosexml.datamodel import ConverterRegistry

__all__ = 'MappingContext', 'qualify'


def qualify(name: str, namespace: str | None) -> str:
    """Return the name in Clark notation ({namespace}name) if a namespace is given"""
    return f'{{{namespace}}}{name}' if namespace else name


@dataclass(frozen=True, slots=True)
class MappingContext:
    """The read-only settings that apply while mapping one document"""

    namespace: str | None = None
    culture: Culture = Culture.invariant
    date_format: str | None = None
    converters: ConverterRegistry = field(default_factory=ConverterRegistry)

    def qualify(self, name: str) -> str:
        return qualify(name, self.namespace)
