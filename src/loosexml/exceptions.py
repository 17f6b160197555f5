# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from lxml.etree import XMLSyntaxError

from loosexml.python import reprproxy

__all__ = 'ConversionError', 'UnsupportedTypeError', 'XMLSyntaxError'


class ConversionError(ValueError):
    """
    Raised when the text found for a member cannot be converted to its type.

    The original ValueError raised by the primitive conversion is available
    as the exception's ``__cause__`` attribute.

    """

    def __init__(self, text: str, target_type: object, member: str | None = None, reason: str | None = None) -> None:
        self.text = text
        self.target_type = target_type
        self.member = member
        self.reason = reason
        location = f' for member {member!r}' if member is not None else ''
        details = f': {reason}' if reason else ''
        super().__init__(f'Cannot convert {text!r} to {reprproxy(target_type)}{location}{details}')


class UnsupportedTypeError(TypeError):
    """Raised when a target type cannot be instantiated and mapped from XML."""

    def __init__(self, target_type: object, reason: str | None = None) -> None:
        self.target_type = target_type
        self.reason = reason
        details = f': {reason}' if reason else ''
        super().__init__(f'Cannot map XML into {reprproxy(target_type)}{details}')
