# Copyright (c) 2013-2025, Andrea Zoppi
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# 1. Redistributions of source code must retain the above copyright notice,
#    this list of conditions and the following disclaimer.
#
# 2. Redistributions in binary form must reproduce the above copyright
#    notice, this list of conditions and the following disclaimer in the
#    documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE
# LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
# CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF
# SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS
# INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
# CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE)
# ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

r"""Intel HEX error types.

Every library error derives from :class:`IhexError`, itself a
:class:`ValueError`, so that callers catching :class:`ValueError` keep
working.
Errors raised while decoding a stream carry the 1-based
:attr:`IhexError.line_number` of the offending line.

I/O failures of caller-supplied streams are wrapped into :class:`SinkError`
or :class:`SourceError`, with the original exception chained as
``__cause__``.
"""

from typing import Any
from typing import Optional


class IhexError(ValueError):
    r"""Base Intel HEX error.

    Args:
        message (str):
            Human readable description.

        line_number (int):
            1-based line number, if known.
    """

    def __init__(self, message: str, line_number: Optional[int] = None):

        super().__init__(message)
        self.message: str = message
        self.line_number: Optional[int] = line_number

    def __str__(self) -> str:

        if self.line_number is None:
            return self.message
        return f'line {self.line_number}: {self.message}'


# ----------------------------------------------------------------------------

class ParseError(IhexError):
    r"""Malformed record line."""


class InvalidStartCharacterError(ParseError):

    def __init__(self, found: str, line_number: Optional[int] = None):

        super().__init__(f'invalid start character: {found!r}', line_number)
        self.found: str = found


class RecordTooLongError(ParseError):

    def __init__(self, length: int, maximum: int, line_number: Optional[int] = None):

        super().__init__(f'record too long: {length} > {maximum} characters', line_number)
        self.length: int = length
        self.maximum: int = maximum


class TruncatedRecordError(ParseError):

    def __init__(self, length: int, line_number: Optional[int] = None):

        super().__init__(f'truncated record: {length} characters', line_number)
        self.length: int = length


class ByteCountMismatchError(ParseError):

    def __init__(self, expected: int, actual: int, line_number: Optional[int] = None):

        super().__init__(f'byte count mismatch: expected {expected}, found {actual}',
                         line_number)
        self.expected: int = expected
        self.actual: int = actual


class InvalidHexDigitsError(ParseError):

    def __init__(self, field: str, line_number: Optional[int] = None):

        super().__init__(f'invalid hex digits in {field} field', line_number)
        self.field: str = field


class ChecksumMismatchError(ParseError):

    def __init__(self, expected: int, actual: int, line_number: Optional[int] = None):

        super().__init__(f'checksum mismatch: expected 0x{expected:02X}, found 0x{actual:02X}',
                         line_number)
        self.expected: int = expected
        self.actual: int = actual


# ----------------------------------------------------------------------------

class ValidationError(IhexError):
    r"""Record not acceptable within a record sequence."""


class InvalidRecordKindError(ValidationError):

    def __init__(self, kind: Any, variant: Any, line_number: Optional[int] = None):

        kind_value = int(kind)
        if variant is None:
            message = f'unknown record kind 0x{kind_value:02X}'
        else:
            message = f'record kind 0x{kind_value:02X} not valid for I{int(variant)}HEX'
        super().__init__(message, line_number)
        self.kind: Any = kind
        self.variant: Any = variant


class DuplicateTerminatorError(ValidationError):

    def __init__(self, line_number: Optional[int] = None):

        super().__init__('record after end of file record', line_number)


class MissingTerminatorError(ValidationError):

    def __init__(self, line_number: Optional[int] = None):

        super().__init__('missing end of file record', line_number)


# ----------------------------------------------------------------------------

class WriterError(IhexError):
    r"""Streaming writer misuse or exhaustion."""


class WriteAfterCloseError(WriterError):

    def __init__(self):

        super().__init__('writer closed')


class RecordCountOverflowError(WriterError):

    def __init__(self, variant: Any):

        super().__init__(f'maximum record count for I{int(variant)}HEX exceeded')
        self.variant: Any = variant


# ----------------------------------------------------------------------------

class SinkError(OSError):
    r"""Failure of the output byte stream.

    Attributes:
        written (int):
            Number of encoded bytes accepted by the sink within the failing
            call, before the failure.
    """

    def __init__(self, message: str, written: int = 0):

        super().__init__(message)
        self.written: int = written


class SourceError(OSError):
    r"""Failure of the input stream.

    Attributes:
        line_number (int):
            1-based number of the line being read.
    """

    def __init__(self, message: str, line_number: Optional[int] = None):

        super().__init__(message)
        self.line_number: Optional[int] = line_number
