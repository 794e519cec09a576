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

r"""Intel HEX record codec.

A record is a single line of text::

    :BBAAAATTDD...DDCC

* ``BB``: number of data bytes;
* ``AAAA``: 16-bit address offset;
* ``TT``: record kind (see :class:`RecordKind`);
* ``DD...DD``: data bytes;
* ``CC``: checksum of the data bytes (see :func:`compute_checksum`).

All the fields are hexadecimal, uppercase when encoded.

See Also:
    `<https://en.wikipedia.org/wiki/Intel_HEX>`_
"""

import enum
import sys
from typing import IO
from typing import Any
from typing import FrozenSet
from typing import Mapping
from typing import Optional
from typing import Union

from .base import AnyBytes
from .base import AnyLine
from .base import colorize_tokens
from .errors import ByteCountMismatchError
from .errors import ChecksumMismatchError
from .errors import InvalidHexDigitsError
from .errors import InvalidRecordKindError
from .errors import InvalidStartCharacterError
from .errors import RecordTooLongError
from .errors import TruncatedRecordError
from .utils import hexlify
from .utils import is_hex
from .utils import unhexlify

MAX_DATA_SIZE: int = 0xFF
r"""Maximum number of data bytes within a record."""

MAX_LINE_LENGTH: int = 1 + 2 + 4 + 2 + (MAX_DATA_SIZE * 2) + 2
r"""Maximum record line length, excluding the line terminator."""

MIN_LINE_LENGTH: int = 1 + 2 + 4 + 2 + 2
r"""Minimum record line length, excluding the line terminator."""

EOF_CHECKSUM: int = 0xFF
r"""Fixed checksum of the End Of File record."""

START_CHAR: str = ':'
r"""Record start character."""


class RecordKind(enum.IntEnum):
    r"""Intel HEX record kind."""

    DATA = 0
    r"""Binary data."""

    END_OF_FILE = 1
    r"""End Of File."""

    EXTENDED_SEGMENT_ADDRESS = 2
    r"""Extended Segment Address: bits 19:4 of the following data addresses."""

    START_SEGMENT_ADDRESS = 3
    r"""Start Segment Address: CS:IP of 80x86 processors."""

    EXTENDED_LINEAR_ADDRESS = 4
    r"""Extended Linear Address: bits 31:16 of the following data addresses."""

    START_LINEAR_ADDRESS = 5
    r"""Start Linear Address: 32-bit EIP of 80386 and later processors."""

    def is_data(self) -> bool:

        return self == self.DATA

    def is_eof(self) -> bool:
        r"""Tells whether this is an End Of File record kind.

        Examples:
            >>> RecordKind.END_OF_FILE.is_eof()
            True
            >>> RecordKind.DATA.is_eof()
            False
        """

        return self == self.END_OF_FILE

    def is_extension(self) -> bool:
        r"""Tells whether this is an Extended Address record kind.

        Examples:
            >>> RecordKind.EXTENDED_LINEAR_ADDRESS.is_extension()
            True
            >>> RecordKind.EXTENDED_SEGMENT_ADDRESS.is_extension()
            True
            >>> RecordKind.DATA.is_extension()
            False
        """

        return ((self == self.EXTENDED_SEGMENT_ADDRESS) or
                (self == self.EXTENDED_LINEAR_ADDRESS))

    def is_start(self) -> bool:
        r"""Tells whether this is a Start Address record kind.

        Examples:
            >>> RecordKind.START_LINEAR_ADDRESS.is_start()
            True
            >>> RecordKind.START_SEGMENT_ADDRESS.is_start()
            True
            >>> RecordKind.DATA.is_start()
            False
        """

        return ((self == self.START_SEGMENT_ADDRESS) or
                (self == self.START_LINEAR_ADDRESS))


KNOWN_KINDS: FrozenSet[int] = frozenset(RecordKind)
r"""Values of all the known record kinds."""

AnyKind = Union[RecordKind, int]


def compute_checksum(data: AnyBytes, kind: AnyKind) -> int:
    r"""Computes the checksum of a record.

    The checksum is the two's complement of the least significant byte of the
    sum of all the data bytes.
    The End Of File record has the fixed checksum :data:`EOF_CHECKSUM`.

    Args:
        data (bytes):
            Record data bytes.

        kind (:class:`RecordKind`):
            Record kind.

    Returns:
        int: 8-bit checksum.

    Examples:
        >>> compute_checksum(b'\xAA', RecordKind.DATA)
        86
        >>> compute_checksum(b'', RecordKind.END_OF_FILE)
        255
        >>> compute_checksum(b'', RecordKind.DATA)
        0
    """

    if kind == RecordKind.END_OF_FILE:
        return EOF_CHECKSUM

    total = sum(data) & 0xFFFFFFFF
    checksum = ((~total & 0xFF) + 1) & 0xFF
    return checksum


class Record:
    r"""Intel HEX record.

    The checksum is not stored: it is derived from :attr:`data` and
    :attr:`kind` whenever needed, so that a record can never disagree with
    its own checksum.

    Attributes:
        kind (:class:`RecordKind` or int):
            Record kind. Unknown kind values are kept as plain integers.

        address (int):
            16-bit address offset.

        data (bytes):
            Up to 255 data bytes.

    Args:
        kind (:class:`RecordKind` or int):
            See :attr:`kind`.

        address (int):
            See :attr:`address`.

        data (bytes):
            See :attr:`data`.

    Raises:
        ValueError: Some attribute is out of range.

    Examples:
        >>> record = Record(RecordKind.DATA, 0x0010, b'\xAA')
        >>> str(record)
        ':01001000AA56\n'
        >>> record.checksum
        86
        >>> Record() == Record(RecordKind.DATA, 0, b'')
        True
    """

    def __bytes__(self) -> bytes:

        return self.to_bytestr()

    def __eq__(self, other: Any) -> bool:

        if not isinstance(other, Record):
            return NotImplemented

        return (self.kind == other.kind and
                self.address == other.address and
                self.data == other.data)

    def __init__(
        self,
        kind: AnyKind = RecordKind.DATA,
        address: int = 0,
        data: AnyBytes = b'',
    ):

        kind = kind.__index__()
        if kind in KNOWN_KINDS:
            kind = RecordKind(kind)

        self.kind: AnyKind = kind
        self.address: int = address.__index__()
        self.data: bytes = bytes(data)
        self.validate()

    def __ne__(self, other: Any) -> bool:

        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __repr__(self) -> str:

        return (f'{type(self).__name__}(kind={self.kind!r}, '
                f'address=0x{self.address:04X}, data={self.data!r})')

    def __str__(self) -> str:

        return self.to_bytestr().decode()

    @property
    def checksum(self) -> int:
        r"""int: Checksum, computed on demand."""

        return compute_checksum(self.data, self.kind)

    @property
    def count(self) -> int:
        r"""int: Number of data bytes."""

        return len(self.data)

    def copy(self) -> 'Record':

        return type(self)(self.kind, self.address, self.data)

    @classmethod
    def create_data(
        cls,
        address: int,
        data: AnyBytes,
    ) -> 'Record':
        r"""Creates a Data record.

        Args:
            address (int):
                16-bit address offset.

            data (bytes):
                Up to 255 data bytes.

        Returns:
            :class:`Record`: Data record object.

        Examples:
            >>> str(Record.create_data(0x1234, b'abc'))
            ':03123400616263DA\n'
        """

        return cls(RecordKind.DATA, address, data)

    @classmethod
    def create_end_of_file(cls) -> 'Record':
        r"""Creates an End Of File record.

        Examples:
            >>> str(Record.create_end_of_file())
            ':00000001FF\n'
        """

        return cls(RecordKind.END_OF_FILE)

    @classmethod
    def create_extended_linear_address(cls, extension: int) -> 'Record':
        r"""Creates an Extended Linear Address record.

        Args:
            extension (int):
                Upper 16 bits of the following data record addresses.

        Returns:
            :class:`Record`: Extended Linear Address record object.

        Examples:
            >>> str(Record.create_extended_linear_address(0x0001))
            ':020000040001FF\n'
        """

        extension = extension.__index__()
        if not 0 <= extension <= 0xFFFF:
            raise ValueError('extension overflow')

        data = extension.to_bytes(2, byteorder='big')
        return cls(RecordKind.EXTENDED_LINEAR_ADDRESS, data=data)

    @classmethod
    def create_extended_segment_address(cls, extension: int) -> 'Record':
        r"""Creates an Extended Segment Address record.

        Args:
            extension (int):
                Segment base, multiplied by 16 and added to the following data
                record addresses.

        Returns:
            :class:`Record`: Extended Segment Address record object.
        """

        extension = extension.__index__()
        if not 0 <= extension <= 0xFFFF:
            raise ValueError('extension overflow')

        data = extension.to_bytes(2, byteorder='big')
        return cls(RecordKind.EXTENDED_SEGMENT_ADDRESS, data=data)

    @classmethod
    def create_start_linear_address(cls, address: int) -> 'Record':

        address = address.__index__()
        if not 0 <= address <= 0xFFFFFFFF:
            raise ValueError('address overflow')

        data = address.to_bytes(4, byteorder='big')
        return cls(RecordKind.START_LINEAR_ADDRESS, data=data)

    @classmethod
    def create_start_segment_address(cls, address: int) -> 'Record':
        r"""Creates a Start Segment Address record.

        Args:
            address (int):
                CS:IP pair packed as a 32-bit big-endian value, CS being the
                upper half.

        Returns:
            :class:`Record`: Start Segment Address record object.
        """

        address = address.__index__()
        if not 0 <= address <= 0xFFFFFFFF:
            raise ValueError('address overflow')

        data = address.to_bytes(4, byteorder='big')
        return cls(RecordKind.START_SEGMENT_ADDRESS, data=data)

    def data_to_int(self, byteorder: str = 'big') -> int:

        return int.from_bytes(self.data, byteorder=byteorder)

    @classmethod
    def parse(
        cls,
        line: AnyLine,
        strict: bool = False,
    ) -> 'Record':
        r"""Parses a record line.

        A trailing ``\n`` or ``\r\n`` line terminator is ignored.
        Hexadecimal digits are case-insensitive.

        Args:
            line (str or bytes):
                Record line.

            strict (bool):
                Rejects record kinds not listed by :class:`RecordKind`.
                Format-specific legality is checked elsewhere (see
                :func:`ihexrec.grammar.validate`).

        Returns:
            :class:`Record`: Parsed record.

        Raises:
            TruncatedRecordError: Line too short.
            InvalidStartCharacterError: Line not starting with ``:``.
            RecordTooLongError: Line too long.
            InvalidHexDigitsError: Non-hexadecimal field digits.
            ByteCountMismatchError: Byte count field not matching the data.
            InvalidRecordKindError: Unknown kind with `strict`.
            ChecksumMismatchError: Wrong checksum.

        Examples:
            >>> Record.parse(':01001000AA56\n')
            Record(kind=<RecordKind.DATA: 0>, address=0x0010, data=b'\xaa')
            >>> Record.parse(b':01001000AA57\n')
            Traceback (most recent call last):
                ...
            ihexrec.errors.ChecksumMismatchError: checksum mismatch: expected 0x56, found 0x57
        """

        if isinstance(line, str):
            line = line.encode('ascii', 'replace')
        else:
            line = bytes(line)

        if line.endswith(b'\n'):
            line = line[:-1]
        if line.endswith(b'\r'):
            line = line[:-1]

        length = len(line)
        if not length:
            raise TruncatedRecordError(length)

        if line[:1] != START_CHAR.encode():
            raise InvalidStartCharacterError(line[:1].decode('ascii', 'replace'))

        if length > MAX_LINE_LENGTH:
            raise RecordTooLongError(length, MAX_LINE_LENGTH)

        if length < MIN_LINE_LENGTH:
            raise TruncatedRecordError(length)

        for field, start, endex in (('count', 1, 3), ('address', 3, 7), ('kind', 7, 9)):
            if not is_hex(line[start:endex]):
                raise InvalidHexDigitsError(field)

        count = int(line[1:3], 16)
        address = int(line[3:7], 16)
        kind = int(line[7:9], 16)
        digits = line[9:-2]

        if len(digits) & 1:
            raise InvalidHexDigitsError('data')

        actual_count = len(digits) >> 1
        if actual_count != count:
            raise ByteCountMismatchError(count, actual_count)

        if strict and kind not in KNOWN_KINDS:
            raise InvalidRecordKindError(kind, None)

        if not is_hex(digits):
            raise InvalidHexDigitsError('data')

        if not is_hex(line[-2:]):
            raise InvalidHexDigitsError('checksum')

        data = unhexlify(digits)
        checksum = int(line[-2:], 16)
        expected = compute_checksum(data, kind)
        if checksum != expected:
            raise ChecksumMismatchError(expected, checksum)

        return cls(kind, address, data)

    def print(
        self,
        stream: Optional[IO] = None,
        color: bool = False,
        end: AnyBytes = b'\n',
    ) -> 'Record':
        r"""Prints the record tokens onto a byte stream.

        Args:
            stream (bytes IO):
                The byte stream where the record tokens are printed.
                If ``None``, *stdout* is selected.

            color (bool):
                Tokens are colorized before printing.

            end (bytes):
                Line terminator.

        Returns:
            :class:`Record`: *self*.
        """

        if stream is None:
            stream = sys.stdout.buffer
        tokens = self.to_tokens(end=end)
        if color:
            tokens = colorize_tokens(tokens)
        stream.writelines(tokens.values())
        return self

    def serialize(self, stream: IO, end: AnyBytes = b'\n') -> int:
        r"""Writes the encoded record onto a byte stream.

        Returns:
            int: Number of bytes written.
        """

        bytestr = self.to_bytestr(end=end)
        stream.write(bytestr)
        return len(bytestr)

    def to_bytestr(self, end: AnyBytes = b'\n') -> bytes:
        r"""Encodes the record into a byte string.

        Args:
            end (bytes):
                Line terminator.

        Returns:
            bytes: Encoded record.

        Examples:
            >>> Record.create_end_of_file().to_bytestr()
            b':00000001FF\n'
            >>> Record.create_data(0, b'\x01\x02').to_bytestr(end=b'\r\n')
            b':020000000102FD\r\n'
        """

        bytestr = b':%02X%04X%02X%s%02X%s' % (
            len(self.data),
            self.address,
            self.kind,
            hexlify(self.data),
            self.checksum,
            end,
        )
        return bytestr

    def to_tokens(self, end: AnyBytes = b'\n') -> Mapping[str, bytes]:
        r"""Encodes the record into byte string tokens.

        Examples:
            >>> Record.create_data(0x1234, b'abc').to_tokens()  # doctest: +NORMALIZE_WHITESPACE
            {'begin': b':', 'count': b'03', 'address': b'1234', 'kind': b'00',
             'data': b'616263', 'checksum': b'DA', 'end': b'\n'}
        """

        return {
            'begin': b':',
            'count': b'%02X' % len(self.data),
            'address': b'%04X' % self.address,
            'kind': b'%02X' % self.kind,
            'data': hexlify(self.data),
            'checksum': b'%02X' % self.checksum,
            'end': bytes(end),
        }

    def validate(self) -> 'Record':
        r"""Checks attribute ranges.

        Returns:
            :class:`Record`: *self*.

        Raises:
            ValueError: Some attribute is out of range.
        """

        if not 0 <= self.kind <= 0xFF:
            raise ValueError('kind overflow')

        if not 0 <= self.address <= 0xFFFF:
            raise ValueError('address overflow')

        if len(self.data) > MAX_DATA_SIZE:
            raise ValueError('data size overflow')

        return self


def decode(line: AnyLine, strict: bool = False) -> Record:
    r"""Decodes a single record line.

    See Also:
        :meth:`Record.parse`
    """

    return Record.parse(line, strict=strict)


def encode(record: Record) -> str:
    r"""Encodes a single record into a text line, ``\n`` terminated.

    Examples:
        >>> encode(Record.create_end_of_file())
        ':00000001FF\n'
    """

    return str(record)
