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

r"""Ordered Intel HEX record container."""

import io
import logging
from typing import IO
from typing import Iterable
from typing import Iterator
from typing import List
from typing import Optional
from typing import Tuple
from typing import Union

from bytesparse import Memory
from deprecated import deprecated

from .base import AnyBytes
from .errors import DuplicateTerminatorError
from .errors import IhexError
from .errors import MissingTerminatorError
from .errors import SinkError
from .errors import SourceError
from .grammar import SEGMENT_SIZE
from .grammar import FormatVariant
from .grammar import check
from .record import Record
from .record import RecordKind

_logger = logging.getLogger(__name__)

_START_KINDS = (RecordKind.START_LINEAR_ADDRESS, RecordKind.START_SEGMENT_ADDRESS)


class RecordSequence:
    r"""Append-only sequence of records of a format variant.

    The sequence guarantees that:

    * every record kind is legal for :attr:`variant`
      (see :func:`ihexrec.grammar.validate`);
    * there is at most one *End Of File* record, and it is the last one.

    Records are read back either by plain iteration, or through the internal
    cursor via :meth:`read_next` and :meth:`reset`.
    The cursor is an index, ``-1`` before the first record, and the record
    count once exhausted.

    Args:
        variant (:class:`FormatVariant`):
            Format variant.

        records (list of :class:`Record`):
            Initial records, appended in order.

    Examples:
        >>> from ihexrec import Record, RecordSequence, FormatVariant
        >>> seq = RecordSequence(FormatVariant.I8HEX)
        >>> seq.append(Record.create_data(0x0010, b'\xAA'))
        >>> seq.append(Record.create_end_of_file())
        >>> seq.read_next()
        (Record(kind=<RecordKind.DATA: 0>, address=0x0010, data=b'\xaa'), True)
        >>> seq.read_next()[1]
        True
        >>> seq.read_next()
        (Record(kind=<RecordKind.DATA: 0>, address=0x0000, data=b''), False)
    """

    def __getitem__(self, key: Union[int, slice]) -> Union[Record, List[Record]]:

        return self._records[key]

    def __init__(
        self,
        variant: FormatVariant = FormatVariant.I32HEX,
        records: Iterable[Record] = (),
    ):

        self._variant: FormatVariant = FormatVariant(variant)
        self._records: List[Record] = []
        self._index: int = -1
        self.extend(records)

    def __iter__(self) -> Iterator[Record]:

        return iter(list(self._records))

    def __len__(self) -> int:

        return len(self._records)

    def __repr__(self) -> str:

        return (f'<{type(self).__name__} I{int(self._variant)}HEX '
                f'records={len(self._records)} position={self._index}>')

    def add_records(self, *records: Record) -> None:
        r"""Appends records in order, stopping at the first failure."""

        self.extend(records)

    def append(self, record: Record) -> None:
        r"""Appends a record.

        The cursor is not affected.
        On failure the sequence is left unchanged.

        Args:
            record (:class:`Record`):
                Record to append.

        Raises:
            InvalidRecordKindError: Record kind not legal for :attr:`variant`.
            DuplicateTerminatorError: End Of File record already appended.
        """

        check(record.kind, self._variant)

        if self.terminated:
            raise DuplicateTerminatorError()

        self._records.append(record)

    @classmethod
    def decode_stream(
        cls,
        source: Union[IO, AnyBytes, str],
        variant: FormatVariant = FormatVariant.I32HEX,
        strict: bool = False,
        ignore_after_termination: bool = False,
    ) -> 'RecordSequence':
        r"""Decodes records from a stream.

        Each non-blank line of `source` is decoded via :meth:`Record.parse`,
        then appended via :meth:`append`.

        Args:
            source (text/bytes IO, str, or bytes):
                Stream or buffer to read lines from.

            variant (:class:`FormatVariant`):
                Format variant.

            strict (bool):
                Rejects unknown record kinds while parsing.

            ignore_after_termination (bool):
                Stops reading right after the End Of File record.
                If false, any records after it are an error.

        Returns:
            :class:`RecordSequence`: Decoded records.

        Raises:
            ParseError: Malformed record line.
            InvalidRecordKindError: Record kind not legal for `variant`.
            DuplicateTerminatorError: Record after the End Of File record.
            MissingTerminatorError: No End Of File record.
            SourceError: `source` failed reading, or decoding its text.

        Any :class:`IhexError` carries the 1-based ``line_number`` it
        occurred at.

        Examples:
            >>> from ihexrec import RecordSequence, FormatVariant
            >>> text = ':01001000AA56\n:00000001FF\n'
            >>> seq = RecordSequence.decode_stream(text, FormatVariant.I8HEX)
            >>> len(seq)
            2
            >>> RecordSequence.decode_stream(':01001000AA56\n')
            Traceback (most recent call last):
                ...
            ihexrec.errors.MissingTerminatorError: line 1: missing end of file record
        """

        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(source)
        elif isinstance(source, str):
            source = io.StringIO(source)

        sequence = cls(variant)
        line_number = 0

        try:
            for line in source:
                line_number += 1

                if not line.strip():
                    continue

                if ignore_after_termination and sequence.terminated:
                    break

                try:
                    record = Record.parse(line, strict=strict)
                    sequence.append(record)
                except IhexError as exc:
                    exc.line_number = line_number
                    raise

        except (OSError, UnicodeDecodeError) as exc:
            raise SourceError(f'cannot read line {line_number + 1}: {exc}',
                              line_number + 1) from exc

        if not sequence.terminated:
            raise MissingTerminatorError(line_number or None)

        _logger.debug('decoded %d records from %d lines as I%dHEX',
                      len(sequence), line_number, int(sequence.variant))
        return sequence

    def extend(self, records: Iterable[Record]) -> None:
        r"""Appends records in order, stopping at the first failure."""

        for record in records:
            self.append(record)

    @deprecated(reason='Use read_next() instead')
    def next(self) -> bool:
        r"""Advances the cursor; returns whether it points to a record."""

        _, has_more = self.read_next()
        return has_more

    @property
    def position(self) -> int:
        r"""int: Cursor index; ``-1`` before start, :func:`len` when exhausted."""

        return self._index

    def read_next(self) -> Tuple[Record, bool]:
        r"""Advances the cursor to the next record.

        Once past the last record, it keeps returning an empty data record and
        false, without moving further.

        Returns:
            (:class:`Record`, bool): Record at the new cursor position, and
            whether the cursor points to an actual record.
        """

        size = len(self._records)
        index = self._index + 1

        if index >= size:
            self._index = size
            return Record(), False

        self._index = index
        return self._records[index], True

    @deprecated(reason='Use the record returned by read_next() instead')
    def record(self) -> Optional[Record]:
        r"""Record at the cursor; ``None`` before start or when exhausted."""

        if 0 <= self._index < len(self._records):
            return self._records[self._index]
        return None

    @property
    def records(self) -> Tuple[Record, ...]:
        r"""tuple of :class:`Record`: Snapshot of the stored records."""

        return tuple(self._records)

    def reset(self) -> None:
        r"""Moves the cursor back before the first record."""

        self._index = -1

    def serialize(self, stream: IO, end: AnyBytes = b'\n') -> int:
        r"""Writes all the encoded records onto a byte stream.

        Returns:
            int: Number of bytes written.

        Raises:
            SinkError: `stream` failed writing.
        """

        written = 0
        for record in self._records:
            try:
                written += record.serialize(stream, end=end)
            except OSError as exc:
                raise SinkError(f'cannot write record: {exc}', written) from exc
        return written

    @property
    def start_address(self) -> Optional[int]:
        r"""int: Value of the last *start address* record, if any."""

        address = None
        for record in self._records:
            if record.kind in _START_KINDS:
                address = record.data_to_int()
        return address

    @property
    def terminated(self) -> bool:
        r"""bool: The *End Of File* record was appended."""

        records = self._records
        return bool(records) and records[-1].kind == RecordKind.END_OF_FILE

    def to_memory(self) -> Memory:
        r"""Builds the memory image of the data records.

        Extension records relocate the following data records:
        an *Extended Linear Address* provides bits 31:16 of the address,
        an *Extended Segment Address* is multiplied by 16 and added.

        Within I16HEX, data record offsets wrap around the 64 KiB segment,
        i.e. the tail of a record running past offset ``FFFF`` lands at the
        segment base.

        Returns:
            :class:`bytesparse.Memory`: Sparse memory image.

        Examples:
            >>> from ihexrec import RecordSequence, FormatVariant
            >>> text = ':020000040001FF\n:01001000AA56\n:00000001FF\n'
            >>> seq = RecordSequence.decode_stream(text)
            >>> seq.to_memory().to_blocks()
            [[65552, b'\xaa']]
        """

        memory = Memory()
        extension = 0
        wrap = self._variant == FormatVariant.I16HEX

        for record in self._records:
            kind = record.kind

            if kind == RecordKind.DATA:
                address = record.address
                data = record.data

                if wrap and address + len(data) > SEGMENT_SIZE:
                    head = SEGMENT_SIZE - address
                    memory.write(extension + address, data[:head])
                    memory.write(extension, data[head:])
                else:
                    memory.write(extension + address, data)

            elif kind == RecordKind.EXTENDED_LINEAR_ADDRESS:
                extension = record.data_to_int() << 16

            elif kind == RecordKind.EXTENDED_SEGMENT_ADDRESS:
                extension = record.data_to_int() << 4

        return memory

    @property
    def variant(self) -> FormatVariant:
        r""":class:`FormatVariant`: Format variant."""

        return self._variant

    def write_to(self, stream: IO, end: AnyBytes = b'\n') -> int:
        r"""Alias of :meth:`serialize`."""

        return self.serialize(stream, end=end)


def decode_stream(
    source: Union[IO, AnyBytes, str],
    variant: FormatVariant = FormatVariant.I32HEX,
    strict: bool = False,
    ignore_after_termination: bool = False,
) -> RecordSequence:
    r"""Decodes records from a stream.

    See Also:
        :meth:`RecordSequence.decode_stream`
    """

    return RecordSequence.decode_stream(source, variant, strict=strict,
                                        ignore_after_termination=ignore_after_termination)
