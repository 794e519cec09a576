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

r"""Streaming Intel HEX writer.

The :class:`StreamingFileWriter` turns an unbounded byte stream into a
sequence of fixed-size *data* records, as if the bytes were laid out from
address zero onwards.
The record offset field reaches 64 KiB only, so *extension* records are
emitted before a *data* record as needed (I16HEX and I32HEX only):

* I32HEX: an *Extended Linear Address* holding bits 31:16 of the address,
  whenever these change;
* I16HEX: an *Extended Segment Address* whenever the record would not fit
  within the current segment. The new segment starts at the record address
  rounded down to 16, so that no record wraps around its segment.

Closing the writer flushes any partial record (zero padded) and emits the
*End Of File* record.
"""

import io
import logging
from types import TracebackType
from typing import IO
from typing import Optional
from typing import Type

from .base import AnyBytes
from .errors import RecordCountOverflowError
from .errors import SinkError
from .errors import WriteAfterCloseError
from .grammar import SEGMENT_SIZE
from .grammar import FormatVariant
from .record import MAX_DATA_SIZE
from .record import Record

_logger = logging.getLogger(__name__)


class StreamingFileWriter:
    r"""Writes a byte stream as Intel HEX records.

    The data record at index ``n`` covers the addresses starting from
    ``n * record_size``; its address field holds the offset from the base
    set by the last extension record (the lower 16 bits for I32HEX).

    When used as a context manager, an exception raised within the block
    aborts the writer: nothing more is emitted, so that the output lacks
    the *End Of File* record and cannot pass for a complete file.

    Not thread-safe: concurrent calls must be serialized by the caller.

    Args:
        sink (bytes IO):
            Byte stream receiving the encoded records.

        record_size (int):
            Number of data bytes of each data record, within 1 and 255.
            If ``None``, :attr:`DEFAULT_RECORD_SIZE` is used.

        variant (:class:`FormatVariant`):
            Format variant.
            If ``None``, :attr:`DEFAULT_VARIANT` is used.

        start_address (int):
            If not ``None``, a *start address* record is emitted before the
            *End Of File* record. Not supported by I8HEX.

        close_sink (bool):
            Closes `sink` upon :meth:`close` or :meth:`abort`, if it supports
            closing.

    Raises:
        ValueError: Invalid argument.

    Examples:
        >>> import io
        >>> from ihexrec import StreamingFileWriter, FormatVariant
        >>> sink = io.BytesIO()
        >>> writer = StreamingFileWriter(sink, 2, FormatVariant.I8HEX, close_sink=False)
        >>> writer.write(b'\x01\x02\x03')
        3
        >>> writer.close()
        >>> print(sink.getvalue().decode(), end='')
        :020000000102FD
        :020002000300FD
        :00000001FF
    """

    DEFAULT_RECORD_SIZE: int = 16
    r"""Default number of data bytes per record."""

    DEFAULT_VARIANT: FormatVariant = FormatVariant.I32HEX
    r"""Default format variant, with the widest address range."""

    LINE_END: bytes = b'\n'
    r"""Record line terminator."""

    def __enter__(self) -> 'StreamingFileWriter':

        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:

        if exc_type is None:
            self.close()
        else:
            self.abort()

    def __init__(
        self,
        sink: IO,
        record_size: Optional[int] = None,
        variant: Optional[FormatVariant] = None,
        start_address: Optional[int] = None,
        close_sink: bool = True,
    ):

        if record_size is None:
            record_size = self.DEFAULT_RECORD_SIZE
        record_size = record_size.__index__()
        if not 1 <= record_size <= MAX_DATA_SIZE:
            raise ValueError(f'record size must be within 1 and {MAX_DATA_SIZE}: {record_size}')

        if variant is None:
            variant = self.DEFAULT_VARIANT
        variant = FormatVariant(variant)

        if start_address is not None:
            if variant == FormatVariant.I8HEX:
                raise ValueError('start address not supported by I8HEX')
            start_address = start_address.__index__()
            if not 0 <= start_address <= 0xFFFFFFFF:
                raise ValueError('start address overflow')

        self._sink: IO = sink
        self._record_size: int = record_size
        self._variant: FormatVariant = variant
        self._start_address: Optional[int] = start_address
        self._close_sink: bool = close_sink

        self._buffer: bytearray = bytearray(record_size)
        self._buffer_index: int = 0
        self._record_count: int = 0
        self._extension: int = 0
        self._bytes_written: int = 0
        self._call_mark: int = 0
        self._closed: bool = False

    def abort(self) -> None:
        r"""Closes the writer without emitting anything more.

        Buffered bytes are discarded and no *End Of File* record is written.
        The sink is closed as per :meth:`close`.
        Further calls do nothing.

        Raises:
            SinkError: The sink failed closing.
        """

        if self._closed:
            return

        self._closed = True
        self._buffer_index = 0

        _logger.debug('aborted I%dHEX writer: %d data records, %d bytes',
                      int(self._variant), self._record_count, self._bytes_written)

        if self._close_sink:
            self._release_sink()

    @property
    def buffer_index(self) -> int:
        r"""int: Number of buffered bytes not yet emitted."""

        return self._buffer_index

    @property
    def bytes_written(self) -> int:
        r"""int: Total number of encoded bytes accepted by the sink."""

        return self._bytes_written

    def close(self) -> None:
        r"""Closes the writer.

        On the first call, it emits the buffered partial record (zero padded),
        the optional *start address* record, and the *End Of File* record,
        then closes the sink (if requested and supported).
        Further calls do nothing.

        The writer is marked as closed even if a failure is raised.

        Raises:
            SinkError: The sink failed writing or closing.
            RecordCountOverflowError: The partial record does not fit the
                address space.
        """

        if self._closed:
            return

        self._closed = True
        self._call_mark = self._bytes_written

        try:
            if self._buffer_index:
                size = self._record_size
                index = self._buffer_index
                self._buffer[index:] = bytes(size - index)
                self._buffer_index = 0
                self._emit_data_record(bytes(self._buffer))

            start_address = self._start_address
            if start_address is not None:
                if self._variant == FormatVariant.I32HEX:
                    record = Record.create_start_linear_address(start_address)
                else:
                    record = Record.create_start_segment_address(start_address)
                self._write_record(record)

            self._write_record(Record.create_end_of_file())

        finally:
            if self._close_sink:
                self._release_sink()

        _logger.debug('closed I%dHEX writer: %d data records, %d bytes',
                      int(self._variant), self._record_count, self._bytes_written)

    @property
    def closed(self) -> bool:
        r"""bool: The writer was closed."""

        return self._closed

    def _emit_data_record(self, data: bytes) -> None:

        variant = self._variant
        address = self._record_count * self._record_size
        if address + len(data) > variant.address_space:
            raise RecordCountOverflowError(variant)

        if variant == FormatVariant.I32HEX:
            extension = address >> 16
            if extension != self._extension:
                self._emit_extension(Record.create_extended_linear_address(extension), address)
                self._extension = extension
            offset = address & 0xFFFF

        elif variant == FormatVariant.I16HEX:
            offset = address - (self._extension << 4)
            if offset + len(data) > SEGMENT_SIZE:
                extension = address >> 4
                self._emit_extension(Record.create_extended_segment_address(extension), address)
                self._extension = extension
                offset = address & 0xF

        else:
            offset = address

        self._write_record(Record.create_data(offset, data))
        self._record_count += 1

    def _emit_extension(self, record: Record, address: int) -> None:

        _logger.debug('address extension at 0x%08X: %s', address, record.data.hex().upper())
        self._write_record(record)

    def flush(self) -> None:
        r"""Flushes the sink, if supported.

        Buffered bytes of a partial record are not emitted; they are only
        emitted upon :meth:`close`.
        """

        flush = getattr(self._sink, 'flush', None)
        if callable(flush):
            try:
                flush()
            except OSError as exc:
                raise SinkError(f'cannot flush sink: {exc}', 0) from exc

    @property
    def record_count(self) -> int:
        r"""int: Number of data records emitted so far."""

        return self._record_count

    @property
    def record_size(self) -> int:
        r"""int: Number of data bytes of each data record."""

        return self._record_size

    def _release_sink(self) -> None:

        close = getattr(self._sink, 'close', None)
        if callable(close):
            try:
                close()
            except OSError as exc:
                raise SinkError(f'cannot close sink: {exc}', 0) from exc

    @property
    def variant(self) -> FormatVariant:
        r""":class:`FormatVariant`: Format variant."""

        return self._variant

    def write(self, data: AnyBytes) -> int:
        r"""Writes bytes.

        Bytes are buffered; each time the buffer fills up to
        :attr:`record_size`, a data record is emitted.

        Args:
            data (bytes):
                Bytes to write.

        Returns:
            int: Number of bytes consumed, i.e. the length of `data`.

        Raises:
            WriteAfterCloseError: The writer was closed.
            RecordCountOverflowError: The address space of :attr:`variant`
                is exhausted.
            SinkError: The sink failed writing; its ``written`` attribute
                tells the number of encoded bytes accepted within this call.
                The bytes of the failed record are dropped, and
                :attr:`record_count` only counts records the sink accepted.
        """

        if self._closed:
            raise WriteAfterCloseError()

        self._call_mark = self._bytes_written
        view = memoryview(data).cast('B')
        buffer = self._buffer
        record_size = self._record_size
        total = len(view)
        offset = 0

        while offset < total:
            index = self._buffer_index
            chunk = min(record_size - index, total - offset)
            buffer[index:(index + chunk)] = view[offset:(offset + chunk)]
            offset += chunk
            index += chunk

            if index >= record_size:
                self._buffer_index = 0
                self._emit_data_record(bytes(buffer))
            else:
                self._buffer_index = index

        return total

    def _write_record(self, record: Record) -> None:

        bytestr = record.to_bytestr(end=self.LINE_END)
        try:
            self._sink.write(bytestr)
        except OSError as exc:
            written = self._bytes_written - self._call_mark
            raise SinkError(f'cannot write record: {exc}', written) from exc
        self._bytes_written += len(bytestr)


def encode_bytes(
    data: AnyBytes,
    record_size: Optional[int] = None,
    variant: Optional[FormatVariant] = None,
    start_address: Optional[int] = None,
) -> bytes:
    r"""Encodes a whole byte string into Intel HEX.

    Args:
        data (bytes):
            Bytes to encode, laid out from address zero.

        record_size (int):
            See :class:`StreamingFileWriter`.

        variant (:class:`FormatVariant`):
            See :class:`StreamingFileWriter`.

        start_address (int):
            See :class:`StreamingFileWriter`.

    Returns:
        bytes: Encoded records.

    Examples:
        >>> encode_bytes(b'\xAA', record_size=1)
        b':01000000AA56\n:00000001FF\n'
    """

    stream = io.BytesIO()
    with StreamingFileWriter(stream, record_size, variant, start_address, close_sink=False) as writer:
        writer.write(data)
    return stream.getvalue()
