import io

import pytest

import ihexrec.base as _base
from ihexrec.errors import ByteCountMismatchError
from ihexrec.errors import ChecksumMismatchError
from ihexrec.errors import InvalidHexDigitsError
from ihexrec.errors import InvalidRecordKindError
from ihexrec.errors import InvalidStartCharacterError
from ihexrec.errors import ParseError
from ihexrec.errors import RecordTooLongError
from ihexrec.errors import TruncatedRecordError
from ihexrec.record import EOF_CHECKSUM
from ihexrec.record import MAX_LINE_LENGTH
from ihexrec.record import Record
from ihexrec.record import RecordKind
from ihexrec.record import compute_checksum
from ihexrec.record import decode
from ihexrec.record import encode

DATA = RecordKind.DATA
EOF = RecordKind.END_OF_FILE
ESA = RecordKind.EXTENDED_SEGMENT_ADDRESS
SSA = RecordKind.START_SEGMENT_ADDRESS
ELA = RecordKind.EXTENDED_LINEAR_ADDRESS
SLA = RecordKind.START_LINEAR_ADDRESS


@pytest.fixture
def fake_token_color_codes(monkeypatch):
    fake = {key: (b'[%s]' % key.encode()) for key in _base.TOKEN_COLOR_CODES}
    monkeypatch.setattr(_base, 'TOKEN_COLOR_CODES', fake)
    yield fake


class TestRecordKind:

    def test_enum(self):
        assert RecordKind.DATA == 0
        assert RecordKind.END_OF_FILE == 1
        assert RecordKind.EXTENDED_SEGMENT_ADDRESS == 2
        assert RecordKind.START_SEGMENT_ADDRESS == 3
        assert RecordKind.EXTENDED_LINEAR_ADDRESS == 4
        assert RecordKind.START_LINEAR_ADDRESS == 5

    def test_is_data(self):
        assert DATA.is_data() is True
        assert EOF.is_data() is False
        assert ESA.is_data() is False
        assert SSA.is_data() is False
        assert ELA.is_data() is False
        assert SLA.is_data() is False

    def test_is_eof(self):
        assert DATA.is_eof() is False
        assert EOF.is_eof() is True
        assert ESA.is_eof() is False
        assert SSA.is_eof() is False
        assert ELA.is_eof() is False
        assert SLA.is_eof() is False

    def test_is_extension(self):
        assert DATA.is_extension() is False
        assert EOF.is_extension() is False
        assert ESA.is_extension() is True
        assert SSA.is_extension() is False
        assert ELA.is_extension() is True
        assert SLA.is_extension() is False

    def test_is_start(self):
        assert DATA.is_start() is False
        assert EOF.is_start() is False
        assert ESA.is_start() is False
        assert SSA.is_start() is True
        assert ELA.is_start() is False
        assert SLA.is_start() is True


class TestComputeChecksum:

    def test_two_complement(self):
        assert compute_checksum(b'\xAA', DATA) == 0x56
        assert compute_checksum(b'\x01\x02', DATA) == 0xFD
        assert compute_checksum(b'\x00', DATA) == 0x00
        assert compute_checksum(b'', DATA) == 0x00
        assert compute_checksum(b'\xFF\x01', DATA) == 0x00
        assert compute_checksum(b'\x12\x34', ELA) == 0xBA

    def test_eof_fixed(self):
        assert compute_checksum(b'', EOF) == EOF_CHECKSUM == 0xFF

    def test_sum_zero_modulo(self):
        kinds = [DATA, ESA, SSA, ELA, SLA, 0x42]
        for size in range(256):
            data = bytes((size * 7 + i * 13) & 0xFF for i in range(size))
            for kind in kinds:
                checksum = compute_checksum(data, kind)
                assert 0 <= checksum <= 0xFF
                assert (sum(data) + checksum) & 0xFF == 0

    def test_large_sum(self):
        data = b'\xFF' * 255
        checksum = compute_checksum(data, DATA)
        assert (sum(data) + checksum) & 0xFF == 0

    def test_deterministic(self):
        data = b'abc'
        assert compute_checksum(data, DATA) == compute_checksum(data, DATA)


class TestRecord:

    def test___init___defaults(self):
        record = Record()
        assert record.kind is DATA
        assert record.address == 0
        assert record.data == b''
        assert record.count == 0
        assert record.checksum == 0

    def test___init___unknown_kind(self):
        record = Record(0x42, 0x1234, b'abc')
        assert record.kind == 0x42
        assert not isinstance(record.kind, RecordKind)

    def test___init___known_kind_int(self):
        record = Record(4, 0, b'\x00\x01')
        assert record.kind is ELA

    def test___init___raises(self):
        with pytest.raises(ValueError, match='address overflow'):
            Record(DATA, 0x10000)
        with pytest.raises(ValueError, match='address overflow'):
            Record(DATA, -1)
        with pytest.raises(ValueError, match='data size overflow'):
            Record(DATA, 0, bytes(256))
        with pytest.raises(ValueError, match='kind overflow'):
            Record(0x100)

    def test___eq__(self):
        assert Record() == Record(DATA, 0, b'')
        assert Record(DATA, 1, b'a') == Record(DATA, 1, bytearray(b'a'))
        assert Record(DATA, 1, b'a') != Record(DATA, 2, b'a')
        assert Record(DATA, 1, b'a') != Record(DATA, 1, b'b')
        assert Record(DATA, 1, b'') != Record(EOF, 1, b'')
        assert Record() != 0
        assert not (Record() == 'x')

    def test___repr__(self):
        record = Record(DATA, 0x10, b'\xAA')
        text = repr(record)
        assert text == "Record(kind=<RecordKind.DATA: 0>, address=0x0010, data=b'\\xaa')"

    def test___str__(self):
        assert str(Record(DATA, 0x10, b'\xAA')) == ':01001000AA56\n'

    def test___bytes__(self):
        assert bytes(Record(DATA, 0x10, b'\xAA')) == b':01001000AA56\n'

    def test_checksum_follows_data(self):
        record = Record(DATA, 0, b'\x01')
        assert record.checksum == 0xFF
        record.data = b'\x02'
        assert record.checksum == 0xFE

    def test_copy(self):
        record = Record(DATA, 0x1234, b'abc')
        copied = record.copy()
        assert copied is not record
        assert copied == record

    def test_create_data(self):
        record = Record.create_data(0x1234, b'abc')
        assert record.kind is DATA
        assert record.address == 0x1234
        assert record.data == b'abc'

    def test_create_data_raises(self):
        with pytest.raises(ValueError, match='address overflow'):
            Record.create_data(0x10000, b'abc')
        with pytest.raises(ValueError, match='data size overflow'):
            Record.create_data(0, bytes(256))

    def test_create_end_of_file(self):
        record = Record.create_end_of_file()
        assert record.kind is EOF
        assert record.address == 0
        assert record.data == b''
        assert record.checksum == 0xFF

    def test_create_extended_linear_address(self):
        record = Record.create_extended_linear_address(0x1234)
        assert record.kind is ELA
        assert record.data == b'\x12\x34'
        assert str(record) == ':020000041234BA\n'

    def test_create_extended_linear_address_raises(self):
        with pytest.raises(ValueError, match='extension overflow'):
            Record.create_extended_linear_address(0x10000)
        with pytest.raises(ValueError, match='extension overflow'):
            Record.create_extended_linear_address(-1)

    def test_create_extended_segment_address(self):
        record = Record.create_extended_segment_address(0x1000)
        assert record.kind is ESA
        assert str(record) == ':020000021000F0\n'

    def test_create_extended_segment_address_raises(self):
        with pytest.raises(ValueError, match='extension overflow'):
            Record.create_extended_segment_address(0x10000)

    def test_create_start_linear_address(self):
        record = Record.create_start_linear_address(0x12345678)
        assert record.kind is SLA
        assert str(record) == ':0400000512345678EC\n'

    def test_create_start_segment_address(self):
        record = Record.create_start_segment_address(0x12345678)
        assert record.kind is SSA
        assert str(record) == ':0400000312345678EC\n'

    def test_create_start_raises(self):
        with pytest.raises(ValueError, match='address overflow'):
            Record.create_start_linear_address(0x100000000)
        with pytest.raises(ValueError, match='address overflow'):
            Record.create_start_segment_address(-1)

    def test_data_to_int(self):
        record = Record.create_extended_linear_address(0xABCD)
        assert record.data_to_int() == 0xABCD
        assert record.data_to_int(byteorder='little') == 0xCDAB

    def test_print(self):
        stream = io.BytesIO()
        Record(DATA, 0x10, b'\xAA').print(stream=stream)
        assert stream.getvalue() == b':01001000AA56\n'

    def test_print_color(self, fake_token_color_codes):
        stream = io.BytesIO()
        Record(DATA, 0x10, b'\x01\x02\x03').print(stream=stream, color=True)
        expected = (b'[<][begin]:[count]03[address]0010[kind]00'
                    b'[data]01[dataalt]02[data]03[checksum]FA[end]\n[>]')
        assert stream.getvalue() == expected

    def test_serialize(self):
        stream = io.BytesIO()
        size = Record.create_end_of_file().serialize(stream)
        assert stream.getvalue() == b':00000001FF\n'
        assert size == 12

    def test_to_bytestr(self):
        assert Record(DATA, 0x10, b'\xAA').to_bytestr() == b':01001000AA56\n'
        assert Record(DATA, 0x10, b'\xAA').to_bytestr(end=b'\r\n') == b':01001000AA56\r\n'
        assert Record(DATA, 0xFFFF, b'\xab\xcd').to_bytestr(end=b'') == b':02FFFF00ABCD88'

    def test_to_tokens(self):
        tokens = Record(DATA, 0x1234, b'abc').to_tokens()
        assert tokens == {
            'begin': b':',
            'count': b'03',
            'address': b'1234',
            'kind': b'00',
            'data': b'616263',
            'checksum': b'DA',
            'end': b'\n',
        }


class TestEncode:

    def test_data(self):
        assert encode(Record(DATA, 0x0010, b'\xAA')) == ':01001000AA56\n'

    def test_end_of_file(self):
        assert encode(Record(EOF, 0, b'')) == ':00000001FF\n'

    def test_uppercase(self):
        assert encode(Record(DATA, 0xABCD, b'\xef')) == ':01ABCD00EF11\n'

    def test_max_length(self):
        line = encode(Record(DATA, 0, bytes(255)))
        assert len(line.rstrip('\n')) == MAX_LINE_LENGTH == 521


class TestDecode:

    def test_data(self):
        record = decode(':01001000AA56\n')
        assert record == Record(DATA, 0x0010, b'\xAA')
        assert record.kind is DATA

    def test_bytes(self):
        assert decode(b':01001000AA56\n') == Record(DATA, 0x0010, b'\xAA')
        assert decode(bytearray(b':01001000AA56')) == Record(DATA, 0x0010, b'\xAA')
        assert decode(memoryview(b':01001000AA56')) == Record(DATA, 0x0010, b'\xAA')

    def test_line_terminators(self):
        expected = Record(DATA, 0x0010, b'\xAA')
        assert decode(':01001000AA56') == expected
        assert decode(':01001000AA56\n') == expected
        assert decode(':01001000AA56\r\n') == expected

    def test_lowercase(self):
        assert decode(':01abcd00ef11') == Record(DATA, 0xABCD, b'\xEF')

    def test_end_of_file(self):
        record = decode(':00000001FF')
        assert record.kind is EOF
        assert record.data == b''

    def test_extensions(self):
        assert decode(':020000041234BA') == Record.create_extended_linear_address(0x1234)
        assert decode(':020000021000F0') == Record.create_extended_segment_address(0x1000)
        assert decode(':0400000512345678EC') == Record.create_start_linear_address(0x12345678)
        assert decode(':0400000312345678EC') == Record.create_start_segment_address(0x12345678)

    def test_max_length(self):
        line = ':FF000000' + ('01' * 255) + '01'
        record = decode(line)
        assert record.data == b'\x01' * 255

    def test_raises_empty(self):
        with pytest.raises(TruncatedRecordError) as info:
            decode('')
        assert info.value.length == 0
        with pytest.raises(TruncatedRecordError):
            decode('\n')

    def test_raises_start_character(self):
        with pytest.raises(InvalidStartCharacterError) as info:
            decode('x00000001FF')
        assert info.value.found == 'x'
        with pytest.raises(InvalidStartCharacterError):
            decode(' :00000001FF')
        with pytest.raises(InvalidStartCharacterError):
            decode('é:00000001FF')

    def test_raises_too_long(self):
        line = ':FF000000' + ('00' * 256) + '00'
        with pytest.raises(RecordTooLongError) as info:
            decode(line)
        assert info.value.length == 523
        assert info.value.maximum == 521

    def test_raises_truncated(self):
        with pytest.raises(TruncatedRecordError) as info:
            decode(':0000000')
        assert info.value.length == 8
        with pytest.raises(TruncatedRecordError):
            decode(':')

    def test_raises_byte_count_mismatch(self):
        with pytest.raises(ByteCountMismatchError) as info:
            decode(':02001000AA56')
        assert info.value.expected == 2
        assert info.value.actual == 1

        with pytest.raises(ByteCountMismatchError) as info:
            decode(':00001000AA56')
        assert info.value.expected == 0
        assert info.value.actual == 1

    def test_raises_hex_digits(self):
        vector = [
            (':0G001000AA56', 'count'),
            (':01001X00AA56', 'address'),
            (':010010+0AA56', 'kind'),
            (':01001000GG56', 'data'),
            (':01001000AAA56', 'data'),
            (':01001000AAZZ', 'checksum'),
            (':01001000 A56', 'data'),
        ]
        for line, field in vector:
            with pytest.raises(InvalidHexDigitsError) as info:
                decode(line)
            assert info.value.field == field

    def test_raises_checksum(self):
        with pytest.raises(ChecksumMismatchError) as info:
            decode(':01001000AA57')
        assert info.value.expected == 0x56
        assert info.value.actual == 0x57

    def test_raises_checksum_eof(self):
        with pytest.raises(ChecksumMismatchError) as info:
            decode(':00000001FE')
        assert info.value.expected == 0xFF
        assert info.value.actual == 0xFE

    def test_raises_checksum_covers_data_only(self):
        # header bytes do not take part in the checksum
        with pytest.raises(ChecksumMismatchError) as info:
            decode(':0B0010006164647265737320676170A7')
        assert info.value.expected == 0xC2
        assert decode(':0B0010006164647265737320676170C2').data == b'address gap'

    def test_unknown_kind(self):
        record = decode(':01000042AA56')
        assert record.kind == 0x42
        assert record.data == b'\xAA'

    def test_unknown_kind_strict(self):
        with pytest.raises(InvalidRecordKindError) as info:
            decode(':01000042AA56', strict=True)
        assert info.value.kind == 0x42
        assert info.value.variant is None
        assert decode(':01001000AA56', strict=True).kind is DATA

    def test_errors_are_parse_errors(self):
        for line in ['', 'x', ':0000000', ':02001000AA56', ':01001000AA57']:
            with pytest.raises(ParseError):
                decode(line)

    def test_parse_alias(self):
        assert Record.parse(':01001000AA56') == decode(':01001000AA56')

    def test_roundtrip(self):
        records = [
            Record(DATA, 0x0000, b''),
            Record(DATA, 0xFFFF, bytes(range(255))),
            Record(EOF, 0, b''),
            Record.create_extended_linear_address(0xFFFF),
            Record.create_extended_segment_address(0xF000),
            Record.create_start_linear_address(0xCAFEBABE),
            Record.create_start_segment_address(0x12345678),
            Record(0x7F, 0x5555, b'xyz'),
        ]
        for record in records:
            assert decode(encode(record)) == record
