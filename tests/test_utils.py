import pytest

from ihexrec.utils import *


def test_hexlify():
    assert hexlify(b'') == b''
    assert hexlify(b'\x00\x0F\xAB') == b'000FAB'
    assert hexlify(b'\x00\x0F\xAB', upper=False) == b'000fab'
    assert hexlify(bytearray(b'\xFF')) == b'FF'
    assert hexlify(memoryview(b'\x12\x34')) == b'1234'


def test_is_hex():
    assert is_hex(b'') is True
    assert is_hex(b'0123456789ABCDEFabcdef') is True
    assert is_hex(b'0x12') is False
    assert is_hex(b'12 34') is False
    assert is_hex(b'G') is False
    assert is_hex(bytearray(b'aa')) is True


def test_parse_int_doctest():
    assert parse_int('0x1234') == 0x1234
    assert parse_int('-0xABk') == -0xAB * 1024
    assert parse_int(None) is None
    assert parse_int(123) == 123


def test_parse_int_pass():
    vector = [
        ('0', 0),
        ('01', 1),
        ('0o17', 0o17),
        ('0b101', 5),
        ('1234', 1234),
        ('1234h', 0x1234),
        ('  0x10  ', 16),
        ('2k', 2048),
        ('1m', 1 << 20),
        ('1MB', 1000000),
        ('1KiB', 1024),
        ('-1', -1),
        (5.5, 5),
    ]
    for value, expected in vector:
        assert parse_int(value) == expected, value


def test_parse_int_fail():
    for value in ('', 'x', '0x', '0b12h', '1 2', '1kk'):
        with pytest.raises(ValueError):
            parse_int(value)


def test_unhexlify():
    assert unhexlify(b'') == b''
    assert unhexlify(b'000FAB') == b'\x00\x0F\xAB'
    assert unhexlify(b'000fab') == b'\x00\x0F\xAB'


def test_unhexlify_fail():
    with pytest.raises(ValueError):
        unhexlify(b'ABC')
    with pytest.raises(ValueError):
        unhexlify(b'GG')
