import pytest

from arscdecode.errors import DecodeError
from arscdecode.table_type import Region


def test_two_letters():
    region = Region(0x65, 0x6E)
    assert not region.is_packed()
    assert region.to_string() == "en"


def test_empty_code():
    assert Region(0, 0).to_string() == "\x00\x00"


def test_packed_bit_arithmetic():
    # low = 1001 1001, high = 0100 0110
    region = Region(0x99, 0x46)
    assert region.is_packed()
    assert region.to_bytes() == bytes([0x06, 0x0A, 0x06])
    assert region.to_string() == "\x06\x0a\x06"


def test_packed_code_is_not_letter_normalized():
    # "fil" as aapt packs it: every letter is stored as its distance to 'a'
    region = Region(0xAD, 0x05)
    assert region.to_bytes() == bytes([5, 8, 11])
    assert bytes(c + ord("a") for c in region.to_bytes()) == b"fil"


def test_invalid_utf8():
    with pytest.raises(DecodeError):
        Region(0x65, 0xFF).to_string()
