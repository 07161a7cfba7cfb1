import pytest

from bitunpack.binary.codecs.bitreader import BitCursor, read_bits
from bitunpack.errors import RangeError


def test_full_byte():
    assert read_bits(bytes([0b10101010]), 0, 8) == 0b10101010


def test_sub_byte_windows():
    data = bytes([0b11011010])
    assert read_bits(data, 0, 4) == 0b1101
    assert read_bits(data, 4, 4) == 0b1010
    assert read_bits(data, 3, 1) == 1
    assert read_bits(data, 2, 1) == 0


def test_cross_byte_boundary():
    # last two bits of byte 0 ("10") followed by first three of byte 1 ("101")
    assert read_bits(bytes([0b11011010, 0b10101100]), 6, 5) == 0b10101


def test_unaligned_64_bit_read_spans_nine_bytes():
    data = bytes.fromhex("0123456789abcdef0f")
    assert read_bits(data, 4, 64) == 0x123456789ABCDEF0


def test_first_bits_are_most_significant():
    data = bytes([0x80, 0x01])
    assert read_bits(data, 0, 16) == 0x8001
    assert read_bits(data, 0, 1) == 1
    assert read_bits(data, 15, 1) == 1


@pytest.mark.parametrize("count", [0, -1, 65, 128])
def test_bit_count_outside_1_to_64(count):
    with pytest.raises(RangeError) as ei:
        read_bits(bytes(16), 0, count)
    assert ei.value.bit_count == count


def test_negative_offset():
    with pytest.raises(RangeError):
        read_bits(b"\xff", -1, 1)


def test_read_past_end():
    with pytest.raises(RangeError) as ei:
        read_bits(b"\xff\xff", 12, 5)
    assert ei.value.available == 16
    # exactly the last bits is fine
    assert read_bits(b"\xff\xff", 12, 4) == 0xF


def test_empty_buffer():
    with pytest.raises(RangeError):
        read_bits(b"", 0, 1)


def test_cursor_advances_and_aligns():
    cur = BitCursor(bytes([0b11011010, 0b10101100]))
    assert cur.bits(3) == 0b110
    assert cur.tell() == 3
    assert cur.remaining() == 13
    cur.byte_align()
    assert cur.tell() == 8
    assert cur.bits(8) == 0b10101100
    assert cur.remaining() == 0
    with pytest.raises(RangeError):
        cur.bits(1)


def test_cursor_seek_bounds():
    cur = BitCursor(b"\x00")
    cur.seek(8)
    assert cur.remaining() == 0
    with pytest.raises(RangeError) as ei:
        cur.seek(9)
    assert ei.value.available == 8
    with pytest.raises(RangeError):
        cur.seek(-1)
    assert cur.tell() == 8
