from __future__ import annotations

from bitunpack.errors import RangeError

MAX_BITS = 64


def read_bits(data: bytes | bytearray | memoryview, bit_offset: int, bit_count: int) -> int:
    """
    Read `bit_count` bits starting `bit_offset` bits into `data`.

    Bits are taken MSB-first within each byte and the first byte first, so the
    earliest bit in the stream ends up as the most significant bit of the result.
    Reads may start and end mid-byte and span any number of bytes.
    """
    available = len(data) * 8
    if not (0 < bit_count <= MAX_BITS):
        raise RangeError(
            f"cannot read {bit_count} bits at once (1..{MAX_BITS})",
            bit_offset=bit_offset, bit_count=bit_count, available=available,
        )
    if bit_offset < 0:
        raise RangeError(
            f"negative bit offset {bit_offset}",
            bit_offset=bit_offset, bit_count=bit_count, available=available,
        )
    if bit_offset + bit_count > available:
        raise RangeError(
            f"bit underrun: need {bit_count} at bit {bit_offset}, buffer holds {available}",
            bit_offset=bit_offset, bit_count=bit_count, available=available,
        )

    result = 0
    remaining = bit_count
    offset = bit_offset
    while remaining > 0:
        byte_pos, bit_pos = divmod(offset, 8)
        if byte_pos >= len(data):
            raise RangeError(
                "not enough data to read bits",
                bit_offset=bit_offset, bit_count=bit_count, available=available,
            )

        n = min(8 - bit_pos, remaining)
        chunk = (data[byte_pos] >> (8 - bit_pos - n)) & ((1 << n) - 1)
        result = (result << n) | chunk

        offset += n
        remaining -= n
    return result


class BitCursor:
    __slots__ = ("buf", "pos")

    def __init__(self, data: bytes | bytearray | memoryview):
        self.buf = memoryview(data)
        self.pos = 0

    def size(self) -> int: return len(self.buf) * 8
    def remaining(self) -> int: return self.size() - self.pos
    def tell(self) -> int: return self.pos

    def seek(self, pos: int) -> None:
        if not (0 <= pos <= self.size()):
            raise RangeError(f"seek to bit {pos} out of bounds", bit_offset=pos, bit_count=0, available=self.size())
        self.pos = pos

    # bits (MSB-first)
    def bits(self, n: int) -> int:
        val = read_bits(self.buf, self.pos, n)
        self.pos += n
        return val

    def byte_align(self) -> None:
        self.pos = -(-self.pos // 8) * 8
