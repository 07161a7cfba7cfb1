from __future__ import annotations

from bitunpack.models.common import FieldKind


def truncate(raw: int, width: int) -> int:
    """Keep the low `width` bits of `raw`."""
    return raw & ((1 << width) - 1)


def as_signed(v: int, width: int) -> int:
    """Interpret a `width`-bit unsigned pattern as signed two's complement."""
    return v - (1 << width) if (v >> (width - 1)) & 1 else v


def coerce(raw: int, kind: FieldKind) -> int:
    """
    Cast an extracted bit pattern into `kind`, like an unsigned-to-integer cast.

    The pattern is narrowed or widened to `kind.bits`; for signed kinds the
    sign bit is bit `kind.bits - 1` of the destination, NOT the top bit of the
    field. A 4-bit 0b1111 lands in s16 as 15, while an 8-bit 0xFF lands in
    s8 as -1 because there the field and destination widths coincide.
    """
    v = truncate(raw, kind.bits)
    return as_signed(v, kind.bits) if kind.signed else v
