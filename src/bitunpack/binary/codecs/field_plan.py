from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable

from bitunpack.models.common import FieldKind


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    bit_width: int
    kind: FieldKind | str


def total_bits(fields: Iterable[FieldDescriptor]) -> int:
    return sum(f.bit_width for f in fields)


def record_size(fields: Iterable[FieldDescriptor]) -> int:
    """Bytes occupied by one record, rounded up to a whole byte."""
    return -(-total_bits(fields) // 8)
