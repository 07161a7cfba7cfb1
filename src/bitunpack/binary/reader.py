from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterator, Optional, Sequence, Union

from .codecs.field_plan import FieldDescriptor, record_size
from .codecs.field_walker import check_descriptor, decode

BytesLike = Union[str, Path, bytes, bytearray, memoryview]

log = logging.getLogger(__name__)


# -----------------------------
# Helpers
# -----------------------------

def _load_bytes(inp: BytesLike) -> bytes:
    if isinstance(inp, (bytes, bytearray, memoryview)):
        return bytes(inp)
    p = Path(str(inp))
    return p.read_bytes()


# -----------------------------
# Single record
# -----------------------------

def unpack_bytes(data: BytesLike, fields: Sequence[FieldDescriptor]) -> Dict[str, int]:
    """Decode one record from raw bytes or from a file path."""
    raw = _load_bytes(data)
    return dict(decode(raw, fields))


# -----------------------------
# Streaming iterator
# -----------------------------

def iter_records(
    data: BytesLike,
    fields: Sequence[FieldDescriptor],
    *,
    max_records: Optional[int] = None,
) -> Iterator[Dict[str, int]]:
    """
    Stream back-to-back records from one buffer.

    Every record starts on a byte boundary and spans the descriptor bits
    rounded up to whole bytes. A trailing partial record raises
    InsufficientDataError naming the first field that does not fit.
    """
    fields = tuple(fields)
    for fd in fields:
        check_descriptor(fd)

    raw = _load_bytes(data)
    size = record_size(fields)
    if size == 0:
        return

    view = memoryview(raw)
    emitted = 0
    pos = 0
    while pos < len(raw):
        if max_records is not None and emitted >= max_records:
            return
        chunk = view[pos:pos + size]
        if len(chunk) < size:
            log.debug("trailing %d bytes at offset %d, record needs %d", len(chunk), pos, size)
        # a short chunk fails inside decode() with the offending field
        yield dict(decode(chunk, fields))
        emitted += 1
        pos += size
