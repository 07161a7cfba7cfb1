from __future__ import annotations
import logging
from enum import Enum
from typing import MutableMapping, Optional, Sequence, Tuple

from bitunpack.binary.codecs.bitreader import MAX_BITS, BitCursor
from bitunpack.binary.codecs.field_plan import FieldDescriptor
from bitunpack.binary.scale import coerce
from bitunpack.errors import (
    BitUnpackError,
    FieldReadError,
    InsufficientDataError,
    InvalidWidthSpec,
    RangeError,
    UnsupportedTypeError,
    WalkerStateError,
)
from bitunpack.models.common import FieldKind

log = logging.getLogger(__name__)


class WalkState(str, Enum):
    READY = "ready"
    READING = "reading"
    FAILED = "failed"
    DONE = "done"


def check_descriptor(fd: FieldDescriptor) -> Tuple[int, FieldKind]:
    """Validate width and kind of one descriptor; returns (bit_width, kind)."""
    width = fd.bit_width
    # bool is an int subclass but never a width
    if isinstance(width, bool) or not isinstance(width, int) or not (0 < width <= MAX_BITS):
        raise InvalidWidthSpec(fd.name, width)
    try:
        kind = FieldKind(fd.kind)
    except ValueError:
        raise UnsupportedTypeError(fd.name, fd.kind) from None
    return width, kind


class FieldWalker:
    """
    Walks an ordered descriptor list over one packed buffer.

    Each step reads the next field at the running bit cursor, coerces it to the
    descriptor's kind and stores it in `dest`. The first error moves the walker
    to FAILED; values stored before it are left in place.
    """

    def __init__(
        self,
        data: bytes | bytearray | memoryview,
        fields: Sequence[FieldDescriptor],
        dest: Optional[MutableMapping[str, int]] = None,
    ):
        self._cur = BitCursor(data)
        self.fields = tuple(fields)
        self.dest: MutableMapping[str, int] = {} if dest is None else dest
        self.index = 0
        self.state = WalkState.READY if self.fields else WalkState.DONE

    @property
    def cursor(self) -> int:
        return self._cur.tell()

    @property
    def finished(self) -> bool:
        return self.state in (WalkState.DONE, WalkState.FAILED)

    def step(self) -> int:
        """Decode the next field and return its coerced value."""
        if self.finished:
            raise WalkerStateError(self.state)
        self.state = WalkState.READING
        fd = self.fields[self.index]
        try:
            value = self._read(fd)
        except BitUnpackError:
            self.state = WalkState.FAILED
            raise

        self.dest[fd.name] = value
        self.index += 1
        if self.index == len(self.fields):
            self.state = WalkState.DONE
        return value

    def run(self) -> MutableMapping[str, int]:
        while not self.finished:
            self.step()
        if self.state is WalkState.FAILED:
            raise WalkerStateError(self.state)
        return self.dest

    def _read(self, fd: FieldDescriptor) -> int:
        width, kind = check_descriptor(fd)

        available = self._cur.remaining()
        if available < width:
            raise InsufficientDataError(fd.name, needed=width, available=available)

        start = self._cur.tell()
        try:
            raw = self._cur.bits(width)
        except RangeError as e:
            raise FieldReadError(fd.name, e) from e

        value = coerce(raw, kind)
        log.debug("field %s: bits %d..%d raw=%#x -> %s %d", fd.name, start, start + width - 1, raw, kind.value, value)
        return value


def decode(
    data: bytes | bytearray | memoryview,
    fields: Sequence[FieldDescriptor],
    dest: Optional[MutableMapping[str, int]] = None,
) -> MutableMapping[str, int]:
    """
    Decode `data` field by field in `fields` order.

    Values are written into `dest` (a new dict if omitted), which is returned.
    Raises on the first invalid descriptor or when the buffer runs out of bits.
    """
    walker = FieldWalker(data, fields, dest)
    out = walker.run()
    log.debug("decoded %d fields, %d of %d bits consumed", len(walker.fields), walker.cursor, len(data) * 8)
    return out
