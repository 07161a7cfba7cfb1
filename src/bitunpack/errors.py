from __future__ import annotations


class BitUnpackError(ValueError):
    pass


class InvalidDestination(BitUnpackError):
    def __init__(self, dest: object, reason: str = "expected a pydantic model class or a mutable model instance"):
        self.dest = dest
        super().__init__(f"invalid destination {type(dest).__name__}: {reason}")


class InvalidWidthSpec(BitUnpackError):
    def __init__(self, field_name: str, width: object):
        self.field_name = field_name
        self.width = width
        super().__init__(f"invalid bit width {width!r} for field {field_name} (expected int 1..64)")


class UnsupportedTypeError(BitUnpackError):
    def __init__(self, field_name: str, kind: object):
        self.field_name = field_name
        self.kind = kind
        super().__init__(f"unsupported field kind {kind!r} for field {field_name}")


class InsufficientDataError(BitUnpackError):
    def __init__(self, field_name: str, needed: int, available: int):
        self.field_name = field_name
        self.needed = needed
        self.available = available
        super().__init__(
            f"not enough bits to read field {field_name} (needed {needed}, available {available})"
        )


class RangeError(BitUnpackError):
    """Raised by the bit reader when a read falls outside the buffer or 1..64 bits."""

    def __init__(self, message: str, *, bit_offset: int, bit_count: int, available: int):
        self.bit_offset = bit_offset
        self.bit_count = bit_count
        self.available = available
        super().__init__(message)


class FieldReadError(BitUnpackError):
    def __init__(self, field_name: str, cause: Exception):
        self.field_name = field_name
        super().__init__(f"error reading bits for field {field_name}: {cause}")


class WalkerStateError(BitUnpackError):
    def __init__(self, state: object):
        self.state = state
        super().__init__(f"walker is {getattr(state, 'value', state)} and cannot read further fields")
