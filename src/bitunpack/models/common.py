from __future__ import annotations
from enum import Enum


class FieldKind(str, Enum):
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    S8 = "s8"
    S16 = "s16"
    S32 = "s32"
    S64 = "s64"

    @property
    def bits(self) -> int:
        return int(self.value[1:])

    @property
    def signed(self) -> bool:
        return self.value.startswith("s")
