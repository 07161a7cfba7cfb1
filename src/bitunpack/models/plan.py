from __future__ import annotations
from pathlib import Path
from typing import List, Union

from pydantic import BaseModel, Field

from bitunpack.binary.codecs.field_plan import FieldDescriptor
from .common import FieldKind


class FieldSpec(BaseModel):
    name: str = Field(..., min_length=1)
    bits: int = Field(..., ge=1, le=64)
    kind: FieldKind

    @classmethod
    def parse_token(cls, token: str) -> "FieldSpec":
        """Parse a ``NAME:BITS:KIND`` command-line token."""
        parts = token.split(":")
        if len(parts) != 3:
            raise ValueError(f"bad field spec {token!r}, expected NAME:BITS:KIND")
        name, bits, kind = parts
        return cls.model_validate({"name": name, "bits": bits, "kind": kind})

    def to_descriptor(self) -> FieldDescriptor:
        return FieldDescriptor(self.name, self.bits, self.kind)


class RecordPlan(BaseModel):
    name: str = "record"
    fields: List[FieldSpec] = Field(default_factory=list)

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "RecordPlan":
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))

    def descriptors(self) -> List[FieldDescriptor]:
        return [f.to_descriptor() for f in self.fields]

    @property
    def total_bits(self) -> int:
        return sum(f.bits for f in self.fields)
