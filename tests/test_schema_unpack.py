from typing import Annotated

import pytest
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from bitunpack.errors import InsufficientDataError, InvalidDestination, InvalidWidthSpec
from bitunpack.models.common import FieldKind
from bitunpack.models.schema import Bits, descriptors_for, unpack


class Header(BaseModel):
    version: Annotated[int, Bits(4, "u8")] = 0
    flags: Annotated[int, Bits(4, "u8")] = 0
    note: str = ""                      # untagged, takes no bits
    length: Annotated[int, Bits(6, FieldKind.U16)] = 0
    tail: Annotated[int, Bits(2, "u8")] = 0


class Mixed(BaseModel):
    u8: Annotated[int, Bits(8, FieldKind.U8)]
    i16: Annotated[int, Bits(8, FieldKind.S16)]
    u32: Annotated[int, Bits(8, FieldKind.U32)]


class Locked(BaseModel):
    model_config = ConfigDict(frozen=True)
    a: Annotated[int, Bits(8, "u8")] = 0


class Aliased(BaseModel):
    version: Annotated[int, Bits(4, "u8"), Field(alias="Version")] = 0
    flags: Annotated[int, Bits(4, "u8"), Field(validation_alias=AliasChoices("Flags", "f"))] = 0


class PinnedField(BaseModel):
    a: Annotated[int, Bits(4, "u8")] = 0
    b: Annotated[int, Bits(4, "u8"), Field(frozen=True)] = 0


DATA = bytes([0b11011010, 0b10101100])


def test_descriptors_follow_declaration_order_and_skip_untagged():
    fds = descriptors_for(Header)
    assert [(f.name, f.bit_width, f.kind) for f in fds] == [
        ("version", 4, "u8"),
        ("flags", 4, "u8"),
        ("length", 6, FieldKind.U16),
        ("tail", 2, "u8"),
    ]
    assert descriptors_for(Header()) == fds


def test_unpack_into_class():
    h = unpack(DATA, Header)
    assert isinstance(h, Header)
    assert (h.version, h.flags, h.length, h.tail) == (13, 10, 43, 0)
    assert h.note == ""


def test_unpack_required_fields():
    m = unpack(bytes([0b11011010, 0b10101100, 0b11111111]), Mixed)
    assert (m.u8, m.i16, m.u32) == (218, 172, 255)


def test_unpack_in_place_keeps_untagged_fields():
    h = Header(note="keep me", version=1)
    out = unpack(DATA, h)
    assert out is h
    assert h.version == 13
    assert h.note == "keep me"


def test_in_place_failure_keeps_earlier_fields():
    h = Header()
    with pytest.raises(InsufficientDataError) as ei:
        unpack(bytes([0b11011010]), h)
    assert ei.value.field_name == "length"
    assert (h.version, h.flags, h.length) == (13, 10, 0)


def test_unpack_from_file(tmp_path):
    p = tmp_path / "frame.bin"
    p.write_bytes(DATA)
    assert unpack(str(p), Header).length == 43


@pytest.mark.parametrize("dest", [None, {}, 42, dict, object()])
def test_invalid_destination(dest):
    with pytest.raises(InvalidDestination):
        unpack(DATA, dest)


def test_frozen_instance_is_rejected_but_class_is_fine():
    with pytest.raises(InvalidDestination):
        unpack(b"\x07", Locked())
    assert unpack(b"\x07", Locked).a == 7


def test_bad_width_in_schema():
    class Bad(BaseModel):
        x: Annotated[int, Bits(70, "u64")] = 0

    with pytest.raises(InvalidWidthSpec):
        unpack(bytes(16), Bad)


def test_model_without_tags_decodes_nothing():
    class Plain(BaseModel):
        name: str = "x"

    assert descriptors_for(Plain) == []
    assert unpack(b"", Plain).name == "x"


def test_aliased_fields_keep_decoded_values():
    m = unpack(b"\xda", Aliased)
    assert (m.version, m.flags) == (13, 10)
    # in place writes by attribute name, aliases do not matter
    inst = Aliased()
    unpack(b"\x21", inst)
    assert (inst.version, inst.flags) == (2, 1)


def test_frozen_field_is_rejected_before_any_write():
    m = PinnedField()
    with pytest.raises(InvalidDestination) as ei:
        unpack(b"\xf0", m)
    assert "field b is frozen" in str(ei.value)
    assert (m.a, m.b) == (0, 0)
    # a fresh instance can still be built from the class
    assert unpack(b"\xf0", PinnedField).a == 15


def test_bits_marker_needs_a_kind():
    with pytest.raises(TypeError):
        Bits(4)
