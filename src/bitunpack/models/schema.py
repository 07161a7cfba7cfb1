from __future__ import annotations
from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Iterator, List, Type, TypeVar, Union

from pydantic import AliasChoices, BaseModel
from pydantic.fields import FieldInfo

from bitunpack.binary.codecs.field_plan import FieldDescriptor
from bitunpack.binary.codecs.field_walker import decode
from bitunpack.binary.reader import BytesLike, _load_bytes
from bitunpack.errors import InvalidDestination
from .common import FieldKind

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class Bits:
    """
    Marks a model field as packed, e.g. ``version: Annotated[int, Bits(4, "u8")]``.
    Fields without this marker take no bits and are left alone by `unpack`.
    """
    width: int
    kind: Union[FieldKind, str]


def _model_class(model: object) -> Type[BaseModel]:
    cls = model if isinstance(model, type) else type(model)
    if not issubclass(cls, BaseModel):
        raise InvalidDestination(model)
    return cls


def descriptors_for(model: object) -> List[FieldDescriptor]:
    """Bit-tagged fields of a model class or instance, in declaration order."""
    out: List[FieldDescriptor] = []
    for name, info in _model_class(model).model_fields.items():
        tag = next((m for m in info.metadata if isinstance(m, Bits)), None)
        if tag is None:
            continue
        out.append(FieldDescriptor(name, tag.width, tag.kind))
    return out


class _AttrSink(MutableMapping):
    """Mapping view that writes decoded values straight onto a model instance."""

    def __init__(self, target: BaseModel):
        self._target = target
        self._names: List[str] = []

    def __setitem__(self, key: str, value: int) -> None:
        setattr(self._target, key, value)
        if key not in self._names:
            self._names.append(key)

    def __getitem__(self, key: str) -> int:
        if key not in self._names:
            raise KeyError(key)
        return getattr(self._target, key)

    def __delitem__(self, key: str) -> None:
        raise TypeError("decoded fields cannot be removed")

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)


def _input_key(name: str, info: FieldInfo) -> str:
    """Key that `model_validate` reads the field from."""
    va = info.validation_alias
    if isinstance(va, AliasChoices):
        va = next((c for c in va.choices if isinstance(c, str)), None)
    if isinstance(va, str):
        return va
    return info.alias or name


def unpack(data: BytesLike, dest: Union[Type[M], M]) -> M:
    """
    Decode `data` into a pydantic model.

    `dest` is either a model class, in which case a new instance is validated
    from the decoded values (untagged fields need defaults), or a mutable model
    instance whose tagged fields are overwritten in place. On error, fields
    decoded before the failing one keep their new values.
    """
    if dest is None:
        raise InvalidDestination(dest, "destination is None")

    fields = descriptors_for(dest)
    model_fields = _model_class(dest).model_fields
    raw = _load_bytes(data)

    if isinstance(dest, type):
        values = decode(raw, fields)
        return dest.model_validate(
            {_input_key(name, model_fields[name]): v for name, v in values.items()}
        )

    if dest.model_config.get("frozen", False):
        raise InvalidDestination(dest, "model instance is frozen")
    for fd in fields:
        if model_fields[fd.name].frozen:
            raise InvalidDestination(dest, f"field {fd.name} is frozen")
    decode(raw, fields, _AttrSink(dest))
    return dest
