"""Declarative mapping from ABI tuples to typed records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from .codec import Decoder, decode_named
from .errors import InvalidAbiError
from .values import ParamType, Token, TokenValue, TupleType, TupleValue

R = TypeVar("R")


@dataclass(frozen=True)
class AbiField:
    """One record attribute, the decoder for it and its ABI name.

    ``name`` defaults to ``attr`` when the ABI spells the field the same way.
    """

    attr: str
    decoder: Decoder
    name: Optional[str] = None

    @property
    def abi_name(self) -> str:
        return self.name or self.attr


class RecordMapping(Decoder, Generic[R]):
    """A field table that turns named tokens into instances of ``cls``.

    Decoders are resolved when the mapping is defined, so decoding a record
    is a lookup by name followed by the registered decoder for each field.
    A mapping is itself a :class:`~depoolkit.core.codec.Decoder`, which lets
    it appear as the value of a map or the element of an array.
    """

    def __init__(self, cls: Type[R], fields: Sequence[AbiField]) -> None:
        names = [field.abi_name for field in fields]
        if len(names) != len(set(names)):
            raise ValueError(f"duplicate ABI field names in mapping for {cls.__name__}")
        self.cls = cls
        self.fields: Tuple[AbiField, ...] = tuple(fields)
        self._decoders: List[Tuple[str, Decoder]] = [(field.abi_name, field.decoder) for field in fields]

    def unpack_tokens(self, tokens: Sequence[Token]) -> R:
        """Decode a flat list of output tokens."""

        values = decode_named(tokens, self._decoders)
        return self.cls(**{field.attr: values[field.abi_name] for field in self.fields})

    def unpack(self, value: TokenValue) -> R:
        """Decode one nested tuple value."""

        if not isinstance(value, TupleValue):
            raise InvalidAbiError(f"{self.cls.__name__} expects a tuple, found {type(value).__name__}")
        return self.unpack_tokens(value.tokens)

    def __call__(self, value: TokenValue) -> R:
        return self.unpack(value)

    def accepts(self, declared: ParamType) -> bool:
        if not isinstance(declared, TupleType):
            return False
        components = {param.name: param.kind for param in declared.components}
        if set(components) != {name for name, _ in self._decoders}:
            return False
        return all(decoder.accepts(components[name]) for name, decoder in self._decoders)

    def __repr__(self) -> str:
        return f"RecordMapping({self.cls.__name__}, {[field.abi_name for field in self.fields]})"


def record(mapping: RecordMapping[Any]) -> RecordMapping[Any]:
    """Use ``mapping`` as a nested field decoder."""

    return mapping


__all__ = ["AbiField", "RecordMapping", "record"]
