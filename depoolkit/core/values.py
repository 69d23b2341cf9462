"""Dynamic ABI values and the parameter types that describe them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple, Union

NATIVE_WIDTHS = (8, 16, 32, 64, 128, 256)


# -- parameter types ------------------------------------------------------
@dataclass(frozen=True)
class UintType:
    """Unsigned integer of an explicit bit width."""

    size: int

    def __post_init__(self) -> None:
        if self.size not in range(8, 257, 8):
            raise ValueError(f"unsupported integer width {self.size}")

    @property
    def native_bits(self) -> int:
        """Narrowest native width that holds every value of this type."""

        for bits in NATIVE_WIDTHS:
            if bits >= self.size:
                return bits
        return NATIVE_WIDTHS[-1]

    @property
    def max_value(self) -> int:
        return (1 << self.size) - 1

    def signature(self) -> str:
        return f"uint{self.size}"

    def evm_type(self) -> str:
        return self.signature()


@dataclass(frozen=True)
class BoolType:
    def signature(self) -> str:
        return "bool"

    def evm_type(self) -> str:
        return "bool"


@dataclass(frozen=True)
class AddressType:
    def signature(self) -> str:
        return "address"

    def evm_type(self) -> str:
        return "address"


@dataclass(frozen=True)
class MapType:
    """Ordered map with primitive keys; travels as ``(key,value)[]`` on the wire."""

    key: "ParamType"
    value: "ParamType"

    def __post_init__(self) -> None:
        if not isinstance(self.key, (UintType, AddressType)):
            raise ValueError("map keys must be unsigned integers or addresses")

    def signature(self) -> str:
        return f"map({self.key.signature()},{self.value.signature()})"

    def evm_type(self) -> str:
        return f"({self.key.evm_type()},{self.value.evm_type()})[]"


@dataclass(frozen=True)
class TupleType:
    components: Tuple["Param", ...]

    def signature(self) -> str:
        return "(" + ",".join(param.kind.signature() for param in self.components) + ")"

    def evm_type(self) -> str:
        return "(" + ",".join(param.kind.evm_type() for param in self.components) + ")"


@dataclass(frozen=True)
class ArrayType:
    element: "ParamType"

    def signature(self) -> str:
        return f"{self.element.signature()}[]"

    def evm_type(self) -> str:
        return f"{self.element.evm_type()}[]"


ParamType = Union[UintType, BoolType, AddressType, MapType, TupleType, ArrayType]


@dataclass(frozen=True)
class Param:
    """A named, typed function input, output or tuple component."""

    name: str
    kind: ParamType


# -- values ---------------------------------------------------------------
@dataclass(frozen=True)
class UintValue:
    number: int
    size: int

    @property
    def param_type(self) -> UintType:
        return UintType(self.size)


@dataclass(frozen=True)
class BoolValue:
    value: bool

    @property
    def param_type(self) -> BoolType:
        return BoolType()


@dataclass(frozen=True)
class AddressValue:
    address: str

    @property
    def param_type(self) -> AddressType:
        return AddressType()


@dataclass(frozen=True)
class MapValue:
    """Map entries keyed by the textual form of each key.

    Keys are unique because ``entries`` is a dictionary; insertion order is
    not significant.
    """

    key_type: ParamType
    value_type: ParamType
    entries: Dict[str, "TokenValue"] = field(default_factory=dict, hash=False)

    @property
    def param_type(self) -> MapType:
        return MapType(self.key_type, self.value_type)


@dataclass(frozen=True)
class TupleValue:
    tokens: Tuple["Token", ...]

    @property
    def param_type(self) -> TupleType:
        return TupleType(tuple(Param(token.name, token.value.param_type) for token in self.tokens))

    def by_name(self) -> Dict[str, "TokenValue"]:
        return {token.name: token.value for token in self.tokens}


@dataclass(frozen=True)
class ArrayValue:
    element_type: ParamType
    values: Tuple["TokenValue", ...]

    @property
    def param_type(self) -> ArrayType:
        return ArrayType(self.element_type)


TokenValue = Union[UintValue, BoolValue, AddressValue, MapValue, TupleValue, ArrayValue]


@dataclass(frozen=True)
class Token:
    """One named dynamic value, e.g. a function argument or output."""

    name: str
    value: TokenValue


__all__ = [
    "AddressType",
    "AddressValue",
    "ArrayType",
    "ArrayValue",
    "BoolType",
    "BoolValue",
    "MapType",
    "MapValue",
    "NATIVE_WIDTHS",
    "Param",
    "ParamType",
    "Token",
    "TokenValue",
    "TupleType",
    "TupleValue",
    "UintType",
    "UintValue",
]
