"""Bidirectional conversion between dynamic ABI values and native Python data."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import is_address, to_checksum_address

from .errors import BuilderConsumedError, InvalidAbiError
from .values import (
    AddressType,
    AddressValue,
    ArrayType,
    ArrayValue,
    BoolType,
    BoolValue,
    MapType,
    MapValue,
    Param,
    ParamType,
    Token,
    TokenValue,
    TupleType,
    TupleValue,
    UintType,
    UintValue,
)

if TYPE_CHECKING:  # pragma: no cover
    from .abi_manager import FunctionSignature, InterfaceSchema


def _describe(value: Any) -> str:
    return type(value).__name__


# -- primitive decoders ---------------------------------------------------
def unpack_uint(value: TokenValue, size: int) -> int:
    """Decode an unsigned integer whose declared width must equal ``size``."""

    if not isinstance(value, UintValue):
        raise InvalidAbiError(f"expected uint{size}, found {_describe(value)}")
    if value.size != size:
        raise InvalidAbiError(f"expected uint{size}, found uint{value.size}")
    if value.number < 0 or value.number >= 1 << size:
        raise InvalidAbiError(f"value {value.number} does not fit in uint{size}")
    return value.number


def unpack_bool(value: TokenValue) -> bool:
    if not isinstance(value, BoolValue):
        raise InvalidAbiError(f"expected bool, found {_describe(value)}")
    return bool(value.value)


def unpack_address(value: TokenValue) -> str:
    if not isinstance(value, AddressValue):
        raise InvalidAbiError(f"expected address, found {_describe(value)}")
    return _checksum(value.address)


def _checksum(address: Any) -> str:
    if not isinstance(address, str) or not is_address(address):
        raise InvalidAbiError(f"invalid address {address!r}")
    return to_checksum_address(address)


def _parse_uint_key(text: str, size: int) -> int:
    if not (text.isascii() and text.isdigit()):
        raise InvalidAbiError(f"map key {text!r} is not an unsigned integer")
    try:
        number = int(text)
    except ValueError as exc:
        raise InvalidAbiError(f"map key {text!r} is not an unsigned integer") from exc
    if number >= 1 << size:
        raise InvalidAbiError(f"map key {text} does not fit in uint{size}")
    return number


def key_text(key_type: ParamType, key: Any) -> str:
    """Render a native map key in the textual form used by :class:`MapValue`."""

    if isinstance(key_type, UintType):
        return str(_check_uint(key, key_type))
    if isinstance(key_type, AddressType):
        return _checksum(key)
    raise InvalidAbiError(f"unsupported map key type {key_type.signature()}")


def parse_key(key_type: ParamType, text: str) -> Any:
    if isinstance(key_type, UintType):
        return _parse_uint_key(text, key_type.size)
    if isinstance(key_type, AddressType):
        return _checksum(text)
    raise InvalidAbiError(f"unsupported map key type {key_type.signature()}")


# -- decoder strategies ---------------------------------------------------
class Decoder:
    """A typed decoder from one dynamic value to a native value.

    ``accepts`` reports whether a declared parameter type is exactly the one
    this decoder understands; composite decoders use it to validate the
    declared key/value/element types before touching any entry.
    """

    def __call__(self, value: TokenValue) -> Any:  # pragma: no cover - interface
        raise NotImplementedError

    def accepts(self, declared: ParamType) -> bool:  # pragma: no cover - interface
        raise NotImplementedError


class UintDecoder(Decoder):
    def __init__(self, size: int) -> None:
        self.param_type = UintType(size)

    def __call__(self, value: TokenValue) -> int:
        return unpack_uint(value, self.param_type.size)

    def accepts(self, declared: ParamType) -> bool:
        return declared == self.param_type

    def parse_key(self, text: str) -> int:
        return _parse_uint_key(text, self.param_type.size)


class BoolDecoder(Decoder):
    def __call__(self, value: TokenValue) -> bool:
        return unpack_bool(value)

    def accepts(self, declared: ParamType) -> bool:
        return isinstance(declared, BoolType)


class AddressDecoder(Decoder):
    def __call__(self, value: TokenValue) -> str:
        return unpack_address(value)

    def accepts(self, declared: ParamType) -> bool:
        return isinstance(declared, AddressType)

    def parse_key(self, text: str) -> str:
        return _checksum(text)


class ArrayDecoder(Decoder):
    def __init__(self, element: Decoder) -> None:
        self.element = element

    def __call__(self, value: TokenValue) -> List[Any]:
        if not isinstance(value, ArrayValue):
            raise InvalidAbiError(f"expected array, found {_describe(value)}")
        if not self.element.accepts(value.element_type):
            raise InvalidAbiError(f"array of {value.element_type.signature()} does not match the expected element type")
        return [self.element(item) for item in value.values]

    def accepts(self, declared: ParamType) -> bool:
        return isinstance(declared, ArrayType) and self.element.accepts(declared.element)


class MapDecoder(Decoder):
    """Decode a map into a dictionary ordered by key."""

    def __init__(self, key: Decoder, value: Decoder) -> None:
        if not hasattr(key, "parse_key"):
            raise TypeError("map keys must decode from text")
        self.key = key
        self.value = value

    def __call__(self, value: TokenValue) -> Dict[Any, Any]:
        if not isinstance(value, MapValue):
            raise InvalidAbiError(f"expected map, found {_describe(value)}")
        if not self.key.accepts(value.key_type) or not self.value.accepts(value.value_type):
            raise InvalidAbiError(
                f"map declared as {value.param_type.signature()} does not match the expected types"
            )
        decoded: Dict[Any, Any] = {}
        for text, item in value.entries.items():
            key = self.key.parse_key(text)
            if key in decoded:
                raise InvalidAbiError(f"map key {text!r} repeats an earlier key")
            decoded[key] = self.value(item)
        return {key: decoded[key] for key in sorted(decoded)}

    def accepts(self, declared: ParamType) -> bool:
        return (
            isinstance(declared, MapType)
            and self.key.accepts(declared.key)
            and self.value.accepts(declared.value)
        )


class TupleDecoder(Decoder):
    """Decode a tuple into a ``name -> value`` dictionary, matching by name."""

    def __init__(self, fields: Sequence[Tuple[str, Decoder]]) -> None:
        self.fields = list(fields)

    def __call__(self, value: TokenValue) -> Dict[str, Any]:
        if not isinstance(value, TupleValue):
            raise InvalidAbiError(f"expected tuple, found {_describe(value)}")
        return decode_named(value.tokens, self.fields)

    def accepts(self, declared: ParamType) -> bool:
        if not isinstance(declared, TupleType):
            return False
        components = {param.name: param.kind for param in declared.components}
        if set(components) != {name for name, _ in self.fields}:
            return False
        return all(decoder.accepts(components[name]) for name, decoder in self.fields)


class CustomDecoder(Decoder):
    """Wrap a field-level decoding function registered by a record mapping."""

    def __init__(self, func: Callable[[TokenValue], Any], param_type: Optional[ParamType] = None) -> None:
        self.func = func
        self.param_type = param_type

    def __call__(self, value: TokenValue) -> Any:
        if self.param_type is not None and getattr(value, "param_type", None) != self.param_type:
            raise InvalidAbiError(f"expected {self.param_type.signature()}, found {_describe(value)}")
        return self.func(value)

    def accepts(self, declared: ParamType) -> bool:
        return self.param_type is None or declared == self.param_type


def decode_named(tokens: Sequence[Token], fields: Sequence[Tuple[str, Decoder]]) -> Dict[str, Any]:
    """Decode ``tokens`` by name; missing or unexpected names are rejected."""

    by_name: Dict[str, TokenValue] = {}
    for token in tokens:
        if token.name in by_name:
            raise InvalidAbiError(f"duplicate field '{token.name}'")
        by_name[token.name] = token.value
    expected = {name for name, _ in fields}
    missing = sorted(expected - set(by_name))
    if missing:
        raise InvalidAbiError(f"missing field(s): {', '.join(missing)}")
    extra = sorted(set(by_name) - expected)
    if extra:
        raise InvalidAbiError(f"unexpected field(s): {', '.join(extra)}")
    return {name: decoder(by_name[name]) for name, decoder in fields}


def uint(size: int) -> UintDecoder:
    return UintDecoder(size)


def boolean() -> BoolDecoder:
    return BoolDecoder()


def address() -> AddressDecoder:
    return AddressDecoder()


def array_of(element: Decoder) -> ArrayDecoder:
    return ArrayDecoder(element)


def map_of(key: Decoder, value: Decoder) -> MapDecoder:
    return MapDecoder(key, value)


def custom(func: Callable[[TokenValue], Any], param_type: Optional[ParamType] = None) -> CustomDecoder:
    return CustomDecoder(func, param_type)


# -- schema driven conversion ---------------------------------------------
def decoder_for(param_type: ParamType) -> Decoder:
    """Build the decoder matching a declared parameter type."""

    if isinstance(param_type, UintType):
        return UintDecoder(param_type.size)
    if isinstance(param_type, BoolType):
        return BoolDecoder()
    if isinstance(param_type, AddressType):
        return AddressDecoder()
    if isinstance(param_type, MapType):
        return MapDecoder(decoder_for(param_type.key), decoder_for(param_type.value))
    if isinstance(param_type, TupleType):
        return TupleDecoder([(param.name, decoder_for(param.kind)) for param in param_type.components])
    if isinstance(param_type, ArrayType):
        return ArrayDecoder(decoder_for(param_type.element))
    raise TypeError(f"unsupported parameter type {param_type!r}")


def decode_value(param_type: ParamType, value: TokenValue) -> Any:
    return decoder_for(param_type)(value)


def _check_uint(number: Any, param_type: UintType) -> int:
    if isinstance(number, bool) or not isinstance(number, int):
        raise InvalidAbiError(f"uint{param_type.size} expects an int, received {_describe(number)}")
    if number < 0 or number > param_type.max_value:
        raise InvalidAbiError(f"value {number} does not fit in uint{param_type.size}")
    return number


def encode_value(param_type: ParamType, native: Any) -> TokenValue:
    """Convert a native value into the dynamic value of ``param_type``."""

    if isinstance(native, (UintValue, BoolValue, AddressValue, MapValue, TupleValue, ArrayValue)):
        if native.param_type != param_type:
            raise InvalidAbiError(
                f"value of type {native.param_type.signature()} given for {param_type.signature()}"
            )
        return native
    if isinstance(param_type, UintType):
        return UintValue(_check_uint(native, param_type), param_type.size)
    if isinstance(param_type, BoolType):
        if not isinstance(native, bool):
            raise InvalidAbiError(f"bool expects a bool, received {_describe(native)}")
        return BoolValue(native)
    if isinstance(param_type, AddressType):
        return AddressValue(_checksum(native))
    if isinstance(param_type, MapType):
        if not isinstance(native, Mapping):
            raise InvalidAbiError(f"map expects a mapping, received {_describe(native)}")
        entries: Dict[str, TokenValue] = {}
        for key, item in native.items():
            text = key_text(param_type.key, key)
            if text in entries:
                raise InvalidAbiError(f"duplicate map key {text}")
            entries[text] = encode_value(param_type.value, item)
        return MapValue(param_type.key, param_type.value, entries)
    if isinstance(param_type, TupleType):
        return TupleValue(_encode_components(param_type.components, native))
    if isinstance(param_type, ArrayType):
        if isinstance(native, (str, bytes)) or not isinstance(native, Sequence):
            raise InvalidAbiError(f"array expects a sequence, received {_describe(native)}")
        return ArrayValue(param_type.element, tuple(encode_value(param_type.element, item) for item in native))
    raise TypeError(f"unsupported parameter type {param_type!r}")


def _encode_components(components: Sequence[Param], native: Any) -> Tuple[Token, ...]:
    if isinstance(native, Mapping):
        names = [param.name for param in components]
        missing = [name for name in names if name not in native]
        extra = [name for name in native if name not in names]
        if missing or extra:
            raise InvalidAbiError(f"tuple fields mismatch (missing={missing}, unexpected={extra})")
        values = [native[name] for name in names]
    elif isinstance(native, Sequence) and not isinstance(native, (str, bytes)):
        if len(native) != len(components):
            raise InvalidAbiError(f"tuple expects {len(components)} values, received {len(native)}")
        values = list(native)
    else:
        raise InvalidAbiError(f"tuple expects a mapping or sequence, received {_describe(native)}")
    return tuple(Token(param.name, encode_value(param.kind, item)) for param, item in zip(components, values))


# -- wire payloads --------------------------------------------------------
def to_evm(value: TokenValue) -> Any:
    """Lower a dynamic value to the Python shape ``eth_abi`` encodes."""

    if isinstance(value, UintValue):
        return value.number
    if isinstance(value, BoolValue):
        return value.value
    if isinstance(value, AddressValue):
        return _checksum(value.address)
    if isinstance(value, MapValue):
        pairs = [(parse_key(value.key_type, text), to_evm(item)) for text, item in value.entries.items()]
        return sorted(pairs, key=lambda pair: pair[0])
    if isinstance(value, TupleValue):
        return tuple(to_evm(token.value) for token in value.tokens)
    if isinstance(value, ArrayValue):
        return [to_evm(item) for item in value.values]
    raise TypeError(f"unsupported value {value!r}")


def from_evm(param_type: ParamType, raw: Any) -> TokenValue:
    """Lift data decoded by ``eth_abi`` back into a dynamic value."""

    if isinstance(param_type, UintType):
        return UintValue(int(raw), param_type.size)
    if isinstance(param_type, BoolType):
        return BoolValue(bool(raw))
    if isinstance(param_type, AddressType):
        return AddressValue(_checksum(raw))
    if isinstance(param_type, MapType):
        entries: Dict[str, TokenValue] = {}
        for key, item in raw:
            text = key_text(param_type.key, key)
            if text in entries:
                raise InvalidAbiError(f"duplicate map key {text}")
            entries[text] = from_evm(param_type.value, item)
        return MapValue(param_type.key, param_type.value, entries)
    if isinstance(param_type, TupleType):
        return TupleValue(
            tuple(Token(param.name, from_evm(param.kind, item)) for param, item in zip(param_type.components, raw))
        )
    if isinstance(param_type, ArrayType):
        return ArrayValue(param_type.element, tuple(from_evm(param_type.element, item) for item in raw))
    raise TypeError(f"unsupported parameter type {param_type!r}")


def encode_tokens(params: Sequence[Param], tokens: Sequence[Token]) -> bytes:
    """ABI-encode ``tokens`` against ``params`` (no selector)."""

    if len(params) != len(tokens):
        raise InvalidAbiError(f"expected {len(params)} tokens, received {len(tokens)}")
    for param, token in zip(params, tokens):
        if param.name != token.name:
            raise InvalidAbiError(f"expected token '{param.name}', received '{token.name}'")
        if token.value.param_type != param.kind:
            raise InvalidAbiError(
                f"token '{token.name}' is {token.value.param_type.signature()}, "
                f"expected {param.kind.signature()}"
            )
    types = [param.kind.evm_type() for param in params]
    try:
        return abi_encode(types, [to_evm(token.value) for token in tokens])
    except EncodingError as exc:
        raise InvalidAbiError(str(exc)) from exc


def decode_tokens(params: Sequence[Param], data: bytes) -> List[Token]:
    """Decode ABI-encoded ``data`` into named tokens."""

    types = [param.kind.evm_type() for param in params]
    try:
        raw = abi_decode(types, bytes(data))
    except DecodingError as exc:
        raise InvalidAbiError(f"malformed ABI data: {exc}") from exc
    return [Token(param.name, from_evm(param.kind, item)) for param, item in zip(params, raw)]


# -- argument builder -----------------------------------------------------
class MessageBuilder:
    """Collect typed arguments for one function, in declaration order.

    The builder is single use: once :meth:`build` has returned, every further
    call raises :class:`BuilderConsumedError`.
    """

    def __init__(self, schema: "InterfaceSchema", function_name: str) -> None:
        self._function = schema.function(function_name)
        self._tokens: List[Token] = []
        self._built = False

    def _ensure_open(self) -> None:
        if self._built:
            raise BuilderConsumedError(f"builder for '{self._function.name}' was already built")

    def arg(self, value: Any) -> "MessageBuilder":
        self._ensure_open()
        inputs = self._function.inputs
        index = len(self._tokens)
        if index >= len(inputs):
            raise InvalidAbiError(f"'{self._function.name}' takes {len(inputs)} argument(s)")
        param = inputs[index]
        self._tokens.append(Token(param.name, encode_value(param.kind, value)))
        return self

    def args(self, *values: Any) -> "MessageBuilder":
        for value in values:
            self.arg(value)
        return self

    def build(self) -> Tuple["FunctionSignature", Tuple[Token, ...]]:
        self._ensure_open()
        expected = len(self._function.inputs)
        if len(self._tokens) != expected:
            missing = [param.name for param in self._function.inputs[len(self._tokens):]]
            raise InvalidAbiError(f"'{self._function.name}' is missing argument(s): {', '.join(missing)}")
        self._built = True
        return self._function, tuple(self._tokens)


__all__ = [
    "AddressDecoder",
    "ArrayDecoder",
    "BoolDecoder",
    "CustomDecoder",
    "Decoder",
    "MapDecoder",
    "MessageBuilder",
    "TupleDecoder",
    "UintDecoder",
    "address",
    "array_of",
    "boolean",
    "custom",
    "decode_named",
    "decode_tokens",
    "decode_value",
    "decoder_for",
    "encode_tokens",
    "encode_value",
    "from_evm",
    "key_text",
    "map_of",
    "parse_key",
    "to_evm",
    "uint",
    "unpack_address",
    "unpack_bool",
    "unpack_uint",
]
