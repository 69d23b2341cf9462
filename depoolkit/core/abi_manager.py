"""Interface schemas and the registry that loads them once per name."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from web3 import Web3

from ..abi import embedded_sources
from .codec import decode_tokens, encode_tokens
from .errors import InvalidAbiError, SchemaLoadError, UnknownFunctionError
from .log_manager import log_event
from .values import (
    AddressType,
    ArrayType,
    BoolType,
    MapType,
    Param,
    ParamType,
    Token,
    TupleType,
    UintType,
)

SELECTOR_LENGTH = 4

SchemaSource = Callable[[], Any]


# -- type parsing ---------------------------------------------------------
def parse_type(type_name: str, components: Optional[Sequence[Dict[str, Any]]] = None) -> ParamType:
    """Parse an ABI type string such as ``map(uint64,tuple)`` or ``address[]``."""

    text = type_name.strip()
    if text.endswith("[]"):
        return ArrayType(parse_type(text[:-2], components))
    if text.startswith("map(") and text.endswith(")"):
        key, sep, value = text[4:-1].partition(",")
        if not sep:
            raise ValueError(f"map type '{type_name}' needs a key and a value type")
        return MapType(parse_type(key), parse_type(value, components))
    if text == "tuple":
        if not components:
            raise ValueError("tuple types require components")
        return TupleType(tuple(parse_param(entry) for entry in components))
    if text == "bool":
        return BoolType()
    if text == "address":
        return AddressType()
    if text.startswith("uint") and text[4:].isdigit():
        return UintType(int(text[4:]))
    raise ValueError(f"unsupported ABI type '{type_name}'")


def parse_param(entry: Mapping[str, Any]) -> Param:
    if not isinstance(entry, Mapping):
        raise ValueError("ABI parameters must be JSON objects")
    name = str(entry.get("name", "")).strip()
    if not name:
        raise ValueError("ABI parameters must be named")
    return Param(name=name, kind=parse_type(str(entry.get("type", "")), entry.get("components")))


# -- schema objects -------------------------------------------------------
@dataclass(frozen=True)
class FunctionSignature:
    """One callable contract function with its typed inputs and outputs."""

    name: str
    inputs: Tuple[Param, ...]
    outputs: Tuple[Param, ...]

    def signature(self) -> str:
        return f"{self.name}({','.join(param.kind.signature() for param in self.inputs)})"

    @property
    def selector(self) -> bytes:
        return bytes(Web3.keccak(text=self.signature())[:SELECTOR_LENGTH])

    def encode_input(self, tokens: Sequence[Token]) -> bytes:
        """Return the call payload: selector followed by the encoded arguments."""

        return self.selector + encode_tokens(self.inputs, tokens)

    def decode_input(self, payload: bytes) -> List[Token]:
        data = bytes(payload)
        if data[:SELECTOR_LENGTH] != self.selector:
            raise InvalidAbiError(f"payload does not start with the selector of '{self.name}'")
        return decode_tokens(self.inputs, data[SELECTOR_LENGTH:])

    def decode_output(self, data: bytes) -> List[Token]:
        return decode_tokens(self.outputs, data)


@dataclass(frozen=True)
class InterfaceSchema:
    """Immutable table of the functions exposed by one contract interface."""

    name: str
    functions: Mapping[str, FunctionSignature] = field(hash=False)
    version: Optional[str] = None

    def function(self, name: str) -> FunctionSignature:
        try:
            return self.functions[name]
        except KeyError:
            raise UnknownFunctionError(name, self.name) from None

    def function_names(self) -> List[str]:
        return sorted(self.functions)

    @classmethod
    def from_payload(cls, name: str, payload: Any) -> "InterfaceSchema":
        """Build a schema from a decoded ABI JSON document.

        Accepts the ``{"functions": [...]}`` layout as well as a bare list of
        ABI entries (optionally wrapped in ``{"abi": [...]}``), where only
        entries of type ``function`` are considered.
        """

        version: Optional[str] = None
        if isinstance(payload, Mapping) and "functions" in payload:
            entries = payload["functions"]
            raw_version = payload.get("version", payload.get("ABI version"))
            version = str(raw_version) if raw_version is not None else None
        elif isinstance(payload, Mapping) and "abi" in payload:
            entries = [entry for entry in _normalise_abi(payload["abi"]) if entry.get("type") == "function"]
        else:
            entries = [entry for entry in _normalise_abi(payload) if entry.get("type") == "function"]
        functions: Dict[str, FunctionSignature] = {}
        for entry in _normalise_abi(entries):
            function_name = str(entry.get("name", "")).strip()
            if not function_name:
                raise ValueError("ABI functions must be named")
            if function_name in functions:
                raise ValueError(f"function '{function_name}' is declared twice")
            functions[function_name] = FunctionSignature(
                name=function_name,
                inputs=tuple(parse_param(item) for item in entry.get("inputs", [])),
                outputs=tuple(parse_param(item) for item in entry.get("outputs", [])),
            )
        return cls(name=name, functions=dict(functions), version=version)


def _normalise_abi(entries: Any) -> List[Dict[str, Any]]:
    if isinstance(entries, list):
        normalised: List[Dict[str, Any]] = []
        for entry in entries:
            if isinstance(entry, dict):
                normalised.append(dict(entry))
        if not normalised:
            raise ValueError("ABI definition is empty or invalid")
        return normalised
    raise ValueError("ABI definition must be a list of JSON objects")


# -- registry -------------------------------------------------------------
class AbiRegistry:
    """Lazily load interface schemas, at most once per name.

    Schemas are parsed on first access under a lock and shared read-only
    afterwards. Independent registries never share state.
    """

    def __init__(self, sources: Optional[Mapping[str, SchemaSource]] = None) -> None:
        self._sources: Dict[str, SchemaSource] = dict(embedded_sources() if sources is None else sources)
        self._schemas: Dict[str, InterfaceSchema] = {}
        self._lock = threading.Lock()

    def register(self, name: str, source: SchemaSource) -> None:
        with self._lock:
            if name in self._schemas:
                raise ValueError(f"ABI interface '{name}' is already loaded")
            self._sources[name] = source

    def names(self) -> List[str]:
        return sorted(self._sources)

    def interface(self, name: str) -> InterfaceSchema:
        schema = self._schemas.get(name)
        if schema is not None:
            return schema
        with self._lock:
            schema = self._schemas.get(name)
            if schema is None:
                schema = self._load(name)
                self._schemas[name] = schema
        return schema

    def function(self, interface: str, name: str) -> FunctionSignature:
        return self.interface(interface).function(name)

    def _load(self, name: str) -> InterfaceSchema:
        try:
            source = self._sources[name]
        except KeyError:
            raise KeyError(f"unknown ABI interface '{name}'") from None
        try:
            schema = InterfaceSchema.from_payload(name, source())
        except (OSError, TypeError, ValueError) as exc:
            raise SchemaLoadError(f"embedded ABI '{name}' is malformed: {exc}") from exc
        log_event("abi.load", interface=name, functions=len(schema.functions))
        return schema


_REGISTRY: Optional[AbiRegistry] = None
_REGISTRY_LOCK = threading.Lock()


def get_registry() -> AbiRegistry:
    """Return the shared registry used when callers do not inject one."""

    global _REGISTRY
    if _REGISTRY is None:
        with _REGISTRY_LOCK:
            if _REGISTRY is None:
                _REGISTRY = AbiRegistry()
    return _REGISTRY


__all__ = [
    "AbiRegistry",
    "FunctionSignature",
    "InterfaceSchema",
    "SELECTOR_LENGTH",
    "get_registry",
    "parse_param",
    "parse_type",
]
