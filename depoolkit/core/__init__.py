"""Core ABI marshalling layer powering depoolkit."""

from .abi_manager import AbiRegistry, FunctionSignature, InterfaceSchema, get_registry
from .codec import MessageBuilder, decode_value, encode_value
from .contract_manager import (
    AccountData,
    ContractNotExists,
    ExecutionOutput,
    ExecutionSnapshot,
    Timings,
    invoke_readonly,
)
from .errors import (
    AbiError,
    BuilderConsumedError,
    InvalidAbiError,
    NonZeroResultCodeError,
    SchemaLoadError,
    UnknownContractError,
    UnknownFunctionError,
)
from .log_manager import log_event
from .message import OutboundMessage, build_call
from .records import AbiField, RecordMapping

__all__ = [
    "AbiError",
    "AbiField",
    "AbiRegistry",
    "AccountData",
    "BuilderConsumedError",
    "ContractNotExists",
    "ExecutionOutput",
    "ExecutionSnapshot",
    "FunctionSignature",
    "InterfaceSchema",
    "InvalidAbiError",
    "MessageBuilder",
    "NonZeroResultCodeError",
    "OutboundMessage",
    "RecordMapping",
    "SchemaLoadError",
    "Timings",
    "UnknownContractError",
    "UnknownFunctionError",
    "build_call",
    "decode_value",
    "encode_value",
    "get_registry",
    "invoke_readonly",
    "log_event",
]
