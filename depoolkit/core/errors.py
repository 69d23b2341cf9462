"""Error kinds raised by the ABI marshalling core."""

from __future__ import annotations

from typing import Optional


class AbiError(Exception):
    """Base class for every recoverable failure raised by depoolkit."""


class UnknownContractError(AbiError):
    """The target account has no persisted state."""

    def __init__(self, address: Optional[str] = None) -> None:
        message = "Unknown contract"
        if address:
            message = f"Unknown contract {address}"
        super().__init__(message)
        self.address = address


class NonZeroResultCodeError(AbiError):
    """Local execution finished without producing output tokens."""

    def __init__(self, result_code: Optional[int] = None) -> None:
        message = "Non zero result code"
        if result_code is not None:
            message = f"Non zero result code: {result_code}"
        super().__init__(message)
        self.result_code = result_code


class UnknownFunctionError(AbiError):
    """A function name is absent from the interface schema."""

    def __init__(self, function: str, interface: Optional[str] = None) -> None:
        where = f" in '{interface}'" if interface else ""
        super().__init__(f"Function '{function}' not found{where}")
        self.function = function
        self.interface = interface


class InvalidAbiError(AbiError, ValueError):
    """A value shape does not agree with its declared ABI type."""


class BuilderConsumedError(AbiError):
    """An argument builder was used again after ``build()``."""


class SchemaLoadError(RuntimeError):
    """An embedded ABI definition could not be parsed.

    This signals a packaging defect rather than a runtime condition, so it
    deliberately sits outside :class:`AbiError`.
    """


__all__ = [
    "AbiError",
    "BuilderConsumedError",
    "InvalidAbiError",
    "NonZeroResultCodeError",
    "SchemaLoadError",
    "UnknownContractError",
    "UnknownFunctionError",
]
