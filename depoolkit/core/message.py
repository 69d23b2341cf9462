"""Outbound contract-call messages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from eth_utils import is_address, to_checksum_address

from .abi_manager import InterfaceSchema
from .codec import MessageBuilder
from .errors import InvalidAbiError
from .log_manager import log_event

MAX_AMOUNT = (1 << 64) - 1


@dataclass(frozen=True)
class OutboundMessage:
    """A message ready to be handed to a transport for submission.

    ``source`` stays ``None``: the sender is bound later, when the message
    is wrapped and signed outside this package.
    """

    destination: str
    amount: int
    body: bytes
    bounce: bool = False
    source: Optional[str] = None

    @property
    def selector(self) -> bytes:
        return self.body[:4]


def checked_amount(value: Any, label: str = "amount") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAbiError(f"{label} must be an integer")
    if value < 0 or value > MAX_AMOUNT:
        raise InvalidAbiError(f"{label} {value} is out of range")
    return value


def build_call(
    destination: str,
    function_name: str,
    amount: int,
    *args: Any,
    schema: InterfaceSchema,
) -> OutboundMessage:
    """Encode a call to ``function_name`` attached to ``amount``.

    The payload always starts with the function selector. No network I/O
    happens here.
    """

    if not isinstance(destination, str) or not is_address(destination):
        raise InvalidAbiError(f"invalid destination address {destination!r}")
    function, inputs = MessageBuilder(schema, function_name).args(*args).build()
    body = function.encode_input(inputs)
    message = OutboundMessage(
        destination=to_checksum_address(destination),
        amount=checked_amount(amount),
        body=body,
        bounce=False,
    )
    log_event(
        "message.build",
        interface=schema.name,
        function=function.name,
        destination=message.destination,
        amount=message.amount,
        length=len(body),
    )
    return message


__all__ = ["MAX_AMOUNT", "OutboundMessage", "build_call", "checked_amount"]
