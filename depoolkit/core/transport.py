"""Web3-backed collaborators: state retrieval and local execution."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from eth_utils import to_checksum_address
from web3 import Web3
from web3.exceptions import ContractLogicError

from .contract_manager import (
    AccountData,
    ContractNotExists,
    ExecutionOutput,
    ExecutionSnapshot,
    RawContractState,
    Timings,
)
from .log_manager import get_logger, log_event
from .values import Token

if TYPE_CHECKING:  # pragma: no cover
    from .abi_manager import FunctionSignature

REVERTED_RESULT_CODE = 1


class Web3Transport:
    """Fetch contract state from a node through a :class:`~web3.Web3` client."""

    def __init__(self, web3: Web3) -> None:
        self._web3 = web3

    def get_contract_state(self, address: str) -> RawContractState:
        account = to_checksum_address(address)
        block = self._web3.eth.get_block("latest")
        number = int(block["number"])
        code = bytes(self._web3.eth.get_code(account, block_identifier=number))
        if not code:
            log_event("transport.state", contract=account, exists=False, block=number)
            return ContractNotExists(account)
        balance = int(self._web3.eth.get_balance(account, block_identifier=number))
        snapshot = ExecutionSnapshot(
            address=account,
            account=AccountData(code=code, balance=balance),
            timings=Timings(block_number=number, unix_time=int(block["timestamp"])),
            last_transaction_id=Web3.to_hex(block["hash"]),
        )
        log_event("transport.state", contract=account, exists=True, block=number)
        return snapshot


class Web3Executor:
    """Run read-only calls with ``eth_call`` pinned to the snapshot block."""

    def __init__(self, web3: Web3) -> None:
        self._web3 = web3

    def run_local(
        self,
        snapshot: ExecutionSnapshot,
        function: "FunctionSignature",
        inputs: Sequence[Token],
    ) -> ExecutionOutput:
        payload = function.encode_input(inputs)
        request: Any = {"to": snapshot.address, "data": Web3.to_hex(payload)}
        try:
            raw = self._web3.eth.call(request, block_identifier=snapshot.timings.block_number)
        except ContractLogicError as exc:
            get_logger().warning("call to %s.%s reverted: %s", snapshot.address, function.name, exc)
            return ExecutionOutput(result_code=REVERTED_RESULT_CODE, tokens=None)
        if not raw and function.outputs:
            return ExecutionOutput(result_code=REVERTED_RESULT_CODE, tokens=None)
        return ExecutionOutput(result_code=0, tokens=tuple(function.decode_output(bytes(raw))))


__all__ = ["REVERTED_RESULT_CODE", "Web3Executor", "Web3Transport"]
