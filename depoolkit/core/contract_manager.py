"""Read-only execution of contract functions against a state snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Protocol, Sequence, Tuple, Union

from .errors import NonZeroResultCodeError, UnknownContractError
from .log_manager import log_event
from .values import Token

if TYPE_CHECKING:  # pragma: no cover
    from .abi_manager import FunctionSignature


@dataclass(frozen=True)
class AccountData:
    """Persisted account state: deployed code and balance in wei."""

    code: bytes
    balance: int = 0


@dataclass(frozen=True)
class Timings:
    """Block the snapshot was taken at."""

    block_number: int
    unix_time: int


@dataclass(frozen=True)
class ExecutionSnapshot:
    """Read-only view of an existing contract used for local execution."""

    address: str
    account: AccountData
    timings: Timings
    last_transaction_id: str


@dataclass(frozen=True)
class ContractNotExists:
    """State returned by a transport for an account without persisted state."""

    address: Optional[str] = None


RawContractState = Union[ContractNotExists, ExecutionSnapshot]


@dataclass(frozen=True)
class ExecutionOutput:
    """Result of a local run; ``tokens`` is ``None`` when the call aborted."""

    result_code: int
    tokens: Optional[Tuple[Token, ...]] = None


class LocalExecutor(Protocol):
    def run_local(
        self,
        snapshot: ExecutionSnapshot,
        function: "FunctionSignature",
        inputs: Sequence[Token],
    ) -> ExecutionOutput:
        ...


class ContractTransport(Protocol):
    def get_contract_state(self, address: str) -> RawContractState:
        ...


def invoke_readonly(
    state: RawContractState,
    function: "FunctionSignature",
    inputs: Sequence[Token],
    executor: LocalExecutor,
) -> List[Token]:
    """Run ``function`` locally against ``state`` and return its output tokens.

    Raises :class:`UnknownContractError` when the contract does not exist and
    :class:`NonZeroResultCodeError` when execution produced no output. The
    snapshot is never modified.
    """

    if isinstance(state, ContractNotExists):
        log_event("contract.invoke", contract=state.address, function=function.name, ok=False, error="unknown_contract")
        raise UnknownContractError(state.address)
    output = executor.run_local(state, function, tuple(inputs))
    if output.tokens is None:
        log_event(
            "contract.invoke",
            contract=state.address,
            function=function.name,
            ok=False,
            error="non_zero_result_code",
            result_code=output.result_code,
        )
        raise NonZeroResultCodeError(output.result_code)
    log_event(
        "contract.invoke",
        contract=state.address,
        function=function.name,
        ok=True,
        block=state.timings.block_number,
        outputs=len(output.tokens),
    )
    return list(output.tokens)


__all__ = [
    "AccountData",
    "ContractNotExists",
    "ContractTransport",
    "ExecutionOutput",
    "ExecutionSnapshot",
    "LocalExecutor",
    "RawContractState",
    "Timings",
    "invoke_readonly",
]
