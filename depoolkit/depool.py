"""Staking pool operations: typed getters and outbound stake messages."""

from __future__ import annotations

from typing import Optional

from .abi import DEPOOL_V3
from .core.abi_manager import AbiRegistry, InterfaceSchema, get_registry
from .core.codec import MessageBuilder
from .core.contract_manager import ContractTransport, LocalExecutor, RawContractState, invoke_readonly
from .core.message import OutboundMessage, build_call, checked_amount
from .models import ParticipantInfo, PoolInfo

GET_PARTICIPANT_INFO = "getParticipantInfo"
GET_DEPOOL_INFO = "getDePoolInfo"
ADD_ORDINARY_STAKE = "addOrdinaryStake"
WITHDRAW_PART = "withdrawPart"


def depool_schema(registry: Optional[AbiRegistry] = None) -> InterfaceSchema:
    return (registry or get_registry()).interface(DEPOOL_V3)


class DePoolContractState:
    """Typed getters over one pool contract state."""

    def __init__(
        self,
        state: RawContractState,
        executor: LocalExecutor,
        *,
        registry: Optional[AbiRegistry] = None,
    ) -> None:
        self.state = state
        self.executor = executor
        self.schema = depool_schema(registry)

    def get_participant_info(self, participant_address: str) -> ParticipantInfo:
        function, inputs = MessageBuilder(self.schema, GET_PARTICIPANT_INFO).arg(participant_address).build()
        tokens = invoke_readonly(self.state, function, inputs, self.executor)
        return ParticipantInfo.from_tokens(tokens)

    def get_pool_info(self) -> PoolInfo:
        function, inputs = MessageBuilder(self.schema, GET_DEPOOL_INFO).build()
        tokens = invoke_readonly(self.state, function, inputs, self.executor)
        return PoolInfo.from_tokens(tokens)


def get_participant_info(
    state: RawContractState,
    participant_address: str,
    *,
    executor: LocalExecutor,
    registry: Optional[AbiRegistry] = None,
) -> ParticipantInfo:
    return DePoolContractState(state, executor, registry=registry).get_participant_info(participant_address)


def get_pool_info(
    state: RawContractState,
    *,
    executor: LocalExecutor,
    registry: Optional[AbiRegistry] = None,
) -> PoolInfo:
    return DePoolContractState(state, executor, registry=registry).get_pool_info()


def fetch_participant_info(
    transport: ContractTransport,
    pool_address: str,
    participant_address: str,
    *,
    executor: LocalExecutor,
    registry: Optional[AbiRegistry] = None,
) -> ParticipantInfo:
    """Retrieve the pool state from ``transport`` and read one participant."""

    state = transport.get_contract_state(pool_address)
    return get_participant_info(state, participant_address, executor=executor, registry=registry)


def fetch_pool_info(
    transport: ContractTransport,
    pool_address: str,
    *,
    executor: LocalExecutor,
    registry: Optional[AbiRegistry] = None,
) -> PoolInfo:
    state = transport.get_contract_state(pool_address)
    return get_pool_info(state, executor=executor, registry=registry)


def prepare_add_stake(
    pool_address: str,
    fee: int,
    stake_amount: int,
    *,
    registry: Optional[AbiRegistry] = None,
) -> OutboundMessage:
    """Build an ``addOrdinaryStake`` message carrying the stake plus the pool fee."""

    fee = checked_amount(fee, "fee")
    stake_amount = checked_amount(stake_amount, "stake")
    return build_call(
        pool_address,
        ADD_ORDINARY_STAKE,
        stake_amount + fee,
        stake_amount,
        schema=depool_schema(registry),
    )


def prepare_withdraw(
    pool_address: str,
    fee: int,
    withdraw_amount: int,
    *,
    registry: Optional[AbiRegistry] = None,
) -> OutboundMessage:
    """Build a ``withdrawPart`` message; only the fee is attached.

    The withdrawn principal stays in the pool until it is paid out.
    """

    fee = checked_amount(fee, "fee")
    return build_call(
        pool_address,
        WITHDRAW_PART,
        fee,
        withdraw_amount,
        schema=depool_schema(registry),
    )


__all__ = [
    "ADD_ORDINARY_STAKE",
    "DePoolContractState",
    "GET_DEPOOL_INFO",
    "GET_PARTICIPANT_INFO",
    "WITHDRAW_PART",
    "depool_schema",
    "fetch_participant_info",
    "fetch_pool_info",
    "get_participant_info",
    "get_pool_info",
    "prepare_add_stake",
    "prepare_withdraw",
]
