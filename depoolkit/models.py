"""Typed records returned by the staking pool getters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence

from .core.codec import address, array_of, boolean, custom, map_of, parse_key, uint, unpack_uint
from .core.errors import InvalidAbiError
from .core.records import AbiField, RecordMapping, record
from .core.values import MapType, MapValue, Token, TokenValue, UintType


# -- raw getter outputs ---------------------------------------------------
@dataclass(frozen=True)
class StakesTuple:
    remaining_amount: int
    last_withdrawal_time: int
    withdrawal_period: int
    withdrawal_value: int
    owner: str


STAKES_TUPLE = RecordMapping(
    StakesTuple,
    [
        AbiField("remaining_amount", uint(64), name="remainingAmount"),
        AbiField("last_withdrawal_time", uint(64), name="lastWithdrawalTime"),
        AbiField("withdrawal_period", uint(32), name="withdrawalPeriod"),
        AbiField("withdrawal_value", uint(64), name="withdrawalValue"),
        AbiField("owner", address()),
    ],
)


def unpack_stakes(value: TokenValue) -> Dict[int, int]:
    """Decode the ``round id -> stake`` map of ordinary stakes."""

    if not isinstance(value, MapValue):
        raise InvalidAbiError(f"stakes must be a map, found {type(value).__name__}")
    if value.key_type != UintType(64) or value.value_type != UintType(64):
        raise InvalidAbiError(f"stakes must be map(uint64,uint64), found {value.param_type.signature()}")
    stakes: Dict[int, int] = {}
    for text, item in value.entries.items():
        round_id = parse_key(value.key_type, text)
        if round_id in stakes:
            raise InvalidAbiError(f"stake round {text!r} appears twice")
        stakes[round_id] = unpack_uint(item, 64)
    return {key: stakes[key] for key in sorted(stakes)}


@dataclass(frozen=True)
class GetParticipantInfoOutput:
    total: int
    withdraw_value: int
    reinvest: bool
    reward: int
    stakes: Dict[int, int]
    vestings: Dict[int, StakesTuple]
    locks: Dict[int, StakesTuple]
    vesting_donor: str
    lock_donor: str


GET_PARTICIPANT_INFO_OUTPUT = RecordMapping(
    GetParticipantInfoOutput,
    [
        AbiField("total", uint(64)),
        AbiField("withdraw_value", uint(64), name="withdrawValue"),
        AbiField("reinvest", boolean()),
        AbiField("reward", uint(64)),
        AbiField("stakes", custom(unpack_stakes, MapType(UintType(64), UintType(64)))),
        AbiField("vestings", map_of(uint(64), record(STAKES_TUPLE))),
        AbiField("locks", map_of(uint(64), record(STAKES_TUPLE))),
        AbiField("vesting_donor", address(), name="vestingDonor"),
        AbiField("lock_donor", address(), name="lockDonor"),
    ],
)


@dataclass(frozen=True)
class GetDePoolInfoOutput:
    pool_closed: bool
    min_stake: int
    validator_assurance: int
    participant_reward_fraction: int
    validator_reward_fraction: int
    balance_threshold: int
    validator_wallet: str
    proxies: List[str]
    stake_fee: int
    ret_or_reinv_fee: int
    proxy_fee: int


GET_DEPOOL_INFO_OUTPUT = RecordMapping(
    GetDePoolInfoOutput,
    [
        AbiField("pool_closed", boolean(), name="poolClosed"),
        AbiField("min_stake", uint(64), name="minStake"),
        AbiField("validator_assurance", uint(64), name="validatorAssurance"),
        AbiField("participant_reward_fraction", uint(8), name="participantRewardFraction"),
        AbiField("validator_reward_fraction", uint(8), name="validatorRewardFraction"),
        AbiField("balance_threshold", uint(64), name="balanceThreshold"),
        AbiField("validator_wallet", address(), name="validatorWallet"),
        AbiField("proxies", array_of(address())),
        AbiField("stake_fee", uint(64), name="stakeFee"),
        AbiField("ret_or_reinv_fee", uint(64), name="retOrReinvFee"),
        AbiField("proxy_fee", uint(64), name="proxyFee"),
    ],
)


# -- public records -------------------------------------------------------
@dataclass(frozen=True)
class ParticipantStake:
    remaining_amount: int
    last_withdrawal_time: int
    withdrawal_period: int
    withdrawal_value: int
    owner: str

    @classmethod
    def from_output(cls, data: StakesTuple) -> "ParticipantStake":
        return cls(
            remaining_amount=data.remaining_amount,
            last_withdrawal_time=data.last_withdrawal_time,
            withdrawal_period=data.withdrawal_period,
            withdrawal_value=data.withdrawal_value,
            owner=data.owner,
        )


@dataclass(frozen=True)
class ParticipantInfo:
    """A participant's stakes in one pool.

    ``stakes``, ``vestings`` and ``locks`` are keyed by round id in
    ascending order.
    """

    total: int
    withdraw_value: int
    reinvest: bool
    reward: int
    stakes: Dict[int, int]
    vestings: Dict[int, ParticipantStake]
    locks: Dict[int, ParticipantStake]
    vesting_donor: str
    lock_donor: str

    @classmethod
    def from_output(cls, data: GetParticipantInfoOutput) -> "ParticipantInfo":
        return cls(
            total=data.total,
            withdraw_value=data.withdraw_value,
            reinvest=data.reinvest,
            reward=data.reward,
            stakes=dict(data.stakes),
            vestings={key: ParticipantStake.from_output(value) for key, value in data.vestings.items()},
            locks={key: ParticipantStake.from_output(value) for key, value in data.locks.items()},
            vesting_donor=data.vesting_donor,
            lock_donor=data.lock_donor,
        )

    @classmethod
    def from_tokens(cls, tokens: Sequence[Token]) -> "ParticipantInfo":
        return cls.from_output(GET_PARTICIPANT_INFO_OUTPUT.unpack_tokens(tokens))


@dataclass(frozen=True)
class PoolInfo:
    pool_closed: bool
    min_stake: int
    validator_assurance: int
    participant_reward_fraction: int
    validator_reward_fraction: int
    balance_threshold: int
    validator_wallet: str
    proxies: List[str]
    stake_fee: int
    ret_or_reinv_fee: int
    proxy_fee: int

    @classmethod
    def from_output(cls, data: GetDePoolInfoOutput) -> "PoolInfo":
        return cls(
            pool_closed=data.pool_closed,
            min_stake=data.min_stake,
            validator_assurance=data.validator_assurance,
            participant_reward_fraction=data.participant_reward_fraction,
            validator_reward_fraction=data.validator_reward_fraction,
            balance_threshold=data.balance_threshold,
            validator_wallet=data.validator_wallet,
            proxies=list(data.proxies),
            stake_fee=data.stake_fee,
            ret_or_reinv_fee=data.ret_or_reinv_fee,
            proxy_fee=data.proxy_fee,
        )

    @classmethod
    def from_tokens(cls, tokens: Sequence[Token]) -> "PoolInfo":
        return cls.from_output(GET_DEPOOL_INFO_OUTPUT.unpack_tokens(tokens))


__all__ = [
    "GET_DEPOOL_INFO_OUTPUT",
    "GET_PARTICIPANT_INFO_OUTPUT",
    "GetDePoolInfoOutput",
    "GetParticipantInfoOutput",
    "ParticipantInfo",
    "ParticipantStake",
    "PoolInfo",
    "STAKES_TUPLE",
    "StakesTuple",
    "unpack_stakes",
]
