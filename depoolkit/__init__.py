"""Typed ABI marshalling for staking pool contracts."""

from .depool import (
    DePoolContractState,
    fetch_participant_info,
    fetch_pool_info,
    get_participant_info,
    get_pool_info,
    prepare_add_stake,
    prepare_withdraw,
)
from .models import ParticipantInfo, ParticipantStake, PoolInfo

__version__ = "0.1.0"

__all__ = [
    "DePoolContractState",
    "ParticipantInfo",
    "ParticipantStake",
    "PoolInfo",
    "__version__",
    "fetch_participant_info",
    "fetch_pool_info",
    "get_participant_info",
    "get_pool_info",
    "prepare_add_stake",
    "prepare_withdraw",
]
