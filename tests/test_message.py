"""Tests for outbound stake and withdrawal messages."""

from __future__ import annotations

import pytest

from depoolkit import prepare_add_stake, prepare_withdraw
from depoolkit.abi import DEPOOL_V3
from depoolkit.core.errors import InvalidAbiError, UnknownFunctionError
from depoolkit.core.message import MAX_AMOUNT, build_call, checked_amount
from depoolkit.core.values import Token, UintValue

from fakes import POOL


def test_add_stake_attaches_stake_and_fee(registry) -> None:
    message = prepare_add_stake(POOL, fee=1000, stake_amount=50000, registry=registry)
    function = registry.function(DEPOOL_V3, "addOrdinaryStake")

    assert message.amount == 51000
    assert message.bounce is False
    assert message.source is None
    assert message.destination == POOL
    assert message.body[:4] == function.selector
    assert message.selector == function.selector
    assert function.decode_input(message.body) == [Token("stake", UintValue(50000, 64))]


def test_withdraw_attaches_fee_only(registry) -> None:
    message = prepare_withdraw(POOL, fee=1000, withdraw_amount=20000, registry=registry)
    function = registry.function(DEPOOL_V3, "withdrawPart")

    assert message.amount == 1000
    assert message.bounce is False
    assert message.body[:4] == function.selector
    assert function.decode_input(message.body) == [Token("withdrawValue", UintValue(20000, 64))]


def test_destination_is_checksummed(registry) -> None:
    message = prepare_withdraw(POOL.lower(), fee=1, withdraw_amount=2, registry=registry)
    assert message.destination == POOL


def test_invalid_inputs_are_rejected(registry) -> None:
    with pytest.raises(InvalidAbiError):
        prepare_add_stake("not-an-address", fee=1, stake_amount=1, registry=registry)
    with pytest.raises(InvalidAbiError):
        prepare_add_stake(POOL, fee=-1, stake_amount=1, registry=registry)
    with pytest.raises(InvalidAbiError):
        prepare_withdraw(POOL, fee=1, withdraw_amount=2**64, registry=registry)
    with pytest.raises(InvalidAbiError):
        prepare_add_stake(POOL, fee=1, stake_amount=2**64 - 1, registry=registry)


def test_build_call_for_argumentless_function(registry) -> None:
    schema = registry.interface(DEPOOL_V3)
    message = build_call(POOL, "withdrawAll", 500, schema=schema)
    assert message.body == schema.function("withdrawAll").selector
    assert message.amount == 500


def test_build_call_unknown_function(registry) -> None:
    with pytest.raises(UnknownFunctionError):
        build_call(POOL, "drain", 0, schema=registry.interface(DEPOOL_V3))


def test_checked_amount_bounds() -> None:
    assert checked_amount(0) == 0
    assert checked_amount(MAX_AMOUNT, "fee") == MAX_AMOUNT
    with pytest.raises(InvalidAbiError):
        checked_amount(True, "fee")
    with pytest.raises(InvalidAbiError):
        checked_amount("10", "stake")
