"""Tests for interface schema loading and the lazy registry."""

from __future__ import annotations

import json
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
from web3 import Web3

from depoolkit.abi import DEPOOL_V3, read_embedded
from depoolkit.core.abi_manager import AbiRegistry, InterfaceSchema, get_registry, parse_type
from depoolkit.core.errors import SchemaLoadError, UnknownFunctionError
from depoolkit.core.values import AddressType, ArrayType, MapType, TupleType, UintType


def test_interface_is_loaded_once_and_shared(registry: AbiRegistry) -> None:
    first = registry.interface(DEPOOL_V3)
    second = registry.interface(DEPOOL_V3)
    assert first is second
    assert first.version == "2"
    assert "getParticipantInfo" in first.function_names()


def test_concurrent_first_access_initialises_once() -> None:
    calls = []
    gate = threading.Event()

    def source():
        gate.wait(timeout=1)
        calls.append(1)
        return read_embedded("DePool.abi.json")

    registry = AbiRegistry({"pool": source})
    with ThreadPoolExecutor(max_workers=8) as pool:
        futures = [pool.submit(registry.interface, "pool") for _ in range(8)]
        gate.set()
        schemas = [future.result() for future in futures]

    assert len(calls) == 1
    assert all(schema is schemas[0] for schema in schemas)


def test_independent_registries_do_not_share_schemas() -> None:
    assert AbiRegistry().interface(DEPOOL_V3) is not AbiRegistry().interface(DEPOOL_V3)


def test_shared_registry_is_a_singleton() -> None:
    assert get_registry() is get_registry()


def test_unknown_function_is_reported(registry: AbiRegistry) -> None:
    with pytest.raises(UnknownFunctionError) as excinfo:
        registry.function(DEPOOL_V3, "stealEverything")
    assert excinfo.value.function == "stealEverything"
    assert excinfo.value.interface == DEPOOL_V3


def test_unknown_interface_raises_key_error(registry: AbiRegistry) -> None:
    with pytest.raises(KeyError):
        registry.interface("missing")


def test_malformed_source_is_fatal() -> None:
    broken = {"functions": [{"name": "f", "inputs": [{"name": "x", "type": "int7"}], "outputs": []}]}
    registry = AbiRegistry({"broken": lambda: broken})
    with pytest.raises(SchemaLoadError):
        registry.interface("broken")


def test_source_that_is_not_json_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / "bad.abi.json"
    path.write_text("{not json", encoding="utf-8")
    registry = AbiRegistry({"bad": lambda: json.loads(path.read_text(encoding="utf-8"))})
    with pytest.raises(SchemaLoadError):
        registry.interface("bad")


def test_register_after_load_is_rejected(registry: AbiRegistry) -> None:
    registry.interface(DEPOOL_V3)
    with pytest.raises(ValueError):
        registry.register(DEPOOL_V3, lambda: {})


def test_parse_nested_types() -> None:
    components = [{"name": "amount", "type": "uint64"}, {"name": "owner", "type": "address"}]
    parsed = parse_type("map(uint64,tuple)", components)
    assert isinstance(parsed, MapType)
    assert parsed.key == UintType(64)
    assert isinstance(parsed.value, TupleType)
    assert [param.name for param in parsed.value.components] == ["amount", "owner"]
    assert parse_type("address[]") == ArrayType(AddressType())
    assert parse_type("uint8").native_bits == 8
    assert parse_type("uint24").native_bits == 32


def test_participant_info_outputs_match_embedded_source(registry: AbiRegistry) -> None:
    function = registry.function(DEPOOL_V3, "getParticipantInfo")
    assert [param.name for param in function.inputs] == ["addr"]
    kinds = {param.name: param.kind.signature() for param in function.outputs}
    assert kinds["stakes"] == "map(uint64,uint64)"
    assert kinds["vestings"] == "map(uint64,(uint64,uint64,uint32,uint64,address))"
    assert kinds["lockDonor"] == "address"


def test_selector_is_keccak_of_signature(registry: AbiRegistry) -> None:
    function = registry.function(DEPOOL_V3, "addOrdinaryStake")
    assert function.signature() == "addOrdinaryStake(uint64)"
    assert function.selector == bytes(Web3.keccak(text="addOrdinaryStake(uint64)")[:4])


def test_evm_style_entry_list_is_accepted() -> None:
    payload = {
        "abi": [
            {"type": "event", "name": "Staked", "inputs": []},
            {
                "type": "function",
                "name": "balanceOf",
                "inputs": [{"name": "owner", "type": "address"}],
                "outputs": [{"name": "balance", "type": "uint256"}],
            },
        ]
    }
    schema = InterfaceSchema.from_payload("token", payload)
    assert schema.function_names() == ["balanceOf"]
    assert schema.function("balanceOf").outputs[0].kind == UintType(256)


def test_load_is_recorded_in_event_trail(registry: AbiRegistry, isolated_home: Path) -> None:
    registry.interface(DEPOOL_V3)
    trail = (isolated_home / "logs" / "depoolkit_events.jsonl").read_text(encoding="utf-8").splitlines()
    events = [json.loads(line) for line in trail]
    assert any(event["action"] == "abi.load" and event["interface"] == DEPOOL_V3 for event in events)
