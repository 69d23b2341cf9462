from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from depoolkit.core.abi_manager import AbiRegistry  # noqa: E402
from depoolkit.core.contract_manager import AccountData, ExecutionSnapshot, Timings  # noqa: E402

from fakes import POOL  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("DEPOOLKIT_STATE_DIR", str(tmp_path))
    monkeypatch.delenv("DEPOOLKIT_EVENTS", raising=False)
    return tmp_path


@pytest.fixture()
def registry() -> AbiRegistry:
    return AbiRegistry()


@pytest.fixture()
def snapshot() -> ExecutionSnapshot:
    return ExecutionSnapshot(
        address=POOL,
        account=AccountData(code=b"\x60\x80", balance=10**18),
        timings=Timings(block_number=1234, unix_time=1_700_000_000),
        last_transaction_id="0x" + "ee" * 32,
    )
