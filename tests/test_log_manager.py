"""Tests for the hash-chained event trail."""

from __future__ import annotations

import hashlib
import json
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from depoolkit.core.log_manager import get_logger, log_event


def _read(path: Path) -> list:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_events_are_hash_chained(isolated_home: Path) -> None:
    log_event("unit", value=1)
    log_event("unit", value=2)

    first, second = _read(isolated_home / "logs" / "depoolkit_events.jsonl")
    assert first["prev"] == ""
    assert second["prev"] == first["hash"]
    for entry in (first, second):
        body = {key: value for key, value in entry.items() if key != "hash"}
        canonical = json.dumps(body, sort_keys=True, separators=(",", ":"))
        assert entry["hash"] == hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def test_events_can_be_disabled(isolated_home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEPOOLKIT_EVENTS", "off")
    entry = log_event("unit", value=3)
    assert entry["action"] == "unit"
    assert not (isolated_home / "logs" / "depoolkit_events.jsonl").exists()


def _rotating(logger) -> list:
    return [handler for handler in logger.handlers if isinstance(handler, RotatingFileHandler)]


def test_logger_has_single_rotating_handler(isolated_home: Path) -> None:
    logger = get_logger()
    assert get_logger() is logger
    (handler,) = _rotating(logger)
    assert handler.baseFilename == str(isolated_home.resolve() / "logs" / "depoolkit.log")


def test_logger_follows_state_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    get_logger()
    moved = tmp_path / "moved"
    monkeypatch.setenv("DEPOOLKIT_STATE_DIR", str(moved))

    (handler,) = _rotating(get_logger())
    assert handler.baseFilename == str(moved.resolve() / "logs" / "depoolkit.log")


def test_concurrent_events_keep_one_chain(isolated_home: Path) -> None:
    def emit(worker: int) -> None:
        for index in range(20):
            log_event("unit", worker=worker, index=index)

    threads = [threading.Thread(target=emit, args=(worker,)) for worker in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    entries = _read(isolated_home / "logs" / "depoolkit_events.jsonl")
    assert len(entries) == 160
    assert entries[0]["prev"] == ""
    for first, second in zip(entries, entries[1:]):
        assert second["prev"] == first["hash"]


def test_chain_continues_past_large_entries(isolated_home: Path) -> None:
    log_event("unit", blob="x" * 10_000)
    log_event("unit", blob="y" * 10_000)
    last = log_event("unit", value=4)

    entries = _read(isolated_home / "logs" / "depoolkit_events.jsonl")
    assert last["prev"] == entries[1]["hash"]
