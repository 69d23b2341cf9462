"""JSON structured logging with a hash-chained event trail."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import threading
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from ..config import events_enabled
from ..utils.paths import log_dir

LOGGER_NAME = "depoolkit"
LOG_FILE = "depoolkit.log"
EVENTS_FILE = "depoolkit_events.jsonl"

_EVENT_LOCK = threading.Lock()
_HANDLER_LOCK = threading.Lock()
_TAIL_STEP = 4096


def get_logger(directory: Optional[Path] = None) -> logging.Logger:
    """Return the package logger writing to ``directory`` (default: the state log dir).

    The rotating file handler follows the current state directory: when it
    changes, the previous handler is closed and replaced.
    """

    logger = logging.getLogger(LOGGER_NAME)
    directory = directory or log_dir()
    target = os.path.abspath(directory / LOG_FILE)
    with _HANDLER_LOCK:
        for handler in list(logger.handlers):
            if not isinstance(handler, RotatingFileHandler):
                continue
            if handler.baseFilename == target:
                return logger
            logger.removeHandler(handler)
            handler.close()
        directory.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(target, maxBytes=1_000_000, backupCount=5, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s - depoolkit - %(levelname)s - %(message)s"))
        logger.addHandler(handler)
    if logger.level == logging.NOTSET:
        logger.setLevel(logging.INFO)
    return logger


def events_path() -> Path:
    directory = log_dir()
    directory.mkdir(parents=True, exist_ok=True)
    return directory / EVENTS_FILE


def _last_hash(path: Path) -> str:
    if not path.exists():
        return ""
    try:
        with path.open("rb") as handle:
            handle.seek(0, os.SEEK_END)
            position = handle.tell()
            buffer = b""
            while position > 0 and buffer.count(b"\n") < 2:
                step = min(_TAIL_STEP, position)
                position -= step
                handle.seek(position)
                buffer = handle.read(step) + buffer
    except OSError:
        return ""
    lines = buffer.strip().splitlines()
    if not lines:
        return ""
    try:
        return str(json.loads(lines[-1].decode("utf-8")).get("hash", ""))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return ""


def log_event(action: str, **payload: Any) -> Dict[str, Any]:
    """Append a hash-chained JSON event to the trail and return it.

    Nothing is written when the trail is disabled through
    ``DEPOOLKIT_EVENTS``; the entry is still returned to the caller.
    """

    entry: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "action": action,
        **payload,
    }
    if not events_enabled():
        return entry
    log_file = events_path()
    with _EVENT_LOCK:
        entry["prev"] = _last_hash(log_file)
        canonical = json.dumps(entry, sort_keys=True, separators=(",", ":"), default=str)
        entry["hash"] = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
        with log_file.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry, sort_keys=True, default=str))
            handle.write("\n")
    get_logger().debug("%s %s", action, json.dumps(payload, sort_keys=True, default=str))
    return entry


__all__ = ["EVENTS_FILE", "LOG_FILE", "LOGGER_NAME", "events_path", "get_logger", "log_event"]
