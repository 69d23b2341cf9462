"""Runtime settings resolved from the environment and an optional ``.env`` file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .utils.paths import log_dir, state_dir

ENV_PATH_DEFAULT = Path(".env")
LOG_LEVEL_ENV = "DEPOOLKIT_LOG_LEVEL"
EVENTS_ENV = "DEPOOLKIT_EVENTS"
RPC_ENV_KEY = "DEPOOLKIT_ETH_RPC"

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for one process."""

    state_dir: Path
    log_level: int = logging.INFO
    rpc_url: Optional[str] = None

    @property
    def log_dir(self) -> Path:
        return log_dir(self.state_dir)


def events_enabled() -> bool:
    """Return ``False`` when the structured event trail is switched off."""

    raw = os.environ.get(EVENTS_ENV, "")
    return raw.strip().lower() not in _FALSE_VALUES


def _log_level(raw: Optional[str]) -> int:
    if not raw:
        return logging.INFO
    text = raw.strip().upper()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level '{raw}'")
    return level


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Load settings, letting real environment variables win over ``.env``."""

    load_dotenv(env_file or ENV_PATH_DEFAULT, override=False)
    rpc_url = os.environ.get(RPC_ENV_KEY) or None
    return Settings(
        state_dir=state_dir(),
        log_level=_log_level(os.environ.get(LOG_LEVEL_ENV)),
        rpc_url=rpc_url.strip() if rpc_url else None,
    )


__all__ = [
    "ENV_PATH_DEFAULT",
    "EVENTS_ENV",
    "LOG_LEVEL_ENV",
    "RPC_ENV_KEY",
    "Settings",
    "events_enabled",
    "load_settings",
]
