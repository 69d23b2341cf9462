"""Where depoolkit keeps its log files and event trail."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

STATE_DIR_ENV = "DEPOOLKIT_STATE_DIR"
LOGS_SUBDIR = "logs"


def state_dir() -> Path:
    """Resolve the state root: ``$DEPOOLKIT_STATE_DIR`` if set, else ``~/.depoolkit``.

    Overrides are made absolute so log handlers opened from different working
    directories agree on one file.
    """

    configured = os.environ.get(STATE_DIR_ENV, "").strip()
    if not configured:
        return Path.home() / ".depoolkit"
    return Path(configured).expanduser().resolve()


def log_dir(root: Optional[Path] = None) -> Path:
    return (root or state_dir()) / LOGS_SUBDIR


__all__ = ["LOGS_SUBDIR", "STATE_DIR_ENV", "log_dir", "state_dir"]
