"""Contract ABI definitions bundled with depoolkit.

Each interface is a JSON document stored next to this module and is read
only when a registry first asks for it.
"""

from __future__ import annotations

import json
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict

DEPOOL_V3 = "depool_v3"

EMBEDDED_ABIS: Dict[str, str] = {
    DEPOOL_V3: "DePool.abi.json",
}


def read_embedded(filename: str) -> Any:
    """Return the decoded JSON document ``filename`` from this package."""

    abi_path = Path(__file__).parent / filename
    return json.loads(abi_path.read_text(encoding="utf-8"))


def embedded_sources() -> Dict[str, Callable[[], Any]]:
    return {name: partial(read_embedded, filename) for name, filename in EMBEDDED_ABIS.items()}


__all__ = ["DEPOOL_V3", "EMBEDDED_ABIS", "embedded_sources", "read_embedded"]
