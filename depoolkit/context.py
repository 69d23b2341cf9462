"""Process-wide application context for depoolkit callers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from web3 import Web3

from .config import Settings, load_settings
from .core.abi_manager import AbiRegistry, get_registry
from .core.log_manager import get_logger, log_event
from .core.transport import Web3Executor, Web3Transport


@dataclass
class AppContext:
    """Container exposing settings, the ABI registry and a lazy web3 client."""

    settings: Settings
    registry: AbiRegistry
    logger: logging.Logger
    _web3: Optional[Any] = None

    def get_web3(self) -> Web3:
        if self._web3 is None:
            self._web3 = self._connect_web3()
        return self._web3

    def _connect_web3(self) -> Web3:
        rpc = self.settings.rpc_url
        if rpc:
            w3 = Web3(Web3.HTTPProvider(rpc, request_kwargs={"timeout": 10}))
            log_event("web3.connect", rpc=rpc)
            return w3
        from web3.providers.eth_tester import EthereumTesterProvider

        w3 = Web3(EthereumTesterProvider())
        log_event("web3.connect", rpc="tester")
        return w3

    def transport(self) -> Web3Transport:
        return Web3Transport(self.get_web3())

    def executor(self) -> Web3Executor:
        return Web3Executor(self.get_web3())


_CONTEXT: Optional[AppContext] = None


def initialise_context(env_file: Optional[Path] = None, *, registry: Optional[AbiRegistry] = None) -> AppContext:
    global _CONTEXT
    settings = load_settings(env_file)
    logger = get_logger(settings.log_dir)
    logger.setLevel(settings.log_level)
    _CONTEXT = AppContext(settings=settings, registry=registry or get_registry(), logger=logger)
    return _CONTEXT


def get_context() -> AppContext:
    if _CONTEXT is None:
        return initialise_context()
    return _CONTEXT


def reset_context() -> None:
    global _CONTEXT
    _CONTEXT = None


__all__ = ["AppContext", "get_context", "initialise_context", "reset_context"]
