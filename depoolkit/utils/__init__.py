"""Utility helpers exposed by depoolkit."""

from .paths import STATE_DIR_ENV, log_dir, state_dir

__all__ = ["STATE_DIR_ENV", "log_dir", "state_dir"]
