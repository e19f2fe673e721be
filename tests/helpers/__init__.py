"""Convenience re-exports for test helpers."""

from __future__ import annotations

from .cli import exit_code, run_cli_in_tmp
from .morphs import bind_morph

__all__ = ["bind_morph", "exit_code", "run_cli_in_tmp"]
