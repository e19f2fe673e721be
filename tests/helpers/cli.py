"""CLI-related test helpers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

import pytest

from momentmorph.cli import run_cli as _run_cli


def run_cli_in_tmp(
    args: Sequence[str] | Iterable[str],
    *,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> str:
    """Execute ``run_cli`` from within ``tmp_path``.

    ``$MOMENTMORPH_CONFIG`` is cleared so that only a ``pyproject.toml``
    written into ``tmp_path`` by the test can influence the run.
    """

    monkeypatch.delenv("MOMENTMORPH_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    return _run_cli(list(args))


def exit_code(excinfo: pytest.ExceptionInfo[SystemExit]) -> int:
    """Return the integer status carried by a captured ``SystemExit``."""

    code = excinfo.value.code
    return int(code) if code is not None else 0
