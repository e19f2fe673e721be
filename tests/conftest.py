from __future__ import annotations

import logging
import sys
from pathlib import Path
from textwrap import dedent
from typing import Iterator

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from momentmorph_core.graph import DependencyGraph  # noqa: E402
from momentmorph_core.runtime.context import reset_context  # noqa: E402


_PACKAGE_LOGGERS = ("momentmorph", "momentmorph_core")


def write_pyproject(directory: Path, contents: str) -> Path:
    """Persist a ``pyproject.toml`` under ``directory`` and return its path."""

    payload = dedent(contents).lstrip()
    target = directory / "pyproject.toml"
    target.write_text(payload, encoding="utf8")
    return target


def write_definitions(directory: Path, contents: str, name: str = "morphs.yaml") -> Path:
    """Persist a YAML definitions document under ``directory``."""

    target = directory / name
    target.write_text(dedent(contents).lstrip(), encoding="utf8")
    return target


@pytest.fixture(autouse=True)
def _isolated_runtime() -> Iterator[None]:
    """Restore the numeric context and package loggers after every test."""

    yield
    reset_context()
    for name in _PACKAGE_LOGGERS:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            if getattr(handler, "_momentmorph_handler", False):
                logger.removeHandler(handler)
                handler.close()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True


@pytest.fixture()
def graph() -> DependencyGraph:
    return DependencyGraph()
