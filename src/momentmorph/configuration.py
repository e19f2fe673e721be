"""Read the ``[tool.momentmorph]`` table from ``pyproject.toml`` files."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore

from momentmorph_core.errors import ConfigurationError

__all__ = [
    "PROJECT_FILENAME",
    "load_project_config",
    "load_toml_mapping",
    "pyproject_path",
]


PROJECT_FILENAME = "pyproject.toml"
_TOOL_TABLE = ("tool", "momentmorph")


def pyproject_path(candidate: Path) -> Path | None:
    """Map ``candidate`` to the ``pyproject.toml`` it designates.

    A path already named ``pyproject.toml`` is used as is, any other file
    name is rejected and anything else is treated as a project directory.
    """

    candidate = candidate.expanduser()
    if candidate.name == PROJECT_FILENAME:
        return candidate
    if candidate.suffix:
        return None
    return candidate / PROJECT_FILENAME


def load_toml_mapping(path: Path) -> dict[str, Any] | None:
    """Decode ``path``; ``None`` when the file does not exist."""

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError:
        return None
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(
            f"Invalid TOML in {path}: {exc}", context={"path": str(path)}
        ) from exc


def _tool_table(document: Mapping[str, Any]) -> dict[str, Any] | None:
    node: Any = document
    for key in _TOOL_TABLE:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return dict(node) if isinstance(node, Mapping) else None


def load_project_config(path: Path) -> tuple[dict[str, Any], Path] | None:
    """Return the momentmorph table and the file it came from, if any."""

    target = pyproject_path(path)
    if target is None:
        return None
    target = target.resolve(strict=False)
    document = load_toml_mapping(target)
    if not document:
        return None
    section = _tool_table(document)
    if section is None:
        return None
    return section, target
