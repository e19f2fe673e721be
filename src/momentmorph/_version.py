"""Resolve the installed momentmorph version."""

from __future__ import annotations

from importlib import metadata
from pathlib import Path

from packaging.version import InvalidVersion, Version

from momentmorph.configuration import load_toml_mapping

DISTRIBUTION = "momentmorph"
_SOURCE_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def _source_version() -> str | None:
    # Source checkouts without generated metadata.
    document = load_toml_mapping(_SOURCE_PYPROJECT) or {}
    project = document.get("project")
    if not isinstance(project, dict) or project.get("name") != DISTRIBUTION:
        return None
    version = project.get("version")
    return str(version) if version is not None else None


def resolve_version(raw: str | None = None) -> str:
    """Validate ``raw`` or the discovered version as ``MAJOR.MINOR.PATCH``."""

    if raw is None:
        try:
            raw = metadata.version(DISTRIBUTION)
        except metadata.PackageNotFoundError:
            raw = _source_version()
    if raw is None:
        raise RuntimeError(f"No version metadata found for {DISTRIBUTION!r}")

    try:
        release = Version(raw).release
    except InvalidVersion as exc:
        raise RuntimeError(f"{DISTRIBUTION!r} has a malformed version: {raw!r}") from exc
    if len(release) != 3:
        raise RuntimeError(
            f"{DISTRIBUTION!r} version {raw!r} must have exactly three release parts"
        )
    return raw


__version__ = resolve_version()

__all__ = ["DISTRIBUTION", "__version__", "resolve_version"]
