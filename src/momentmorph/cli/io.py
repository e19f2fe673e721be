"""Configuration and definition loading for the momentmorph CLI."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from momentmorph.configuration import load_project_config, pyproject_path
from momentmorph_core.config.loader import MorphDefinition, load_morph_definitions
from momentmorph_core.errors import ConfigurationError
from momentmorph_core.runtime.context import NumericOptions

from .errors import CliError

CONFIG_ENV_VAR = "MOMENTMORPH_CONFIG"


def _normalise_cli_config(payload: Dict[str, Any], source: Path) -> Dict[str, Any]:
    data = {str(key): value for key, value in payload.items()}
    data["numerics"] = NumericOptions.from_config(data).to_config()
    data["_config_path"] = str(source.expanduser().resolve())
    return data


def load_cli_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load CLI defaults from ``pyproject.toml`` files.

    An explicit ``path`` wins over ``$MOMENTMORPH_CONFIG``, which wins over
    the ``pyproject.toml`` of the working directory.
    """

    env_config = os.environ.get(CONFIG_ENV_VAR)
    bases: List[Path] = []
    if path is not None:
        bases.append(path)
    if env_config:
        bases.append(Path(env_config))
    bases.append(Path.cwd())

    seen: set[Path] = set()
    for base in bases:
        candidate = pyproject_path(base)
        if candidate is None:
            continue
        resolved = candidate.resolve(strict=False)
        if resolved in seen:
            continue
        seen.add(resolved)
        try:
            loaded = load_project_config(resolved)
        except ConfigurationError as exc:
            raise CliError.from_configuration_error(exc) from exc
        if loaded:
            payload, source = loaded
            return _normalise_cli_config(payload, source)

    return {"_config_path": None}


def load_definitions(path: Optional[Path]) -> Dict[str, MorphDefinition]:
    """Load morph definitions, translating failures into :class:`CliError`."""

    try:
        return load_morph_definitions(path)
    except FileNotFoundError as exc:
        raise CliError(
            f"Morph definitions not found: {path}",
            category="not_found",
            context={"path": str(path)},
        ) from exc
    except OSError as exc:
        raise CliError(
            f"Unable to read morph definitions: {exc}",
            category="io",
            context={"path": str(path)},
        ) from exc
    except ConfigurationError as exc:
        raise CliError.from_configuration_error(exc) from exc
