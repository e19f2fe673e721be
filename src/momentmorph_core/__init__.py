"""Core computation utilities for one-dimensional moment morphing."""

from __future__ import annotations

from importlib import import_module

from momentmorph_core.errors import ConfigurationError

_morphing = import_module("momentmorph_core.morphing")
_graph = import_module("momentmorph_core.graph")
_runtime = import_module("momentmorph_core.runtime")
_config = import_module("momentmorph_core.config")

from momentmorph_core.config import *  # noqa: E402,F401,F403
from momentmorph_core.graph import *  # noqa: E402,F401,F403
from momentmorph_core.morphing import *  # noqa: E402,F401,F403
from momentmorph_core.runtime import *  # noqa: E402,F401,F403

__all__ = list(
    dict.fromkeys(
        [
            "ConfigurationError",
            *_morphing.__all__,
            *_graph.__all__,
            *_runtime.__all__,
            *_config.__all__,
        ]
    )
)

# Public handles to the structured namespaces.
morphing = _morphing
graph = _graph
runtime = _runtime
config = _config
