"""momentmorph: one-dimensional moment morphing with configuration and CLI."""

from __future__ import annotations

from momentmorph._version import __version__
from momentmorph_core import (
    ConfigurationError,
    DependencyGraph,
    MomentMorphFunction,
    MorphContext,
    MorphDefinition,
    MorphMode,
    NumericOptions,
    load_morph_definitions,
)

__all__ = [
    "__version__",
    "ConfigurationError",
    "DependencyGraph",
    "MomentMorphFunction",
    "MorphContext",
    "MorphDefinition",
    "MorphMode",
    "NumericOptions",
    "load_morph_definitions",
]
