"""Morph definition loading helpers."""

from __future__ import annotations

from .loader import (
    MorphDefinition,
    build_graph,
    load_morph_definitions,
    parse_morph_definitions,
)

__all__ = [
    "MorphDefinition",
    "build_graph",
    "load_morph_definitions",
    "parse_morph_definitions",
]
