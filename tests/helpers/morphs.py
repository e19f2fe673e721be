"""Builders for morph functions bound to a dependency graph."""

from __future__ import annotations

from typing import Sequence

from momentmorph_core.graph import DependencyGraph
from momentmorph_core.morphing import MomentMorphFunction, MorphMode
from momentmorph_core.runtime import MorphContext


def bind_morph(
    graph: DependencyGraph,
    positions: Sequence[float],
    values: Sequence[float],
    mode: MorphMode | str = MorphMode.LINEAR,
    *,
    query: float = 0.0,
    name: str = "morph",
    context: MorphContext | None = None,
) -> MomentMorphFunction:
    """Build a morph whose query and sources are nodes of ``graph``."""

    query_node = graph.add_value(f"{name}.query", query)
    sources = [
        graph.add_value(f"{name}.ref{index}", value)
        for index, value in enumerate(values)
    ]
    return graph.add_morph(name, query_node, sources, positions, mode, context=context)
