"""Command handlers for the momentmorph CLI."""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Dict, List, Mapping, Sequence

import numpy as np

from momentmorph_core.config.loader import MorphDefinition
from momentmorph_core.errors import ConfigurationError
from momentmorph_core.graph.arena import DependencyGraph
from momentmorph_core.morphing.function import MomentMorphFunction
from momentmorph_core.runtime.context import MorphContext, NumericOptions

from .errors import CliError
from .io import load_definitions

__all__ = [
    "handle_evaluate",
    "handle_fractions",
    "handle_scan",
    "render_payload",
]

logger = logging.getLogger(__name__)


def _select(
    definitions: Mapping[str, MorphDefinition], names: Sequence[str] | None
) -> List[MorphDefinition]:
    if not definitions:
        raise CliError("No morphs are defined.", category="usage")
    if not names:
        return list(definitions.values())
    selected: List[MorphDefinition] = []
    for name in names:
        definition = definitions.get(name)
        if definition is None:
            raise CliError(
                f"Unknown morph '{name}'.",
                category="not_found",
                context={"morph": name, "available": ", ".join(definitions)},
            )
        selected.append(definition)
    return selected


def _build_functions(
    namespace: argparse.Namespace, config: Mapping[str, Any]
) -> List[MomentMorphFunction]:
    definitions = load_definitions(getattr(namespace, "definitions", None))
    selected = _select(definitions, getattr(namespace, "morphs", None))
    context = getattr(namespace, "context", None) or MorphContext(
        NumericOptions.from_config(config)
    )
    graph = DependencyGraph()
    functions: List[MomentMorphFunction] = []
    try:
        for definition in selected:
            function = definition.build(graph, context=context)
            mode = getattr(namespace, "mode", None)
            if mode:
                function.set_mode(mode)
            functions.append(function)
    except ConfigurationError as exc:
        raise CliError.from_configuration_error(exc) from exc
    logger.info(
        "Morphs built",
        extra={"event": "cli.morphs_built", "context": {"count": len(functions)}},
    )
    return functions


def _query_points(function: MomentMorphFunction, points: Sequence[float] | None) -> List[float]:
    if points:
        return [float(point) for point in points]
    return [float(function.query.value)]


def render_payload(payload: Mapping[str, Any], fmt: str) -> str:
    """Render a command payload as JSON or aligned text lines."""

    if fmt == "json":
        return json.dumps(payload, indent=2, sort_keys=False)
    lines: List[str] = []
    for name, entry in payload["morphs"].items():
        lines.append(f"{name} ({entry['mode']})")
        for row in entry["results"]:
            if "fractions" in row:
                weights = " ".join(f"{weight:.6g}" for weight in row["fractions"])
                lines.append(f"  m={row['m']:<12.6g} fractions=[{weights}]")
            else:
                lines.append(f"  m={row['m']:<12.6g} value={row['value']:.10g}")
    return "\n".join(lines)


def _payload(functions: Sequence[MomentMorphFunction], rows: Dict[str, List[Dict[str, Any]]]) -> Dict[str, Any]:
    return {
        "morphs": {
            function.name: {"mode": function.mode.value, "results": rows[function.name]}
            for function in functions
        }
    }


def handle_evaluate(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    functions = _build_functions(namespace, config)
    rows: Dict[str, List[Dict[str, Any]]] = {}
    for function in functions:
        rows[function.name] = [
            {"m": m, "value": function.evaluate_at(m)}
            for m in _query_points(function, namespace.points)
        ]
    return render_payload(_payload(functions, rows), namespace.output_format)


def handle_fractions(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    functions = _build_functions(namespace, config)
    rows: Dict[str, List[Dict[str, Any]]] = {}
    for function in functions:
        entries: List[Dict[str, Any]] = []
        for m in _query_points(function, namespace.points):
            function.query.value = m  # type: ignore[misc]
            entries.append({"m": m, "fractions": list(function.fractions())})
        rows[function.name] = entries
    return render_payload(_payload(functions, rows), namespace.output_format)


def handle_scan(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    if namespace.steps < 2:
        raise CliError(
            "A scan needs at least two steps.",
            category="usage",
            context={"steps": namespace.steps},
        )
    if not namespace.stop > namespace.start:
        raise CliError(
            "The scan stop must be greater than its start.",
            category="usage",
            context={"start": namespace.start, "stop": namespace.stop},
        )
    grid = np.linspace(namespace.start, namespace.stop, namespace.steps)
    functions = _build_functions(namespace, config)
    rows: Dict[str, List[Dict[str, Any]]] = {}
    for function in functions:
        rows[function.name] = [
            {"m": float(m), "value": function.evaluate_at(float(m))} for m in grid
        ]
    return render_payload(_payload(functions, rows), namespace.output_format)
