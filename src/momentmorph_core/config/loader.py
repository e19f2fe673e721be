"""Load morph definitions from YAML documents."""

from __future__ import annotations

import math
from collections.abc import Mapping as MappingABC
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

import yaml

from momentmorph_core.errors import ConfigurationError
from momentmorph_core.graph.arena import DependencyGraph
from momentmorph_core.morphing.fractions import MorphMode
from momentmorph_core.morphing.function import MomentMorphFunction
from momentmorph_core.runtime.context import MorphContext

__all__ = [
    "MorphDefinition",
    "load_morph_definitions",
    "parse_morph_definitions",
    "build_graph",
]


_SAMPLE_RESOURCE_PACKAGE = "momentmorph_core.resources"
_SAMPLE_RESOURCE_NAME = "sample_morphs.yaml"


@dataclass(frozen=True, slots=True)
class MorphDefinition:
    """Declarative description of one morph function."""

    name: str
    positions: tuple[float, ...]
    values: tuple[float, ...]
    mode: MorphMode = MorphMode.LINEAR
    query: float = 0.0

    def build(
        self,
        graph: DependencyGraph | None = None,
        *,
        context: MorphContext | None = None,
    ) -> MomentMorphFunction:
        """Materialise the definition as nodes and a morph inside ``graph``.

        Nodes added for a definition that fails to build are removed again,
        so the same name can be built into ``graph`` once it is corrected.
        """

        target = graph if graph is not None else DependencyGraph()
        mark = len(target)
        try:
            query = target.add_value(f"{self.name}.query", self.query)
            sources = [
                target.add_value(f"{self.name}.ref{index}", value)
                for index, value in enumerate(self.values)
            ]
            return target.add_morph(
                self.name, query, sources, self.positions, self.mode, context=context
            )
        except ConfigurationError:
            target.discard_from(mark)
            raise


def build_graph(
    definitions: Iterable[MorphDefinition],
    *,
    context: MorphContext | None = None,
) -> DependencyGraph:
    """Build every definition into a single shared graph."""

    graph = DependencyGraph()
    for definition in definitions:
        definition.build(graph, context=context)
    return graph


def load_morph_definitions(
    path: str | Path | None = None,
) -> dict[str, MorphDefinition]:
    """Load morph definitions from ``path`` or the packaged sample document."""

    if path is None:
        resource = resources.files(_SAMPLE_RESOURCE_PACKAGE).joinpath(
            _SAMPLE_RESOURCE_NAME
        )
        return _load_from_text(resource.read_text(encoding="utf-8"), source=str(resource))

    candidate = Path(path).expanduser()
    if not candidate.is_file():
        raise FileNotFoundError(candidate)
    with candidate.open("r", encoding="utf-8") as buffer:
        payload = buffer.read()
    return _load_from_text(payload, source=str(candidate))


def _load_from_text(payload: str, *, source: str) -> dict[str, MorphDefinition]:
    try:
        data = yaml.safe_load(payload)
    except yaml.YAMLError as exc:
        raise ConfigurationError(
            f"Invalid YAML in morph definitions: {source}",
            context={"source": source},
        ) from exc
    if data is None:
        data = {}
    if not isinstance(data, MappingABC):
        raise ConfigurationError(
            f"Morph definitions in {source} must decode to a mapping.",
            context={"source": source},
        )
    return parse_morph_definitions(data)


def parse_morph_definitions(config: Mapping[str, Any]) -> dict[str, MorphDefinition]:
    """Validate a decoded definitions mapping.

    Every entry of the ``morphs`` table is merged over the optional
    ``defaults`` table before it is validated.  Reference points are given
    either as a ``references`` list of ``{position, value}`` mappings or as
    parallel ``positions``/``values`` lists.
    """

    defaults = config.get("defaults")
    if not isinstance(defaults, MappingABC):
        defaults = {}
    morphs = config.get("morphs")
    if morphs is None:
        return {}
    if not isinstance(morphs, MappingABC):
        raise ConfigurationError(
            "The 'morphs' entry must be a mapping of names to definitions.",
            context={"type": type(morphs).__name__},
        )

    definitions: dict[str, MorphDefinition] = {}
    for raw_name, raw_entry in morphs.items():
        name = str(raw_name)
        if not isinstance(raw_entry, MappingABC):
            raise ConfigurationError(
                f"Morph '{name}' must be a mapping.", context={"morph": name}
            )
        entry = dict(defaults)
        entry.update(raw_entry)
        definitions[name] = _parse_entry(name, entry)
    return definitions


def _parse_entry(name: str, entry: Mapping[str, Any]) -> MorphDefinition:
    positions, values = _parse_references(name, entry)
    mode = MorphMode.coerce(entry.get("mode", MorphMode.LINEAR))
    query = _coerce_float(name, "query", entry.get("query", positions[0] if positions else 0.0))
    return MorphDefinition(
        name=name,
        positions=positions,
        values=values,
        mode=mode,
        query=query,
    )


def _parse_references(
    name: str, entry: Mapping[str, Any]
) -> tuple[tuple[float, ...], tuple[float, ...]]:
    references = entry.get("references")
    if references is not None:
        if not isinstance(references, Sequence) or isinstance(references, (str, bytes)):
            raise ConfigurationError(
                f"Morph '{name}' references must be a list.", context={"morph": name}
            )
        positions: list[float] = []
        values: list[float] = []
        for index, reference in enumerate(references):
            if not isinstance(reference, MappingABC):
                raise ConfigurationError(
                    f"Morph '{name}' reference {index} must be a mapping.",
                    context={"morph": name, "index": index},
                )
            positions.append(_coerce_float(name, f"references[{index}].position", reference.get("position")))
            values.append(_coerce_float(name, f"references[{index}].value", reference.get("value")))
        return tuple(positions), tuple(values)

    raw_positions = entry.get("positions")
    raw_values = entry.get("values")
    if raw_positions is None or raw_values is None:
        raise ConfigurationError(
            f"Morph '{name}' needs 'references' or both 'positions' and 'values'.",
            context={"morph": name},
        )
    for field, raw in (("positions", raw_positions), ("values", raw_values)):
        if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
            raise ConfigurationError(
                f"Morph '{name}' {field} must be a list.",
                context={"morph": name, "field": field},
            )
    if len(raw_positions) != len(raw_values):
        raise ConfigurationError(
            f"Morph '{name}' has {len(raw_positions)} positions but {len(raw_values)} values.",
            context={"morph": name, "positions": len(raw_positions), "values": len(raw_values)},
        )
    positions_tuple = tuple(
        _coerce_float(name, f"positions[{index}]", raw) for index, raw in enumerate(raw_positions)
    )
    values_tuple = tuple(
        _coerce_float(name, f"values[{index}]", raw) for index, raw in enumerate(raw_values)
    )
    return positions_tuple, values_tuple


def _coerce_float(name: str, field: str, raw: Any) -> float:
    if isinstance(raw, bool):
        raise ConfigurationError(
            f"Morph '{name}' field '{field}' must be a number.",
            context={"morph": name, "field": field, "value": raw},
        )
    try:
        numeric = float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            f"Morph '{name}' field '{field}' must be a number.",
            context={"morph": name, "field": field, "value": raw},
        ) from exc
    if not math.isfinite(numeric):
        raise ConfigurationError(
            f"Morph '{name}' field '{field}' must be finite.",
            context={"morph": name, "field": field, "value": numeric},
        )
    return numeric
