"""Arena-indexed value graph feeding morph functions.

Nodes live in flat per-graph lists and are addressed by integer index.
Every assignment bumps the node's generation counter and notifies its
subscribers, which is how bound morph functions learn that their query or
sources have changed.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator, Sequence

from momentmorph_core.errors import ConfigurationError
from momentmorph_core.morphing.fractions import MorphMode
from momentmorph_core.morphing.function import MomentMorphFunction
from momentmorph_core.runtime.context import MorphContext

__all__ = ["DependencyGraph", "ValueNode"]

logger = logging.getLogger(__name__)

Subscriber = Callable[[int], None]


class ValueNode:
    """Lightweight handle to one value slot of a :class:`DependencyGraph`."""

    __slots__ = ("_graph", "_index")

    def __init__(self, graph: "DependencyGraph", index: int) -> None:
        self._graph = graph
        self._index = index

    @property
    def index(self) -> int:
        return self._index

    @property
    def name(self) -> str:
        return self._graph.name_of(self._index)

    @property
    def graph(self) -> "DependencyGraph":
        return self._graph

    @property
    def value(self) -> float:
        return self._graph.get(self._index)

    @value.setter
    def value(self, value: float) -> None:
        self._graph.set(self._index, value)

    @property
    def generation(self) -> int:
        return self._graph.generation(self._index)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValueNode):
            return NotImplemented
        return self._graph is other._graph and self._index == other._index

    def __hash__(self) -> int:
        return hash((id(self._graph), self._index))

    def __repr__(self) -> str:
        return f"ValueNode(index={self._index}, name={self.name!r}, value={self.value!r})"


class DependencyGraph:
    """Owner of value nodes and the morph functions that depend on them."""

    __slots__ = ("_values", "_names", "_generations", "_subscribers", "_lookup", "_morphs")

    def __init__(self) -> None:
        self._values: list[float] = []
        self._names: list[str] = []
        self._generations: list[int] = []
        self._subscribers: list[list[Subscriber]] = []
        self._lookup: dict[str, int] = {}
        self._morphs: dict[str, MomentMorphFunction] = {}

    def add_value(self, name: str, value: float = 0.0) -> ValueNode:
        """Register a new value node and return its handle."""

        key = str(name)
        if key in self._lookup:
            raise ConfigurationError(
                f"A node named '{key}' already exists in the graph.",
                context={"name": key},
            )
        index = len(self._values)
        self._values.append(float(value))
        self._names.append(key)
        self._generations.append(0)
        self._subscribers.append([])
        self._lookup[key] = index
        return ValueNode(self, index)

    def node(self, name: str) -> ValueNode:
        try:
            return ValueNode(self, self._lookup[name])
        except KeyError:
            raise KeyError(f"Unknown node '{name}'") from None

    def nodes(self) -> Iterator[ValueNode]:
        return (ValueNode(self, index) for index in range(len(self._values)))

    def name_of(self, index: int) -> str:
        return self._names[index]

    def get(self, index: int) -> float:
        return self._values[index]

    def set(self, index: int, value: float) -> None:
        """Assign ``value``; unchanged assignments do not bump the generation."""

        numeric = float(value)
        if self._values[index] == numeric:
            return
        self._values[index] = numeric
        self._generations[index] += 1
        for callback in self._subscribers[index]:
            callback(index)

    def generation(self, index: int) -> int:
        return self._generations[index]

    def signature(self, indices: Iterable[int]) -> tuple[int, ...]:
        """Generations of ``indices``; any change marks dependents stale."""

        return tuple(self._generations[index] for index in indices)

    def subscribe(self, index: int, callback: Subscriber) -> None:
        self._subscribers[index].append(callback)

    def discard_from(self, index: int) -> None:
        """Drop every node registered at or after ``index``.

        Used to roll back nodes added for a morph whose construction failed;
        nodes that already have subscribers cannot be discarded.
        """

        if any(self._subscribers[index:]):
            raise RuntimeError("Cannot discard nodes that morphs depend on")
        for name in self._names[index:]:
            del self._lookup[name]
        del self._values[index:]
        del self._names[index:]
        del self._generations[index:]
        del self._subscribers[index:]

    def add_morph(
        self,
        name: str,
        query: ValueNode,
        sources: Sequence[ValueNode],
        positions: Sequence[float],
        mode: MorphMode | str = MorphMode.LINEAR,
        *,
        context: MorphContext | None = None,
    ) -> MomentMorphFunction:
        """Build a morph function over nodes of this graph.

        The function subscribes to its query and source nodes so that every
        change bumps its value generation.
        """

        if name in self._morphs:
            raise ConfigurationError(
                f"A morph named '{name}' already exists in the graph.",
                context={"name": name},
            )
        for node in (query, *sources):
            if not isinstance(node, ValueNode) or node.graph is not self:
                raise ConfigurationError(
                    "Morph inputs must be nodes owned by the same graph.",
                    context={"morph": name, "input": repr(node)},
                )
        function = MomentMorphFunction(
            query, sources, positions, mode, context=context, name=name
        )
        for node in (query, *sources):
            self.subscribe(node.index, function.invalidate_values)
        self._morphs[name] = function
        logger.debug(
            "Morph registered",
            extra={
                "event": "graph.morph_added",
                "context": {"name": name, "inputs": len(sources) + 1},
            },
        )
        return function

    def morph(self, name: str) -> MomentMorphFunction:
        try:
            return self._morphs[name]
        except KeyError:
            raise KeyError(f"Unknown morph '{name}'") from None

    @property
    def morphs(self) -> dict[str, MomentMorphFunction]:
        return dict(self._morphs)

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._lookup
