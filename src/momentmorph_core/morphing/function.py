"""Public moment-morphing function built from the morphing components."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import numpy as np

from momentmorph_core.errors import ConfigurationError
from momentmorph_core.morphing.bracket import BracketLocator
from momentmorph_core.morphing.evaluator import Evaluator
from momentmorph_core.morphing.fractions import FractionSolver, MorphMode
from momentmorph_core.morphing.reference import (
    ReferenceTable,
    SupportsValue,
    as_value_source,
)
from momentmorph_core.runtime.context import MorphContext, current_context

__all__ = ["MomentMorphFunction"]

logger = logging.getLogger(__name__)


class MomentMorphFunction:
    """Blend N reference sources into a single value at a query position.

    ``query`` and every entry of ``sources`` are pulled through their
    ``value`` attribute each time :meth:`evaluate` runs; numbers are accepted
    as constant sources.  Construction validates the whole configuration and
    builds the interpolation matrix, so malformed inputs raise
    :class:`~momentmorph_core.errors.ConfigurationError` here rather than on
    first evaluation.

    Staleness is tracked with generation counters.  The structure generation
    is bumped by :meth:`set_mode` and :meth:`invalidate_structure`; the value
    generation by :meth:`invalidate_values`.  Cached fractions are reused only
    while both generations and the query value match the stamp they were
    computed under.
    """

    __slots__ = (
        "_name",
        "_context",
        "_query",
        "_table",
        "_locator",
        "_solver",
        "_evaluator",
        "_structure_generation",
        "_built_generation",
        "_value_generation",
        "_fractions",
        "_fraction_stamp",
    )

    def __init__(
        self,
        query: Any,
        sources: Sequence[Any],
        positions: Sequence[float],
        mode: MorphMode | str = MorphMode.LINEAR,
        *,
        context: MorphContext | None = None,
        name: str | None = None,
    ) -> None:
        self._name = name or "morph"
        self._context = context or current_context()
        self._query = as_value_source(query, role="query")
        self._table = ReferenceTable(
            positions, sources, tolerance=self._context.tolerance
        )
        self._locator = BracketLocator(self._table.positions.tolist())
        self._solver = FractionSolver(
            self._table.positions,
            mode,
            tolerance=self._context.tolerance,
            max_condition=self._context.max_condition,
            node_tolerance=self._context.node_tolerance,
            locator=self._locator,
        )
        self._solver.ensure_built()
        self._evaluator = Evaluator(self._table)
        self._structure_generation = 0
        self._built_generation = 0
        self._value_generation = 0
        self._fractions: np.ndarray | None = None
        self._fraction_stamp: tuple[int, int, float] | None = None
        logger.debug(
            "Morph function initialised",
            extra={
                "event": "morph.initialised",
                "context": {
                    "name": self._name,
                    "size": self._table.size,
                    "mode": self._solver.mode.value,
                },
            },
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def mode(self) -> MorphMode:
        return self._solver.mode

    @property
    def context(self) -> MorphContext:
        return self._context

    @property
    def query(self) -> SupportsValue:
        return self._query

    @property
    def table(self) -> ReferenceTable:
        return self._table

    @property
    def locator(self) -> BracketLocator:
        return self._locator

    @property
    def matrix(self) -> tuple[float, ...]:
        self._refresh_structure()
        return self._solver.matrix

    @property
    def structure_generation(self) -> int:
        return self._structure_generation

    @property
    def value_generation(self) -> int:
        return self._value_generation

    def set_mode(self, mode: MorphMode | str) -> None:
        """Switch the blending policy and rebuild the matrix it needs.

        A configuration the new policy cannot handle raises
        :class:`~momentmorph_core.errors.ConfigurationError` here and keeps
        the previous mode.
        """

        previous = self._solver.mode
        self._solver.set_mode(mode)
        try:
            self._solver.ensure_built()
        except ConfigurationError:
            self._solver.set_mode(previous)
            self._solver.ensure_built()
            raise
        self.invalidate_structure()
        self._built_generation = self._structure_generation

    def invalidate_structure(self) -> None:
        self._structure_generation += 1

    def invalidate_values(self, *_: object) -> None:
        self._value_generation += 1

    def _refresh_structure(self) -> None:
        if self._built_generation != self._structure_generation:
            self._solver.invalidate()
            self._solver.ensure_built()
            self._built_generation = self._structure_generation

    def _current_fractions(self) -> np.ndarray:
        self._refresh_structure()
        m = float(self._query.value)
        stamp = (self._structure_generation, self._value_generation, m)
        if self._fractions is None or stamp != self._fraction_stamp:
            self._fractions = self._solver.solve(m)
            self._fraction_stamp = stamp
        return self._fractions

    def fractions(self) -> tuple[float, ...]:
        """Blending fractions for the current query value."""

        return tuple(float(value) for value in self._current_fractions())

    def evaluate(self) -> float:
        return self._evaluator.evaluate(self._current_fractions())

    def evaluate_at(self, m: float) -> float:
        """Assign ``m`` to the query source and evaluate.

        Only available when the query source accepts assignment, e.g. a
        :class:`~momentmorph_core.graph.arena.ValueNode`.
        """

        try:
            self._query.value = float(m)  # type: ignore[misc]
        except AttributeError as exc:
            raise TypeError(
                f"Query source of morph '{self._name}' is read-only."
            ) from exc
        return self.evaluate()

    def __call__(self) -> float:
        return self.evaluate()

    def __repr__(self) -> str:
        return (
            f"MomentMorphFunction(name={self._name!r}, mode={self.mode.value!r}, "
            f"positions={self._table.positions.tolist()!r})"
        )
