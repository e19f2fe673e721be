"""Combine blending fractions with the current source values."""

from __future__ import annotations

from typing import Iterable

from momentmorph_core.morphing.reference import ReferenceTable

__all__ = ["Evaluator"]


class Evaluator:
    """Weighted sum of the sources bound to a :class:`ReferenceTable`."""

    __slots__ = ("_table",)

    def __init__(self, table: ReferenceTable) -> None:
        self._table = table

    def evaluate(self, fractions: Iterable[float]) -> float:
        # Zero-weight sources are not read at all.
        total = 0.0
        for index, weight in enumerate(fractions):
            if weight == 0.0:
                continue
            total += float(weight) * self._table.read(index)
        return total
