"""One-dimensional moment morphing."""

from __future__ import annotations

from .bracket import BracketLocator
from .evaluator import Evaluator
from .fractions import FractionSolver, MorphMode
from .function import MomentMorphFunction
from .reference import (
    ConstantValue,
    ReferencePoint,
    ReferenceTable,
    SupportsValue,
    as_value_source,
)

__all__ = [
    "BracketLocator",
    "ConstantValue",
    "Evaluator",
    "FractionSolver",
    "MomentMorphFunction",
    "MorphMode",
    "ReferencePoint",
    "ReferenceTable",
    "SupportsValue",
    "as_value_source",
]
