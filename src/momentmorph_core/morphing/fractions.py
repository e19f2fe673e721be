"""Blending policies and the solver producing per-reference fractions."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Mapping, Sequence

import numpy as np
from scipy.linalg import lu_factor, lu_solve

from momentmorph_core.errors import ConfigurationError
from momentmorph_core.morphing.bracket import BracketLocator

__all__ = ["MorphMode", "FractionSolver"]

logger = logging.getLogger(__name__)


class MorphMode(str, Enum):
    """Closed set of blending policies supported by the solver."""

    LINEAR = "linear"
    NON_LINEAR = "nonlinear"
    NON_LINEAR_POS_FRACTIONS = "nonlinear_pos_fractions"
    NON_LINEAR_LIN_FRACTIONS = "nonlinear_lin_fractions"

    @classmethod
    def coerce(cls, value: "MorphMode | str") -> "MorphMode":
        """Resolve enum members, values and CamelCase names alike.

        ``"NonLinearPosFractions"``, ``"nonlinear-pos-fractions"`` and
        ``MorphMode.NON_LINEAR_POS_FRACTIONS`` all resolve to the same member.
        """

        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ConfigurationError(
                "Morph mode must be a string or MorphMode member.",
                context={"mode": value},
            )
        key = value.strip().lower().replace("-", "").replace("_", "").replace(" ", "")
        resolved = _MODE_ALIASES.get(key)
        if resolved is None:
            raise ConfigurationError(
                f"Unknown morph mode '{value}'.",
                context={"mode": value, "choices": ", ".join(m.value for m in cls)},
            )
        return resolved

    @property
    def uses_matrix(self) -> bool:
        """Whether the policy needs the factorised interpolation matrix."""

        return self is not MorphMode.LINEAR


_MODE_ALIASES: Mapping[str, MorphMode] = {
    member.value.replace("_", ""): member for member in MorphMode
}


class FractionSolver:
    """Build the interpolation matrix and solve for blending fractions.

    The matrix holds the polynomial basis ``1, d, d**2, ..., d**(N-1)`` of
    every reference position, where ``d`` is the position measured from the
    first reference and scaled by the reference span.  Row ``j`` stores power
    ``j`` and column ``i`` reference ``i``, so the fractions of a query ``m``
    satisfy ``M @ frac == basis(m)``.  The matrix is stored as a flat
    row-major buffer addressed by :meth:`index`.

    Only the non-linear policies need the matrix.  :meth:`build` LU-factorises
    it once per structural or mode change and rejects it unless solving at
    every reference position returns that reference's unit vector within
    ``node_tolerance``; :meth:`solve` then back-substitutes the basis of the
    query.
    """

    __slots__ = (
        "_positions",
        "_size",
        "_mode",
        "_tolerance",
        "_max_condition",
        "_node_tolerance",
        "_locator",
        "_origin",
        "_scale",
        "_matrix",
        "_factors",
        "_node_fractions",
        "_powers",
    )

    def __init__(
        self,
        positions: Sequence[float],
        mode: MorphMode | str = MorphMode.LINEAR,
        *,
        tolerance: float,
        max_condition: float,
        node_tolerance: float = 1e-8,
        locator: BracketLocator | None = None,
    ) -> None:
        self._positions = np.asarray(positions, dtype=float)
        self._size = int(self._positions.size)
        self._mode = MorphMode.coerce(mode)
        self._tolerance = float(tolerance)
        self._max_condition = float(max_condition)
        self._node_tolerance = float(node_tolerance)
        self._locator = locator or BracketLocator(self._positions.tolist())
        self._origin = float(self._positions[0])
        self._scale = float(self._positions[-1] - self._positions[0])
        self._powers = np.arange(self._size, dtype=float)
        self._matrix: np.ndarray | None = None
        self._factors: tuple[np.ndarray, np.ndarray] | None = None
        self._node_fractions: np.ndarray | None = None

    @property
    def mode(self) -> MorphMode:
        return self._mode

    @property
    def size(self) -> int:
        return self._size

    @property
    def is_built(self) -> bool:
        return self._factors is not None

    @property
    def matrix(self) -> tuple[float, ...]:
        """Flat row-major copy of the interpolation matrix."""

        if self._matrix is None:
            self._matrix = self._fill()
        return tuple(float(value) for value in self._matrix)

    def index(self, i: int, j: int) -> int:
        return i * self._size + j

    def set_mode(self, mode: MorphMode | str) -> None:
        resolved = MorphMode.coerce(mode)
        if resolved is not self._mode:
            logger.debug(
                "Morph mode changed",
                extra={
                    "event": "morph.mode_changed",
                    "context": {"previous": self._mode.value, "mode": resolved.value},
                },
            )
        self._mode = resolved
        self.invalidate()

    def invalidate(self) -> None:
        self._matrix = None
        self._factors = None
        self._node_fractions = None

    def _basis(self, m: float) -> np.ndarray:
        scaled = (m - self._origin) / self._scale
        return np.power(scaled, self._powers)

    def _fill(self) -> np.ndarray:
        size = self._size
        flat = np.empty(size * size, dtype=float)
        for j, position in enumerate(self._positions):
            column = self._basis(float(position))
            for i in range(size):
                flat[self.index(i, j)] = column[i]
        return flat

    def build(self) -> None:
        """Fill and factorise the matrix, then verify it reproduces every node.

        Raises :class:`ConfigurationError` when the matrix is singular, its
        condition number exceeds ``max_condition`` or the solved node
        fractions drift from the unit vectors by more than ``node_tolerance``.
        """

        size = self._size
        flat = self._fill()
        square = flat.reshape(size, size)
        context = {
            "size": size,
            "positions": ", ".join(f"{p:g}" for p in self._positions),
            "max_condition": self._max_condition,
        }

        condition = float(np.linalg.cond(square))
        if not np.isfinite(condition) or condition > self._max_condition:
            raise ConfigurationError(
                "Reference positions produce a singular interpolation matrix.",
                context={**context, "condition": condition},
            )
        try:
            factors = lu_factor(square)
        except (np.linalg.LinAlgError, ValueError) as exc:
            raise ConfigurationError(
                "Reference positions produce a singular interpolation matrix.",
                context=context,
            ) from exc

        basis = np.stack([self._basis(float(p)) for p in self._positions], axis=1)
        node_fractions = lu_solve(factors, basis).T
        drift = float(np.max(np.abs(node_fractions - np.eye(size))))
        if not np.isfinite(drift) or drift > self._node_tolerance:
            raise ConfigurationError(
                "Interpolation matrix cannot reproduce the reference points.",
                context={**context, "drift": drift, "node_tolerance": self._node_tolerance},
            )

        self._matrix = flat
        self._factors = factors
        self._node_fractions = node_fractions
        logger.debug(
            "Interpolation matrix built",
            extra={
                "event": "morph.matrix_built",
                "context": {
                    "size": size,
                    "mode": self._mode.value,
                    "condition": condition,
                    "drift": drift,
                },
            },
        )

    def ensure_built(self) -> None:
        if self._mode.uses_matrix and self._factors is None:
            self.build()

    def solve(self, m: float) -> np.ndarray:
        """Return the fraction vector for query ``m`` under the active mode."""

        self.ensure_built()
        return _POLICIES[self._mode](self, float(m))

    def _linear(self, m: float) -> np.ndarray:
        lo, hi = self._locator.bracket(m)
        fractions = np.zeros(self._size, dtype=float)
        left = self._positions[lo]
        right = self._positions[hi]
        fractions[lo] = (right - m) / (right - left)
        fractions[hi] = 1.0 - fractions[lo]
        return fractions

    def _non_linear(self, m: float) -> np.ndarray:
        assert self._factors is not None
        return lu_solve(self._factors, self._basis(m))

    def _non_linear_pos(self, m: float) -> np.ndarray:
        fractions = np.clip(self._non_linear(m), 0.0, None)
        total = float(fractions.sum())
        if total <= self._tolerance:
            logger.warning(
                "All non-linear fractions were clipped; using linear weights",
                extra={"event": "morph.fractions_clipped", "context": {"m": m}},
            )
            return self._linear(m)
        return fractions / total

    def _non_linear_lin(self, m: float) -> np.ndarray:
        assert self._node_fractions is not None
        lo, hi = self._locator.bracket(m)
        weight = min(max(self._locator.segment_fraction(m), 0.0), 1.0)
        return (1.0 - weight) * self._node_fractions[lo] + weight * self._node_fractions[hi]


_POLICIES: Mapping[MorphMode, Callable[[FractionSolver, float], np.ndarray]] = {
    MorphMode.LINEAR: FractionSolver._linear,
    MorphMode.NON_LINEAR: FractionSolver._non_linear,
    MorphMode.NON_LINEAR_POS_FRACTIONS: FractionSolver._non_linear_pos,
    MorphMode.NON_LINEAR_LIN_FRACTIONS: FractionSolver._non_linear_lin,
}
