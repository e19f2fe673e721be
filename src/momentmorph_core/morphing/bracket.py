"""Locate the reference bracket enclosing a query position."""

from __future__ import annotations

from bisect import bisect_right
from typing import Sequence

__all__ = ["BracketLocator"]


class BracketLocator:
    """Binary search over sorted reference positions.

    The bracket is always a pair of adjacent indices, even for queries below
    the first or above the last position, so linear extrapolation can use the
    nearest edge segment.
    """

    __slots__ = ("_positions", "_last")

    def __init__(self, positions: Sequence[float]) -> None:
        self._positions = [float(position) for position in positions]
        if len(self._positions) < 2:
            raise ValueError("BracketLocator requires at least two positions")
        self._last = len(self._positions) - 1

    def idxmin(self, m: float) -> int:
        """Largest index with ``position <= m``, clamped to ``[0, N-2]``."""

        index = bisect_right(self._positions, m) - 1
        if index < 0:
            return 0
        if index > self._last - 1:
            return self._last - 1
        return index

    def idxmax(self, m: float) -> int:
        return min(self.idxmin(m) + 1, self._last)

    def bracket(self, m: float) -> tuple[int, int]:
        lo = self.idxmin(m)
        return lo, lo + 1

    def segment_fraction(self, m: float) -> float:
        """Position of ``m`` inside its bracket; unclamped outside the range."""

        lo, hi = self.bracket(m)
        left = self._positions[lo]
        return (m - left) / (self._positions[hi] - left)
