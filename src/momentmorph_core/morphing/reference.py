"""Reference points and the immutable table that anchors a morph."""

from __future__ import annotations

import inspect
import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Iterator, Protocol, Sequence

import numpy as np

from momentmorph_core.errors import ConfigurationError

__all__ = [
    "SupportsValue",
    "ConstantValue",
    "as_value_source",
    "ReferencePoint",
    "ReferenceTable",
]

_MISSING = object()


class SupportsValue(Protocol):
    """Anything exposing a real-valued ``value`` that can be pulled on demand."""

    @property
    def value(self) -> float:  # pragma: no cover - protocol definition
        ...


class ConstantValue:
    """Read-only value source wrapping a plain number."""

    __slots__ = ("_value",)

    def __init__(self, value: float) -> None:
        self._value = float(value)

    @property
    def value(self) -> float:
        return self._value

    def __repr__(self) -> str:
        return f"ConstantValue({self._value!r})"


def as_value_source(candidate: Any, *, role: str = "source") -> SupportsValue:
    """Return ``candidate`` as a pull-able value source.

    Numbers are wrapped in :class:`ConstantValue`; objects already exposing a
    ``value`` attribute are returned untouched.
    """

    if isinstance(candidate, bool):
        raise ConfigurationError(
            f"A boolean cannot be used as a morph {role}.",
            context={"role": role},
        )
    if isinstance(candidate, Real):
        return ConstantValue(float(candidate))
    if inspect.getattr_static(candidate, "value", _MISSING) is not _MISSING:
        return candidate
    raise ConfigurationError(
        f"Morph {role} must be a number or expose a 'value' attribute.",
        context={"role": role, "type": type(candidate).__name__},
    )


@dataclass(frozen=True, slots=True)
class ReferencePoint:
    """Position of one reference on the morphing axis."""

    position: float
    index: int


class ReferenceTable:
    """Ordered reference positions bound to their external source values.

    The table never owns its sources: it only keeps the handles it was given
    and reads them through :attr:`SupportsValue.value` when asked.
    """

    __slots__ = ("_points", "_sources", "_positions")

    def __init__(
        self,
        positions: Sequence[float],
        sources: Sequence[Any],
        *,
        tolerance: float,
    ) -> None:
        raw_positions = list(positions)
        raw_sources = list(sources)
        if len(raw_positions) != len(raw_sources):
            raise ConfigurationError(
                "Number of reference positions does not match number of sources.",
                context={"positions": len(raw_positions), "sources": len(raw_sources)},
            )
        size = len(raw_positions)
        if size < 2:
            raise ConfigurationError(
                "At least two reference points are required to build a morph.",
                context={"size": size},
            )

        resolved: list[float] = []
        for index, raw in enumerate(raw_positions):
            try:
                position = float(raw)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(
                    "Reference positions must be real numbers.",
                    context={"index": index, "position": raw},
                ) from exc
            if not math.isfinite(position):
                raise ConfigurationError(
                    "Reference positions must be finite.",
                    context={"index": index, "position": position},
                )
            if resolved and position - resolved[-1] <= tolerance:
                raise ConfigurationError(
                    "Reference positions must be strictly increasing without duplicates.",
                    context={
                        "index": index,
                        "previous": resolved[-1],
                        "position": position,
                    },
                )
            resolved.append(position)

        self._positions = np.asarray(resolved, dtype=float)
        self._positions.setflags(write=False)
        self._points = tuple(
            ReferencePoint(position=position, index=index)
            for index, position in enumerate(resolved)
        )
        self._sources = tuple(
            as_value_source(source, role=f"source[{index}]")
            for index, source in enumerate(raw_sources)
        )

    @property
    def size(self) -> int:
        return len(self._points)

    @property
    def positions(self) -> np.ndarray:
        """Read-only array of reference positions."""

        return self._positions

    @property
    def points(self) -> tuple[ReferencePoint, ...]:
        return self._points

    @property
    def sources(self) -> tuple[SupportsValue, ...]:
        return self._sources

    @property
    def span(self) -> tuple[float, float]:
        return float(self._positions[0]), float(self._positions[-1])

    def source(self, index: int) -> SupportsValue:
        return self._sources[index]

    def read(self, index: int) -> float:
        """Pull the current value of the source bound to ``index``."""

        return float(self._sources[index].value)

    def values(self) -> list[float]:
        """Pull the current value of every source."""

        return [float(source.value) for source in self._sources]

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[tuple[ReferencePoint, SupportsValue]]:
        return iter(zip(self._points, self._sources))

    def __repr__(self) -> str:
        return f"ReferenceTable(positions={self._positions.tolist()!r})"
