"""Process-wide numeric context shared by morph functions."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping as ABCMapping
from dataclasses import dataclass
from typing import Any, Mapping

__all__ = [
    "DEFAULT_TOLERANCE",
    "DEFAULT_MAX_CONDITION",
    "DEFAULT_NODE_TOLERANCE",
    "NumericOptions",
    "MorphContext",
    "current_context",
    "configure_context_from_options",
    "reset_context",
]

logger = logging.getLogger(__name__)


DEFAULT_TOLERANCE = 1e-9
DEFAULT_MAX_CONDITION = 1e14
DEFAULT_NODE_TOLERANCE = 1e-8


@dataclass(frozen=True, slots=True)
class NumericOptions:
    """Immutable numeric settings parsed from configuration mappings."""

    tolerance: float = DEFAULT_TOLERANCE
    max_condition: float = DEFAULT_MAX_CONDITION
    node_tolerance: float = DEFAULT_NODE_TOLERANCE

    @classmethod
    def from_config(
        cls, config: Mapping[str, Any] | None = None
    ) -> "NumericOptions":
        """Coerce a raw configuration mapping into numeric options.

        The ``[numerics]`` table is consulted first; a legacy top-level
        ``tolerance`` key is honoured when the table does not define one.
        Invalid or non-positive entries fall back to the defaults.
        """

        def _as_mapping(value: Any) -> Mapping[str, Any]:
            if isinstance(value, ABCMapping):
                return value
            return {}

        def _coerce_positive(value: Any, fallback: float) -> float:
            try:
                numeric = float(value)  # type: ignore[arg-type]
            except (TypeError, ValueError):
                return fallback
            if not math.isfinite(numeric) or numeric <= 0.0:
                return fallback
            return numeric

        root = _as_mapping(config)
        numerics_cfg = _as_mapping(root.get("numerics"))

        tolerance_candidate: Any = numerics_cfg.get("tolerance")
        if tolerance_candidate is None:
            tolerance_candidate = root.get("tolerance")
        tolerance = _coerce_positive(tolerance_candidate, DEFAULT_TOLERANCE)

        max_condition = _coerce_positive(
            numerics_cfg.get("max_condition"), DEFAULT_MAX_CONDITION
        )
        node_tolerance = _coerce_positive(
            numerics_cfg.get("node_tolerance"), DEFAULT_NODE_TOLERANCE
        )
        return cls(
            tolerance=tolerance,
            max_condition=max_condition,
            node_tolerance=node_tolerance,
        )

    def to_config(self) -> dict[str, float]:
        """Serialise the options into a ``[numerics]`` mapping."""

        return {
            "tolerance": self.tolerance,
            "max_condition": self.max_condition,
            "node_tolerance": self.node_tolerance,
        }


class MorphContext:
    """Explicit numeric context handed to morph functions.

    A context is inert until :meth:`activate` pushes it onto the process-wide
    stack; :meth:`deactivate` pops it again.  Morph functions read the active
    context only when none is passed to them explicitly.
    """

    __slots__ = ("_options", "_active")

    def __init__(self, options: NumericOptions | None = None) -> None:
        self._options = options or NumericOptions()
        self._active = False

    @property
    def options(self) -> NumericOptions:
        return self._options

    @property
    def tolerance(self) -> float:
        return self._options.tolerance

    @property
    def max_condition(self) -> float:
        return self._options.max_condition

    @property
    def node_tolerance(self) -> float:
        return self._options.node_tolerance

    @property
    def active(self) -> bool:
        return self._active

    def activate(self) -> "MorphContext":
        """Make this context the one returned by :func:`current_context`."""

        if self._active:
            raise RuntimeError("MorphContext is already active")
        _CONTEXT_STACK.append(self)
        self._active = True
        logger.debug(
            "Morph context activated",
            extra={"event": "context.activated", "context": self._options.to_config()},
        )
        return self

    def deactivate(self) -> None:
        """Remove this context from the stack; it must be the innermost one."""

        if not self._active:
            raise RuntimeError("MorphContext is not active")
        if not _CONTEXT_STACK or _CONTEXT_STACK[-1] is not self:
            raise RuntimeError("MorphContext contexts must be deactivated in LIFO order")
        _CONTEXT_STACK.pop()
        self._active = False
        logger.debug("Morph context deactivated", extra={"event": "context.deactivated"})

    def __enter__(self) -> "MorphContext":
        return self.activate()

    def __exit__(self, *exc_info: object) -> None:
        self.deactivate()

    def __repr__(self) -> str:
        return (
            f"MorphContext(tolerance={self.tolerance!r}, "
            f"max_condition={self.max_condition!r})"
        )


_DEFAULT_CONTEXT = MorphContext()
_CONTEXT_STACK: list[MorphContext] = []


def current_context() -> MorphContext:
    """Return the innermost active context, or the process default."""

    if _CONTEXT_STACK:
        return _CONTEXT_STACK[-1]
    return _DEFAULT_CONTEXT


def configure_context_from_options(options: NumericOptions) -> MorphContext:
    """Replace the process default context with one built from ``options``."""

    global _DEFAULT_CONTEXT

    _DEFAULT_CONTEXT = MorphContext(options)
    return _DEFAULT_CONTEXT


def reset_context() -> None:
    """Tear down every active context and restore the default options."""

    global _DEFAULT_CONTEXT

    while _CONTEXT_STACK:
        _CONTEXT_STACK.pop()._active = False
    _DEFAULT_CONTEXT = MorphContext()
