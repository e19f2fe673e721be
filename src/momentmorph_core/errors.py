"""Exception types raised by the morphing engine."""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional

__all__ = ["ConfigurationError", "flatten_context"]


def flatten_context(context: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Copy ``context`` keeping scalars and stringifying everything else."""

    if not context:
        return {}
    payload: MutableMapping[str, Any] = {}
    for key, value in context.items():
        if isinstance(value, (str, int, float, bool)) or value is None:
            payload[str(key)] = value
        else:
            payload[str(key)] = str(value)
    return dict(payload)


class ConfigurationError(ValueError):
    """Raised when a morph function cannot be built from its inputs.

    Configuration errors are only ever raised while a morph function is being
    constructed (or its definition is being parsed), never while it is being
    evaluated.  ``context`` carries a flat mapping with the offending sizes,
    indices or values so that callers can log the failure with structure.
    """

    __slots__ = ("context",)

    def __init__(
        self,
        message: str,
        *,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.context = flatten_context(context)
