"""Error helpers for the momentmorph command line tool."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from momentmorph_core.errors import ConfigurationError, flatten_context

__all__ = [
    "CliError",
    "ErrorPayload",
    "STATUS_CODES",
    "log_cli_error",
]


STATUS_CODES: Mapping[str, int] = {
    "runtime": 1,
    "usage": 2,
    "io": 3,
    "not_found": 4,
    "config": 5,
}

_FALLBACK_CATEGORY = "runtime"
_CLI_LOGGER = logging.getLogger("momentmorph.cli")


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """Exit status, category and context describing one CLI failure."""

    message: str
    category: str = _FALLBACK_CATEGORY
    context: Mapping[str, Any] = field(default_factory=dict)

    @property
    def status_code(self) -> int:
        return STATUS_CODES.get(self.category, STATUS_CODES[_FALLBACK_CATEGORY])

    def as_dict(self) -> dict[str, Any]:
        return {
            "status_code": self.status_code,
            "category": self.category,
            "message": self.message,
            "context": dict(self.context),
        }


def log_cli_error(
    payload: ErrorPayload,
    *,
    logger: Optional[logging.Logger] = None,
    exc_info: Optional[BaseException] = None,
) -> None:
    """Log ``payload`` at error level with its category and context attached."""

    (logger or _CLI_LOGGER).error(
        payload.message,
        extra={
            "event": "cli.error",
            "category": payload.category,
            "status_code": payload.status_code,
            "context": dict(payload.context),
        },
        exc_info=exc_info,
    )


class CliError(RuntimeError):
    """Failure raised by CLI handlers and turned into an exit status."""

    __slots__ = ("payload", "logged")

    def __init__(
        self,
        message: str,
        *,
        category: str = _FALLBACK_CATEGORY,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.payload = ErrorPayload(
            message=message,
            category=category or _FALLBACK_CATEGORY,
            context=flatten_context(context),
        )
        self.logged = False

    @property
    def category(self) -> str:
        return self.payload.category

    @property
    def status_code(self) -> int:
        return self.payload.status_code

    @property
    def context(self) -> dict[str, Any]:
        return dict(self.payload.context)

    @classmethod
    def from_configuration_error(cls, error: ConfigurationError) -> "CliError":
        wrapped = cls(str(error), category="config", context=error.context)
        wrapped.__cause__ = error
        return wrapped
