"""Runtime helpers shared across :mod:`momentmorph_core` layers."""

from __future__ import annotations

from . import context as _context
from .context import *  # noqa: F401,F403

__all__ = list(getattr(_context, "__all__", ()))
