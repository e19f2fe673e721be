"""Value graph feeding morph functions."""

from __future__ import annotations

from .arena import DependencyGraph, ValueNode

__all__ = ["DependencyGraph", "ValueNode"]
