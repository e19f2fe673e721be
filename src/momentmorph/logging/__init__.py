"""Logging utilities for momentmorph."""

from momentmorph.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
