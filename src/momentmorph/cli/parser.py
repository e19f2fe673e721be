"""Argument parsing helpers for the momentmorph CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Mapping, Optional

from momentmorph_core.morphing.fractions import MorphMode

from .commands import handle_evaluate, handle_fractions, handle_scan


def _add_global_options(parser: argparse.ArgumentParser, logging_cfg: Mapping[str, Any]) -> None:
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to the pyproject.toml (or its directory) to load.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=logging_cfg.get("level", "info"),
        help="Logging level (e.g. debug, info, warning).",
    )
    parser.add_argument(
        "--log-output",
        dest="log_output",
        default=logging_cfg.get("output", "stderr"),
        help="Logging destination (stdout, stderr or a file path).",
    )
    parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=("json", "text"),
        default=logging_cfg.get("format", "json"),
        help="Logging formatter (json or text).",
    )


def _add_morph_options(
    parser: argparse.ArgumentParser,
    *,
    default_definitions: Optional[Path],
    default_format: str,
) -> None:
    parser.add_argument(
        "definitions",
        nargs="?",
        type=Path,
        default=default_definitions,
        help="YAML file with morph definitions (default: bundled samples).",
    )
    parser.add_argument(
        "--morph",
        dest="morphs",
        action="append",
        default=None,
        help="Restrict the command to the named morph (repeatable).",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in MorphMode],
        default=None,
        help="Override the blending mode of every selected morph.",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=("json", "text"),
        default=default_format,
        help=f"Output format (default: {default_format}).",
    )


def build_parser(config: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    config = dict(config or {})
    logging_cfg_raw = config.get("logging", {})
    logging_cfg = dict(logging_cfg_raw) if isinstance(logging_cfg_raw, Mapping) else {}
    output_cfg_raw = config.get("output", {})
    output_cfg = dict(output_cfg_raw) if isinstance(output_cfg_raw, Mapping) else {}
    default_format = str(output_cfg.get("format", "text"))
    if default_format not in {"json", "text"}:
        default_format = "text"
    definitions_raw = config.get("definitions")
    default_definitions = Path(str(definitions_raw)) if definitions_raw else None

    parser = argparse.ArgumentParser(
        prog="momentmorph",
        description="Blend reference values with one-dimensional moment morphing.",
    )
    _add_global_options(parser, logging_cfg)

    subparsers = parser.add_subparsers(dest="command", required=True)

    evaluate_parser = subparsers.add_parser(
        "evaluate", help="Evaluate morphs at the given query positions."
    )
    _add_morph_options(
        evaluate_parser,
        default_definitions=default_definitions,
        default_format=default_format,
    )
    evaluate_parser.add_argument(
        "--at",
        dest="points",
        type=float,
        nargs="+",
        default=None,
        help="Query positions (default: the query stored in each definition).",
    )
    evaluate_parser.set_defaults(handler=handle_evaluate)

    fractions_parser = subparsers.add_parser(
        "fractions", help="Print the blending fractions at the given query positions."
    )
    _add_morph_options(
        fractions_parser,
        default_definitions=default_definitions,
        default_format=default_format,
    )
    fractions_parser.add_argument(
        "--at",
        dest="points",
        type=float,
        nargs="+",
        default=None,
        help="Query positions (default: the query stored in each definition).",
    )
    fractions_parser.set_defaults(handler=handle_fractions)

    scan_parser = subparsers.add_parser(
        "scan", help="Evaluate morphs on an evenly spaced grid."
    )
    _add_morph_options(
        scan_parser,
        default_definitions=default_definitions,
        default_format=default_format,
    )
    scan_parser.add_argument("--start", type=float, required=True, help="First grid point.")
    scan_parser.add_argument("--stop", type=float, required=True, help="Last grid point.")
    scan_parser.add_argument(
        "--steps", type=int, default=11, help="Number of grid points (default: 11)."
    )
    scan_parser.set_defaults(handler=handle_scan)

    return parser
