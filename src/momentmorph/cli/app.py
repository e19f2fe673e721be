"""Command line application entry point for momentmorph."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import NoReturn, Optional, Sequence

from momentmorph_core.runtime.context import (
    NumericOptions,
    configure_context_from_options,
)

from ..logging.config import setup_logging
from .errors import CliError, log_cli_error
from .io import load_cli_config
from .parser import build_parser


def run_cli(args: Optional[Sequence[str]] = None) -> str:
    """Execute the momentmorph command line interface."""

    config_parser = argparse.ArgumentParser(add_help=False)
    config_parser.add_argument("--config", dest="config_path", type=Path, default=None)
    config_parser.add_argument("--log-level", dest="log_level", default=None)
    config_parser.add_argument("--log-output", dest="log_output", default=None)
    config_parser.add_argument(
        "--log-format", dest="log_format", choices=("json", "text"), default=None
    )
    preliminary, remaining = config_parser.parse_known_args(args)

    try:
        config = load_cli_config(preliminary.config_path)
    except CliError as exc:
        _exit_with(exc)
    logging_config = dict(config.get("logging", {}))
    for key in ("level", "output", "format"):
        override = getattr(preliminary, f"log_{key}")
        if override is not None:
            logging_config[key] = override
    logging_config.setdefault("level", "info")
    logging_config.setdefault("output", "stderr")
    logging_config.setdefault("format", "json")
    config["logging"] = logging_config
    setup_logging(config)

    context = configure_context_from_options(NumericOptions.from_config(config))

    parser = build_parser(config)
    namespace = parser.parse_args(list(remaining), namespace=preliminary)
    namespace.config = config
    namespace.context = context

    try:
        result = namespace.handler(namespace, config=config)
    except CliError as exc:
        _exit_with(exc)
    if result:
        sys.stdout.write(result)
        if not result.endswith("\n"):
            sys.stdout.write("\n")
    return result


def _exit_with(exc: CliError) -> NoReturn:
    if not exc.logged:
        log_cli_error(exc.payload, exc_info=exc)
        exc.logged = True
    sys.stdout.write(exc.payload.message)
    if not exc.payload.message.endswith("\n"):
        sys.stdout.write("\n")
    raise SystemExit(exc.status_code) from exc


def main() -> None:  # pragma: no cover - thin wrapper
    run_cli()


if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()
