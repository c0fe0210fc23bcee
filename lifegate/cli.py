"""
Inspect how a container tree resolves.

    lifegate-resolve containers.yaml --config lifegate.yaml

Prints the effective lifecycle mode of every declared container and the
declaration it came from. Exits with status 2 on a malformed container
graph, an invalid declarations file or invalid settings.
"""

import argparse
import json
import sys
from typing import List, Optional

import structlog
from pydantic import ValidationError

from .config import get_settings, load_settings
from .declarations import load_declarations
from .errors import LifegateError
from .gate import ExecutionGate
from .log import configure_logging

LOGGER = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lifegate-resolve",
        description="Resolve test container lifecycle modes",
    )
    parser.add_argument(
        "declarations",
        type=str,
        help="YAML file listing containers (id, lifecycle, parent)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML settings file (default_lifecycle, log_level)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Override the configured log level",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit one JSON document instead of a table",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    rows = []
    try:
        settings = load_settings(args.config) if args.config else get_settings()
        if args.log_level is None:
            configure_logging(settings.log_level)
        gate = ExecutionGate.from_settings(settings, registry=load_declarations(args.declarations))
        for container_id in gate.registry:
            rows.append(gate.explain(container_id).to_dict())
    except LifegateError as exc:
        LOGGER.error("cli.resolve.failed", code=exc.code, message=exc.message, details=exc.details)
        return 2
    except ValidationError as exc:
        LOGGER.error("cli.resolve.failed", code="INVALID_SETTINGS", message=str(exc))
        return 2
    except (ValueError, KeyError) as exc:
        LOGGER.error("cli.resolve.failed", code="INVALID_DECLARATIONS", message=str(exc))
        return 2

    if args.json:
        print(json.dumps({"default_mode": settings.default_lifecycle.value, "containers": rows}, indent=2))
        return 0

    for row in rows:
        source = row["source_id"] or "(default)"
        print(f"{row['container_id']:<40} {row['mode']:<12} {source}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
