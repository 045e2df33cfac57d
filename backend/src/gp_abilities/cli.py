"""GP Abilities command line.

Runs the same registry and executor as the HTTP API against the configured
store and prints JSON.

Usage:
    gp-abilities list                                   # All abilities
    gp-abilities list --category site                   # Filter by category
    gp-abilities describe generatepress/get-settings    # One descriptor
    gp-abilities run generatepress/get-options --input '{"options": ["generate_settings"]}'
    gp-abilities serve                                  # Start the HTTP API

Exit status: 0 on success, 1 when the ability answers ``success: false``,
2 when the call is rejected before the handler runs.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from .abilities.base import ExecuteContext
from .abilities.executor import EXECUTOR
from .abilities.registry import REGISTRY
from .core.config import get_settings_instance
from .core.exceptions import GpAbilitiesException
from .core.logging import get_logger, setup_logging

logger = get_logger(__name__)


def _dump(obj) -> None:
    print(json.dumps(obj, indent=2, sort_keys=True, default=str))


def _context() -> ExecuteContext:
    settings = get_settings_instance()
    return ExecuteContext(
        user_id=settings.caller_user_id,
        capabilities=frozenset(settings.caller_capabilities),
    )


def cmd_list(category: str | None) -> int:
    _dump([{"name": d.name, "label": d.label, "category": d.category} for d in REGISTRY.list(category)])
    return 0


def cmd_describe(name: str) -> int:
    _dump(REGISTRY.get(name).to_public())
    return 0


def cmd_run(name: str, raw_input: str) -> int:
    try:
        params = json.loads(raw_input) if raw_input else {}
    except json.JSONDecodeError as e:
        print(f"Error: --input is not valid JSON: {e}", file=sys.stderr)
        return 2
    if not isinstance(params, dict):
        print("Error: --input must be a JSON object", file=sys.stderr)
        return 2

    payload = asyncio.run(EXECUTOR.execute(name=name, params=params, context=_context()))
    _dump(payload)
    return 0 if payload.get("success") else 1


def cmd_serve() -> int:
    from .main import run

    run()
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="gp-abilities",
        description="GeneratePress / GenerateBlocks abilities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List registered abilities")
    p_list.add_argument("--category", help="Only abilities in this category")

    p_describe = sub.add_parser("describe", help="Show one ability descriptor")
    p_describe.add_argument("name", help="Ability name, e.g. generatepress/get-info")

    p_run = sub.add_parser("run", help="Execute an ability")
    p_run.add_argument("name", help="Ability name, e.g. generatepress/get-info")
    p_run.add_argument("--input", default="{}", help="Ability input as a JSON object")

    sub.add_parser("serve", help="Start the HTTP API")

    args = parser.parse_args(argv)
    setup_logging(stream=sys.stderr)

    try:
        if args.command == "list":
            return cmd_list(args.category)
        if args.command == "describe":
            return cmd_describe(args.name)
        if args.command == "run":
            return cmd_run(args.name, args.input)
        return cmd_serve()
    except GpAbilitiesException as e:
        _dump(e.to_dict())
        return 2


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover
    cli()
