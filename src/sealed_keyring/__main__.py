"""sealed-keyring -- command-line entry point.

Usage::

    python -m sealed_keyring [--config PATH] [--backend NAME] [--service NAME] check
    python -m sealed_keyring [...] ids [--prefix P]
    python -m sealed_keyring [...] reset --yes

``check`` probes whether the system credential store is usable. ``ids``
lists stored item ids. ``reset`` deletes every item in the service
namespace. None of these need the secret key.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from sealed_keyring.config import Settings, load_settings
from sealed_keyring.errors import BackendError
from sealed_keyring.listing import ListOptions
from sealed_keyring.stores.factory import check_system, create_store

logger = logging.getLogger("sealed_keyring")


def load_config(config_path: str | None, backend: str | None, service: str | None) -> Settings:
    """Load settings and apply CLI overrides."""
    settings = load_settings(config_path=Path(config_path) if config_path else None)
    if backend:
        settings.keyring.backend = backend  # type: ignore[assignment]
    if service:
        settings.keyring.service = service
    return settings


# ---------------------------------------------------------------------------
# CLI argument parsing
# ---------------------------------------------------------------------------


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Parameters
    ----------
    argv:
        Argument list.  Defaults to ``sys.argv[1:]`` when ``None``.
    """
    parser = argparse.ArgumentParser(
        prog="sealed_keyring",
        description="Inspect and manage a sealed keyring",
    )
    parser.add_argument("--config", type=str, default=None, help="Path to YAML configuration file")
    parser.add_argument(
        "--backend",
        choices=["system", "mem", "file"],
        default=None,
        help="Store backend (overrides configuration)",
    )
    parser.add_argument("--service", type=str, default=None, help="Service namespace")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("check", help="Check whether the system keyring is available")
    ids_parser = commands.add_parser("ids", help="List stored item ids")
    ids_parser.add_argument("--prefix", type=str, default="", help="Only list ids with this prefix")
    reset_parser = commands.add_parser("reset", help="Delete every item in the namespace")
    reset_parser.add_argument("--yes", action="store_true", default=False, help="Confirm the reset")
    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def run(args: argparse.Namespace, settings: Settings) -> int:
    """Execute the parsed command and return the process exit status."""
    if args.command == "check":
        check_system()
        print("available")
        return 0

    store = create_store(settings)
    if args.command == "ids":
        for item_id in store.ids(ListOptions(prefix=args.prefix)):
            print(item_id)
        return 0

    if not args.yes:
        print("refusing to reset without --yes", file=sys.stderr)
        return 2
    store.reset()
    logger.info("Reset %s store for service %s", store.name, settings.keyring.service)
    return 0


# ---------------------------------------------------------------------------
# Script entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """Parse CLI args and run the command."""
    args = parse_args(argv)
    settings = load_config(args.config, args.backend, args.service)

    logging.basicConfig(
        level=settings.logging.level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        return run(args, settings)
    except BackendError as exc:
        logger.error("%s", exc)
        if args.command == "check":
            print("unavailable", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
