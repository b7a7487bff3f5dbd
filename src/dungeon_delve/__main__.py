from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .app import run_headless
from .exceptions import SettingsError
from .settings import Settings


def _setup_logging(verbosity: int, default_level: int) -> None:
    level = default_level
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="dungeon-delve",
        description="Dungeon Delve - headless runner",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--seed", default=None, help="Seed for a reproducible run (int or string)")
    parser.add_argument("--settings", type=Path, default=None, help="YAML settings file merged over the defaults")
    parser.add_argument("--keys", default=None, help='Scripted, space-separated key sequence, e.g. "UP UP LEFT F1 W"')
    parser.add_argument("--max-turns", type=int, default=None, help="Stop after N turns")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)")

    args = parser.parse_args(argv)
    try:
        settings = Settings.load(args.settings)
    except SettingsError as ex:
        parser.error(str(ex))
    _setup_logging(args.verbose, settings.logging_level)

    # CLI over settings file and env vars
    if args.seed is not None:
        settings.seed = int(args.seed) if args.seed.lstrip("-").isdigit() else args.seed

    keys = args.keys.split() if args.keys is not None else None
    return run_headless(settings, keys=keys, max_turns=args.max_turns)


if __name__ == "__main__":
    sys.exit(main())
