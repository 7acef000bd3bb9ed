"""gae-purge CLI: delete old versions of an App Engine project.

Usage:
    gae-purge [-v] <project-id>

Retention amounts and the service use their defaults here; callers needing
other values use :func:`gae_purge.purge_old_versions` directly.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

from .errors import PurgeError
from .purge import PurgeOptions, purge_old_versions

if TYPE_CHECKING:
    from typing import NoReturn, Sequence

__version__ = "0.1.0"


class _PurgeArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the gae-purge CLI."""
    parser = _PurgeArgumentParser(
        prog="gae-purge",
        description="Delete old App Engine versions, keeping recent and daily versions",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be repeated)",
    )
    parser.add_argument(
        "project",
        help="Cloud project id whose default service is purged",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the gae-purge CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    log_level = logging.WARNING
    if args.verbose == 1:
        log_level = logging.INFO
    elif args.verbose >= 2:
        log_level = logging.DEBUG
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    try:
        options = PurgeOptions(project=args.project)
    except ValueError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1

    sys.stdout.write(f"Deleting old versions for {options.project}\n")

    try:
        deleted = purge_old_versions(options)
    except (PurgeError, ValueError) as exc:
        sys.stderr.write(f"{exc}\n")
        return 1

    sys.stdout.write(f"Deleted {deleted} versions\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
