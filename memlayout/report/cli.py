"""Command-line interface for memory layout reports."""

import logging
import sys
from typing import TextIO

import click
from rich.console import Console
from rich.logging import RichHandler

from memlayout.structures import DatabaseError

from .driver import UnknownVersionError, run_report
from .formatting import ReportWriter
from .script import FatalError

logger = logging.getLogger("memlayout")


def configure_logging(verbose: bool) -> None:
    """Send diagnostics to stderr through rich."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )


@click.command()
@click.argument("database", type=click.Path(exists=True))
@click.argument("version_name")
@click.argument("script", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output", "-o", type=click.File("w", encoding="utf-8"), default="-", help="Report file"
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log debug diagnostics")
def cli(database: str, version_name: str, script: str, output: TextIO, verbose: bool) -> None:
    """Print the memory layout of SCRIPT for VERSION_NAME of DATABASE."""
    configure_logging(verbose)

    try:
        ok = run_report(database, version_name, script, ReportWriter(output))
    except UnknownVersionError as e:
        logger.error("%s", e)
        logger.error("Available versions are:\n%s", "\n".join(f" - {v}" for v in e.available))
        sys.exit(1)
    except DatabaseError as e:
        logger.error("Could not load structures: %s", e)
        sys.exit(1)
    except FatalError as e:
        logger.error("%s", e)
        sys.exit(1)

    if not ok:
        sys.exit(1)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
