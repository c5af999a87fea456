"""cssguide CLI entry point: Click group with subcommands."""

import click

from cssguide import __version__


@click.group()
@click.version_option(version=__version__, prog_name="cssguide")
def cli() -> None:
    """cssguide - style-conformance checker for CSS and SCSS."""


# Import and register subcommands
from cssguide.cli.check import check  # noqa: E402
from cssguide.cli.inspect import inspect  # noqa: E402
from cssguide.cli.rules import rules  # noqa: E402

cli.add_command(check)
cli.add_command(inspect)
cli.add_command(rules)
