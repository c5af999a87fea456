"""CLI command: cssguide check -- lint CSS/SCSS files."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import replace

import click

from cssguide.config import InvalidConfigError, LintConfig
from cssguide.engine import Linter, Source, lint_many
from cssguide.validation import default_registry


def _parse_severities(values: tuple[str, ...]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for item in values:
        rule, sep, level = item.partition("=")
        if not sep or not rule or not level:
            raise click.BadParameter(f"expected RULE=LEVEL, got {item!r}", param_hint="--severity")
        overrides[rule.strip()] = level.strip().lower()
    return overrides


@click.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--indent-unit", type=click.Choice(["space", "tab"]), default="space", help="Indentation unit")
@click.option("--indent-width", type=int, default=2, help="Indentation units per nesting level")
@click.option("--quote", type=click.Choice(["single", "double"]), default="double", help="Quote character for strings")
@click.option("--max-nesting-depth", type=int, default=2, help="Maximum selector nesting depth")
@click.option("--max-block-lines", type=int, default=20, help="Maximum line span of a nested block")
@click.option("--disable", "disabled", multiple=True, help="Rule id to disable (repeatable)")
@click.option("--severity", "severities", multiple=True, help="Override a rule severity as RULE=LEVEL")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text", help="Output format")
@click.option("--jobs", type=int, default=None, help="Number of files linted in parallel")
@click.option("--verbose", is_flag=True, help="Log progress to stderr")
def check(
    files: tuple[str, ...],
    indent_unit: str,
    indent_width: int,
    quote: str,
    max_nesting_depth: int,
    max_block_lines: int,
    disabled: tuple[str, ...],
    severities: tuple[str, ...],
    output_format: str,
    jobs: int | None,
    verbose: bool,
) -> None:
    """Check CSS/SCSS FILES against the style guide.

    Prints findings and exits with code 1 if any error-severity finding was
    reported, 2 if the configuration is invalid, 0 otherwise.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # Step 1: Build and validate the configuration
    try:
        config = LintConfig(
            indent_unit=indent_unit,
            indent_width=indent_width,
            quote_char=quote,
            max_nesting_depth=max_nesting_depth,
            max_nested_block_lines=max_block_lines,
            severity_overrides=_parse_severities(severities),
        )
        if disabled:
            known = frozenset(default_registry().ids())
            unknown = sorted(frozenset(disabled) - known)
            if unknown:
                raise InvalidConfigError(f"Unknown rule id(s) in --disable: {', '.join(unknown)}")
            config = replace(config, enabled_rules=known - frozenset(disabled))
        linter = Linter(config)
    except InvalidConfigError as exc:
        click.echo(f"Invalid configuration: {exc}", err=True)
        sys.exit(2)

    # Step 2: Lint
    sources = [Source.from_path(path) for path in files]
    reports = lint_many(sources, linter=linter, max_workers=jobs)

    # Step 3: Report
    if output_format == "json":
        click.echo(json.dumps([r.to_dict() for r in reports], indent=2))
    else:
        for report in reports:
            for finding in report:
                click.echo(str(finding))
        errors = sum(r.error_count for r in reports)
        warnings = sum(r.warning_count for r in reports)
        click.echo()
        click.echo(
            f"Summary: {len(reports)} file(s), {errors} error(s), {warnings} warning(s)"
        )

    if any(r.has_errors for r in reports):
        sys.exit(1)
    sys.exit(0)
