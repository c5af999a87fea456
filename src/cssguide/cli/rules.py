"""CLI command: cssguide rules -- list the available rules."""

from __future__ import annotations

import click

from cssguide.validation import default_registry


@click.command()
def rules() -> None:
    """List every rule with its default severity and description."""
    registry = default_registry()
    width = max(len(rule_id) for rule_id in registry.ids())
    for rule in registry:
        click.echo(f"{rule.id:<{width}}  {rule.severity.value:<7}  {rule.description}")
