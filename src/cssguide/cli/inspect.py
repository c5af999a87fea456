"""CLI command: cssguide inspect -- display the parsed rule-set tree."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from cssguide.engine import Source, is_scss
from cssguide.lexer import tokenize
from cssguide.model.tree import CommentNode, DeclarationNode, Document, RuleSetNode
from cssguide.parser import parse_document


def _describe(document: Document, index: int, indent: int) -> list[str]:
    node = document.node(index)
    pad = "  " * indent
    if isinstance(node, CommentNode):
        first = node.text_lines[0] if node.text_lines else ""
        return [f"{pad}comment ({node.style.value}) {first[:40]}"]
    if isinstance(node, DeclarationNode):
        mark = "" if node.semicolon else "  (no semicolon)"
        return [f"{pad}{node.property}: {node.value}{mark}"]

    assert isinstance(node, RuleSetNode)
    head = ", ".join(s.text for s in node.selectors)
    if node.at_keyword:
        head = f"{node.at_keyword} {head}".rstrip()
    close = node.close_brace.line if node.close_brace else "?"
    lines = [f"{pad}{head}  [lines {node.open_brace.line}-{close}, depth {document.depth(node)}]"]
    for child in node.body:
        lines.extend(_describe(document, child, indent + 1))
    return lines


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def inspect(file: str) -> None:
    """Parse a CSS/SCSS file and display its rule-set tree.

    Shows selectors, declarations and comments with their nesting, followed
    by any lexical or structural problems.
    """
    path = Path(file)
    source = Source.from_path(path)
    if source.error is not None:
        click.echo(f"Could not read {file}: {source.error}", err=True)
        sys.exit(1)
    tokenizer = tokenize(source.text, scss=is_scss(path.name))
    tokens = list(tokenizer)
    document = parse_document(tokens, path.name)

    rule_sets = sum(1 for _ in document.rule_sets())
    click.echo(f"Document: {document.name}")
    click.echo(f"Tokens:    {len(tokens)}")
    click.echo(f"Rule sets: {rule_sets}")
    click.echo()
    for index in document.top_level:
        for line in _describe(document, index, 0):
            click.echo(line)

    problems = [*tokenizer.errors, *document.problems]
    if problems:
        click.echo()
        click.echo("Problems:")
        for problem in problems:
            click.echo(f"  {problem}")
