"""Document tree: rule sets, declarations and comments stored in an arena.

Every node lives in ``Document.nodes`` and refers to its parent and children
by index, so the tree can be walked without object references between nodes.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Union

from cssguide.model.finding import Position
from cssguide.model.token import CommentStyle


@dataclass(frozen=True)
class Selector:
    """One selector of a selector list (or one at-rule prelude entry)."""

    text: str
    position: Position


@dataclass(frozen=True)
class DeclarationNode:
    """A ``property: value`` pair, or an at-statement such as ``@include x;``.

    ``token_start``/``token_end`` delimit the declaration's tokens
    (end exclusive, not including the terminating semicolon).
    """

    index: int
    parent: int | None
    property: str
    value: str
    position: Position
    colon_position: Position | None = None
    semicolon: bool = False
    terminal: bool = False
    token_start: int = 0
    token_end: int = 0

    @property
    def is_at_statement(self) -> bool:
        return self.property.startswith("@")

    @property
    def is_variable(self) -> bool:
        return self.property.startswith("$")

    @property
    def is_custom_property(self) -> bool:
        return self.property.startswith("--")


@dataclass(frozen=True)
class RuleSetNode:
    """A selector list (or at-rule prelude) with its block.

    ``declarations`` and ``children`` hold arena indices in source order;
    ``body`` holds every direct child (declarations, rule sets, comments)
    in source order.
    """

    index: int
    parent: int | None
    selectors: tuple[Selector, ...]
    start: Position
    open_brace: Position
    close_brace: Position | None = None
    at_keyword: str = ""
    declarations: tuple[int, ...] = ()
    children: tuple[int, ...] = ()
    body: tuple[int, ...] = ()
    token_start: int = 0
    open_token: int = 0
    close_token: int | None = None

    @property
    def is_at_rule(self) -> bool:
        return bool(self.at_keyword)

    @property
    def is_closed(self) -> bool:
        return self.close_brace is not None

    @property
    def is_compact(self) -> bool:
        """Written entirely on one line: prelude, braces and contents."""
        return self.close_brace is not None and self.start.line == self.close_brace.line


@dataclass(frozen=True)
class CommentNode:
    """A comment, attached to the node it immediately precedes.

    A comment on the same line as the `;` or `}` that ends a node is
    *trailing* and attaches to that node instead. ``attached_to`` is
    ``None`` when nothing follows the comment in its block, which attaches
    it to the document root.
    """

    index: int
    parent: int | None
    text_lines: tuple[str, ...]
    style: CommentStyle
    position: Position
    attached_to: int | None = None
    token_index: int = 0
    trailing: bool = False


Node = Union[RuleSetNode, DeclarationNode, CommentNode]


@dataclass(frozen=True)
class Document:
    """Root container for one parsed source file.

    Attributes:
        name: Identifying path or name of the input.
        nodes: The node arena; every index used in the tree points here.
        top_level: Indices of top-level nodes in source order.
        problems: Structural problems recovered from while parsing.
    """

    name: str
    nodes: tuple[Node, ...] = ()
    top_level: tuple[int, ...] = ()
    problems: tuple[Exception, ...] = ()

    @property
    def complete(self) -> bool:
        return not self.problems

    def node(self, index: int) -> Node:
        return self.nodes[index]

    def parent_of(self, node: Node) -> RuleSetNode | None:
        if node.parent is None:
            return None
        parent = self.nodes[node.parent]
        assert isinstance(parent, RuleSetNode)
        return parent

    def depth(self, node: Node) -> int:
        """Number of rule sets containing *node* (0 at top level)."""
        depth = 0
        current = node.parent
        while current is not None:
            depth += 1
            current = self.nodes[current].parent
        return depth

    def ancestors(self, node: Node) -> Iterator[RuleSetNode]:
        """Yield enclosing rule sets, innermost first."""
        current = self.parent_of(node)
        while current is not None:
            yield current
            current = self.parent_of(current)

    def rule_sets(self) -> Iterator[RuleSetNode]:
        """All rule sets in order of their opening brace."""
        for node in self.nodes:
            if isinstance(node, RuleSetNode):
                yield node

    def declarations(self) -> Iterator[DeclarationNode]:
        for node in self.nodes:
            if isinstance(node, DeclarationNode):
                yield node

    def comments(self) -> Iterator[CommentNode]:
        for node in self.nodes:
            if isinstance(node, CommentNode):
                yield node

    def declarations_of(self, rule_set: RuleSetNode) -> list[DeclarationNode]:
        return [self.nodes[i] for i in rule_set.declarations]  # type: ignore[misc]

    def children_of(self, rule_set: RuleSetNode) -> list[RuleSetNode]:
        return [self.nodes[i] for i in rule_set.children]  # type: ignore[misc]

    def top_level_rule_sets(self) -> list[RuleSetNode]:
        return [
            n for n in (self.nodes[i] for i in self.top_level) if isinstance(n, RuleSetNode)
        ]

    def leading_comments(self, node: Node) -> list[CommentNode]:
        """Comments attached to *node* that precede it, in source order."""
        return [c for c in self.comments() if c.attached_to == node.index and not c.trailing]

    def trailing_comments(self, node: Node) -> list[CommentNode]:
        """Comments on the line where *node* ends, in source order."""
        return [c for c in self.comments() if c.attached_to == node.index and c.trailing]
