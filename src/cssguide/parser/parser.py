"""Structural parser: token sequence -> Document tree.

Braces are matched into rule sets, selector lists are split on top-level
commas and declarations on semicolons. Rule sets may nest to any depth and
interleave with declarations (SCSS). Malformed input is recovered from where
possible and the problem is recorded on the document.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace

from cssguide.model.finding import Position
from cssguide.model.token import Token, TokenKind
from cssguide.model.tree import (
    CommentNode,
    DeclarationNode,
    Document,
    Node,
    RuleSetNode,
    Selector,
)
from cssguide.parser.errors import StructuralParseError

__all__ = ["parse_document"]

logger = logging.getLogger(__name__)


def _position(token: Token) -> Position:
    return Position(token.line, token.column)


class _Frame:
    """A rule set whose closing brace has not been reached yet."""

    def __init__(
        self,
        index: int,
        parent: int | None,
        selectors: tuple[Selector, ...],
        at_keyword: str,
        start: Position,
        open_brace: Position,
        token_start: int,
        open_token: int,
    ) -> None:
        self.index = index
        self.parent = parent
        self.selectors = selectors
        self.at_keyword = at_keyword
        self.start = start
        self.open_brace = open_brace
        self.token_start = token_start
        self.open_token = open_token
        self.declarations: list[int] = []
        self.children: list[int] = []
        self.body: list[int] = []

    def build(self, close_brace: Position | None, close_token: int | None) -> RuleSetNode:
        return RuleSetNode(
            index=self.index,
            parent=self.parent,
            selectors=self.selectors,
            start=self.start,
            open_brace=self.open_brace,
            close_brace=close_brace,
            at_keyword=self.at_keyword,
            declarations=tuple(self.declarations),
            children=tuple(self.children),
            body=tuple(self.body),
            token_start=self.token_start,
            open_token=self.open_token,
            close_token=close_token,
        )


class _Parser:
    def __init__(self, tokens: Sequence[Token], name: str, strict: bool) -> None:
        self.tokens = tokens
        self.name = name
        self.strict = strict
        self.nodes: list[Node | None] = []
        self.top_level: list[int] = []
        self.stack: list[_Frame] = []
        self.problems: list[StructuralParseError] = []
        # Comments waiting for the node they precede: (index, token index, parent).
        self.pending: list[tuple[int, int, int | None]] = []
        self.stmt_start: int | None = None
        self.stmt_index: int | None = None
        # Node ended by the last `;` or `}` and the line it ended on.
        self.trailing: tuple[int, int] | None = None

    # -- helpers ----------------------------------------------------------------

    @property
    def _frame(self) -> _Frame | None:
        return self.stack[-1] if self.stack else None

    def _parent(self) -> int | None:
        frame = self._frame
        return frame.index if frame else None

    def _body(self) -> list[int]:
        frame = self._frame
        return frame.body if frame else self.top_level

    def _reserve(self) -> int:
        self.nodes.append(None)
        return len(self.nodes) - 1

    def _problem(self, message: str, token: Token) -> None:
        error = StructuralParseError(message, token.line, token.column)
        if self.strict:
            raise error
        logger.debug("%s: recovered from %s", self.name, error)
        self.problems.append(error)

    def _make_comment(
        self,
        index: int,
        token_index: int,
        parent: int | None,
        attached_to: int | None,
        trailing: bool = False,
    ) -> None:
        token = self.tokens[token_index]
        assert token.comment_style is not None
        self.nodes[index] = CommentNode(
            index=index,
            parent=parent,
            text_lines=tuple(token.text.splitlines()),
            style=token.comment_style,
            position=_position(token),
            attached_to=attached_to,
            token_index=token_index,
            trailing=trailing,
        )

    def _flush_pending(self, attached_to: int | None) -> None:
        for index, token_index, parent in self.pending:
            self._make_comment(index, token_index, parent, attached_to)
        self.pending = []

    def _begin_node(self) -> int:
        index = self._reserve()
        self._body().append(index)
        self._flush_pending(index)
        return index

    # -- token handlers ------------------------------------------------------------

    def run(self) -> Document:
        for i, token in enumerate(self.tokens):
            kind = token.kind
            if kind is TokenKind.COMMENT:
                self._comment(i)
            elif kind in (TokenKind.WHITESPACE, TokenKind.NEWLINE):
                continue
            elif kind is TokenKind.BRACE_OPEN:
                self._open(i, token)
            elif kind is TokenKind.BRACE_CLOSE:
                self._close(i, token)
            elif kind is TokenKind.SEMICOLON:
                self._end_declaration(i, semicolon=True)
            elif self.stmt_start is None:
                self.trailing = None
                self.stmt_start = i
                self.stmt_index = self._begin_node()
        return self._finish()

    def _comment(self, i: int) -> None:
        index = self._reserve()
        self._body().append(index)
        if self.stmt_index is not None:
            # Inside a statement: belongs to the node being built.
            self._make_comment(index, i, self._parent(), self.stmt_index)
        elif self.trailing is not None and self.tokens[i].line == self.trailing[1]:
            self._make_comment(index, i, self._parent(), self.trailing[0], trailing=True)
        else:
            self.pending.append((index, i, self._parent()))

    def _open(self, i: int, token: Token) -> None:
        self.trailing = None
        if self.stmt_start is None or self.stmt_index is None:
            index = self._begin_node()
            start_token, token_start = token, i
            prelude: list[Token] = []
            self._problem("Rule set has no selector", token)
        else:
            index = self.stmt_index
            token_start = self.stmt_start
            start_token = self.tokens[token_start]
            prelude = list(self.tokens[token_start:i])

        at_keyword = ""
        if prelude and prelude[0].kind is TokenKind.AT_KEYWORD:
            at_keyword = prelude[0].text
            prelude = prelude[1:]

        parent = self._frame
        if parent is not None:
            parent.children.append(index)
        self.stack.append(
            _Frame(
                index=index,
                parent=parent.index if parent else None,
                selectors=tuple(_split_selectors(prelude)),
                at_keyword=at_keyword,
                start=_position(start_token),
                open_brace=_position(token),
                token_start=token_start,
                open_token=i,
            )
        )
        self.stmt_start = None
        self.stmt_index = None

    def _end_declaration(self, end: int, *, semicolon: bool) -> None:
        if self.stmt_start is None or self.stmt_index is None:
            self.trailing = None
            return
        start, index = self.stmt_start, self.stmt_index
        self.stmt_start = None
        self.stmt_index = None

        significant = [j for j in range(start, end) if not self.tokens[j].is_trivia]
        first = self.tokens[significant[0]]
        colon = next((j for j in significant if self.tokens[j].kind is TokenKind.COLON), None)
        value_from = colon if colon is not None else significant[0]
        value_tokens = [j for j in significant if j > value_from]
        value = ""
        if value_tokens:
            value = "".join(t.text for t in self.tokens[value_tokens[0]:value_tokens[-1] + 1])

        node = DeclarationNode(
            index=index,
            parent=self._parent(),
            property=first.text,
            value=value,
            position=_position(first),
            colon_position=_position(self.tokens[colon]) if colon is not None else None,
            semicolon=semicolon,
            token_start=start,
            token_end=significant[-1] + 1,
        )
        self.nodes[index] = node
        frame = self._frame
        if frame is not None:
            frame.declarations.append(index)
        if semicolon:
            self.trailing = (index, self.tokens[end].line)

    def _close(self, i: int, token: Token) -> None:
        self._end_declaration(i, semicolon=False)
        frame = self._frame
        if frame is None:
            self.trailing = None
            self._problem("Unmatched '}'", token)
            return
        self._pop(_position(token), i)
        self.trailing = (frame.index, token.line)

    def _pop(self, close_brace: Position | None, close_token: int | None) -> None:
        frame = self.stack.pop()
        # Pending comments belong to this block and precede nothing in it.
        self._flush_pending(None)
        self._mark_terminal(frame.body)
        self.nodes[frame.index] = frame.build(close_brace, close_token)

    def _mark_terminal(self, body: Iterable[int]) -> None:
        for index in reversed(list(body)):
            node = self.nodes[index]
            if isinstance(node, CommentNode):
                continue
            if isinstance(node, DeclarationNode):
                self.nodes[index] = replace(node, terminal=True)
            return

    def _finish(self) -> Document:
        end = len(self.tokens)
        if self.stmt_start is not None:
            self._end_declaration(end, semicolon=False)
        self._flush_pending(None)
        while self.stack:
            frame = self.stack[-1]
            self._problem("Unclosed rule set", self.tokens[frame.open_token])
            self._pop(None, None)
        self._mark_terminal(self.top_level)

        nodes = tuple(self.nodes)
        assert all(node is not None for node in nodes)
        logger.debug("%s: parsed %d nodes (%d problems)", self.name, len(nodes), len(self.problems))
        return Document(
            name=self.name,
            nodes=nodes,  # type: ignore[arg-type]
            top_level=tuple(self.top_level),
            problems=tuple(self.problems),
        )


def _split_selectors(prelude: Sequence[Token]) -> list[Selector]:
    """Split a prelude on top-level COMMA tokens into trimmed selectors."""
    groups: list[list[Token]] = [[]]
    for token in prelude:
        if token.kind is TokenKind.COMMA:
            groups.append([])
        else:
            groups[-1].append(token)

    selectors: list[Selector] = []
    for group in groups:
        significant = [k for k, t in enumerate(group) if not t.is_trivia]
        if not significant:
            continue
        first, last = significant[0], significant[-1]
        text = "".join(t.text for t in group[first:last + 1])
        selectors.append(Selector(text=text, position=_position(group[first])))
    return selectors


def parse_document(
    tokens: Iterable[Token], name: str = "<input>", *, strict: bool = False
) -> Document:
    """Build a :class:`Document` from the complete token sequence.

    In the default lenient mode structural problems are recovered from and
    kept on ``Document.problems``; with *strict* the first one is raised as
    :class:`StructuralParseError`.
    """
    return _Parser(list(tokens), name, strict).run()
