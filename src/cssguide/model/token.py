"""Lexical tokens produced by the tokenizer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from cssguide.model.finding import Position


class TokenKind(Enum):
    """Kind of a lexical token."""

    SELECTOR_FRAGMENT = "selector_fragment"
    AT_KEYWORD = "at_keyword"
    BRACE_OPEN = "brace_open"
    BRACE_CLOSE = "brace_close"
    PROPERTY = "property"
    COLON = "colon"
    VALUE = "value"
    COMMA = "comma"
    SEMICOLON = "semicolon"
    COMMENT = "comment"
    WHITESPACE = "whitespace"
    NEWLINE = "newline"


class CommentStyle(Enum):
    """Sub-classification of COMMENT tokens."""

    BLOCK = "block"  # /* ... */
    DOC = "doc"  # /** ... */
    LINE = "line"  # // ... (SCSS only)


# Tokens that carry no syntax of their own.
TRIVIA = frozenset({TokenKind.WHITESPACE, TokenKind.NEWLINE, TokenKind.COMMENT})


@dataclass(frozen=True)
class Token:
    """A single token with its exact source text.

    Attributes:
        kind: What the token is.
        text: The raw characters it covers, unmodified.
        line: 1-based line of the first character.
        column: 1-based column of the first character.
        offset: 0-based character offset into the input.
        comment_style: Set for COMMENT tokens only.
    """

    kind: TokenKind
    text: str
    line: int
    column: int
    offset: int
    comment_style: CommentStyle | None = None

    @property
    def end_offset(self) -> int:
        return self.offset + len(self.text)

    @property
    def is_trivia(self) -> bool:
        return self.kind in TRIVIA

    @property
    def is_string(self) -> bool:
        """True for quoted-string VALUE tokens."""
        return self.kind is TokenKind.VALUE and self.text[:1] in ("'", '"')

    @property
    def end_line(self) -> int:
        """Line on which the token's last character sits."""
        body = self.text
        for ending in ("\r\n", "\n", "\r"):
            if body.endswith(ending):
                body = body[: -len(ending)]
                break
        return self.line + _count_breaks(body)

    @property
    def end(self) -> Position:
        """Position just past the token's last character."""
        text = self.text
        breaks = _count_breaks(text)
        if not breaks:
            return Position(self.line, self.column + len(text))
        last = max(text.rfind("\n"), text.rfind("\r"))
        return Position(self.line + breaks, len(text) - last)

    def __str__(self) -> str:
        return f"Token({self.kind.name}, {self.text!r}, {self.line}:{self.column})"


def _count_breaks(text: str) -> int:
    return text.count("\n") + text.count("\r") - text.count("\r\n")
