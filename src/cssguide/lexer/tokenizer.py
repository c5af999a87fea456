"""Hand-written, lossless tokenizer for CSS and SCSS.

Every character of the input ends up in exactly one token, so joining the
token texts gives back the original source. Whitespace and newlines are
tokens in their own right; the whitespace checks depend on them.

Syntax example::

    .a,
    .b { color: #fff; }

    SELECTOR_FRAGMENT '.a'  COMMA  NEWLINE  SELECTOR_FRAGMENT '.b'
    WHITESPACE  BRACE_OPEN  WHITESPACE  PROPERTY 'color'  COLON
    WHITESPACE  VALUE '#fff'  SEMICOLON  WHITESPACE  BRACE_CLOSE
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from enum import Enum

from cssguide.lexer.errors import LexError, UnterminatedCommentError, UnterminatedStringError
from cssguide.model.token import CommentStyle, Token, TokenKind

__all__ = ["Tokenizer", "tokenize"]

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"[ \t\f]+")
_AT_KEYWORD_RE = re.compile(r"@[A-Za-z0-9_-]*")
_QUOTES = "'\""


class _Mode(Enum):
    START = "start"  # between statements
    PRELUDE = "prelude"  # selector list or at-rule prelude, ends at '{'
    PROPERTY = "property"  # declaration name, ends at ':'
    VALUE = "value"  # declaration value, ends at ';' or '}'


class Tokenizer:
    """Lazy token stream over one source text.

    Each iteration is a fresh pass over the source; recorded lexical errors
    are in :attr:`errors` once a pass has finished. A pass cannot be started
    while another one is still running. Errors never abort the stream: an
    unterminated comment becomes a comment token reaching the end of input.
    An unterminated string also reaches the end of input, unless its quote
    character occurs again later, in which case it stops at its line break
    so the rest of the source is still tokenized.
    """

    def __init__(self, source: str, *, scss: bool = True) -> None:
        self.source = source
        self.scss = scss
        self.errors: list[LexError] = []
        self._pos = 0
        self._line = 1
        self._column = 1
        self._mode = _Mode.START
        self._parens = 0
        self._running = False

    def __iter__(self) -> Iterator[Token]:
        return self._generate()

    # -- main loop -----------------------------------------------------------

    def _generate(self) -> Iterator[Token]:
        if self._running:
            raise RuntimeError("Tokenizer is already being iterated")
        self.errors = []
        self._pos = 0
        self._line = 1
        self._column = 1
        self._mode = _Mode.START
        self._parens = 0
        self._running = True
        try:
            yield from self._scan()
        finally:
            self._running = False

    def _scan(self) -> Iterator[Token]:
        src = self.source
        n = len(src)
        count = 0
        while self._pos < n:
            pos = self._pos
            ch = src[pos]
            if ch in " \t\f":
                match = _WHITESPACE_RE.match(src, pos)
                assert match is not None
                token = self._emit(TokenKind.WHITESPACE, match.end())
            elif ch == "\r":
                token = self._emit(TokenKind.NEWLINE, pos + (2 if src.startswith("\r\n", pos) else 1))
            elif ch == "\n":
                token = self._emit(TokenKind.NEWLINE, pos + 1)
            elif src.startswith("/*", pos):
                token = self._block_comment(pos)
            elif self._line_comment_at(pos):
                token = self._emit(TokenKind.COMMENT, self._line_end(pos), CommentStyle.LINE)
            elif ch == "{":
                token = self._emit(TokenKind.BRACE_OPEN, pos + 1)
                self._reset_statement()
            elif ch == "}":
                token = self._emit(TokenKind.BRACE_CLOSE, pos + 1)
                self._reset_statement()
            elif ch == ";":
                token = self._emit(TokenKind.SEMICOLON, pos + 1)
                self._reset_statement()
            else:
                token = self._statement_token(pos)
            count += 1
            yield token
        logger.debug("Tokenized %d characters into %d tokens", n, count)

    def _statement_token(self, pos: int) -> Token:
        src = self.source
        ch = src[pos]
        if self._mode is _Mode.START:
            if ch == "@":
                match = _AT_KEYWORD_RE.match(src, pos)
                assert match is not None
                end = match.end()
                self._mode = _Mode.PRELUDE if self._reaches_block(end) else _Mode.VALUE
                return self._emit(TokenKind.AT_KEYWORD, end)
            self._mode = _Mode.PRELUDE if self._reaches_block(pos) else _Mode.PROPERTY

        if ch in _QUOTES:
            return self._string(pos)

        if self._mode is _Mode.PRELUDE:
            if ch == "," and self._parens == 0:
                return self._emit(TokenKind.COMMA, pos + 1)
            return self._emit(TokenKind.SELECTOR_FRAGMENT, self._fragment_end(pos))

        if self._mode is _Mode.PROPERTY:
            if ch == ":":
                self._mode = _Mode.VALUE
                return self._emit(TokenKind.COLON, pos + 1)
            return self._emit(TokenKind.PROPERTY, self._word_end(pos, stop=":"))

        if ch == ",":
            return self._emit(TokenKind.COMMA, pos + 1)
        return self._emit(TokenKind.VALUE, self._value_end(pos))

    def _reset_statement(self) -> None:
        self._mode = _Mode.START
        self._parens = 0

    # -- token emission --------------------------------------------------------

    def _emit(self, kind: TokenKind, end: int, style: CommentStyle | None = None) -> Token:
        text = self.source[self._pos:end]
        token = Token(
            kind=kind,
            text=text,
            line=self._line,
            column=self._column,
            offset=self._pos,
            comment_style=style,
        )
        self._advance(text)
        self._pos = end
        return token

    def _advance(self, text: str) -> None:
        breaks = text.count("\n") + text.count("\r") - text.count("\r\n")
        if breaks:
            self._line += breaks
            last = max(text.rfind("\n"), text.rfind("\r"))
            self._column = len(text) - last
        else:
            self._column += len(text)

    # -- comments and strings ------------------------------------------------

    def _block_comment(self, pos: int) -> Token:
        src = self.source
        is_doc = src.startswith("/**", pos) and not src.startswith("/**/", pos)
        style = CommentStyle.DOC if is_doc else CommentStyle.BLOCK
        close = src.find("*/", pos + 2)
        if close == -1:
            self.errors.append(
                UnterminatedCommentError("Unterminated comment", self._line, self._column)
            )
            return self._emit(TokenKind.COMMENT, len(src), style)
        return self._emit(TokenKind.COMMENT, close + 2, style)

    def _line_comment_at(self, pos: int) -> bool:
        return self.scss and self.source.startswith("//", pos)

    def _line_end(self, pos: int) -> int:
        src = self.source
        i = pos
        while i < len(src) and src[i] not in "\r\n":
            i += 1
        return i

    def _string(self, pos: int) -> Token:
        end, terminated = _scan_string(self.source, pos)
        if not terminated:
            self.errors.append(
                UnterminatedStringError("Unterminated string", self._line, self._column)
            )
        return self._emit(TokenKind.VALUE, end)

    # -- scanners ---------------------------------------------------------------

    def _stops_at(self, i: int) -> bool:
        """True where a comment starts."""
        src = self.source
        return src.startswith("/*", i) or (self.scss and src.startswith("//", i))

    def _fragment_end(self, pos: int) -> int:
        src = self.source
        n = len(src)
        i = pos
        while i < n:
            c = src[i]
            if c == "#" and src.startswith("#{", i):
                i = _skip_interpolation(src, i)
                continue
            if c in _QUOTES or c in "\r\n{};" or self._stops_at(i):
                break
            if c == "(":
                self._parens += 1
            elif c == ")":
                self._parens = max(0, self._parens - 1)
            elif self._parens == 0 and c in " \t\f,":
                break
            i += 1
        return max(i, pos + 1)

    def _word_end(self, pos: int, stop: str = "") -> int:
        src = self.source
        n = len(src)
        i = pos
        while i < n:
            c = src[i]
            if c == "#" and src.startswith("#{", i):
                i = _skip_interpolation(src, i)
                continue
            if c in " \t\f\r\n,;{}" or c in _QUOTES or c in stop or self._stops_at(i):
                break
            i += 1
        return max(i, pos + 1)

    def _value_end(self, pos: int) -> int:
        url_end = _url_end(self.source, pos)
        if url_end is not None:
            return url_end
        return self._word_end(pos)

    def _reaches_block(self, pos: int) -> bool:
        """Look ahead: does the statement starting at *pos* open a block?"""
        src = self.source
        n = len(src)
        i = pos
        while i < n:
            c = src[i]
            if c in _QUOTES:
                i, _ = _scan_string(src, i)
            elif src.startswith("/*", i):
                close = src.find("*/", i + 2)
                i = n if close == -1 else close + 2
            elif self._line_comment_at(i):
                i = self._line_end(i)
            elif c == "#" and src.startswith("#{", i):
                i = _skip_interpolation(src, i)
            elif c in "uU" and _url_end(src, i) is not None:
                i = _url_end(src, i)  # type: ignore[assignment]
            elif c in "{;}":
                return c == "{"
            else:
                i += 1
        return False


def _scan_string(src: str, pos: int) -> tuple[int, bool]:
    """Return the end offset of the string at *pos* and whether it was closed.

    A string broken by a line break ends there when its quote occurs again
    later in the source, and otherwise runs to the end of the input.
    """
    quote = src[pos]
    n = len(src)
    i = pos + 1
    while i < n:
        c = src[i]
        if c == "\\":
            i += 3 if src.startswith("\r\n", i + 1) else 2
            continue
        if c == quote:
            return i + 1, True
        if c in "\r\n":
            return (i, False) if src.find(quote, i) != -1 else (n, False)
        i += 1
    return n, False


def _skip_interpolation(src: str, pos: int) -> int:
    """Return the offset just past the ``#{...}`` starting at *pos*."""
    depth = 0
    i = pos + 1
    while i < len(src):
        if src[i] == "{":
            depth += 1
        elif src[i] == "}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return len(src)


def _url_end(src: str, pos: int) -> int | None:
    """End of an unquoted ``url(...)`` starting at *pos*, or None."""
    if src[pos:pos + 4].lower() != "url(":
        return None
    i = pos + 4
    while i < len(src) and src[i] in " \t":
        i += 1
    if i < len(src) and src[i] in _QUOTES:
        return None
    while i < len(src) and src[i] not in ")\r\n":
        i += 1
    if i < len(src) and src[i] == ")":
        return i + 1
    return None


def tokenize(source: str, *, scss: bool = True) -> Tokenizer:
    """Return a lazy token stream over *source*.

    ``//`` line comments are recognized only when *scss* is true.
    """
    return Tokenizer(source, scss=scss)
