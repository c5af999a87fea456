"""Lexical error types."""

from cssguide.errors import SourceError


class LexError(SourceError):
    """A token whose opening delimiter has no matching close."""


class UnterminatedCommentError(LexError):
    """A ``/*`` comment still open at end of input."""


class UnterminatedStringError(LexError):
    """A quoted string not closed before the end of its line."""
