"""Error hierarchy shared by the tokenizer, parser and configuration."""
from __future__ import annotations


class CssGuideError(Exception):
    """Base error for all cssguide errors."""


class SourceError(CssGuideError):
    """An error tied to a location in the input text."""

    def __init__(self, message: str, line: int, column: int) -> None:
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"{message} (line {line}, column {column})")
