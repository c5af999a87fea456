"""Parser error types."""

from cssguide.errors import SourceError


class StructuralParseError(SourceError):
    """Raised (in strict mode) or recorded when braces or selectors are malformed."""
