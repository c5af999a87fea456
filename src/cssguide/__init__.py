"""cssguide: style-conformance checker for CSS and SCSS."""
from __future__ import annotations

__version__ = "0.1.0"

from cssguide.config import InvalidConfigError, LintConfig
from cssguide.engine import Linter, lint_many, lint_text
from cssguide.model import Finding, Position, Severity
from cssguide.validation import Report

__all__ = [
    "__version__",
    "Finding",
    "InvalidConfigError",
    "LintConfig",
    "Linter",
    "Position",
    "Report",
    "Severity",
    "lint_many",
    "lint_text",
]
