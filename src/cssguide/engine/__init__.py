from cssguide.engine.batch import Source, lint_many
from cssguide.engine.linter import Linter, is_scss, lint_text

__all__ = ["Linter", "Source", "is_scss", "lint_many", "lint_text"]
