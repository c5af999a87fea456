"""Rule contract: a checker function plus its identity."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Callable

from cssguide.config import LintConfig
from cssguide.model.finding import Finding, Severity
from cssguide.model.token import Token
from cssguide.model.tree import Document

Checker = Callable[[Document, Sequence[Token], LintConfig], list[Finding]]


@dataclass(frozen=True)
class Rule:
    """A registered checker.

    Checkers are pure functions of the document, its tokens and the config;
    they never mutate their inputs. ``severity`` is the rule's default: a
    rule registered as ``ERROR`` reports every finding as an error, while a
    ``WARNING`` rule keeps any finding its checker escalates itself.
    ``description`` is the one-line summary shown by ``cssguide rules``.
    """

    id: str
    check: Checker
    severity: Severity
    description: str
