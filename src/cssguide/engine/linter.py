"""Linter: runs the tokenize -> parse -> check -> aggregate pipeline."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

from cssguide.config import LintConfig
from cssguide.lexer import LexError, tokenize
from cssguide.model.finding import Finding, Position, Severity
from cssguide.model.token import Token
from cssguide.model.tree import Document
from cssguide.parser import parse_document
from cssguide.validation.aggregate import Report, aggregate
from cssguide.validation.base import Rule
from cssguide.validation.registry import RuleRegistry, default_registry

logger = logging.getLogger(__name__)


def is_scss(name: str) -> bool:
    """Plain ``.css`` files get no ``//`` comments; everything else is SCSS."""
    return not name.lower().endswith(".css")


class Linter:
    """Checks documents against one validated configuration.

    The config is validated once, here; :meth:`lint` can then be called for
    any number of documents, from any number of threads.
    """

    def __init__(
        self,
        config: LintConfig | None = None,
        registry: RuleRegistry | None = None,
        *,
        max_workers: int | None = None,
    ) -> None:
        self.config = config or LintConfig()
        self.registry = registry or default_registry()
        self.registry.validate_config(self.config)
        self.rules: list[Rule] = self.registry.select(self.config)
        self.max_workers = max_workers

    def lint(self, text: str, name: str = "<input>", *, scss: bool | None = None) -> Report:
        """Lint one document and return its aggregated report."""
        if scss is None:
            scss = is_scss(name)
        tokenizer = tokenize(text, scss=scss)
        tokens = tuple(tokenizer)
        document = parse_document(tokens, name)

        findings = self._pipeline_findings(document, tokens, tokenizer.errors)
        findings.extend(self._run_rules(document, tokens))
        report = aggregate(self._apply_overrides(findings), source=name)
        logger.debug(
            "%s: %d error(s), %d warning(s)", name, report.error_count, report.warning_count
        )
        return report

    # -- pipeline ----------------------------------------------------------------

    def _pipeline_findings(
        self, document: Document, tokens: Sequence[Token], lex_errors: Sequence[LexError]
    ) -> list[Finding]:
        findings = [
            Finding(
                rule="lex-error",
                severity=Severity.ERROR,
                message=f"{error.message}.",
                position=Position(error.line, error.column),
                source=document.name,
            )
            for error in lex_errors
        ]
        for problem in document.problems:
            findings.append(
                Finding(
                    rule="parse-error",
                    severity=Severity.ERROR,
                    message=f"{problem.message}.",
                    position=Position(problem.line, problem.column),
                    source=document.name,
                )
            )
        if findings:
            findings.append(
                Finding(
                    rule="parse-incomplete",
                    severity=Severity.ERROR,
                    message="Parse incomplete; findings may be partial.",
                    position=_end_position(tokens),
                    source=document.name,
                )
            )
        return findings

    def _run_rules(self, document: Document, tokens: Sequence[Token]) -> list[Finding]:
        def run(rule: Rule) -> list[Finding]:
            return self._run_rule(rule, document, tokens)

        if self.max_workers is not None and self.max_workers > 1 and len(self.rules) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                results = list(pool.map(run, self.rules))
        else:
            results = [run(rule) for rule in self.rules]
        return [finding for result in results for finding in result]

    def _run_rule(self, rule: Rule, document: Document, tokens: Sequence[Token]) -> list[Finding]:
        try:
            findings = list(rule.check(document, tokens, self.config))
        except Exception as exc:
            logger.exception("Rule %s failed on %s", rule.id, document.name)
            return [
                Finding(
                    rule=rule.id,
                    severity=Severity.ERROR,
                    message=f"Rule failed: {exc}",
                    position=Position(1, 1),
                    source=document.name,
                )
            ]
        if rule.severity is Severity.ERROR:
            # The rule severity is a floor for the findings it reports.
            findings = [replace(f, severity=Severity.ERROR) for f in findings]
        return findings

    def failed(self, name: str, rule: str, message: str) -> Report:
        """Report for a document that could not be linted at all."""
        finding = Finding(
            rule=rule,
            severity=Severity.ERROR,
            message=message,
            position=Position(1, 1),
            source=name,
        )
        return aggregate(self._apply_overrides([finding]), source=name)

    def _apply_overrides(self, findings: list[Finding]) -> list[Finding]:
        overrides = self.config.severity_overrides
        if not overrides:
            return findings
        return [
            replace(f, severity=Severity(overrides[f.rule])) if f.rule in overrides else f
            for f in findings
        ]


def _end_position(tokens: Sequence[Token]) -> Position:
    return tokens[-1].end if tokens else Position(1, 1)


def lint_text(
    text: str,
    name: str = "<input>",
    config: LintConfig | None = None,
    *,
    scss: bool | None = None,
) -> Report:
    """Lint a single text buffer with a one-off :class:`Linter`."""
    return Linter(config).lint(text, name, scss=scss)
