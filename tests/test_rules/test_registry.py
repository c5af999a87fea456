"""Tests for the rule registry and finding aggregation."""

import pytest

from cssguide.config import InvalidConfigError, LintConfig
from cssguide.model.finding import Finding, Position, Severity
from cssguide.validation import ALL_RULES, Rule, RuleRegistry, aggregate, default_registry


def _finding(rule: str, line: int, column: int, severity=Severity.WARNING, message="m") -> Finding:
    return Finding(rule=rule, severity=severity, message=message, position=Position(line, column))


def _noop(document, tokens, config):
    return []


# ---------------------------------------------------------------------------
# RuleRegistry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_default_registry_has_every_rule(self):
        registry = default_registry()
        assert len(registry) == len(ALL_RULES)
        assert registry.ids() == [rule.id for rule in ALL_RULES]
        for rule_id in (
            "indentation-consistency",
            "selector-per-line",
            "brace-spacing",
            "declaration-spacing",
            "trailing-semicolon",
            "zero-unit",
            "hex-case-and-shorthand",
            "quote-consistency",
            "rule-set-separation",
            "nesting-depth",
            "at-rule-ordering",
        ):
            assert rule_id in registry

    def test_rule_ids_unique(self):
        ids = [rule.id for rule in ALL_RULES]
        assert len(ids) == len(set(ids))

    def test_register_duplicate_raises(self):
        registry = RuleRegistry([Rule("x", _noop, Severity.WARNING, "")])
        with pytest.raises(ValueError):
            registry.register(Rule("x", _noop, Severity.WARNING, ""))

    def test_pipeline_ids_are_reserved(self):
        with pytest.raises(ValueError):
            RuleRegistry([Rule("parse-error", _noop, Severity.ERROR, "")])

    def test_select_respects_enabled_rules(self):
        registry = default_registry()
        selected = registry.select(LintConfig(enabled_rules={"zero-unit", "brace-spacing"}))
        assert [rule.id for rule in selected] == ["brace-spacing", "zero-unit"]

    def test_select_all_by_default(self):
        registry = default_registry()
        assert len(registry.select(LintConfig())) == len(registry)

    def test_unknown_enabled_rule_rejected(self):
        with pytest.raises(InvalidConfigError, match="no-such-rule"):
            default_registry().validate_config(LintConfig(enabled_rules={"no-such-rule"}))

    def test_unknown_override_rejected(self):
        with pytest.raises(InvalidConfigError):
            default_registry().validate_config(
                LintConfig(severity_overrides={"no-such-rule": "error"})
            )

    def test_pipeline_override_accepted(self):
        default_registry().validate_config(LintConfig(severity_overrides={"lex-error": "warning"}))

    def test_get(self):
        assert default_registry().get("zero-unit").severity is Severity.WARNING


# ---------------------------------------------------------------------------
# aggregate
# ---------------------------------------------------------------------------


class TestAggregate:
    def test_sorted_by_line_column_rule(self):
        report = aggregate(
            [
                _finding("b-rule", 2, 1),
                _finding("z-rule", 1, 5),
                _finding("a-rule", 2, 1),
                _finding("a-rule", 1, 5),
            ]
        )
        assert [(f.line, f.column, f.rule) for f in report] == [
            (1, 5, "a-rule"),
            (1, 5, "z-rule"),
            (2, 1, "a-rule"),
            (2, 1, "b-rule"),
        ]

    def test_duplicates_collapsed(self):
        report = aggregate(
            [
                _finding("r", 1, 1, message="first"),
                _finding("r", 1, 1, message="second"),
                _finding("r", 1, 2),
            ]
        )
        assert len(report) == 2
        assert report.findings[0].message == "first"

    def test_summary_counts(self):
        report = aggregate(
            [
                _finding("a", 1, 1, Severity.ERROR),
                _finding("b", 1, 1),
                _finding("c", 2, 1),
            ],
            source="x.scss",
        )
        assert report.summary == {Severity.ERROR: 1, Severity.WARNING: 2}
        assert report.error_count == 1
        assert report.warning_count == 2
        assert report.has_errors
        assert report.source == "x.scss"

    def test_empty(self):
        report = aggregate([])
        assert len(report) == 0
        assert not report.has_errors
        assert report.summary == {Severity.ERROR: 0, Severity.WARNING: 0}

    def test_to_dict(self):
        report = aggregate([_finding("r", 3, 4, Severity.ERROR)], source="a.css")
        data = report.to_dict()
        assert data["source"] == "a.css"
        assert data["summary"] == {"error": 1, "warning": 0}
        assert data["findings"][0]["line"] == 3
        assert data["findings"][0]["severity"] == "error"
