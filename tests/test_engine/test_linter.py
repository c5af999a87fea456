"""Tests for the Linter pipeline (tokenize -> parse -> check -> aggregate)."""

import logging

import pytest

from cssguide import InvalidConfigError, LintConfig, Linter, Severity, lint_text
from cssguide.engine import is_scss
from cssguide.model.finding import Position
from cssguide.validation import Rule, RuleRegistry, default_registry


CLEAN = ".nav {\n  color: red;\n\n  .item {\n    margin: 0;\n  }\n}\n\n.footer {\n  padding: 0 4px;\n}\n"


# ---------------------------------------------------------------------------
# End-to-end behavior
# ---------------------------------------------------------------------------


class TestLint:
    def test_clean_document(self):
        report = lint_text(CLEAN, "clean.scss")
        assert report.findings == ()
        assert not report.has_errors

    def test_multi_selector_with_uppercase_hex(self):
        report = lint_text(".a,\n.b {\n    color: #FFF;\n}")
        assert report.rules() == ["indentation-consistency", "hex-case-and-shorthand"]
        assert report.findings[1].position == Position(3, 5)
        assert "at column 12" in report.findings[1].message
        assert "selector-per-line" not in report.rules()

    def test_compact_form_missing_colon_space(self):
        report = lint_text(".a { color:#fff }")
        assert report.rules() == ["declaration-spacing"]

    def test_three_levels_of_nesting(self):
        source = ".a {\n  .b {\n    .c {\n      .d {\n      }\n    }\n  }\n}\n"
        report = lint_text(source, config=LintConfig(max_nesting_depth=2))
        assert report.rules() == ["nesting-depth"]
        assert report.findings[0].position == Position(4, 7)

    @pytest.mark.parametrize("unit", ["space", "tab"])
    def test_mixed_indentation_always_reported(self, unit):
        config = LintConfig(indent_unit=unit, indent_width=1 if unit == "tab" else 2)
        report = lint_text("a {\n\t  color: red;\n}\n", config=config)
        mixed = [f for f in report if f.rule == "indentation-consistency"]
        assert len(mixed) == 1
        assert mixed[0].severity is Severity.ERROR

    def test_findings_attributed_to_source(self):
        report = lint_text("a{}", "styles/site.scss")
        assert report.source == "styles/site.scss"
        assert all(f.source == "styles/site.scss" for f in report)

    def test_findings_are_ordered(self):
        source = ".B{\n    color:#FFFFFF\n}\nc{}"
        report = lint_text(source)
        keys = [f.sort_key() for f in report]
        assert keys == sorted(keys)


# ---------------------------------------------------------------------------
# Malformed input
# ---------------------------------------------------------------------------


class TestMalformedInput:
    def test_unterminated_comment_at_end(self):
        source = "a {\n  color: #FFF;\n}\n/* never closed"
        report = lint_text(source)
        lex = [f for f in report if f.rule == "lex-error"]
        assert len(lex) == 1
        assert lex[0].position == Position(4, 1)
        assert lex[0].severity is Severity.ERROR
        assert "parse-incomplete" in report.rules()
        assert "hex-case-and-shorthand" in report.rules()

    def test_parse_incomplete_at_end_of_input(self):
        report = lint_text("a {\n  b: c;\n/* x")
        incomplete = [f for f in report if f.rule == "parse-incomplete"]
        assert incomplete[0].position == Position(3, 5)

    def test_unclosed_rule_set(self):
        report = lint_text("a {\n  color: red;\n")
        assert report.has_errors
        (parse_error,) = [f for f in report if f.rule == "parse-error"]
        assert parse_error.message == "Unclosed rule set."
        assert parse_error.position == Position(1, 3)

    def test_unmatched_brace_does_not_stop_later_checks(self):
        report = lint_text("}\n\na {\n  color: #FFF;\n}\n")
        assert "parse-error" in report.rules()
        assert "hex-case-and-shorthand" in report.rules()

    def test_unterminated_string(self):
        report = lint_text('a {\n  content: "oops;\n}\n')
        assert "lex-error" in report.rules()

    def test_well_formed_input_has_no_pipeline_findings(self):
        report = lint_text(CLEAN)
        assert not {"lex-error", "parse-error", "parse-incomplete"} & set(report.rules())


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class TestConfiguration:
    def test_severity_override(self):
        config = LintConfig(severity_overrides={"hex-case-and-shorthand": "error"})
        report = lint_text("a {\n  color: #FFF;\n}\n", config=config)
        assert report.findings[0].severity is Severity.ERROR
        assert report.has_errors

    def test_override_downgrades_pipeline_findings(self):
        config = LintConfig(severity_overrides={"lex-error": "warning", "parse-incomplete": "warning"})
        report = lint_text("a { }\n/* x", config=config)
        assert not report.has_errors

    def test_rule_severity_is_default_for_its_findings(self):
        rule = default_registry().get("zero-unit")
        registry = RuleRegistry([Rule(rule.id, rule.check, Severity.ERROR, rule.description)])
        report = Linter(registry=registry).lint("a {\n  margin: 0px;\n}\n")
        (finding,) = report.findings
        assert finding.rule == "zero-unit"
        assert finding.severity is Severity.ERROR

    def test_override_wins_over_rule_severity(self):
        rule = default_registry().get("zero-unit")
        registry = RuleRegistry([Rule(rule.id, rule.check, Severity.ERROR, rule.description)])
        config = LintConfig(severity_overrides={"zero-unit": "warning"})
        report = Linter(config, registry=registry).lint("a {\n  margin: 0px;\n}\n")
        assert not report.has_errors

    def test_enabled_rules(self):
        config = LintConfig(enabled_rules={"zero-unit"})
        report = lint_text(".A{margin:0px}", config=config)
        assert report.rules() == ["zero-unit"]

    def test_invalid_config_rejected_before_linting(self):
        with pytest.raises(InvalidConfigError):
            Linter(LintConfig(enabled_rules={"no-such-rule"}))

    def test_plain_css_has_no_line_comments(self):
        assert is_scss("a.scss")
        assert is_scss("<input>")
        assert not is_scss("a.CSS")
        source = "a {\n  color: red; // note\n}\n"
        assert lint_text(source, "a.scss").findings == ()
        assert "trailing-semicolon" in lint_text(source, "a.css").rules()


# ---------------------------------------------------------------------------
# Determinism and isolation
# ---------------------------------------------------------------------------


def _boom(document, tokens, config):
    raise RuntimeError("boom")


class TestDeterminism:
    def test_idempotent(self):
        source = ".a,.b{color:#FFFFFF;margin:0px}\n.c { }"
        linter = Linter()
        assert linter.lint(source) == linter.lint(source)

    def test_parallel_rules_match_sequential(self):
        source = ".a,.b{color:#FFFFFF;margin:0px}\n.c{.d{.e{.f{}}}}"
        assert Linter(max_workers=4).lint(source) == Linter().lint(source)

    def test_failing_rule_becomes_finding(self, caplog):
        registry = RuleRegistry([*default_registry(), Rule("boom", _boom, Severity.WARNING, "")])
        with caplog.at_level(logging.ERROR, logger="cssguide.engine.linter"):
            report = Linter(registry=registry).lint("a { b: c; }")
        (failure,) = [f for f in report if f.rule == "boom"]
        assert failure.severity is Severity.ERROR
        assert failure.message == "Rule failed: boom"
        assert "boom" in caplog.text

    def test_linter_reusable_across_documents(self):
        linter = Linter()
        first = linter.lint("a{}", "one.scss")
        second = linter.lint("a { }", "two.scss")
        assert first.source == "one.scss"
        assert second.findings == ()
