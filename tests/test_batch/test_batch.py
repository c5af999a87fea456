"""Tests for lint_many: parallel batches, per-document isolation and cancellation."""

import logging
import threading

from cssguide import LintConfig, Linter, lint_many
from cssguide.engine import Source
from cssguide.model.finding import Severity
from cssguide.validation import Rule, RuleRegistry


GOOD = "a {\n  color: red;\n}\n"
BAD = "a {\n  color: #FFF;\n}\n"


class _ExplodingLinter(Linter):
    def lint(self, text, name="<input>", *, scss=None):
        if name == "b.scss":
            raise RuntimeError(f"cannot lint {name}")
        return super().lint(text, name, scss=scss)


# ---------------------------------------------------------------------------
# Batches
# ---------------------------------------------------------------------------


class TestLintMany:
    def test_reports_in_input_order(self):
        sources = [(f"f{i}.scss", BAD if i % 2 else GOOD) for i in range(12)]
        reports = lint_many(sources, max_workers=4)
        assert [r.source for r in reports] == [name for name, _ in sources]
        assert [len(r) for r in reports] == [1 if i % 2 else 0 for i in range(12)]

    def test_matches_single_document_results(self):
        linter = Linter()
        sources = [Source("a.scss", BAD), Source("b.scss", GOOD)]
        reports = lint_many(sources, linter=linter)
        assert reports == [linter.lint(BAD, "a.scss"), linter.lint(GOOD, "b.scss")]

    def test_config_applies_to_every_document(self):
        config = LintConfig(severity_overrides={"hex-case-and-shorthand": "error"})
        reports = lint_many([("a.scss", BAD), ("b.scss", BAD)], config)
        assert all(r.has_errors for r in reports)

    def test_malformed_document_does_not_stop_batch(self):
        reports = lint_many([("a.scss", "a { /* open"), ("b.scss", BAD)])
        assert reports[0].has_errors
        assert reports[1].rules() == ["hex-case-and-shorthand"]

    def test_empty_batch(self):
        assert lint_many([]) == []

    def test_source_from_path(self, tmp_path):
        path = tmp_path / "site.scss"
        path.write_text(BAD, encoding="utf-8")
        source = Source.from_path(path)
        assert source.name == str(path)
        assert source.text == BAD

    def test_unreadable_source_reported_and_batch_continues(self, tmp_path):
        bad = tmp_path / "latin1.scss"
        bad.write_bytes(b"\xff\xfe")
        good = tmp_path / "site.scss"
        good.write_text(BAD, encoding="utf-8")
        sources = [Source.from_path(bad), Source.from_path(good)]
        assert sources[0].error is not None
        assert sources[0].text == ""

        first, second = lint_many(sources)
        (finding,) = first.findings
        assert finding.rule == "read-error"
        assert finding.severity is Severity.ERROR
        assert finding.message.startswith("Could not read file:")
        assert second.rules() == ["hex-case-and-shorthand"]

    def test_missing_path_is_read_error(self, tmp_path):
        source = Source.from_path(tmp_path / "gone.scss")
        (report,) = lint_many([source])
        assert report.rules() == ["read-error"]

    def test_exception_in_one_document_isolated(self, caplog):
        linter = _ExplodingLinter()
        with caplog.at_level(logging.ERROR, logger="cssguide.engine.batch"):
            reports = lint_many(
                [("a.scss", BAD), ("b.scss", GOOD), ("c.scss", BAD)], linter=linter, max_workers=2
            )
        assert [r.source for r in reports] == ["a.scss", "b.scss", "c.scss"]
        (failure,) = reports[1].findings
        assert failure.rule == "lint-error"
        assert failure.message == "Linting failed: cannot lint b.scss"
        assert reports[0].rules() == reports[2].rules() == ["hex-case-and-shorthand"]
        assert "Linting b.scss failed" in caplog.text

    def test_read_error_severity_can_be_overridden(self, tmp_path):
        config = LintConfig(severity_overrides={"read-error": "warning"})
        (report,) = lint_many([Source.from_path(tmp_path / "gone.scss")], config)
        assert not report.has_errors


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------


class TestCancellation:
    def test_cancelled_before_start(self):
        cancel = threading.Event()
        cancel.set()
        assert lint_many([("a.scss", BAD)], cancel=cancel) == []

    def test_cancel_discards_in_flight_document(self):
        cancel = threading.Event()

        def cancel_on_second(document, tokens, config):
            if document.name == "b.scss":
                cancel.set()
            return []

        registry = RuleRegistry([Rule("cancel", cancel_on_second, Severity.WARNING, "")])
        linter = Linter(registry=registry)
        reports = lint_many(
            [("a.scss", GOOD), ("b.scss", GOOD), ("c.scss", GOOD)],
            linter=linter,
            max_workers=1,
            cancel=cancel,
        )
        names = [r.source for r in reports]
        assert "b.scss" not in names
        assert "c.scss" not in names
        assert names in ([], ["a.scss"])
