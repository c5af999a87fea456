"""Lint many documents in parallel on a thread pool."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

from cssguide.config import LintConfig
from cssguide.engine.linter import Linter
from cssguide.validation.aggregate import Report

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Source:
    """One input document: its name and its text.

    A source that could not be read carries the reason in *error* and an
    empty text.
    """

    name: str
    text: str
    error: str | None = None

    @classmethod
    def from_path(cls, path: str | Path) -> Source:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s: %s", path, exc)
            return cls(name=str(path), text="", error=str(exc))
        return cls(name=str(path), text=text)


def _lint_one(linter: Linter, source: Source, cancel: threading.Event | None) -> Report | None:
    if cancel is not None and cancel.is_set():
        return None
    if source.error is not None:
        return linter.failed(source.name, "read-error", f"Could not read file: {source.error}")
    report = linter.lint(source.text, source.name)
    if cancel is not None and cancel.is_set():
        return None
    return report


def lint_many(
    sources: Iterable[Source | tuple[str, str]],
    config: LintConfig | None = None,
    *,
    max_workers: int | None = None,
    cancel: threading.Event | None = None,
    linter: Linter | None = None,
) -> list[Report]:
    """Lint every source and return the reports in input order.

    Each document runs on its own worker with no shared mutable state.
    A document that cannot be read or whose lint raises gets a report with
    a single error finding; the rest of the batch still runs. Setting
    *cancel* stops the batch: documents not finished by then are
    dropped entirely, never reported in part.
    """
    linter = linter or Linter(config)
    items = [s if isinstance(s, Source) else Source(*s) for s in sources]
    if not items or (cancel is not None and cancel.is_set()):
        return []

    results: dict[int, Report] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {
            pool.submit(_lint_one, linter, item, cancel): position
            for position, item in enumerate(items)
        }
        for future in as_completed(futures):
            if cancel is not None and cancel.is_set():
                for pending in futures:
                    pending.cancel()
                logger.info("Batch cancelled after %d of %d documents", len(results), len(items))
                break
            try:
                report = future.result()
            except Exception as exc:
                item = items[futures[future]]
                logger.exception("Linting %s failed", item.name)
                report = linter.failed(item.name, "lint-error", f"Linting failed: {exc}")
            if report is not None:
                results[futures[future]] = report

    logger.info("Linted %d of %d documents", len(results), len(items))
    return [results[position] for position in sorted(results)]
