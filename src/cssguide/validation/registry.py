"""Rule registry: maps stable rule ids to checkers."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from cssguide.config import InvalidConfigError, LintConfig
from cssguide.validation.base import Rule
from cssguide.validation.rules import ALL_RULES

# Findings emitted by the pipeline itself rather than by a registered rule.
PIPELINE_RULES = frozenset(
    {"lex-error", "parse-error", "parse-incomplete", "read-error", "lint-error"}
)


class RuleRegistry:
    """Ordered collection of rules, looked up by id."""

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: dict[str, Rule] = {}
        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule) -> None:
        """Register a rule; ids must be unique."""
        if rule.id in self._rules or rule.id in PIPELINE_RULES:
            raise ValueError(f"Rule id {rule.id!r} is already registered")
        self._rules[rule.id] = rule

    def get(self, rule_id: str) -> Rule:
        return self._rules[rule_id]

    def ids(self) -> list[str]:
        return list(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def validate_config(self, config: LintConfig) -> None:
        """Reject rule ids the registry does not know about."""
        if config.enabled_rules is not None:
            unknown = sorted(r for r in config.enabled_rules if r not in self._rules)
            if unknown:
                raise InvalidConfigError(f"Unknown rule id(s) in enabled_rules: {', '.join(unknown)}")
        unknown = sorted(
            r for r in config.severity_overrides if r not in self._rules and r not in PIPELINE_RULES
        )
        if unknown:
            raise InvalidConfigError(f"Unknown rule id(s) in severity_overrides: {', '.join(unknown)}")

    def select(self, config: LintConfig) -> list[Rule]:
        """Rules enabled by *config*, in registration order."""
        return [rule for rule in self._rules.values() if config.is_enabled(rule.id)]


def default_registry() -> RuleRegistry:
    """A registry holding every built-in rule."""
    return RuleRegistry(ALL_RULES)
