"""Lint configuration: a frozen, validated set of rule options."""
from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from cssguide.errors import CssGuideError

logger = logging.getLogger(__name__)

INDENT_UNITS = ("space", "tab")
QUOTE_CHARS = {"double": '"', "single": "'"}
SEVERITIES = ("warning", "error")

# Properties where a unit on zero changes meaning or is required.
DEFAULT_ZERO_UNIT_EXCEPTIONS = frozenset({
    "flex",
    "flex-basis",
    "transition",
    "transition-duration",
    "transition-delay",
    "animation",
    "animation-duration",
    "animation-delay",
})

DEFAULT_SELECTOR_NAME_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"

# camelCase option names accepted by from_mapping().
_MAPPING_KEYS = {
    "indentUnit": "indent_unit",
    "indentWidth": "indent_width",
    "maxNestingDepth": "max_nesting_depth",
    "maxNestedBlockLines": "max_nested_block_lines",
    "quoteChar": "quote_char",
    "zeroUnitExceptions": "zero_unit_exceptions",
    "enabledRules": "enabled_rules",
    "severityOverrides": "severity_overrides",
    "selectorNamePattern": "selector_name_pattern",
}


class InvalidConfigError(CssGuideError):
    """Raised when a configuration value is out of range or unknown."""


def _positive_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidConfigError(f"{name} must be a positive integer, got {value!r}")


@dataclass(frozen=True)
class LintConfig:
    """Options consumed by the rule checkers.

    ``enabled_rules`` of ``None`` enables every registered rule. Rule ids
    in ``enabled_rules`` and ``severity_overrides`` are checked against the
    registry when a :class:`~cssguide.engine.Linter` is built.
    """

    indent_unit: str = "space"
    indent_width: int = 2
    max_nesting_depth: int = 2
    max_nested_block_lines: int = 20
    quote_char: str = "double"
    zero_unit_exceptions: frozenset[str] = DEFAULT_ZERO_UNIT_EXCEPTIONS
    enabled_rules: frozenset[str] | None = None
    severity_overrides: Mapping[str, str] = field(default_factory=dict)
    selector_name_pattern: str = DEFAULT_SELECTOR_NAME_PATTERN

    def __post_init__(self) -> None:
        if self.indent_unit not in INDENT_UNITS:
            raise InvalidConfigError(
                f"indent_unit must be one of {', '.join(INDENT_UNITS)}, got {self.indent_unit!r}"
            )
        _positive_int("indent_width", self.indent_width)
        _positive_int("max_nesting_depth", self.max_nesting_depth)
        _positive_int("max_nested_block_lines", self.max_nested_block_lines)
        if self.quote_char not in QUOTE_CHARS:
            raise InvalidConfigError(
                f"quote_char must be 'single' or 'double', got {self.quote_char!r}"
            )
        for rule_id, severity in self.severity_overrides.items():
            if severity not in SEVERITIES:
                raise InvalidConfigError(
                    f"Severity for {rule_id!r} must be 'warning' or 'error', got {severity!r}"
                )
        try:
            re.compile(self.selector_name_pattern)
        except re.error as exc:
            raise InvalidConfigError(f"Invalid selector_name_pattern: {exc}") from exc
        # Copy collections so callers cannot mutate a live config.
        object.__setattr__(self, "zero_unit_exceptions", frozenset(p.lower() for p in self.zero_unit_exceptions))
        if self.enabled_rules is not None:
            object.__setattr__(self, "enabled_rules", frozenset(self.enabled_rules))
        object.__setattr__(self, "severity_overrides", dict(self.severity_overrides))

    @property
    def indent_char(self) -> str:
        return " " if self.indent_unit == "space" else "\t"

    @property
    def quote(self) -> str:
        """The configured quote character itself."""
        return QUOTE_CHARS[self.quote_char]

    def indent_for(self, depth: int) -> str:
        return self.indent_char * (self.indent_width * depth)

    def is_enabled(self, rule_id: str) -> bool:
        return self.enabled_rules is None or rule_id in self.enabled_rules

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> LintConfig:
        """Build a config from a plain mapping (camelCase or snake_case keys).

        Unknown keys are ignored. Quote characters may be given as
        ``single``/``double`` or as the character itself.
        """
        known = {f for f in cls.__dataclass_fields__}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = _MAPPING_KEYS.get(key, key)
            if name not in known:
                logger.debug("Ignoring unknown config key %r", key)
                continue
            kwargs[name] = value

        quote = kwargs.get("quote_char")
        if quote in ("'", '"'):
            kwargs["quote_char"] = "single" if quote == "'" else "double"
        for name in ("zero_unit_exceptions", "enabled_rules"):
            value = kwargs.get(name)
            if value is not None:
                if isinstance(value, str):
                    raise InvalidConfigError(f"{name} must be a collection of strings, not a string")
                kwargs[name] = frozenset(value)
        overrides = kwargs.get("severity_overrides")
        if overrides is not None and not isinstance(overrides, Mapping):
            raise InvalidConfigError("severity_overrides must be a mapping of rule id to severity")
        return cls(**kwargs)
