"""Style rules for CSS/SCSS documents.

Each rule is a function taking the parsed Document, the full token sequence
and the LintConfig, and returning a list of Finding objects describing any
violations found.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from cssguide.config import LintConfig
from cssguide.model.finding import Finding, Position, Severity
from cssguide.model.token import Token, TokenKind
from cssguide.model.tree import DeclarationNode, Document, RuleSetNode
from cssguide.validation.base import Rule


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_LENGTH_UNITS = "px|em|rem|ex|ch|vw|vh|vmin|vmax|cm|mm|in|pt|pc|q"

# A zero (0, 0.0, .0) directly followed by a length unit.
_ZERO_UNIT_RE = re.compile(
    rf"(?<![\w.$#@%-])(?:0+(?:\.0+)?|\.0+)(?:{_LENGTH_UNITS})(?![\w%-])",
    re.IGNORECASE,
)

_HEX_RE = re.compile(r"(?<![\w&-])#([0-9a-fA-F]{3,8})(?![\w-])")
_HEX_LENGTHS = frozenset({3, 4, 6, 8})

_SELECTOR_NAME_RE = re.compile(r"([.#])(-?[A-Za-z_][\w-]*)")
_QUOTED_RE = re.compile(r"\"[^\"]*\"|'[^']*'")

_VENDOR_PREFIX_RE = re.compile(r"^-[a-z]+-")

_ORDER_RANK = {"@extend": 0, "@include": 1}
_ORDER_LABEL = {0: "@extend", 1: "@include", 2: "property declarations"}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _finding(
    document: Document,
    rule: str,
    message: str,
    position: Position,
    fix: str | None = None,
    severity: Severity = Severity.WARNING,
) -> Finding:
    return Finding(
        rule=rule,
        severity=severity,
        message=message,
        position=position,
        source=document.name,
        fix=fix,
    )


def _at(token: Token, offset: int = 0) -> Position:
    return Position(token.line, token.column + offset)


def _unit_name(config: LintConfig, count: int) -> str:
    unit = config.indent_unit
    return unit if count == 1 else f"{unit}s"


def _first_on_line(tokens: Sequence[Token]) -> dict[int, Position]:
    """Map each line to the position of its first non-whitespace token."""
    firsts: dict[int, Position] = {}
    for token in tokens:
        if token.kind in (TokenKind.WHITESPACE, TokenKind.NEWLINE):
            continue
        firsts.setdefault(token.line, _at(token))
    return firsts


def _content_lines(tokens: Sequence[Token]) -> set[int]:
    """Lines holding anything other than whitespace."""
    lines: set[int] = set()
    for token in tokens:
        if token.kind in (TokenKind.WHITESPACE, TokenKind.NEWLINE):
            continue
        lines.update(range(token.line, token.end_line + 1))
    return lines


def _value_words(decl: DeclarationNode, tokens: Sequence[Token]) -> list[Token]:
    """Unquoted VALUE tokens of a declaration, excluding ``url(...)``."""
    return [
        t
        for t in tokens[decl.token_start:decl.token_end]
        if t.kind is TokenKind.VALUE and not t.is_string and not t.text.lower().startswith("url(")
    ]


# ---------------------------------------------------------------------------
# Whitespace rules
# ---------------------------------------------------------------------------


def check_indentation(
    document: Document, tokens: Sequence[Token], config: LintConfig
) -> list[Finding]:
    """Leading whitespace uses the configured unit, ``depth * width`` wide.

    Mixing tabs and spaces on one line is always reported as an error.
    Lines continuing a declaration value are left to ``declaration-spacing``.
    """
    findings: list[Finding] = []
    depth = 0
    statement: str | None = None  # None, "prelude" or "declaration"
    at_line_start = True
    other = "\t" if config.indent_char == " " else " "
    other_name = "tabs" if other == "\t" else "spaces"

    for i, token in enumerate(tokens):
        if at_line_start:
            at_line_start = False
            lead = token.text if token.kind is TokenKind.WHITESPACE else ""
            first_index = i + 1 if lead else i
            first = tokens[first_index] if first_index < len(tokens) else None
            if first is not None and first.kind is not TokenKind.NEWLINE:
                line_start = Position(token.line, 1)
                if " " in lead and "\t" in lead:
                    findings.append(
                        _finding(
                            document,
                            "indentation-consistency",
                            "Mixed tabs and spaces in indentation.",
                            line_start,
                            severity=Severity.ERROR,
                        )
                    )
                elif other in lead:
                    findings.append(
                        _finding(
                            document,
                            "indentation-consistency",
                            f"Expected {config.indent_unit}s for indentation, found {other_name}.",
                            line_start,
                        )
                    )
                elif statement != "declaration" or first.kind is TokenKind.BRACE_CLOSE:
                    level = depth - 1 if first.kind is TokenKind.BRACE_CLOSE else depth
                    level = max(0, level)
                    expected = config.indent_width * level
                    if len(lead) != expected:
                        findings.append(
                            _finding(
                                document,
                                "indentation-consistency",
                                f"Expected indentation of {expected} {_unit_name(config, expected)}, "
                                f"found {len(lead)}.",
                                line_start,
                                fix=config.indent_for(level),
                            )
                        )

        kind = token.kind
        if kind is TokenKind.NEWLINE:
            at_line_start = True
        elif kind is TokenKind.BRACE_OPEN:
            depth += 1
            statement = None
        elif kind is TokenKind.BRACE_CLOSE:
            depth = max(0, depth - 1)
            statement = None
        elif kind is TokenKind.SEMICOLON:
            statement = None
        elif statement is None and not token.is_trivia:
            statement = "prelude" if kind is TokenKind.SELECTOR_FRAGMENT else "declaration"
    return findings


def check_trailing_whitespace(
    document: Document, tokens: Sequence[Token], config: LintConfig
) -> list[Finding]:
    """No whitespace at the end of a line, including whitespace-only lines."""
    findings: list[Finding] = []
    for i, token in enumerate(tokens):
        if token.kind is not TokenKind.WHITESPACE:
            continue
        at_end = i + 1 == len(tokens) or tokens[i + 1].kind is TokenKind.NEWLINE
        if not at_end:
            continue
        blank = i == 0 or tokens[i - 1].kind is TokenKind.NEWLINE
        message = "Whitespace on blank line." if blank else "Trailing whitespace."
        findings.append(
            _finding(document, "trailing-whitespace", message, _at(token), fix="")
        )
    return findings


# ---------------------------------------------------------------------------
# Formatting rules
# ---------------------------------------------------------------------------


def check_selector_per_line(
    document: Document, tokens: Sequence[Token], config: LintConfig
) -> list[Finding]:
    """Each selector after the first in a selector list starts its own line."""
    findings: list[Finding] = []
    firsts = _first_on_line(tokens)
    for rule_set in document.rule_sets():
        if rule_set.is_at_rule or len(rule_set.selectors) < 2:
            continue
        for selector in rule_set.selectors[1:]:
            if firsts.get(selector.position.line) != selector.position:
                findings.append(
                    _finding(
                        document,
                        "selector-per-line",
                        f"Selector '{selector.text}' should be on its own line.",
                        selector.position,
                    )
                )
    return findings


def _check_space_before_open(
    document: Document, tokens: Sequence[Token], rule_set: RuleSetNode
) -> Finding | None:
    i = rule_set.open_token
    if i == rule_set.token_start:
        return None
    brace = tokens[i]
    before = tokens[i - 1]
    starts_line = before.kind is TokenKind.NEWLINE or (
        before.kind is TokenKind.WHITESPACE and (i < 2 or tokens[i - 2].kind is TokenKind.NEWLINE)
    )
    if starts_line:
        message = "Opening brace should be on the same line as the selector."
    elif before.kind is not TokenKind.WHITESPACE:
        message = "Expected one space before '{'."
    elif before.text != " ":
        message = f"Expected one space before '{{', found {len(before.text)} whitespace characters."
    else:
        return None
    return _finding(document, "brace-spacing", message, _at(brace), fix=" {")


def check_brace_spacing(
    document: Document, tokens: Sequence[Token], config: LintConfig
) -> list[Finding]:
    """One space before ``{``; ``}`` aligned with the rule set start.

    Compact (single-line) rule sets instead need one space just inside
    each brace.
    """
    findings: list[Finding] = []
    for rule_set in document.rule_sets():
        finding = _check_space_before_open(document, tokens, rule_set)
        if finding is not None:
            findings.append(finding)
        if rule_set.close_brace is None or rule_set.close_token is None:
            continue

        if not rule_set.is_compact:
            if rule_set.close_brace.column != rule_set.start.column:
                findings.append(
                    _finding(
                        document,
                        "brace-spacing",
                        f"Closing brace should align with the start of the rule set "
                        f"(column {rule_set.start.column}).",
                        rule_set.close_brace,
                    )
                )
            continue

        if not rule_set.body:
            continue
        after_open = tokens[rule_set.open_token + 1]
        if after_open.kind is not TokenKind.WHITESPACE or after_open.text != " ":
            findings.append(
                _finding(
                    document,
                    "brace-spacing",
                    "Expected one space after '{' in a single-line rule set.",
                    Position(rule_set.open_brace.line, rule_set.open_brace.column + 1),
                    fix="{ ",
                )
            )
        before_close = tokens[rule_set.close_token - 1]
        if before_close.kind is not TokenKind.WHITESPACE or before_close.text != " ":
            findings.append(
                _finding(
                    document,
                    "brace-spacing",
                    "Expected one space before '}' in a single-line rule set.",
                    rule_set.close_brace,
                    fix=" }",
                )
            )
    return findings


def _check_separator(
    document: Document,
    tokens: Sequence[Token],
    i: int,
    symbol: str,
) -> list[Finding]:
    """Check whitespace around the COLON or COMMA at index *i*."""
    findings: list[Finding] = []
    token = tokens[i]
    before = tokens[i - 1] if i > 0 else None
    if (
        before is not None
        and before.kind is TokenKind.WHITESPACE
        and i > 1
        and tokens[i - 2].kind is not TokenKind.NEWLINE
    ):
        findings.append(
            _finding(
                document,
                "declaration-spacing",
                f"Unexpected whitespace before '{symbol}'.",
                _at(before),
                fix=symbol,
            )
        )

    after = tokens[i + 1] if i + 1 < len(tokens) else None
    if after is None or after.kind in (TokenKind.NEWLINE, TokenKind.SEMICOLON, TokenKind.BRACE_CLOSE):
        return findings
    if after.kind is TokenKind.WHITESPACE:
        following = tokens[i + 2] if i + 2 < len(tokens) else None
        if after.text == " " or following is None or following.kind is TokenKind.NEWLINE:
            return findings
    findings.append(
        _finding(
            document,
            "declaration-spacing",
            f"Expected one space after '{symbol}'.",
            _at(token),
            fix=f"{symbol} ",
        )
    )
    return findings


def check_declaration_spacing(
    document: Document, tokens: Sequence[Token], config: LintConfig
) -> list[Finding]:
    """One space after ``:`` and after each value comma.

    A value wrapped onto further lines indents them one level deeper than
    its property.
    """
    findings: list[Finding] = []
    for decl in document.declarations():
        colon_seen = False
        continuation = config.indent_for(document.depth(decl) + 1)
        for i in range(decl.token_start, decl.token_end):
            token = tokens[i]
            if token.kind is TokenKind.COLON and not colon_seen:
                colon_seen = True
                findings.extend(_check_separator(document, tokens, i, ":"))
            elif token.kind is TokenKind.COMMA:
                findings.extend(_check_separator(document, tokens, i, ","))
            elif token.kind is TokenKind.NEWLINE and i + 1 < decl.token_end:
                nxt = tokens[i + 1]
                lead = nxt.text if nxt.kind is TokenKind.WHITESPACE else ""
                first = tokens[i + 2] if lead else nxt
                if first.kind is TokenKind.NEWLINE:
                    continue
                if lead != continuation:
                    findings.append(
                        _finding(
                            document,
                            "declaration-spacing",
                            f"Wrapped value of '{decl.property}' should be indented one level "
                            "deeper than the property.",
                            Position(nxt.line, 1),
                            fix=continuation,
                        )
                    )
    return findings


def check_trailing_semicolon(
    document: Document, tokens: Sequence[Token], config: LintConfig
) -> list[Finding]:
    """The last declaration of a multi-line block ends with a semicolon."""
    findings: list[Finding] = []
    for decl in document.declarations():
        if not decl.terminal or decl.semicolon:
            continue
        parent = document.parent_of(decl)
        if parent is not None and parent.is_compact:
            continue
        findings.append(
            _finding(
                document,
                "trailing-semicolon",
                f"Missing semicolon after the last declaration '{decl.property}'.",
                tokens[decl.token_end - 1].end,
                fix=";",
            )
        )
    return findings


# ---------------------------------------------------------------------------
# Value rules
# ---------------------------------------------------------------------------


def check_zero_unit(
    document: Document, tokens: Sequence[Token], config: LintConfig
) -> list[Finding]:
    """``0`` takes no unit, except for properties on the exception list."""
    findings: list[Finding] = []
    for decl in document.declarations():
        if decl.is_at_statement or decl.is_variable or decl.is_custom_property:
            continue
        prop = _VENDOR_PREFIX_RE.sub("", decl.property.lower())
        if prop in config.zero_unit_exceptions:
            continue
        for word in _value_words(decl, tokens):
            for match in _ZERO_UNIT_RE.finditer(word.text):
                findings.append(
                    _finding(
                        document,
                        "zero-unit",
                        f"Unit on zero value '{match.group(0)}' is unnecessary.",
                        _at(word, match.start()),
                        fix="0",
                    )
                )
    return findings


def _hex_problem(digits: str) -> tuple[str, str] | None:
    """Return (replacement, complaint) for a hex literal, or None if it is fine."""
    lower = digits.lower()
    short = None
    if len(lower) == 6 and lower[0::2] == lower[1::2]:
        short = lower[0::2]
    uppercase = digits != lower
    if not uppercase and short is None:
        return None
    fix = "#" + (short or lower)
    if uppercase and short:
        return fix, f"should be lowercase and shortened to '{fix}'"
    if uppercase:
        return fix, "should be lowercase"
    return fix, f"can be shortened to '{fix}'"


def check_hex_colors(
    document: Document, tokens: Sequence[Token], config: LintConfig
) -> list[Finding]:
    """Hex colors are lowercase and use the 3-digit form when possible.

    Reported once per declaration, at its property; the message names each
    offending literal and its column, and the fix is the corrected value.
    """
    findings: list[Finding] = []
    for decl in document.declarations():
        if not decl.value:
            continue
        value_offset = tokens[decl.token_end - 1].end_offset - len(decl.value)
        problems: list[tuple[int, str, str]] = []  # (column, literal, complaint)
        replacements: list[tuple[int, int, str]] = []
        for word in _value_words(decl, tokens):
            for match in _HEX_RE.finditer(word.text):
                digits = match.group(1)
                if len(digits) not in _HEX_LENGTHS:
                    continue
                problem = _hex_problem(digits)
                if problem is None:
                    continue
                fix, complaint = problem
                start = word.offset + match.start() - value_offset
                problems.append((word.column + match.start(), match.group(0), complaint))
                replacements.append((start, start + len(match.group(0)), fix))
        if not problems:
            continue

        fixed = decl.value
        for start, end, fix in reversed(replacements):
            fixed = fixed[:start] + fix + fixed[end:]
        clauses = "; ".join(
            f"'{literal}' at column {column} {complaint}" for column, literal, complaint in problems
        )
        noun = "Hex color" if len(problems) == 1 else "Hex colors"
        findings.append(
            _finding(
                document,
                "hex-case-and-shorthand",
                f"{noun} {clauses}.",
                decl.position,
                fix=fixed,
            )
        )
    return findings


def check_quotes(
    document: Document, tokens: Sequence[Token], config: LintConfig
) -> list[Finding]:
    """Every quoted string uses the configured quote character."""
    findings: list[Finding] = []
    quote = config.quote
    for token in tokens:
        if not token.is_string or token.text[0] == quote:
            continue
        opening = token.text[0]
        closed = len(token.text) >= 2 and token.text.endswith(opening)
        content = token.text[1:-1] if closed else token.text[1:]
        if quote in content:
            continue
        findings.append(
            _finding(
                document,
                "quote-consistency",
                f"Strings should use {config.quote_char} quotes ({quote}).",
                _at(token),
                fix=f"{quote}{content}{quote}" if closed else None,
            )
        )
    return findings


# ---------------------------------------------------------------------------
# Structure rules
# ---------------------------------------------------------------------------


def check_rule_set_separation(
    document: Document, tokens: Sequence[Token], config: LintConfig
) -> list[Finding]:
    """Exactly one blank line between consecutive top-level rule sets.

    Compact rule sets written on consecutive lines may omit it.
    """
    findings: list[Finding] = []
    content = _content_lines(tokens)
    previous: RuleSetNode | None = None
    for index in document.top_level:
        node = document.node(index)
        if not isinstance(node, RuleSetNode):
            if isinstance(node, DeclarationNode):
                previous = None
            continue
        if previous is not None and previous.close_brace is not None:
            leading = document.leading_comments(node)
            first_line = min([c.position.line for c in leading] + [node.start.line])
            close_line = previous.close_brace.line
            blank = sum(1 for line in range(close_line + 1, first_line) if line not in content)
            compact_pair = (
                previous.is_compact and node.is_compact and first_line > close_line
            )
            if blank != 1 and not (blank == 0 and compact_pair):
                findings.append(
                    _finding(
                        document,
                        "rule-set-separation",
                        f"Expected one blank line between rule sets, found {blank}.",
                        node.start,
                    )
                )
        previous = node
    return findings


def check_nesting_depth(
    document: Document, tokens: Sequence[Token], config: LintConfig
) -> list[Finding]:
    """Limit selector nesting depth and the length of nested blocks."""
    findings: list[Finding] = []
    for rule_set in document.rule_sets():
        if rule_set.parent is not None and rule_set.close_brace is not None:
            span = rule_set.close_brace.line - rule_set.open_brace.line
            if span > config.max_nested_block_lines:
                findings.append(
                    _finding(
                        document,
                        "nesting-depth",
                        f"Nested block spans {span} lines "
                        f"(maximum {config.max_nested_block_lines}).",
                        rule_set.open_brace,
                    )
                )
        if rule_set.is_at_rule:
            continue
        depth = sum(1 for ancestor in document.ancestors(rule_set) if not ancestor.is_at_rule)
        if depth > config.max_nesting_depth:
            anchor = rule_set.selectors[0].position if rule_set.selectors else rule_set.start
            findings.append(
                _finding(
                    document,
                    "nesting-depth",
                    f"Rule set is nested {depth} levels deep "
                    f"(maximum {config.max_nesting_depth}).",
                    anchor,
                )
            )
    return findings


def check_at_rule_ordering(
    document: Document, tokens: Sequence[Token], config: LintConfig
) -> list[Finding]:
    """``@extend`` before ``@include`` before property declarations."""
    findings: list[Finding] = []
    for rule_set in document.rule_sets():
        highest = -1
        for decl in document.declarations_of(rule_set):
            if decl.is_variable:
                continue
            if decl.is_at_statement:
                rank = _ORDER_RANK.get(decl.property.lower())
                if rank is None:
                    continue
            else:
                rank = 2
            if rank < highest:
                findings.append(
                    _finding(
                        document,
                        "at-rule-ordering",
                        f"'{decl.property}' should come before {_ORDER_LABEL[highest]}.",
                        decl.position,
                    )
                )
                break
            highest = max(highest, rank)
    return findings


def check_selector_naming(
    document: Document, tokens: Sequence[Token], config: LintConfig
) -> list[Finding]:
    """Class and id names follow the configured naming pattern."""
    findings: list[Finding] = []
    pattern = re.compile(config.selector_name_pattern)
    for rule_set in document.rule_sets():
        if rule_set.is_at_rule:
            continue
        for selector in rule_set.selectors:
            text = _QUOTED_RE.sub(lambda m: " " * len(m.group(0)), selector.text)
            for match in _SELECTOR_NAME_RE.finditer(text):
                name = match.group(2)
                if text.startswith("#{", match.end()) or pattern.match(name):
                    continue
                kind = "Class" if match.group(1) == "." else "ID"
                findings.append(
                    _finding(
                        document,
                        "selector-naming",
                        f"{kind} name '{name}' does not match the naming pattern "
                        f"{config.selector_name_pattern!r}.",
                        _offset_position(selector.position, text, match.start()),
                    )
                )
    return findings


def _offset_position(start: Position, text: str, offset: int) -> Position:
    head = text[:offset]
    breaks = head.count("\n")
    if not breaks:
        return Position(start.line, start.column + offset)
    return Position(start.line + breaks, offset - head.rfind("\n"))


# ---------------------------------------------------------------------------
# Rule registry
# ---------------------------------------------------------------------------

ALL_RULES = [
    Rule(
        "indentation-consistency",
        check_indentation,
        Severity.WARNING,
        "Indent with the configured unit, one level per nesting depth.",
    ),
    Rule(
        "trailing-whitespace",
        check_trailing_whitespace,
        Severity.WARNING,
        "No whitespace at line ends or on blank lines.",
    ),
    Rule(
        "selector-per-line",
        check_selector_per_line,
        Severity.WARNING,
        "One selector per line in a selector list.",
    ),
    Rule(
        "brace-spacing",
        check_brace_spacing,
        Severity.WARNING,
        "One space before '{'; '}' aligned with the rule set.",
    ),
    Rule(
        "declaration-spacing",
        check_declaration_spacing,
        Severity.WARNING,
        "One space after ':' and ','; wrapped values indented one level.",
    ),
    Rule(
        "trailing-semicolon",
        check_trailing_semicolon,
        Severity.WARNING,
        "Terminate the last declaration of a block with ';'.",
    ),
    Rule(
        "zero-unit",
        check_zero_unit,
        Severity.WARNING,
        "Omit units on zero values.",
    ),
    Rule(
        "hex-case-and-shorthand",
        check_hex_colors,
        Severity.WARNING,
        "Lowercase hex colors, shortened where possible.",
    ),
    Rule(
        "quote-consistency",
        check_quotes,
        Severity.WARNING,
        "Use the configured quote character.",
    ),
    Rule(
        "rule-set-separation",
        check_rule_set_separation,
        Severity.WARNING,
        "One blank line between top-level rule sets.",
    ),
    Rule(
        "nesting-depth",
        check_nesting_depth,
        Severity.WARNING,
        "Limit nesting depth and nested block length.",
    ),
    Rule(
        "at-rule-ordering",
        check_at_rule_ordering,
        Severity.WARNING,
        "@extend, then @include, then properties.",
    ),
    Rule(
        "selector-naming",
        check_selector_naming,
        Severity.WARNING,
        "Lowercase, hyphen-delimited class and id names.",
    ),
]
