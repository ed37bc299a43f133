"""Control statement rule — redundant parentheses around conditions and clauses."""

from __future__ import annotations

import logging
import re
from typing import Optional

from swiftstyle.config import CONTROL_KEYWORDS, CONTROL_STATEMENT_RULE, SeverityConfiguration
from swiftstyle.models import (
    Correction,
    CorrectionAction,
    Match,
    RuleDescription,
    StyleViolation,
)
from swiftstyle.regions import RuleRegions
from swiftstyle.source import SourceFile
from swiftstyle.syntax import StructureKind, SyntaxKind

logger = logging.getLogger(__name__)


# ── Patterns ─────────────────────────────────────────────────────────────────


def statement_pattern(keyword: str) -> re.Pattern:
    """`keyword (clause) {`; guard needs `else`, switch rejects tuple subjects."""
    else_pattern = r"else\s*" if keyword == "guard" else ""
    clause_pattern = r"[^,{]*" if keyword == "switch" else r"[^{]*"
    return re.compile(rf"{keyword}\s*\({clause_pattern}\)\s*{else_pattern}\{{")


STATEMENT_PATTERNS = {keyword: statement_pattern(keyword) for keyword in CONTROL_KEYWORDS}


# ── Paren Locator ────────────────────────────────────────────────────────────


def outermost_paren_indices(text: str) -> tuple[Optional[int], Optional[int]]:
    """Index of the first `(` and of the `)` that closes it."""
    first_paren = text.find("(")
    if first_paren == -1:
        return None, None

    depth = 0
    for index in range(first_paren, len(text)):
        char = text[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return first_paren, index
    return first_paren, None


# ── False-Positive Filter ────────────────────────────────────────────────────


def is_false_positive(content: str, syntax_kind: Optional[SyntaxKind]) -> bool:
    """True unless the match starts on a keyword wrapped by a single group.

    `if (a || b) && (c || d) {` closes a group at depth 1 before its last
    `)`, so the parentheses are not one enclosing pair.
    """
    if syntax_kind != SyntaxKind.KEYWORD:
        return True

    last_close = content.rfind(")")
    if last_close == -1:
        return False

    depth = 0
    for index, char in enumerate(content):
        if char == ")":
            if index != last_close and depth == 1:
                return True
            depth -= 1
        elif char == "(":
            depth += 1
    return False


def is_call_expression(file: SourceFile, offset: int) -> bool:
    """True when the innermost structure enclosing ``offset`` is a call."""
    kinds = file.syntax.kinds_for_byte_offset(file.byte_offset(offset))
    if not kinds:
        return False
    return kinds[-1] == StructureKind.CALL


# ── Rule ─────────────────────────────────────────────────────────────────────


class ControlStatementRule:
    """`if`, `for`, `guard`, `switch`, `while` and `catch` without wrapping parens."""

    description: RuleDescription = CONTROL_STATEMENT_RULE

    def __init__(self, configuration: Optional[SeverityConfiguration] = None) -> None:
        self.configuration = configuration or SeverityConfiguration()

    def violating_matches(self, file: SourceFile) -> list[Match]:
        """Matches that survive both filters and the file's disable commands."""
        accepted: list[Match] = []

        for keyword, pattern in STATEMENT_PATTERNS.items():
            for start, length, kinds in file.match(pattern):
                match = Match(
                    keyword=keyword,
                    start=start,
                    length=length,
                    syntax_kind=kinds[0] if kinds else None,
                )
                if is_false_positive(file.substring(start, length), match.syntax_kind):
                    continue
                if is_call_expression(file, start):
                    logger.debug("Skipping call expression at offset %d", start)
                    continue
                accepted.append(match)

        accepted.sort(key=lambda m: m.start)

        regions = RuleRegions(file, self.description.identifier)
        matches: list[Match] = []
        previous_end = -1
        for match in accepted:
            if match.start < previous_end:
                logger.debug(
                    "Dropping %s match at %d overlapping an earlier match",
                    match.keyword,
                    match.start,
                )
                continue
            previous_end = match.end
            if regions.is_enabled(match.start):
                matches.append(match)
        return matches

    def validate(self, file: SourceFile) -> list[StyleViolation]:
        """Report violations without touching the file."""
        return [
            StyleViolation(
                rule=self.description,
                severity=self.configuration.severity,
                location=file.location(match.start),
                offset=match.start,
                keyword=match.keyword,
            )
            for match in self.violating_matches(file)
        ]

    def correct(self, file: SourceFile) -> list[Correction]:
        """Strip the wrapping parens of every violation and persist the result.

        Edits are single characters at offsets of the original buffer; they
        are spliced into a new buffer in one ascending pass. A violation whose
        paren pair cannot be located is left untouched and is recorded
        with both actions set to ``UNCHANGED``.
        """
        contents = file.contents
        edits: list[tuple[int, str]] = []
        corrections: list[Correction] = []

        for match in self.violating_matches(file):
            open_index, close_index = outermost_paren_indices(
                file.substring(match.start, match.length)
            )
            if open_index is None or close_index is None:
                logger.warning(
                    "No enclosing parentheses for %s at offset %d in %s; leaving it unchanged",
                    match.keyword,
                    match.start,
                    file.path or "<buffer>",
                )
                open_action = close_action = CorrectionAction.UNCHANGED
            else:
                open_at = match.start + open_index
                close_at = match.start + close_index

                if file.char_at(close_at + 1) == " ":
                    close_action = CorrectionAction.REMOVED
                else:
                    close_action = CorrectionAction.REPLACED
                if file.char_at(open_at - 1) == " ":
                    open_action = CorrectionAction.REMOVED
                else:
                    open_action = CorrectionAction.REPLACED

                edits.append((open_at, _replacement(open_action)))
                edits.append((close_at, _replacement(close_action)))

            corrections.append(
                Correction(
                    rule=self.description,
                    location=file.location(match.start),
                    offset=match.start,
                    open_action=open_action,
                    close_action=close_action,
                )
            )

        if edits:
            file.write(apply_edits(contents, edits))
            logger.info(
                "Corrected %d control statement(s) in %s",
                sum(1 for c in corrections if c.applied),
                file.path or "<buffer>",
            )

        return corrections


def _replacement(action: CorrectionAction) -> str:
    return "" if action is CorrectionAction.REMOVED else " "


def apply_edits(contents: str, edits: list[tuple[int, str]]) -> str:
    """Replace the single character at each offset with its replacement text."""
    pieces: list[str] = []
    position = 0
    for offset, replacement in sorted(edits):
        pieces.append(contents[position:offset])
        pieces.append(replacement)
        position = offset + 1
    pieces.append(contents[position:])
    return "".join(pieces)
