"""Inline commands that switch a rule off for part of a file.

    // swiftstyle:disable control_statement
    // swiftstyle:enable control_statement
    // swiftstyle:disable:next control_statement
    // swiftstyle:disable:this all
    // swiftstyle:enable:previous control_statement

Commands are only honoured inside comment tokens, as classified by the
file's syntax service.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from swiftstyle.config import ALL_RULES, COMMAND_PREFIX
from swiftstyle.source import SourceFile

logger = logging.getLogger(__name__)

_COMMAND_PATTERN = re.compile(
    rf"{COMMAND_PREFIX}:(enable|disable)(?::(previous|this|next))?((?:[ \t]+[\w-]+)+)"
)

_LINE_SHIFT = {"previous": -1, "this": 0, "next": 1}


@dataclass(frozen=True)
class Command:
    """A parsed enable/disable command."""

    action: str  # "enable" or "disable"
    modifier: Optional[str]  # "previous", "this", "next" or None
    rule_ids: frozenset[str]
    offset: int
    line: int

    def applies_to(self, rule_id: str) -> bool:
        return rule_id in self.rule_ids or ALL_RULES in self.rule_ids

    @property
    def target_line(self) -> int:
        return self.line + _LINE_SHIFT.get(self.modifier or "this", 0)


def parse_commands(file: SourceFile) -> list[Command]:
    """Find every command in the file's comments, in document order."""
    commands: list[Command] = []
    for tok in file.syntax.comment_tokens():
        for m in _COMMAND_PATTERN.finditer(tok.text):
            offset = tok.offset + m.start()
            commands.append(
                Command(
                    action=m.group(1),
                    modifier=m.group(2),
                    rule_ids=frozenset(m.group(3).split()),
                    offset=offset,
                    line=file.line_number(offset),
                )
            )
    return commands


class RuleRegions:
    """Which offsets of a file a given rule is disabled for."""

    def __init__(self, file: SourceFile, rule_id: str) -> None:
        self.rule_id = rule_id
        self._disabled: list[tuple[int, int]] = []
        self._enabled_lines: set[int] = set()
        self._file = file

        disabled_from: Optional[int] = None
        for command in parse_commands(file):
            if not command.applies_to(rule_id):
                continue
            if command.modifier is None:
                if command.action == "disable" and disabled_from is None:
                    disabled_from = command.offset
                elif command.action == "enable" and disabled_from is not None:
                    self._disabled.append((disabled_from, command.offset))
                    disabled_from = None
            elif command.action == "disable":
                span = file.line_range(command.target_line)
                if span is not None:
                    self._disabled.append(span)
            else:
                self._enabled_lines.add(command.target_line)

        if disabled_from is not None:
            self._disabled.append((disabled_from, len(file.contents)))

        if self._disabled:
            logger.debug(
                "Rule %s disabled in %d region(s) of %s",
                rule_id,
                len(self._disabled),
                file.path or "<buffer>",
            )

    def is_enabled(self, offset: int) -> bool:
        if not any(start <= offset < end for start, end in self._disabled):
            return True
        return self._file.line_number(offset) in self._enabled_lines
