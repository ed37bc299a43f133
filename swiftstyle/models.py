"""Data models for the control statement rule."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from swiftstyle.syntax import SyntaxKind


class Severity(str, Enum):
    """Severity levels a rule can be configured with."""

    WARNING = "warning"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class CorrectionAction(str, Enum):
    """What happened to one parenthesis of a corrected pair."""

    REMOVED = "removed"  # paren deleted, neighbouring blank kept
    REPLACED = "replaced"  # paren replaced by a single blank
    UNCHANGED = "unchanged"  # paren pair could not be located

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RuleDescription:
    """Static metadata describing a rule."""

    identifier: str
    name: str
    description: str
    kind: str = "style"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Location:
    """A 1-based line/column position, optionally tied to a file."""

    file: Optional[str]
    line: int
    column: int

    def __str__(self) -> str:
        prefix = f"{self.file}:" if self.file else ""
        return f"{prefix}{self.line}:{self.column}"

    def to_dict(self) -> dict:
        d = asdict(self)
        return {k: v for k, v in d.items() if v is not None}


@dataclass(frozen=True)
class Match:
    """A raw textual match of a control statement pattern."""

    keyword: str
    start: int
    length: int
    syntax_kind: Optional[SyntaxKind] = None

    @property
    def end(self) -> int:
        return self.start + self.length


@dataclass
class StyleViolation:
    """A single rule violation found in a source file."""

    rule: RuleDescription
    severity: Severity
    location: Location
    offset: int
    keyword: Optional[str] = None

    @property
    def reason(self) -> str:
        return self.rule.description

    def to_dict(self) -> dict:
        d = {
            "rule": self.rule.identifier,
            "severity": str(self.severity),
            "location": self.location.to_dict(),
            "offset": self.offset,
            "keyword": self.keyword,
            "reason": self.reason,
        }
        return {k: v for k, v in d.items() if v is not None}


@dataclass
class Correction:
    """A text edit applied to resolve one violation."""

    rule: RuleDescription
    location: Location
    offset: int
    open_action: CorrectionAction
    close_action: CorrectionAction

    @property
    def applied(self) -> bool:
        return self.open_action is not CorrectionAction.UNCHANGED

    def to_dict(self) -> dict:
        return {
            "rule": self.rule.identifier,
            "location": self.location.to_dict(),
            "offset": self.offset,
            "open_paren": str(self.open_action),
            "close_paren": str(self.close_action),
        }


@dataclass
class LintReport:
    """Result of linting or correcting one or more sources."""

    violations: list[StyleViolation] = field(default_factory=list)
    corrections: list[Correction] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)  # path -> message
    files_checked: int = 0
    corrected_source: Optional[str] = None
    generated_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @property
    def error_count(self) -> int:
        return sum(1 for v in self.violations if v.severity == Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for v in self.violations if v.severity == Severity.WARNING)

    @property
    def verdict(self) -> str:
        if self.errors:
            return "INCOMPLETE — some files could not be processed"
        applied = sum(1 for c in self.corrections if c.applied)
        if applied:
            return f"CORRECTED — {applied} control statement(s) rewritten"
        if self.corrections:
            return f"UNCHANGED — {len(self.corrections)} control statement(s) left as they were"
        if self.error_count > 0:
            return "FAILED — serious violations found"
        if self.warning_count > 0:
            return "PASSED WITH WARNINGS"
        return "PASSED — no violations found"

    def to_dict(self) -> dict:
        d = {
            "verdict": self.verdict,
            "stats": {
                "files": self.files_checked,
                "errors": self.error_count,
                "warnings": self.warning_count,
                "corrections": len(self.corrections),
                "total": len(self.violations),
            },
            "violations": [v.to_dict() for v in self.violations],
            "corrections": [c.to_dict() for c in self.corrections],
            "generated_at": self.generated_at,
        }
        if self.errors:
            d["errors"] = dict(self.errors)
        if self.corrected_source is not None:
            d["corrected_source"] = self.corrected_source
        return d

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
