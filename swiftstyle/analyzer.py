"""Core lint logic — run the control statement rule over sources and paths."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import replace
from pathlib import Path
from typing import Mapping, Optional, Union

from swiftstyle.config import SOURCE_EXTENSIONS, SeverityConfiguration
from swiftstyle.control_statement import ControlStatementRule
from swiftstyle.models import LintReport
from swiftstyle.source import SourceFile

logger = logging.getLogger(__name__)

SeverityOption = Union[str, Mapping, SeverityConfiguration, None]


def _make_rule(severity: SeverityOption = None) -> ControlStatementRule:
    if isinstance(severity, SeverityConfiguration):
        return ControlStatementRule(severity)
    return ControlStatementRule(SeverityConfiguration.from_value(severity))


def is_source_file(path: Union[str, Path]) -> bool:
    """Check if a path looks like a Swift source file."""
    return str(path).lower().endswith(SOURCE_EXTENSIONS)


def iter_source_paths(paths: Iterable[Union[str, Path]]) -> Iterator[Path]:
    """Expand directories into their source files; skip everything else."""
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            for child in sorted(path.rglob("*")):
                if child.is_file() and is_source_file(child):
                    yield child
        elif is_source_file(path):
            yield path
        else:
            logger.debug("Skipping non-source path %s", path)


# ── Sources ──────────────────────────────────────────────────────────────────


def lint_source(
    source: str,
    path: Optional[str] = None,
    severity: SeverityOption = None,
) -> LintReport:
    """Lint an in-memory buffer. Never modifies anything."""
    rule = _make_rule(severity)
    file = SourceFile(source, path=path)
    return LintReport(violations=rule.validate(file), files_checked=1)


def correct_source(source: str, path: Optional[str] = None) -> LintReport:
    """Correct an in-memory buffer and return the rewritten text in the report.

    ``path`` only labels locations; nothing is written to disk.
    """
    rule = _make_rule()
    file = SourceFile(source)
    corrections = rule.correct(file)
    if path is not None:
        for correction in corrections:
            correction.location = replace(correction.location, file=path)
    return LintReport(
        corrections=corrections,
        files_checked=1,
        corrected_source=file.contents,
    )


# ── Paths ────────────────────────────────────────────────────────────────────


def lint_paths(
    paths: Iterable[Union[str, Path]],
    severity: SeverityOption = None,
) -> LintReport:
    """Lint files and directories. Unreadable files are recorded, not raised."""
    rule = _make_rule(severity)
    report = LintReport()

    for path in iter_source_paths(paths):
        try:
            file = SourceFile.from_path(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Could not read %s: %s", path, e)
            report.errors[str(path)] = str(e)
            continue
        report.violations.extend(rule.validate(file))
        report.files_checked += 1

    logger.info(
        "Linted %d file(s): %d violation(s)",
        report.files_checked,
        len(report.violations),
    )
    return report


def correct_paths(paths: Iterable[Union[str, Path]]) -> LintReport:
    """Correct files and directories in place."""
    rule = _make_rule()
    report = LintReport()

    for path in iter_source_paths(paths):
        try:
            file = SourceFile.from_path(path)
            report.corrections.extend(rule.correct(file))
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Could not correct %s: %s", path, e)
            report.errors[str(path)] = str(e)
            continue
        report.files_checked += 1

    logger.info(
        "Corrected %d file(s): %d correction(s)",
        report.files_checked,
        len(report.corrections),
    )
    return report
