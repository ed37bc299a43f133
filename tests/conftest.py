"""Shared fixtures for swiftstyle tests."""

import pytest

from swiftstyle.config import SeverityConfiguration, VIOLATION_MARKER
from swiftstyle.control_statement import ControlStatementRule
from swiftstyle.models import Severity
from swiftstyle.source import SourceFile


@pytest.fixture
def rule():
    return ControlStatementRule()


@pytest.fixture
def error_rule():
    return ControlStatementRule(SeverityConfiguration(Severity.ERROR))


@pytest.fixture
def make_file():
    """Build an in-memory SourceFile."""

    def _make(text, **kwargs):
        return SourceFile(text, **kwargs)

    return _make


@pytest.fixture
def unmark():
    """Split an example into (text, marker offsets)."""

    def _unmark(example):
        offsets = []
        pieces = example.split(VIOLATION_MARKER)
        position = 0
        for piece in pieces[:-1]:
            position += len(piece)
            offsets.append(position)
        return "".join(pieces), offsets

    return _unmark


@pytest.fixture
def corrected(rule):
    """Run the rule's correction on text and return the rewritten text."""

    def _corrected(text):
        file = SourceFile(text)
        rule.correct(file)
        return file.contents

    return _corrected
