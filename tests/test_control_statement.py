# tests/test_control_statement.py
"""
Tests for the control statement rule: paren locator, false-positive
filter, pattern scanner, violation reporting and correction.
"""

import pytest

from swiftstyle import control_statement
from swiftstyle.config import (
    CONTROL_KEYWORDS,
    CORRECTION_EXAMPLES,
    NON_TRIGGERING_EXAMPLES,
    TRIGGERING_EXAMPLES,
)
from swiftstyle.control_statement import (
    ControlStatementRule,
    STATEMENT_PATTERNS,
    apply_edits,
    is_false_positive,
    outermost_paren_indices,
)
from swiftstyle.models import CorrectionAction, Severity
from swiftstyle.source import SourceFile
from swiftstyle.syntax import StructureKind, SyntaxKind


class TestParenLocator:
    """The outermost pair is the first `(` and the `)` that closes it."""

    def test_simple_pair(self):
        assert outermost_paren_indices("if (a) {") == (3, 5)

    def test_nested_groups(self):
        text = "if ((a || b) && (c || d)) {"
        assert outermost_paren_indices(text) == (3, len(text) - 3)

    def test_no_paren(self):
        assert outermost_paren_indices("if a {") == (None, None)

    def test_unbalanced(self):
        assert outermost_paren_indices("if (a {") == (3, None)

    def test_stops_at_first_closing_group(self):
        assert outermost_paren_indices("(a) && (b)") == (0, 2)


class TestFalsePositiveFilter:
    """Kind and shape checks on the matched text."""

    def test_non_keyword_is_false_positive(self):
        assert is_false_positive("if(data) {", SyntaxKind.IDENTIFIER)

    def test_missing_kind_is_false_positive(self):
        assert is_false_positive("if (a) {", None)

    def test_single_group_is_violation(self):
        assert not is_false_positive("if (a) {", SyntaxKind.KEYWORD)

    def test_split_groups(self):
        assert is_false_positive("if (a || b) && (c || d) {", SyntaxKind.KEYWORD)

    def test_wrapped_groups(self):
        assert not is_false_positive("if ((a || b) && (c || d)) {", SyntaxKind.KEYWORD)

    def test_group_followed_by_member_call(self):
        assert is_false_positive("if (min...max).contains(value) {", SyntaxKind.KEYWORD)

    def test_tuple_comparison(self):
        assert is_false_positive("if (a, b) == (0, 1) {", SyntaxKind.KEYWORD)

    def test_three_groups(self):
        assert is_false_positive("if (a) && (b) || (c) {", SyntaxKind.KEYWORD)


class TestPatterns:
    """Per-keyword patterns."""

    def test_one_pattern_per_keyword(self):
        assert tuple(STATEMENT_PATTERNS) == CONTROL_KEYWORDS

    def test_guard_requires_else(self):
        pattern = STATEMENT_PATTERNS["guard"]
        assert pattern.search("guard (condition) else {")
        assert not pattern.search("guard (condition) {")

    def test_switch_rejects_tuple_subject(self):
        assert not STATEMENT_PATTERNS["switch"].search("switch (lhs, rhs) {")

    def test_if_accepts_commas(self):
        assert STATEMENT_PATTERNS["if"].search("if (a, b) == (0, 1) {")

    def test_clause_cannot_cross_brace(self):
        assert not STATEMENT_PATTERNS["if"].search("if (a { b) {")


class TestValidate:
    """Violations reported for the documented examples."""

    @pytest.mark.parametrize("example", NON_TRIGGERING_EXAMPLES)
    def test_non_triggering(self, rule, example):
        assert rule.validate(SourceFile(example)) == []

    @pytest.mark.parametrize("example", TRIGGERING_EXAMPLES)
    def test_triggering(self, rule, unmark, example):
        text, offsets = unmark(example)
        violations = rule.validate(SourceFile(text))
        assert [v.offset for v in violations] == offsets

    def test_default_severity_is_warning(self, rule):
        violations = rule.validate(SourceFile("if (a) {\n}\n"))
        assert violations[0].severity == Severity.WARNING

    def test_configured_severity(self, error_rule):
        violations = error_rule.validate(SourceFile("if (a) {\n}\n"))
        assert violations[0].severity == Severity.ERROR

    def test_location_is_line_and_column(self, rule):
        text = "do {\n} catch(let error as NSError) {\n}"
        (violation,) = rule.validate(SourceFile(text, path="Foo.swift"))
        assert violation.location.line == 2
        assert violation.location.column == 3
        assert violation.location.file == "Foo.swift"
        assert violation.keyword == "catch"

    def test_violation_carries_rule_identity(self, rule):
        (violation,) = rule.validate(SourceFile("while (x) {\n}\n"))
        assert violation.rule.identifier == "control_statement"
        assert violation.to_dict()["rule"] == "control_statement"

    def test_validate_does_not_mutate(self, rule):
        file = SourceFile("if (a) {\n}\n")
        rule.validate(file)
        assert file.contents == "if (a) {\n}\n"

    def test_keyword_in_comment(self, rule):
        assert rule.validate(SourceFile("// if (a) {\n")) == []

    def test_keyword_in_string(self, rule):
        assert rule.validate(SourceFile('let s = "if (a) {"\n')) == []

    def test_statement_inside_trailing_closure(self, rule):
        text = "foo(bar) {\n    if (x) {\n    }\n}\n"
        (violation,) = rule.validate(SourceFile(text))
        assert violation.location.line == 2

    def test_matches_carry_token_kind(self, rule):
        (match,) = rule.violating_matches(SourceFile("if (a) {\n}\n"))
        assert match.keyword == "if"
        assert match.syntax_kind is SyntaxKind.KEYWORD

    def test_no_matches(self, rule):
        assert rule.validate(SourceFile("")) == []
        assert rule.validate(SourceFile("let x = 1\n")) == []

    def test_multiline_condition(self, rule):
        text = "if (a &&\n    b) {\n}\n"
        assert len(rule.validate(SourceFile(text))) == 1


class TestCorrect:
    """Rewriting the buffer."""

    @pytest.mark.parametrize("example", list(CORRECTION_EXAMPLES))
    def test_corrections(self, corrected, unmark, example):
        text, _ = unmark(example)
        assert corrected(text) == CORRECTION_EXAMPLES[example]

    @pytest.mark.parametrize("keyword", ["if", "for", "switch", "while"])
    def test_every_keyword_with_blank(self, corrected, keyword):
        assert corrected(f"{keyword} (cond) {{\n}}\n") == f"{keyword} cond {{\n}}\n"

    @pytest.mark.parametrize("keyword", ["if", "for", "switch", "while"])
    def test_every_keyword_without_blank(self, corrected, keyword):
        assert corrected(f"{keyword}(cond) {{\n}}\n") == f"{keyword} cond {{\n}}\n"

    def test_guard(self, corrected):
        assert corrected("guard (condition) else {\n") == "guard condition else {\n"
        assert corrected("guard(condition) else {\n") == "guard condition else {\n"

    def test_catch(self, corrected):
        text = "do {\n} catch(let error as NSError) {\n}"
        assert corrected(text) == "do {\n} catch let error as NSError {\n}"

    def test_catch_with_blank(self, corrected):
        assert corrected("do {\n} catch (e) {\n}\n") == "do {\n} catch e {\n}\n"

    def test_brace_directly_after_paren(self, corrected):
        assert corrected("if (a){\n}\n") == "if a {\n}\n"

    @pytest.mark.parametrize("example", list(CORRECTION_EXAMPLES))
    def test_idempotent(self, rule, unmark, example):
        text, _ = unmark(example)
        file = SourceFile(text)
        rule.correct(file)
        once = file.contents
        assert rule.correct(file) == []
        assert file.contents == once
        assert rule.validate(file) == []

    def test_actions_recorded(self, rule):
        (correction,) = rule.correct(SourceFile("if(condition) {\n"))
        assert correction.open_action is CorrectionAction.REPLACED
        assert correction.close_action is CorrectionAction.REMOVED

        (correction,) = rule.correct(SourceFile("switch (foo){\n"))
        assert correction.open_action is CorrectionAction.REMOVED
        assert correction.close_action is CorrectionAction.REPLACED

    def test_offsets_ascending_and_original(self, rule):
        text = "if (a) {\n}\nwhile (b) {\n}\nswitch (c) {\n}\n"
        expected = [text.index("if"), text.index("while"), text.index("switch")]
        assert [v.offset for v in rule.validate(SourceFile(text))] == expected

        file = SourceFile(text)
        corrections = rule.correct(file)
        assert [c.offset for c in corrections] == expected
        assert file.contents == "if a {\n}\nwhile b {\n}\nswitch c {\n}\n"

    def test_counts_agree(self, rule):
        text = "if (a) {\n} else if(b) {\n}\nfor (x in y) {\n}\nif (p) && (q) {\n}\n"
        assert len(rule.validate(SourceFile(text))) == len(rule.correct(SourceFile(text))) == 3

    def test_correction_location_uses_original_buffer(self, rule):
        text = "if (a) {\n}\nif (b) {\n}\n"
        corrections = rule.correct(SourceFile(text))
        assert [(c.location.line, c.location.column) for c in corrections] == [(1, 1), (3, 1)]

    def test_unlocatable_pair_is_recorded_unchanged(self, rule, monkeypatch):
        real = control_statement.outermost_paren_indices

        def flaky(text):
            if text.startswith("while"):
                return None, None
            return real(text)

        monkeypatch.setattr(control_statement, "outermost_paren_indices", flaky)
        file = SourceFile("if (a) {\n}\nwhile (b) {\n}\n")
        corrections = rule.correct(file)

        assert [c.offset for c in corrections] == [0, 11]
        assert corrections[0].applied
        assert corrections[1].open_action is CorrectionAction.UNCHANGED
        assert corrections[1].close_action is CorrectionAction.UNCHANGED
        assert not corrections[1].applied
        assert file.contents == "if a {\n}\nwhile (b) {\n}\n"

    def test_unbalanced_clause_counts_agree(self, rule):
        text = "if ((a) {\n}\n"
        assert len(rule.validate(SourceFile(text))) == 1

        file = SourceFile(text)
        (correction,) = rule.correct(file)
        assert correction.offset == 0
        assert correction.open_action is CorrectionAction.UNCHANGED
        assert file.contents == text

    def test_unbalanced_clause_leaves_file_unwritten(self, rule, tmp_path):
        path = tmp_path / "Unbalanced.swift"
        path.write_text("if ((a) {\n}\n", encoding="utf-8")
        before = path.stat().st_mtime_ns
        assert len(rule.correct(SourceFile.from_path(path))) == 1
        assert path.stat().st_mtime_ns == before

    def test_nothing_to_correct_leaves_file_alone(self, rule, tmp_path):
        path = tmp_path / "Clean.swift"
        path.write_text("if a {\n}\n", encoding="utf-8")
        before = path.stat().st_mtime_ns
        assert rule.correct(SourceFile.from_path(path)) == []
        assert path.stat().st_mtime_ns == before

    def test_correct_persists(self, rule, tmp_path):
        path = tmp_path / "Dirty.swift"
        path.write_text("while (x) {\n}\n", encoding="utf-8")
        rule.correct(SourceFile.from_path(path))
        assert path.read_text(encoding="utf-8") == "while x {\n}\n"


class TestApplyEdits:
    """Splicing single-character edits."""

    def test_delete_and_replace(self):
        assert apply_edits("if(a) {", [(2, " "), (4, "")]) == "if a {"

    def test_edits_are_sorted(self):
        assert apply_edits("(a)", [(2, ""), (0, "")]) == "a"

    def test_no_edits(self):
        assert apply_edits("abc", []) == "abc"


class FakeSyntax:
    """A syntax service that sees keywords everywhere and a fixed structure."""

    def __init__(self, structure):
        self.structure = structure

    def kinds_in_range(self, start, end):
        return [SyntaxKind.KEYWORD]

    def kinds_for_byte_offset(self, byte_offset):
        return list(self.structure)

    def comment_tokens(self):
        return []


class TestInjectedSyntax:
    """The rule only talks to the syntax service through its query methods."""

    def test_call_structure_discards(self, rule):
        file = SourceFile("if (a) {\n", syntax=FakeSyntax([StructureKind.CALL]))
        assert rule.validate(file) == []

    def test_outer_call_does_not_discard(self, rule):
        structure = [StructureKind.CALL, StructureKind.STATEMENT]
        file = SourceFile("if (a) {\n", syntax=FakeSyntax(structure))
        assert len(rule.validate(file)) == 1

    def test_empty_structure_keeps_match(self, rule):
        file = SourceFile("if (a) {\n", syntax=FakeSyntax([]))
        assert len(rule.validate(file)) == 1

    def test_classification_is_trusted(self, rule):
        # The fake calls every token a keyword, so `renderGif(data) {` now counts
        file = SourceFile("renderGif(data) {\n", syntax=FakeSyntax([]))
        assert len(rule.validate(file)) == 1


def test_rule_description():
    assert ControlStatementRule.description.name == "Control Statement"
    assert ControlStatementRule.description.kind == "style"
