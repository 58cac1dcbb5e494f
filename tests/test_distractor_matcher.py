"""Tests for the distractor pattern library and matcher."""

import pytest

from core.distractor_matcher import (
    MATCH_RULES,
    get_best_distractor_pattern,
    get_distractor_pattern_matches,
    match_distractor_pattern,
)
from core.distractor_patterns import (
    DISTRACTOR_PATTERNS,
    get_pattern,
    get_patterns_for_skill_type,
)


class TestPatternLibrary:
    def test_ids_match_keys(self):
        for pattern_id, pattern in DISTRACTOR_PATTERNS.items():
            assert pattern.pattern_id == pattern_id
            assert pattern.feedback_explanation

    def test_every_rule_has_a_pattern(self):
        for pattern_id, _ in MATCH_RULES:
            assert pattern_id in DISTRACTOR_PATTERNS

    def test_lookup(self):
        assert get_pattern("premature-action").name == "Premature Action"
        assert get_pattern("not-a-pattern") is None

    def test_filter_by_skill_type(self):
        ids = [p.pattern_id for p in get_patterns_for_skill_type("first-step")]
        assert "premature-action" in ids
        assert "role-confusion" in ids


class TestMatchDistractorPattern:
    @pytest.mark.parametrize("text,correct,expected", [
        ("Implement the intervention immediately", None, "premature-action"),
        ("Implement a behavior contract immediately", None, "premature-action"),
        ("Refer the student for special education evaluation right away", None, "premature-action"),
        ("Immediately take over teaching", None, "premature-action"),
        ("Take over teaching the reading group for the rest of the year", None, "role-confusion"),
        ("Begin the intervention before collecting assessment data", None, "sequence-error"),
        ("Use the screening results to determine eligibility for special education", None, "context-mismatch"),
        ("Use CBM probes for a comprehensive evaluation", None, "context-mismatch"),
        ("Use test-retest reliability for single-subject designs", None, "similar-concept"),
        ("FAPE means the optimal education possible", None, "definition-error"),
        ("Decide on placement based on teacher opinion", None, "data-ignorance"),
        ("To determine eligibility for special education", None, "data-ignorance"),
        ("Always use this approach for all students", None, "extreme-language"),
        ("Students must always be removed from class", None, "extreme-language"),
        ("All students must receive the same intervention", None, "extreme-language"),
        ("Observe the student in class", "Observe the student and interview the teacher", "incomplete-response"),
    ])
    def test_rules(self, text, correct, expected):
        assert match_distractor_pattern(text, correct) == expected

    def test_no_match(self):
        assert match_distractor_pattern("Test-retest reliability", "Interobserver agreement") is None

    def test_case_insensitive(self):
        assert match_distractor_pattern("IMPLEMENT A BEHAVIOR CONTRACT") == "premature-action"

    def test_empty_text(self):
        assert match_distractor_pattern("") is None
        assert match_distractor_pattern(None) is None

    def test_assessment_words_block_premature_action(self):
        assert match_distractor_pattern("Begin by reviewing the data") != "premature-action"

    def test_incomplete_response_needs_correct_answer(self):
        assert match_distractor_pattern("Observe the student in class") is None

    def test_hedged_absolute_is_not_extreme(self):
        assert match_distractor_pattern("Students may sometimes need all supports") != "extreme-language"

    def test_bank_distractors(self, bank):
        question = bank.get("SP5403_Q041")
        results = {
            letter: match_distractor_pattern(question.choices[letter], question.correct_text)
            for letter in ("A", "C", "D")
        }
        assert results == {
            "A": "data-ignorance",
            "C": "extreme-language",
            "D": "incomplete-response",
        }


class TestPatternMatches:
    def test_winner_gets_rule_weight(self):
        matches = get_distractor_pattern_matches("Immediately take over teaching")
        assert matches[0] == ("premature-action", 0.7)

    def test_sorted_descending(self):
        matches = get_distractor_pattern_matches("Implement the intervention without proper assessment first")
        confidences = [c for _, c in matches]
        assert confidences == sorted(confidences, reverse=True)

    def test_no_signal(self):
        assert get_distractor_pattern_matches("xyz") == []
        assert get_best_distractor_pattern("xyz") is None

    def test_best_pattern_respects_threshold(self):
        assert get_best_distractor_pattern("Immediately take over teaching") == "premature-action"
        assert get_best_distractor_pattern("Immediately take over teaching", min_confidence=0.8) is None
