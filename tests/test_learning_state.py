"""Tests for the skill performance tracker."""

import itertools

import pytest

from conftest import make_performance, mastered
from core.learning_state import (
    LearnerProfile,
    LearningState,
    SkillAttempt,
    SkillPerformance,
    calculate_confidence_weight,
    calculate_weighted_accuracy,
    count_confidence_flags,
    did_state_transition,
)


def lookup_from(records):
    return records.get


class TestLearningStateOrder:
    def test_rank_follows_progression(self):
        assert LearningState.EMERGING.rank < LearningState.DEVELOPING.rank
        assert LearningState.DEVELOPING.rank < LearningState.PROFICIENT.rank
        assert LearningState.PROFICIENT.rank < LearningState.MASTERY.rank

    def test_next_state(self):
        assert LearningState.EMERGING.next_state() == LearningState.DEVELOPING
        assert LearningState.PROFICIENT.next_state() == LearningState.MASTERY
        assert LearningState.MASTERY.next_state() is None

    def test_transition_counts_only_forward_progress(self):
        assert did_state_transition(None, LearningState.EMERGING)
        assert did_state_transition(LearningState.DEVELOPING, LearningState.PROFICIENT)
        assert not did_state_transition(LearningState.PROFICIENT, LearningState.DEVELOPING)
        assert not did_state_transition(LearningState.MASTERY, LearningState.MASTERY)


class TestStateAssignment:
    def test_fewer_than_three_attempts_is_emerging(self, model):
        perf = make_performance([True, True])
        assert model.calculate_learning_state(perf, "DBDM-S01", lookup_from({})) == LearningState.EMERGING

    def test_perfect_record_reaches_mastery(self, model):
        perf = make_performance([True] * 5)
        assert model.calculate_learning_state(perf, "DBDM-S01", lookup_from({})) == LearningState.MASTERY

    def test_proficient(self, model):
        perf = make_performance([False, True, True, True])
        assert perf.score == 0.75
        assert model.calculate_learning_state(perf, "DBDM-S01", lookup_from({})) == LearningState.PROFICIENT

    def test_best_earned_state_wins(self, model):
        # Meets proficient and developing, misses mastery on accuracy (5/6)
        perf = make_performance([False] + [True] * 5)
        assert model.calculate_learning_state(perf, "DBDM-S01", lookup_from({})) == LearningState.PROFICIENT

    def test_any_recent_correct_is_developing(self, model):
        perf = make_performance([False, False, True])
        assert perf.score < 0.6
        assert model.calculate_learning_state(perf, "DBDM-S01", lookup_from({})) == LearningState.DEVELOPING

    def test_all_wrong_is_emerging(self, model):
        perf = make_performance([False, False, False])
        assert model.calculate_learning_state(perf, "DBDM-S01", lookup_from({})) == LearningState.EMERGING

    def test_mastery_needs_five_outcomes_in_window(self, model):
        perf = make_performance([True] * 5)
        perf.history = [True] * 4
        assert model.calculate_learning_state(perf, "DBDM-S01", lookup_from({})) == LearningState.PROFICIENT

    def test_accurate_record_with_full_streak_is_mastery(self, model):
        perf = SkillPerformance(score=0.9, attempts=10, correct=9, consecutive_correct=5, history=[True] * 5)
        assert model.calculate_learning_state(perf, "DBDM-S01", lookup_from({})) == LearningState.MASTERY

    @pytest.mark.parametrize("skill_id, records", [
        ("DBDM-S01", {}),
        ("DBDM-S08", {"DBDM-S05": mastered()}),
    ])
    def test_flipping_a_miss_never_lowers_state(self, model, skill_id, records):
        lookup = lookup_from(records)
        for length in range(3, 9):
            for outcomes in itertools.product([True, False], repeat=length):
                before = model.calculate_learning_state(make_performance(outcomes), skill_id, lookup)
                for i, outcome in enumerate(outcomes):
                    if outcome:
                        continue
                    improved = outcomes[:i] + (True,) + outcomes[i + 1:]
                    after = model.calculate_learning_state(make_performance(improved), skill_id, lookup)
                    assert after.rank >= before.rank, (outcomes, improved)

    def test_does_not_mutate_record(self, model):
        perf = make_performance([True] * 5)
        model.calculate_learning_state(perf, "DBDM-S01", lookup_from({}))
        assert perf.learning_state == LearningState.EMERGING


class TestPrerequisiteGate:
    def test_unmet_prerequisite_caps_at_emerging(self, model):
        perf = make_performance([True] * 10)
        assert model.calculate_learning_state(perf, "DBDM-S08", lookup_from({})) == LearningState.EMERGING

    def test_accurate_record_with_unmet_prerequisite_is_emerging(self, model):
        perf = SkillPerformance(score=0.9, attempts=10, correct=9, consecutive_correct=5, history=[True] * 5)
        records = {"DBDM-S05": make_performance([True] * 4, LearningState.PROFICIENT)}
        assert model.calculate_learning_state(perf, "DBDM-S08", lookup_from(records)) == LearningState.EMERGING
        assert model.calculate_learning_state(perf, "DBDM-S08", lookup_from({})) == LearningState.EMERGING

    def test_prerequisite_below_mastery_is_not_met(self, model):
        records = {"DBDM-S05": make_performance([True] * 4, LearningState.PROFICIENT)}
        assert not model.check_prerequisites_met("DBDM-S08", lookup_from(records))

    def test_mastered_prerequisite_unlocks(self, model):
        records = {"DBDM-S05": mastered()}
        perf = make_performance([True] * 5)
        assert model.check_prerequisites_met("DBDM-S08", lookup_from(records))
        assert model.calculate_learning_state(perf, "DBDM-S08", lookup_from(records)) == LearningState.MASTERY

    def test_gate_is_transitive(self, model):
        # MBH-S03 <- MBH-S02 <- MBH-S01
        records = {"MBH-S02": mastered()}
        assert not model.check_prerequisites_met("MBH-S03", lookup_from(records))

        records["MBH-S01"] = mastered()
        assert model.check_prerequisites_met("MBH-S03", lookup_from(records))

    def test_skill_without_prerequisites(self, model):
        assert model.check_prerequisites_met("DBDM-S01", lookup_from({}))

    def test_unknown_skill_has_no_prerequisites(self, model):
        assert model.check_prerequisites_met("NOPE-S99", lookup_from({}))

    def test_missing_prerequisites_lists_direct_ones(self, model):
        assert model.get_missing_prerequisites("MBH-S03", lookup_from({})) == ["MBH-S02"]


class TestUpdatePerformance:
    def test_returns_new_record(self, model):
        original = make_performance([True, False])
        updated = model.update_performance(original, True, question_id="Q1", now=10.0)

        assert updated is not original
        assert original.attempts == 2
        assert original.history == [True, False]
        assert updated.attempts == 3
        assert updated.correct == 2
        assert updated.history == [True, False, True]

    def test_starts_from_empty_record(self, model):
        updated = model.update_performance(None, False, now=1.0)
        assert updated.attempts == 1
        assert updated.score == 0.0
        assert updated.consecutive_correct == 0

    def test_history_keeps_last_five(self, model):
        perf = None
        for outcome in [False, True, True, True, True, True]:
            perf = model.update_performance(perf, outcome, now=1.0)
        assert perf.history == [True] * 5
        assert perf.attempts == 6

    def test_streak_resets_on_wrong_answer(self, model):
        perf = make_performance([True, True, True])
        perf = model.update_performance(perf, False, now=1.0)
        assert perf.consecutive_correct == 0

    def test_score_is_lifetime_accuracy(self, model):
        perf = make_performance([True, False, False, True])
        perf = model.update_performance(perf, True, now=1.0)
        assert perf.score == pytest.approx(3 / 5)

    def test_unknown_confidence_treated_as_medium(self, model):
        perf = model.update_performance(None, True, confidence="very", now=1.0)
        assert perf.attempt_history[-1].confidence == "medium"

    def test_attempt_history_is_bounded(self, model):
        perf = None
        for i in range(60):
            perf = model.update_performance(perf, True, question_id=f"Q{i}", now=float(i))
        assert len(perf.attempt_history) == model.ATTEMPT_HISTORY_LIMIT
        assert perf.attempt_history[-1].question_id == "Q59"


class TestRecordAttempt:
    def test_first_attempt_counts_as_transition(self, model):
        profile = LearnerProfile(learner_id="a")
        record, transitioned = model.record_attempt(profile, "DBDM-S01", False, now=1.0)
        assert transitioned
        assert record.learning_state == LearningState.EMERGING
        assert profile.skill_scores["DBDM-S01"] is record

    def test_no_transition_when_state_unchanged(self, model):
        profile = LearnerProfile(learner_id="a")
        model.record_attempt(profile, "DBDM-S01", True, now=1.0)
        _, transitioned = model.record_attempt(profile, "DBDM-S01", True, now=2.0)
        assert not transitioned

    def test_mastery_date_set_once(self, model):
        profile = LearnerProfile(learner_id="a")
        for t in range(5):
            record, _ = model.record_attempt(profile, "DBDM-S01", True, now=100.0 + t)
        assert record.learning_state == LearningState.MASTERY
        assert record.mastery_date == 104.0

        record, _ = model.record_attempt(profile, "DBDM-S01", False, now=105.0)
        assert record.learning_state == LearningState.DEVELOPING
        assert record.mastery_date == 104.0

        for t in range(5):
            record, _ = model.record_attempt(profile, "DBDM-S01", True, now=200.0 + t)
        assert record.learning_state == LearningState.MASTERY
        assert record.mastery_date == 104.0

    def test_no_mastery_date_before_mastery(self, model):
        profile = LearnerProfile(learner_id="a")
        for t in range(3):
            record, _ = model.record_attempt(profile, "DBDM-S01", True, now=float(t))
        assert record.learning_state == LearningState.PROFICIENT
        assert record.mastery_date is None

    def test_prerequisite_gate_applies(self, model):
        profile = LearnerProfile(learner_id="a")
        for t in range(6):
            record, _ = model.record_attempt(profile, "DBDM-S10", True, now=float(t))
        assert record.learning_state == LearningState.EMERGING


class TestRefreshStates:
    def test_dependents_see_fresh_prerequisite_state(self, model):
        profile = LearnerProfile(learner_id="a")
        # Cached as mastery, but the counters only support emerging
        profile.skill_scores["DBDM-S05"] = make_performance([True, True], LearningState.MASTERY)
        profile.skill_scores["DBDM-S08"] = make_performance([True] * 5, LearningState.MASTERY)

        changed = model.refresh_states(profile)

        assert changed == {
            "DBDM-S05": LearningState.EMERGING,
            "DBDM-S08": LearningState.EMERGING,
        }

    def test_consistent_profile_is_unchanged(self, model):
        profile = LearnerProfile(learner_id="a")
        profile.skill_scores["DBDM-S01"] = make_performance([True] * 5, LearningState.MASTERY)
        assert model.refresh_states(profile) == {}


class TestConfidenceWeighting:
    def test_weights(self):
        assert calculate_confidence_weight("high", True) == 1.2
        assert calculate_confidence_weight("high", False) == 0.5
        assert calculate_confidence_weight("low", True) == 0.8
        assert calculate_confidence_weight("low", False) == 1.0
        assert calculate_confidence_weight("medium", True) == 1.0

    def test_weighted_accuracy(self):
        attempts = [
            SkillAttempt(question_id="Q1", correct=True, confidence="high"),
            SkillAttempt(question_id="Q2", correct=False, confidence="high"),
        ]
        assert calculate_weighted_accuracy(attempts) == pytest.approx(1.2 / 1.7)
        assert calculate_weighted_accuracy([]) == 0.0

    def test_confidence_flags_count_confident_mistakes(self, model):
        perf = model.update_performance(None, False, confidence="high", now=1.0)
        perf = model.update_performance(perf, False, confidence="low", now=2.0)
        perf = model.update_performance(perf, True, confidence="high", now=3.0)
        assert perf.confidence_flags == 1
        assert count_confidence_flags(perf.attempt_history) == 1


class TestSerialization:
    def test_unknown_state_falls_back_to_emerging(self):
        perf = SkillPerformance.from_dict({"attempts": 3, "learning_state": "expert"})
        assert perf.learning_state == LearningState.EMERGING
        assert perf.attempts == 3

    def test_record_survives_dict_form(self, model):
        perf = model.update_performance(None, True, question_id="Q1", confidence="high", now=5.0)
        restored = SkillPerformance.from_dict(perf.to_dict())
        assert restored == perf
