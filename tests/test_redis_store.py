"""Tests for redis_store.py"""

import pytest

from conftest import make_performance
from core.learning_state import LearnerProfile, LearningState, ResponseEvent
from redis_store import LearnerStore


@pytest.fixture
def store(fake_redis):
    return LearnerStore(client=fake_redis)


def test_learner_lifecycle(store, model):
    learner_id = "test_learner_123"

    # 1. Unknown learner loads as an empty profile
    assert not store.learner_exists(learner_id)
    profile = store.load_profile(learner_id)
    assert profile.skill_scores == {}
    assert profile.weakest_domains == []

    # 2. Save a profile with one skill record
    model.record_attempt(profile, "DBDM-S01", True, question_id="SP5403_Q001", confidence="high", now=1.0)
    profile.weakest_domains = [4, 1]
    profile.recent_question_ids = ["SP5403_Q001"]
    store.save_profile(profile)
    assert store.learner_exists(learner_id)

    # 3. Reload
    loaded = store.load_profile(learner_id)
    assert loaded.skill_scores == profile.skill_scores
    assert loaded.weakest_domains == [4, 1]
    assert loaded.recent_question_ids == ["SP5403_Q001"]

    # 4. Delete
    store.delete_learner(learner_id)
    assert not store.learner_exists(learner_id)
    assert store.load_profile(learner_id).skill_scores == {}


def test_empty_profile_still_registers_learner(store):
    store.save_profile(LearnerProfile(learner_id="fresh"))
    assert store.learner_exists("fresh")


def test_skill_performance_lookup(store):
    perf = make_performance([True, True, True], LearningState.PROFICIENT)
    store.save_profile(LearnerProfile(learner_id="a", skill_scores={"MBH-S01": perf}))

    assert store.get_skill_performance("a", "MBH-S01") == perf
    assert store.get_skill_performance("a", "MBH-S02") is None


def test_response_log(store):
    event = ResponseEvent(
        question_id="SP5403_Q040",
        selected_answers=["A"],
        correct_answers=["B"],
        is_correct=False,
        confidence="high",
        skill_id="DBDM-S10",
        distractor_letter="A",
        distractor_pattern_id="premature-action"
    )

    assert store.record_response("a", event) == 1
    assert store.record_response("a", event) == 2
    assert store.get_questions_answered("a") == 2

    responses = store.get_responses("a")
    assert len(responses) == 2
    assert responses[0] == event


def test_unknown_learner_has_answered_nothing(store):
    assert store.get_questions_answered("nobody") == 0
    assert store.get_skill_performance("nobody", "MBH-S01") is None
