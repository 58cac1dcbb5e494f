"""
Pytest Configuration and Fixtures.

Shared catalog fixtures built from data/, plus an in-memory Redis double
for the store and API tests.
"""

from pathlib import Path

import pytest

from core.learning_state import (
    LearnerProfile,
    LearningState,
    LearningStateModel,
    SkillPerformance,
)
from core.question_bank import QuestionBank
from core.skill_map import SkillMap
from teaching.diagnostic_feedback import DiagnosticFeedbackEngine

PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"


class FakeRedis:
    """Just enough of redis.Redis (decode_responses=True) for LearnerStore."""

    def __init__(self):
        self.hashes = {}
        self.lists = {}

    def hset(self, key, field=None, value=None, mapping=None):
        bucket = self.hashes.setdefault(key, {})
        added = 0
        items = dict(mapping or {})
        if field is not None:
            items[field] = value
        for k, v in items.items():
            if k not in bucket:
                added += 1
            bucket[k] = str(v)
        return added

    def hget(self, key, field):
        return self.hashes.get(key, {}).get(field)

    def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    def hincrby(self, key, field, amount=1):
        bucket = self.hashes.setdefault(key, {})
        bucket[field] = str(int(bucket.get(field, 0)) + amount)
        return int(bucket[field])

    def rpush(self, key, *values):
        items = self.lists.setdefault(key, [])
        items.extend(values)
        return len(items)

    def lrange(self, key, start, end):
        items = self.lists.get(key, [])
        if end == -1:
            return list(items[start:])
        return list(items[start:end + 1])

    def exists(self, *keys):
        return sum(1 for k in keys if k in self.hashes or k in self.lists)

    def delete(self, *keys):
        removed = 0
        for k in keys:
            if self.hashes.pop(k, None) is not None or self.lists.pop(k, None) is not None:
                removed += 1
        return removed


@pytest.fixture(scope="session")
def skill_map():
    return SkillMap(str(DATA_DIR / "skills"))


@pytest.fixture(scope="session")
def bank():
    return QuestionBank(str(DATA_DIR / "questions.json"))


@pytest.fixture
def model(skill_map):
    return LearningStateModel(skill_map)


@pytest.fixture
def engine(skill_map):
    return DiagnosticFeedbackEngine(skill_map)


@pytest.fixture
def profile():
    return LearnerProfile(learner_id="learner-1")


@pytest.fixture
def fake_redis():
    return FakeRedis()


def make_performance(outcomes, state=LearningState.EMERGING):
    """Build a record as if the outcomes had been answered in order."""
    correct = 0
    streak = 0
    for outcome in outcomes:
        correct += 1 if outcome else 0
        streak = streak + 1 if outcome else 0
    attempts = len(outcomes)
    return SkillPerformance(
        score=correct / attempts if attempts else 0.0,
        attempts=attempts,
        correct=correct,
        consecutive_correct=streak,
        history=list(outcomes)[-5:],
        learning_state=state
    )


def mastered():
    return make_performance([True] * 6, LearningState.MASTERY)
