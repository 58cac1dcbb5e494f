"""
Learning State Model - Per-skill performance tracking with four ordinal states.

States (lowest → highest):
    emerging → developing → proficient → mastery

Features:
    - Rolling performance record per (learner, skill)
    - Threshold-based state assignment, best state checked first
    - Prerequisite gate: no progress past "emerging" until every
      prerequisite (transitively) is at "mastery"
    - Confidence-weighted accuracy from self-ratings
"""

import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from loguru import logger

from .skill_map import SkillMap


class LearningState(str, Enum):
    """Ordinal mastery label for one skill."""
    EMERGING = "emerging"
    DEVELOPING = "developing"
    PROFICIENT = "proficient"
    MASTERY = "mastery"

    @property
    def rank(self) -> int:
        return STATE_PROGRESSION.index(self)

    def next_state(self) -> Optional["LearningState"]:
        """Next state in the progression, or None at mastery."""
        index = self.rank
        if index < len(STATE_PROGRESSION) - 1:
            return STATE_PROGRESSION[index + 1]
        return None


STATE_PROGRESSION = [
    LearningState.EMERGING,
    LearningState.DEVELOPING,
    LearningState.PROFICIENT,
    LearningState.MASTERY,
]

CONFIDENCE_LEVELS = ("low", "medium", "high")


@dataclass
class SkillAttempt:
    """One answered question, as seen by the skill it tests."""
    question_id: str
    correct: bool
    confidence: str = "medium"  # low | medium | high
    timestamp: float = 0.0  # Unix timestamp
    time_spent: float = 0.0  # Seconds


@dataclass
class SkillPerformance:
    """Performance record for one learner on one skill."""
    score: float = 0.0  # Lifetime accuracy [0, 1]
    attempts: int = 0
    correct: int = 0
    consecutive_correct: int = 0
    history: List[bool] = field(default_factory=list)  # Last 5 outcomes, oldest first
    learning_state: LearningState = LearningState.EMERGING
    mastery_date: Optional[float] = None  # First time mastery was reached
    attempt_history: List[SkillAttempt] = field(default_factory=list)
    weighted_accuracy: float = 0.0
    confidence_flags: int = 0  # High confidence + wrong

    def to_dict(self) -> dict:
        """Serialize record to dict (for Redis storage)."""
        return {
            "score": self.score,
            "attempts": self.attempts,
            "correct": self.correct,
            "consecutive_correct": self.consecutive_correct,
            "history": list(self.history),
            "learning_state": self.learning_state.value,
            "mastery_date": self.mastery_date,
            "attempt_history": [
                {
                    "question_id": a.question_id,
                    "correct": a.correct,
                    "confidence": a.confidence,
                    "timestamp": a.timestamp,
                    "time_spent": a.time_spent
                }
                for a in self.attempt_history
            ],
            "weighted_accuracy": self.weighted_accuracy,
            "confidence_flags": self.confidence_flags
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SkillPerformance":
        """Deserialize record from dict. Unknown states fall back to emerging."""
        try:
            state = LearningState(data.get("learning_state", "emerging"))
        except ValueError:
            state = LearningState.EMERGING

        return cls(
            score=data.get("score", 0.0),
            attempts=data.get("attempts", 0),
            correct=data.get("correct", 0),
            consecutive_correct=data.get("consecutive_correct", 0),
            history=list(data.get("history", [])),
            learning_state=state,
            mastery_date=data.get("mastery_date"),
            attempt_history=[
                SkillAttempt(
                    question_id=a.get("question_id", ""),
                    correct=a.get("correct", False),
                    confidence=a.get("confidence", "medium"),
                    timestamp=a.get("timestamp", 0.0),
                    time_spent=a.get("time_spent", 0.0)
                )
                for a in data.get("attempt_history", [])
            ],
            weighted_accuracy=data.get("weighted_accuracy", 0.0),
            confidence_flags=data.get("confidence_flags", 0)
        )


@dataclass
class ResponseEvent:
    """One answered question, as appended to a learner's response log."""
    question_id: str
    selected_answers: List[str]
    correct_answers: List[str]
    is_correct: bool
    confidence: str = "medium"
    time_spent: float = 0.0
    timestamp: float = 0.0
    skill_id: Optional[str] = None
    distractor_letter: Optional[str] = None
    distractor_pattern_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "question_id": self.question_id,
            "selected_answers": list(self.selected_answers),
            "correct_answers": list(self.correct_answers),
            "is_correct": self.is_correct,
            "confidence": self.confidence,
            "time_spent": self.time_spent,
            "timestamp": self.timestamp,
            "skill_id": self.skill_id,
            "distractor_letter": self.distractor_letter,
            "distractor_pattern_id": self.distractor_pattern_id
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ResponseEvent":
        return cls(
            question_id=data["question_id"],
            selected_answers=list(data.get("selected_answers", [])),
            correct_answers=list(data.get("correct_answers", [])),
            is_correct=data.get("is_correct", False),
            confidence=data.get("confidence", "medium"),
            time_spent=data.get("time_spent", 0.0),
            timestamp=data.get("timestamp", 0.0),
            skill_id=data.get("skill_id"),
            distractor_letter=data.get("distractor_letter"),
            distractor_pattern_id=data.get("distractor_pattern_id")
        )


@dataclass
class LearnerProfile:
    """In-memory learner profile handed to the pure components."""
    learner_id: str
    skill_scores: Dict[str, SkillPerformance] = field(default_factory=dict)
    weakest_domains: List[int] = field(default_factory=list)
    recent_question_ids: List[str] = field(default_factory=list)
    assessment_question_ids: List[str] = field(default_factory=list)

    def get_state(self, skill_id: str) -> LearningState:
        performance = self.skill_scores.get(skill_id)
        return performance.learning_state if performance else LearningState.EMERGING


# ==================== Confidence Weighting ====================

def calculate_confidence_weight(confidence: str, is_correct: bool) -> float:
    """
    Weight of one attempt given the learner's confidence self-rating.

    High+Correct: x1.2 (true mastery)
    High+Wrong:   x0.5 (misconception)
    Low+Correct:  x0.8 (shaky/guess)
    Everything else: x1.0
    """
    if confidence == "high":
        return 1.2 if is_correct else 0.5
    if confidence == "low" and is_correct:
        return 0.8
    return 1.0


def calculate_weighted_accuracy(attempts: List[SkillAttempt]) -> float:
    """Confidence-weighted accuracy over an attempt history."""
    if not attempts:
        return 0.0

    total_weight = 0.0
    correct_weight = 0.0
    for attempt in attempts:
        weight = calculate_confidence_weight(attempt.confidence, attempt.correct)
        total_weight += weight
        if attempt.correct:
            correct_weight += weight

    return correct_weight / total_weight if total_weight > 0 else 0.0


def count_confidence_flags(attempts: List[SkillAttempt]) -> int:
    """Count high-confidence wrong answers."""
    return sum(1 for a in attempts if a.confidence == "high" and not a.correct)


def did_state_transition(old_state: Optional[LearningState], new_state: LearningState) -> bool:
    """True on first tracking or forward progress; regressions don't count."""
    if old_state is None:
        return True
    return new_state.rank > old_state.rank


class LearningStateModel:
    """
    Rule-based skill state tracker.

    The cached state on a record is always recomputable from its own
    counters plus the states of its prerequisites.
    """

    # Window sizes
    HISTORY_WINDOW = 5
    ATTEMPT_HISTORY_LIMIT = 50
    MIN_ATTEMPTS = 3

    # Mastery thresholds
    MASTERY_ACCURACY = 0.85
    MASTERY_STREAK = 5
    MASTERY_RECENT_CORRECT = 4  # of last 5

    # Proficient thresholds
    PROFICIENT_ACCURACY = 0.75
    PROFICIENT_STREAK = 3
    PROFICIENT_WINDOW = 3
    PROFICIENT_RECENT_CORRECT = 2  # of last 3

    # Developing thresholds (any one suffices)
    DEVELOPING_ACCURACY = 0.60
    DEVELOPING_STREAK = 2

    def __init__(self, skill_map: SkillMap):
        self.skill_map = skill_map

    # ==================== Prerequisite Gate ====================

    def check_prerequisites_met(
        self,
        skill_id: str,
        lookup: Callable[[str], Optional[SkillPerformance]]
    ) -> bool:
        """
        True iff every prerequisite, transitively, is at mastery.

        A prerequisite with no performance record counts as not met.
        Skills with no catalog entry have no prerequisites.
        """
        for prereq_id in self.skill_map.get_all_prerequisites(skill_id):
            prereq = lookup(prereq_id)
            if prereq is None or prereq.learning_state != LearningState.MASTERY:
                return False
        return True

    def get_missing_prerequisites(
        self,
        skill_id: str,
        lookup: Callable[[str], Optional[SkillPerformance]]
    ) -> List[str]:
        """Direct prerequisites that are not yet at mastery."""
        missing = []
        for prereq_id in self.skill_map.get_prerequisites(skill_id):
            prereq = lookup(prereq_id)
            if prereq is None or prereq.learning_state != LearningState.MASTERY:
                missing.append(prereq_id)
        return missing

    # ==================== State Assignment ====================

    def calculate_learning_state(
        self,
        performance: SkillPerformance,
        skill_id: str,
        lookup: Callable[[str], Optional[SkillPerformance]]
    ) -> LearningState:
        """
        Assign a learning state from the record's counters.

        Checks run from mastery downward so a record meeting several
        thresholds gets the best one it has earned.
        """
        if not self.check_prerequisites_met(skill_id, lookup):
            return LearningState.EMERGING

        if performance.attempts < self.MIN_ATTEMPTS:
            return LearningState.EMERGING

        score = performance.score
        streak = performance.consecutive_correct
        history = performance.history

        last_five = history[-self.HISTORY_WINDOW:]
        if (
            score >= self.MASTERY_ACCURACY
            and streak >= self.MASTERY_STREAK
            and len(history) >= self.HISTORY_WINDOW
            and sum(1 for h in last_five if h) >= self.MASTERY_RECENT_CORRECT
        ):
            return LearningState.MASTERY

        last_three = history[-self.PROFICIENT_WINDOW:]
        if (
            score >= self.PROFICIENT_ACCURACY
            and streak >= self.PROFICIENT_STREAK
            and len(history) >= self.PROFICIENT_WINDOW
            and sum(1 for h in last_three if h) >= self.PROFICIENT_RECENT_CORRECT
        ):
            return LearningState.PROFICIENT

        if (
            score >= self.DEVELOPING_ACCURACY
            or streak >= self.DEVELOPING_STREAK
            or any(history)
        ):
            return LearningState.DEVELOPING

        return LearningState.EMERGING

    # ==================== Record Updates ====================

    def update_performance(
        self,
        performance: Optional[SkillPerformance],
        is_correct: bool,
        question_id: str = "",
        confidence: str = "medium",
        time_spent: float = 0.0,
        now: float = None
    ) -> SkillPerformance:
        """
        Apply one answered question to a record.

        Returns a new record; the input is left untouched. The cached
        learning state is carried over unchanged (see record_attempt).
        """
        base = performance or SkillPerformance()
        if confidence not in CONFIDENCE_LEVELS:
            confidence = "medium"

        attempts = base.attempts + 1
        correct = base.correct + (1 if is_correct else 0)
        history = (list(base.history) + [is_correct])[-self.HISTORY_WINDOW:]

        attempt = SkillAttempt(
            question_id=question_id,
            correct=is_correct,
            confidence=confidence,
            timestamp=now if now is not None else time.time(),
            time_spent=time_spent
        )
        attempt_history = (list(base.attempt_history) + [attempt])[-self.ATTEMPT_HISTORY_LIMIT:]

        return replace(
            base,
            attempts=attempts,
            correct=correct,
            score=correct / attempts,
            consecutive_correct=base.consecutive_correct + 1 if is_correct else 0,
            history=history,
            attempt_history=attempt_history,
            weighted_accuracy=calculate_weighted_accuracy(attempt_history),
            confidence_flags=count_confidence_flags(attempt_history)
        )

    def record_attempt(
        self,
        profile: LearnerProfile,
        skill_id: str,
        is_correct: bool,
        question_id: str = "",
        confidence: str = "medium",
        time_spent: float = 0.0,
        now: float = None
    ) -> Tuple[SkillPerformance, bool]:
        """
        Update a learner's record for a skill and recompute its state.

        Returns (updated record, whether the state moved forward).
        """
        now = now if now is not None else time.time()
        old = profile.skill_scores.get(skill_id)
        old_state = old.learning_state if old else None

        updated = self.update_performance(
            old, is_correct,
            question_id=question_id,
            confidence=confidence,
            time_spent=time_spent,
            now=now
        )

        new_state = self.calculate_learning_state(updated, skill_id, profile.skill_scores.get)
        updated.learning_state = new_state

        if new_state == LearningState.MASTERY and updated.mastery_date is None:
            updated.mastery_date = now

        profile.skill_scores[skill_id] = updated

        transitioned = did_state_transition(old_state, new_state)
        if transitioned and old_state is not None:
            logger.info(f"{profile.learner_id}: {skill_id} {old_state.value} -> {new_state.value}")

        return updated, transitioned

    def refresh_states(self, profile: LearnerProfile) -> Dict[str, LearningState]:
        """
        Recompute every cached state, prerequisites first.

        Returns the skills whose state changed, mapped to their new state.
        """
        changed = {}
        order = self.skill_map.get_all_skills()
        ordered = [s for s in order if s in profile.skill_scores]
        ordered += [s for s in profile.skill_scores if s not in ordered]

        for skill_id in ordered:
            performance = profile.skill_scores[skill_id]
            state = self.calculate_learning_state(performance, skill_id, profile.skill_scores.get)
            if state != performance.learning_state:
                performance.learning_state = state
                changed[skill_id] = state
            if state == LearningState.MASTERY and performance.mastery_date is None:
                performance.mastery_date = time.time()

        return changed
