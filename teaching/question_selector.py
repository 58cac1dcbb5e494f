"""
Question Selector - Picks the next practice question for a learner.

Avoids assessment questions, the learner's recent practice window and
anything already seen this session, then leans toward weak domains
and weak skills.
"""

import random
from typing import List, Optional

from loguru import logger

from core.learning_state import LearnerProfile
from core.question_bank import Question, QuestionBank
from teaching.weakness_detector import get_weakest_skills

ALL_DOMAINS = list(range(1, 11))


class QuestionSelector:
    """Adaptive next-question picker over the bank."""

    WEAK_DOMAIN_PROBABILITY = 0.7
    RECENT_WINDOW = 30

    def __init__(self, bank: QuestionBank, rng: random.Random = None):
        self.bank = bank
        self.rng = rng or random.Random()

    def select_next(self, profile: LearnerProfile, session_history: List[str] = None) -> Optional[Question]:
        """
        Choose the next question.

        Order of preference:
            1. Weakest-skill questions within the candidate pool
            2. Weak-domain questions (70% of the time)
            3. Any unseen question
            4. Any question at all, once everything has been seen

        Returns:
            Question, or None when the bank is empty
        """
        questions = self.bank.all()
        if not questions:
            return None

        exclude = set(profile.assessment_question_ids)
        exclude.update(profile.recent_question_ids[-self.RECENT_WINDOW:])
        exclude.update(session_history or [])

        available = [q for q in questions if q.id not in exclude]
        if not available:
            logger.debug(f"{profile.learner_id}: every question seen, reusing the full bank")
            return self.rng.choice(questions)

        weakest_domains = profile.weakest_domains or ALL_DOMAINS
        if self.rng.random() < self.WEAK_DOMAIN_PROBABILITY:
            candidates = [q for q in available if any(d in weakest_domains for d in q.domains)]
        else:
            candidates = available

        if not candidates:
            return self.rng.choice(available)

        weakest_skills = get_weakest_skills(profile)
        if weakest_skills:
            skill_candidates = [q for q in candidates if q.skill_id in weakest_skills]
            if skill_candidates:
                return self.rng.choice(skill_candidates)

        return self.rng.choice(candidates)

    def remember(self, profile: LearnerProfile, question_id: str):
        """Push a question onto the rolling recent-practice window."""
        recent = [q for q in profile.recent_question_ids if q != question_id]
        recent.append(question_id)
        profile.recent_question_ids = recent[-self.RECENT_WINDOW:]
