"""
Redis Store - Learner progress persistence.

Key Structure:
    learner:{learner_id}:skills    -> Hash (skill_id -> JSON SkillPerformance)
    learner:{learner_id}:responses -> List (JSON of each response event)
    learner:{learner_id}:state     -> Hash (weakest_domains, recent/assessment question ids, counters)

Only the API and CLI talk to the store; the rule components work on
in-memory LearnerProfile objects.
"""

import json
import redis
from typing import List, Optional

from loguru import logger

from config import REDIS_HOST, REDIS_PASSWORD, REDIS_PORT
from core.learning_state import LearnerProfile, ResponseEvent, SkillPerformance


class LearnerStore:
    def __init__(self, client: redis.Redis = None):
        """Connect to Redis using configured settings (no I/O until first command)."""
        self.client = client or redis.Redis(
            host=REDIS_HOST,
            port=REDIS_PORT,
            password=REDIS_PASSWORD,
            decode_responses=True  # Return strings instead of bytes
        )

    # ==================== Key Builders ====================

    def _skills_key(self, learner_id: str) -> str:
        return f"learner:{learner_id}:skills"

    def _responses_key(self, learner_id: str) -> str:
        return f"learner:{learner_id}:responses"

    def _state_key(self, learner_id: str) -> str:
        return f"learner:{learner_id}:state"

    # ==================== Learner Management ====================

    def learner_exists(self, learner_id: str) -> bool:
        return bool(self.client.exists(self._state_key(learner_id)))

    def load_profile(self, learner_id: str) -> LearnerProfile:
        """
        Build a LearnerProfile from stored records.

        Unknown learners get an empty profile.
        """
        skills_raw = self.client.hgetall(self._skills_key(learner_id))
        state = self.client.hgetall(self._state_key(learner_id))

        return LearnerProfile(
            learner_id=learner_id,
            skill_scores={
                skill_id: SkillPerformance.from_dict(json.loads(raw))
                for skill_id, raw in skills_raw.items()
            },
            weakest_domains=json.loads(state.get("weakest_domains", "[]")),
            recent_question_ids=json.loads(state.get("recent_question_ids", "[]")),
            assessment_question_ids=json.loads(state.get("assessment_question_ids", "[]"))
        )

    def save_profile(self, profile: LearnerProfile):
        """Write every skill record plus the profile state hash."""
        if profile.skill_scores:
            self.client.hset(
                self._skills_key(profile.learner_id),
                mapping={sid: json.dumps(p.to_dict()) for sid, p in profile.skill_scores.items()}
            )
        self.client.hset(
            self._state_key(profile.learner_id),
            mapping={
                "weakest_domains": json.dumps(profile.weakest_domains),
                "recent_question_ids": json.dumps(profile.recent_question_ids),
                "assessment_question_ids": json.dumps(profile.assessment_question_ids)
            }
        )
        logger.debug(f"Saved profile {profile.learner_id} ({len(profile.skill_scores)} skills)")

    def delete_learner(self, learner_id: str):
        """Delete all data for a learner."""
        self.client.delete(
            self._skills_key(learner_id),
            self._responses_key(learner_id),
            self._state_key(learner_id)
        )
        logger.info(f"Deleted learner {learner_id}")

    # ==================== Skill Records ====================

    def get_skill_performance(self, learner_id: str, skill_id: str) -> Optional[SkillPerformance]:
        raw = self.client.hget(self._skills_key(learner_id), skill_id)
        return SkillPerformance.from_dict(json.loads(raw)) if raw else None

    # ==================== Response Log ====================

    def record_response(self, learner_id: str, event: ResponseEvent) -> int:
        """
        Append a response event and bump the answered counter.

        Returns:
            Total questions answered by this learner
        """
        self.client.rpush(self._responses_key(learner_id), json.dumps(event.to_dict()))
        return self.client.hincrby(self._state_key(learner_id), "questions_answered", 1)

    def get_responses(self, learner_id: str) -> List[ResponseEvent]:
        raw = self.client.lrange(self._responses_key(learner_id), 0, -1)
        return [ResponseEvent.from_dict(json.loads(r)) for r in raw]

    def get_questions_answered(self, learner_id: str) -> int:
        return int(self.client.hget(self._state_key(learner_id), "questions_answered") or 0)

