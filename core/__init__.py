"""
Core module - Skill catalog, learning states, and misconception rules.

Components:
    - skill_map: Skill catalog with prerequisite DAG
    - learning_state: Per-skill performance records and the four-state tracker
    - distractor_patterns: Misconception pattern catalog
    - distractor_matcher: Wrong answer -> pattern rules
    - error_library: Pattern explanations linked to framework steps
    - framework_steps: Practice frameworks and step inference
    - question_bank: Question catalog and structural analysis
    - question_tagger: DOK / framework tag suggestions
"""

from .skill_map import SkillMap, Skill, Domain
from .learning_state import (
    LearningState,
    LearningStateModel,
    LearnerProfile,
    ResponseEvent,
    SkillAttempt,
    SkillPerformance,
)
from .distractor_patterns import DistractorPattern, DISTRACTOR_PATTERNS
from .distractor_matcher import match_distractor_pattern, get_best_distractor_pattern
from .error_library import ErrorExplanation, get_error_explanation
from .framework_steps import FrameworkStep, infer_framework_step
from .question_bank import Question, QuestionBank, analyze_question
from .question_tagger import TaggingSuggestion, suggest_tags, validate_tags

__all__ = [
    "SkillMap",
    "Skill",
    "Domain",
    "LearningState",
    "LearningStateModel",
    "LearnerProfile",
    "ResponseEvent",
    "SkillAttempt",
    "SkillPerformance",
    "DistractorPattern",
    "DISTRACTOR_PATTERNS",
    "match_distractor_pattern",
    "get_best_distractor_pattern",
    "ErrorExplanation",
    "get_error_explanation",
    "FrameworkStep",
    "infer_framework_step",
    "Question",
    "QuestionBank",
    "analyze_question",
    "TaggingSuggestion",
    "suggest_tags",
    "validate_tags",
]
