"""
Teaching module - Feedback, weakness analysis, and question selection.

Components:
    - diagnostic_feedback: Framework-guided feedback for each answer
    - weakness_detector: Domain and skill weakness analysis
    - question_selector: Adaptive next-question selection
    - assessment_builder: Domain-balanced pre and full assessments
"""

from .diagnostic_feedback import (
    DiagnosticFeedback,
    DiagnosticFeedbackEngine,
    FrameworkGuidance,
    SkillGuidance,
    format_feedback_for_display,
)
from .weakness_detector import detect_weaknesses, get_weakest_skills, summarize_progress
from .question_selector import QuestionSelector
from .assessment_builder import (
    build_assessment,
    build_full_assessment,
    build_pre_assessment,
    calculate_domain_distribution,
)

__all__ = [
    "DiagnosticFeedback",
    "DiagnosticFeedbackEngine",
    "FrameworkGuidance",
    "SkillGuidance",
    "format_feedback_for_display",
    "detect_weaknesses",
    "get_weakest_skills",
    "summarize_progress",
    "QuestionSelector",
    "build_assessment",
    "build_full_assessment",
    "build_pre_assessment",
    "calculate_domain_distribution",
]
