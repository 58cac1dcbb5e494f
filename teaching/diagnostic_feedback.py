"""
Diagnostic Feedback - Framework-guided explanation of an answer.

Instead of "Wrong, the answer is B", the learner hears which reasoning
error their choice reflects, where it sits in the practice framework the
question tests, and what to work on next, tuned to their current state
on the skill.

Feedback is composed fresh for every answer and never stored.
"""

from dataclasses import asdict, dataclass, field
from typing import List, Optional

from core.distractor_matcher import match_distractor_pattern
from core.error_library import get_error_explanation
from core.framework_steps import detect_user_selected_step, get_step, infer_framework_step
from core.learning_state import LearnerProfile, LearningState, LearningStateModel
from core.question_bank import Question
from core.skill_map import SkillMap

FALLBACK_EXPLANATION = "This answer is incorrect. Review the rationale to understand the correct approach."

ENCOURAGEMENT = {
    LearningState.MASTERY: "Excellent! You've mastered this skill. Continue applying it consistently.",
    LearningState.PROFICIENT: "Great work! You're demonstrating strong understanding of this concept.",
    LearningState.DEVELOPING: "Good progress! You're developing your understanding. Keep practicing.",
}
DEFAULT_ENCOURAGEMENT = "Correct! You're building foundational knowledge. Keep learning."

BASIC_STATES = (LearningState.EMERGING, LearningState.DEVELOPING)


@dataclass
class FrameworkGuidance:
    """Where the question sits in its framework and how the error relates."""
    current_step_id: Optional[str]
    current_step_name: Optional[str]
    relationship: str
    next_steps: List[str] = field(default_factory=list)
    user_selected_step: Optional[str] = None


@dataclass
class SkillGuidance:
    """State-aware advice for the skill a question tests."""
    skill_id: str
    current_state: LearningState
    remediation_tips: List[str] = field(default_factory=list)
    prerequisites_met: bool = True
    missing_prerequisites: List[str] = field(default_factory=list)  # Skill names


@dataclass
class DiagnosticFeedback:
    is_correct: bool
    pattern_id: Optional[str]
    general_explanation: str
    selected_answer_text: str
    framework_guidance: Optional[FrameworkGuidance] = None
    skill_guidance: Optional[SkillGuidance] = None
    remediation_tips: List[str] = field(default_factory=list)
    mastery_status: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        if self.skill_guidance is not None:
            data["skill_guidance"]["current_state"] = self.skill_guidance.current_state.value
        return data


class DiagnosticFeedbackEngine:
    """
    Builds feedback for one answered question.

    Pure: reads the learner profile, never modifies it.
    """

    def __init__(self, skill_map: SkillMap, state_model: LearningStateModel = None):
        self.skill_map = skill_map
        self.state_model = state_model or LearningStateModel(skill_map)

    # ==================== Skill Guidance ====================

    def get_skill_guidance(self, skill_id: str, profile: LearnerProfile) -> Optional[SkillGuidance]:
        """Tips and prerequisite status for a catalog skill; None if unknown."""
        skill = self.skill_map.get_skill(skill_id)
        if skill is None:
            return None

        current_state = profile.get_state(skill_id)
        lookup = profile.skill_scores.get

        prerequisites_met = self.state_model.check_prerequisites_met(skill_id, lookup)
        missing = []
        if not prerequisites_met:
            for prereq_id in self.state_model.get_missing_prerequisites(skill_id, lookup):
                prereq = self.skill_map.get_skill(prereq_id)
                if prereq:
                    missing.append(prereq.name)

        wrong_rules = skill.common_wrong_rules
        tips = []
        if current_state in BASIC_STATES:
            # One simple tip
            if wrong_rules:
                tips.append(f"Remember: {wrong_rules[0]}")
            else:
                tips.append(f"Focus on understanding the core concept: {skill.description}")
        else:
            # Two advanced tips
            if len(wrong_rules) >= 2:
                tips.append(f"Advanced tip 1: {wrong_rules[0]}")
                tips.append(f"Advanced tip 2: {wrong_rules[1]}")
            elif len(wrong_rules) == 1:
                tips.append(f"Advanced tip: {wrong_rules[0]}")
                tips.append("Apply this skill in varied contexts to deepen understanding")
            else:
                tips.append("You're doing well! Continue applying this skill consistently")
                tips.append("Consider exploring advanced applications of this concept")

        return SkillGuidance(
            skill_id=skill_id,
            current_state=current_state,
            remediation_tips=tips,
            prerequisites_met=prerequisites_met,
            missing_prerequisites=missing
        )

    # ==================== Feedback ====================

    def generate(
        self,
        question: Question,
        selected: List[str],
        is_correct: bool,
        profile: LearnerProfile
    ) -> DiagnosticFeedback:
        """
        Compose feedback for an answer.

        Args:
            question: The question that was answered
            selected: Selected choice letters, e.g. ["A"]
            is_correct: Whether the selection was correct
            profile: Learner profile with current skill records

        Returns:
            DiagnosticFeedback (pattern_id is always None for correct answers)
        """
        selected_text = question.text_for(selected)
        skill_guidance = (
            self.get_skill_guidance(question.skill_id, profile) if question.skill_id else None
        )

        if is_correct:
            return self._correct_feedback(selected_text, skill_guidance)

        wrong_letter = next((l for l in selected if l not in question.correct_answer), None)
        if wrong_letter is None:
            return DiagnosticFeedback(
                is_correct=False,
                pattern_id=None,
                general_explanation="Your answer was incorrect. Review the rationale to understand the correct approach.",
                selected_answer_text=selected_text,
                skill_guidance=skill_guidance,
                remediation_tips=[
                    "Review the question and rationale carefully",
                    "Consider the framework steps involved"
                ]
            )

        distractor_text = question.choices.get(wrong_letter, "")
        pattern_id = match_distractor_pattern(distractor_text, question.correct_text)
        entry = get_error_explanation(pattern_id)

        step_id = infer_framework_step(question, self.skill_map)
        step = get_step(step_id) if step_id else None

        framework_guidance = None
        if entry is not None and step is not None:
            next_steps = []
            if skill_guidance and not skill_guidance.prerequisites_met and skill_guidance.missing_prerequisites:
                next_steps.append(f"Review foundational skills: {', '.join(skill_guidance.missing_prerequisites)}")

            prereq_names = [get_step(s).name for s in step.prerequisite_steps if get_step(s)]
            if prereq_names:
                next_steps.append(f"Ensure you've completed: {' → '.join(prereq_names)}")
            next_steps.extend(entry.remediation_tips[:2])

            framework_guidance = FrameworkGuidance(
                current_step_id=step_id,
                current_step_name=step.name,
                relationship=entry.framework_step_guidance.get(step_id, entry.general_explanation),
                next_steps=next_steps,
                user_selected_step=detect_user_selected_step(distractor_text, pattern_id)
            )
        elif entry is not None:
            framework_guidance = FrameworkGuidance(
                current_step_id=None,
                current_step_name=None,
                relationship=entry.general_explanation,
                next_steps=entry.remediation_tips[:2]
            )

        tips = []
        if entry is not None:
            if skill_guidance is None:
                tips.extend(entry.remediation_tips[:1])
            elif skill_guidance.current_state in BASIC_STATES:
                tips.extend(entry.remediation_tips[:1])
            else:
                tips.extend(entry.remediation_tips[:2])
        if skill_guidance:
            tips.extend(skill_guidance.remediation_tips)
        if not tips:
            tips = [
                "Review the question and rationale carefully",
                "Consider what framework steps apply to this situation"
            ]

        return DiagnosticFeedback(
            is_correct=False,
            pattern_id=pattern_id,
            general_explanation=entry.general_explanation if entry else FALLBACK_EXPLANATION,
            selected_answer_text=selected_text,
            framework_guidance=framework_guidance,
            skill_guidance=skill_guidance,
            remediation_tips=tips
        )

    def _correct_feedback(self, selected_text: str, skill_guidance: Optional[SkillGuidance]) -> DiagnosticFeedback:
        if skill_guidance:
            message = ENCOURAGEMENT.get(skill_guidance.current_state, DEFAULT_ENCOURAGEMENT)
            status = f"Current mastery: {skill_guidance.current_state.value}"
        else:
            message = DEFAULT_ENCOURAGEMENT
            status = "Keep practicing to build mastery"

        return DiagnosticFeedback(
            is_correct=True,
            pattern_id=None,
            general_explanation=message,
            selected_answer_text=selected_text,
            skill_guidance=skill_guidance,
            remediation_tips=list(skill_guidance.remediation_tips) if skill_guidance else [],
            mastery_status=status
        )


def format_feedback_for_display(feedback: DiagnosticFeedback) -> str:
    """Format feedback as readable text."""
    output = []

    output.append("=" * 60)
    output.append("✅ CORRECT" if feedback.is_correct else "❌ INCORRECT")
    output.append("=" * 60)

    if feedback.selected_answer_text:
        output.append(f"You chose: {feedback.selected_answer_text}")
    if feedback.pattern_id:
        output.append(f"Error pattern: {feedback.pattern_id}")
    output.append("")
    output.append(feedback.general_explanation)

    guidance = feedback.framework_guidance
    if guidance:
        output.append("")
        output.append("🧭 FRAMEWORK")
        output.append("-" * 40)
        if guidance.current_step_name:
            output.append(f"Step: {guidance.current_step_name}")
        output.append(guidance.relationship)
        for step in guidance.next_steps:
            output.append(f"  → {step}")

    if feedback.remediation_tips:
        output.append("")
        output.append("💡 TIPS")
        output.append("-" * 40)
        for tip in feedback.remediation_tips:
            output.append(f"• {tip}")

    if feedback.mastery_status:
        output.append("")
        output.append(feedback.mastery_status)

    output.append("=" * 60)
    return "\n".join(output)
