"""
Framework Steps - The four practice frameworks a question can test.

    problem-solving: identify → collect → analyze → intervene → monitor → evaluate
    fba:             behavior → ABC data → ABC analysis → function → BIP
    consultation:    consultee → problem → goals → plan → evaluate
    eligibility:     referral → assessments → data → analysis → determination

Recognition steps (order 0) sit outside the sequence.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

FRAMEWORK_TYPES = ("problem-solving", "fba", "consultation", "eligibility")


@dataclass
class FrameworkStep:
    step_id: str
    name: str
    description: str
    order: int
    framework_type: str
    common_errors: List[str] = field(default_factory=list)  # Pattern ids
    prerequisite_steps: List[str] = field(default_factory=list)


def _step(step_id, name, description, order, framework_type, common_errors, prerequisite_steps=None):
    return FrameworkStep(
        step_id=step_id,
        name=name,
        description=description,
        order=order,
        framework_type=framework_type,
        common_errors=common_errors,
        prerequisite_steps=prerequisite_steps or []
    )


FRAMEWORK_STEPS: Dict[str, FrameworkStep] = {s.step_id: s for s in [
    # ===== Problem-solving =====
    _step("problem-identification", "Problem Identification",
          "Identify and define the specific problem, reviewing referral data and clarifying the concern.",
          1, "problem-solving", ["premature-action", "data-ignorance", "incomplete-response"]),
    _step("data-collection", "Data Collection",
          "Gather records, observations and baseline data with appropriate tools.",
          2, "problem-solving", ["premature-action", "data-ignorance", "context-mismatch"],
          ["problem-identification"]),
    _step("analysis", "Problem Analysis",
          "Interpret collected data to find patterns, skill deficits and contributing factors.",
          3, "problem-solving", ["correlation-as-causation", "data-ignorance", "incomplete-response"],
          ["data-collection"]),
    _step("intervention-selection", "Intervention Selection",
          "Choose feasible evidence-based interventions matched to the identified problem.",
          4, "problem-solving", ["premature-action", "context-mismatch", "incomplete-response"],
          ["analysis"]),
    _step("progress-monitoring", "Progress Monitoring",
          "Track growth with frequent curriculum-aligned measures and adjust on the data.",
          5, "problem-solving", ["data-ignorance", "delay", "incomplete-response"],
          ["intervention-selection"]),
    _step("evaluation", "Evaluation",
          "Judge intervention effectiveness and decide whether to continue, modify or end it.",
          6, "problem-solving", ["data-ignorance", "correlation-as-causation", "incomplete-response"],
          ["progress-monitoring"]),

    # ===== FBA =====
    _step("fba-recognition", "FBA Recognition",
          "Recognize when an FBA is appropriate and distinguish it from other assessments.",
          0, "fba", ["similar-concept", "context-mismatch"]),
    _step("behavior-identification", "Behavior Identification",
          "Operationally define the target behavior and establish a baseline.",
          1, "fba", ["premature-action", "incomplete-response"]),
    _step("fba-data-collection", "FBA Data Collection",
          "Collect antecedent-behavior-consequence data through observation and interviews.",
          2, "fba", ["premature-action", "data-ignorance", "incomplete-response"],
          ["behavior-identification"]),
    _step("abc-analysis", "ABC Analysis",
          "Find the triggers and maintaining consequences in the ABC data.",
          3, "fba", ["function-confusion", "correlation-as-causation", "incomplete-response"],
          ["fba-data-collection"]),
    _step("function-hypothesis", "Function Hypothesis",
          "Hypothesize the function of the behavior: attention, escape, tangible or sensory.",
          4, "fba", ["function-confusion", "incomplete-response"],
          ["abc-analysis"]),
    _step("intervention-design", "Intervention Design",
          "Design a behavior intervention plan whose replacement behavior matches the function.",
          5, "fba", ["premature-action"],
          ["function-hypothesis"]),

    # ===== Consultation =====
    _step("consultation-type-recognition", "Consultation Type Recognition",
          "Tell behavioral, mental health, organizational, multicultural and conjoint consultation apart.",
          0, "consultation", ["similar-concept", "context-mismatch"]),
    _step("consultee-identification", "Consultee Identification",
          "Identify who needs consultation support: teacher, parent or administrator.",
          1, "consultation", ["role-confusion", "context-mismatch"]),
    _step("problem-clarification", "Problem Clarification",
          "Clarify and define the problem together with the consultee.",
          2, "consultation", ["premature-action", "incomplete-response"],
          ["consultee-identification"]),
    _step("goal-setting", "Goal Setting",
          "Agree on clear, measurable goals and success criteria.",
          3, "consultation", ["incomplete-response", "extreme-language"],
          ["problem-clarification"]),
    _step("consultation-planning", "Intervention Planning",
          "Plan strategies, resources and implementation steps with the consultee.",
          4, "consultation", ["premature-action", "role-confusion", "incomplete-response"],
          ["goal-setting"]),
    _step("consultation-evaluation", "Evaluation",
          "Monitor progress and decide whether consultation goals are being met.",
          5, "consultation", ["data-ignorance", "delay"],
          ["consultation-planning"]),

    # ===== Eligibility =====
    _step("referral-review", "Referral Review",
          "Review the referral concern and existing records before deciding to evaluate.",
          1, "eligibility", ["premature-action", "data-ignorance"]),
    _step("assessment-selection", "Assessment Selection",
          "Select assessments that fit the referral concern and suspected disability.",
          2, "eligibility", ["context-mismatch", "similar-concept", "incomplete-response"],
          ["referral-review"]),
    _step("eligibility-data-collection", "Data Collection",
          "Administer the selected assessments and gather data from multiple sources.",
          3, "eligibility", ["incomplete-response", "data-ignorance"],
          ["assessment-selection"]),
    _step("eligibility-analysis", "Data Analysis",
          "Interpret scores and compare performance against eligibility criteria.",
          4, "eligibility", ["correlation-as-causation", "data-ignorance", "incomplete-response"],
          ["eligibility-data-collection"]),
    _step("determination", "Eligibility Determination",
          "Make a team eligibility decision from comprehensive evaluation data.",
          5, "eligibility", ["legal-overreach", "data-ignorance", "incomplete-response"],
          ["eligibility-analysis"]),
]}

# Skill id prefix -> step to assume when the stem gives no clue
DOMAIN_DEFAULT_STEPS = {
    "DBDM": "data-collection",
    "MBH": "fba-recognition",
    "CC": "consultation-type-recognition",
    "LEG": "referral-review",
}


def get_step(step_id: str) -> Optional[FrameworkStep]:
    return FRAMEWORK_STEPS.get(step_id)


def get_framework_steps(framework_type: str) -> List[FrameworkStep]:
    """All steps of one framework, in order."""
    steps = [s for s in FRAMEWORK_STEPS.values() if s.framework_type == framework_type]
    return sorted(steps, key=lambda s: s.order)


def get_common_errors_for_step(step_id: str) -> List[str]:
    step = get_step(step_id)
    return list(step.common_errors) if step else []


def _has_any(text: str, phrases) -> bool:
    return any(p in text for p in phrases)


def infer_framework_step(question, skill_map=None) -> Optional[str]:
    """
    Guess which framework step a question is testing.

    Keyword rules run in order over the lowercased stem (and, for a few
    checks, the rationale). When nothing fires, questions whose skill is
    in the catalog fall back to a default step for their domain.

    Args:
        question: Anything with question, rationale and skill_id attributes
        skill_map: Optional SkillMap; when given, the domain fallback only
            applies to skills it knows

    Returns:
        Step id or None
    """
    stem = (getattr(question, "question", "") or "").lower()
    rationale = (getattr(question, "rationale", "") or "").lower()

    if _has_any(stem, ("first step", "should first", "initial step")):
        if "behavior" in stem or "fba" in stem or "behavior" in rationale:
            return "behavior-identification"
        if "consultation" in stem or "consultee" in stem:
            return "consultee-identification"
        if _has_any(stem, ("eligibility", "evaluation", "referral")):
            return "referral-review"
        return "problem-identification"

    if "fba" in stem or "functional behavior" in stem or "fba" in rationale:
        return "fba-recognition"

    if "consultation type" in stem or "type of consultation" in stem:
        return "consultation-type-recognition"

    if _has_any(stem, ("collect data", "gather data", "baseline")):
        if _has_any(stem, ("abc", "antecedent", "consequence")):
            return "fba-data-collection"
        if "eligibility" in stem or "evaluation" in stem:
            return "eligibility-data-collection"
        return "data-collection"

    if _has_any(stem, ("analyze", "interpret", "examine data")):
        if "abc" in stem or "function" in stem:
            return "abc-analysis"
        if "eligibility" in stem:
            return "eligibility-analysis"
        return "analysis"

    if _has_any(stem, ("intervention", "implement", "select strategy")):
        if "behavior" in stem or "bip" in stem:
            return "intervention-design"
        if "consultation" in stem:
            return "consultation-planning"
        return "intervention-selection"

    if _has_any(stem, ("select assessment", "appropriate assessment", "which assessment")):
        return "assessment-selection"

    if _has_any(stem, ("progress monitoring", "monitor progress", "track growth")):
        return "progress-monitoring"

    skill_id = getattr(question, "skill_id", None)
    if skill_id:
        if skill_map is not None and skill_map.get_skill(skill_id) is None:
            return None
        return DOMAIN_DEFAULT_STEPS.get(skill_id.split("-")[0])

    return None


def detect_user_selected_step(distractor_text: str, pattern_id: Optional[str]) -> Optional[str]:
    """Step the learner jumped to, when the distractor implies one."""
    if not pattern_id:
        return None

    text = (distractor_text or "").lower()

    # Premature action usually means jumping straight to intervention
    if pattern_id == "premature-action":
        if _has_any(text, ("implement", "intervention", "action", "contact", "refer")):
            return "intervention-selection"

    if pattern_id == "sequence-error":
        if "before" in text or "first" in text:
            return "intervention-selection"

    return None
