"""
Question Tagger - Heuristic DOK and framework suggestions for bank questions.

Suggestions never modify the bank; they are meant for a human to review.
Confidence combines the DOK guess, the framework guess and a domain
cross-check, taking the lowest of the three.
"""

from dataclasses import asdict, dataclass
from typing import List, Optional, Tuple

from .framework_steps import FRAMEWORK_STEPS, FRAMEWORK_TYPES
from .skill_map import DOMAIN_PREFIXES, SkillMap

# Framework a domain's questions usually follow (None = no single framework)
DOMAIN_TO_FRAMEWORK = {
    1: None,  # DBDM - mostly psychometric
    2: "consultation",
    3: "problem-solving",
    4: "fba",
    5: "problem-solving",
    6: None,
    7: None,
    8: None,
    9: None,
    10: "eligibility",
}

CONFIDENCE_ORDER = ("low", "medium", "high")


@dataclass
class TaggingSuggestion:
    question_id: str
    suggested_dok: int
    suggested_framework: str  # framework type or "none"
    suggested_framework_step: Optional[str]
    confidence: str  # high | medium | low
    reasoning: str
    needs_review: bool

    def to_dict(self) -> dict:
        return asdict(self)


# ==================== DOK ====================

DOK1_INDICATORS = [
    "definition", "defined as", "refers to", "which court case", "what is",
    "which of the following is", "identify the term", "recognize the", "name the"
]

DOK3_INDICATORS = [
    "first step", "next step", "should first", "initial action",
    "what should the school psychologist do first", "most appropriate",
    "best course of action", "best first step"
]


def determine_dok(question) -> Tuple[int, str, str]:
    """
    Estimate Depth of Knowledge from stem phrasing.

    Returns:
        (dok, confidence, reasoning)
    """
    text = question.question.lower()
    combined = f"{text} {(question.rationale or '').lower()}"

    if any(ind in text for ind in DOK1_INDICATORS) or (len(text) < 100 and "which" in text):
        return 1, "high", "Question asks for definition or recall of specific term/case."

    is_scenario = (
        any(w in combined for w in ("school psychologist", "teacher", "student", "parent"))
        and len(question.question) > 200
    )

    if any(ind in text for ind in DOK3_INDICATORS) or (is_scenario and "which of the following" in text):
        if is_scenario:
            return 3, "high", "Scenario-based question requiring strategic decision-making."
        return 3, "high", 'Uses "first step" or "most appropriate" phrasing indicative of strategic thinking.'

    return 2, "medium", "Question requires applying concepts or recognizing examples in context."


# ==================== Framework ====================

FBA_KEYWORDS = [
    "fba", "functional behavior assessment", "behavior function", "abc", "antecedent",
    "consequence", "bip", "behavior intervention plan", "reinforcement", "attention seeking",
    "escape", "tangible", "sensory", "function of behavior", "maintains the behavior"
]

CONSULTATION_KEYWORDS = [
    "consultation", "consultee", "collaborate", "indirect services", "cultural broker",
    "behavioral consultation", "mental health consultation", "organizational consultation",
    "multicultural consultation", "conjoint"
]

ELIGIBILITY_KEYWORDS = [
    "eligibility", "qualify", "qualifies for", "special education", "evaluation for",
    "determine eligibility", "meets criteria", "discrepancy", "idea", "evaluation data",
    "eligibility determination"
]

PROBLEM_SOLVING_KEYWORDS = [
    "mtss", "rti", "response to intervention", "multi-tiered", "tier 2", "tier 3",
    "progress monitoring", "intervention selection", "problem-solving", "data-based decision",
    "review data", "identify skill deficit", "baseline", "intervention effectiveness"
]


def _fba_step(combined: str) -> Tuple[str, str]:
    if any(p in combined for p in ("best example of a functional behavior assessment",
                                   "what is an fba", "purpose of fba")):
        return "fba-recognition", "high"
    if any(p in combined for p in ("identify the function", "function of the behavior", "most likely function")):
        return "function-hypothesis", "high"
    if any(p in combined for p in ("bip", "behavior intervention plan", "replacement behavior")):
        return "intervention-design", "high"
    if "abc" in combined or ("antecedent" in combined and "consequence" in combined):
        return "abc-analysis", "medium"
    if any(p in combined for p in ("observe", "data collection", "document")):
        return "fba-data-collection", "medium"
    return "fba-recognition", "low"


def _consultation_step(combined: str) -> Tuple[str, str]:
    if any(p in combined for p in ("type of consultation", "which consultation", "best describes the type")):
        return "consultation-type-recognition", "high"
    if "consultee" in combined and ("identify" in combined or "who" in combined):
        return "consultee-identification", "medium"
    if "clarify" in combined or "problem clarification" in combined:
        return "problem-clarification", "medium"
    if "goal" in combined or "objective" in combined:
        return "goal-setting", "medium"
    if "plan" in combined:
        return "consultation-planning", "medium"
    return "consultation-type-recognition", "low"


def _eligibility_step(combined: str) -> Tuple[str, str]:
    if (("assessments" in combined and "gather" in combined)
            or "sources of data" in combined or "which assessments" in combined):
        return "assessment-selection", "high"
    if any(p in combined for p in ("determine", "qualifies", "meets criteria")):
        return "determination", "high"
    if any(p in combined for p in ("analyze", "interpret", "discrepancy")):
        return "eligibility-analysis", "medium"
    if "review" in combined or "referral" in combined:
        return "referral-review", "medium"
    return "assessment-selection", "low"


def _problem_solving_step(combined: str) -> Tuple[str, str]:
    if "first step" in combined and ("intervention" in combined or "problem" in combined):
        return "problem-identification", "high"
    if any(p in combined for p in ("review data", "collect data", "gather information")):
        return "data-collection", "high"
    if any(p in combined for p in ("progress monitoring", "monitor progress", "track growth")):
        return "progress-monitoring", "high"
    if "intervention" in combined and ("select" in combined or "choose" in combined):
        return "intervention-selection", "medium"
    if "analyze" in combined or "identify skill deficit" in combined:
        return "analysis", "medium"
    return "problem-identification", "low"


# Checked in order; the first framework with a keyword hit wins
FRAMEWORK_DETECTORS = [
    ("fba", FBA_KEYWORDS, _fba_step, "FBA framework detected based on behavior function/ABC/BIP keywords."),
    ("consultation", CONSULTATION_KEYWORDS, _consultation_step, "Consultation framework detected."),
    ("eligibility", ELIGIBILITY_KEYWORDS, _eligibility_step, "Eligibility framework detected."),
    ("problem-solving", PROBLEM_SOLVING_KEYWORDS, _problem_solving_step,
     "Problem-solving framework (MTSS/RTI) detected."),
]


def detect_framework(question) -> Tuple[str, Optional[str], str, str]:
    """
    Guess which practice framework (and step) a question belongs to.

    Returns:
        (framework or "none", step id or None, confidence, reasoning)
    """
    combined = f"{question.question} {question.rationale or ''}".lower()

    for framework, keywords, pick_step, reason in FRAMEWORK_DETECTORS:
        if any(kw in combined for kw in keywords):
            step, confidence = pick_step(combined)
            return framework, step, confidence, f"{reason} Step: {step}."

    return (
        "none", None, "high",
        "Question focuses on psychometric concepts, research methods, or definitions without a practice framework."
    )


def _cross_check(question, suggested_framework: str, skill_map: Optional[SkillMap]) -> Tuple[str, str]:
    """Compare the suggested framework with what the skill's domain usually uses."""
    skill_id = getattr(question, "skill_id", None)
    if not skill_id:
        return "high", ""

    if skill_map is not None and skill_map.get_skill(skill_id) is None:
        return "medium", "Skill ID found but skill not located in skill map."

    prefix = skill_id.split("-")[0]
    domain = DOMAIN_PREFIXES.get(prefix, 1)
    expected = DOMAIN_TO_FRAMEWORK.get(domain)

    if expected is None and suggested_framework == "none":
        return "high", "Domain expects no framework, suggestion matches."
    if expected and suggested_framework == expected:
        return "high", f"Domain {domain} ({prefix}) expects {expected}, suggestion matches."
    if expected and suggested_framework != "none":
        return "low", (f"WARNING: Domain {domain} ({prefix}) typically uses {expected}, "
                       f"but suggestion is {suggested_framework}. May need review.")
    return "medium", "Framework suggestion does not align with domain expectations, but may be valid."


def suggest_tags(question, skill_map: Optional[SkillMap] = None) -> TaggingSuggestion:
    """Build a DOK + framework suggestion for one question."""
    dok, dok_confidence, dok_reason = determine_dok(question)
    framework, step, fw_confidence, fw_reason = detect_framework(question)
    check_confidence, check_reason = _cross_check(question, framework, skill_map)

    confidence = min(
        (dok_confidence, fw_confidence, check_confidence),
        key=CONFIDENCE_ORDER.index
    )

    reasoning = " ".join(filter(None, [
        f"DOK {dok}: {dok_reason}",
        f"Framework: {fw_reason}",
        check_reason
    ]))

    return TaggingSuggestion(
        question_id=question.id,
        suggested_dok=dok,
        suggested_framework=framework,
        suggested_framework_step=step,
        confidence=confidence,
        reasoning=reasoning,
        needs_review=confidence == "low"
    )


def validate_tags(question, skill_map: SkillMap) -> List[str]:
    """Return the problems with a question's answer key and stored tags (empty when clean)."""
    problems = []

    if not 2 <= len(question.choices) <= 4:
        problems.append(f"Question has {len(question.choices)} choices, expected 2-4")

    if not question.correct_answer:
        problems.append("No correct answer")
    for letter in question.correct_answer:
        if letter not in question.choices:
            problems.append(f"Correct answer {letter} is not among the choices")

    skill = None
    if question.skill_id:
        skill = skill_map.get_skill(question.skill_id)
        if skill is None:
            problems.append(f"Unknown skill: {question.skill_id}")

    if question.dok is not None:
        if question.dok not in (1, 2, 3):
            problems.append(f"DOK {question.dok} is outside 1-3")
        elif skill is not None:
            low, high = skill.dok_range
            if not low <= question.dok <= high:
                problems.append(f"DOK {question.dok} is outside {skill.skill_id} range {low}-{high}")

    if question.framework_type and question.framework_type not in FRAMEWORK_TYPES:
        problems.append(f"Unknown framework type: {question.framework_type}")

    if question.framework_step:
        step = FRAMEWORK_STEPS.get(question.framework_step)
        if step is None:
            problems.append(f"Unknown framework step: {question.framework_step}")
        elif question.framework_type and step.framework_type != question.framework_type:
            problems.append(
                f"Step {step.step_id} belongs to {step.framework_type}, not {question.framework_type}"
            )

    return problems
