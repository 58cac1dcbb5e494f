"""
Error Library - Explanations for the priority misconception patterns.

Links each pattern to the framework steps where it shows up, so feedback
can say how the mistake relates to where the learner is in the process.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .framework_steps import FRAMEWORK_STEPS


@dataclass
class ErrorExplanation:
    pattern_id: str
    general_explanation: str
    framework_step_guidance: Dict[str, str] = field(default_factory=dict)  # step id -> relationship
    remediation_tips: List[str] = field(default_factory=list)


ERROR_LIBRARY: Dict[str, ErrorExplanation] = {
    "premature-action": ErrorExplanation(
        pattern_id="premature-action",
        general_explanation=(
            "This answer skips problem identification or data collection and jumps straight to a solution. "
            "Practice requires understanding the problem before acting on it."
        ),
        framework_step_guidance={
            "problem-identification": "This skips the foundational step. Ask first: what exactly is the problem?",
            "data-collection": "This bypasses data collection. Data informs decisions, not assumptions.",
            "intervention-selection": "This jumps to intervention without the analysis it depends on. "
                                      "Interventions chosen without assessment rarely work.",
            "behavior-identification": "This skips operationally defining the behavior before intervening.",
            "fba-data-collection": "This skips ABC data collection. Without it any intervention is guesswork.",
            "problem-clarification": "This skips clarifying the problem with the consultee before planning.",
            "referral-review": "This skips reviewing the referral and background information.",
        },
        remediation_tips=[
            "Always ask: 'What do I need to know before I act?'",
            "Start with assessment, observation, or data review - never skip to intervention",
            "If a question asks for the 'first step', look for answers that gather information, not take action",
            "Remember the sequence: Assessment → Analysis → Intervention",
        ]
    ),
    "role-confusion": ErrorExplanation(
        pattern_id="role-confusion",
        general_explanation=(
            "This answer picks an action that belongs to another professional. School psychologists "
            "consult, collaborate and assess; they don't take over other people's responsibilities."
        ),
        framework_step_guidance={
            "consultee-identification": "Consultees are partners, not people to replace. The consultee "
                                        "implements; the psychologist supports.",
            "consultation-planning": "Plans should support others in implementing, not have the psychologist "
                                     "teach, discipline or instruct directly.",
            "intervention-selection": "Interventions are carried out by the appropriate professional with "
                                      "psychologist support.",
        },
        remediation_tips=[
            "Ask: 'Is this action within a school psychologist's scope of practice?'",
            "School psychologists don't teach, prescribe medication, or make disciplinary decisions",
            "Look for answers involving collaboration, consultation, or assessment",
        ]
    ),
    "sequence-error": ErrorExplanation(
        pattern_id="sequence-error",
        general_explanation=(
            "The elements of this answer may be right, but their order is wrong. Steps in these "
            "processes depend on the output of earlier steps."
        ),
        framework_step_guidance={
            "problem-identification": "This must come first; nothing else can be done without a defined problem.",
            "data-collection": "This comes after problem identification and before analysis.",
            "analysis": "This comes after data collection; you cannot analyze what you haven't collected.",
            "intervention-selection": "This comes after analysis; interventions must match the analyzed problem.",
            "progress-monitoring": "This comes after an intervention has been selected and implemented.",
            "behavior-identification": "This comes first in an FBA.",
            "fba-data-collection": "This comes after behavior identification and before ABC analysis.",
            "abc-analysis": "This comes after ABC data has been collected.",
            "function-hypothesis": "This comes after the ABC patterns have been analyzed.",
            "intervention-design": "This comes after the function has been hypothesized.",
            "consultee-identification": "This comes first in consultation.",
            "problem-clarification": "This comes after consultee identification and before goal setting.",
            "goal-setting": "This comes after problem clarification and before planning.",
            "consultation-planning": "This comes after goals have been set.",
            "referral-review": "This comes first in an eligibility evaluation.",
            "assessment-selection": "This comes after referral review and before data collection.",
            "eligibility-data-collection": "This comes after assessment selection and before analysis.",
            "eligibility-analysis": "This comes after data collection and before determination.",
            "determination": "This comes last, once all data has been collected and analyzed.",
        },
        remediation_tips=[
            "Memorize the sequence: Problem → Data → Analysis → Intervention → Monitoring → Evaluation",
            "When a question asks about order, ask: 'What must happen first?'",
            "For FBA: Behavior → ABC Data → Analysis → Function → Intervention",
        ]
    ),
    "similar-concept": ErrorExplanation(
        pattern_id="similar-concept",
        general_explanation=(
            "This answer confuses two related concepts from the same category. They share features "
            "but don't fit the same context."
        ),
        framework_step_guidance={
            "fba-recognition": "FBA has specific components that distinguish it from functional analysis "
                               "and comprehensive evaluation.",
            "consultation-type-recognition": "Behavioral, mental health and organizational consultation each "
                                             "have distinct purposes.",
            "assessment-selection": "Screening, diagnostic and progress monitoring tools serve different purposes.",
        },
        remediation_tips=[
            "Read the question for the specific context or purpose being asked about",
            "When two concepts seem similar, find what distinguishes them",
            "Study concept pairs: test-retest vs. interobserver, content vs. construct validity, Tier 2 vs. Tier 3",
        ]
    ),
    "context-mismatch": ErrorExplanation(
        pattern_id="context-mismatch",
        general_explanation=(
            "This approach is valid, but not for the purpose or setting described in this question."
        ),
        framework_step_guidance={
            "data-collection": "The method is valid but doesn't fit the purpose, such as screening tools "
                               "used for eligibility.",
            "intervention-selection": "The intervention is evidence-based but mismatched to the tier or setting.",
            "assessment-selection": "CBM is for progress monitoring and screening identifies risk; neither "
                                    "determines eligibility.",
            "fba-recognition": "FBA is for understanding behavior function, not academic or eligibility decisions.",
            "consultation-type-recognition": "The consultation type doesn't match the problem context.",
        },
        remediation_tips=[
            "Match the approach to the purpose described in the question",
            "Ask: 'Is the goal screening, progress monitoring, eligibility, or intervention?'",
            "Remember: Screening identifies risk, not eligibility",
        ]
    ),
    "definition-error": ErrorExplanation(
        pattern_id="definition-error",
        general_explanation=(
            "This answer misreads what a key term or legal standard means. Technical and legal "
            "definitions are precise."
        ),
        framework_step_guidance={
            "problem-identification": "Problems must be defined in specific, observable, measurable terms.",
            "behavior-identification": "Behaviors must be operationalized in observable, measurable terms.",
            "function-hypothesis": "Each behavior function is defined by what maintains the behavior.",
            "goal-setting": "Consultation goals must be specific and measurable.",
            "determination": "Legal definitions such as FAPE and LRE have exact meanings.",
            "fba-recognition": "FBA has a specific definition and set of components.",
            "consultation-type-recognition": "Each consultation type has its own defining characteristics.",
            "assessment-selection": "Reliability, validity, sensitivity and specificity mean different things.",
        },
        remediation_tips=[
            "Learn legal definitions precisely: FAPE means appropriate, not optimal",
            "Study precise definitions of key terms rather than general impressions",
            "Pay attention to subtle differences between definitions",
        ]
    ),
}


def get_error_explanation(pattern_id: Optional[str]) -> Optional[ErrorExplanation]:
    if not pattern_id:
        return None
    return ERROR_LIBRARY.get(pattern_id)


def get_guidance_for_step(pattern_id: Optional[str], step_id: Optional[str]) -> Optional[str]:
    """How a pattern relates to a specific framework step, if documented."""
    explanation = get_error_explanation(pattern_id)
    if explanation is None or not step_id:
        return None
    return explanation.framework_step_guidance.get(step_id)


def get_steps_with_error(pattern_id: str) -> List[str]:
    """Framework steps that list this pattern among their common errors."""
    return [step_id for step_id, step in FRAMEWORK_STEPS.items() if pattern_id in step.common_errors]
