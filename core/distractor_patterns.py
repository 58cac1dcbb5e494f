"""
Distractor Pattern Library - Named categories of reasoning errors.

Each pattern describes one misconception that a wrong answer choice is
built to represent: how the distractor is derived from the correct logic,
and what to tell a learner who picked it.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class DistractorPattern:
    """A misconception category a distractor is designed around."""
    pattern_id: str
    name: str
    description: str
    heuristic: str  # How the wrong answer is derived from the correct one
    feedback_explanation: str  # Why this kind of answer is wrong
    applicable_skill_types: List[str] = field(default_factory=list)


DISTRACTOR_PATTERNS: Dict[str, DistractorPattern] = {
    "premature-action": DistractorPattern(
        pattern_id="premature-action",
        name="Premature Action",
        description="Jumping to intervention/action without proper assessment first",
        heuristic="Replace an assessment or data-review step with an action that belongs after it: "
                  "implement, contact, refer, begin, start.",
        feedback_explanation="This answer skips the crucial first step of assessment or data collection. "
                             "School psychologists must understand the problem before taking action.",
        applicable_skill_types=["first-step", "scenario"]
    ),
    "role-confusion": DistractorPattern(
        pattern_id="role-confusion",
        name="Role Confusion",
        description="Choosing actions that belong to another professional (teacher, parent, admin, doctor)",
        heuristic="Offer a valid action from a different professional role: teaching, prescribing, "
                  "disciplining, direct instruction, medical diagnosis.",
        feedback_explanation="School psychologists consult, collaborate, and assess. They do not take over "
                             "the roles of teachers, administrators, or medical professionals.",
        applicable_skill_types=["scenario", "first-step"]
    ),
    "sequence-error": DistractorPattern(
        pattern_id="sequence-error",
        name="Sequence Error",
        description="Getting the order or sequence wrong",
        heuristic="Keep the correct elements but reorder them, e.g. intervention before assessment.",
        feedback_explanation="The elements are correct but the sequence is wrong. The proper order matters "
                             "for this process.",
        applicable_skill_types=["definition", "recognition"]
    ),
    "context-mismatch": DistractorPattern(
        pattern_id="context-mismatch",
        name="Context Mismatch",
        description="Correct approach but wrong for this specific situation",
        heuristic="Apply a valid tool to the wrong purpose: CBM for comprehensive evaluation, a screener "
                  "for eligibility, individual assessment for screening.",
        feedback_explanation="While this approach is valid in general, it doesn't match the specific context "
                             "or purpose described in this question.",
        applicable_skill_types=["scenario", "context-matching", "best-selection"]
    ),
    "similar-concept": DistractorPattern(
        pattern_id="similar-concept",
        name="Similar Concept",
        description="Picking a related concept from the same category that doesn't fit the context",
        heuristic="Swap in a sibling concept: test-retest for interobserver agreement, content for "
                  "construct validity, Tier 2 for Tier 3.",
        feedback_explanation="While this concept is related, it doesn't match the specific context described "
                             "in the question.",
        applicable_skill_types=["definition", "recognition", "context-matching"]
    ),
    "definition-error": DistractorPattern(
        pattern_id="definition-error",
        name="Definition Error",
        description="Misunderstanding what a key term or legal standard means",
        heuristic="Misstate a definition, e.g. FAPE as the optimal or best possible education.",
        feedback_explanation="This answer misreads the definition of a key term. Technical and legal "
                             "definitions have precise meanings.",
        applicable_skill_types=["definition", "legal-ethical"]
    ),
    "data-ignorance": DistractorPattern(
        pattern_id="data-ignorance",
        name="Data Ignorance",
        description="Making decisions without reviewing available data",
        heuristic="Decide, recommend or conclude without any mention of reviewing data or results.",
        feedback_explanation="School psychologists practice data-based decision making. Decisions should be "
                             "informed by reviewing and analyzing relevant data first.",
        applicable_skill_types=["scenario", "first-step", "interpretation"]
    ),
    "extreme-language": DistractorPattern(
        pattern_id="extreme-language",
        name="Extreme Language",
        description="Answers with 'always', 'never', 'only', 'must' that are too absolute",
        heuristic="Make a sound principle absolute with qualifiers like always, never, only, must, all, none.",
        feedback_explanation="Best practices allow for flexibility and exceptions. Absolute statements are "
                             "rarely correct.",
        applicable_skill_types=["definition", "recognition", "scenario", "interpretation"]
    ),
    "incomplete-response": DistractorPattern(
        pattern_id="incomplete-response",
        name="Incomplete Response",
        description="Missing a required element of the complete answer",
        heuristic="Drop one essential component of a multi-part correct answer.",
        feedback_explanation="This answer is partially correct but incomplete. The full answer requires "
                             "additional steps or components.",
        applicable_skill_types=["first-step", "scenario", "best-selection"]
    ),
    "legal-overreach": DistractorPattern(
        pattern_id="legal-overreach",
        name="Legal Overreach",
        description="Exceeding professional authority or legal bounds",
        heuristic="Share records without consent, disclose confidential information, or make placement "
                  "decisions unilaterally.",
        feedback_explanation="This action exceeds the school psychologist's legal authority or violates "
                             "guidelines such as FERPA, confidentiality, or IDEA requirements.",
        applicable_skill_types=["scenario", "legal-ethical", "first-step"]
    ),
    "correlation-as-causation": DistractorPattern(
        pattern_id="correlation-as-causation",
        name="Correlation as Causation",
        description="Assuming causal relationship from correlational data",
        heuristic="Read a correlation as a cause: 'causes', 'leads to', 'results in'.",
        feedback_explanation="Correlation does not imply causation. Additional evidence is needed to "
                             "establish a causal relationship.",
        applicable_skill_types=["research-data", "interpretation"]
    ),
    "function-confusion": DistractorPattern(
        pattern_id="function-confusion",
        name="Function Confusion",
        description="Confusing different behavior functions (attention vs escape vs tangible)",
        heuristic="Name a plausible function that doesn't match the maintaining consequence.",
        feedback_explanation="Behavior functions are determined by what maintains the behavior. The "
                             "consequence described indicates a different function.",
        applicable_skill_types=["scenario", "recognition", "analysis"]
    ),
    "delay": DistractorPattern(
        pattern_id="delay",
        name="Delay",
        description="Delaying immediate action when immediate action is required",
        heuristic="Wait, schedule later, or 'wait and see' when the situation calls for action now.",
        feedback_explanation="Some situations require immediate action and cannot be delayed.",
        applicable_skill_types=["first-step", "scenario"]
    ),
}


def get_pattern(pattern_id: str) -> Optional[DistractorPattern]:
    """Get a pattern by ID."""
    return DISTRACTOR_PATTERNS.get(pattern_id)


def get_patterns_for_skill_type(skill_type: str) -> List[DistractorPattern]:
    """Patterns applicable to a skill category (e.g. "first-step")."""
    return [p for p in DISTRACTOR_PATTERNS.values() if skill_type in p.applicable_skill_types]
