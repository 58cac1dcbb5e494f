"""
Distractor Matcher - Maps a selected wrong answer to a misconception pattern.

Every wrong answer tells a story: the text of the chosen option usually
carries the fingerprint of the reasoning error that produced it.

Rules are evaluated in a fixed order and the first one that fires wins,
so a text can match at most one pattern.
"""

import re
from typing import Callable, List, Optional, Tuple

from .distractor_patterns import DISTRACTOR_PATTERNS

# ===== Premature action =====
_ACTION_WORDS = re.compile(r"\b(implement|contact|refer|begin|start|immediately|right away|right now)\b")
_ASSESSMENT_WORDS = re.compile(r"\b(assess|review|collect|gather|analyze|evaluate|examine|observe|data|baseline)\b")

# ===== Role confusion =====
_OTHER_ROLE_ACTIONS = re.compile(
    r"\b(take over|prescribe|discipline|teach|instruct|direct instruction|medical diagnosis|make disciplinary)\b"
)
_OTHER_ROLE_MENTION = re.compile(r"\b(teacher|doctor|administrator|parent).*role\b")

# ===== Sequence error =====
_ORDER_WORDS = re.compile(r"\b(before|after|first|then|next|followed by)\b")
_SEQUENCE_INVERSIONS = [
    re.compile(r"\b(intervention|action|implement)\b.*\b(before|prior to)\b.*\b(assessment|data|analysis)\b"),
    re.compile(r"\b(analysis|assessment)\b.*\b(before|prior to)\b.*\b(data|collection)\b"),
]

# ===== Context mismatch =====
_CONTEXT_MISMATCHES = [
    re.compile(r"\b(cbm|curriculum-based measurement)\b.*\b(evaluation|eligibility|comprehensive)\b"),
    re.compile(r"\b(screening|screen)\b.*\b(eligibility|determine|evaluate)\b"),
    re.compile(r"\b(individual|one-on-one)\b.*\b(screening|screen)\b"),
    re.compile(r"\b(group|universal)\b.*\b(evaluation|eligibility)\b"),
]
_PROGRESS_MONITORING = re.compile(r"\b(progress monitoring|monitor progress)\b")

# ===== Similar concept =====
_SIMILAR_CONCEPTS = [
    re.compile(r"\b(test-retest|test retest)\b.*\b(single-subject|single subject)\b"),
    re.compile(r"\b(content validity)\b.*\b(construct|predictive)\b"),
    re.compile(r"\b(tier 2|tier two)\b.*\b(tier 3|tier three)\b"),
    re.compile(r"\b(reliability)\b.*\b(validity)\b"),
    re.compile(r"\b(sensitivity)\b.*\b(specificity)\b"),
]

# ===== Definition error =====
_DEFINITION_ERRORS = [
    re.compile(r"\b(optimal|best possible|maximum)\b.*\b(education|fape)\b"),
    re.compile(r"\b(always|never|only|must|all|none)\b.*\b(appropriate|required|necessary)\b"),
    re.compile(r"\b(appropriate)\b.*\b(optimal|best)\b"),
]

# ===== Data ignorance =====
_DECISION_WORDS = re.compile(r"\b(decide|determine|recommend|conclude|judge)\b")
_DATA_REVIEW_WORDS = re.compile(r"\b(review|analyze|examine|assess|evaluate|data|results|findings)\b")
_DATA_GROUNDING = re.compile(r"\b(based on|using|with|from)\b.*\b(data|results|findings|assessment|evaluation)\b")

# ===== Extreme language =====
_ABSOLUTES = re.compile(r"\b(always|never|only|must|all|none|every|any)\b")
_HEDGES = re.compile(r"\b(usually|often|typically|generally|may|can|sometimes)\b")

# ===== Incomplete response =====
_CONJUNCTIONS = re.compile(r"\b(and|also|additionally|furthermore)\b")


def _premature_action(text: str, correct: str) -> bool:
    return bool(_ACTION_WORDS.search(text)) and not _ASSESSMENT_WORDS.search(text)


def _role_confusion(text: str, correct: str) -> bool:
    return bool(_OTHER_ROLE_ACTIONS.search(text) or _OTHER_ROLE_MENTION.search(text))


def _sequence_error(text: str, correct: str) -> bool:
    return bool(_ORDER_WORDS.search(text)) and any(p.search(text) for p in _SEQUENCE_INVERSIONS)


def _context_mismatch(text: str, correct: str) -> bool:
    return any(p.search(text) for p in _CONTEXT_MISMATCHES) and not _PROGRESS_MONITORING.search(text)


def _similar_concept(text: str, correct: str) -> bool:
    return any(p.search(text) for p in _SIMILAR_CONCEPTS)


def _definition_error(text: str, correct: str) -> bool:
    return any(p.search(text) for p in _DEFINITION_ERRORS)


def _data_ignorance(text: str, correct: str) -> bool:
    return (
        bool(_DECISION_WORDS.search(text))
        and not _DATA_REVIEW_WORDS.search(text)
        and not _DATA_GROUNDING.search(text)
    )


def _extreme_language(text: str, correct: str) -> bool:
    return bool(_ABSOLUTES.search(text)) and not _HEDGES.search(text)


def _incomplete_response(text: str, correct: str) -> bool:
    return bool(_CONJUNCTIONS.search(correct)) and not _CONJUNCTIONS.search(text)


# Evaluation order matters: first match wins.
MATCH_RULES: List[Tuple[str, Callable[[str, str], bool]]] = [
    ("premature-action", _premature_action),
    ("role-confusion", _role_confusion),
    ("sequence-error", _sequence_error),
    ("context-mismatch", _context_mismatch),
    ("similar-concept", _similar_concept),
    ("definition-error", _definition_error),
    ("data-ignorance", _data_ignorance),
    ("extreme-language", _extreme_language),
    ("incomplete-response", _incomplete_response),
]


def match_distractor_pattern(selected_text: str, correct_answer: Optional[str] = None) -> Optional[str]:
    """
    Identify the misconception pattern behind a wrong answer.

    Args:
        selected_text: Text of the answer choice the learner picked
        correct_answer: Text of the correct choice, used only by the
            incomplete-response rule

    Returns:
        Pattern id of the first rule that matches, or None
    """
    text = (selected_text or "").lower().strip()
    correct = (correct_answer or "").lower()

    for pattern_id, rule in MATCH_RULES:
        if rule(text, correct):
            return pattern_id
    return None


def get_distractor_pattern_matches(
    selected_text: str,
    correct_answer: Optional[str] = None
) -> List[Tuple[str, float]]:
    """
    Score every rule pattern against a wrong answer.

    Keyword overlap with the pattern description adds 0.3; being the
    pattern that match_distractor_pattern picks adds 0.7.

    Returns:
        (pattern_id, confidence) pairs, highest confidence first
    """
    text = (selected_text or "").lower().strip()
    winner = match_distractor_pattern(selected_text, correct_answer)

    matches = []
    for pattern_id, _ in MATCH_RULES:
        pattern = DISTRACTOR_PATTERNS.get(pattern_id)
        if pattern is None:
            continue

        confidence = 0.0
        keywords = [w for w in re.findall(r"[a-z]+", pattern.description.lower()) if len(w) > 3]
        if any(word in text for word in keywords):
            confidence += 0.3
        if winner == pattern_id:
            confidence += 0.7

        if confidence > 0:
            matches.append((pattern_id, round(confidence, 2)))

    return sorted(matches, key=lambda m: m[1], reverse=True)


def get_best_distractor_pattern(
    selected_text: str,
    correct_answer: Optional[str] = None,
    min_confidence: float = 0.3
) -> Optional[str]:
    """Highest-confidence pattern, or None below min_confidence."""
    matches = get_distractor_pattern_matches(selected_text, correct_answer)
    if not matches or matches[0][1] < min_confidence:
        return None
    return matches[0][0]
