"""
Weakness Detector - Finds where a learner is struggling.

Two views:
    - Domain level: accuracy per exam domain from the response log
    - Skill level: confidence-aware practice priority per skill record
"""

from collections import Counter
from functools import cmp_to_key
from typing import Dict, List

from core.distractor_matcher import match_distractor_pattern
from core.learning_state import (
    STATE_PROGRESSION,
    LearnerProfile,
    ResponseEvent,
    SkillPerformance,
)
from core.question_bank import Question, analyze_question

WEAK_DOMAIN_THRESHOLD = 0.6
MAX_FACTUAL_GAPS = 10
TOP_ERROR_PATTERNS = 3
PRIORITY_WINDOW = 10
WEAKEST_SKILL_FRACTION = 0.3


def detect_weaknesses(responses: List[ResponseEvent], questions: Dict[str, Question]) -> dict:
    """
    Analyze a response log.

    Args:
        responses: Response events in answer order
        questions: Question id -> Question

    Returns:
        {
            "domain_scores": {1: {"correct": 3, "total": 5}, ...},
            "weakest_domains": [4, 1],   # below 60%, weakest first
            "factual_gaps": [...],       # key concepts from missed questions
            "error_patterns": [...]      # top 3 matcher pattern ids
        }
    """
    domain_scores = {d: {"correct": 0, "total": 0} for d in range(1, 11)}
    pattern_counts = Counter()
    factual_gaps = []

    for response in responses:
        question = questions.get(response.question_id)
        if question is None:
            continue

        analysis = analyze_question(question)
        for domain in question.domains or analysis["domains"]:
            score = domain_scores.setdefault(domain, {"correct": 0, "total": 0})
            score["total"] += 1
            if response.is_correct:
                score["correct"] += 1

        if response.is_correct:
            continue

        pattern_id = response.distractor_pattern_id
        if pattern_id is None:
            wrong = [l for l in response.selected_answers if l not in question.correct_answer]
            if wrong:
                pattern_id = match_distractor_pattern(question.choices.get(wrong[0], ""), question.correct_text)
        if pattern_id:
            pattern_counts[pattern_id] += 1

        for concept in analysis["key_concepts"]:
            if concept not in factual_gaps:
                factual_gaps.append(concept)

    weak = [
        (domain, s["correct"] / s["total"])
        for domain, s in domain_scores.items()
        if s["total"] > 0 and s["correct"] / s["total"] < WEAK_DOMAIN_THRESHOLD
    ]
    weak.sort(key=lambda item: item[1])

    return {
        "domain_scores": domain_scores,
        "weakest_domains": [domain for domain, _ in weak],
        "factual_gaps": factual_gaps[:MAX_FACTUAL_GAPS],
        "error_patterns": [p for p, _ in pattern_counts.most_common(TOP_ERROR_PATTERNS)]
    }


def calculate_skill_priority(performance: SkillPerformance) -> float:
    """
    Practice priority for a skill, higher = needs more work.

    Averaged over the last 10 attempts:
        High + Wrong  = 4 (misconception)
        Low + Wrong   = 3
        Low + Correct = 2
        High + Correct = 1
        Medium        = 2
    """
    if not performance.attempt_history:
        return 3.0 if performance.attempts > 0 and performance.score < 0.6 else 2.0

    recent = performance.attempt_history[-PRIORITY_WINDOW:]
    total = 0
    for attempt in recent:
        if attempt.confidence == "high":
            total += 1 if attempt.correct else 4
        elif attempt.confidence == "low":
            total += 2 if attempt.correct else 3
        else:
            total += 2
    return total / len(recent)


def _compare_skills(a: dict, b: dict) -> int:
    # Priority first (ties within 0.1), then lower accuracy
    if abs(a["priority"] - b["priority"]) > 0.1:
        return -1 if a["priority"] > b["priority"] else 1
    if a["accuracy"] == b["accuracy"]:
        return 0
    return -1 if a["accuracy"] < b["accuracy"] else 1


def get_weakest_skills(profile: LearnerProfile) -> List[str]:
    """Top 30% (at least one) of attempted skills by practice priority."""
    skills = [
        {
            "skill_id": skill_id,
            "accuracy": perf.score,
            "priority": calculate_skill_priority(perf)
        }
        for skill_id, perf in profile.skill_scores.items()
        if perf.attempts > 0
    ]
    if not skills:
        return []

    skills.sort(key=cmp_to_key(_compare_skills))
    cutoff = max(1, int(len(skills) * WEAKEST_SKILL_FRACTION))
    return [s["skill_id"] for s in skills[:cutoff]]


def summarize_progress(profile: LearnerProfile) -> dict:
    """Counts per learning state plus overall totals, for dashboards."""
    counts = {state.value: 0 for state in STATE_PROGRESSION}
    attempts = 0
    correct = 0
    for perf in profile.skill_scores.values():
        counts[perf.learning_state.value] += 1
        attempts += perf.attempts
        correct += perf.correct

    return {
        "skills_tracked": len(profile.skill_scores),
        "states": counts,
        "total_attempts": attempts,
        "overall_accuracy": round(correct / attempts, 3) if attempts else 0.0,
        "confidence_flags": sum(p.confidence_flags for p in profile.skill_scores.values())
    }
