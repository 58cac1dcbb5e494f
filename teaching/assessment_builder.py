"""
Assessment Builder - Domain-balanced assessments drawn from the question bank.

Question counts follow the Praxis School Psychologist content areas:

    Professional Practices   32%  domains 1-2
    Student-Level Services   23%  domains 3-4
    Systems-Level Services   20%  domains 5-7
    Foundations              25%  domains 8-10

Each area's share is split across its domains in proportion to how many
questions the bank actually has for them, then capped by availability.
"""

import random
from typing import Dict, Iterable, List

from loguru import logger

from core.question_bank import Question, QuestionBank

ALL_DOMAINS = list(range(1, 11))

PRAXIS_DISTRIBUTION = {
    "professional_practices": {"percentage": 0.32, "domains": [1, 2]},
    "student_level": {"percentage": 0.23, "domains": [3, 4]},
    "systems_level": {"percentage": 0.20, "domains": [5, 6, 7]},
    "foundations": {"percentage": 0.25, "domains": [8, 9, 10]},
}

FULL_ASSESSMENT_SIZE = 125
PRE_ASSESSMENT_PER_DOMAIN = 2


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def calculate_area_targets(target_count: int) -> Dict[str, int]:
    """Questions per content area, summing exactly to target_count (largest remainder)."""
    exact = {area: spec["percentage"] * target_count for area, spec in PRAXIS_DISTRIBUTION.items()}
    targets = {area: _round_half_up(value) for area, value in exact.items()}

    remainder = target_count - sum(targets.values())
    if remainder:
        by_fraction = sorted(exact, key=lambda area: exact[area] - targets[area], reverse=True)
        step = 1 if remainder > 0 else -1
        for area in by_fraction[:abs(remainder)]:
            targets[area] += step

    return targets


def count_available(questions: Iterable[Question], exclude: Iterable[str] = ()) -> Dict[int, int]:
    """Questions per domain after exclusions (multi-domain questions count everywhere)."""
    excluded = set(exclude)
    available = {domain: 0 for domain in ALL_DOMAINS}
    for question in questions:
        if question.id in excluded:
            continue
        for domain in question.domains:
            if domain in available:
                available[domain] += 1
    return available


def _split_area(area_target: int, domains: List[int], available: Dict[int, int]) -> Dict[int, int]:
    # First domain takes its share of the area, the rest split what is left
    alloc = {domain: 0 for domain in domains}
    remaining = area_target
    for i, domain in enumerate(domains):
        pool = sum(available[d] for d in domains[i:])
        if pool == 0:
            break
        if i == len(domains) - 1:
            alloc[domain] = remaining
        else:
            alloc[domain] = _round_half_up(available[domain] / pool * remaining)
            remaining -= alloc[domain]
    return alloc


def calculate_domain_distribution(
    target_count: int,
    questions: Iterable[Question],
    exclude: Iterable[str] = ()
) -> Dict[int, int]:
    """
    Decide how many questions each domain (1-10) contributes.

    Allocations never exceed a domain's available questions. Whatever a
    domain cannot supply moves to the domains with the most spare
    questions; if the bank is simply too small the total falls short of
    target_count and a warning is logged.

    Returns:
        {domain_id: question_count}
    """
    available = count_available(questions, exclude)
    area_targets = calculate_area_targets(target_count)

    requested = {domain: 0 for domain in ALL_DOMAINS}
    for area, spec in PRAXIS_DISTRIBUTION.items():
        requested.update(_split_area(area_targets[area], spec["domains"], available))

    alloc = {domain: min(requested[domain], available[domain]) for domain in ALL_DOMAINS}
    deficit = target_count - sum(alloc.values())

    if deficit > 0:
        spare = sorted(ALL_DOMAINS, key=lambda d: available[d] - alloc[d], reverse=True)
        for domain in spare:
            if deficit <= 0:
                break
            extra = min(deficit, available[domain] - alloc[domain])
            if extra > 0:
                alloc[domain] += extra
                deficit -= extra

        if deficit > 0:
            logger.warning(f"Could not place {deficit} of {target_count} assessment questions")

    return alloc


def build_assessment(
    bank: QuestionBank,
    target_count: int,
    exclude: Iterable[str] = (),
    rng: random.Random = None
) -> List[Question]:
    """
    Sample a domain-balanced assessment.

    A question tagged with several domains is used at most once. The
    result is shuffled so domains are interleaved.
    """
    rng = rng or random.Random()
    questions = bank.all()
    excluded = set(exclude)
    distribution = calculate_domain_distribution(target_count, questions, excluded)

    selected: List[Question] = []
    used = set(excluded)
    for domain in ALL_DOMAINS:
        wanted = distribution[domain]
        if wanted <= 0:
            continue
        pool = [q for q in questions if domain in q.domains and q.id not in used]
        picked = rng.sample(pool, min(wanted, len(pool)))
        if len(picked) < wanted:
            logger.warning(f"Domain {domain}: wanted {wanted} questions, found {len(picked)}")
        selected.extend(picked)
        used.update(q.id for q in picked)

    rng.shuffle(selected)
    logger.info(f"Built assessment with {len(selected)}/{target_count} questions")
    return selected


def build_pre_assessment(
    bank: QuestionBank,
    per_domain: int = PRE_ASSESSMENT_PER_DOMAIN,
    exclude: Iterable[str] = (),
    rng: random.Random = None
) -> List[Question]:
    """Short diagnostic: the same number of questions from every domain."""
    rng = rng or random.Random()
    selected: List[Question] = []
    used = set(exclude)

    for domain in ALL_DOMAINS:
        pool = [q for q in bank.all() if domain in q.domains and q.id not in used]
        picked = rng.sample(pool, min(per_domain, len(pool)))
        selected.extend(picked)
        used.update(q.id for q in picked)

    rng.shuffle(selected)
    return selected


def build_full_assessment(
    bank: QuestionBank,
    exclude: Iterable[str] = (),
    rng: random.Random = None
) -> List[Question]:
    """Full-length practice exam."""
    return build_assessment(bank, FULL_ASSESSMENT_SIZE, exclude=exclude, rng=rng)
