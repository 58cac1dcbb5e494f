"""Tests for domain-balanced assessment building."""

import json
import random
from collections import Counter

from core.question_bank import QuestionBank
from teaching.assessment_builder import (
    FULL_ASSESSMENT_SIZE,
    build_assessment,
    build_full_assessment,
    build_pre_assessment,
    calculate_area_targets,
    calculate_domain_distribution,
    count_available,
)


def write_bank(directory, per_domain):
    """One single-domain question per slot, ids like D3-Q2."""
    questions = [
        {
            "id": f"D{domain}-Q{i}",
            "question": f"Domain {domain} question {i}",
            "choices": {"A": "a", "B": "b"},
            "correct_answer": ["A"],
            "domains": [domain]
        }
        for domain, count in per_domain.items()
        for i in range(count)
    ]
    path = directory / "bank.json"
    path.write_text(json.dumps({"questions": questions}), encoding="utf-8")
    return QuestionBank(str(path))


class TestAreaTargets:
    def test_full_length_exam(self):
        assert calculate_area_targets(125) == {
            "professional_practices": 40,
            "student_level": 29,
            "systems_level": 25,
            "foundations": 31,
        }

    def test_always_sums_to_target(self):
        for target in range(1, 130):
            assert sum(calculate_area_targets(target).values()) == target


class TestDomainDistribution:
    def test_even_bank(self, tmp_path):
        bank = write_bank(tmp_path, {d: 10 for d in range(1, 11)})
        distribution = calculate_domain_distribution(20, bank.all())
        assert distribution == {1: 3, 2: 3, 3: 3, 4: 2, 5: 1, 6: 2, 7: 1, 8: 2, 9: 2, 10: 1}

    def test_capped_domains_hand_off_their_share(self, tmp_path):
        per_domain = {d: 10 for d in range(1, 11)}
        per_domain[1] = per_domain[2] = 1
        bank = write_bank(tmp_path, per_domain)

        distribution = calculate_domain_distribution(20, bank.all())

        assert distribution[1] == 1
        assert distribution[2] == 1
        assert distribution[5] == 5
        assert sum(distribution.values()) == 20

    def test_small_bank_falls_short(self, tmp_path):
        bank = write_bank(tmp_path, {1: 2, 4: 1})
        distribution = calculate_domain_distribution(20, bank.all())
        assert distribution[1] == 2
        assert distribution[4] == 1
        assert sum(distribution.values()) == 3

    def test_exclusions_reduce_availability(self, tmp_path):
        bank = write_bank(tmp_path, {1: 3, 2: 3})
        available = count_available(bank.all(), exclude=["D1-Q0", "D1-Q1"])
        assert available[1] == 1
        assert available[2] == 3

    def test_multi_domain_questions_count_everywhere(self, bank):
        available = count_available(bank.all())
        assert sum(available.values()) >= len(bank)


class TestBuildAssessment:
    def test_follows_distribution(self, tmp_path):
        bank = write_bank(tmp_path, {d: 10 for d in range(1, 11)})
        questions = build_assessment(bank, 20, rng=random.Random(5))

        assert len(questions) == 20
        counts = Counter(q.domains[0] for q in questions)
        assert counts == Counter({1: 3, 2: 3, 3: 3, 4: 2, 5: 1, 6: 2, 7: 1, 8: 2, 9: 2, 10: 1})

    def test_skips_excluded_questions(self, tmp_path):
        bank = write_bank(tmp_path, {d: 3 for d in range(1, 11)})
        excluded = [f"D{d}-Q0" for d in range(1, 11)]

        questions = build_assessment(bank, 20, exclude=excluded, rng=random.Random(2))

        assert len(questions) == 20
        assert not {q.id for q in questions} & set(excluded)

    def test_multi_domain_questions_used_once(self, bank):
        questions = build_assessment(bank, 30, rng=random.Random(9))
        ids = [q.id for q in questions]
        assert len(ids) == len(set(ids))
        assert len(ids) <= len(bank)

    def test_full_assessment_is_capped_by_bank(self, bank):
        assert FULL_ASSESSMENT_SIZE == 125
        assert len(build_full_assessment(bank, rng=random.Random(4))) <= len(bank)


class TestPreAssessment:
    def test_two_per_domain(self, tmp_path):
        bank = write_bank(tmp_path, {d: 5 for d in range(1, 11)})
        questions = build_pre_assessment(bank, rng=random.Random(8))

        assert len(questions) == 20
        assert set(Counter(q.domains[0] for q in questions).values()) == {2}

    def test_thin_domains_give_what_they_have(self, tmp_path):
        bank = write_bank(tmp_path, {1: 5, 2: 1})
        questions = build_pre_assessment(bank, rng=random.Random(8))
        assert Counter(q.domains[0] for q in questions) == Counter({1: 2, 2: 1})
