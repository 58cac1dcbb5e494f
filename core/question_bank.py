"""
Question Bank - Loads exam questions and answers structural questions about them.

Questions are multiple choice (2-4 options) and may be multi-select; an
answer is correct only when the selected letters equal the correct set.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from loguru import logger


@dataclass
class Question:
    """A single exam question."""
    id: str
    question: str
    choices: Dict[str, str]
    correct_answer: List[str]
    rationale: str = ""
    skill_id: Optional[str] = None
    dok: Optional[int] = None
    framework_type: Optional[str] = None
    framework_step: Optional[str] = None
    domains: List[int] = field(default_factory=list)

    def text_for(self, letters: Iterable[str]) -> str:
        """Join the choice texts for a set of letters."""
        return " ".join(self.choices.get(letter, "") for letter in letters)

    @property
    def correct_text(self) -> str:
        return self.text_for(self.correct_answer)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "question": self.question,
            "choices": dict(self.choices),
            "correct_answer": list(self.correct_answer),
            "rationale": self.rationale,
            "skill_id": self.skill_id,
            "dok": self.dok,
            "framework_type": self.framework_type,
            "framework_step": self.framework_step,
            "domains": list(self.domains)
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Question":
        return cls(
            id=data["id"],
            question=data.get("question", ""),
            choices=dict(data.get("choices", {})),
            correct_answer=list(data.get("correct_answer", [])),
            rationale=data.get("rationale", ""),
            skill_id=data.get("skill_id"),
            dok=data.get("dok"),
            framework_type=data.get("framework_type"),
            framework_step=data.get("framework_step"),
            domains=list(data.get("domains", []))
        )


class QuestionBank:
    """In-memory question catalog keyed by question id."""

    def __init__(self, path: str = None):
        if path is None:
            from config import QUESTION_BANK_PATH
            path = QUESTION_BANK_PATH

        self.path = Path(path)
        self.questions: Dict[str, Question] = {}
        self._load()

    def _load(self):
        if not self.path.exists():
            logger.warning(f"Question bank not found: {self.path}")
            return

        with open(self.path, 'r', encoding="utf-8") as f:
            data = json.load(f)

        for item in data.get("questions", []):
            question = Question.from_dict(item)
            if not question.domains:
                question.domains = analyze_question(question)["domains"]
            self.questions[question.id] = question

        logger.debug(f"Loaded {len(self.questions)} questions from {self.path.name}")

    def get(self, question_id: str) -> Optional[Question]:
        return self.questions.get(question_id)

    def all(self) -> List[Question]:
        return list(self.questions.values())

    def for_skill(self, skill_id: str) -> List[Question]:
        return [q for q in self.questions.values() if q.skill_id == skill_id]

    def __len__(self):
        return len(self.questions)

    @staticmethod
    def is_correct(question: Question, selected: Iterable[str]) -> bool:
        """Selected letters must equal the correct set exactly."""
        return set(selected) == set(question.correct_answer)


# ==================== Structural Analysis ====================

DOMAIN_KEYWORDS = {
    1: ["reliability", "validity", "assessment", "data", "cbm", "screening",
        "progress monitoring", "measurement", "psychometric"],
    2: ["consultation", "collaborate", "consultee", "indirect"],
    3: ["academic", "intervention", "reading", "math", "instruction", "tier 2",
        "tier 3", "learning disability"],
    4: ["behavior", "mental health", "counseling", "fba", "bip", "anxiety",
        "depression", "suicide", "social-emotional"],
    5: ["school-wide", "pbis", "mtss", "rti", "universal", "tier 1", "climate"],
    6: ["crisis", "threat", "safety", "prevention", "responsive"],
    7: ["family", "parent", "home-school", "caregiver"],
    8: ["cultural", "diversity", "bias", "equity", "ell", "multicultural", "disproportional"],
    9: ["research", "meta-analysis", "effect size", "statistical", "study", "evidence-based"],
    10: ["ethical", "legal", "confidential", "idea", "ferpa", "court case", "nasp",
         "mandated", "tarasoff"],
}

SCENARIO_INDICATORS = ["school psychologist", "teacher", "student", "parent", "dr."]


def analyze_question(question: Question) -> dict:
    """
    Derive domains, stem type, question type, a DOK estimate and key concepts.

    Returns:
        {
            "domains": [1, 4],
            "stem_type": "First Step",
            "question_type": "Scenario-Based",
            "dok": 3,
            "key_concepts": ["behavior", "data"]
        }
    """
    text = question.question.lower()
    rationale = (question.rationale or "").lower()

    domains = []
    key_concepts = []
    for domain_id, keywords in DOMAIN_KEYWORDS.items():
        hits = [kw for kw in keywords if kw in text or kw in rationale]
        if hits:
            domains.append(domain_id)
            key_concepts.extend(hits)

    if not domains:
        domains.append(1)

    is_scenario = any(ind in text for ind in SCENARIO_INDICATORS) and len(question.question) > 150

    if "first step" in text or "should first" in text:
        stem_type = "First Step"
    elif "most appropriate" in text:
        stem_type = "Most Appropriate"
    elif "best example" in text:
        stem_type = "Best Example"
    elif "best describes" in text:
        stem_type = "Best Description"
    elif "which of the following is the best" in text:
        stem_type = "Best Answer"
    else:
        stem_type = "Other"

    dok = 2
    if stem_type == "First Step" or is_scenario:
        dok = 3
    if "definition" in text or "which of the following is" in text:
        dok = 1

    return {
        "domains": domains,
        "stem_type": stem_type,
        "question_type": "Scenario-Based" if is_scenario else "Direct Knowledge",
        "dok": dok,
        "key_concepts": key_concepts
    }
