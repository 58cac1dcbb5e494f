"""
FastAPI Backend for Praxis Coach - exam practice with diagnostic feedback.

Every answer goes through the same pipeline:
    - LearningStateModel: update the skill record, then re-evaluate dependent skills
    - DiagnosticFeedbackEngine: explain WHY a wrong choice was tempting
    - Weakness detection: refresh the learner's weakest domains
    - LearnerStore: persist records and the response log in Redis
"""

import time
from typing import Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, Field

from config import API_HOST, API_PORT, setup_logging
from core.distractor_matcher import get_distractor_pattern_matches, match_distractor_pattern
from core.distractor_patterns import get_pattern
from core.learning_state import LearningStateModel, ResponseEvent
from core.question_bank import QuestionBank
from core.skill_map import SkillMap
from redis_store import LearnerStore
from teaching.assessment_builder import build_assessment, build_pre_assessment
from teaching.diagnostic_feedback import DiagnosticFeedbackEngine, format_feedback_for_display
from teaching.question_selector import QuestionSelector
from teaching.weakness_detector import detect_weaknesses, get_weakest_skills, summarize_progress

setup_logging()

# ==================== Initialize ====================

app = FastAPI(
    title="Praxis Coach API",
    description="Skill tracking and diagnostic feedback for school psychology exam prep",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize shared components
skill_map = SkillMap()
bank = QuestionBank()
state_model = LearningStateModel(skill_map)
feedback_engine = DiagnosticFeedbackEngine(skill_map, state_model)
selector = QuestionSelector(bank)
store = LearnerStore()


# ==================== Request/Response Models ====================

class AnswerRequest(BaseModel):
    learner_id: str = Field(..., min_length=1)
    question_id: str
    selected: List[str] = Field(..., min_length=1)
    confidence: Literal["low", "medium", "high"] = "medium"
    time_spent: float = Field(0.0, ge=0)


class AnswerResponse(BaseModel):
    learner_id: str
    question_id: str
    is_correct: bool
    correct_answer: List[str]
    rationale: str
    skill_id: Optional[str] = None
    learning_state: Optional[str] = None
    state_transitioned: bool = False
    feedback: dict
    formatted: str


class DistractorMatchRequest(BaseModel):
    selected_text: str
    correct_answer: Optional[str] = None


class AssessmentRequest(BaseModel):
    kind: Literal["pre", "full"] = "pre"
    question_count: int = Field(125, ge=1, le=200)


class GraphStateResponse(BaseModel):
    nodes: list
    edges: list


# ==================== Helper Functions ====================

def question_payload(question) -> dict:
    """Question as shown to a learner (no answer key)."""
    return {
        "id": question.id,
        "question": question.question,
        "choices": question.choices,
        "skill_id": question.skill_id,
        "dok": question.dok,
        "multi_select": len(question.correct_answer) > 1
    }


# ==================== Core Endpoints ====================

@app.get("/")
def root():
    return {
        "status": "ok",
        "message": "Praxis Coach API is running",
        "version": "1.0.0",
        "catalog": {
            "skills": len(skill_map.skills),
            "domains": len(skill_map.domains),
            "questions": len(bank)
        }
    }


@app.get("/skills")
def list_skills():
    """All skills, prerequisites first."""
    return {
        "skills": [
            {
                "id": skill.skill_id,
                "name": skill.name,
                "domain_id": skill.domain_id,
                "prerequisites": skill.prerequisites
            }
            for skill in (skill_map.get_skill(s) for s in skill_map.get_all_skills())
        ],
        "stats": skill_map.get_stats()
    }


@app.get("/skills/{skill_id}")
def get_skill(skill_id: str):
    skill = skill_map.get_skill(skill_id)
    if skill is None:
        raise HTTPException(status_code=404, detail="Skill not found")

    return {
        "id": skill.skill_id,
        "name": skill.name,
        "description": skill.description,
        "domain_id": skill.domain_id,
        "cluster_id": skill.cluster_id,
        "decision_rule": skill.decision_rule,
        "common_wrong_rules": skill.common_wrong_rules,
        "dok_range": list(skill.dok_range),
        "prerequisites": skill_map.get_prerequisites(skill_id),
        "unlocks": skill_map.get_dependents(skill_id),
        "question_ids": [q.id for q in bank.for_skill(skill_id)]
    }


@app.get("/questions/{question_id}")
def get_question(question_id: str):
    question = bank.get(question_id)
    if question is None:
        raise HTTPException(status_code=404, detail="Question not found")
    return question_payload(question)


@app.post("/answer", response_model=AnswerResponse)
def submit_answer(request: AnswerRequest):
    """Grade an answer, update the learner's skill record and explain the result."""
    question = bank.get(request.question_id)
    if question is None:
        raise HTTPException(status_code=404, detail="Question not found")

    unknown = [letter for letter in request.selected if letter not in question.choices]
    if unknown:
        raise HTTPException(status_code=422, detail=f"Unknown choices: {', '.join(unknown)}")

    profile = store.load_profile(request.learner_id)
    is_correct = bank.is_correct(question, request.selected)
    now = time.time()

    learning_state = None
    transitioned = False
    if question.skill_id:
        record, transitioned = state_model.record_attempt(
            profile,
            question.skill_id,
            is_correct,
            question_id=question.id,
            confidence=request.confidence,
            time_spent=request.time_spent,
            now=now
        )
        # Dependents of this skill may gain or lose their prerequisite
        state_model.refresh_states(profile)
        learning_state = record.learning_state.value

    feedback = feedback_engine.generate(question, request.selected, is_correct, profile)

    wrong = next((l for l in request.selected if l not in question.correct_answer), None)
    event = ResponseEvent(
        question_id=question.id,
        selected_answers=list(request.selected),
        correct_answers=list(question.correct_answer),
        is_correct=is_correct,
        confidence=request.confidence,
        time_spent=request.time_spent,
        timestamp=now,
        skill_id=question.skill_id,
        distractor_letter=wrong if not is_correct else None,
        distractor_pattern_id=feedback.pattern_id
    )
    store.record_response(request.learner_id, event)

    selector.remember(profile, question.id)
    analysis = detect_weaknesses(store.get_responses(request.learner_id), bank.questions)
    profile.weakest_domains = analysis["weakest_domains"]
    store.save_profile(profile)

    logger.info(
        f"{request.learner_id} answered {question.id}: "
        f"{'correct' if is_correct else 'wrong'} ({feedback.pattern_id or 'no pattern'})"
    )

    return AnswerResponse(
        learner_id=request.learner_id,
        question_id=question.id,
        is_correct=is_correct,
        correct_answer=question.correct_answer,
        rationale=question.rationale,
        skill_id=question.skill_id,
        learning_state=learning_state,
        state_transitioned=transitioned,
        feedback=feedback.to_dict(),
        formatted=format_feedback_for_display(feedback)
    )


# ==================== Learner Endpoints ====================

@app.get("/learners/{learner_id}/progress")
def get_progress(learner_id: str):
    """Skill records, state counts and weaknesses for a learner."""
    if not store.learner_exists(learner_id):
        raise HTTPException(status_code=404, detail="Learner not found")

    profile = store.load_profile(learner_id)
    state_model.refresh_states(profile)
    analysis = detect_weaknesses(store.get_responses(learner_id), bank.questions)

    return {
        "learner_id": learner_id,
        "summary": summarize_progress(profile),
        "skills": {sid: perf.to_dict() for sid, perf in profile.skill_scores.items()},
        "weakest_skills": get_weakest_skills(profile),
        "weakest_domains": analysis["weakest_domains"],
        "domain_scores": analysis["domain_scores"],
        "factual_gaps": analysis["factual_gaps"],
        "error_patterns": analysis["error_patterns"],
        "questions_answered": store.get_questions_answered(learner_id)
    }


@app.get("/learners/{learner_id}/next-question")
def next_question(learner_id: str, seen: List[str] = Query(default=[])):
    """Pick the next practice question; works for brand-new learners too."""
    profile = store.load_profile(learner_id)
    question = selector.select_next(profile, session_history=seen)
    if question is None:
        raise HTTPException(status_code=404, detail="Question bank is empty")
    return question_payload(question)


@app.get("/learners/{learner_id}/skills/{skill_id}")
def get_learner_skill(learner_id: str, skill_id: str):
    """One skill record plus what still blocks its mastery."""
    if skill_map.get_skill(skill_id) is None:
        raise HTTPException(status_code=404, detail="Skill not found")

    performance = store.get_skill_performance(learner_id, skill_id)
    if performance is None:
        raise HTTPException(status_code=404, detail="No attempts recorded for this skill")

    profile = store.load_profile(learner_id)
    return {
        "learner_id": learner_id,
        "skill_id": skill_id,
        "performance": performance.to_dict(),
        "missing_prerequisites": state_model.get_missing_prerequisites(skill_id, profile.skill_scores.get)
    }


@app.post("/learners/{learner_id}/assessment")
def create_assessment(learner_id: str, request: AssessmentRequest):
    """
    Build a domain-balanced assessment and reserve its questions.

    Reserved questions are kept out of adaptive practice until the next
    assessment replaces them.
    """
    profile = store.load_profile(learner_id)
    if request.kind == "pre":
        questions = build_pre_assessment(bank)
    else:
        questions = build_assessment(bank, request.question_count)

    if not questions:
        raise HTTPException(status_code=404, detail="Question bank is empty")

    profile.assessment_question_ids = [q.id for q in questions]
    store.save_profile(profile)
    logger.info(f"{learner_id}: {request.kind} assessment with {len(questions)} questions")

    return {
        "learner_id": learner_id,
        "kind": request.kind,
        "questions": [question_payload(q) for q in questions]
    }


@app.delete("/learners/{learner_id}")
def delete_learner(learner_id: str):
    """Delete a learner's records and response log."""
    store.delete_learner(learner_id)
    return {"status": "deleted", "learner_id": learner_id}


# ==================== Graph & Pattern Endpoints ====================

@app.get("/skill-graph/{learner_id}", response_model=GraphStateResponse)
def get_skill_graph(learner_id: str):
    """Prerequisite graph colored by the learner's states (emerging if unknown)."""
    profile = store.load_profile(learner_id)
    state_model.refresh_states(profile)
    states: Dict[str, str] = {sid: p.learning_state.value for sid, p in profile.skill_scores.items()}
    viz = skill_map.get_graph_visualization(states)
    return GraphStateResponse(nodes=viz["nodes"], edges=viz["edges"])


@app.post("/distractors/match")
def match_distractor(request: DistractorMatchRequest):
    """Classify a wrong-answer text against the misconception patterns."""
    pattern_id = match_distractor_pattern(request.selected_text, request.correct_answer)
    pattern = get_pattern(pattern_id) if pattern_id else None

    return {
        "pattern_id": pattern_id,
        "name": pattern.name if pattern else None,
        "explanation": pattern.feedback_explanation if pattern else None,
        "candidates": [
            {"pattern_id": pid, "confidence": conf}
            for pid, conf in get_distractor_pattern_matches(request.selected_text, request.correct_answer)
        ]
    }


# ==================== Run Server ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.main:app", host=API_HOST, port=API_PORT, reload=True)
