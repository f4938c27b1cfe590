"""
Mock Interviewer - FastAPI Backend

Walks a candidate through greeting, background, knowledge/MCQ and
coding/scenario stages, scores answers with an LLM evaluator and produces
candidate and recruiter reports.

Compatible with OpenAI / Azure OpenAI chat completions APIs.
"""
import sys
import os
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from utils.config import config
from models.schemas import (
    AnswerRequest,
    ConversationTurn,
    ExperienceLevel,
    GeneratedQuestion,
    QuestionKind,
    StartInterviewRequest,
)
from interview.orchestrator import InterviewOrchestrator
from interview.stages import InterviewStages
from interview.scoring import get_blend
from interview.agents import AgentController, EvaluationError, TurnResult

logger = logging.getLogger(__name__)

# ================================================================
# FastAPI App Initialization
# ================================================================

app = FastAPI(
    title="Mock Interviewer API",
    description="Stage-driven mock interviews with LLM questions, scoring and reports",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.server.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

agent_controller = AgentController()

# ================================================================
# Session Management
# ================================================================


@dataclass
class ActiveInterview:
    """An orchestrator plus the transcript the API keeps next to it."""
    orchestrator: InterviewOrchestrator
    history: List[ConversationTurn] = field(default_factory=list)
    last_question: Optional[GeneratedQuestion] = None
    ended: bool = False
    reports: Optional[Dict[str, str]] = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def ask(self, question: GeneratedQuestion) -> None:
        self.last_question = question
        self.history.append(ConversationTurn(
            role="interviewer",
            content=question.text,
            stage=question.stage,
            kind=question.kind,
            metadata={"skill": question.skill, "fallback": question.is_fallback},
        ))


# One orchestrator per session id; no state is shared between sessions
_sessions: Dict[str, ActiveInterview] = {}


def get_session(session_id: str) -> ActiveInterview:
    """Look up an interview session."""
    active = _sessions.get(session_id)
    if active is None:
        raise HTTPException(status_code=404, detail=f"Unknown interview session '{session_id}'")
    return active


def create_session(request: StartInterviewRequest) -> ActiveInterview:
    """Create a new interview session from the start request."""
    interview_config = config.interview
    try:
        stages = InterviewStages.get_pipeline(
            request.pipeline or interview_config.pipeline,
            limits=interview_config.stage_limits,
            randomize=interview_config.randomize_limits,
        )
        blend = get_blend(interview_config.score_blend) if interview_config.score_blend else None
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    orchestrator = InterviewOrchestrator(
        topic=request.topic.strip(),
        skills=request.skills,
        stages=stages,
        non_coding_topics=interview_config.non_coding_topics or None,
        experience_level=ExperienceLevel.parse(request.experience_level),
        blend=blend,
        skip_sentinel=interview_config.skip_sentinel,
        min_answer_length=interview_config.min_answer_length,
    )
    active = ActiveInterview(orchestrator=orchestrator)
    _sessions[orchestrator.session_id] = active
    return active


def _question_payload(question: Optional[GeneratedQuestion]) -> Optional[Dict[str, Any]]:
    if question is None:
        return None
    return question.model_dump(mode="json", exclude_none=True)


def _turn_payload(active: ActiveInterview, result: TurnResult) -> Dict[str, Any]:
    orchestrator = active.orchestrator
    return {
        "session_id": orchestrator.session_id,
        "answered_stage": result.answered_stage.value,
        "stage": orchestrator.current_state().value,
        "current_skill": orchestrator.current_skill(),
        "experience_level": orchestrator.experience_level.value,
        "score": result.score.model_dump() if result.score else None,
        "follow_up": result.follow_up.value,
        "question": _question_payload(result.question),
        "interview_ended": result.interview_ended,
    }


async def _submit(session_id: str, answer: str) -> Dict[str, Any]:
    active = get_session(session_id)

    async with active.lock:
        if active.ended:
            raise HTTPException(status_code=409, detail="Interview has ended. Request the report instead.")

        orchestrator = active.orchestrator
        question = active.last_question
        skipped = not answer.strip() or answer == orchestrator.skip_sentinel
        if skipped:
            answer = orchestrator.skip_sentinel

        turn = ConversationTurn(
            role="candidate",
            content=answer,
            stage=orchestrator.current_state(),
            kind=question.kind if question else QuestionKind.REGULAR,
            metadata={"skipped": skipped},
        )
        history = active.history + [turn]

        try:
            result = await asyncio.to_thread(
                agent_controller.process_answer,
                orchestrator,
                history,
                question.text if question else "",
                answer,
            )
        except EvaluationError as e:
            logger.warning(f"[{session_id}] {e}")
            raise HTTPException(
                status_code=503,
                detail="The answer could not be evaluated right now. Please submit it again.",
            )

        active.history = history
        if result.interview_ended:
            active.ended = True
            active.last_question = None
        else:
            active.ask(result.question)

        return _turn_payload(active, result)


# ================================================================
# API Endpoints
# ================================================================

@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "running",
        "version": "1.0.0",
        "service": "Mock Interviewer",
        "active_sessions": len(_sessions),
    }


@app.get("/pipelines")
async def list_pipelines():
    """Stage pipelines available to /start-interview."""
    return InterviewStages.get_all_pipelines_info()


@app.post("/start-interview")
async def start_interview(request: StartInterviewRequest):
    """
    Start a new interview session.

    Returns:
        Session info with the opening question
    """
    active = create_session(request)
    orchestrator = active.orchestrator

    greeting = agent_controller.opening_question(orchestrator)
    active.ask(greeting)

    return {
        "status": "Interview started",
        "session_id": orchestrator.session_id,
        "topic": orchestrator.topic,
        "skills": orchestrator.skills,
        "stage": orchestrator.current_state().value,
        "experience_level": orchestrator.experience_level.value,
        "question": _question_payload(greeting),
        "stages": [s.value for s in orchestrator.stage_order],
    }


@app.post("/interviews/{session_id}/answer")
async def submit_answer(session_id: str, request: AnswerRequest):
    """Submit the candidate's answer to the current question."""
    return await _submit(session_id, request.answer)


@app.post("/interviews/{session_id}/skip")
async def skip_question(session_id: str):
    """Skip the current question."""
    return await _submit(session_id, "")


@app.get("/interviews/{session_id}/status")
async def get_interview_status(session_id: str):
    """Current stage, skill and progress."""
    active = get_session(session_id)
    status = active.orchestrator.get_status()
    status["is_ended"] = active.ended
    status["question"] = _question_payload(active.last_question)
    status["averages"] = active.orchestrator.compute_averages().model_dump()
    return status


@app.post("/interviews/{session_id}/end")
async def end_interview(session_id: str):
    """End the interview early."""
    active = get_session(session_id)
    async with active.lock:
        active.orchestrator.end_interview()
        active.ended = True
        active.last_question = None

    orchestrator = active.orchestrator
    duration = None
    if orchestrator.end_time:
        duration = (orchestrator.end_time - orchestrator.start_time).total_seconds() / 60

    return {
        "status": "Interview ended",
        "message": "Interview terminated. You can request the report.",
        "duration_minutes": round(duration, 1) if duration is not None else None,
        "total_answers": orchestrator.total_answers,
    }


@app.get("/interviews/{session_id}/report")
async def get_interview_report(session_id: str):
    """
    Generate the candidate and recruiter reports.
    Reports are generated once per session and cached.
    """
    active = get_session(session_id)
    async with active.lock:
        if not active.ended:
            raise HTTPException(status_code=409, detail="Interview is still in progress.")

        if active.reports is None:
            active.reports = await agent_controller.generate_reports(active.orchestrator, active.history)

    orchestrator = active.orchestrator
    return {
        "session_id": orchestrator.session_id,
        "topic": orchestrator.topic,
        "experience_level": orchestrator.experience_level.value,
        "averages": orchestrator.compute_averages().model_dump(),
        "reports": active.reports,
        "session": orchestrator.to_session().model_dump(mode="json"),
        "transcript": [turn.model_dump(mode="json") for turn in active.history],
    }


@app.get("/interviews")
async def list_interviews():
    """All sessions held by this process."""
    return [
        {
            "session_id": session_id,
            "topic": active.orchestrator.topic,
            "stage": active.orchestrator.current_state().value,
            "is_ended": active.ended,
            "final_score": active.orchestrator.compute_averages().final_score,
            "has_report": active.reports is not None,
        }
        for session_id, active in _sessions.items()
    ]


@app.delete("/interviews/{session_id}")
async def reset_interview(session_id: str):
    """Discard an interview session."""
    get_session(session_id)
    del _sessions[session_id]
    return {"status": "Interview reset successfully"}


# ================================================================
# Main Entry Point
# ================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.server.host, port=config.server.port)
