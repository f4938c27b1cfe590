"""
Pydantic schemas and enumerations shared across the interviewer backend.
"""
from datetime import datetime
from enum import Enum
from typing import List, Dict, Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class InterviewStage(str, Enum):
    """Stages an interview can be in."""
    GREETING = "greeting"
    BACKGROUND = "background"
    KNOWLEDGE = "knowledge"
    MCQ = "mcq"
    CODING = "coding"
    SCENARIO = "scenario"
    BEHAVIORAL = "behavioral"
    WRAPUP = "wrapup"


class QuestionKind(str, Enum):
    """Shape of the content the candidate is asked to respond to."""
    REGULAR = "regular"
    MCQ = "mcq"
    CODING = "coding"

    @classmethod
    def for_stage(cls, stage: InterviewStage) -> "QuestionKind":
        if stage == InterviewStage.MCQ:
            return cls.MCQ
        if stage == InterviewStage.CODING:
            return cls.CODING
        return cls.REGULAR


class ExperienceLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ExperienceLevel"]:
        """Accept level names or the year ranges shown on the start screen."""
        if not value:
            return None
        ranges = {"0-2": cls.BEGINNER, "2-4": cls.INTERMEDIATE, "4-6": cls.ADVANCED}
        if value in ranges:
            return ranges[value]
        for level in cls:
            if level.value.lower() == value.strip().lower():
                return level
        return None


class FollowUpType(str, Enum):
    """Phrasing hint passed to the question generator after an evaluation."""
    CLARIFY = "clarify"
    PROBE = "probe"
    DEEPEN = "deepen"
    NONE = "none"


class ReportAudience(str, Enum):
    CANDIDATE = "candidate"
    RECRUITER = "recruiter"


class ScoreTriple(BaseModel):
    """Evaluator output for a single answer, each dimension on a 0-3 scale."""
    model_config = ConfigDict(populate_by_name=True)

    technical: float = Field(0, alias="tech")
    problem_solving: float = Field(0, alias="problem")
    communication: float = Field(0, alias="comm")
    evaluation_text: str = ""


class ScoreAverages(BaseModel):
    avg_technical: float = 0
    avg_problem_solving: float = 0
    avg_communication: float = 0
    final_score: float = 0
    answers_scored: int = 0


class AnswerRecord(BaseModel):
    """A submitted answer as seen by the orchestrator."""
    text: str
    stage: InterviewStage
    well_answered: bool
    question: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.now)


class ConversationTurn(BaseModel):
    """A single turn in the interview transcript."""
    role: str  # "interviewer" or "candidate"
    content: str
    stage: InterviewStage
    kind: QuestionKind = QuestionKind.REGULAR
    timestamp: datetime = Field(default_factory=datetime.now)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class McqQuestion(BaseModel):
    question: str
    code: str = ""
    options: List[str] = Field(default_factory=list)


class CodingQuestion(BaseModel):
    problem: str
    language: str = ""
    boilerplate: str = ""


class GeneratedQuestion(BaseModel):
    """Question text plus the structured view the UI renders."""
    text: str
    stage: InterviewStage
    kind: QuestionKind
    skill: str
    mcq: Optional[McqQuestion] = None
    coding: Optional[CodingQuestion] = None
    is_fallback: bool = False


class InterviewSession(BaseModel):
    """Snapshot of an orchestrator for status endpoints and persistence."""
    session_id: str
    topic: str
    skills: List[str]
    stage: InterviewStage
    stage_order: List[InterviewStage]
    stage_counters: Dict[InterviewStage, int]
    stage_limits: Dict[InterviewStage, int]
    skill_cursor: int
    current_skill: str
    experience_level: ExperienceLevel
    experience_inferred: bool
    coding_skipped: bool
    total_answers: int
    well_answered: int
    answer_log: List[AnswerRecord]
    score_log: List[ScoreTriple]
    averages: ScoreAverages
    start_time: datetime
    end_time: Optional[datetime] = None


# ========================================
# API request models
# ========================================

class StartInterviewRequest(BaseModel):
    topic: str = Field(..., min_length=1)
    skills: List[str] = Field(default_factory=list)
    experience_level: Optional[str] = None
    pipeline: Optional[str] = None


class AnswerRequest(BaseModel):
    answer: str = ""
