"""
Interview orchestrator: the per-session state machine.
Decides which stage comes next, infers the experience level once the
background stage closes, rotates through the candidate's skills and
aggregates evaluator scores.
"""
import logging
import random
import uuid
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Any

from models.schemas import (
    AnswerRecord,
    ExperienceLevel,
    InterviewSession,
    InterviewStage,
    ScoreAverages,
    ScoreTriple,
)
from interview.scoring import ScoreAggregator, ScoreBlend, THREE_TERM, TWO_TERM
from interview.stages import InterviewStages, StageSpec
from interview.topics import NON_CODING_TOPICS, is_non_coding

logger = logging.getLogger(__name__)

SKIP_SENTINEL = "Skipped"
MIN_ANSWER_LENGTH = 20

ExitHook = Callable[["InterviewOrchestrator"], None]


class InterviewOrchestrator:
    """
    Owns interview progression for one session.

    The orchestrator is synchronous and performs no I/O. ``advance`` must be
    called exactly once per submitted answer, after any request that needs
    the pre-transition stage or skill has been issued.
    """

    def __init__(
        self,
        topic: str,
        skills: Optional[Sequence[str]] = None,
        stages: Optional[List[StageSpec]] = None,
        non_coding_topics: Optional[Sequence[str]] = None,
        experience_level: Optional[ExperienceLevel] = None,
        blend: Optional[ScoreBlend] = None,
        skip_sentinel: str = SKIP_SENTINEL,
        min_answer_length: int = MIN_ANSWER_LENGTH,
        rng: Optional[random.Random] = None,
        session_id: Optional[str] = None,
    ):
        """
        Initialize a new interview session.

        Args:
            topic: Fallback subject when no skills are supplied
            skills: Rotation pool of subjects, usually from the resume
            stages: Ordered stage specs; the standard pipeline by default
            non_coding_topics: Subjects for which the coding stage is skipped
            experience_level: Level used until background inference overrides it
            blend: Weighting for the final score; picked from the pipeline when None
            skip_sentinel: Literal answer text submitted for skipped questions
            min_answer_length: Characters needed for a well-answered response
            rng: Random source for stages with a limit band
            session_id: Optional existing session ID
        """
        self.session_id = session_id or f"session-{uuid.uuid4().hex[:12]}"
        self.topic = topic
        self.skills: List[str] = [s.strip() for s in (skills or []) if s and s.strip()] or [topic]

        self.stage_specs = list(stages) if stages else InterviewStages.get_pipeline()
        InterviewStages.validate(self.stage_specs)
        self.stage_order = [spec.stage for spec in self.stage_specs]
        self._specs: Dict[InterviewStage, StageSpec] = {spec.stage: spec for spec in self.stage_specs}

        rng = rng or random.Random()
        self.stage_limits: Dict[InterviewStage, int] = {
            spec.stage: spec.resolve_limit(rng) for spec in self.stage_specs if spec.repeatable
        }
        self.stage_counters: Dict[InterviewStage, int] = {stage: 0 for stage in self.stage_limits}

        self.non_coding_topics = list(non_coding_topics or NON_CODING_TOPICS)
        self.skip_sentinel = skip_sentinel
        self.min_answer_length = min_answer_length

        if blend is None:
            blend = THREE_TERM if InterviewStages.has_problem_solving(self.stage_specs) else TWO_TERM
        self.scores = ScoreAggregator(blend)

        # Progression
        self.stage = InterviewStage.GREETING
        self.skill_cursor = 0
        self.coding_skipped = False

        # Answer bookkeeping
        self.answer_log: List[AnswerRecord] = []
        self.background_responses: List[str] = []
        self.total_answers = 0
        self.well_answered_count = 0
        self._pending_question: Optional[str] = None
        self._closing_recorded = False

        # Experience level
        self._fallback_level = experience_level or ExperienceLevel.BEGINNER
        self._inferred_level: Optional[ExperienceLevel] = None

        # Timing
        self.start_time = datetime.now()
        self.end_time: Optional[datetime] = None

        self._exit_hooks: Dict[InterviewStage, List[ExitHook]] = {}
        self.on_stage_exit(InterviewStage.BACKGROUND, InterviewOrchestrator._freeze_experience_level)
        if self.stage_limits.get(InterviewStage.CODING, 0) > 0:
            gate = self._coding_gate()
            if gate is None:
                self._decide_coding_stage()
            else:
                self.on_stage_exit(gate, InterviewOrchestrator._decide_coding_stage)

    # ========================================
    # Accessors
    # ========================================

    def current_state(self) -> InterviewStage:
        return self.stage

    def current_skill(self) -> str:
        return self.skills[self.skill_cursor % len(self.skills)]

    @property
    def experience_level(self) -> ExperienceLevel:
        """Inferred level once background has closed, the fallback before."""
        return self._inferred_level or self._fallback_level

    @property
    def experience_inferred(self) -> bool:
        return self._inferred_level is not None

    @property
    def is_complete(self) -> bool:
        return self.stage == InterviewStage.WRAPUP

    @property
    def score_log(self) -> List[ScoreTriple]:
        return self.scores.triples

    def stage_spec(self, stage: Optional[InterviewStage] = None) -> StageSpec:
        return self._specs[stage or self.stage]

    def is_scored_stage(self, stage: Optional[InterviewStage] = None) -> bool:
        return self.stage_spec(stage).scored

    # ========================================
    # Transitions
    # ========================================

    def on_stage_exit(self, stage: InterviewStage, hook: ExitHook) -> None:
        """Register a one-time side effect for leaving ``stage``."""
        self._exit_hooks.setdefault(stage, []).append(hook)

    def advance(self, answer_text: Optional[str], history: Optional[Sequence[Any]] = None) -> Optional[InterviewStage]:
        """
        Record an answer and move the interview forward.

        Args:
            answer_text: The candidate's answer; may be empty or the skip sentinel
            history: Full transcript. Accepted for context only; progression
                comes from the orchestrator's own counters.

        Returns:
            The stage the next question belongs to, or None once in wrapup
        """
        if self.stage == InterviewStage.WRAPUP:
            # Only the closing answer is kept; counters and the skill cursor stay put
            if not self._closing_recorded:
                self._record_answer(answer_text or "")
                self._closing_recorded = True
            return None

        if self.stage == InterviewStage.GREETING:
            return self._enter(self._next_stage(InterviewStage.GREETING))

        self._record_answer(answer_text or "")

        stage = self.stage
        self.stage_counters[stage] += 1
        self.skill_cursor += 1

        if self.stage_counters[stage] < self.stage_limits[stage]:
            return stage

        for hook in self._exit_hooks.get(stage, []):
            hook(self)
        return self._enter(self._next_stage(stage))

    def end_interview(self) -> None:
        """Jump straight to wrapup without recording anything."""
        if self.stage != InterviewStage.WRAPUP:
            logger.info(f"[{self.session_id}] Interview ended early in stage {self.stage.value}")
            self._enter(InterviewStage.WRAPUP)
            self._closing_recorded = True

    def _next_stage(self, current: InterviewStage) -> InterviewStage:
        """The next stage after ``current`` that will ask at least one question."""
        idx = self.stage_order.index(current)
        for stage in self.stage_order[idx + 1:]:
            if stage == InterviewStage.WRAPUP or self.stage_limits.get(stage, 0) > 0:
                return stage
        return InterviewStage.WRAPUP

    def _enter(self, stage: InterviewStage) -> InterviewStage:
        logger.info(f"[{self.session_id}] Stage {self.stage.value} -> {stage.value}")
        self.stage = stage
        if stage == InterviewStage.WRAPUP:
            self.end_time = datetime.now()
        return stage

    # ========================================
    # Answer quality and experience level
    # ========================================

    def evaluate_answer_quality(self, answer: str) -> bool:
        """Crude length-based proxy used only for experience inference."""
        if not answer or answer == self.skip_sentinel:
            return False
        return len(answer) >= self.min_answer_length

    def determine_experience_level(self) -> ExperienceLevel:
        rate = self.well_answered_count / self.total_answers if self.total_answers else 0
        if rate >= 0.8:
            return ExperienceLevel.ADVANCED
        if rate >= 0.5:
            return ExperienceLevel.INTERMEDIATE
        return ExperienceLevel.BEGINNER

    def _record_answer(self, text: str) -> AnswerRecord:
        well_answered = self.evaluate_answer_quality(text)
        self.total_answers += 1
        if well_answered:
            self.well_answered_count += 1
        if self.stage == InterviewStage.BACKGROUND:
            self.background_responses.append(text)

        record = AnswerRecord(
            text=text,
            stage=self.stage,
            well_answered=well_answered,
            question=self._pending_question,
        )
        self.answer_log.append(record)
        self._pending_question = None
        return record

    def set_pending_question(self, question: str) -> None:
        """Remember the question the next answer responds to."""
        self._pending_question = question

    # ========================================
    # Exit hooks
    # ========================================

    def _freeze_experience_level(self) -> None:
        if self._inferred_level is not None:
            return
        self._inferred_level = self.determine_experience_level()
        logger.info(
            f"[{self.session_id}] Experience level inferred as {self._inferred_level.value} "
            f"({self.well_answered_count}/{self.total_answers} well answered)"
        )

    def _coding_gate(self) -> Optional[InterviewStage]:
        """Last enabled stage before coding; None when coding follows the greeting."""
        idx = self.stage_order.index(InterviewStage.CODING)
        for stage in reversed(self.stage_order[1:idx]):
            if self.stage_limits.get(stage, 0) > 0:
                return stage
        return None

    def _decide_coding_stage(self) -> None:
        if is_non_coding(self.topic, self.skills, self.non_coding_topics):
            self.stage_limits[InterviewStage.CODING] = 0
            self.coding_skipped = True
            logger.info(f"[{self.session_id}] Non-coding topic '{self.topic}', skipping coding stage")

    # ========================================
    # Scores
    # ========================================

    def record_score(self, triple: ScoreTriple) -> None:
        self.scores.record_score(triple)

    def compute_averages(self) -> ScoreAverages:
        return self.scores.compute_averages()

    # ========================================
    # Serialization
    # ========================================

    def to_session(self) -> InterviewSession:
        """Convert the orchestrator to an InterviewSession snapshot."""
        return InterviewSession(
            session_id=self.session_id,
            topic=self.topic,
            skills=list(self.skills),
            stage=self.stage,
            stage_order=list(self.stage_order),
            stage_counters=dict(self.stage_counters),
            stage_limits=dict(self.stage_limits),
            skill_cursor=self.skill_cursor,
            current_skill=self.current_skill(),
            experience_level=self.experience_level,
            experience_inferred=self.experience_inferred,
            coding_skipped=self.coding_skipped,
            total_answers=self.total_answers,
            well_answered=self.well_answered_count,
            answer_log=list(self.answer_log),
            score_log=list(self.score_log),
            averages=self.compute_averages(),
            start_time=self.start_time,
            end_time=self.end_time,
        )

    def get_status(self) -> Dict[str, Any]:
        """Get current interview status."""
        stage_progress = None
        if self.stage in self.stage_limits:
            stage_progress = {
                "asked": self.stage_counters[self.stage],
                "limit": self.stage_limits[self.stage],
            }

        return {
            "session_id": self.session_id,
            "topic": self.topic,
            "stage": self.stage.value,
            "stage_order": [s.value for s in self.stage_order],
            "stage_progress": stage_progress,
            "current_skill": self.current_skill(),
            "experience_level": self.experience_level.value,
            "experience_inferred": self.experience_inferred,
            "coding_skipped": self.coding_skipped,
            "answers_total": self.total_answers,
            "is_ended": self.is_complete,
        }
