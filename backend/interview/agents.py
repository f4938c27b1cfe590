"""
Agent orchestration for the mock interviewer.
Coordinates the question generator, answer evaluator and report generator
around an InterviewOrchestrator.
"""
import asyncio
import random
import logging
from dataclasses import dataclass
from typing import Dict, Optional, List, Sequence

from llm.client import LLMClient, llm_client
from llm.prompts import FALLBACK_QUESTIONS, STAGE_PROMPTS, Prompts, greeting_message
from interview.orchestrator import InterviewOrchestrator
from interview.scoring import determine_follow_up_type, get_recommendation, parse_score_triple, to_percentage
from utils.cleaning import ResponseCleaner
from models.schemas import (
    ConversationTurn,
    ExperienceLevel,
    FollowUpType,
    GeneratedQuestion,
    InterviewStage,
    QuestionKind,
    ReportAudience,
    ScoreAverages,
    ScoreTriple,
)

# Set up logging
logger = logging.getLogger(__name__)

SCORE_KEYS = ("technical", "tech", "problem_solving", "problem", "communication", "comm")


class EvaluationError(Exception):
    """The evaluator could not produce a score; the answer should be resubmitted."""


def format_history(history: Sequence[ConversationTurn], num_turns: Optional[int] = None) -> str:
    """Render transcript turns as plain lines for prompts."""
    turns = list(history)[-num_turns:] if num_turns else list(history)
    if not turns:
        return "No conversation yet."

    lines = []
    for turn in turns:
        role = "Interviewer" if turn.role == "interviewer" else "Candidate"
        lines.append(f"{role} [{turn.stage.value}]: {turn.content}")
    return "\n".join(lines)


class QuestionGenerator:
    """
    Produces the next question for a stage.
    """

    def __init__(self, llm: Optional[LLMClient] = None, context_turns: int = 10):
        self.llm = llm or llm_client
        self.context_turns = context_turns

    def next_question(
        self,
        stage: InterviewStage,
        skill: str,
        topic: str,
        experience_level: ExperienceLevel,
        history: Sequence[ConversationTurn],
        last_answer: str = "",
        follow_up: FollowUpType = FollowUpType.NONE,
    ) -> GeneratedQuestion:
        """
        Generate the next interview question.

        Args:
            stage: Stage the question belongs to
            skill: Subject to focus on
            topic: Interview topic, used for the greeting
            experience_level: Tone and difficulty hint
            history: Transcript so far
            last_answer: The candidate's latest answer
            follow_up: Phrasing hint from the last evaluation

        Returns:
            The generated question with its parsed structure
        """
        if stage == InterviewStage.GREETING:
            return GeneratedQuestion(
                text=greeting_message(topic), stage=stage, kind=QuestionKind.REGULAR, skill=skill
            )

        logger.info(f"Generating {stage.value} question on {skill} (follow-up: {follow_up.value})")

        system_prompt = Prompts.question_base(
            skill=skill,
            experience_level=experience_level.value,
            stage=stage,
            last_answer=last_answer,
            conversation=format_history(history, self.context_turns),
            follow_up=follow_up,
        ) + STAGE_PROMPTS[stage](skill)

        text, is_valid = self.llm.generate_question(system_prompt, last_answer or "Please continue.")
        if is_valid:
            question = self._build(text, stage, skill)
            if question is not None:
                return question
            logger.warning(f"Unparseable {stage.value} question from LLM, using fallback")
        else:
            logger.warning(f"LLM failed for {stage.value}, using fallback")

        return self._fallback(stage, skill)

    def _build(self, text: str, stage: InterviewStage, skill: str, is_fallback: bool = False) -> Optional[GeneratedQuestion]:
        kind = QuestionKind.for_stage(stage)
        question = GeneratedQuestion(text=text, stage=stage, kind=kind, skill=skill, is_fallback=is_fallback)
        if kind == QuestionKind.MCQ:
            mcq = ResponseCleaner.parse_mcq(text)
            if mcq is None:
                return None
            question.mcq = mcq
        elif kind == QuestionKind.CODING:
            question.coding = ResponseCleaner.parse_coding(text, skill)
        return question

    def _fallback(self, stage: InterviewStage, skill: str) -> GeneratedQuestion:
        """Get a canned question for the stage."""
        template = random.choice(FALLBACK_QUESTIONS[stage])
        return self._build(template.format(skill=skill), stage, skill, is_fallback=True)


class AnswerEvaluator:
    """
    Scores a single answer on the 0-3 scale.
    """

    def __init__(self, llm: Optional[LLMClient] = None):
        self.llm = llm or llm_client

    def evaluate(self, question: str, answer: str, stage: InterviewStage, skill: str = "") -> ScoreTriple:
        """
        Evaluate a question/answer pair.

        Raises:
            EvaluationError: when the model returned no usable scores
        """
        prompt = Prompts.evaluate_answer(stage=stage, skill=skill, question=question, answer=answer)
        result, is_valid = self.llm.generate_json(prompt, "Evaluate the answer.", max_tokens=300)

        if not is_valid or not result or not any(key in result for key in SCORE_KEYS):
            raise EvaluationError(f"No usable evaluation for {stage.value} answer")

        return parse_score_triple(result)


class ReportGenerator:
    """
    Builds the candidate and recruiter reports at the end of an interview.
    """

    def __init__(self, llm: Optional[LLMClient] = None):
        self.llm = llm or llm_client

    def build_report(
        self,
        audience: ReportAudience,
        history: Sequence[ConversationTurn],
        averages: ScoreAverages,
        topic: str,
        skills: Sequence[str],
        experience_level: ExperienceLevel,
    ) -> str:
        """
        Generate report text for one audience.

        Returns:
            Markdown report; a locally assembled summary when the LLM fails
        """
        scores = (
            f"technical={averages.avg_technical:.2f}, problem_solving={averages.avg_problem_solving:.2f}, "
            f"communication={averages.avg_communication:.2f}, final={averages.final_score:.2f}"
        )
        builder = Prompts.candidate_report if audience == ReportAudience.CANDIDATE else Prompts.recruiter_report
        prompt = builder(
            topic=topic,
            level=experience_level.value,
            conversation=format_history(history),
            skills=", ".join(skills),
            scores=scores,
        )

        text, is_valid = self.llm.generate_text(prompt, f"Generate a {audience.value}-focused report.")
        if is_valid:
            return text

        logger.warning(f"LLM failed for {audience.value} report, using fallback")
        return self._fallback(audience, history, averages, topic, experience_level)

    def _fallback(
        self,
        audience: ReportAudience,
        history: Sequence[ConversationTurn],
        averages: ScoreAverages,
        topic: str,
        experience_level: ExperienceLevel,
    ) -> str:
        answers = [t for t in history if t.role == "candidate"]
        skipped = sum(1 for t in answers if t.metadata.get("skipped"))
        title = "Candidate Feedback Report" if audience == ReportAudience.CANDIDATE else "Recruiter Report"

        lines = [
            f"# {title} for {topic}",
            f"- Experience level: {experience_level.value}",
            f"- Answers given: {len(answers) - skipped}, skipped: {skipped}",
            f"- Technical: {averages.avg_technical:.2f}/3",
            f"- Problem solving: {averages.avg_problem_solving:.2f}/3",
            f"- Communication: {averages.avg_communication:.2f}/3",
        ]
        if audience == ReportAudience.RECRUITER:
            lines.append(f"## Overall Score\n- {to_percentage(averages.final_score)}/100")
            lines.append(f"- Recommendation: {get_recommendation(averages.final_score)}")
        lines.append("\nAutomatic report; manual review recommended.")
        return "\n".join(lines)


@dataclass
class TurnResult:
    """Outcome of processing one answer."""
    answered_stage: InterviewStage
    next_stage: Optional[InterviewStage]
    question: Optional[GeneratedQuestion]
    score: Optional[ScoreTriple]
    follow_up: FollowUpType

    @property
    def interview_ended(self) -> bool:
        return self.next_stage is None


class AgentController:
    """
    Runs one interview turn at a time around an orchestrator.
    """

    def __init__(self, llm: Optional[LLMClient] = None):
        client = llm or llm_client
        self.questions = QuestionGenerator(client)
        self.evaluator = AnswerEvaluator(client)
        self.reporter = ReportGenerator(client)

    def opening_question(self, orchestrator: InterviewOrchestrator) -> GeneratedQuestion:
        """The fixed greeting that starts every interview."""
        question = self.questions.next_question(
            stage=InterviewStage.GREETING,
            skill=orchestrator.current_skill(),
            topic=orchestrator.topic,
            experience_level=orchestrator.experience_level,
            history=[],
        )
        orchestrator.set_pending_question(question.text)
        return question

    def process_answer(
        self,
        orchestrator: InterviewOrchestrator,
        history: Sequence[ConversationTurn],
        question: str,
        answer: str,
    ) -> TurnResult:
        """
        Process a candidate's answer.

        The evaluation runs against the pre-transition stage and skill, so a
        failed evaluation raises before ``advance`` and the orchestrator is
        left untouched.

        Args:
            orchestrator: The session's orchestrator
            history: Transcript including the submitted answer
            question: The question being answered
            answer: The answer text or the skip sentinel

        Returns:
            TurnResult with the next question, or none once the interview ended
        """
        stage = orchestrator.current_state()
        skill = orchestrator.current_skill()

        score = None
        follow_up = FollowUpType.NONE
        skipped = not answer.strip() or answer == orchestrator.skip_sentinel
        if orchestrator.is_scored_stage(stage) and not skipped:
            score = self.evaluator.evaluate(question, answer, stage, skill)
            orchestrator.record_score(score)
            follow_up = determine_follow_up_type(score)

        next_stage = orchestrator.advance(answer, history)
        if next_stage is None:
            return TurnResult(stage, None, None, score, follow_up)

        next_question = self.questions.next_question(
            stage=next_stage,
            skill=orchestrator.current_skill(),
            topic=orchestrator.topic,
            experience_level=orchestrator.experience_level,
            history=history,
            last_answer=answer,
            follow_up=follow_up,
        )
        orchestrator.set_pending_question(next_question.text)
        return TurnResult(stage, next_stage, next_question, score, follow_up)

    async def generate_reports(
        self,
        orchestrator: InterviewOrchestrator,
        history: Sequence[ConversationTurn],
    ) -> Dict[str, str]:
        """Build both reports in parallel."""
        averages = orchestrator.compute_averages()
        transcript: List[ConversationTurn] = list(history)

        async def build(audience: ReportAudience) -> str:
            return await asyncio.to_thread(
                self.reporter.build_report,
                audience,
                transcript,
                averages,
                orchestrator.topic,
                list(orchestrator.skills),
                orchestrator.experience_level,
            )

        candidate, recruiter = await asyncio.gather(
            build(ReportAudience.CANDIDATE),
            build(ReportAudience.RECRUITER),
        )
        return {
            ReportAudience.CANDIDATE.value: candidate,
            ReportAudience.RECRUITER.value: recruiter,
        }
