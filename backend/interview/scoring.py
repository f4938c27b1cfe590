"""
Answer scoring and score aggregation.
Scores come from the evaluator on a 0-3 scale per dimension.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Any, List, Optional

from models.schemas import FollowUpType, ScoreAverages, ScoreTriple

logger = logging.getLogger(__name__)

MAX_SCORE = 3


@dataclass(frozen=True)
class ScoreBlend:
    """Weights used to fold the three averages into a final score."""
    name: str
    technical: float
    problem_solving: float
    communication: float

    def apply(self, technical: float, problem_solving: float, communication: float) -> float:
        return (
            technical * self.technical
            + problem_solving * self.problem_solving
            + communication * self.communication
        )


THREE_TERM = ScoreBlend("three_term", technical=0.5, problem_solving=0.3, communication=0.2)
TWO_TERM = ScoreBlend("two_term", technical=0.7, problem_solving=0.0, communication=0.3)

BLENDS = {blend.name: blend for blend in (THREE_TERM, TWO_TERM)}


def get_blend(name: Optional[str]) -> ScoreBlend:
    if not name:
        return THREE_TERM
    try:
        return BLENDS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown score blend '{name}'. Expected one of: {', '.join(BLENDS)}")


class ScoreAggregator:
    """
    Running per-dimension score lists for one session.
    """

    def __init__(self, blend: ScoreBlend = THREE_TERM):
        self.blend = blend
        self.triples: List[ScoreTriple] = []
        self.technical: List[float] = []
        self.problem_solving: List[float] = []
        self.communication: List[float] = []

    def record_score(self, triple: ScoreTriple) -> None:
        """Append an evaluator result. Values are kept as given."""
        for name, value in (
            ("technical", triple.technical),
            ("problem_solving", triple.problem_solving),
            ("communication", triple.communication),
        ):
            if not 0 <= value <= MAX_SCORE:
                logger.warning(f"Score {name}={value} outside 0-{MAX_SCORE}, recording as-is")

        self.triples.append(triple)
        self.technical.append(triple.technical)
        self.problem_solving.append(triple.problem_solving)
        self.communication.append(triple.communication)

    def compute_averages(self) -> ScoreAverages:
        """
        Average each dimension and blend them into a final score.

        Returns:
            All zeros when nothing has been recorded
        """
        n = len(self.triples)
        if n == 0:
            return ScoreAverages()

        avg_technical = sum(self.technical) / n
        avg_problem = sum(self.problem_solving) / n
        avg_communication = sum(self.communication) / n

        return ScoreAverages(
            avg_technical=avg_technical,
            avg_problem_solving=avg_problem,
            avg_communication=avg_communication,
            final_score=self.blend.apply(avg_technical, avg_problem, avg_communication),
            answers_scored=n,
        )


def determine_follow_up_type(triple: ScoreTriple) -> FollowUpType:
    """
    Decide how the next question should be phrased.

    Communication problems come first; otherwise the mean of technical and
    communication picks between probing and deepening.
    """
    if triple.communication < 1.5:
        return FollowUpType.CLARIFY
    average = (triple.technical + triple.communication) / 2
    if average < 1.5:
        return FollowUpType.PROBE
    if average > 2.5:
        return FollowUpType.DEEPEN
    return FollowUpType.NONE


def parse_score_triple(raw: Dict[str, Any]) -> ScoreTriple:
    """
    Build a ScoreTriple from evaluator JSON.
    Accepts both long and short key names; unreadable numbers become 0.
    """
    def number(*keys):
        for key in keys:
            if key in raw:
                try:
                    return float(raw[key])
                except (TypeError, ValueError):
                    logger.warning(f"Non-numeric score for '{key}': {raw[key]!r}")
                    return 0.0
        return 0.0

    return ScoreTriple(
        technical=number("technical", "tech"),
        problem_solving=number("problem_solving", "problemSolving", "problem"),
        communication=number("communication", "comm"),
        evaluation_text=str(raw.get("evaluation_text") or raw.get("evaluation") or ""),
    )


def get_recommendation(final_score: float) -> str:
    """Hiring recommendation for a blended 0-3 final score."""
    if final_score >= 2.5:
        return "Strong Hire"
    elif final_score >= 2.0:
        return "Hire"
    elif final_score >= 1.5:
        return "Maybe"
    else:
        return "No Hire"


def to_percentage(score: float) -> int:
    """Express a 0-3 score out of 100 for reports."""
    return round(max(0.0, min(score, MAX_SCORE)) / MAX_SCORE * 100)
