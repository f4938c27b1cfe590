"""
Interview stage definitions and the stock pipelines built from them.
"""
import random
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple, Any

from models.schemas import InterviewStage, QuestionKind


@dataclass(frozen=True)
class StageSpec:
    """Configuration for a single stage in a pipeline."""
    stage: InterviewStage
    description: str
    limit: int = 1
    # Inclusive band sampled once per session; overrides ``limit`` when set
    limit_band: Optional[Tuple[int, int]] = None
    repeatable: bool = True
    scored: bool = True
    focus_areas: List[str] = field(default_factory=list)

    @property
    def kind(self) -> QuestionKind:
        return QuestionKind.for_stage(self.stage)

    def resolve_limit(self, rng: random.Random) -> int:
        """Pick this session's question limit."""
        if not self.repeatable:
            return 0
        if self.limit_band:
            low, high = self.limit_band
            return rng.randint(low, high)
        return self.limit

    def get_config(self) -> Dict[str, Any]:
        """Get stage configuration as dictionary."""
        return {
            "stage": self.stage.value,
            "description": self.description,
            "limit": self.limit,
            "limit_band": list(self.limit_band) if self.limit_band else None,
            "kind": self.kind.value,
            "scored": self.scored,
            "focus_areas": self.focus_areas,
        }


GREETING = StageSpec(
    stage=InterviewStage.GREETING,
    description="Opening question and introductions",
    repeatable=False,
    scored=False,
    focus_areas=["welcome", "introduction"],
)
BACKGROUND = StageSpec(
    stage=InterviewStage.BACKGROUND,
    description="Projects, skills and experience",
    limit=10,
    scored=False,
    focus_areas=["projects", "skills", "experience"],
)
KNOWLEDGE = StageSpec(
    stage=InterviewStage.KNOWLEDGE,
    description="Open technical knowledge questions",
    limit=5,
    focus_areas=["concepts", "tools", "best practices"],
)
MCQ = StageSpec(
    stage=InterviewStage.MCQ,
    description="Multiple choice technical questions",
    limit=10,
    focus_areas=["concepts", "syntax", "trade-offs"],
)
CODING = StageSpec(
    stage=InterviewStage.CODING,
    description="Coding problems with starter code",
    limit=4,
    focus_areas=["problem solving", "implementation"],
)
SCENARIO = StageSpec(
    stage=InterviewStage.SCENARIO,
    description="Hypothetical scenario handling",
    limit=3,
    focus_areas=["judgment", "design", "debugging approach"],
)
BEHAVIORAL = StageSpec(
    stage=InterviewStage.BEHAVIORAL,
    description="Past behaviour and experiences",
    limit=3,
    focus_areas=["teamwork", "conflict resolution", "ownership"],
)
WRAPUP = StageSpec(
    stage=InterviewStage.WRAPUP,
    description="Closing questions and feedback",
    repeatable=False,
    scored=False,
    focus_areas=["summary", "candidate questions"],
)

# Documented bands for sessions that randomise their length
BACKGROUND_BAND = (10, 15)
CODING_BAND = (3, 5)


PIPELINES: Dict[str, List[StageSpec]] = {
    "basic": [GREETING, KNOWLEDGE, WRAPUP],
    "standard": [GREETING, BACKGROUND, MCQ, CODING, WRAPUP],
    "full": [GREETING, BACKGROUND, KNOWLEDGE, BEHAVIORAL, MCQ, CODING, WRAPUP],
    "scenario": [GREETING, BACKGROUND, KNOWLEDGE, SCENARIO, WRAPUP],
}

DEFAULT_PIPELINE = "standard"


class InterviewStages:
    """
    Builds and validates stage pipelines.
    """

    @classmethod
    def get_pipeline(
        cls,
        name: Optional[str] = None,
        limits: Optional[Dict[str, int]] = None,
        randomize: bool = False,
    ) -> List[StageSpec]:
        """
        Get a stock pipeline with optional per-stage limit overrides.

        Args:
            name: Pipeline name ("basic", "standard" or "full")
            limits: Stage name -> fixed question limit
            randomize: Use the documented bands for background and coding

        Returns:
            Ordered list of stage specs
        """
        key = (name or DEFAULT_PIPELINE).lower()
        if key not in PIPELINES:
            raise ValueError(f"Unknown pipeline '{name}'. Expected one of: {', '.join(PIPELINES)}")

        specs = []
        for spec in PIPELINES[key]:
            if randomize and spec.stage == InterviewStage.BACKGROUND:
                spec = replace(spec, limit_band=BACKGROUND_BAND)
            elif randomize and spec.stage == InterviewStage.CODING:
                spec = replace(spec, limit_band=CODING_BAND)
            if limits and spec.stage.value in limits:
                spec = replace(spec, limit=limits[spec.stage.value], limit_band=None)
            specs.append(spec)
        return specs

    @classmethod
    def validate(cls, specs: List[StageSpec]) -> None:
        """Raise ValueError for pipelines the state machine cannot run."""
        if len(specs) < 2:
            raise ValueError("A pipeline needs at least a greeting and a wrapup stage")
        if specs[0].stage != InterviewStage.GREETING:
            raise ValueError("Pipelines must start with the greeting stage")
        if specs[-1].stage != InterviewStage.WRAPUP:
            raise ValueError("Pipelines must end with the wrapup stage")
        stages = [s.stage for s in specs]
        if len(set(stages)) != len(stages):
            raise ValueError("Each stage may appear only once in a pipeline")
        for spec in specs[1:-1]:
            if not spec.repeatable:
                raise ValueError(f"Stage '{spec.stage.value}' must be repeatable")
            if spec.limit < 0:
                raise ValueError(f"Stage '{spec.stage.value}' has a negative limit")
            if spec.limit_band:
                low, high = spec.limit_band
                if low < 1 or high < low:
                    raise ValueError(f"Stage '{spec.stage.value}' has an invalid limit band")

    @classmethod
    def has_problem_solving(cls, specs: List[StageSpec]) -> bool:
        """Whether any stage exercises problem solving on its own."""
        return any(s.stage in (InterviewStage.CODING, InterviewStage.SCENARIO) for s in specs)

    @classmethod
    def get_all_pipelines_info(cls) -> Dict[str, List[Dict[str, Any]]]:
        """Get information about all stock pipelines."""
        return {name: [spec.get_config() for spec in specs] for name, specs in PIPELINES.items()}
