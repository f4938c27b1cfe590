# Interview module
from .stages import InterviewStages, PIPELINES, StageSpec
from .orchestrator import InterviewOrchestrator
from .scoring import ScoreAggregator, determine_follow_up_type
