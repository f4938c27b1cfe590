import re
import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from interview.stages import InterviewStages
from interview.orchestrator import InterviewOrchestrator


STAGE_QUESTIONS = {
    "background": "Can you tell me about a recent project you built?",
    "knowledge": "How does garbage collection work in your main language?",
    "mcq": (
        "Question: Which keyword defines a function in Python?\n"
        "Options:\n"
        "A) func\n"
        "B) def\n"
        "C) function\n"
        "D) lambda"
    ),
    "coding": (
        "Solve this problem: Write a function that reverses a string.\n"
        "Boilerplate Code:\n"
        "```python\n"
        "def reverse_string(s):\n"
        "    # Your code here\n"
        "    pass\n"
        "```"
    ),
    "scenario": "Your service starts timing out after a deploy. What do you check first?",
    "behavioral": "Tell me about a time you disagreed with a teammate.",
    "wrapup": "Thanks for your time. Any final thoughts you would like to share?",
}

DEFAULT_EVALUATION = {
    "technical": 2,
    "problem_solving": 2,
    "communication": 2,
    "evaluation_text": "Solid answer.",
}


class FakeLLM:
    """Stands in for LLMClient; answers depend on the stage named in the prompt."""

    def __init__(self, evaluations: Optional[List] = None, fail_questions: bool = False, fail_reports: bool = False):
        self.evaluations = list(evaluations or [])
        self.fail_questions = fail_questions
        self.fail_reports = fail_reports
        self.question_prompts: List[str] = []
        self.evaluation_prompts: List[str] = []
        self.report_prompts: List[str] = []

    def generate_question(self, system_prompt: str, user_prompt: str, max_tokens: int = 200):
        self.question_prompts.append(system_prompt)
        if self.fail_questions:
            return "", False
        match = re.search(r"Current stage: (\w+)\.", system_prompt)
        return STAGE_QUESTIONS[match.group(1)], True

    def generate_json(self, system_prompt: str, user_prompt: str, max_tokens: int = 400, temperature: float = 0.3):
        self.evaluation_prompts.append(system_prompt)
        result = self.evaluations.pop(0) if self.evaluations else dict(DEFAULT_EVALUATION)
        if result is None:
            return None, False
        return result, True

    def generate_text(self, system_prompt: str, user_prompt: str, max_tokens: int = 800):
        self.report_prompts.append(system_prompt)
        if self.fail_reports:
            return "", False
        return f"# Report\n{user_prompt}", True


@pytest.fixture
def fake_llm():
    return FakeLLM()


def make_orchestrator(
    topic: str = "Python",
    skills=None,
    pipeline: str = "standard",
    limits: Optional[Dict[str, int]] = None,
    **kwargs,
) -> InterviewOrchestrator:
    stages = InterviewStages.get_pipeline(pipeline, limits=limits)
    return InterviewOrchestrator(topic, skills=skills, stages=stages, **kwargs)


@pytest.fixture
def orchestrator_factory():
    return make_orchestrator
