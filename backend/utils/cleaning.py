"""
Response cleaning utilities for LLM outputs.
Strips reasoning blocks, extracts JSON and splits MCQ and coding questions
into the parts the UI renders.
"""
import re
from typing import Optional, Tuple

from models.schemas import CodingQuestion, McqQuestion
from interview.topics import get_boilerplate


_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE)
_THINK_TAG = re.compile(r"</?\s*think\s*>", re.IGNORECASE)
_CODE_FENCE = re.compile(r"```([\w#+.-]*)[ \t]*\n(.*?)```", re.DOTALL)
_OPTION_LINE = re.compile(r"^\s*([A-D])[).:]\s*(.+)$")


class ResponseCleaner:
    """
    Cleans model output before it is shown to the candidate.
    """

    @classmethod
    def strip_reasoning(cls, text: str) -> str:
        """Remove <think> blocks and stray tags left by reasoning models."""
        if not text:
            return ""
        cleaned = _THINK_BLOCK.sub("", text)
        # An unterminated block swallows everything up to the answer
        if re.search(r"<think>", cleaned, re.IGNORECASE):
            cleaned = re.split(r"<think>", cleaned, flags=re.IGNORECASE)[0]
        cleaned = _THINK_TAG.sub("", cleaned)
        return cleaned.strip()

    @classmethod
    def clean_question(cls, text: str) -> Tuple[str, bool]:
        """
        Full cleaning pipeline for interviewer questions.

        Returns:
            Tuple of (cleaned_text, is_valid)
        """
        cleaned = cls.strip_reasoning(text)
        # Collapse runs of blank lines but keep the line structure MCQs rely on
        cleaned = re.sub(r"[ \t]+\n", "\n", cleaned)
        cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)

        if not cleaned or len(cleaned) < 10:
            return "", False
        return cleaned, True

    @classmethod
    def clean_json_response(cls, text: str) -> str:
        """Clean response and extract JSON content."""
        cleaned = cls.strip_reasoning(text)
        fenced = _CODE_FENCE.search(cleaned)
        if fenced:
            cleaned = fenced.group(2)

        json_match = re.search(r"\{[^{}]*(?:\{[^{}]*\}[^{}]*)*\}", cleaned, re.DOTALL)
        if json_match:
            return json_match.group()

        return "{}"

    @classmethod
    def parse_mcq(cls, text: str) -> Optional[McqQuestion]:
        """
        Split an MCQ into question, optional code snippet and options.

        Expected shape:
            Question: [text]
            Options:
            A) ...
            D) ...
        """
        parts = re.split(r"\n\s*Options:\s*\n", text, maxsplit=1)
        if len(parts) < 2:
            return None

        stem = parts[0]
        code = ""
        fenced = _CODE_FENCE.search(stem)
        if fenced:
            code = fenced.group(2).rstrip("\n")
            stem = stem[:fenced.start()]
        question = re.sub(r"^\s*Question:\s*", "", stem).strip()

        options = []
        for line in parts[1].splitlines():
            match = _OPTION_LINE.match(line)
            if match:
                options.append(match.group(2).strip())

        if not question or not options:
            return None
        return McqQuestion(question=question, code=code, options=options)

    @classmethod
    def parse_coding(cls, text: str, skill: str) -> CodingQuestion:
        """
        Split a coding prompt into the problem statement and boilerplate.
        Falls back to the per-skill starter code when the model gave none.
        """
        language, boilerplate = get_boilerplate(skill)

        fenced = _CODE_FENCE.search(text)
        problem = text
        if fenced:
            problem = text[:fenced.start()]
            language = fenced.group(1) or language
            boilerplate = fenced.group(2)

        problem = re.sub(r"Boilerplate Code:\s*$", "", problem.strip()).strip()
        problem = re.sub(r"^Solve this problem:\s*", "", problem).strip()

        return CodingQuestion(problem=problem, language=language, boilerplate=boilerplate)
