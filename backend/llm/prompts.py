"""
Prompt templates for the interviewer agents.
Each prompt is designed to:
1. Keep the model in the interviewer role
2. Produce the exact format the stage needs (plain, MCQ or coding)
3. Keep outputs short and parseable
"""
from models.schemas import FollowUpType, InterviewStage


FOLLOW_UP_GUIDANCE = {
    FollowUpType.CLARIFY: "The last answer was hard to follow. Gently ask the candidate to clarify or restate it before moving on.",
    FollowUpType.PROBE: "The last answer was shallow. Probe the same area from a different angle with a simpler question.",
    FollowUpType.DEEPEN: "The last answer was strong. Push harder with a more demanding question on the same subject.",
    FollowUpType.NONE: "",
}


class Prompts:
    """Collection of all agent prompts."""

    # ============================================================
    # QUESTION GENERATOR PROMPTS
    # ============================================================

    @staticmethod
    def question_base(
        skill: str,
        experience_level: str,
        stage: InterviewStage,
        last_answer: str,
        conversation: str,
        follow_up: FollowUpType = FollowUpType.NONE,
    ) -> str:
        """Shared preamble for every stage."""
        guidance = FOLLOW_UP_GUIDANCE.get(follow_up, "")
        return f"""You are a professional technical interviewer with a friendly, conversational tone, mimicking a human interviewer.
Focus on {skill}. The candidate's experience level is {experience_level}.
Their last input: '{last_answer}'.
Conversation so far:
{conversation}
Current stage: {stage.value}.
{guidance}
Ensure questions are concise (max 50 words), clear, and relevant. Ask exactly ONE question."""

    @staticmethod
    def background(skill: str) -> str:
        return f"""
For the background stage, ask ONLY about the candidate's projects, skills and experience with {skill}.
Do NOT ask multiple choice or coding questions."""

    @staticmethod
    def knowledge(skill: str) -> str:
        return f"""
For the knowledge stage, ask ONE open technical question about {skill} that tests understanding of concepts, tools or trade-offs.
Do NOT provide answer options and do NOT ask for code."""

    @staticmethod
    def mcq(skill: str) -> str:
        return f"""
For the MCQ stage, provide exactly four plausible multiple choice options for a technical question about {skill}.
Format as:
Question: [text]
Options:
A) [Option1]
B) [Option2]
C) [Option3]
D) [Option4]"""

    @staticmethod
    def coding(skill: str) -> str:
        return f"""
For the coding stage, provide a coding problem for {skill} with a clear problem description and boilerplate code.
Format strictly as:
Solve this problem: [Problem description]
Boilerplate Code:
```[language]
[Boilerplate code]
```"""

    @staticmethod
    def scenario(skill: str) -> str:
        return f"""
For the scenario stage, present ONE realistic hypothetical situation involving {skill} (a production incident, a design decision, a debugging session) and ask how the candidate would handle it."""

    @staticmethod
    def behavioral(skill: str) -> str:
        return """
For the behavioral stage, ask ONE question about a past experience (teamwork, conflict, ownership, a deadline).
Encourage a Situation, Task, Action, Result structure."""

    @staticmethod
    def wrapup(skill: str) -> str:
        return """
For the wrapup stage, thank the candidate and ask a final summary or feedback question."""

    # ============================================================
    # EVALUATOR PROMPT
    # ============================================================

    @staticmethod
    def evaluate_answer(stage: InterviewStage, skill: str, question: str, answer: str) -> str:
        """Prompt for scoring one answer on the 0-3 scale."""
        return f"""You are evaluating a candidate's answer in a {skill} interview.

STAGE: {stage.value}
QUESTION: "{question}"
ANSWER: "{answer}"

Score each dimension from 0 to 3:
0 = no answer or wrong, 1 = weak, 2 = adequate, 3 = strong.
For multiple choice questions, technical is 3 for the correct option and 0 otherwise.

Respond with ONLY this JSON (no other text):

{{
    "technical": <0-3>,
    "problem_solving": <0-3>,
    "communication": <0-3>,
    "evaluation_text": "<one or two sentences of feedback>"
}}"""

    # ============================================================
    # REPORT PROMPTS
    # ============================================================

    @staticmethod
    def candidate_report(topic: str, level: str, conversation: str, skills: str, scores: str) -> str:
        """Prompt for the candidate-facing feedback report."""
        return f"""You are an expert technical interviewer for {topic}. Based on the interview conversation, provide a candidate-focused report.
Analyze responses for depth, clarity, and engagement, noting skipped questions.

Candidate's level: {level}.
Resume skills: {skills or 'None'}.
Scores (0-3 scale): {scores}.
Conversation:
{conversation}

Format in markdown:
# Candidate Feedback Report for {topic}
## Strengths
- ...
## Areas to Improve
- ...
## Feedback
- ...

Ensure the report is encouraging, actionable, and formatted for clarity."""

    @staticmethod
    def recruiter_report(topic: str, level: str, conversation: str, skills: str, scores: str) -> str:
        """Prompt for the recruiter-facing assessment report."""
        return f"""You are an expert technical interviewer for {topic}. Based on the interview conversation, provide a recruiter-focused report.
Analyze responses for depth, accuracy, and clarity, noting skipped questions and resume skill coverage.

Candidate's level: {level}.
Resume skills: {skills or 'None'}.
Scores (0-3 scale): {scores}.
Conversation:
{conversation}

Format in markdown:
# Recruiter Report for {topic}
## Candidate Overview
## Pros
## Cons
## Highlight Reel
## Alternative Answer Suggestions
## Company Fit Prediction
## Stage Analysis
## Overall Score
- NN/100
- Justification: [max 150 words]

Ensure the report is professional, detailed, and formatted for clarity."""


STAGE_PROMPTS = {
    InterviewStage.BACKGROUND: Prompts.background,
    InterviewStage.KNOWLEDGE: Prompts.knowledge,
    InterviewStage.MCQ: Prompts.mcq,
    InterviewStage.CODING: Prompts.coding,
    InterviewStage.SCENARIO: Prompts.scenario,
    InterviewStage.BEHAVIORAL: Prompts.behavioral,
    InterviewStage.WRAPUP: Prompts.wrapup,
}


def greeting_message(topic: str) -> str:
    """Fixed opening question; the greeting never goes to the model."""
    return (
        f"Hello! I'm your AI interviewer specialized in {topic}. I'll be asking you questions "
        f"based on your experience level. Let's start with your introduction. Please tell me "
        f"about your background and work with {topic}."
    )


# ============================================================
# FALLBACK QUESTIONS (used when LLM fails)
# ============================================================

FALLBACK_QUESTIONS = {
    InterviewStage.BACKGROUND: [
        "Can you walk me through a recent project where you used {skill}?",
        "What part of your experience with {skill} are you most proud of?",
        "How did you first start working with {skill}?",
    ],
    InterviewStage.KNOWLEDGE: [
        "What are the most common mistakes people make with {skill}, and how do you avoid them?",
        "How would you explain the core concepts of {skill} to a new teammate?",
    ],
    InterviewStage.MCQ: [
        "Question: Which practice most improves the maintainability of a {skill} codebase?\n"
        "Options:\n"
        "A) Writing automated tests\n"
        "B) Avoiding comments entirely\n"
        "C) Keeping all code in one file\n"
        "D) Disabling compiler or linter warnings",
    ],
    InterviewStage.CODING: [
        "Solve this problem: Write a function that returns the first non-repeating character in a string using {skill}.",
        "Solve this problem: Write a function that checks whether a string is a palindrome using {skill}.",
    ],
    InterviewStage.SCENARIO: [
        "A release built on {skill} starts failing in production right after deployment. How would you investigate?",
    ],
    InterviewStage.BEHAVIORAL: [
        "Tell me about a time you had to learn something new quickly to deliver a project.",
        "Describe a disagreement with a teammate and how you resolved it.",
    ],
    InterviewStage.WRAPUP: [
        "Thank you for your time today. Is there anything about your experience with {skill} we haven't covered?",
    ],
}
