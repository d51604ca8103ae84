"""Prompt templates for every generation request the orchestrator makes."""
from __future__ import annotations

from textwrap import dedent
from typing import Any, Dict, List, Mapping

from langchain_core.messages import BaseMessage
from langchain_core.prompts import ChatPromptTemplate

QUESTION = "question"
FOLLOW_UP = "follow_up"
EVALUATION = "evaluation"
REPORT = "report"

INTERVIEWER_SYSTEM = "You are a senior technical interviewer running a realistic mock interview."

_QUESTION_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", INTERVIEWER_SYSTEM),
        (
            "human",
            dedent(
                """
                You are conducting a {interview_type} interview for a {effective_difficulty}-level {role} position.

                {history_block}

                Rules:
                - For {effective_difficulty} level, ask appropriately challenging questions
                - Question should be relevant to {role} and {interview_type} interview type
                - Be specific and practical, not overly abstract
                - Question should be answerable in 1-3 minutes

                Respond with ONLY the question text, nothing else. No numbering, no prefix.
                """
            ).strip(),
        ),
    ]
)

_FOLLOW_UP_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", INTERVIEWER_SYSTEM),
        (
            "human",
            dedent(
                """
                You are interviewing for a {difficulty}-level {role} position.

                The candidate was asked: "{question}"
                Their answer was: "{answer}"

                Generate ONE follow-up question that:
                - Probes deeper into their answer
                - Tests understanding beyond surface-level knowledge
                - Is directly related to what they said
                - Can be answered in 1-2 minutes

                Respond with ONLY the follow-up question text, nothing else.
                """
            ).strip(),
        ),
    ]
)

_EVALUATION_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", INTERVIEWER_SYSTEM),
        (
            "human",
            dedent(
                """
                Evaluate an answer for a {difficulty}-level {role} position.

                Question: "{question}"
                Candidate's Answer: "{answer}"

                Respond in EXACTLY this JSON format (no markdown, no code fences):
                {{"score": <number 0-10>, "feedback": "<brief 1-2 sentence constructive feedback>"}}

                Scoring guidelines:
                - 0-2: Completely wrong or irrelevant
                - 3-4: Shows some awareness but significant gaps
                - 5-6: Adequate understanding, missing key details
                - 7-8: Good answer with solid understanding
                - 9-10: Excellent, comprehensive answer

                Be fair but rigorous for a {difficulty}-level candidate.
                """
            ).strip(),
        ),
    ]
)

_REPORT_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", INTERVIEWER_SYSTEM),
        (
            "human",
            dedent(
                """
                Write a performance report for a {difficulty}-level {role} candidate who just completed a {interview_type} interview.

                Average Score: {mean_score}/10

                Questions and Answers:
                {transcript}

                Respond in EXACTLY this JSON format (no markdown, no code fences):
                {{
                  "overallScore": <number 0-10 with one decimal>,
                  "percentageScore": <number 0-100>,
                  "strengths": ["<strength>", "<strength>", "<strength>"],
                  "improvements": ["<area>", "<area>", "<area>"],
                  "sampleAnswers": [
                    {{"question": "<weakly answered question>", "originalAnswer": "<what the candidate said>", "improvedAnswer": "<a better answer>"}}
                  ],
                  "suggestedTopics": ["<topic>", "<topic>", "<topic>", "<topic>"]
                }}

                Include at most 2 sampleAnswers, drawn from the weakest answers. Reference actual answers when possible.
                """
            ).strip(),
        ),
    ]
)

PROMPTS: Dict[str, ChatPromptTemplate] = {
    QUESTION: _QUESTION_PROMPT,
    FOLLOW_UP: _FOLLOW_UP_PROMPT,
    EVALUATION: _EVALUATION_PROMPT,
    REPORT: _REPORT_PROMPT,
}


def render_prompt(kind: str, params: Mapping[str, Any]) -> List[Dict[str, str]]:
    """Render ``kind`` into role/content chat messages.

    Raises:
        KeyError: If ``kind`` is not a known prompt.
    """

    template = PROMPTS[kind]
    return [_message_dict(message) for message in template.format_messages(**params)]


def _message_dict(message: BaseMessage) -> Dict[str, str]:  # Map LangChain messages to role/content dicts
    role = message.type
    if role == "human":
        role = "user"
    elif role == "ai":
        role = "assistant"
    content = message.content if isinstance(message.content, str) else str(message.content)
    return {"role": role, "content": content}


__all__ = ["EVALUATION", "FOLLOW_UP", "PROMPTS", "QUESTION", "REPORT", "render_prompt"]
