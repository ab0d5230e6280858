"""Evaluation prompt rendering."""
from __future__ import annotations

import textwrap
from typing import Mapping

_RUBRIC_DEFAULTS = {
    "clarity": "How well-structured and articulate is the response?",
    "relevance": "Does the answer directly address the question?",
    "confidence": "How confident does the candidate sound?",
    "technical_fit": "Does the answer demonstrate relevant skills?",
    "communication": "How effective is the candidate's communication?",
}

EVALUATOR_SYSTEM_PROMPT = (
    "You are an expert HR interview evaluator. Return ONLY valid JSON, no markdown. "
    "Keep justifications to 1 sentence each."
)

_TEMPLATE = textwrap.dedent(
    """\
    You are an expert HR interviewer evaluating a candidate's spoken response to an interview question.

    INTERVIEW QUESTION:
    "{question}"

    CANDIDATE'S RESPONSE (transcript):
    "{transcript}"

    SCORING GUIDELINES (be strict and fair; do NOT give everyone high scores):

    **Clarity (0-5):** {clarity}
      5: Exceptionally clear, well-organized, easy to follow
      3: Adequate but could be more structured
      0: No meaningful response or incoherent

    **Relevance (0-5):** {relevance}
      5: Directly and completely addresses all aspects
      3: Partially relevant, misses key points
      0: Completely off-topic

    **Confidence (0-5):** {confidence}
      5: Very confident, authoritative
      3: Moderately confident with some hesitation
      0: Extremely nervous, unable to respond

    **Technical Fit (0-5):** {technical_fit}
      5: Demonstrates excellent domain knowledge with specific examples
      3: Shows basic understanding
      0: No relevant skills demonstrated

    **Communication (0-5):** {communication}
      5: Excellent vocabulary, professional tone, engaging delivery
      3: Adequate communication
      0: Very poor communication

    IMPORTANT RULES:
    - Base scores ONLY on the transcript content
    - If the response is very short or lacks substance, give lower scores
    - If the candidate gives a generic answer without specifics, score lower
    - Provide an honest one-sentence justification for each score
    - recommendation must be one of: "strong_hire", "hire", "maybe", "no_hire", "strong_no_hire"

    Return ONLY valid JSON (no markdown, no extra text):
    {{
      "score": {{
        "clarity": <number 0-5>,
        "relevance": <number 0-5>,
        "confidence": <number 0-5>,
        "technical_fit": <number 0-5>,
        "communication": <number 0-5>
      }},
      "scoreJustification": {{
        "clarity": "<why this score>",
        "relevance": "<why this score>",
        "confidence": "<why this score>",
        "technical_fit": "<why this score>",
        "communication": "<why this score>"
      }},
      "summary": "<2-3 sentence overall assessment>",
      "strengths": ["<strength 1>", "<strength 2>"],
      "risks": ["<risk 1>", "<risk 2>"],
      "recommendation": "<strong_hire|hire|maybe|no_hire|strong_no_hire>"
    }}"""
)


def build_evaluation_prompt(question_text: str, transcript: str, rubric: Mapping[str, str] | None = None) -> str:
    """Render the scoring prompt for one answer.

    Rubric entries override the built-in hint for the matching dimension;
    blank or missing entries fall back to the default hint. The output is a
    pure function of the inputs.
    """

    rubric = rubric or {}
    hints = {}
    for dimension, default in _RUBRIC_DEFAULTS.items():
        value = rubric.get(dimension)
        hints[dimension] = value.strip() if isinstance(value, str) and value.strip() else default
    return _TEMPLATE.format(question=question_text, transcript=transcript, **hints)


__all__ = ["build_evaluation_prompt", "EVALUATOR_SYSTEM_PROMPT"]
