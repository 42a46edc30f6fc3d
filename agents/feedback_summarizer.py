from __future__ import annotations  # End-of-interview feedback summary

import logging
from pathlib import Path
from textwrap import dedent
from typing import List, Optional, Sequence

from langchain_core.prompts import ChatPromptTemplate

from agents.types import OverallFeedback
from config import LlmRoute, load_route
from interviews.errors import SummaryError
from interviews.models import Question
from llm_gateway import LlmGatewayError
from llm_gateway import runnable as llm_runnable

logger = logging.getLogger(__name__)

FEEDBACK_SUMMARIZER_ROUTE_KEY = "agents.feedback_summarizer"  # Registry key in app_config.json

FALLBACK_FEEDBACK = "Interview completed. Thank you for your participation."
FALLBACK_STRENGTH = "Completed some interview questions"
FALLBACK_WEAKNESS = "Unable to provide detailed analysis"
FALLBACK_RECOMMENDATIONS = [
    "Practice answering all interview questions",
    "Avoid skipping questions during interviews",
]

HIRING_MANAGER_GUIDANCE = dedent(
    """
    You are a senior hiring manager providing final interview feedback.
    Provide comprehensive feedback:
    1. Overall assessment of the candidate
    2. Key strengths demonstrated
    3. Areas needing improvement (include skipped questions if applicable)
    4. Specific recommendations for future interviews
    5. Hiring recommendation (strong yes, yes, maybe, no, strong no)
    Skipped questions count as 0/10 in the overall score.
    """
).strip()


def skipped_weakness(unanswered: int) -> str:
    return f"Skipped {unanswered} question(s) without answering"


def fallback_feedback(answered: int, unanswered: int) -> OverallFeedback:  # Generic summary used when the summarizer fails
    return OverallFeedback(
        overall_feedback=FALLBACK_FEEDBACK,
        strengths=[FALLBACK_STRENGTH] if answered else [],
        weaknesses=[skipped_weakness(unanswered)] if unanswered else [FALLBACK_WEAKNESS],
        recommendations=list(FALLBACK_RECOMMENDATIONS),
    )


class LlmFeedbackSummarizer:  # Writes the overall assessment from answered rounds
    def __init__(self, route: LlmRoute) -> None:
        self._route = route
        self._prompt = ChatPromptTemplate.from_messages(
            [
                ("system", HIRING_MANAGER_GUIDANCE),
                (
                    "human",
                    (
                        "Position: {job_title}\n\n"
                        "Interview Summary:\n"
                        "- Total Questions: {total}\n"
                        "- Answered Questions: {answered}\n"
                        "- Unanswered Questions: {unanswered}\n\n"
                        "{transcript}\n\n"
                        "Return JSON with overall_score, overall_feedback (2-3 paragraphs), strengths,"
                        " weaknesses and recommendations."
                    ),
                ),
            ]
        )
        self._chain = self._prompt | llm_runnable(self._route, OverallFeedback)

    def summarize(
        self,
        job_title: str,
        answered_questions: Sequence[Question],
        *,
        total_questions: Optional[int] = None,
    ) -> OverallFeedback:
        total = total_questions if total_questions is not None else len(answered_questions)
        try:
            return self._chain.invoke(
                {
                    "job_title": job_title,
                    "total": str(total),
                    "answered": str(len(answered_questions)),
                    "unanswered": str(max(0, total - len(answered_questions))),
                    "transcript": _format_transcript(answered_questions),
                }
            )
        except LlmGatewayError as exc:
            raise SummaryError(f"Feedback summary failed: {exc}") from exc


def summarizer_with_config(config_path: Path) -> LlmFeedbackSummarizer:  # Build from app_config.json
    return LlmFeedbackSummarizer(load_route(config_path, FEEDBACK_SUMMARIZER_ROUTE_KEY))


def _format_transcript(questions: Sequence[Question]) -> str:
    if not questions:
        return "The candidate did not answer any questions."
    blocks: List[str] = []
    for index, q in enumerate(questions, start=1):
        blocks.append(f"Q{index} ({q.category}): {q.question}\nCandidate Answer: {q.user_answer}\nScore: {q.score}/10")
    return "\n\n".join(blocks)


__all__ = [
    "FALLBACK_FEEDBACK",
    "FALLBACK_RECOMMENDATIONS",
    "FALLBACK_STRENGTH",
    "FALLBACK_WEAKNESS",
    "FEEDBACK_SUMMARIZER_ROUTE_KEY",
    "LlmFeedbackSummarizer",
    "fallback_feedback",
    "skipped_weakness",
    "summarizer_with_config",
]
