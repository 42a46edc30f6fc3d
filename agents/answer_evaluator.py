from __future__ import annotations  # LLM-backed answer evaluation with ideal answers

import logging
from pathlib import Path
from textwrap import dedent
from typing import Optional, Sequence

from langchain_core.prompts import ChatPromptTemplate

from agents.types import AnswerEvaluation
from config import LlmRoute, load_config, route_for, settings
from interviews.errors import EvaluationError
from llm_gateway import LlmGatewayError
from llm_gateway import runnable as llm_runnable
from llm_gateway import text_runnable

logger = logging.getLogger(__name__)

ANSWER_EVALUATOR_ROUTE_KEY = "agents.answer_evaluator"  # Registry keys in app_config.json
IDEAL_ANSWER_ROUTE_KEY = "agents.ideal_answer"

FALLBACK_SCORE = 5.0
FALLBACK_FEEDBACK = "Answer received. Unable to provide detailed evaluation at this time."

EVALUATION_GUIDANCE = dedent(
    """
    You are an expert interviewer evaluating a candidate's response.
    Evaluate based on:
    1. Technical accuracy (40%) - Is the information correct?
    2. Completeness (30%) - Did they cover the key aspects?
    3. Communication clarity (20%) - Is the answer well-structured and clear?
    4. {final_criterion}

    Scoring guide:
    - 9-10: Exceptional answer, exceeds expectations
    - 7-8: Good answer, covers main points well
    - 5-6: Adequate, missing some key points
    - 3-4: Below average, significant gaps
    - 1-2: Poor, major misunderstandings

    Provide constructive feedback highlighting strengths and specific areas for improvement.
    """
).strip()

STAR_CRITERION = "STAR method usage (10%) - Did they use Situation, Task, Action, Result format?"
DEPTH_CRITERION = "Depth of understanding (10%) - Did they show deep knowledge?"


def fallback_evaluation() -> AnswerEvaluation:  # Neutral evaluation used when the evaluator fails
    return AnswerEvaluation(score=FALLBACK_SCORE, feedback=FALLBACK_FEEDBACK, strengths=["Attempted the question"])


class LlmAnswerEvaluator:  # Scores one answer and optionally writes a model answer
    def __init__(self, route: LlmRoute, ideal_route: Optional[LlmRoute] = None) -> None:
        self._route = route
        self._ideal_route = ideal_route
        self._prompt = ChatPromptTemplate.from_messages(
            [
                ("system", EVALUATION_GUIDANCE),
                (
                    "human",
                    (
                        "Question Category: {category}\n"
                        "Question: {question}\n\n"
                        "Candidate Answer:\n{answer}\n\n"
                        "Key concepts expected: {expected_keywords}\n\n"
                        "Return JSON with score (1-10), feedback (2-3 sentences on strengths, 2-3 on"
                        " improvements), missing_concepts, follow_up_needed and strengths."
                    ),
                ),
            ]
        )
        self._chain = self._prompt | llm_runnable(self._route, AnswerEvaluation)
        self._ideal_chain = None
        if ideal_route is not None:
            ideal_prompt = ChatPromptTemplate.from_messages(
                [
                    (
                        "system",
                        "You are an expert software engineer providing a high-quality answer to an interview question.",
                    ),
                    (
                        "human",
                        (
                            "Question Category: {category}\n"
                            "Question: {question}\n"
                            "Key concepts to cover: {expected_keywords}\n\n"
                            "Provide a comprehensive, well-structured answer that demonstrates deep technical"
                            " knowledge, practical experience and clear communication. {style_hint}\n"
                            "Keep it concise but thorough (150-250 words). Return ONLY the answer text."
                        ),
                    ),
                ]
            )
            self._ideal_chain = ideal_prompt | text_runnable(ideal_route)

    def evaluate(
        self,
        question: str,
        answer: str,
        expected_keywords: Sequence[str],
        category: str,
    ) -> AnswerEvaluation:
        keywords = ", ".join(expected_keywords) or "(none specified)"
        try:
            result = self._chain.invoke(
                {
                    "final_criterion": STAR_CRITERION if category == "behavioral" else DEPTH_CRITERION,
                    "category": category,
                    "question": question,
                    "answer": answer,
                    "expected_keywords": keywords,
                }
            )
        except LlmGatewayError as exc:
            raise EvaluationError(f"Answer evaluation failed: {exc}") from exc
        ideal = self._ideal_answer(question, keywords, category)
        return result.model_copy(update={"ideal_answer": ideal})

    def _ideal_answer(self, question: str, keywords: str, category: str) -> Optional[str]:
        if self._ideal_chain is None:
            return None
        try:
            text = self._ideal_chain.invoke(
                {
                    "category": category,
                    "question": question,
                    "expected_keywords": keywords,
                    "style_hint": (
                        "Use the STAR method (Situation, Task, Action, Result)."
                        if category == "behavioral"
                        else "Include real-world examples and best practices."
                    ),
                }
            )
        except LlmGatewayError as exc:
            logger.warning("Ideal answer generation failed: %s", exc)
            return None
        return text.strip() or None


def evaluator_with_config(config_path: Path) -> LlmAnswerEvaluator:  # Build from app_config.json
    cfg = load_config(config_path)
    ideal_route = route_for(cfg, IDEAL_ANSWER_ROUTE_KEY) if settings.IDEAL_ANSWERS else None
    return LlmAnswerEvaluator(route_for(cfg, ANSWER_EVALUATOR_ROUTE_KEY), ideal_route)


__all__ = [
    "ANSWER_EVALUATOR_ROUTE_KEY",
    "FALLBACK_FEEDBACK",
    "FALLBACK_SCORE",
    "IDEAL_ANSWER_ROUTE_KEY",
    "LlmAnswerEvaluator",
    "evaluator_with_config",
    "fallback_evaluation",
]
