from __future__ import annotations  # LLM-backed question generator for interview rounds

import logging
from pathlib import Path
from textwrap import dedent
from typing import Dict, List, Sequence

from langchain_core.prompts import ChatPromptTemplate

from agents.types import GeneratedQuestion, JobProfile, PriorRound
from config import LlmRoute, load_config, route_for
from interviews.errors import GenerationError
from jd_analysis import JD_ANALYSIS_KEY, parse_job_description
from llm_gateway import LlmGatewayError
from llm_gateway import runnable as llm_runnable

logger = logging.getLogger(__name__)

QUESTION_GENERATOR_ROUTE_KEY = "agents.question_generator"  # Registry key in app_config.json
MAX_ROUNDS = 10

FALLBACK_KEYWORDS = ["experience", "production", "challenges", "solutions"]
FALLBACK_FOLLOW_UPS = ["Can you elaborate on that?", "What would you do differently?"]

CATEGORY_DISTRIBUTION: Dict[str, str] = {  # Category mix per interview mode
    "screening": "Mix of 50% technical fundamentals, 30% behavioral, 20% problem-solving",
    "technical": "70% technical (coding, algorithms, system design), 20% behavioral, 10% architecture",
    "behavioral": "70% behavioral/soft skills, 20% situational, 10% technical background",
}

SENIORITY_GUIDANCE: Dict[str, str] = {  # Question depth per seniority level
    "junior": "Focus on fundamentals, basic concepts, and learning attitude. Avoid complex architecture or advanced patterns.",
    "mid": "Include practical experience, design patterns, and some system design. Test problem-solving skills.",
    "senior": "Deep dive into architecture, scalability, trade-offs, leadership, and complex problem-solving.",
}

INTERVIEWER_GUIDANCE = dedent(
    """
    You are an expert technical interviewer generating one question at a time.
    Questions 1-3 are SIMPLE and fundamental (basics, definitions, simple concepts).
    Questions 4-6 are MEDIUM difficulty (practical scenarios, common problems).
    Questions 7-10 are HARD and advanced (complex architectures, optimization, edge cases).
    Make questions specific to the tech stack and build on previous answers where it helps.
    For technical questions include expected keywords for evaluation.
    """
).strip()


def difficulty_for_round(round_number: int) -> str:  # Progressive difficulty label
    if round_number <= 3:
        return "easy"
    if round_number <= 6:
        return "medium"
    return "hard"


def fallback_question(tech_stack: Sequence[str]) -> GeneratedQuestion:  # Deterministic question used when generation fails
    topic = tech_stack[0] if tech_stack else "software development"
    return GeneratedQuestion(
        question=f"Tell me about your experience with {topic} and how you've used it in production.",
        category="technical",
        expected_keywords=list(FALLBACK_KEYWORDS),
        follow_ups=list(FALLBACK_FOLLOW_UPS),
    )


class LlmQuestionGenerator:  # Parses job descriptions and writes round questions
    def __init__(self, parse_route: LlmRoute, generate_route: LlmRoute) -> None:
        self._parse_route = parse_route
        self._route = generate_route
        self._prompt = ChatPromptTemplate.from_messages(
            [
                ("system", "{instructions}"),
                (
                    "human",
                    (
                        "Interview Mode: {mode}\n"
                        "Job Title: {job_title}\n"
                        "Tech Stack: {tech_stack}\n"
                        "Seniority: {difficulty}\n"
                        "Question Round: {round_number} of {max_rounds}\n"
                        "Question Difficulty: {round_difficulty}\n\n"
                        "Job Description:\n{job_description}\n\n"
                        "{prior_rounds}\n\n"
                        "Guidelines:\n- {seniority_guidance}\n- {category_distribution}\n\n"
                        "Generate ONE interview question. Return JSON with question, category"
                        " (technical, behavioral or system-design), expected_keywords (up to five)"
                        " and follow_ups (one for a vague answer, one for a strong answer)."
                    ),
                ),
            ]
        )
        self._chain = self._prompt | llm_runnable(self._route, GeneratedQuestion)

    def parse(self, job_description: str) -> JobProfile:
        return parse_job_description(job_description, route=self._parse_route)

    def generate(
        self,
        *,
        job_description: str,
        job_title: str,
        tech_stack: Sequence[str],
        difficulty: str,
        round_number: int,
        prior_rounds: Sequence[PriorRound],
        mode: str,
    ) -> GeneratedQuestion:  # One question for ``round_number``
        try:
            result = self._chain.invoke(
                {
                    "instructions": INTERVIEWER_GUIDANCE,
                    "mode": mode,
                    "job_title": job_title,
                    "tech_stack": ", ".join(tech_stack) or "(not specified)",
                    "difficulty": difficulty,
                    "round_number": str(round_number),
                    "max_rounds": str(MAX_ROUNDS),
                    "round_difficulty": difficulty_for_round(round_number),
                    "job_description": job_description.strip() or "(not provided)",
                    "prior_rounds": _format_prior_rounds(prior_rounds),
                    "seniority_guidance": SENIORITY_GUIDANCE.get(difficulty, SENIORITY_GUIDANCE["mid"]),
                    "category_distribution": CATEGORY_DISTRIBUTION.get(mode, CATEGORY_DISTRIBUTION["technical"]),
                }
            )
        except LlmGatewayError as exc:
            raise GenerationError(f"Question generation failed for round {round_number}: {exc}") from exc
        if not result.question.strip():
            raise GenerationError(f"Question generation returned an empty question for round {round_number}")
        return result.model_copy(update={"question": result.question.strip()})


def generator_with_config(config_path: Path) -> LlmQuestionGenerator:  # Build from app_config.json
    cfg = load_config(config_path)
    return LlmQuestionGenerator(route_for(cfg, JD_ANALYSIS_KEY), route_for(cfg, QUESTION_GENERATOR_ROUTE_KEY))


def _format_prior_rounds(prior_rounds: Sequence[PriorRound]) -> str:  # Render previous Q&A for the prompt
    if not prior_rounds:
        return "This is the first question."
    lines: List[str] = ["Previous Q&A in this interview:"]
    for index, item in enumerate(prior_rounds, start=1):
        lines.append(f"Q{index}: {item.question}")
        lines.append(f"A: {item.user_answer or 'Not answered'}")
        lines.append(f"Category: {item.category}")
    return "\n".join(lines)


__all__ = [
    "CATEGORY_DISTRIBUTION",
    "LlmQuestionGenerator",
    "MAX_ROUNDS",
    "QUESTION_GENERATOR_ROUTE_KEY",
    "SENIORITY_GUIDANCE",
    "difficulty_for_round",
    "fallback_question",
    "generator_with_config",
]
