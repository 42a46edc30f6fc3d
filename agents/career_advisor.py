from __future__ import annotations  # Career advice chatbot

import logging
from pathlib import Path
from textwrap import dedent
from typing import List, Literal, Sequence, Tuple

from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from pydantic import BaseModel

from config import LlmRoute, load_route
from interviews.errors import ChatError
from llm_gateway import LlmGatewayError, text_runnable

logger = logging.getLogger(__name__)

CAREER_ADVISOR_ROUTE_KEY = "agents.career_advisor"  # Registry key in app_config.json
MAX_HISTORY_TURNS = 20

CAREER_ADVISOR_PROMPT = dedent(
    """
    You are an expert AI Career Advisor with 15+ years of experience in HR, recruitment, and career coaching.
    You provide professional, actionable, and personalized career guidance.

    Your expertise includes:
    - Resume and CV writing: ATS optimization, formatting, keyword optimization
    - Cover letters: storytelling, company research integration, customization
    - Job search strategies: job boards, networking, LinkedIn optimization
    - Interview preparation: behavioral techniques (STAR method), technical interview prep, salary discussions
    - Salary negotiation: market research, benefits evaluation, counter-offer strategies
    - Career development: skill gap analysis, career path planning, leadership development
    - Career transitions: transferable skills, pivot strategies, upskilling recommendations

    Communication style:
    - Professional yet approachable and encouraging
    - Specific, actionable advice with examples; bullet points when listing several points
    - Ask clarifying questions when needed
    - Keep responses concise (2-4 paragraphs) but comprehensive
    """
).strip()


class ChatTurn(BaseModel):  # One prior message in the advisor conversation
    role: Literal["user", "assistant"]
    content: str


class CareerAdvisor:  # Multi-turn advisor over a plain-text route
    def __init__(self, route: LlmRoute) -> None:
        self._route = route
        self._prompt = ChatPromptTemplate.from_messages(
            [
                ("system", CAREER_ADVISOR_PROMPT),
                MessagesPlaceholder("history"),
                ("human", "{message}"),
            ]
        )
        self._chain = self._prompt | text_runnable(self._route)

    def reply(self, history: Sequence[ChatTurn], message: str) -> str:
        if not message.strip():
            raise ValueError("Message must not be empty")
        try:
            return self._chain.invoke({"history": _history_messages(history), "message": message.strip()})
        except LlmGatewayError as exc:
            logger.error("Career advisor call failed: %s", exc)
            raise ChatError(f"Career advisor unavailable: {exc}") from exc


def advisor_with_config(config_path: Path) -> CareerAdvisor:  # Build from app_config.json
    return CareerAdvisor(load_route(config_path, CAREER_ADVISOR_ROUTE_KEY))


def _history_messages(history: Sequence[ChatTurn]) -> List[Tuple[str, str]]:  # Keep the most recent turns only
    recent = list(history)[-MAX_HISTORY_TURNS:]
    return [("human" if turn.role == "user" else "ai", turn.content) for turn in recent]


__all__ = [
    "CAREER_ADVISOR_PROMPT",
    "CAREER_ADVISOR_ROUTE_KEY",
    "CareerAdvisor",
    "ChatTurn",
    "advisor_with_config",
]
