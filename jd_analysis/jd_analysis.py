from __future__ import annotations  # Job description parsing into a role profile

import logging
from pathlib import Path
from textwrap import dedent

from agents.types import JobProfile
from config import LlmRoute, load_route
from interviews.errors import ParseError
from llm_gateway import LlmGatewayError, call

logger = logging.getLogger(__name__)

JD_ANALYSIS_KEY = "jd_analysis.parse_job_description"  # Registry key in app_config.json
FALLBACK_TITLE = "Software Engineer"
FALLBACK_STACK = ("JavaScript", "Python")
FALLBACK_DIFFICULTY = "mid"


def fallback_profile() -> JobProfile:  # Profile used when parsing fails
    return JobProfile(job_title=FALLBACK_TITLE, tech_stack=list(FALLBACK_STACK), difficulty=FALLBACK_DIFFICULTY)


def parse_job_description(job_description: str, *, route: LlmRoute) -> JobProfile:  # Extract title, stack and seniority via LLM
    if not job_description.strip():
        raise ParseError("Job description is empty")
    try:
        profile = call(_build_task(job_description), JobProfile, cfg=route)
    except LlmGatewayError as exc:
        raise ParseError(f"Job description parsing failed: {exc}") from exc
    logger.info("Parsed job description title=%s stack=%s", profile.job_title, ",".join(profile.tech_stack))
    return profile


def parse_with_config(job_description: str, *, config_path: Path) -> JobProfile:  # Convenience helper using app config
    return parse_job_description(job_description, route=load_route(config_path, JD_ANALYSIS_KEY))


PARSE_TEMPLATE = dedent(  # Job description parsing prompt
    """
    You are an expert job description analyzer. Parse the job description below and extract:
    1. Job title
    2. Tech stack (programming languages, frameworks, tools, databases)
    3. Seniority level (junior, mid, or senior) based on years of experience and requirements

    Job description:
    <job_description>
    {job_description}
    </job_description>

    Respond with a JSON object following this contract:
    - job_title: the extracted job title.
    - tech_stack: array of technologies, most important first.
    - difficulty: one of junior, mid, senior.
    Return only JSON without markdown fences, text, or commentary.
    """
).strip()


def _build_task(job_description: str) -> str:  # Build task prompt for LLM
    return PARSE_TEMPLATE.format(job_description=job_description.strip())


__all__ = [
    "FALLBACK_DIFFICULTY",
    "FALLBACK_STACK",
    "FALLBACK_TITLE",
    "JD_ANALYSIS_KEY",
    "fallback_profile",
    "parse_job_description",
    "parse_with_config",
]
