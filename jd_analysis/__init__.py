from __future__ import annotations  # Re-export jd_analysis public API

from .jd_analysis import (  # noqa: F401 F403
    FALLBACK_DIFFICULTY,
    FALLBACK_STACK,
    FALLBACK_TITLE,
    JD_ANALYSIS_KEY,
    fallback_profile,
    parse_job_description,
    parse_with_config,
)

__all__ = [
    "FALLBACK_DIFFICULTY",
    "FALLBACK_STACK",
    "FALLBACK_TITLE",
    "JD_ANALYSIS_KEY",
    "fallback_profile",
    "parse_job_description",
    "parse_with_config",
]
