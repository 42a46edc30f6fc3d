"""LLM route configuration loaded from ``app_config.json``."""
from __future__ import annotations

from pathlib import Path
from typing import Dict

from pydantic import BaseModel, Field


class LlmRoute(BaseModel):
    """One OpenAI-compatible chat completions endpoint."""

    name: str
    base_url: str
    endpoint: str = "/chat/completions"
    model: str
    timeout_s: float = Field(default=30.0, ge=0.1)
    max_retries: int = Field(default=1, ge=0)
    api_key_env: str | None = None
    response_format: str | None = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2048, ge=1)
    extra_headers: Dict[str, str] = Field(default_factory=dict)
    enforce_json: bool = True


class AppConfig(BaseModel):
    """Routes plus the component -> route registry."""

    llm_routes: Dict[str, LlmRoute]
    registry: Dict[str, str]


def load_config(path: Path) -> AppConfig:
    """Load configuration from disk."""

    return AppConfig.model_validate_json(path.read_text(encoding="utf-8"))


def route_for(cfg: AppConfig, target: str) -> LlmRoute:
    """Resolve the route registered for a component key.

    Raises:
        KeyError: If the component or its route is not configured.
    """

    if target not in cfg.registry:
        raise KeyError(f"Registry entry missing for '{target}'")
    route_id = cfg.registry[target]
    if route_id not in cfg.llm_routes:
        raise KeyError(f"Route '{route_id}' missing for '{target}'")
    return cfg.llm_routes[route_id]


def load_route(path: Path, target: str) -> LlmRoute:
    return route_for(load_config(path), target)


__all__ = ["AppConfig", "LlmRoute", "load_config", "load_route", "route_for"]
