import pytest

import jd_analysis.jd_analysis as jd_mod
from agents.types import JobProfile
from config import LlmRoute
from interviews.errors import ParseError
from llm_gateway import LlmGatewayError


def _route() -> LlmRoute:
    return LlmRoute(
        name="test",
        base_url="http://example.com",
        endpoint="/llm",
        model="test-model",
        timeout_s=1.0,
    )


def test_build_task_includes_description_and_contract() -> None:
    task = jd_mod._build_task("Senior Python developer with Django and AWS")
    assert task.startswith("You are an expert job description analyzer")
    assert "Senior Python developer with Django and AWS" in task
    assert "difficulty: one of junior, mid, senior." in task
    assert task.endswith("Return only JSON without markdown fences, text, or commentary.")


def test_parse_job_description_invokes_gateway(monkeypatch) -> None:
    expected = JobProfile(job_title="Data Engineer", tech_stack=["Spark"], difficulty="mid")
    captured = {}

    def fake_call(task, schema, *, cfg):
        captured["schema"] = schema
        captured["cfg"] = cfg
        return expected

    monkeypatch.setattr(jd_mod, "call", fake_call)
    route = _route()
    assert jd_mod.parse_job_description("Spark pipelines", route=route) is expected
    assert captured["schema"] is JobProfile
    assert captured["cfg"] == route


def test_gateway_failure_becomes_parse_error(monkeypatch) -> None:
    def failing_call(task, schema, *, cfg):
        raise LlmGatewayError("down")

    monkeypatch.setattr(jd_mod, "call", failing_call)
    with pytest.raises(ParseError):
        jd_mod.parse_job_description("anything", route=_route())


def test_empty_description_is_a_parse_error() -> None:
    with pytest.raises(ParseError):
        jd_mod.parse_job_description("  ", route=_route())


def test_fallback_profile_is_fixed() -> None:
    profile = jd_mod.fallback_profile()
    assert profile.job_title == "Software Engineer"
    assert profile.tech_stack == ["JavaScript", "Python"]
    assert profile.difficulty == "mid"


def test_job_profile_normalizes_difficulty() -> None:
    assert JobProfile(job_title="x", difficulty=" Senior ").difficulty == "senior"


def test_parse_with_config_resolves_route(monkeypatch, tmp_path) -> None:
    config_path = tmp_path / "app_config.json"
    config_path.write_text(
        '{"llm_routes": {"r1": {"name": "r1", "base_url": "http://x", "model": "m"}},'
        ' "registry": {"jd_analysis.parse_job_description": "r1"}}',
        encoding="utf-8",
    )
    seen = {}

    def fake_parse(text, *, route):
        seen["route"] = route
        return jd_mod.fallback_profile()

    monkeypatch.setattr(jd_mod, "parse_job_description", fake_parse)
    jd_mod.parse_with_config("jd", config_path=config_path)
    assert seen["route"].name == "r1"
