import pytest

from config import load_route
from config.registry import QUESTION_GENERATOR_KEY, bind_model, get_model, is_bound, unbind_all
from config.settings import PROJECT_ROOT, Settings


def test_settings_defaults():
    settings = Settings(_env_file=None)
    assert settings.DB_PATH.endswith(".db")
    assert settings.APP_CONFIG_PATH == str(PROJECT_ROOT / "app_config.json")
    assert settings.IDEAL_ANSWERS is True
    assert settings.cors_origins() == ["*"]


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("IDEAL_ANSWERS", "false")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:5173, https://coach.example.com,")
    settings = Settings(_env_file=None)
    assert settings.IDEAL_ANSWERS is False
    assert settings.cors_origins() == ["http://localhost:5173", "https://coach.example.com"]


def test_registry_bind_and_retrieve():
    marker = object()
    bind_model(QUESTION_GENERATOR_KEY, marker)
    assert is_bound(QUESTION_GENERATOR_KEY)
    assert get_model(QUESTION_GENERATOR_KEY) is marker
    unbind_all()
    assert not is_bound(QUESTION_GENERATOR_KEY)


def test_registry_missing_key_raises():
    with pytest.raises(KeyError):
        get_model("models.unknown")


def test_shipped_config_registers_every_component():
    config_path = PROJECT_ROOT / "app_config.json"
    for key in (
        "jd_analysis.parse_job_description",
        "agents.question_generator",
        "agents.answer_evaluator",
        "agents.ideal_answer",
        "agents.feedback_summarizer",
        "agents.career_advisor",
    ):
        assert load_route(config_path, key).model


def test_text_routes_do_not_enforce_json():
    config_path = PROJECT_ROOT / "app_config.json"
    assert load_route(config_path, "agents.career_advisor").enforce_json is False
    assert load_route(config_path, "agents.answer_evaluator").enforce_json is True
