from __future__ import annotations

from budget_analytics.settings import DEFAULTS, load_settings


def test_load_settings_returns_defaults_copy():
    settings = load_settings({})
    assert settings == DEFAULTS
    settings["default_indicators"].append("X")
    assert "X" not in DEFAULTS["default_indicators"]


def test_load_settings_applies_environment_overrides():
    settings = load_settings(
        {
            "OPENROUTER_API_KEY": " sk-test ",
            "BUDGET_DASHBOARD_AI_TIMEOUT": "15",
            "BUDGET_DASHBOARD_DATA_PATH": "/tmp/budget.json",
            "BUDGET_DASHBOARD_AI_MODEL": "",
        }
    )
    assert settings["ai_api_key"] == "sk-test"
    assert settings["ai_timeout_sec"] == 15
    assert settings["data_path"] == "/tmp/budget.json"
    assert settings["ai_model"] == DEFAULTS["ai_model"]


def test_load_settings_keeps_default_for_bad_integer():
    assert load_settings({"BUDGET_DASHBOARD_AI_TIMEOUT": "soon"})["ai_timeout_sec"] == DEFAULTS["ai_timeout_sec"]
