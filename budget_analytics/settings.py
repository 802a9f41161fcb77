"""Dashboard configuration defaults and environment overrides."""

from __future__ import annotations

import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping


PROJECT_ROOT = Path(__file__).resolve().parent.parent

DEFAULTS: dict[str, Any] = {
    "data_path": str(PROJECT_ROOT / "data" / "budget_data.json"),
    "default_indicators": ["Ukupni Prihodi, Euro", "Ukupni Rashodi, Euro"],
    "comparison_year_count": 2,
    "simulation_periods": 12,
    "simulation_count": 10000,
    "ai_api_key": "",
    "ai_model": "deepseek/deepseek-chat-v3.1:free",
    "ai_base_url": "https://openrouter.ai/api/v1/chat/completions",
    "ai_timeout_sec": 60,
    "ai_max_tokens": 1000,
    "ai_temperature": 0.7,
    "storage_root": ".local_store",
}

ENV_OVERRIDES = {
    "BUDGET_DASHBOARD_DATA_PATH": "data_path",
    "OPENROUTER_API_KEY": "ai_api_key",
    "BUDGET_DASHBOARD_AI_MODEL": "ai_model",
    "BUDGET_DASHBOARD_AI_TIMEOUT": "ai_timeout_sec",
    "BUDGET_DASHBOARD_STORAGE_ROOT": "storage_root",
}


def _coerce_like(default_value: Any, raw: str) -> Any:
    if isinstance(default_value, int) and not isinstance(default_value, bool):
        try:
            return int(float(raw))
        except (TypeError, ValueError):
            return default_value
    return raw


def load_settings(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Return DEFAULTS with non-empty environment overrides applied."""
    env = os.environ if environ is None else environ
    settings = deepcopy(DEFAULTS)
    for env_key, setting_key in ENV_OVERRIDES.items():
        raw = str(env.get(env_key, "") or "").strip()
        if raw:
            settings[setting_key] = _coerce_like(DEFAULTS[setting_key], raw)
    return settings
