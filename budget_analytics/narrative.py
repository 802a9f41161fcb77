"""Client for the remote text service that writes narrative budget insights."""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from typing import Any, Sequence

import requests

from budget_analytics.runtime_logging import append_runtime_event
from budget_analytics.settings import load_settings


SYSTEM_PROMPT = (
    "You are a financial analyst specialising in public finances and economic indicators. "
    "Give clear, practical insights that readers without a finance background can follow. "
    "Focus on trends, risks, opportunities and practical implications. "
    "Use plain language while keeping analytical depth. "
    "Always structure the answer with clear sections and bullet points, and keep it short."
)

DEFAULT_QUESTION = (
    "Act as a state budget expert with IMF and World Bank experience advising an EU government. "
    "Provide a comprehensive analysis of this financial data."
)
FORECAST_QUESTION = (
    "Based on this Monte Carlo simulation and historical data, what are the key insights and risks "
    "for this financial indicator?"
)
SIMULATION_QUESTION = (
    "Analyse these Monte Carlo simulation results. Focus on the expected value, downside risk "
    "(lower percentiles) and upside (upper percentiles). Explain simply for non-specialists."
)
COMPARISON_QUESTION = "Write a short, clear analysis of these financial figures with a focus on trends and key risks."
OVERVIEW_QUESTION = (
    "Analyse these overview metrics. Focus on revenue versus expenditure patterns, fiscal health, "
    "tax performance and overall sustainability. Highlight key trends, risks and opportunities."
)
QUICK_PROMPTS = [
    "What are the main trends and patterns in this data?",
    "Identify potential risks and areas of concern.",
    "What opportunities for improvement do you see?",
    "Compare revenue and expenditure patterns.",
    "Assess the sustainability of the current financial trends.",
]

UNAVAILABLE_MESSAGE = "AI analysis is temporarily unavailable. Please check your API configuration and try again."
NO_ANALYSIS_MESSAGE = "No analysis available"


def _json_safe(value: Any):
    if is_dataclass(value) and not isinstance(value, type):
        return _json_safe(asdict(value))
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_json_safe(v) for v in value]
    if hasattr(value, "tolist"):
        return _json_safe(value.tolist())
    if hasattr(value, "item"):
        return value.item()
    return value


def to_payload_json(value: Any) -> str:
    """Serialize analytics results into the indented JSON sent with a prompt."""
    return json.dumps(_json_safe(value), indent=2, ensure_ascii=False)


class FinancialAI:
    """Chat-completion client; every failure is reported as a message string."""

    def __init__(
        self,
        api_key: str,
        model: str = "deepseek/deepseek-chat-v3.1:free",
        base_url: str = "https://openrouter.ai/api/v1/chat/completions",
        timeout: float = 60,
        max_tokens: int = 1000,
        temperature: float = 0.7,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Title": "Budget Execution Dashboard",
        }

    def _request_body(self, financial_data: str, question: str, context: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f"{context}\n\nQuestion: {question}\n\nFinancial Data:\n{financial_data}"},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    def analyze_financial_data(self, financial_data: str, question: str = DEFAULT_QUESTION, context: str = "") -> str:
        try:
            response = self.session.post(
                self.base_url,
                headers=self._headers(),
                json=self._request_body(financial_data, question or DEFAULT_QUESTION, context),
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
            choices = payload.get("choices") or []
            if not choices:
                return NO_ANALYSIS_MESSAGE
            content = (choices[0].get("message") or {}).get("content")
            return content or NO_ANALYSIS_MESSAGE
        except (requests.RequestException, ValueError, AttributeError, TypeError) as exc:
            append_runtime_event(
                level="ERROR",
                event="ai_analysis_failed",
                message="Narrative analysis request failed.",
                context={"model": self.model, "question": (question or DEFAULT_QUESTION)[:200]},
                exc=exc,
            )
            return UNAVAILABLE_MESSAGE

    def generate_forecast_insights(
        self,
        indicator: str,
        historical_values: Sequence[float],
        monte_carlo_results: Any,
    ) -> str:
        data_str = to_payload_json(
            {
                "indicator": indicator,
                "historical_values": list(historical_values),
                "monte_carlo_results": monte_carlo_results,
            }
        )
        return self.analyze_financial_data(
            financial_data=data_str,
            question=FORECAST_QUESTION,
            context="This is forecast analysis using Monte Carlo simulation.",
        )


def create_ai_client(settings: dict[str, Any] | None = None) -> FinancialAI | None:
    """Build a client from settings, or None when no API key is configured."""
    settings = settings if settings is not None else load_settings()
    api_key = str(settings.get("ai_api_key") or "").strip()
    if not api_key:
        append_runtime_event(
            level="WARNING",
            event="ai_client_unconfigured",
            message="OpenRouter API key not configured. AI features will be disabled.",
        )
        return None
    return FinancialAI(
        api_key=api_key,
        model=str(settings.get("ai_model") or "deepseek/deepseek-chat-v3.1:free"),
        base_url=str(settings.get("ai_base_url") or "https://openrouter.ai/api/v1/chat/completions"),
        timeout=float(settings.get("ai_timeout_sec") or 60),
        max_tokens=int(settings.get("ai_max_tokens") or 1000),
        temperature=float(settings.get("ai_temperature", 0.7)),
    )
