from __future__ import annotations

import json

import pytest
import requests

import budget_analytics.runtime_logging as runtime_logging
from budget_analytics.monte_carlo import MonteCarloResult
from budget_analytics.narrative import (
    DEFAULT_QUESTION,
    FORECAST_QUESTION,
    NO_ANALYSIS_MESSAGE,
    SYSTEM_PROMPT,
    UNAVAILABLE_MESSAGE,
    FinancialAI,
    create_ai_client,
    to_payload_json,
)
from budget_analytics.settings import load_settings
from budget_analytics.stats import calculate_stats


class _FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class _FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls: list[dict] = []

    def post(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        if self.exc is not None:
            raise self.exc
        return self.response


def _client(session) -> FinancialAI:
    return FinancialAI(api_key="sk-test", session=session)


def test_analyze_financial_data_returns_first_choice_content():
    session = _FakeSession(_FakeResponse({"choices": [{"message": {"content": "## Summary\nAll good."}}]}))
    text = _client(session).analyze_financial_data('{"a": 1}', question="How is it going?", context="ctx")
    assert text == "## Summary\nAll good."

    call = session.calls[0]
    assert call["url"] == "https://openrouter.ai/api/v1/chat/completions"
    assert call["headers"]["Authorization"] == "Bearer sk-test"
    body = call["json"]
    assert body["model"] == "deepseek/deepseek-chat-v3.1:free"
    assert body["max_tokens"] == 1000
    assert body["temperature"] == 0.7
    assert body["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert body["messages"][1]["content"] == 'ctx\n\nQuestion: How is it going?\n\nFinancial Data:\n{"a": 1}'


def test_analyze_financial_data_defaults_question():
    session = _FakeSession(_FakeResponse({"choices": [{"message": {"content": "ok"}}]}))
    _client(session).analyze_financial_data("{}")
    assert f"Question: {DEFAULT_QUESTION}" in session.calls[0]["json"]["messages"][1]["content"]


@pytest.mark.parametrize(
    "payload",
    [
        {"choices": []},
        {},
        {"choices": [{"message": {"content": ""}}]},
        {"choices": [{"message": {}}]},
    ],
)
def test_analyze_financial_data_without_content(payload):
    assert _client(_FakeSession(_FakeResponse(payload))).analyze_financial_data("{}") == NO_ANALYSIS_MESSAGE


def test_transport_failure_returns_unavailable_message_and_logs(runtime_log_file):
    session = _FakeSession(exc=requests.ConnectionError("offline"))
    assert _client(session).analyze_financial_data("{}") == UNAVAILABLE_MESSAGE
    events = runtime_logging.read_runtime_events()
    assert events[-1]["event"] == "ai_analysis_failed"
    assert events[-1]["exception_type"] == "ConnectionError"


def test_http_error_and_bad_json_return_unavailable_message(runtime_log_file):
    assert _client(_FakeSession(_FakeResponse({}, status_code=429))).analyze_financial_data("{}") == UNAVAILABLE_MESSAGE
    assert _client(_FakeSession(_FakeResponse(None))).analyze_financial_data("{}") == UNAVAILABLE_MESSAGE


def test_generate_forecast_insights_sends_history_and_results():
    session = _FakeSession(_FakeResponse({"choices": [{"message": {"content": "insight"}}]}))
    result = MonteCarloResult(1.0, 0.5, 0.1, 0.5, 1.0, 1.5, 2.0, [0.1, 0.2])
    assert _client(session).generate_forecast_insights("Porezi, Euro", [1.0, 2.0], result) == "insight"

    content = session.calls[0]["json"]["messages"][1]["content"]
    assert content.startswith("This is forecast analysis using Monte Carlo simulation.")
    assert f"Question: {FORECAST_QUESTION}" in content
    payload = json.loads(content.split("Financial Data:\n", 1)[1])
    assert payload["indicator"] == "Porezi, Euro"
    assert payload["historical_values"] == [1.0, 2.0]
    assert payload["monte_carlo_results"]["percentile50"] == 1.0


def test_to_payload_json_handles_dataclasses():
    payload = json.loads(to_payload_json({"stats": calculate_stats([1.0, 2.0])}))
    assert payload["stats"]["total"] == 3.0


def test_create_ai_client_requires_api_key(runtime_log_file):
    assert create_ai_client(load_settings({})) is None
    assert runtime_logging.read_runtime_events()[-1]["event"] == "ai_client_unconfigured"

    client = create_ai_client(load_settings({"OPENROUTER_API_KEY": "sk-live", "BUDGET_DASHBOARD_AI_TIMEOUT": "5"}))
    assert isinstance(client, FinancialAI)
    assert client.api_key == "sk-live"
    assert client.timeout == 5.0


def test_failure_with_missing_question_still_returns_message(runtime_log_file):
    session = _FakeSession(exc=requests.Timeout("slow"))
    assert _client(session).analyze_financial_data("{}", question=None) == UNAVAILABLE_MESSAGE
    event = runtime_logging.read_runtime_events()[-1]
    assert event["context"]["question"] == DEFAULT_QUESTION[:200]
