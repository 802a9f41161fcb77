from __future__ import annotations

from pathlib import Path

from streamlit.testing.v1 import AppTest

from budget_analytics.dataset import latest_year_months, load_financial_data
from budget_analytics.settings import DEFAULTS


APP_PATH = Path(__file__).resolve().parents[1] / "app.py"


def _widget_by_label(widgets, label: str):
    matches = [w for w in widgets if getattr(w, "label", "") == label]
    assert matches, f"Widget not found for label: {label}"
    return matches[0]


def _assert_no_app_exceptions(at: AppTest) -> None:
    assert len(at.exception) == 0


def _fresh_app(tmp_path, monkeypatch) -> AppTest:
    monkeypatch.setenv("BUDGET_DASHBOARD_STORAGE_ROOT", str(tmp_path))
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    return AppTest.from_file(str(APP_PATH))


def test_app_initial_run_has_no_exceptions(tmp_path, monkeypatch):
    at = _fresh_app(tmp_path, monkeypatch)
    at.run(timeout=180)
    _assert_no_app_exceptions(at)
    assert [m.label for m in at.metric][:4] == ["Total Revenue", "Total Expenditure", "Net Balance", "Tax Revenue"]


def test_default_date_range_is_latest_year(tmp_path, monkeypatch):
    at = _fresh_app(tmp_path, monkeypatch)
    at.run(timeout=180)
    latest = latest_year_months(load_financial_data(DEFAULTS["data_path"]))
    assert tuple(at.select_slider(key="date_range").value) == (latest[0], latest[-1])


def test_simulation_analysis_without_run_asks_for_simulation(tmp_path, monkeypatch):
    at = _fresh_app(tmp_path, monkeypatch)
    at.run(timeout=180)
    at.radio(key="ai_focus").set_value("Simulation")
    at.run(timeout=180)
    _widget_by_label(at.button, "Generate Analysis").click()
    at.run(timeout=180)
    _assert_no_app_exceptions(at)
    assert any("Run a simulation first" in str(info.value) for info in at.info)


def test_simulation_and_pdf_smoke_flow(tmp_path, monkeypatch):
    at = _fresh_app(tmp_path, monkeypatch)
    at.run(timeout=180)
    at.number_input(key="simulation_count").set_value(1000)
    at.run(timeout=180)
    _widget_by_label(at.button, "Run Simulation").click()
    at.run(timeout=180)
    _assert_no_app_exceptions(at)
    assert at.session_state["simulation_result"] is not None

    _widget_by_label(at.button, "Prepare PDF Report").click()
    at.run(timeout=300)
    _assert_no_app_exceptions(at)
    assert bytes(at.session_state["pdf_bytes"]).startswith(b"%PDF")
