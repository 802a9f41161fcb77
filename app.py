from datetime import datetime, timezone
from pathlib import Path

import pandas as pd
import streamlit as st

from budget_analytics.charts import comparison_figure, distribution_figure, time_series_figure
from budget_analytics.dataset import (
    INDICATOR_CATEGORIES,
    available_months,
    available_years,
    category_indicators,
    clean_indicator_name,
    filter_data_by_date_range,
    get_available_date_range,
    group_by_year,
    indicator_values,
    latest_year_months,
    load_financial_data,
)
from budget_analytics.input_metadata import advisory_warnings, help_with_guidance
from budget_analytics.integrity_checks import run_integrity_checks
from budget_analytics.monte_carlo import (
    InsufficientDataError,
    run_monte_carlo_simulation,
    simulation_summary,
)
from budget_analytics.narrative import (
    COMPARISON_QUESTION,
    OVERVIEW_QUESTION,
    QUICK_PROMPTS,
    SIMULATION_QUESTION,
    create_ai_client,
    to_payload_json,
)
from budget_analytics.overview import build_overview, overview_payload
from budget_analytics.pdf_export import build_analysis_pdf_bytes
from budget_analytics.runtime_logging import (
    append_runtime_event,
    configure_log_root,
    install_global_exception_logging,
    read_runtime_events,
    runtime_log_path,
)
from budget_analytics.settings import load_settings
from budget_analytics.stats import analyze_budget_trend, calculate_stats, compute_yoy_metrics


SETTINGS = load_settings()
configure_log_root(SETTINGS["storage_root"])
install_global_exception_logging()


UI_DEFAULTS = {
    "simulation_result": None,
    "simulation_signature": None,
    "ai_analysis": "",
    "pdf_bytes": None,
    "runtime_log_limit": 200,
}


def _init_state() -> None:
    for key, value in UI_DEFAULTS.items():
        if key not in st.session_state:
            st.session_state[key] = value


@st.cache_data(show_spinner=False)
def _load_data_cached(path: str) -> dict:
    return load_financial_data(path)


def _fmt_eur(value: float) -> str:
    return f"€{value:,.0f}"


def _stats_frame(stats_by_indicator: dict, trends_by_indicator: dict) -> pd.DataFrame:
    rows = []
    for indicator, stats in stats_by_indicator.items():
        trend = trends_by_indicator[indicator]
        rows.append(
            {
                "Indicator": clean_indicator_name(indicator),
                "Total": stats.total,
                "Average": stats.average,
                "Min": stats.min,
                "Max": stats.max,
                "Growth Rate %": round(stats.growth_rate, 2),
                "Std Dev": stats.standard_deviation,
                "Trend": trend.trend,
                "Volatility": trend.volatility,
                "Seasonal": "Yes" if trend.seasonality else "No",
            }
        )
    return pd.DataFrame(rows)


def _yoy_frame(yoy_metrics: dict) -> pd.DataFrame:
    rows = [
        {
            "Indicator": clean_indicator_name(indicator),
            "Comparison": key,
            "Delta": metric.delta,
            "Change %": round(metric.percent_change, 2),
        }
        for indicator, metrics in yoy_metrics.items()
        for key, metric in metrics.items()
    ]
    return pd.DataFrame(rows, columns=["Indicator", "Comparison", "Delta", "Change %"])


def _ask_ai(payload, question: str, context: str) -> str:
    client = create_ai_client(SETTINGS)
    if client is None:
        return ""
    with st.spinner("Requesting analysis..."):
        return client.analyze_financial_data(to_payload_json(payload), question=question, context=context)


st.set_page_config(page_title="Budget Execution Dashboard", layout="wide")
st.title("Budget Execution Dashboard")
st.caption("Monthly budget execution with year-over-year comparison, Monte Carlo forecasting, and narrative analysis.")
_init_state()

data_path = str(SETTINGS["data_path"])
try:
    full_data = _load_data_cached(data_path)
except (OSError, ValueError) as exc:
    append_runtime_event(
        level="ERROR",
        event="dataset_load_failed",
        message="Failed to load the budget dataset.",
        context={"path": data_path},
        exc=exc,
    )
    st.error(f"Could not load budget data from `{data_path}`: {exc}")
    st.stop()

all_indicators = list(full_data.keys())
all_years = available_years(full_data)
all_months = available_months(full_data)
range_start, range_end = get_available_date_range(full_data)
latest_months = latest_year_months(full_data)

with st.sidebar:
    st.header("Selection")
    group = st.selectbox("Indicator group", ["All"] + [c["name"] for c in INDICATOR_CATEGORIES], key="indicator_group")
    group_indicators = all_indicators if group == "All" else category_indicators(full_data, group)
    default_indicators = [i for i in SETTINGS["default_indicators"] if i in group_indicators] or group_indicators[:2]
    selected_indicators = st.multiselect(
        "Indicators",
        group_indicators,
        default=default_indicators,
        key=f"selected_indicators_{group}",
    )
    selected_years = st.multiselect(
        "Compared years",
        all_years,
        default=all_years[: int(SETTINGS["comparison_year_count"])],
        key="selected_years",
        help=help_with_guidance("selected_years", "Years shown in the comparison view."),
    )
    if all_months:
        start_label, end_label = st.select_slider(
            "Date range",
            options=all_months,
            value=(latest_months[0], latest_months[-1]),
            key="date_range",
        )
    else:
        start_label, end_label = "", ""
    if range_start:
        st.caption(f"Data available from {range_start} to {range_end}.")

    st.header("Simulation")
    simulation_periods = st.number_input(
        "Projection periods (months)",
        min_value=1,
        max_value=60,
        value=int(SETTINGS["simulation_periods"]),
        step=1,
        key="simulation_periods",
        help=help_with_guidance("simulation_periods"),
    )
    simulation_count = st.number_input(
        "Simulation trials",
        min_value=100,
        max_value=100000,
        value=int(SETTINGS["simulation_count"]),
        step=1000,
        key="simulation_count",
        help=help_with_guidance("simulation_count"),
    )

warnings = advisory_warnings(
    {
        "simulation_periods": int(simulation_periods),
        "simulation_count": int(simulation_count),
        "selected_years": list(selected_years),
    }
)
if warnings:
    with st.expander(f"[!] Input Warnings ({len(warnings)})", expanded=False):
        for warning in warnings:
            st.write(f"- {warning}")

filtered_data = filter_data_by_date_range(full_data, start_label, end_label)
grouped = group_by_year(full_data, selected_indicators, selected_years)
yoy_metrics = compute_yoy_metrics(grouped, selected_indicators, selected_years)
stats_by_indicator = {i: calculate_stats(indicator_values(filtered_data, i)) for i in selected_indicators}
trends_by_indicator = {i: analyze_budget_trend(indicator_values(filtered_data, i)) for i in selected_indicators}
overview_cards = build_overview(filtered_data)

integrity_findings = run_integrity_checks(full_data, grouped)
if integrity_findings:
    append_runtime_event(
        level="WARNING",
        event="integrity_checks_failed",
        message=f"{len(integrity_findings)} integrity check(s) failed.",
        context={"finding_count": len(integrity_findings), "findings": integrity_findings[:25]},
    )
    with st.expander(f"[!] Data Integrity Findings ({len(integrity_findings)})", expanded=False):
        st.dataframe(pd.DataFrame(integrity_findings), width="stretch", hide_index=True)
else:
    st.caption("Data integrity checks: passed.")

st.subheader("Overview")
overview_cols = st.columns(len(overview_cards))
for col, card in zip(overview_cols, overview_cards):
    col.metric(
        card.title,
        _fmt_eur(card.stats.total),
        f"{card.stats.growth_rate:,.2f}%",
        delta_color="normal" if card.title != "Total Expenditure" else "inverse",
    )

trends_tab, comparison_tab, simulation_tab, ai_tab = st.tabs(["Trends", "Comparison", "Simulation", "AI Insights"])

with trends_tab:
    trend_fig = time_series_figure(filtered_data, selected_indicators)
    if trend_fig is None:
        st.info("Select at least one indicator with data in the chosen range.")
    else:
        st.plotly_chart(trend_fig, width="stretch")
        st.dataframe(_stats_frame(stats_by_indicator, trends_by_indicator), width="stretch", hide_index=True)

with comparison_tab:
    comp_fig = comparison_figure(grouped, selected_indicators)
    if comp_fig is None:
        st.info("Select at least two years and one indicator to compare.")
    else:
        st.plotly_chart(comp_fig, width="stretch")
        st.dataframe(_yoy_frame(yoy_metrics), width="stretch", hide_index=True)

simulation_block = None
with simulation_tab:
    sim_options = selected_indicators or all_indicators
    sim_indicator = st.selectbox("Indicator to simulate", sim_options, key="simulation_indicator") if sim_options else None
    signature = (sim_indicator, start_label, end_label, int(simulation_periods), int(simulation_count))
    if st.button("Run Simulation", type="primary", disabled=sim_indicator is None):
        history = indicator_values(filtered_data, sim_indicator)
        try:
            with st.spinner("Running simulation..."):
                result = run_monte_carlo_simulation(history, int(simulation_periods), int(simulation_count))
        except InsufficientDataError as exc:
            append_runtime_event(
                level="WARNING",
                event="simulation_insufficient_data",
                message="Simulation skipped for insufficient history.",
                context={"indicator": sim_indicator, "history_length": len(history)},
                exc=exc,
            )
            st.warning(str(exc))
            st.session_state["simulation_result"] = None
        else:
            st.session_state["simulation_result"] = result
            st.session_state["simulation_signature"] = signature
    result = st.session_state.get("simulation_result")
    if result is not None and st.session_state.get("simulation_signature") == signature:
        simulation_block = {
            "indicator": sim_indicator,
            "periods": int(simulation_periods),
            "simulations": int(simulation_count),
            "result": result,
        }
        p_cols = st.columns(5)
        for col, (label, value) in zip(
            p_cols,
            [
                ("P5", result.percentile5),
                ("P25", result.percentile25),
                ("Median", result.percentile50),
                ("P75", result.percentile75),
                ("P95", result.percentile95),
            ],
        ):
            col.metric(label, _fmt_eur(value))
        st.caption(f"Mean {_fmt_eur(result.mean)}, standard deviation {_fmt_eur(result.standard_deviation)}.")
        st.plotly_chart(distribution_figure(result), width="stretch")
        if st.button("Explain Forecast"):
            client = create_ai_client(SETTINGS)
            if client is None:
                st.info("Set OPENROUTER_API_KEY to enable narrative analysis.")
            else:
                with st.spinner("Requesting analysis..."):
                    st.session_state["ai_analysis"] = client.generate_forecast_insights(
                        sim_indicator, indicator_values(filtered_data, sim_indicator), simulation_summary(result)
                    )

with ai_tab:
    st.caption("Narrative analysis is generated by an external language model and may contain errors.")
    focus = st.radio("Focus", ["Overview", "Comparison", "Simulation"], horizontal=True, key="ai_focus")
    question = st.selectbox("Question", [""] + QUICK_PROMPTS, key="ai_question")
    if st.button("Generate Analysis"):
        if focus == "Overview":
            payload = overview_payload(overview_cards, filtered_data)
            default_question, context = OVERVIEW_QUESTION, "Budget overview for the selected range."
        elif focus == "Comparison":
            payload = {
                "years": sorted(selected_years),
                "yoy_metrics": {k: {m: v.to_dict() for m, v in d.items()} for k, d in yoy_metrics.items()},
            }
            default_question, context = COMPARISON_QUESTION, "Year-over-year comparison of selected indicators."
        else:
            payload = simulation_summary(simulation_block["result"]) if simulation_block else None
            default_question, context = SIMULATION_QUESTION, "Monte Carlo simulation results."
        if payload is None:
            st.info("Run a simulation first to analyse its results.")
        else:
            answer = _ask_ai(payload, question or default_question, context)
            if answer:
                st.session_state["ai_analysis"] = answer
            else:
                st.info("Set OPENROUTER_API_KEY to enable narrative analysis.")
    if st.session_state.get("ai_analysis"):
        st.markdown(st.session_state["ai_analysis"])

st.subheader("Export")
if st.button("Prepare PDF Report"):
    report_input = {
        "generated_at_utc": datetime.now(timezone.utc).isoformat(),
        "range_start_label": start_label,
        "range_end_label": end_label,
        "selected_indicators": selected_indicators,
        "selected_years": selected_years,
        "data": filtered_data,
        "grouped": grouped,
        "overview_cards": overview_cards,
        "stats_by_indicator": stats_by_indicator,
        "trends_by_indicator": trends_by_indicator,
        "yoy_metrics": yoy_metrics,
        "monte_carlo": simulation_block,
        "ai_analysis": st.session_state.get("ai_analysis", ""),
        "integrity_findings": integrity_findings,
    }
    with st.spinner("Building PDF..."):
        st.session_state["pdf_bytes"] = build_analysis_pdf_bytes(report_input, {"log_event": append_runtime_event})
if st.session_state.get("pdf_bytes"):
    st.download_button(
        "Download PDF Report",
        st.session_state["pdf_bytes"],
        file_name=f"budget_analysis_{datetime.now().strftime('%Y%m%d')}.pdf",
        mime="application/pdf",
    )

with st.expander("Runtime Diagnostics", expanded=False):
    log_path = Path(runtime_log_path())
    st.caption(f"Runtime log file: `{log_path}`")
    st.number_input("Recent runtime log rows", min_value=20, max_value=2000, step=20, key="runtime_log_limit")
    runtime_events = read_runtime_events(limit=int(st.session_state["runtime_log_limit"]))
    if runtime_events:
        st.dataframe(pd.DataFrame(runtime_events), width="stretch", hide_index=True)
    else:
        st.caption("No runtime events logged yet.")
    if log_path.exists():
        st.download_button(
            "Download Runtime Log (JSONL)",
            log_path.read_text(encoding="utf-8"),
            file_name="budget_runtime_events.jsonl",
            mime="application/x-ndjson",
        )
