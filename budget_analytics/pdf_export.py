"""Analysis PDF export for the current dashboard selection."""

from __future__ import annotations

from collections import defaultdict
from copy import deepcopy
from datetime import datetime, timezone
import html
from io import BytesIO
import re
from typing import Any, Callable

import pandas as pd
import plotly.graph_objects as go

from budget_analytics.charts import comparison_figure, distribution_figure, time_series_figure


DEFAULT_OPTIONS = {
    "include_charts": True,
    "chart_width_px": 1400,
    "chart_height_px": 800,
    "max_yoy_rows": 240,
}

REPORT_TITLE = "Budget Execution Analysis"

_KALEIDO_READY: bool | None = None
_REPORTLAB_READY: bool | None = None

_NUMBERED_LINE = re.compile(r"^\d+\.")


def _merge_options(options: dict | None) -> dict:
    out = deepcopy(DEFAULT_OPTIONS)
    if isinstance(options, dict):
        out.update(options)
    return out


def _log_event(
    options: dict,
    *,
    level: str,
    event: str,
    message: str,
    context: dict[str, Any] | None = None,
    exc: BaseException | None = None,
) -> None:
    logger: Callable[..., Any] | None = options.get("log_event")
    if not callable(logger):
        return
    try:
        logger(level=level, event=event, message=message, context=context or {}, exc=exc)
    except Exception:
        # Export logging should never break report generation.
        return


def _ensure_reportlab_ready(options: dict) -> bool:
    global _REPORTLAB_READY
    if _REPORTLAB_READY is not None:
        return _REPORTLAB_READY
    try:
        import reportlab  # noqa: F401

        _REPORTLAB_READY = True
    except ImportError as exc:
        _REPORTLAB_READY = False
        _log_event(
            options,
            level="WARNING",
            event="pdf_reportlab_unavailable",
            message="ReportLab is not installed; the minimal text PDF will be used.",
            exc=exc,
        )
    return _REPORTLAB_READY


def _ensure_kaleido_ready(options: dict) -> bool:
    global _KALEIDO_READY
    if _KALEIDO_READY is not None:
        return _KALEIDO_READY
    try:
        import kaleido  # noqa: F401

        fig = go.Figure(data=[go.Scatter(x=[0, 1], y=[0, 1])])
        fig.update_layout(width=500, height=300, template="plotly_white")
        fig.to_image(format="png", width=500, height=300, scale=1)
        _KALEIDO_READY = True
    except Exception as exc:
        _KALEIDO_READY = False
        _log_event(
            options,
            level="WARNING",
            event="pdf_chart_engine_unavailable",
            message="Kaleido chart export is unavailable; charts will be placeholders.",
            context={"detail": str(exc)},
        )
    return _KALEIDO_READY


def _safe_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return float(default)


def _safe_int(value: Any, default: int = 0) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return int(default)


def _ensure_dataframe(value: Any) -> pd.DataFrame:
    if isinstance(value, pd.DataFrame):
        return value.copy()
    if isinstance(value, list):
        return pd.DataFrame(value)
    return pd.DataFrame()


def _utc_iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _fmt_currency(value: Any) -> str:
    num = _safe_float(value, 0.0)
    return f"€{num:,.0f}"


def _fmt_percent(value: Any) -> str:
    return f"{_safe_float(value, 0.0):,.2f}%"


def _fmt_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (pd.Timestamp, datetime)):
        return pd.Timestamp(value).strftime("%Y-%m-%d")
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (int, float)):
        if abs(float(value) - round(float(value))) < 1e-9:
            return f"{int(round(float(value))):,}"
        return f"{float(value):,.4f}".rstrip("0").rstrip(".")
    return str(value)


def _pdf_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def _build_minimal_pdf(lines: list[str]) -> bytes:
    """Return a minimal but valid PDF when ReportLab is unavailable."""

    if not lines:
        lines = [REPORT_TITLE, "No content available."]
    max_lines = 48
    pages = [lines[i : i + max_lines] for i in range(0, len(lines), max_lines)] or [[]]
    height = 842
    width = 595
    line_height = 14

    objects: dict[int, str] = {}
    catalog_id, pages_id, font_id = 1, 2, 3
    next_id = 4
    page_ids: list[int] = []
    content_ids: list[int] = []
    for _ in pages:
        page_ids.append(next_id)
        content_ids.append(next_id + 1)
        next_id += 2

    objects[font_id] = "<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>"
    for page_lines, page_id, content_id in zip(pages, page_ids, content_ids):
        cmds = ["BT", "/F1 10 Tf", f"40 {height - 50} Td", f"{line_height} TL"]
        for i, line in enumerate(page_lines):
            safe = _pdf_escape(line[:200])
            cmds.append(f"({safe}) Tj" if i == 0 else f"T* ({safe}) Tj")
        cmds.append("ET")
        stream = "\n".join(cmds).encode("latin-1", errors="replace")
        objects[content_id] = (
            f"<< /Length {len(stream)} >>\nstream\n" + stream.decode("latin-1", errors="replace") + "\nendstream"
        )
        objects[page_id] = (
            f"<< /Type /Page /Parent {pages_id} 0 R /MediaBox [0 0 {width} {height}] "
            f"/Resources << /Font << /F1 {font_id} 0 R >> >> /Contents {content_id} 0 R >>"
        )

    kids = " ".join(f"{pid} 0 R" for pid in page_ids)
    objects[pages_id] = f"<< /Type /Pages /Count {len(page_ids)} /Kids [{kids}] >>"
    objects[catalog_id] = f"<< /Type /Catalog /Pages {pages_id} 0 R >>"

    out = BytesIO()
    out.write(b"%PDF-1.4\n")
    offsets: dict[int, int] = {}
    for obj_id in range(1, next_id):
        offsets[obj_id] = out.tell()
        out.write(f"{obj_id} 0 obj\n".encode("ascii"))
        out.write(objects[obj_id].encode("latin-1", errors="replace"))
        out.write(b"\nendobj\n")
    xref_start = out.tell()
    out.write(f"xref\n0 {next_id}\n".encode("ascii"))
    out.write(b"0000000000 65535 f \n")
    for obj_id in range(1, next_id):
        out.write(f"{offsets[obj_id]:010d} 00000 n \n".encode("ascii"))
    out.write(f"trailer\n<< /Size {next_id} /Root {catalog_id} 0 R >>\nstartxref\n{xref_start}\n%%EOF\n".encode("ascii"))
    return out.getvalue()


def render_plotly_figure_png(fig, width_px: int, height_px: int) -> bytes:
    """Render a Plotly figure into PNG bytes using Kaleido."""

    if fig is None:
        raise ValueError("Figure is required.")
    width_px = max(640, _safe_int(width_px, 1400))
    height_px = max(360, _safe_int(height_px, 800))
    fig.update_layout(template="plotly_white", width=width_px, height=height_px, margin=dict(l=50, r=40, t=70, b=50))
    try:
        image = fig.to_image(format="png", width=width_px, height=height_px, scale=1)
    except Exception as exc:
        raise RuntimeError("Chart image render failed.") from exc
    return bytes(image)


def _chart_placeholder(chart_id: str, title: str, section: str, reason: str) -> dict[str, Any]:
    return {
        "id": chart_id,
        "title": title,
        "section": section,
        "image_bytes": None,
        "placeholder_text": reason,
    }


def build_pdf_chart_images(report_input: dict, options: dict | None = None) -> list[dict]:
    """Build chart images (or placeholders) for the report sections."""

    options = _merge_options(options)
    width_px = _safe_int(options.get("chart_width_px", 1400), 1400)
    height_px = _safe_int(options.get("chart_height_px", 800), 800)
    indicators = list(report_input.get("selected_indicators") or [])
    data = report_input.get("data") or {}
    grouped = report_input.get("grouped") or {}
    simulation = report_input.get("monte_carlo") or {}

    specs: list[tuple[str, str, str, Callable[[], go.Figure | None]]] = [
        ("trends", "Monthly Indicator Trends", "Trends", lambda: time_series_figure(data, indicators)),
        ("yoy", "Year-over-Year Comparison by Month", "Year-over-Year Comparison", lambda: comparison_figure(grouped, indicators)),
    ]
    if simulation.get("result") is not None:
        specs.append(
            (
                "monte_carlo",
                f"Simulated Distribution - {simulation.get('indicator', '')}",
                "Monte Carlo Forecast",
                lambda: distribution_figure(simulation["result"]),
            )
        )

    if not options.get("include_charts", True):
        return [_chart_placeholder(cid, title, section, "Charts were excluded from this export.") for cid, title, section, _ in specs]

    engine_ready = _ensure_kaleido_ready(options)
    images: list[dict] = []
    for chart_id, title, section, builder in specs:
        if not engine_ready:
            images.append(_chart_placeholder(chart_id, title, section, "Chart engine unavailable in this environment."))
            continue
        try:
            fig = builder()
            if fig is None:
                images.append(_chart_placeholder(chart_id, title, section, "Not enough data for this chart."))
                continue
            images.append(
                {
                    "id": chart_id,
                    "title": title,
                    "section": section,
                    "image_bytes": render_plotly_figure_png(fig, width_px, height_px),
                    "placeholder_text": "",
                }
            )
        except Exception as exc:
            _log_event(
                options,
                level="WARNING",
                event="pdf_chart_render_failed",
                message="Chart render failed; using placeholder.",
                context={"chart_id": chart_id},
                exc=exc,
            )
            images.append(_chart_placeholder(chart_id, title, section, "Chart could not be rendered."))
    return images


def _build_overview_table(cards: list) -> pd.DataFrame:
    rows = [
        {
            "Card": card.title,
            "Indicator": card.key or "",
            "Total": _fmt_currency(card.stats.total),
            "Growth Rate": _fmt_percent(card.stats.growth_rate),
            "Trend": card.trend,
        }
        for card in cards
    ]
    return pd.DataFrame(rows)


def _build_stats_table(stats_by_indicator: dict, trends_by_indicator: dict) -> pd.DataFrame:
    rows = []
    for indicator, stats in stats_by_indicator.items():
        row = {
            "Indicator": indicator,
            "Total": _fmt_currency(stats.total),
            "Average": _fmt_currency(stats.average),
            "Min": _fmt_currency(stats.min),
            "Max": _fmt_currency(stats.max),
            "Growth Rate": _fmt_percent(stats.growth_rate),
            "Std Dev": _fmt_currency(stats.standard_deviation),
        }
        trend = trends_by_indicator.get(indicator)
        if trend is not None:
            row["Trend"] = f"{trend.trend}, {trend.volatility} volatility" + (", seasonal" if trend.seasonality else "")
        rows.append(row)
    return pd.DataFrame(rows)


def _build_yoy_table(yoy_metrics: dict, max_rows: int) -> pd.DataFrame:
    rows = []
    for indicator, metrics in yoy_metrics.items():
        for key, metric in metrics.items():
            rows.append(
                {
                    "Indicator": indicator,
                    "Comparison": key,
                    "Delta": _fmt_currency(metric.delta),
                    "Change": _fmt_percent(metric.percent_change),
                }
            )
    return pd.DataFrame(rows[:max_rows])


def _build_simulation_table(simulation: dict) -> pd.DataFrame:
    result = simulation.get("result")
    if result is None:
        return pd.DataFrame()
    rows = [
        ("Indicator", simulation.get("indicator", "")),
        ("Periods", _fmt_value(simulation.get("periods"))),
        ("Simulations", _fmt_value(simulation.get("simulations"))),
        ("Mean", _fmt_currency(result.mean)),
        ("Standard Deviation", _fmt_currency(result.standard_deviation)),
        ("P5", _fmt_currency(result.percentile5)),
        ("P25", _fmt_currency(result.percentile25)),
        ("P50", _fmt_currency(result.percentile50)),
        ("P75", _fmt_currency(result.percentile75)),
        ("P95", _fmt_currency(result.percentile95)),
    ]
    return pd.DataFrame(rows, columns=["Metric", "Value"])


def classify_analysis_lines(text: str) -> list[tuple[str, str]]:
    """Split narrative text into (style, text) pairs for rendering."""
    out: list[tuple[str, str]] = []
    for line in str(text or "").split("\n"):
        stripped = line.strip()
        if line.startswith("### "):
            out.append(("subtitle", line[4:]))
        elif line.startswith("## "):
            out.append(("title", line[3:]))
        elif stripped.startswith("**") and stripped.endswith("**") and len(stripped) > 4:
            out.append(("highlight", stripped.replace("**", "")))
        elif stripped.startswith("•") or stripped.startswith("- "):
            out.append(("bullet", stripped.lstrip("•-").strip()))
        elif _NUMBERED_LINE.match(stripped):
            out.append(("numbered", stripped))
        elif not stripped:
            out.append(("blank", ""))
        else:
            out.append(("text", line))
    return out


def build_report_sections(report_input: dict, chart_images: list[dict], options: dict | None = None) -> list[dict]:
    """Build report section descriptors consumed by PDF rendering."""

    options = _merge_options(options)
    generated_at = str(report_input.get("generated_at_utc") or _utc_iso_now())
    range_start = str(report_input.get("range_start_label") or "")
    range_end = str(report_input.get("range_end_label") or "")
    indicators = list(report_input.get("selected_indicators") or [])
    years = list(report_input.get("selected_years") or [])
    simulation = report_input.get("monte_carlo") or {}
    findings = report_input.get("integrity_findings") or []

    chart_map: dict[str, list[dict]] = defaultdict(list)
    for item in chart_images:
        chart_map[str(item.get("section", "Other"))].append(item)

    sections: list[dict[str, Any]] = [
        {
            "id": "cover",
            "title": str(report_input.get("title") or REPORT_TITLE),
            "paragraphs": [
                f"Generated (UTC): {generated_at}",
                f"Selected Range: {range_start} to {range_end}",
                f"Indicators: {', '.join(indicators) or 'None selected'}",
                f"Compared Years: {', '.join(sorted(years)) or 'None selected'}",
                "Growth rates are compound per-period rates between the first and last value; standard deviations use the sample (n-1) divisor.",
            ],
            "tables": [],
            "charts": [],
        },
        {
            "id": "overview",
            "title": "Overview",
            "paragraphs": [],
            "tables": [{"title": "Headline Indicators", "dataframe": _build_overview_table(report_input.get("overview_cards") or [])}],
            "charts": [],
        },
        {
            "id": "trends",
            "title": "Trends",
            "paragraphs": [],
            "tables": [
                {
                    "title": "Descriptive Statistics",
                    "dataframe": _build_stats_table(
                        report_input.get("stats_by_indicator") or {},
                        report_input.get("trends_by_indicator") or {},
                    ),
                }
            ],
            "charts": chart_map.get("Trends", []),
        },
        {
            "id": "yoy",
            "title": "Year-over-Year Comparison",
            "paragraphs": ["Each selected year is compared with the previous selected year; a missing month counts as zero."],
            "tables": [
                {
                    "title": "Monthly Deltas",
                    "dataframe": _build_yoy_table(
                        report_input.get("yoy_metrics") or {}, _safe_int(options.get("max_yoy_rows"), 240)
                    ),
                }
            ],
            "charts": chart_map.get("Year-over-Year Comparison", []),
        },
    ]

    if simulation.get("result") is not None:
        sections.append(
            {
                "id": "monte_carlo",
                "title": "Monte Carlo Forecast",
                "paragraphs": [
                    "Terminal values after the projection horizon. Statistics cover every trial; the chart shows the lowest 1,000 trials."
                ],
                "tables": [{"title": "Simulation Summary", "dataframe": _build_simulation_table(simulation)}],
                "charts": chart_map.get("Monte Carlo Forecast", []),
            }
        )

    analysis = str(report_input.get("ai_analysis") or "").strip()
    if analysis:
        sections.append(
            {
                "id": "analysis",
                "title": "Narrative Analysis",
                "paragraphs": [],
                "analysis_lines": classify_analysis_lines(analysis),
                "tables": [],
                "charts": [],
            }
        )

    if findings:
        sections.append(
            {
                "id": "integrity",
                "title": "Data Integrity Findings",
                "paragraphs": [],
                "tables": [{"title": "Findings", "dataframe": pd.DataFrame(findings)}],
                "charts": [],
            }
        )
    return sections


def _reportlab_imports():
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import A4
    from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
    from reportlab.lib.units import inch
    from reportlab.platypus import Image, PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

    return {
        "colors": colors,
        "A4": A4,
        "ParagraphStyle": ParagraphStyle,
        "getSampleStyleSheet": getSampleStyleSheet,
        "inch": inch,
        "Image": Image,
        "PageBreak": PageBreak,
        "Paragraph": Paragraph,
        "SimpleDocTemplate": SimpleDocTemplate,
        "Spacer": Spacer,
        "Table": Table,
        "TableStyle": TableStyle,
    }


def _append_dataframe_table_to_story(story: list[Any], table_spec: dict, rl: dict, styles: dict) -> None:
    Paragraph = rl["Paragraph"]
    Spacer = rl["Spacer"]
    Table = rl["Table"]
    TableStyle = rl["TableStyle"]
    colors = rl["colors"]
    inch = rl["inch"]

    story.append(Paragraph(html.escape(str(table_spec.get("title", "Table"))), styles["Heading3"]))
    df = _ensure_dataframe(table_spec.get("dataframe"))
    if df.empty:
        story.append(Paragraph("No data available.", styles["BodyText"]))
        story.append(Spacer(1, 8))
        return

    def _cell(value: Any) -> Any:
        text = " ".join(_fmt_value(value).split())
        return Paragraph(html.escape(text[:260]), styles["TableCell"])

    header = [Paragraph(html.escape(str(c)), styles["TableHeader"]) for c in df.columns]
    rows = [header] + [[_cell(v) for v in row] for row in df.itertuples(index=False)]
    col_width = 7.2 * inch / max(1, len(df.columns))
    table = Table(rows, repeatRows=1, colWidths=[col_width] * len(df.columns))
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#dbeafe")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.HexColor("#1e3a8a")),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("GRID", (0, 0), (-1, -1), 0.3, colors.HexColor("#bcccdc")),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f7fafc")]),
            ]
        )
    )
    story.append(table)
    story.append(Spacer(1, 8))


def _append_analysis_to_story(story: list[Any], lines: list[tuple[str, str]], rl: dict, styles: dict) -> None:
    Paragraph = rl["Paragraph"]
    Spacer = rl["Spacer"]
    style_by_kind = {
        "title": "AnalysisTitle",
        "subtitle": "AnalysisSubtitle",
        "highlight": "AnalysisHighlight",
        "bullet": "AnalysisList",
        "numbered": "AnalysisList",
        "text": "BodyText",
    }
    for kind, text in lines:
        if kind == "blank":
            story.append(Spacer(1, 6))
            continue
        body = html.escape(text)
        if kind == "bullet":
            body = f"• {body}"
        story.append(Paragraph(body, styles[style_by_kind[kind]]))


def _build_reportlab_pdf(report_input: dict, sections: list[dict], options: dict) -> bytes:
    rl = _reportlab_imports()
    Paragraph = rl["Paragraph"]
    Spacer = rl["Spacer"]
    Image = rl["Image"]
    PageBreak = rl["PageBreak"]
    ParagraphStyle = rl["ParagraphStyle"]
    colors = rl["colors"]
    inch = rl["inch"]

    styles = rl["getSampleStyleSheet"]()
    styles.add(ParagraphStyle(name="TableHeader", parent=styles["BodyText"], fontName="Helvetica-Bold", fontSize=7.5, leading=9))
    styles.add(ParagraphStyle(name="TableCell", parent=styles["BodyText"], fontName="Helvetica", fontSize=7, leading=8.6))
    styles.add(
        ParagraphStyle(name="AnalysisTitle", parent=styles["Heading2"], textColor=colors.HexColor("#1e40af"), fontSize=16)
    )
    styles.add(
        ParagraphStyle(name="AnalysisSubtitle", parent=styles["Heading3"], textColor=colors.HexColor("#2563eb"), fontSize=13)
    )
    styles.add(
        ParagraphStyle(
            name="AnalysisHighlight", parent=styles["BodyText"], fontName="Helvetica-Bold", textColor=colors.HexColor("#10b981")
        )
    )
    styles.add(ParagraphStyle(name="AnalysisList", parent=styles["BodyText"], leftIndent=12))

    buf = BytesIO()
    doc = rl["SimpleDocTemplate"](
        buf,
        pagesize=rl["A4"],
        leftMargin=0.5 * inch,
        rightMargin=0.5 * inch,
        topMargin=0.5 * inch,
        bottomMargin=0.5 * inch,
        title=str(report_input.get("title") or REPORT_TITLE),
    )

    story: list[Any] = []
    for section_idx, section in enumerate(sections):
        story.append(Paragraph(html.escape(str(section.get("title", "Section"))), styles["Heading1"]))
        for para in section.get("paragraphs", []):
            story.append(Paragraph(html.escape(str(para)), styles["BodyText"]))
        if section.get("paragraphs"):
            story.append(Spacer(1, 8))

        for chart in section.get("charts", []):
            story.append(Paragraph(html.escape(str(chart.get("title", "Chart"))), styles["Heading3"]))
            image_bytes = chart.get("image_bytes")
            if image_bytes:
                img = Image(BytesIO(image_bytes))
                img.drawWidth = 7.2 * inch
                img.drawHeight = 4.1 * inch
                story.append(img)
            else:
                story.append(Paragraph(html.escape(str(chart.get("placeholder_text", "Chart unavailable."))), styles["BodyText"]))
            story.append(Spacer(1, 10))

        for table_spec in section.get("tables", []):
            _append_dataframe_table_to_story(story, table_spec, rl, styles)

        if section.get("analysis_lines"):
            _append_analysis_to_story(story, section["analysis_lines"], rl, styles)

        if section_idx < len(sections) - 1:
            story.append(PageBreak())

    doc.build(story)
    return buf.getvalue()


def _build_fallback_text_pdf(report_input: dict, sections: list[dict]) -> bytes:
    lines = [
        str(report_input.get("title") or REPORT_TITLE),
        f"Generated (UTC): {report_input.get('generated_at_utc') or _utc_iso_now()}",
        "",
    ]
    for section in sections:
        lines.append(str(section.get("title", "Section")))
        for para in section.get("paragraphs", []):
            lines.append(f" - {para}")
        for chart in section.get("charts", []):
            lines.append(f" - Chart: {chart.get('title', 'Untitled')} ({'ok' if chart.get('image_bytes') else 'placeholder'})")
        for table_spec in section.get("tables", []):
            df = _ensure_dataframe(table_spec.get("dataframe"))
            lines.append(f" - Table: {table_spec.get('title', 'Table')} [{len(df)} rows]")
            for row in df.head(40).itertuples(index=False):
                lines.append("   " + " | ".join(_fmt_value(v) for v in row))
        for _, text in section.get("analysis_lines", []):
            lines.append(f"   {text}")
        lines.append("")
    return _build_minimal_pdf(lines)


def build_analysis_pdf_bytes(report_input: dict, options: dict | None = None) -> bytes:
    """Build report PDF bytes, falling back to a plain text PDF when ReportLab fails."""

    merged_options = _merge_options(options)
    chart_images = merged_options.get("chart_images_override")
    if not isinstance(chart_images, list):
        chart_images = build_pdf_chart_images(report_input, merged_options)
    sections = build_report_sections(report_input, chart_images, merged_options)
    try:
        if not _ensure_reportlab_ready(merged_options):
            raise RuntimeError("ReportLab unavailable.")
        pdf_bytes = _build_reportlab_pdf(report_input, sections, merged_options)
        if not pdf_bytes.startswith(b"%PDF"):
            raise RuntimeError("ReportLab returned unexpected output.")
        return pdf_bytes
    except Exception as exc:
        _log_event(
            merged_options,
            level="WARNING",
            event="pdf_export_reportlab_fallback",
            message="ReportLab unavailable or failed; using minimal PDF fallback.",
            exc=exc,
        )
        return _build_fallback_text_pdf(report_input, sections)
