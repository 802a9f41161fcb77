"""Headline overview cards for revenue, expenditure, taxes and net balance."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping

from budget_analytics.dataset import resolve_indicator_key
from budget_analytics.stats import EMPTY_STATS, StatsSummary, calculate_stats


REVENUE_KEYS = ("Total Revenues, Euros", "Ukupni Prihodi, Euro")
EXPENDITURE_KEYS = ("Total Expenditures, Euros", "Ukupni Rashodi, Euro")
TAX_KEYS = ("Taxes, Euros", "Porezi, Euro")


@dataclass(frozen=True)
class OverviewCard:
    title: str
    key: str | None
    stats: StatsSummary

    @property
    def trend(self) -> str:
        return "up" if self.stats.growth_rate >= 0 else "down"


def _ordered_values(monthly: Mapping[str, float]) -> list[float]:
    return [float(monthly[k]) for k in sorted(monthly) if math.isfinite(float(monthly[k]))]


def net_balance_values(revenue: Mapping[str, float], expenditure: Mapping[str, float]) -> list[float]:
    """Revenue minus expenditure per finite revenue period; missing or unparsed expenditure counts as 0."""
    balance = []
    for k in sorted(revenue):
        income = float(revenue[k])
        if not math.isfinite(income):
            continue
        spent = float(expenditure.get(k, 0.0) or 0.0)
        balance.append(income - (spent if math.isfinite(spent) else 0.0))
    return balance


def build_overview(data: Mapping[str, Mapping[str, float]]) -> list[OverviewCard]:
    revenue_key = resolve_indicator_key(data, REVENUE_KEYS)
    expenditure_key = resolve_indicator_key(data, EXPENDITURE_KEYS)
    tax_key = resolve_indicator_key(data, TAX_KEYS)

    revenue = data.get(revenue_key, {}) if revenue_key else {}
    expenditure = data.get(expenditure_key, {}) if expenditure_key else {}
    tax = data.get(tax_key, {}) if tax_key else {}

    if revenue and expenditure:
        balance = calculate_stats(net_balance_values(revenue, expenditure))
    else:
        balance = EMPTY_STATS

    return [
        OverviewCard("Total Revenue", revenue_key, calculate_stats(_ordered_values(revenue))),
        OverviewCard("Total Expenditure", expenditure_key, calculate_stats(_ordered_values(expenditure))),
        OverviewCard("Net Balance", None, balance),
        OverviewCard("Tax Revenue", tax_key, calculate_stats(_ordered_values(tax))),
    ]


def overview_payload(cards: list[OverviewCard], data: Mapping[str, Mapping[str, float]]) -> dict:
    """Overview figures in the shape handed to the narrative text service."""
    by_title = {card.title: card for card in cards}
    revenue_key = by_title["Total Revenue"].key
    return {
        "revenue": by_title["Total Revenue"].stats.to_dict(),
        "expenditure": by_title["Total Expenditure"].stats.to_dict(),
        "tax": by_title["Tax Revenue"].stats.to_dict(),
        "surplus": by_title["Net Balance"].stats.to_dict(),
        "periods": len(data.get(revenue_key, {})) if revenue_key else 0,
        "total_indicators": len(data),
    }
