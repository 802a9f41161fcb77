from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

import budget_analytics.runtime_logging as runtime_logging
from budget_analytics.dataset import group_by_year, parse_financial_records


SAMPLE_RECORDS = [
    {
        "INDICATOR Name": "Ukupni Prihodi, Euro",
        "2023-01": "1,000.00",
        "2023-02": "1,100.00",
        "2023-03": "1,050.00",
        "2024-01": "1,200.00",
        "2024-02": "0",
        "2024-03": "1,260.00",
    },
    {
        "INDICATOR Name": "Ukupni Rashodi, Euro",
        "2023-01": "900.00",
        "2023-02": "950.00",
        "2023-03": "1,000.00",
        "2024-01": "1,000.00",
        "2024-03": "1,100.00",
    },
    {
        "INDICATOR Name": "Porezi, Euro",
        "2023-01": "400",
        "2023-02": "420",
        "2023-03": "n/a",
        "2024-01": "450",
    },
]


@pytest.fixture
def sample_data() -> dict:
    return parse_financial_records(SAMPLE_RECORDS)


@pytest.fixture
def sample_grouped(sample_data) -> dict:
    return group_by_year(sample_data, ["Ukupni Prihodi, Euro", "Ukupni Rashodi, Euro"], ["2023", "2024"])


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(20240101)


@pytest.fixture
def runtime_log_file(tmp_path, monkeypatch) -> Path:
    log_file = Path(tmp_path) / "runtime_events.jsonl"
    monkeypatch.setattr(runtime_logging, "LOG_DIR", Path(tmp_path))
    monkeypatch.setattr(runtime_logging, "RUNTIME_EVENTS_LOG_FILE", log_file)
    return log_file
