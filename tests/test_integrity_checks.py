from __future__ import annotations

from budget_analytics.integrity_checks import run_integrity_checks


def test_integrity_checks_pass_for_clean_data():
    data = {"A": {"2023-01": 1.0, "2023-02": 2.0}, "B": {"2023-01": 5.0}}
    assert run_integrity_checks(data) == []


def test_integrity_checks_report_missing_dataset():
    findings = run_integrity_checks({})
    assert [f["Check"] for f in findings] == ["Dataset not available"]


def test_integrity_checks_flag_bad_period_keys_and_nan(sample_data):
    data = dict(sample_data)
    data["Broken"] = {"2024-13": 1.0, "2024/01": 2.0}
    findings = run_integrity_checks(data)
    checks = {(f["Check"], f["Indicator"], f["Period"]) for f in findings}
    assert ("Period key format", "Broken", "2024-13") in checks
    assert ("Period key format", "Broken", "2024/01") in checks
    assert ("Non-finite value", "Porezi, Euro", "2023-03") in checks


def test_integrity_checks_accept_grouping_from_source(sample_data, sample_grouped):
    findings = run_integrity_checks(sample_data, sample_grouped)
    assert all(not f["Check"].startswith("Grouped") for f in findings)


def test_integrity_checks_detect_grouping_drift(sample_data, sample_grouped):
    sample_grouped["2023"]["Ukupni Prihodi, Euro"]["01"] += 1.0
    sample_grouped["2023"]["Ukupni Prihodi, Euro"]["07"] = 5.0
    findings = run_integrity_checks(sample_data, sample_grouped)
    check_names = {f["Check"] for f in findings}
    assert "Grouped value mismatch" in check_names
    assert "Grouped value without source" in check_names
