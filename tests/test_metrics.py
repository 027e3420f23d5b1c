import csv
import logging

import pytest

from spot_loadtest.telemetry.event_hooks import format_summary, write_metrics_csv
from spot_loadtest.telemetry.metrics import MetricsRegistry, Rate, Trend
from spot_loadtest.telemetry.thresholds import evaluate_thresholds, log_threshold_results


def test_trend_percentiles_interpolate():
    trend = Trend("order_create_duration")
    for value in range(1, 101):
        trend.add(value)

    assert trend.percentile(50) == pytest.approx(50.5)
    assert trend.percentile(95) == pytest.approx(95.05)
    summary = trend.summary()
    assert summary["count"] == 100
    assert summary["min"] == 1 and summary["max"] == 100
    assert summary["avg"] == pytest.approx(50.5)


def test_empty_trend_summary_is_zeroed():
    assert Trend("t").summary()["p99"] == 0.0


def test_rate_counts_true_observations():
    rate = Rate("order_create_errors")
    for value in (True, False, False, False):
        rate.add(value)
    assert rate.rate == 0.25
    assert rate.summary() == {"count": 4, "passes": 1, "fails": 3, "rate": 0.25}


def test_registry_returns_the_same_series_and_guards_types():
    registry = MetricsRegistry()
    assert registry.trend("d") is registry.trend("d")
    with pytest.raises(TypeError):
        registry.rate("d")


def test_registry_reset_keeps_series_but_drops_samples():
    registry = MetricsRegistry()
    registry.rate("e").add(True)
    registry.trend("d").add(10)
    registry.reset()

    snapshot = registry.snapshot()
    assert snapshot["e"]["count"] == 0
    assert snapshot["d"]["type"] == "trend"


@pytest.fixture
def populated():
    registry = MetricsRegistry()
    errors = registry.rate("order_create_errors")
    for failed in [True] + [False] * 19:
        errors.add(failed)
    duration = registry.trend("order_create_duration")
    for value in [100] * 19 + [4000]:
        duration.add(value)
    return registry


def test_thresholds_pass_and_fail_per_statistic(populated):
    results = evaluate_thresholds(
        {"order_create_errors": {"rate": 0.1}, "order_create_duration": {"p95": 2000, "avg": 100}},
        populated,
    )

    verdicts = {(r["metric"], r["stat"]): r["passed"] for r in results}
    assert verdicts == {
        ("order_create_errors", "rate"): True,
        ("order_create_duration", "p95"): True,
        ("order_create_duration", "avg"): False,
    }


def test_threshold_on_metric_without_samples_passes():
    results = evaluate_thresholds({"order_create_errors": {"rate": 0.01}}, MetricsRegistry())
    assert results == [{"metric": "order_create_errors", "stat": "rate", "limit": 0.01, "value": None, "passed": True}]


def test_unknown_threshold_statistic_is_rejected(populated):
    with pytest.raises(KeyError):
        evaluate_thresholds({"order_create_errors": {"p95": 1}}, populated)


def test_failed_threshold_is_logged(populated, caplog):
    results = evaluate_thresholds({"order_create_errors": {"rate": 0.01}}, populated)
    with caplog.at_level(logging.INFO, logger="thresholds"):
        assert log_threshold_results(results) is False
    assert "order_create_errors rate<0.01: FAILED" in caplog.text


def test_metrics_csv_report(populated, tmp_path):
    path = write_metrics_csv(populated.snapshot(), str(tmp_path / "results"))

    with open(path, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0][:4] == ["Metric", "Type", "Count", "Rate"]
    by_name = {row[0]: row for row in rows[1:]}
    assert by_name["order_create_errors"][1:4] == ["rate", "20", "0.05"]
    assert by_name["order_create_duration"][1] == "trend"


def test_format_summary(populated):
    snapshot = populated.snapshot()
    assert format_summary(snapshot["order_create_errors"]) == "rate=5.00% (1/20)"
    assert format_summary(snapshot["order_create_duration"]).startswith("avg=295.0ms")
