import csv
import logging
import os
import time

from locust import events

from spot_loadtest.config.profiles import profile_for_environment
from spot_loadtest.telemetry.metrics import registry
from spot_loadtest.telemetry.thresholds import evaluate_thresholds, log_threshold_results

logger = logging.getLogger("event_hooks")


def register_stats_event_handlers(config, results_dir="results"):
    """Register handlers that reset, report and judge the custom metrics."""

    @events.test_start.add_listener
    def on_test_start(environment, **kwargs):
        registry.reset()
        profile = profile_for_environment(environment, config)
        logger.info("========================================")
        logger.info(f"  TEST_TYPE : {profile['name'].upper()}")
        logger.info(f"  BASE_URL  : {environment.host or config['service']['base_url']}")
        logger.info("========================================")

    @events.test_stop.add_listener
    def on_test_stop(environment, **kwargs):
        snapshot = registry.snapshot()
        logger.info("=== Order Metrics ===")
        for name, summary in sorted(snapshot.items()):
            logger.info(f"{name}: {format_summary(summary)}")
        try:
            path = write_metrics_csv(snapshot, results_dir)
            logger.info(f"Order metrics saved to {path}")
        except OSError as e:
            logger.error(f"Error writing order metrics report: {e}")

    @events.quitting.add_listener
    def on_quitting(environment, **kwargs):
        profile = profile_for_environment(environment, config)
        results = evaluate_thresholds(profile["thresholds"], registry)
        if not log_threshold_results(results):
            logger.error(f"Thresholds of profile '{profile['name']}' were not met")
            environment.process_exit_code = 1


def format_summary(summary):
    if summary["type"] == "rate":
        return f"rate={summary['rate']:.2%} ({summary['passes']}/{summary['count']})"
    return (
        f"avg={summary['avg']:.1f}ms med={summary['med']:.1f}ms "
        f"p95={summary['p95']:.1f}ms p99={summary['p99']:.1f}ms max={summary['max']:.1f}ms count={summary['count']}"
    )


def write_metrics_csv(snapshot, results_dir):
    os.makedirs(results_dir, exist_ok=True)
    timestamp = time.strftime("%Y%m%d_%H%M%S")
    path = os.path.join(results_dir, f"order_metrics_{timestamp}.csv")

    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["Metric", "Type", "Count", "Rate", "Avg", "Min", "Median", "P95", "P99", "Max"])
        for name, summary in sorted(snapshot.items()):
            if summary["type"] == "rate":
                writer.writerow([name, "rate", summary["count"], summary["rate"], "", "", "", "", "", ""])
            else:
                writer.writerow([
                    name, "trend", summary["count"], "",
                    summary["avg"], summary["min"], summary["med"], summary["p95"], summary["p99"], summary["max"],
                ])
    return path
