import logging
from typing import Dict, Any, List

from spot_loadtest.telemetry.metrics import MetricsRegistry

logger = logging.getLogger("thresholds")


def evaluate_thresholds(thresholds: Dict[str, Dict[str, float]], registry: MetricsRegistry) -> List[Dict[str, Any]]:
    """
    Check each ``{metric: {stat: limit}}`` entry against the registry.

    Every limit is a strict upper bound (``rate < 0.01``, ``p95 < 2000``).
    A metric that recorded no samples passes; there is nothing to judge.

    Returns:
        One result dict per (metric, stat) with ``passed`` set
    """
    results = []
    for metric_name, limits in thresholds.items():
        metric = registry.get(metric_name)
        summary = metric.summary() if metric is not None else {"count": 0}
        for stat, limit in limits.items():
            if summary["count"] == 0:
                results.append({"metric": metric_name, "stat": stat, "limit": limit, "value": None, "passed": True})
                continue
            if stat not in summary:
                raise KeyError(f"Threshold statistic '{stat}' is not available for metric '{metric_name}'")
            value = summary[stat]
            results.append({
                "metric": metric_name,
                "stat": stat,
                "limit": limit,
                "value": value,
                "passed": value < limit,
            })
    return results


def log_threshold_results(results: List[Dict[str, Any]]) -> bool:
    all_passed = True
    for result in results:
        if result["value"] is None:
            logger.info(f"{result['metric']} {result['stat']}<{result['limit']}: no samples")
        elif result["passed"]:
            logger.info(f"{result['metric']} {result['stat']}<{result['limit']}: OK ({result['value']:.4g})")
        else:
            all_passed = False
            logger.error(f"{result['metric']} {result['stat']}<{result['limit']}: FAILED ({result['value']:.4g})")
    return all_passed
