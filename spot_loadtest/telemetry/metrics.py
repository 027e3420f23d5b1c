"""
Custom metric series recorded by the scenarios.

Locust's own stats cover every HTTP request; these series carry what it
does not: per-step durations of the order flow and boolean error/integrity
rates, which the profile thresholds are evaluated against.
"""
import threading
import logging
from typing import Dict, Any, List

logger = logging.getLogger("metrics")


class Trend:
    """Collection of numeric samples (milliseconds) with percentile summaries."""

    kind = "trend"

    def __init__(self, name: str):
        self.name = name
        self._values: List[float] = []
        self._lock = threading.Lock()

    def add(self, value: float) -> None:
        with self._lock:
            self._values.append(float(value))

    @property
    def count(self) -> int:
        return len(self._values)

    def percentile(self, p: float) -> float:
        with self._lock:
            values = sorted(self._values)
        if not values:
            return 0.0
        # linear interpolation between closest ranks
        position = (p / 100.0) * (len(values) - 1)
        lower = int(position)
        upper = min(lower + 1, len(values) - 1)
        fraction = position - lower
        return values[lower] + (values[upper] - values[lower]) * fraction

    def summary(self) -> Dict[str, Any]:
        with self._lock:
            values = list(self._values)
        if not values:
            return {"count": 0, "avg": 0.0, "min": 0.0, "max": 0.0, "med": 0.0, "p90": 0.0, "p95": 0.0, "p99": 0.0}
        return {
            "count": len(values),
            "avg": sum(values) / len(values),
            "min": min(values),
            "max": max(values),
            "med": self.percentile(50),
            "p90": self.percentile(90),
            "p95": self.percentile(95),
            "p99": self.percentile(99),
        }

    def reset(self) -> None:
        with self._lock:
            self._values.clear()


class Rate:
    """Fraction of observations that were true (e.g. an error happened)."""

    kind = "rate"

    def __init__(self, name: str):
        self.name = name
        self._true = 0
        self._total = 0
        self._lock = threading.Lock()

    def add(self, value) -> None:
        with self._lock:
            self._total += 1
            if value:
                self._true += 1

    @property
    def count(self) -> int:
        return self._total

    @property
    def rate(self) -> float:
        with self._lock:
            return self._true / self._total if self._total else 0.0

    def summary(self) -> Dict[str, Any]:
        with self._lock:
            passes, total = self._true, self._total
        return {"count": total, "passes": passes, "fails": total - passes, "rate": passes / total if total else 0.0}

    def reset(self) -> None:
        with self._lock:
            self._true = 0
            self._total = 0


class MetricsRegistry:

    def __init__(self):
        self._lock = threading.RLock()
        self._metrics = {}

    def _get(self, name, metric_class):
        with self._lock:
            metric = self._metrics.get(name)
            if metric is None:
                metric = metric_class(name)
                self._metrics[name] = metric
            elif not isinstance(metric, metric_class):
                raise TypeError(f"Metric '{name}' is a {metric.kind}, not a {metric_class.kind}")
            return metric

    def trend(self, name: str) -> Trend:
        return self._get(name, Trend)

    def rate(self, name: str) -> Rate:
        return self._get(name, Rate)

    def get(self, name: str):
        with self._lock:
            return self._metrics.get(name)

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            metrics = list(self._metrics.values())
        return {metric.name: dict(metric.summary(), type=metric.kind) for metric in metrics}

    def reset(self) -> None:
        with self._lock:
            for metric in self._metrics.values():
                metric.reset()


# Process-wide registry shared by all users
registry = MetricsRegistry()

# Series names used by the scenarios
ORDER_CREATE_DURATION = "order_create_duration"
ORDER_CREATE_ERRORS = "order_create_errors"
STORE_LIST_DURATION = "store_list_duration"
MENU_LIST_DURATION = "menu_list_duration"
PRICE_INTEGRITY_ERRORS = "price_integrity_errors"
STORE_STATUS_ERRORS = "store_status_errors"
ORDER_LIST_DURATION = "order_list_duration"
ORDER_LIST_ERRORS = "order_list_errors"
ORDER_ACTIVE_DURATION = "order_active_duration"
STORE_ORDER_LIST_DURATION = "store_order_list_duration"
