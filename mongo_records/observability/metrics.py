"""
Metrics collection for MONGO_RECORDS.

Counts record and connection operations, their failures and latency, keyed by
operation name and the collection they touched.
"""

import functools
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, replace

from ..constants import MAX_METRICS


@dataclass
class OperationMetrics:
    """Counters for one operation on one collection."""

    operation_name: str
    collection: str | None = None
    count: int = 0
    error_count: int = 0
    total_duration_ms: float = 0.0
    max_duration_ms: float = 0.0

    @property
    def avg_duration_ms(self) -> float:
        return self.total_duration_ms / self.count if self.count else 0.0

    def record(self, duration_ms: float, success: bool) -> None:
        self.count += 1
        self.total_duration_ms += duration_ms
        self.max_duration_ms = max(self.max_duration_ms, duration_ms)
        if not success:
            self.error_count += 1


class MetricsCollector:
    """
    Thread-safe collector for operation metrics.

    One entry is kept per (operation, collection) pair. Storage is bounded;
    the least recently updated entry is evicted first.
    """

    def __init__(self, max_metrics: int = MAX_METRICS):
        self._metrics: OrderedDict[tuple[str, str | None], OperationMetrics] = OrderedDict()
        self._lock = threading.Lock()
        self._max_metrics = max_metrics

    def record_operation(
        self,
        operation_name: str,
        duration_ms: float,
        success: bool = True,
        collection: str | None = None,
    ) -> None:
        """
        Record one execution of an operation.

        Args:
            operation_name: Name of the operation (e.g., "records.insert")
            duration_ms: Duration in milliseconds
            success: Whether the operation succeeded
            collection: Collection the operation touched, if any
        """
        key = (operation_name, collection)
        with self._lock:
            metrics = self._metrics.get(key)
            if metrics is None:
                if len(self._metrics) >= self._max_metrics:
                    self._metrics.popitem(last=False)
                metrics = self._metrics[key] = OperationMetrics(operation_name, collection)
            else:
                self._metrics.move_to_end(key)
            metrics.record(duration_ms, success)

    def get(self, operation_name: str, collection: str | None = None) -> OperationMetrics | None:
        """Copy of the counters for an operation on a collection, or None if never recorded."""
        with self._lock:
            metrics = self._metrics.get((operation_name, collection))
            return None if metrics is None else replace(metrics)

    def get_operation_count(self, operation_name: str) -> int:
        """Executions of an operation across all collections."""
        with self._lock:
            return sum(m.count for (name, _), m in self._metrics.items() if name == operation_name)

    def reset(self) -> None:
        with self._lock:
            self._metrics.clear()


_metrics_collector: MetricsCollector | None = None
_collector_lock = threading.Lock()


def get_metrics_collector() -> MetricsCollector:
    """Get or create the global metrics collector."""
    global _metrics_collector
    if _metrics_collector is None:
        with _collector_lock:
            if _metrics_collector is None:
                _metrics_collector = MetricsCollector()
    return _metrics_collector


def record_operation(
    operation_name: str, duration_ms: float, success: bool = True, collection: str | None = None
) -> None:
    """Record an operation in the global metrics collector."""
    get_metrics_collector().record_operation(operation_name, duration_ms, success, collection)


def timed_operation(operation_name: str) -> Callable:
    """
    Decorator that times a coroutine and records it under ``operation_name``.

    Usage:
        @timed_operation("connection.close")
        async def close(self):
            ...
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.time()
            success = False
            try:
                result = await func(*args, **kwargs)
                success = True
                return result
            finally:
                record_operation(operation_name, (time.time() - start_time) * 1000, success)

        return wrapper

    return decorator
