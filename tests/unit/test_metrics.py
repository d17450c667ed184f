"""
Unit tests for MetricsCollector.

Tests metrics collection functionality including:
- Thread-safety under concurrent access
- Bounded storage with LRU eviction
- The timed_operation decorator
"""

import threading

import pytest

from mongo_records.observability.metrics import (
    MetricsCollector,
    get_metrics_collector,
    record_operation,
    timed_operation,
)


class TestMetricsCollector:
    def test_concurrent_record_operation(self):
        collector = MetricsCollector()
        num_threads = 10
        operations_per_thread = 100
        barrier = threading.Barrier(num_threads)

        def record_operations(thread_id: int):
            barrier.wait()
            for i in range(operations_per_thread):
                collector.record_operation(
                    "records.insert", duration_ms=1.0 + i, collection=f"C{thread_id}"
                )

        threads = [
            threading.Thread(target=record_operations, args=(i,)) for i in range(num_threads)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        expected = num_threads * operations_per_thread
        assert collector.get_operation_count("records.insert") == expected
        assert collector.get("records.insert", "C0").count == operations_per_thread

    def test_lru_eviction(self):
        collector = MetricsCollector(max_metrics=2)
        collector.record_operation("a", 1.0)
        collector.record_operation("b", 1.0)
        collector.record_operation("a", 1.0)
        collector.record_operation("c", 1.0)

        assert collector.get("b") is None
        assert collector.get("a").count == 2
        assert collector.get("c").count == 1

    def test_counters_per_collection(self):
        collector = MetricsCollector()
        collector.record_operation("records.find", 2.0, collection="User")
        collector.record_operation("records.find", 4.0, collection="User")
        collector.record_operation("records.find", 8.0, success=False, collection="Order")

        user = collector.get("records.find", "User")
        assert user.count == 2
        assert user.error_count == 0
        assert user.avg_duration_ms == 3.0
        assert user.max_duration_ms == 4.0

        assert collector.get("records.find", "Order").error_count == 1
        assert collector.get("records.find") is None
        assert collector.get_operation_count("records.find") == 3

    def test_get_returns_copy(self):
        collector = MetricsCollector()
        collector.record_operation("records.count", 1.0)

        snapshot = collector.get("records.count")
        collector.record_operation("records.count", 1.0)

        assert snapshot.count == 1
        assert collector.get("records.count").count == 2

    def test_reset(self):
        collector = MetricsCollector()
        collector.record_operation("records.delete", 1.0)
        collector.reset()
        assert collector.get_operation_count("records.delete") == 0


class TestGlobalCollector:
    def test_record_operation_uses_global_collector(self):
        record_operation("connection.close", 1.0)
        assert get_metrics_collector().get_operation_count("connection.close") == 1

    @pytest.mark.asyncio
    async def test_timed_success(self):
        @timed_operation("async.op")
        async def work():
            return 42

        assert await work() == 42
        assert get_metrics_collector().get("async.op").error_count == 0

    @pytest.mark.asyncio
    async def test_timed_failure(self):
        @timed_operation("async.op")
        async def work():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            await work()

        metrics = get_metrics_collector().get("async.op")
        assert metrics.count == 1
        assert metrics.error_count == 1
