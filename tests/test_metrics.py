"""Tests for the metrics counters."""

import threading

from logferry.metrics import Metrics
from logferry.models import DispatchOutcome


class TestMetrics:
    def test_initial_snapshot(self):
        snap = Metrics().snapshot()
        assert snap["sent"] == 0
        assert snap["buffered"] == 0
        assert snap["flushes"] == 0
        assert snap["flush_failures"] == 0

    def test_record_outcomes(self):
        m = Metrics()
        m.record_outcome(DispatchOutcome.SENT)
        m.record_outcome(DispatchOutcome.BUFFERED)
        m.record_outcome(DispatchOutcome.BUFFERED)
        snap = m.snapshot()
        assert snap["sent"] == 1
        assert snap["buffered"] == 2
        assert snap["dropped"] == 0

    def test_record_flushes(self):
        m = Metrics()
        m.record_flushed(5)
        m.record_flushed(3)
        m.record_flush_failed()
        snap = m.snapshot()
        assert snap["flushes"] == 2
        assert snap["flushed_entries"] == 8
        assert snap["flush_failures"] == 1

    def test_snapshot_and_reset(self):
        m = Metrics()
        m.record_outcome(DispatchOutcome.DROPPED)
        m.record_flushed(2)
        first = m.snapshot_and_reset()
        second = m.snapshot()
        assert first["dropped"] == 1
        assert first["flushed_entries"] == 2
        assert second["dropped"] == 0
        assert second["flushed_entries"] == 0

    def test_thread_safety(self):
        m = Metrics()

        def _record():
            for _ in range(1000):
                m.record_outcome(DispatchOutcome.SENT)

        threads = [threading.Thread(target=_record) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert m.snapshot()["sent"] == 10000
